"""ComputeModule - Abstract base class for file-based compute tasks."""

from abc import ABC, abstractmethod
from typing import Callable, Generic

from loguru import logger
from pydantic import ValidationError

from .errors import ResizeError
from .schema_job import JobRecord, JobRecordUpdate, JobStatus, P, Q


class ComputeModule(ABC, Generic[P, Q]):
    """
    Stateless, template-method based compute module.

    - Params are validated once and passed through
    - run() does the work and returns metadata only
    - execute() never raises; failures become an error update
    """

    schema: type[P]

    @property
    @abstractmethod
    def task_type(self) -> str: ...

    def setup(self) -> None:
        """Optional per-execution setup."""
        pass

    @abstractmethod
    async def run(
        self,
        params: P,
        progress_callback: Callable[[int], None] | None = None,
    ) -> Q:
        """
        Execute task.

        - May write output files named in params
        - Must return metadata only
        """
        ...

    async def execute(
        self,
        job_record: JobRecord,
        progress_callback: Callable[[int], None] | None = None,
    ) -> JobRecordUpdate:
        try:
            params = self.schema.model_validate(job_record.params)

            self.setup()

            output = await self.run(params, progress_callback)

            logger.info(f"Job {job_record.job_id} ({self.task_type}) completed")
            return JobRecordUpdate(
                status=JobStatus.completed,
                output=output.model_dump(mode="json"),
                progress=100,
            )

        except ValidationError as exc:
            logger.error(f"Job {job_record.job_id} rejected: invalid params")
            return JobRecordUpdate(
                status=JobStatus.error,
                error_message=f"Invalid parameters: {exc}",
            )

        except (ResizeError, FileNotFoundError, TimeoutError) as exc:
            logger.error(f"Job {job_record.job_id} failed: {exc}")
            return JobRecordUpdate(
                status=JobStatus.error,
                error_message=str(exc),
            )

        except Exception as exc:
            logger.exception(f"Job {job_record.job_id} failed unexpectedly")
            return JobRecordUpdate(
                status=JobStatus.error,
                error_message=str(exc),
            )
