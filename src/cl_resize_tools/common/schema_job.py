from enum import Enum
from typing import ClassVar, TypeVar

from pydantic import BaseModel, ConfigDict, Field, JsonValue

TaskParamsRecord = dict[str, JsonValue]
TaskOutputRecord = dict[str, JsonValue]


class JobStatus(str, Enum):
    queued = "queued"
    processing = "processing"
    completed = "completed"
    error = "error"


class BaseJobParams(BaseModel):
    input_path: str = Field(description="path to the input file")
    output_path: str = Field(description="path to the output file")


class TaskOutput(BaseModel):
    pass


P = TypeVar("P", bound=BaseJobParams)
Q = TypeVar("Q", bound=TaskOutput)


class JobRecord(BaseModel):
    """A job as handed to a compute module: raw, unvalidated params."""

    job_id: str
    task_type: str

    params: TaskParamsRecord

    status: JobStatus = JobStatus.queued
    progress: int = Field(0, ge=0, le=100)

    model_config: ClassVar[ConfigDict] = ConfigDict(extra="forbid")


class JobRecordUpdate(BaseModel):
    status: JobStatus | None = None
    progress: int | None = Field(default=None, ge=0, le=100)
    output: TaskOutputRecord | None = None
    error_message: str | None = None

    model_config: ClassVar[ConfigDict] = ConfigDict(extra="forbid")
