"""Common module - schemas, errors, configuration and base classes."""

from .compute_module import ComputeModule
from .config import BackendSettings
from .schema_job import BaseJobParams, JobRecord, JobRecordUpdate, JobStatus, TaskOutput
from .schemas import CropRect, Extend, Gravity, Interpolator, ResizeOptions

__all__ = [
    "BackendSettings",
    "BaseJobParams",
    "ComputeModule",
    "CropRect",
    "Extend",
    "Gravity",
    "Interpolator",
    "JobRecord",
    "JobRecordUpdate",
    "JobStatus",
    "ResizeOptions",
    "TaskOutput",
]
