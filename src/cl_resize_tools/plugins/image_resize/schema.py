"""Image resize task parameters and output schemas."""

from pydantic import Field

from ...common.schema_job import BaseJobParams, TaskOutput
from ...common.schemas import ResizeOptions


class ImageResizeParams(BaseJobParams, ResizeOptions):
    """Parameters for the image resize task.

    Carries every ``ResizeOptions`` field next to the input/output paths.

    Attributes:
        input_path: Path to the input image
        output_path: Path for the resized JPEG (parent directory must exist)
        legacy_decoder: Decode with the generic (Pillow) decoder, for formats
                        other than JPEG/PNG
        timeout_seconds: Abandon the resize after this many seconds (None = no limit)
    """

    legacy_decoder: bool = False
    timeout_seconds: float | None = Field(default=None, gt=0)

    def to_options(self) -> ResizeOptions:
        return ResizeOptions.model_validate(
            self.model_dump(include=set(ResizeOptions.model_fields))
        )


class ImageResizeOutput(TaskOutput):
    width: int = Field(description="Width of the encoded image")
    height: int = Field(description="Height of the encoded image")
    size_bytes: int = Field(description="Size of the written JPEG")
    decode_shrink: int = Field(default=1, description="JPEG decode-time divisor used")
    stages: list[str] = Field(default_factory=list, description="Executed pipeline stages")
