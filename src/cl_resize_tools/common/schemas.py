"""Pydantic schemas and enums describing a resize request."""

from enum import IntFlag, StrEnum
from typing import ClassVar

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_QUALITY = 100


# ─────────────────────────────────────────────────────────────
# Enums
# ─────────────────────────────────────────────────────────────


class Interpolator(StrEnum):
    """Resampling kernel used by the residual affine stage.

    Values are the libvips interpolator nicknames.
    """

    BICUBIC = "bicubic"
    BILINEAR = "bilinear"
    NOHALO = "nohalo"


class Extend(StrEnum):
    """Edge fill policy for ``embed_to_box`` (libvips extend nicknames)."""

    BLACK = "black"
    WHITE = "white"
    COPY = "copy"
    REPEAT = "repeat"
    MIRROR = "mirror"


class Gravity(IntFlag):
    """Anchor for gravity crops. No directional flag means centred."""

    CENTRE = 1
    NORTH = 2
    EAST = 4
    SOUTH = 8
    WEST = 16


GRAVITY_ALL = Gravity.CENTRE | Gravity.NORTH | Gravity.EAST | Gravity.SOUTH | Gravity.WEST


# ─────────────────────────────────────────────────────────────
# Request models
# ─────────────────────────────────────────────────────────────


class CropRect(BaseModel):
    """Explicit pre-resize crop rectangle, in source pixels."""

    top: int = Field(default=0, ge=0)
    left: int = Field(default=0, ge=0)
    width: int = Field(default=0, ge=0)
    height: int = Field(default=0, ge=0)

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True)


class ResizeOptions(BaseModel):
    """Immutable per-call resize request.

    Attributes:
        width: Target width in pixels (0 = derive from aspect ratio)
        height: Target height in pixels (0 = derive from aspect ratio)
        enlarge: Allow upscaling past the source size
        crop: Cover the target box instead of fitting inside it; the result
            overflows the box and trimming it is up to the caller
        extend: Edge fill policy for ``embed_to_box``
        crop_rect: Explicit crop applied before resizing (clamped to the image)
        interpolator: Kernel for the residual resample
        blur_amount: Gaussian sigma applied after resizing (0 disables)
        quality: JPEG output quality, 1-100 (0 selects the default, 100)
        gravity: Anchor for ``crop_to_gravity``
    """

    width: int = Field(default=0, ge=0)
    height: int = Field(default=0, ge=0)
    enlarge: bool = False
    crop: bool = False
    extend: Extend = Extend.BLACK
    crop_rect: CropRect | None = None
    interpolator: Interpolator = Interpolator.BICUBIC
    blur_amount: float = Field(default=0.0, ge=0.0)
    quality: int = Field(default=DEFAULT_QUALITY, ge=0, le=100)
    gravity: Gravity = Gravity.CENTRE

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True)

    @field_validator("quality")
    @classmethod
    def default_zero_quality(cls, v: int) -> int:
        return v or DEFAULT_QUALITY

    @field_validator("gravity", mode="before")
    @classmethod
    def combine_gravity_flags(cls, v: object) -> object:
        """Accept combined flags given as a plain int (e.g. SOUTH | EAST == 12).

        IntFlag keeps unknown bits, so anything outside the five defined flags
        is rejected here.
        """
        if isinstance(v, int) and not isinstance(v, bool):
            if v < 0 or int(v) & ~int(GRAVITY_ALL):
                raise ValueError(f"unknown gravity flags in {v}")
            return Gravity(v)
        return v

    @property
    def has_box(self) -> bool:
        """True when both target dimensions are given."""
        return self.width > 0 and self.height > 0
