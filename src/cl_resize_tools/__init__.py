"""cl_resize_tools - libvips-backed image resizing with a planned shrink pipeline."""

from .backend import ImageHandle, initialize, is_initialized, shutdown
from .common.config import BackendSettings
from .common.errors import (
    CropOutOfBounds,
    DecodeFailure,
    NotInitialized,
    ResizeError,
    TransformFailure,
    UnsupportedFormat,
)
from .common.schemas import CropRect, Extend, Gravity, Interpolator, ResizeOptions
from .plugins.image_resize.algo import (
    GeometryPlan,
    ResizePipeline,
    calc_gravity_crop,
    crop_fixed,
    crop_to_gravity,
    embed_to_box,
    open_image,
    plan_geometry,
    resize,
    resize_via_legacy_decoder,
    validate_crop,
)

__version__ = "0.1.0"

__all__ = [
    "BackendSettings",
    "CropOutOfBounds",
    "CropRect",
    "DecodeFailure",
    "Extend",
    "GeometryPlan",
    "Gravity",
    "ImageHandle",
    "Interpolator",
    "NotInitialized",
    "ResizeError",
    "ResizeOptions",
    "ResizePipeline",
    "TransformFailure",
    "UnsupportedFormat",
    "__version__",
    "calc_gravity_crop",
    "crop_fixed",
    "crop_to_gravity",
    "embed_to_box",
    "initialize",
    "is_initialized",
    "open_image",
    "plan_geometry",
    "resize",
    "resize_via_legacy_decoder",
    "shutdown",
    "validate_crop",
]
