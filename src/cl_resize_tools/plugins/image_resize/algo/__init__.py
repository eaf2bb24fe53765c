"""Resize planning, crop placement and the pipeline executor."""

from .crop import GRAVITY_PRECEDENCE, calc_gravity_crop, validate_crop
from .geometry import GeometryPlan, needs_resample, plan_geometry, refine_residual
from .pipeline import (
    ResizePipeline,
    StageRecord,
    crop_fixed,
    crop_to_gravity,
    embed_to_box,
    open_image,
    resize,
    resize_via_legacy_decoder,
)

__all__ = [
    "GRAVITY_PRECEDENCE",
    "GeometryPlan",
    "ResizePipeline",
    "StageRecord",
    "calc_gravity_crop",
    "crop_fixed",
    "crop_to_gravity",
    "embed_to_box",
    "needs_resample",
    "open_image",
    "plan_geometry",
    "refine_residual",
    "resize",
    "resize_via_legacy_decoder",
    "validate_crop",
]
