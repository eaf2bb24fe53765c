"""Resize planning: integral shrink, residual resample and JPEG shrink-on-load.

The planner pushes as much of the reduction as possible into the two cheap,
artifact-free integral stages (decode-time shrink and backend shrink) so the
residual resample, the only stage that can introduce resampling artifacts,
covers the smallest possible fraction.
"""

import math
from dataclasses import dataclass, replace

from ....common.schemas import ResizeOptions

# libjpeg can only scale by 1/2, 1/4 and 1/8 while decoding
DECODE_SHRINK_FACTORS = (8, 4, 2)

RESIDUAL_TOLERANCE = 1e-9


@dataclass(frozen=True)
class GeometryPlan:
    """How to get from the source dimensions to ``width`` x ``height``.

    Attributes:
        factor: Remaining scale-down factor once ``decode_shrink`` is applied
        shrink: Integral reduction done by the backend (>= 1)
        residual: Fractional scale for the affine stage (0 skips it)
        decode_shrink: JPEG decode-time divisor, one of 1, 2, 4, 8
        width: Target width
        height: Target height
        fill: Cover mode; the result overflows the box instead of fitting in it
    """

    factor: float
    shrink: int
    residual: float
    decode_shrink: int
    width: int
    height: int
    fill: bool = False


def plan_geometry(
    in_width: int,
    in_height: int,
    options: ResizeOptions,
    *,
    decode_shrink_allowed: bool = False,
) -> GeometryPlan:
    """Compute the resize plan for a decoded image.

    Args:
        in_width: Actual width of the decoded (and possibly cropped) image
        in_height: Actual height of the decoded (and possibly cropped) image
        options: Resize request
        decode_shrink_allowed: Source supports shrink-on-load and no explicit
            crop has been applied yet

    Returns:
        GeometryPlan; zero target dimensions yield the identity transform
    """
    out_width = options.width
    out_height = options.height
    fill = False

    if options.has_box:
        xf = in_width / out_width
        yf = in_height / out_height
        fill = options.crop
        factor = min(xf, yf) if fill else max(xf, yf)
    elif out_width > 0:
        factor = in_width / out_width
        out_height = max(math.floor(in_height / factor), 1)
    elif out_height > 0:
        factor = in_height / out_height
        out_width = max(math.floor(in_width / factor), 1)
    else:
        factor = 1.0
        out_width = in_width
        out_height = in_height

    shrink = max(math.floor(factor), 1)
    residual = shrink / factor

    # Never upscale by accident: only when *both* axes would grow
    if not options.enlarge and in_width < out_width and in_height < out_height:
        return GeometryPlan(
            factor=1.0,
            shrink=1,
            residual=0.0,
            decode_shrink=1,
            width=in_width,
            height=in_height,
        )

    decode_shrink = 1
    if decode_shrink_allowed and shrink >= 2:
        decode_shrink = next(d for d in DECODE_SHRINK_FACTORS if shrink >= d)
        # Re-plan against the reduced factor so the two reductions never compound
        factor = max(factor / decode_shrink, 1.0)
        shrink = math.floor(factor)
        residual = shrink / factor

    return GeometryPlan(
        factor=factor,
        shrink=shrink,
        residual=residual,
        decode_shrink=decode_shrink,
        width=out_width,
        height=out_height,
        fill=fill,
    )


def refine_residual(plan: GeometryPlan, actual_width: int, actual_height: int) -> GeometryPlan:
    """Recompute the residual from the dimensions the backend actually produced.

    Integral reductions round each axis independently, so the predicted and
    actual sizes can differ by a pixel. The smaller ratio wins in both modes.
    """
    if plan.residual == 0:
        return plan

    residual_x = plan.width / actual_width
    residual_y = plan.height / actual_height
    return replace(plan, residual=min(residual_x, residual_y))


def needs_resample(residual: float) -> bool:
    """False for a skipped (0) or identity (1.0) residual."""
    return residual != 0 and not math.isclose(residual, 1.0, rel_tol=0, abs_tol=RESIDUAL_TOLERANCE)
