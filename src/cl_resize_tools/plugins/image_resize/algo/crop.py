"""Crop rectangle validation and gravity-anchored crop placement."""

from ....common.schemas import CropRect, Gravity

# Rules are applied in this order; on contradictory flags the later rule wins
GRAVITY_PRECEDENCE = (Gravity.NORTH, Gravity.EAST, Gravity.SOUTH, Gravity.WEST)


def validate_crop(image_width: int, image_height: int, rect: CropRect | None) -> CropRect | None:
    """Fit a requested crop rectangle to the image bounds.

    Returns None ("no crop") when there is no rectangle or its origin lies
    outside the image. An over-long width or height is clamped to the image
    edge rather than rejected. A rectangle left with zero width or height
    after clamping (origin on the right or bottom edge, or a zero-sized
    request) is also returned as None, since libvips cannot extract an empty
    region. The input rectangle is never modified.
    """
    if rect is None:
        return None

    if rect.top > image_height or rect.left > image_width:
        return None

    width = min(rect.width, image_width - rect.left)
    height = min(rect.height, image_height - rect.top)

    # Nothing left to extract
    if width == 0 or height == 0:
        return None

    if width == rect.width and height == rect.height:
        return rect
    return rect.model_copy(update={"width": width, "height": height})


def calc_gravity_crop(
    in_width: int,
    in_height: int,
    out_width: int,
    out_height: int,
    gravity: Gravity,
) -> tuple[int, int]:
    """Origin (left, top) of an ``out_width`` x ``out_height`` crop.

    Without a directional flag the crop is centred. The ``+ 1`` puts the extra
    pixel of an odd remainder on the top/left side; this is the defined
    behaviour, not a rounding slip.

    Callers must ensure the output fits inside the input; no bounds checking
    is done here.
    """
    left = (in_width - out_width + 1) // 2
    top = (in_height - out_height + 1) // 2

    for flag in GRAVITY_PRECEDENCE:
        if not gravity & flag:
            continue
        if flag is Gravity.NORTH:
            top = 0
        elif flag is Gravity.EAST:
            left = in_width - out_width
        elif flag is Gravity.SOUTH:
            top = in_height - out_height
        elif flag is Gravity.WEST:
            left = 0

    return left, top
