"""Resize pipeline: runs backend primitives in a fixed, load-bearing order.

    decode (+ shrink-on-load) -> explicit crop -> integral shrink
    -> residual resample -> sRGB -> flatten -> blur -> encode

In crop mode the result overflows the target box; trimming it to the box is
left to the caller (`crop_to_gravity`), as is padding a smaller result onto
an exact canvas (`embed_to_box`).

The executor holds exactly one live image handle. Every stage that produces
a new handle releases the one it replaces, and the last held handle is
released when a stage fails.
"""

from dataclasses import dataclass

from loguru import logger

from ....backend import vips_backend as backend
from ....backend.vips_backend import ImageHandle
from ....common.errors import CropOutOfBounds, UnsupportedFormat
from ....common.schemas import Extend, Gravity, ResizeOptions
from ....utils.media_types import ImageType, detect_image_type
from ....utils.profiling import timed
from .crop import calc_gravity_crop, validate_crop
from .geometry import GeometryPlan, needs_resample, plan_geometry, refine_residual


@dataclass(frozen=True)
class StageRecord:
    """State of the image produced by one pipeline stage."""

    name: str
    width: int
    height: int
    bands: int
    interpretation: str
    input_interpretation: str | None = None


class ResizePipeline:
    """One resize call.

    Not reusable: create a new pipeline per call. After ``run()`` the
    executed stages are available in ``trace`` and the final geometry plan
    in ``plan``.
    """

    def __init__(self, options: ResizeOptions | None = None, *, legacy: bool = False):
        self.options: ResizeOptions = options or ResizeOptions()
        self.legacy: bool = legacy
        self.trace: list[StageRecord] = []
        self.plan: GeometryPlan | None = None
        self._live: ImageHandle | None = None

    @property
    def stage_names(self) -> list[str]:
        return [record.name for record in self.trace]

    def run(self, buf: bytes) -> bytes:
        with backend.call_scope():
            try:
                return self._execute(buf)
            finally:
                self._release()

    # ─────────────────────────────────────────────────────────
    # Handle ownership
    # ─────────────────────────────────────────────────────────

    def _adopt(self, handle: ImageHandle, stage: str) -> None:
        previous = self._live
        self._live = handle
        input_interpretation = None
        if previous is not None:
            input_interpretation = previous.interpretation
            previous.release()

        record = StageRecord(
            name=stage,
            width=handle.width,
            height=handle.height,
            bands=handle.bands,
            interpretation=handle.interpretation,
            input_interpretation=input_interpretation,
        )
        self.trace.append(record)
        logger.debug(
            f"{stage}: {record.width}x{record.height} bands={record.bands} "
            f"{record.interpretation}"
        )

    def _release(self) -> None:
        if self._live is not None:
            self._live.release()
            self._live = None

    @property
    def _image(self) -> ImageHandle:
        if self._live is None:
            raise RuntimeError("pipeline has no live image")
        return self._live

    # ─────────────────────────────────────────────────────────
    # Stages
    # ─────────────────────────────────────────────────────────

    def _decode(self, buf: bytes) -> ImageType:
        if self.legacy:
            self._adopt(backend.decode_with_pillow(buf), "decode")
            return ImageType.UNKNOWN

        image_type = detect_image_type(buf)
        if image_type is ImageType.UNKNOWN:
            raise UnsupportedFormat("input is not a JPEG or PNG image")

        self._adopt(backend.decode(buf, image_type), "decode")
        return image_type

    def _execute(self, buf: bytes) -> bytes:
        options = self.options
        image_type = self._decode(buf)

        cropped = False
        crop_rect = validate_crop(self._image.width, self._image.height, options.crop_rect)
        if crop_rect is not None:
            self._adopt(
                backend.extract_area(
                    self._image, crop_rect.left, crop_rect.top, crop_rect.width, crop_rect.height
                ),
                "crop",
            )
            cropped = True
        elif options.crop_rect is not None:
            logger.warning(
                f"Ignoring crop rectangle {options.crop_rect.model_dump()} outside "
                f"{self._image.width}x{self._image.height} image"
            )

        # The plan must see the post-crop region, so a crop rules out shrink-on-load
        plan = plan_geometry(
            self._image.width,
            self._image.height,
            options,
            decode_shrink_allowed=image_type.supports_decode_shrink and not cropped,
        )
        logger.debug(f"Geometry plan: {plan}")

        if plan.decode_shrink > 1:
            self._adopt(backend.decode(buf, image_type, shrink=plan.decode_shrink), "decode_shrink")
            if plan.shrink == 1:
                plan = refine_residual(plan, self._image.width, self._image.height)

        if plan.shrink > 1:
            self._adopt(backend.shrink(self._image, plan.shrink), "shrink")
            plan = refine_residual(plan, self._image.width, self._image.height)

        self.plan = plan

        if needs_resample(plan.residual):
            self._adopt(
                backend.affine(self._image, plan.residual, options.interpolator), "resample"
            )

        # Flattening against a fixed background is only colour-correct in sRGB
        self._adopt(backend.to_srgb(self._image), "colourspace")

        image = self._image
        if image.interpretation != backend.INTERPRETATION_CMYK and image.bands > 3:
            self._adopt(backend.flatten(image), "flatten")

        if options.blur_amount > 0:
            self._adopt(backend.gaussian_blur(self._image, options.blur_amount), "blur")

        encoded = backend.encode_jpeg(self._image, options.quality)
        logger.debug(f"encode: {len(encoded)} bytes at quality {options.quality}")
        return encoded


# ─────────────────────────────────────────────────────────────
# Entry points
# ─────────────────────────────────────────────────────────────


@timed
def resize(buf: bytes, options: ResizeOptions | None = None) -> bytes:
    """Resize a JPEG or PNG buffer and return JPEG bytes.

    Raises:
        UnsupportedFormat: Input is empty or not JPEG/PNG
        DecodeFailure: The backend rejected the image data
        TransformFailure: A backend primitive failed
        NotInitialized: The backend is not initialized
    """
    return ResizePipeline(options).run(buf)


@timed
def resize_via_legacy_decoder(buf: bytes, options: ResizeOptions | None = None) -> bytes:
    """Resize any format Pillow can decode; the output is always JPEG.

    Decode-time shrink is never used on this path.
    """
    return ResizePipeline(options, legacy=True).run(buf)


def open_image(buf: bytes) -> ImageHandle:
    """Decode a JPEG or PNG buffer into a handle owned by the caller."""
    image_type = detect_image_type(buf)
    if image_type is ImageType.UNKNOWN:
        raise UnsupportedFormat("input is not a JPEG or PNG image")

    with backend.call_scope():
        return backend.decode(buf, image_type)


def crop_fixed(handle: ImageHandle, top: int, left: int, width: int, height: int) -> ImageHandle:
    """Extract a rectangle from ``handle``.

    Takes ownership of ``handle``: it is released whether or not the crop
    succeeds, and the returned handle belongs to the caller.

    Raises:
        CropOutOfBounds: The rectangle is empty or does not fit the image
        TransformFailure: The backend rejected the crop
    """
    try:
        with backend.call_scope():
            if (
                width <= 0
                or height <= 0
                or top < 0
                or left < 0
                or left + width > handle.width
                or top + height > handle.height
            ):
                raise CropOutOfBounds(
                    f"{width}x{height} at ({left}, {top}) does not fit "
                    f"{handle.width}x{handle.height} image"
                )
            return backend.extract_area(handle, left, top, width, height)
    finally:
        handle.release()


def crop_to_gravity(handle: ImageHandle, width: int, height: int, gravity: Gravity) -> ImageHandle:
    """Crop ``handle`` to ``width`` x ``height`` anchored by ``gravity``.

    Takes ownership of ``handle`` like ``crop_fixed``.
    """
    left, top = calc_gravity_crop(handle.width, handle.height, width, height, gravity)
    return crop_fixed(handle, top, left, width, height)


def embed_to_box(handle: ImageHandle, width: int, height: int, extend: Extend) -> ImageHandle:
    """Centre ``handle`` on a ``width`` x ``height`` canvas, filling with ``extend``.

    Takes ownership of ``handle`` like ``crop_fixed``.

    Raises:
        CropOutOfBounds: The image is larger than the canvas on either axis
        TransformFailure: The backend rejected the embed
    """
    try:
        with backend.call_scope():
            if handle.width > width or handle.height > height:
                raise CropOutOfBounds(
                    f"{handle.width}x{handle.height} image does not fit "
                    f"{width}x{height} canvas"
                )
            left = (width - handle.width) // 2
            top = (height - handle.height) // 2
            return backend.embed(handle, left, top, width, height, extend)
    finally:
        handle.release()
