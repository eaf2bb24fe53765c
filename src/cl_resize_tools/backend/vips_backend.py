"""libvips backend adapter.

Thin call-through to the pyvips primitives used by the resize pipeline, the
process-wide lifecycle (``initialize``/``shutdown``) and the per-call cleanup
scope. Every primitive turns ``pyvips.Error`` into a ``ResizeError`` carrying
the libvips diagnostic, so callers never read libvips' error buffer directly.

pyvips is imported on first use: libvips reads ``VIPS_CONCURRENCY`` once, when
the library starts, so ``initialize()`` must export it before that import.
"""

import os
import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from io import BytesIO
from types import ModuleType, TracebackType
from typing import TYPE_CHECKING, Any, Self

from loguru import logger
from PIL import Image, UnidentifiedImageError

from ..common.config import BackendSettings
from ..common.errors import DecodeFailure, NotInitialized, TransformFailure, UnsupportedFormat
from ..common.schemas import Extend, Interpolator
from ..utils.media_types import ImageType

if TYPE_CHECKING:
    import pyvips

INTERPRETATION_SRGB = "srgb"
INTERPRETATION_CMYK = "cmyk"
INTERPRETATION_BW = "b-w"

# Flatten background (white), one value broadcast over every band
FLATTEN_BACKGROUND = [255.0]

_lock = threading.Lock()
_initialized = False
_settings: BackendSettings | None = None


def _vips() -> ModuleType:
    import pyvips

    return pyvips


# ─────────────────────────────────────────────────────────────
# Lifecycle
# ─────────────────────────────────────────────────────────────


def initialize(settings: BackendSettings | None = None) -> BackendSettings:
    """Configure libvips once for the whole process.

    A second call while initialized is a no-op and returns the settings that
    are already in effect.
    """
    global _initialized, _settings

    with _lock:
        if _initialized and _settings is not None:
            return _settings

        settings = settings or BackendSettings()
        os.environ["VIPS_CONCURRENCY"] = str(settings.concurrency)

        pyvips = _vips()
        pyvips.cache_set_max_mem(settings.cache_max_mem)
        pyvips.cache_set_max(settings.cache_max)

        _settings = settings
        _initialized = True

    logger.info(
        f"libvips backend initialized: concurrency={settings.concurrency}, "
        f"cache_max_mem={settings.cache_max_mem}, cache_max={settings.cache_max}"
    )
    return settings


def shutdown() -> None:
    """Drop cached operations and refuse further calls until re-initialized."""
    global _initialized, _settings

    with _lock:
        if not _initialized:
            return

        _vips().cache_set_max(0)
        _initialized = False
        _settings = None

    logger.info("libvips backend shut down")


def is_initialized() -> bool:
    return _initialized


def current_settings() -> BackendSettings | None:
    return _settings


@contextmanager
def call_scope() -> Iterator[None]:
    """Scope of one resize call.

    Refuses to start when the backend is not initialized and always clears the
    calling thread's libvips error buffer on the way out, so stale text never
    leaks into the next call on this thread.
    """
    if not _initialized:
        raise NotInitialized("image backend is not initialized; call initialize() first")

    try:
        yield
    finally:
        _vips().vips_lib.vips_error_clear()


# ─────────────────────────────────────────────────────────────
# Image handle
# ─────────────────────────────────────────────────────────────


class ImageHandle:
    """Sole owner of one backend image.

    ``release()`` drops the backend reference; using the handle afterwards is a
    programming error and raises ``RuntimeError``.
    """

    def __init__(self, image: "pyvips.Image", source: str = "decode"):
        self._image: "pyvips.Image | None" = image
        self.source: str = source

    @property
    def image(self) -> "pyvips.Image":
        if self._image is None:
            raise RuntimeError(f"image handle from '{self.source}' used after release")
        return self._image

    @property
    def released(self) -> bool:
        return self._image is None

    @property
    def width(self) -> int:
        return self.image.width

    @property
    def height(self) -> int:
        return self.image.height

    @property
    def bands(self) -> int:
        return self.image.bands

    @property
    def interpretation(self) -> str:
        return str(self.image.interpretation)

    def release(self) -> None:
        self._image = None

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.release()

    def __repr__(self) -> str:
        if self._image is None:
            return f"<ImageHandle {self.source} released>"
        return (
            f"<ImageHandle {self.source} {self.width}x{self.height} "
            f"bands={self.bands} {self.interpretation}>"
        )


def _describe(exc: Any) -> str:
    message = str(exc.message).strip()
    detail = str(exc.detail or "").strip()
    return f"{message}: {detail}" if detail else message


def _transform(
    stage: str, op: Callable[..., "pyvips.Image"], *args: Any, **kwargs: Any
) -> ImageHandle:
    pyvips = _vips()
    try:
        return ImageHandle(op(*args, **kwargs), source=stage)
    except pyvips.Error as exc:
        raise TransformFailure(_describe(exc), stage=stage) from exc


# ─────────────────────────────────────────────────────────────
# Decoders
# ─────────────────────────────────────────────────────────────


def decode(buf: bytes, image_type: ImageType, shrink: int = 1) -> ImageHandle:
    """Decode a JPEG or PNG buffer.

    ``shrink`` (JPEG only) asks libjpeg to drop resolution while decoding.
    libvips reads pixels lazily, so decoding only parses the header here.
    """
    pyvips = _vips()
    try:
        if image_type is ImageType.JPEG:
            if shrink > 1:
                image = pyvips.Image.jpegload_buffer(buf, shrink=shrink)
            else:
                image = pyvips.Image.jpegload_buffer(buf)
        elif image_type is ImageType.PNG:
            image = pyvips.Image.pngload_buffer(buf)
        else:
            raise UnsupportedFormat(f"no decoder for {image_type.mime}")
    except pyvips.Error as exc:
        raise DecodeFailure(f"could not decode {image_type.value}: {_describe(exc)}") from exc

    return ImageHandle(image, source="decode" if shrink == 1 else f"decode/{shrink}")


def _pillow_layout(img: Image.Image) -> tuple[str, str]:
    """Pillow mode to convert to, and the libvips interpretation it maps onto."""
    if img.mode == "CMYK":
        return "CMYK", INTERPRETATION_CMYK
    if img.mode in ("RGBA", "LA", "PA") or "transparency" in img.info:
        return "RGBA", INTERPRETATION_SRGB
    if img.mode in ("1", "L"):
        return "L", INTERPRETATION_BW
    return "RGB", INTERPRETATION_SRGB


def decode_with_pillow(buf: bytes) -> ImageHandle:
    """Generic decoder for the legacy path: anything Pillow can open.

    Only the first frame of animated formats is used.
    """
    if not buf:
        raise UnsupportedFormat("empty input")

    try:
        with Image.open(BytesIO(buf)) as img:
            mode, interpretation = _pillow_layout(img)
            decoded = img.convert(mode) if img.mode != mode else img
            width, height = decoded.size
            data = decoded.tobytes()
    except UnidentifiedImageError as exc:
        raise UnsupportedFormat(f"unrecognised image data: {exc}") from exc
    except (Image.DecompressionBombError, OSError, ValueError) as exc:
        raise DecodeFailure(f"could not decode image: {exc}") from exc

    pyvips = _vips()
    try:
        image = pyvips.Image.new_from_memory(data, width, height, len(mode), "uchar")
        image = image.copy(interpretation=interpretation)
    except pyvips.Error as exc:
        raise DecodeFailure(f"could not import decoded pixels: {_describe(exc)}") from exc

    return ImageHandle(image, source="decode/legacy")


# ─────────────────────────────────────────────────────────────
# Primitives
# ─────────────────────────────────────────────────────────────


def extract_area(handle: ImageHandle, left: int, top: int, width: int, height: int) -> ImageHandle:
    return _transform("crop", handle.image.extract_area, left, top, width, height)


def shrink(handle: ImageHandle, factor: int) -> ImageHandle:
    return _transform("shrink", handle.image.shrink, factor, factor)


def affine(handle: ImageHandle, scale: float, interpolator: Interpolator) -> ImageHandle:
    """Uniform 2-D scale (no shear or rotation) with the given kernel.

    The output area is rounded explicitly: libvips floors it, and ``w * scale``
    can land a hair below the intended integer.
    """
    pyvips = _vips()
    interpolate = pyvips.Interpolate.new(interpolator.value)
    out_width, out_height = scaled_size(handle.width, handle.height, scale)
    return _transform(
        "resample",
        handle.image.affine,
        [scale, 0.0, 0.0, scale],
        interpolate=interpolate,
        oarea=[0, 0, out_width, out_height],
    )


def scaled_size(width: int, height: int, scale: float) -> tuple[int, int]:
    """Pixel size of a ``width`` x ``height`` image after scaling by ``scale``."""
    return max(round(width * scale), 1), max(round(height * scale), 1)


def embed(
    handle: ImageHandle, left: int, top: int, width: int, height: int, extend: Extend
) -> ImageHandle:
    return _transform("embed", handle.image.embed, left, top, width, height, extend=extend.value)


def to_srgb(handle: ImageHandle) -> ImageHandle:
    return _transform("colourspace", handle.image.colourspace, INTERPRETATION_SRGB)


def flatten(handle: ImageHandle) -> ImageHandle:
    return _transform("flatten", handle.image.flatten, background=FLATTEN_BACKGROUND)


def gaussian_blur(handle: ImageHandle, sigma: float) -> ImageHandle:
    return _transform("blur", handle.image.gaussblur, sigma)


def encode_jpeg(handle: ImageHandle, quality: int) -> bytes:
    """Encode as baseline JPEG with optimised Huffman tables and no metadata."""
    pyvips = _vips()
    options: dict[str, Any] = {"Q": quality, "optimize_coding": True, "interlace": False}
    if pyvips.at_least_libvips(8, 15):
        options["keep"] = 0  # VIPS_FOREIGN_KEEP_NONE
    else:
        options["strip"] = True

    try:
        return handle.image.jpegsave_buffer(**options)
    except pyvips.Error as exc:
        raise TransformFailure(_describe(exc), stage="encode") from exc
