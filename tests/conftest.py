"""Test configuration and fixtures for cl_resize_tools.

This module provides:
- Session-scoped fixtures (libvips backend initialization)
- Function-scoped fixtures (synthetic JPEG/PNG/GIF/CMYK inputs, temp dirs)
- Helpers to inspect encoded output with Pillow
"""

from collections.abc import Callable, Iterator
from io import BytesIO
from pathlib import Path

import pytest
from PIL import Image, ImageDraw

from cl_resize_tools.backend import vips_backend
from cl_resize_tools.common.config import BackendSettings

ImageFactory = Callable[..., bytes]


# ============================================================================
# Helpers
# ============================================================================


def draw_pattern(img: Image.Image) -> Image.Image:
    """Grid plus a centred ellipse, so encoders have real content to work on."""
    width, height = img.size
    draw = ImageDraw.Draw(img)
    step = max(width // 16, 4)
    for x in range(0, width, step):
        draw.line([(x, 0), (x, height)], fill="white", width=2)
    for y in range(0, height, step):
        draw.line([(0, y), (width, y)], fill="white", width=2)
    draw.ellipse([width // 4, height // 4, 3 * width // 4, 3 * height // 4], fill="red")
    return img


def encode_image(img: Image.Image, fmt: str, **save_kwargs: object) -> bytes:
    buffer = BytesIO()
    img.save(buffer, fmt, **save_kwargs)
    return buffer.getvalue()


def decoded_size(data: bytes) -> tuple[int, int]:
    with Image.open(BytesIO(data)) as img:
        return img.size


def decoded_format(data: bytes) -> str | None:
    with Image.open(BytesIO(data)) as img:
        return img.format


# ============================================================================
# Session-Scoped Fixtures (Run Once)
# ============================================================================


@pytest.fixture(scope="session", autouse=True)
def vips_initialized() -> Iterator[BackendSettings]:
    """Initialize libvips once for the whole test session."""
    settings = vips_backend.initialize(BackendSettings())
    yield settings
    vips_backend.shutdown()


@pytest.fixture
def restore_backend() -> Iterator[None]:
    """Re-initialize the backend after a test that shuts it down."""
    yield
    if not vips_backend.is_initialized():
        _ = vips_backend.initialize()


# ============================================================================
# Function-Scoped Fixtures
# ============================================================================


@pytest.fixture
def make_jpeg() -> ImageFactory:
    """Factory for RGB (or CMYK) JPEG bytes of a given size."""

    def factory(width: int, height: int, mode: str = "RGB", quality: int = 90) -> bytes:
        img = draw_pattern(Image.new("RGB", (width, height), color=(73, 109, 137)))
        if mode != "RGB":
            img = img.convert(mode)
        return encode_image(img, "JPEG", quality=quality)

    return factory


@pytest.fixture
def make_png() -> ImageFactory:
    """Factory for PNG bytes; RGBA images get a half-transparent background."""

    def factory(width: int, height: int, mode: str = "RGBA") -> bytes:
        img = Image.new("RGBA", (width, height), color=(0, 0, 255, 128))
        img = draw_pattern(img)
        if mode != "RGBA":
            img = img.convert(mode)
        return encode_image(img, "PNG")

    return factory


@pytest.fixture
def gif_bytes() -> bytes:
    """Palette GIF, a format only the legacy decoder accepts."""
    img = draw_pattern(Image.new("RGB", (120, 80), color=(10, 200, 10)))
    return encode_image(img.convert("P"), "GIF")


@pytest.fixture
def jpeg_file(tmp_path: Path, make_jpeg: ImageFactory) -> Path:
    """800x600 JPEG on disk."""
    path = tmp_path / "input.jpg"
    _ = path.write_bytes(make_jpeg(800, 600))
    return path


@pytest.fixture
def temp_output_dir(tmp_path: Path) -> Path:
    output_dir = tmp_path / "output"
    output_dir.mkdir()
    return output_dir
