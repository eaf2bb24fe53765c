"""Error taxonomy for resize calls.

Every failure surfaced by the pipeline is a ``ResizeError`` subclass carrying a
short ``kind`` and the human readable diagnostic (for backend failures, the
libvips error text).
"""

from typing import override


class ResizeError(Exception):
    """Base class for all resize failures."""

    kind: str = "ResizeError"

    def __init__(self, message: str = "Image resize failed."):
        self.message: str = message
        super().__init__(self.message)

    @override
    def __str__(self):
        return f"{self.kind}: {self.message}"


class UnsupportedFormat(ResizeError):
    """Input bytes are empty, too short to sniff, or carry an unknown signature."""

    kind = "UnsupportedFormat"


class DecodeFailure(ResizeError):
    """The backend refused to decode the bytes (corrupt or truncated data)."""

    kind = "DecodeFailure"


class CropOutOfBounds(ResizeError):
    """A fixed crop rectangle does not fit inside the image."""

    kind = "CropOutOfBounds"


class TransformFailure(ResizeError):
    """A backend shrink/affine/colour/flatten/blur/embed/encode primitive failed."""

    kind = "TransformFailure"

    def __init__(self, message: str = "Image transform failed.", stage: str | None = None):
        self.stage: str | None = stage
        if stage:
            message = f"{stage}: {message}"
        super().__init__(message)


class NotInitialized(ResizeError):
    """The backend was never initialized, or has been shut down."""

    kind = "NotInitialized"
