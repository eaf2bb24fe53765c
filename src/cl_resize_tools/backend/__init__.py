"""Image-processing backend (libvips via pyvips)."""

from .vips_backend import (
    ImageHandle,
    call_scope,
    current_settings,
    initialize,
    is_initialized,
    shutdown,
)

__all__ = [
    "ImageHandle",
    "call_scope",
    "current_settings",
    "initialize",
    "is_initialized",
    "shutdown",
]
