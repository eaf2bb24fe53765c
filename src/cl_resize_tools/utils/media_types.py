from enum import StrEnum

MARKER_JPEG = b"\xff\xd8"
MARKER_PNG = b"\x89\x50"


class ImageType(StrEnum):
    UNKNOWN = "unknown"
    JPEG = "jpeg"
    PNG = "png"

    @property
    def mime(self) -> str:
        if self is ImageType.UNKNOWN:
            return "application/octet-stream"
        return f"image/{self.value}"

    @property
    def supports_decode_shrink(self) -> bool:
        """libjpeg can discard resolution while decoding; nothing else here can."""
        return self is ImageType.JPEG


def detect_image_type(buf: bytes) -> ImageType:
    """Sniff the image type from the leading signature bytes."""
    if len(buf) < 2:
        return ImageType.UNKNOWN

    head = bytes(buf[:2])
    if head == MARKER_JPEG:
        return ImageType.JPEG
    elif head == MARKER_PNG:
        return ImageType.PNG
    else:
        return ImageType.UNKNOWN
