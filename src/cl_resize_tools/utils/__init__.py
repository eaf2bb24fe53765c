from .media_types import ImageType, detect_image_type
from .profiling import timed

__all__ = ["ImageType", "detect_image_type", "timed"]
