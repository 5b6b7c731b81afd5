"""Client side of the design gallery: photo normalizer, API client and screen controller."""

from .api import GalleryApi, GalleryApiError
from .controller import FormNotOpenError, FormPhase, GalleryController
from .normalizer import ImageDecodeError, NormalizedImage, is_image_media_type, normalize_image

__all__ = [
    "GalleryApi",
    "GalleryApiError",
    "GalleryController",
    "FormPhase",
    "FormNotOpenError",
    "normalize_image",
    "is_image_media_type",
    "NormalizedImage",
    "ImageDecodeError",
]
