"""Poster and backdrop URL construction.

Provider image paths (``/abc.jpg``) become full URLs by prefixing the image
host and a size token. A missing path yields ``None`` so the front end shows
:data:`PLACEHOLDER` instead of issuing a request that can only fail.
"""

from enum import Enum

from libraryview.models.library import MediaItemWithMetadata
from libraryview.settings import DEFAULT_IMAGE_BASE_URL

PLACEHOLDER = "[no image]"


class ImageSize(str, Enum):
    """Provider size tokens per display context."""

    THUMBNAIL = "w92"
    LIST = "w342"
    DETAIL = "w500"
    BACKDROP = "w1280"


def image_url(
    path: str | None,
    size: ImageSize,
    base_url: str = DEFAULT_IMAGE_BASE_URL,
) -> str | None:
    """Return the full URL for a provider image path, or None if absent.

    Args:
        path: Provider path such as ``/poster.jpg``; may be None or empty.
        size: Size token for the display context.
        base_url: Image host prefix ending in ``/``.

    Returns:
        The image URL, or None when there is no path.
    """
    if not path:
        return None
    return f"{base_url.rstrip('/')}/{size.value}/{path.lstrip('/')}"


def poster_url(
    item: MediaItemWithMetadata,
    size: ImageSize = ImageSize.LIST,
    base_url: str = DEFAULT_IMAGE_BASE_URL,
) -> str | None:
    """Poster URL for an item, None when it is unidentified or has no poster."""
    path = item.metadata.poster_path if item.metadata else None
    return image_url(path, size, base_url)


def backdrop_url(
    item: MediaItemWithMetadata,
    base_url: str = DEFAULT_IMAGE_BASE_URL,
) -> str | None:
    """Backdrop URL for an item, None when it has none."""
    path = item.metadata.backdrop_path if item.metadata else None
    return image_url(path, ImageSize.BACKDROP, base_url)
