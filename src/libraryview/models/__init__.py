"""Data models for libraryview."""

from libraryview.models.library import (
    ApiEnvelope,
    BatchRefreshError,
    BatchRefreshRequest,
    BatchRefreshResponse,
    IdentifyRequest,
    LibraryKind,
    LibraryPage,
    LibraryQuery,
    MediaItem,
    MediaItemWithMetadata,
    MediaType,
    SearchResult,
    SortKey,
    SortOrder,
    VideoMetadata,
)

__all__ = [
    "ApiEnvelope",
    "BatchRefreshError",
    "BatchRefreshRequest",
    "BatchRefreshResponse",
    "IdentifyRequest",
    "LibraryKind",
    "LibraryPage",
    "LibraryQuery",
    "MediaItem",
    "MediaItemWithMetadata",
    "MediaType",
    "SearchResult",
    "SortKey",
    "SortOrder",
    "VideoMetadata",
]
