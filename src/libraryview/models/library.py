"""Data models for the media library API.

This module defines the wire and domain models exchanged with the library
server: media items, their optional video metadata, list queries, identify
candidates and batch refresh payloads.

Design:
- All server-owned records are frozen. The client never edits a field; it
  replaces the whole record on re-fetch.
- Derived values (year, runtime text, genre list, readable file size) are
  read-only properties recomputed on every access, never stored.
- LibraryQuery is a hashable value object so it can double as a request key.
"""

import json
import logging
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

logger = logging.getLogger(__name__)

YEAR_LENGTH = 4  # Leading characters of an ISO date holding the year
_SIZE_UNITS = ("B", "KB", "MB", "GB", "TB")


class MediaType(str, Enum):
    """Kind of media stored in a library folder."""

    MOVIE = "movie"
    TV = "tv"
    COMIC = "comic"
    BOOK = "book"


class LibraryKind(str, Enum):
    """Which library listing endpoint a view is bound to."""

    ALL = "all"
    MOVIES = "movies"
    TV = "tv"


class SortKey(str, Enum):
    """Sort fields understood by the library listing endpoints."""

    TITLE = "title"
    YEAR = "year"
    RATING = "rating"
    ADDED = "added"


class SortOrder(str, Enum):
    """Sort direction for library listings."""

    ASC = "asc"
    DESC = "desc"

    def flipped(self) -> "SortOrder":
        """Return the opposite direction."""
        return SortOrder.DESC if self is SortOrder.ASC else SortOrder.ASC


class MediaItem(BaseModel):
    """A file tracked by the library server."""

    model_config = ConfigDict(frozen=True)

    id: int
    library_folder_id: int
    media_type: MediaType
    title: str
    file_path: str
    file_size: int
    """Size of the file in bytes."""
    added_at: str
    updated_at: str

    @property
    def file_size_display(self) -> str:
        """Human readable file size, e.g. ``1.4 GB``."""
        size = float(self.file_size)
        for unit in _SIZE_UNITS:
            if size < 1024 or unit == _SIZE_UNITS[-1]:
                break
            size /= 1024
        if unit == "B":
            return f"{int(size)} B"
        return f"{size:.1f} {unit}"


class VideoMetadata(BaseModel):
    """Provider-sourced enrichment attached to at most one media item."""

    model_config = ConfigDict(frozen=True)

    id: int
    media_item_id: int
    tmdb_id: int | None = None
    tvdb_id: int | None = None
    imdb_id: str | None = None
    overview: str | None = None
    poster_path: str | None = None
    backdrop_path: str | None = None
    release_date: str | None = None
    runtime: int | None = None  # minutes
    vote_average: float | None = None  # 0-10 scale
    vote_count: int | None = None
    genres: str | None = None
    """Genres as a JSON-encoded list of names, exactly as stored server-side."""
    created_at: str
    updated_at: str

    @property
    def year(self) -> int | None:
        """Release year parsed from ``release_date``, if any."""
        date_str = self.release_date
        if date_str and len(date_str) >= YEAR_LENGTH and date_str[:YEAR_LENGTH].isdigit():
            return int(date_str[:YEAR_LENGTH])
        return None

    @property
    def runtime_display(self) -> str | None:
        """Runtime formatted as ``2h 46m`` (or ``46m`` under an hour)."""
        if not self.runtime:
            return None
        hours, minutes = divmod(self.runtime, 60)
        if hours:
            return f"{hours}h {minutes}m"
        return f"{minutes}m"

    @property
    def genre_list(self) -> list[str]:
        """Decoded genre names; malformed data yields an empty list."""
        if not self.genres:
            return []
        try:
            decoded = json.loads(self.genres)
        except json.JSONDecodeError:
            logger.debug("Undecodable genres for metadata %s: %r", self.id, self.genres)
            return []
        if not isinstance(decoded, list):
            return []
        return [str(genre) for genre in decoded]


class MediaItemWithMetadata(MediaItem):
    """A media item plus its optional metadata; the unit views render."""

    metadata: VideoMetadata | None = None

    @model_validator(mode="after")
    def _metadata_belongs_to_item(self) -> "MediaItemWithMetadata":
        if self.metadata is not None and self.metadata.media_item_id != self.id:
            raise ValueError(
                f"metadata.media_item_id={self.metadata.media_item_id} "
                f"does not match item id={self.id}"
            )
        return self

    @property
    def is_identified(self) -> bool:
        """True when the item has been matched to provider metadata."""
        return self.metadata is not None

    @property
    def year(self) -> int | None:
        """Release year from the attached metadata."""
        return self.metadata.year if self.metadata else None


class LibraryQuery(BaseModel):
    """Query parameters for a library listing.

    Never mutated in place; a new instance is built for each fetch.
    """

    model_config = ConfigDict(frozen=True)

    page: int | None = Field(default=None, ge=1)
    limit: int | None = Field(default=None, ge=1)
    sort: SortKey | None = None
    order: SortOrder | None = None
    search: str | None = None

    def to_params(self) -> dict[str, str | int]:
        """Query-string parameters with unset fields omitted."""
        return self.model_dump(mode="json", exclude_none=True)


class LibraryPage(BaseModel):
    """One page of a library listing."""

    model_config = ConfigDict(frozen=True)

    items: list[MediaItemWithMetadata] = Field(default_factory=list)
    total: int = 0


class SearchResult(BaseModel):
    """A provider candidate for identifying a media item."""

    model_config = ConfigDict(frozen=True)

    id: str
    """The candidate's id in the provider's system."""
    title: str
    year: int | None = None
    media_type: str
    poster: str | None = None
    overview: str | None = None
    provider: str


class IdentifyRequest(BaseModel):
    """Payload binding a library item to a provider record."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    provider: str
    provider_id: str
    media_type: str = Field(alias="type")

    @classmethod
    def from_candidate(cls, candidate: SearchResult) -> "IdentifyRequest":
        """Build the request from a candidate; its media type is authoritative."""
        return cls(
            provider=candidate.provider,
            provider_id=candidate.id,
            media_type=candidate.media_type,
        )

    def to_payload(self) -> dict[str, str]:
        """JSON body using the wire field names."""
        return self.model_dump(by_alias=True)


class BatchRefreshRequest(BaseModel):
    """Ids to refresh in one batch call."""

    ids: list[int]


class BatchRefreshError(BaseModel):
    """Failure detail for one id of a batch refresh."""

    model_config = ConfigDict(frozen=True)

    id: int
    error: str


class BatchRefreshResponse(BaseModel):
    """Server partition of a batch refresh into successes and failures."""

    success: list[int] = Field(default_factory=list)
    failed: list[BatchRefreshError] = Field(default_factory=list)


class ApiEnvelope(BaseModel):
    """The ``{code, message, data?}`` wrapper around every response."""

    code: int
    message: str = ""
    data: Any = None

    @property
    def ok(self) -> bool:
        """True when ``code`` is in the 2xx range."""
        return 200 <= self.code < 300
