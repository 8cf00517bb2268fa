"""Library API client.

One coroutine per REST operation of the library server. Each call goes
through the injected :class:`Transport`, unwraps the response envelope and
validates its ``data`` into the matching model.
"""

import logging
from typing import Any, TypeVar

from pydantic import TypeAdapter, ValidationError

from libraryview.api.transport import Transport
from libraryview.errors import ApplicationError
from libraryview.models.library import (
    ApiEnvelope,
    BatchRefreshRequest,
    BatchRefreshResponse,
    IdentifyRequest,
    LibraryKind,
    LibraryPage,
    LibraryQuery,
    MediaItemWithMetadata,
    SearchResult,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

_LIST_PATHS = {
    LibraryKind.ALL: "/api/library",
    LibraryKind.MOVIES: "/api/library/movies",
    LibraryKind.TV: "/api/library/tv",
}

_CANDIDATES = TypeAdapter(list[SearchResult])


def _unwrap_envelope(raw: dict[str, Any]) -> ApiEnvelope:
    """Validate an envelope and raise ApplicationError for a failure code."""
    try:
        envelope = ApiEnvelope.model_validate(raw)
    except ValidationError as exc:
        raise ApplicationError(0, f"Malformed response envelope: {exc}") from exc
    if not envelope.ok:
        raise ApplicationError(envelope.code, envelope.message)
    return envelope


def _unwrap_data(raw: dict[str, Any], adapter: TypeAdapter[T]) -> T:
    """Return the validated ``data`` of a success envelope."""
    envelope = _unwrap_envelope(raw)
    if envelope.data is None:
        raise ApplicationError(envelope.code, "Response carried no data")
    try:
        return adapter.validate_python(envelope.data)
    except ValidationError as exc:
        raise ApplicationError(envelope.code, f"Unexpected response data: {exc}") from exc


def _unwrap_status(raw: dict[str, Any]) -> str:
    """Return the status string of a success envelope, or its message."""
    envelope = _unwrap_envelope(raw)
    if envelope.data is None:
        return envelope.message
    return str(envelope.data)


class LibraryApi:
    """Typed client for the ``/api/library`` endpoints."""

    def __init__(self, transport: Transport) -> None:
        """Bind the API to a transport shared with the rest of the app."""
        self.transport = transport

    async def list_items(
        self, kind: LibraryKind, query: LibraryQuery | None = None
    ) -> LibraryPage:
        """Fetch a listing from the endpoint matching *kind*."""
        query = query or LibraryQuery()
        raw = await self.transport.request(
            "GET", _LIST_PATHS[LibraryKind(kind)], params=query.to_params()
        )
        page = _unwrap_data(raw, TypeAdapter(LibraryPage))
        logger.debug("Listed %s: %d/%d items", kind, len(page.items), page.total)
        return page

    async def list_all(self, query: LibraryQuery | None = None) -> LibraryPage:
        """List every item in the library."""
        return await self.list_items(LibraryKind.ALL, query)

    async def list_movies(self, query: LibraryQuery | None = None) -> LibraryPage:
        """List movies."""
        return await self.list_items(LibraryKind.MOVIES, query)

    async def list_tv(self, query: LibraryQuery | None = None) -> LibraryPage:
        """List TV shows."""
        return await self.list_items(LibraryKind.TV, query)

    async def get_item(self, item_id: int) -> MediaItemWithMetadata:
        """Fetch one item with its metadata."""
        raw = await self.transport.request("GET", f"/api/library/items/{item_id}")
        return _unwrap_data(raw, TypeAdapter(MediaItemWithMetadata))

    async def refresh_metadata(self, item_id: int) -> str:
        """Ask the server to re-resolve metadata for one item."""
        raw = await self.transport.request(
            "POST", f"/api/library/items/{item_id}/refresh"
        )
        return _unwrap_status(raw)

    async def batch_refresh(self, ids: list[int]) -> BatchRefreshResponse:
        """Ask the server to re-resolve metadata for several items."""
        body = BatchRefreshRequest(ids=list(ids)).model_dump()
        raw = await self.transport.request(
            "POST", "/api/library/batch/refresh", json=body
        )
        return _unwrap_data(raw, TypeAdapter(BatchRefreshResponse))

    async def get_candidates(self, item_id: int) -> list[SearchResult]:
        """Search provider candidates for re-identifying an item."""
        raw = await self.transport.request(
            "GET", f"/api/library/items/{item_id}/candidates"
        )
        envelope = _unwrap_envelope(raw)
        # A success envelope without data means nothing matched.
        if envelope.data is None:
            return []
        try:
            return _CANDIDATES.validate_python(envelope.data)
        except ValidationError as exc:
            raise ApplicationError(envelope.code, f"Unexpected response data: {exc}") from exc

    async def identify_item(self, item_id: int, request: IdentifyRequest) -> str:
        """Bind an item to the provider record described by *request*."""
        raw = await self.transport.request(
            "POST",
            f"/api/library/items/{item_id}/identify",
            json=request.to_payload(),
        )
        return _unwrap_status(raw)
