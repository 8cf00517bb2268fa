"""Library list controller.

Serves one of the all/movies/tv listings as a filtered, sorted page. The
controller owns a :class:`QueryState`; every parameter change builds a new
:class:`LibraryQuery` and issues a new coordinator attempt, so only the
response for the latest parameters is ever rendered.
"""

import logging
from dataclasses import dataclass

from libraryview.api.library import LibraryApi
from libraryview.core.coordinator import Attempt, RequestCoordinator
from libraryview.errors import LibraryViewError
from libraryview.models.library import (
    LibraryKind,
    LibraryPage,
    LibraryQuery,
    MediaItemWithMetadata,
    SortKey,
    SortOrder,
)

logger = logging.getLogger(__name__)


@dataclass
class QueryState:
    """User-controlled listing parameters."""

    search: str = ""
    sort: SortKey = SortKey.ADDED
    order: SortOrder = SortOrder.DESC
    page: int | None = None
    limit: int | None = None

    def to_query(self) -> LibraryQuery:
        """Snapshot the state as an immutable query."""
        search = self.search.strip()
        return LibraryQuery(
            page=self.page,
            limit=self.limit,
            sort=self.sort,
            order=self.order,
            search=search or None,
        )


class LibraryListController:
    """Keeps one library listing in sync with its query state."""

    def __init__(
        self,
        api: LibraryApi,
        kind: LibraryKind = LibraryKind.ALL,
        state: QueryState | None = None,
    ) -> None:
        """Bind the controller to an API client and a listing endpoint."""
        self.api = api
        self.kind = LibraryKind(kind)
        self.state = state or QueryState()
        self.requests: RequestCoordinator[LibraryPage] = RequestCoordinator(
            api.list_items, name=f"list:{self.kind.value}"
        )

    # ------------------------------------------------------------------
    # View state
    # ------------------------------------------------------------------
    @property
    def loading(self) -> bool:
        return self.requests.loading

    @property
    def error(self) -> LibraryViewError | None:
        return self.requests.error

    @property
    def items(self) -> list[MediaItemWithMetadata]:
        page = self.requests.data
        return list(page.items) if page else []

    @property
    def total(self) -> int:
        page = self.requests.data
        return page.total if page else 0

    @property
    def is_empty(self) -> bool:
        """True for a completed, non-erroring fetch that matched nothing."""
        return (
            not self.loading
            and self.error is None
            and self.requests.data is not None
            and not self.requests.data.items
        )

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------
    async def load(self) -> Attempt[LibraryPage]:
        """Fetch the listing for the current query state."""
        query = self.state.to_query()
        return await self.requests.send(
            self.kind, query, key=(self.kind, query)
        )

    def set_search_text(self, text: str) -> None:
        """Update the search text without fetching (e.g. on each keystroke)."""
        self.state.search = text

    async def submit_search(self, text: str | None = None) -> Attempt[LibraryPage]:
        """Re-fetch with the current (or given) search text."""
        if text is not None:
            self.state.search = text
        logger.debug("Search submitted on %s: %r", self.kind.value, self.state.search)
        return await self.load()

    async def toggle_sort_order(self) -> Attempt[LibraryPage]:
        """Flip the sort direction and re-fetch immediately."""
        self.state.order = self.state.order.flipped()
        return await self.load()

    async def set_sort(self, sort: SortKey | str) -> Attempt[LibraryPage]:
        """Change the sort field and re-fetch.

        Raises:
            ValueError: If *sort* is not a supported sort key.
        """
        self.state.sort = SortKey(sort)
        return await self.load()

    async def set_page(
        self, page: int, limit: int | None = None
    ) -> Attempt[LibraryPage]:
        """Jump to *page* (1-indexed), optionally changing the page size."""
        if page < 1:
            raise ValueError(f"page must be >= 1, got {page}")
        self.state.page = page
        if limit is not None:
            self.state.limit = limit
        return await self.load()

    async def next_page(self) -> Attempt[LibraryPage]:
        return await self.set_page((self.state.page or 1) + 1)

    async def previous_page(self) -> Attempt[LibraryPage]:
        return await self.set_page(max(1, (self.state.page or 1) - 1))
