"""Identification workflow.

Lets a user correct a misidentified item: search provider candidates, pick
one, apply it, then have the detail view re-fetch the item.

States::

    CLOSED -> SEARCH_REQUESTED -> CANDIDATES_LOADING
           -> CANDIDATES_READY | CANDIDATES_ERROR
    CANDIDATES_READY -> APPLYING -> APPLIED -> CLOSED
                                 -> APPLY_ERROR

``cancel()`` returns to CLOSED from every state except APPLYING, so a write
that is already on its way is never orphaned.
"""

import logging
from collections.abc import Awaitable, Callable
from enum import Enum
from typing import Any

from libraryview.api.library import LibraryApi
from libraryview.core.coordinator import Attempt, RequestCoordinator
from libraryview.errors import LibraryViewError, WorkflowStateError
from libraryview.models.library import IdentifyRequest, SearchResult

logger = logging.getLogger(__name__)


class IdentifyState(str, Enum):
    """States of an identify session."""

    CLOSED = "closed"
    SEARCH_REQUESTED = "search_requested"
    CANDIDATES_LOADING = "candidates_loading"
    CANDIDATES_READY = "candidates_ready"
    CANDIDATES_ERROR = "candidates_error"
    APPLYING = "applying"
    APPLIED = "applied"
    APPLY_ERROR = "apply_error"


_SELECTABLE = {IdentifyState.CANDIDATES_READY, IdentifyState.APPLY_ERROR}


class IdentificationWorkflow:
    """State machine for binding a library item to a provider candidate."""

    def __init__(
        self,
        api: LibraryApi,
        on_applied: Callable[[int], Awaitable[Any]] | None = None,
    ) -> None:
        """Create a closed workflow.

        Args:
            api: Library API client.
            on_applied: Awaited once with the item id after a successful
                apply, typically ``ItemDetailController.reload`` wrapped to
                accept the id.
        """
        self.api = api
        self.on_applied = on_applied
        self.state = IdentifyState.CLOSED
        self.item_id: int | None = None
        self.candidates: list[SearchResult] = []
        self.error: LibraryViewError | None = None
        self.status_message: str | None = None
        self.transitions: list[tuple[IdentifyState, IdentifyState]] = []

        self.search: RequestCoordinator[list[SearchResult]] = RequestCoordinator(
            api.get_candidates, name="candidates"
        )
        self.apply: RequestCoordinator[str] = RequestCoordinator(
            api.identify_item, name="identify"
        )

    @property
    def is_open(self) -> bool:
        return self.state is not IdentifyState.CLOSED

    @property
    def no_candidates_found(self) -> bool:
        """True when the search completed and the provider had no match."""
        return self.state is IdentifyState.CANDIDATES_READY and not self.candidates

    async def open(self, item_id: int) -> Attempt[list[SearchResult]]:
        """Start a session for *item_id* and load its candidates.

        Raises:
            WorkflowStateError: If a session is already open.
        """
        if self.state is not IdentifyState.CLOSED:
            raise WorkflowStateError(f"Cannot open identify from {self.state.value}")
        self._discard_session()
        self.item_id = item_id
        self._move(IdentifyState.SEARCH_REQUESTED)
        self._move(IdentifyState.CANDIDATES_LOADING)

        attempt = await self.search.send(item_id, key=item_id)
        if attempt.stale:
            # Cancelled or reopened while the search was in flight.
            return attempt
        if attempt.ok:
            self.candidates = list(attempt.value or [])
            self._move(IdentifyState.CANDIDATES_READY)
        else:
            self.error = attempt.error
            self._move(IdentifyState.CANDIDATES_ERROR)
        return attempt

    async def select(self, candidate: SearchResult) -> Attempt[str]:
        """Apply *candidate* to the item.

        The request carries the candidate's provider, id and media type; the
        candidate's type wins over the item's current one.

        Raises:
            WorkflowStateError: If no candidate list is on display.
            ValueError: If *candidate* is not in the current list.
        """
        if self.state not in _SELECTABLE:
            raise WorkflowStateError(f"Cannot select a candidate from {self.state.value}")
        if candidate not in self.candidates:
            raise ValueError(f"{candidate.title!r} is not one of the offered candidates")

        item_id = self.item_id
        if item_id is None:
            raise WorkflowStateError("No item is open for identification")
        self.error = None
        self._move(IdentifyState.APPLYING)
        request = IdentifyRequest.from_candidate(candidate)
        attempt = await self.apply.send(item_id, request, key=(item_id, request))

        if not attempt.ok:
            self.error = attempt.error
            self._move(IdentifyState.APPLY_ERROR)
            return attempt

        self.status_message = attempt.value
        self._move(IdentifyState.APPLIED)
        self._discard_session()
        self._move(IdentifyState.CLOSED)
        logger.info("Identified item %s as %s:%s", item_id, request.provider, request.provider_id)
        if self.on_applied is not None:
            await self.on_applied(item_id)
        return attempt

    def cancel(self) -> None:
        """Close the session and discard its candidates.

        Raises:
            WorkflowStateError: While an apply call is in flight.
        """
        if self.state is IdentifyState.APPLYING:
            raise WorkflowStateError("Cannot cancel while a match is being applied")
        self.search.invalidate()
        self._discard_session()
        if self.state is not IdentifyState.CLOSED:
            self._move(IdentifyState.CLOSED)

    def _discard_session(self) -> None:
        self.candidates = []
        self.error = None

    def _move(self, new_state: IdentifyState) -> None:
        logger.debug(
            "Identify item %s: %s -> %s", self.item_id, self.state.value, new_state.value
        )
        self.transitions.append((self.state, new_state))
        self.state = new_state
