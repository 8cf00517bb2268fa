"""Item detail controller.

Keeps a detail view in sync with an externally supplied item id (a route
parameter) that may change while the view is alive. The watch rule is
explicit: when the id changes, in-flight fetches for the old id lose their
relevance, the old record is dropped and a fetch for the new id starts.
"""

import logging

from libraryview.api.library import LibraryApi
from libraryview.core.coordinator import Attempt, RequestCoordinator
from libraryview.errors import LibraryViewError
from libraryview.models.library import MediaItemWithMetadata

logger = logging.getLogger(__name__)


class ItemDetailController:
    """Detail state for the item addressed by the current id."""

    def __init__(self, api: LibraryApi) -> None:
        """Bind the controller to an API client; nothing is fetched yet."""
        self.api = api
        self.item_id: int | None = None
        self.requests: RequestCoordinator[MediaItemWithMetadata] = (
            RequestCoordinator(api.get_item, name="detail")
        )

    @property
    def item(self) -> MediaItemWithMetadata | None:
        return self.requests.data

    @property
    def loading(self) -> bool:
        return self.requests.loading

    @property
    def error(self) -> LibraryViewError | None:
        return self.requests.error

    async def mount(self, item_id: int) -> Attempt[MediaItemWithMetadata]:
        """Bind to *item_id* and fetch eagerly, even if the id is unchanged."""
        self._switch_to(item_id)
        return await self._fetch()

    async def watch(self, item_id: int) -> Attempt[MediaItemWithMetadata] | None:
        """React to a new id value; returns None when the id did not change."""
        if item_id == self.item_id:
            return None
        self._switch_to(item_id)
        return await self._fetch()

    async def reload(self) -> Attempt[MediaItemWithMetadata]:
        """Re-fetch the current item to pick up server-side changes.

        Raises:
            RuntimeError: If no item id has been set yet.
        """
        if self.item_id is None:
            raise RuntimeError("reload() called before an item id was set")
        logger.debug("Reloading item %s", self.item_id)
        return await self._fetch(fresh=True)

    def _switch_to(self, item_id: int) -> None:
        if item_id != self.item_id:
            if self.item_id is not None:
                logger.debug("Item id changed %s -> %s", self.item_id, item_id)
            self.requests.invalidate()
            self.requests.clear()
        self.item_id = item_id

    async def _fetch(self, *, fresh: bool = False) -> Attempt[MediaItemWithMetadata]:
        # Switching ids always supersedes, so a result applied here belongs
        # to the id the view currently addresses.
        return await self.requests.send(self.item_id, key=self.item_id, fresh=fresh)
