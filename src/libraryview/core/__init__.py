"""Request-state synchronization and identify workflow for libraryview.

This package exposes the controllers that views bind to:
- RequestCoordinator: loading/data/error state with stale-result rejection.
- LibraryListController / ItemDetailController: list and detail views.
- MetadataRefreshService / IdentificationWorkflow: user-triggered actions.
"""

from libraryview.core.coordinator import Attempt, RequestCoordinator
from libraryview.core.detail_controller import ItemDetailController
from libraryview.core.identify import IdentificationWorkflow, IdentifyState
from libraryview.core.list_controller import LibraryListController, QueryState
from libraryview.core.refresh import BatchRefreshOutcome, MetadataRefreshService

__all__ = [
    "Attempt",
    "BatchRefreshOutcome",
    "IdentificationWorkflow",
    "IdentifyState",
    "ItemDetailController",
    "LibraryListController",
    "MetadataRefreshService",
    "QueryState",
    "RequestCoordinator",
]
