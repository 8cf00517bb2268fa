"""Metadata refresh operations.

Single-item and batch refresh requests against the library server. The
service never re-fetches views on its own and never retries failed ids; the
caller decides what to reload and whether to re-offer failures.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from libraryview.api.library import LibraryApi
from libraryview.core.coordinator import Attempt, RequestCoordinator
from libraryview.models.library import BatchRefreshError, BatchRefreshResponse

logger = logging.getLogger(__name__)

MISSING_FROM_RESPONSE = "Server reported no outcome for this item"
REPORTED_TWICE = "Server reported this item as both refreshed and failed"


@dataclass
class BatchRefreshOutcome:
    """Per-id result of a batch refresh, reconciled against the request."""

    requested: list[int]
    succeeded: list[int] = field(default_factory=list)
    failed: list[BatchRefreshError] = field(default_factory=list)
    violations: list[int] = field(default_factory=list)
    """Ids for which the server broke the partition contract."""

    @property
    def failed_ids(self) -> list[int]:
        return [failure.id for failure in self.failed]

    @property
    def all_succeeded(self) -> bool:
        return not self.failed

    def error_for(self, item_id: int) -> str | None:
        """The failure message for *item_id*, or None if it succeeded."""
        for failure in self.failed:
            if failure.id == item_id:
                return failure.error
        return None

    def retry_ids(self) -> list[int]:
        """Ids a caller may offer for a manual retry."""
        return self.failed_ids


def reconcile_batch(
    ids: Iterable[int], response: BatchRefreshResponse
) -> BatchRefreshOutcome:
    """Partition the requested ids using the server response.

    Every requested id ends up in exactly one of ``succeeded`` or ``failed``.
    An id missing from both server partitions, or present in both, is counted
    as failed and listed in ``violations``. Ids the server reports without
    having been asked about are ignored.
    """
    requested = list(dict.fromkeys(ids))
    wanted = set(requested)

    errors: dict[int, str] = {}
    for failure in response.failed:
        if failure.id not in wanted:
            logger.warning("Batch refresh reported unrequested id %s", failure.id)
            continue
        errors.setdefault(failure.id, failure.error)

    refreshed: set[int] = set()
    for item_id in response.success:
        if item_id not in wanted:
            logger.warning("Batch refresh reported unrequested id %s", item_id)
            continue
        refreshed.add(item_id)

    violations: list[int] = []
    for item_id in requested:
        if item_id in refreshed and item_id in errors:
            violations.append(item_id)
            refreshed.discard(item_id)
            errors[item_id] = f"{REPORTED_TWICE}: {errors[item_id]}"
        elif item_id not in refreshed and item_id not in errors:
            violations.append(item_id)
            errors[item_id] = MISSING_FROM_RESPONSE

    return BatchRefreshOutcome(
        requested=requested,
        succeeded=[item_id for item_id in requested if item_id in refreshed],
        failed=[
            BatchRefreshError(id=item_id, error=errors[item_id])
            for item_id in requested
            if item_id in errors
        ],
        violations=violations,
    )


class MetadataRefreshService:
    """Triggers server-side metadata re-resolution."""

    def __init__(self, api: LibraryApi) -> None:
        """Bind the service to an API client."""
        self.api = api
        self.single: RequestCoordinator[str] = RequestCoordinator(
            api.refresh_metadata, name="refresh"
        )
        self.batch: RequestCoordinator[BatchRefreshOutcome] = RequestCoordinator(
            self._run_batch, name="batch-refresh"
        )

    async def refresh_one(self, item_id: int) -> Attempt[str]:
        """Refresh one item; the attempt's value is the server status string."""
        attempt = await self.single.send(item_id, key=item_id)
        if attempt.ok:
            logger.info("Refreshed item %s: %s", item_id, attempt.value)
        return attempt

    async def refresh_batch(self, ids: Iterable[int]) -> Attempt[BatchRefreshOutcome]:
        """Refresh several items and report the per-id partition.

        Args:
            ids: Item ids to refresh. Sent as given; avoiding duplicates is
                the caller's job.

        Raises:
            ValueError: If *ids* is empty.
        """
        ids = list(ids)
        if not ids:
            raise ValueError("refresh_batch() requires at least one item id")
        return await self.batch.send(ids, key=tuple(ids))

    async def _run_batch(self, ids: list[int]) -> BatchRefreshOutcome:
        response = await self.api.batch_refresh(ids)
        outcome = reconcile_batch(ids, response)
        if outcome.violations:
            logger.warning(
                "Batch refresh response violated the partition for ids %s",
                outcome.violations,
            )
        logger.info(
            "Batch refresh: %d refreshed, %d failed",
            len(outcome.succeeded),
            len(outcome.failed),
        )
        return outcome
