"""Request coordination for asynchronous library operations.

A :class:`RequestCoordinator` wraps one async operation (a list fetch, a
detail fetch, a refresh, a candidate search, an identify call) and exposes the
``loading`` / ``data`` / ``error`` triple a view renders.

Rules:
- Every ``send`` is an attempt numbered from a monotonically increasing
  sequence at send time.
- Attempts with the same key share one in-flight operation call.
- Only the attempt with the highest sequence started so far may change
  ``data``, ``error`` or ``loading``. Older outcomes are dropped when they
  arrive. Nothing is aborted at the transport; old results are ignored.
- A failure sets ``error`` and keeps the previous ``data``.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Hashable
from dataclasses import dataclass
from functools import partial
from typing import Any, Generic, TypeVar

from libraryview.errors import LibraryViewError

logger = logging.getLogger(__name__)

T = TypeVar("T")

_UNSET: Any = object()


@dataclass
class Attempt(Generic[T]):
    """Outcome of one ``send`` call.

    The caller always gets its own outcome back, even when ``stale`` is True
    and the coordinator's visible state ignored it.
    """

    seq: int
    key: Hashable
    value: T | None = None
    error: LibraryViewError | None = None
    stale: bool = False

    @property
    def ok(self) -> bool:
        """True when the operation completed without a library error."""
        return self.error is None


def _default_key(args: tuple[Any, ...], kwargs: dict[str, Any]) -> Hashable:
    return (args, tuple(sorted(kwargs.items())))


class RequestCoordinator(Generic[T]):
    """Loading/data/error state for one async operation with stale rejection."""

    def __init__(
        self,
        operation: Callable[..., Awaitable[T]],
        *,
        name: str | None = None,
    ) -> None:
        """Wrap *operation*; *name* labels log lines."""
        self._operation = operation
        self.name = name or getattr(operation, "__qualname__", "operation")
        self._seq = 0
        self._inflight: dict[Hashable, asyncio.Future[T]] = {}
        self._listeners: list[Callable[[Attempt[T]], None]] = []

        self.loading: bool = False
        self.data: T | None = None
        self.error: LibraryViewError | None = None
        self.key: Hashable | None = None
        """Key of the most recently started attempt."""

    def subscribe(self, listener: Callable[[Attempt[T]], None]) -> None:
        """Call *listener* with every attempt that gets applied."""
        self._listeners.append(listener)

    async def send(
        self,
        *args: Any,
        key: Hashable = _UNSET,
        fresh: bool = False,
        **kwargs: Any,
    ) -> Attempt[T]:
        """Start an attempt and wait for its outcome.

        Args:
            *args: Positional arguments for the operation.
            key: Logical identity of the request; defaults to the arguments.
            fresh: Start a new operation call even if one with the same key
                is in flight (e.g. a read issued after a server-side write).
            **kwargs: Keyword arguments for the operation.

        Returns:
            The :class:`Attempt`, marked ``stale`` when a newer attempt was
            started before this one settled.
        """
        if key is _UNSET:
            key = _default_key(args, kwargs)
        self._seq += 1
        seq = self._seq
        self.key = key
        self.loading = True

        future = None if fresh else self._inflight.get(key)
        if future is None:
            future = asyncio.ensure_future(self._operation(*args, **kwargs))
            self._inflight[key] = future
            future.add_done_callback(partial(self._forget, key))
        else:
            logger.debug("%s: #%d shares in-flight request for %r", self.name, seq, key)

        attempt: Attempt[T] = Attempt(seq=seq, key=key)
        try:
            attempt.value = await asyncio.shield(future)
        except LibraryViewError as exc:
            attempt.error = exc
        except BaseException:
            if seq == self._seq:
                self.loading = False
            raise
        self._settle(attempt)
        return attempt

    def invalidate(self) -> None:
        """Supersede every in-flight attempt without starting a new one."""
        self._seq += 1
        self.key = None
        self.loading = False

    def clear(self) -> None:
        """Blank ``data`` and ``error``."""
        self.data = None
        self.error = None

    def _forget(self, key: Hashable, future: "asyncio.Future[T]") -> None:
        if self._inflight.get(key) is future:
            del self._inflight[key]

    def _settle(self, attempt: Attempt[T]) -> None:
        if attempt.seq != self._seq:
            attempt.stale = True
            logger.debug(
                "%s: dropping stale result #%d for %r (latest #%d)",
                self.name,
                attempt.seq,
                attempt.key,
                self._seq,
            )
            return
        self.loading = False
        if attempt.error is not None:
            logger.info("%s failed for %r: %s", self.name, attempt.key, attempt.error)
            self.error = attempt.error
        else:
            self.data = attempt.value
            self.error = None
        for listener in self._listeners:
            listener(attempt)
