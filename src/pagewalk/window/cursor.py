"""Bidirectional lazy cursor over a limit/offset data source.

``WindowedCursor`` keeps a sparse window of fetched elements around the
current position and only calls the fetch capability when the caller walks
off the edge of that window (or gets within ``low_water_mark`` of it, in
which case a background fetch is started ahead of time).

Usage:
    cursor = WindowedCursor(client.fetch_page)
    first = await cursor.reset({"q": "btc"})
    second = await cursor.advance()
    first_again = await cursor.retreat()
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any

from pagewalk.errors import CursorResetError, FetchError
from pagewalk.window.cache import SparseCache


FetchFn = Callable[[int, int, Any], Awaitable[Sequence[Any]]]


log = logging.getLogger(__name__)


class FetchState(Enum):
    IDLE = "idle"
    # Initial fetch issued by reset(); blocks both directions.
    SEEKING = "seeking"
    FORWARD = "forward"
    BACKWARD = "backward"


@dataclass(frozen=True)
class _Fetch:
    direction: FetchState
    start: int  # inclusive
    end: int  # exclusive
    params: Any
    generation: int

    @property
    def limit(self) -> int:
        return self.end - self.start


class WindowedCursor:
    """Walk a paginated source one element at a time in either direction.

    The fetch capability is either passed as ``fetch`` or provided by a
    subclass overriding :meth:`fetch`. It must return up to ``limit``
    consecutive elements starting at ``offset``; a short page means the
    source ends there.

    At most one fetch is tracked at a time. Concurrent callers that need data
    share a single waiter and all resume when the tracked fetch completes.
    Starting a fetch in the opposite direction supersedes the tracked one:
    the old request still runs and its result is still cached, but it no
    longer wakes anybody.
    """

    def __init__(
        self,
        fetch: FetchFn | None = None,
        *,
        low_water_mark: int = 2,
        high_water_mark: int = 5,
    ) -> None:
        if high_water_mark < 1:
            raise ValueError(f"high_water_mark must be >= 1, got {high_water_mark}")
        if low_water_mark < 0:
            raise ValueError(f"low_water_mark must be >= 0, got {low_water_mark}")
        if low_water_mark > high_water_mark:
            raise ValueError(
                f"low_water_mark ({low_water_mark}) must not exceed high_water_mark ({high_water_mark})"
            )

        self.low_water_mark = low_water_mark
        self.high_water_mark = high_water_mark

        self._fetch_fn = fetch
        self._cache = SparseCache()
        self._index: int | None = None
        self._offset = 0
        self._params: Any = None
        self._exhausted = False

        self._generation = 0
        self._inflight: _Fetch | None = None
        self._waiter: asyncio.Future[None] | None = None

        # Strong refs so running fetch tasks are not garbage collected.
        self._tasks: set[asyncio.Task[None]] = set()

    # -------- Introspection --------

    @property
    def position(self) -> int | None:
        return self._index

    @property
    def offset(self) -> int:
        return self._offset

    @property
    def exhausted(self) -> bool:
        return self._exhausted

    @property
    def params(self) -> Any:
        return self._params

    @property
    def state(self) -> FetchState:
        if self._inflight is None:
            return FetchState.IDLE
        return self._inflight.direction

    # -------- Fetch capability --------

    async def fetch(self, limit: int, offset: int, params: Any) -> Sequence[Any]:
        """Return up to ``limit`` elements starting at ``offset``.

        Override in a subclass or pass ``fetch=`` to the constructor.
        """

        if self._fetch_fn is None:
            raise NotImplementedError("No fetch capability configured")
        return await self._fetch_fn(limit, offset, params)

    # -------- Public API --------

    async def reset(self, params: Any = None, index: int = 0) -> Any:
        """Start a new session at ``index`` and return the element there.

        Returns None when the source has no element at ``index``. Raises
        FetchError if the initial fetch fails.
        """

        if index < 0:
            raise ValueError(f"index must be >= 0, got {index}")

        stale_waiter = self._waiter

        self._generation += 1
        self._params = params
        self._index = index
        self._cache.clear()
        self._exhausted = False
        self._offset = max(0, index - self.high_water_mark // 2)
        self._inflight = None
        self._waiter = None

        if stale_waiter is not None and not stale_waiter.done():
            stale_waiter.set_exception(
                CursorResetError("Cursor was reset while waiting for a fetch", {"index": index})
            )

        self._request_fetch(FetchState.SEEKING, self._offset, self._offset + self.high_water_mark)
        await self._wait_for_fetch()
        return self._cache.get(index)

    async def advance(self) -> Any:
        """Move one element forward and return it, or None past the end."""

        index = self._require_index()

        if self._exhausted:
            await asyncio.sleep(0)
            return self._step(+1)

        if index >= len(self._cache) - 1:
            # Out of data.
            self._request_fetch(FetchState.FORWARD, len(self._cache), index + self.high_water_mark + 1)
            await self._wait_for_fetch()
            return self._step(+1)

        self._index = index = index + 1
        if index >= len(self._cache) - self.low_water_mark:
            self._request_fetch(FetchState.FORWARD, len(self._cache), index + self.high_water_mark + 1)
        item = self._cache.get(index)
        await asyncio.sleep(0)
        return item

    async def retreat(self) -> Any:
        """Move one element backward and return it, or None at position 0."""

        index = self._require_index()

        if index == 0:
            await asyncio.sleep(0)
            return None

        if index <= self._offset:
            # Out of data.
            self._request_fetch(FetchState.BACKWARD, max(0, index - self.high_water_mark), self._offset)
            await self._wait_for_fetch()
            return self._step(-1)

        self._index = index = index - 1
        if index < self._offset + self.low_water_mark and self._offset:
            self._request_fetch(FetchState.BACKWARD, max(0, index - self.high_water_mark), self._offset)
        item = self._cache.get(index)
        await asyncio.sleep(0)
        return item

    next = advance
    prev = retreat

    # -------- Internals --------

    def _require_index(self) -> int:
        if self._index is None:
            raise RuntimeError("reset() must be called before iterating")
        return self._index

    def _step(self, delta: int) -> Any:
        target = self._require_index() + delta
        if not self._cache.known(target):
            return None
        self._index = target
        return self._cache.get(target)

    def _request_fetch(self, direction: FetchState, start: int, end: int) -> None:
        """Start a fetch for ``[start, end)`` unless one already covers ``direction``.

        A request in the opposite direction takes over the waiter slot from
        the outstanding fetch without cancelling it.
        """

        current = self._inflight
        if current is not None and current.direction in (direction, FetchState.SEEKING):
            return
        if current is not None:
            log.debug(
                "FETCH_SUPERSEDED direction=%s start=%d end=%d by=%s",
                current.direction.value,
                current.start,
                current.end,
                direction.value,
            )

        fetch = _Fetch(
            direction=direction,
            start=start,
            end=end,
            params=self._params,
            generation=self._generation,
        )
        self._inflight = fetch
        log.debug("FETCH_START direction=%s start=%d end=%d", direction.value, start, end)

        task = asyncio.get_running_loop().create_task(self._run_fetch(fetch))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _wait_for_fetch(self) -> None:
        if self._waiter is None:
            self._waiter = asyncio.get_running_loop().create_future()
        # Shielded so one cancelled caller does not cancel the shared waiter.
        await asyncio.shield(self._waiter)

    async def _run_fetch(self, fetch: _Fetch) -> None:
        try:
            items = list(await self.fetch(fetch.limit, fetch.start, fetch.params))
        except FetchError as e:
            self._complete(fetch, error=e)
        except Exception as e:
            error = FetchError(
                f"Fetch failed: {e!r}",
                limit=fetch.limit,
                offset=fetch.start,
            )
            error.__cause__ = e
            self._complete(fetch, error=error)
        else:
            self._complete(fetch, items=items)

    def _complete(
        self,
        fetch: _Fetch,
        *,
        items: list[Any] | None = None,
        error: FetchError | None = None,
    ) -> None:
        if fetch.generation != self._generation:
            log.debug(
                "FETCH_DISCARD stale generation=%d current=%d start=%d end=%d",
                fetch.generation,
                self._generation,
                fetch.start,
                fetch.end,
            )
            return

        if error is None:
            n = self._cache.merge(fetch.start, items or [])
            if n < fetch.limit:
                self._exhausted = True
            if fetch.start < self._offset:
                self._offset = fetch.start
            log.debug(
                "FETCH_DONE direction=%s start=%d requested=%d received=%d exhausted=%s",
                fetch.direction.value,
                fetch.start,
                fetch.limit,
                n,
                self._exhausted,
            )

        if fetch is not self._inflight:
            if error is not None:
                log.warning("FETCH_ERROR superseded start=%d end=%d error=%s", fetch.start, fetch.end, error)
            return

        waiter = self._waiter
        self._inflight = None
        self._waiter = None

        if waiter is None or waiter.done():
            if error is not None:
                log.warning("FETCH_ERROR unawaited start=%d end=%d error=%s", fetch.start, fetch.end, error)
            return

        if error is not None:
            log.warning("FETCH_ERROR start=%d end=%d error=%s", fetch.start, fetch.end, error)
            waiter.set_exception(error)
        else:
            waiter.set_result(None)
