"""Async debounce helper built on the running event loop's timers."""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Generic, TypeVar

from moviefinder.logging import logger

T = TypeVar("T")
CommitCallback = Callable[[T], Awaitable[object]]


class Debouncer(Generic[T]):
    """Commit a value only after it has stayed unchanged for ``delay`` seconds.

    Each :meth:`push` re-arms the timer; superseded timers are cancelled
    without side effects. When the timer fires the settled value becomes
    :attr:`committed` and, if it differs from the previous committed value,
    ``on_commit`` is scheduled as its own task. A settled value equal to the
    committed one schedules ``on_unchanged`` instead, when given. Later pushes
    never cancel a callback that is already running.
    """

    def __init__(
        self,
        delay: float,
        on_commit: CommitCallback[T],
        *,
        initial: T,
        on_unchanged: CommitCallback[T] | None = None,
    ) -> None:
        self.delay = delay
        self._on_commit = on_commit
        self._on_unchanged = on_unchanged
        self._committed: T = initial
        self._latest: T = initial
        self._handle: asyncio.TimerHandle | None = None
        self._tasks: set[asyncio.Task] = set()

    @property
    def committed(self) -> T:
        return self._committed

    @property
    def latest(self) -> T:
        return self._latest

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def push(self, value: T) -> None:
        self._latest = value
        self.cancel()
        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(self.delay, self._fire)

    def flush(self) -> asyncio.Task | None:
        """Commit the pending value now instead of waiting for the timer."""

        if self._handle is None:
            return None
        self.cancel()
        return self._commit(self._latest)

    def commit_now(self, value: T) -> asyncio.Task:
        """Commit ``value`` immediately and run the callback even if unchanged."""

        self.cancel()
        return self._emit(value)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    async def drain(self) -> None:
        """Wait for every callback that has already been scheduled."""

        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def _fire(self) -> None:
        self._handle = None
        self._commit(self._latest)

    def _commit(self, value: T) -> asyncio.Task | None:
        if value != self._committed:
            return self._emit(value)
        if self._on_unchanged is None:
            return None
        return self._spawn(self._on_unchanged, value)

    def _emit(self, value: T) -> asyncio.Task:
        self._committed = value
        self._latest = value
        return self._spawn(self._on_commit, value)

    def _spawn(self, callback: CommitCallback[T], value: T) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(self._run(callback, value))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _run(self, callback: CommitCallback[T], value: T) -> None:
        try:
            await callback(value)
        except Exception:
            logger.exception("debounce_callback_failed")


__all__ = ["Debouncer"]
