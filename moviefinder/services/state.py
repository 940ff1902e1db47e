"""Single owner of the UI state for one search session."""

from __future__ import annotations

from typing import Awaitable, Callable

from moviefinder.domain.models import (
    ErrorState,
    IdleState,
    LoadingState,
    Movie,
    ResultsState,
    UIState,
)
from moviefinder.logging import logger

StateListener = Callable[[UIState], Awaitable[None]]


class SearchStateStore:
    """Holds the active UI state and applies the allowed transitions.

    Every fetch calls :meth:`begin` and receives a request id. Completions
    carrying an id older than the latest one never replace the active state;
    they only reach the listeners registered with :meth:`on_superseded`.
    """

    def __init__(self) -> None:
        self._state: UIState = IdleState()
        self._latest_request_id = 0
        self._listeners: list[StateListener] = []
        self._superseded_listeners: list[StateListener] = []

    @property
    def state(self) -> UIState:
        return self._state

    @property
    def is_loading(self) -> bool:
        return isinstance(self._state, LoadingState)

    @property
    def error_message(self) -> str:
        if isinstance(self._state, ErrorState):
            return self._state.message
        return ""

    @property
    def movies(self) -> list[Movie]:
        if isinstance(self._state, ResultsState):
            return list(self._state.movies)
        return []

    @property
    def latest_request_id(self) -> int:
        return self._latest_request_id

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Register ``listener``; the returned callable unsubscribes it."""

        return _register(self._listeners, listener)

    def on_superseded(self, listener: StateListener) -> Callable[[], None]:
        """Register ``listener`` for completions of requests that are no longer current."""

        return _register(self._superseded_listeners, listener)

    async def begin(self, query: str) -> int:
        self._latest_request_id += 1
        request_id = self._latest_request_id
        await self._set(LoadingState(query=query, request_id=request_id))
        return request_id

    async def succeed(self, request_id: int, query: str, movies: list[Movie]) -> bool:
        state = ResultsState(query=query, request_id=request_id, movies=movies)
        return await self._resolve(request_id, state)

    async def fail(self, request_id: int, query: str, message: str) -> bool:
        state = ErrorState(query=query, request_id=request_id, message=message)
        return await self._resolve(request_id, state)

    def is_current(self, request_id: int) -> bool:
        return request_id == self._latest_request_id

    async def _resolve(self, request_id: int, state: UIState) -> bool:
        if not self.is_current(request_id):
            logger.info(
                "stale_state_discarded",
                request_id=request_id,
                latest_request_id=self._latest_request_id,
                state=state.kind,
            )
            await _notify(self._superseded_listeners, state)
            return False
        await self._set(state)
        return True

    async def _set(self, state: UIState) -> None:
        self._state = state
        await _notify(self._listeners, state)


def _register(listeners: list[StateListener], listener: StateListener) -> Callable[[], None]:
    listeners.append(listener)

    def _unsubscribe() -> None:
        if listener in listeners:
            listeners.remove(listener)

    return _unsubscribe


async def _notify(listeners: list[StateListener], state: UIState) -> None:
    for listener in list(listeners):
        try:
            await listener(state)
        except Exception:
            logger.exception("state_listener_failed", state=state.kind)


__all__ = ["SearchStateStore", "StateListener"]
