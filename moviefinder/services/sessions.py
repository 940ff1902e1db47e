"""Per-chat search sessions: raw input, debounce, fetch and state."""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable

from moviefinder.config import SearchSettings
from moviefinder.domain.models import UIState
from moviefinder.logging import logger
from moviefinder.services.movies import MovieSearchService
from moviefinder.services.state import SearchStateStore
from moviefinder.services.tmdb import TMDBClient
from moviefinder.utils.debounce import Debouncer


RepeatListener = Callable[[UIState], Awaitable[None]]


class SearchSession:
    """Input capture for one user: raw text goes in, committed queries come out.

    Input that settles on the query already committed starts no fetch; repeat
    listeners receive the current state instead so the user still gets an answer.
    """

    def __init__(self, service: MovieSearchService, *, debounce_seconds: float) -> None:
        self.service = service
        self.raw_query = ""
        self._repeat_listeners: list[RepeatListener] = []
        self._debouncer: Debouncer[str] = Debouncer(
            debounce_seconds,
            self.service.search,
            initial="",
            on_unchanged=self._notify_repeat,
        )

    @property
    def store(self) -> SearchStateStore:
        return self.service.store

    @property
    def committed_query(self) -> str:
        return self._debouncer.committed

    def start(self) -> asyncio.Task:
        """Load the popular listing for the initial empty query."""

        return self._debouncer.commit_now("")

    def update_query(self, text: str) -> None:
        self.raw_query = text
        self._debouncer.push(text.strip())

    def add_repeat_listener(self, listener: RepeatListener) -> None:
        self._repeat_listeners.append(listener)

    def show_popular(self) -> asyncio.Task:
        self.raw_query = ""
        return self._debouncer.commit_now("")

    async def wait_idle(self) -> None:
        await self._debouncer.drain()

    def close(self) -> None:
        self._debouncer.cancel()

    async def _notify_repeat(self, query: str) -> None:
        logger.debug("committed_query_unchanged", query=query)
        state = self.store.state
        for listener in list(self._repeat_listeners):
            await listener(state)


SessionHook = Callable[[int, SearchSession], None]


class SearchSessionRegistry:
    """Lazily creates one :class:`SearchSession` per chat."""

    def __init__(
        self,
        client: TMDBClient,
        settings: SearchSettings | None = None,
        *,
        on_create: SessionHook | None = None,
    ) -> None:
        self._client = client
        self._settings = settings or SearchSettings()
        self._on_create = on_create
        self._sessions: dict[int, SearchSession] = {}

    def __contains__(self, chat_id: int) -> bool:
        return chat_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)

    def get(self, chat_id: int) -> SearchSession | None:
        return self._sessions.get(chat_id)

    def get_or_create(self, chat_id: int) -> tuple[SearchSession, bool]:
        session = self._sessions.get(chat_id)
        if session is not None:
            return session, False
        service = MovieSearchService(self._client, SearchStateStore())
        session = SearchSession(service, debounce_seconds=self._settings.debounce_seconds)
        self._sessions[chat_id] = session
        if self._on_create is not None:
            self._on_create(chat_id, session)
        logger.info("search_session_created", chat_id=chat_id)
        return session, True

    def close(self) -> None:
        for session in self._sessions.values():
            session.close()
        self._sessions.clear()


__all__ = ["SearchSession", "SearchSessionRegistry"]
