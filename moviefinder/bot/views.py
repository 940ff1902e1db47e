"""Telegram message that mirrors a session's UI state."""

from __future__ import annotations

import asyncio

from aiogram import Bot
from aiogram.exceptions import TelegramBadRequest

from moviefinder.bot.rendering import render_state
from moviefinder.bot.utils.telegram import bot_edit_with_retry, bot_send_with_retry
from moviefinder.config import AppSettings
from moviefinder.domain.models import IdleState, LoadingState, UIState
from moviefinder.logging import logger
from moviefinder.services.sessions import SearchSession


class TelegramResultsView:
    """Mirror a session's UI state into Telegram messages.

    Each request renders into the message it opened with its loading state, so
    a fetch that completes after the user moved on still edits its own
    message, including when a newer request has already replaced it in the
    store (see :meth:`settle_superseded`). After :meth:`reset` the next
    request opens a new message; otherwise it takes over the previous one.
    """

    def __init__(self, bot: Bot, chat_id: int, settings: AppSettings) -> None:
        self._bot = bot
        self._chat_id = chat_id
        self._image_base_url = str(settings.tmdb.image_base_url)
        self._max_results = settings.search.max_results_shown
        self._request_id: int | None = None
        self._message_id: int | None = None
        self._fresh = True
        # request id -> message still showing that request's loading text
        self._pending: dict[int, int] = {}
        self._lock = asyncio.Lock()

    @property
    def message_id(self) -> int | None:
        return self._message_id

    def reset(self) -> None:
        """Open a new message for the next request or repeated answer."""

        self._fresh = True

    async def __call__(self, state: UIState) -> None:
        if isinstance(state, IdleState):
            return
        text = self._render(state)
        async with self._lock:
            if state.request_id == self._request_id and self._message_id is not None:
                await self._edit(self._message_id, text)
            elif self._fresh or self._message_id is None:
                self._message_id = await self._send(text)
            else:
                await self._edit(self._message_id, text)
                self._release(self._message_id)
            self._request_id = state.request_id
            self._fresh = False
            if isinstance(state, LoadingState):
                self._pending[state.request_id] = self._message_id
            else:
                self._pending.pop(state.request_id, None)

    async def settle_superseded(self, state: UIState) -> None:
        """Finish the message of a request that a newer one has overtaken."""

        async with self._lock:
            message_id = self._pending.pop(state.request_id, None)
            if message_id is None:
                return
            await self._edit(message_id, self._render(state))

    async def show(self, state: UIState) -> None:
        """Answer a repeated query with the state that is already on record."""

        if isinstance(state, (IdleState, LoadingState)):
            # A running request for the same query answers in its own message.
            return
        text = self._render(state)
        async with self._lock:
            if not self._fresh:
                return
            self._message_id = await self._send(text)
            self._request_id = state.request_id
            self._fresh = False

    def _release(self, message_id: int) -> None:
        for request_id, pending_id in list(self._pending.items()):
            if pending_id == message_id:
                del self._pending[request_id]

    def _render(self, state: UIState) -> str:
        return render_state(
            state,
            image_base_url=self._image_base_url,
            max_results=self._max_results,
        )

    async def _send(self, text: str) -> int:
        sent = await bot_send_with_retry(
            self._bot, chat_id=self._chat_id, text=text, parse_mode=None
        )
        return sent.message_id

    async def _edit(self, message_id: int, text: str) -> None:
        try:
            await bot_edit_with_retry(
                self._bot,
                chat_id=self._chat_id,
                message_id=message_id,
                text=text,
                parse_mode=None,
            )
        except TelegramBadRequest as exc:
            if "message is not modified" not in str(exc).lower():
                raise
            logger.debug("results_message_unchanged", chat_id=self._chat_id)


class ResultsViewBinder:
    """Session hook that attaches a :class:`TelegramResultsView` per chat."""

    def __init__(self, bot: Bot, settings: AppSettings) -> None:
        self._bot = bot
        self._settings = settings
        self._views: dict[int, TelegramResultsView] = {}

    def __call__(self, chat_id: int, session: SearchSession) -> None:
        view = TelegramResultsView(self._bot, chat_id, self._settings)
        session.store.subscribe(view)
        session.store.on_superseded(view.settle_superseded)
        session.add_repeat_listener(view.show)
        self._views[chat_id] = view

    def get(self, chat_id: int) -> TelegramResultsView | None:
        return self._views.get(chat_id)

    def reset(self, chat_id: int) -> None:
        view = self._views.get(chat_id)
        if view is not None:
            view.reset()


__all__ = ["ResultsViewBinder", "TelegramResultsView"]
