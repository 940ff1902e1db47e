"""Log unhandled bot errors and notify the administrator."""

from __future__ import annotations

import traceback

from aiogram import Bot
from aiogram.dispatcher.event.bases import UNHANDLED
from aiogram.types import ErrorEvent, Update

from moviefinder.bot.utils.telegram import bot_send_with_retry
from moviefinder.config import AppSettings
from moviefinder.logging import logger
from moviefinder.services.sessions import SearchSessionRegistry

# Telegram messages are limited to 4096 characters.
TELEGRAM_MESSAGE_LIMIT = 3900
TRACEBACK_CHAR_LIMIT = 1800


class ErrorMonitor:
    """Async error observer for the aiogram dispatcher."""

    def __init__(
        self,
        settings: AppSettings,
        sessions: SearchSessionRegistry | None = None,
    ) -> None:
        self._settings = settings
        self._sessions = sessions

    async def handle_error(self, event: ErrorEvent, bot: Bot):
        chat_id = self._chat_id(event.update)
        logger.error(
            "bot_error_captured",
            exception_type=event.exception.__class__.__name__,
            exception=str(event.exception),
            update_id=getattr(event.update, "update_id", None),
            chat_id=chat_id,
        )

        admin_id = self._settings.admin_telegram_id
        if admin_id is None:
            return UNHANDLED

        message = self._build_message(event, chat_id)
        try:
            await bot_send_with_retry(bot, chat_id=admin_id, text=message, parse_mode=None)
        except Exception:
            logger.exception(
                "error_monitor_notification_failed",
                update_id=getattr(event.update, "update_id", None),
            )
        return UNHANDLED

    def _build_message(self, event: ErrorEvent, chat_id: int | None) -> str:
        exception = event.exception
        lines = [
            "BOT ERROR DETECTED",
            f"Environment: {self._settings.environment}",
            f"Exception: {exception.__class__.__name__}: {exception}",
            f"Update ID: {getattr(event.update, 'update_id', 'unknown')}",
            f"Chat: {chat_id if chat_id is not None else 'unknown'}",
        ]
        session = self._sessions.get(chat_id) if self._sessions and chat_id is not None else None
        if session is not None:
            lines.append(f"Committed query: {session.committed_query!r}")
            lines.append(f"UI state: {session.store.state.kind}")

        trace = self._format_traceback(exception)
        if trace:
            lines.extend(["", "Traceback:", trace])

        text = "\n".join(lines).strip()
        if len(text) > TELEGRAM_MESSAGE_LIMIT:
            text = f"{text[:TELEGRAM_MESSAGE_LIMIT - 15].rstrip()}\n...[truncated]"
        return text

    @staticmethod
    def _chat_id(update: Update | None) -> int | None:
        if update is None:
            return None
        for field in ("message", "edited_message", "callback_query"):
            source = getattr(update, field, None)
            if source is None:
                continue
            chat = getattr(source, "chat", None)
            if chat is None:
                chat = getattr(getattr(source, "message", None), "chat", None)
            if chat is not None:
                return chat.id
        return None

    @staticmethod
    def _format_traceback(exception: BaseException) -> str:
        trace = "".join(
            traceback.format_exception(exception.__class__, exception, exception.__traceback__)
        ).strip()
        if len(trace) <= TRACEBACK_CHAR_LIMIT:
            return trace
        return f"...[truncated]\n{trace[-(TRACEBACK_CHAR_LIMIT - 15):].lstrip()}"


__all__ = ["ErrorMonitor"]
