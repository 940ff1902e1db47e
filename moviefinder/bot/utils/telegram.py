"""Telegram Bot API calls wrapped in linear-backoff retries.

Only transport and 5xx failures are retried. A ``TelegramBadRequest`` (for
example editing a message into identical text) reaches the caller at once.
"""

from __future__ import annotations

from typing import Any, Awaitable, Callable, TypeVar

from aiogram import Bot
from aiogram.exceptions import TelegramNetworkError, TelegramServerError
from aiogram.types import Message

from moviefinder.logging import logger
from moviefinder.utils.retry import retry_async

T = TypeVar("T")

TELEGRAM_SEND_MAX_ATTEMPTS = 3
TELEGRAM_SEND_BASE_DELAY = 0.3
RETRYABLE_ERRORS = (TelegramNetworkError, TelegramServerError)


async def _call_telegram(name: str, call: Callable[[], Awaitable[T]]) -> T:
    return await retry_async(
        call,
        max_attempts=TELEGRAM_SEND_MAX_ATTEMPTS,
        base_delay=TELEGRAM_SEND_BASE_DELAY,
        retry_on=RETRYABLE_ERRORS,
        logger=logger,
        operation_name=name,
    )


async def answer_with_retry(message: Message, text: str, **kwargs: Any) -> Any:
    return await _call_telegram("telegram_answer", lambda: message.answer(text, **kwargs))


async def bot_send_with_retry(bot: Bot, *, chat_id: int, text: str, **kwargs: Any) -> Any:
    return await _call_telegram(
        "telegram_send_message",
        lambda: bot.send_message(chat_id=chat_id, text=text, **kwargs),
    )


async def bot_edit_with_retry(
    bot: Bot, *, chat_id: int, message_id: int, text: str, **kwargs: Any
) -> Any:
    return await _call_telegram(
        "telegram_edit_message",
        lambda: bot.edit_message_text(
            text=text, chat_id=chat_id, message_id=message_id, **kwargs
        ),
    )


__all__ = ["answer_with_retry", "bot_edit_with_retry", "bot_send_with_retry"]
