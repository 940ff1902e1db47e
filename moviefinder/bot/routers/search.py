"""Telegram handlers that feed user input into search sessions."""

from __future__ import annotations

from aiogram import F, Router
from aiogram.filters import Command, CommandStart
from aiogram.types import Message

from moviefinder.bot.utils.telegram import answer_with_retry
from moviefinder.bot.views import ResultsViewBinder
from moviefinder.logging import logger
from moviefinder.services.sessions import SearchSessionRegistry

router = Router()

GREETING_TEXT = (
    "Find movies you'll enjoy without the hassle.\n"
    "Type a title to search, or send /popular for what's trending."
)
HELP_TEXT = (
    "Send any text to search TMDB by title. Edit your message to refine the search.\n"
    "/popular - most popular movies right now\n"
    "/help - this message"
)


@router.message(CommandStart())
async def handle_start(
    message: Message,
    sessions: SearchSessionRegistry,
    views: ResultsViewBinder,
) -> None:
    chat_id = message.chat.id
    session, _ = sessions.get_or_create(chat_id)
    await answer_with_retry(message, GREETING_TEXT, parse_mode=None)
    views.reset(chat_id)
    session.start()


@router.message(Command("popular"))
async def handle_popular(
    message: Message,
    sessions: SearchSessionRegistry,
    views: ResultsViewBinder,
) -> None:
    chat_id = message.chat.id
    session, _ = sessions.get_or_create(chat_id)
    views.reset(chat_id)
    session.show_popular()


@router.message(Command("help"))
async def handle_help(message: Message) -> None:
    await answer_with_retry(message, HELP_TEXT, parse_mode=None)


@router.message(F.text & ~F.text.startswith("/"))
async def handle_query(
    message: Message,
    sessions: SearchSessionRegistry,
    views: ResultsViewBinder,
) -> None:
    chat_id = message.chat.id
    session, _ = sessions.get_or_create(chat_id)
    logger.debug("raw_query_updated", chat_id=chat_id, length=len(message.text))
    views.reset(chat_id)
    session.update_query(message.text)


@router.edited_message(F.text & ~F.text.startswith("/"))
async def handle_query_edit(
    message: Message,
    sessions: SearchSessionRegistry,
) -> None:
    session, _ = sessions.get_or_create(message.chat.id)
    session.update_query(message.text)


__all__ = ["router"]
