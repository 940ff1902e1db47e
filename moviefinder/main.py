"""Application entrypoint."""

from __future__ import annotations

import asyncio

import httpx
from aiogram import Bot, Dispatcher
from aiogram.client.session.aiohttp import AiohttpSession

from moviefinder.bot.routers import setup_routers
from moviefinder.bot.views import ResultsViewBinder
from moviefinder.config import get_settings
from moviefinder.logging import configure_logging, logger
from moviefinder.services.error_monitor import ErrorMonitor
from moviefinder.services.sessions import SearchSessionRegistry
from moviefinder.services.tmdb import TMDBClient


async def main() -> None:
    settings = get_settings()
    configure_logging(settings.log_level, json_output=settings.environment != "dev")
    if settings.tmdb.api_token is None:
        logger.warning("tmdb_token_missing")

    session = (
        AiohttpSession(proxy=settings.telegram_proxy) if settings.telegram_proxy else None
    )
    bot = Bot(token=settings.telegram_token.get_secret_value(), session=session)
    dp = Dispatcher()
    dp.include_router(setup_routers())

    async with httpx.AsyncClient() as http_client:
        views = ResultsViewBinder(bot, settings)
        sessions = SearchSessionRegistry(
            TMDBClient(http_client, settings.tmdb),
            settings.search,
            on_create=views,
        )
        error_monitor = ErrorMonitor(settings, sessions)
        dp.errors.register(error_monitor.handle_error)

        logger.info(
            "bot_starting",
            environment=settings.environment,
            debounce_seconds=settings.search.debounce_seconds,
        )
        try:
            await dp.start_polling(bot, sessions=sessions, views=views)
        finally:
            sessions.close()


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
