"""structlog setup shared by the bot and the search services."""

from __future__ import annotations

import logging

import structlog

_SHARED_PROCESSORS = (
    structlog.processors.add_log_level,
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.StackInfoRenderer(),
    structlog.processors.format_exc_info,
    structlog.dev.set_exc_info,
)


def resolve_level(level: int | str) -> int:
    """Accept ``logging.INFO`` or a level name such as ``"debug"``."""

    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.upper())
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown log level: {level!r}")
    return resolved


def configure_logging(level: int | str = logging.INFO, *, json_output: bool = True) -> None:
    """Route stdlib logging and structlog to stdout.

    ``json_output=False`` switches to the human-readable console renderer used
    in the dev environment.
    """

    numeric_level = resolve_level(level)
    logging.basicConfig(level=numeric_level, format="%(message)s", handlers=[logging.StreamHandler()])
    renderer = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer(colors=False)
    )
    structlog.configure(
        processors=[*_SHARED_PROCESSORS, renderer],
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


logger = structlog.get_logger()

__all__ = ["configure_logging", "logger", "resolve_level"]
