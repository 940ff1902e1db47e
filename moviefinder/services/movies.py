"""Fetch orchestration: committed query in, UI state out."""

from __future__ import annotations

from typing import Any

from moviefinder.domain.models import Movie, UIState
from moviefinder.logging import logger
from moviefinder.services.state import SearchStateStore
from moviefinder.services.tmdb import TMDBClient

FETCH_RETRY_MESSAGE = "Error fetching movies. Please try again later."
FETCH_FAILED_MESSAGE = "Failed to fetch movies"


class MovieSearchService:
    """Turn a committed query into a TMDB request and a UI state transition."""

    def __init__(self, client: TMDBClient, store: SearchStateStore) -> None:
        self._client = client
        self._store = store

    @property
    def store(self) -> SearchStateStore:
        return self._store

    async def search(self, query: str) -> UIState:
        query = (query or "").strip()
        request_id = await self._store.begin(query)
        logger.info("movie_fetch_started", query=query, request_id=request_id)
        try:
            payload = await self._client.fetch_movies(query)
            if _is_logical_failure(payload):
                message = payload.get("Error") or FETCH_FAILED_MESSAGE
                logger.info(
                    "movie_fetch_rejected",
                    query=query,
                    request_id=request_id,
                    message=message,
                )
                await self._store.fail(request_id, query, str(message))
            else:
                movies = [Movie.model_validate(item) for item in payload.get("results") or []]
                logger.info(
                    "movie_fetch_completed",
                    query=query,
                    request_id=request_id,
                    count=len(movies),
                )
                await self._store.succeed(request_id, query, movies)
        except Exception as exc:
            logger.warning(
                "movie_fetch_failed",
                query=query,
                request_id=request_id,
                error_type=exc.__class__.__name__,
                error=str(exc),
            )
            await self._store.fail(request_id, query, FETCH_RETRY_MESSAGE)
        finally:
            # Cancellation skips both branches above; loading must still end.
            if self._store.is_loading and self._store.is_current(request_id):
                await self._store.fail(request_id, query, FETCH_RETRY_MESSAGE)
        return self._store.state


def _is_logical_failure(payload: dict[str, Any]) -> bool:
    return payload.get("Response") == "False"


__all__ = ["FETCH_FAILED_MESSAGE", "FETCH_RETRY_MESSAGE", "MovieSearchService"]
