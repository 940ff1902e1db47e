"""Thin async client for the TMDB v3 movie list endpoints."""

from __future__ import annotations

from typing import Any

import httpx

from moviefinder.config import TMDBSettings
from moviefinder.services.exceptions import (
    TMDBConfigurationError,
    TMDBRequestError,
    TMDBResponseError,
)

SEARCH_PATH = "/search/movie"
DISCOVER_PATH = "/discover/movie"
DISCOVER_SORT = "popularity.desc"


class TMDBClient:
    """Build and issue TMDB list requests.

    The client never retries: a failed request is reported to the caller as a
    :class:`TMDBError` subclass and the caller decides what the user sees.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        settings: TMDBSettings | None = None,
    ) -> None:
        self._client = http_client
        self._settings = settings or TMDBSettings()

    @staticmethod
    def endpoint_for(query: str) -> tuple[str, dict[str, str]]:
        """Return the path and query params for ``query``."""

        if query:
            return SEARCH_PATH, {"query": query}
        return DISCOVER_PATH, {"sort_by": DISCOVER_SORT}

    def url_for(self, path: str) -> str:
        return f"{str(self._settings.base_url).rstrip('/')}{path}"

    def headers(self) -> dict[str, str]:
        token = self._settings.api_token
        if token is None:
            raise TMDBConfigurationError("TMDB API token is not configured.")
        return {
            "Accept": "application/json",
            "Authorization": f"Bearer {token.get_secret_value()}",
        }

    async def fetch_movies(self, query: str) -> dict[str, Any]:
        """GET the search or discover listing and return the decoded body."""

        path, params = self.endpoint_for(query)
        headers = self.headers()
        try:
            response = await self._client.get(
                self.url_for(path),
                params=params,
                headers=headers,
                timeout=self._settings.request_timeout_seconds,
            )
        except httpx.RequestError as exc:
            raise TMDBRequestError(f"TMDB request failed: {exc}") from exc

        if not response.is_success:
            raise TMDBRequestError(
                f"TMDB request failed ({response.status_code}): {response.text[:200]}",
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as exc:
            raise TMDBResponseError("TMDB returned a non-JSON body.") from exc
        if not isinstance(data, dict):
            raise TMDBResponseError(f"Unexpected TMDB payload type: {type(data).__name__}")
        return data


__all__ = ["DISCOVER_PATH", "SEARCH_PATH", "TMDBClient"]
