"""Pydantic models shared across service and presentation layers."""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


class Movie(BaseModel):
    """A movie object as returned by TMDB list endpoints.

    Only ``id`` is required; everything else is passed through untouched so
    the presentation layer can read whatever TMDB returned.
    """

    model_config = ConfigDict(extra="allow")

    id: int
    title: str | None = None
    poster_path: str | None = None
    vote_average: float | None = None
    release_date: str | None = None
    original_language: str | None = None
    overview: str | None = None

    @property
    def year(self) -> str | None:
        if not self.release_date:
            return None
        return self.release_date[:4] or None

    def poster_url(self, image_base_url: str) -> str | None:
        if not self.poster_path:
            return None
        return f"{image_base_url.rstrip('/')}/{self.poster_path.lstrip('/')}"


class IdleState(BaseModel):
    kind: Literal["idle"] = "idle"


class LoadingState(BaseModel):
    kind: Literal["loading"] = "loading"
    query: str = ""
    request_id: int = 0


class ErrorState(BaseModel):
    kind: Literal["error"] = "error"
    query: str = ""
    request_id: int = 0
    message: str


class ResultsState(BaseModel):
    kind: Literal["results"] = "results"
    query: str = ""
    request_id: int = 0
    movies: list[Movie] = Field(default_factory=list)


UIState = Annotated[
    Union[IdleState, LoadingState, ErrorState, ResultsState],
    Field(discriminator="kind"),
]


__all__ = [
    "ErrorState",
    "IdleState",
    "LoadingState",
    "Movie",
    "ResultsState",
    "UIState",
]
