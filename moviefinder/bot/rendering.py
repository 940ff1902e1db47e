"""Plain-text rendering of the search UI state."""

from __future__ import annotations

from moviefinder.domain.models import (
    ErrorState,
    IdleState,
    LoadingState,
    Movie,
    ResultsState,
    UIState,
)

LOADING_TEXT = "Searching movies..."
EMPTY_RESULTS_TEXT = "No movies found."
POPULAR_HEADER = "Popular movies"
DEFAULT_IMAGE_BASE_URL = "https://image.tmdb.org/t/p/w500"


def render_state(
    state: UIState,
    *,
    image_base_url: str = DEFAULT_IMAGE_BASE_URL,
    max_results: int = 10,
) -> str:
    if isinstance(state, IdleState):
        return ""
    if isinstance(state, LoadingState):
        return LOADING_TEXT
    if isinstance(state, ErrorState):
        return state.message
    if isinstance(state, ResultsState):
        return _render_results(state, image_base_url=image_base_url, max_results=max_results)
    raise TypeError(f"Unsupported state: {state!r}")


def render_movie(movie: Movie, *, image_base_url: str = DEFAULT_IMAGE_BASE_URL) -> str:
    title = movie.title or "Untitled"
    rating = f"{movie.vote_average:.1f}" if movie.vote_average is not None else "N/A"
    details = [f"rating {rating}"]
    if movie.year:
        details.insert(0, movie.year)
    if movie.original_language:
        details.append(movie.original_language)
    line = f"{title} ({' | '.join(details)})"
    poster = movie.poster_url(image_base_url)
    if poster:
        line = f"{line}\n  {poster}"
    return line


def _render_results(state: ResultsState, *, image_base_url: str, max_results: int) -> str:
    header = f'Results for "{state.query}"' if state.query else POPULAR_HEADER
    if not state.movies:
        return f"{header}\n\n{EMPTY_RESULTS_TEXT}"

    shown = state.movies[:max_results]
    lines = [header, ""]
    for index, movie in enumerate(shown, start=1):
        lines.append(f"{index}. {render_movie(movie, image_base_url=image_base_url)}")
    hidden = len(state.movies) - len(shown)
    if hidden > 0:
        lines.extend(["", f"...and {hidden} more"])
    return "\n".join(lines)


__all__ = ["render_movie", "render_state"]
