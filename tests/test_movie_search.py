"""Tests for fetch orchestration and the UI state it produces."""

from __future__ import annotations

import asyncio

import httpx
import pytest
from pydantic import SecretStr

from moviefinder.config import TMDBSettings
from moviefinder.domain.models import ErrorState, ResultsState
from moviefinder.services import movies as movies_module
from moviefinder.services.movies import (
    FETCH_FAILED_MESSAGE,
    FETCH_RETRY_MESSAGE,
    MovieSearchService,
)
from moviefinder.services.state import SearchStateStore
from moviefinder.services.tmdb import TMDBClient


class RecordingLogger:
    def __init__(self) -> None:
        self.events: list[tuple[str, str, dict]] = []

    def info(self, event, **kwargs):
        self.events.append(("info", event, kwargs))

    def warning(self, event, **kwargs):
        self.events.append(("warning", event, kwargs))


def _service(client: httpx.AsyncClient) -> MovieSearchService:
    settings = TMDBSettings(api_token=SecretStr("token"))
    return MovieSearchService(TMDBClient(client, settings), SearchStateStore())


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_empty_query_fetches_discover_listing():
    paths: list[str] = []

    async def handler(request: httpx.Request) -> httpx.Response:
        paths.append(request.url.path)
        return httpx.Response(200, json={"results": [{"id": 7, "title": "Popular"}]})

    async with _client(handler) as client:
        service = _service(client)
        state = await service.search("")

    assert paths == ["/3/discover/movie"]
    assert isinstance(state, ResultsState)
    assert state.query == ""
    assert [movie.id for movie in state.movies] == [7]


@pytest.mark.asyncio
async def test_whitespace_query_is_treated_as_empty():
    paths: list[str] = []

    async def handler(request: httpx.Request) -> httpx.Response:
        paths.append(request.url.path)
        return httpx.Response(200, json={"results": []})

    async with _client(handler) as client:
        await _service(client).search("   ")

    assert paths == ["/3/discover/movie"]


@pytest.mark.asyncio
async def test_query_uses_search_endpoint():
    requests: list[httpx.Request] = []

    async def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json={"results": [{"id": 1, "title": "Batman"}]})

    async with _client(handler) as client:
        service = _service(client)
        state = await service.search("batman")

    assert requests[0].url.path == "/3/search/movie"
    assert requests[0].url.params["query"] == "batman"
    assert isinstance(state, ResultsState)
    assert len(state.movies) == 1
    assert state.movies[0].id == 1
    assert state.movies[0].title == "Batman"
    assert service.store.movies == state.movies
    assert service.store.error_message == ""


@pytest.mark.asyncio
async def test_non_ok_status_yields_retry_error_and_no_results():
    async def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, text="upstream down")

    async with _client(handler) as client:
        service = _service(client)
        state = await service.search("batman")

    assert isinstance(state, ErrorState)
    assert state.message == FETCH_RETRY_MESSAGE
    assert service.store.movies == []
    assert service.store.is_loading is False


@pytest.mark.asyncio
async def test_logical_failure_surfaces_payload_message():
    async def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"Response": "False", "Error": "No results"})

    async with _client(handler) as client:
        service = _service(client)
        state = await service.search("zzzz")

    assert state == ErrorState(query="zzzz", request_id=1, message="No results")
    assert service.store.movies == []
    assert service.store.error_message == "No results"


@pytest.mark.asyncio
async def test_logical_failure_without_message_uses_fallback():
    async def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"Response": "False"})

    async with _client(handler) as client:
        state = await _service(client).search("zzzz")

    assert isinstance(state, ErrorState)
    assert state.message == FETCH_FAILED_MESSAGE


@pytest.mark.asyncio
async def test_missing_results_yields_empty_list():
    async def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"page": 1})

    async with _client(handler) as client:
        state = await _service(client).search("batman")

    assert isinstance(state, ResultsState)
    assert state.movies == []


@pytest.mark.asyncio
async def test_network_failure_is_logged_and_recovered(monkeypatch):
    recorder = RecordingLogger()
    monkeypatch.setattr(movies_module, "logger", recorder)

    async def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("unreachable", request=request)

    async with _client(handler) as client:
        state = await _service(client).search("batman")

    assert isinstance(state, ErrorState)
    assert state.message == FETCH_RETRY_MESSAGE
    failures = [entry for entry in recorder.events if entry[1] == "movie_fetch_failed"]
    assert failures
    level, _, context = failures[0]
    assert level == "warning"
    assert context["error_type"] == "TMDBRequestError"
    assert "unreachable" in context["error"]


@pytest.mark.asyncio
async def test_malformed_movie_payload_is_recovered():
    async def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"results": [{"title": "no id"}]})

    async with _client(handler) as client:
        state = await _service(client).search("batman")

    assert isinstance(state, ErrorState)
    assert state.message == FETCH_RETRY_MESSAGE


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(200, json={"results": [{"id": 1}]}),
        httpx.Response(503, text="unavailable"),
    ],
)
async def test_loading_is_true_only_while_request_is_in_flight(response):
    release = asyncio.Event()
    started = asyncio.Event()

    async def handler(request: httpx.Request) -> httpx.Response:
        started.set()
        await release.wait()
        return response

    async with _client(handler) as client:
        service = _service(client)
        kinds: list[str] = []

        async def listener(state) -> None:
            kinds.append(state.kind)

        service.store.subscribe(listener)
        assert service.store.is_loading is False

        task = asyncio.create_task(service.search("batman"))
        await started.wait()
        assert service.store.is_loading is True

        release.set()
        await task

    assert service.store.is_loading is False
    assert kinds[0] == "loading"
    assert kinds[1] in {"results", "error"}
    assert len(kinds) == 2


@pytest.mark.asyncio
async def test_previous_error_is_cleared_when_new_search_starts():
    responses = [
        httpx.Response(500, text="down"),
        httpx.Response(200, json={"results": [{"id": 2}]}),
    ]

    async def handler(request: httpx.Request) -> httpx.Response:
        return responses.pop(0)

    async with _client(handler) as client:
        service = _service(client)
        await service.search("first")
        assert service.store.error_message == FETCH_RETRY_MESSAGE

        await service.search("second")

    assert service.store.error_message == ""
    assert [movie.id for movie in service.store.movies] == [2]


@pytest.mark.asyncio
async def test_stale_response_does_not_overwrite_newer_results():
    slow_release = asyncio.Event()
    slow_started = asyncio.Event()

    async def handler(request: httpx.Request) -> httpx.Response:
        query = request.url.params["query"]
        if query == "slow":
            slow_started.set()
            await slow_release.wait()
            return httpx.Response(200, json={"results": [{"id": 1}]})
        return httpx.Response(200, json={"results": [{"id": 2}]})

    async with _client(handler) as client:
        service = _service(client)
        slow = asyncio.create_task(service.search("slow"))
        await slow_started.wait()

        fast_state = await service.search("fast")
        assert isinstance(fast_state, ResultsState)

        slow_release.set()
        final_state = await slow

    assert final_state.query == "fast"
    assert [movie.id for movie in service.store.movies] == [2]


@pytest.mark.asyncio
async def test_cancelled_fetch_still_clears_loading():
    started = asyncio.Event()

    async def handler(request: httpx.Request) -> httpx.Response:
        started.set()
        await asyncio.Event().wait()
        return httpx.Response(200, json={})

    async with _client(handler) as client:
        service = _service(client)
        task = asyncio.create_task(service.search("batman"))
        await started.wait()
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

    assert service.store.is_loading is False
    assert service.store.error_message == FETCH_RETRY_MESSAGE
