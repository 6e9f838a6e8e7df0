from __future__ import annotations

import asyncio
from typing import Any, Callable

import pytest

from f1_explorer.cache import QueryCache
from f1_explorer.coordinator import FetchOrchestrator
from f1_explorer.pagination import PaginationCursorEngine
from f1_explorer.resources import build_registry


class FakeClient:
    """Stands in for F1ApiClient; answers through a responder callable."""

    def __init__(self, responder: Callable[[str, dict], Any]) -> None:
        self._responder = responder
        self.calls: list[tuple[str, dict]] = []
        self.gate: asyncio.Event | None = None

    async def async_fetch(self, endpoint: str, params=None) -> Any:
        body = dict(params or {})
        self.calls.append((endpoint, body))
        if self.gate is not None:
            await self.gate.wait()
        result = self._responder(endpoint, body)
        if isinstance(result, BaseException):
            raise result
        return result


class FakeResponse:
    def __init__(self, status: int = 200, body: str | bytes = "", delay: float = 0) -> None:
        self.status = status
        self._body = body.encode("utf-8") if isinstance(body, str) else body
        self._delay = delay

    async def read(self) -> bytes:
        return self._body

    async def __aenter__(self) -> "FakeResponse":
        if self._delay:
            await asyncio.sleep(self._delay)
        return self

    async def __aexit__(self, *exc) -> bool:
        return False


class FakeSession:
    def __init__(self, response: FakeResponse | None = None, exc: BaseException | None = None) -> None:
        self._response = response
        self._exc = exc
        self.posts: list[tuple[str, Any]] = []
        self.closed = False

    def post(self, url: str, json=None):
        self.posts.append((url, json))
        if self._exc is not None:
            raise self._exc
        return self._response

    async def close(self) -> None:
        self.closed = True


def schedule_payload(year: int, races: list[dict] | None = None) -> dict:
    return {
        "schedule": {
            "year": year,
            "schedule": {"raceschedule": races if races is not None else [{"round": 1}]},
        }
    }


def result_payload(year: int, round_: int, rows: list[dict], race_name: str = "Bahrain Grand Prix") -> dict:
    return {
        "result": {
            "year": year,
            "round": round_,
            "race": {"raceName": race_name},
            "result": {"result": rows},
        }
    }


@pytest.fixture
def registry():
    return build_registry()


@pytest.fixture
def cache() -> QueryCache:
    return QueryCache()


@pytest.fixture
def make_engine(cache):
    """Return a factory building (client, orchestrator, pagination) around a responder."""

    def _make(responder: Callable[[str, dict], Any]):
        client = FakeClient(responder)
        orchestrator = FetchOrchestrator(client, cache)
        return client, orchestrator, PaginationCursorEngine(orchestrator)

    return _make
