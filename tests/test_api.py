from __future__ import annotations

import json

import aiohttp
import pytest

from conftest import FakeResponse, FakeSession
from f1_explorer.api import F1ApiClient
from f1_explorer.errors import ErrorKind, ResourceNotFound, TransportError


@pytest.mark.asyncio
async def test_posts_params_as_json_body() -> None:
    payload = {"schedule": {"year": 2023}}
    session = FakeSession(FakeResponse(200, json.dumps(payload)))
    client = F1ApiClient(session, "https://stats.example.com/api")

    data = await client.async_fetch("getSchedule", {"year": 2023})

    assert data == payload
    assert session.posts == [("https://stats.example.com/api/getSchedule", {"year": 2023})]


@pytest.mark.asyncio
async def test_strips_bom() -> None:
    session = FakeSession(FakeResponse(200, "\ufeff" + json.dumps({"posts": []})))
    client = F1ApiClient(session, "https://stats.example.com/api/")
    assert await client.async_fetch("/get-recent-posts", {"page": 0}) == {"posts": []}
    assert session.posts[0][0] == "https://stats.example.com/api/get-recent-posts"


@pytest.mark.asyncio
async def test_404_is_not_found() -> None:
    client = F1ApiClient(FakeSession(FakeResponse(404, "")), "https://stats.example.com/")
    with pytest.raises(ResourceNotFound) as exc:
        await client.async_fetch("getSchedule", {"year": 1951})
    assert exc.value.kind is ErrorKind.NOT_FOUND
    assert exc.value.status == 404


@pytest.mark.asyncio
@pytest.mark.parametrize("status", [400, 500, 503])
async def test_other_http_errors_are_transport(status: int) -> None:
    client = F1ApiClient(FakeSession(FakeResponse(status, "oops")), "https://stats.example.com/")
    with pytest.raises(TransportError) as exc:
        await client.async_fetch("getSchedule", {"year": 2023})
    assert exc.value.status == status
    assert exc.value.kind is ErrorKind.TRANSPORT


@pytest.mark.asyncio
@pytest.mark.parametrize("body", ["<html>", "[1, 2]", ""])
async def test_malformed_payload_is_transport(body: str) -> None:
    client = F1ApiClient(FakeSession(FakeResponse(200, body)), "https://stats.example.com/")
    with pytest.raises(TransportError):
        await client.async_fetch("getSchedule", {"year": 2023})


@pytest.mark.asyncio
async def test_undecodable_body_is_transport() -> None:
    client = F1ApiClient(FakeSession(FakeResponse(200, b'{"posts": ["\xff"]}')), "https://stats.example.com/")
    with pytest.raises(TransportError, match="Malformed") as exc:
        await client.async_fetch("get-recent-posts", {"page": 0})
    assert isinstance(exc.value.__cause__, UnicodeDecodeError)


@pytest.mark.asyncio
async def test_connection_error_is_transport() -> None:
    session = FakeSession(exc=aiohttp.ClientConnectionError("refused"))
    client = F1ApiClient(session, "https://stats.example.com/")
    with pytest.raises(TransportError) as exc:
        await client.async_fetch("getSchedule", {"year": 2023})
    assert isinstance(exc.value.__cause__, aiohttp.ClientConnectionError)


@pytest.mark.asyncio
async def test_timeout_is_transport() -> None:
    session = FakeSession(FakeResponse(200, "{}", delay=1))
    client = F1ApiClient(session, "https://stats.example.com/", timeout=0.01)
    with pytest.raises(TransportError, match="Timed out"):
        await client.async_fetch("getSchedule", {"year": 2023})
