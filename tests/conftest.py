"""Pytest configuration and shared helpers for cos-client tests.

This file provides:
- run: drive a coroutine from a synchronous test
- make_client: Client wired to an httpx.MockTransport handler
- RecordingHandler: MockTransport handler that records requests
- FakeSender / FakeParser: in-memory pipeline boundaries
- TrackingStream: response body that records draining and closing
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Callable, Coroutine
from typing import Any, TypeVar

import httpx
import pytest

from cos_client.client import Client
from cos_client.models import Caller, XmlDocument
from cos_client.request import new_base_url
from cos_client.response import Response
from cos_client.transport import Context

BUCKET_URL = "https://test-1253846586.cos.ap-beijing.myqcloud.com"
SERVICE_URL = "https://service.cos.myqcloud.com"

T = TypeVar("T")


def run(coro: Coroutine[Any, Any, T]) -> T:
    return asyncio.run(coro)


class RecordingHandler:
    """MockTransport handler: records every request, replies with a canned response.

    MockTransport reads the request body before calling the handler, so
    ``request.content`` is always available on recorded requests.
    """

    def __init__(
        self,
        status_code: int = 200,
        content: bytes = b"",
        headers: dict[str, str] | None = None,
    ) -> None:
        self.status_code = status_code
        self.content = content
        self.headers = headers or {}
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status_code, content=self.content, headers=self.headers)

    @property
    def last(self) -> httpx.Request:
        assert self.requests, "no request was sent"
        return self.requests[-1]


def make_client(
    handler: Callable[[httpx.Request], httpx.Response],
    bucket_url: str | None = BUCKET_URL,
    **kwargs: Any,
) -> Client:
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return Client(new_base_url(bucket_url), http_client=http_client, **kwargs)


class TrackingStream(httpx.AsyncByteStream):
    """Async response body that remembers whether it was drained and closed."""

    def __init__(self, chunks: list[bytes]) -> None:
        self._chunks = chunks
        self.drained = False
        self.closed = False

    async def __aiter__(self) -> AsyncIterator[bytes]:
        for chunk in self._chunks:
            yield chunk
        self.drained = True

    async def aclose(self) -> None:
        self.closed = True


def make_http_response(
    status_code: int = 200,
    content: bytes = b"",
    headers: dict[str, str] | list[tuple[str, str]] | None = None,
    stream: httpx.AsyncByteStream | None = None,
) -> httpx.Response:
    """httpx.Response as a Sender would return it."""
    if stream is not None:
        return httpx.Response(status_code, headers=headers, stream=stream)
    return httpx.Response(status_code, headers=headers, content=content)


class FakeSender:
    """Sender that returns a prepared response (or raises) and records calls."""

    def __init__(
        self,
        response: httpx.Response | None = None,
        error: BaseException | None = None,
    ) -> None:
        self.response = response or make_http_response()
        self.error = error
        self.calls: list[tuple[Context, Caller, httpx.Request]] = []

    async def send(self, ctx: Context, caller: Caller, request: httpx.Request) -> httpx.Response:
        self.calls.append((ctx, caller, request))
        if self.error is not None:
            raise self.error
        return self.response


class FakeParser:
    """ResponseParser that returns a fixed result without reading the body."""

    def __init__(self, result: Any = None, error: BaseException | None = None) -> None:
        self.result = result
        self.error = error
        self.calls: list[tuple[Caller, type[XmlDocument] | None]] = []

    async def parse_response(
        self,
        ctx: Context,
        caller: Caller,
        response: httpx.Response,
        result_type: type[XmlDocument] | None,
    ) -> Response[Any]:
        self.calls.append((caller, result_type))
        if self.error is not None:
            raise self.error
        return Response(response, self.result)


@pytest.fixture
def handler() -> RecordingHandler:
    return RecordingHandler()
