"""Transport - the Sender boundary that puts assembled requests on the wire.

The client never talks to the network directly. It hands an httpx.Request to
a Sender and gets back an httpx.Response opened in streaming mode. Request
signing, proxies and retries (if a deployment wants any) belong to the
Sender or to the httpx.AsyncClient it wraps.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

import httpx

from cos_client.errors import TransportConnectError, TransportError, TransportTimeout
from cos_client.models import Caller

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Context:
    """Per-call context handed to senders and parsers.

    Cancellation is asyncio cancellation of the task awaiting the call;
    timeout bounds each network phase of a single request.
    """

    timeout: float | None = None
    values: dict[str, Any] = field(default_factory=dict)


BACKGROUND = Context()


@runtime_checkable
class Sender(Protocol):
    async def send(self, ctx: Context, caller: Caller, request: httpx.Request) -> httpx.Response:
        """Send *request* and return the (unread, streaming) response.

        Raises:
            TransportError: If no response was received.
        """
        ...


class HttpxSender:
    """Default Sender backed by an httpx.AsyncClient.

    Usage:
        async with HttpxSender() as sender:
            response = await sender.send(ctx, Caller.SERVICE_GET, request)
    """

    def __init__(self, client: httpx.AsyncClient | None = None) -> None:
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient()

    async def __aenter__(self) -> "HttpxSender":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying client if this sender created it."""
        if self._owns_client:
            await self._client.aclose()

    async def send(self, ctx: Context, caller: Caller, request: httpx.Request) -> httpx.Response:
        # Requests built outside the client carry neither its default headers
        # nor its timeout. Headers already on the request win.
        for name, value in self._client.headers.multi_items():
            if name not in request.headers:
                request.headers[name] = value
        if ctx.timeout is not None:
            request.extensions["timeout"] = httpx.Timeout(ctx.timeout).as_dict()
        elif "timeout" not in request.extensions:
            request.extensions["timeout"] = self._client.timeout.as_dict()

        try:
            return await self._client.send(request, stream=True)
        except httpx.TimeoutException as e:
            raise TransportTimeout(f"{caller.value} request timeout: {e}") from e
        except httpx.ConnectError as e:
            raise TransportConnectError(f"{caller.value} connection error: {e}") from e
        except httpx.RequestError as e:
            raise TransportError(f"{caller.value} request error: {e}") from e


class DebugSender:
    """Sender decorator that logs requests and responses at DEBUG.

    Each part can be switched off. Request bodies are only logged when they
    are plain bytes; streams are left untouched. Response bodies are read
    into memory for logging, so leave response_body off for large downloads.
    """

    def __init__(
        self,
        sender: Sender,
        request_header: bool = True,
        request_body: bool = True,
        response_header: bool = True,
        response_body: bool = True,
        log: logging.Logger | None = None,
    ) -> None:
        self._sender = sender
        self.request_header = request_header
        self.request_body = request_body
        self.response_header = response_header
        self.response_body = response_body
        self._log = log or logger

    async def send(self, ctx: Context, caller: Caller, request: httpx.Request) -> httpx.Response:
        self._log.debug("[%s] %s %s", caller.value, request.method, request.url)
        if self.request_header:
            for name, value in request.headers.multi_items():
                self._log.debug("> %s: %s", name, value)
        if self.request_body:
            try:
                body = request.content
            except httpx.RequestNotRead:
                body = b""
            if body:
                self._log.debug("> %s", body.decode("utf-8", errors="replace"))

        response = await self._sender.send(ctx, caller, request)

        self._log.debug("< %s %s", response.http_version, response.status_code)
        if self.response_header:
            for name, value in response.headers.multi_items():
                self._log.debug("< %s: %s", name, value)
        if self.response_body:
            body = await response.aread()
            if body:
                self._log.debug("< %s", body.decode("utf-8", errors="replace"))
        return response
