"""COS client - runs send descriptors through the request pipeline.

Usage:
    async with Client(new_base_url("https://test-1253846586.cos.ap-beijing.myqcloud.com")) as client:
        policy, resp = await client.bucket.get_acl()
        print(resp.request_id, policy.owner.uin)

Pipeline per call: build_request (options + body + endpoint) → Sender →
ResponseParser → Response. Everything on the Client is fixed after
construction, so one Client can serve concurrent calls.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, TypeVar

import httpx

from cos_client.bucket import BucketService
from cos_client.config import ClientConfig
from cos_client.models import Caller, XmlDocument
from cos_client.object import ObjectService
from cos_client.parser import ResponseParser, XmlResponseParser
from cos_client.request import USER_AGENT, BaseURL, SendOptions, build_request, new_base_url
from cos_client.response import Response
from cos_client.service import ServiceService
from cos_client.transport import BACKGROUND, Context, HttpxSender, Sender

logger = logging.getLogger(__name__)

D = TypeVar("D", bound=XmlDocument)


class Client:
    """Manages communication with the COS API.

    Args:
        base_url: Bucket and service base URLs. The service URL falls back to
            DEFAULT_SERVICE_BASE_URL.
        http_client: httpx.AsyncClient for the default HttpxSender. Ignored
            when *sender* is given.
        sender: Sender that performs (and, if needed, signs) requests.
        response_parser: Decoder for responses; XmlResponseParser by default.
        user_agent: Sent unless the call's header options set one.
    """

    def __init__(
        self,
        base_url: BaseURL | None = None,
        http_client: httpx.AsyncClient | None = None,
        sender: Sender | None = None,
        response_parser: ResponseParser | None = None,
        user_agent: str = USER_AGENT,
    ) -> None:
        self.base_url = base_url or BaseURL()
        self._default_sender = HttpxSender(http_client) if sender is None else None
        self.sender: Sender = sender or self._default_sender
        self.response_parser: ResponseParser = response_parser or XmlResponseParser()
        self.user_agent = user_agent
        self._owned_http_client: httpx.AsyncClient | None = None

        self.service = ServiceService(self)
        self.bucket = BucketService(self)
        self.object = ObjectService(self)

    @classmethod
    def from_config(
        cls,
        config: ClientConfig,
        sender: Sender | None = None,
        response_parser: ResponseParser | None = None,
    ) -> "Client":
        """Build a client (and its httpx.AsyncClient) from a ClientConfig."""
        http_client = None
        if sender is None:
            http_client = httpx.AsyncClient(
                headers=config.headers,
                timeout=config.timeout,
                verify=config.verify_ssl,
            )
        client = cls(
            base_url=new_base_url(config.bucket_url, config.service_url),
            http_client=http_client,
            sender=sender,
            response_parser=response_parser,
            user_agent=config.user_agent,
        )
        client._owned_http_client = http_client
        return client

    async def __aenter__(self) -> "Client":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close HTTP clients this Client created. Injected ones are left alone."""
        if self._default_sender is not None:
            await self._default_sender.aclose()
        if self._owned_http_client is not None:
            await self._owned_http_client.aclose()

    def new_request(self, opt: SendOptions) -> httpx.Request:
        """Assemble the request for *opt*; raises before any network I/O."""
        return build_request(self.base_url.resolve(opt.endpoint), opt, self.user_agent)

    async def do_api(
        self,
        ctx: Context,
        caller: Caller,
        request: httpx.Request,
        result_type: type[D] | None,
        close_body: bool,
    ) -> Response[D]:
        """Send *request* and decode the response.

        With *close_body* the response body is drained and closed once the
        result is decoded so the connection returns to the pool, and the same
        happens when decoding fails. Without it, the caller owns the body of
        a successful response and a failed one is only closed. Cancellation
        closes the body without draining it.
        """
        response = await self.sender.send(ctx, caller, request)
        try:
            resp = await self.response_parser.parse_response(ctx, caller, response, result_type)
        except asyncio.CancelledError:
            await _release(response, drain=False)
            raise
        except BaseException:
            await _release(response, drain=close_body)
            raise

        logger.debug(
            "[%s] %s request_id=%s", caller.value, response.status_code, resp.request_id
        )
        if close_body:
            await _release(response, drain=True)
        return resp

    async def send(self, opt: SendOptions, ctx: Context = BACKGROUND) -> Response[Any]:
        request = self.new_request(opt)
        return await self.do_api(ctx, opt.caller, request, opt.result, not opt.disable_close_body)


async def _release(response: httpx.Response, drain: bool) -> None:
    """Drain and close *response*; failures are logged, never raised."""
    try:
        try:
            if drain and not (response.is_stream_consumed or response.is_closed):
                async for _ in response.aiter_raw():
                    pass
        finally:
            await response.aclose()
    except (httpx.HTTPError, httpx.StreamError, OSError) as e:
        logger.debug("Failed to release response body: %s", e)
