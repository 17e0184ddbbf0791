"""Object-scoped API. Object content always travels as a RawBody."""

from __future__ import annotations

from typing import TYPE_CHECKING
from urllib.parse import quote

from cos_client.body import RawBody, RawContent
from cos_client.models import Caller, ObjectGetOptions, ObjectPutHeaderOptions
from cos_client.request import SendOptions
from cos_client.response import Response
from cos_client.transport import BACKGROUND, Context

if TYPE_CHECKING:
    from cos_client.client import Client


def object_uri(key: str) -> str:
    """Path for *key*, percent-encoded so ``?`` and ``#`` stay in the key."""
    return "/" + quote(key.lstrip("/"), safe="/")


class ObjectService:
    def __init__(self, client: Client) -> None:
        self._client = client

    async def get(
        self, key: str, opt: ObjectGetOptions | None = None, ctx: Context = BACKGROUND
    ) -> Response[None]:
        """Download an object.

        The body is left open for streaming: read it with ``resp.aiter_bytes()``
        or ``resp.aread()`` and close the response (``async with resp:``).
        """
        return await self._client.send(
            SendOptions(
                caller=Caller.OBJECT_GET,
                uri=object_uri(key),
                method="GET",
                query=opt,
                header=opt,
                disable_close_body=True,
            ),
            ctx,
        )

    async def head(self, key: str, ctx: Context = BACKGROUND) -> Response[None]:
        """Object metadata only (storage class, meta headers, ...)."""
        return await self._client.send(
            SendOptions(caller=Caller.OBJECT_HEAD, uri=object_uri(key), method="HEAD"),
            ctx,
        )

    async def put(
        self,
        key: str,
        content: RawContent,
        opt: ObjectPutHeaderOptions | None = None,
        ctx: Context = BACKGROUND,
    ) -> Response[None]:
        """Upload *content* (bytes, a binary file, or a byte stream) as *key*.

        For streams whose size cannot be determined, set opt.content_length so
        the upload is sent with a fixed length instead of chunked.
        """
        return await self._client.send(
            SendOptions(
                caller=Caller.OBJECT_PUT,
                uri=object_uri(key),
                method="PUT",
                body=RawBody(content),
                header=opt,
            ),
            ctx,
        )

    async def delete(self, key: str, ctx: Context = BACKGROUND) -> Response[None]:
        return await self._client.send(
            SendOptions(caller=Caller.OBJECT_DELETE, uri=object_uri(key), method="DELETE"),
            ctx,
        )
