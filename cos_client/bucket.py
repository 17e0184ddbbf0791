"""Bucket-scoped API.

Sub-resource operations put their marker (``acl``, ``location``,
``lifecycle``) in the path's query so it stays the first query parameter.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from cos_client.body import NO_BODY, DocumentBody
from cos_client.models import (
    AccessControlPolicy,
    BucketGetOptions,
    BucketLocation,
    BucketPutACLOptions,
    Caller,
    LifecycleConfiguration,
    ListBucketResult,
)
from cos_client.request import SendOptions
from cos_client.response import Response
from cos_client.transport import BACKGROUND, Context

if TYPE_CHECKING:
    from cos_client.client import Client

logger = logging.getLogger(__name__)


class BucketService:
    def __init__(self, client: Client) -> None:
        self._client = client

    async def get(
        self, opt: BucketGetOptions | None = None, ctx: Context = BACKGROUND
    ) -> tuple[ListBucketResult, Response[ListBucketResult]]:
        """List objects in the bucket (prefix/delimiter/marker/max-keys paging)."""
        resp = await self._client.send(
            SendOptions(
                caller=Caller.BUCKET_GET,
                uri="/",
                method="GET",
                query=opt,
                result=ListBucketResult,
            ),
            ctx,
        )
        return resp.result or ListBucketResult(), resp

    async def get_acl(
        self, ctx: Context = BACKGROUND
    ) -> tuple[AccessControlPolicy, Response[AccessControlPolicy]]:
        resp = await self._client.send(
            SendOptions(
                caller=Caller.BUCKET_GET_ACL,
                uri="/?acl",
                method="GET",
                result=AccessControlPolicy,
            ),
            ctx,
        )
        return resp.result or AccessControlPolicy(), resp

    async def put_acl(self, opt: BucketPutACLOptions, ctx: Context = BACKGROUND) -> Response[None]:
        """Set the bucket ACL from headers (opt.header) or a document (opt.body).

        The service treats the two as alternatives; send one of them.
        """
        if opt.header is not None and opt.body is not None:
            logger.warning("put_acl called with both header and body ACL; the service expects one")
        return await self._client.send(
            SendOptions(
                caller=Caller.BUCKET_PUT_ACL,
                uri="/?acl",
                method="PUT",
                body=DocumentBody(opt.body) if opt.body is not None else NO_BODY,
                header=opt.header,
            ),
            ctx,
        )

    async def get_location(
        self, ctx: Context = BACKGROUND
    ) -> tuple[BucketLocation, Response[BucketLocation]]:
        resp = await self._client.send(
            SendOptions(
                caller=Caller.BUCKET_GET_LOCATION,
                uri="/?location",
                method="GET",
                result=BucketLocation,
            ),
            ctx,
        )
        return resp.result or BucketLocation(), resp

    async def get_lifecycle(
        self, ctx: Context = BACKGROUND
    ) -> tuple[LifecycleConfiguration, Response[LifecycleConfiguration]]:
        resp = await self._client.send(
            SendOptions(
                caller=Caller.BUCKET_GET_LIFECYCLE,
                uri="/?lifecycle",
                method="GET",
                result=LifecycleConfiguration,
            ),
            ctx,
        )
        return resp.result or LifecycleConfiguration(), resp

    async def put_lifecycle(
        self, config: LifecycleConfiguration, ctx: Context = BACKGROUND
    ) -> Response[None]:
        return await self._client.send(
            SendOptions(
                caller=Caller.BUCKET_PUT_LIFECYCLE,
                uri="/?lifecycle",
                method="PUT",
                body=DocumentBody(config),
            ),
            ctx,
        )

    async def delete_lifecycle(self, ctx: Context = BACKGROUND) -> Response[None]:
        return await self._client.send(
            SendOptions(
                caller=Caller.BUCKET_DELETE_LIFECYCLE,
                uri="/?lifecycle",
                method="DELETE",
            ),
            ctx,
        )
