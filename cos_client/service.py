"""Service-scoped API (account level, resolved against the service URL)."""

from __future__ import annotations

from typing import TYPE_CHECKING

from cos_client.models import Caller, ServiceResult
from cos_client.request import Endpoint, SendOptions
from cos_client.response import Response
from cos_client.transport import BACKGROUND, Context

if TYPE_CHECKING:
    from cos_client.client import Client


class ServiceService:
    def __init__(self, client: Client) -> None:
        self._client = client

    async def get(self, ctx: Context = BACKGROUND) -> tuple[ServiceResult, Response[ServiceResult]]:
        """List every bucket owned by the account the request is signed for."""
        resp = await self._client.send(
            SendOptions(
                caller=Caller.SERVICE_GET,
                endpoint=Endpoint.SERVICE,
                uri="/",
                method="GET",
                result=ServiceResult,
            ),
            ctx,
        )
        return resp.result or ServiceResult(), resp
