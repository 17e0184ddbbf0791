"""Response Decoder - the ResponseParser boundary.

A ResponseParser turns a raw httpx.Response into a Response facade holding
the decoded result, and it alone decides whether a status code is a
service-reported error (CosError) or a success.
"""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from typing import Protocol, TypeVar, runtime_checkable

import httpx

from cos_client.errors import CosError, ResponseDecodeError
from cos_client.models import Caller, ErrorDocument, XmlDocument
from cos_client.response import X_COS_REQUEST_ID, X_COS_TRACE_ID, Response
from cos_client.transport import Context

logger = logging.getLogger(__name__)

D = TypeVar("D", bound=XmlDocument)


@runtime_checkable
class ResponseParser(Protocol):
    async def parse_response(
        self,
        ctx: Context,
        caller: Caller,
        response: httpx.Response,
        result_type: type[D] | None,
    ) -> Response[D]:
        """Decode *response* into *result_type*.

        Raises:
            CosError: The status code reports a service-side failure.
            ResponseDecodeError: A success body does not fit *result_type*.
        """
        ...


def is_success(status_code: int) -> bool:
    return 200 <= status_code <= 399


async def check_response(response: httpx.Response) -> None:
    """Raise CosError unless *response* has a success status.

    The ``<Error>`` body is best-effort: when it is empty or not XML the
    error still carries the status and the id headers.
    """
    if is_success(response.status_code):
        return

    data = await response.aread()
    doc = ErrorDocument()
    if data:
        try:
            doc = ErrorDocument.from_xml(data)
        except (ET.ParseError, ValueError):
            logger.debug("Unparseable error body for status %s", response.status_code)

    raise CosError(
        status_code=response.status_code,
        code=doc.code or response.reason_phrase,
        message=doc.message or "",
        request_id=doc.request_id or response.headers.get(X_COS_REQUEST_ID, ""),
        trace_id=doc.trace_id or response.headers.get(X_COS_TRACE_ID, ""),
        resource=doc.resource or "",
        response=response,
    )


class XmlResponseParser:
    """Default ResponseParser for the COS XML protocol."""

    async def parse_response(
        self,
        ctx: Context,
        caller: Caller,
        response: httpx.Response,
        result_type: type[D] | None,
    ) -> Response[D]:
        await check_response(response)

        if result_type is None:
            return Response(response)

        data = await response.aread()
        if not data.strip():
            return Response(response)

        try:
            result = result_type.from_xml(data)
        except ET.ParseError as e:
            raise ResponseDecodeError(
                f"{caller.value}: response body is not valid XML: {e}", response
            ) from e
        except ValueError as e:
            raise ResponseDecodeError(
                f"{caller.value}: response body does not match {result_type.__name__}: {e}",
                response,
            ) from e

        return Response(response, result)
