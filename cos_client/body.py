"""Body Codec - turns a request body value into wire content.

Exactly one of three body kinds is passed per request:

- RawBody: uploaded bytes or a byte stream, sent untouched.
- DocumentBody: an XmlDocument, serialized to XML with a Content-MD5 digest.
- NoBody: nothing is sent, but Content-Type is still application/xml.
"""

from __future__ import annotations

import base64
import hashlib
import io
import os
from collections.abc import AsyncIterable, AsyncIterator, Iterable
from dataclasses import dataclass, replace
from typing import IO, Union

from cos_client.errors import ContentLengthMismatch, RequestBuildError, SerializationError
from cos_client.models import XmlDocument

CONTENT_TYPE_XML = "application/xml"
CHUNK_SIZE = 64 * 1024

RawContent = Union[bytes, bytearray, memoryview, IO[bytes], Iterable[bytes], AsyncIterable[bytes]]


@dataclass(frozen=True)
class RawBody:
    """Opaque payload, e.g. object content. Never buffered or digested."""

    content: RawContent


@dataclass(frozen=True)
class DocumentBody:
    """Structured XML payload."""

    document: XmlDocument


@dataclass(frozen=True)
class NoBody:
    pass


NO_BODY = NoBody()

Body = Union[RawBody, DocumentBody, NoBody]


@dataclass(frozen=True)
class EncodedBody:
    """Wire form of a body.

    length is the exact byte count when it is known up front, None for
    streams whose size cannot be determined without consuming them.
    """

    content: bytes | AsyncIterator[bytes] | None
    content_type: str = ""
    content_md5: str = ""
    length: int | None = None


def content_md5(data: bytes) -> str:
    """Base64 MD5 digest as sent in the Content-MD5 header."""
    return base64.b64encode(hashlib.md5(data).digest()).decode("ascii")


def encode_body(body: Body) -> EncodedBody:
    """Encode *body* for sending.

    Raises:
        SerializationError: The document could not be serialized.
        RequestBuildError: RawBody content of an unsupported type.
    """
    if isinstance(body, RawBody):
        return _encode_raw(body.content)

    if isinstance(body, DocumentBody):
        try:
            data = body.document.to_xml()
        except (TypeError, ValueError) as e:
            raise SerializationError(
                f"Cannot serialize {type(body.document).__name__} to XML: {e}"
            ) from e
        return EncodedBody(
            content=data,
            content_type=CONTENT_TYPE_XML,
            content_md5=content_md5(data),
            length=len(data),
        )

    return EncodedBody(content=None, content_type=CONTENT_TYPE_XML, length=0)


def _encode_raw(content: RawContent) -> EncodedBody:
    if isinstance(content, bytes):
        return EncodedBody(content=content, length=len(content))
    if isinstance(content, (bytearray, memoryview)):
        data = bytes(content)
        return EncodedBody(content=data, length=len(data))
    if hasattr(content, "read"):
        return EncodedBody(content=_aiter_file(content), length=_remaining_length(content))
    if isinstance(content, AsyncIterable):
        return EncodedBody(content=aiter(content))
    if isinstance(content, Iterable) and not isinstance(content, str):
        return EncodedBody(content=_aiter_sync(content))
    raise RequestBuildError(f"Unsupported raw body type: {type(content).__name__}")


def _remaining_length(f: IO[bytes]) -> int | None:
    """Bytes left between the current position and the end, if knowable."""
    if isinstance(f, io.BytesIO):
        return f.getbuffer().nbytes - f.tell()
    try:
        fileno = f.fileno()
        position = f.tell()
    except (AttributeError, OSError, ValueError):
        # io.UnsupportedOperation is an OSError/ValueError subclass
        return None
    size = os.fstat(fileno).st_size
    return max(size - position, 0)


async def _aiter_file(f: IO[bytes]) -> AsyncIterator[bytes]:
    while True:
        chunk = f.read(CHUNK_SIZE)
        if not chunk:
            break
        yield chunk


async def _aiter_sync(chunks: Iterable[bytes]) -> AsyncIterator[bytes]:
    for chunk in chunks:
        yield chunk


async def _exact_length(stream: AsyncIterator[bytes], declared: int) -> AsyncIterator[bytes]:
    """Yield *stream* unchanged, failing if it over- or under-runs *declared*."""
    sent = 0
    async for chunk in stream:
        sent += len(chunk)
        if sent > declared:
            raise ContentLengthMismatch(declared, sent)
        yield chunk
    if sent != declared:
        raise ContentLengthMismatch(declared, sent)


def reconcile_content_length(encoded: EncodedBody, declared: str) -> EncodedBody:
    """Honor an explicit Content-Length header.

    A body of known size must match it exactly. A stream of unknown size is
    rewrapped to send exactly *declared* bytes (no chunked framing).

    Raises:
        RequestBuildError: Unparseable header, or a known size that differs.
    """
    try:
        length = int(declared)
    except ValueError as e:
        raise RequestBuildError(f"Invalid Content-Length header: {declared!r}") from e
    if length < 0:
        raise RequestBuildError(f"Invalid Content-Length header: {declared!r}")

    if encoded.length is not None:
        if encoded.length != length:
            raise RequestBuildError(
                f"Content-Length header declares {length} bytes but the body has {encoded.length}"
            )
        return encoded

    # unknown length only happens for streams
    return replace(encoded, content=_exact_length(encoded.content, length), length=length)
