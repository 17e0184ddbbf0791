"""Response facade - COS metadata accessors over an httpx.Response."""

from __future__ import annotations

from typing import Any, Generic, TypeVar

import httpx

X_COS_REQUEST_ID = "x-cos-request-id"
X_COS_TRACE_ID = "x-cos-trace-id"
X_COS_OBJECT_TYPE = "x-cos-object-type"
X_COS_STORAGE_CLASS = "x-cos-storage-class"
X_COS_VERSION_ID = "x-cos-version-id"
X_COS_SERVER_SIDE_ENCRYPTION = "x-cos-server-side-encryption"
X_COS_META_PREFIX = "x-cos-meta-"

T = TypeVar("T")


class Response(Generic[T]):
    """A COS API response plus the decoded result, if one was requested.

    Header lookups are case-insensitive and return "" for absent headers.
    The wrapped httpx.Response is never modified.
    """

    def __init__(self, http_response: httpx.Response, result: T | None = None) -> None:
        self.http_response = http_response
        self.result = result

    def __repr__(self) -> str:
        return f"<Response [{self.status_code}] request_id={self.request_id!r}>"

    @property
    def status_code(self) -> int:
        return self.http_response.status_code

    @property
    def headers(self) -> httpx.Headers:
        return self.http_response.headers

    @property
    def request_id(self) -> str:
        """ID the service assigns to every request."""
        return self.headers.get(X_COS_REQUEST_ID, "")

    @property
    def trace_id(self) -> str:
        """ID the service assigns to a failed request."""
        return self.headers.get(X_COS_TRACE_ID, "")

    @property
    def object_type(self) -> str:
        """``normal`` or ``appendable``."""
        return self.headers.get(X_COS_OBJECT_TYPE, "")

    @property
    def storage_class(self) -> str:
        return self.headers.get(X_COS_STORAGE_CLASS, "")

    @property
    def version_id(self) -> str:
        return self.headers.get(X_COS_VERSION_ID, "")

    @property
    def server_side_encryption(self) -> str:
        """Encryption algorithm (``AES256``) when the object is stored encrypted."""
        return self.headers.get(X_COS_SERVER_SIDE_ENCRYPTION, "")

    def meta_headers(self) -> httpx.Headers:
        """User-defined metadata (``x-cos-meta-*`` headers) only."""
        return httpx.Headers(
            [
                (name, value)
                for name, value in self.headers.multi_items()
                if name.lower().startswith(X_COS_META_PREFIX)
            ]
        )

    # Body access for callers that disabled automatic closing.

    def aiter_bytes(self, chunk_size: int | None = None) -> Any:
        return self.http_response.aiter_bytes(chunk_size)

    async def aread(self) -> bytes:
        return await self.http_response.aread()

    async def aclose(self) -> None:
        await self.http_response.aclose()

    async def __aenter__(self) -> "Response[T]":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()
