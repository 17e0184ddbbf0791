"""Exception hierarchy for cos-client.

Every error raised by the request pipeline derives from CosClientError so
callers can catch the library as a whole, or pick a narrow class:

- RequestBuildError / SerializationError: raised before any network I/O.
- TransportError: the request did not produce a response.
- CosError: the service answered with an error status.
- ResponseDecodeError: the service answered successfully but the body does
  not fit the requested result type.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import httpx


class CosClientError(Exception):
    """Base class for cos-client errors."""


class ConfigError(CosClientError):
    """Raised when configuration loading fails."""


class RequestBuildError(CosClientError):
    """Raised when a request cannot be assembled (bad path, options, length)."""


class SerializationError(RequestBuildError):
    """Raised when a document body cannot be encoded to XML."""


class TransportError(CosClientError):
    """Raised when a request fails (connection error, timeout, etc.)."""


class TransportTimeout(TransportError):
    """Raised when the transport gives up waiting for the service."""


class TransportConnectError(TransportError):
    """Raised when no connection to the service could be established."""


class ContentLengthMismatch(TransportError):
    """Raised while streaming when a body disagrees with its declared Content-Length."""

    def __init__(self, declared: int, actual: int) -> None:
        super().__init__(
            f"request body produced {actual} bytes but Content-Length declared {declared}"
        )
        self.declared = declared
        self.actual = actual


class ResponseDecodeError(CosClientError):
    """Raised when a successful response body cannot be parsed into the result type."""

    def __init__(self, message: str, response: httpx.Response | None = None) -> None:
        super().__init__(message)
        self.response = response


class CosError(CosClientError):
    """Error reported by the service.

    Carries the HTTP status together with the fields of the XML ``<Error>``
    document. request_id and trace_id fall back to the response headers when
    the body is missing or not parseable.
    """

    def __init__(
        self,
        status_code: int,
        code: str = "",
        message: str = "",
        request_id: str = "",
        trace_id: str = "",
        resource: str = "",
        response: httpx.Response | None = None,
    ) -> None:
        self.status_code = status_code
        self.code = code
        self.message = message
        self.request_id = request_id
        self.trace_id = trace_id
        self.resource = resource
        self.response = response
        super().__init__(str(self))

    def __str__(self) -> str:
        method = url = ""
        if self.response is not None:
            try:
                method = self.response.request.method
                url = str(self.response.request.url)
            except RuntimeError:
                # httpx raises when the response was built without a request
                pass
        prefix = f"{method} {url}: " if url else ""
        return (
            f"{prefix}{self.status_code} {self.code}({self.message}) "
            f"RequestId={self.request_id} TraceId={self.trace_id}"
        )
