"""Request Assembler - send descriptors, base URLs, and request building.

build_request() is the single place where options, body and endpoint come
together into an httpx.Request. It never signs anything: authentication is
the Sender's job.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

import httpx

from cos_client.body import NO_BODY, Body, encode_body, reconcile_content_length
from cos_client.errors import RequestBuildError
from cos_client.models import Caller, XmlDocument
from cos_client.options import HeaderPairs, Options, add_header_options, add_url_options

logger = logging.getLogger(__name__)

VERSION = "0.13.0"
USER_AGENT = f"cos-client-python/{VERSION}"
DEFAULT_SERVICE_BASE_URL = "https://service.cos.myqcloud.com"
BUCKET_URL_TEMPLATE = "{scheme}://{bucket}-{app_id}.cos.{region}.myqcloud.com"


class Endpoint(str, Enum):
    """Which base URL a request resolves against."""

    BUCKET = "bucket"
    SERVICE = "service"


@dataclass(frozen=True)
class BaseURL:
    """Base URLs (scheme + host, no path) for bucket and service APIs.

    bucket_url looks like https://test-1253846586.cos.ap-beijing.myqcloud.com
    """

    bucket_url: httpx.URL | None = None
    service_url: httpx.URL = httpx.URL(DEFAULT_SERVICE_BASE_URL)

    def resolve(self, endpoint: Endpoint) -> httpx.URL:
        if endpoint is Endpoint.SERVICE:
            return self.service_url
        if self.bucket_url is None:
            raise RequestBuildError("No bucket URL configured for a bucket-scoped request")
        return self.bucket_url


def _parse_base(url: str) -> httpx.URL:
    try:
        parsed = httpx.URL(url)
    except httpx.InvalidURL as e:
        raise RequestBuildError(f"Invalid base URL {url!r}: {e}") from e
    if not parsed.scheme or not parsed.host:
        raise RequestBuildError(f"Base URL must be absolute (scheme and host): {url!r}")
    return parsed


def new_base_url(bucket_url: str | None, service_url: str | None = None) -> BaseURL:
    """Build a BaseURL; service_url defaults to DEFAULT_SERVICE_BASE_URL."""
    return BaseURL(
        bucket_url=_parse_base(bucket_url) if bucket_url else None,
        service_url=_parse_base(service_url or DEFAULT_SERVICE_BASE_URL),
    )


def new_bucket_url(bucket: str, app_id: str, region: str, secure: bool = True) -> httpx.URL:
    """Bucket base URL from its parts.

    Args:
        bucket: Bucket name.
        app_id: Account AppID.
        region: Region code, e.g. ap-beijing.
        secure: Use https (default) or http.
    """
    return httpx.URL(
        BUCKET_URL_TEMPLATE.format(
            scheme="https" if secure else "http",
            bucket=bucket,
            app_id=app_id,
            region=region,
        )
    )


@dataclass(frozen=True)
class SendOptions:
    """Everything one API call needs. Built per call, used once."""

    caller: Caller
    uri: str = "/"
    method: str = "GET"
    endpoint: Endpoint = Endpoint.BUCKET
    body: Body = NO_BODY
    query: Options | None = None
    header: Options | None = None
    result: type[XmlDocument] | None = None
    # When True the caller owns the response body and must close it.
    disable_close_body: bool = False


def _has_header(pairs: HeaderPairs, name: str) -> bool:
    name = name.lower()
    return any(key.lower() == name for key, _ in pairs)


def _header_value(pairs: HeaderPairs, name: str) -> str | None:
    name = name.lower()
    for key, value in pairs:
        if key.lower() == name:
            return value
    return None


def build_request(base_url: httpx.URL, opt: SendOptions, user_agent: str = USER_AGENT) -> httpx.Request:
    """Assemble the outbound request for *opt* against *base_url*.

    Raises:
        RequestBuildError: Bad path, body, or Content-Length.
        SerializationError: The document body could not be serialized.
    """
    uri = add_url_options(opt.uri, opt.query)
    try:
        reference = httpx.URL(uri)
        url = base_url.join(reference)
    except httpx.InvalidURL as e:
        raise RequestBuildError(f"Invalid request path {uri!r}: {e}") from e
    if reference.scheme or reference.host:
        raise RequestBuildError(f"Request path must be relative to the base URL: {uri!r}")

    encoded = encode_body(opt.body)

    headers = add_header_options((), opt.header)

    declared = _header_value(headers, "Content-Length")
    if declared is not None:
        encoded = reconcile_content_length(encoded, declared)
    elif encoded.length is not None and not isinstance(encoded.content, (bytes, type(None))):
        # A file of known size goes out with a fixed length instead of chunked.
        headers += (("Content-Length", str(encoded.length)),)

    if encoded.content_md5:
        headers = tuple(pair for pair in headers if pair[0].lower() != "content-md5")
        headers += (("Content-MD5", encoded.content_md5),)
    if user_agent and not _has_header(headers, "User-Agent"):
        headers += (("User-Agent", user_agent),)
    if encoded.content_type and not _has_header(headers, "Content-Type"):
        headers += (("Content-Type", encoded.content_type),)

    logger.debug("[%s] built %s %s", opt.caller.value, opt.method, url)
    return httpx.Request(opt.method, url, headers=list(headers), content=encoded.content)
