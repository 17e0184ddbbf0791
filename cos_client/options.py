"""Option Encoder - routes options values to URL query parameters and headers.

An options value is a pydantic model that declares, field by field, where its
data goes. There is no introspection: every options class lists its own
routing in query_fields() / header_fields().

The service routes sub-resource operations on the FIRST query parameter
(``/?acl``, ``/?location``), so add_url_options always keeps the query the
caller already put on the path in front of the encoded options.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, NamedTuple

import httpx
from pydantic import BaseModel, ConfigDict

from cos_client.errors import RequestBuildError

HeaderPairs = tuple[tuple[str, str], ...]


class OptionField(NamedTuple):
    """One routed field: wire key, value, and whether zero values are dropped.

    A list or tuple value produces one query parameter / header per item.
    """

    key: str
    value: Any
    omit_empty: bool = True


class Options(BaseModel):
    """Base class for options values.

    Subclasses override query_fields() and/or header_fields(). Python field
    names are snake_case; wire names live only in those two methods.
    """

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    def query_fields(self) -> list[OptionField]:
        return []

    def header_fields(self) -> list[OptionField]:
        return []


def is_empty(value: Any) -> bool:
    """Zero-value test used by omit_empty: None, "", 0, False, empty containers."""
    if value is None:
        return True
    if isinstance(value, (bool, int, float)):
        return not value
    if isinstance(value, (str, bytes, list, tuple, dict, set, frozenset)):
        return len(value) == 0
    return False


def _to_wire(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def encode_fields(fields: list[OptionField]) -> list[tuple[str, str]]:
    """Flatten option fields to (key, value) string pairs, dropping empty ones."""
    pairs: list[tuple[str, str]] = []
    for field in fields:
        if field.omit_empty and is_empty(field.value):
            continue
        values = field.value if isinstance(field.value, (list, tuple)) else [field.value]
        for item in values:
            if item is None:
                continue
            pairs.append((field.key, _to_wire(item)))
    return pairs


def encode_query(options: Options | None) -> str:
    """Encode query options as a query string (keys sorted, stable per key).

    A field whose value is ``""`` is a sub-resource marker and is written as
    a bare key (``uploads``, not ``uploads=``).
    """
    if options is None:
        return ""
    pairs = encode_fields(options.query_fields())
    pairs.sort(key=lambda pair: pair[0])
    return "&".join(_encode_pair(key, value) for key, value in pairs)


def _encode_pair(key: str, value: str) -> str:
    encoded = str(httpx.QueryParams([(key, value)]))
    return encoded.removesuffix("=") if value == "" else encoded


def add_url_options(uri: str, options: Options | None) -> str:
    """Append encoded query options to *uri*, keeping its existing query first.

    Args:
        uri: Relative path, possibly already carrying a query such as ``/?acl``.
        options: Options value, or None for a no-op.

    Returns:
        The relative path with ``existing&encoded`` as its query string.

    Raises:
        RequestBuildError: If *uri* is not a parseable URL reference.
    """
    if options is None:
        return uri

    try:
        url = httpx.URL(uri)
    except httpx.InvalidURL as e:
        raise RequestBuildError(f"Invalid request path {uri!r}: {e}") from e

    encoded = encode_query(options)
    if not encoded:
        return uri

    existing = url.query.decode("ascii")
    query = f"{existing}&{encoded}" if existing else encoded
    return str(url.copy_with(query=query.encode("ascii")))


def add_header_options(headers: HeaderPairs, options: Options | None) -> HeaderPairs:
    """Return *headers* with the header options appended (never replacing)."""
    if options is None:
        return headers
    return headers + tuple(encode_fields(options.header_fields()))


def header_fields_from_mapping(
    mapping: Mapping[str, Any] | None, prefix: str
) -> list[OptionField]:
    """Header fields for a free-form mapping such as user metadata.

    Keys that already carry *prefix* (case-insensitively) are used as-is.
    """
    if not mapping:
        return []
    fields = []
    for key, value in mapping.items():
        name = key if key.lower().startswith(prefix) else f"{prefix}{key}"
        fields.append(OptionField(name, value))
    return fields
