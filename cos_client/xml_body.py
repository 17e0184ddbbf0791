"""XML bytes <-> nested dict conversion for COS request/response bodies.

Document models (cos_client.models) dump to and validate from nested dicts
whose keys are the XML element names carried by pydantic aliases. This is
the only module that touches ElementTree.

Dict shape, identical in both directions:
- a child element is a key; repeated siblings are a list under one key
- ``@name`` is an attribute of the enclosing element
- ``#text`` is the text of an element that also has attributes or children
- ``None`` is an empty element such as ``<Prefix/>``
"""

from __future__ import annotations

import xml.etree.ElementTree as ET
from typing import Any

TEXT_KEY = "#text"
ATTR_PREFIX = "@"


# ---------------------------------------------------------------------------
# Decoding (response bodies)
# ---------------------------------------------------------------------------


def xml_to_dict(
    xml_bytes: bytes,
    force_list: frozenset[str] | set[str] | None = None,
) -> dict[str, Any]:
    """Parse *xml_bytes* into ``{root_tag: content}``.

    Namespaces are dropped from tags, so a LocationConstraint that declares
    ``xmlns="http://www.qcloud.com/document/product/436/7751"`` decodes the
    same as one that does not.

    Args:
        xml_bytes: Response body.
        force_list: Tags decoded as a list even when they occur once,
            e.g. ``{"Grant"}`` for an ACL with a single grant.

    Raises:
        ET.ParseError: *xml_bytes* is not well-formed.
    """
    root = ET.fromstring(xml_bytes)
    return {_local_name(root.tag): _decode(root, frozenset(force_list or ()))}


def _local_name(tag: str) -> str:
    """``{uri}Name`` → ``Name``."""
    _, brace, local = tag.rpartition("}")
    return local if brace else tag


def _decode(element: ET.Element, force_list: frozenset[str]) -> Any:
    content: dict[str, Any] = {
        ATTR_PREFIX + name: value
        for name, value in element.attrib.items()
        # namespaced attributes such as xsi:type carry no document data
        if not name.startswith(("{", "xmlns"))
    }

    for child in element:
        tag = _local_name(child.tag)
        value = _decode(child, force_list)
        # _decode never returns a list, so a list here is a sibling group
        if tag not in content:
            content[tag] = [value] if tag in force_list else value
        elif isinstance(content[tag], list):
            content[tag].append(value)
        else:
            content[tag] = [content[tag], value]

    text = element.text.strip() if element.text else ""
    if not content:
        return text or None
    if text:
        content[TEXT_KEY] = text
    return content


# ---------------------------------------------------------------------------
# Encoding (request bodies)
# ---------------------------------------------------------------------------


def dict_to_xml(data: dict[str, Any], xml_declaration: bool = False) -> bytes:
    """Serialize ``{root_tag: content}`` to compact UTF-8 XML.

    No indentation is added: these are the bytes that are digested for
    Content-MD5 and sent as-is.

    Raises:
        ValueError: *data* does not have exactly one key.
    """
    if not isinstance(data, dict) or len(data) != 1:
        count = len(data) if isinstance(data, dict) else "N/A"
        raise ValueError(
            "dict_to_xml expects a dict with exactly one top-level key "
            f"(the root element), got {type(data).__name__} with {count} keys"
        )

    (root_tag, content), = data.items()
    root = ET.Element(root_tag)
    _encode(root, content)
    return ET.tostring(root, encoding="utf-8", xml_declaration=xml_declaration)


def _encode(element: ET.Element, content: Any) -> None:
    if content is None:
        return
    if not isinstance(content, dict):
        element.text = _text(content)
        return

    for key, value in content.items():
        if key.startswith(ATTR_PREFIX):
            if value is not None:
                element.set(key[len(ATTR_PREFIX):], _text(value))
        elif key == TEXT_KEY:
            if value is not None:
                element.text = _text(value)
        else:
            for item in value if isinstance(value, list) else [value]:
                _encode(ET.SubElement(element, key), item)


def _text(value: Any) -> str:
    # XML booleans are lowercase (IsTruncated, etc.)
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)
