"""JSON and XML encoding for request bodies and response payloads.

JSON goes through orjson, which natively handles datetime, UUID, dataclass
and enum values. The ``default`` hook extends it to Pydantic models and to
objects exposing ``to_dict()`` (request decorators, DTO helpers).

XML output follows the usual array-to-XML convention: a ``<response>`` root,
one element per mapping key, and repeated ``<item>`` elements for list
entries and keys that are not valid element names.
"""

from __future__ import annotations

import re
import xml.etree.ElementTree as ET
from collections.abc import Mapping
from datetime import date, datetime
from enum import Enum
from typing import Any

import orjson
from pydantic import BaseModel

from courier.core.exceptions import MalformedBody, SerializationError

XML_ROOT_TAG = "response"
XML_ITEM_TAG = "item"
_XML_NAME = re.compile(r"^[A-Za-z_][\w.-]*$")


def _default(value: Any) -> Any:  # noqa: ANN401 - orjson default hook
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    to_dict = getattr(value, "to_dict", None)
    if callable(to_dict):
        return to_dict()
    if isinstance(value, (set, frozenset)):
        return list(value)
    raise TypeError(f"Type is not JSON serializable: {type(value).__name__}")


def encode_json(data: Any) -> bytes:  # noqa: ANN401 - accepts any JSON-serializable content
    """Encode data as JSON bytes.

    Raises:
        SerializationError: If the data contains values orjson cannot encode.
    """
    if isinstance(data, BaseModel):
        data = data.model_dump(mode="json")
    try:
        return orjson.dumps(data, default=_default)
    except orjson.JSONEncodeError as e:
        raise SerializationError(f"Cannot encode response as JSON: {e}", "json", e) from e


def decode_json_object(raw: bytes | str) -> dict[str, Any] | None:
    """Decode a JSON document that must be an object.

    Empty or whitespace-only input decodes to ``None``.

    Raises:
        MalformedBody: If the input is not valid JSON or not a JSON object.
    """
    if not raw.strip():
        return None
    try:
        decoded = orjson.loads(raw)
    except orjson.JSONDecodeError as e:
        raise MalformedBody(f"Request body is not valid JSON: {e}", e) from e
    if not isinstance(decoded, dict):
        raise MalformedBody(
            f"Request body must be a JSON object, got {type(decoded).__name__}"
        )
    return decoded


def _xml_text(value: Any) -> str:  # noqa: ANN401
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Enum):
        return str(value.value)
    return str(value)


def _append_xml(
    parent: ET.Element, tag: str, value: Any, depth: int  # noqa: ANN401
) -> None:
    if depth > 64:
        raise ValueError("Nesting too deep for XML encoding")
    if isinstance(value, BaseModel):
        value = value.model_dump(mode="json")
    elif callable(getattr(value, "to_dict", None)):
        value = value.to_dict()

    element = ET.SubElement(parent, tag if _XML_NAME.match(tag) else XML_ITEM_TAG)
    if element.tag == XML_ITEM_TAG and tag != XML_ITEM_TAG:
        element.set("key", tag)
    _fill_xml(element, value, depth)


def _fill_xml(element: ET.Element, value: Any, depth: int) -> None:  # noqa: ANN401
    if isinstance(value, Mapping):
        for key, item in value.items():
            _append_xml(element, str(key), item, depth + 1)
    elif isinstance(value, (list, tuple, set, frozenset)):
        for item in value:
            _append_xml(element, XML_ITEM_TAG, item, depth + 1)
    elif value is not None:
        element.text = _xml_text(value)


def encode_xml(data: Any) -> bytes:  # noqa: ANN401
    """Encode data as an XML document.

    Raises:
        SerializationError: If the data cannot be represented as XML.
    """
    if isinstance(data, BaseModel):
        data = data.model_dump(mode="json")
    elif callable(getattr(data, "to_dict", None)):
        data = data.to_dict()
    root = ET.Element(XML_ROOT_TAG)
    try:
        _fill_xml(root, data, 0)
        return ET.tostring(root, encoding="utf-8", xml_declaration=True)
    except (TypeError, ValueError) as e:
        raise SerializationError(f"Cannot encode response as XML: {e}", "xml", e) from e
