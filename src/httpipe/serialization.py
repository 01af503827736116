"""Request body encoding per content type and JSON response decoding."""

from __future__ import annotations

import re
import xml.etree.ElementTree as ET
from dataclasses import is_dataclass
from functools import lru_cache
from typing import Any, Mapping
from urllib.parse import urlencode

from pydantic import BaseModel, TypeAdapter, ValidationError
from pydantic_core import PydanticSerializationError, to_json, to_jsonable_python

from .content_type import ContentType
from .exceptions import DeserializationError, SerialFormat, SerializationError

XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>'
_XML_NAME = re.compile(r"^[A-Za-z_][A-Za-z0-9._-]*$")


def encode_body(payload: Any, content_type: ContentType) -> bytes:
    if content_type is ContentType.JSON:
        return encode_json(payload)
    if content_type.is_xml:
        return encode_xml(payload)
    return encode_urlencoded(payload)


def encode_json(payload: Any) -> bytes:
    try:
        return to_json(payload)
    except (PydanticSerializationError, TypeError, ValueError) as exc:
        raise SerializationError(SerialFormat.JSON, exc) from exc


def _xml_root_name(payload: Any) -> str:
    if isinstance(payload, BaseModel) or (is_dataclass(payload) and not isinstance(payload, type)):
        return type(payload).__name__
    return "root"


def _xml_tag(name: object) -> str:
    tag = str(name)
    if not _XML_NAME.match(tag):
        raise ValueError(f"{tag!r} is not a valid XML element name")
    return tag


def _fill_xml(element: ET.Element, value: Any) -> None:
    if isinstance(value, Mapping):
        for key, item in value.items():
            _append_xml(element, key, item)
    elif isinstance(value, list):
        for item in value:
            _append_xml(element, "item", item)
    elif value is None:
        return
    elif isinstance(value, bool):
        element.text = "true" if value else "false"
    else:
        element.text = str(value)


def _append_xml(parent: ET.Element, name: object, value: Any) -> None:
    # Sequences repeat the element rather than nesting a wrapper.
    if isinstance(value, list):
        for item in value:
            _append_xml(parent, name, item)
        return
    _fill_xml(ET.SubElement(parent, _xml_tag(name)), value)


def encode_xml(payload: Any) -> bytes:
    try:
        root = ET.Element(_xml_tag(_xml_root_name(payload)))
        _fill_xml(root, to_jsonable_python(payload))
        document = XML_DECLARATION + ET.tostring(root, encoding="unicode")
    except (PydanticSerializationError, TypeError, ValueError) as exc:
        raise SerializationError(SerialFormat.XML, exc) from exc
    return document.encode("utf-8")


def _form_value(key: str, value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (Mapping, list)):
        raise TypeError(f"field {key!r} is nested and cannot be form encoded")
    return str(value)


def encode_urlencoded(payload: Any) -> bytes:
    try:
        fields = to_jsonable_python(payload)
        if not isinstance(fields, Mapping):
            raise TypeError("form encoding requires a mapping or model payload")
        pairs = [(str(key), _form_value(str(key), value)) for key, value in fields.items() if value is not None]
    except (PydanticSerializationError, TypeError, ValueError) as exc:
        raise SerializationError(SerialFormat.URL_ENCODED, exc) from exc
    return urlencode(pairs).encode("ascii")


@lru_cache(maxsize=256)
def _adapter(response_type: Any) -> TypeAdapter[Any]:
    return TypeAdapter(response_type)


def decode_body(raw: bytes, response_type: Any = None) -> Any:
    """Decode a response body as JSON, validating it against `response_type` when given.

    The response's own content type is not consulted.
    """
    try:
        return _adapter(Any if response_type is None else response_type).validate_json(raw)
    except ValidationError as exc:
        raise DeserializationError(SerialFormat.JSON, exc) from exc
