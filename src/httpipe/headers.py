"""Conversion between plain header mappings and httpx header objects."""

from __future__ import annotations

import re
from typing import Mapping

import httpx

from .exceptions import HeaderParseError, HttpipeUnknownError

# RFC 9110 token characters.
_HEADER_NAME = re.compile(r"[!#$%&'*+\-.^_`|~0-9A-Za-z]+")
# Visible ASCII, space, tab and obs-text; everything here is latin-1 encodable.
_HEADER_VALUE = re.compile(r"[\t\x20-\x7e\x80-\xff]*")


def to_transport(headers: Mapping[str, str]) -> httpx.Headers:
    """Validate every entry and build transport headers, failing on the first bad pair."""
    items: list[tuple[bytes, bytes]] = []
    for key, value in headers.items():
        key = str(key)
        value = str(value)
        if not _HEADER_NAME.fullmatch(key) or not _HEADER_VALUE.fullmatch(value):
            raise HeaderParseError(key, value)
        items.append((key.encode("ascii"), value.encode("latin-1")))
    return httpx.Headers(items)


def from_transport(headers: httpx.Headers) -> dict[str, str]:
    """Flatten transport headers into a lower-cased mapping; repeated headers are comma-joined.

    Values that are not ASCII are rejected rather than guessed at.
    """
    converted: dict[str, str] = {}
    for raw_key, raw_value in headers.raw:
        try:
            key = raw_key.decode("ascii").lower()
            value = raw_value.decode("ascii")
        except UnicodeDecodeError as exc:
            raise HttpipeUnknownError(exc) from exc
        if key in converted:
            converted[key] = f"{converted[key]}, {value}"
        else:
            converted[key] = value
    return converted
