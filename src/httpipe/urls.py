"""Request URL assembly."""

from __future__ import annotations

from typing import Mapping
from urllib.parse import quote, urlencode

import httpx

from .exceptions import InvalidUrlError


def join_path(base: str, endpoint: str) -> str:
    if base.endswith("/") and endpoint.startswith("/"):
        return base + endpoint[1:]
    if base.endswith("/") or endpoint.startswith("/"):
        return base + endpoint
    return f"{base}/{endpoint}"


def render_query(params: Mapping[str, object]) -> str:
    """Render params in iteration order; booleans follow JSON spelling."""
    pairs = []
    for key, value in params.items():
        if isinstance(value, bool):
            value = "true" if value else "false"
        pairs.append((str(key), str(value)))
    return urlencode(pairs, quote_via=quote)


def build_url(base: str, endpoint: str, params: Mapping[str, object] | None = None) -> httpx.URL:
    built = join_path(base, endpoint)
    if params:
        separator = "&" if "?" in endpoint else "?"
        built = f"{built}{separator}{render_query(params)}"

    try:
        url = httpx.URL(built)
    except httpx.InvalidURL as exc:
        raise InvalidUrlError(built) from exc
    if not url.scheme or not url.host:
        raise InvalidUrlError(built)
    return url
