"""Per-call overrides for the httpipe clients."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping

from .content_type import ContentType


@dataclass(frozen=True)
class CallOptions:
    headers: Mapping[str, str] | None = None
    accept: ContentType | None = None
    content_type: ContentType | None = None
    params: Mapping[str, object] | None = None
    deserialize_body: bool = True
