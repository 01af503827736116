"""Client-wide configuration and the rules for layering it with per-call options."""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from types import MappingProxyType
from typing import Mapping

from .content_type import ContentType
from .request_options import CallOptions

TIMEOUT_ENV_VAR = "HTTPIPE_TIMEOUT_MS"
ACCEPT_ENV_VAR = "HTTPIPE_ACCEPT"
CONTENT_TYPE_ENV_VAR = "HTTPIPE_CONTENT_TYPE"


@dataclass(frozen=True)
class ClientConfig:
    """Persistent defaults applied to every request sent by a client.

    `accept` and `content_type`, when set, are also injected as default
    `Accept` / `Content-Type` headers on the transport.
    """

    timeout_ms: int | None = None
    headers: Mapping[str, str] | None = None
    accept: ContentType | None = None
    content_type: ContentType | None = None

    def __post_init__(self) -> None:
        if self.timeout_ms is not None and self.timeout_ms <= 0:
            raise ValueError("timeout_ms must be greater than 0")
        if self.headers is not None:
            # Detach from the caller's mapping; headers only change through with_headers.
            object.__setattr__(self, "headers", MappingProxyType(dict(self.headers)))

    @classmethod
    def from_env(cls, **overrides: object) -> "ClientConfig":
        """Build a config from HTTPIPE_* environment variables; keyword arguments win."""
        values: dict[str, object] = {}
        timeout = os.getenv(TIMEOUT_ENV_VAR)
        if timeout:
            values["timeout_ms"] = int(timeout)
        accept = os.getenv(ACCEPT_ENV_VAR)
        if accept:
            values["accept"] = ContentType.parse(accept)
        content_type = os.getenv(CONTENT_TYPE_ENV_VAR)
        if content_type:
            values["content_type"] = ContentType.parse(content_type)
        values.update(overrides)
        return cls(**values)  # type: ignore[arg-type]

    def with_headers(self, headers: Mapping[str, str] | None) -> "ClientConfig":
        return replace(self, headers=headers)


def merge_headers(*layers: Mapping[str, str] | None) -> dict[str, str]:
    """Merge header layers case-insensitively; later layers win and keep their casing."""
    merged: dict[str, str] = {}
    names: dict[str, str] = {}
    for layer in layers:
        if not layer:
            continue
        for key, value in layer.items():
            key = str(key)
            previous = names.get(key.lower())
            if previous is not None:
                del merged[previous]
            names[key.lower()] = key
            merged[key] = str(value)
    return merged


def injected_headers(config: ClientConfig, user_agent: str) -> dict[str, str]:
    injected = {"User-Agent": user_agent}
    if config.content_type is not None:
        injected["Content-Type"] = config.content_type.render()
    if config.accept is not None:
        injected["Accept"] = config.accept.render()
    return injected


def client_headers(config: ClientConfig, user_agent: str) -> dict[str, str]:
    """Headers the transport is built with: injected defaults overridden by persistent ones."""
    return merge_headers(injected_headers(config, user_agent), config.headers)


def resolve_content_type(options: CallOptions, config: ClientConfig) -> ContentType:
    if options.content_type is not None:
        return options.content_type
    if config.content_type is not None:
        return config.content_type
    return ContentType.default()


def resolve_accept(options: CallOptions, config: ClientConfig) -> ContentType | None:
    if options.accept is not None:
        return options.accept
    return config.accept
