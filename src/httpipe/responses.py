"""Response classification and the typed response returned by the clients."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

import httpx

from .exceptions import HttpipeNetworkError
from .headers import from_transport
from .serialization import decode_body

T = TypeVar("T")


@dataclass(frozen=True)
class TypedResponse(Generic[T]):
    status_code: int
    body: T | None = None
    raw_body: bytes | None = None
    headers: dict[str, str] = field(default_factory=dict)
    peer_address: tuple[str, int] | None = None


def is_error_status(status_code: int) -> bool:
    return 400 <= status_code <= 599


def peer_address(response: httpx.Response) -> tuple[str, int] | None:
    """Remote address of the connection that produced `response`, when the transport exposes it."""
    stream = response.extensions.get("network_stream")
    if stream is None:
        return None
    try:
        address = stream.get_extra_info("server_addr")
    except OSError:
        # The connection may already be closed once the body is read.
        return None
    if not address:
        return None
    return str(address[0]), int(address[1])


def raise_for_status(response: httpx.Response, address: tuple[str, int] | None = None) -> None:
    if not is_error_status(response.status_code):
        return
    raise HttpipeNetworkError(
        response.status_code,
        peer_address=address if address is not None else peer_address(response),
        raw_body=response.content,
    )


def to_typed_response(
    response: httpx.Response,
    *,
    response_type: Any = None,
    deserialize_body: bool = True,
    address: tuple[str, int] | None = None,
) -> TypedResponse[Any]:
    raw_body = response.content
    body = None
    if deserialize_body and raw_body:
        body = decode_body(raw_body, response_type)
    return TypedResponse(
        status_code=response.status_code,
        body=body,
        raw_body=raw_body,
        headers=from_transport(response.headers),
        peer_address=address,
    )
