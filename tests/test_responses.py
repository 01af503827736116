from __future__ import annotations

import httpx
import pytest

from httpipe.exceptions import DeserializationError, HttpipeNetworkError
from httpipe.responses import is_error_status, peer_address, raise_for_status, to_typed_response


class _FakeStream:
    def __init__(self, address: object = None, error: Exception | None = None) -> None:
        self.address = address
        self.error = error

    def get_extra_info(self, info: str) -> object:
        if self.error is not None:
            raise self.error
        return self.address if info == "server_addr" else None


@pytest.mark.parametrize("status_code", [400, 404, 429, 499, 500, 503, 599])
def test_error_statuses_raise_network_error(status_code: int) -> None:
    response = httpx.Response(status_code, content=b"boom")

    with pytest.raises(HttpipeNetworkError) as excinfo:
        raise_for_status(response)

    assert excinfo.value.status_code == status_code
    assert excinfo.value.raw_body == b"boom"
    assert excinfo.value.peer_address is None


@pytest.mark.parametrize("status_code", [200, 201, 204, 301, 304, 399])
def test_other_statuses_pass_through(status_code: int) -> None:
    raise_for_status(httpx.Response(status_code))

    assert not is_error_status(status_code)


def test_network_error_message_includes_origin_and_body() -> None:
    error = HttpipeNetworkError(502, peer_address=("127.0.0.1", 8080), raw_body=b"bad gateway")

    assert str(error) == "Error -- Status: 502, Origin: 127.0.0.1:8080, Body: bad gateway"


def test_peer_address_from_network_stream() -> None:
    response = httpx.Response(200, extensions={"network_stream": _FakeStream(("10.0.0.5", 443))})

    assert peer_address(response) == ("10.0.0.5", 443)


def test_peer_address_missing_or_closed() -> None:
    assert peer_address(httpx.Response(200)) is None
    closed = httpx.Response(200, extensions={"network_stream": _FakeStream(error=OSError("closed"))})
    assert peer_address(closed) is None


def test_error_carries_peer_address() -> None:
    response = httpx.Response(500, extensions={"network_stream": _FakeStream(("10.0.0.5", 443))})

    with pytest.raises(HttpipeNetworkError) as excinfo:
        raise_for_status(response)

    assert excinfo.value.peer_address == ("10.0.0.5", 443)


def test_typed_response_decodes_body() -> None:
    response = httpx.Response(200, content=b'{"item1":"a"}', headers={"Content-Type": "application/json"})

    typed = to_typed_response(response, response_type=dict[str, str])

    assert typed.status_code == 200
    assert typed.body == {"item1": "a"}
    assert typed.raw_body == b'{"item1":"a"}'
    assert typed.headers["content-type"] == "application/json"


def test_typed_response_skips_decoding_when_disabled() -> None:
    response = httpx.Response(200, content=b'{"item1":"a"}', headers={"Content-Type": "application/json"})

    typed = to_typed_response(response, response_type=dict, deserialize_body=False)

    assert typed.body is None
    assert typed.raw_body == b'{"item1":"a"}'


def test_typed_response_empty_body_is_not_an_error() -> None:
    typed = to_typed_response(httpx.Response(204), response_type=dict)

    assert typed.body is None
    assert typed.raw_body == b""


def test_typed_response_raises_on_invalid_json() -> None:
    with pytest.raises(DeserializationError):
        to_typed_response(httpx.Response(200, content=b"not json"), response_type=dict)
