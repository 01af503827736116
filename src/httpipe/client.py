"""Synchronous and asynchronous httpipe clients."""

from __future__ import annotations

import asyncio
import logging
import os
import threading
from dataclasses import dataclass
from typing import Any, Generic, Mapping, TypeVar

import httpx

from ._version import __version__
from .config import (
    ClientConfig,
    client_headers,
    merge_headers,
    resolve_accept,
    resolve_content_type,
)
from .exceptions import HttpipeSendError, HttpipeTimeoutError, HttpipeUnknownError
from .headers import to_transport
from .request_options import CallOptions
from .responses import TypedResponse, peer_address, raise_for_status, to_typed_response
from .serialization import encode_body
from .urls import build_url

logger = logging.getLogger(__name__)

USER_AGENT = f"httpipe/{__version__}"
BASE_URL_ENV_VAR = "HTTPIPE_BASE_URL"
REDACTED_HEADERS = frozenset({"authorization", "proxy-authorization", "cookie", "x-api-key"})

T = TypeVar("T")
TransportT = TypeVar("TransportT", httpx.Client, httpx.AsyncClient)


@dataclass(eq=False)
class _ClientState(Generic[TransportT]):
    """Config and transport pair a call runs against; counters are guarded by the client lock."""

    config: ClientConfig
    transport: TransportT
    in_flight: int = 0
    retired: bool = False


@dataclass(frozen=True)
class _PreparedRequest:
    method: str
    url: httpx.URL
    headers: httpx.Headers
    content: bytes | None


def _resolve_call_options(options: CallOptions | None) -> CallOptions:
    return options or CallOptions()


def _transport_timeout(config: ClientConfig) -> httpx.Timeout:
    if config.timeout_ms is None:
        return httpx.Timeout(None)
    return httpx.Timeout(config.timeout_ms / 1000)


class _BaseHttpipeClient(Generic[TransportT]):
    user_agent = USER_AGENT

    def __init__(
        self,
        base_url: str | None = None,
        config: ClientConfig | None = None,
        *,
        base_url_env_var: str = BASE_URL_ENV_VAR,
    ) -> None:
        resolved = base_url or os.getenv(base_url_env_var)
        if not resolved:
            raise ValueError(f"base_url is required (pass it or set {base_url_env_var})")
        self.base_url = resolved
        self._lock = threading.Lock()
        # Retired states that still have calls in flight.
        self._draining: list[_ClientState[TransportT]] = []
        self._state: _ClientState[TransportT] = self._new_state(config or ClientConfig())

    @property
    def config(self) -> ClientConfig:
        return self._state.config

    def _build_transport(self, config: ClientConfig) -> TransportT:
        raise NotImplementedError

    def _discard_transport(self, transport: TransportT) -> None:
        raise NotImplementedError

    def _client_kwargs(self, config: ClientConfig) -> dict[str, Any]:
        return {
            "headers": to_transport(client_headers(config, self.user_agent)),
            "timeout": _transport_timeout(config),
        }

    def _new_state(self, config: ClientConfig) -> _ClientState[TransportT]:
        return _ClientState(config=config, transport=self._build_transport(config))

    def set_default_headers(self, headers: Mapping[str, str] | None) -> None:
        """Replace the persistent headers.

        The transport's default headers are fixed when it is built, so a new
        transport is created and swapped in. Requests already in flight keep
        the transport they started with; it is closed once they finish.
        """
        state = self._new_state(self._state.config.with_headers(headers))
        with self._lock:
            previous, self._state = self._state, state
            previous.retired = True
            idle = previous.in_flight == 0
            if not idle:
                self._draining.append(previous)
        if idle:
            self._discard_transport(previous.transport)

    def _acquire(self) -> _ClientState[TransportT]:
        with self._lock:
            state = self._state
            state.in_flight += 1
            return state

    def _release(self, state: _ClientState[TransportT]) -> bool:
        """Drop one in-flight call; True when a retired transport is now drained."""
        with self._lock:
            state.in_flight -= 1
            if state.retired and state.in_flight == 0:
                self._draining.remove(state)
                return True
        return False

    def _take_draining(self) -> list[_ClientState[TransportT]]:
        with self._lock:
            draining, self._draining = self._draining, []
        return draining

    def _prepare(
        self,
        state: _ClientState[TransportT],
        method: str,
        endpoint: str,
        data: Any,
        options: CallOptions,
    ) -> _PreparedRequest:
        url = build_url(self.base_url, endpoint, options.params)

        negotiated: dict[str, str] = {}
        content = None
        if data is not None:
            content_type = resolve_content_type(options, state.config)
            content = encode_body(data, content_type)
            negotiated["Content-Type"] = content_type.render()
        accept = resolve_accept(options, state.config)
        if accept is not None:
            negotiated["Accept"] = accept.render()

        headers = merge_headers(
            client_headers(state.config, self.user_agent),
            options.headers,
            negotiated,
        )
        return _PreparedRequest(
            method=method.upper(),
            url=url,
            headers=to_transport(headers),
            content=content,
        )

    @staticmethod
    def _log_dispatch(request: _PreparedRequest) -> None:
        if not logger.isEnabledFor(logging.DEBUG):
            return
        shown = {
            key: "[REDACTED]" if key.lower() in REDACTED_HEADERS else value
            for key, value in request.headers.items()
        }
        logger.debug("Sending %s %s headers=%s", request.method, request.url, shown)

    @staticmethod
    def _finish(
        request: _PreparedRequest,
        response: httpx.Response,
        options: CallOptions,
        response_type: Any,
    ) -> TypedResponse[Any]:
        logger.debug("Received %s for %s %s", response.status_code, request.method, request.url)
        address = peer_address(response)
        raise_for_status(response, address)
        return to_typed_response(
            response,
            response_type=response_type,
            deserialize_body=options.deserialize_body,
            address=address,
        )


class HttpipeClient(_BaseHttpipeClient[httpx.Client]):
    """Synchronous client."""

    def __init__(
        self,
        base_url: str | None = None,
        config: ClientConfig | None = None,
        *,
        transport: httpx.BaseTransport | None = None,
        base_url_env_var: str = BASE_URL_ENV_VAR,
    ) -> None:
        self._transport = transport
        super().__init__(base_url, config, base_url_env_var=base_url_env_var)

    def _build_transport(self, config: ClientConfig) -> httpx.Client:
        return httpx.Client(transport=self._transport, **self._client_kwargs(config))

    def __enter__(self) -> "HttpipeClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _discard_transport(self, transport: httpx.Client) -> None:
        transport.close()

    def close(self) -> None:
        for state in self._take_draining():
            state.transport.close()
        self._state.transport.close()

    def request(
        self,
        method: str,
        endpoint: str,
        data: Any = None,
        *,
        options: CallOptions | None = None,
        response_type: type[T] | None = None,
    ) -> TypedResponse[T]:
        call_options = _resolve_call_options(options)
        state = self._acquire()
        try:
            prepared = self._prepare(state, method, endpoint, data, call_options)
            self._log_dispatch(prepared)
            try:
                response = state.transport.request(
                    prepared.method,
                    prepared.url,
                    headers=prepared.headers,
                    content=prepared.content,
                )
            except httpx.TimeoutException as exc:
                raise HttpipeTimeoutError(exc) from exc
            except httpx.TransportError as exc:
                raise HttpipeSendError(exc) from exc
            except httpx.HTTPError as exc:
                raise HttpipeUnknownError(exc) from exc
        finally:
            if self._release(state):
                state.transport.close()
        return self._finish(prepared, response, call_options, response_type)

    def get(
        self,
        endpoint: str,
        *,
        data: Any = None,
        options: CallOptions | None = None,
        response_type: type[T] | None = None,
    ) -> TypedResponse[T]:
        return self.request("GET", endpoint, data, options=options, response_type=response_type)

    def delete(
        self,
        endpoint: str,
        *,
        data: Any = None,
        options: CallOptions | None = None,
        response_type: type[T] | None = None,
    ) -> TypedResponse[T]:
        return self.request("DELETE", endpoint, data, options=options, response_type=response_type)

    def post(
        self,
        endpoint: str,
        data: Any = None,
        *,
        options: CallOptions | None = None,
        response_type: type[T] | None = None,
    ) -> TypedResponse[T]:
        return self.request("POST", endpoint, data, options=options, response_type=response_type)

    def put(
        self,
        endpoint: str,
        data: Any = None,
        *,
        options: CallOptions | None = None,
        response_type: type[T] | None = None,
    ) -> TypedResponse[T]:
        return self.request("PUT", endpoint, data, options=options, response_type=response_type)

    def patch(
        self,
        endpoint: str,
        data: Any = None,
        *,
        options: CallOptions | None = None,
        response_type: type[T] | None = None,
    ) -> TypedResponse[T]:
        return self.request("PATCH", endpoint, data, options=options, response_type=response_type)


class AsyncHttpipeClient(_BaseHttpipeClient[httpx.AsyncClient]):
    """Asynchronous client."""

    def __init__(
        self,
        base_url: str | None = None,
        config: ClientConfig | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        base_url_env_var: str = BASE_URL_ENV_VAR,
    ) -> None:
        self._transport = transport
        # Transports retired outside a running loop, and close tasks scheduled inside one.
        self._idle_retired: list[httpx.AsyncClient] = []
        self._closing: set[asyncio.Task[None]] = set()
        super().__init__(base_url, config, base_url_env_var=base_url_env_var)

    def _build_transport(self, config: ClientConfig) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=self._transport, **self._client_kwargs(config))

    async def __aenter__(self) -> "AsyncHttpipeClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    def _discard_transport(self, transport: httpx.AsyncClient) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self._idle_retired.append(transport)
            return
        task = loop.create_task(transport.aclose())
        self._closing.add(task)
        task.add_done_callback(self._closing.discard)

    async def aclose(self) -> None:
        if self._closing:
            await asyncio.gather(*self._closing)
        idle, self._idle_retired = self._idle_retired, []
        for client in idle:
            await client.aclose()
        for state in self._take_draining():
            await state.transport.aclose()
        await self._state.transport.aclose()

    async def request(
        self,
        method: str,
        endpoint: str,
        data: Any = None,
        *,
        options: CallOptions | None = None,
        response_type: type[T] | None = None,
    ) -> TypedResponse[T]:
        call_options = _resolve_call_options(options)
        state = self._acquire()
        try:
            prepared = self._prepare(state, method, endpoint, data, call_options)
            self._log_dispatch(prepared)
            try:
                response = await state.transport.request(
                    prepared.method,
                    prepared.url,
                    headers=prepared.headers,
                    content=prepared.content,
                )
            except httpx.TimeoutException as exc:
                raise HttpipeTimeoutError(exc) from exc
            except httpx.TransportError as exc:
                raise HttpipeSendError(exc) from exc
            except httpx.HTTPError as exc:
                raise HttpipeUnknownError(exc) from exc
        finally:
            if self._release(state):
                await state.transport.aclose()
        return self._finish(prepared, response, call_options, response_type)

    async def get(
        self,
        endpoint: str,
        *,
        data: Any = None,
        options: CallOptions | None = None,
        response_type: type[T] | None = None,
    ) -> TypedResponse[T]:
        return await self.request("GET", endpoint, data, options=options, response_type=response_type)

    async def delete(
        self,
        endpoint: str,
        *,
        data: Any = None,
        options: CallOptions | None = None,
        response_type: type[T] | None = None,
    ) -> TypedResponse[T]:
        return await self.request("DELETE", endpoint, data, options=options, response_type=response_type)

    async def post(
        self,
        endpoint: str,
        data: Any = None,
        *,
        options: CallOptions | None = None,
        response_type: type[T] | None = None,
    ) -> TypedResponse[T]:
        return await self.request("POST", endpoint, data, options=options, response_type=response_type)

    async def put(
        self,
        endpoint: str,
        data: Any = None,
        *,
        options: CallOptions | None = None,
        response_type: type[T] | None = None,
    ) -> TypedResponse[T]:
        return await self.request("PUT", endpoint, data, options=options, response_type=response_type)

    async def patch(
        self,
        endpoint: str,
        data: Any = None,
        *,
        options: CallOptions | None = None,
        response_type: type[T] | None = None,
    ) -> TypedResponse[T]:
        return await self.request("PATCH", endpoint, data, options=options, response_type=response_type)
