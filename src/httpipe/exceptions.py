"""Error taxonomy raised by the httpipe clients."""

from __future__ import annotations

from enum import Enum


class SerialFormat(str, Enum):
    """Wire format a (de)serialization failure happened in."""

    JSON = "json"
    XML = "xml"
    URL_ENCODED = "urlencoded"


class HttpipeError(Exception):
    """Base exception for all httpipe failures."""

    def __init__(self, message: str, *, cause: Exception | None = None) -> None:
        super().__init__(message)
        self.cause = cause


class InvalidUrlError(HttpipeError):
    """Raised when base URL, endpoint and params do not form a valid URL."""

    def __init__(self, url: str) -> None:
        super().__init__(f"{url} is not a valid Url")
        self.url = url


class HeaderParseError(HttpipeError):
    """Raised when a header entry cannot be converted for the transport."""

    def __init__(self, key: str, value: str) -> None:
        super().__init__(f"Unable to parse header: {key} => {value}")
        self.key = key
        self.value = value


class UnrecognizedContentTypeError(HttpipeError, ValueError):
    """Raised when a MIME string is not one of the supported content types."""

    def __init__(self, value: str) -> None:
        super().__init__(f"Unrecognized content type: {value!r}")
        self.value = value


class HttpipeSendError(HttpipeError):
    """Raised when the transport fails before any response is received."""

    def __init__(self, cause: Exception) -> None:
        super().__init__(f"Unable to send request: {cause}", cause=cause)


class HttpipeTimeoutError(HttpipeSendError):
    """Raised when the transport gives up after the configured timeout."""


class HttpipeNetworkError(HttpipeError):
    """Raised for 4xx and 5xx responses."""

    def __init__(
        self,
        status_code: int,
        *,
        peer_address: tuple[str, int] | None = None,
        raw_body: bytes | None = None,
    ) -> None:
        self.status_code = status_code
        self.peer_address = peer_address
        self.raw_body = raw_body
        super().__init__(self._describe())

    def _describe(self) -> str:
        origin = f"{self.peer_address[0]}:{self.peer_address[1]}" if self.peer_address else ""
        body = ""
        if self.raw_body:
            try:
                body = self.raw_body.decode("utf-8")
            except UnicodeDecodeError:
                body = ""
        return f"Error -- Status: {self.status_code}, Origin: {origin}, Body: {body}"


class SerializationError(HttpipeError):
    """Raised when a request payload cannot be encoded."""

    def __init__(self, format: SerialFormat, cause: Exception) -> None:
        super().__init__(f"Unable to serialize request body as {format.value}: {cause}", cause=cause)
        self.format = format


class DeserializationError(HttpipeError):
    """Raised when a response body cannot be decoded into the expected type."""

    def __init__(self, format: SerialFormat, cause: Exception) -> None:
        super().__init__(f"Unable to deserialize response body as {format.value}: {cause}", cause=cause)
        self.format = format


class HttpipeUnknownError(HttpipeError):
    """Catch-all for unexpected lower-level failures."""

    def __init__(self, cause: Exception) -> None:
        super().__init__(str(cause), cause=cause)
