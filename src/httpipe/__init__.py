"""Configurable HTTP request/response pipeline on top of httpx."""

import logging

from ._version import __version__
from .client import AsyncHttpipeClient, HttpipeClient
from .config import ClientConfig
from .content_type import ContentType
from .exceptions import (
    DeserializationError,
    HeaderParseError,
    HttpipeError,
    HttpipeNetworkError,
    HttpipeSendError,
    HttpipeTimeoutError,
    HttpipeUnknownError,
    InvalidUrlError,
    SerialFormat,
    SerializationError,
    UnrecognizedContentTypeError,
)
from .request_options import CallOptions
from .responses import TypedResponse

__all__ = [
    "AsyncHttpipeClient",
    "CallOptions",
    "ClientConfig",
    "ContentType",
    "DeserializationError",
    "HeaderParseError",
    "HttpipeClient",
    "HttpipeError",
    "HttpipeNetworkError",
    "HttpipeSendError",
    "HttpipeTimeoutError",
    "HttpipeUnknownError",
    "InvalidUrlError",
    "SerialFormat",
    "SerializationError",
    "TypedResponse",
    "UnrecognizedContentTypeError",
    "__version__",
]

logging.getLogger(__name__).addHandler(logging.NullHandler())
