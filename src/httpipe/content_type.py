"""Supported body content types."""

from __future__ import annotations

from enum import Enum

from .exceptions import UnrecognizedContentTypeError


class ContentType(str, Enum):
    """Controls the `Content-Type`/`Accept` headers and how request bodies are encoded."""

    JSON = "application/json"
    TEXT_XML = "text/xml"
    APPLICATION_XML = "application/xml"
    URL_ENCODED = "application/x-www-form-urlencoded"

    @classmethod
    def parse(cls, value: str) -> "ContentType":
        for member in cls:
            if member.value == value:
                return member
        raise UnrecognizedContentTypeError(value)

    @classmethod
    def default(cls) -> "ContentType":
        return cls.JSON

    def render(self) -> str:
        return self.value

    @property
    def is_xml(self) -> bool:
        return self in (ContentType.TEXT_XML, ContentType.APPLICATION_XML)

    def __str__(self) -> str:
        return self.value
