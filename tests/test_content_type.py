from __future__ import annotations

import pytest

from httpipe.content_type import ContentType
from httpipe.exceptions import UnrecognizedContentTypeError


@pytest.mark.parametrize(
    ("content_type", "mime"),
    [
        (ContentType.JSON, "application/json"),
        (ContentType.TEXT_XML, "text/xml"),
        (ContentType.APPLICATION_XML, "application/xml"),
        (ContentType.URL_ENCODED, "application/x-www-form-urlencoded"),
    ],
)
def test_render_and_parse_round_trip(content_type: ContentType, mime: str) -> None:
    assert content_type.render() == mime
    assert str(content_type) == mime
    assert ContentType.parse(content_type.render()) is content_type


def test_default_is_json() -> None:
    assert ContentType.default() is ContentType.JSON


def test_parse_is_exact_match() -> None:
    with pytest.raises(UnrecognizedContentTypeError) as excinfo:
        ContentType.parse("application/json; charset=utf-8")
    assert excinfo.value.value == "application/json; charset=utf-8"

    with pytest.raises(ValueError):
        ContentType.parse("*/*")


def test_xml_variants_are_flagged() -> None:
    assert ContentType.TEXT_XML.is_xml
    assert ContentType.APPLICATION_XML.is_xml
    assert not ContentType.JSON.is_xml
