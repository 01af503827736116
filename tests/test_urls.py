from __future__ import annotations

import pytest

from httpipe.exceptions import InvalidUrlError
from httpipe.urls import build_url, join_path


@pytest.mark.parametrize(
    ("base", "endpoint"),
    [
        ("http://localhost", "/v1/signup"),
        ("http://localhost", "v1/signup"),
        ("http://localhost/", "v1/signup"),
        ("http://localhost/", "/v1/signup"),
    ],
)
def test_build_url_uses_exactly_one_slash(base: str, endpoint: str) -> None:
    assert str(build_url(base, endpoint)) == "http://localhost/v1/signup"


def test_join_path_keeps_base_path() -> None:
    assert join_path("http://localhost/api", "v1") == "http://localhost/api/v1"


def test_build_url_with_params() -> None:
    url = build_url("http://localhost", "/v1/signup", {"param1": "testParam1"})

    assert str(url) == "http://localhost/v1/signup?param1=testParam1"


def test_build_url_keeps_param_order() -> None:
    params = {"zeta": "1", "alpha": "2", "mid": True}

    first = str(build_url("http://localhost", "/search", params))
    second = str(build_url("http://localhost", "/search", params))

    assert first == second == "http://localhost/search?zeta=1&alpha=2&mid=true"


def test_build_url_escapes_param_values() -> None:
    url = build_url("http://localhost", "/search", {"q": "a&b c"})

    assert url.params["q"] == "a&b c"


def test_build_url_extends_existing_query() -> None:
    url = build_url("http://localhost", "/search?page=2", {"q": "x"})

    assert str(url) == "http://localhost/search?page=2&q=x"


def test_build_url_without_params_has_no_query() -> None:
    assert str(build_url("http://localhost", "/v1", {})) == "http://localhost/v1"


@pytest.mark.parametrize("base", ["", "localhost", "http://localhost:notaport"])
def test_build_url_reports_invalid_url(base: str) -> None:
    with pytest.raises(InvalidUrlError) as excinfo:
        build_url(base, "/v1")

    assert excinfo.value.url.endswith("/v1")
