"""Tests for RequestDescriptor and its construction from a WSGI environ."""

from __future__ import annotations

from types import SimpleNamespace
from typing import Any

import pytest

from ruta.http import (
    CACHE_KEY,
    MissingHostError,
    RequestDescriptor,
    RequestError,
    RequestScope,
    build_from_environment,
)


def make_environ(**overrides: Any) -> dict[str, Any]:
    environ: dict[str, Any] = {
        "REQUEST_METHOD": "GET",
        "HTTP_HOST": "example.com",
        "REQUEST_URI": "/cnt/action/other/data",
        "wsgi.url_scheme": "http",
    }
    environ.update(overrides)
    return {k: v for k, v in environ.items() if v is not None}


class CountingEnviron(dict):
    """A dict that records every key read through it."""

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.reads: list[str] = []

    def __getitem__(self, key: str) -> Any:
        self.reads.append(key)
        return super().__getitem__(key)

    def get(self, key: str, default: Any = None) -> Any:
        self.reads.append(key)
        return super().get(key, default)

    def items(self) -> Any:
        self.reads.append("*items*")
        return super().items()


class TestScheme:
    def test_http_default(self) -> None:
        d = build_from_environment(make_environ(**{"wsgi.url_scheme": None}))
        assert d.scheme == "http"

    def test_https_flag(self) -> None:
        d = build_from_environment(make_environ(HTTPS="on"))
        assert d.scheme == "https"

    def test_https_off(self) -> None:
        d = build_from_environment(make_environ(HTTPS="off"))
        assert d.scheme == "http"

    def test_https_off_case_insensitive(self) -> None:
        d = build_from_environment(make_environ(HTTPS="OFF"))
        assert d.scheme == "http"

    def test_wsgi_url_scheme(self) -> None:
        d = build_from_environment(make_environ(**{"wsgi.url_scheme": "https"}))
        assert d.scheme == "https"


class TestHostAndPort:
    def test_default_port_http(self) -> None:
        d = build_from_environment(make_environ())
        assert d.host == "example.com"
        assert d.port == 80

    def test_default_port_https(self) -> None:
        d = build_from_environment(make_environ(HTTPS="1"))
        assert d.port == 443

    def test_explicit_port(self) -> None:
        d = build_from_environment(make_environ(HTTP_HOST="example.com:8443", HTTPS="on"))
        assert d.host == "example.com"
        assert d.port == 8443

    def test_ipv6_host(self) -> None:
        d = build_from_environment(make_environ(HTTP_HOST="[::1]:8080"))
        assert d.host == "::1"
        assert d.port == 8080
        assert d.url == "http://[::1]:8080/cnt/action/other/data"

    def test_server_name_fallback(self) -> None:
        environ = make_environ(HTTP_HOST=None, SERVER_NAME="internal", SERVER_PORT="8000")
        d = build_from_environment(environ)
        assert d.host == "internal"
        assert d.port == 8000

    def test_server_name_default_port(self) -> None:
        environ = make_environ(HTTP_HOST=None, SERVER_NAME="internal", SERVER_PORT="80")
        assert build_from_environment(environ).port == 80

    def test_missing_host(self) -> None:
        environ = make_environ(HTTP_HOST=None)
        with pytest.raises(MissingHostError):
            build_from_environment(environ)
        assert CACHE_KEY not in environ

    def test_empty_host(self) -> None:
        with pytest.raises(MissingHostError):
            build_from_environment(make_environ(HTTP_HOST=""))

    def test_invalid_port(self) -> None:
        with pytest.raises(RequestError, match="invalid port"):
            build_from_environment(make_environ(HTTP_HOST="example.com:http"))


class TestRequestTarget:
    def test_path(self) -> None:
        d = build_from_environment(make_environ())
        assert d.path == "/cnt/action/other/data"
        assert d.request_uri == d.path

    def test_no_query_string(self) -> None:
        d = build_from_environment(make_environ())
        assert d.query_string == ""
        assert dict(d.query_params) == {}

    def test_query_last_wins(self) -> None:
        d = build_from_environment(make_environ(REQUEST_URI="/search?a=1&a=2"))
        assert dict(d.query_params) == {"a": "2"}
        assert d.query_string == "a=1&a=2"

    def test_query_blank_values_kept(self) -> None:
        d = build_from_environment(make_environ(REQUEST_URI="/search?q=&debug"))
        assert dict(d.query_params) == {"q": "", "debug": ""}

    def test_query_decoded(self) -> None:
        d = build_from_environment(make_environ(REQUEST_URI="/s?q=hello+world&t=%C3%A9"))
        assert d.query_param("q") == "hello world"
        assert d.query_param("t") == "é"

    def test_fragment(self) -> None:
        d = build_from_environment(make_environ(REQUEST_URI="/docs?x=1#intro"))
        assert d.fragment == "intro"
        assert d.path == "/docs"
        assert d.query_param("x") == "1"

    def test_fragment_absent(self) -> None:
        assert build_from_environment(make_environ()).fragment is None

    def test_path_info_fallback(self) -> None:
        environ = make_environ(
            REQUEST_URI=None, SCRIPT_NAME="/app", PATH_INFO="/a b", QUERY_STRING="x=1"
        )
        d = build_from_environment(environ)
        assert d.path == "/app/a%20b"
        assert d.query_param("x") == "1"

    def test_non_ascii_path_info_matches_request_uri(self) -> None:
        # "/café" as UTF-8 bytes, carried latin-1 decoded per PEP 3333
        raw = "/café".encode().decode("latin-1")
        via_path_info = build_from_environment(make_environ(REQUEST_URI=None, PATH_INFO=raw))
        via_request_uri = build_from_environment(make_environ(REQUEST_URI="/caf%C3%A9"))
        assert via_path_info.path == "/caf%C3%A9"
        assert via_path_info.path == via_request_uri.path

    def test_empty_target_is_root(self) -> None:
        d = build_from_environment(make_environ(REQUEST_URI=None))
        assert d.path == "/"

    def test_absolute_form_target(self) -> None:
        d = build_from_environment(make_environ(REQUEST_URI="http://example.com/p?q=1"))
        assert d.path == "/p"
        assert d.query_param("q") == "1"


class TestMethodAndHeaders:
    def test_method_uppercased(self) -> None:
        assert build_from_environment(make_environ(REQUEST_METHOD="post")).method == "POST"

    def test_method_default(self) -> None:
        assert build_from_environment(make_environ(REQUEST_METHOD=None)).method == "GET"

    def test_header_names_normalized(self) -> None:
        d = build_from_environment(
            make_environ(HTTP_X_REQUEST_ID="abc", HTTP_ACCEPT="text/html")
        )
        assert d.headers["x-request-id"] == "abc"
        assert d.headers["host"] == "example.com"
        assert d.header("X-Request-Id") == "abc"
        assert d.header("X_REQUEST_ID") == "abc"

    def test_content_headers_merged(self) -> None:
        d = build_from_environment(
            make_environ(CONTENT_TYPE="application/json", CONTENT_LENGTH="12")
        )
        assert d.headers["content-type"] == "application/json"
        assert d.headers["content-length"] == "12"

    def test_empty_content_headers_skipped(self) -> None:
        d = build_from_environment(make_environ(CONTENT_TYPE="", CONTENT_LENGTH=""))
        assert "content-type" not in d.headers
        assert "content-length" not in d.headers

    def test_http_content_type_wins(self) -> None:
        d = build_from_environment(
            make_environ(HTTP_CONTENT_TYPE="text/plain", CONTENT_TYPE="application/json")
        )
        assert d.headers["content-type"] == "text/plain"

    def test_duplicate_header_last_wins(self) -> None:
        environ = make_environ()
        environ["HTTP_X_TRACE"] = "first"
        environ["HTTP_x-trace"] = "second"
        d = build_from_environment(environ)
        assert d.headers["x-trace"] == "second"

    def test_non_string_http_entries_ignored(self) -> None:
        d = build_from_environment(make_environ(HTTP_WEIRD=42))
        assert "weird" not in d.headers


class TestCaching:
    def test_second_call_returns_cached_object(self) -> None:
        environ = make_environ()
        first = build_from_environment(environ)
        second = build_from_environment(environ)
        assert first is second
        assert environ[CACHE_KEY] is first

    def test_second_call_does_not_reread_environ(self) -> None:
        environ = CountingEnviron(make_environ())
        first = build_from_environment(environ)
        assert "HTTP_HOST" in environ.reads
        environ.reads.clear()

        second = build_from_environment(environ)
        assert second is first
        assert environ.reads == [CACHE_KEY]

    def test_failure_caches_nothing(self) -> None:
        environ = make_environ(HTTP_HOST=None)
        with pytest.raises(MissingHostError):
            build_from_environment(environ)
        environ["HTTP_HOST"] = "late.example"
        assert build_from_environment(environ).host == "late.example"

    def test_request_scope_is_lazy(self) -> None:
        environ = make_environ()
        scope = RequestScope(environ)
        assert CACHE_KEY not in environ
        assert scope.descriptor is scope.descriptor
        assert scope.resolver().resolve("host") == "example.com"


class TestDescriptor:
    def test_immutable(self) -> None:
        d = RequestDescriptor(host="example.com")
        with pytest.raises(AttributeError):
            d.host = "other"  # type: ignore[misc]
        with pytest.raises(TypeError):
            d.headers["x"] = "y"  # type: ignore[index]

    def test_direct_construction_normalizes_headers(self) -> None:
        d = RequestDescriptor(headers={"Content_Type": "text/html"})
        assert dict(d.headers) == {"content-type": "text/html"}

    def test_port_defaults_from_scheme(self) -> None:
        https = RequestDescriptor(scheme="https", host="example.com")
        assert https.port == 443
        assert https.url == "https://example.com/"
        assert RequestDescriptor(scheme="http", host="example.com").port == 80

    def test_explicit_port_kept(self) -> None:
        d = RequestDescriptor(scheme="https", host="example.com", port=8443)
        assert d.url == "https://example.com:8443/"

    def test_url_default_port_omitted(self) -> None:
        d = RequestDescriptor(scheme="https", host="example.com", port=443, path="/a")
        assert d.url == "https://example.com/a"

    def test_url_with_everything(self) -> None:
        d = RequestDescriptor(
            scheme="http",
            host="example.com",
            port=8080,
            path="/a",
            query_string="x=1",
            query_params={"x": "1"},
            fragment="top",
        )
        assert d.url == "http://example.com:8080/a?x=1#top"

    def test_info_request(self) -> None:
        d = build_from_environment(
            make_environ(REQUEST_URI="/blog?page=2#c", HTTP_ACCEPT="text/html")
        )
        assert d.info_request() == {
            "scheme": "http",
            "host": "example.com",
            "port": 80,
            "requestUri": "/blog",
            "queryString": {"page": "2"},
            "fragment": "c",
            "method": "GET",
            "headers": {"host": "example.com", "accept": "text/html"},
        }

    def test_info_request_without_meta(self) -> None:
        d = build_from_environment(make_environ())
        info = d.info_request(include_meta=False)
        assert set(info) == {"scheme", "host", "port", "requestUri", "queryString", "fragment"}

    def test_info_namespace(self) -> None:
        d = build_from_environment(make_environ(HTTPS="on"))
        ns = d.info_namespace()
        assert isinstance(ns, SimpleNamespace)
        assert ns.scheme == "https"
        assert ns.port == 443
        assert ns.requestUri == "/cnt/action/other/data"
