"""RequestDescriptor: immutable snapshot of one inbound HTTP request.

Holds the URL components (scheme, host, port, path, query, fragment),
the method, and headers keyed by lower-cased, hyphenated name.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType, SimpleNamespace
from typing import TYPE_CHECKING, Any

from ruta._rule import RutaError

if TYPE_CHECKING:
    from collections.abc import Mapping

DEFAULT_PORTS = MappingProxyType({"http": 80, "https": 443})


class RequestError(RutaError):
    """Errors from request introspection."""


class MissingHostError(RequestError):
    """The environment carries no usable host information."""

    def __init__(self, source: str = "environment has no HTTP_HOST or SERVER_NAME") -> None:
        self.source = source
        super().__init__(f"cannot resolve request host: {source}")


def normalize_header_name(name: str) -> str:
    """Lower-case a header name and map underscores to hyphens."""
    return name.lower().replace("_", "-")


@dataclass(frozen=True, slots=True)
class RequestDescriptor:
    """Read-only view of the current request.

    Build one with ``build_from_environment()``; direct construction is
    meant for tests and for hosts that are not WSGI. Without an explicit
    port, the scheme default applies (443 for https, 80 otherwise).
    """

    scheme: str = "http"
    host: str = "localhost"
    port: int | None = None
    path: str = "/"
    query_string: str = ""
    query_params: Mapping[str, str] = field(default_factory=dict)
    fragment: str | None = None
    method: str = "GET"
    headers: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.port is None:
            object.__setattr__(self, "port", DEFAULT_PORTS.get(self.scheme, 80))
        # Freeze the mappings so the snapshot cannot be mutated after build.
        object.__setattr__(self, "query_params", MappingProxyType(dict(self.query_params)))
        object.__setattr__(
            self,
            "headers",
            MappingProxyType(
                {normalize_header_name(k): v for k, v in self.headers.items()}
            ),
        )

    @property
    def request_uri(self) -> str:
        """Alias for the path component."""
        return self.path

    @property
    def url(self) -> str:
        """Absolute URL rebuilt from the components.

        The port is omitted when it is the scheme's default.
        """
        netloc = self.host
        if ":" in netloc:
            netloc = f"[{netloc}]"
        if DEFAULT_PORTS.get(self.scheme) != self.port:
            netloc = f"{netloc}:{self.port}"
        url = f"{self.scheme}://{netloc}{self.path}"
        if self.query_string:
            url = f"{url}?{self.query_string}"
        if self.fragment:
            url = f"{url}#{self.fragment}"
        return url

    def header(self, name: str) -> str | None:
        """Get a header value by name (case-insensitive, ``_`` == ``-``)."""
        return self.headers.get(normalize_header_name(name))

    def query_param(self, name: str) -> str | None:
        """Get a query parameter by name."""
        return self.query_params.get(name)

    def info_request(self, *, include_meta: bool = True) -> dict[str, Any]:
        """Return the URL components as a plain dict.

        Keys: scheme, host, port, requestUri, queryString, fragment, and
        with ``include_meta`` also method and headers.
        """
        info: dict[str, Any] = {
            "scheme": self.scheme,
            "host": self.host,
            "port": self.port,
            "requestUri": self.path,
            "queryString": dict(self.query_params),
            "fragment": self.fragment,
        }
        if include_meta:
            info["method"] = self.method
            info["headers"] = dict(self.headers)
        return info

    def info_namespace(self, *, include_meta: bool = True) -> SimpleNamespace:
        """Same as info_request(), with attribute access."""
        return SimpleNamespace(**self.info_request(include_meta=include_meta))
