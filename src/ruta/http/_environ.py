"""Build a RequestDescriptor from a WSGI environment (PEP 3333).

All environment access happens here, once per request. The descriptor is
cached in the environ itself, so every caller handling the same request
sees the same object.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any
from urllib.parse import parse_qsl, quote, urlsplit

from ruta._logging import get_logger
from ruta.http._request import (
    DEFAULT_PORTS,
    MissingHostError,
    RequestDescriptor,
    RequestError,
    normalize_header_name,
)
from ruta.http._resolver import DescriptorResolver

if TYPE_CHECKING:
    from collections.abc import MutableMapping

logger = get_logger(__name__)

CACHE_KEY = "ruta.request_descriptor"

# CGI carries these two without the HTTP_ prefix.
_CGI_HEADERS = (("CONTENT_TYPE", "content-type"), ("CONTENT_LENGTH", "content-length"))


def build_from_environment(environ: MutableMapping[str, Any]) -> RequestDescriptor:
    """Return the RequestDescriptor for the request ``environ`` describes.

    The first call parses the environ and stores the result under
    CACHE_KEY; later calls return that object without reading anything
    else. Nothing is cached when parsing fails.

    Raises:
        MissingHostError: Neither HTTP_HOST nor SERVER_NAME is usable.
        RequestError: The host header carries an invalid port.
    """
    cached = environ.get(CACHE_KEY)
    if isinstance(cached, RequestDescriptor):
        return cached

    descriptor = _parse_environ(environ)
    environ[CACHE_KEY] = descriptor
    logger.debug(
        "request_descriptor_built",
        method=descriptor.method,
        scheme=descriptor.scheme,
        host=descriptor.host,
        port=descriptor.port,
        path=descriptor.path,
    )
    return descriptor


class RequestScope:
    """Per-request context handed to request handlers.

    The descriptor is built lazily on first access.
    """

    def __init__(self, environ: MutableMapping[str, Any]) -> None:
        self.environ = environ

    @property
    def descriptor(self) -> RequestDescriptor:
        return build_from_environment(self.environ)

    def resolver(self) -> DescriptorResolver:
        """A FieldResolver backed by this request's descriptor."""
        return DescriptorResolver(self.descriptor)


def _parse_environ(environ: MutableMapping[str, Any]) -> RequestDescriptor:
    scheme = _scheme(environ)
    host, port = _host_and_port(environ, scheme)

    target = _request_target(environ)
    target, _, fragment = target.partition("#")
    path, _, query_string = target.partition("?")
    if "://" in path:
        # absolute-form request target
        path = urlsplit(path).path
    if not path.startswith("/"):
        path = "/" + path

    return RequestDescriptor(
        scheme=scheme,
        host=host,
        port=port,
        path=path,
        query_string=query_string,
        query_params=dict(parse_qsl(query_string, keep_blank_values=True)),
        fragment=fragment or None,
        method=str(environ.get("REQUEST_METHOD") or "GET").upper(),
        headers=_headers(environ),
    )


def _scheme(environ: MutableMapping[str, Any]) -> str:
    https = environ.get("HTTPS")
    if https and str(https).lower() != "off":
        return "https"
    url_scheme = environ.get("wsgi.url_scheme")
    if url_scheme in DEFAULT_PORTS:
        return url_scheme
    return "http"


def _host_and_port(environ: MutableMapping[str, Any], scheme: str) -> tuple[str, int]:
    netloc = environ.get("HTTP_HOST")
    if not netloc:
        server_name = environ.get("SERVER_NAME")
        if not server_name:
            raise MissingHostError
        netloc = str(server_name)
        server_port = str(environ.get("SERVER_PORT") or "")
        if server_port.isdigit() and int(server_port) != DEFAULT_PORTS[scheme]:
            netloc = f"{netloc}:{server_port}"

    parts = urlsplit(f"//{netloc}")
    if not parts.hostname:
        raise MissingHostError(f"unparseable host {netloc!r}")
    try:
        port = parts.port
    except ValueError as e:
        msg = f"invalid port in host {netloc!r}"
        raise RequestError(msg) from e
    return parts.hostname, port or DEFAULT_PORTS[scheme]


def _request_target(environ: MutableMapping[str, Any]) -> str:
    request_uri = environ.get("REQUEST_URI")
    if request_uri:
        return str(request_uri)
    # PEP 3333 native strings hold the raw bytes decoded as latin-1.
    raw_path = str(environ.get("SCRIPT_NAME", "")) + str(environ.get("PATH_INFO", ""))
    path = quote(raw_path, encoding="latin-1")
    query = environ.get("QUERY_STRING")
    if query:
        return f"{path}?{query}"
    return path


def _headers(environ: MutableMapping[str, Any]) -> dict[str, str]:
    headers: dict[str, str] = {}
    for key, value in environ.items():
        if key.startswith("HTTP_") and isinstance(value, str):
            headers[normalize_header_name(key[5:])] = value
    for key, name in _CGI_HEADERS:
        value = environ.get(key)
        if value and name not in headers:
            headers[name] = str(value)
    return headers
