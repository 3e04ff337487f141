"""FieldResolver implementation backed by a RequestDescriptor.

Plain field names map to descriptor attributes. Prefixed names reach into
collections: ``header.<name>``, ``query.<name>`` and ``segment.<n>``
(0-based, empty segments skipped). Unknown fields resolve to None.

``request_uri`` is the whole path, e.g. ``/api/users``, so a rule such as
``request_uri: equal [api, blog]`` never matches a real request. To test
the first path component (the controller-style section name), use
``segment.0`` instead.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ruta._types import MatchingData
    from ruta.http._request import RequestDescriptor


@dataclass(frozen=True, slots=True)
class DescriptorResolver:
    """Resolves rule fields against one request."""

    descriptor: RequestDescriptor

    def resolve(self, field: str, /) -> MatchingData:
        d = self.descriptor
        match field:
            case "scheme":
                return d.scheme
            case "host":
                return d.host
            case "port":
                # Stringified so set-membership matchers can compare it.
                return str(d.port)
            case "request_uri" | "path":
                return d.path
            case "query_string":
                return d.query_string
            case "fragment":
                return d.fragment
            case "method":
                return d.method
        prefix, sep, name = field.partition(".")
        if not sep or not name:
            return None
        match prefix:
            case "header":
                return d.header(name)
            case "query":
                return d.query_param(name)
            case "segment":
                return _segment(d.path, name)
        return None


def _segment(path: str, index: str) -> str | None:
    if not index.isdigit():
        return None
    segments = [s for s in path.split("/") if s]
    i = int(index)
    return segments[i] if i < len(segments) else None
