"""ruta.http: HTTP request domain.

Provides the RequestDescriptor snapshot, its construction from a WSGI
environment, and a FieldResolver that exposes request fields to rules.
"""

from ruta.http._environ import CACHE_KEY, RequestScope, build_from_environment
from ruta.http._request import (
    MissingHostError,
    RequestDescriptor,
    RequestError,
    normalize_header_name,
)
from ruta.http._resolver import DescriptorResolver

__all__ = [
    # Context
    "RequestDescriptor",
    "RequestScope",
    "build_from_environment",
    "normalize_header_name",
    "CACHE_KEY",
    # Resolver
    "DescriptorResolver",
    # Errors
    "RequestError",
    "MissingHostError",
]
