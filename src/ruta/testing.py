"""Test utilities for ruta.

Provides convenience FieldResolver implementations for use in tests and
examples. These are NOT domain adapters. They exist to reduce
boilerplate when exploring ruta with dict-shaped contexts.

For real domains, implement FieldResolver for your own context type.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ruta._types import MatchingData


@dataclass(frozen=True, slots=True)
class DictResolver:
    """Resolve fields by key from a dict.

    >>> from ruta import Rule, RuleEngine
    >>> from ruta.testing import DictResolver
    >>> rule = Rule("equal", "name", ("alice",))
    >>> RuleEngine().evaluate(rule, DictResolver({"name": "alice"}))
    True
    """

    data: dict[str, MatchingData]

    def resolve(self, field: str, /) -> MatchingData:
        return self.data.get(field)


@dataclass(slots=True)
class RecordingResolver:
    """Wrap a dict and record every field that gets resolved.

    Fields listed in ``forbidden`` raise AssertionError when resolved,
    which lets tests prove a branch was never evaluated.
    """

    data: dict[str, MatchingData]
    forbidden: frozenset[str] = frozenset()
    resolved: list[str] = field(default_factory=list)

    def resolve(self, field: str, /) -> MatchingData:
        if field in self.forbidden:
            msg = f"field {field!r} must not be resolved"
            raise AssertionError(msg)
        self.resolved.append(field)
        return self.data.get(field)
