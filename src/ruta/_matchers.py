"""Concrete matchers implementing the InputMatcher protocol.

Each matcher is a frozen dataclass over a tuple of acceptable values and
passes if the input satisfies any one of them. All matchers return False
for non-string or None input, and for an empty value tuple.

Regex uses ``google-re2`` for guaranteed linear-time matching. RE2 does not
support backreferences or lookahead/lookbehind because they require
backtracking, so patterns using them are rejected at compile time.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import re2

from ruta._rule import RuleError

if TYPE_CHECKING:
    from ruta._types import MatchingData


@dataclass(frozen=True, slots=True)
class EqualMatcher:
    """Exact, case-sensitive membership in a set of values.

    Duplicates and order in ``values`` carry no meaning; they are folded
    into a frozenset at construction time.
    """

    values: tuple[str, ...]
    _value_set: frozenset[str] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_value_set", frozenset(self.values))

    def matches(self, value: MatchingData, /) -> bool:
        if not isinstance(value, str):
            return False
        return value in self._value_set


@dataclass(frozen=True, slots=True)
class PrefixMatcher:
    """String prefix match (startswith any prefix)."""

    prefixes: tuple[str, ...]

    def matches(self, value: MatchingData, /) -> bool:
        if not isinstance(value, str) or not self.prefixes:
            return False
        return value.startswith(self.prefixes)


@dataclass(frozen=True, slots=True)
class SuffixMatcher:
    """String suffix match (endswith any suffix)."""

    suffixes: tuple[str, ...]

    def matches(self, value: MatchingData, /) -> bool:
        if not isinstance(value, str) or not self.suffixes:
            return False
        return value.endswith(self.suffixes)


@dataclass(frozen=True, slots=True)
class ContainsMatcher:
    """Substring search match."""

    substrings: tuple[str, ...]

    def matches(self, value: MatchingData, /) -> bool:
        if not isinstance(value, str):
            return False
        return any(s in value for s in self.substrings)


@dataclass(frozen=True, slots=True)
class RegexMatcher:
    """Regular expression match.

    Patterns are compiled at construction time via ``google-re2``. Uses
    search (not fullmatch), so a pattern matches anywhere in the string
    unless it is anchored.

    Raises:
        RuleError: If a pattern is not valid RE2 syntax.
    """

    patterns: tuple[str, ...]
    _compiled: tuple[re2.Pattern[str], ...] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        compiled = []
        for pattern in self.patterns:
            try:
                compiled.append(re2.compile(pattern))
            except re2.error as e:
                msg = f'invalid regex pattern "{pattern}": {e}'
                raise RuleError(msg) from e
        object.__setattr__(self, "_compiled", tuple(compiled))

    def matches(self, value: MatchingData, /) -> bool:
        if not isinstance(value, str):
            return False
        return any(c.search(value) is not None for c in self._compiled)
