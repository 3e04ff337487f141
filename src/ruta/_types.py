"""Core protocols and type aliases for ruta.

- MatchingData is the type-erased value a field resolves to
- FieldResolver is the domain-specific extraction port
- InputMatcher is the domain-agnostic matching port
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

# None means "field not available" and makes the rule leaf evaluate to False.
MatchingData = str | int | bool | bytes | None


@runtime_checkable
class FieldResolver(Protocol):
    """Resolve a named field to a value.

    Implementations are domain-specific (HTTP request, plain dict) but
    return the domain-agnostic MatchingData type.
    """

    def resolve(self, field: str, /) -> MatchingData: ...


@runtime_checkable
class InputMatcher(Protocol):
    """Match against a type-erased value.

    The same EqualMatcher works for any resolver, so matchers never know
    where a value came from.
    """

    def matches(self, value: MatchingData, /) -> bool: ...
