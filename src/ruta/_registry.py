"""Matcher registry for config-driven rule evaluation.

The registry maps a matcher kind (the ``logic`` key of a rule config) to a
factory that builds an InputMatcher from the rule's operand. It is
append-only: a kind can be registered once and never replaced, so the
built-in matchers cannot be shadowed by accident.

Example::

    registry = default_registry()
    registry.register("one_of_ci", lambda values: CaseInsensitive(values))
    engine = RuleEngine(registry)
"""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING

from ruta._logging import get_logger
from ruta._matchers import (
    ContainsMatcher,
    EqualMatcher,
    PrefixMatcher,
    RegexMatcher,
    SuffixMatcher,
)
from ruta._rule import RuleError

if TYPE_CHECKING:
    from collections.abc import Callable

    from ruta._types import InputMatcher

logger = get_logger(__name__)

# ═══════════════════════════════════════════════════════════════════════════════
# Limits
# ═══════════════════════════════════════════════════════════════════════════════

MAX_PATTERN_LENGTH = 8192
MAX_REGEX_PATTERN_LENGTH = 4096

# ═══════════════════════════════════════════════════════════════════════════════
# Error types
# ═══════════════════════════════════════════════════════════════════════════════


class UnknownMatcherError(RuleError):
    """A rule references a matcher kind that is not registered."""

    def __init__(self, kind: str, available: list[str]) -> None:
        self.kind = kind
        self.available = sorted(available)
        if self.available:
            registered = ", ".join(self.available)
            msg = f"unknown matcher kind: {kind!r} (registered: {registered})"
        else:
            msg = f"unknown matcher kind: {kind!r} (no matchers are registered)"
        super().__init__(msg)


class DuplicateMatcherError(RuleError):
    """A matcher kind was registered twice."""

    def __init__(self, kind: str) -> None:
        self.kind = kind
        super().__init__(f"matcher kind already registered: {kind!r}")


class InvalidRuleError(RuleError):
    """A rule operand was rejected by its matcher factory."""

    def __init__(self, source: str) -> None:
        self.source = source
        super().__init__(f"invalid rule: {source}")


class PatternTooLongError(RuleError):
    """A match pattern exceeds the length limit."""

    def __init__(self, length: int, max_: int) -> None:
        self.length = length
        self.max = max_
        super().__init__(f"pattern length {length} exceeds maximum {max_}")


# ═══════════════════════════════════════════════════════════════════════════════
# Registry
# ═══════════════════════════════════════════════════════════════════════════════

type MatcherFactory = Callable[[tuple[str, ...]], InputMatcher]


class MatcherRegistry:
    """Append-only registry of matcher factories keyed by kind.

    Registration and lookup share one lock, so a registration running on
    another thread is never observed half-done.
    """

    def __init__(self) -> None:
        self._factories: dict[str, MatcherFactory] = {}
        self._lock = threading.Lock()

    def register(self, kind: str, factory: MatcherFactory) -> MatcherRegistry:
        """Register a matcher factory under ``kind``.

        Raises:
            DuplicateMatcherError: ``kind`` is already registered.
        """
        with self._lock:
            if kind in self._factories:
                raise DuplicateMatcherError(kind)
            self._factories[kind] = factory
        logger.debug("matcher_registered", kind=kind)
        return self

    def lookup(self, kind: str) -> MatcherFactory:
        """Return the factory for ``kind``.

        Raises:
            UnknownMatcherError: ``kind`` is not registered.
        """
        with self._lock:
            factory = self._factories.get(kind)
            if factory is None:
                raise UnknownMatcherError(kind, list(self._factories))
        return factory

    def create(self, kind: str, operand: tuple[str, ...]) -> InputMatcher:
        """Build a matcher of ``kind`` configured with ``operand``.

        Raises:
            UnknownMatcherError: ``kind`` is not registered.
            InvalidRuleError: the factory rejected the operand.
        """
        factory = self.lookup(kind)
        try:
            return factory(operand)
        except RuleError:
            raise
        except Exception as e:
            raise InvalidRuleError(f"{kind}: {e}") from e

    def contains(self, kind: str) -> bool:
        """Check if a matcher kind is registered."""
        with self._lock:
            return kind in self._factories

    def kinds(self) -> list[str]:
        """Return all registered matcher kinds (sorted)."""
        with self._lock:
            return sorted(self._factories)

    def __len__(self) -> int:
        with self._lock:
            return len(self._factories)


def register_core_matchers(registry: MatcherRegistry) -> MatcherRegistry:
    """Register the built-in matchers: equal, prefix, suffix, contains, regex."""
    return (
        registry.register("equal", _equal_factory)
        .register("prefix", _prefix_factory)
        .register("suffix", _suffix_factory)
        .register("contains", _contains_factory)
        .register("regex", _regex_factory)
    )


def default_registry() -> MatcherRegistry:
    """Return a fresh registry holding the core matchers."""
    return register_core_matchers(MatcherRegistry())


# ═══════════════════════════════════════════════════════════════════════════════
# Built-in factories
# ═══════════════════════════════════════════════════════════════════════════════


def _check_pattern_lengths(values: tuple[str, ...], max_: int) -> None:
    for value in values:
        if len(value) > max_:
            raise PatternTooLongError(len(value), max_)


def _equal_factory(values: tuple[str, ...]) -> EqualMatcher:
    _check_pattern_lengths(values, MAX_PATTERN_LENGTH)
    return EqualMatcher(values)


def _prefix_factory(values: tuple[str, ...]) -> PrefixMatcher:
    _check_pattern_lengths(values, MAX_PATTERN_LENGTH)
    return PrefixMatcher(values)


def _suffix_factory(values: tuple[str, ...]) -> SuffixMatcher:
    _check_pattern_lengths(values, MAX_PATTERN_LENGTH)
    return SuffixMatcher(values)


def _contains_factory(values: tuple[str, ...]) -> ContainsMatcher:
    _check_pattern_lengths(values, MAX_PATTERN_LENGTH)
    return ContainsMatcher(values)


def _regex_factory(values: tuple[str, ...]) -> RegexMatcher:
    _check_pattern_lengths(values, MAX_REGEX_PATTERN_LENGTH)
    return RegexMatcher(values)
