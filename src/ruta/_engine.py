"""RuleEngine: compile and evaluate rule trees.

Evaluation semantics:
- A leaf resolves its target field and hands the value to its matcher
- A None value (field not available) makes the leaf False
- A rule with conjuncts is leaf AND child_1 AND ... AND child_n
- Evaluation stops at the first False, left to right; nothing after it
  is resolved

Compilation walks the whole tree up front, so an unknown matcher kind is
reported even in a branch that evaluation would have skipped.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from ruta._logging import get_logger
from ruta._registry import default_registry
from ruta._rule import MAX_DEPTH, RuleError, rule_depth

if TYPE_CHECKING:
    from collections.abc import Iterable

    from ruta._registry import MatcherRegistry
    from ruta._rule import Rule
    from ruta._types import FieldResolver, InputMatcher

logger = get_logger(__name__)

MAX_CONJUNCTS = 256


class TooManyConjunctsError(RuleError):
    """A rule has too many children in its ``and`` mapping."""

    def __init__(self, count: int, max_: int) -> None:
        self.count = count
        self.max = max_
        super().__init__(f"too many conjuncts: {count} exceeds maximum {max_}")


@dataclass(frozen=True, slots=True)
class CompiledRule:
    """A rule whose matchers have been built and validated.

    Immutable and safe to reuse across requests and threads.
    """

    target_field: str
    matcher: InputMatcher
    conjuncts: tuple[CompiledRule, ...] = ()

    def evaluate(self, resolver: FieldResolver) -> bool:
        value = resolver.resolve(self.target_field)
        if value is None:
            return False
        if not self.matcher.matches(value):
            return False
        return all(child.evaluate(resolver) for child in self.conjuncts)


class RuleEngine:
    """Evaluates rule trees using the matchers of a MatcherRegistry."""

    def __init__(self, registry: MatcherRegistry | None = None) -> None:
        self.registry = registry if registry is not None else default_registry()

    def compile(self, rule: Rule) -> CompiledRule:
        """Validate a rule tree and build its matchers.

        Should be called at config load time, not per request.

        Raises:
            UnknownMatcherError: a matcher kind is not registered
            InvalidRuleError: an operand was rejected by its matcher
            TooManyConjunctsError: too many children under one rule
            RuleError: tree depth exceeds MAX_DEPTH
        """
        depth = rule_depth(rule)
        if depth > MAX_DEPTH:
            msg = f"rule depth {depth} exceeds maximum allowed depth {MAX_DEPTH}"
            raise RuleError(msg)
        return self._compile(rule)

    def evaluate(self, rule: Rule, resolver: FieldResolver) -> bool:
        """Compile ``rule`` and evaluate it against ``resolver``."""
        verdict = self.compile(rule).evaluate(resolver)
        logger.debug(
            "rule_evaluated",
            field=rule.target_field,
            matcher_kind=rule.matcher_kind,
            verdict=verdict,
        )
        return verdict

    def evaluate_all(self, rules: Iterable[Rule], resolver: FieldResolver) -> bool:
        """True iff every rule passes. Stops at the first failing rule.

        All rules are compiled before any is evaluated.
        """
        compiled = [self.compile(rule) for rule in rules]
        return all(c.evaluate(resolver) for c in compiled)

    def _compile(self, rule: Rule) -> CompiledRule:
        if len(rule.conjuncts) > MAX_CONJUNCTS:
            raise TooManyConjunctsError(len(rule.conjuncts), MAX_CONJUNCTS)
        matcher = self.registry.create(rule.matcher_kind, rule.operand)
        return CompiledRule(
            target_field=rule.target_field,
            matcher=matcher,
            conjuncts=tuple(self._compile(child) for child in rule.conjuncts),
        )
