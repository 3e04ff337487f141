"""Rule: one node of a declarative matching tree.

A rule names a matcher kind, the field it reads, and the matcher's
operand. The optional ``conjuncts`` are the "and" combinator: a rule with
conjuncts passes only if its own leaf check passes and every child rule
passes too.
"""

from __future__ import annotations

from dataclasses import dataclass

MAX_DEPTH = 32


class RutaError(Exception):
    """Base class for all ruta errors."""


class RuleError(RutaError):
    """Errors from rule validation and evaluation."""


@dataclass(frozen=True, slots=True)
class Rule:
    """A matcher kind applied to one field, ANDed with child rules.

    Each child's ``target_field`` is the field name it was keyed under in
    the config's ``and`` mapping. Children keep insertion order, which is
    also their evaluation order.
    """

    matcher_kind: str
    target_field: str
    operand: tuple[str, ...] = ()
    conjuncts: tuple[Rule, ...] = ()

    @property
    def is_leaf(self) -> bool:
        return not self.conjuncts


def rule_depth(rule: Rule) -> int:
    """Calculate the nesting depth of a rule tree."""
    deepest = 0
    stack = [(rule, 1)]
    while stack:
        node, depth = stack.pop()
        deepest = max(deepest, depth)
        stack.extend((child, depth + 1) for child in node.conjuncts)
    return deepest
