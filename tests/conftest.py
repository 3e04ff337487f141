"""Fixture loader for ruta rule cases.

Loads YAML fixtures from tests/fixtures/ and turns them into parsed rules
plus resolver contexts for parametrized testing.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from ruta import Rule, parse_rules

FIXTURE_DIR = Path(__file__).resolve().parent / "fixtures"


@dataclass
class RuleCase:
    """A single test case from a rule fixture."""

    fixture_name: str
    case_name: str
    rules: tuple[Rule, ...]
    context: dict[str, str]
    expect: bool

    @property
    def id(self) -> str:
        return f"{self.fixture_name}::{self.case_name}"


def load_rule_cases() -> list[RuleCase]:
    """Load every case from every fixture file, in file order."""
    cases: list[RuleCase] = []
    for yaml_file in sorted(FIXTURE_DIR.glob("*.yaml")):
        cases.extend(_load_file(yaml_file))
    return cases


def _load_file(path: Path) -> list[RuleCase]:
    """Load a fixture file (may contain multiple documents)."""
    cases: list[RuleCase] = []
    with path.open() as f:
        for doc in yaml.safe_load_all(f):
            if doc is None:
                continue
            rules = parse_rules(doc["rules"])
            for case in doc["cases"]:
                cases.append(
                    RuleCase(
                        fixture_name=doc["name"],
                        case_name=case["name"],
                        rules=rules,
                        context=_stringify(case["context"]),
                        expect=bool(case["expect"]),
                    )
                )
    return cases


def _stringify(context: dict[str, Any]) -> dict[str, str]:
    return {str(k): str(v) for k, v in context.items()}
