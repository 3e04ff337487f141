"""Rule configuration parsing.

Config-driven rule construction path:
  dict / YAML / JSON → parse_rules() → tuple[Rule, ...] → RuleEngine.compile()

Accepted shape, keyed by the field each rule reads::

    request_uri:
      logic: equal
      values: [api, websocket, blog]
      and:
        request_action:
          logic: equal
          values: ""

A single rule may also be given on its own with an explicit
``target_field``; ``matcher_kind`` and ``operand`` are accepted as
aliases for ``logic`` and ``values``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from ruta._rule import MAX_DEPTH, Rule, RuleError, RutaError

_KIND_KEYS = ("logic", "matcher_kind")
_OPERAND_KEYS = ("values", "operand")
_KNOWN_KEYS = frozenset({*_KIND_KEYS, *_OPERAND_KEYS, "target_field", "and"})


class ConfigParseError(RutaError):
    """Error parsing a config mapping into rules."""


def parse_rule(data: dict[str, Any], target_field: str | None = None) -> Rule:
    """Parse one rule mapping into a Rule.

    ``target_field`` is the key the rule was found under; an explicit
    ``target_field`` entry in ``data`` must agree with it.

    Raises:
        ConfigParseError: If the mapping is malformed.
        RuleError: If the rules nest deeper than MAX_DEPTH.
    """
    return _parse_rule(data, target_field, 1)


def _parse_rule(data: Any, target_field: str | None, depth: int) -> Rule:
    if depth > MAX_DEPTH:
        msg = f"rule depth exceeds maximum allowed depth {MAX_DEPTH}"
        raise RuleError(msg)
    if not isinstance(data, dict):
        msg = f"rule must be a dict, got {type(data).__name__}"
        raise ConfigParseError(msg)

    unknown = sorted(str(k) for k in data if k not in _KNOWN_KEYS)
    if unknown:
        msg = f"rule has unknown keys: {unknown}"
        raise ConfigParseError(msg)

    field = _parse_target_field(data, target_field)
    kind = _pick_one(data, _KIND_KEYS, field)
    if kind is None:
        msg = f"rule for {field!r} missing required field 'logic'"
        raise ConfigParseError(msg)
    if not isinstance(kind, str) or not kind:
        msg = f"rule for {field!r}: 'logic' must be a non-empty string"
        raise ConfigParseError(msg)

    operand = _parse_operand(_pick_one(data, _OPERAND_KEYS, field), field)

    conjuncts: tuple[Rule, ...] = ()
    if data.get("and") is not None:
        conjuncts = _parse_and(data["and"], field, depth)

    return Rule(
        matcher_kind=kind,
        target_field=field,
        operand=operand,
        conjuncts=conjuncts,
    )


def parse_rules(data: dict[str, Any]) -> tuple[Rule, ...]:
    """Parse a ``{field_name: rule}`` mapping into rules, in key order.

    Raises:
        ConfigParseError: If the mapping is malformed.
    """
    if not isinstance(data, dict):
        msg = f"expected dict, got {type(data).__name__}"
        raise ConfigParseError(msg)
    return tuple(
        parse_rule(rule, _field_name(name)) for name, rule in data.items()
    )


def load_rules(path: str | Path) -> tuple[Rule, ...]:
    """Load rules from a YAML or JSON file.

    Raises:
        ConfigParseError: If the file cannot be read or parsed.
    """
    p = Path(path)
    try:
        with p.open(encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        msg = f"cannot read rule config: {p}"
        raise ConfigParseError(msg) from e
    except UnicodeDecodeError as e:
        msg = f"rule config is not valid UTF-8: {p}"
        raise ConfigParseError(msg) from e
    except yaml.YAMLError as e:
        msg = f"rule config is not valid YAML/JSON: {p}: {e}"
        raise ConfigParseError(msg) from e
    if data is None:
        return ()
    return parse_rules(data)


def _parse_target_field(data: dict[str, Any], target_field: str | None) -> str:
    explicit = data.get("target_field")
    if explicit is None:
        if target_field is None:
            msg = "rule missing required field 'target_field'"
            raise ConfigParseError(msg)
        return target_field
    if not isinstance(explicit, str) or not explicit:
        msg = "'target_field' must be a non-empty string"
        raise ConfigParseError(msg)
    if target_field is not None and explicit != target_field:
        msg = f"rule keyed under {target_field!r} declares target_field {explicit!r}"
        raise ConfigParseError(msg)
    return explicit


def _pick_one(data: dict[str, Any], keys: tuple[str, ...], field: str) -> Any:
    present = [k for k in keys if k in data]
    if len(present) > 1:
        msg = f"rule for {field!r}: exactly one of {list(keys)} may be set, got {present}"
        raise ConfigParseError(msg)
    return data[present[0]] if present else None


def _parse_operand(raw: Any, field: str) -> tuple[str, ...]:
    """Normalize an operand into a tuple of strings.

    None and "" are the empty set; any other string is a one-element set.
    """
    if raw is None or raw == "":
        return ()
    if isinstance(raw, str):
        return (raw,)
    if not isinstance(raw, list | tuple):
        msg = f"rule for {field!r}: 'values' must be a list or string, got {type(raw).__name__}"
        raise ConfigParseError(msg)
    for item in raw:
        if not isinstance(item, str):
            msg = (
                f"rule for {field!r}: 'values' entries must be strings, "
                f"got {type(item).__name__}"
            )
            raise ConfigParseError(msg)
    return tuple(raw)


def _parse_and(raw: Any, field: str, depth: int) -> tuple[Rule, ...]:
    if not isinstance(raw, dict):
        msg = f"rule for {field!r}: 'and' must be a dict, got {type(raw).__name__}"
        raise ConfigParseError(msg)
    return tuple(
        _parse_rule(child, _field_name(name), depth + 1) for name, child in raw.items()
    )


def _field_name(name: Any) -> str:
    if not isinstance(name, str) or not name:
        msg = f"field name must be a non-empty string, got {name!r}"
        raise ConfigParseError(msg)
    return name
