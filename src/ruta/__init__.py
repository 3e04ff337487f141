"""ruta: Declarative request-matching rules and HTTP request introspection.

All public types are exported from this module for flat imports:

    from ruta import Rule, RuleEngine, EqualMatcher, parse_rules
"""

__version__ = "0.1.0"

# Config: see ruta._config for details
from ruta._config import ConfigParseError, load_rules, parse_rule, parse_rules

# Engine
from ruta._engine import (
    MAX_CONJUNCTS,
    CompiledRule,
    RuleEngine,
    TooManyConjunctsError,
)
from ruta._logging import configure_logging, get_logger

# Concrete matchers
from ruta._matchers import (
    ContainsMatcher,
    EqualMatcher,
    PrefixMatcher,
    RegexMatcher,
    SuffixMatcher,
)

# Registry: see ruta._registry for details
from ruta._registry import (
    MAX_PATTERN_LENGTH,
    MAX_REGEX_PATTERN_LENGTH,
    DuplicateMatcherError,
    InvalidRuleError,
    MatcherFactory,
    MatcherRegistry,
    PatternTooLongError,
    UnknownMatcherError,
    default_registry,
    register_core_matchers,
)

# Rule tree
from ruta._rule import MAX_DEPTH, Rule, RuleError, RutaError, rule_depth
from ruta._types import FieldResolver, InputMatcher, MatchingData

__all__ = [
    # Protocols
    "FieldResolver",
    "InputMatcher",
    "MatchingData",
    # Rule tree
    "Rule",
    "rule_depth",
    "MAX_DEPTH",
    # Engine
    "RuleEngine",
    "CompiledRule",
    "MAX_CONJUNCTS",
    # Concrete matchers
    "EqualMatcher",
    "PrefixMatcher",
    "SuffixMatcher",
    "ContainsMatcher",
    "RegexMatcher",
    # Registry
    "MatcherRegistry",
    "MatcherFactory",
    "register_core_matchers",
    "default_registry",
    "MAX_PATTERN_LENGTH",
    "MAX_REGEX_PATTERN_LENGTH",
    # Config
    "parse_rule",
    "parse_rules",
    "load_rules",
    # Logging
    "configure_logging",
    "get_logger",
    # Errors
    "RutaError",
    "RuleError",
    "UnknownMatcherError",
    "DuplicateMatcherError",
    "InvalidRuleError",
    "TooManyConjunctsError",
    "PatternTooLongError",
    "ConfigParseError",
]
