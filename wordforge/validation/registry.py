"""
WordForge Rule Registry
=======================

Maps rule identifiers to factories and parses rule specifications.

Rule-string grammar:

    ruleset := rule ('|' rule)*
    rule    := identifier (':' param (',' param)*)?

Identifiers and parameters are trimmed. A structured sequence such as
``["required", "between:1,10", Uppercase()]`` parses to the same
``RuleCall`` list as the equivalent pipe string.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, Type, Union

from wordforge.utils.logger import get_logger
from wordforge.validation.exceptions import RuleConfigurationError, UnknownRuleError
from wordforge.validation.rules import BUILTIN_RULES, CallableRule, Rule

logger = get_logger("wordforge.validation")

RuleFactory = Callable[[Sequence[str]], Rule]
RuleSpec = Union[str, Rule, Type[Rule], Callable[..., Any], Sequence[Any]]


@dataclass(frozen=True)
class RuleCall:
    """
    One parsed rule invocation.

    Attributes:
        name: Rule identifier, also the suffix of ``"attribute.rule"`` message keys
        parameters: Parameters in declaration order
        rule: Pre-built rule instance (structured specs only)
    """

    name: str
    parameters: Tuple[str, ...] = ()
    rule: Optional[Rule] = None


def parse_rule(token: str) -> RuleCall:
    """
    Parse a single rule token.

    Example:
        >>> parse_rule("between: 1, 10")
        RuleCall(name='between', parameters=('1', '10'), rule=None)
    """
    name, separator, blob = token.partition(":")
    name = name.strip()

    if not name:
        raise RuleConfigurationError(f"Empty rule identifier in {token!r}")

    parameters = tuple(p.strip() for p in blob.split(",")) if separator else ()
    return RuleCall(name=name, parameters=parameters)


def parse_rules(spec: RuleSpec) -> List[RuleCall]:
    """
    Normalize one attribute's rule specification.

    Accepts a pipe-delimited string, a ``Rule`` instance or class, a plain
    callable, or a list/tuple of any of these. Each string item in a
    sequence is a single token, so its parameters may contain ``|``.
    """
    if isinstance(spec, str):
        if not spec.strip():
            return []
        return [parse_rule(token) for token in spec.split("|")]

    if isinstance(spec, (list, tuple)):
        calls: List[RuleCall] = []
        for item in spec:
            if isinstance(item, str):
                calls.append(parse_rule(item))
            else:
                calls.extend(parse_rules(item))
        return calls

    if isinstance(spec, Rule):
        return [RuleCall(name=spec.identifier(), rule=spec)]

    if isinstance(spec, type) and issubclass(spec, Rule):
        rule = spec.from_parameters(())
        return [RuleCall(name=rule.identifier(), rule=rule)]

    if callable(spec):
        rule = CallableRule(spec)
        return [RuleCall(name=rule.identifier(), rule=rule)]

    raise RuleConfigurationError(f"Unsupported rule specification: {spec!r}")


class RuleRegistry:
    """
    Rule identifier to factory mapping.

    A factory takes the parameter list and returns a ``Rule``. Registering a
    ``Rule`` subclass uses its ``from_parameters`` classmethod.

    Example:
        registry = RuleRegistry.with_builtins()

        @registry.rule("uppercase")
        class Uppercase(Rule):
            default_message = "The :attribute must be uppercase."

            def passes(self, attribute, value):
                return isinstance(value, str) and value.isupper()

        registry.create(parse_rule("uppercase"))
    """

    def __init__(self, factories: Optional[Dict[str, RuleFactory]] = None) -> None:
        self._factories: Dict[str, RuleFactory] = dict(factories or {})

    @classmethod
    def with_builtins(cls) -> "RuleRegistry":
        registry = cls()
        for rule_class in BUILTIN_RULES:
            registry._factories[rule_class.name] = rule_class.from_parameters
        return registry

    def register(
        self,
        name: str,
        factory: Union[Type[Rule], RuleFactory],
    ) -> None:
        """Register (or replace) a rule under ``name``."""
        name = name.strip()
        if not name or any(c in name for c in "|:,"):
            raise RuleConfigurationError(f"Invalid rule identifier: {name!r}")

        if isinstance(factory, type) and issubclass(factory, Rule):
            factory = factory.from_parameters

        self._factories[name] = factory
        logger.debug("Validation rule registered", rule=name)

    def rule(self, name: Optional[str] = None) -> Callable[[Type[Rule]], Type[Rule]]:
        """Class decorator registering a custom rule."""

        def decorator(rule_class: Type[Rule]) -> Type[Rule]:
            identifier = name or rule_class.name or rule_class.__name__
            if not rule_class.name:
                rule_class.name = identifier
            self.register(identifier, rule_class)
            return rule_class

        return decorator

    def has(self, name: str) -> bool:
        return name in self._factories

    def names(self) -> List[str]:
        return sorted(self._factories)

    def create(self, call: RuleCall) -> Rule:
        """Build the rule for a parsed invocation."""
        if call.rule is not None:
            return call.rule

        factory = self._factories.get(call.name)
        if factory is None:
            raise UnknownRuleError(call.name)

        rule = factory(list(call.parameters))
        if not isinstance(rule, Rule):
            raise RuleConfigurationError(
                f"Factory for rule '{call.name}' returned {type(rule).__name__}, not a Rule"
            )
        return rule

    def copy(self) -> "RuleRegistry":
        return RuleRegistry(self._factories)

    def __contains__(self, name: str) -> bool:
        return self.has(name)


_default_registry: Optional[RuleRegistry] = None


def default_registry() -> RuleRegistry:
    """Get the process-wide registry holding the built-in rules."""
    global _default_registry
    if _default_registry is None:
        _default_registry = RuleRegistry.with_builtins()
    return _default_registry


def register_rule(name: str, factory: Union[Type[Rule], RuleFactory]) -> None:
    """Register a custom rule in the default registry."""
    default_registry().register(name, factory)
