"""
WordForge Validator
===================

Core validation engine.

Evaluates every rule of every attribute against the input and collects the
failure messages into an ``ErrorBag``. Nothing short-circuits: all
attributes are checked and every configured rule of an attribute runs.
"""

from __future__ import annotations

import copy
import re
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple

from wordforge.core.config import get_config
from wordforge.utils.helpers import MISSING, get_nested, humanize, set_nested
from wordforge.validation.exceptions import RuleConfigurationError, UnknownRuleError, ValidationException
from wordforge.validation.registry import RuleCall, RuleRegistry, RuleSpec, default_registry, parse_rules
from wordforge.validation.rules import DataAwareRule, Rule, is_empty

_PLACEHOLDER = re.compile(r":([A-Za-z_][A-Za-z0-9_]*)")


class ErrorBag(Mapping[str, List[str]]):
    """
    Attribute to failure messages, in rule declaration order.

    Read-only; lookups return copies of the message lists.

    Example:
        errors = validator.errors()
        errors.has("email")        # True
        errors.first("email")      # "The email must be a valid email address."
        errors.to_dict()           # {"email": ["The email must be ..."]}
    """

    def __init__(self, messages: Optional[Mapping[str, List[str]]] = None) -> None:
        self._messages: Dict[str, Tuple[str, ...]] = {
            attribute: tuple(items)
            for attribute, items in (messages or {}).items()
            if items
        }

    def __getitem__(self, attribute: str) -> List[str]:
        return list(self._messages[attribute])

    def __iter__(self) -> Iterator[str]:
        return iter(self._messages)

    def __len__(self) -> int:
        return len(self._messages)

    def has(self, attribute: str) -> bool:
        return attribute in self._messages

    def get_messages(self, attribute: str) -> List[str]:
        return list(self._messages.get(attribute, ()))

    def first(self, attribute: Optional[str] = None) -> Optional[str]:
        """Get the first message for an attribute, or the first overall."""
        if attribute is not None:
            messages = self._messages.get(attribute, ())
            return messages[0] if messages else None
        for messages in self._messages.values():
            return messages[0]
        return None

    def all(self) -> List[str]:
        """Get every message as a flat list."""
        return [message for messages in self._messages.values() for message in messages]

    def to_dict(self) -> Dict[str, List[str]]:
        return {attribute: list(messages) for attribute, messages in self._messages.items()}

    def __repr__(self) -> str:
        return f"ErrorBag({self.to_dict()!r})"


class Validator:
    """
    Validates one input mapping against a rule set.

    Rules are parsed and built on construction, so an unknown rule or a bad
    parameter raises ``RuleConfigurationError`` before any evaluation. The
    first call to ``passes``/``fails``/``errors`` runs the evaluation; later
    calls reuse it. A validator is single-use.

    Example:
        validator = Validator(
            {"name": "Ada", "email": "not-an-email"},
            {"name": "required|min:3", "email": "required|email"},
            messages={"email.email": "We need a real address."},
            attributes={"name": "Full Name"},
        )

        if validator.fails():
            print(validator.errors().to_dict())
    """

    def __init__(
        self,
        data: Mapping[str, Any],
        rules: Mapping[str, RuleSpec],
        messages: Optional[Mapping[str, str]] = None,
        attributes: Optional[Mapping[str, str]] = None,
        registry: Optional[RuleRegistry] = None,
    ) -> None:
        """
        Initialize validator.

        Args:
            data: Input under validation (never mutated)
            rules: Attribute name (dot paths allowed) to rule specification
            messages: ``"attribute.rule"`` or ``"rule"`` to message override
            attributes: Attribute name to display label
            registry: Rule registry, the default registry when omitted
        """
        self.data = data
        self.rules = rules
        self.messages = dict(messages or {})
        self.attributes = dict(attributes or {})
        self.registry = registry or default_registry()
        self.default_messages: Dict[str, str] = dict(
            get_config().get("validation.messages", {}) or {}
        )

        self._compiled: Dict[str, List[Tuple[RuleCall, Rule]]] = {
            attribute: [(call, self._build(call)) for call in parse_rules(spec)]
            for attribute, spec in rules.items()
        }
        self._errors: Optional[ErrorBag] = None

    def _build(self, call: RuleCall) -> Rule:
        rule = self.registry.create(call)
        if isinstance(rule, DataAwareRule):
            # set_data binds input to the instance; prebuilt rules may be shared
            rule = copy.copy(rule)
        return rule

    def parsed_rules(self) -> Dict[str, List[RuleCall]]:
        """Get the normalized rule invocations per attribute."""
        return {
            attribute: [call for call, _ in compiled]
            for attribute, compiled in self._compiled.items()
        }

    def passes(self) -> bool:
        """Run the validator (once) and report success."""
        if self._errors is None:
            self._errors = self._evaluate()
        return len(self._errors) == 0

    def fails(self) -> bool:
        return not self.passes()

    def errors(self) -> ErrorBag:
        """Get the error bag; empty when validation passed."""
        self.passes()
        return self._errors

    def validated(self) -> Dict[str, Any]:
        """
        Get the input restricted to the attributes named in the rules.

        Dot-path attributes produce nested output. Attributes absent from
        the input are omitted.

        Raises:
            ValidationException: If validation failed
        """
        if self.fails():
            raise ValidationException(self)

        result: Dict[str, Any] = {}
        for attribute in self._compiled:
            value = get_nested(self.data, attribute, MISSING)
            if value is MISSING:
                continue
            if attribute in self.data:
                result[attribute] = copy.deepcopy(value)
            else:
                set_nested(result, attribute, copy.deepcopy(value))
        return result

    def validate(self) -> Dict[str, Any]:
        """Alias of ``validated``."""
        return self.validated()

    def diagnose(self, attribute: str, rule: RuleSpec) -> Dict[str, Any]:
        """
        Check a single rule against one attribute, outside the normal run.

        Nothing is recorded in the error bag and absent values are not
        skipped. An unregistered identifier reports ``would_pass`` as false.

        Example:
            Validator({"age": "25"}, {}).diagnose("age", "min:18")
            # {"attribute": "age", "value": "25", "rule": "min",
            #  "parameters": ["18"], "would_pass": True}
        """
        calls = parse_rules(rule)
        if len(calls) != 1:
            raise RuleConfigurationError(f"Expected exactly one rule, got {len(calls)}")

        call = calls[0]
        value = get_nested(self.data, attribute, None)

        try:
            instance = self._build(call)
        except UnknownRuleError:
            would_pass = False
        else:
            if isinstance(instance, DataAwareRule):
                instance.set_data(self.data)
            would_pass = bool(instance.passes(attribute, value))

        return {
            "attribute": attribute,
            "value": value,
            "rule": call.name,
            "parameters": list(call.parameters),
            "would_pass": would_pass,
        }

    def _evaluate(self) -> ErrorBag:
        errors: Dict[str, List[str]] = {}

        for attribute, compiled in self._compiled.items():
            value = get_nested(self.data, attribute, None)

            for call, rule in compiled:
                if not rule.implicit and is_empty(value):
                    continue

                if isinstance(rule, DataAwareRule):
                    rule.set_data(self.data)

                if not rule.passes(attribute, value):
                    errors.setdefault(attribute, []).append(
                        self._resolve_message(attribute, call, rule)
                    )

        return ErrorBag(errors)

    def _resolve_message(self, attribute: str, call: RuleCall, rule: Rule) -> str:
        template = self.messages.get(f"{attribute}.{call.name}")
        if template is None:
            template = self.messages.get(call.name)
        if template is None:
            template = self.default_messages.get(call.name)
        if template is None:
            template = rule.message()

        replacements = {"attribute": self.display_name(attribute), **rule.replacements()}
        return _PLACEHOLDER.sub(
            lambda match: replacements.get(match.group(1), match.group(0)),
            template,
        )

    def display_name(self, attribute: str) -> str:
        """Get the label substituted for ``:attribute``."""
        return self.attributes.get(attribute) or humanize(attribute)


def validate(
    data: Mapping[str, Any],
    rules: Mapping[str, RuleSpec],
    messages: Optional[Mapping[str, str]] = None,
    attributes: Optional[Mapping[str, str]] = None,
) -> Dict[str, Any]:
    """
    Validate data and return the validated subset.

    Example:
        try:
            data = validate(payload, {"email": "required|email"})
        except ValidationException as e:
            return {"errors": e.errors().to_dict()}
    """
    return Validator(data, rules, messages, attributes).validated()
