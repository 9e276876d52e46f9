"""
WordForge Validation Rules
==========================

The ``Rule`` contract and the built-in rule set.

A rule answers one question about one value: ``passes(attribute, value)``.
When it fails, ``message()`` gives a template such as
``"The :attribute must be at least :min."``; the validator fills in the
attribute label and the values from ``replacements()``.

Only *implicit* rules (``required``) look at absent values. Every other
rule is skipped for a missing key, ``None``, ``""`` or an empty
collection, so ``"numeric"`` on an omitted field passes and the complaint
is left to ``required``.

Custom rules:

    class Uppercase(Rule):
        name = "uppercase"
        default_message = "The :attribute must be uppercase."

        def passes(self, attribute, value):
            return isinstance(value, str) and value.isupper()

    register_rule("uppercase", Uppercase)
"""

from __future__ import annotations

import re
import uuid as uuid_module
from abc import ABC, abstractmethod
from collections.abc import Mapping as MappingABC
from collections.abc import Sequence as SequenceABC
from collections.abc import Set as SetABC
from dataclasses import dataclass
from datetime import date, datetime
from types import MappingProxyType
from typing import Any, Callable, ClassVar, Dict, Mapping, Optional, Pattern, Sequence, Tuple, Union

from wordforge.core.config import get_config
from wordforge.utils.helpers import MISSING, get_nested, humanize, snake_case
from wordforge.validation.exceptions import RuleConfigurationError


Number = Union[int, float]


def _is_collection(value: Any) -> bool:
    return isinstance(value, (SequenceABC, MappingABC, SetABC)) and not isinstance(
        value, (str, bytes)
    )


def is_empty(value: Any) -> bool:
    """Check whether a value counts as absent."""
    if value is None or value is MISSING:
        return True
    if isinstance(value, str):
        return value == ""
    if _is_collection(value):
        return len(value) == 0
    return False


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


_NUMERIC_STRING = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?$")


def _size(value: Any) -> Optional[Number]:
    """
    Numbers and numeric strings compare by value, other strings and
    collections by length.
    """
    if _is_number(value):
        return value
    if isinstance(value, str):
        if _NUMERIC_STRING.match(value.strip()):
            number = float(value)
            return int(number) if number.is_integer() else number
        return len(value)
    if _is_collection(value):
        return len(value)
    return None


def _format_number(value: Number) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


class Rule(ABC):
    """
    Validation rule contract.

    Subclasses implement ``passes``. They may override ``default_message``,
    ``replacements`` (placeholder values) and ``from_parameters`` (building
    the rule from a rule-string such as ``"between:1,10"``).
    """

    name: ClassVar[str] = ""
    implicit: ClassVar[bool] = False
    default_message: ClassVar[str] = "The :attribute is invalid."

    @abstractmethod
    def passes(self, attribute: str, value: Any) -> bool:
        """Decide whether ``value``, named ``attribute``, satisfies the rule."""
        ...

    def message(self) -> str:
        """Get the message template used when no override exists."""
        return self.default_message

    def replacements(self) -> Dict[str, str]:
        """Get values for the parameter placeholders in the message."""
        return {}

    def identifier(self) -> str:
        """Get the name used in ``"attribute.rule"`` message keys."""
        return self.name or snake_case(type(self).__name__)

    @classmethod
    def from_parameters(cls, parameters: Sequence[str]) -> "Rule":
        """Build the rule from rule-string parameters."""
        cls._expect(parameters, 0)
        return cls()

    @classmethod
    def _expect(cls, parameters: Sequence[str], count: int, at_least: bool = False) -> None:
        label = cls.name or snake_case(cls.__name__)
        if at_least and len(parameters) < count:
            raise RuleConfigurationError(
                f"Validation rule '{label}' requires at least {count} parameter(s)"
            )
        if not at_least and len(parameters) != count:
            raise RuleConfigurationError(
                f"Validation rule '{label}' requires {count} parameter(s), "
                f"got {len(parameters)}"
            )

    def __call__(self, attribute: str, value: Any) -> bool:
        return self.passes(attribute, value)


class DataAwareRule(Rule):
    """
    Rule that reads sibling fields.

    The validator calls ``set_data`` with a read-only view of the whole
    input before evaluating the rule.
    """

    _data: Mapping[str, Any] = MappingProxyType({})

    def set_data(self, data: Mapping[str, Any]) -> "DataAwareRule":
        self._data = MappingProxyType(data) if isinstance(data, dict) else data
        return self

    @property
    def data(self) -> Mapping[str, Any]:
        return self._data


def _parse_number(rule: str, raw: str) -> Number:
    try:
        number = float(raw)
    except (TypeError, ValueError):
        raise RuleConfigurationError(
            f"Validation rule '{rule}' expects a numeric parameter, got {raw!r}"
        ) from None
    return int(number) if number.is_integer() else number


# =============================================================================
# Presence
# =============================================================================

@dataclass
class Required(Rule):
    """Field must be present and not empty."""

    name = "required"
    implicit = True
    default_message = "The :attribute field is required."

    trim_whitespace: bool = True

    def passes(self, attribute: str, value: Any) -> bool:
        if value is None or value is MISSING:
            return False
        if isinstance(value, str):
            return bool(value.strip()) if self.trim_whitespace else value != ""
        if _is_collection(value):
            return len(value) > 0
        return True

    @classmethod
    def from_parameters(cls, parameters: Sequence[str]) -> "Required":
        cls._expect(parameters, 0)
        trim = get_config().get_bool("validation.required_trims_whitespace", True)
        return cls(trim_whitespace=trim)


# =============================================================================
# Types and formats
# =============================================================================

@dataclass
class String(Rule):
    """Value must be a string."""

    name = "string"
    default_message = "The :attribute must be a string."

    def passes(self, attribute: str, value: Any) -> bool:
        return isinstance(value, str)


@dataclass
class Numeric(Rule):
    """Value must be a number or a numeric string."""

    name = "numeric"
    default_message = "The :attribute must be a number."

    _pattern: ClassVar[Pattern] = _NUMERIC_STRING

    def passes(self, attribute: str, value: Any) -> bool:
        if _is_number(value):
            return True
        if isinstance(value, str):
            return bool(self._pattern.match(value.strip()))
        return False


@dataclass
class Integer(Rule):
    """Value must be an integer or an integer string."""

    name = "integer"
    default_message = "The :attribute must be an integer."

    _pattern: ClassVar[Pattern] = re.compile(r"^[+-]?\d+$")

    def passes(self, attribute: str, value: Any) -> bool:
        if isinstance(value, bool):
            return False
        if isinstance(value, int):
            return True
        if isinstance(value, str):
            return bool(self._pattern.match(value.strip()))
        return False


@dataclass
class Boolean(Rule):
    """Value must be true, false, 0, 1, "0" or "1"."""

    name = "boolean"
    default_message = "The :attribute must be true or false."

    def passes(self, attribute: str, value: Any) -> bool:
        if isinstance(value, bool):
            return True
        if isinstance(value, int):
            return value in (0, 1)
        if isinstance(value, str):
            return value in ("0", "1")
        return False


@dataclass
class Array(Rule):
    """Value must be a list or a mapping."""

    name = "array"
    default_message = "The :attribute must be an array."

    def passes(self, attribute: str, value: Any) -> bool:
        return isinstance(value, (list, tuple, MappingABC))


@dataclass
class Email(Rule):
    """Validate email format."""

    name = "email"
    default_message = "The :attribute must be a valid email address."

    _pattern: ClassVar[Pattern] = re.compile(
        r"^[a-zA-Z0-9.!#$%&'*+/=?^_`{|}~-]+"
        r"@[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?"
        r"(?:\.[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?)+$"
    )

    def passes(self, attribute: str, value: Any) -> bool:
        if not isinstance(value, str) or ".." in value:
            return False
        local, _, _ = value.partition("@")
        if local.startswith(".") or local.endswith("."):
            return False
        return bool(self._pattern.match(value))


@dataclass
class Url(Rule):
    """Validate URL format."""

    name = "url"
    default_message = "The :attribute must be a valid URL."

    _pattern: ClassVar[Pattern] = re.compile(
        r"^https?://"
        r"(?:(?:[A-Z0-9](?:[A-Z0-9-]{0,61}[A-Z0-9])?\.)+[A-Z]{2,63}\.?|"
        r"localhost|"
        r"\d{1,3}\.\d{1,3}\.\d{1,3}\.\d{1,3})"
        r"(?::\d+)?"
        r"(?:/?|[/?]\S+)$",
        re.IGNORECASE,
    )

    def passes(self, attribute: str, value: Any) -> bool:
        return isinstance(value, str) and bool(self._pattern.match(value))


@dataclass
class Alpha(Rule):
    """Value must contain only letters."""

    name = "alpha"
    default_message = "The :attribute must only contain letters."

    def passes(self, attribute: str, value: Any) -> bool:
        return isinstance(value, str) and value.isalpha()


@dataclass
class AlphaNum(Rule):
    """Value must contain only letters and numbers."""

    name = "alpha_num"
    default_message = "The :attribute must only contain letters and numbers."

    def passes(self, attribute: str, value: Any) -> bool:
        return isinstance(value, str) and value.isalnum()


@dataclass
class Uuid(Rule):
    """Value must be a valid UUID."""

    name = "uuid"
    default_message = "The :attribute must be a valid UUID."

    def passes(self, attribute: str, value: Any) -> bool:
        if isinstance(value, uuid_module.UUID):
            return True
        if not isinstance(value, str):
            return False
        try:
            uuid_module.UUID(value)
        except ValueError:
            return False
        return True


@dataclass
class Date(Rule):
    """
    Value must be a valid date.

    Without a format, ISO 8601 dates and datetimes are accepted.
    """

    name = "date"
    default_message = "The :attribute is not a valid date."

    format: Optional[str] = None

    def passes(self, attribute: str, value: Any) -> bool:
        if isinstance(value, date):
            return True
        if not isinstance(value, str):
            return False
        try:
            if self.format:
                datetime.strptime(value, self.format)
            else:
                datetime.fromisoformat(value)
        except ValueError:
            return False
        return True

    @classmethod
    def from_parameters(cls, parameters: Sequence[str]) -> "Date":
        if not parameters:
            return cls()
        # Formats may contain commas
        return cls(format=",".join(parameters))


@dataclass
class Regex(Rule):
    """
    Value must match a regular expression.

    Delimited patterns (``/^[a-z]+$/i``) are accepted; trailing ``i``,
    ``m``, ``s`` and ``x`` flags map to the ``re`` flags.
    """

    name = "regex"
    default_message = "The :attribute format is invalid."

    pattern: Union[str, Pattern]

    _flags: ClassVar[Dict[str, int]] = {
        "i": re.IGNORECASE,
        "m": re.MULTILINE,
        "s": re.DOTALL,
        "x": re.VERBOSE,
        "u": 0,
    }

    def __post_init__(self) -> None:
        if isinstance(self.pattern, str):
            self.pattern = self._compile(self.pattern)

    @classmethod
    def _compile(cls, pattern: str) -> Pattern:
        flags = 0
        delimiter = pattern[:1]
        end = pattern.rfind(delimiter) if delimiter in ("/", "#", "~") else -1
        if end > 0:
            modifiers = pattern[end + 1:]
            if all(m in cls._flags for m in modifiers):
                for m in modifiers:
                    flags |= cls._flags[m]
                pattern = pattern[1:end]
        try:
            return re.compile(pattern, flags)
        except re.error as e:
            raise RuleConfigurationError(f"Invalid regex pattern {pattern!r}: {e}") from e

    def passes(self, attribute: str, value: Any) -> bool:
        if not isinstance(value, str) and not _is_number(value):
            return False
        return self.pattern.search(str(value)) is not None

    @classmethod
    def from_parameters(cls, parameters: Sequence[str]) -> "Regex":
        cls._expect(parameters, 1, at_least=True)
        # Patterns may contain commas
        return cls(pattern=",".join(parameters))


# =============================================================================
# Size
# =============================================================================

@dataclass
class Min(Rule):
    """Minimum value for numbers, minimum length for strings and collections."""

    name = "min"
    default_message = "The :attribute must be at least :min."

    minimum: Number

    def passes(self, attribute: str, value: Any) -> bool:
        size = _size(value)
        return size is not None and size >= self.minimum

    def replacements(self) -> Dict[str, str]:
        return {"min": _format_number(self.minimum)}

    @classmethod
    def from_parameters(cls, parameters: Sequence[str]) -> "Min":
        cls._expect(parameters, 1)
        return cls(minimum=_parse_number(cls.name, parameters[0]))


@dataclass
class Max(Rule):
    """Maximum value for numbers, maximum length for strings and collections."""

    name = "max"
    default_message = "The :attribute may not be greater than :max."

    maximum: Number

    def passes(self, attribute: str, value: Any) -> bool:
        size = _size(value)
        return size is not None and size <= self.maximum

    def replacements(self) -> Dict[str, str]:
        return {"max": _format_number(self.maximum)}

    @classmethod
    def from_parameters(cls, parameters: Sequence[str]) -> "Max":
        cls._expect(parameters, 1)
        return cls(maximum=_parse_number(cls.name, parameters[0]))


@dataclass
class Between(Rule):
    """Size must lie within an inclusive range."""

    name = "between"
    default_message = "The :attribute must be between :min and :max."

    minimum: Number
    maximum: Number

    def __post_init__(self) -> None:
        if self.minimum > self.maximum:
            raise RuleConfigurationError(
                f"Validation rule 'between' has min {self.minimum} greater than max {self.maximum}"
            )

    def passes(self, attribute: str, value: Any) -> bool:
        size = _size(value)
        return size is not None and self.minimum <= size <= self.maximum

    def replacements(self) -> Dict[str, str]:
        return {
            "min": _format_number(self.minimum),
            "max": _format_number(self.maximum),
        }

    @classmethod
    def from_parameters(cls, parameters: Sequence[str]) -> "Between":
        cls._expect(parameters, 2)
        return cls(
            minimum=_parse_number(cls.name, parameters[0]),
            maximum=_parse_number(cls.name, parameters[1]),
        )


# =============================================================================
# Membership
# =============================================================================

def _member(value: Any, allowed: Tuple[Any, ...]) -> bool:
    if _is_collection(value):
        return False
    if value in allowed:
        return True
    # Rule-string parameters are strings; compare 1 with "1"
    return str(value) in {str(v) for v in allowed}


@dataclass
class In(Rule):
    """Value must be one of the allowed values."""

    name = "in"
    default_message = "The selected :attribute is invalid."

    values: Tuple[Any, ...]

    def __post_init__(self) -> None:
        self.values = tuple(self.values)

    def passes(self, attribute: str, value: Any) -> bool:
        return _member(value, self.values)

    def replacements(self) -> Dict[str, str]:
        return {"values": ", ".join(str(v) for v in self.values)}

    @classmethod
    def from_parameters(cls, parameters: Sequence[str]) -> "In":
        cls._expect(parameters, 1, at_least=True)
        return cls(values=tuple(parameters))


@dataclass
class NotIn(Rule):
    """Value must not be one of the disallowed values."""

    name = "not_in"
    default_message = "The selected :attribute is invalid."

    values: Tuple[Any, ...]

    def __post_init__(self) -> None:
        self.values = tuple(self.values)

    def passes(self, attribute: str, value: Any) -> bool:
        return not _member(value, self.values)

    def replacements(self) -> Dict[str, str]:
        return {"values": ", ".join(str(v) for v in self.values)}

    @classmethod
    def from_parameters(cls, parameters: Sequence[str]) -> "NotIn":
        cls._expect(parameters, 1, at_least=True)
        return cls(values=tuple(parameters))


# =============================================================================
# Cross-field
# =============================================================================

@dataclass
class Confirmed(DataAwareRule):
    """Value must equal the sibling ``{attribute}_confirmation`` field."""

    name = "confirmed"
    default_message = "The :attribute confirmation does not match."

    def passes(self, attribute: str, value: Any) -> bool:
        return value == get_nested(self.data, f"{attribute}_confirmation", MISSING)


@dataclass
class Same(DataAwareRule):
    """Value must equal another field."""

    name = "same"
    default_message = "The :attribute and :other must match."

    other: str

    def passes(self, attribute: str, value: Any) -> bool:
        return value == get_nested(self.data, self.other, MISSING)

    def replacements(self) -> Dict[str, str]:
        return {"other": humanize(self.other)}

    @classmethod
    def from_parameters(cls, parameters: Sequence[str]) -> "Same":
        cls._expect(parameters, 1)
        return cls(other=parameters[0])


@dataclass
class Different(DataAwareRule):
    """Value must differ from another field."""

    name = "different"
    default_message = "The :attribute and :other must be different."

    other: str

    def passes(self, attribute: str, value: Any) -> bool:
        return value != get_nested(self.data, self.other, MISSING)

    def replacements(self) -> Dict[str, str]:
        return {"other": humanize(self.other)}

    @classmethod
    def from_parameters(cls, parameters: Sequence[str]) -> "Different":
        cls._expect(parameters, 1)
        return cls(other=parameters[0])


# =============================================================================
# Callables
# =============================================================================

class CallableRule(Rule):
    """
    Rule wrapper for a plain ``(attribute, value) -> bool`` callable.

    Example:
        def even(attribute, value):
            return int(value) % 2 == 0

        Validator(data, {"count": ["integer", even]})
    """

    def __init__(
        self,
        callback: Callable[[str, Any], bool],
        message: str = "The :attribute is invalid.",
        name: Optional[str] = None,
    ) -> None:
        self.callback = callback
        self._message = message
        self.name = name or getattr(callback, "__name__", "callable")

    def passes(self, attribute: str, value: Any) -> bool:
        return bool(self.callback(attribute, value))

    def message(self) -> str:
        return self._message

    def __repr__(self) -> str:
        return f"CallableRule({self.name!r})"


BUILTIN_RULES: Tuple[type, ...] = (
    Required,
    String,
    Numeric,
    Integer,
    Boolean,
    Array,
    Email,
    Url,
    Alpha,
    AlphaNum,
    Uuid,
    Date,
    Regex,
    Min,
    Max,
    Between,
    In,
    NotIn,
    Confirmed,
    Same,
    Different,
)
