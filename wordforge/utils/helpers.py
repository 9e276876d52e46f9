"""
WordForge Helpers
=================

Small data and string helpers shared by the validation and request layers.
"""

from __future__ import annotations

import re
from typing import Any, Dict, Mapping, Sequence


class _Missing:
    """Sentinel for values absent from a mapping."""

    _instance = None

    def __new__(cls) -> "_Missing":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "MISSING"


MISSING: Any = _Missing()

_WORD_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")
_SEPARATORS = re.compile(r"[-\s]+")


def snake_case(text: str) -> str:
    """
    Example:
        >>> snake_case("AlphaNum")
        'alpha_num'
        >>> snake_case("HTTPStatus")
        'http_status'
    """
    return _SEPARATORS.sub("_", _WORD_BOUNDARY.sub("_", text)).lower()


def humanize(attribute: str) -> str:
    """
    Turn a raw attribute name into a display label.

    Example:
        >>> humanize("first_name")
        'first name'
    """
    return attribute.replace("_", " ")


def _step(container: Any, key: str) -> Any:
    """Descend one path segment, MISSING when it cannot be followed."""
    if isinstance(container, Mapping):
        return container.get(key, MISSING)

    is_list = isinstance(container, Sequence) and not isinstance(container, (str, bytes))
    if is_list and key.isdigit() and int(key) < len(container):
        return container[int(key)]

    return MISSING


def get_nested(
    obj: Any,
    path: str,
    default: Any = MISSING,
    separator: str = ".",
) -> Any:
    """
    Resolve a dot path through mappings and list indices.

    A literal key containing the separator wins over the nested path. A
    segment that cannot be followed yields ``default``, never an error.

    Example:
        >>> get_nested({"a": {"b": 1}}, "a.b")
        1
        >>> get_nested({"a": [10, 20]}, "a.1")
        20
    """
    if isinstance(obj, Mapping) and path in obj:
        return obj[path]

    for segment in path.split(separator):
        obj = _step(obj, segment)
        if obj is MISSING:
            return default

    return obj


def has_nested(obj: Any, path: str, separator: str = ".") -> bool:
    """Check whether a dot path resolves to a value (``None`` counts)."""
    return get_nested(obj, path, MISSING, separator) is not MISSING


def set_nested(
    obj: Dict[str, Any],
    path: str,
    value: Any,
    separator: str = ".",
) -> Dict[str, Any]:
    """
    Write ``value`` at a dot path, creating (or replacing non-dict)
    intermediate levels.

    Example:
        >>> set_nested({}, "a.b.c", 1)
        {'a': {'b': {'c': 1}}}
    """
    *parents, leaf = path.split(separator)
    target = obj

    for segment in parents:
        child = target.get(segment)
        if not isinstance(child, dict):
            child = target[segment] = {}
        target = child

    target[leaf] = value
    return obj
