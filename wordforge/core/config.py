"""
WordForge Configuration
=======================

Layered settings with dot-notation access.

Layers resolve from lowest to highest priority:

    defaults (0) < added layers (10 by default) < environment (100) < runtime (1000)

Environment variable names map to keys by stripping the prefix, lowercasing
and treating ``__`` as the nesting separator:

    WORDFORGE_LOGGING__LEVEL=debug
        -> logging.level = "debug"
    WORDFORGE_VALIDATION__REQUIRED_TRIMS_WHITESPACE=false
        -> validation.required_trims_whitespace = False

Example:
    settings = get_config()
    settings.set("validation.messages.required", ":attribute cannot be blank.")
    settings.get("validation.messages")  # {"required": ":attribute cannot be blank."}
"""

from __future__ import annotations

import copy
import json
import os
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

from wordforge.utils.helpers import MISSING, get_nested, set_nested

ENV_PREFIX = "WORDFORGE_"

ENV_LAYER = "environment"
RUNTIME_LAYER = "runtime"

DEFAULTS: Dict[str, Any] = {
    "validation": {
        "messages": {},
        "required_trims_whitespace": True,
    },
    "logging": {
        "level": "WARNING",
        "format": "text",
    },
}

_TRUE_WORDS = frozenset({"true", "yes", "on"})
_FALSE_WORDS = frozenset({"false", "no", "off"})
_TRUTHY = _TRUE_WORDS | {"1"}


@dataclass
class ConfigLayer:
    """Named block of settings; higher priority wins on conflicts."""

    name: str
    priority: int
    values: Dict[str, Any] = field(default_factory=dict)


def coerce_env_value(raw: str) -> Any:
    """
    Convert an environment string to a Python value.

    ``true``/``yes``/``on`` and ``false``/``no``/``off`` become booleans,
    digit strings become ints, JSON arrays and objects are decoded; anything
    else stays a string.
    """
    lowered = raw.strip().lower()
    if lowered in _TRUE_WORDS:
        return True
    if lowered in _FALSE_WORDS:
        return False

    try:
        return int(raw)
    except ValueError:
        pass

    if raw[:1] in ("{", "["):
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            return raw

    return raw


def _overlay(target: Dict[str, Any], layer: Mapping[str, Any]) -> None:
    """Recursively copy ``layer`` over ``target``, merging nested dicts."""
    for key, value in layer.items():
        existing = target.get(key)
        if isinstance(existing, dict) and isinstance(value, dict):
            _overlay(existing, value)
        else:
            target[key] = copy.deepcopy(value)


class Config:
    """
    Settings container.

    Example:
        settings = Config()
        settings.set("logging.level", "DEBUG")
        settings.get("logging.level")             # "DEBUG"
        settings.get("logging.missing", "x")      # "x"
    """

    def __init__(self, load_env: bool = True) -> None:
        self._layers: Dict[str, ConfigLayer] = {}
        self._resolved: Optional[Dict[str, Any]] = None

        self.add_source("defaults", DEFAULTS, priority=0)
        if load_env:
            self.load_env()

    # -------------------------------------------------------------------------
    # Layers
    # -------------------------------------------------------------------------

    def add_source(
        self,
        name: str,
        data: Mapping[str, Any],
        priority: int = 10,
    ) -> None:
        """Add (or replace) a named layer."""
        self._layers[name] = ConfigLayer(name, priority, copy.deepcopy(dict(data)))
        self._resolved = None

    def load_env(
        self,
        environ: Optional[Mapping[str, str]] = None,
        prefix: str = ENV_PREFIX,
    ) -> None:
        """Replace the environment layer from prefixed variables."""
        source = os.environ if environ is None else environ
        values: Dict[str, Any] = {}

        for name, raw in source.items():
            if not name.startswith(prefix) or name == prefix:
                continue
            key = name[len(prefix):].lower().replace("__", ".")
            set_nested(values, key, coerce_env_value(raw))

        self._layers.pop(ENV_LAYER, None)
        if values:
            self.add_source(ENV_LAYER, values, priority=100)
        self._resolved = None

    def _tree(self) -> Dict[str, Any]:
        if self._resolved is None:
            resolved: Dict[str, Any] = {}
            for layer in sorted(self._layers.values(), key=lambda layer: layer.priority):
                _overlay(resolved, layer.values)
            self._resolved = resolved
        return self._resolved

    # -------------------------------------------------------------------------
    # Access
    # -------------------------------------------------------------------------

    def get(self, key: str, default: Any = None) -> Any:
        """Get a value by dot path."""
        value = get_nested(self._tree(), key, MISSING)
        return default if value is MISSING else value

    def get_bool(self, key: str, default: bool = False) -> bool:
        value = self.get(key, default)
        if isinstance(value, str):
            return value.strip().lower() in _TRUTHY
        return bool(value)

    def set(self, key: str, value: Any) -> None:
        """Set a runtime value; runtime values outrank every other layer."""
        runtime = self._layers.get(RUNTIME_LAYER)
        if runtime is None:
            runtime = self._layers[RUNTIME_LAYER] = ConfigLayer(RUNTIME_LAYER, 1000)
        set_nested(runtime.values, key, value)
        self._resolved = None

    def has(self, key: str) -> bool:
        return self.get(key) is not None

    def all(self) -> Dict[str, Any]:
        return copy.deepcopy(self._tree())

    def section(self, prefix: str) -> Dict[str, Any]:
        """Get a copy of the mapping stored under ``prefix``."""
        value = self.get(prefix)
        return copy.deepcopy(value) if isinstance(value, dict) else {}

    def __getitem__(self, key: str) -> Any:
        value = self.get(key, MISSING)
        if value is MISSING:
            raise KeyError(key)
        return value

    def __setitem__(self, key: str, value: Any) -> None:
        self.set(key, value)

    def __contains__(self, key: str) -> bool:
        return self.has(key)


_settings: Optional[Config] = None


def get_config() -> Config:
    """Get the process-wide settings, created on first use."""
    global _settings
    if _settings is None:
        _settings = Config()
    return _settings


def reset_config() -> Config:
    """Discard runtime changes and reload defaults and environment."""
    global _settings
    _settings = Config()
    return _settings


def config(key: str, default: Any = None) -> Any:
    """Shortcut for ``get_config().get(key, default)``."""
    return get_config().get(key, default)
