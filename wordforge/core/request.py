"""
WordForge Request Input
=======================

The validation layer only ever asks a request for its submitted data
through ``all()``. ``InputSource`` names that capability; ``Request`` is an
in-memory implementation that merges the parameter bags a REST request
carries.

Merge priority (lowest to highest):
    query string < form body < uploaded files < route params < JSON body
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, Mapping, Optional, Protocol, runtime_checkable

from wordforge.utils.helpers import MISSING, get_nested, has_nested, set_nested


@runtime_checkable
class InputSource(Protocol):
    """Anything that can hand over its submitted field values."""

    def all(self) -> Mapping[str, Any]:
        ...


class Request:
    """
    Transport-agnostic request data.

    Example:
        request = Request(
            query={"page": "2"},
            json={"name": "Ada", "address": {"city": "London"}},
            route_params={"id": "7"},
        )

        request.all()                   # merged mapping
        request.input("address.city")   # "London"
        request.only("name", "id")      # {"name": "Ada", "id": "7"}
    """

    def __init__(
        self,
        query: Optional[Mapping[str, Any]] = None,
        form: Optional[Mapping[str, Any]] = None,
        json: Optional[Mapping[str, Any]] = None,
        route_params: Optional[Mapping[str, Any]] = None,
        files: Optional[Mapping[str, Any]] = None,
    ) -> None:
        self.query = dict(query or {})
        self.form = dict(form or {})
        self.json = dict(json or {})
        self.route_params = dict(route_params or {})
        self.files = dict(files or {})
        self._cached: Optional[Dict[str, Any]] = None

    def all(self) -> Dict[str, Any]:
        """Get all submitted values merged into one mapping."""
        if self._cached is None:
            self._cached = {
                **self.query,
                **self.form,
                **self.files,
                **self.route_params,
                **self.json,
            }
        return self._cached

    def input(self, key: Optional[str] = None, default: Any = None) -> Any:
        """Get one value by dot path, or everything when no key is given."""
        if key is None:
            return self.all()
        value = get_nested(self.all(), key, MISSING)
        return default if value is MISSING else value

    def has(self, *keys: str) -> bool:
        """Check that every key is present."""
        data = self.all()
        return all(has_nested(data, key) for key in keys)

    def only(self, *keys: str) -> Dict[str, Any]:
        """Get the subset of input for the given keys."""
        data = self.all()
        result: Dict[str, Any] = {}
        for key in _flatten_keys(keys):
            value = get_nested(data, key, MISSING)
            if value is not MISSING:
                set_nested(result, key, value)
        return result

    def except_(self, *keys: str) -> Dict[str, Any]:
        """Get all top-level input except the given keys."""
        excluded = set(_flatten_keys(keys))
        return {k: v for k, v in self.all().items() if k not in excluded}

    def __repr__(self) -> str:
        return f"<Request keys={sorted(self.all())}>"


def _flatten_keys(keys: Iterable[Any]) -> Iterable[str]:
    for key in keys:
        if isinstance(key, (list, tuple, set)):
            yield from key
        else:
            yield key
