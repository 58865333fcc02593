"""Helper registry for Bindery environments.

Provides a dict-like interface for the helpers a template can call.
"""

from __future__ import annotations

from collections import ChainMap
from collections.abc import Callable, ItemsView, KeysView, Mapping, ValuesView
from types import MappingProxyType
from typing import Any

HelperFunction = Callable[..., Any]


class HelperRegistry:
    """Name -> helper function map.

    Supports:
        - registry['name'] = func
        - registry.update({'name': func})
        - func = registry['name']
        - 'name' in registry

    All mutations use copy-on-write: the dict returned by ``snapshot()``
    is never modified afterwards, so a render that took a snapshot keeps
    a stable view even if helpers are registered meanwhile. Registration
    is still meant to happen at configuration time.
    """

    __slots__ = ("_helpers",)

    def __init__(self, helpers: Mapping[str, HelperFunction] | None = None):
        self._helpers: dict[str, HelperFunction] = {}
        if helpers:
            self.update(helpers)

    @staticmethod
    def _check(name: str, func: HelperFunction) -> None:
        if not isinstance(name, str) or not name or any(ch.isspace() for ch in name):
            raise ValueError(f"Invalid helper name: {name!r}")
        if not callable(func):
            raise TypeError(f"Helper {name!r} must be callable, got {type(func).__name__}")

    def register(self, name: str, func: HelperFunction) -> None:
        """Add or replace one helper."""
        self[name] = func

    def __getitem__(self, name: str) -> HelperFunction:
        return self._helpers[name]

    def __setitem__(self, name: str, func: HelperFunction) -> None:
        self._check(name, func)
        new = self._helpers.copy()
        new[name] = func
        self._helpers = new

    def __delitem__(self, name: str) -> None:
        new = self._helpers.copy()
        del new[name]
        self._helpers = new

    def __contains__(self, name: object) -> bool:
        return name in self._helpers

    def __len__(self) -> int:
        return len(self._helpers)

    def __iter__(self):
        return iter(self._helpers)

    def get(self, name: str, default: HelperFunction | None = None) -> HelperFunction | None:
        return self._helpers.get(name, default)

    def update(self, mapping: Mapping[str, HelperFunction]) -> None:
        """Batch register helpers."""
        for name, func in mapping.items():
            self._check(name, func)
        new = self._helpers.copy()
        new.update(mapping)
        self._helpers = new

    def copy(self) -> dict[str, HelperFunction]:
        """Return a copy of the underlying dict."""
        return self._helpers.copy()

    def snapshot(self) -> Mapping[str, HelperFunction]:
        """Read-only view of the helpers registered right now."""
        return MappingProxyType(self._helpers)

    def overlay(
        self, overrides: Mapping[str, HelperFunction] | None
    ) -> Mapping[str, HelperFunction]:
        """Merged view with ``overrides`` shadowing registered helpers.

        The registry itself is not modified; the overrides apply only to
        whoever holds the returned view.
        """
        base = self.snapshot()
        if not overrides:
            return base
        for name, func in overrides.items():
            self._check(name, func)
        return ChainMap(dict(overrides), base)

    def keys(self) -> KeysView[str]:
        return self._helpers.keys()

    def values(self) -> ValuesView[HelperFunction]:
        return self._helpers.values()

    def items(self) -> ItemsView[str, HelperFunction]:
        return self._helpers.items()

    def __repr__(self) -> str:
        return f"<HelperRegistry {len(self._helpers)} helpers>"
