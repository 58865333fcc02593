"""Pure runtime functions shared by the evaluator and the built-in helpers.

None of these close over engine state; they use only their parameters.

Thread-Safety:
All functions are stateless and safe for concurrent use.

"""

from __future__ import annotations

import json
import math
import re
from collections.abc import Mapping
from datetime import date
from numbers import Number
from typing import Any


class _Undefined:
    """Sentinel for a path that resolved to nothing.

    Distinct from ``None``: a key that is present with a ``None`` value is
    defined, and lookups do not fall through to the parent scope for it.
    """

    __slots__ = ()

    def __str__(self) -> str:
        return ""

    def __repr__(self) -> str:
        return "Undefined"

    def __bool__(self) -> bool:
        return False

    def __eq__(self, other: object) -> bool:
        return isinstance(other, _Undefined)

    def __hash__(self) -> int:
        return hash(_Undefined)


UNDEFINED = _Undefined()

_NUMERIC_LITERAL = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def is_record(value: Any) -> bool:
    """True for mapping values (scopes of their own inside loops)."""
    return isinstance(value, Mapping)


def is_sequence(value: Any) -> bool:
    """True for values a loop iterates by position. Strings are not sequences."""
    return isinstance(value, (list, tuple))


def is_missing(value: Any) -> bool:
    """True for ``None`` and ``UNDEFINED``."""
    return value is None or value is UNDEFINED


def walk_path(root: Any, segments: list[str]) -> Any:
    """Follow dotted-path segments from ``root``.

    Mappings are indexed by key, lists and tuples by integer segment,
    other objects by public attribute. ``length`` on a sequence or string
    gives its size. Any miss returns ``UNDEFINED``.
    """
    current = root
    for segment in segments:
        if is_missing(current):
            return UNDEFINED
        if isinstance(current, Mapping):
            current = current.get(segment, UNDEFINED)
        elif isinstance(current, (list, tuple, str)):
            if segment == "length":
                current = len(current)
            elif segment.isascii() and segment.isdigit() and int(segment) < len(current):
                current = current[int(segment)]
            else:
                return UNDEFINED
        elif segment.startswith("_"):
            return UNDEFINED
        else:
            current = getattr(current, segment, UNDEFINED)
    return current


def is_truthy(value: Any) -> bool:
    """Coerce a value to a boolean for conditional branching.

    ``None``/undefined are false, booleans are themselves, numbers are false
    only for zero, strings and sequences only when empty. Every other
    value, including an empty mapping, is true.
    """
    if is_missing(value):
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, Number):
        return value != 0
    if isinstance(value, (str, list, tuple)):
        return len(value) > 0
    return True


def to_display_string(value: Any, _seen: frozenset[int] = frozenset()) -> str:
    """Stringify a value for substitution into output text.

    Total: every value produces a string. A list nested inside itself
    renders as empty at the point of recursion.
    """
    if is_missing(value):
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        if value.is_integer():
            return str(int(value))
        return repr(value)
    if isinstance(value, int):
        try:
            return str(value)
        except ValueError:
            # Past the int-to-str digit limit; too large for a float as well
            return "Infinity" if value > 0 else "-Infinity"
    if isinstance(value, (list, tuple)):
        if id(value) in _seen:
            return ""
        seen = _seen | {id(value)}
        return ",".join(to_display_string(item, seen) for item in value)
    if isinstance(value, Mapping):
        try:
            return json.dumps(value, default=str, ensure_ascii=False)
        except (TypeError, ValueError):
            # Non-scalar keys or a circular mapping
            return str(value)
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


def is_quoted(raw: str) -> bool:
    """True if ``raw`` is wrapped in a matching pair of quotes."""
    return len(raw) >= 2 and raw[0] == raw[-1] and raw[0] in "\"'"


def coerce_literal(raw: str) -> Any:
    """Interpret a raw argument that did not resolve as a variable.

    Quoted text loses its quotes, numeric text becomes ``int``/``float``,
    anything else is kept as the raw string.

    Example:
        >>> coerce_literal('"USD"'), coerce_literal("2"), coerce_literal("2.5")
        ('USD', 2, 2.5)
    """
    if is_quoted(raw):
        return raw[1:-1]
    if _NUMERIC_LITERAL.fullmatch(raw):
        if "." in raw or "e" in raw or "E" in raw:
            return float(raw)
        try:
            return int(raw)
        except ValueError:
            # Longer than the interpreter's int conversion limit
            return float(raw)
    return raw
