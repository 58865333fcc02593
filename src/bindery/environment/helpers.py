"""Built-in helpers for Bindery templates.

Helpers are called positionally from a tag: ``{{name arg1 arg2}}``.
Arguments arrive already resolved (variables looked up, literals coerced)
and the return value is stringified into the output.

Categories:
**Formatting**:
    - `formatDate(date, format="YYYY-MM-DD")`: Tokens YYYY MM DD HH mm ss
    - `formatCurrency(amount, currency="USD")`: Symbol + grouped 2-decimal amount

**Strings**:
    - `upper(text)`, `lower(text)`, `capitalize(text)`
    - `truncate(text, length=100)`: Cut to length and append "..."
    - `default(value, fallback)`: Fallback for None/undefined/empty string
    - `join(items, separator=", ")`
    - `length(value)`: Size of a sequence, string or mapping; 0 otherwise

**Arithmetic**:
    - `add`, `subtract`, `multiply`, `divide` (division by zero gives 0)

**Comparison**:
    - `eq`, `ne`: Equality
    - `gt`, `lt`, `gte`, `lte`: Numeric ordering

**Logic**:
    - `and(*values)`, `or(*values)`, `not(value)`: Using template truthiness

Every helper tolerates arguments of the wrong type. Numeric helpers
coerce the way JavaScript's ``Number()`` does: text
that is not a number becomes NaN, which renders as ``NaN``.

Custom Helpers:
    >>> env.register_helper("shout", lambda text: f"{text}!")
    >>> # {{shout name}}

"""

from __future__ import annotations

import math
from collections.abc import Callable, Mapping
from datetime import UTC, date, datetime
from numbers import Number
from typing import Any

from bindery.runtime import UNDEFINED, is_missing, is_truthy, to_display_string

_CURRENCY_SYMBOLS = {
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "JPY": "¥",
}

# Integers beyond this lose precision as floats
_MAX_SAFE_INTEGER = 2**53 - 1


def _from_int(number: int) -> float | int:
    """Keep safe integers exact; larger ones become floats, infinite past float range."""
    if -_MAX_SAFE_INTEGER <= number <= _MAX_SAFE_INTEGER:
        return number
    try:
        return float(number)
    except OverflowError:
        return math.inf if number > 0 else -math.inf


def _to_number(value: Any) -> float | int:
    """Coerce to a number; NaN when that is not possible.

    Never returns an int outside the float-safe range, so arithmetic on
    the result cannot overflow.
    """
    if value is None:
        return 0
    if value is UNDEFINED:
        return math.nan
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return _from_int(value)
    if isinstance(value, float):
        return value
    if isinstance(value, Number):
        try:
            return float(value)
        except (OverflowError, TypeError, ValueError):
            return math.nan
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return 0
        if text in ("Infinity", "+Infinity", "-Infinity"):
            return -math.inf if text[0] == "-" else math.inf
        # float() and int() accept spellings that are not numeric text
        lowered = text.lower()
        if "_" in text or "nan" in lowered or "inf" in lowered:
            return math.nan
        try:
            return _from_int(int(text))
        except ValueError:
            pass
        try:
            return float(text)
        except ValueError:
            return math.nan
    return math.nan


def _text(value: Any) -> str:
    return to_display_string(value)


def _to_datetime(value: Any) -> datetime | None:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        try:
            return datetime.fromtimestamp(value / 1000, tz=UTC)
        except (OverflowError, OSError, ValueError):
            return None
    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            return datetime.fromisoformat(text)
        except ValueError:
            return None
    return None


def _helper_format_date(value: Any = None, fmt: Any = "YYYY-MM-DD") -> str:
    """Format a date with YYYY/MM/DD/HH/mm/ss tokens, each replaced once."""
    if not is_truthy(value):
        return ""
    moment = _to_datetime(value)
    if moment is None:
        return _text(value)
    pattern = _text(fmt) or "YYYY-MM-DD"
    fields = {
        "YYYY": f"{moment.year:04d}",
        "MM": f"{moment.month:02d}",
        "DD": f"{moment.day:02d}",
        "HH": f"{moment.hour:02d}",
        "mm": f"{moment.minute:02d}",
        "ss": f"{moment.second:02d}",
    }
    # Only the first occurrence of each token is replaced
    for token, replacement in fields.items():
        pattern = pattern.replace(token, replacement, 1)
    return pattern


def _helper_format_currency(amount: Any = None, currency: Any = "USD") -> str:
    """Format a number as currency: ``1234.5`` -> ``$1,234.50``."""
    number = _to_number(amount)
    if math.isnan(number) or math.isinf(number):
        return _text(amount)
    code = _text(currency)
    symbol = _CURRENCY_SYMBOLS.get(code, code)
    return f"{symbol}{number:,.2f}"


def _helper_upper(text: Any = "") -> str:
    return _text(text).upper()


def _helper_lower(text: Any = "") -> str:
    return _text(text).lower()


def _helper_capitalize(text: Any = "") -> str:
    value = _text(text)
    return value[:1].upper() + value[1:].lower()


def _helper_truncate(text: Any = "", length: Any = 100) -> str:
    value = _text(text)
    limit = _to_number(length)
    if math.isnan(limit) or len(value) <= limit:
        return value
    return value[: int(max(0, limit))] + "..."


def _helper_default(value: Any = None, fallback: Any = "") -> Any:
    if is_missing(value) or value == "":
        return _text(fallback)
    return value


def _helper_join(items: Any = None, separator: Any = ", ") -> str:
    if isinstance(items, (list, tuple)):
        return _text(separator).join(_text(item) for item in items)
    return _text(items)


def _helper_length(value: Any = None) -> int:
    if isinstance(value, (list, tuple, str, Mapping)):
        return len(value)
    return 0


def _helper_add(a: Any = None, b: Any = None) -> float | int:
    return _to_number(a) + _to_number(b)


def _helper_subtract(a: Any = None, b: Any = None) -> float | int:
    return _to_number(a) - _to_number(b)


def _helper_multiply(a: Any = None, b: Any = None) -> float | int:
    left, right = _to_number(a), _to_number(b)
    if (math.isinf(left) and right == 0) or (math.isinf(right) and left == 0):
        return math.nan
    return left * right


def _helper_divide(a: Any = None, b: Any = None) -> float | int:
    divisor = _to_number(b)
    if divisor == 0:
        return 0
    return _to_number(a) / divisor


def _helper_eq(a: Any = None, b: Any = None) -> bool:
    if isinstance(a, bool) != isinstance(b, bool):
        return False
    return a == b


def _helper_ne(a: Any = None, b: Any = None) -> bool:
    return not _helper_eq(a, b)


def _helper_gt(a: Any = None, b: Any = None) -> bool:
    return _to_number(a) > _to_number(b)


def _helper_lt(a: Any = None, b: Any = None) -> bool:
    return _to_number(a) < _to_number(b)


def _helper_gte(a: Any = None, b: Any = None) -> bool:
    return _to_number(a) >= _to_number(b)


def _helper_lte(a: Any = None, b: Any = None) -> bool:
    return _to_number(a) <= _to_number(b)


def _helper_and(*values: Any) -> bool:
    return all(is_truthy(value) for value in values)


def _helper_or(*values: Any) -> bool:
    return any(is_truthy(value) for value in values)


def _helper_not(value: Any = None) -> bool:
    return not is_truthy(value)


DEFAULT_HELPERS: dict[str, Callable[..., Any]] = {
    "formatDate": _helper_format_date,
    "formatCurrency": _helper_format_currency,
    "upper": _helper_upper,
    "lower": _helper_lower,
    "capitalize": _helper_capitalize,
    "truncate": _helper_truncate,
    "default": _helper_default,
    "join": _helper_join,
    "length": _helper_length,
    "add": _helper_add,
    "subtract": _helper_subtract,
    "multiply": _helper_multiply,
    "divide": _helper_divide,
    "eq": _helper_eq,
    "ne": _helper_ne,
    "gt": _helper_gt,
    "lt": _helper_lt,
    "gte": _helper_gte,
    "lte": _helper_lte,
    "and": _helper_and,
    "or": _helper_or,
    "not": _helper_not,
}
