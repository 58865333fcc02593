"""HTML escaping for field output.

Single-pass escaping via ``str.translate()``: one scan of the input
regardless of how many metacharacters it contains.

"""

from __future__ import annotations

_ESCAPE_TABLE = str.maketrans(
    {
        "&": "&amp;",
        "<": "&lt;",
        ">": "&gt;",
        '"': "&quot;",
        "'": "&#039;",
    }
)


def html_escape(value: str) -> str:
    """Escape the five HTML metacharacters ``& < > " '``.

    Example:
        >>> html_escape('<a href="x">Tom & Jerry</a>')
        '&lt;a href=&quot;x&quot;&gt;Tom &amp; Jerry&lt;/a&gt;'
    """
    return value.translate(_ESCAPE_TABLE)
