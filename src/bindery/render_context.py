"""RenderContext — the lexical scope chain used while rendering.

Every ``process()`` call starts with a root context over the host data.
Each loop iteration pushes a child context whose ``data`` is the current
element and whose ``parent`` is the enclosing scope. Conditionals reuse
the scope they appear in.

Lookup order for a path:
    1. the current frame's ``data``
    2. loop markers (``@index``, ``@first``, ``@last``)
    3. the parent frame, recursively

A miss at the root yields ``UNDEFINED``; a key holding ``None`` is a hit.

Frames are frozen. A child never writes through to its parent.

"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from bindery.runtime import UNDEFINED, walk_path

_MARKERS = {
    "@index": "index",
    "@first": "first",
    "@last": "last",
}


@dataclass(frozen=True, slots=True)
class RenderContext:
    """One frame of the scope chain.

    Attributes:
        data: Values visible in this frame
        parent: Enclosing frame, used only for lookup fallthrough
        index: 0-based position inside a loop
        first: True on the first loop iteration
        last: True on the final loop iteration
    """

    data: Mapping[str, Any]
    parent: RenderContext | None = None
    index: int | None = None
    first: bool | None = None
    last: bool | None = None

    def lookup(self, path: str) -> Any:
        """Resolve a dotted path through the chain.

        ``this`` as the first segment addresses the current frame itself
        (unless the frame defines a ``this`` key, as primitive loop frames
        do) and never falls through to the parent.

        Returns:
            The resolved value, or ``UNDEFINED``
        """
        segments = path.split(".")
        if segments[0] == "this" and "this" not in self.data:
            return walk_path(self.data, segments[1:])

        value = walk_path(self.data, segments)
        if value is not UNDEFINED:
            return value

        attr = _MARKERS.get(path)
        if attr is not None:
            marker = getattr(self, attr)
            if marker is not None:
                return marker

        if self.parent is not None:
            return self.parent.lookup(path)
        return UNDEFINED

    def child(
        self,
        data: Mapping[str, Any],
        *,
        index: int | None = None,
        first: bool | None = None,
        last: bool | None = None,
    ) -> RenderContext:
        """Create a loop-iteration frame whose parent is this frame."""
        return RenderContext(
            data=data,
            parent=self,
            index=index,
            first=first,
            last=last,
        )

    def names(self) -> frozenset[str]:
        """Top-level keys visible from this frame (for suggestions)."""
        names: set[str] = set()
        frame: RenderContext | None = self
        while frame is not None:
            names.update(k for k in frame.data if isinstance(k, str))
            frame = frame.parent
        return frozenset(names)

    @property
    def depth(self) -> int:
        """Number of frames above this one."""
        return 0 if self.parent is None else self.parent.depth + 1
