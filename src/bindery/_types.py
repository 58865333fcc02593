"""Token types for the Bindery tag grammar.

Tokens are produced by the Lexer and consumed by the Evaluator. Block
tokens carry their bodies as raw, unparsed text; the evaluator tokenizes
a body only when it actually renders it.

"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import NamedTuple


class TokenKind(Enum):
    """Kinds of tag the lexer recognizes."""

    FIELD = "field"
    CONDITIONAL = "conditional"
    UNLESS = "unless"
    LOOP = "loop"
    HELPER = "helper"

    @property
    def is_block(self) -> bool:
        """True for kinds that pair an open tag with a close tag."""
        return self in _BLOCK_KINDS


_BLOCK_KINDS = frozenset({TokenKind.CONDITIONAL, TokenKind.UNLESS, TokenKind.LOOP})


class Delimiters(NamedTuple):
    """Opening and closing tag markers."""

    open: str = "{{"
    close: str = "}}"


DEFAULT_DELIMITERS = Delimiters()


@dataclass(frozen=True, slots=True)
class Token:
    """A parsed tag.

    Attributes:
        kind: What the tag does
        raw: Exact source text of the tag (for blocks: open tag through close tag)
        path: Dotted variable path, or helper name for helper calls
        span: ``(start, end)`` offsets into the text that was tokenized
        args: Raw argument strings, resolved lazily by the evaluator
        then_body: Body rendered when the block condition holds
        else_body: Body after a top-level ``{{else}}``, if any
        offset: Absolute position of the tag in the top-level template
        then_offset: Absolute position of ``then_body``
        else_offset: Absolute position of ``else_body``
    """

    kind: TokenKind
    raw: str
    path: str
    span: tuple[int, int]
    args: tuple[str, ...] = ()
    then_body: str | None = None
    else_body: str | None = None
    offset: int = 0
    then_offset: int = 0
    else_offset: int = 0

    @property
    def start(self) -> int:
        return self.span[0]

    @property
    def end(self) -> int:
        return self.span[1]

    def __repr__(self) -> str:
        return f"Token({self.kind.name}, {self.path!r}, {self.start}:{self.end})"
