"""Bindery lexer — turns template text into a flat list of tokens.

Recognized tags (default delimiters shown):

    {{path}}                        field lookup
    {{helper arg1 "arg 2" 3}}       helper call
    {{helper}}                      zero-argument call, if ``helper`` is registered
    {{#if path}} ... {{else}} ... {{/if}}
    {{#unless path}} ... {{else}} ... {{/unless}}
    {{#each path}} ... {{/each}}

One left-to-right pass. A block open is paired with its close by counting
nested opens of each tag type, so ``{{#if a}}{{#if b}}{{/if}}{{/if}}``
closes correctly. The body of a block is kept as raw text; the evaluator
tokenizes it again only when it renders it. Tokens of one pass never
overlap and are ordered by position.

Malformed tags (unclosed delimiters, stray ``{{/if}}`` or ``{{else}}``,
unknown ``{{#tag}}``, unclosed blocks) are recorded on ``Lexer.errors``
and left in place as literal text; scanning resumes right after them.

"""

from __future__ import annotations

import re
from collections.abc import Iterable

from bindery._types import DEFAULT_DELIMITERS, Delimiters, Token, TokenKind
from bindery.environment.exceptions import ErrorCode, TemplateSyntaxError

# Block tag name -> token kind
_BLOCK_TAGS: dict[str, TokenKind] = {
    "if": TokenKind.CONDITIONAL,
    "unless": TokenKind.UNLESS,
    "each": TokenKind.LOOP,
}

# Block tags whose body may be split by {{else}}
_ELSE_TAGS = frozenset({"if", "unless"})

# Whitespace-separated arguments; quoted runs are atomic and keep their quotes
_ARGUMENT = re.compile(r"""(?:"[^"]*"|'[^']*'|[^\s"']|["'])+""")


def split_arguments(text: str) -> list[str]:
    """Split tag content on whitespace, keeping quoted literals whole.

    Example:
        >>> split_arguments('formatDate created "DD MMM YYYY"')
        ['formatDate', 'created', '"DD MMM YYYY"']
    """
    return _ARGUMENT.findall(text)


class Lexer:
    """Tokenizer for one span of template text.

    Args:
        source: Text to tokenize
        delimiters: Opening and closing markers
        helper_names: Registered helper names (bare words matching one
            become zero-argument helper calls instead of fields)
        base_offset: Position of ``source`` inside the top-level template
        template: The top-level template, for error line numbers

    Example:
        >>> lexer = Lexer("Hi {{name}}{{/if}}")
        >>> lexer.tokenize()
        [Token(FIELD, 'name', 3:11)]
        >>> lexer.errors[0].message
        "Unexpected closing tag '{{/if}}'"
    """

    __slots__ = ("_source", "_open", "_close", "_helpers", "_base", "_template", "errors")

    def __init__(
        self,
        source: str,
        *,
        delimiters: Delimiters | tuple[str, str] = DEFAULT_DELIMITERS,
        helper_names: Iterable[str] = (),
        base_offset: int = 0,
        template: str | None = None,
    ):
        self._source = source
        self._open, self._close = delimiters
        self._helpers = frozenset(helper_names)
        self._base = base_offset
        self._template = template if template is not None else source
        self.errors: list[TemplateSyntaxError] = []

    def tokenize(self) -> list[Token]:
        """Scan the source and return its tokens in order."""
        tokens: list[Token] = []
        pos = 0
        while True:
            tag = self._find_tag(pos)
            if tag is None:
                break
            start, end, content = tag
            if end < 0:
                self._error(
                    f"Unclosed tag: missing '{self._close}'",
                    start,
                    ErrorCode.UNCLOSED_TAG,
                )
                break

            if not content:
                pos = end
            elif content[0] == "#":
                token, pos = self._open_block(start, end, content)
                if token is not None:
                    tokens.append(token)
            elif content[0] == "/":
                self._error(f"Unexpected closing tag '{self._source[start:end]}'", start)
                pos = end
            elif content == "else":
                self._error(
                    f"'{self._source[start:end]}' outside of an if/unless block",
                    start,
                )
                pos = end
            else:
                tokens.append(self._inline_token(start, end, content))
                pos = end
        return tokens

    def _find_tag(self, pos: int) -> tuple[int, int, str] | None:
        """Find the next tag at or after ``pos``.

        Returns ``(start, end, trimmed_content)``, with ``end == -1`` when
        the opening delimiter has no closing delimiter, or None when there
        are no more tags.
        """
        start = self._source.find(self._open, pos)
        if start < 0:
            return None
        inner = start + len(self._open)
        close = self._source.find(self._close, inner)
        if close < 0:
            return start, -1, ""
        return start, close + len(self._close), self._source[inner:close].strip()

    def _inline_token(self, start: int, end: int, content: str) -> Token:
        parts = split_arguments(content)
        if len(parts) > 1:
            kind, path, args = TokenKind.HELPER, parts[0], tuple(parts[1:])
        elif content in self._helpers:
            kind, path, args = TokenKind.HELPER, content, ()
        else:
            kind, path, args = TokenKind.FIELD, content, ()
        return Token(
            kind=kind,
            raw=self._source[start:end],
            path=path,
            span=(start, end),
            args=args,
            offset=self._base + start,
        )

    def _open_block(self, start: int, end: int, content: str) -> tuple[Token | None, int]:
        """Build a block token for the open tag at ``start``.

        Returns the token (None if the block is malformed) and the position
        to resume scanning from.
        """
        parts = split_arguments(content[1:])
        name = parts[0] if parts else ""
        kind = _BLOCK_TAGS.get(name)
        open_tag = self._source[start:end]
        if kind is None:
            self._error(f"Unknown block tag '{open_tag}'", start, ErrorCode.INVALID_BLOCK)
            return None, end
        if len(parts) < 2:
            self._error(f"Block '{open_tag}' requires a path", start, ErrorCode.INVALID_BLOCK)
            return None, end

        match = self._match_block(name, end)
        if match is None:
            self._error(f"Unclosed block '{open_tag}'", start, ErrorCode.UNCLOSED_BLOCK)
            return None, end

        else_start, else_end, close_start, close_end = match
        if else_start is None:
            then_body = self._source[end:close_start]
            else_body = None
        else:
            then_body = self._source[end:else_start]
            else_body = self._source[else_end:close_start]

        token = Token(
            kind=kind,
            raw=self._source[start:close_end],
            path=parts[1],
            span=(start, close_end),
            args=tuple(parts[2:]),
            then_body=then_body,
            else_body=else_body,
            offset=self._base + start,
            then_offset=self._base + end,
            else_offset=self._base + else_end if else_end is not None else 0,
        )
        return token, close_end

    def _match_block(
        self, name: str, pos: int
    ) -> tuple[int | None, int | None, int, int] | None:
        """Find the close tag matching a ``name`` block opened before ``pos``.

        Returns ``(else_start, else_end, close_start, close_end)`` or None
        if the block is never closed.
        """
        depth = dict.fromkeys(_BLOCK_TAGS, 0)
        else_start: int | None = None
        else_end: int | None = None
        while True:
            tag = self._find_tag(pos)
            if tag is None or tag[1] < 0:
                return None
            tag_start, tag_end, content = tag
            if content.startswith("#"):
                nested = content[1:].split(None, 1)
                if nested and nested[0] in depth:
                    depth[nested[0]] += 1
            elif content.startswith("/"):
                closing = content[1:].strip()
                if closing == name and depth[name] == 0:
                    return else_start, else_end, tag_start, tag_end
                if depth.get(closing, 0) > 0:
                    depth[closing] -= 1
            elif (
                content == "else"
                and else_start is None
                and name in _ELSE_TAGS
                and not any(depth.values())
            ):
                else_start, else_end = tag_start, tag_end
            pos = tag_end

    def _error(
        self, message: str, start: int, code: ErrorCode = ErrorCode.UNEXPECTED_TAG
    ) -> None:
        self.errors.append(
            TemplateSyntaxError(
                message,
                tag=self._source[start : start + 40],
                offset=self._base + start,
                source=self._template,
                code=code,
            )
        )


def tokenize(
    source: str,
    *,
    delimiters: Delimiters | tuple[str, str] = DEFAULT_DELIMITERS,
    helper_names: Iterable[str] = (),
) -> list[Token]:
    """Tokenize ``source``, raising on the first malformed tag.

    Raises:
        TemplateSyntaxError: If the source contains a malformed tag
    """
    lexer = Lexer(source, delimiters=delimiters, helper_names=helper_names)
    tokens = lexer.tokenize()
    if lexer.errors:
        raise lexer.errors[0]
    return tokens
