"""Bindery evaluator — renders a token list against a scope chain.

The evaluator walks tokens left to right and copies the source text into
an output buffer, replacing each token's span with its rendered value
(StringBuilder pattern: one pass, O(n) output). Block bodies are not
pre-parsed: ``render_span()`` hands a body back to the lexer and renders
the resulting tokens, which is the only recursion in the engine.

Dispatch:
    ``_KIND_RENDERERS`` maps each TokenKind to the name of its render
    method. It must cover every kind.

Failure policy:
    Any TemplateError raised while rendering a token is recorded on the
    accumulator and the token's source text is kept in the output. In
    strict mode the error propagates instead and aborts the whole render.

Thread-Safety:
    An Evaluator belongs to a single ``process()`` call. Helpers are read
    from a snapshot, so concurrent registrations are not observed.

"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from bindery._types import Token, TokenKind
from bindery.environment.exceptions import (
    ErrorCode,
    HelperError,
    TemplateError,
    TemplateRuntimeError,
    UndefinedError,
    UnknownHelperError,
    build_source_snippet,
    locate,
)
from bindery.lexer import Lexer
from bindery.runtime import (
    UNDEFINED,
    coerce_literal,
    is_missing,
    is_record,
    is_sequence,
    is_truthy,
    to_display_string,
)
from bindery.utils.html import html_escape

if TYPE_CHECKING:
    from bindery.environment.core import ProcessingOptions
    from bindery.environment.registry import HelperFunction
    from bindery.render_accumulator import RenderAccumulator
    from bindery.render_context import RenderContext

logger = logging.getLogger(__name__)

# TokenKind -> render method name
_KIND_RENDERERS: dict[TokenKind, str] = {
    TokenKind.FIELD: "_render_field",
    TokenKind.CONDITIONAL: "_render_conditional",
    TokenKind.UNLESS: "_render_unless",
    TokenKind.LOOP: "_render_loop",
    TokenKind.HELPER: "_render_helper",
}


class Evaluator:
    """Renders template text for one ``process()`` call.

    Args:
        helpers: Helper view for this call (per-call overrides already merged)
        options: Effective options for this call
        accumulator: Diagnostics shared by every recursive frame
        template: The top-level template, for error locations
    """

    __slots__ = ("_helpers", "_helper_names", "_options", "_acc", "_template")

    def __init__(
        self,
        helpers: Mapping[str, HelperFunction],
        options: ProcessingOptions,
        accumulator: RenderAccumulator,
        template: str,
    ):
        self._helpers = helpers
        self._helper_names = frozenset(helpers)
        self._options = options
        self._acc = accumulator
        self._template = template

    def render_span(
        self, text: str, context: RenderContext, *, base: int = 0, depth: int = 0
    ) -> str:
        """Tokenize ``text`` and render it.

        Args:
            text: Template text (the whole template or a block body)
            context: Scope to render in
            base: Position of ``text`` inside the top-level template
            depth: Block nesting depth of ``text``

        Raises:
            TemplateRuntimeError: If ``depth`` exceeds ``max_depth``
            TemplateSyntaxError: For malformed tags, in strict mode only
        """
        if depth > self._options.max_depth:
            raise TemplateRuntimeError(
                f"Maximum block nesting depth exceeded ({self._options.max_depth})",
                code=ErrorCode.RENDER_DEPTH,
                suggestion="Flatten nested blocks or raise max_depth",
                **self._location(base),
            )

        lexer = Lexer(
            text,
            delimiters=self._options.delimiters,
            helper_names=self._helper_names,
            base_offset=base,
            template=self._template,
        )
        tokens = lexer.tokenize()
        for error in lexer.errors:
            if self._options.strict:
                raise error
            self._acc.record_error(error)
        return self.render(text, tokens, context, depth=depth)

    def render(
        self,
        text: str,
        tokens: list[Token],
        context: RenderContext,
        *,
        depth: int = 0,
    ) -> str:
        """Render ``tokens`` (produced from ``text``) in ``context``."""
        buf: list[str] = []
        _append = buf.append
        cursor = 0
        for token in tokens:
            _append(text[cursor : token.start])
            handler = getattr(self, _KIND_RENDERERS[token.kind])
            try:
                _append(handler(token, context, depth))
            except TemplateError as exc:
                if self._options.strict:
                    raise
                self._acc.record_error(exc)
                _append(token.raw)
            cursor = token.end
        _append(text[cursor:])
        return "".join(buf)

    # ------------------------------------------------------------------
    # Per-kind renderers
    # ------------------------------------------------------------------

    def _render_field(self, token: Token, context: RenderContext, depth: int) -> str:
        value = context.lookup(token.path)
        self._acc.record_used(token.path)

        if is_missing(value):
            self._acc.record_missing(token.path)
            if self._options.strict:
                location = self._location(token.offset)
                raise UndefinedError(
                    token.path,
                    available_names=context.names(),
                    **location,
                )
            output = self._options.default_value
        else:
            output = to_display_string(value)
            if self._options.escape_html:
                output = html_escape(output)

        self._acc.substitutions += 1
        return output

    def _render_conditional(self, token: Token, context: RenderContext, depth: int) -> str:
        return self._render_branch(token, context, depth, negate=False)

    def _render_unless(self, token: Token, context: RenderContext, depth: int) -> str:
        return self._render_branch(token, context, depth, negate=True)

    def _render_branch(
        self, token: Token, context: RenderContext, depth: int, *, negate: bool
    ) -> str:
        condition = is_truthy(self._subject(token, context))
        if condition != negate:
            output = self._render_body(token.then_body, token.then_offset, context, depth)
        else:
            output = self._render_body(token.else_body, token.else_offset, context, depth)
        self._acc.conditionals_evaluated += 1
        return output

    def _render_loop(self, token: Token, context: RenderContext, depth: int) -> str:
        target = self._subject(token, context)

        if not is_sequence(target):
            type_name = "undefined" if target is UNDEFINED else type(target).__name__
            message = f"Expected a sequence for loop, got {type_name}: {token.path}"
            if self._options.strict:
                raise TemplateRuntimeError(
                    message,
                    path=token.path,
                    code=ErrorCode.NOT_ITERABLE,
                    **self._location(token.offset),
                )
            logger.debug(message)
            self._acc.warn(message)
            self._acc.loops_unrolled += 1
            return ""

        parts: list[str] = []
        last = len(target) - 1
        for index, item in enumerate(target):
            frame = context.child(
                item if is_record(item) else {"this": item},
                index=index,
                first=index == 0,
                last=index == last,
            )
            parts.append(self._render_body(token.then_body, token.then_offset, frame, depth))

        self._acc.loops_unrolled += 1
        return "".join(parts)

    def _render_helper(self, token: Token, context: RenderContext, depth: int) -> str:
        return to_display_string(self._call_helper(token, context))

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    def _render_body(
        self, body: str | None, offset: int, context: RenderContext, depth: int
    ) -> str:
        if not body:
            return ""
        return self.render_span(body, context, base=offset, depth=depth + 1)

    def _subject(self, token: Token, context: RenderContext) -> Any:
        """Value a block tag tests or iterates.

        ``{{#if path}}`` looks up ``path``; ``{{#if helper arg...}}`` calls
        the helper with the arguments.
        """
        if token.args:
            return self._call_helper(token, context)
        self._acc.record_used(token.path)
        return context.lookup(token.path)

    def _call_helper(self, token: Token, context: RenderContext) -> Any:
        name = token.path
        func = self._helpers.get(name)
        if func is None:
            if self._options.strict:
                raise UnknownHelperError(name, **self._location(token.offset))
            self._acc.record_missing(name)
            return UNDEFINED

        args = [self._resolve_argument(raw, context) for raw in token.args]
        try:
            value = func(*args)
        except Exception as exc:
            raise HelperError(name, exc, **self._location(token.offset)) from exc

        self._acc.helpers_invoked += 1
        return value

    def _resolve_argument(self, raw: str, context: RenderContext) -> Any:
        """Variable value if ``raw`` resolves in scope, else a literal."""
        value = context.lookup(raw)
        if value is not UNDEFINED:
            self._acc.record_used(raw)
            return value
        return coerce_literal(raw)

    def _location(self, offset: int) -> dict[str, Any]:
        lineno, column = locate(self._template, offset)
        return {
            "lineno": lineno,
            "column": column,
            "source_snippet": build_source_snippet(self._template, lineno, column=column),
        }
