"""Exceptions for the Bindery templating engine.

Exception Hierarchy:
TemplateError (base)
├── TemplateSyntaxError       # Malformed tag found by the lexer
├── TemplateRuntimeError      # Render-time error with context
│   ├── UnknownHelperError    # Helper name not registered
│   └── HelperError           # Helper raised while being invoked
└── UndefinedError            # Missing variable in strict mode

Error Messages:
Every exception keeps a short ``message`` (what ends up in
``ProcessingResult.errors``) and formats a longer ``str()`` with the
template location, a source snippet and a hint where one applies.

Example:
    ```
    Undefined variable 'titl' at 3:5. Did you mean 'title'?
       |
    >  3 | <h1>{{titl}}</h1>
         |     ^
      Hint: Pass 'titl' in the data, or set default_value for optional fields
    ```

"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

# ---------------------------------------------------------------------------
# Error codes
# ---------------------------------------------------------------------------


class ErrorCode(Enum):
    """Searchable error codes for Bindery errors.

    Format: B-{CATEGORY}-{NUMBER}
    Categories: LEX (lexer), PAR (parser), RUN (runtime)
    """

    # Lexer errors (B-LEX-xxx)
    UNCLOSED_TAG = "B-LEX-001"

    # Parser errors (B-PAR-xxx)
    UNEXPECTED_TAG = "B-PAR-001"
    UNCLOSED_BLOCK = "B-PAR-002"
    INVALID_BLOCK = "B-PAR-003"

    # Runtime errors (B-RUN-xxx)
    UNDEFINED_VARIABLE = "B-RUN-001"
    HELPER_ERROR = "B-RUN-002"
    UNKNOWN_HELPER = "B-RUN-003"
    NOT_ITERABLE = "B-RUN-004"
    RENDER_DEPTH = "B-RUN-006"
    RUNTIME_ERROR = "B-RUN-007"

    @property
    def category(self) -> str:
        """Error category (e.g., 'runtime', 'lexer', 'parser')."""
        prefix = self.value.split("-")[1]
        return {
            "LEX": "lexer",
            "PAR": "parser",
            "RUN": "runtime",
        }.get(prefix, "unknown")


# ---------------------------------------------------------------------------
# Source snippets
# ---------------------------------------------------------------------------


def locate(source: str, offset: int) -> tuple[int, int]:
    """Convert a character offset into a 1-based ``(line, column)`` pair."""
    offset = max(0, min(offset, len(source)))
    lineno = source.count("\n", 0, offset) + 1
    line_start = source.rfind("\n", 0, offset) + 1
    return lineno, offset - line_start + 1


@dataclass(frozen=True, slots=True)
class SourceSnippet:
    """Template source context around an error line.

    Attributes:
        lines: Tuple of (line_number, line_content) pairs around the error.
        error_line: The 1-based line number where the error occurred.
        column: Optional 1-based column for the caret pointer.
    """

    lines: tuple[tuple[int, str], ...]
    error_line: int
    column: int | None = None

    def format(self) -> str:
        """Format snippet in Rust-inspired diagnostic style."""
        parts: list[str] = ["   |"]
        for lineno, content in self.lines:
            marker = ">" if lineno == self.error_line else " "
            parts.append(f"{marker}{lineno:>3} | {content}")
            if lineno == self.error_line and self.column is not None:
                parts.append(f"{'':>4} | {' ' * (self.column - 1)}^")
        parts.append("   |")
        return "\n".join(parts)


def build_source_snippet(
    source: str,
    error_line: int,
    *,
    context_lines: int = 1,
    column: int | None = None,
) -> SourceSnippet:
    """Build a SourceSnippet from template source.

    Args:
        source: Full template source text.
        error_line: 1-based line number of the error.
        context_lines: Number of lines to show before/after the error line.
        column: Optional 1-based column for the caret pointer.
    """
    all_lines = source.splitlines()
    start = max(0, error_line - 1 - context_lines)
    end = min(len(all_lines), error_line + context_lines)
    lines = tuple((i + 1, all_lines[i]) for i in range(start, end))
    return SourceSnippet(lines=lines, error_line=error_line, column=column)


class TemplateError(Exception):
    """Base exception for all Bindery errors.

    Attributes:
        code: Optional ErrorCode for searchable error identification.
        message: Short, single-line description.
        path: Variable or helper path the error refers to, if any.
        lineno: 1-based line in the top-level template, if known.
        column: 1-based column in the top-level template, if known.
    """

    code: ErrorCode | None = None
    message: str = ""
    path: str | None = None
    lineno: int | None = None
    column: int | None = None

    def format_compact(self) -> str:
        """Format error as ``CODE: message`` plus location.

        Returns:
            Multi-line string suitable for terminal display.
        """
        header = self.message or str(self)
        if self.code and self.code.value not in header:
            header = f"{self.code.value}: {header}"
        parts = [header]
        if self.lineno is not None:
            parts.append(f"  --> {self.lineno}:{self.column or 1}")
        return "\n".join(parts)


class TemplateSyntaxError(TemplateError):
    """A malformed tag found while tokenizing.

    Raised by ``tokenize()``; collected on ``Lexer.errors`` otherwise.
    ``offset`` is the absolute position of the offending tag and is used to
    de-duplicate errors when the same block body is tokenized repeatedly.
    """

    code: ErrorCode | None = ErrorCode.UNEXPECTED_TAG

    def __init__(
        self,
        message: str,
        *,
        tag: str | None = None,
        offset: int | None = None,
        source: str | None = None,
        code: ErrorCode | None = None,
    ):
        self.message = message
        self.tag = tag
        self.offset = offset
        self.source = source
        if code is not None:
            self.code = code
        if source is not None and offset is not None:
            self.lineno, self.column = locate(source, offset)
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        header = f"Syntax Error: {self.message}"
        if self.lineno is None:
            return header
        header += f"\n  --> {self.lineno}:{self.column}"
        if self.source:
            snippet = build_source_snippet(self.source, self.lineno, column=self.column)
            header += "\n" + snippet.format()
        return header


class TemplateRuntimeError(TemplateError):
    """Render-time error with debugging context.

    Attributes:
        message: Error description
        path: Variable or helper path involved
        suggestion: Actionable fix suggestion
        source_snippet: Source lines around the failing tag
    """

    code: ErrorCode | None = ErrorCode.RUNTIME_ERROR

    def __init__(
        self,
        message: str,
        *,
        path: str | None = None,
        lineno: int | None = None,
        column: int | None = None,
        suggestion: str | None = None,
        source_snippet: SourceSnippet | None = None,
        code: ErrorCode | None = None,
    ):
        self.message = message
        self.path = path
        self.lineno = lineno
        self.column = column
        self.suggestion = suggestion
        self.source_snippet = source_snippet
        if code is not None:
            self.code = code
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        parts = [f"Runtime Error: {self.message}"]
        if self.lineno is not None:
            parts.append(f"  Location: {self.lineno}:{self.column or 1}")
        if self.source_snippet:
            parts.append(self.source_snippet.format())
        if self.suggestion:
            parts.append(f"  Suggestion: {self.suggestion}")
        return "\n".join(parts)


class UnknownHelperError(TemplateRuntimeError):
    """A helper call named a helper that is not registered."""

    code: ErrorCode | None = ErrorCode.UNKNOWN_HELPER

    def __init__(self, name: str, **kwargs):
        super().__init__(
            f"Unknown helper: {name}",
            path=name,
            suggestion=f"Register it with env.register_helper({name!r}, func)",
            **kwargs,
        )


class HelperError(TemplateRuntimeError):
    """A helper raised while being invoked.

    The original exception is chained as ``__cause__``.
    """

    code: ErrorCode | None = ErrorCode.HELPER_ERROR

    def __init__(self, name: str, error: BaseException, **kwargs):
        self.error = error
        super().__init__(
            f"Error processing helper '{name}': {error}",
            path=name,
            **kwargs,
        )


class UndefinedError(TemplateError):
    """A field referenced a variable that does not exist (strict mode).

    If ``available_names`` is provided, a "Did you mean?" suggestion is
    included when a close match is found (using ``difflib.get_close_matches``).
    """

    code: ErrorCode | None = ErrorCode.UNDEFINED_VARIABLE

    def __init__(
        self,
        name: str,
        *,
        lineno: int | None = None,
        column: int | None = None,
        available_names: frozenset[str] | None = None,
        source_snippet: SourceSnippet | None = None,
    ):
        self.name = name
        self.path = name
        self.lineno = lineno
        self.column = column
        self.message = f"Undefined variable '{name}'"
        self._available_names = available_names
        self.source_snippet = source_snippet
        super().__init__(self._format_message())

    def suggestion(self) -> str | None:
        """Closest available name, if any."""
        if not self._available_names:
            return None
        from difflib import get_close_matches

        matches = get_close_matches(self.name, self._available_names, n=1, cutoff=0.6)
        return matches[0] if matches else None

    def _format_message(self) -> str:
        msg = self.message
        if self.lineno is not None:
            msg += f" at {self.lineno}:{self.column or 1}"
        suggested = self.suggestion()
        if suggested:
            msg += f". Did you mean '{suggested}'?"
        if self.source_snippet:
            msg += "\n" + self.source_snippet.format()
        msg += (
            f"\n  Hint: Pass '{self.name}' in the data, "
            "or set default_value for optional fields"
        )
        return msg
