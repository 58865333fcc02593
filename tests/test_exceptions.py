"""Tests for error codes, source snippets and exception formatting."""

import pytest

from bindery import (
    ErrorCode,
    HelperError,
    ProcessingError,
    TemplateRuntimeError,
    TemplateSyntaxError,
    UndefinedError,
    UnknownHelperError,
    build_source_snippet,
)
from bindery.environment.exceptions import locate


class TestErrorCode:
    @pytest.mark.parametrize(
        ("code", "category"),
        [
            (ErrorCode.UNCLOSED_TAG, "lexer"),
            (ErrorCode.UNEXPECTED_TAG, "parser"),
            (ErrorCode.INVALID_BLOCK, "parser"),
            (ErrorCode.UNDEFINED_VARIABLE, "runtime"),
            (ErrorCode.RENDER_DEPTH, "runtime"),
        ],
    )
    def test_category(self, code, category):
        assert code.category == category

    def test_codes_are_unique(self):
        values = [code.value for code in ErrorCode]
        assert len(values) == len(set(values))
        assert all(value.startswith("B-") for value in values)


class TestLocate:
    def test_first_line(self):
        assert locate("abc", 0) == (1, 1)

    def test_after_newline(self):
        assert locate("ab\ncd", 4) == (2, 2)

    def test_offset_is_clamped(self):
        assert locate("ab", 99) == (1, 3)


class TestSourceSnippet:
    def test_format_with_caret(self):
        snippet = build_source_snippet("one\ntwo {{x}}\nthree", 2, column=5)
        assert snippet.lines == ((1, "one"), (2, "two {{x}}"), (3, "three"))
        assert snippet.format().splitlines() == [
            "   |",
            "   1 | one",
            ">  2 | two {{x}}",
            "     |     ^",
            "   3 | three",
            "   |",
        ]

    def test_context_is_clipped_at_edges(self):
        snippet = build_source_snippet("only", 1)
        assert snippet.lines == ((1, "only"),)


class TestFormatting:
    def test_syntax_error_message(self):
        error = TemplateSyntaxError(
            "Unexpected closing tag '{{/if}}'", offset=3, source="ab\n{{/if}}"
        )
        assert error.message == "Unexpected closing tag '{{/if}}'"
        assert (error.lineno, error.column) == (2, 1)
        assert "--> 2:1" in str(error)
        assert error.code is ErrorCode.UNEXPECTED_TAG

    def test_syntax_error_without_source(self):
        assert str(TemplateSyntaxError("bad")) == "Syntax Error: bad"

    def test_format_compact(self):
        error = UnknownHelperError("nope", lineno=4, column=2)
        assert error.format_compact() == "B-RUN-003: Unknown helper: nope\n  --> 4:2"

    def test_runtime_error_parts(self):
        error = TemplateRuntimeError("Broke", lineno=1, column=3, suggestion="Fix it")
        text = str(error)
        assert text.startswith("Runtime Error: Broke")
        assert "Location: 1:3" in text
        assert "Suggestion: Fix it" in text
        assert error.code is ErrorCode.RUNTIME_ERROR

    def test_helper_error_keeps_original(self):
        original = KeyError("k")
        error = HelperError("lookup", original)
        assert error.error is original
        assert error.path == "lookup"
        assert error.message == "Error processing helper 'lookup': 'k'"

    def test_undefined_without_candidates(self):
        error = UndefinedError("x")
        assert error.suggestion() is None
        assert "Did you mean" not in str(error)

    def test_undefined_suggestion(self):
        error = UndefinedError("usr", available_names=frozenset({"user", "items"}))
        assert error.suggestion() == "user"

    def test_processing_error_from_exception(self):
        error = ProcessingError.from_exception(UndefinedError("x", lineno=2, column=7))
        assert error == ProcessingError(
            message="Undefined variable 'x'",
            path="x",
            code="B-RUN-001",
            lineno=2,
            column=7,
        )
