"""Tests for static template analysis: extract_variables, has_variables, validate."""

from __future__ import annotations

from bindery import Environment, ErrorCode


class TestExtractVariables:
    def test_fields(self, env):
        extraction = env.extract_variables("Dear {{customer.name}}, {{title}} {{title}}")
        assert extraction.variables == ("customer.name", "title")
        assert extraction.fields == ("customer.name", "title")

    def test_source_order_through_blocks(self, env):
        extraction = env.extract_variables("{{#if a}}{{b}}{{else}}{{c}}{{/if}}{{d}}")
        assert extraction.variables == ("a", "b", "c", "d")
        assert extraction.conditionals == ("a",)
        assert extraction.fields == ("b", "c", "d")

    def test_loops_and_markers(self, env):
        extraction = env.extract_variables("{{#each items}}{{@index}} {{name}}{{/each}}")
        assert extraction.variables == ("items", "name")
        assert extraction.loops == ("items",)

    def test_unless_counts_as_conditional(self, env):
        assert env.extract_variables("{{#unless done}}x{{/unless}}").conditionals == ("done",)

    def test_helper_arguments(self, env):
        extraction = env.extract_variables('{{formatCurrency total "EUR"}} {{add qty 1}}')
        assert extraction.variables == ("total", "qty")
        assert extraction.helpers == ("formatCurrency", "add")
        assert extraction.fields == ()

    def test_helper_condition(self, env):
        extraction = env.extract_variables("{{#if gt count 5}}x{{/if}}")
        assert extraction.helpers == ("gt",)
        assert extraction.variables == ("count",)

    def test_registered_zero_argument_helper(self):
        env = Environment(helpers={"now": lambda: "2026"})
        extraction = env.extract_variables("{{now}} {{then}}")
        assert extraction.helpers == ("now",)
        assert extraction.variables == ("then",)

    def test_custom_delimiters(self):
        env = Environment(delimiters=("[[", "]]"))
        assert env.variable_paths("[[a]] {{b}}") == ["a"]

    def test_variable_paths(self, env):
        assert env.variable_paths("{{#each xs}}{{y}}{{/each}}") == ["xs", "y"]

    def test_malformed_tags_are_skipped(self, env):
        assert env.variable_paths("{{/if}}{{a}}{{#if}}") == ["a"]


class TestHasVariables:
    def test_plain_text(self, env):
        assert not env.has_variables("nothing here")

    def test_with_tag(self, env):
        assert env.has_variables("Hi {{name}}")

    def test_needs_both_delimiters(self, env):
        assert not env.has_variables("{{ no close")


class TestValidate:
    def test_valid_template(self, env):
        report = env.validate("{{#if a}}{{b}}{{else}}{{#each c}}{{this}}{{/each}}{{/if}}")
        assert report.valid
        assert report.messages == []

    def test_errors_in_every_branch(self, env):
        report = env.validate("{{#if a}}{{/each}}{{else}}{{#each}}x{{/each}}{{/if}}")
        assert not report.valid
        codes = [error.code for error in report.errors]
        assert ErrorCode.UNEXPECTED_TAG in codes
        assert ErrorCode.INVALID_BLOCK in codes

    def test_error_positions_are_absolute(self, env):
        report = env.validate("first line\n{{#if a}}\n  {{else}}{{/unless}}{{/if}}")
        [error] = report.errors
        assert (error.lineno, error.column) == (3, 11)

    def test_unclosed(self, env):
        report = env.validate("{{#each xs}}{{name}}")
        assert report.errors[0].code is ErrorCode.UNCLOSED_BLOCK
        assert "Unclosed block" in report.messages[0]
