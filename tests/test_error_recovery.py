"""Test non-strict degradation: problems are reported and rendering continues."""

import logging

from bindery import Environment


class TestMalformedTagsStayLiteral:
    def test_stray_close_tag(self, env):
        result = env.process("a{{/if}}b{{name}}", {"name": "!"})
        assert result.output == "a{{/if}}b!"
        [error] = result.errors
        assert error.code == "B-PAR-001"
        assert (error.lineno, error.column) == (1, 2)

    def test_stray_else(self, env):
        result = env.process("x{{else}}y", {})
        assert result.output == "x{{else}}y"
        assert "outside of an if/unless block" in result.errors[0].message

    def test_unclosed_block(self, env):
        result = env.process("{{#if a}}{{name}}", {"a": True, "name": "n"})
        assert result.output == "{{#if a}}n"
        assert result.errors[0].code == "B-PAR-002"

    def test_unclosed_delimiter(self, env):
        result = env.process("{{a}} and {{b", {"a": 1})
        assert result.output == "1 and {{b"
        assert result.errors[0].code == "B-LEX-001"

    def test_unknown_block_tag(self, env):
        result = env.process("{{#with a}}x{{/with}}", {"a": 1})
        assert result.output == "{{#with a}}x{{/with}}"
        assert [e.code for e in result.errors] == ["B-PAR-003", "B-PAR-001"]

    def test_syntax_error_in_loop_body_reported_once(self, env):
        result = env.process("{{#each xs}}{{/if}}{{/each}}", {"xs": [1, 2, 3]})
        assert result.output == "{{/if}}{{/if}}{{/if}}"
        assert len(result.errors) == 1

    def test_error_in_unrendered_branch_is_not_reported(self, env):
        result = env.process("{{#if x}}{{/each}}{{/if}}", {"x": False})
        assert result.output == ""
        assert result.errors == ()


class TestHelperFailures:
    def test_helper_exception_keeps_tag(self, env):
        def boom(value):
            raise ValueError("bad input")

        env.register_helper("boom", boom)
        result = env.process("a{{boom x}}b{{x}}", {"x": 1})
        assert result.output == "a{{boom x}}b1"
        [error] = result.errors
        assert error.message == "Error processing helper 'boom': bad input"
        assert error.code == "B-RUN-002"
        assert error.path == "boom"
        assert result.exception is None

    def test_failing_condition_keeps_block(self, env):
        env.register_helper("boom", lambda *args: 1 / 0)
        template = "{{#if boom x}}yes{{/if}}"
        result = env.process(template, {})
        assert result.output == template
        assert result.stats.conditionals_evaluated == 0

    def test_failure_inside_loop_only_affects_that_iteration(self, env):
        env.register_helper("inv", lambda n: 1 / n)
        result = env.process("{{#each xs}}[{{inv this}}]{{/each}}", {"xs": [1, 0, 2]})
        assert result.output == "[1][{{inv this}}][0.5]"
        assert len(result.errors) == 1


class TestDepthLimit:
    def test_nesting_beyond_max_depth(self):
        env = Environment(max_depth=2)
        template = "{{#if a}}{{#if a}}{{#if a}}x{{/if}}{{/if}}{{/if}}"
        result = env.process(template, {"a": True})
        assert result.output == "{{#if a}}x{{/if}}"
        assert result.errors[0].code == "B-RUN-006"
        assert result.stats.conditionals_evaluated == 2

    def test_nesting_within_limit(self):
        env = Environment(max_depth=3)
        template = "{{#if a}}{{#if a}}{{#if a}}x{{/if}}{{/if}}{{/if}}"
        assert env.process(template, {"a": True}).output == "x"

    def test_depth_limit_strict(self):
        env = Environment(max_depth=1, strict=True)
        template = "{{#each xs}}{{#each xs}}{{/each}}{{/each}}"
        result = env.process(template, {"xs": [1]})
        assert result.output == template
        assert result.errors[0].code == "B-RUN-006"


class TestWarnings:
    def test_warning_per_loop_evaluation(self, env):
        result = env.process("{{#each xs}}{{#each n}}{{/each}}{{/each}}", {"xs": [{"n": 1}, {"n": 2}]})
        assert result.warnings == (
            "Expected a sequence for loop, got int: n",
            "Expected a sequence for loop, got int: n",
        )
        assert result.ok

    def test_warning_is_logged(self, env, caplog):
        with caplog.at_level(logging.DEBUG, logger="bindery.evaluator"):
            env.process("{{#each x}}{{/each}}", {"x": 5})
        assert "Expected a sequence for loop, got int: x" in caplog.text

    def test_missing_variables_are_not_errors(self, env):
        result = env.process("{{a}}{{b.c}}", {})
        assert result.ok
        assert result.missing_variables == ("a", "b.c")
