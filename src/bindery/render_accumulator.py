"""RenderAccumulator — diagnostics gathered during one ``process()`` call.

A single accumulator is created per call and passed explicitly to every
recursive render frame, so nested loops and conditionals report into
the same place. Nothing is shared between calls.

Example:
    >>> acc = RenderAccumulator()
    >>> acc.record_used("user.name")
    >>> acc.record_missing("user.email")
    >>> acc.to_result("Hi Ada").missing_variables
    ('user.email',)

"""

from __future__ import annotations

from dataclasses import dataclass, field

from bindery.environment.exceptions import TemplateError, TemplateSyntaxError
from bindery.result import ProcessingError, ProcessingResult, ProcessingStats


@dataclass(slots=True)
class RenderAccumulator:
    """Mutable diagnostics for one render.

    ``used`` and ``missing`` are dicts used as insertion-ordered sets.
    Syntax errors are de-duplicated by position because a loop body is
    re-tokenized once per iteration.
    """

    used: dict[str, None] = field(default_factory=dict)
    missing: dict[str, None] = field(default_factory=dict)
    errors: list[ProcessingError] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    substitutions: int = 0
    conditionals_evaluated: int = 0
    loops_unrolled: int = 0
    helpers_invoked: int = 0

    _seen_syntax: set[tuple[int | None, str]] = field(default_factory=set)

    def record_used(self, path: str) -> None:
        self.used[path] = None

    def record_missing(self, path: str) -> None:
        self.missing[path] = None

    def record_error(self, exc: TemplateError) -> None:
        """Append an error, skipping syntax errors already reported."""
        if isinstance(exc, TemplateSyntaxError):
            marker = (exc.offset, exc.message)
            if marker in self._seen_syntax:
                return
            self._seen_syntax.add(marker)
        self.errors.append(ProcessingError.from_exception(exc))

    def warn(self, message: str) -> None:
        self.warnings.append(message)

    @property
    def stats(self) -> ProcessingStats:
        return ProcessingStats(
            substitutions=self.substitutions,
            conditionals_evaluated=self.conditionals_evaluated,
            loops_unrolled=self.loops_unrolled,
            helpers_invoked=self.helpers_invoked,
        )

    def to_result(self, output: str, exception: TemplateError | None = None) -> ProcessingResult:
        """Freeze the collected diagnostics into a ProcessingResult."""
        return ProcessingResult(
            output=output,
            used_variables=tuple(self.used),
            missing_variables=tuple(self.missing),
            errors=tuple(self.errors),
            warnings=tuple(self.warnings),
            stats=self.stats,
            exception=exception,
        )
