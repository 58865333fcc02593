"""Output records returned by ``Environment.process()``.

Built once per call from the RenderAccumulator and frozen afterwards.

"""

from __future__ import annotations

from dataclasses import dataclass, field

from bindery.environment.exceptions import TemplateError


@dataclass(frozen=True, slots=True)
class ProcessingError:
    """One entry of ``ProcessingResult.errors``.

    Attributes:
        message: Human-readable description
        path: Variable or helper path involved, if any
        code: Error code string (e.g. ``"B-RUN-001"``)
        lineno: 1-based line in the template, if known
        column: 1-based column in the template, if known
    """

    message: str
    path: str | None = None
    code: str | None = None
    lineno: int | None = None
    column: int | None = None

    @classmethod
    def from_exception(cls, exc: TemplateError) -> ProcessingError:
        return cls(
            message=exc.message or str(exc),
            path=exc.path,
            code=exc.code.value if exc.code else None,
            lineno=exc.lineno,
            column=exc.column,
        )


@dataclass(frozen=True, slots=True)
class ProcessingStats:
    """Per-kind counters of successfully rendered tags."""

    substitutions: int = 0
    conditionals_evaluated: int = 0
    loops_unrolled: int = 0
    helpers_invoked: int = 0


@dataclass(frozen=True, slots=True)
class ProcessingResult:
    """Rendered output plus diagnostics.

    In strict mode, a failure leaves ``output`` equal to the original
    template and stores the aborting error in ``exception``.

    Attributes:
        output: Rendered text
        used_variables: Paths looked up, in first-use order
        missing_variables: Paths that resolved to nothing, in first-use order
        errors: Collected errors, in the order they happened
        warnings: Non-fatal notices (e.g. looping over a non-sequence)
        stats: Counters per tag kind
        exception: The error that aborted a strict render, if any
    """

    output: str
    used_variables: tuple[str, ...] = ()
    missing_variables: tuple[str, ...] = ()
    errors: tuple[ProcessingError, ...] = ()
    warnings: tuple[str, ...] = ()
    stats: ProcessingStats = field(default_factory=ProcessingStats)
    exception: TemplateError | None = None

    @property
    def ok(self) -> bool:
        """True when no errors were recorded."""
        return not self.errors

    @property
    def aborted(self) -> bool:
        """True when a strict-mode error stopped rendering."""
        return self.exception is not None

    def __str__(self) -> str:
        return self.output
