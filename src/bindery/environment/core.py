"""Environment — the Bindery engine instance.

An Environment owns the default processing options and the shared helper
registry. ``process()`` is the single rendering entry point:

    >>> env = Environment()
    >>> env.process("Hi {{name}}!", {"name": "Ada"}).output
    'Hi Ada!'

Options can be set once on the environment and overridden per call,
either with an options object/mapping or with keyword arguments:

    >>> env = Environment(escape_html=True)
    >>> env.process("{{x}}", {"x": "<b>"}, escape_html=False).output
    '<b>'

Thread-Safety:
    ``process()`` keeps all state local to the call (accumulator, scope
    chain, evaluator), so concurrent calls need no locking. Register
    helpers at configuration time, not while renders are running.

"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, fields, replace
from typing import Any

from bindery._types import DEFAULT_DELIMITERS, Delimiters
from bindery.environment.exceptions import TemplateError
from bindery.environment.helpers import DEFAULT_HELPERS
from bindery.environment.registry import HelperFunction, HelperRegistry
from bindery.evaluator import Evaluator
from bindery.introspection import EnvironmentIntrospectionMixin
from bindery.render_accumulator import RenderAccumulator
from bindery.render_context import RenderContext
from bindery.result import ProcessingResult

logger = logging.getLogger(__name__)

# Deep enough for any real component; well inside the interpreter's
# recursion limit (each nesting level costs a handful of frames).
DEFAULT_MAX_DEPTH = 50
MAX_DEPTH_LIMIT = 200

# Host-facing spellings accepted in option mappings
_OPTION_ALIASES = {
    "defaultValue": "default_value",
    "escapeHtml": "escape_html",
    "maxDepth": "max_depth",
}


@dataclass(frozen=True, slots=True)
class ProcessingOptions:
    """Options for one render.

    Attributes:
        strict: Abort on the first error instead of degrading
        default_value: Substituted for missing fields
        escape_html: Entity-escape field values
        helpers: Per-call helpers shadowing the registry for this call only
        trim: Strip leading/trailing whitespace from the output
        partial: Reserved for partial rendering; carried but unused
        delimiters: Tag markers, ``("{{", "}}")`` by default
        max_depth: Maximum block nesting depth
    """

    strict: bool = False
    default_value: str = ""
    escape_html: bool = False
    helpers: Mapping[str, HelperFunction] | None = None
    trim: bool = False
    partial: bool = False
    delimiters: Delimiters = DEFAULT_DELIMITERS
    max_depth: int = DEFAULT_MAX_DEPTH

    def __post_init__(self) -> None:
        delimiters = self.delimiters
        if isinstance(delimiters, Mapping):
            delimiters = Delimiters(**delimiters)
        elif not isinstance(delimiters, Delimiters):
            delimiters = Delimiters(*delimiters)
        if not delimiters.open or not delimiters.close:
            raise ValueError("Delimiters must be non-empty strings")
        object.__setattr__(self, "delimiters", delimiters)

        if not 1 <= self.max_depth <= MAX_DEPTH_LIMIT:
            raise ValueError(f"max_depth must be between 1 and {MAX_DEPTH_LIMIT}")
        if self.default_value is None:
            object.__setattr__(self, "default_value", "")

    @classmethod
    def from_mapping(
        cls, mapping: Mapping[str, Any], base: ProcessingOptions | None = None
    ) -> ProcessingOptions:
        """Build options from a mapping, on top of ``base``.

        Accepts both ``default_value`` and ``defaultValue`` style keys.

        Raises:
            TypeError: For unknown option names
        """
        known = {f.name for f in fields(cls)}
        changes: dict[str, Any] = {}
        for key, value in mapping.items():
            name = _OPTION_ALIASES.get(key, key)
            if name not in known:
                raise TypeError(f"Unknown processing option: {key!r}")
            changes[name] = value
        return replace(base or cls(), **changes)


class Environment(EnvironmentIntrospectionMixin):
    """Bindery engine: default options plus a shared helper registry.

    Args:
        strict: Abort on the first error instead of degrading
        default_value: Substituted for missing fields
        escape_html: Entity-escape field values
        trim: Strip the rendered output
        partial: Reserved for partial rendering
        delimiters: Tag markers
        max_depth: Maximum block nesting depth
        helpers: Extra helpers registered on top of the built-ins

    Example:
        >>> env = Environment(default_value="n/a")
        >>> env.register_helper("shout", lambda s: f"{s}!")
        >>> env.process("{{shout name}} {{age}}", {"name": "Ada"}).output
        'Ada! n/a'
    """

    def __init__(
        self,
        *,
        strict: bool = False,
        default_value: str = "",
        escape_html: bool = False,
        trim: bool = False,
        partial: bool = False,
        delimiters: Delimiters | tuple[str, str] = DEFAULT_DELIMITERS,
        max_depth: int = DEFAULT_MAX_DEPTH,
        helpers: Mapping[str, HelperFunction] | None = None,
    ):
        self.options = ProcessingOptions(
            strict=strict,
            default_value=default_value,
            escape_html=escape_html,
            trim=trim,
            partial=partial,
            delimiters=delimiters,
            max_depth=max_depth,
        )
        self.helpers = HelperRegistry(DEFAULT_HELPERS)
        if helpers:
            self.helpers.update(helpers)

    def register_helper(self, name: str, func: HelperFunction) -> None:
        """Register a helper for all subsequent calls.

        Raises:
            ValueError: If ``name`` is empty or contains whitespace
            TypeError: If ``func`` is not callable
        """
        self.helpers.register(name, func)

    def register_helpers(self, helpers: Mapping[str, HelperFunction]) -> None:
        """Register several helpers for all subsequent calls."""
        self.helpers.update(helpers)

    def resolve_options(
        self,
        options: ProcessingOptions | Mapping[str, Any] | None = None,
        **overrides: Any,
    ) -> ProcessingOptions:
        """Effective options for a call: defaults, then ``options``, then keywords."""
        if isinstance(options, ProcessingOptions):
            resolved = options
        elif options:
            resolved = ProcessingOptions.from_mapping(options, base=self.options)
        else:
            resolved = self.options
        if overrides:
            resolved = ProcessingOptions.from_mapping(overrides, base=resolved)
        return resolved

    def process(
        self,
        template: str,
        data: Mapping[str, Any] | None = None,
        options: ProcessingOptions | Mapping[str, Any] | None = None,
        **overrides: Any,
    ) -> ProcessingResult:
        """Render ``template`` with ``data``.

        Never raises a TemplateError: every problem is reported on the
        result. In strict mode the first problem stops rendering, the
        output is the unmodified template and ``result.exception`` holds
        the error.

        Args:
            template: Template text
            data: Top-level scope
            options: ProcessingOptions or a mapping of option values
            **overrides: Option values taking precedence over ``options``

        Returns:
            ProcessingResult with output and diagnostics

        Raises:
            TypeError: For unknown option names or non-callable helpers
            ValueError: For invalid option values
        """
        opts = self.resolve_options(options, **overrides)
        accumulator = RenderAccumulator()
        helpers = self.helpers.overlay(opts.helpers)
        evaluator = Evaluator(helpers, opts, accumulator, template)
        context = RenderContext(data=dict(data) if data else {})

        try:
            output = evaluator.render_span(template, context)
        except TemplateError as exc:
            accumulator.record_error(exc)
            logger.debug("Strict render aborted: %s", exc.message)
            return accumulator.to_result(template, exception=exc)

        if opts.trim:
            output = output.strip()
        logger.debug(
            "Rendered %d chars: %d used, %d missing, %d errors",
            len(output),
            len(accumulator.used),
            len(accumulator.missing),
            len(accumulator.errors),
        )
        return accumulator.to_result(output)
