"""Template introspection mixin.

Adds static analysis to the Environment: which variables a template
reads, which helpers it calls, and whether its tags are well formed.
Nothing is rendered and no data is needed. Both branches of every
conditional and the body of every loop are inspected.

"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from typing import TYPE_CHECKING

from bindery._types import Token, TokenKind
from bindery.environment.exceptions import TemplateSyntaxError
from bindery.lexer import Lexer
from bindery.runtime import coerce_literal

if TYPE_CHECKING:
    from bindery.environment.core import ProcessingOptions
    from bindery.environment.registry import HelperRegistry


@dataclass(frozen=True, slots=True)
class VariableExtraction:
    """Variables and helpers referenced by a template.

    Attributes:
        variables: Every variable path, de-duplicated, in order of appearance
        fields: Paths used as ``{{path}}``
        conditionals: Paths tested by ``#if`` / ``#unless``
        loops: Paths iterated by ``#each``
        helpers: Helper names called
    """

    variables: tuple[str, ...]
    fields: tuple[str, ...]
    conditionals: tuple[str, ...]
    loops: tuple[str, ...]
    helpers: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class ValidationReport:
    """Result of ``Environment.validate()``."""

    errors: tuple[TemplateSyntaxError, ...]

    @property
    def valid(self) -> bool:
        return not self.errors

    @property
    def messages(self) -> list[str]:
        return [error.message for error in self.errors]


class EnvironmentIntrospectionMixin:
    """Mixin adding static analysis to Environment.

    Requires the host class to define:
        options: ProcessingOptions
        helpers: HelperRegistry
    """

    if TYPE_CHECKING:
        options: ProcessingOptions
        helpers: HelperRegistry

    def _walk(
        self, template: str, errors: list[TemplateSyntaxError] | None = None
    ) -> Iterator[Token]:
        """Yield every token in ``template`` in source order, descending into block bodies."""
        yield from self._walk_span(template, template, 0, 0, errors)

    def _walk_span(
        self,
        text: str,
        template: str,
        base: int,
        depth: int,
        errors: list[TemplateSyntaxError] | None,
    ) -> Iterator[Token]:
        lexer = Lexer(
            text,
            delimiters=self.options.delimiters,
            helper_names=self.helpers.keys(),
            base_offset=base,
            template=template,
        )
        tokens = lexer.tokenize()
        if errors is not None:
            errors.extend(lexer.errors)
        for token in tokens:
            yield token
            if depth >= self.options.max_depth:
                continue
            for body, offset in (
                (token.then_body, token.then_offset),
                (token.else_body, token.else_offset),
            ):
                if body:
                    yield from self._walk_span(body, template, offset, depth + 1, errors)

    def extract_variables(self, template: str) -> VariableExtraction:
        """List the variables and helpers ``template`` refers to.

        Helper arguments that are literals (quoted or numeric) and loop
        markers such as ``@index`` are not counted as variables.

        Example:
            >>> env.extract_variables("{{#each items}}{{upper name}}{{/each}}").variables
            ('items', 'name')
        """
        variables: dict[str, None] = {}
        by_kind: dict[TokenKind, dict[str, None]] = {kind: {} for kind in TokenKind}

        for token in self._walk(template):
            if token.kind is TokenKind.HELPER or token.args:
                by_kind[TokenKind.HELPER][token.path] = None
                paths = [arg for arg in token.args if coerce_literal(arg) == arg]
            else:
                paths = [token.path]
            for path in paths:
                if path.startswith("@"):
                    continue
                variables[path] = None
                if token.kind is not TokenKind.HELPER:
                    by_kind[token.kind][path] = None

        return VariableExtraction(
            variables=tuple(variables),
            fields=tuple(by_kind[TokenKind.FIELD]),
            conditionals=tuple({**by_kind[TokenKind.CONDITIONAL], **by_kind[TokenKind.UNLESS]}),
            loops=tuple(by_kind[TokenKind.LOOP]),
            helpers=tuple(by_kind[TokenKind.HELPER]),
        )

    def variable_paths(self, template: str) -> list[str]:
        """Unique variable paths used by ``template``."""
        return list(self.extract_variables(template).variables)

    def has_variables(self, template: str) -> bool:
        """Cheap check for the presence of both delimiters."""
        delimiters = self.options.delimiters
        return delimiters.open in template and delimiters.close in template

    def validate(self, template: str) -> ValidationReport:
        """Check every tag in ``template``, including unrendered branches."""
        errors: list[TemplateSyntaxError] = []
        for _ in self._walk(template, errors):
            pass
        seen: set[int | None] = set()
        unique = []
        for error in errors:
            if error.offset not in seen:
                seen.add(error.offset)
                unique.append(error)
        return ValidationReport(errors=tuple(unique))
