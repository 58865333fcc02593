"""Bindery — dynamic content templating for the document builder.

Renders component text containing Handlebars-style tags against a data
tree: field substitution, ``#if`` / ``#unless`` branches, ``#each`` loops
and helper calls.

Quickstart:
    >>> from bindery import Environment
    >>> env = Environment()
    >>> result = env.process("Hi {{name}}!", {"name": "Ada"})
    >>> result.output
    'Hi Ada!'
    >>> result.used_variables
    ('name',)

Syntax:
    {{user.name}}                          dotted path lookup
    {{formatCurrency total "EUR"}}         helper call
    {{#if items}}...{{else}}...{{/if}}     conditional
    {{#unless done}}...{{/unless}}         negated conditional
    {{#each items}}{{@index}}: {{this}}{{/each}}

Architecture:
Template text → Lexer → tokens → Evaluator → output
                  ↑                   │
                  └── block bodies ───┘

The lexer produces a flat, ordered token list; block bodies stay raw
text. The evaluator substitutes each token in order and hands block
bodies back to the lexer when it renders them, with a derived scope
for each loop iteration.

Error Handling:
``process()`` never raises a TemplateError. Missing variables, unknown
helpers and malformed tags are reported on the result. With
``strict=True`` the first problem aborts rendering, the output is the
original template and ``result.exception`` carries the error.

Thread-Safety:
Each ``process()`` call owns its scope chain and diagnostics, and reads
helpers from a copy-on-write snapshot. Concurrent calls need no locks.

"""

from bindery._types import Delimiters, Token, TokenKind
from bindery.environment import (
    DEFAULT_HELPERS,
    Environment,
    ErrorCode,
    HelperError,
    HelperRegistry,
    ProcessingOptions,
    SourceSnippet,
    TemplateError,
    TemplateRuntimeError,
    TemplateSyntaxError,
    UndefinedError,
    UnknownHelperError,
    build_source_snippet,
)
from bindery.introspection import ValidationReport, VariableExtraction
from bindery.lexer import Lexer, tokenize
from bindery.render_context import RenderContext
from bindery.result import ProcessingError, ProcessingResult, ProcessingStats
from bindery.runtime import UNDEFINED
from bindery.utils.html import html_escape

__version__ = "0.1.0"

__all__ = [
    "DEFAULT_HELPERS",
    "Delimiters",
    "Environment",
    "ErrorCode",
    "HelperError",
    "HelperRegistry",
    "Lexer",
    "ProcessingError",
    "ProcessingOptions",
    "ProcessingResult",
    "ProcessingStats",
    "RenderContext",
    "SourceSnippet",
    "TemplateError",
    "TemplateRuntimeError",
    "TemplateSyntaxError",
    "Token",
    "TokenKind",
    "UNDEFINED",
    "UndefinedError",
    "UnknownHelperError",
    "ValidationReport",
    "VariableExtraction",
    "__version__",
    "build_source_snippet",
    "html_escape",
    "tokenize",
]
