"""Bindery environment: engine instance, helpers and exceptions."""

from bindery.environment.exceptions import (
    ErrorCode,
    HelperError,
    SourceSnippet,
    TemplateError,
    TemplateRuntimeError,
    TemplateSyntaxError,
    UndefinedError,
    UnknownHelperError,
    build_source_snippet,
)
from bindery.environment.core import (
    DEFAULT_MAX_DEPTH,
    Environment,
    ProcessingOptions,
)
from bindery.environment.helpers import DEFAULT_HELPERS
from bindery.environment.registry import HelperFunction, HelperRegistry

__all__ = [
    "DEFAULT_HELPERS",
    "DEFAULT_MAX_DEPTH",
    "Environment",
    "ErrorCode",
    "HelperError",
    "HelperFunction",
    "HelperRegistry",
    "ProcessingOptions",
    "SourceSnippet",
    "TemplateError",
    "TemplateRuntimeError",
    "TemplateSyntaxError",
    "UndefinedError",
    "UnknownHelperError",
    "build_source_snippet",
]
