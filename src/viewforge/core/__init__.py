"""Core viewforge functionality: IR, lexer, parser, naming and validation."""

from . import ir
from .config import CompilerConfig, discover_config, load_config
from .dsl_parser_impl import ParsedComponent, ViewFile, parse_view_source
from .errors import (
    ErrorContext,
    GenerationError,
    ParseError,
    ValidationError,
    ViewForgeError,
)
from .naming import assign_names
from .validator import lint_component, validate_component

__all__ = [
    "ir",
    "CompilerConfig",
    "discover_config",
    "load_config",
    "ParsedComponent",
    "ViewFile",
    "parse_view_source",
    "ViewForgeError",
    "ParseError",
    "ValidationError",
    "GenerationError",
    "ErrorContext",
    "assign_names",
    "validate_component",
    "lint_component",
]
