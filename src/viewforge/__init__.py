"""
viewforge - compiler from declarative widget trees to Python UI code.

A view file describes widget trees; viewforge turns each view into a widget
record, an init routine building the tree and an update routine re-applying
the properties whose model state changed.
"""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _metadata_version

from .compiler import (
    CompilationResult,
    ComponentResult,
    compile_component,
    compile_file,
    compile_source,
)

# Re-export commonly used types for convenience
from .core import ir
from .core.config import CompilerConfig
from .core.errors import GenerationError, ParseError, ValidationError, ViewForgeError


def _get_version() -> str:
    """Get version from the installed package metadata."""
    try:
        return _metadata_version("viewforge")
    except PackageNotFoundError:
        return "0.0.0"


__version__ = _get_version()

__all__ = [
    "__version__",
    "ir",
    "CompilerConfig",
    "ViewForgeError",
    "ParseError",
    "ValidationError",
    "GenerationError",
    "CompilationResult",
    "ComponentResult",
    "compile_component",
    "compile_file",
    "compile_source",
]
