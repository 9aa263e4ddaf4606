"""
Base generator classes for view code generation.

Each generator pass walks the component and emits one part of the output:
- InitGenerator: construction statements
- AssignGenerator: init-time property application
- ConnectGenerator: signal handlers and property bindings
- RecordGenerator: the widget record type
- UpdateGenerator: the update routine
- TemplateGenerator: reusable template classes

Passes share a GenerationContext and hand their output to the emission
driver through GeneratorResult artifacts.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from viewforge.core import ir

from .context import GenerationContext
from .writer import CodeWriter


@dataclass
class GeneratorResult:
    """
    Result from a generator pass.

    Attributes:
        artifacts: Code streams and data to share with the driver
        errors: Errors encountered
        warnings: Warnings to display to the user
    """

    artifacts: dict[str, Any] = field(default_factory=dict)
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        """Whether generation succeeded (no errors)."""
        return len(self.errors) == 0

    def add_artifact(self, key: str, value: Any) -> None:
        """Add an artifact for the driver or later passes."""
        self.artifacts[key] = value

    def stream(self, key: str) -> CodeWriter:
        """The code stream stored under ``key``."""
        writer = self.artifacts[key]
        assert isinstance(writer, CodeWriter)
        return writer

    def add_error(self, error: str) -> None:
        """Record an error."""
        self.errors.append(error)

    def add_warning(self, warning: str) -> None:
        """Record a warning."""
        self.warnings.append(warning)

    def merge(self, other: GeneratorResult) -> None:
        """Merge another result into this one."""
        self.artifacts.update(other.artifacts)
        self.errors.extend(other.errors)
        self.warnings.extend(other.warnings)


class Generator(ABC):
    """
    Base class for all generator passes.

    Example:
        class RecordGenerator(Generator):
            def generate(self) -> GeneratorResult:
                result = GeneratorResult()
                writer = self.context.writer()
                ...
                result.add_artifact("record", writer)
                return result
    """

    def __init__(self, context: GenerationContext):
        """
        Initialize generator.

        Args:
            context: Shared state of the component being generated
        """
        self.context = context

    @property
    def component(self) -> ir.Component:
        return self.context.component

    @abstractmethod
    def generate(self) -> GeneratorResult:
        """
        Generate this pass's output.

        Returns:
            GeneratorResult with code streams as artifacts
        """
        pass
