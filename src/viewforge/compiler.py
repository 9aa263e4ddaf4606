"""
Compilation pipeline for view files.

parse → name → validate → lint → generate, run per component. A component
that fails at any stage is reported with its diagnostics and produces no
code; the other components of the same file are unaffected.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from .codegen import EmissionDriver, render_module
from .codegen.driver import Artifacts
from .core import ir
from .core.config import CompilerConfig, discover_config
from .core.dsl_parser_impl import parse_view_source
from .core.errors import GenerationError, ValidationError
from .core.naming import assign_names
from .core.validator import lint_component, validate_component

logger = logging.getLogger(__name__)


@dataclass
class ComponentResult:
    """
    Outcome of compiling one component.

    Attributes:
        name: Component name (None when the parser could not read it)
        kind: View or template (None when the parser could not read it)
        artifacts: Generated code; None when the component failed
        errors: Diagnostics that stopped the component
        warnings: Diagnostics that did not
    """

    name: str | None
    kind: ir.ComponentKind | None
    artifacts: Artifacts | None = None
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.artifacts is not None and not self.errors

    @property
    def label(self) -> str:
        if self.name is None:
            return "<unnamed component>"
        kind = self.kind.value if self.kind else "component"
        return f"{kind} {self.name}"


@dataclass
class CompilationResult:
    """Outcome of compiling one view file."""

    file: Path
    config: CompilerConfig
    components: list[ComponentResult] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return all(component.success for component in self.components)

    @property
    def errors(self) -> list[str]:
        return [error for component in self.components for error in component.errors]

    @property
    def warnings(self) -> list[str]:
        return [warning for component in self.components for warning in component.warnings]

    def component(self, name: str) -> ComponentResult | None:
        """Result of the component called ``name``."""
        for component in self.components:
            if component.name == name:
                return component
        return None

    def render(self) -> str:
        """Python module holding every successfully generated component."""
        artifacts = [c.artifacts for c in self.components if c.artifacts is not None]
        return render_module(artifacts, self.config, self.file.name)


def compile_component(
    component: ir.Component,
    config: CompilerConfig | None = None,
    extended_lint: bool = False,
) -> ComponentResult:
    """
    Name, validate and generate one parsed component.

    Args:
        component: Component as returned by the parser
        config: Compiler configuration
        extended_lint: Also report lint checks that are often intentional

    Returns:
        ComponentResult with either artifacts or errors
    """
    config = config or CompilerConfig()
    result = ComponentResult(name=component.name, kind=component.kind)

    assign_names(component, config)
    errors, warnings = validate_component(component, config)
    result.warnings.extend(warnings)
    if errors:
        logger.info("%s %s failed validation", component.kind.value, component.name)
        result.errors.extend(errors)
        return result

    result.warnings.extend(lint_component(component, extended=extended_lint))

    try:
        result.artifacts = EmissionDriver(config).generate(component)
    except (GenerationError, ValidationError) as e:
        logger.warning("Generation failed for %s: %s", component.name, e.message)
        result.errors.append(str(e))
        return result

    logger.debug("Compiled %s %s", component.kind.value, component.name)
    return result


def compile_source(
    text: str,
    file: Path | str = "<string>",
    config: CompilerConfig | None = None,
    extended_lint: bool = False,
) -> CompilationResult:
    """
    Compile the text of a view file.

    Every component is compiled independently; one that fails to lex, parse,
    validate or generate does not affect the others.
    """
    file = Path(file)
    config = config or CompilerConfig()
    result = CompilationResult(file=file, config=config)

    view_file = parse_view_source(text, file, config)

    for parsed in view_file.components:
        if parsed.error is not None:
            result.components.append(
                ComponentResult(name=parsed.name, kind=parsed.kind, errors=[str(parsed.error)])
            )
            continue
        assert parsed.component is not None
        result.components.append(compile_component(parsed.component, config, extended_lint))

    logger.info(
        "Compiled %s: %d components, %d errors",
        file,
        len(result.components),
        len(result.errors),
    )
    return result


def compile_file(
    path: Path, config: CompilerConfig | None = None, extended_lint: bool = False
) -> CompilationResult:
    """
    Compile a view file from disk.

    Without an explicit ``config``, the configuration is discovered from the
    file's directory upwards.
    """
    if config is None:
        config = discover_config(path)
    text = path.read_text(encoding="utf-8")
    return compile_source(text, path, config, extended_lint)
