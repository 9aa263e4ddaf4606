"""
viewforge code generation.

Turns a validated component into Python source: a widget record, an init
routine and an update routine for views; a template class for templates.

Usage:
    driver = EmissionDriver(config)
    artifacts = [driver.generate(component) for component in components]
    source = render_module(artifacts, config, "counter.view")
"""

from .context import GenerationContext, RecordField
from .driver import (
    EmissionDriver,
    TemplateArtifacts,
    ViewArtifacts,
    init_function_name,
    render_module,
    update_function_name,
)
from .generator import Generator, GeneratorResult
from .writer import CodeWriter

__all__ = [
    # Driver
    "EmissionDriver",
    "ViewArtifacts",
    "TemplateArtifacts",
    "render_module",
    "init_function_name",
    "update_function_name",
    # Passes
    "Generator",
    "GeneratorResult",
    "GenerationContext",
    "RecordField",
    "CodeWriter",
]
