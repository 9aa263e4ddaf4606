"""
Emission driver.

Runs the generator passes of one component in order and assembles their
streams into the final artifacts:

- views: Init → Assign → Connect → Record → Update, giving the record class,
  ``init_<view>`` and ``update_<view>``
- templates: Init → Assign → Connect → Template, giving the template class

``render_module`` joins the artifacts of a view file into one Python module.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from viewforge.core import ir
from viewforge.core.config import CompilerConfig
from viewforge.core.errors import GenerationError
from viewforge.core.strings import snake_case

from .assign import AssignGenerator
from .connect import ConnectGenerator
from .context import RECORD_LOCAL, GenerationContext
from .generator import Generator, GeneratorResult
from .init import InitGenerator
from .record import RecordGenerator
from .template import TemplateGenerator
from .update import UpdateGenerator
from .writer import CodeWriter

logger = logging.getLogger(__name__)

CONTRACT_IMPORT = "from viewforge.contract import WidgetTemplate"

# Streams of the init routine body, in execution order
INIT_STREAMS = ("root_stream", "init_stream", "assign_stream", "connect_stream")


@dataclass
class ViewArtifacts:
    """Generated source of one view."""

    name: str
    record: str
    init: str
    update: str

    @property
    def source(self) -> str:
        return "\n\n\n".join([self.record, self.init, self.update])


@dataclass
class TemplateArtifacts:
    """Generated source of one template."""

    name: str
    source: str


Artifacts = ViewArtifacts | TemplateArtifacts


def init_function_name(view: ir.ViewSpec) -> str:
    return f"init_{snake_case(view.name)}"


def update_function_name(view: ir.ViewSpec) -> str:
    return f"update_{snake_case(view.name)}"


class EmissionDriver:
    """
    Generates the artifacts of validated, named components.

    Example:
        driver = EmissionDriver(config)
        artifacts = driver.generate(component)
    """

    def __init__(self, config: CompilerConfig | None = None):
        self.config = config or CompilerConfig()

    def generate(self, component: ir.Component) -> Artifacts:
        """
        Generate the artifacts of one component.

        Raises:
            GenerationError: If a pass reports an error
        """
        context = GenerationContext.build(component, self.config)
        streams = self._run(
            [InitGenerator(context), AssignGenerator(context), ConnectGenerator(context)]
        )

        if isinstance(component, ir.TemplateSpec):
            streams.merge(self._run([TemplateGenerator(context, streams)]))
            logger.debug("Generated template %s", component.name)
            return TemplateArtifacts(
                name=component.name, source=streams.stream("template").render()
            )

        streams.merge(self._run([RecordGenerator(context), UpdateGenerator(context)]))
        logger.debug("Generated view %s", component.name)
        return ViewArtifacts(
            name=component.name,
            record=streams.stream("record").render(),
            init=self.init_function(context, component, streams).render(),
            update=self.update_function(context, component, streams).render(),
        )

    def _run(self, passes: list[Generator]) -> GeneratorResult:
        result = GeneratorResult()
        for generator in passes:
            pass_result = generator.generate()
            if not pass_result.success:
                raise GenerationError(
                    f"{type(generator).__name__} failed for "
                    f"'{generator.component.name}': {'; '.join(pass_result.errors)}"
                )
            result.merge(pass_result)
        return result

    def init_function(
        self, context: GenerationContext, view: ir.ViewSpec, streams: GeneratorResult
    ) -> CodeWriter:
        root = view.root
        root_type = context.annotation(root)
        if root.strategy == ir.ConstructionStrategy.TEMPLATE:
            root_type = "Any"
        writer = context.writer()
        signature = f"def {init_function_name(view)}({', '.join(view.params)})"
        with writer.block(f"{signature} -> tuple[{root_type}, {view.name}]:"):
            writer.line(f'"""Build the {view.name} widget tree."""')
            for key in INIT_STREAMS:
                writer.extend(streams.stream(key))
            writer.extend(streams.stream("record_build"))
            writer.line(f"return {context.handle(root)}, {RECORD_LOCAL}")
        return writer

    def update_function(
        self, context: GenerationContext, view: ir.ViewSpec, streams: GeneratorResult
    ) -> CodeWriter:
        params = [f"{RECORD_LOCAL}: {view.name}", view.model_name]
        if view.sender_name is not None:
            params.append(view.sender_name)
        writer = context.writer()
        with writer.block(f"def {update_function_name(view)}({', '.join(params)}) -> None:"):
            writer.line(f'"""Apply model changes to the {view.name} widgets."""')
            writer.extend(streams.stream("update_stream"))
        return writer


def render_module(
    artifacts: list[Artifacts], config: CompilerConfig | None = None, source_name: str = "<view>"
) -> str:
    """
    Join the artifacts of one view file into a Python module.

    Templates come before views, since views build them at init.
    """
    config = config or CompilerConfig()
    templates = [a for a in artifacts if isinstance(a, TemplateArtifacts)]
    views = [a for a in artifacts if isinstance(a, ViewArtifacts)]

    sections: list[str] = []
    if config.emit_header:
        header = [
            f'"""Generated by viewforge from {source_name}. Do not edit."""',
            "",
            "from __future__ import annotations",
            "",
            "from dataclasses import dataclass",
            "from typing import Any, Final",
        ]
        imports = []
        if config.toolkit_import:
            imports.append(config.toolkit_import)
        imports.extend(config.imports)
        if templates:
            imports.append(CONTRACT_IMPORT)
        if imports:
            header.append("")
            header.extend(imports)
        sections.append("\n".join(header))

    sections.extend(template.source for template in templates)
    sections.extend(view.source for view in views)
    return "\n\n\n".join(sections) + "\n"
