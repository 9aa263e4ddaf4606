"""
Construction statement generation.

Emits one statement per widget in declaration order, each followed by the
construction of the widgets held by its widget-valued and conditional
properties, so children exist before any property refers to them. The root
widget's own statement goes to the root stream; everything else goes to the
init stream executed after it.
"""

from __future__ import annotations

import logging

from viewforge.core import ir
from viewforge.core.errors import GenerationError

from .conditional import ConditionalLowering
from .generator import Generator, GeneratorResult
from .writer import CodeWriter

logger = logging.getLogger(__name__)


class InitGenerator(Generator):
    """Generates the root stream and the init stream."""

    def generate(self) -> GeneratorResult:
        result = GeneratorResult()
        root_stream = self.context.writer()
        init_stream = self.context.writer()

        for index, tree in enumerate(self.component.trees):
            if index == 0:
                self.emit_construction(tree, root_stream)
                for child in tree.children():
                    self.emit_subtree(child, init_stream)
            else:
                self.emit_subtree(tree, init_stream)

        logger.debug(
            "Init pass for %s: %d root lines, %d init lines",
            self.component.name,
            len(root_stream),
            len(init_stream),
        )
        result.add_artifact("root_stream", root_stream)
        result.add_artifact("init_stream", init_stream)
        return result

    def emit_subtree(self, node: ir.Widget | ir.ConditionalWidget, writer: CodeWriter) -> None:
        """Construct ``node`` and everything below it, in declaration order."""
        if isinstance(node, ir.ConditionalWidget):
            lowering = ConditionalLowering(self.context)
            lowering.construct(node, writer, self.emit_subtree)
            return
        self.emit_construction(node, writer)
        for child in node.children():
            self.emit_subtree(child, writer)

    def emit_construction(self, widget: ir.Widget, writer: CodeWriter) -> None:
        """Emit the construction statement of one widget, if it has one."""
        statement = self.construction_statement(widget)
        if statement is not None:
            writer.line(statement)

    def construction_statement(self, widget: ir.Widget) -> str | None:
        """
        The statement creating ``widget`` according to its strategy.

        Pre-bound widgets are supplied by the caller and get no statement.
        """
        strategy = widget.strategy
        if strategy.is_prebound:
            return None
        if strategy == ir.ConstructionStrategy.BLOCK:
            return f"{widget.name} = {widget.func.path}()"
        if strategy == ir.ConstructionStrategy.TEMPLATE:
            return f"{widget.name} = {widget.func.path}.init()"
        if strategy in (ir.ConstructionStrategy.CONSTRUCTOR, ir.ConstructionStrategy.BUILDER):
            if widget.func.call is None:
                raise GenerationError(
                    f"Widget '{widget.name}' uses {strategy.value} form without a call expression"
                )
            return f"{widget.name} = {widget.func.call.code}"
        raise GenerationError(f"Unknown construction strategy '{strategy}'")
