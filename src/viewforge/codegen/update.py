"""
Update routine generation.

The update routine runs after the model changes. It re-applies ``#[watch]``
properties on every call, ``#[track]`` properties when their predicate holds,
and re-evaluates the discriminant of every conditional widget. It walks the
trees in the same order as the assign pass, so later properties observe the
effects of earlier ones.

Generated code:

    window = widgets.window
    count_label = widgets.count_label
    inc_handler = widgets.inc_handler
    if counter.changed("value"):
        count_label.set_label(str(counter.value))
    if counter.changed("step"):
        spin.handler_block(inc_handler)
        spin.set_value(counter.step)
        spin.handler_unblock(inc_handler)
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from viewforge.core import ir
from viewforge.core.errors import GenerationError
from viewforge.core.pyexpr import model_fields

from .assign import emit_method
from .conditional import ConditionalLowering
from .context import RECORD_LOCAL, GenerationContext
from .generator import Generator, GeneratorResult
from .writer import CodeWriter

logger = logging.getLogger(__name__)


class UpdateGenerator(Generator):
    """Generates the body of a view's update routine."""

    def __init__(self, context: GenerationContext):
        super().__init__(context)
        self.lowering = ConditionalLowering(context)

    def generate(self) -> GeneratorResult:
        result = GeneratorResult()
        body = self.context.writer()

        for tree in self.component.trees:
            self.emit_node(tree, body)

        writer = self.context.writer()
        if body.is_empty():
            writer.line("pass")
        else:
            for name in self.context.record_names:
                writer.line(f"{name} = {RECORD_LOCAL}.{name}")
            writer.extend(body)

        logger.debug("Update pass for %s: %d lines", self.component.name, len(body))
        result.add_artifact("update_stream", writer)
        return result

    def emit_node(self, node: ir.Widget | ir.ConditionalWidget, writer: CodeWriter) -> None:
        if isinstance(node, ir.ConditionalWidget):
            self.lowering.switch(node, writer)
            for widget in node.branch_widgets():
                self.emit_node(widget, writer)
            return

        target = self.context.handle(node)
        for prop in node.properties:
            if prop.kind == ir.PropertyKind.METHOD and prop.modifiers.refreshes:
                self.emit_refresh(target, prop, writer)
            child = prop.widget if prop.widget is not None else prop.conditional
            if child is not None:
                self.emit_node(child, writer)

    def emit_refresh(self, target: str, prop: ir.Property, writer: CodeWriter) -> None:
        """Re-apply one refreshed property; watch wins over track."""
        modifiers = prop.modifiers
        if modifiers.watch:
            with self.guards_blocked(modifiers.block_signals, writer):
                emit_method(writer, target, prop)
            return

        with writer.block(f"if {self.predicate(prop)}:"):
            with self.guards_blocked(modifiers.block_signals, writer):
                emit_method(writer, target, prop)

    def predicate(self, prop: ir.Property) -> str:
        """
        Condition under which a tracked property is re-applied.

        An explicit ``#[track(expr)]`` is used as written. A bare ``#[track]``
        asks the model's change tracker about every model field the value
        reads.
        """
        modifiers = prop.modifiers
        if modifiers.track_predicate is not None:
            return modifiers.track_predicate.code

        assert isinstance(self.component, ir.ViewSpec)
        model = self.component.model_name
        fields = model_fields(prop.value, model) if prop.value is not None else []
        if not fields:
            raise GenerationError(
                f"Cannot derive a tracking predicate for '{prop.name}': "
                f"its value reads no field of '{model}'"
            )
        quoted = ", ".join(f'"{name}"' for name in fields)
        return f"{model}.{self.context.config.tracker_method}({quoted})"

    @contextmanager
    def guards_blocked(self, guards: list[str], writer: CodeWriter) -> Iterator[None]:
        """Suppress the connections of ``guards`` around the code written inside."""
        config = self.context.config
        owners = [(guard, self.guard_handle(guard)) for guard in guards]
        for guard, owner in owners:
            writer.line(f"{owner}.{config.block_method}({guard})")
        yield
        for guard, owner in reversed(owners):
            writer.line(f"{owner}.{config.unblock_method}({guard})")

    def guard_handle(self, guard: str) -> str:
        owner = self.context.symbols.guard_owner(guard)
        if owner is None:
            raise GenerationError(f"Unknown signal guard '{guard}'")
        return self.context.handle_of(owner)
