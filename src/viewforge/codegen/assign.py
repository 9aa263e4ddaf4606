"""
Init-time property application.

After every widget exists, properties are applied per widget in declaration
order: a parent's property, then the properties of the child it attaches.
Connections and bindings are left to the connect pass.

Generated code:

    window.set_title("Counter")
    window.set_child(box_0)
    box_0.set_size_request(40, 40)
    _value = model.spacing
    if _value is not None:
        box_0.set_spacing(_value)
    for _item in model.css_classes:
        box_0.add_css_class(_item)
"""

from __future__ import annotations

import logging

from viewforge.core import ir
from viewforge.core.pyexpr import call_arguments, tuple_elements

from .conditional import ConditionalLowering
from .context import ITEM_LOCAL, VALUE_LOCAL, GenerationContext
from .generator import Generator, GeneratorResult
from .writer import CodeWriter

logger = logging.getLogger(__name__)


def method_call(target: str, method: str, arguments: str, chain: list[ir.Expr]) -> str:
    """``target.method(arguments)`` followed by the chained calls."""
    call = f"{target}.{method}({arguments})"
    for chained in chain:
        call += f".{chained.code}"
    return call


def emit_method(writer: CodeWriter, target: str, prop: ir.Property) -> None:
    """
    Emit the application of a method property to ``target``.

    A tuple literal argument expands to positional arguments. With ``?`` the
    argument is evaluated once and applied only when it is not None; with
    #[iterate] the method is applied once per item.
    """
    modifiers = prop.modifiers
    value = prop.value
    chain = modifiers.chain

    if value is None:
        writer.line(method_call(target, prop.name, "", chain))
        return

    if modifiers.optional:
        writer.line(f"{VALUE_LOCAL} = {value.code}")
        with writer.block(f"if {VALUE_LOCAL} is not None:"):
            if modifiers.iterate:
                with writer.block(f"for {ITEM_LOCAL} in {VALUE_LOCAL}:"):
                    writer.line(method_call(target, prop.name, ITEM_LOCAL, chain))
            else:
                splat = tuple_elements(value) is not None
                argument = f"*{VALUE_LOCAL}" if splat else VALUE_LOCAL
                writer.line(method_call(target, prop.name, argument, chain))
        return

    if modifiers.iterate:
        with writer.block(f"for {ITEM_LOCAL} in {value.code}:"):
            writer.line(method_call(target, prop.name, ITEM_LOCAL, chain))
        return

    writer.line(method_call(target, prop.name, call_arguments(value), chain))


class AssignGenerator(Generator):
    """Generates the init-time property application stream."""

    def __init__(self, context: GenerationContext):
        super().__init__(context)
        self.lowering = ConditionalLowering(context)

    def generate(self) -> GeneratorResult:
        result = GeneratorResult()
        writer = self.context.writer()

        for tree in self.component.trees:
            self.emit_node(tree, writer)

        logger.debug("Assign pass for %s: %d lines", self.component.name, len(writer))
        result.add_artifact("assign_stream", writer)
        return result

    def emit_node(self, node: ir.Widget | ir.ConditionalWidget, writer: CodeWriter) -> None:
        """Apply the properties of ``node`` and of everything below it."""
        if isinstance(node, ir.ConditionalWidget):
            self.lowering.select_initial(node, writer)
            for widget in node.branch_widgets():
                self.emit_node(widget, writer)
            return

        target = self.context.handle(node)
        for prop in node.properties:
            self.emit_property(node, target, prop, writer)

    def emit_property(
        self, owner: ir.Widget, target: str, prop: ir.Property, writer: CodeWriter
    ) -> None:
        if prop.kind == ir.PropertyKind.METHOD:
            emit_method(writer, target, prop)
        elif prop.kind in (ir.PropertyKind.WIDGET, ir.PropertyKind.CONDITIONAL):
            child = prop.widget if prop.widget is not None else prop.conditional
            assert child is not None
            method = prop.name or self.context.config.child_method_for(owner.type_path)
            arguments = self.context.handle(child)
            if prop.args is not None:
                extra = call_arguments(prop.args)
                if extra:
                    arguments = f"{arguments}, {extra}"
            writer.line(f"{target}.{method}({arguments})")
            self.emit_node(child, writer)
