"""
Shared state of one component's code generation.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from viewforge.core import ir
from viewforge.core.config import CompilerConfig
from viewforge.core.symbols import SymbolTable, build_symbol_table, iter_nodes

from .writer import CodeWriter

# Locals the generated routines use for their own bookkeeping
VALUE_LOCAL = "_value"
ITEM_LOCAL = "_item"
PAGE_LOCAL = "_page"
RECORD_LOCAL = "widgets"


@dataclass
class RecordField:
    """
    One field of the widget record.

    Attributes:
        name: Field name, equal to the local holding the value in init
        annotation: Type annotation without the ``Final`` wrapper
        mutable: Declared ``mut``; the field may be reassigned
        doc: ``#:`` documentation of the widget
    """

    name: str
    annotation: str
    mutable: bool = False
    doc: str | None = None

    @property
    def declared_type(self) -> str:
        """Annotation as written in the record."""
        if self.mutable:
            return self.annotation
        return f"Final[{self.annotation}]"


@dataclass
class GenerationContext:
    """
    Everything the generator passes share for one component.

    Attributes:
        component: The validated, named component
        config: Compiler configuration
        symbols: Flat name table of the component
        record_fields: Fields of the widget record in declaration order
    """

    component: ir.Component
    config: CompilerConfig
    symbols: SymbolTable
    record_fields: list[RecordField] = field(default_factory=list)

    @classmethod
    def build(cls, component: ir.Component, config: CompilerConfig) -> GenerationContext:
        """Create the context of a validated component."""
        context = cls(component=component, config=config, symbols=build_symbol_table(component))
        context.record_fields = collect_record_fields(context)
        return context

    def writer(self) -> CodeWriter:
        """A fresh code stream using the configured indentation."""
        return CodeWriter(self.config.indent_width)

    def handle(self, node: ir.Widget | ir.ConditionalWidget) -> str:
        """Expression addressing the toolkit widget of ``node``.

        Template widgets hold their toolkit widget in ``root``.
        """
        assert node.name is not None
        if isinstance(node, ir.Widget) and node.strategy == ir.ConstructionStrategy.TEMPLATE:
            return f"{node.name}.root"
        return node.name

    def handle_of(self, name: str) -> str:
        """Expression addressing the toolkit widget called ``name``."""
        node = self.symbols.resolve(name)
        return self.handle(node) if node is not None else name

    def annotation(self, node: ir.Widget | ir.ConditionalWidget) -> str:
        """Type annotation of ``node`` in the record."""
        if isinstance(node, ir.ConditionalWidget):
            return self.config.switch_type
        return node.type_path or "Any"

    @property
    def record_names(self) -> list[str]:
        return [record_field.name for record_field in self.record_fields]


def collect_record_fields(context: GenerationContext) -> list[RecordField]:
    """
    Fields of the widget record.

    In declaration order: every top-level tree, every explicitly named
    widget, pre-bound widget, conditional container, widget carrying a
    refreshed property and owner of a guarded connection; then the handler
    id of each guard.
    """
    fields: list[RecordField] = []
    guards: list[RecordField] = []

    for visit in iter_nodes(context.component):
        node = visit.node
        assert node.name is not None
        if _needs_field(node, visit.parent is None):
            fields.append(
                RecordField(
                    name=node.name,
                    annotation=context.annotation(node),
                    mutable=node.mutable,
                    doc=node.doc,
                )
            )
        if isinstance(node, ir.Widget):
            for prop in node.properties:
                if prop.guard:
                    guards.append(
                        RecordField(name=prop.guard, annotation="int", mutable=True)
                    )

    return fields + guards


def _needs_field(node: ir.Widget | ir.ConditionalWidget, top_level: bool) -> bool:
    if top_level or node.explicit_name or isinstance(node, ir.ConditionalWidget):
        return True
    if node.strategy.is_prebound:
        return True
    return any(prop.modifiers.refreshes or prop.guard for prop in node.properties)
