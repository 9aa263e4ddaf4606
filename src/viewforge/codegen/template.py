"""
Template class generation.

A template compiles to a dataclass deriving from ``WidgetTemplate``. Its
``init`` classmethod builds the subtree once, with the same construction,
assignment and connection code a view's init routine would contain.

Generated code:

    @dataclass
    class CardBox(WidgetTemplate):
        \"\"\"Widget template CardBox.\"\"\"

        root: Final[Gtk.Box]
        title: Final[Gtk.Label]

        @classmethod
        def init(cls) -> CardBox:
            box_0 = Gtk.Box()
            title = Gtk.Label()
            box_0.append(title)
            return cls(root=box_0, title=title)
"""

from __future__ import annotations

import logging

from viewforge.core import ir
from viewforge.core.symbols import iter_nodes

from .context import GenerationContext, RecordField
from .generator import Generator, GeneratorResult
from .writer import CodeWriter

logger = logging.getLogger(__name__)

TEMPLATE_BASE = "WidgetTemplate"
TEMPLATE_ROOT = "root"

# Streams of the init classmethod body, in execution order
BODY_STREAMS = ("root_stream", "init_stream", "assign_stream", "connect_stream")


class TemplateGenerator(Generator):
    """Generates a template class from the streams of the earlier passes."""

    def __init__(self, context: GenerationContext, streams: GeneratorResult):
        """
        Initialize generator.

        Args:
            context: Shared state of the template being generated
            streams: Merged result of the init, assign and connect passes
        """
        super().__init__(context)
        self.streams = streams

    def generate(self) -> GeneratorResult:
        result = GeneratorResult()
        fields = self.template_fields()
        name = self.component.name

        writer = self.context.writer()
        writer.line("@dataclass")
        with writer.block(f"class {name}({TEMPLATE_BASE}):"):
            writer.line(f'"""Widget template {name}."""')
            writer.line()
            for template_field in fields:
                if template_field.doc:
                    for doc_line in template_field.doc.splitlines():
                        writer.line(f"#: {doc_line}".rstrip())
                writer.line(f"{template_field.name}: {template_field.declared_type}")
            writer.line()
            writer.line("@classmethod")
            with writer.block(f"def init(cls) -> {name}:"):
                self.emit_body(fields, writer)

        logger.debug("Template %s: fields %s", name, [f.name for f in fields])
        result.add_artifact("template", writer)
        return result

    def template_fields(self) -> list[RecordField]:
        """``root`` followed by every explicitly named node."""
        root = self.component.root
        fields = [
            RecordField(
                name=TEMPLATE_ROOT,
                annotation=self.root_annotation(),
                mutable=root.mutable,
                doc=root.doc,
            )
        ]
        for visit in iter_nodes(self.component):
            node = visit.node
            if node.explicit_name:
                assert node.name is not None
                fields.append(
                    RecordField(
                        name=node.name,
                        annotation=self.context.annotation(node),
                        mutable=node.mutable,
                        doc=node.doc,
                    )
                )
        return fields

    def root_annotation(self) -> str:
        root = self.component.root
        if root.strategy == ir.ConstructionStrategy.TEMPLATE:
            return "Any"
        return self.context.annotation(root)

    def emit_body(self, fields: list[RecordField], writer: CodeWriter) -> None:
        for key in BODY_STREAMS:
            writer.extend(self.streams.stream(key))

        arguments = [f"{TEMPLATE_ROOT}={self.root_value()}"]
        arguments.extend(f"{f.name}={f.name}" for f in fields[1:])
        writer.line(f"return cls({', '.join(arguments)})")

    def root_value(self) -> str:
        """The toolkit widget stored in ``root``."""
        return self.context.handle(self.component.root)
