"""
Widget record generation.

The record is a dataclass holding every widget the update routine needs and
every widget the user named, so callers can reach them after init.

Generated code:

    @dataclass
    class CounterWidgets:
        \"\"\"Widgets of the CounterWidgets view.\"\"\"

        window: Final[Gtk.Window]
        #: Shows the current count
        count_label: Final[Gtk.Label]
        inc_handler: int
"""

from __future__ import annotations

import logging

from .context import RECORD_LOCAL
from .generator import Generator, GeneratorResult
from .writer import CodeWriter

logger = logging.getLogger(__name__)


class RecordGenerator(Generator):
    """Generates the record class and the statement building it in init."""

    def generate(self) -> GeneratorResult:
        result = GeneratorResult()
        result.add_artifact("record", self.record_class())
        result.add_artifact("record_build", self.record_build())
        logger.debug(
            "Record for %s: %s", self.component.name, ", ".join(self.context.record_names)
        )
        return result

    def record_class(self) -> CodeWriter:
        writer = self.context.writer()
        writer.line("@dataclass")
        with writer.block(f"class {self.component.name}:"):
            writer.line(f'"""Widgets of the {self.component.name} view."""')
            writer.line()
            for record_field in self.context.record_fields:
                if record_field.doc:
                    for doc_line in record_field.doc.splitlines():
                        writer.line(f"#: {doc_line}".rstrip())
                writer.line(f"{record_field.name}: {record_field.declared_type}")
        return writer

    def record_build(self) -> CodeWriter:
        """``widgets = Record(a=a, ...)`` at the end of init."""
        writer = self.context.writer()
        arguments = ", ".join(f"{name}={name}" for name in self.context.record_names)
        writer.line(f"{RECORD_LOCAL} = {self.component.name}({arguments})")
        return writer
