"""
Signal connection and property binding generation.

Runs after property application. ``connect_<signal>`` properties register a
callback with the toolkit; a lambda value is the callback itself, any other
value is a message handed to the sender. Captured values are bound when the
callback is registered. Property bindings are set up once here.

Generated code:

    inc_handler = button_0.connect(
        "clicked", (lambda sender: lambda *_args: sender.input(Msg.INCREMENT))(sender)
    )
    entry.connect("activate", (lambda label: lambda entry: label.set_text(entry.get_text()))(label))
    switch.bind_property("active", revealer, "reveal-child").flags(...)
"""

from __future__ import annotations

import logging

from viewforge.core import ir
from viewforge.core.pyexpr import call_arguments, is_lambda

from .assign import method_call
from .generator import Generator, GeneratorResult
from .writer import CodeWriter

logger = logging.getLogger(__name__)

CONNECTION_PREFIX = "connect_"


def signal_name(prop_name: str) -> str:
    """Toolkit signal of a ``connect_<signal>`` property: ``_`` becomes ``-``."""
    return prop_name[len(CONNECTION_PREFIX) :].replace("_", "-")


class ConnectGenerator(Generator):
    """Generates signal registrations, guard handles and property bindings."""

    def generate(self) -> GeneratorResult:
        result = GeneratorResult()
        writer = self.context.writer()

        for tree in self.component.trees:
            for node in tree.walk():
                if isinstance(node, ir.Widget):
                    self.emit_widget(node, writer)

        logger.debug("Connect pass for %s: %d lines", self.component.name, len(writer))
        result.add_artifact("connect_stream", writer)
        return result

    def emit_widget(self, widget: ir.Widget, writer: CodeWriter) -> None:
        target = self.context.handle(widget)
        for prop in widget.properties:
            if prop.kind == ir.PropertyKind.CONNECTION:
                self.emit_connection(target, prop, writer)
            elif prop.kind == ir.PropertyKind.BINDING:
                writer.line(
                    method_call(target, prop.name, call_arguments(prop.value), prop.modifiers.chain)
                )

    def emit_connection(self, target: str, prop: ir.Property, writer: CodeWriter) -> None:
        """Emit the registration of one signal connection."""
        config = self.context.config
        registration = (
            f'{target}.{config.connect_method}("{signal_name(prop.name)}", {self.callback(prop)})'
        )
        if prop.guard:
            writer.line(f"{prop.guard} = {registration}")
        else:
            writer.line(registration)

    def callback(self, prop: ir.Property) -> str:
        """
        The callback expression of a connection.

        Message-form connections always capture the sender. Captures are bound
        through an immediately applied factory, so the callback sees their
        values at registration time.
        """
        assert prop.value is not None
        captures = list(prop.captures)

        if is_lambda(prop.value):
            body = prop.value.code
        else:
            sender = self.component.sender_name
            assert sender is not None
            if not any(capture.name == sender for capture in captures):
                captures.insert(0, ir.Capture(name=sender))
            body = (
                f"lambda *_args: {sender}.{self.context.config.sender_method}({prop.value.code})"
            )

        if not captures:
            return body
        names = ", ".join(capture.name for capture in captures)
        values = ", ".join(capture.value_code for capture in captures)
        return f"(lambda {names}: {body})({values})"
