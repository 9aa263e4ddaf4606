"""Tests for signal connection and property binding generation."""

from collections.abc import Callable

import pytest

from viewforge.codegen import GenerationContext
from viewforge.codegen.connect import ConnectGenerator, signal_name

Context = Callable[[str], GenerationContext]


def connect_stream(context: GenerationContext) -> str:
    return ConnectGenerator(context).generate().stream("connect_stream").render()


@pytest.mark.parametrize(
    ("prop_name", "signal"),
    [
        ("connect_clicked", "clicked"),
        ("connect_state_set", "state-set"),
        ("connect_notify", "notify"),
    ],
)
def test_signal_name(prop_name: str, signal: str) -> None:
    assert signal_name(prop_name) == signal


class TestMessages:
    """Connections dispatching a message to the sender."""

    def test_sender_always_captured(self, context: Context) -> None:
        ctx = context("view V(model, sender) { Gtk.Button { connect_clicked => Msg.GO } }")
        assert connect_stream(ctx) == (
            'button_0.connect("clicked", '
            "(lambda sender: lambda *_args: sender.input(Msg.GO))(sender))"
        )

    def test_explicit_captures(self, context: Context) -> None:
        ctx = context(
            """
view V(model, sender) {
    Gtk.Button {
        connect_clicked[sender, count = model.count] => Msg.set(count),
    }
}
"""
        )
        assert connect_stream(ctx) == (
            'button_0.connect("clicked", (lambda sender, count: '
            "lambda *_args: sender.input(Msg.set(count)))(sender, model.count))"
        )

    def test_sender_added_before_other_captures(self, context: Context) -> None:
        ctx = context(
            "view V(model, tx) { Gtk.Button { connect_clicked[step = model.step] => Msg.add(step) } }"
        )
        assert connect_stream(ctx) == (
            'button_0.connect("clicked", (lambda tx, step: '
            "lambda *_args: tx.input(Msg.add(step)))(tx, model.step))"
        )

    def test_guard_stores_handler_id(self, context: Context) -> None:
        ctx = context(
            "view V(model, sender) { Gtk.CheckButton { connect_toggled => Msg.T @toggle_handler } }"
        )
        assert connect_stream(ctx).startswith(
            'toggle_handler = check_button_0.connect("toggled", '
        )


class TestCallbacks:
    """Connections whose value is a lambda callback."""

    def test_lambda_used_as_callback(self, context: Context) -> None:
        ctx = context(
            "view V(model) { Gtk.Entry { connect_activate => lambda entry: print(entry) } }"
        )
        assert connect_stream(ctx) == 'entry_0.connect("activate", lambda entry: print(entry))'

    def test_lambda_with_captures(self, context: Context) -> None:
        ctx = context(
            """
view V(model) {
    Gtk.Box {
        #[name(label)]
        Gtk.Label,
        Gtk.Entry {
            connect_activate[label] => lambda entry: label.set_label(entry.get_text()),
        },
    }
}
"""
        )
        assert connect_stream(ctx) == (
            'entry_0.connect("activate", (lambda label: '
            "lambda entry: label.set_label(entry.get_text()))(label))"
        )

    def test_template_widget_connected_through_root(self, context: Context) -> None:
        ctx = context(
            "view V(model) { Gtk.Box { #[template] CardBox { connect_map => lambda w: None } } }"
        )
        assert connect_stream(ctx) == 'card_box_0.root.connect("map", lambda w: None)'


class TestBindings:
    """Property bindings are set up once, after property application."""

    def test_binding_with_chain(self, context: Context) -> None:
        ctx = context(
            """
view V(model) {
    Gtk.Box {
        Gtk.CheckButton {
            #[chain(set_transform_to(str))]
            bind_property: ("active", revealer, "reveal-child"),
        },
        #[name(revealer)]
        Gtk.Revealer,
    }
}
"""
        )
        assert connect_stream(ctx) == (
            'check_button_0.bind_property("active", revealer, "reveal-child")'
            ".set_transform_to(str)"
        )

    def test_connections_grouped_per_widget(self, context: Context) -> None:
        ctx = context(
            """
view V(model, sender) {
    Gtk.Box {
        connect_map => lambda box: None,
        Gtk.Button { connect_clicked => Msg.A },
        connect_unmap => lambda box: None,
    }
}
"""
        )
        lines = connect_stream(ctx).splitlines()
        assert [line.split(".connect(")[1].split(",")[0] for line in lines] == [
            '"map"',
            '"unmap"',
            '"clicked"',
        ]
