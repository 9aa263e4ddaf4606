"""Tests for construction and init-time property application."""

from collections.abc import Callable

from viewforge.codegen import GenerationContext
from viewforge.codegen.assign import AssignGenerator
from viewforge.codegen.init import InitGenerator

Context = Callable[[str], GenerationContext]


def init_streams(context: GenerationContext) -> tuple[str, str]:
    result = InitGenerator(context).generate()
    return result.stream("root_stream").render(), result.stream("init_stream").render()


def assign_stream(context: GenerationContext) -> str:
    return AssignGenerator(context).generate().stream("assign_stream").render()


class TestConstruction:
    """Tests for the construction statement of each widget form."""

    def test_strategies(self, context: Context) -> None:
        ctx = context(
            """
view V(model) {
    Gtk.Window {
        Gtk.Box(orientation=Gtk.Orientation.VERTICAL) {
            Gtk.Button.with_label("Go"),
            Gtk.Label.new("a").set_selectable(True),
            #[template] CardBox,
        },
    }
}
"""
        )
        root, init = init_streams(ctx)
        assert root == "window_0 = Gtk.Window()"
        assert init.splitlines() == [
            "box_0 = Gtk.Box(orientation=Gtk.Orientation.VERTICAL)",
            'button_0 = Gtk.Button.with_label("Go")',
            'label_0 = Gtk.Label.new("a").set_selectable(True)',
            "card_box_0 = CardBox.init()",
        ]

    def test_children_constructed_in_declaration_order(self, context: Context) -> None:
        """A widget's subtree is built before its next sibling."""
        ctx = context(
            """
view V(model) {
    Gtk.Box {
        Gtk.Box { Gtk.Label, Gtk.Entry },
        Gtk.Button,
    }
}
"""
        )
        _, init = init_streams(ctx)
        assert init.splitlines() == [
            "box_1 = Gtk.Box()",
            "label_0 = Gtk.Label()",
            "entry_0 = Gtk.Entry()",
            "button_0 = Gtk.Button()",
        ]

    def test_prebound_widget_not_constructed(self, context: Context) -> None:
        ctx = context(
            """
view V(model, sender, header) {
    Gtk.Window {
        #[local_ref]
        set_titlebar = header -> Gtk.HeaderBar { set_show_title_buttons: True },
    }
}
"""
        )
        _, init = init_streams(ctx)
        assert init == ""
        assert assign_stream(ctx).splitlines() == [
            "window_0.set_titlebar(header)",
            "header.set_show_title_buttons(True)",
        ]

    def test_later_trees_go_to_init_stream(self, context: Context) -> None:
        ctx = context("view V(model) { Gtk.Window, #[name(about)] Gtk.AboutDialog }")
        root, init = init_streams(ctx)
        assert root == "window_0 = Gtk.Window()"
        assert init == "about = Gtk.AboutDialog()"


class TestAssignment:
    """Tests for init-time property application."""

    def test_method_forms(self, context: Context) -> None:
        ctx = context(
            """
view V(model) {
    Gtk.Grid {
        set_size_request: (40, 40),
        set_name?: model.name,
        #[iterate]
        add_css_class: model.classes,
        grab_focus: (),
        attach[0, 1, 1, 1] = Gtk.Label,
    }
}
"""
        )
        assert assign_stream(ctx).splitlines() == [
            "grid_0.set_size_request(40, 40)",
            "_value = model.name",
            "if _value is not None:",
            "    grid_0.set_name(_value)",
            "for _item in model.classes:",
            "    grid_0.add_css_class(_item)",
            "grid_0.grab_focus()",
            "grid_0.attach(label_0, 0, 1, 1, 1)",
        ]

    def test_optional_tuple_is_splatted(self, context: Context) -> None:
        ctx = context("view V(model) { Gtk.Box { set_size_request?: (model.w, model.h) } }")
        assert assign_stream(ctx).splitlines() == [
            "_value = (model.w, model.h)",
            "if _value is not None:",
            "    box_0.set_size_request(*_value)",
        ]

    def test_chained_calls(self, context: Context) -> None:
        ctx = context(
            "view V(model) { Gtk.Label { #[chain(set_xalign(0.0))] set_label: model.text } }"
        )
        assert assign_stream(ctx) == "label_0.set_label(model.text).set_xalign(0.0)"

    def test_parent_property_precedes_child_properties(self, context: Context) -> None:
        ctx = context(
            """
view V(model) {
    Gtk.Window {
        set_title: "Counter",
        set_child: vbox = Gtk.Box {
            set_spacing: 5,
            Gtk.Label { set_label: "a" },
        },
        set_default_size: (300, 100),
    }
}
"""
        )
        assert assign_stream(ctx).splitlines() == [
            'window_0.set_title("Counter")',
            "window_0.set_child(vbox)",
            "vbox.set_spacing(5)",
            "vbox.append(label_0)",
            'label_0.set_label("a")',
            "window_0.set_default_size(300, 100)",
        ]

    def test_container_method_for_default_child(self, context: Context) -> None:
        """Single-child containers attach unnamed children with set_child."""
        ctx = context("view V(model) { Gtk.ScrolledWindow { Gtk.TextView } }")
        assert assign_stream(ctx) == "scrolled_window_0.set_child(text_view_0)"

    def test_template_child_attached_by_root(self, context: Context) -> None:
        ctx = context("view V(model) { Gtk.Box { #[template] #[name(card)] CardBox } }")
        assert assign_stream(ctx) == "box_0.append(card.root)"

    def test_multiline_expression_is_parenthesized(self, context: Context) -> None:
        ctx = context(
            """
view V(m) {
    Gtk.Label {
        set_label: m.first
            + m.second,
    }
}
"""
        )
        lines = assign_stream(ctx).splitlines()
        assert lines[0] == "label_0.set_label((m.first"
        assert lines[1].strip() == "+ m.second))"

    def test_connections_left_to_connect_pass(self, context: Context) -> None:
        ctx = context(
            "view V(model, sender) { Gtk.Button { set_label: 'Go', connect_clicked => Msg.GO } }"
        )
        assert assign_stream(ctx) == "button_0.set_label('Go')"


class TestConditionalInit:
    """Tests for the lowering of conditionals at init."""

    def test_if_chain(self, context: Context) -> None:
        ctx = context(
            """
view V(model) {
    Gtk.Box {
        #[transition = "Crossfade"]
        append: parity = if model.value % 2 == 0 {
            Gtk.Label { set_label: "even" }
        } else {
            Gtk.Label { set_label: "odd" }
        },
    }
}
"""
        )
        _, init = init_streams(ctx)
        assert init.splitlines() == [
            "parity = Gtk.Stack()",
            "parity.set_transition_type(Gtk.StackTransitionType.CROSSFADE)",
            "label_0 = Gtk.Label()",
            'parity.add_named(label_0, "0")',
            "label_1 = Gtk.Label()",
            'parity.add_named(label_1, "1")',
        ]
        assert assign_stream(ctx).splitlines() == [
            "box_0.append(parity)",
            '_page = "0" if (model.value % 2 == 0) else "1"',
            "parity.set_visible_child_name(_page)",
            'label_0.set_label("even")',
            'label_1.set_label("odd")',
        ]

    def test_elif_chain_page_expression(self, context: Context) -> None:
        ctx = context(
            """
view V(m) {
    Gtk.Box {
        append = if m.a { Gtk.Label } elif m.b { Gtk.Entry } else { Gtk.Button },
    }
}
"""
        )
        lines = assign_stream(ctx).splitlines()
        assert lines[1] == '_page = "0" if (m.a) else "1" if (m.b) else "2"'

    def test_match_defaults_to_first_page(self, context: Context) -> None:
        ctx = context(
            """
view V(model) {
    Gtk.Box {
        match model.mode {
            Mode.EDIT => Gtk.Entry,
            _ => Gtk.Label,
        },
    }
}
"""
        )
        assert assign_stream(ctx).splitlines() == [
            "box_0.append(stack_0)",
            '_page = "0"',
            "match model.mode:",
            "    case Mode.EDIT:",
            '        _page = "0"',
            "    case _:",
            '        _page = "1"',
            "stack_0.set_visible_child_name(_page)",
        ]
