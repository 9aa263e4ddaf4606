"""Tests for the view language parser."""

from pathlib import Path

import pytest

from viewforge.core import ir
from viewforge.core.dsl_parser_impl import parse_view_source
from viewforge.core.errors import ParseError


def parse(text: str) -> ir.Component:
    view_file = parse_view_source(text, Path("test.view"))
    assert len(view_file.components) == 1
    parsed = view_file.components[0]
    if parsed.error is not None:
        raise parsed.error
    assert parsed.component is not None
    return parsed.component


def props(widget: ir.Widget) -> list[ir.Property]:
    return list(widget.properties)


class TestComponents:
    """Tests for view and template declarations."""

    def test_view_header(self) -> None:
        """Parameters and the tracked flag are read from the header."""
        view = parse(
            """
view CounterWidgets(counter, sender, extra) tracked {
    Gtk.Window
}
"""
        )
        assert isinstance(view, ir.ViewSpec)
        assert view.name == "CounterWidgets"
        assert view.params == ["counter", "sender", "extra"]
        assert view.tracked is True
        assert view.model_name == "counter"
        assert view.sender_name == "sender"

    def test_untracked_view_without_sender(self) -> None:
        view = parse("view Plain(model) { Gtk.Label }")
        assert isinstance(view, ir.ViewSpec)
        assert view.tracked is False
        assert view.sender_name is None

    def test_multiple_trees_first_is_root(self) -> None:
        """The first top-level widget is the root, marked or not."""
        view = parse(
            """
view Main(model) {
    Gtk.Window { set_title: "main" },
    #[name(about)]
    Gtk.AboutDialog,
}
"""
        )
        assert len(view.trees) == 2
        assert view.trees[0].is_root is True
        assert view.trees[1].is_root is False
        assert view.trees[1].name == "about"

    def test_root_marker_on_later_tree_rejected(self) -> None:
        with pytest.raises(ParseError, match="root"):
            parse(
                """
view Main(model) {
    Gtk.Window,
    #[root]
    Gtk.Dialog,
}
"""
            )

    def test_template(self) -> None:
        template = parse("template CardBox { Gtk.Box { set_spacing: 4 } }")
        assert isinstance(template, ir.TemplateSpec)
        assert template.name == "CardBox"
        assert template.root.func.path == "Gtk.Box"
        assert template.params == []

    def test_view_needs_model_parameter(self) -> None:
        with pytest.raises(ParseError, match="model parameter"):
            parse("view Empty() { Gtk.Label }")

    def test_trailing_tokens_rejected(self) -> None:
        with pytest.raises(ParseError):
            parse("view Main(model) { Gtk.Label } extra")


class TestConstructionForms:
    """Tests for the construction strategy chosen per widget form."""

    def test_block_form(self) -> None:
        root = parse("view V(m) { Gtk.Label { set_label: 'x' } }").root
        assert root.strategy == ir.ConstructionStrategy.BLOCK
        assert root.func.type_path == "Gtk.Label"
        assert root.func.call is None

    def test_constructor_form(self) -> None:
        root = parse('view V(m) { Gtk.Button.with_label("Go") }').root
        assert root.strategy == ir.ConstructionStrategy.CONSTRUCTOR
        assert root.func.type_path == "Gtk.Button"
        assert root.func.call is not None
        assert root.func.call.text == 'Gtk.Button.with_label("Go")'

    def test_builder_form(self) -> None:
        root = parse('view V(m) { Gtk.Label.new("a").set_selectable(True) }').root
        assert root.strategy == ir.ConstructionStrategy.BUILDER
        assert root.func.call is not None
        assert root.func.call.text == 'Gtk.Label.new("a").set_selectable(True)'

    def test_constructor_with_keyword_arguments(self) -> None:
        root = parse("view V(m) { Gtk.Box(orientation=Gtk.Orientation.VERTICAL) }").root
        assert root.strategy == ir.ConstructionStrategy.CONSTRUCTOR
        assert root.func.type_path == "Gtk.Box"

    def test_lowercase_factory_has_no_type(self) -> None:
        root = parse("view V(m) { make_label() }").root
        assert root.func.type_path is None

    def test_template_widget(self) -> None:
        window = parse("view V(m) { Gtk.Window { #[template] CardBox } }").root
        card = props(window)[0].widget
        assert card is not None
        assert card.strategy == ir.ConstructionStrategy.TEMPLATE
        assert card.func.path == "CardBox"

    def test_prebound_by_reference(self) -> None:
        window = parse(
            """
view V(model, sender, header) {
    Gtk.Window {
        #[local_ref]
        set_titlebar = header -> Gtk.HeaderBar { set_show_title_buttons: True },
    }
}
"""
        ).root
        prop = props(window)[0]
        assert prop.kind == ir.PropertyKind.WIDGET
        assert prop.name == "set_titlebar"
        assert prop.widget is not None
        assert prop.widget.name == "header"
        assert prop.widget.strategy == ir.ConstructionStrategy.PREBOUND_REFERENCE
        assert prop.widget.type_path == "Gtk.HeaderBar"

    def test_prebound_by_value(self) -> None:
        window = parse(
            "view V(model, sender, header) { Gtk.Window { #[local] header -> Gtk.HeaderBar } }"
        ).root
        child = props(window)[0].widget
        assert child is not None
        assert child.strategy == ir.ConstructionStrategy.PREBOUND_VALUE

    def test_prebound_form_needs_attribute(self) -> None:
        with pytest.raises(ParseError, match="local"):
            parse("view V(m, s, header) { Gtk.Window { header -> Gtk.HeaderBar } }")


class TestProperties:
    """Tests for property forms and modifiers."""

    def test_method_property(self) -> None:
        root = parse("view V(m) { Gtk.Label { set_label: str(m.value), set_xalign: 0.0 } }").root
        first, second = props(root)
        assert first.kind == ir.PropertyKind.METHOD
        assert first.name == "set_label"
        assert first.value is not None
        assert first.value.text == "str(m.value)"
        assert second.value is not None
        assert second.value.text == "0.0"

    def test_tuple_value_is_one_expression(self) -> None:
        root = parse("view V(m) { Gtk.Window { set_default_size: (300, 100) } }").root
        value = props(root)[0].value
        assert value is not None
        assert value.text == "(300, 100)"

    def test_optional_property(self) -> None:
        root = parse("view V(m) { Gtk.Box { set_spacing?: m.spacing } }").root
        prop = props(root)[0]
        assert prop.modifiers.optional is True
        assert prop.kind == ir.PropertyKind.METHOD

    def test_zero_argument_call_shorthand(self) -> None:
        root = parse("view V(m) { Gtk.Label { grab_focus: () } }").root
        value = props(root)[0].value
        assert value is not None
        assert value.text == "()"

    def test_modifiers(self) -> None:
        root = parse(
            """
view V(model) tracked {
    Gtk.Label {
        #[watch]
        set_visible: model.visible,
        #[track(model.changed("text") or model.force)]
        #[block_signal(a, b)]
        set_label: model.text,
        #[iterate]
        add_css_class: model.classes,
    }
}
"""
        ).root
        watch, track, iterate = props(root)
        assert watch.modifiers.watch is True
        assert track.modifiers.track is True
        assert track.modifiers.track_predicate is not None
        assert track.modifiers.track_predicate.text == 'model.changed("text") or model.force'
        assert track.modifiers.block_signals == ["a", "b"]
        assert iterate.modifiers.iterate is True

    def test_attribute_string_form(self) -> None:
        root = parse(
            """
view V(m) {
    Gtk.Box {
        #[transition = "SlideLeft"]
        append = if m.flag { Gtk.Label } else { Gtk.Entry },
    }
}
"""
        ).root
        prop = props(root)[0]
        assert prop.kind == ir.PropertyKind.CONDITIONAL
        assert prop.conditional is not None
        assert prop.conditional.transition == "SlideLeft"

    def test_widget_valued_property_with_name(self) -> None:
        root = parse("view V(m) { Gtk.Window { set_child: mut label = Gtk.Label } }").root
        prop = props(root)[0]
        assert prop.kind == ir.PropertyKind.WIDGET
        assert prop.widget is not None
        assert prop.widget.name == "label"
        assert prop.widget.explicit_name is True
        assert prop.widget.mutable is True

    def test_bracket_arguments(self) -> None:
        root = parse("view V(m) { Gtk.Grid { attach[0, 1, 1, 1] = Gtk.Label } }").root
        prop = props(root)[0]
        assert prop.name == "attach"
        assert prop.args is not None
        assert prop.args.text == "0, 1, 1, 1"

    def test_default_child(self) -> None:
        root = parse("view V(m) { Gtk.Box { Gtk.Label, Gtk.Entry { set_text: 'x' } } }").root
        first, second = props(root)
        assert first.default_child is True
        assert first.name == ""
        assert second.widget is not None
        assert second.widget.func.path == "Gtk.Entry"

    def test_connection_with_captures_and_guard(self) -> None:
        root = parse(
            """
view V(model, sender) {
    Gtk.Button {
        connect_clicked[sender, count = model.count] => Msg.CLICKED @clicked_handler,
        connect_activate => lambda button: button.set_label("hi"),
    }
}
"""
        ).root
        clicked, activate = props(root)
        assert clicked.kind == ir.PropertyKind.CONNECTION
        assert [capture.name for capture in clicked.captures] == ["sender", "count"]
        assert clicked.captures[1].expr is not None
        assert clicked.captures[1].expr.text == "model.count"
        assert clicked.value is not None
        assert clicked.value.text == "Msg.CLICKED"
        assert clicked.guard == "clicked_handler"
        assert activate.value is not None
        assert activate.value.text == 'lambda button: button.set_label("hi")'
        assert activate.guard is None

    def test_lambda_with_several_parameters(self) -> None:
        """Commas in a lambda's parameter list do not end the value."""
        root = parse(
            "view V(m) { Gtk.Entry { connect_changed => lambda a, b=1: print(a, b), set_text: 'x' } }"
        ).root
        connection, method = props(root)
        assert connection.value is not None
        assert connection.value.text == "lambda a, b=1: print(a, b)"
        assert method.name == "set_text"

    def test_binding(self) -> None:
        root = parse(
            """
view V(m) {
    Gtk.Box {
        #[chain(flags(GObject.BindingFlags.SYNC_CREATE))]
        bind_property: ("active", revealer, "reveal-child"),
    }
}
"""
        ).root
        prop = props(root)[0]
        assert prop.kind == ir.PropertyKind.BINDING
        assert [chain.text for chain in prop.modifiers.chain] == [
            "flags(GObject.BindingFlags.SYNC_CREATE)"
        ]

    def test_doc_comment(self) -> None:
        view = parse(
            """
view V(m) {
    Gtk.Box {
        #: Shows the count
        #: in bold
        #[name(count)]
        Gtk.Label,
    }
}
"""
        )
        label = props(view.root)[0].widget
        assert label is not None
        assert label.doc == "Shows the count\nin bold"

    def test_multiline_expression(self) -> None:
        root = parse(
            """
view V(m) {
    Gtk.Label {
        set_label: m.first
            + m.second,
    }
}
"""
        ).root
        value = props(root)[0].value
        assert value is not None
        assert "\n" in value.text
        assert value.code.startswith("(")


class TestConditionals:
    """Tests for if chains and match expressions."""

    def test_if_elif_else(self) -> None:
        root = parse(
            """
view V(m) {
    Gtk.Box {
        append: state = if m.value > 10 {
            Gtk.Label { set_label: "big" }
        } elif m.value > 0 {
            Gtk.Label { set_label: "small" }
        } else if m.value == 0 {
            Gtk.Label { set_label: "zero" }
        } else {
            Gtk.Entry
        },
    }
}
"""
        ).root
        conditional = props(root)[0].conditional
        assert conditional is not None
        assert conditional.name == "state"
        assert isinstance(conditional.branches, ir.IfBranches)
        kinds = [branch.kind for branch in conditional.branches.branches]
        assert kinds == [
            ir.BranchKind.IF,
            ir.BranchKind.ELIF,
            ir.BranchKind.ELIF,
            ir.BranchKind.ELSE,
        ]
        conditions = [
            branch.condition.text
            for branch in conditional.branches.branches
            if branch.condition is not None
        ]
        assert conditions == ["m.value > 10", "m.value > 0", "m.value == 0"]

    def test_if_without_else_rejected(self) -> None:
        with pytest.raises(ParseError, match="else"):
            parse("view V(m) { Gtk.Box { append = if m.flag { Gtk.Label } } }")

    def test_match(self) -> None:
        root = parse(
            """
view V(m) {
    Gtk.Box {
        match m.mode {
            Mode.EDIT => Gtk.Entry,
            Mode.VIEW | Mode.PREVIEW => { Gtk.Label { set_label: "read only" } },
            _ => Gtk.Spinner,
        },
    }
}
"""
        ).root
        prop = props(root)[0]
        assert prop.default_child is True
        conditional = prop.conditional
        assert conditional is not None
        assert isinstance(conditional.branches, ir.MatchBranches)
        assert conditional.branches.subject.text == "m.mode"
        patterns = [arm.pattern.text for arm in conditional.branches.arms]
        assert patterns == ["Mode.EDIT", "Mode.VIEW | Mode.PREVIEW", "_"]

    def test_invalid_pattern_rejected(self) -> None:
        with pytest.raises(ParseError, match="match pattern"):
            parse("view V(m) { Gtk.Box { match m.mode { 1 + => Gtk.Label } } }")

    def test_wildcard_before_last_arm_rejected(self) -> None:
        with pytest.raises(ParseError, match="unreachable") as exc_info:
            parse(
                """
view V(model) {
    Gtk.Box {
        match model.mode {
            _ => Gtk.Label,
            "edit" => Gtk.Entry,
        },
    }
}
"""
            )
        context = exc_info.value.context
        assert context is not None
        assert context.line == 5

    def test_capture_before_last_arm_rejected(self) -> None:
        with pytest.raises(ParseError, match="name capture 'other'"):
            parse(
                'view V(m) { Gtk.Box { match m.mode { other => Gtk.Label, "a" => Gtk.Entry } } }'
            )

    def test_guarded_capture_before_last_arm(self) -> None:
        root = parse(
            "view V(m) { Gtk.Box { match m.count { n if n > 3 => Gtk.Label, _ => Gtk.Entry } } }"
        ).root
        conditional = props(root)[0].conditional
        assert conditional is not None
        assert isinstance(conditional.branches, ir.MatchBranches)
        assert [arm.pattern.text for arm in conditional.branches.arms] == ["n if n > 3", "_"]

    def test_set_literal_in_condition_needs_parentheses(self) -> None:
        with pytest.raises(ParseError, match="wrap set or dict literals in parentheses"):
            parse(
                "view V(m) { Gtk.Box { append = if m.x in {1, 2} { Gtk.Label } "
                "else { Gtk.Entry } } }"
            )

        root = parse(
            "view V(m) { Gtk.Box { append = if (m.x in {1, 2}) { Gtk.Label } "
            "else { Gtk.Entry } } }"
        ).root
        conditional = props(root)[0].conditional
        assert conditional is not None
        assert isinstance(conditional.branches, ir.IfBranches)
        condition = conditional.branches.branches[0].condition
        assert condition is not None
        assert condition.text == "(m.x in {1, 2})"

    def test_branch_holds_one_widget(self) -> None:
        with pytest.raises(ParseError, match="exactly one widget"):
            parse("view V(m) { Gtk.Box { append = if m.a { Gtk.Label, Gtk.Entry } else { Gtk.Label } } }")

    def test_conditional_at_top_level_rejected(self) -> None:
        with pytest.raises(ParseError, match="conditionals"):
            parse("view V(m) { if m.a { Gtk.Label } else { Gtk.Entry } }")


class TestErrors:
    """Tests for parse diagnostics."""

    def test_unknown_attribute(self) -> None:
        with pytest.raises(ParseError, match="Unknown attribute"):
            parse("view V(m) { Gtk.Label { #[wtach] set_label: 'x' } }")

    def test_invalid_python_expression(self) -> None:
        with pytest.raises(ParseError, match="Invalid Python expression"):
            parse("view V(m) { Gtk.Label { set_label: m.value + } }")

    def test_error_location(self) -> None:
        with pytest.raises(ParseError) as exc_info:
            parse("view V(m) {\n    Gtk.Label {\n        set_label \"x\"\n    }\n}")
        context = exc_info.value.context
        assert context is not None
        assert context.line == 3
        assert context.snippet is not None

    def test_connection_needs_prefix(self) -> None:
        with pytest.raises(ParseError, match="connect_"):
            parse("view V(m, s) { Gtk.Button { clicked => Msg.GO } }")

    def test_duplicate_attribute(self) -> None:
        with pytest.raises(ParseError, match="Duplicate attribute"):
            parse("view V(m) { Gtk.Label { #[watch] #[watch] set_label: 'x' } }")

    def test_property_attribute_on_tree_rejected(self) -> None:
        with pytest.raises(ParseError, match="applies to a property"):
            parse("view V(m) { #[watch] Gtk.Label }")


class TestComponentIsolation:
    """A syntax error in one component does not affect the others."""

    def test_error_isolated_per_component(self) -> None:
        view_file = parse_view_source(
            """
view Broken(m) {
    Gtk.Label { set_label: }
}

view Fine(m) {
    Gtk.Label { set_label: "ok" }
}

template Card {
    Gtk.Box
}
""",
            Path("test.view"),
        )
        names = [parsed.name for parsed in view_file.components]
        assert names == ["Broken", "Fine", "Card"]
        broken, fine, card = view_file.components
        assert broken.error is not None
        assert broken.component is None
        assert fine.error is None
        assert fine.component is not None
        assert card.kind == ir.ComponentKind.TEMPLATE
        assert len(view_file.errors) == 1

    def test_unclosed_brace_isolated(self) -> None:
        view_file = parse_view_source(
            """
view A(model) {
    Gtk.Label { set_label: "a" }

view B(model) {
    Gtk.Label { set_label: "b" }
}
""",
            Path("test.view"),
        )
        assert [parsed.name for parsed in view_file.components] == ["A", "B"]
        first, second = view_file.components
        assert first.error is not None
        assert second.error is None
        assert second.component is not None

    def test_lexer_error_isolated(self) -> None:
        view_file = parse_view_source(
            """
view A(model) {
    Gtk.Label { set_label: "unterminated }
}

template Card {
    Gtk.Box
}
""",
            Path("test.view"),
        )
        assert [parsed.name for parsed in view_file.components] == ["A", "Card"]
        first, second = view_file.components
        assert first.kind == ir.ComponentKind.VIEW
        assert first.error is not None
        assert "Unterminated string literal" in first.error.message
        context = first.error.context
        assert context is not None
        assert context.line == 3
        assert second.error is None
        assert second.kind == ir.ComponentKind.TEMPLATE
