"""Tests for the widget record and template classes."""

from collections.abc import Callable

from viewforge.codegen import EmissionDriver, GenerationContext, TemplateArtifacts
from viewforge.codegen.record import RecordGenerator
from viewforge.core import ir
from viewforge.core.config import CompilerConfig

Context = Callable[[str], GenerationContext]


def record(context: GenerationContext) -> list[str]:
    return RecordGenerator(context).generate().stream("record").render().splitlines()


class TestRecordFields:
    """Which nodes the record holds, and how they are declared."""

    def test_counter_record(self, context: Context) -> None:
        ctx = context(
            """
view CounterWidgets(counter, sender) tracked {
    Gtk.Window {
        set_child: vbox = Gtk.Box {
            Gtk.Button.with_label("Increment") {
                connect_clicked => Msg.INCREMENT @inc_handler,
            },
            #: Shows the current count
            #[name(count_label)]
            Gtk.Label {
                #[track]
                set_label: str(counter.value),
            },
            Gtk.Label { set_label: "static" },
        },
    }
}
"""
        )
        assert record(ctx) == [
            "@dataclass",
            "class CounterWidgets:",
            '    """Widgets of the CounterWidgets view."""',
            "",
            "    window_0: Final[Gtk.Window]",
            "    vbox: Final[Gtk.Box]",
            "    button_0: Final[Gtk.Button]",
            "    #: Shows the current count",
            "    count_label: Final[Gtk.Label]",
            "    inc_handler: int",
        ]

    def test_mutable_widget_not_final(self, context: Context) -> None:
        ctx = context("view V(m) { Gtk.Window { set_child: mut label = Gtk.Label } }")
        assert "    label: Gtk.Label" in record(ctx)

    def test_every_top_level_tree_recorded(self, context: Context) -> None:
        ctx = context("view V(m) { Gtk.Window, Gtk.AboutDialog }")
        assert ctx.record_names == ["window_0", "about_dialog_0"]

    def test_conditional_and_prebound_recorded(self, context: Context) -> None:
        ctx = context(
            """
view V(model, sender, header) {
    Gtk.Window {
        #[local] set_titlebar = header -> Gtk.HeaderBar,
        set_child = if model.ready { Gtk.Label } else { Gtk.Spinner },
    }
}
"""
        )
        assert ctx.record_names == ["window_0", "header", "stack_0"]
        assert "    stack_0: Final[Gtk.Stack]" in record(ctx)

    def test_untyped_factory_annotated_any(self, context: Context) -> None:
        ctx = context("view V(m) { Gtk.Box { #[name(custom)] make_widget() } }")
        assert "    custom: Final[Any]" in record(ctx)

    def test_record_build(self, context: Context) -> None:
        ctx = context("view V(m) { Gtk.Box { #[name(label)] Gtk.Label } }")
        result = RecordGenerator(ctx).generate()
        assert result.stream("record_build").render() == "widgets = V(box_0=box_0, label=label)"


class TestTemplates:
    """Template classes."""

    def test_template_class(self, parse_one: Callable[..., ir.Component]) -> None:
        component = parse_one(
            """
template CardBox {
    Gtk.Box {
        set_spacing: 4,
        #[name(title)]
        Gtk.Label { set_label: "Card" },
    }
}
"""
        )
        artifacts = EmissionDriver(CompilerConfig()).generate(component)
        assert isinstance(artifacts, TemplateArtifacts)
        assert artifacts.source.splitlines() == [
            "@dataclass",
            "class CardBox(WidgetTemplate):",
            '    """Widget template CardBox."""',
            "",
            "    root: Final[Gtk.Box]",
            "    title: Final[Gtk.Label]",
            "",
            "    @classmethod",
            "    def init(cls) -> CardBox:",
            "        box_0 = Gtk.Box()",
            "        title = Gtk.Label()",
            "        box_0.set_spacing(4)",
            "        box_0.append(title)",
            '        title.set_label("Card")',
            "        return cls(root=box_0, title=title)",
        ]

    def test_template_rooted_at_template(self, parse_one: Callable[..., ir.Component]) -> None:
        component = parse_one("template Fancy { #[template] CardBox }")
        artifacts = EmissionDriver(CompilerConfig()).generate(component)
        assert isinstance(artifacts, TemplateArtifacts)
        lines = artifacts.source.splitlines()
        assert "    root: Final[Any]" in lines
        assert "        card_box_0 = CardBox.init()" in lines
        assert "        return cls(root=card_box_0.root)" in lines
