"""
Lowering of conditional widgets to a switch container.

A conditional becomes one switch container holding every branch widget as
a labeled child, ``"0"`` to ``"N-1"`` in declaration order. All branches are
built at init; the init and update routines only choose the visible label.

Generated code (if chain):

    parity = Gtk.Stack()
    parity.set_transition_type(Gtk.StackTransitionType.CROSSFADE)
    label_0 = Gtk.Label()
    parity.add_named(label_0, "0")
    label_1 = Gtk.Label()
    parity.add_named(label_1, "1")
    ...
    _page = "0" if (model.value % 2 == 0) else "1"
    if parity.get_visible_child_name() != _page:
        parity.set_visible_child_full(_page, Gtk.StackTransitionType.CROSSFADE)
"""

from __future__ import annotations

from collections.abc import Callable

from viewforge.core import ir

from .context import PAGE_LOCAL, GenerationContext
from .writer import CodeWriter

BuildSubtree = Callable[[ir.Widget, CodeWriter], None]


def page_label(index: int) -> str:
    """Label of the branch at ``index`` as a string literal."""
    return f'"{index}"'


class ConditionalLowering:
    """Emits the construction, initial selection and switching of conditionals."""

    def __init__(self, context: GenerationContext):
        self.context = context
        self.config = context.config

    def construct(
        self,
        conditional: ir.ConditionalWidget,
        writer: CodeWriter,
        build_subtree: BuildSubtree,
    ) -> None:
        """
        Emit the switch container and every branch.

        Args:
            conditional: The conditional widget
            writer: Stream receiving the statements
            build_subtree: Emits the construction of one branch widget subtree
        """
        name = conditional.name
        writer.line(f"{name} = {self.config.switch_type}()")
        if conditional.transition:
            transition = self.config.transition_value(conditional.transition)
            writer.line(f"{name}.{self.config.transition_method}({transition})")
        for index, widget in enumerate(conditional.branch_widgets()):
            build_subtree(widget, writer)
            writer.line(
                f"{name}.{self.config.add_page_method}"
                f"({self.context.handle(widget)}, {page_label(index)})"
            )

    def select_initial(self, conditional: ir.ConditionalWidget, writer: CodeWriter) -> None:
        """Emit the init-time selection of the visible branch."""
        name = conditional.name
        if isinstance(conditional.branches, ir.MatchBranches):
            writer.line(f"{PAGE_LOCAL} = {page_label(0)}")
        self._emit_page(conditional, writer)
        writer.line(f"{name}.{self.config.set_page_method}({PAGE_LOCAL})")

    def switch(self, conditional: ir.ConditionalWidget, writer: CodeWriter) -> None:
        """
        Emit the update-time branch switch.

        The discriminant is evaluated on every update; the container only
        switches when the selected label differs from the visible one. A match
        with no matching arm keeps the current branch.
        """
        name = conditional.name
        current = f"{name}.{self.config.get_page_method}()"
        if isinstance(conditional.branches, ir.MatchBranches):
            writer.line(f"{PAGE_LOCAL} = {current}")
        self._emit_page(conditional, writer)
        with writer.block(f"if {current} != {PAGE_LOCAL}:"):
            if conditional.transition:
                transition = self.config.transition_value(conditional.transition)
                writer.line(
                    f"{name}.{self.config.set_page_full_method}({PAGE_LOCAL}, {transition})"
                )
            else:
                writer.line(f"{name}.{self.config.set_page_method}({PAGE_LOCAL})")

    def _emit_page(self, conditional: ir.ConditionalWidget, writer: CodeWriter) -> None:
        """Assign the label of the selected branch to the page local."""
        branches = conditional.branches
        if isinstance(branches, ir.IfBranches):
            parts = []
            for index, branch in enumerate(branches.branches):
                if branch.kind == ir.BranchKind.ELSE or branch.condition is None:
                    parts.append(page_label(index))
                    break
                parts.append(f"{page_label(index)} if ({branch.condition.text}) else")
            writer.line(f"{PAGE_LOCAL} = {' '.join(parts)}")
            return

        with writer.block(f"match {branches.subject.code}:"):
            for index, arm in enumerate(branches.arms):
                with writer.block(f"case {arm.pattern.text}:"):
                    writer.line(f"{PAGE_LOCAL} = {page_label(index)}")
