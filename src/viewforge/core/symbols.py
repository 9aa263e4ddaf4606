"""
Per-component symbol table.

Cross-tree references (``#[block_signal]`` guards, binding targets) are
resolved by name through one flat table per component rather than by links
between nodes.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field

from . import ir
from .errors import ValidationError

Node = ir.Widget | ir.ConditionalWidget


@dataclass
class NodeVisit:
    """
    One node reached while walking a component.

    Attributes:
        node: The widget or conditional
        tree: Index of the top-level tree holding the node
        parent: Name of the enclosing widget or conditional (None at top level)
        prop: Property attaching the node to its parent (None for top-level
            trees and branch widgets)
    """

    node: Node
    tree: int
    parent: str | None
    prop: ir.Property | None


def iter_nodes(component: ir.Component) -> Iterator[NodeVisit]:
    """Every node of ``component`` in declaration (pre-)order."""
    for tree_index, tree in enumerate(component.trees):
        yield from _visit(tree, tree_index, None, None)


def _visit(
    node: Node, tree: int, parent: str | None, prop: ir.Property | None
) -> Iterator[NodeVisit]:
    yield NodeVisit(node=node, tree=tree, parent=parent, prop=prop)
    if isinstance(node, ir.ConditionalWidget):
        for widget in node.branch_widgets():
            yield from _visit(widget, tree, node.name, None)
        return
    for child_prop in node.properties:
        child = child_prop.widget or child_prop.conditional
        if child is not None:
            yield from _visit(child, tree, node.name, child_prop)


@dataclass
class GuardEntry:
    """A connection guard: the handler id stored for ``#[block_signal]``."""

    name: str
    owner: str
    prop: ir.Property
    tree: int


@dataclass
class SymbolTable:
    """
    Symbol table for the names of one component.

    Maps every widget and conditional name to its node index, and every
    guard name to the connection declaring it.
    """

    nodes: list[Node] = field(default_factory=list)
    index: dict[str, int] = field(default_factory=dict)
    trees: dict[str, int] = field(default_factory=dict)
    guards: dict[str, GuardEntry] = field(default_factory=dict)

    def add_node(self, node: Node, tree: int) -> None:
        """Add a widget or conditional, checking for duplicates."""
        assert node.name is not None
        if node.name in self.index or node.name in self.guards:
            raise ValidationError(f"Duplicate name '{node.name}'")
        self.index[node.name] = len(self.nodes)
        self.trees[node.name] = tree
        self.nodes.append(node)

    def add_guard(self, guard: str, owner: str, prop: ir.Property, tree: int) -> None:
        """Add a connection guard, checking for duplicates."""
        if guard in self.guards:
            raise ValidationError(
                f"Duplicate guard '@{guard}' (already declared on '{self.guards[guard].owner}')"
            )
        if guard in self.index:
            raise ValidationError(f"Guard '@{guard}' has the same name as a widget")
        self.guards[guard] = GuardEntry(name=guard, owner=owner, prop=prop, tree=tree)

    def resolve(self, name: str) -> Node | None:
        """Node called ``name``, if any."""
        position = self.index.get(name)
        return self.nodes[position] if position is not None else None

    def guard_owner(self, guard: str) -> str | None:
        """Name of the widget whose connection declares ``guard``."""
        entry = self.guards.get(guard)
        return entry.owner if entry else None


def build_symbol_table(component: ir.Component) -> SymbolTable:
    """
    Build the symbol table of a named component.

    Raises:
        ValidationError: On a duplicate widget or guard name
    """
    table = SymbolTable()
    for visit in iter_nodes(component):
        table.add_node(visit.node, visit.tree)
    for visit in iter_nodes(component):
        if isinstance(visit.node, ir.Widget):
            for prop in visit.node.properties:
                if prop.guard:
                    assert visit.node.name is not None
                    table.add_guard(prop.guard, visit.node.name, prop, visit.tree)
    return table
