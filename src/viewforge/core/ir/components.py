"""
Component types for viewforge IR.

A view file holds components: views, which compile to a widget record plus
init and update routines, and templates, which compile to reusable subtree
classes.

Syntax:

    view CounterWidgets(counter, sender) tracked {
        #[root]
        Gtk.Window { ... },
    }

    template CardBox {
        Gtk.Box { ... }
    }
"""

from __future__ import annotations

from collections.abc import Iterator
from enum import StrEnum

from pydantic import BaseModel, Field

from .location import SourceLocation
from .widgets import ConditionalWidget, Widget


class ComponentKind(StrEnum):
    """Kinds of top-level component."""

    VIEW = "view"
    TEMPLATE = "template"


class ViewSpec(BaseModel):
    """
    A view component.

    Attributes:
        name: Name of the generated widget record type
        params: Parameters of the init routine; the first names the model, the
            second (optional) the message sender, the rest are init-only names
        tracked: The model declares change-tracking support
        trees: Top-level widget trees; the first is the root
        location: Where the component starts
    """

    name: str
    params: list[str] = Field(default_factory=list)
    tracked: bool = False
    trees: list[Widget] = Field(default_factory=list)
    location: SourceLocation | None = None

    @property
    def kind(self) -> ComponentKind:
        return ComponentKind.VIEW

    @property
    def model_name(self) -> str:
        return self.params[0]

    @property
    def sender_name(self) -> str | None:
        return self.params[1] if len(self.params) > 1 else None

    @property
    def root(self) -> Widget:
        return self.trees[0]

    def walk(self) -> Iterator[Widget | ConditionalWidget]:
        """Every node of every tree in declaration order."""
        for tree in self.trees:
            yield from tree.walk()


class TemplateSpec(BaseModel):
    """
    A reusable widget template.

    Attributes:
        name: Name of the generated template class
        tree: The template's single widget tree
        location: Where the component starts
    """

    name: str
    tree: Widget
    location: SourceLocation | None = None

    @property
    def kind(self) -> ComponentKind:
        return ComponentKind.TEMPLATE

    @property
    def params(self) -> list[str]:
        return []

    @property
    def tracked(self) -> bool:
        return False

    @property
    def sender_name(self) -> str | None:
        return None

    @property
    def trees(self) -> list[Widget]:
        return [self.tree]

    @property
    def root(self) -> Widget:
        return self.tree

    def walk(self) -> Iterator[Widget | ConditionalWidget]:
        """Every node of the tree in declaration order."""
        yield from self.tree.walk()


Component = ViewSpec | TemplateSpec
