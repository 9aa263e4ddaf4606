"""
Widget tree types for viewforge IR.

This module contains the nodes produced by the parser and consumed by every
later stage: widgets, their ordered properties, and conditional widgets that
choose between alternative branches.
"""

from __future__ import annotations

from collections.abc import Iterator
from enum import StrEnum
from typing import Annotated, Literal

from pydantic import BaseModel, Field

from .expressions import Capture, Expr
from .location import SourceLocation


class ConstructionStrategy(StrEnum):
    """How the construction routine creates a widget."""

    BLOCK = "block"  # Type { ... } -> Type()
    BUILDER = "builder"  # Type.builder().a(1).build()
    CONSTRUCTOR = "constructor"  # Type.new(...) or Type(...)
    TEMPLATE = "template"  # #[template] Template { ... } -> Template.init()
    PREBOUND_VALUE = "local"  # #[local] name -> Type
    PREBOUND_REFERENCE = "local_ref"  # #[local_ref] name -> Type

    @property
    def is_prebound(self) -> bool:
        """Pre-bound widgets are supplied by the caller and never constructed."""
        return self in (ConstructionStrategy.PREBOUND_VALUE, ConstructionStrategy.PREBOUND_REFERENCE)


class PropertyKind(StrEnum):
    """Kinds of property a widget can carry."""

    METHOD = "method"  # set_label: "x"
    WIDGET = "widget"  # append = Gtk.Label
    CONDITIONAL = "conditional"  # append = if ... { } else { }
    CONNECTION = "connection"  # connect_clicked => Msg.CLICKED
    BINDING = "binding"  # bind_property: ("label", other, "label")


class WidgetFunc(BaseModel):
    """
    The construction expression of a widget.

    Attributes:
        path: Dotted path as written before the first call (``Gtk.Label.new``)
        type_path: Widget type inferred from the path (``Gtk.Label``), if known
        call: Full construction expression when the widget is built by calls
    """

    path: str
    type_path: str | None = None
    call: Expr | None = None


class Modifiers(BaseModel):
    """
    Modifier set attached to a property by attributes and suffixes.

    Attributes:
        watch: Re-apply on every update (#[watch])
        track: Re-apply when the tracking predicate holds (#[track])
        track_predicate: Explicit predicate; derived from the value when None
        block_signals: Connection guards suppressed while re-applying
        chain: Extra calls chained onto the property call (#[chain(...)])
        optional: Apply only if the argument is not None (``name?: value``)
        iterate: Apply once per item of the argument (#[iterate])
        transition: Transition kind of a conditional widget (#[transition])
    """

    watch: bool = False
    track: bool = False
    track_predicate: Expr | None = None
    block_signals: list[str] = Field(default_factory=list)
    chain: list[Expr] = Field(default_factory=list)
    optional: bool = False
    iterate: bool = False
    transition: str | None = None

    @property
    def refreshes(self) -> bool:
        """Whether the update routine re-applies the property at all."""
        return self.watch or self.track

    def names(self) -> list[str]:
        """Attribute names of the modifiers that are set, for diagnostics."""
        present = []
        if self.watch:
            present.append("watch")
        if self.track:
            present.append("track")
        if self.block_signals:
            present.append("block_signal")
        if self.chain:
            present.append("chain")
        if self.optional:
            present.append("?")
        if self.iterate:
            present.append("iterate")
        if self.transition:
            present.append("transition")
        return present


class Property(BaseModel):
    """
    One property of a widget.

    Attributes:
        name: Method, signal or target name (``set_label``, ``connect_clicked``)
        kind: What kind of property this is
        args: Bracket arguments (``attach[1, 1, 1, 1] = ...``)
        value: Argument expression, message or callback
        widget: Child widget of a widget-valued property
        conditional: Conditional widget of a conditional-valued property
        captures: Values captured by a signal callback
        guard: Name of the handler id stored for #[block_signal]
        default_child: Child declared without a property name
        modifiers: Modifier set
        location: Where the property starts
    """

    name: str
    kind: PropertyKind
    args: Expr | None = None
    value: Expr | None = None
    widget: Widget | None = None
    conditional: ConditionalWidget | None = None
    captures: list[Capture] = Field(default_factory=list)
    guard: str | None = None
    default_child: bool = False
    modifiers: Modifiers = Field(default_factory=Modifiers)
    location: SourceLocation | None = None


class Properties(BaseModel):
    """Ordered properties of one widget. Order is significant."""

    properties: list[Property] = Field(default_factory=list)

    def __iter__(self) -> Iterator[Property]:  # type: ignore[override]
        return iter(self.properties)

    def __len__(self) -> int:
        return len(self.properties)

    def append(self, prop: Property) -> None:
        self.properties.append(prop)


class Widget(BaseModel):
    """
    One constructible node of a widget tree.

    Attributes:
        name: Explicit or synthesized variable name
        explicit_name: Whether the user named the widget
        func: Construction expression
        mutable: Declared with ``mut``; the record field may be reassigned
        strategy: Construction strategy tag
        properties: Ordered properties
        is_root: The externally returned root widget
        doc: ``#:`` documentation attached to the widget
        location: Where the widget starts
    """

    name: str | None = None
    explicit_name: bool = False
    func: WidgetFunc
    mutable: bool = False
    strategy: ConstructionStrategy = ConstructionStrategy.BLOCK
    properties: Properties = Field(default_factory=Properties)
    is_root: bool = False
    doc: str | None = None
    location: SourceLocation | None = None

    @property
    def type_path(self) -> str | None:
        return self.func.type_path

    def children(self) -> Iterator[Widget | ConditionalWidget]:
        """Direct child nodes in property order."""
        for prop in self.properties:
            if prop.widget is not None:
                yield prop.widget
            elif prop.conditional is not None:
                yield prop.conditional

    def walk(self) -> Iterator[Widget | ConditionalWidget]:
        """All nodes of the subtree in declaration (pre-)order, self first."""
        yield self
        for child in self.children():
            yield from child.walk()


class BranchKind(StrEnum):
    """Position of a branch in an if chain."""

    IF = "if"
    ELIF = "elif"
    ELSE = "else"


class IfBranch(BaseModel):
    """One branch of an if/elif/else chain."""

    kind: BranchKind
    condition: Expr | None = None
    widget: Widget
    location: SourceLocation | None = None


class IfBranches(BaseModel):
    """An ordered if/elif/else chain. The last branch is always ``else``."""

    kind: Literal["if"] = "if"
    branches: list[IfBranch] = Field(default_factory=list)


class MatchArm(BaseModel):
    """One arm of a match; ``pattern`` is a Python case pattern, guard included."""

    pattern: Expr
    widget: Widget
    location: SourceLocation | None = None


class MatchBranches(BaseModel):
    """A match over ``subject`` with ordered arms."""

    kind: Literal["match"] = "match"
    subject: Expr
    arms: list[MatchArm] = Field(default_factory=list)


ConditionalBranches = Annotated[IfBranches | MatchBranches, Field(discriminator="kind")]


class ConditionalWidget(BaseModel):
    """
    An exclusive choice between alternative widgets.

    Lowered to a switch container holding every branch widget as a labeled
    child ("0", "1", ... in declaration order) while showing exactly one.

    Attributes:
        name: Explicit or synthesized name of the switch container
        explicit_name: Whether the user named the container
        mutable: Declared with ``mut``
        branches: The if chain or match arms
        transition: Transition kind applied to the container
        doc: ``#:`` documentation attached to the container
        location: Where the conditional starts
    """

    name: str | None = None
    explicit_name: bool = False
    mutable: bool = False
    branches: ConditionalBranches
    transition: str | None = None
    doc: str | None = None
    location: SourceLocation | None = None

    def branch_widgets(self) -> list[Widget]:
        """Branch widgets in declaration order; index i is page ``str(i)``."""
        if isinstance(self.branches, IfBranches):
            return [branch.widget for branch in self.branches.branches]
        return [arm.widget for arm in self.branches.arms]

    def walk(self) -> Iterator[Widget | ConditionalWidget]:
        """All nodes of the subtree in declaration (pre-)order, self first."""
        yield self
        for widget in self.branch_widgets():
            yield from widget.walk()


Property.model_rebuild()
Properties.model_rebuild()
Widget.model_rebuild()
