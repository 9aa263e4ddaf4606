"""
viewforge Intermediate Representation (IR) types.

All IR types are re-exported from this package.
"""

from .components import (
    Component,
    ComponentKind,
    TemplateSpec,
    ViewSpec,
)
from .expressions import (
    Capture,
    Expr,
)
from .location import SourceLocation
from .widgets import (
    BranchKind,
    ConditionalBranches,
    ConditionalWidget,
    ConstructionStrategy,
    IfBranch,
    IfBranches,
    MatchArm,
    MatchBranches,
    Modifiers,
    Properties,
    Property,
    PropertyKind,
    Widget,
    WidgetFunc,
)

__all__ = [
    # Components
    "Component",
    "ComponentKind",
    "TemplateSpec",
    "ViewSpec",
    # Expressions
    "Capture",
    "Expr",
    # Location
    "SourceLocation",
    # Widgets
    "BranchKind",
    "ConditionalBranches",
    "ConditionalWidget",
    "ConstructionStrategy",
    "IfBranch",
    "IfBranches",
    "MatchArm",
    "MatchBranches",
    "Modifiers",
    "Properties",
    "Property",
    "PropertyKind",
    "Widget",
    "WidgetFunc",
]
