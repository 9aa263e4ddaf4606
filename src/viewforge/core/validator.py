"""
Semantic validation for viewforge components.

Validates a named component for attribute legality, name binding and scoping
before any code is generated. Every check returns ``(errors, warnings)``;
any error aborts generation for that component only. Validation never changes
the shape of the tree.
"""

from __future__ import annotations

import keyword
import logging

from . import ir
from .config import CompilerConfig
from .errors import ValidationError
from .pyexpr import (
    is_lambda,
    model_fields,
    pattern_names,
    plain_name,
    referenced_names,
    tuple_elements,
)
from .symbols import NodeVisit, SymbolTable, iter_nodes

logger = logging.getLogger(__name__)

# Names the generated routines use themselves
RESERVED_NAMES = frozenset({"widgets"})

# Modifiers each property kind may carry ("?" is the optional suffix)
ALLOWED_MODIFIERS: dict[ir.PropertyKind, frozenset[str]] = {
    ir.PropertyKind.METHOD: frozenset(
        {"watch", "track", "block_signal", "chain", "?", "iterate"}
    ),
    ir.PropertyKind.BINDING: frozenset({"chain"}),
    ir.PropertyKind.WIDGET: frozenset(),
    ir.PropertyKind.CONDITIONAL: frozenset({"transition"}),
    ir.PropertyKind.CONNECTION: frozenset(),
}

KIND_DESCRIPTIONS = {
    ir.PropertyKind.METHOD: "method",
    ir.PropertyKind.BINDING: "property binding",
    ir.PropertyKind.WIDGET: "widget-valued",
    ir.PropertyKind.CONDITIONAL: "conditional",
    ir.PropertyKind.CONNECTION: "signal connection",
}

# Smallest argument count of a property binding: (source_property, target, target_property)
BINDING_ARITY = 3


def _at(location: ir.SourceLocation | None, message: str) -> str:
    if location is None:
        return message
    return f"{location}: {message}"


def _prop_label(prop: ir.Property) -> str:
    return f"'{prop.name}'" if prop.name else "child"


def _widget_properties(component: ir.Component) -> list[tuple[NodeVisit, ir.Property]]:
    """Every property of every widget, paired with the widget's visit."""
    pairs = []
    for visit in iter_nodes(component):
        if isinstance(visit.node, ir.Widget):
            for prop in visit.node.properties:
                pairs.append((visit, prop))
    return pairs


def collect_symbols(component: ir.Component) -> tuple[SymbolTable, list[str]]:
    """
    Build the symbol table, reporting duplicates instead of stopping at the first.

    Returns:
        Tuple of (symbol table holding the first occurrence of each name, errors)
    """
    table = SymbolTable()
    errors: list[str] = []
    scopes: dict[str | None, set[str]] = {}
    for visit in iter_nodes(component):
        name = visit.node.name
        if name is None:
            errors.append(_at(visit.node.location, "Widget has no name"))
            continue
        siblings = scopes.setdefault(visit.parent, set())
        try:
            table.add_node(visit.node, visit.tree)
        except ValidationError as e:
            if name in siblings:
                message = (
                    f"Duplicate widget name '{name}' in the properties of "
                    f"'{visit.parent or component.name}'"
                )
            else:
                message = f"{component.name}: {e.message}"
            errors.append(_at(visit.node.location, message))
        siblings.add(name)

    for visit, prop in _widget_properties(component):
        if prop.guard and visit.node.name:
            try:
                table.add_guard(prop.guard, visit.node.name, prop, visit.tree)
            except ValidationError as e:
                errors.append(_at(prop.location, f"{component.name}: {e.message}"))

    return table, errors


def validate_names(
    component: ir.Component, config: CompilerConfig
) -> tuple[list[str], list[str]]:
    """
    Validate widget and guard names.

    Checks:
    - Explicit names are identifiers, not keywords, and do not start with '_'
    - Names do not collide with generated names or the toolkit module
    - Names do not shadow a view parameter unless pre-bound to it

    Returns:
        Tuple of (errors, warnings)
    """
    errors: list[str] = []
    warnings: list[str] = []

    for visit in iter_nodes(component):
        node = visit.node
        name = node.name
        if name is None or not node.explicit_name:
            continue
        problem = _name_problem(name, config)
        if problem:
            errors.append(_at(node.location, f"Widget name '{name}' {problem}"))
        prebound = isinstance(node, ir.Widget) and node.strategy.is_prebound
        if name in component.params and not prebound:
            errors.append(
                _at(node.location, f"Widget name '{name}' shadows a parameter of '{component.name}'")
            )
        if component.kind == ir.ComponentKind.TEMPLATE and name == "root":
            errors.append(
                _at(node.location, "Widget name 'root' is reserved for the template root")
            )

    for _, prop in _widget_properties(component):
        if prop.guard:
            problem = _name_problem(prop.guard, config)
            if problem:
                errors.append(_at(prop.location, f"Guard name '{prop.guard}' {problem}"))
            if prop.guard in component.params:
                errors.append(
                    _at(prop.location, f"Guard name '{prop.guard}' shadows a parameter")
                )

    return errors, warnings


def _name_problem(name: str, config: CompilerConfig) -> str | None:
    if not name.isidentifier():
        return "is not a valid Python identifier"
    if keyword.iskeyword(name):
        return "is a Python keyword"
    if name.startswith("_"):
        return "starts with '_', which is reserved for generated names"
    if name in RESERVED_NAMES:
        return "is reserved by the generated update routine"
    if name == config.toolkit_module:
        return "shadows the toolkit module"
    return None


def validate_modifiers(component: ir.Component) -> tuple[list[str], list[str]]:
    """
    Validate that each property carries only the modifiers its kind allows.

    Checks:
    - Refresh, optional, iterate and block_signal modifiers only on methods
    - #[chain] only on methods and property bindings
    - #[transition] only on conditionals
    - #[watch] with #[track]: watch wins (warning)
    - #[block_signal] without a refresh modifier has no effect (warning)

    Returns:
        Tuple of (errors, warnings)
    """
    errors: list[str] = []
    warnings: list[str] = []

    for _, prop in _widget_properties(component):
        present = prop.modifiers.names()
        illegal = [name for name in present if name not in ALLOWED_MODIFIERS[prop.kind]]
        if illegal:
            listed = ", ".join(f"#[{name}]" if name != "?" else "'?'" for name in illegal)
            errors.append(
                _at(
                    prop.location,
                    f"{listed} cannot be applied to {KIND_DESCRIPTIONS[prop.kind]} "
                    f"property {_prop_label(prop)}",
                )
            )
            continue

        if prop.modifiers.watch and prop.modifiers.track:
            warnings.append(
                _at(
                    prop.location,
                    f"Property {_prop_label(prop)} has both #[watch] and #[track]; "
                    "#[watch] wins and the property is re-applied on every update",
                )
            )
        if prop.modifiers.block_signals and not prop.modifiers.refreshes:
            warnings.append(
                _at(
                    prop.location,
                    f"#[block_signal] on {_prop_label(prop)} has no effect without "
                    "#[watch] or #[track]",
                )
            )

    return errors, warnings


def validate_tracking(component: ir.Component) -> tuple[list[str], list[str]]:
    """
    Validate refresh modifiers against the component's model.

    Checks:
    - Templates have no update routine, so nothing in them refreshes
    - #[track] needs a view declared 'tracked'
    - A bare #[track] must read at least one model field to derive its predicate

    Returns:
        Tuple of (errors, warnings)
    """
    errors: list[str] = []
    warnings: list[str] = []

    for _, prop in _widget_properties(component):
        modifiers = prop.modifiers
        if not modifiers.refreshes:
            continue

        if component.kind == ir.ComponentKind.TEMPLATE:
            errors.append(
                _at(
                    prop.location,
                    f"Template '{component.name}' has no update routine; "
                    f"remove #[watch]/#[track] from {_prop_label(prop)}",
                )
            )
            continue

        if not modifiers.track or modifiers.watch:
            continue

        if not component.tracked:
            errors.append(
                _at(
                    prop.location,
                    f"#[track] on {_prop_label(prop)} needs change tracking; "
                    f"declare the view as 'view {component.name}(...) tracked'",
                )
            )
            continue

        if modifiers.track_predicate is None and prop.value is not None:
            assert isinstance(component, ir.ViewSpec)
            if not model_fields(prop.value, component.model_name):
                errors.append(
                    _at(
                        prop.location,
                        f"Cannot derive a #[track] predicate for {_prop_label(prop)}: "
                        f"the value reads no field of '{component.model_name}'. "
                        "Write the predicate explicitly: #[track(...)]",
                    )
                )

    return errors, warnings


def validate_guards(
    component: ir.Component, table: SymbolTable
) -> tuple[list[str], list[str]]:
    """
    Validate #[block_signal] references.

    Each name must match a connection guard '@name' declared in the same
    top-level tree. Declaration order does not matter, since connections are
    registered after all properties are applied.

    Returns:
        Tuple of (errors, warnings)
    """
    errors: list[str] = []
    warnings: list[str] = []

    for visit, prop in _widget_properties(component):
        for guard in prop.modifiers.block_signals:
            entry = table.guards.get(guard)
            if entry is None:
                errors.append(
                    _at(
                        prop.location,
                        f"#[block_signal({guard})] does not match any connection guard; "
                        f"declare one with 'connect_<signal> => ... @{guard}'",
                    )
                )
            elif entry.tree != visit.tree:
                errors.append(
                    _at(
                        prop.location,
                        f"#[block_signal({guard})] refers to a guard declared in another "
                        "top-level tree",
                    )
                )

    return errors, warnings


def validate_connections(component: ir.Component) -> tuple[list[str], list[str]]:
    """
    Validate signal connections.

    Checks:
    - A connection dispatching a message needs a sender parameter
    - Templates can neither dispatch messages nor declare guards
    - Capture names are unique per connection

    Returns:
        Tuple of (errors, warnings)
    """
    errors: list[str] = []
    warnings: list[str] = []

    for _, prop in _widget_properties(component):
        if prop.kind != ir.PropertyKind.CONNECTION or prop.value is None:
            continue

        if not is_lambda(prop.value):
            if component.kind == ir.ComponentKind.TEMPLATE:
                errors.append(
                    _at(
                        prop.location,
                        f"Template '{component.name}' has no sender; '{prop.name}' must "
                        "be given a lambda callback",
                    )
                )
            elif component.sender_name is None:
                errors.append(
                    _at(
                        prop.location,
                        f"'{prop.name}' dispatches a message, but view '{component.name}' "
                        "has no sender parameter",
                    )
                )

        if prop.guard and component.kind == ir.ComponentKind.TEMPLATE:
            errors.append(
                _at(
                    prop.location,
                    f"Template '{component.name}' has no update routine to use guard "
                    f"'@{prop.guard}'",
                )
            )

        capture_names = [capture.name for capture in prop.captures]
        duplicates = sorted({name for name in capture_names if capture_names.count(name) > 1})
        if duplicates:
            errors.append(
                _at(prop.location, f"'{prop.name}' captures {', '.join(duplicates)} twice")
            )

    return errors, warnings


def validate_bindings(
    component: ir.Component, table: SymbolTable, config: CompilerConfig
) -> tuple[list[str], list[str]]:
    """
    Validate property bindings.

    A binding takes at least (source_property, target, target_property); a
    target written as a bare name must be a widget of the component or one of
    its parameters.

    Returns:
        Tuple of (errors, warnings)
    """
    errors: list[str] = []
    warnings: list[str] = []

    for _, prop in _widget_properties(component):
        if prop.kind != ir.PropertyKind.BINDING or prop.value is None:
            continue
        elements = tuple_elements(prop.value)
        if elements is None or len(elements) < BINDING_ARITY:
            errors.append(
                _at(
                    prop.location,
                    f"'{config.binding_method}' takes a tuple "
                    "(source_property, target, target_property[, flags])",
                )
            )
            continue
        target = plain_name(elements[1])
        if target and target not in table.index and target not in component.params:
            errors.append(
                _at(
                    prop.location,
                    f"Binding target '{target}' is not a widget of '{component.name}'",
                )
            )

    return errors, warnings


def validate_prebound(component: ir.Component) -> tuple[list[str], list[str]]:
    """
    Validate pre-bound widgets.

    Pre-bound widgets are only checked for carrying a name. Whether that name
    resolves is decided when the generated code runs, since the bindings of
    the caller are not visible here. Templates take no parameters, so they
    cannot hold pre-bound widgets.

    Returns:
        Tuple of (errors, warnings)
    """
    errors: list[str] = []
    warnings: list[str] = []

    for visit in iter_nodes(component):
        node = visit.node
        if not isinstance(node, ir.Widget) or not node.strategy.is_prebound:
            continue
        if not node.name:
            errors.append(_at(node.location, "Pre-bound widget has no name"))
        elif component.kind == ir.ComponentKind.TEMPLATE:
            errors.append(
                _at(
                    node.location,
                    f"Template '{component.name}' cannot use pre-bound widget '{node.name}'",
                )
            )

    return errors, warnings


def validate_update_scope(component: ir.Component) -> tuple[list[str], list[str]]:
    """
    Validate names read by the update routine.

    The update routine receives only the model, the sender and the record,
    so refreshed properties, conditional discriminants and match arm patterns
    cannot read init-only parameters. A pre-bound widget named after a
    parameter is a record field and stays readable.

    Returns:
        Tuple of (errors, warnings)
    """
    errors: list[str] = []
    warnings: list[str] = []
    init_only = set(component.params[2:]) - {
        node.name
        for node in component.walk()
        if isinstance(node, ir.Widget) and node.strategy.is_prebound
    }
    if not init_only:
        return errors, warnings

    for visit in iter_nodes(component):
        node = visit.node
        if isinstance(node, ir.ConditionalWidget):
            for name in sorted(_discriminant_names(node) & init_only):
                errors.append(
                    _at(
                        node.location,
                        f"Conditional '{node.name}' reads init-only parameter '{name}', "
                        "which the update routine does not receive",
                    )
                )
            continue
        for prop in node.properties:
            if not prop.modifiers.refreshes:
                continue
            exprs = [prop.value, prop.modifiers.track_predicate, *prop.modifiers.chain]
            used: set[str] = set()
            for expr in exprs:
                if expr is not None:
                    used |= referenced_names(expr)
            for name in sorted(used & init_only):
                errors.append(
                    _at(
                        prop.location,
                        f"Refreshed property {_prop_label(prop)} reads init-only parameter "
                        f"'{name}', which the update routine does not receive",
                    )
                )

    return errors, warnings


def _discriminant_names(conditional: ir.ConditionalWidget) -> set[str]:
    """Names the update routine reads to select a branch."""
    names: set[str] = set()
    branches = conditional.branches
    if isinstance(branches, ir.MatchBranches):
        names |= referenced_names(branches.subject)
        for arm in branches.arms:
            names |= pattern_names(arm.pattern)
        return names
    for branch in branches.branches:
        if branch.condition is not None:
            names |= referenced_names(branch.condition)
    return names


def validate_component(
    component: ir.Component, config: CompilerConfig | None = None
) -> tuple[list[str], list[str]]:
    """
    Run every validation check on a named component.

    Args:
        component: View or template, after name synthesis
        config: Compiler configuration

    Returns:
        Tuple of (errors, warnings)
    """
    config = config or CompilerConfig()
    table, errors = collect_symbols(component)
    warnings: list[str] = []

    checks = [
        validate_names(component, config),
        validate_modifiers(component),
        validate_tracking(component),
        validate_guards(component, table),
        validate_connections(component),
        validate_bindings(component, table, config),
        validate_prebound(component),
        validate_update_scope(component),
    ]
    for check_errors, check_warnings in checks:
        errors.extend(check_errors)
        warnings.extend(check_warnings)

    logger.debug(
        "Validated %s %s: %d errors, %d warnings",
        component.kind.value,
        component.name,
        len(errors),
        len(warnings),
    )
    return errors, warnings


def lint_component(component: ir.Component, extended: bool = False) -> list[str]:
    """
    Style and likely-mistake warnings that never block generation.

    Args:
        component: View or template, after name synthesis
        extended: Also report checks that are often intentional

    Returns:
        List of warnings
    """
    warnings: list[str] = []

    for visit in iter_nodes(component):
        node = visit.node
        if isinstance(node, ir.ConditionalWidget) and isinstance(node.branches, ir.MatchBranches):
            if len(node.branches.arms) == 1:
                warnings.append(
                    _at(node.location, f"Match '{node.name}' has a single arm and never switches")
                )
        if (
            extended
            and isinstance(node, ir.Widget)
            and node.strategy.is_prebound
            and node.name not in component.params
        ):
            warnings.append(
                _at(
                    node.location,
                    f"Pre-bound widget '{node.name}' is not a parameter of '{component.name}'; "
                    "it must be in scope where the generated code runs",
                )
            )

    if extended:
        for _, prop in _widget_properties(component):
            if prop.modifiers.watch and prop.value is not None:
                if not referenced_names(prop.value) & set(component.params):
                    warnings.append(
                        _at(
                            prop.location,
                            f"#[watch] on {_prop_label(prop)} re-applies a value that reads "
                            "no parameter",
                        )
                    )

    return warnings
