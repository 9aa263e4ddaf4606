"""
Analysis of embedded Python expressions.

The parser keeps expressions as source text; these helpers look inside them
with the standard ``ast`` module where validation or generation needs
structure: lambda callbacks, tuple argument shorthand, and the model fields a
``#[track]`` predicate is derived from.
"""

from __future__ import annotations

import ast

from . import ir


def _wrapped(expr: ir.Expr) -> str:
    return f"({expr.text})"


def parse_expr(expr: ir.Expr) -> ast.expr:
    """Parse ``expr`` into its AST node."""
    return ast.parse(_wrapped(expr), mode="eval").body


def is_lambda(expr: ir.Expr) -> bool:
    """Whether ``expr`` is a ``lambda`` (a callback body rather than a message)."""
    return isinstance(parse_expr(expr), ast.Lambda)


def tuple_elements(expr: ir.Expr) -> list[str] | None:
    """
    Source text of each element when ``expr`` is a tuple literal.

    ``(40, 40)`` gives ``["40", "40"]`` and ``()`` gives ``[]``; anything
    that is not a tuple display gives None.
    """
    source = _wrapped(expr)
    node = ast.parse(source, mode="eval").body
    if not isinstance(node, ast.Tuple):
        return None
    elements = []
    for element in node.elts:
        segment = ast.get_source_segment(source, element)
        elements.append(segment if segment is not None else ast.unparse(element))
    return elements


def call_arguments(expr: ir.Expr | None) -> str:
    """
    Argument list text for applying ``expr`` as a method argument.

    A tuple literal expands to positional arguments; any other expression is
    passed as the single argument.
    """
    if expr is None:
        return ""
    elements = tuple_elements(expr)
    if elements is None:
        return expr.code
    return ", ".join(elements)


def model_fields(expr: ir.Expr, model_name: str) -> list[str]:
    """
    Fields of ``model_name`` read by ``expr``, in order of first use.

    Method calls on the model (``model.changed("x")``) are not field reads.
    """
    tree = parse_expr(expr)
    called: set[int] = set()
    for node in ast.walk(tree):
        if isinstance(node, ast.Call):
            called.add(id(node.func))

    found: list[tuple[int, int, str]] = []
    for node in ast.walk(tree):
        if (
            isinstance(node, ast.Attribute)
            and isinstance(node.value, ast.Name)
            and node.value.id == model_name
            and id(node) not in called
        ):
            found.append((node.lineno, node.col_offset, node.attr))

    fields: list[str] = []
    for _, _, attr in sorted(found):
        if attr not in fields:
            fields.append(attr)
    return fields


def referenced_names(expr: ir.Expr) -> set[str]:
    """Every bare name ``expr`` loads."""
    return {
        node.id
        for node in ast.walk(parse_expr(expr))
        if isinstance(node, ast.Name) and isinstance(node.ctx, ast.Load)
    }


def pattern_names(pattern: ir.Expr) -> set[str]:
    """
    Every bare name a ``case`` pattern loads, guard included.

    Names the pattern captures are bound by the match itself and left out.
    """
    module = ast.parse(f"match _:\n case {pattern.text}:\n  pass\n")
    match_stmt = module.body[0]
    assert isinstance(match_stmt, ast.Match)
    case = match_stmt.cases[0]
    loaded = {
        node.id
        for node in ast.walk(case)
        if isinstance(node, ast.Name) and isinstance(node.ctx, ast.Load)
    }
    captured: set[str] = set()
    for node in ast.walk(case.pattern):
        if isinstance(node, ast.MatchAs | ast.MatchStar) and node.name:
            captured.add(node.name)
        elif isinstance(node, ast.MatchMapping) and node.rest:
            captured.add(node.rest)
    return loaded - captured


def plain_name(text: str) -> str | None:
    """``text`` itself when it is a bare identifier, else None."""
    stripped = text.strip()
    return stripped if stripped.isidentifier() else None
