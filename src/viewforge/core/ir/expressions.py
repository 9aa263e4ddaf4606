"""
Embedded Python expressions for viewforge IR.

Expressions are kept as the exact source text the user wrote. The parser has
already checked that each one parses as a Python expression, so generators can
paste them into the emitted code.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from .location import SourceLocation


class Expr(BaseModel):
    """
    A Python expression captured verbatim from view source.

    Attributes:
        text: Source text of the expression
        location: Where the expression starts
    """

    text: str
    location: SourceLocation | None = None

    model_config = ConfigDict(frozen=True)

    @property
    def code(self) -> str:
        """Expression text safe to use anywhere an expression is accepted.

        Multi-line expressions are parenthesized so implicit line joining
        applies wherever they are pasted.
        """
        if "\n" in self.text:
            return f"({self.text})"
        return self.text

    def __str__(self) -> str:
        return self.text


class Capture(BaseModel):
    """
    A value captured by a signal callback at registration time.

    ``[sender]`` captures the name as is; ``[label = widgets.label]`` binds
    ``label`` to the value of the expression.
    """

    name: str
    expr: Expr | None = None

    model_config = ConfigDict(frozen=True)

    @property
    def value_code(self) -> str:
        """Expression evaluated when the callback is registered."""
        return self.expr.code if self.expr else self.name
