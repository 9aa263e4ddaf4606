"""
Component parser mixin for the viewforge view language.

Parses the top-level ``view`` and ``template`` declarations.

DSL Syntax:

    view CounterWidgets(counter, sender) tracked {
        #[root]
        Gtk.Window { ... },

        #[name(about)]
        Gtk.AboutDialog { ... },
    }

    template CardBox {
        Gtk.Box { ... }
    }
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from .. import ir
from ..lexer import TokenType
from .base import describe_token


class ComponentParserMixin:
    """Parser mixin for view and template declarations."""

    if TYPE_CHECKING:
        expect: Any
        advance: Any
        match: Any
        current_token: Any
        previous_token: Any
        expect_identifier_or_keyword: Any
        error: Any
        error_at: Any
        location: Any
        parse_tree: Any

    def parse_component(self) -> ir.Component:
        """Parse one ``view`` or ``template`` declaration."""
        if self.match(TokenType.VIEW):
            return self.parse_view()
        if self.match(TokenType.TEMPLATE):
            return self.parse_template()
        raise self.error(
            f"Expected 'view' or 'template', got {describe_token(self.current_token())}"
        )

    def parse_view(self) -> ir.ViewSpec:
        """
        Parse a view declaration.

        Grammar:
            'view' NAME '(' NAME (',' NAME)* ')' ['tracked'] '{' tree (',' tree)* [','] '}'
        """
        view_token = self.expect(TokenType.VIEW)
        name = self.expect_identifier_or_keyword().value

        self.expect(TokenType.LPAREN)
        params: list[str] = []
        while not self.match(TokenType.RPAREN):
            params.append(self.expect_identifier_or_keyword().value)
            if self.match(TokenType.COMMA):
                self.advance()
                continue
            if not self.match(TokenType.RPAREN):
                raise self.error(
                    f"Expected ',' or ')', got {describe_token(self.current_token())}"
                )
        self.expect(TokenType.RPAREN)
        if not params:
            raise self.error(f"View '{name}' needs at least a model parameter", view_token)

        tracked = False
        if self.match(TokenType.TRACKED):
            self.advance()
            tracked = True

        opening = self.expect(TokenType.LBRACE)
        trees: list[ir.Widget] = []
        while not self.match(TokenType.RBRACE):
            if self.match(TokenType.EOF):
                raise self.error("Unclosed '{'", opening)
            trees.append(self.parse_tree())
            if self.match(TokenType.COMMA):
                self.advance()
                continue
            if self.match(TokenType.RBRACE):
                break
            previous = self.previous_token()
            if previous is not None and previous.type == TokenType.RBRACE:
                continue
            raise self.error(f"Expected ',' or '}}', got {describe_token(self.current_token())}")
        self.expect(TokenType.RBRACE)

        if not trees:
            raise self.error(f"View '{name}' declares no widgets", view_token)
        self._mark_root(trees)

        return ir.ViewSpec(
            name=name,
            params=params,
            tracked=tracked,
            trees=trees,
            location=self.location(view_token),
        )

    def parse_template(self) -> ir.TemplateSpec:
        """
        Parse a template declaration.

        Grammar:
            'template' NAME '{' tree [','] '}'
        """
        template_token = self.expect(TokenType.TEMPLATE)
        name = self.expect_identifier_or_keyword().value
        self.expect(TokenType.LBRACE)
        tree = self.parse_tree()
        if self.match(TokenType.COMMA):
            self.advance()
        if not self.match(TokenType.RBRACE):
            raise self.error(
                f"Template '{name}' holds exactly one widget tree, "
                f"got {describe_token(self.current_token())}"
            )
        self.advance()

        self._mark_root([tree])
        return ir.TemplateSpec(name=name, tree=tree, location=self.location(template_token))

    def _mark_root(self, trees: list[ir.Widget]) -> None:
        """
        Check ``#[root]`` placement and mark the first tree as the root.

        Only the first top-level widget may carry the marker; it is the root
        whether marked or not.
        """
        for index, tree in enumerate(trees):
            for position, node in enumerate(tree.walk()):
                if isinstance(node, ir.Widget) and node.is_root and (index, position) != (0, 0):
                    location = node.location
                    line = location.line if location else 1
                    column = location.column if location else 1
                    raise self.error_at(
                        "#[root] may only mark the first top-level widget", line, column
                    )
        trees[0].is_root = True
