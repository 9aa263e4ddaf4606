"""
Attribute parser mixin for the viewforge view language.

Parses ``#[...]`` attribute lists and ``#:`` doc comments preceding a widget,
conditional or property.

DSL Syntax:

    #: Shows the current count
    #[name(count_label)]
    #[watch]
    #[track(counter.changed("value"))]
    #[block_signal(toggle_handler, other_handler)]
    #[chain(flags(GObject.BindingFlags.SYNC_CREATE))]
    #[transition = "SlideLeft"]
"""

from __future__ import annotations

import ast
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from .. import ir
from ..lexer import Token, TokenType

# Attributes that describe the widget or conditional that follows
WIDGET_ATTRIBUTES = {"root", "name", "local", "local_ref", "template"}

# Attributes that modify the property the child is attached through
PROPERTY_ATTRIBUTES = {"watch", "track", "block_signal", "chain", "iterate", "transition"}

KNOWN_ATTRIBUTES = WIDGET_ATTRIBUTES | PROPERTY_ATTRIBUTES

# Attributes taking a list of names: #[block_signal(a, b)]
NAME_LIST_ATTRIBUTES = {"name", "block_signal", "transition"}

# Attributes taking a Python expression: #[track(model.changed("x"))]
EXPRESSION_ATTRIBUTES = {"track", "chain"}

# Attributes that must carry an argument
REQUIRES_ARGUMENT = {"name", "block_signal", "chain", "transition"}


@dataclass
class Attribute:
    """
    One parsed ``#[...]`` attribute.

    Attributes:
        name: Attribute name
        token: Token of the attribute name (for diagnostics)
        names: Name arguments of name-list attributes
        expr: Expression argument of expression attributes
        mutable: ``#[name(mut x)]`` marks the named widget mutable
    """

    name: str
    token: Token
    names: list[str] = field(default_factory=list)
    expr: ir.Expr | None = None
    mutable: bool = False


class AttributeParserMixin:
    """Parser mixin for attribute lists and doc comments."""

    if TYPE_CHECKING:
        expect: Any
        advance: Any
        match: Any
        current_token: Any
        peek_token: Any
        expect_identifier_or_keyword: Any
        error: Any
        location: Any
        capture_expression: Any
        check_python: Any

    def parse_attributes(self) -> tuple[list[Attribute], str | None]:
        """
        Parse the attributes and doc comments preceding an item.

        Returns:
            Tuple of (attributes in source order, joined doc text or None)
        """
        attributes: list[Attribute] = []
        doc_lines: list[str] = []

        while True:
            if self.match(TokenType.DOC_COMMENT):
                text = self.advance().value[2:]
                doc_lines.append(text[1:] if text.startswith(" ") else text)
            elif self.match(TokenType.ATTR_OPEN):
                attributes.append(self.parse_attribute())
            else:
                break

        doc = "\n".join(doc_lines).rstrip() if doc_lines else None
        return attributes, doc or None

    def parse_attribute(self) -> Attribute:
        """
        Parse one attribute.

        Grammar:
            '#[' NAME ']'
            '#[' NAME '(' raw ')' ']'
            '#[' NAME '=' STRING ']'
        """
        self.expect(TokenType.ATTR_OPEN)
        name_token = self.expect_identifier_or_keyword()
        name = name_token.value
        if name not in KNOWN_ATTRIBUTES:
            known = ", ".join(sorted(KNOWN_ATTRIBUTES))
            raise self.error(f"Unknown attribute '#[{name}]'. Known attributes: {known}", name_token)

        attribute = Attribute(name=name, token=name_token)

        if self.match(TokenType.LPAREN):
            self.advance()
            if self.match(TokenType.RPAREN):
                raise self.error(f"Attribute '#[{name}()]' needs an argument")
            if name in NAME_LIST_ATTRIBUTES:
                self._parse_name_arguments(attribute)
            elif name in EXPRESSION_ATTRIBUTES:
                attribute.expr = self.capture_expression(set(), f"#[{name}] argument")
            else:
                raise self.error(f"Attribute '#[{name}]' takes no arguments", name_token)
            self.expect(TokenType.RPAREN)

        elif self.match(TokenType.EQUALS):
            self.advance()
            if name not in NAME_LIST_ATTRIBUTES | EXPRESSION_ATTRIBUTES:
                raise self.error(f"Attribute '#[{name}]' takes no arguments", name_token)
            self._parse_string_argument(attribute)

        elif name in REQUIRES_ARGUMENT:
            raise self.error(f"Attribute '#[{name}]' needs an argument", name_token)

        self.expect(TokenType.RBRACKET)
        self._check_argument_count(attribute)
        return attribute

    def _parse_name_arguments(self, attribute: Attribute) -> None:
        while True:
            if (
                attribute.name == "name"
                and self.match(TokenType.MUT)
                and self.peek_token().type == TokenType.IDENTIFIER
            ):
                self.advance()
                attribute.mutable = True
            attribute.names.append(self.expect_identifier_or_keyword().value)
            if not self.match(TokenType.COMMA):
                break
            self.advance()
            if self.match(TokenType.RPAREN):
                break

    def _parse_string_argument(self, attribute: Attribute) -> None:
        token = self.expect(TokenType.STRING)
        try:
            value = ast.literal_eval(token.value)
        except (SyntaxError, ValueError) as e:
            raise self.error(f"Invalid string literal: {e}", token) from e
        if not isinstance(value, str):
            raise self.error(f"Attribute '#[{attribute.name}]' needs a text string", token)

        if attribute.name in EXPRESSION_ATTRIBUTES:
            self.check_python(value, token)
            attribute.expr = ir.Expr(text=value, location=self.location(token))
            return

        if attribute.name == "block_signal":
            parts = [part.strip() for part in value.split(",")]
        else:
            parts = [value.strip()]
        for part in parts:
            if not part.isidentifier():
                raise self.error(f"'{part}' is not a valid name for #[{attribute.name}]", token)
        attribute.names.extend(parts)

    def _check_argument_count(self, attribute: Attribute) -> None:
        if attribute.name in ("name", "transition") and len(attribute.names) != 1:
            raise self.error(
                f"Attribute '#[{attribute.name}]' takes exactly one name", attribute.token
            )

    def split_attributes(
        self, attributes: list[Attribute]
    ) -> tuple[list[Attribute], list[Attribute]]:
        """Split attributes into (widget attributes, property attributes)."""
        widget_attrs = [a for a in attributes if a.name in WIDGET_ATTRIBUTES]
        property_attrs = [a for a in attributes if a.name in PROPERTY_ATTRIBUTES]
        return widget_attrs, property_attrs

    def build_modifiers(self, attributes: list[Attribute], optional: bool = False) -> ir.Modifiers:
        """
        Build the modifier set of a property from its attributes.

        ``block_signal`` and ``chain`` accumulate; any other attribute may
        appear once.

        Raises:
            ParseError: On a repeated attribute
        """
        seen: set[str] = set()
        modifiers = ir.Modifiers(optional=optional)
        for attribute in attributes:
            if attribute.name in seen and attribute.name not in ("block_signal", "chain"):
                raise self.error(f"Duplicate attribute '#[{attribute.name}]'", attribute.token)
            seen.add(attribute.name)

            if attribute.name == "watch":
                modifiers.watch = True
            elif attribute.name == "track":
                modifiers.track = True
                modifiers.track_predicate = attribute.expr
            elif attribute.name == "block_signal":
                modifiers.block_signals.extend(attribute.names)
            elif attribute.name == "chain":
                if attribute.expr is not None:
                    modifiers.chain.append(attribute.expr)
            elif attribute.name == "iterate":
                modifiers.iterate = True
            elif attribute.name == "transition":
                modifiers.transition = attribute.names[0]
        return modifiers

    def find_attribute(self, attributes: list[Attribute], name: str) -> Attribute | None:
        """The attribute called ``name``, rejecting repeats."""
        found = [a for a in attributes if a.name == name]
        if len(found) > 1:
            raise self.error(f"Duplicate attribute '#[{name}]'", found[1].token)
        return found[0] if found else None
