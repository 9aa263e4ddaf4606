"""
Widget parser mixin for the viewforge view language.

Parses widgets, their property blocks and the properties inside them.

DSL Syntax:

    #[root]
    Gtk.Window {
        set_title: "Counter",
        set_default_size: (300, 100),

        Gtk.Box(orientation=Gtk.Orientation.VERTICAL) {
            set_spacing?: model.spacing,

            #[watch]
            set_label: f"Counter: {model.value}",

            append: inc_button = Gtk.Button.with_label("Increment") {
                connect_clicked[sender] => Msg.INCREMENT @inc_handler,
            },

            attach[0, 1, 1, 1] = Gtk.Label { set_label: "grid cell" },
        },
    }

    #[local_ref]
    header -> Gtk.HeaderBar { set_show_title_buttons: True }
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from .. import ir
from ..lexer import Token, TokenType
from .base import describe_token

if TYPE_CHECKING:
    from .attributes import Attribute

# Tokens that, following a name inside a block, start a property
PROPERTY_MARKERS = {
    TokenType.COLON,
    TokenType.QUESTION,
    TokenType.LBRACKET,
    TokenType.EQUALS,
    TokenType.FAT_ARROW,
}

CONNECTION_PREFIX = "connect_"


def infer_type_path(path: str) -> str | None:
    """
    Infer the widget type from a construction path.

    The type ends at the last capitalized segment: ``Gtk.Label.new`` and
    ``Gtk.Label.builder`` both give ``Gtk.Label``. Returns None when no
    segment is capitalized (``make_label``).
    """
    segments = path.split(".")
    last_type = None
    for index, segment in enumerate(segments):
        if segment[:1].isupper():
            last_type = index
    if last_type is None:
        return None
    return ".".join(segments[: last_type + 1])


class WidgetParserMixin:
    """Parser mixin for widgets and properties."""

    if TYPE_CHECKING:
        expect: Any
        advance: Any
        match: Any
        current_token: Any
        peek_token: Any
        previous_token: Any
        expect_identifier_or_keyword: Any
        is_name: Any
        error: Any
        location: Any
        source: Any
        config: Any
        pos: Any
        tokens: Any
        skip_balanced: Any
        capture_expression: Any
        check_python: Any
        parse_attributes: Any
        split_attributes: Any
        build_modifiers: Any
        find_attribute: Any
        parse_conditional: Any

    def parse_tree(self) -> ir.Widget:
        """
        Parse a top-level tree or branch body: attributes, then one widget.

        Returns:
            The widget
        """
        attributes, doc = self.parse_attributes()
        widget_attrs, property_attrs = self.split_attributes(attributes)
        if property_attrs:
            attribute = property_attrs[0]
            raise self.error(
                f"Attribute '#[{attribute.name}]' applies to a property, "
                "but this widget is not attached through one",
                attribute.token,
            )
        if self.match(TokenType.IF, TokenType.MATCH):
            raise self.error("Expected a widget here; conditionals must be attached to a parent")
        return self.parse_widget(widget_attrs, doc)

    def parse_widget(
        self,
        widget_attrs: list[Attribute],
        doc: str | None,
        name: str | None = None,
        mutable: bool = False,
    ) -> ir.Widget:
        """
        Parse one widget in any of its forms.

        Grammar:
            NAME '->' type_path [block]                  (pre-bound)
            type_path [call ('.' NAME call)*] [block]

        Args:
            widget_attrs: Widget-level attributes preceding the widget
            doc: Doc comment preceding the widget
            name: Name given by ``prop: name = Widget``
            mutable: Whether ``mut`` preceded that name
        """
        start = self.current_token()
        local_attr = self.find_attribute(widget_attrs, "local")
        local_ref_attr = self.find_attribute(widget_attrs, "local_ref")
        template_attr = self.find_attribute(widget_attrs, "template")
        root_attr = self.find_attribute(widget_attrs, "root")
        name_attr = self.find_attribute(widget_attrs, "name")

        if local_attr and local_ref_attr:
            raise self.error("A widget cannot be both #[local] and #[local_ref]", local_ref_attr.token)
        prebound_attr = local_attr or local_ref_attr

        if self.is_name(start) and self.peek_token().type == TokenType.ARROW:
            if prebound_attr is None:
                raise self.error(
                    f"Pre-bound widget '{start.value} -> ...' needs #[local] or #[local_ref]",
                    start,
                )
            if name is not None or name_attr is not None:
                raise self.error(
                    "A pre-bound widget is named by its binding and cannot be renamed", start
                )
            if template_attr is not None:
                raise self.error("A pre-bound widget cannot be a template", template_attr.token)
            self.advance()
            self.expect(TokenType.ARROW)
            path = self.parse_dotted_path()
            func = ir.WidgetFunc(path=path, type_path=path)
            strategy = (
                ir.ConstructionStrategy.PREBOUND_REFERENCE
                if local_ref_attr
                else ir.ConstructionStrategy.PREBOUND_VALUE
            )
            widget_name: str | None = start.value
        else:
            if prebound_attr is not None:
                raise self.error(
                    f"Attribute '#[{prebound_attr.name}]' needs the pre-bound form 'name -> Type'",
                    prebound_attr.token,
                )
            func, strategy = self.parse_widget_func()
            if template_attr is not None:
                if strategy != ir.ConstructionStrategy.BLOCK:
                    raise self.error(
                        "A template widget is written in block form: 'TemplateName { ... }'",
                        template_attr.token,
                    )
                strategy = ir.ConstructionStrategy.TEMPLATE
            widget_name = name
            if name_attr is not None:
                if name is not None:
                    raise self.error(f"Widget '{name}' is named twice", name_attr.token)
                widget_name = name_attr.names[0]
                mutable = mutable or name_attr.mutable

        properties = self.parse_block() if self.match(TokenType.LBRACE) else ir.Properties()

        return ir.Widget(
            name=widget_name,
            explicit_name=widget_name is not None,
            func=func,
            mutable=mutable,
            strategy=strategy,
            properties=properties,
            is_root=root_attr is not None,
            doc=doc,
            location=self.location(start),
        )

    def parse_dotted_path(self) -> str:
        """Parse ``NAME ('.' NAME)*``."""
        parts = [self.expect_identifier_or_keyword().value]
        while self.match(TokenType.DOT) and self.is_name(self.peek_token()):
            self.advance()
            parts.append(self.advance().value)
        return ".".join(parts)

    def parse_widget_func(self) -> tuple[ir.WidgetFunc, ir.ConstructionStrategy]:
        """
        Parse the construction expression of a widget.

        ``Gtk.Label`` is block form, one call (``Gtk.Label.new("x")``) is
        constructor form, and a chain of calls is builder form.
        """
        start = self.current_token()
        if not self.is_name(start):
            raise self.error(f"Expected a widget, got {describe_token(start)}", start)

        path = self.parse_dotted_path()
        calls = 0
        last: Token | None = None
        if self.match(TokenType.LPAREN):
            last = self.skip_balanced()
            calls = 1
            while (
                self.match(TokenType.DOT)
                and self.is_name(self.peek_token())
                and self.peek_token(2).type == TokenType.LPAREN
            ):
                self.advance()
                self.advance()
                last = self.skip_balanced()
                calls += 1

        call = None
        if last is not None:
            text = self.source[start.offset : last.end]
            self.check_python(text, start)
            call = ir.Expr(text=text, location=self.location(start))

        if calls == 0:
            strategy = ir.ConstructionStrategy.BLOCK
        elif calls == 1:
            strategy = ir.ConstructionStrategy.CONSTRUCTOR
        else:
            strategy = ir.ConstructionStrategy.BUILDER

        return ir.WidgetFunc(path=path, type_path=infer_type_path(path), call=call), strategy

    # =========================================================================
    # Blocks and properties
    # =========================================================================

    def parse_block(self) -> ir.Properties:
        """
        Parse a brace-delimited property block.

        Items are separated by commas; the comma after an item that ends in a
        closing brace may be left out.
        """
        opening = self.expect(TokenType.LBRACE)
        properties = ir.Properties()

        while not self.match(TokenType.RBRACE):
            if self.match(TokenType.EOF):
                raise self.error("Unclosed '{'", opening)
            properties.append(self.parse_item())
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
        return properties

    def parse_item(self) -> ir.Property:
        """Parse one block item: a property, a child widget or a conditional."""
        attributes, doc = self.parse_attributes()
        widget_attrs, property_attrs = self.split_attributes(attributes)
        start = self.current_token()

        if self.match(TokenType.IF, TokenType.MATCH):
            conditional = self.parse_conditional(widget_attrs, doc)
            return self._conditional_property("", None, conditional, property_attrs, start)

        if self.is_name(start) and self.peek_token().type in PROPERTY_MARKERS:
            return self.parse_property(widget_attrs, property_attrs, doc)

        widget = self.parse_widget(widget_attrs, doc)
        return ir.Property(
            name="",
            kind=ir.PropertyKind.WIDGET,
            widget=widget,
            default_child=True,
            modifiers=self.build_modifiers(property_attrs),
            location=self.location(start),
        )

    def parse_property(
        self,
        widget_attrs: list[Attribute],
        property_attrs: list[Attribute],
        doc: str | None,
    ) -> ir.Property:
        """
        Parse a named property.

        Grammar:
            NAME ['?'] ':' expr
            NAME ['[' args ']'] '=' (widget | conditional)
            NAME ['[' args ']'] ':' ['mut'] NAME '=' (widget | conditional)
            NAME ['[' captures ']'] '=>' expr ['@' NAME]
        """
        name_token = self.advance()
        name = name_token.value

        if self.match(TokenType.QUESTION):
            self.advance()
            self.expect(TokenType.COLON)
            self._reject_widget_attributes(widget_attrs, name)
            if name == self.config.binding_method:
                raise self.error("A property binding cannot be optional", name_token)
            value = self.capture_expression({TokenType.COMMA}, f"value of '{name}'")
            return ir.Property(
                name=name,
                kind=ir.PropertyKind.METHOD,
                value=value,
                modifiers=self.build_modifiers(property_attrs, optional=True),
                location=self.location(name_token),
            )

        bracket_pos: int | None = None
        if self.match(TokenType.LBRACKET):
            bracket_pos = self.pos
            self.skip_balanced()

        if self.match(TokenType.FAT_ARROW):
            return self._parse_connection(name_token, bracket_pos, widget_attrs, property_attrs)

        if self.match(TokenType.EQUALS):
            self.advance()
            args = self._bracket_args(bracket_pos)
            return self._parse_child_property(
                name_token, args, None, False, widget_attrs, property_attrs, doc
            )

        if self.match(TokenType.COLON):
            self.advance()
            if (
                self.match(TokenType.MUT)
                and self.is_name(self.peek_token())
                and self.peek_token(2).type == TokenType.EQUALS
            ):
                self.advance()
                child_name = self.advance().value
                self.expect(TokenType.EQUALS)
                args = self._bracket_args(bracket_pos)
                return self._parse_child_property(
                    name_token, args, child_name, True, widget_attrs, property_attrs, doc
                )
            if self.is_name(self.current_token()) and self.peek_token().type == TokenType.EQUALS:
                child_name = self.advance().value
                self.expect(TokenType.EQUALS)
                args = self._bracket_args(bracket_pos)
                return self._parse_child_property(
                    name_token, args, child_name, False, widget_attrs, property_attrs, doc
                )

            if bracket_pos is not None:
                raise self.error(
                    "Bracket arguments are only allowed on widget-valued properties "
                    "and signal connections",
                    self.tokens[bracket_pos],
                )
            self._reject_widget_attributes(widget_attrs, name)
            value = self.capture_expression({TokenType.COMMA}, f"value of '{name}'")
            kind = (
                ir.PropertyKind.BINDING
                if name == self.config.binding_method
                else ir.PropertyKind.METHOD
            )
            return ir.Property(
                name=name,
                kind=kind,
                value=value,
                modifiers=self.build_modifiers(property_attrs),
                location=self.location(name_token),
            )

        raise self.error(
            f"Expected ':', '=' or '=>' after '{name}', got {describe_token(self.current_token())}"
        )

    def _parse_child_property(
        self,
        name_token: Token,
        args: ir.Expr | None,
        child_name: str | None,
        mutable: bool,
        widget_attrs: list[Attribute],
        property_attrs: list[Attribute],
        doc: str | None,
    ) -> ir.Property:
        if self.match(TokenType.IF, TokenType.MATCH):
            conditional = self.parse_conditional(widget_attrs, doc, name=child_name, mutable=mutable)
            return self._conditional_property(
                name_token.value, args, conditional, property_attrs, name_token
            )

        widget = self.parse_widget(widget_attrs, doc, name=child_name, mutable=mutable)
        return ir.Property(
            name=name_token.value,
            kind=ir.PropertyKind.WIDGET,
            args=args,
            widget=widget,
            modifiers=self.build_modifiers(property_attrs),
            location=self.location(name_token),
        )

    def _conditional_property(
        self,
        name: str,
        args: ir.Expr | None,
        conditional: ir.ConditionalWidget,
        property_attrs: list[Attribute],
        start: Token,
    ) -> ir.Property:
        modifiers = self.build_modifiers(property_attrs)
        conditional.transition = modifiers.transition
        return ir.Property(
            name=name,
            kind=ir.PropertyKind.CONDITIONAL,
            args=args,
            conditional=conditional,
            default_child=not name,
            modifiers=modifiers,
            location=self.location(start),
        )

    def _parse_connection(
        self,
        name_token: Token,
        bracket_pos: int | None,
        widget_attrs: list[Attribute],
        property_attrs: list[Attribute],
    ) -> ir.Property:
        name = name_token.value
        self._reject_widget_attributes(widget_attrs, name)
        if not name.startswith(CONNECTION_PREFIX) or name == CONNECTION_PREFIX:
            raise self.error(
                f"Signal connections are written 'connect_<signal> => ...', got '{name}'",
                name_token,
            )

        captures = self._parse_captures(bracket_pos) if bracket_pos is not None else []
        self.expect(TokenType.FAT_ARROW)
        value = self.capture_expression(
            {TokenType.COMMA, TokenType.AT}, f"callback or message of '{name}'"
        )

        guard = None
        if self.match(TokenType.AT):
            self.advance()
            guard = self.expect_identifier_or_keyword().value

        return ir.Property(
            name=name,
            kind=ir.PropertyKind.CONNECTION,
            value=value,
            captures=captures,
            guard=guard,
            modifiers=self.build_modifiers(property_attrs),
            location=self.location(name_token),
        )

    def _bracket_args(self, bracket_pos: int | None) -> ir.Expr | None:
        """Re-read the bracket group at ``bracket_pos`` as an argument list."""
        if bracket_pos is None:
            return None
        resume = self.pos
        self.pos = bracket_pos + 1
        args = None
        if not self.match(TokenType.RBRACKET):
            args = self.capture_expression(set(), "arguments")
            self.expect(TokenType.RBRACKET)
        self.pos = resume
        return args

    def _parse_captures(self, bracket_pos: int) -> list[ir.Capture]:
        """Re-read the bracket group at ``bracket_pos`` as a capture list."""
        resume = self.pos
        self.pos = bracket_pos + 1
        captures: list[ir.Capture] = []
        while not self.match(TokenType.RBRACKET):
            capture_name = self.expect_identifier_or_keyword().value
            expr = None
            if self.match(TokenType.EQUALS):
                self.advance()
                expr = self.capture_expression({TokenType.COMMA}, f"value captured as '{capture_name}'")
            captures.append(ir.Capture(name=capture_name, expr=expr))
            if self.match(TokenType.COMMA):
                self.advance()
                continue
            if not self.match(TokenType.RBRACKET):
                raise self.error(f"Expected ',' or ']', got {describe_token(self.current_token())}")
        self.pos = resume
        return captures

    def _reject_widget_attributes(self, widget_attrs: list[Attribute], name: str) -> None:
        if widget_attrs:
            attribute = widget_attrs[0]
            raise self.error(
                f"Attribute '#[{attribute.name}]' applies to widgets, not to property '{name}'",
                attribute.token,
            )
