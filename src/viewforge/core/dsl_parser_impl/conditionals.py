"""
Conditional widget parser mixin for the viewforge view language.

Parses if/elif/else chains and match expressions that choose between
alternative widgets.

DSL Syntax:

    #[transition = "SlideLeft"]
    append: parity = if model.value % 2 == 0 {
        Gtk.Label { set_label: "even" }
    } else {
        Gtk.Label { set_label: "odd" }
    },

    match model.mode {
        Mode.EDIT => Gtk.Entry,
        Mode.VIEW | Mode.PREVIEW => { Gtk.Label { set_label: "read only" } },
        _ => Gtk.Spinner,
    },
"""

from __future__ import annotations

import ast
from typing import TYPE_CHECKING, Any

from .. import ir
from ..lexer import CLOSING, OPENING, Token, TokenType
from .base import describe_token

if TYPE_CHECKING:
    from .attributes import Attribute

# Prefix placed before a pattern so it parses as a ``case`` clause
_CASE_PREFIX = " case "

# Conditions and match subjects end at the first `{` outside brackets
_BRACE_HINT = "it ends at the first '{'; wrap set or dict literals in parentheses"


class ConditionalParserMixin:
    """Parser mixin for if chains and match expressions."""

    if TYPE_CHECKING:
        expect: Any
        advance: Any
        match: Any
        current_token: Any
        peek_token: Any
        previous_token: Any
        error: Any
        error_at: Any
        location: Any
        source: Any
        file: Any
        capture_expression: Any
        find_attribute: Any
        parse_tree: Any

    def parse_conditional(
        self,
        widget_attrs: list[Attribute],
        doc: str | None,
        name: str | None = None,
        mutable: bool = False,
    ) -> ir.ConditionalWidget:
        """
        Parse a conditional widget.

        Args:
            widget_attrs: Widget-level attributes preceding the conditional;
                only #[name] applies
            doc: Doc comment preceding the conditional
            name: Name given by ``prop: name = if ...``
            mutable: Whether ``mut`` preceded that name
        """
        start = self.current_token()
        for attribute in widget_attrs:
            if attribute.name != "name":
                raise self.error(
                    f"Attribute '#[{attribute.name}]' cannot be applied to a conditional",
                    attribute.token,
                )
        name_attr = self.find_attribute(widget_attrs, "name")
        if name_attr is not None:
            if name is not None:
                raise self.error(f"Conditional '{name}' is named twice", name_attr.token)
            name = name_attr.names[0]
            mutable = mutable or name_attr.mutable

        branches: ir.IfBranches | ir.MatchBranches
        if self.match(TokenType.IF):
            branches = self.parse_if_chain()
        elif self.match(TokenType.MATCH):
            branches = self.parse_match()
        else:
            raise self.error(f"Expected 'if' or 'match', got {describe_token(start)}", start)

        return ir.ConditionalWidget(
            name=name,
            explicit_name=name is not None,
            mutable=mutable,
            branches=branches,
            doc=doc,
            location=self.location(start),
        )

    def parse_if_chain(self) -> ir.IfBranches:
        """
        Parse an if chain.

        Grammar:
            'if' expr branch ('elif' expr branch | 'else' 'if' expr branch)* 'else' branch

        The chain must end with ``else`` so one branch is always selected.
        """
        branches: list[ir.IfBranch] = []

        if_token = self.expect(TokenType.IF)
        condition = self.capture_expression({TokenType.LBRACE}, "condition", _BRACE_HINT)
        widget = self.parse_branch_body(allow_bare=False)
        branches.append(
            ir.IfBranch(
                kind=ir.BranchKind.IF,
                condition=condition,
                widget=widget,
                location=self.location(if_token),
            )
        )

        while True:
            token = self.current_token()
            if self.match(TokenType.ELIF) or (
                self.match(TokenType.ELSE) and self.peek_token().type == TokenType.IF
            ):
                if self.match(TokenType.ELSE):
                    self.advance()
                self.advance()
                condition = self.capture_expression({TokenType.LBRACE}, "condition", _BRACE_HINT)
                widget = self.parse_branch_body(allow_bare=False)
                branches.append(
                    ir.IfBranch(
                        kind=ir.BranchKind.ELIF,
                        condition=condition,
                        widget=widget,
                        location=self.location(token),
                    )
                )
            elif self.match(TokenType.ELSE):
                self.advance()
                widget = self.parse_branch_body(allow_bare=False)
                branches.append(
                    ir.IfBranch(kind=ir.BranchKind.ELSE, widget=widget, location=self.location(token))
                )
                break
            else:
                raise self.error(
                    "An if chain must end with an 'else' branch, "
                    f"got {describe_token(token)}",
                    token,
                )

        return ir.IfBranches(branches=branches)

    def parse_match(self) -> ir.MatchBranches:
        """
        Parse a match expression.

        Grammar:
            'match' expr '{' (pattern '=>' branch ',')* '}'
        """
        match_token = self.expect(TokenType.MATCH)
        subject = self.capture_expression({TokenType.LBRACE}, "match subject", _BRACE_HINT)
        opening = self.expect(TokenType.LBRACE)

        arms: list[ir.MatchArm] = []
        arm_starts: list[Token] = []
        while not self.match(TokenType.RBRACE):
            if self.match(TokenType.EOF):
                raise self.error("Unclosed '{'", opening)
            start = self.current_token()
            pattern = self.capture_pattern()
            arm_starts.append(start)
            self.expect(TokenType.FAT_ARROW)
            widget = self.parse_branch_body(allow_bare=True)
            arms.append(ir.MatchArm(pattern=pattern, widget=widget, location=self.location(start)))

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
        if not arms:
            raise self.error("A match needs at least one arm", match_token)
        self._check_arms(arms, arm_starts)
        return ir.MatchBranches(subject=subject, arms=arms)

    def parse_branch_body(self, allow_bare: bool) -> ir.Widget:
        """
        Parse the single widget of a branch.

        Grammar:
            '{' tree [','] '}'
            tree                    (match arms only)
        """
        if self.match(TokenType.LBRACE):
            opening = self.advance()
            widget = self.parse_tree()
            if self.match(TokenType.COMMA):
                self.advance()
            if not self.match(TokenType.RBRACE):
                raise self.error(
                    "A branch holds exactly one widget; wrap several in a container",
                    self.current_token() if not self.match(TokenType.EOF) else opening,
                )
            self.advance()
            return widget
        if allow_bare:
            return self.parse_tree()
        raise self.error(f"Expected '{{' to open the branch, got {describe_token(self.current_token())}")

    def capture_pattern(self) -> ir.Expr:
        """
        Capture a ``case`` pattern (guard included) up to ``=>``.

        Patterns spanning several lines are normalized to one line.
        """
        start = self.current_token()
        last: Token | None = None
        depth = 0
        while True:
            token = self.current_token()
            if token.type == TokenType.EOF:
                break
            if depth == 0 and (token.type == TokenType.FAT_ARROW or token.type in CLOSING):
                break
            if token.type in OPENING:
                depth += 1
            elif token.type in CLOSING:
                depth -= 1
            last = self.advance()

        if last is None:
            raise self.error(f"Expected a match pattern, got {describe_token(start)}", start)

        text = self.source[start.offset : last.end]
        case = self._check_pattern(text, start)
        if "\n" in text:
            text = ast.unparse(case.pattern)
            if case.guard is not None:
                text += f" if {ast.unparse(case.guard)}"
        return ir.Expr(text=text, location=self.location(start))

    def _check_pattern(self, text: str, start: Token) -> ast.match_case:
        flat = " ".join(text.split("\n"))
        try:
            module = ast.parse(f"match _:\n{_CASE_PREFIX}{flat}:\n  pass\n")
        except SyntaxError as e:
            column = start.column
            if e.lineno == 2 and e.offset:
                column = start.column + max(0, e.offset - 1 - len(_CASE_PREFIX))
            raise self.error_at(f"Invalid match pattern: {e.msg}", start.line, column) from e
        match_stmt = module.body[0]
        assert isinstance(match_stmt, ast.Match)
        return match_stmt.cases[0]

    def _check_arms(self, arms: list[ir.MatchArm], starts: list[Token]) -> None:
        """
        Compile the arms as one ``match`` statement.

        Catches what single patterns cannot show, such as a wildcard or bare
        capture before the last arm.
        """
        cases = "".join(f"{_CASE_PREFIX}{arm.pattern.text}:\n  pass\n" for arm in arms)
        try:
            compile(f"match _:\n{cases}", str(self.file), "exec")
        except SyntaxError as e:
            index = min(max(0, ((e.lineno or 2) - 2) // 2), len(arms) - 1)
            raise self.error(f"Invalid match arms: {e.msg}", starts[index]) from e
