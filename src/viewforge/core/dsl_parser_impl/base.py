"""
Base parser class for the viewforge view language.

Provides token navigation, error construction and the capture of embedded
Python expressions used by all parser mixins.
"""

from __future__ import annotations

import ast
from pathlib import Path
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from .. import ir
from ..config import CompilerConfig
from ..errors import ParseError, extract_snippet, make_parse_error
from ..lexer import CLOSING, KEYWORD_AS_IDENTIFIER_TYPES, OPENING, Token, TokenType

if TYPE_CHECKING:
    from .attributes import Attribute


@runtime_checkable
class ParserProtocol(Protocol):
    """
    Protocol defining the interface available to parser mixins.

    This allows mypy to understand that mixins will have access to
    BaseParser methods when combined in the final Parser class.
    """

    tokens: list[Token]
    file: Path
    source: str
    config: CompilerConfig
    pos: int

    def current_token(self) -> Token: ...
    def peek_token(self, offset: int = 1) -> Token: ...
    def advance(self) -> Token: ...
    def expect(self, token_type: TokenType) -> Token: ...
    def expect_identifier_or_keyword(self) -> Token: ...
    def match(self, *token_types: TokenType) -> bool: ...
    def error(self, message: str, token: Token | None = None) -> ParseError: ...
    def location(self, token: Token) -> ir.SourceLocation: ...
    def capture_expression(
        self, terminators: set[TokenType], what: str = "expression", hint: str | None = None
    ) -> ir.Expr: ...

    # Methods from other mixins that may be called cross-mixin
    def parse_attributes(self) -> tuple[list[Attribute], str | None]: ...
    def parse_tree(self) -> ir.Widget: ...
    def parse_conditional(
        self,
        widget_attrs: list[Attribute],
        doc: str | None,
        name: str | None = None,
        mutable: bool = False,
    ) -> ir.ConditionalWidget: ...


class BaseParser:
    """
    Base parser class with token manipulation utilities.

    This class provides the foundation for recursive descent parsing,
    including token navigation, matching, and error generation.
    """

    def __init__(
        self,
        tokens: list[Token],
        file: Path,
        source: str,
        config: CompilerConfig | None = None,
    ):
        """
        Initialize parser.

        Args:
            tokens: List of tokens from lexer, ending with EOF
            file: Source file path (for error reporting)
            source: Complete source text the tokens were read from
            config: Compiler configuration
        """
        self.tokens = tokens
        self.file = file
        self.source = source
        self.config = config or CompilerConfig()
        self.pos = 0

    def current_token(self) -> Token:
        """Get current token."""
        if self.pos >= len(self.tokens):
            return self.tokens[-1]  # Return EOF
        return self.tokens[self.pos]

    def peek_token(self, offset: int = 1) -> Token:
        """Peek ahead at token."""
        pos = self.pos + offset
        if pos >= len(self.tokens):
            return self.tokens[-1]  # Return EOF
        return self.tokens[pos]

    def previous_token(self) -> Token | None:
        """The most recently consumed token, if any."""
        if self.pos == 0:
            return None
        return self.tokens[self.pos - 1]

    def advance(self) -> Token:
        """Consume and return current token."""
        token = self.current_token()
        if token.type != TokenType.EOF:
            self.pos += 1
        return token

    def expect(self, token_type: TokenType) -> Token:
        """
        Expect a specific token type and consume it.

        Raises:
            ParseError: If token doesn't match
        """
        token = self.current_token()
        if token.type != token_type:
            raise self.error(f"Expected '{token_type.value}', got {describe_token(token)}", token)
        return self.advance()

    def expect_identifier_or_keyword(self) -> Token:
        """
        Expect an identifier or accept a soft keyword as an identifier.

        ``view``, ``template``, ``tracked``, ``match`` and ``mut`` only have
        meaning in fixed positions, so they remain usable as names elsewhere.
        """
        token = self.current_token()
        if token.type == TokenType.IDENTIFIER or token.type in KEYWORD_AS_IDENTIFIER_TYPES:
            return self.advance()
        raise self.error(f"Expected a name, got {describe_token(token)}", token)

    def match(self, *token_types: TokenType) -> bool:
        """Check if current token matches any of the given types."""
        return self.current_token().type in token_types

    def is_name(self, token: Token) -> bool:
        """Whether ``token`` can be read as a name."""
        return token.type == TokenType.IDENTIFIER or token.type in KEYWORD_AS_IDENTIFIER_TYPES

    def location(self, token: Token) -> ir.SourceLocation:
        """Source location of ``token``."""
        return ir.SourceLocation(file=str(self.file), line=token.line, column=token.column)

    def error(self, message: str, token: Token | None = None) -> ParseError:
        """
        Build a ParseError pointing at ``token`` (the current token by default).

        The returned error carries a snippet of the surrounding source and the
        span of the offending token.
        """
        token = token or self.current_token()
        return make_parse_error(
            message,
            self.file,
            token.line,
            token.column,
            snippet=extract_snippet(self.source, token.line),
            end_line=token.line,
            end_column=token.column + max(1, len(token.value.split("\n")[0])),
        )

    def error_at(self, message: str, line: int, column: int) -> ParseError:
        """Build a ParseError at an explicit position."""
        return make_parse_error(
            message,
            self.file,
            line,
            column,
            snippet=extract_snippet(self.source, line),
        )

    # =========================================================================
    # Embedded Python
    # =========================================================================

    def skip_balanced(self) -> Token:
        """
        Consume a bracketed group starting at the current opening token.

        Returns:
            The matching closing token

        Raises:
            ParseError: If the group is not closed before end of input
        """
        opening = self.current_token()
        if opening.type not in OPENING:
            raise self.error(f"Expected '(', '[' or '{{', got {describe_token(opening)}", opening)
        depth = 0
        while True:
            token = self.current_token()
            if token.type == TokenType.EOF:
                raise self.error(f"Unclosed '{opening.value}'", opening)
            self.advance()
            if token.type in OPENING:
                depth += 1
            elif token.type in CLOSING:
                depth -= 1
                if depth == 0:
                    return token

    def capture_expression(
        self, terminators: set[TokenType], what: str = "expression", hint: str | None = None
    ) -> ir.Expr:
        """
        Capture a Python expression verbatim from the source.

        The expression runs until a token in ``terminators`` or an unmatched
        closing bracket at nesting depth 0. Commas inside the parameter list of
        a ``lambda`` do not terminate it.

        Args:
            terminators: Token types ending the expression at depth 0
            what: Description of the expected construct for diagnostics
            hint: Advice appended to the diagnostic when the text is not valid Python

        Returns:
            The expression with its exact source text

        Raises:
            ParseError: If the expression is empty or is not valid Python
        """
        start = self.current_token()
        last: Token | None = None
        depth = 0
        open_lambdas = 0

        while True:
            token = self.current_token()
            if token.type == TokenType.EOF:
                break
            if depth == 0:
                if token.type in CLOSING:
                    break
                if token.type in terminators and not (
                    token.type == TokenType.COMMA and open_lambdas
                ):
                    break
                if token.type == TokenType.IDENTIFIER and token.value == "lambda":
                    open_lambdas += 1
                elif token.type == TokenType.COLON and open_lambdas:
                    open_lambdas -= 1
            if token.type in OPENING:
                depth += 1
            elif token.type in CLOSING:
                depth -= 1
            last = self.advance()

        if last is None:
            raise self.error(f"Expected {what}, got {describe_token(start)}", start)

        text = self.source[start.offset : last.end]
        self.check_python(text, start, hint)
        return ir.Expr(text=text, location=self.location(start))

    def check_python(self, text: str, start: Token, hint: str | None = None) -> ast.Expression:
        """
        Parse ``text`` as a Python expression.

        The text is parenthesized first, so a bare tuple such as ``1, 2``
        and expressions spanning lines are accepted.

        Raises:
            ParseError: Positioned at the offending character in the view file
        """
        try:
            return ast.parse(f"({text})", mode="eval")
        except SyntaxError as e:
            raise self._python_error(e, start, first_line_shift=1, hint=hint) from e

    def _python_error(
        self, e: SyntaxError, start: Token, first_line_shift: int, hint: str | None = None
    ) -> ParseError:
        lineno = e.lineno or 1
        offset = e.offset or 1
        line = start.line + lineno - 1
        if lineno == 1:
            column = max(start.column, start.column + offset - 1 - first_line_shift)
        else:
            column = offset
        message = f"Invalid Python expression: {e.msg}"
        if hint:
            message += f" ({hint})"
        return self.error_at(message, line, column)


def describe_token(token: Token) -> str:
    """Human-readable description of ``token`` for diagnostics."""
    if token.type == TokenType.EOF:
        return "end of input"
    if token.type in (TokenType.IDENTIFIER, TokenType.STRING, TokenType.NUMBER):
        return f"{token.type.value.lower()} '{token.value}'"
    return f"'{token.value}'"
