"""
Lexer/Tokenizer for the viewforge view language.

Converts raw view source into a stream of tokens with source location
tracking. Blocks are brace-delimited, so whitespace and newlines are not
significant. Python expressions embedded in the source are tokenized only
coarsely: the parser recovers their exact text from the token offsets.
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from .errors import extract_snippet, make_parse_error


class TokenType(Enum):
    """Token types in the view language."""

    # Literals
    IDENTIFIER = "IDENTIFIER"
    STRING = "STRING"
    NUMBER = "NUMBER"

    # Keywords
    VIEW = "view"
    TEMPLATE = "template"
    TRACKED = "tracked"
    IF = "if"
    ELIF = "elif"
    ELSE = "else"
    MATCH = "match"
    MUT = "mut"

    # Delimiters
    LBRACE = "{"
    RBRACE = "}"
    LPAREN = "("
    RPAREN = ")"
    LBRACKET = "["
    RBRACKET = "]"
    COMMA = ","
    COLON = ":"
    DOT = "."
    EQUALS = "="
    FAT_ARROW = "=>"
    ARROW = "->"
    QUESTION = "?"
    AT = "@"
    ATTR_OPEN = "#["
    DOC_COMMENT = "#:"

    # Any other Python operator (only meaningful inside expressions)
    OPERATOR = "OPERATOR"

    # Special
    EOF = "EOF"


KEYWORDS = {
    "view",
    "template",
    "tracked",
    "if",
    "elif",
    "else",
    "match",
    "mut",
}

# Keywords that can also be used where an identifier is expected
KEYWORD_AS_IDENTIFIER_TYPES = {
    TokenType.VIEW,
    TokenType.TEMPLATE,
    TokenType.TRACKED,
    TokenType.MATCH,
    TokenType.MUT,
}

OPENING = {TokenType.LBRACE, TokenType.LPAREN, TokenType.LBRACKET}
CLOSING = {TokenType.RBRACE, TokenType.RPAREN, TokenType.RBRACKET}

STRING_PREFIXES = {"r", "u", "b", "f", "br", "rb", "fr", "rf"}

# Two-character operators that must not be split into structural tokens
TWO_CHAR_OPERATORS = {"==", "!=", "<=", ">=", ":=", "**", "//", "<<", ">>"}

SINGLE_CHAR_OPERATORS = set("+-*/%<>!&|^~;")


@dataclass
class Token:
    """
    A single token in the view source.

    Attributes:
        type: Type of token
        value: Source text of the token (strings keep their quotes and prefix)
        line: Line number (1-indexed)
        column: Column number (1-indexed)
        offset: Offset of the first character in the source text
        end: Offset just past the last character in the source text
    """

    type: TokenType
    value: str
    line: int
    column: int
    offset: int = 0
    end: int = 0

    def __repr__(self) -> str:
        return f"Token({self.type.value}, {self.value!r}, {self.line}:{self.column})"


class Lexer:
    """
    Lexer for the view language.

    Converts source text into a stream of tokens.
    """

    def __init__(self, text: str, file: Path, start: int = 0, end: int | None = None):
        """
        Initialize lexer.

        Args:
            text: Source text to tokenize
            file: Source file path (for error reporting)
            start: Offset of the first character to read; must begin a line
            end: Offset where reading stops (defaults to the end of ``text``)
        """
        self.text = text
        self.file = file
        self.pos = start
        self.end = len(text) if end is None else end
        self.line = text.count("\n", 0, start) + 1
        self.column = 1
        self.tokens: list[Token] = []

    def current_char(self) -> str | None:
        """Get current character or None if at end."""
        if self.pos >= self.end:
            return None
        return self.text[self.pos]

    def peek_char(self, offset: int = 1) -> str | None:
        """Peek ahead at character."""
        pos = self.pos + offset
        if pos >= self.end:
            return None
        return self.text[pos]

    def advance(self) -> None:
        """Move to next character, updating line/column."""
        if self.pos < self.end:
            if self.text[self.pos] == "\n":
                self.line += 1
                self.column = 1
            else:
                self.column += 1
            self.pos += 1

    def skip_whitespace(self) -> None:
        """Skip whitespace characters, including newlines."""
        while self.current_char() in (" ", "\t", "\r", "\n", "\f"):
            self.advance()

    def skip_comment(self) -> None:
        """Skip comment (from # to end of line)."""
        while self.current_char() and self.current_char() != "\n":
            self.advance()

    def read_string(self, start_line: int, start_col: int) -> None:
        """
        Read a quoted string literal, including triple-quoted strings.

        The current character must be the opening quote; any prefix has already
        been consumed by the caller.
        """
        quote = self.current_char()
        triple = self.peek_char() == quote and self.peek_char(2) == quote
        delimiter = quote * 3 if triple else quote
        for _ in delimiter:
            self.advance()

        while True:
            current = self.current_char()
            if current is None or (current == "\n" and not triple):
                raise make_parse_error(
                    "Unterminated string literal",
                    self.file,
                    start_line,
                    start_col,
                    snippet=extract_snippet(self.text, start_line),
                )

            if current == "\\":
                self.advance()
                self.advance()
                continue

            if self.text.startswith(delimiter, self.pos, self.end):
                for _ in delimiter:
                    self.advance()
                return

            self.advance()

    def read_number(self) -> None:
        """Read a Python numeric literal (int, float, hex, complex, with underscores)."""
        while True:
            current = self.current_char()
            if current is None:
                break
            if current.isalnum() or current in ("_", "."):
                if current in ("e", "E") and self.peek_char() in ("+", "-"):
                    self.advance()
                self.advance()
                continue
            break

    def read_identifier(self) -> str:
        """Read an identifier or keyword."""
        chars = []
        current = self.current_char()
        while current and (current.isalnum() or current == "_"):
            chars.append(current)
            self.advance()
            current = self.current_char()
        return "".join(chars)

    def _emit(self, token_type: TokenType, start: int, line: int, column: int) -> None:
        self.tokens.append(
            Token(token_type, self.text[start : self.pos], line, column, start, self.pos)
        )

    def tokenize(self) -> list[Token]:
        """
        Tokenize the entire source text.

        Returns:
            List of tokens ending with EOF

        Raises:
            ParseError: If an unexpected character or unterminated string is found
        """
        while True:
            self.skip_whitespace()
            ch = self.current_char()
            if ch is None:
                break

            # Save position for token
            start = self.pos
            token_line = self.line
            token_col = self.column

            # Attributes, doc comments and comments
            if ch == "#":
                if self.peek_char() == "[":
                    self.advance()
                    self.advance()
                    self._emit(TokenType.ATTR_OPEN, start, token_line, token_col)
                elif self.peek_char() == ":":
                    self.skip_comment()
                    self._emit(TokenType.DOC_COMMENT, start, token_line, token_col)
                else:
                    self.skip_comment()

            # Strings
            elif ch in ('"', "'"):
                self.read_string(token_line, token_col)
                self._emit(TokenType.STRING, start, token_line, token_col)

            # Numbers
            elif ch.isdigit() or (ch == "." and (self.peek_char() or "").isdigit()):
                self.read_number()
                self._emit(TokenType.NUMBER, start, token_line, token_col)

            # Identifiers, keywords and prefixed strings
            elif ch.isalpha() or ch == "_":
                value = self.read_identifier()
                if value.lower() in STRING_PREFIXES and self.current_char() in ('"', "'"):
                    self.read_string(token_line, token_col)
                    self._emit(TokenType.STRING, start, token_line, token_col)
                elif value in KEYWORDS:
                    self._emit(TokenType(value), start, token_line, token_col)
                else:
                    self._emit(TokenType.IDENTIFIER, start, token_line, token_col)

            # Structural two-character tokens
            elif ch == "=" and self.peek_char() == ">":
                self.advance()
                self.advance()
                self._emit(TokenType.FAT_ARROW, start, token_line, token_col)

            elif ch == "-" and self.peek_char() == ">":
                self.advance()
                self.advance()
                self._emit(TokenType.ARROW, start, token_line, token_col)

            elif ch + (self.peek_char() or "") in TWO_CHAR_OPERATORS:
                self.advance()
                self.advance()
                self._emit(TokenType.OPERATOR, start, token_line, token_col)

            elif ch in "{}()[],:.=?@":
                self.advance()
                self._emit(TokenType(ch), start, token_line, token_col)

            elif ch in SINGLE_CHAR_OPERATORS:
                self.advance()
                self._emit(TokenType.OPERATOR, start, token_line, token_col)

            else:
                raise make_parse_error(
                    f"Unexpected character: {ch!r}",
                    self.file,
                    token_line,
                    token_col,
                    snippet=extract_snippet(self.text, token_line),
                )

        # Add EOF token
        self.tokens.append(
            Token(TokenType.EOF, "", self.line, self.column, self.pos, self.pos)
        )

        return self.tokens


def tokenize(
    text: str, file: Path, start: int = 0, end: int | None = None
) -> list[Token]:
    """
    Convenience function to tokenize view source.

    Args:
        text: Source text
        file: Source file path
        start: Offset where tokenizing starts; must begin a line
        end: Offset where tokenizing stops

    Returns:
        List of tokens
    """
    lexer = Lexer(text, file, start, end)
    return lexer.tokenize()
