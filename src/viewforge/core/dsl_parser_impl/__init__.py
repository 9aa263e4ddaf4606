"""
viewforge View Language Parser Package.

This package provides a modular parser for the view language.
The parser is built using mixins to separate parsing logic by construct type.

The main exports are:
- Parser: The complete parser class
- parse_view_source: Convenience function to parse a view file

Usage:
    from viewforge.core.dsl_parser_impl import parse_view_source

    view_file = parse_view_source(text, file)
    for parsed in view_file.components:
        if parsed.error is None:
            ...
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path

from .. import ir
from ..config import CompilerConfig
from ..errors import ParseError
from ..lexer import CLOSING, OPENING, Token, TokenType, tokenize
from .attributes import AttributeParserMixin
from .base import BaseParser, describe_token
from .components import ComponentParserMixin
from .conditionals import ConditionalParserMixin
from .widgets import WidgetParserMixin

logger = logging.getLogger(__name__)

COMPONENT_KEYWORDS = {TokenType.VIEW, TokenType.TEMPLATE}

# A component header at the start of a line always begins a new component
COMPONENT_HEADER = re.compile(r"^(view|template)[ \t]+([A-Za-z_]\w*)[ \t]*[({]", re.MULTILINE)


class Parser(
    BaseParser,
    AttributeParserMixin,
    WidgetParserMixin,
    ConditionalParserMixin,
    ComponentParserMixin,
):
    """
    Complete view language parser.

    This class composes all parser mixins:

    - AttributeParserMixin: ``#[...]`` attributes and ``#:`` doc comments
    - WidgetParserMixin: Widgets, property blocks and properties
    - ConditionalParserMixin: if chains and match expressions
    - ComponentParserMixin: view and template declarations
    """

    def parse(self) -> ir.Component:
        """
        Parse exactly one component from the token stream.

        Raises:
            ParseError: If the tokens do not form a single component
        """
        component = self.parse_component()
        if not self.match(TokenType.EOF):
            raise self.error(
                f"Unexpected {describe_token(self.current_token())} after "
                f"{component.kind.value} '{component.name}'"
            )
        return component


@dataclass
class ParsedComponent:
    """
    Parse outcome of one component.

    Exactly one of ``component`` and ``error`` is set.
    """

    name: str | None
    kind: ir.ComponentKind | None
    component: ir.Component | None = None
    error: ParseError | None = None


@dataclass
class ViewFile:
    """A parsed view file: every component's outcome in source order."""

    file: Path
    components: list[ParsedComponent] = field(default_factory=list)

    @property
    def errors(self) -> list[ParseError]:
        return [parsed.error for parsed in self.components if parsed.error is not None]


def split_components(tokens: list[Token]) -> list[list[Token]]:
    """
    Split a file's tokens into one token list per component.

    A component starts at ``view`` or ``template`` outside any brackets. Each
    returned list ends with the EOF token of ``tokens``, so a syntax error
    inside one component cannot affect the next.
    """
    chunks: list[list[Token]] = []
    current: list[Token] = []
    depth = 0
    eof = tokens[-1]

    for token in tokens[:-1]:
        if depth == 0 and token.type in COMPONENT_KEYWORDS and current:
            chunks.append(current)
            current = []
        current.append(token)
        if token.type in OPENING:
            depth += 1
        elif token.type in CLOSING:
            depth = max(0, depth - 1)

    if current:
        chunks.append(current)
    return [chunk + [eof] for chunk in chunks]


def _chunk_identity(chunk: list[Token]) -> tuple[str | None, ir.ComponentKind | None]:
    first = chunk[0]
    if first.type not in COMPONENT_KEYWORDS:
        return None, None
    kind = ir.ComponentKind(first.value)
    name_token = chunk[1] if len(chunk) > 1 else None
    if name_token is not None and name_token.type == TokenType.IDENTIFIER:
        return name_token.value, kind
    return None, kind


def component_spans(text: str) -> list[tuple[int, int, re.Match[str] | None]]:
    """
    Cut the source into spans lexed independently.

    A span starts at every ``view NAME (`` or ``template NAME {`` written at
    the start of a line, so an unclosed bracket or an unterminated string
    stays inside its component. Text before the first header forms its own
    span.
    """
    headers = list(COMPONENT_HEADER.finditer(text))
    starts: list[tuple[int, re.Match[str] | None]] = [(m.start(), m) for m in headers]
    if not headers or headers[0].start() > 0:
        starts.insert(0, (0, None))
    ends = [start for start, _ in starts[1:]] + [len(text)]
    return [(start, end, header) for (start, header), end in zip(starts, ends)]


def parse_view_source(
    text: str, file: Path, config: CompilerConfig | None = None
) -> ViewFile:
    """
    Parse a complete view file.

    Each component is lexed and parsed independently; a component that fails
    is reported through its ``error`` while the others still parse.

    Args:
        text: View source text
        file: Source file path
        config: Compiler configuration

    Returns:
        ViewFile with one entry per component
    """
    view_file = ViewFile(file=file)

    for start, end, header in component_spans(text):
        try:
            tokens = tokenize(text, file, start, end)
        except ParseError as e:
            name = header.group(2) if header else None
            kind = ir.ComponentKind(header.group(1)) if header else None
            logger.debug("Failed to tokenize %s %s in %s: %s", kind, name, file, e.message)
            view_file.components.append(ParsedComponent(name=name, kind=kind, error=e))
            continue

        for chunk in split_components(tokens):
            name, kind = _chunk_identity(chunk)
            parser = Parser(chunk, file, text, config)
            try:
                component = parser.parse()
            except ParseError as e:
                logger.debug("Failed to parse %s %s in %s: %s", kind, name, file, e.message)
                view_file.components.append(ParsedComponent(name=name, kind=kind, error=e))
                continue
            view_file.components.append(
                ParsedComponent(name=component.name, kind=component.kind, component=component)
            )

    return view_file


__all__ = [
    "Parser",
    "ParsedComponent",
    "ViewFile",
    "parse_view_source",
    "split_components",
    "component_spans",
    "BaseParser",
    "AttributeParserMixin",
    "WidgetParserMixin",
    "ConditionalParserMixin",
    "ComponentParserMixin",
]
