"""
Error types for viewforge parsing, validation, and code generation.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional


class ViewForgeError(Exception):
    """Base exception for all viewforge errors."""

    def __init__(self, message: str, context: Optional["ErrorContext"] = None):
        self.message = message
        self.context = context
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format error message with context if available."""
        if self.context:
            return f"{self.context.format()}\n{self.message}"
        return self.message


class ParseError(ViewForgeError):
    """
    Raised when view source cannot be tokenized or parsed.

    Examples:
    - Unterminated string literals
    - Unexpected tokens or missing delimiters
    - Embedded Python expressions that do not parse
    - Unknown attribute names
    """

    pass


class ValidationError(ViewForgeError):
    """
    Raised when a parsed component fails semantic validation.

    Examples:
    - #[track] used in a view that is not declared tracked
    - #[block_signal] naming a connection guard that does not exist
    - Duplicate widget names
    - Modifiers attached to a property kind that cannot carry them
    """

    pass


class GenerationError(ViewForgeError):
    """
    Raised when a generator pass cannot emit code for a validated tree.

    Validation is expected to reject every input that would trigger this, so
    it signals a compiler bug rather than a user error.
    """

    pass


@dataclass
class ErrorContext:
    """
    Context information for an error, including source location.

    Attributes:
        file: Path to the source file where error occurred
        line: Line number (1-indexed)
        column: Column number (1-indexed)
        end_line: Optional last line of the offending span
        end_column: Optional column just past the offending span
        snippet: Optional code snippet showing the error location
        component: Optional view or template name where error occurred
    """

    file: Path
    line: int
    column: int
    end_line: int | None = None
    end_column: int | None = None
    snippet: str | None = None
    component: str | None = None

    def format(self) -> str:
        """
        Format error context as a human-readable string.

        Returns:
            Formatted string like: "counter.view:10:5 in view CounterWidgets"
        """
        location = f"{self.file}:{self.line}:{self.column}"
        if self.component:
            location += f" in {self.component}"

        if self.snippet:
            return f"{location}\n{self._format_snippet()}"
        return location

    def _format_snippet(self) -> str:
        """Format code snippet with line numbers and error marker."""
        if not self.snippet:
            return ""

        lines = self.snippet.split("\n")
        formatted = []

        # Snippets start two lines above the error line
        start_line = max(1, self.line - 2)

        for i, line in enumerate(lines):
            line_num = start_line + i
            prefix = f"{line_num:4d} | "
            formatted.append(prefix + line)

            if line_num == self.line:
                marker_pos = len(prefix) + self.column - 1
                width = 3
                if self.end_line == self.line and self.end_column:
                    width = max(1, self.end_column - self.column)
                formatted.append(" " * marker_pos + "^" * width)

        return "\n".join(formatted)


def extract_snippet(source: str, line: int, context_lines: int = 2) -> str:
    """
    Cut the lines around ``line`` out of ``source`` for error display.

    Args:
        source: Complete source text
        line: Line number (1-indexed) the snippet is centred on
        context_lines: Lines to include before and after

    Returns:
        The selected lines joined with newlines
    """
    lines = source.split("\n")
    start = max(1, line - context_lines)
    end = min(len(lines), line + context_lines)
    return "\n".join(lines[start - 1 : end])


def make_parse_error(
    message: str,
    file: Path,
    line: int,
    column: int,
    snippet: str | None = None,
    end_line: int | None = None,
    end_column: int | None = None,
) -> ParseError:
    """
    Helper to create a ParseError with context.

    Args:
        message: Error description
        file: Source file path
        line: Line number (1-indexed)
        column: Column number (1-indexed)
        snippet: Optional code snippet
        end_line: Optional last line of the span
        end_column: Optional column just past the span

    Returns:
        ParseError with context attached
    """
    context = ErrorContext(
        file=file,
        line=line,
        column=column,
        end_line=end_line,
        end_column=end_column,
        snippet=snippet,
    )
    return ParseError(message, context)


def make_validation_error(
    message: str,
    file: Path | None = None,
    line: int | None = None,
    column: int | None = None,
    component: str | None = None,
) -> ValidationError:
    """
    Helper to create a ValidationError with optional context.

    Args:
        message: Error description
        file: Optional source file path
        line: Optional line number
        column: Optional column number
        component: Optional view or template name

    Returns:
        ValidationError with context if location provided
    """
    if file and line and column:
        context = ErrorContext(
            file=file,
            line=line,
            column=column,
            component=component,
        )
        return ValidationError(message, context)
    return ValidationError(message)
