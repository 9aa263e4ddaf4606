"""
Indented line buffer for emitted Python code.

Each generator pass writes into its own CodeWriter; the emission driver
splices the buffers into the final routines at the right indentation.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager


class CodeWriter:
    """
    A stream of code lines with relative indentation.

    Example:
        writer = CodeWriter()
        with writer.block("if model.changed('value'):"):
            writer.line("label.set_label(str(model.value))")
        writer.render(level=1)
    """

    def __init__(self, indent_width: int = 4):
        self.indent_width = indent_width
        self.level = 0
        self._lines: list[tuple[int, str]] = []

    def line(self, text: str = "") -> None:
        """Append one line at the current indentation.

        Multi-line text keeps its internal line breaks; continuation lines
        are emitted verbatim.
        """
        first, *rest = text.split("\n")
        self._lines.append((self.level, first))
        for continuation in rest:
            self._lines.append((-1, continuation))

    @contextmanager
    def block(self, header: str) -> Iterator[None]:
        """Write ``header`` and indent everything written inside the context."""
        self.line(header)
        self.level += 1
        try:
            yield
        finally:
            self.level -= 1

    def extend(self, other: CodeWriter) -> None:
        """Append the lines of ``other``, nested at the current indentation."""
        for level, text in other._lines:
            self._lines.append((level if level < 0 else level + self.level, text))

    def is_empty(self) -> bool:
        return not self._lines

    def __len__(self) -> int:
        return len(self._lines)

    def render(self, level: int = 0) -> str:
        """Render the lines, indented by ``level`` extra levels."""
        rendered = []
        for line_level, text in self._lines:
            if line_level < 0:
                rendered.append(text)
            elif text:
                rendered.append(" " * (self.indent_width * (line_level + level)) + text)
            else:
                rendered.append("")
        return "\n".join(rendered)
