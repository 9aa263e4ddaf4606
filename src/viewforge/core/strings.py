"""
String utility functions for viewforge.

Provides the name transformations shared by the naming pass and the
generators.
"""

from __future__ import annotations

import re

_ACRONYM_BOUNDARY = re.compile(r"([A-Z]+)([A-Z][a-z])")
_WORD_BOUNDARY = re.compile(r"([a-z0-9])([A-Z])")


def snake_case(name: str) -> str:
    """
    Convert PascalCase or camelCase to snake_case.

    Examples:
        >>> snake_case("CounterWidgets")
        'counter_widgets'
        >>> snake_case("GLArea")
        'gl_area'
        >>> snake_case("label")
        'label'
    """
    result = _ACRONYM_BOUNDARY.sub(r"\1_\2", name)
    result = _WORD_BOUNDARY.sub(r"\1_\2", result)
    return result.lower()


def last_segment(path: str) -> str:
    """Last component of a dotted path: ``Gtk.Label`` gives ``Label``."""
    return path.rsplit(".", 1)[-1]
