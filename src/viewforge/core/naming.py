"""
Name synthesis for unnamed widgets.

Every node of a component needs a variable name in the generated code. Nodes
the user did not name receive ``<snake_case(type)>_<n>``, numbered per type
in declaration order, skipping names already used in the component.
"""

from __future__ import annotations

import logging
from collections import defaultdict

from . import ir
from .config import CompilerConfig
from .strings import last_segment, snake_case

logger = logging.getLogger(__name__)


def base_name(node: ir.Widget | ir.ConditionalWidget, config: CompilerConfig) -> str:
    """Stem of the synthesized name for ``node``."""
    if isinstance(node, ir.ConditionalWidget):
        return snake_case(config.switch_container)
    return snake_case(last_segment(node.type_path or node.func.path))


def assign_names(component: ir.Component, config: CompilerConfig) -> None:
    """
    Give every unnamed node of ``component`` a synthesized name.

    Explicit names, view parameters and connection guard names are reserved
    first, so a synthesized name never collides with them.
    """
    taken: set[str] = set(component.params)
    for node in component.walk():
        if node.name is not None:
            taken.add(node.name)
        if isinstance(node, ir.Widget):
            taken.update(prop.guard for prop in node.properties if prop.guard)

    counters: dict[str, int] = defaultdict(int)
    synthesized = 0
    for node in component.walk():
        if node.name is not None:
            continue
        stem = base_name(node, config)
        while True:
            candidate = f"{stem}_{counters[stem]}"
            counters[stem] += 1
            if candidate not in taken:
                break
        node.name = candidate
        taken.add(candidate)
        synthesized += 1

    logger.debug("Synthesized %d names in %s %s", synthesized, component.kind.value, component.name)
