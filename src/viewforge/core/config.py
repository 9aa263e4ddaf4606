"""
Compiler configuration.

Parses the ``[compiler]`` table of ``viewforge.toml`` (or the
``[tool.viewforge]`` table of ``pyproject.toml``) into a typed configuration
shared by the parser and every generator pass.

Example ``viewforge.toml``:

    [compiler]
    toolkit_module = "Gtk"
    toolkit_import = "from gi.repository import Gtk"

    [compiler.container_methods]
    "Adw.ApplicationWindow" = "set_content"
"""

from __future__ import annotations

import logging
import tomllib
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from .errors import ViewForgeError

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "viewforge.toml"

# Toolkit widgets that hold a single child set through ``set_child``
DEFAULT_CONTAINER_METHODS: dict[str, str] = {
    "Window": "set_child",
    "ApplicationWindow": "set_child",
    "Dialog": "set_child",
    "ScrolledWindow": "set_child",
    "Frame": "set_child",
    "Button": "set_child",
    "ToggleButton": "set_child",
    "Popover": "set_child",
    "Revealer": "set_child",
    "Viewport": "set_child",
    "Overlay": "set_child",
    "Expander": "set_child",
    "AspectFrame": "set_child",
}


class CompilerConfig(BaseModel):
    """
    Settings for parsing and code generation.

    Attributes:
        toolkit_module: Name the generated code uses for the toolkit namespace
        toolkit_import: Import line emitted at the top of generated modules
            (None omits it; the caller provides the namespace)
        switch_container: Toolkit type used for conditional widgets
        transition_enum: Toolkit enum holding transition kinds
        default_child_method: Method adding a child declared without a name
        container_methods: Per-type override of ``default_child_method``,
            keyed by full type path or by the last path segment
        sender_method: Sender method dispatching an input message
        tracker_method: Model method reporting whether fields changed
        binding_method: Property name treated as a property binding
        connect_method: Toolkit method registering a signal handler
        block_method: Toolkit method suppressing a handler
        unblock_method: Toolkit method re-enabling a handler
        add_page_method: Switch container method registering a labeled child
        get_page_method: Switch container method returning the visible label
        set_page_method: Switch container method showing a labeled child
        set_page_full_method: Switch container method showing a labeled child
            with an explicit transition
        transition_method: Switch container method setting the transition
        indent_width: Spaces per indentation level in generated code
        emit_header: Emit the module docstring and imports
        imports: Extra import lines copied into the generated module
    """

    model_config = ConfigDict(extra="forbid")

    toolkit_module: str = "Gtk"
    toolkit_import: str | None = "from gi.repository import Gtk"
    switch_container: str = "Stack"
    transition_enum: str = "StackTransitionType"
    default_child_method: str = "append"
    container_methods: dict[str, str] = Field(
        default_factory=lambda: dict(DEFAULT_CONTAINER_METHODS)
    )
    sender_method: str = "input"
    tracker_method: str = "changed"
    binding_method: str = "bind_property"
    connect_method: str = "connect"
    block_method: str = "handler_block"
    unblock_method: str = "handler_unblock"
    add_page_method: str = "add_named"
    get_page_method: str = "get_visible_child_name"
    set_page_method: str = "set_visible_child_name"
    set_page_full_method: str = "set_visible_child_full"
    transition_method: str = "set_transition_type"
    indent_width: int = Field(default=4, ge=1, le=8)
    emit_header: bool = True
    imports: list[str] = Field(default_factory=list)

    @property
    def switch_type(self) -> str:
        """Qualified switch container type, e.g. ``Gtk.Stack``."""
        return f"{self.toolkit_module}.{self.switch_container}"

    def transition_value(self, kind: str) -> str:
        """Qualified transition constant for a transition kind.

        ``SlideLeft`` and ``slide_left`` both become
        ``Gtk.StackTransitionType.SLIDE_LEFT``.
        """
        constant = _constant_case(kind)
        return f"{self.toolkit_module}.{self.transition_enum}.{constant}"

    def child_method_for(self, type_path: str | None) -> str:
        """Method a container of ``type_path`` uses for unnamed children."""
        if type_path:
            if type_path in self.container_methods:
                return self.container_methods[type_path]
            last = type_path.rsplit(".", 1)[-1]
            if last in self.container_methods:
                return self.container_methods[last]
        return self.default_child_method


def _constant_case(kind: str) -> str:
    if kind.isupper() or "_" in kind:
        return kind.upper()
    chars: list[str] = []
    for i, ch in enumerate(kind):
        if ch.isupper() and i > 0 and not kind[i - 1].isupper():
            chars.append("_")
        chars.append(ch.upper())
    return "".join(chars)


def _config_table(path: Path) -> dict[str, Any]:
    data = tomllib.loads(path.read_text(encoding="utf-8"))
    if path.name == "pyproject.toml":
        table = data.get("tool", {}).get("viewforge", {})
    else:
        table = data.get("compiler", {})
    if not isinstance(table, dict):
        raise ViewForgeError(f"Compiler configuration in {path} must be a table")
    return table


def load_config(path: Path) -> CompilerConfig:
    """
    Load compiler configuration from a TOML file.

    Args:
        path: ``viewforge.toml`` or ``pyproject.toml``

    Returns:
        Parsed configuration; defaults fill anything the file leaves out

    Raises:
        ViewForgeError: If the file is not valid TOML or holds unknown keys
    """
    try:
        table = _config_table(path)
    except tomllib.TOMLDecodeError as e:
        raise ViewForgeError(f"Invalid TOML in {path}: {e}") from e

    container_methods = dict(DEFAULT_CONTAINER_METHODS)
    container_methods.update(table.pop("container_methods", {}))

    try:
        config = CompilerConfig(container_methods=container_methods, **table)
    except PydanticValidationError as e:
        raise ViewForgeError(f"Invalid compiler configuration in {path}:\n{e}") from e

    logger.debug("Loaded compiler configuration from %s", path)
    return config


def discover_config(start: Path) -> CompilerConfig:
    """
    Find and load the configuration that applies to ``start``.

    Walks up from ``start`` looking for ``viewforge.toml``, then for a
    ``pyproject.toml`` with a ``[tool.viewforge]`` table. Falls back to the
    defaults when neither exists.
    """
    directory = start if start.is_dir() else start.parent
    for candidate_dir in [directory, *directory.resolve().parents]:
        candidate = candidate_dir / CONFIG_FILENAME
        if candidate.is_file():
            return load_config(candidate)
        pyproject = candidate_dir / "pyproject.toml"
        if pyproject.is_file() and _has_tool_table(pyproject):
            return load_config(pyproject)
    return CompilerConfig()


def _has_tool_table(path: Path) -> bool:
    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError:
        return False
    return "viewforge" in data.get("tool", {})
