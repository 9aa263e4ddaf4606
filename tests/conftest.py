"""Shared pytest fixtures for viewforge tests."""

from __future__ import annotations

import sys
from collections.abc import Callable
from pathlib import Path
from types import ModuleType, SimpleNamespace
from typing import Any

import pytest
from fakes import RecordingSender, make_toolkit

from viewforge.codegen import GenerationContext
from viewforge.compiler import CompilationResult, compile_source
from viewforge.core import ir
from viewforge.core.config import CompilerConfig
from viewforge.core.dsl_parser_impl import parse_view_source
from viewforge.core.naming import assign_names


@pytest.fixture
def fixtures_dir() -> Path:
    """Return path to fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def config() -> CompilerConfig:
    """Configuration for generated code run against the fake toolkit."""
    return CompilerConfig(toolkit_import=None)


@pytest.fixture
def gtk() -> SimpleNamespace:
    """Fresh fake toolkit namespace."""
    return make_toolkit()


@pytest.fixture
def sender() -> RecordingSender:
    return RecordingSender()


@pytest.fixture
def parse_one() -> Callable[..., ir.Component]:
    """Parse a source holding one component and synthesize its names."""

    def _parse(text: str, named: bool = True) -> ir.Component:
        view_file = parse_view_source(text, Path("test.view"))
        assert len(view_file.components) == 1
        parsed = view_file.components[0]
        if parsed.error is not None:
            raise parsed.error
        assert parsed.component is not None
        if named:
            assign_names(parsed.component, CompilerConfig())
        return parsed.component

    return _parse


@pytest.fixture
def compile_view(config: CompilerConfig) -> Callable[[str], CompilationResult]:
    def _compile(text: str) -> CompilationResult:
        return compile_source(text, "test.view", config)

    return _compile


@pytest.fixture
def load_view(
    gtk: SimpleNamespace,
    compile_view: Callable[[str], CompilationResult],
    monkeypatch: pytest.MonkeyPatch,
) -> Callable[..., ModuleType]:
    """Compile a view file and import the generated module against the fake toolkit.

    The module is registered in ``sys.modules`` so dataclasses can resolve
    its string annotations.
    """

    def _load(text: str, **names: Any) -> ModuleType:
        result = compile_view(text)
        assert result.success, result.errors
        module = ModuleType("generated_view")
        module.__dict__.update({"Gtk": gtk, **names})
        monkeypatch.setitem(sys.modules, module.__name__, module)
        exec(compile(result.render(), "generated_view.py", "exec"), module.__dict__)
        return module

    return _load


@pytest.fixture
def context(parse_one: Callable[..., ir.Component]) -> Callable[[str], GenerationContext]:
    """Parse a single component and build its generation context."""

    def _context(text: str) -> GenerationContext:
        return GenerationContext.build(parse_one(text), CompilerConfig())

    return _context
