"""
viewforge CLI.

Commands:
    viewforge check counter.view settings.view   # validate, print diagnostics
    viewforge compile counter.view -o counter_view.py
"""

from __future__ import annotations

import logging
import os
import platform
from pathlib import Path

import typer
from rich.console import Console
from rich.text import Text

from . import __version__
from .compiler import CompilationResult, compile_file
from .core.config import CompilerConfig, load_config
from .core.errors import ViewForgeError

logger = logging.getLogger(__name__)

app = typer.Typer(
    help="""viewforge – compile declarative widget trees to Python

Commands:
  • check: parse and validate view files
  • compile: generate the record, init and update code of a view file
""",
    no_args_is_help=True,
)

console = Console()
err_console = Console(stderr=True)


def version_callback(value: bool) -> None:
    """Display version and environment information."""
    if value:
        typer.echo(f"viewforge version {__version__}")
        typer.echo(
            f"Python {platform.python_implementation()} {platform.python_version()} "
            f"on {platform.system()}"
        )
        raise typer.Exit()


@app.callback()
def main_callback(
    version: bool | None = typer.Option(
        None,
        "--version",
        callback=version_callback,
        is_eager=True,
        help="Show version and environment information",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log compiler passes"),
) -> None:
    """viewforge CLI main callback for global options."""
    log_level = "DEBUG" if verbose else os.getenv("VIEWFORGE_LOG_LEVEL", "WARNING").upper()
    logging.basicConfig(
        level=getattr(logging, log_level, logging.WARNING),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def _load_config(config_path: Path | None) -> CompilerConfig | None:
    """Explicit configuration, or None to discover one per source file."""
    if config_path is None:
        return None
    try:
        return load_config(config_path)
    except (OSError, ViewForgeError) as e:
        err_console.print(Text(f"Error: {e}"), soft_wrap=True)
        raise typer.Exit(code=1)


def _compile(path: Path, config: CompilerConfig | None, extended: bool) -> CompilationResult:
    try:
        return compile_file(path, config, extended_lint=extended)
    except (OSError, ViewForgeError) as e:
        err_console.print(Text(f"Error: {path}: {e}"), soft_wrap=True)
        raise typer.Exit(code=1)


def print_human_diagnostics(result: CompilationResult) -> None:
    """Print the diagnostics of one file in human-readable format."""
    for component in result.components:
        for error in component.errors:
            line = Text("ERROR: ", style="bold red")
            line.append(f"{component.label}: {error}")
            err_console.print(line, soft_wrap=True)
        for warning in component.warnings:
            line = Text("WARNING: ", style="yellow")
            line.append(f"{component.label}: {warning}")
            console.print(line, soft_wrap=True)


def print_summary(result: CompilationResult) -> None:
    compiled = sum(1 for component in result.components if component.success)
    style = "green" if result.success else "red"
    console.print(
        Text(f"{result.file}: {compiled}/{len(result.components)} components OK", style=style),
        soft_wrap=True,
    )


@app.command(name="check")
def check_command(
    sources: list[Path] = typer.Argument(..., help="View files to check"),
    config_path: Path | None = typer.Option(
        None, "--config", "-c", help="viewforge.toml or pyproject.toml to use"
    ),
    strict: bool = typer.Option(False, "--strict", help="Treat warnings as errors"),
    extended: bool = typer.Option(
        False, "--extended", help="Run extended lint checks (often-intentional patterns)"
    ),
) -> None:
    """
    Parse and validate view files without writing any code.
    """
    config = _load_config(config_path)
    failed = False

    for source in sources:
        result = _compile(source, config, extended)
        print_human_diagnostics(result)
        print_summary(result)
        if not result.success or (strict and result.warnings):
            failed = True

    if failed:
        raise typer.Exit(code=1)


@app.command(name="compile")
def compile_command(
    source: Path = typer.Argument(..., help="View file to compile"),
    output: Path | None = typer.Option(
        None, "--output", "-o", help="Write the generated module here instead of stdout"
    ),
    config_path: Path | None = typer.Option(
        None, "--config", "-c", help="viewforge.toml or pyproject.toml to use"
    ),
    extended: bool = typer.Option(False, "--extended", help="Run extended lint checks"),
) -> None:
    """
    Generate the Python module of a view file.

    Components that fail are reported and left out of the module; the exit
    code is 1 when any component failed.
    """
    config = _load_config(config_path)
    result = _compile(source, config, extended)
    print_human_diagnostics(result)

    module = result.render()
    if output is None:
        typer.echo(module, nl=False)
    else:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(module, encoding="utf-8")
        print_summary(result)
        logger.info("Wrote %s", output)

    if not result.success:
        raise typer.Exit(code=1)


def main() -> None:
    app(standalone_mode=True)


if __name__ == "__main__":
    main()
