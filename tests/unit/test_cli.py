"""Tests for the viewforge command line."""

import ast
from pathlib import Path

from typer.testing import CliRunner

from viewforge.cli import app

runner = CliRunner()


class TestCheck:
    """Tests for `viewforge check`."""

    def test_clean_file(self, fixtures_dir: Path) -> None:
        result = runner.invoke(app, ["check", str(fixtures_dir / "counter.view")])
        assert result.exit_code == 0
        assert "2/2 components OK" in result.output

    def test_errors_reported_per_component(self, fixtures_dir: Path) -> None:
        result = runner.invoke(app, ["check", str(fixtures_dir / "broken.view")])
        assert result.exit_code == 1
        assert "ERROR: view Broken:" in result.output
        assert "ERROR: view Untracked:" in result.output
        assert "1/3 components OK" in result.output

    def test_strict_fails_on_warnings(self, fixtures_dir: Path) -> None:
        source = str(fixtures_dir / "warnings.view")
        assert runner.invoke(app, ["check", source]).exit_code == 0
        result = runner.invoke(app, ["check", "--strict", source])
        assert result.exit_code == 1
        assert "WARNING: view Modes:" in result.output

    def test_missing_file(self, tmp_path: Path) -> None:
        result = runner.invoke(app, ["check", str(tmp_path / "missing.view")])
        assert result.exit_code == 1
        assert "Error:" in result.output


class TestCompile:
    """Tests for `viewforge compile`."""

    def test_writes_module_to_stdout(self, fixtures_dir: Path) -> None:
        result = runner.invoke(app, ["compile", str(fixtures_dir / "counter.view")])
        assert result.exit_code == 0
        assert "def init_counter_widgets(counter, sender)" in result.output

    def test_writes_module_to_file(self, fixtures_dir: Path, tmp_path: Path) -> None:
        output = tmp_path / "generated" / "counter_view.py"
        result = runner.invoke(
            app, ["compile", str(fixtures_dir / "counter.view"), "-o", str(output)]
        )
        assert result.exit_code == 0
        ast.parse(output.read_text())
        assert "2/2 components OK" in result.output

    def test_failed_components_left_out(self, fixtures_dir: Path, tmp_path: Path) -> None:
        output = tmp_path / "broken_view.py"
        result = runner.invoke(
            app, ["compile", str(fixtures_dir / "broken.view"), "--output", str(output)]
        )
        assert result.exit_code == 1
        module = output.read_text()
        assert "class Fine:" in module
        assert "class Untracked" not in module

    def test_explicit_config(self, fixtures_dir: Path, tmp_path: Path) -> None:
        config = tmp_path / "viewforge.toml"
        config.write_text('[compiler]\ntoolkit_import = "import fake_gtk as Gtk"\n')
        result = runner.invoke(
            app, ["compile", str(fixtures_dir / "counter.view"), "--config", str(config)]
        )
        assert result.exit_code == 0
        assert "import fake_gtk as Gtk" in result.output

    def test_invalid_config(self, fixtures_dir: Path, tmp_path: Path) -> None:
        config = tmp_path / "viewforge.toml"
        config.write_text("[compiler]\nunknown = 1\n")
        result = runner.invoke(
            app, ["compile", str(fixtures_dir / "counter.view"), "-c", str(config)]
        )
        assert result.exit_code == 1
        assert "Invalid compiler configuration" in result.output


class TestGlobalOptions:
    """Tests for options of the main callback."""

    def test_version(self) -> None:
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert "viewforge version" in result.output

    def test_no_arguments_shows_help(self) -> None:
        result = runner.invoke(app, [])
        assert "check" in result.output
        assert "compile" in result.output
