"""Tests for the apiref CLI."""

from pathlib import Path
from unittest.mock import patch

import pytest
from apiref.cli import cli
from apiref.core.commands import CommandError
from click.testing import CliRunner


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    """Config file with one .NET project and a short timeout."""
    path = tmp_path / "apiref.toml"
    path.write_text('[tools]\ntimeout = 120\n\n[[dotnet.projects]]\nname = "Core"\n')
    return path


class TestJsCommand:
    """Tests for the js command."""

    def test_success(self, config_file: Path, tmp_path: Path) -> None:
        """Report the generated page and finish with Done!."""
        runner = CliRunner()
        index_path = tmp_path / "docs/reference/js/index.md"

        with patch("apiref.cli.build_js_docs", return_value=index_path) as build:
            result = runner.invoke(cli, ["js", "-c", str(config_file)])

        assert result.exit_code == 0
        assert f"JavaScript API reference: {index_path}" in result.output
        assert "Done!" in result.output
        settings = build.call_args.args[0]
        assert settings.output_dir == tmp_path / "docs/reference/js"
        assert build.call_args.kwargs["timeout"] == 120.0

    def test_overrides(self, config_file: Path, tmp_path: Path) -> None:
        """Pass --timeout and --output-dir through to the build."""
        runner = CliRunner()
        out = tmp_path / "site"

        with patch("apiref.cli.build_js_docs", return_value=out / "index.md") as build:
            result = runner.invoke(
                cli,
                ["js", "-c", str(config_file), "--timeout", "5", "-o", str(out)],
            )

        assert result.exit_code == 0
        assert build.call_args.args[0].output_dir == out
        assert build.call_args.kwargs["timeout"] == 5.0

    def test_command_failure_exit_status(self, config_file: Path) -> None:
        """Exit with the failing tool's status."""
        runner = CliRunner()
        error = CommandError("Command executed with status: 2", ["npx", "typedoc"], 2)

        with patch("apiref.cli.build_js_docs", side_effect=error):
            result = runner.invoke(cli, ["js", "-c", str(config_file)])

        assert result.exit_code == 2
        assert "Error: Command executed with status: 2" in result.output
        assert "Done!" not in result.output

    def test_timeout_exits_one(self, config_file: Path) -> None:
        """Exit with 1 when a tool has no exit status."""
        runner = CliRunner()
        error = CommandError("Command timed out after 5 seconds: npx typedoc", ["npx"], None)

        with patch("apiref.cli.build_js_docs", side_effect=error):
            result = runner.invoke(cli, ["js", "-c", str(config_file)])

        assert result.exit_code == 1
        assert "timed out" in result.output

    def test_missing_entry_point(self, config_file: Path) -> None:
        """Exit with 1 and show the missing file."""
        runner = CliRunner()
        error = FileNotFoundError("File not found: src/node-api-dotnet/index.d.ts")

        with patch("apiref.cli.build_js_docs", side_effect=error):
            result = runner.invoke(cli, ["js", "-c", str(config_file)])

        assert result.exit_code == 1
        assert "Error: File not found" in result.output

    def test_non_positive_timeout_rejected(self, config_file: Path) -> None:
        """Reject a zero timeout before building."""
        runner = CliRunner()

        with patch("apiref.cli.build_js_docs") as build:
            result = runner.invoke(cli, ["js", "-c", str(config_file), "--timeout", "0"])

        assert result.exit_code == 2
        build.assert_not_called()


class TestDotnetCommand:
    """Tests for the dotnet command."""

    def test_success(self, config_file: Path, tmp_path: Path) -> None:
        """Report the number of pages written."""
        runner = CliRunner()
        pages = [tmp_path / "index.md", tmp_path / "Core.md"]

        with patch("apiref.cli.build_dotnet_docs", return_value=pages) as build:
            result = runner.invoke(cli, ["dotnet", "-c", str(config_file)])

        assert result.exit_code == 0
        assert ".NET API reference: 2 pages in" in result.output
        assert [p.name for p in build.call_args.args[0].projects] == ["Core"]

    def test_output_dir_override(self, config_file: Path, tmp_path: Path) -> None:
        """Write to the directory given on the command line."""
        runner = CliRunner()
        out = tmp_path / "site" / "dotnet"

        with patch("apiref.cli.build_dotnet_docs", return_value=[]) as build:
            result = runner.invoke(cli, ["dotnet", "-c", str(config_file), "-o", str(out)])

        assert result.exit_code == 0
        assert build.call_args.args[0].output_dir == out

    def test_no_projects(self, config_file: Path) -> None:
        """Exit with 1 when the build rejects the settings."""
        runner = CliRunner()

        with patch(
            "apiref.cli.build_dotnet_docs",
            side_effect=ValueError("No .NET projects configured"),
        ):
            result = runner.invoke(cli, ["dotnet", "-c", str(config_file)])

        assert result.exit_code == 1
        assert "Error: No .NET projects configured" in result.output


class TestBuildCommand:
    """Tests for the build command."""

    def test_runs_js_then_dotnet(self, config_file: Path, tmp_path: Path) -> None:
        """Build the JavaScript reference before the .NET reference."""
        runner = CliRunner()
        calls: list[str] = []

        def js(*args, **kwargs):
            calls.append("js")
            return tmp_path / "index.md"

        def dotnet(*args, **kwargs):
            calls.append("dotnet")
            return []

        with (
            patch("apiref.cli.build_js_docs", side_effect=js),
            patch("apiref.cli.build_dotnet_docs", side_effect=dotnet),
        ):
            result = runner.invoke(cli, ["build", "-c", str(config_file)])

        assert result.exit_code == 0
        assert calls == ["js", "dotnet"]

    def test_stops_after_js_failure(self, config_file: Path) -> None:
        """Skip the .NET reference when the JavaScript reference fails."""
        runner = CliRunner()
        error = CommandError("Command executed with status: 1", ["npx"], 1)

        with (
            patch("apiref.cli.build_js_docs", side_effect=error),
            patch("apiref.cli.build_dotnet_docs") as dotnet,
        ):
            result = runner.invoke(cli, ["build", "-c", str(config_file)])

        assert result.exit_code == 1
        dotnet.assert_not_called()


class TestConfigErrors:
    """Tests for configuration errors reported by the CLI."""

    def test_missing_config_file(self, tmp_path: Path) -> None:
        """Reject a config path that does not exist."""
        runner = CliRunner()

        result = runner.invoke(cli, ["js", "-c", str(tmp_path / "missing.toml")])

        assert result.exit_code != 0

    def test_invalid_config(self, tmp_path: Path) -> None:
        """Exit with 1 and name the invalid key."""
        runner = CliRunner()
        config_file = tmp_path / "apiref.toml"
        config_file.write_text("[tools]\ntimeout = -1\n")

        with patch("apiref.cli.build_js_docs") as build:
            result = runner.invoke(cli, ["js", "-c", str(config_file)])

        assert result.exit_code == 1
        assert "tools.timeout must be positive" in result.output
        build.assert_not_called()
