"""CLI interface for apiref.

Command-line tool for generating the JavaScript and .NET API reference.
"""

import logging
import sys
from collections.abc import Callable
from pathlib import Path

import click

from apiref.config import Config
from apiref.core.commands import CommandError
from apiref.core.dotnet import build_dotnet_docs
from apiref.core.typedoc import build_js_docs

logger = logging.getLogger(__name__)

config_option = click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, path_type=Path, dir_okay=False),
    default=None,
    help="Path to configuration file (default: auto-discover apiref.toml)",
)
timeout_option = click.option(
    "--timeout",
    type=click.FloatRange(min=0, min_open=True),
    default=None,
    help="Seconds to allow each external tool to run (overrides config)",
)
output_dir_option = click.option(
    "--output-dir",
    "-o",
    type=click.Path(path_type=Path, file_okay=False),
    default=None,
    help="Output directory (overrides config)",
)


@click.group()
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose output (show external tool output)",
)
def cli(verbose: bool) -> None:
    """apiref - API reference generator for JavaScript and .NET."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        stream=sys.stderr,
    )


@cli.command()
@config_option
@timeout_option
@output_dir_option
def js(config_path: Path | None, timeout: float | None, output_dir: Path | None) -> None:
    """Generate the JavaScript API reference."""
    config = _load_config(config_path, timeout=timeout, js_output_dir=output_dir)
    _run(lambda: _build_js(config))


@cli.command()
@config_option
@timeout_option
@output_dir_option
def dotnet(config_path: Path | None, timeout: float | None, output_dir: Path | None) -> None:
    """Generate the .NET API reference."""
    config = _load_config(config_path, timeout=timeout, dotnet_output_dir=output_dir)
    _run(lambda: _build_dotnet(config))


@cli.command()
@config_option
@timeout_option
def build(config_path: Path | None, timeout: float | None) -> None:
    """Generate both the JavaScript and the .NET API reference."""
    config = _load_config(config_path, timeout=timeout)

    def build_all() -> None:
        _build_js(config)
        _build_dotnet(config)

    _run(build_all)


def _load_config(
    config_path: Path | None,
    *,
    timeout: float | None = None,
    js_output_dir: Path | None = None,
    dotnet_output_dir: Path | None = None,
) -> Config:
    """Load configuration or exit with error.

    Args:
        config_path: Explicit config file, or None to auto-discover
        timeout: Override tools.timeout
        js_output_dir: Override js.output_dir
        dotnet_output_dir: Override dotnet.output_dir

    Returns:
        Effective configuration

    Raises:
        SystemExit: If the configuration is invalid
    """
    try:
        config = Config.load(config_path)
    except (OSError, ValueError) as e:
        click.echo(click.style(f"Error: {e}", fg="red"), err=True)
        sys.exit(1)
    if config.config_path is not None:
        logger.debug(f"Using configuration from {config.config_path}")
    return config.with_overrides(
        timeout=timeout,
        js_output_dir=js_output_dir,
        dotnet_output_dir=dotnet_output_dir,
    )


def _build_js(config: Config) -> None:
    index_path = build_js_docs(config.js, timeout=config.tools.timeout)
    click.echo(f"JavaScript API reference: {index_path}")


def _build_dotnet(config: Config) -> None:
    pages = build_dotnet_docs(config.dotnet, timeout=config.tools.timeout)
    click.echo(f".NET API reference: {len(pages)} pages in {config.dotnet.output_dir}")


def _run(action: Callable[[], None]) -> None:
    """Run a build step, reporting failures and exiting non-zero.

    A failing external command's exit status becomes the process exit status.
    """
    try:
        action()
    except CommandError as e:
        click.echo(click.style(f"Error: {e}", fg="red"), err=True)
        sys.exit(e.returncode or 1)
    except (OSError, RuntimeError, ValueError) as e:
        click.echo(click.style(f"Error: {e}", fg="red"), err=True)
        sys.exit(1)

    click.echo(click.style("Done!", fg="green", bold=True))


if __name__ == "__main__":
    cli()
