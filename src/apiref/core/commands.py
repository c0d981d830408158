"""External command execution.

Every documentation tool (dotnet, TypeDoc) is run through ``run_command``
so failures surface uniformly as ``CommandError``.
"""

import logging
import shlex
import subprocess
from collections.abc import Sequence
from pathlib import Path

logger = logging.getLogger(__name__)


class CommandError(RuntimeError):
    """An external command failed, timed out, or could not be started."""

    def __init__(self, message: str, args: Sequence[str], returncode: int | None) -> None:
        super().__init__(message)
        self.command = list(args)
        self.returncode = returncode


def format_command(args: Sequence[str | Path]) -> str:
    """Render a command line the way a shell would accept it."""
    return shlex.join(str(arg) for arg in args)


def run_command(
    args: Sequence[str | Path],
    *,
    cwd: Path | None = None,
    timeout: float | None = None,
) -> str:
    """Log a command and execute it synchronously.

    Args:
        args: Command and arguments (no shell interpretation)
        cwd: Working directory for the command
        timeout: Seconds to wait before killing the command

    Returns:
        Captured standard output

    Raises:
        CommandError: If the command exits non-zero, times out, or is missing
    """
    argv = [str(arg) for arg in args]
    command_line = format_command(argv)
    logger.info(command_line)

    try:
        result = subprocess.run(
            argv,
            cwd=cwd,
            capture_output=True,
            text=True,
            timeout=timeout,
            check=False,
        )
    except subprocess.TimeoutExpired as e:
        raise CommandError(
            f"Command timed out after {timeout:g} seconds: {command_line}",
            argv,
            None,
        ) from e
    except FileNotFoundError as e:
        raise CommandError(f"Command not found: {argv[0]}", argv, 127) from e

    if result.stdout:
        logger.debug(result.stdout.rstrip())
    if result.returncode != 0:
        if result.stderr:
            logger.error(result.stderr.rstrip())
        raise CommandError(
            f"Command executed with status: {result.returncode}",
            argv,
            result.returncode,
        )
    if result.stderr:
        logger.debug(result.stderr.rstrip())

    return result.stdout
