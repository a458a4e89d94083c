"""Run the external tools behind each workflow step via subprocess."""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import IO, Optional, Sequence

from .exceptions import CommandFailedError, ErrorCode, ToolNotExecutableError, ToolNotFoundError
from .logging_config import get_logger, log_tool_output

logger = get_logger(__name__)


def expand_command(template: Sequence[str], **values: object) -> list[str]:
    """Fill ``{name}`` placeholders in every argument of a command template.

    Only the given names are replaced. Other braces pass through unchanged.

    Example:
        >>> expand_command(["go", "fmt", "{target}"], target="/tmp/x.go")
        ['go', 'fmt', '/tmp/x.go']
    """
    argv = []
    for arg in template:
        for name, value in values.items():
            arg = arg.replace("{" + name + "}", str(value))
        argv.append(arg)
    return argv


def run_command(
    argv: Sequence[str],
    *,
    step: str,
    not_found: ErrorCode,
    failed: ErrorCode,
    cwd: Optional[Path] = None,
    stdout: Optional[IO[str]] = None,
) -> subprocess.CompletedProcess:
    """Run one external command and block until it exits.

    Args:
        argv: Command and arguments
        step: Workflow step name, used in errors
        not_found: Error code when the executable is missing or cannot start
        failed: Error code when the command exits non-zero
        cwd: Working directory for the command
        stdout: Open file to receive the command's stdout; captured otherwise

    Returns:
        The completed process

    Raises:
        ToolNotFoundError: If argv[0] does not exist
        ToolNotExecutableError: If argv[0] exists but cannot be started
        CommandFailedError: If the command exits with a non-zero status
    """
    logger.debug("running: %s (cwd=%s)", " ".join(argv), cwd, extra={"step": step})
    try:
        result = subprocess.run(
            list(argv),
            cwd=str(cwd) if cwd is not None else None,
            stdout=stdout if stdout is not None else subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            check=False,
        )
    except FileNotFoundError:
        raise ToolNotFoundError(step, not_found, argv[0]) from None
    except OSError as e:
        # Permission denied, exec format error, a file used as a directory
        raise ToolNotExecutableError(step, not_found, argv[0], e.strerror or str(e)) from e

    if result.returncode != 0:
        stderr = result.stderr or ""
        log_tool_output(logger, step, stderr)
        raise CommandFailedError(step, failed, argv, result.returncode, stderr)

    if result.stderr:
        log_tool_output(logger, step, result.stderr)
    return result
