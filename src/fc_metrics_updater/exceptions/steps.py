"""Workflow step errors with error codes.

Error Code Convention:
    FM1xx - Build errors
    FM2xx - Download errors
    FM3xx - Generate errors
    FM4xx - Format errors
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any, Optional, Sequence

from .base import UpdaterError

# How much of a failing command's stderr is kept on the exception
STDERR_TAIL_CHARS = 2000


class ErrorCode(Enum):
    """Structured error codes for observability and debugging."""

    # Build errors (FM1xx)
    FM100 = "FM100"  # Build tool not found or not executable
    FM101 = "FM101"  # Build command failed

    # Download errors (FM2xx)
    FM200 = "FM200"  # Fetch tool not found or not executable
    FM201 = "FM201"  # Fetch command failed
    FM202 = "FM202"  # Download directory not writable

    # Generate errors (FM3xx)
    FM300 = "FM300"  # Generator binary not found or not executable
    FM301 = "FM301"  # Generator exited non-zero
    FM302 = "FM302"  # Destination file not writable

    # Format errors (FM4xx)
    FM400 = "FM400"  # Formatter not found or not executable
    FM401 = "FM401"  # Formatter exited non-zero


class StepError(UpdaterError):
    """Base class for failures of a single workflow step.

    Attributes:
        step: Name of the step that failed (build, download, generate, format)
        code: Structured error code for categorization
        recovery_hint: Suggested fix for the user
    """

    def __init__(
        self,
        step: str,
        code: ErrorCode,
        message: str,
        details: Optional[dict[str, str]] = None,
        recovery_hint: Optional[str] = None,
    ):
        super().__init__(message, details={"step": step, **(details or {})})
        self.step = step
        self.code = code
        self.recovery_hint = recovery_hint

    def __str__(self) -> str:
        return f"[{self.code.value}] {super().__str__()}"

    def to_json(self) -> dict[str, Any]:
        """Structured logging format."""
        return {
            "error_code": self.code.value,
            "step": self.step,
            "message": self.message,
            "context": self.details,
            "recovery_hint": self.recovery_hint,
        }


class ToolNotFoundError(StepError):
    """Raised when a step's executable cannot be found."""

    def __init__(self, step: str, code: ErrorCode, executable: str):
        super().__init__(
            step,
            code,
            f"Executable not found: {executable}",
            details={"executable": executable},
            recovery_hint=f"Install {executable} or put it on PATH",
        )
        self.executable = executable


class CommandFailedError(StepError):
    """Raised when a step's command exits with a non-zero status."""

    def __init__(
        self,
        step: str,
        code: ErrorCode,
        argv: Sequence[str],
        returncode: int,
        stderr: str = "",
    ):
        command = " ".join(argv)
        super().__init__(
            step,
            code,
            f"Command failed with exit status {returncode}: {command}",
            details={"returncode": str(returncode)},
        )
        self.argv = list(argv)
        self.returncode = returncode
        self.stderr = stderr[-STDERR_TAIL_CHARS:] if stderr else ""


class OutputFileError(StepError):
    """Raised when a step cannot create the file it writes to."""

    def __init__(self, step: str, code: ErrorCode, path: Path, reason: str):
        super().__init__(
            step,
            code,
            f"Cannot write to {path}",
            details={"path": str(path), "reason": reason},
        )
        self.path = path
        self.reason = reason


class ToolNotExecutableError(StepError):
    """Raised when a step's executable exists but cannot be started."""

    def __init__(self, step: str, code: ErrorCode, executable: str, reason: str):
        super().__init__(
            step,
            code,
            f"Cannot execute {executable}: {reason}",
            details={"executable": executable, "reason": reason},
            recovery_hint=f"Check that {executable} is an executable file",
        )
        self.executable = executable
        self.reason = reason
