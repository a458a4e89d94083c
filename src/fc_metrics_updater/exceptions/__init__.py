"""Exception hierarchy for fc-metrics-updater."""

from .base import UpdaterError
from .config import (
    ConfigurationError,
    InvalidConfigError,
    InvalidPathError,
)
from .steps import (
    CommandFailedError,
    ErrorCode,
    OutputFileError,
    StepError,
    ToolNotExecutableError,
    ToolNotFoundError,
)

__all__ = [
    "UpdaterError",
    "ConfigurationError",
    "InvalidPathError",
    "InvalidConfigError",
    "ErrorCode",
    "StepError",
    "ToolNotFoundError",
    "ToolNotExecutableError",
    "CommandFailedError",
    "OutputFileError",
]
