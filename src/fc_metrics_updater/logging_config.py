"""
Logging configuration for fc-metrics-updater.

Log records go through rich on stderr, next to the progress lines the CLI
prints on stdout. Records about a workflow step carry a ``step`` attribute
(build, download, generate, format); the file log writes it as a column so
a run can be grepped per step.
"""

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "fc_metrics_updater"

FILE_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(step)s] %(message)s"


class StepFilter(logging.Filter):
    """Give every record a ``step`` attribute so formatters can rely on it."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "step"):
            record.step = "-"
        return True


def setup_logging(
    verbose: bool = False, quiet: bool = False, log_file: Optional[str] = None
) -> logging.Logger:
    """
    Configure logging for an update run.

    Args:
        verbose: Enable DEBUG level logging (includes child process stderr)
        quiet: Suppress all but ERROR level logging
        log_file: Optional file that receives every record at DEBUG level,
            whatever the console level is

    Returns:
        Configured logger instance for fc_metrics_updater
    """
    if quiet:
        level = logging.ERROR
    elif verbose:
        level = logging.DEBUG
    else:
        level = logging.WARNING

    console_handler = RichHandler(
        console=Console(stderr=True),
        rich_tracebacks=True,
        tracebacks_show_locals=verbose,
        markup=False,
        show_time=True,
        show_path=verbose,
    )
    console_handler.setLevel(level)
    handlers: list[logging.Handler] = [console_handler]

    if log_file:
        file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(FILE_LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        handlers.append(file_handler)

    for handler in handlers:
        handler.addFilter(StepFilter())

    # force=True so repeated CLI invocations in one process pick up new levels
    logging.basicConfig(format="%(message)s", datefmt="[%X]", handlers=handlers, force=True)

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG if log_file else level)

    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Get a logger instance for a specific module.

    Args:
        name: Module name (e.g., 'fc_metrics_updater.workflow')
              If None, returns the root fc_metrics_updater logger

    Returns:
        Logger instance
    """
    if name is None:
        return logging.getLogger(LOGGER_NAME)

    if not name.startswith(LOGGER_NAME):
        name = f"{LOGGER_NAME}.{name}"

    return logging.getLogger(name)


def log_tool_output(
    logger: logging.Logger, step: str, output: str, level: int = logging.DEBUG
) -> None:
    """Log a child process's output one record per line, tagged with its step.

    Blank lines are dropped.
    """
    if not logger.isEnabledFor(level):
        return
    for line in output.splitlines():
        if line.strip():
            logger.log(level, "%s: %s", step, line.rstrip(), extra={"step": step})
