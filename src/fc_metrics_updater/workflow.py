"""Workflow - the four steps that refresh fc_metrics.go.

Executes, strictly in order:
    1. build    - build fc-metrics-generator inside the generator project
    2. download - fetch metrics.rs into the project's build output directory
    3. generate - run the generator, redirecting stdout into fc_metrics.go
    4. format   - run go fmt over the generated file

The first failing step raises a StepError and nothing after it runs.

Usage:
    from fc_metrics_updater import MetricsUpdater, load_config

    updater = MetricsUpdater(load_config())
    result = updater.run("https://github.com/.../metrics.rs")
    print(result.target)
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional

from .commands import expand_command, run_command
from .config import UpdaterConfig
from .exceptions import ErrorCode, InvalidConfigError, InvalidPathError, OutputFileError
from .logging_config import get_logger

logger = get_logger(__name__)

ProgressCallback = Callable[[str], None]


@dataclass(frozen=True)
class Step:
    """A step in the update workflow."""

    name: str
    description: str


STEPS = (
    Step("build", "Building the generator"),
    Step("download", "Downloading metrics.rs"),
    Step("generate", "Generating Go source"),
    Step("format", "Formatting Go source"),
)


@dataclass
class StepResult:
    """Outcome of one completed step."""

    name: str
    elapsed: float


@dataclass
class UpdateResult:
    """The output of a full update run.

    Attributes:
        url:    URL metrics.rs was downloaded from.
        source: Local copy of metrics.rs.
        target: Generated and formatted Go file.
        steps:  Completed steps, in execution order.
    """

    url: str
    source: Path
    target: Path
    steps: List[StepResult] = field(default_factory=list)

    @property
    def elapsed(self) -> float:
        return sum(s.elapsed for s in self.steps)


def destination_path(config: UpdaterConfig) -> Path:
    """Absolute path of the generated Go file inside the Go workspace.

    A relative workspace root is taken relative to the current directory.

    Raises:
        InvalidConfigError: If no workspace root (GOPATH) is configured.
    """
    if not config.workspace_root:
        raise InvalidConfigError(
            "workspace_root", config.workspace_root, "GOPATH is not set"
        )
    # Absolute, since later steps run with cwd=project_dir
    return Path(config.workspace_root).expanduser().resolve() / config.destination


class MetricsUpdater:
    """Build the generator, fetch metrics.rs, generate and format fc_metrics.go."""

    def __init__(self, config: UpdaterConfig, on_progress: Optional[ProgressCallback] = None):
        self.config = config
        self.on_progress = on_progress
        self.project_path = config.project_path
        if not self.project_path.is_dir():
            raise InvalidPathError(self.project_path, "generator project directory does not exist")
        self.target = destination_path(config)

    def _report(self, step: str, message: str) -> None:
        logger.info(message, extra={"step": step})
        if self.on_progress is not None:
            self.on_progress(message)

    def build(self) -> None:
        """Build the generator binary."""
        self._report("build", f"building {self.config.generator_name}")
        run_command(
            self.config.build_command,
            step="build",
            not_found=ErrorCode.FM100,
            failed=ErrorCode.FM101,
            cwd=self.project_path,
        )

    def download(self, url: str) -> Path:
        """Fetch metrics.rs from ``url`` into the project's download path."""
        local_file = self.config.download_file
        self._report("download", f"downloading {url}")
        try:
            local_file.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise OutputFileError("download", ErrorCode.FM202, local_file.parent, str(e))

        argv = expand_command(self.config.fetch_command, url=url, output=local_file)
        run_command(
            argv,
            step="download",
            not_found=ErrorCode.FM200,
            failed=ErrorCode.FM201,
            cwd=self.project_path,
        )
        self._report("download", f"{url} is saved to {self.config.download_path}")
        return local_file

    def generate(self, source: Path) -> Path:
        """Run the generator on ``source`` and write its output to the target.

        The target is truncated before the generator starts, so a failed
        run leaves it empty or partial.
        """
        self._report("generate", f"generating {self.config.download_path}")
        binary = self.config.generator_binary
        try:
            handle = open(self.target, "w", encoding="utf-8")
        except OSError as e:
            raise OutputFileError("generate", ErrorCode.FM302, self.target, e.strerror or str(e))

        with handle:
            run_command(
                [str(binary), str(source)],
                step="generate",
                not_found=ErrorCode.FM300,
                failed=ErrorCode.FM301,
                cwd=self.project_path,
                stdout=handle,
            )
        return self.target

    def format(self, target: Path) -> None:
        """Format the generated Go file in place."""
        self._report("format", f"formatting {target}")
        run_command(
            expand_command(self.config.format_command, target=target),
            step="format",
            not_found=ErrorCode.FM400,
            failed=ErrorCode.FM401,
            cwd=self.project_path,
        )

    def run(self, url: str) -> UpdateResult:
        """Run build, download, generate and format in order."""
        result = UpdateResult(url=url, source=self.config.download_file, target=self.target)

        start = time.perf_counter()
        self.build()
        result.steps.append(StepResult("build", time.perf_counter() - start))

        start = time.perf_counter()
        result.source = self.download(url)
        result.steps.append(StepResult("download", time.perf_counter() - start))

        start = time.perf_counter()
        self.generate(result.source)
        result.steps.append(StepResult("generate", time.perf_counter() - start))

        start = time.perf_counter()
        self.format(self.target)
        result.steps.append(StepResult("format", time.perf_counter() - start))

        logger.debug(
            "update finished in %.2fs: %s",
            result.elapsed,
            ", ".join(f"{s.name}={s.elapsed:.2f}s" for s in result.steps),
        )
        return result
