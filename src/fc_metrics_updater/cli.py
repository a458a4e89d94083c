"""Command-line interface for fc-metrics-updater"""

from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from . import __version__
from .config import load_config
from .exceptions import CommandFailedError, StepError, UpdaterError
from .logging_config import setup_logging
from .workflow import STEPS, MetricsUpdater, UpdateResult

PROG = "fc-metrics-updater"
EXAMPLE_URL = (
    "https://github.com/firecracker-microvm/firecracker/blob/master/"
    "src/logger/src/metrics.rs#L255-L688"
)

app = typer.Typer(
    name=PROG,
    help="Regenerate Kata's fc_metrics.go from Firecracker's metrics.rs",
    add_completion=False,
    rich_markup_mode="rich",
)

console = Console()


def usage() -> str:
    return f"Usage:  {PROG} <metrics.rs_URL>, for example: {PROG} {EXAMPLE_URL}"


def _print_summary(result: UpdateResult) -> None:
    descriptions = {step.name: step.description for step in STEPS}
    table = Table(show_header=True, header_style="bold")
    table.add_column("Step")
    table.add_column("Time", justify="right")
    for step in result.steps:
        table.add_row(descriptions.get(step.name, step.name), f"{step.elapsed:.2f}s")
    table.add_row("[bold]Total[/bold]", f"[bold]{result.elapsed:.2f}s[/bold]")
    console.print(table)


@app.command()
def main(
    urls: Optional[List[str]] = typer.Argument(
        None,
        help="URL of Firecracker's metrics.rs",
        show_default=False,
    ),
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Configuration file path (TOML format)",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
    project_dir: Optional[Path] = typer.Option(
        None,
        "--project-dir",
        "-d",
        help="fc-metrics-generator project directory (default: current directory)",
        file_okay=False,
        dir_okay=True,
    ),
    gopath: Optional[str] = typer.Option(
        None,
        "--gopath",
        help="Go workspace root holding kata-containers (default: $GOPATH)",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose (DEBUG) logging",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        help="Only print errors and the final result",
    ),
    log_file: Optional[Path] = typer.Option(
        None,
        "--log-file",
        help="Append a DEBUG log of the run, including tool output, to this file",
        dir_okay=False,
    ),
    version: bool = typer.Option(
        False,
        "--version",
        help="Show version and exit",
    ),
) -> None:
    """
    Build fc-metrics-generator, download [bold]metrics.rs[/bold] and
    regenerate [bold]fc_metrics.go[/bold].

    Examples:
      fc-metrics-updater https://github.com/firecracker-microvm/firecracker/blob/master/src/logger/src/metrics.rs
      fc-metrics-updater -d ~/src/fc-metrics-generator --gopath ~/go URL
    """
    if version:
        console.print(f"[bold cyan]{PROG}[/bold cyan] version [green]{__version__}[/green]")
        raise typer.Exit(0)

    if not urls or len(urls) != 1:
        console.print(usage(), markup=False, highlight=False, soft_wrap=True)
        raise typer.Exit(0)

    if verbose and quiet:
        console.print("[red]Error:[/red] --verbose and --quiet are mutually exclusive")
        raise typer.Exit(1)

    logger = setup_logging(
        verbose=verbose, quiet=quiet, log_file=str(log_file) if log_file is not None else None
    )

    try:
        overrides = {
            "project_dir": str(project_dir) if project_dir is not None else None,
            "workspace_root": gopath,
            "verbose": verbose,
            "quiet": quiet,
        }
        settings = load_config(config_file=config, **overrides)
        logger.debug(f"Loaded config: {settings}")

        def progress(message: str) -> None:
            if settings.verbosity != "quiet":
                console.print(message, markup=False, highlight=False, soft_wrap=True)

        updater = MetricsUpdater(settings, on_progress=progress)
        result = updater.run(urls[0])

        if settings.verbosity == "verbose":
            _print_summary(result)

        console.print(
            f"[green]generated file saved to {escape(str(result.target))}[/green]", soft_wrap=True
        )

    except StepError as e:
        logger.debug(e.to_json())
        console.print(f"[red]Error:[/red] {escape(str(e))}", soft_wrap=True)
        if isinstance(e, CommandFailedError) and e.stderr.strip():
            console.print(escape(e.stderr.rstrip()), style="dim", highlight=False)
        if e.recovery_hint:
            console.print(f"[yellow]Hint:[/yellow] {escape(e.recovery_hint)}")
        raise typer.Exit(1)

    except UpdaterError as e:
        logger.error(f"{e.__class__.__name__}: {e}")
        console.print(f"[red]Error:[/red] {escape(str(e))}", soft_wrap=True)
        raise typer.Exit(1)

    except KeyboardInterrupt:
        logger.info("Update interrupted by user")
        console.print("\n[yellow]Update interrupted[/yellow]")
        raise typer.Exit(130)


if __name__ == "__main__":
    app()
