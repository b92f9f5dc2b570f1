"""CLI entry point for autorcc."""

from __future__ import annotations

import logging
from pathlib import Path

import typer
from rich import print as rprint
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from autorcc.diagnostics import Diagnostics
from autorcc.errors import AutoRccError
from autorcc.freshness.models import Outcome
from autorcc.job import AutoRccJob, run_job

app = typer.Typer(
    name="autorcc",
    help="Regenerate rcc resource outputs only when they are out of date.",
)

_OUTCOME_STYLE = {
    Outcome.skip: "green",
    Outcome.regenerate: "yellow",
    Outcome.fail: "red",
}


def _setup_logging(debug: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(message)s",
        handlers=[RichHandler(show_time=False, show_path=False, markup=False)],
        force=True,
    )


def _load_job(info_file: Path, config: str) -> AutoRccJob:
    try:
        return AutoRccJob.from_info_file(info_file, config)
    except AutoRccError as e:
        rprint(f"[red]Error:[/red] {escape(e.message)}")
        raise typer.Exit(1)


@app.command()
def run(
    info_file: Path = typer.Argument(..., help="Job info file (YAML)"),
    config: str = typer.Option("", "--config", "-c", help="Build configuration name"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Explain decisions"),
    debug: bool = typer.Option(False, "--debug", help="Debug logging"),
) -> None:
    """Run the job: regenerate the rcc output if it is out of date."""
    _setup_logging(debug)
    diagnostics = Diagnostics.from_env()
    if verbose:
        diagnostics.raise_verbosity(1)
    if not run_job(info_file, config, diagnostics=diagnostics):
        raise typer.Exit(1)


@app.command()
def fingerprint(
    info_file: Path = typer.Argument(..., help="Job info file (YAML)"),
    config: str = typer.Option("", "--config", "-c", help="Build configuration name"),
) -> None:
    """Print the settings fingerprint recorded in the ledger."""
    job = _load_job(info_file, config)
    print(job.fingerprint)


@app.command()
def status(
    info_file: Path = typer.Argument(..., help="Job info file (YAML)"),
    config: str = typer.Option("", "--config", "-c", help="Build configuration name"),
) -> None:
    """Preview the decision without locking, writing or compiling."""
    _setup_logging()
    job = _load_job(info_file, config)
    preview = job.preview()
    decision = preview.decision
    settings = job.settings

    table = Table(title=f"rcc job ({settings.qrc_name})")
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("Output", escape(settings.output))
    if settings.multi_config:
        table.add_row("Wrapper", escape(settings.public_output))
    table.add_row("Settings file", escape(settings.settings_file))
    table.add_row("Settings", "changed" if preview.settings_changed else "unchanged")
    style = _OUTCOME_STYLE[decision.outcome]
    table.add_row("Decision", f"[{style}]{decision.outcome.value}[/{style}]")
    if decision.reason:
        table.add_row("Reason", escape(decision.reason))
    rprint(table)

    if decision.failed:
        raise typer.Exit(1)
