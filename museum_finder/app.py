"""Typer CLI entrypoint for museum-finder."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, Optional

import typer
import yaml
from rich import box
from rich.console import Console
from rich.table import Table

from .config import ConfigRepository, PipelineConfig
from .engine import SinkError
from .logging_conf import configure_logging, default_log_dir, tail_log
from .orchestrator import Orchestrator, PipelineOutcome
from .sources import open_reader

app = typer.Typer(
    help="Find museums with art-related web pages in OpenStreetMap extracts.",
    no_args_is_help=True,
    rich_markup_mode=None,
)
config_app = typer.Typer(
    name="config",
    help="Pipeline configuration commands.",
    no_args_is_help=True,
    rich_markup_mode=None,
)
log_app = typer.Typer(
    name="log",
    help="Log inspection commands.",
    no_args_is_help=True,
    rich_markup_mode=None,
)

console = Console()


class OutputFormat(str, Enum):
    TXT = "txt"
    JSONL = "jsonl"


@dataclass
class AppState:
    repository: ConfigRepository
    orchestrator_factory: Callable[[PipelineConfig], Orchestrator]


def build_state(verbose: bool) -> AppState:
    configure_logging(verbose)
    return AppState(repository=ConfigRepository(), orchestrator_factory=Orchestrator)


def _get_state(ctx: typer.Context) -> AppState:
    state = ctx.obj
    if not isinstance(state, AppState):
        raise typer.Exit(code=1)
    return state


def _apply_overrides(
    config: PipelineConfig,
    *,
    fmt: OutputFormat | None,
    max_units: int | None,
    max_fetches: int | None,
    timeout: float | None,
    user_agent: str | None,
) -> PipelineConfig:
    data = config.model_dump()
    if fmt is not None:
        data["output_format"] = fmt.value
    if max_units is not None:
        data["concurrency"]["max_units"] = max_units
    if max_fetches is not None:
        data["concurrency"]["max_fetches_per_unit"] = max_fetches
    if timeout is not None:
        data["http"]["timeout"] = timeout
    if user_agent is not None:
        data["http"]["user_agent"] = user_agent
    return PipelineConfig.model_validate(data)


def _render_outcome_table(outcome: PipelineOutcome, output_path: Path) -> Table:
    table = Table(title="Run summary", box=box.SIMPLE_HEAVY, show_header=True)
    table.add_column("Metric", style="bold")
    table.add_column("Value", justify="right")
    table.add_row("Records scanned", str(outcome.scanned))
    table.add_row("Admitted", str(outcome.admitted))
    table.add_row("Written", f"[green]{outcome.emitted}[/green]")
    table.add_row("Failed units", f"[red]{outcome.failed}[/red]" if outcome.failed else "0")
    if outcome.dropped:
        table.add_row("Dropped after shutdown", f"[yellow]{outcome.dropped}[/yellow]")
    table.add_row("Output", str(output_path))
    return table


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", help="Enable debug logging.", is_flag=True),
) -> None:
    ctx.obj = build_state(verbose)


@app.command("run")
def run_pipeline(
    ctx: typer.Context,
    input_path: Path = typer.Argument(..., help="Dataset file (.osm.pbf, .jsonl or .ndjson)."),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Append results to this file."),
    fmt: Optional[OutputFormat] = typer.Option(None, "--format", help="Output block format."),
    max_units: Optional[int] = typer.Option(None, "--max-units", help="Records probed at once."),
    max_fetches: Optional[int] = typer.Option(
        None, "--max-fetches", help="Concurrent fetches per record (default: all candidates)."
    ),
    timeout: Optional[float] = typer.Option(None, "--timeout", help="Per-request timeout in seconds."),
    user_agent: Optional[str] = typer.Option(None, "--user-agent", help="User-Agent header for probes."),
    config_file: Optional[Path] = typer.Option(None, "--config", help="Pipeline config file."),
    quiet: bool = typer.Option(False, "--quiet", help="Only print the final tally.", is_flag=True),
) -> None:
    """Run the extraction pipeline over a dataset file."""

    state = _get_state(ctx)
    try:
        config = state.repository.load_pipeline_config(config_file)
        config = _apply_overrides(
            config,
            fmt=fmt,
            max_units=max_units,
            max_fetches=max_fetches,
            timeout=timeout,
            user_agent=user_agent,
        )
    except (ValueError, FileNotFoundError) as exc:
        console.print(f"[red]Invalid configuration: {exc}[/red]")
        raise typer.Exit(code=1)

    try:
        reader = open_reader(input_path)
    except (ValueError, FileNotFoundError) as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1)

    output_path = output or state.repository.output_path(config)
    orchestrator = state.orchestrator_factory(config)
    try:
        outcome = orchestrator.execute(reader, output_path)
    except SinkError as exc:
        console.print(f"[red]Run aborted: {exc}[/red]")
        raise typer.Exit(code=1)
    except (RuntimeError, OSError) as exc:
        console.print(f"[red]Reading {input_path} failed: {exc}[/red]")
        raise typer.Exit(code=1)

    if not quiet:
        console.print(_render_outcome_table(outcome, output_path))
    console.print(outcome.summary_line())


@config_app.command("show")
def config_show(
    ctx: typer.Context,
    config_file: Optional[Path] = typer.Option(None, "--config", help="Pipeline config file."),
) -> None:
    """Print the effective pipeline configuration."""

    state = _get_state(ctx)
    try:
        config = state.repository.load_pipeline_config(config_file)
    except (ValueError, FileNotFoundError) as exc:
        console.print(f"[red]Invalid configuration: {exc}[/red]")
        raise typer.Exit(code=1)
    text = yaml.safe_dump(config.model_dump(mode="json"), allow_unicode=True, sort_keys=False)
    console.print(text, markup=False, highlight=False)


@config_app.command("init")
def config_init(
    ctx: typer.Context,
    path: Optional[Path] = typer.Option(None, "--path", help="Write to this file instead of the default."),
    force: bool = typer.Option(False, "--force", help="Overwrite an existing file.", is_flag=True),
) -> None:
    """Write the default pipeline configuration."""

    state = _get_state(ctx)
    target = path or state.repository.locator.pipeline_config_path()
    if target.exists() and not force:
        console.print(f"[yellow]{target} already exists; pass --force to overwrite.[/yellow]")
        raise typer.Exit(code=1)
    written = state.repository.save_pipeline_config(PipelineConfig(), path)
    console.print(f"[green]Configuration written to {written}[/green]")


@log_app.command("show")
def log_show(
    lines: int = typer.Option(50, "--lines", "-n", help="Number of lines to show."),
    errors: bool = typer.Option(False, "--errors", help="Show the error log.", is_flag=True),
) -> None:
    """Print the tail of the pipeline log."""

    log_path = default_log_dir() / ("error.log" if errors else "museum_finder.log")
    entries = tail_log(log_path, lines)
    if not entries:
        console.print(f"[dim]No log entries in {log_path}[/dim]")
        return
    for entry in entries:
        console.print(entry.rstrip("\n"), markup=False, highlight=False)


app.add_typer(config_app)
app.add_typer(log_app)


__all__ = ["app", "AppState", "build_state"]
