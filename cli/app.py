from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import typer

from cli.client import ApiClient
from cli.config import CLIConfig, load_config
from cli.render import render_latest, render_records, render_stats


@dataclass
class CLIState:
    config: CLIConfig
    client: ApiClient


app = typer.Typer(
    help="Utilities for querying the temperature ingestion service.",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        raise typer.Exit(code=1, message="CLI state is uninitialized.")
    return state


@app.callback()
def main(
    ctx: typer.Context,
    base_url: Optional[str] = typer.Option(
        None,
        "--base-url",
        "-b",
        help="Service base URL (defaults to API_BASE_URL env or http://localhost:8000).",
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        help="Seconds to wait for each HTTP request.",
    ),
) -> None:
    """Entry point for the CLI."""
    config = load_config(base_url=base_url, timeout=timeout)
    client = ApiClient(config)
    ctx.obj = CLIState(config=config, client=client)
    ctx.call_on_close(client.close)


@app.command("records")
def records_command(
    ctx: typer.Context,
    limit: Optional[int] = typer.Option(
        None,
        "--limit",
        "-n",
        min=1,
        help="Show only the most recent N records.",
    ),
) -> None:
    """List retained temperature records, oldest first."""
    state = _get_state(ctx)
    render_records(state.client.get_records(limit=limit))


@app.command("latest")
def latest_command(ctx: typer.Context) -> None:
    """Show the most recently stored record."""
    state = _get_state(ctx)
    render_latest(state.client.get_latest())


@app.command("stats")
def stats_command(ctx: typer.Context) -> None:
    """Show ingestion quality counters."""
    state = _get_state(ctx)
    render_stats(state.client.get_stats())


@app.command("range")
def range_command(
    ctx: typer.Context,
    start: int = typer.Argument(..., help="Range start in milliseconds since the epoch."),
    end: int = typer.Argument(..., help="Range end in milliseconds since the epoch."),
) -> None:
    """List records whose timestamp falls within START..END (inclusive)."""
    state = _get_state(ctx)
    if start > end:
        raise typer.BadParameter(f"start ({start}) must not be after end ({end}).")
    render_records(state.client.get_range(start, end))
