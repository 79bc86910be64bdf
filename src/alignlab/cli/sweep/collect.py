# Copyright (c) Syntropy Systems
"""alignlab sweep collect command."""
from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from alignlab.config import load_config
from alignlab.errors import AlignlabError
from alignlab.sweep import GridPointState, ParameterSweep

console = Console()


def collect(
    config_file: Path = typer.Argument(
        ...,
        help="Path to sweep configuration YAML file",
        exists=True,
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output", "-o",
        help="Write the plain-text grid here",
    ),
    csv_output: Optional[Path] = typer.Option(
        None,
        "--csv",
        help="Write the CSV grid here",
    ),
) -> None:
    """Score whichever sweep results exist so far.

    Safe to run repeatedly while jobs are still running.
    """
    config = load_config()

    try:
        sweep = ParameterSweep.from_yaml(config_file, config=config)
        _ = sweep.collect_data()
    except AlignlabError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e

    sweep.render(console)

    points = sweep.points()
    completed = sum(1 for p in points if p.state is GridPointState.COMPLETED)
    pending = sum(1 for p in points if p.state is GridPointState.PENDING)
    not_submitted = sum(1 for p in points if p.state is GridPointState.NOT_SUBMITTED)

    console.print(f"  [green]completed:[/green] {completed}/{len(points)}")
    if pending:
        console.print(f"  [yellow]pending:[/yellow] {pending} jobs")
    if not_submitted:
        console.print(f"  [dim]not submitted:[/dim] {not_submitted}")

    if output is not None:
        sweep.print_data(output)
        console.print(f"[green]Wrote grid:[/green] {output}")
    if csv_output is not None:
        sweep.print_data_csv(csv_output)
        console.print(f"[green]Wrote CSV grid:[/green] {csv_output}")
