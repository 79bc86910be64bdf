# Copyright (c) Syntropy Systems
"""alignlab sweep submit command."""
from __future__ import annotations

import shlex
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from alignlab.config import load_config
from alignlab.errors import AlignlabError
from alignlab.sweep import ParameterSweep, format_value

console = Console()


def submit(
    config_file: Path = typer.Argument(
        ...,
        help="Path to sweep configuration YAML file",
        exists=True,
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run", "-n",
        help="Write scripts and preview jobs without submitting",
    ),
) -> None:
    r"""Generate and submit one cluster job per grid point.

    Returns as soon as every job is handed to the scheduler.

    Example sweep.yaml:

    \b
        measure: ec
        g1: yeast
        g2: human
        method: sana
        k_option: tinitial
        l_option: tdecay
        k_values: [1, 10, 100]
        l_values: [0.001, 0.01]
        minutes: 5
        folder: sweeps/temperature
    """
    config = load_config()

    try:
        sweep = ParameterSweep.from_yaml(config_file, config=config)
    except AlignlabError as e:
        console.print(f"[red]Error loading config:[/red] {e}")
        raise typer.Exit(1) from e

    spec = sweep.spec
    table = Table(title=f"Sweep: {spec.method} {sweep.pair.label}")
    table.add_column("#", style="dim")
    table.add_column("Script")
    table.add_column(spec.k_option, justify="right")
    table.add_column(spec.l_option, justify="right")

    for i, point in enumerate(sweep.points()):
        table.add_row(str(i), point.script_name, format_value(point.k), format_value(point.l))

    console.print(table)
    console.print(f"\n[bold]{len(sweep.points())} jobs[/bold] will be submitted")
    console.print(f"  [dim]submit command:[/dim] {shlex.join(sweep.submit_command)}")

    if dry_run:
        for point in sweep.points():
            _ = sweep.make_script(point.k, point.l)
        console.print(f"\n[yellow]Dry run - scripts written to {sweep.folder}, no jobs submitted[/yellow]")
        return

    try:
        submitted = sweep.submit_scripts_to_cluster()
    except AlignlabError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e

    console.print(f"\n[green]Submitted {len(submitted)} jobs[/green]")
    console.print(f"  [dim]results:[/dim] {sweep.folder}")
