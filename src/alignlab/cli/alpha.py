# Copyright (c) Syntropy Systems
"""alignlab alpha command."""
from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from alignlab.config import load_config
from alignlab.errors import AlignlabError
from alignlab.graph import NetworkPair
from alignlab.objective import BETA, DIRECT, derive_alpha
from alignlab.scores import ScoreTable

console = Console()


def alpha(
    g1: str = typer.Option(..., "--g1", help="Name of the first graph"),
    g2: str = typer.Option(..., "--g2", help="Name of the second graph"),
    method_id: str = typer.Option(
        ...,
        "--method", "-m",
        help="Score table method key, e.g. 'sanaec' or 'lgraal'",
    ),
    beta: Optional[float] = typer.Option(None, "--beta", "-b"),
    direct: Optional[float] = typer.Option(
        None,
        "--alpha", "-a",
        help="Use this alpha directly instead of deriving it from beta",
    ),
    score_table: Optional[Path] = typer.Option(None, "--score-table"),
) -> None:
    """Show the topology weight alpha for a graph pair.

    Example:
        alignlab alpha --g1 yeast --g2 human -m sanaec --beta 0.8

    """
    if (beta is None) == (direct is None):
        console.print("[red]Error:[/red] Give exactly one of --beta or --alpha")
        raise typer.Exit(1)

    config = load_config()
    pair = NetworkPair(g1, g2)
    try:
        if direct is not None:
            value = derive_alpha(DIRECT, alpha=direct)
        else:
            table = ScoreTable(score_table or config.score_table)
            topology, sequence = table.lookup(method_id, g1, g2)
            console.print(
                f"  [dim]baselines:[/dim] topology={topology} sequence={sequence}"
            )
            value = derive_alpha(
                BETA,
                beta=beta,
                method_id=method_id,
                pair=pair,
                score_table=table,
            )
    except AlignlabError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e

    console.print(
        f"[green]alpha[/green] for {method_id} {pair.label}: "
        f"{value:.{config.precision_decimals}f}"
    )
