# Copyright (c) Syntropy Systems
"""alignlab align command."""
from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from alignlab.config import load_config
from alignlab.errors import AlignlabError, ConfigError
from alignlab.factory import build_method
from alignlab.graph import load_graph, write_alignment
from alignlab.measures import MeasureCombination, load_measure
from alignlab.options import parse_assignments
from alignlab.scores import ScoreTable

console = Console()

DEFAULT_OBJECTIVE = "ec=1"


def parse_weights(assignments: list[str]) -> dict[str, float]:
    """Parse measure=weight strings."""
    weights: dict[str, float] = {}
    for name, value in parse_assignments(assignments).items():
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            msg = f"Weight for measure '{name}' must be a number, got {value!r}"
            raise ConfigError(msg)
        weights[name] = float(value)
    return weights


def align(
    g1: str = typer.Option(..., "--g1", help="Name of the first graph"),
    g2: str = typer.Option(..., "--g2", help="Name of the second graph"),
    method: str = typer.Option("sana", "--method", "-m", help="Alignment method"),
    output: Path = typer.Option(..., "--output", "-o", help="Alignment output file"),
    measures: Optional[list[str]] = typer.Option(
        None,
        "--measure",
        help="Objective measure as name=weight (repeatable)",
    ),
    settings: Optional[list[str]] = typer.Option(
        None,
        "--set",
        help="Method option as key=value (repeatable)",
    ),
    eval_file: Optional[Path] = typer.Option(
        None,
        "--eval",
        help="Evaluate this alignment file instead of running a method",
    ),
    graphs_dir: Optional[Path] = typer.Option(None, "--graphs-dir"),
    similarity_dir: Optional[Path] = typer.Option(None, "--similarity-dir"),
    score_table: Optional[Path] = typer.Option(
        None,
        "--score-table",
        help="Score table used for beta-normalized objectives",
    ),
) -> None:
    """Run one alignment method on a graph pair.

    Examples:
        alignlab align --g1 yeast --g2 human -m sana -o out.align \\
            --measure ec=1 --measure sequence=0 \\
            --set t=5 --set objfuntype=beta --set beta=0.8 --set topmeasure=ec \\
            --set tinitial=auto --set tdecay=auto

        alignlab align --g1 yeast --g2 human --eval old.align -o copy.align

    """
    config = load_config()

    try:
        graphs = graphs_dir or Path(config.graphs_dir)
        sim_dir = similarity_dir or Path(config.similarity_dir)
        graph1 = load_graph(graphs, g1)
        graph2 = load_graph(graphs, g2)

        weights = parse_weights(measures or [DEFAULT_OBJECTIVE])
        objective = MeasureCombination(
            (load_measure(graph1, graph2, name, sim_dir), weight)
            for name, weight in weights.items()
        )

        options = parse_assignments(settings or [])
        if eval_file is not None:
            options["eval"] = str(eval_file)

        table = ScoreTable(score_table or config.score_table)
        aligner = build_method(
            graph1,
            graph2,
            method,
            options,
            objective,
            score_table=table,
            aligners=config.aligners,
        )
        alignment = aligner.produce_alignment()
        write_alignment(alignment, output)
        scores = objective.eval_all(alignment)
    except AlignlabError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e

    console.print(f"[green]Wrote alignment:[/green] {output}")
    console.print(f"  [dim]method:[/dim] {aligner.name}")
    console.print(f"  [dim]objective:[/dim] {objective.format_weights()}")

    score_table_view = Table(show_header=True, header_style="bold")
    score_table_view.add_column("Measure", style="dim")
    score_table_view.add_column("Score", justify="right")
    for name, value in scores.items():
        score_table_view.add_row(name, f"{value:.{config.precision_decimals}f}")
    console.print(score_table_view)
