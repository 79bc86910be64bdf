# Copyright (c) Syntropy Systems
"""alignlab experiment command."""
from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from alignlab.config import load_config
from alignlab.errors import AlignlabError
from alignlab.experiment import Experiment

console = Console()


def experiment(
    config_file: Path = typer.Argument(
        ...,
        help="Path to experiment YAML file",
        exists=True,
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output", "-o",
        help="Write the plain-text report here",
    ),
    csv_output: Optional[Path] = typer.Option(
        None,
        "--csv",
        help="Write the CSV report here",
    ),
    precision: Optional[int] = typer.Option(
        None,
        "--precision", "-p",
        help="Decimal digits (default: project config)",
    ),
) -> None:
    r"""Score alignments over measures x methods x network pairs.

    Example experiment.yaml:

    \b
        measures: [ec, s3]
        methods: [sana, tabu]
        layout: files
        networks:
          - g1: yeast
            g2: human
            alignments:
              sana: [runs/sana-0.align, runs/sana-1.align]
              tabu: runs/tabu.align
    """
    config = load_config()
    digits = precision if precision is not None else config.precision_decimals

    try:
        exp = Experiment.from_yaml(config_file, precision=digits, config=config)
        cube = exp.collect_data()
    except AlignlabError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e

    exp.render(console)

    unresolved = cube.unresolved()
    if unresolved:
        console.print(
            f"[yellow]{len(unresolved)} cell(s) unresolved[/yellow] (missing alignments)"
        )

    if output is not None:
        exp.print_data(output)
        console.print(f"[green]Wrote report:[/green] {output}")
    if csv_output is not None:
        exp.print_data_csv(csv_output)
        console.print(f"[green]Wrote CSV report:[/green] {csv_output}")
