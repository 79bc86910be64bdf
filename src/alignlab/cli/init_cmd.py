# Copyright (c) Syntropy Systems
"""alignlab init command."""

from pathlib import Path

import typer
import yaml
from rich.console import Console

from alignlab.config import PROJECT_DIR_NAME, AlignlabConfig

console = Console()


def init(
    path: Path = typer.Argument(
        Path(),
        help="Directory to initialize (default: current directory)",
    ),
) -> None:
    """Initialize a new alignlab project.

    Creates a .alignlab directory with a default configuration.
    """
    target = path.resolve()
    project_dir = target / PROJECT_DIR_NAME

    if project_dir.exists():
        console.print(f"[yellow]Already initialized:[/yellow] {project_dir}")
        return

    project_dir.mkdir(parents=True)

    defaults = AlignlabConfig()
    config = {
        "precision_decimals": defaults.precision_decimals,
        "score_table": defaults.score_table,
        "submit_command": defaults.submit_command,
        "aligners": {},
        "graphs_dir": defaults.graphs_dir,
        "similarity_dir": defaults.similarity_dir,
    }

    config_path = project_dir / "config.yaml"
    with config_path.open("w") as f:
        yaml.dump(config, f, default_flow_style=False)

    console.print(f"[green]Initialized alignlab project:[/green] {project_dir}")
    console.print(f"  [dim]config:[/dim] {config_path}")
