# Copyright (c) Syntropy Systems
"""Main CLI entry point for alignlab."""

import logging

import typer
from rich.console import Console
from rich.logging import RichHandler

from alignlab.cli.align import align
from alignlab.cli.alpha import alpha
from alignlab.cli.experiment import experiment
from alignlab.cli.init_cmd import init
from alignlab.cli.sweep import sweep_app

app = typer.Typer(
    name="alignlab",
    help=(
        "Benchmark and tune network alignment methods. Score experiments, "
        "calibrate objectives, sweep parameters on a cluster."
    ),
    no_args_is_help=True,
    add_completion=False,
)


@app.callback()
def main(
    verbose: bool = typer.Option(
        False,
        "--verbose", "-v",
        help="Show debug logging",
    ),
) -> None:
    """Configure logging for every command."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


# Register commands
_ = app.command()(init)
_ = app.command()(align)
_ = app.command()(alpha)
_ = app.command()(experiment)

# Register sweep sub-app
app.add_typer(sweep_app, name="sweep")


if __name__ == "__main__":
    app()
