"""alignlab sweep subcommand group."""

import typer

from alignlab.cli.sweep.collect import collect
from alignlab.cli.sweep.submit import submit

sweep_app = typer.Typer(
    name="sweep",
    help="Two-parameter grid sweeps on a cluster.",
    no_args_is_help=True,
)

# Register subcommands
sweep_app.command()(submit)
sweep_app.command()(collect)
