"""CLI entry point, registers all subcommands."""

import typer

from .. import __version__
from ._common import console

app = typer.Typer(
    name="blamekit",
    help="blamekit - attribute static-analysis findings to git authors and commits",
    add_completion=False,
    rich_markup_mode="rich",
)


@app.command()
def version():
    """Show the installed version."""
    console.print(f"blamekit [bold]{__version__}[/bold]")


# Import subcommands to register them
from .blame import blame as _blame  # noqa: F401, E402


def main():
    app()
