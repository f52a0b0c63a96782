"""chartlayout command-line entry point."""

import sys

import typer
from loguru import logger

from .. import __version__
from .commands.bars import bars
from .commands.graph import graph
from .output import console

app = typer.Typer(
    name="chartlayout",
    help="📊 Lay out grouped bar charts and force-directed graphs",
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
)


@app.callback()
def main(
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Show debug logging on stderr",
    ),
) -> None:
    """Lay out charts from CSV/TSV data."""
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if verbose else "WARNING")


@app.command()
def version() -> None:
    """Show the chartlayout version."""
    console.print(f"[cyan bold]chartlayout[/cyan bold] [cyan]v{__version__}[/cyan]")


app.command(name="bars")(bars)
app.command(name="graph")(graph)


if __name__ == "__main__":
    app()
