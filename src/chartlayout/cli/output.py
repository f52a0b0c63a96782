"""Console output helpers for the chartlayout CLI."""

from __future__ import annotations

import sys
from typing import Any

import orjson
import typer
from rich.console import Console
from rich.markup import escape
from rich.syntax import Syntax
from rich.table import Table

console = Console()


def print_error(message: str) -> None:
    console.print(f"[bold red]✗[/bold red] {escape(message)}")


def print_success(message: str) -> None:
    console.print(f"[bold green]✓[/bold green] {escape(message)}")


def print_info(message: str) -> None:
    console.print(f"[blue]ℹ[/blue] {escape(message)}")


def print_warning(message: str) -> None:
    console.print(f"[yellow]⚠[/yellow] {escape(message)}")


def dumps(data: Any) -> str:
    """Serialize layout data as indented JSON; NaN and infinities become null."""
    return orjson.dumps(data, option=orjson.OPT_INDENT_2).decode()


def print_json(data: Any, title: str | None = None) -> None:
    """Print data as JSON.

    Piped output is plain JSON; a terminal gets the title and highlighting.
    """
    text = dumps(data)
    if not sys.stdout.isatty():
        typer.echo(text)
        return
    if title:
        console.print(f"[bold blue]{title}[/bold blue]")
    console.print(Syntax(text, "json", theme="monokai", background_color="default"))


def print_table(title: str, columns: list[str], rows: list[list[Any]]) -> None:
    table = Table(title=title, show_header=True, header_style="bold cyan")
    for column in columns:
        table.add_column(column)
    for row in rows:
        table.add_row(*(escape(str(value)) for value in row))
    console.print(table)
