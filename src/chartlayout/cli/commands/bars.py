"""Bars command: grouped bar chart layout from a wide CSV/TSV table."""

from __future__ import annotations

from pathlib import Path

import typer
from loguru import logger

from ...config.settings import ChartSettings
from ...core.exceptions import ChartLayoutError, DataError
from ...core.grouped_layout import GroupedLayout
from ...data.loaders import flatten_wide_rows, read_delimited
from ..output import print_error, print_info, print_json, print_table


def parse_value_fields(specs: list[str]) -> dict[str, str]:
    """Parse ``column`` or ``column:label`` options into a column -> label mapping.

    Raises:
        DataError: If an option has an empty column name
    """
    fields: dict[str, str] = {}
    for spec in specs:
        column, _, label = spec.partition(":")
        column = column.strip()
        if not column:
            raise DataError(f"Invalid value field '{spec}'", {"value_field": spec})
        fields[column] = label.strip() or column
    return fields


def bars(
    data_file: Path = typer.Argument(
        ...,
        help="CSV or TSV file with one row per group",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
    name_field: str = typer.Option(
        "name",
        "--name-field",
        "-n",
        help="Column holding the group (x) name",
    ),
    value_fields: list[str] = typer.Option(
        ...,
        "--value-field",
        "-f",
        help="Column to plot as a bar within each group; 'column:label' renames it",
    ),
    config_file: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        help="YAML settings file",
        dir_okay=False,
    ),
    scale: float = typer.Option(
        1.0,
        "--scale",
        help="Divide every value by this (e.g. 1e6 for millions)",
    ),
    delimiter: str | None = typer.Option(
        None,
        "--delimiter",
        "-d",
        help="Field separator (inferred from the file suffix when omitted)",
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output the layout as JSON",
    ),
) -> None:
    """Lay out a grouped bar chart.

    Examples:
        chartlayout bars movies.csv -n name -f "production_budget:production budget" \\
            -f "worldwide_box_office:box office" --scale 1e6
    """
    try:
        settings = ChartSettings.load(config_file) if config_file else ChartSettings()
        rows = read_delimited(data_file, delimiter)
        records = flatten_wide_rows(rows, name_field, parse_value_fields(value_fields), scale)
        logger.info(f"Loaded {len(rows)} rows ({len(records)} bars) from {data_file}")

        layout = GroupedLayout(
            records,
            x=lambda d: d["name"],
            y=lambda d: d["value"],
            z=lambda d: d["field"],
            settings=settings.bar,
        )

        if json_output:
            print_json(layout.to_dict(), title="Grouped Bar Layout")
            return

        print_table(
            f"{len(layout)} bars",
            ["x", "z", "left", "top", "width", "height", "color"],
            [
                [
                    layout.xs[rect.source_index],
                    layout.zs[rect.source_index],
                    f"{rect.left:.2f}",
                    f"{rect.top:.2f}",
                    f"{rect.width:.2f}",
                    f"{rect.height:.2f}",
                    rect.color,
                ]
                for rect in layout
            ],
        )
        legend = ", ".join(f"{key} = {color}" for key, color in layout.legend())
        print_info(f"Legend: {legend}")

    except ChartLayoutError as e:
        print_error(str(e))
        raise typer.Exit(1)
    except OSError as e:
        logger.error(f"Failed to read {data_file}: {e}")
        print_error(f"Failed to read {data_file}: {e}")
        raise typer.Exit(1)
