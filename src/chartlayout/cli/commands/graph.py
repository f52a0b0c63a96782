"""Graph command: force-directed layout of the frequent pairs in an edge list."""

from __future__ import annotations

from pathlib import Path

import typer
from loguru import logger

from ...config.settings import ChartSettings
from ...core.exceptions import ChartLayoutError
from ...core.force_graph import ForceGraph
from ...core.scheduler import run_to_convergence
from ...data.edges import extract_nodes_and_links, filter_frequent_edges
from ...data.loaders import read_delimited
from ..output import (
    print_error,
    print_info,
    print_json,
    print_success,
    print_table,
    print_warning,
)


def graph(
    edges_file: Path = typer.Argument(
        ...,
        help="CSV or TSV edge list with source and target columns",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
    threshold: int | None = typer.Option(
        None,
        "--threshold",
        "-t",
        help="Keep source/target pairs seen more than this many times",
        min=0,
    ),
    running: bool = typer.Option(
        False,
        "--running",
        help="Count pairs while scanning and keep only occurrences past the threshold",
    ),
    max_ticks: int | None = typer.Option(
        None,
        "--max-ticks",
        help="Stop after this many ticks even if the layout has not converged",
        min=0,
    ),
    seed: int | None = typer.Option(
        None,
        "--seed",
        help="Seed for reproducible layouts",
    ),
    config_file: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        help="YAML settings file",
        dir_okay=False,
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
        help="Output the final layout as JSON",
    ),
) -> None:
    """Lay out a force-directed graph and print the settled node positions.

    Examples:
        chartlayout graph soc-redditHyperlinks-title.tsv --threshold 150
    """
    try:
        settings = ChartSettings.load(config_file) if config_file else ChartSettings()
        updates = {
            key: value
            for key, value in (("edge_threshold", threshold), ("seed", seed))
            if value is not None
        }
        graph_settings = settings.graph.model_copy(update=updates)

        edges = read_delimited(edges_file, delimiter)
        kept = filter_frequent_edges(
            edges,
            graph_settings.edge_threshold,
            graph_settings.source_field,
            graph_settings.target_field,
            running=running,
        )
        if not kept and not json_output:
            print_warning(
                f"No source/target pair occurs more than {graph_settings.edge_threshold} times"
            )
        data = extract_nodes_and_links(
            kept, graph_settings.source_field, graph_settings.target_field
        )
        logger.info(
            f"Kept {len(kept)}/{len(edges)} edges: "
            f"{len(data['nodes'])} nodes, {len(data['links'])} links"
        )

        # One color per subreddit
        force_graph = ForceGraph(
            data["nodes"],
            data["links"],
            node_group=lambda d: d["id"],
            settings=graph_settings,
        )
        ticks = run_to_convergence(force_graph.simulation, max_ticks)

        if json_output:
            print_json(force_graph.to_dict(), title="Force Graph Layout")
            return

        print_table(
            f"{len(force_graph.nodes)} nodes",
            ["id", "x", "y"],
            [[node.id, f"{node.x:.2f}", f"{node.y:.2f}"] for node in force_graph.nodes],
        )
        print_info(f"{len(force_graph.links)} links")
        print_success(f"Simulation {force_graph.simulation.state} after {ticks} ticks")

    except ChartLayoutError as e:
        print_error(str(e))
        raise typer.Exit(1)
    except OSError as e:
        logger.error(f"Failed to read {edges_file}: {e}")
        print_error(f"Failed to read {edges_file}: {e}")
        raise typer.Exit(1)
