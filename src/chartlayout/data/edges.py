"""Edge-list filtering and node/link extraction for force graphs."""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Mapping
from typing import Any

from loguru import logger

from ..config.defaults import (
    DEFAULT_EDGE_THRESHOLD,
    DEFAULT_SOURCE_FIELD,
    DEFAULT_TARGET_FIELD,
)
from ..core.exceptions import DataError


def _endpoints(
    edge: Mapping[str, Any], index: int, source_field: str, target_field: str
) -> tuple[Any, Any]:
    try:
        return edge[source_field], edge[target_field]
    except KeyError as e:
        raise DataError(
            f"Edge {index} is missing field {e.args[0]!r}",
            {"index": index, "field": e.args[0]},
        ) from e


def filter_frequent_edges(
    edges: Iterable[Mapping[str, Any]],
    threshold: int = DEFAULT_EDGE_THRESHOLD,
    source_field: str = DEFAULT_SOURCE_FIELD,
    target_field: str = DEFAULT_TARGET_FIELD,
    running: bool = False,
) -> list[Mapping[str, Any]]:
    """Keep edges whose (source, target) pair occurs more than ``threshold`` times.

    Args:
        edges: Edge records
        threshold: Minimum occurrence count, exclusive
        source_field: Field holding the source id
        target_field: Field holding the target id
        running: Count occurrences as the list is scanned, keeping only the
            occurrences past the threshold; otherwise count over the full
            list and keep every occurrence of a frequent pair

    Returns:
        Kept edge records in input order

    Raises:
        DataError: If an edge lacks the source or target field
    """
    edge_list = list(edges)
    keys = [
        _endpoints(edge, i, source_field, target_field) for i, edge in enumerate(edge_list)
    ]

    if running:
        seen: Counter[tuple[Any, Any]] = Counter()
        kept = []
        for edge, key in zip(edge_list, keys, strict=True):
            seen[key] += 1
            if seen[key] > threshold:
                kept.append(edge)
    else:
        totals = Counter(keys)
        kept = [edge for edge, key in zip(edge_list, keys, strict=True) if totals[key] > threshold]

    logger.debug(
        f"Edge filter: kept {len(kept)}/{len(edge_list)} edges "
        f"(threshold={threshold}, running={running})"
    )
    return kept


def extract_nodes_and_links(
    edges: Iterable[Mapping[str, Any]],
    source_field: str = DEFAULT_SOURCE_FIELD,
    target_field: str = DEFAULT_TARGET_FIELD,
) -> dict[str, list[dict[str, Any]]]:
    """Split edge records into unique nodes and one link per edge.

    Returns:
        ``{"nodes": [{"id": ...}], "links": [{"source": ..., "target": ...}]}``
        with nodes in first-seen order

    Raises:
        DataError: If an edge lacks the source or target field
    """
    node_ids: dict[Any, None] = {}
    links: list[dict[str, Any]] = []

    for i, edge in enumerate(edges):
        source, target = _endpoints(edge, i, source_field, target_field)
        node_ids.setdefault(source)
        node_ids.setdefault(target)
        links.append({"source": source, "target": target})

    return {"nodes": [{"id": node_id} for node_id in node_ids], "links": links}
