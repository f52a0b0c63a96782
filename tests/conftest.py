"""Shared fixtures for chartlayout tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from chartlayout.config.settings import BarChartSettings, GraphSettings, Margins
from chartlayout.core.nodes import Link, Node
from chartlayout.core.simulation import ForceSimulation


@pytest.fixture
def movie_rows() -> list[dict[str, str]]:
    """Wide rows as read from a movies CSV (numbers with thousands separators)."""
    return [
        {"name": "Avatar", "production_budget": "425,000,000", "worldwide_box_office": "2,776,345,279"},
        {"name": "Titanic", "production_budget": "200,000,000", "worldwide_box_office": "2,208,208,395"},
        {"name": "Jaws", "production_budget": "12,000,000", "worldwide_box_office": "470,700,000"},
    ]


@pytest.fixture
def grouped_records() -> list[dict]:
    """Long-format {name, field, value} records over x=A/B and z=p/q."""
    return [
        {"name": "A", "field": "p", "value": 10.0},
        {"name": "A", "field": "q", "value": 20.0},
        {"name": "B", "field": "p", "value": 5.0},
        {"name": "B", "field": "q", "value": 40.0},
    ]


@pytest.fixture
def bare_bar_settings() -> BarChartSettings:
    """Bar settings with a [0, 100] x range and a [100, 0] y range."""
    return BarChartSettings(
        width=100,
        height=100,
        margins=Margins(top=0, right=0, bottom=0, left=0),
    )


@pytest.fixture
def edge_records() -> list[dict[str, str]]:
    return [
        {"SOURCE_SUBREDDIT": "askreddit", "TARGET_SUBREDDIT": "funny"},
        {"SOURCE_SUBREDDIT": "askreddit", "TARGET_SUBREDDIT": "funny"},
        {"SOURCE_SUBREDDIT": "askreddit", "TARGET_SUBREDDIT": "pics"},
        {"SOURCE_SUBREDDIT": "askreddit", "TARGET_SUBREDDIT": "funny"},
        {"SOURCE_SUBREDDIT": "pics", "TARGET_SUBREDDIT": "funny"},
        {"SOURCE_SUBREDDIT": "pics", "TARGET_SUBREDDIT": "funny"},
    ]


@pytest.fixture
def graph_data() -> dict[str, list[dict]]:
    """A small graph: a triangle plus a pendant node."""
    return {
        "nodes": [
            {"id": "a", "group": 1},
            {"id": "b", "group": 1},
            {"id": "c", "group": 2},
            {"id": "d", "group": 3},
        ],
        "links": [
            {"source": "a", "target": "b"},
            {"source": "b", "target": "c"},
            {"source": "c", "target": "a"},
            {"source": "c", "target": "d"},
        ],
    }


@pytest.fixture
def graph_settings() -> GraphSettings:
    return GraphSettings(seed=7)


@pytest.fixture
def two_node_simulation() -> ForceSimulation:
    """Two linked nodes 10px apart on the x axis."""
    a = Node(id="a", x=-5.0, y=0.0)
    b = Node(id="b", x=5.0, y=0.0)
    return ForceSimulation([a, b], [Link(a, b, 0)], seed=1)


@pytest.fixture
def ring_simulation() -> ForceSimulation:
    """Twelve nodes in a ring, positions from the default phyllotaxis."""
    nodes = [Node(id=i) for i in range(12)]
    links = [Link(nodes[i], nodes[(i + 1) % 12], i) for i in range(12)]
    return ForceSimulation(nodes, links, seed=3)


@pytest.fixture
def movies_csv(tmp_path: Path) -> Path:
    path = tmp_path / "movies.csv"
    path.write_text(
        "name,production_budget,worldwide_box_office\n"
        'Avatar,"425,000,000","2,776,345,279"\n'
        'Titanic,"200,000,000","2,208,208,395"\n'
        'Jaws,"12,000,000","470,700,000"\n',
        encoding="utf-8",
    )
    return path


@pytest.fixture
def edges_tsv(tmp_path: Path) -> Path:
    path = tmp_path / "edges.tsv"
    lines = ["SOURCE_SUBREDDIT\tTARGET_SUBREDDIT\tLINK_SENTIMENT"]
    lines += ["askreddit\tfunny\t1"] * 4
    lines += ["funny\tpics\t1"] * 3
    lines += ["pics\taww\t-1"] * 1
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path
