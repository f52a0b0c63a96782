"""Tests for force graph assembly."""

from __future__ import annotations

import pytest

from chartlayout.config.defaults import DEFAULT_NODE_FILL, PALETTES
from chartlayout.config.settings import GraphSettings
from chartlayout.core.exceptions import GraphConstructionError
from chartlayout.core.force_graph import ForceGraph
from chartlayout.core.scheduler import run_to_convergence
from chartlayout.core.simulation import SimulationState


class TestForceGraph:
    """Building a graph from node/link records."""

    def test_nodes_and_links_are_live(self, graph_data, graph_settings):
        graph = ForceGraph(graph_data["nodes"], graph_data["links"], settings=graph_settings)

        assert [node.id for node in graph.nodes] == ["a", "b", "c", "d"]
        assert len(graph.links) == 4
        assert graph.links[3].source is graph.node("c")
        assert graph.simulation.state is SimulationState.RUNNING

    def test_unknown_link_id_fails_construction(self, graph_data, graph_settings):
        graph_data["links"].append({"source": "a", "target": "nowhere"})

        with pytest.raises(GraphConstructionError):
            ForceGraph(graph_data["nodes"], graph_data["links"], settings=graph_settings)

    def test_group_colors_use_sorted_groups(self, graph_data, graph_settings):
        graph = ForceGraph(
            graph_data["nodes"],
            graph_data["links"],
            node_group=lambda d: d["group"],
            settings=graph_settings,
        )
        palette = PALETTES["tableau10"]

        assert graph.color.domain == (1, 2, 3)
        assert graph.node_color(graph.node("a")) == palette[0]
        assert graph.node_color(graph.node("d")) == palette[2]

    def test_uniform_fill_without_groups(self, graph_data, graph_settings):
        graph = ForceGraph(graph_data["nodes"], graph_data["links"], settings=graph_settings)

        assert graph.color is None
        assert graph.node_color(graph.nodes[0]) == DEFAULT_NODE_FILL

    def test_titles(self, graph_data, graph_settings):
        graph = ForceGraph(
            graph_data["nodes"],
            graph_data["links"],
            node_title=lambda d, i: f"{i}: {d['id']}",
            settings=graph_settings,
        )

        assert graph.titles == ["0: a", "1: b", "2: c", "3: d"]

    def test_settings_reach_the_forces(self, graph_data):
        settings = GraphSettings(node_strength=-60, link_distance=50, theta=0.9, seed=1)
        graph = ForceGraph(graph_data["nodes"], graph_data["links"], settings=settings)

        charge = graph.simulation.force("charge")
        link = graph.simulation.force("link")
        assert charge.strengths == [-60.0] * 4
        assert charge.theta == 0.9
        assert link.distances == [50.0] * 4

    def test_layout_is_reproducible_with_seed(self, graph_data, graph_settings):
        def run():
            graph = ForceGraph(graph_data["nodes"], graph_data["links"], settings=graph_settings)
            run_to_convergence(graph.simulation)
            return [(p.x, p.y) for p in graph.frame().nodes]

        assert run() == run()

    def test_linked_nodes_settle_near_link_distance(self, graph_data, graph_settings):
        graph = ForceGraph(graph_data["nodes"], graph_data["links"], settings=graph_settings)
        run_to_convergence(graph.simulation)

        for segment in graph.frame().links:
            length = ((segment.x2 - segment.x1) ** 2 + (segment.y2 - segment.y1) ** 2) ** 0.5
            assert 10 < length < 80

    def test_invalidate_stops_simulation(self, graph_data, graph_settings):
        graph = ForceGraph(graph_data["nodes"], graph_data["links"], settings=graph_settings)
        graph.invalidate()

        assert graph.simulation.state is SimulationState.STOPPED

    def test_view_box_is_centered(self, graph_data, graph_settings):
        graph = ForceGraph(graph_data["nodes"], graph_data["links"], settings=graph_settings)

        assert graph.view_box() == (-320.0, -200.0, 640, 400)

    def test_to_dict(self, graph_data, graph_settings):
        graph = ForceGraph(
            graph_data["nodes"],
            graph_data["links"],
            node_group=lambda d: d["group"],
            settings=graph_settings,
        )
        graph.simulation.advance(3)
        data = graph.to_dict()

        assert data["tick"] == 3
        assert data["state"] == "running"
        assert [node["id"] for node in data["nodes"]] == ["a", "b", "c", "d"]
        assert data["nodes"][2]["group"] == 2
        assert data["nodes"][0]["title"] == "a"
        assert data["links"][0]["source"] == "a"
