"""Force-directed graph assembly.

Builds the live node/link model, forces, simulation and drag controller from
plain node and link records, and exposes per-tick frames as plain data.
"""

from __future__ import annotations

from collections.abc import Callable, Hashable, Iterable
from dataclasses import dataclass
from numbers import Real
from typing import Any

from loguru import logger

from ..config.defaults import DEFAULT_NODE_FILL
from ..config.settings import GraphSettings
from .drag import DragController
from .forces import LinkForce, ManyBodyForce, PositionForce
from .nodes import LinkSegment, Node, NodePosition, build_nodes, resolve_links
from .scales import OrdinalScale, intern_key
from .simulation import ForceSimulation


@dataclass(frozen=True)
class GraphFrame:
    """Node positions and link segments after one tick."""

    tick: int
    nodes: tuple[NodePosition, ...]
    links: tuple[LinkSegment, ...]


def _group_sort_key(value: Hashable) -> tuple[bool, Any]:
    # Numbers before everything else, which sorts by its text
    if isinstance(value, Real):
        return (False, value)
    return (True, str(value))


class ForceGraph:
    """A node-link graph laid out by a force simulation.

    Args:
        nodes: Node records
        links: Link records
        node_id: Record -> unique node id
        node_group: Record -> group used for color (None: uniform fill)
        node_groups: Group order for colors (default: sorted groups)
        node_title: ``(record, index) -> str`` (default: the node id)
        link_source: Link record -> source id
        link_target: Link record -> target id
        settings: Force strengths, decay rates, palette, seed

    Raises:
        GraphConstructionError: If a link references an unknown id, or ids repeat
    """

    def __init__(
        self,
        nodes: Iterable[Any],
        links: Iterable[Any],
        *,
        node_id: Callable[[Any], Any] = lambda d: d["id"],
        node_group: Callable[[Any], Any] | None = None,
        node_groups: Iterable[Any] | None = None,
        node_title: Callable[[Any, int], str] | None = None,
        link_source: Callable[[Any], Any] = lambda d: d["source"],
        link_target: Callable[[Any], Any] = lambda d: d["target"],
        settings: GraphSettings | None = None,
    ) -> None:
        self.settings = settings or GraphSettings()
        node_records = list(nodes)
        link_records = list(links)

        # Compute values
        ids = [intern_key(node_id(d)) for d in node_records]
        groups = [intern_key(node_group(d)) for d in node_records] if node_group else None
        if node_title is None:
            self.titles = [str(key) for key in ids]
        else:
            self.titles = [node_title(d, i) for i, d in enumerate(node_records)]

        # Replace the input records with live nodes and links
        self.nodes: list[Node] = build_nodes(ids, groups)
        self.links = resolve_links(
            self.nodes, ((link_source(d), link_target(d)) for d in link_records)
        )

        # Compute default group order and colors
        self.color: OrdinalScale | None = None
        if groups is not None:
            if node_groups is None:
                node_groups = sorted(set(groups), key=_group_sort_key)
            self.color = OrdinalScale(node_groups, self.settings.colors())

        # Construct the forces
        forces = [
            (
                "charge",
                ManyBodyForce(strength=self.settings.node_strength, theta=self.settings.theta),
            ),
            (
                "link",
                LinkForce(
                    self.links,
                    distance=self.settings.link_distance,
                    strength=self.settings.link_strength,
                ),
            ),
            ("x", PositionForce("x")),
            ("y", PositionForce("y")),
        ]

        self.simulation = ForceSimulation(
            self.nodes,
            self.links,
            forces,
            alpha_min=self.settings.alpha_min,
            alpha_decay=self.settings.alpha_decay,
            velocity_decay=self.settings.velocity_decay,
            seed=self.settings.seed,
        )
        self.drag = DragController(self.simulation, self.settings.alpha_target_on_drag)

        logger.debug(
            f"Force graph: {len(self.nodes)} nodes, {len(self.links)} links, "
            f"{len(self.color.domain) if self.color else 0} groups"
        )

    def node_color(self, node: Node) -> str:
        if self.color is None:
            return DEFAULT_NODE_FILL
        return self.color(node.group) or DEFAULT_NODE_FILL

    def node(self, node_id: Any) -> Node | None:
        key = intern_key(node_id)
        return next((node for node in self.nodes if node.id == key), None)

    def invalidate(self) -> None:
        """Stop the simulation for good (the chart is being discarded)."""
        self.simulation.stop()

    def frame(self) -> GraphFrame:
        return GraphFrame(
            tick=self.simulation.tick_count,
            nodes=self.simulation.snapshot(),
            links=self.simulation.link_segments(),
        )

    def view_box(self) -> tuple[float, float, float, float]:
        """Viewport centered on the origin, where the centering forces pull."""
        w, h = self.settings.width, self.settings.height
        return (-w / 2, -h / 2, w, h)

    def to_dict(self) -> dict[str, Any]:
        """Plain-data view of the current layout for renderers and JSON output."""
        frame = self.frame()
        return {
            "view_box": list(self.view_box()),
            "node_radius": self.settings.node_radius,
            "tick": frame.tick,
            "state": str(self.simulation.state),
            "alpha": self.simulation.alpha,
            "nodes": [
                {
                    **position.to_dict(),
                    "group": node.group,
                    "color": self.node_color(node),
                    "title": self.titles[node.index],
                }
                for position, node in zip(frame.nodes, self.nodes, strict=True)
            ],
            "links": [segment.to_dict() for segment in frame.links],
        }
