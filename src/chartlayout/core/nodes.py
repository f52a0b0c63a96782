"""Node and link records shared by the force simulation and its forces."""

from __future__ import annotations

import math
from collections.abc import Hashable, Iterable
from dataclasses import asdict, dataclass
from typing import Any

from .exceptions import GraphConstructionError
from .scales import intern_key


@dataclass(eq=False)
class Node:
    """A simulated node, mutated in place every tick.

    ``fx``/``fy`` pin an axis: while set, the simulation snaps the position to
    the pinned value and zeroes the velocity on that axis. Nodes compare by
    identity, since links hold live references to them.
    """

    id: Hashable
    x: float = math.nan
    y: float = math.nan
    vx: float = 0.0
    vy: float = 0.0
    fx: float | None = None
    fy: float | None = None
    group: Hashable | None = None
    index: int = -1

    @property
    def is_pinned(self) -> bool:
        return self.fx is not None or self.fy is not None

    def pin(self, x: float, y: float) -> None:
        self.fx = x
        self.fy = y

    def unpin(self) -> None:
        self.fx = None
        self.fy = None


@dataclass(eq=False)
class Link:
    """A link between two live nodes."""

    source: Node
    target: Node
    index: int = -1


@dataclass(frozen=True)
class NodePosition:
    """Immutable per-tick view of a node for renderers."""

    id: Hashable
    x: float
    y: float
    vx: float
    vy: float
    pinned: bool

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class LinkSegment:
    """Immutable per-tick line between two node positions."""

    source: Hashable
    target: Hashable
    x1: float
    y1: float
    x2: float
    y2: float

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def build_nodes(
    ids: Iterable[Any], groups: Iterable[Any] | None = None
) -> list[Node]:
    """Create one node per id, in input order.

    Raises:
        GraphConstructionError: If an id occurs twice
    """
    nodes: list[Node] = []
    seen: set[Hashable] = set()
    group_list = list(groups) if groups is not None else None

    for i, raw_id in enumerate(ids):
        node_id = intern_key(raw_id)
        if node_id in seen:
            raise GraphConstructionError(
                f"Duplicate node id: {node_id!r}", {"id": node_id, "index": i}
            )
        seen.add(node_id)
        group = intern_key(group_list[i]) if group_list is not None else None
        nodes.append(Node(id=node_id, group=group, index=i))

    return nodes


def resolve_links(nodes: Iterable[Node], pairs: Iterable[tuple[Any, Any]]) -> list[Link]:
    """Resolve (source_id, target_id) pairs to links between live nodes.

    Raises:
        GraphConstructionError: If a pair references an id not in ``nodes``
    """
    by_id = {node.id: node for node in nodes}
    links: list[Link] = []

    for i, (source_id, target_id) in enumerate(pairs):
        source = by_id.get(intern_key(source_id))
        target = by_id.get(intern_key(target_id))
        if source is None or target is None:
            missing = source_id if source is None else target_id
            raise GraphConstructionError(
                f"Link {i} references unknown node id: {missing!r}",
                {"link_index": i, "source": source_id, "target": target_id, "missing": missing},
            )
        links.append(Link(source=source, target=target, index=i))

    return links
