"""Region quadtree over node positions for Barnes-Hut repulsion.

Each quad stores the summed strength of the nodes below it and their
strength-weighted centroid, so a distant cluster can act as one body.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence

from .nodes import Node

# Coincident or nearly coincident points stop subdividing at this depth
MAX_DEPTH = 48


class Quad:
    """One square region; a leaf holds points, an internal quad holds children."""

    __slots__ = ("x0", "y0", "x1", "y1", "children", "points", "strength", "x", "y")

    def __init__(self, x0: float, y0: float, x1: float, y1: float) -> None:
        self.x0 = x0
        self.y0 = y0
        self.x1 = x1
        self.y1 = y1
        self.children: list[Quad | None] | None = None
        self.points: list[Node] = []
        self.strength = 0.0
        self.x = 0.0
        self.y = 0.0

    @property
    def width(self) -> float:
        return self.x1 - self.x0


class QuadTree:
    """Quadtree built over the current positions of ``nodes``."""

    def __init__(self, nodes: Sequence[Node], strength_of: Callable[[Node], float]) -> None:
        self.root = self._extent(nodes)
        for node in nodes:
            self._insert(self.root, node, 0)
        self._accumulate(self.root, strength_of)

    @staticmethod
    def _extent(nodes: Sequence[Node]) -> Quad:
        if not nodes:
            return Quad(0.0, 0.0, 1.0, 1.0)
        x0 = min(node.x for node in nodes)
        y0 = min(node.y for node in nodes)
        x1 = max(node.x for node in nodes)
        y1 = max(node.y for node in nodes)
        size = max(x1 - x0, y1 - y0) or 1.0
        return Quad(x0, y0, x0 + size, y0 + size)

    def _insert(self, quad: Quad, node: Node, depth: int) -> None:
        if quad.children is None:
            if (
                not quad.points
                or depth >= MAX_DEPTH
                or (quad.points[0].x == node.x and quad.points[0].y == node.y)
            ):
                quad.points.append(node)
                return
            existing = quad.points
            quad.points = []
            quad.children = [None, None, None, None]
            for point in existing:
                self._insert(self._child(quad, point), point, depth + 1)
        self._insert(self._child(quad, node), node, depth + 1)

    @staticmethod
    def _child(quad: Quad, node: Node) -> Quad:
        xm = (quad.x0 + quad.x1) / 2
        ym = (quad.y0 + quad.y1) / 2
        right = node.x >= xm
        bottom = node.y >= ym
        i = (bottom << 1) | right

        assert quad.children is not None
        child = quad.children[i]
        if child is None:
            child = Quad(
                xm if right else quad.x0,
                ym if bottom else quad.y0,
                quad.x1 if right else xm,
                quad.y1 if bottom else ym,
            )
            quad.children[i] = child
        return child

    def _accumulate(self, quad: Quad, strength_of: Callable[[Node], float]) -> None:
        if quad.children is None:
            quad.strength = sum(strength_of(point) for point in quad.points)
            if quad.points:
                quad.x = quad.points[0].x
                quad.y = quad.points[0].y
            return

        strength = weight = x = y = 0.0
        for child in quad.children:
            if child is None:
                continue
            self._accumulate(child, strength_of)
            c = abs(child.strength)
            strength += child.strength
            if c:
                weight += c
                x += c * child.x
                y += c * child.y

        quad.strength = strength
        if weight:
            quad.x = x / weight
            quad.y = y / weight
        else:
            quad.x = (quad.x0 + quad.x1) / 2
            quad.y = (quad.y0 + quad.y1) / 2
