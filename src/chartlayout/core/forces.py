"""Forces applied by the simulation each tick.

A force is bound to the simulation's nodes once (``initialize``) and then
called with the current alpha; it adds ``force * alpha`` to node velocities
and never touches positions. Forces run in registration order:

    - ManyBodyForce: pairwise repulsion (exact, or Barnes-Hut with ``theta``)
    - LinkForce: springs pulling linked nodes toward a target distance
    - PositionForce: weak pull of unpinned nodes toward a coordinate
"""

from __future__ import annotations

import math
import random
from abc import ABC, abstractmethod
from collections import Counter
from collections.abc import Callable, Sequence
from typing import Literal

from loguru import logger

from ..config.defaults import (
    DEFAULT_CENTER_STRENGTH,
    DEFAULT_DISTANCE_MIN,
    DEFAULT_LINK_DISTANCE,
    DEFAULT_NODE_STRENGTH,
)
from .exceptions import ConfigError
from .nodes import Link, Node
from .quadtree import QuadTree


def jiggle(rng: random.Random) -> float:
    """Tiny random offset separating coincident nodes."""
    return (rng.random() - 0.5) * 1e-6


class Force(ABC):
    """Base class for simulation forces."""

    def initialize(self, nodes: Sequence[Node], rng: random.Random) -> None:
        self.nodes = nodes
        self.rng = rng

    @abstractmethod
    def __call__(self, alpha: float) -> None:
        """Add this force's contribution, scaled by ``alpha``, to velocities."""


class ManyBodyForce(Force):
    """Repulsion (negative strength) or attraction between every pair of nodes.

    Each node receives ``strength(other) * alpha / d²`` along the vector to
    every other node. Squared distances below ``distance_min²`` are softened
    to avoid huge forces between near-coincident nodes.

    Args:
        strength: Per-node strength, or a callable ``node -> strength``
        theta: Barnes-Hut accuracy; None computes all pairs exactly (O(n²))
        distance_min: Softening distance
        distance_max: Pairs farther apart than this are ignored
    """

    def __init__(
        self,
        strength: float | Callable[[Node], float] = DEFAULT_NODE_STRENGTH,
        theta: float | None = None,
        distance_min: float = DEFAULT_DISTANCE_MIN,
        distance_max: float = math.inf,
    ) -> None:
        if theta is not None and theta <= 0:
            raise ConfigError(f"theta must be positive, got {theta}", {"theta": theta})
        self.strength = strength
        self.theta = theta
        self.distance_min2 = distance_min * distance_min
        self.distance_max2 = distance_max * distance_max
        self.strengths: list[float] = []

    def initialize(self, nodes: Sequence[Node], rng: random.Random) -> None:
        super().initialize(nodes, rng)
        if callable(self.strength):
            self.strengths = [float(self.strength(node)) for node in nodes]
        else:
            self.strengths = [float(self.strength)] * len(nodes)

    def __call__(self, alpha: float) -> None:
        if self.theta is None:
            self._apply_exact(alpha)
        else:
            self._apply_barnes_hut(alpha)

    def _apply_exact(self, alpha: float) -> None:
        for node in self.nodes:
            for other in self.nodes:
                if other is node:
                    continue
                dx = other.x - node.x
                dy = other.y - node.y
                if dx == 0:
                    dx = jiggle(self.rng)
                if dy == 0:
                    dy = jiggle(self.rng)
                dist2 = dx * dx + dy * dy
                if dist2 >= self.distance_max2:
                    continue
                if dist2 < self.distance_min2:
                    dist2 = math.sqrt(self.distance_min2 * dist2)
                w = self.strengths[other.index] * alpha / dist2
                node.vx += dx * w
                node.vy += dy * w

    def _apply_barnes_hut(self, alpha: float) -> None:
        assert self.theta is not None
        theta2 = self.theta * self.theta
        tree = QuadTree(self.nodes, lambda node: self.strengths[node.index])

        for node in self.nodes:
            stack = [tree.root]
            while stack:
                quad = stack.pop()
                if not quad.strength:
                    continue

                dx = quad.x - node.x
                dy = quad.y - node.y
                width = quad.width
                dist2 = dx * dx + dy * dy

                # Far enough away: treat the whole quad as a single body
                if width * width / theta2 < dist2:
                    if dist2 < self.distance_max2:
                        if dx == 0:
                            dx = jiggle(self.rng)
                            dist2 += dx * dx
                        if dy == 0:
                            dy = jiggle(self.rng)
                            dist2 += dy * dy
                        if dist2 < self.distance_min2:
                            dist2 = math.sqrt(self.distance_min2 * dist2)
                        node.vx += dx * quad.strength * alpha / dist2
                        node.vy += dy * quad.strength * alpha / dist2
                    continue

                if quad.children is not None:
                    stack.extend(child for child in reversed(quad.children) if child is not None)
                    continue
                if dist2 >= self.distance_max2:
                    continue

                if quad.points[0] is not node or len(quad.points) > 1:
                    if dx == 0:
                        dx = jiggle(self.rng)
                        dist2 += dx * dx
                    if dy == 0:
                        dy = jiggle(self.rng)
                        dist2 += dy * dy
                    if dist2 < self.distance_min2:
                        dist2 = math.sqrt(self.distance_min2 * dist2)

                for point in quad.points:
                    if point is node:
                        continue
                    w = self.strengths[point.index] * alpha / dist2
                    node.vx += dx * w
                    node.vy += dy * w


class LinkForce(Force):
    """Springs pulling each link's endpoints toward a target distance.

    The default strength is ``1 / min(degree(source), degree(target))`` so
    that well-connected nodes resist more. The correction is split between
    the endpoints by relative degree: the lower-degree endpoint moves more.

    Args:
        links: Links between the simulation's nodes
        distance: Target length, or a callable ``link -> length``
        strength: Spring strength, a callable ``link -> strength``, or None
        iterations: Spring passes per tick
    """

    def __init__(
        self,
        links: Sequence[Link] = (),
        distance: float | Callable[[Link], float] = DEFAULT_LINK_DISTANCE,
        strength: float | Callable[[Link], float] | None = None,
        iterations: int = 1,
    ) -> None:
        if iterations < 1:
            raise ConfigError(f"iterations must be at least 1, got {iterations}")
        self.links = list(links)
        self.distance = distance
        self.strength = strength
        self.iterations = iterations
        self.distances: list[float] = []
        self.strengths: list[float] = []
        self.bias: list[float] = []

    def initialize(self, nodes: Sequence[Node], rng: random.Random) -> None:
        super().initialize(nodes, rng)
        degree: Counter[int] = Counter()
        for link in self.links:
            degree[link.source.index] += 1
            degree[link.target.index] += 1

        self.bias = [
            degree[link.source.index] / (degree[link.source.index] + degree[link.target.index])
            for link in self.links
        ]

        if self.strength is None:
            self.strengths = [
                1 / min(degree[link.source.index], degree[link.target.index])
                for link in self.links
            ]
        elif callable(self.strength):
            self.strengths = [float(self.strength(link)) for link in self.links]
        else:
            self.strengths = [float(self.strength)] * len(self.links)

        if callable(self.distance):
            self.distances = [float(self.distance(link)) for link in self.links]
        else:
            self.distances = [float(self.distance)] * len(self.links)

        logger.debug(f"Link force initialized: {len(self.links)} links over {len(nodes)} nodes")

    def __call__(self, alpha: float) -> None:
        for _ in range(self.iterations):
            for i, link in enumerate(self.links):
                source, target = link.source, link.target
                dx = target.x + target.vx - source.x - source.vx
                dy = target.y + target.vy - source.y - source.vy
                if dx == 0 or math.isnan(dx):
                    dx = jiggle(self.rng)
                if dy == 0 or math.isnan(dy):
                    dy = jiggle(self.rng)
                length = math.sqrt(dx * dx + dy * dy)
                length = (length - self.distances[i]) / length * alpha * self.strengths[i]
                dx *= length
                dy *= length

                b = self.bias[i]
                target.vx -= dx * b
                target.vy -= dy * b
                source.vx += dx * (1 - b)
                source.vy += dy * (1 - b)


class PositionForce(Force):
    """Weak pull of unpinned nodes toward ``target`` along one axis.

    Args:
        axis: "x" or "y"
        target: Coordinate to pull toward
        strength: Fraction of the remaining distance added to velocity per tick
    """

    def __init__(
        self,
        axis: Literal["x", "y"],
        target: float = 0.0,
        strength: float = DEFAULT_CENTER_STRENGTH,
    ) -> None:
        if axis not in ("x", "y"):
            raise ConfigError(f"axis must be 'x' or 'y', got {axis!r}")
        self.axis = axis
        self.target = target
        self.strength = strength

    def __call__(self, alpha: float) -> None:
        k = self.strength * alpha
        if self.axis == "x":
            for node in self.nodes:
                if node.fx is None:
                    node.vx += (self.target - node.x) * k
        else:
            for node in self.nodes:
                if node.fy is None:
                    node.vy += (self.target - node.y) * k
