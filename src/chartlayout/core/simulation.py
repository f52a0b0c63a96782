"""Iterative force simulation for node-link layouts.

State machine:

    RUNNING ──(alpha < alpha_min after a tick)──> CONVERGED
    RUNNING / CONVERGED ──(stop)──> STOPPED
    CONVERGED ──(restart)──> RUNNING

Nothing leaves STOPPED. Each tick applies the forces in registration order
(repulsion, links, centering by default), integrates velocities into
positions, then moves alpha toward ``alpha_target``.

The simulation never schedules itself: a host loop (timer, render loop,
test) calls ``advance(delta_ticks)``. Nodes are iterated in insertion order
and coincident-node jiggle comes from a seeded RNG, so identical inputs and
tick counts give identical positions.
"""

from __future__ import annotations

import math
import random
from collections.abc import Iterable, Sequence
from enum import StrEnum

from loguru import logger

from ..config.defaults import (
    DEFAULT_ALPHA,
    DEFAULT_ALPHA_DECAY,
    DEFAULT_ALPHA_MIN,
    DEFAULT_VELOCITY_DECAY,
    INITIAL_RADIUS,
)
from .exceptions import (
    ConfigError,
    GraphConstructionError,
    SimulationError,
    SimulationStoppedError,
)
from .forces import Force, LinkForce, ManyBodyForce, PositionForce
from .nodes import Link, LinkSegment, Node, NodePosition

# Golden angle: successive nodes spiral outward without overlapping
INITIAL_ANGLE = math.pi * (3 - math.sqrt(5))


class SimulationState(StrEnum):
    RUNNING = "running"
    CONVERGED = "converged"
    STOPPED = "stopped"


def default_forces(links: Sequence[Link]) -> list[tuple[str, Force]]:
    """Repulsion, link springs and x/y centering, in that order."""
    return [
        ("charge", ManyBodyForce()),
        ("link", LinkForce(links)),
        ("x", PositionForce("x")),
        ("y", PositionForce("y")),
    ]


class ForceSimulation:
    """Physics engine computing node positions from forces.

    Args:
        nodes: Nodes to simulate (mutated in place)
        links: Links between ``nodes``; used by the default link force
        forces: (name, force) pairs in application order; None uses
            ``default_forces(links)``
        alpha: Initial energy
        alpha_min: Convergence threshold
        alpha_decay: Fraction of the gap to ``alpha_target`` closed per tick
        alpha_target: Energy the simulation decays toward
        velocity_decay: Fraction of velocity lost per tick
        seed: Seed for the jiggle RNG

    Example:
        >>> sim = ForceSimulation(nodes, links)
        >>> while sim.state is SimulationState.RUNNING:
        ...     sim.advance(1)
    """

    def __init__(
        self,
        nodes: Iterable[Node],
        links: Iterable[Link] = (),
        forces: Sequence[tuple[str, Force]] | None = None,
        *,
        alpha: float = DEFAULT_ALPHA,
        alpha_min: float = DEFAULT_ALPHA_MIN,
        alpha_decay: float = DEFAULT_ALPHA_DECAY,
        alpha_target: float = 0.0,
        velocity_decay: float = DEFAULT_VELOCITY_DECAY,
        seed: int | None = None,
    ) -> None:
        for name, value in (
            ("alpha_min", alpha_min),
            ("alpha_decay", alpha_decay),
            ("alpha_target", alpha_target),
            ("velocity_decay", velocity_decay),
        ):
            if not 0.0 <= value <= 1.0:
                raise ConfigError(f"{name} must be within [0, 1], got {value}", {name: value})
        if alpha_decay == 0:
            # Alpha would never move, so the simulation could never converge
            raise ConfigError("alpha_decay must be greater than 0", {"alpha_decay": alpha_decay})

        self.nodes = list(nodes)
        self.links = list(links)
        self._members = {id(node) for node in self.nodes}
        self._check_links()
        self.alpha = alpha
        self.alpha_min = alpha_min
        self.alpha_decay = alpha_decay
        self._alpha_target = alpha_target
        self.velocity_decay = velocity_decay
        self.random = random.Random(seed)
        self.state = SimulationState.RUNNING
        self.tick_count = 0
        self.active_drags = 0

        self._initialize_nodes()

        self._forces: dict[str, Force] = {}
        for name, force in forces if forces is not None else default_forces(self.links):
            self.add_force(name, force)

        logger.debug(
            f"Force simulation: {len(self.nodes)} nodes, {len(self.links)} links, "
            f"forces={list(self._forces)}, alpha_decay={alpha_decay:.4f}"
        )

    def has_node(self, node: Node) -> bool:
        """True if ``node`` itself (not an equal-id copy) is simulated here."""
        return id(node) in self._members

    def _check_links(self) -> None:
        for link in self.links:
            if not self.has_node(link.source) or not self.has_node(link.target):
                raise GraphConstructionError(
                    f"Link {link.index} connects a node outside the simulation",
                    {"source": link.source.id, "target": link.target.id},
                )

    def _initialize_nodes(self) -> None:
        for i, node in enumerate(self.nodes):
            node.index = i
            if node.fx is not None:
                node.x = node.fx
            if node.fy is not None:
                node.y = node.fy
            if math.isnan(node.x) or math.isnan(node.y):
                radius = INITIAL_RADIUS * math.sqrt(0.5 + i)
                angle = i * INITIAL_ANGLE
                node.x = radius * math.cos(angle)
                node.y = radius * math.sin(angle)
            if math.isnan(node.vx) or math.isnan(node.vy):
                node.vx = node.vy = 0.0

    # ── forces ───────────────────────────────────────────────────────────

    def add_force(self, name: str, force: Force) -> None:
        """Bind ``force`` to the nodes; it runs after previously added forces."""
        force.initialize(self.nodes, self.random)
        self._forces[name] = force

    def remove_force(self, name: str) -> Force | None:
        return self._forces.pop(name, None)

    def force(self, name: str) -> Force | None:
        return self._forces.get(name)

    # ── state ────────────────────────────────────────────────────────────

    @property
    def alpha_target(self) -> float:
        return self._alpha_target

    @alpha_target.setter
    def alpha_target(self, value: float) -> None:
        if not 0.0 <= value <= 1.0:
            raise ConfigError(f"alpha_target must be within [0, 1], got {value}")
        self._alpha_target = value

    @property
    def is_running(self) -> bool:
        return self.state is SimulationState.RUNNING

    def stop(self) -> None:
        """Cancel the simulation; no further ticks are run."""
        if self.state is not SimulationState.STOPPED:
            logger.debug(f"Simulation stopped after {self.tick_count} ticks")
        self.state = SimulationState.STOPPED

    def restart(self) -> None:
        """Resume ticking after convergence.

        Raises:
            SimulationStoppedError: If the simulation was stopped
        """
        if self.state is SimulationState.STOPPED:
            raise SimulationStoppedError("Cannot restart a stopped simulation")
        if self.state is SimulationState.CONVERGED:
            logger.debug(f"Simulation restarted at alpha={self.alpha:.4f}")
        self.state = SimulationState.RUNNING

    # ── ticking ──────────────────────────────────────────────────────────

    def _tick(self) -> None:
        alpha = self.alpha
        for force in self._forces.values():
            force(alpha)

        keep = 1 - self.velocity_decay
        for node in self.nodes:
            if node.fx is None:
                node.vx *= keep
                node.x += node.vx
            else:
                node.x = node.fx
                node.vx = 0.0
            if node.fy is None:
                node.vy *= keep
                node.y += node.vy
            else:
                node.y = node.fy
                node.vy = 0.0

        self.alpha += (self._alpha_target - self.alpha) * self.alpha_decay
        self.tick_count += 1

        if self.alpha < self.alpha_min:
            self.state = SimulationState.CONVERGED
            logger.debug(f"Simulation converged after {self.tick_count} ticks")

    def advance(self, delta_ticks: int = 1) -> list[Node]:
        """Run up to ``delta_ticks`` ticks and return the nodes.

        The state is checked before every tick, so a converged or stopped
        simulation returns immediately and a tick is never interrupted.

        Raises:
            SimulationError: If ``delta_ticks`` is negative
        """
        if delta_ticks < 0:
            raise SimulationError(f"delta_ticks must be non-negative, got {delta_ticks}")
        for _ in range(delta_ticks):
            if self.state is not SimulationState.RUNNING:
                break
            self._tick()
        return list(self.nodes)

    # ── views ────────────────────────────────────────────────────────────

    def find(self, x: float, y: float, radius: float = math.inf) -> Node | None:
        """Node closest to (x, y) within ``radius``, or None."""
        closest = None
        best = radius * radius
        for node in self.nodes:
            dx = x - node.x
            dy = y - node.y
            d2 = dx * dx + dy * dy
            if d2 < best:
                closest, best = node, d2
        return closest

    def snapshot(self) -> tuple[NodePosition, ...]:
        return tuple(
            NodePosition(
                id=node.id, x=node.x, y=node.y, vx=node.vx, vy=node.vy, pinned=node.is_pinned
            )
            for node in self.nodes
        )

    def link_segments(self) -> tuple[LinkSegment, ...]:
        return tuple(
            LinkSegment(
                source=link.source.id,
                target=link.target.id,
                x1=link.source.x,
                y1=link.source.y,
                x2=link.target.x,
                y2=link.target.y,
            )
            for link in self.links
        )
