"""Pointer-drag handling for force layouts.

Dragging pins a node (``fx``/``fy``) while the simulation keeps laying out
the others around it. While any drag is active the simulation's
``alpha_target`` is raised so the layout stays energized; the number of
active drags lives on the simulation (``simulation.active_drags``) so that
ending one of several concurrent drags does not cool the layout early.
"""

from __future__ import annotations

from collections import Counter

from loguru import logger

from ..config.defaults import DEFAULT_DRAG_ALPHA_TARGET
from .exceptions import SimulationError
from .nodes import Node
from .simulation import ForceSimulation, SimulationState


class DragController:
    """Translate drag gestures into node pins on one simulation.

    Args:
        simulation: Simulation owning the dragged nodes
        active_alpha_target: ``alpha_target`` while at least one drag is active
    """

    def __init__(
        self,
        simulation: ForceSimulation,
        active_alpha_target: float = DEFAULT_DRAG_ALPHA_TARGET,
    ) -> None:
        self.simulation = simulation
        self.active_alpha_target = active_alpha_target
        self._dragging: Counter[int] = Counter()

    @property
    def active_drags(self) -> int:
        return self.simulation.active_drags

    def is_dragging(self, node: Node) -> bool:
        return self._dragging[id(node)] > 0

    def on_drag_start(self, node: Node) -> None:
        """Pin ``node`` where it is and re-energize the layout.

        A stopped simulation is never resumed; the node is still pinned.

        Raises:
            SimulationError: If ``node`` is not one of the simulation's nodes
        """
        sim = self.simulation
        if not sim.has_node(node):
            raise SimulationError(
                f"Node {node.id!r} does not belong to this simulation", {"id": node.id}
            )
        if sim.active_drags == 0 and sim.state is not SimulationState.STOPPED:
            sim.alpha_target = self.active_alpha_target
            sim.restart()

        sim.active_drags += 1
        self._dragging[id(node)] += 1
        node.pin(node.x, node.y)
        logger.debug(f"Drag started on {node.id!r} ({sim.active_drags} active)")

    def on_drag_move(self, node: Node, x: float, y: float) -> None:
        """Move the pin of a dragged node to the pointer position.

        Raises:
            SimulationError: If no drag is active on ``node``
        """
        if not self.is_dragging(node):
            raise SimulationError(f"Node {node.id!r} is not being dragged", {"id": node.id})
        node.pin(x, y)

    def on_drag_end(self, node: Node) -> None:
        """Unpin ``node``; let the layout cool once the last drag ends.

        Raises:
            SimulationError: If no drag is active on ``node``
        """
        if not self.is_dragging(node):
            raise SimulationError(f"Node {node.id!r} is not being dragged", {"id": node.id})

        sim = self.simulation
        self._dragging[id(node)] -= 1
        sim.active_drags -= 1

        if self._dragging[id(node)] == 0:
            del self._dragging[id(node)]
            node.unpin()
        if sim.active_drags == 0:
            sim.alpha_target = 0.0

        logger.debug(f"Drag ended on {node.id!r} ({sim.active_drags} active)")
