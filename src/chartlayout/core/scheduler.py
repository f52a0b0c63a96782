"""Scheduling of simulation ticks.

The simulation never runs itself. ``TickScheduler`` drives it from an
asyncio loop, one ``advance`` call per frame, and ``run_to_convergence``
drives it synchronously (CLI, tests). Both check the simulation state
before every tick, so cancellation is cooperative and ticks never overlap.
"""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import Awaitable, Callable

from loguru import logger

from .exceptions import SimulationError
from .nodes import NodePosition
from .simulation import ForceSimulation, SimulationState

TickCallback = Callable[[tuple[NodePosition, ...]], None | Awaitable[None]]


def run_to_convergence(
    simulation: ForceSimulation,
    max_ticks: int | None = None,
    on_tick: Callable[[tuple[NodePosition, ...]], None] | None = None,
) -> int:
    """Tick until the simulation converges or stops, or ``max_ticks`` have run.

    Args:
        simulation: Simulation to drive
        max_ticks: Upper bound on ticks (None: until convergence)
        on_tick: Called with a snapshot after every tick

    Returns:
        Number of ticks run

    Raises:
        SimulationError: If ``max_ticks`` is None and the simulation can
            never converge (``alpha_target >= alpha_min``, or ``alpha_decay``
            is 0 while alpha is still at or above ``alpha_min``)
    """
    if max_ticks is None and simulation.alpha_target >= simulation.alpha_min:
        raise SimulationError(
            f"alpha_target {simulation.alpha_target} keeps alpha above alpha_min "
            f"{simulation.alpha_min}; pass max_ticks",
        )
    if (
        max_ticks is None
        and simulation.is_running
        and simulation.alpha_decay <= 0
        and simulation.alpha >= simulation.alpha_min
    ):
        raise SimulationError(
            f"alpha_decay {simulation.alpha_decay} never moves alpha below alpha_min "
            f"{simulation.alpha_min}; pass max_ticks",
        )

    ticks = 0
    while simulation.is_running and (max_ticks is None or ticks < max_ticks):
        simulation.advance(1)
        ticks += 1
        if on_tick is not None:
            on_tick(simulation.snapshot())

    logger.debug(f"Ran {ticks} ticks, state={simulation.state}, alpha={simulation.alpha:.5f}")
    return ticks


class TickScheduler:
    """Drive a simulation from an asyncio loop.

    Args:
        simulation: Simulation to drive
        frame_interval: Seconds between frames
        ticks_per_frame: Ticks run per frame
        stop_on_convergence: Return once the simulation converges; otherwise
            keep idling so a drag can restart it
    """

    def __init__(
        self,
        simulation: ForceSimulation,
        frame_interval: float = 1 / 60,
        ticks_per_frame: int = 1,
        stop_on_convergence: bool = False,
    ) -> None:
        if ticks_per_frame < 1:
            raise SimulationError(f"ticks_per_frame must be at least 1, got {ticks_per_frame}")
        self.simulation = simulation
        self.frame_interval = frame_interval
        self.ticks_per_frame = ticks_per_frame
        self.stop_on_convergence = stop_on_convergence

    async def run(
        self,
        on_tick: TickCallback | None = None,
        invalidation: asyncio.Event | None = None,
    ) -> int:
        """Tick once per frame until stopped.

        Setting ``invalidation`` stops the simulation before the next tick.

        Returns:
            Number of frames in which ticks ran
        """
        sim = self.simulation
        frames = 0
        logger.debug(f"Tick scheduler started ({self.frame_interval * 1000:.1f}ms frames)")

        while True:
            if invalidation is not None and invalidation.is_set():
                sim.stop()
            if sim.state is SimulationState.STOPPED:
                break
            if sim.state is SimulationState.CONVERGED and self.stop_on_convergence:
                break

            if sim.state is SimulationState.RUNNING:
                sim.advance(self.ticks_per_frame)
                frames += 1
                if on_tick is not None:
                    result = on_tick(sim.snapshot())
                    if inspect.isawaitable(result):
                        await result

            await asyncio.sleep(self.frame_interval)

        logger.debug(f"Tick scheduler finished after {frames} frames, state={sim.state}")
        return frames
