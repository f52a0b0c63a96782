"""Typed exception hierarchy for chartlayout.

Hierarchy
---------
ChartLayoutError (base)
├── DataError               – a projection yielded None/NaN for a required field
├── GraphConstructionError  – node/link records cannot form a graph
├── ConfigError             – invalid options (padding, scale kind, palette)
└── SimulationError         – invalid operation on a force simulation
    └── SimulationStoppedError – attempt to resume a stopped simulation

Empty domains are not errors: scales return a degenerate zero-width result.
"""

from typing import Any


class ChartLayoutError(Exception):
    """Base exception for chartlayout."""

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.context = context or {}


# ── Data layer ──────────────────────────────────────────────────────────


class DataError(ChartLayoutError):
    """Input records produced a value the layout cannot place.

    Raised by ``GroupedLayout`` when the y projection of a kept record is
    ``None``, NaN or not a number. ``context["index"]`` holds the offending
    source index.
    """

    pass


class GraphConstructionError(ChartLayoutError):
    """Node/link records cannot be assembled into a graph.

    Raised when a link references an id missing from the node set, or when
    two nodes share an id. Fatal: the graph cannot be laid out.
    """

    pass


# ── Configuration layer ─────────────────────────────────────────────────


class ConfigError(ChartLayoutError):
    """Configuration / validation errors."""

    pass


# ── Simulation layer ────────────────────────────────────────────────────


class SimulationError(ChartLayoutError):
    """Invalid operation on a force simulation."""

    pass


class SimulationStoppedError(SimulationError):
    """The simulation was stopped and cannot be resumed."""

    pass
