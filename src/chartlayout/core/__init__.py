"""Core layout engine: scales, grouped bar layout, force simulation."""

from .exceptions import (
    ChartLayoutError,
    ConfigError,
    DataError,
    GraphConstructionError,
    SimulationError,
    SimulationStoppedError,
)

__all__ = [
    "ChartLayoutError",
    "ConfigError",
    "DataError",
    "GraphConstructionError",
    "SimulationError",
    "SimulationStoppedError",
]
