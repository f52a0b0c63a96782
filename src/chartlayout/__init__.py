"""chartlayout - grouped bar chart and force-directed graph layout engine."""

__version__ = "0.3.0"

from .core.exceptions import ChartLayoutError

__all__ = ["ChartLayoutError", "__version__"]
