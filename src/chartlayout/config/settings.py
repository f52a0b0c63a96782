"""Chart configuration models.

Settings are pydantic models with the defaults from ``config.defaults``.
A settings file is YAML with optional ``bar`` and ``graph`` sections:

    bar:
      width: 1000
      height: 1000
      margins: {bottom: 200}
      z_domain: ["production budget", "box office"]
    graph:
      edge_threshold: 150
      theta: 0.9
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import yaml
from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from ..core.exceptions import ConfigError
from .defaults import (
    DEFAULT_ALPHA_DECAY,
    DEFAULT_ALPHA_MIN,
    DEFAULT_DRAG_ALPHA_TARGET,
    DEFAULT_EDGE_THRESHOLD,
    DEFAULT_HEIGHT,
    DEFAULT_LINK_DISTANCE,
    DEFAULT_MARGINS,
    DEFAULT_NODE_RADIUS,
    DEFAULT_NODE_STRENGTH,
    DEFAULT_PALETTE,
    DEFAULT_SOURCE_FIELD,
    DEFAULT_TARGET_FIELD,
    DEFAULT_VELOCITY_DECAY,
    DEFAULT_WIDTH,
    DEFAULT_X_PADDING,
    DEFAULT_Z_PADDING,
    PALETTES,
)


def resolve_palette(palette: str | list[str]) -> list[str]:
    """Turn a palette name or explicit color list into a color list.

    Raises:
        ConfigError: If the name is unknown or the list is empty
    """
    if isinstance(palette, str):
        colors = PALETTES.get(palette.lower())
        if colors is None:
            raise ConfigError(
                f"Unknown palette '{palette}' (expected one of {sorted(PALETTES)})",
                {"palette": palette},
            )
        return list(colors)
    if not palette:
        raise ConfigError("palette must contain at least one color")
    return list(palette)


class Margins(BaseModel):
    """Chart margins in pixels."""

    model_config = ConfigDict(extra="forbid")

    top: float = DEFAULT_MARGINS["top"]
    right: float = DEFAULT_MARGINS["right"]
    bottom: float = DEFAULT_MARGINS["bottom"]
    left: float = DEFAULT_MARGINS["left"]


class BarChartSettings(BaseModel):
    """Options for the grouped bar chart layout."""

    model_config = ConfigDict(extra="forbid")

    width: float = Field(default=DEFAULT_WIDTH, gt=0)
    height: float = Field(default=DEFAULT_HEIGHT, gt=0)
    margins: Margins = Field(default_factory=Margins)
    x_domain: list[Any] | None = Field(default=None, description="Ordered x keys")
    y_domain: tuple[float, float] | None = Field(default=None, description="(ymin, ymax)")
    z_domain: list[Any] | None = Field(default=None, description="Ordered z keys")
    x_padding: float = Field(default=DEFAULT_X_PADDING, ge=0, le=1)
    z_padding: float = Field(default=DEFAULT_Z_PADDING, ge=0, le=1)
    y_type: Literal["linear", "log", "sqrt", "pow"] = "linear"
    y_exponent: float | None = Field(default=None, description="Exponent for y_type=pow")
    y_format: str | None = Field(default=None, description="Python format spec for y values")
    y_label: str | None = None
    palette: str | list[str] = DEFAULT_PALETTE

    @property
    def x_range(self) -> tuple[float, float]:
        return (self.margins.left, self.width - self.margins.right)

    @property
    def y_range(self) -> tuple[float, float]:
        return (self.height - self.margins.bottom, self.margins.top)

    def colors(self) -> list[str]:
        return resolve_palette(self.palette)


class GraphSettings(BaseModel):
    """Options for the force-directed graph layout."""

    model_config = ConfigDict(extra="forbid")

    width: float = Field(default=DEFAULT_WIDTH, gt=0)
    height: float = Field(default=DEFAULT_HEIGHT, gt=0)
    node_radius: float = Field(default=DEFAULT_NODE_RADIUS, gt=0)
    node_strength: float = DEFAULT_NODE_STRENGTH
    link_strength: float | None = Field(
        default=None, description="Fixed spring strength; None uses 1/min(degree)"
    )
    link_distance: float = Field(default=DEFAULT_LINK_DISTANCE, ge=0)
    velocity_decay: float = Field(default=DEFAULT_VELOCITY_DECAY, ge=0, le=1)
    alpha_decay: float = Field(default=DEFAULT_ALPHA_DECAY, gt=0, le=1)
    alpha_min: float = Field(default=DEFAULT_ALPHA_MIN, ge=0, le=1)
    alpha_target_on_drag: float = Field(default=DEFAULT_DRAG_ALPHA_TARGET, ge=0, le=1)
    theta: float | None = Field(
        default=None, gt=0, description="Barnes-Hut accuracy; None computes exact repulsion"
    )
    edge_threshold: int = Field(default=DEFAULT_EDGE_THRESHOLD, ge=0)
    source_field: str = DEFAULT_SOURCE_FIELD
    target_field: str = DEFAULT_TARGET_FIELD
    palette: str | list[str] = DEFAULT_PALETTE
    seed: int | None = Field(default=None, description="Seed for coincident-node jiggle")

    def colors(self) -> list[str]:
        return resolve_palette(self.palette)


class ChartSettings(BaseModel):
    """Complete chart configuration."""

    model_config = ConfigDict(extra="forbid")

    bar: BarChartSettings = Field(default_factory=BarChartSettings)
    graph: GraphSettings = Field(default_factory=GraphSettings)

    @model_validator(mode="after")
    def _check_palettes(self) -> ChartSettings:
        # Fail at load time rather than when the first layout is built
        self.bar.colors()
        self.graph.colors()
        return self

    @classmethod
    def load(cls, path: Path) -> ChartSettings:
        """Load configuration from YAML file.

        Args:
            path: Path to YAML configuration file

        Returns:
            ChartSettings instance (defaults when the file does not exist)

        Raises:
            ConfigError: If the file is not valid YAML or fails validation
        """
        if not path.exists():
            logger.debug(f"No settings file at {path}, using defaults")
            return cls()

        try:
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}: {e}", {"path": str(path)}) from e

        if not isinstance(data, dict):
            raise ConfigError(
                f"Settings file {path} must contain a mapping", {"path": str(path)}
            )

        logger.debug(f"Loaded settings from {path}")
        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ChartSettings:
        """Create settings from a dictionary.

        Raises:
            ConfigError: If validation fails
        """
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise ConfigError(f"Invalid chart settings: {e}", {"errors": e.errors()}) from e
