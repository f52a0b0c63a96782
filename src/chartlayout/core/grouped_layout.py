"""Grouped bar chart layout.

Turns raw records plus x/y/z projections into drawable rectangles:

    1. Project every record to (x, y, z)
    2. Infer missing domains (unique x and z in first-seen order, y = [0, max])
    3. Drop records whose x or z lies outside its domain
    4. Place each kept record: outer band for x, nested band for z,
       continuous scale for y
    5. Color by z through an ordinal palette

The layout is a pure function of its inputs: iterating it yields a fresh
sequence of ``BarRect`` records every time.
"""

from __future__ import annotations

import math
from collections.abc import Callable, Hashable, Iterable, Iterator, Sequence
from dataclasses import asdict, dataclass
from numbers import Real
from typing import Any

from loguru import logger

from ..config.defaults import PIXELS_PER_Y_TICK
from ..config.settings import BarChartSettings
from .exceptions import DataError
from .scales import (
    BandScale,
    ContinuousScale,
    NestedBandScale,
    OrdinalScale,
    intern_key,
    make_continuous_scale,
    unique_domain,
)


@dataclass(frozen=True)
class BarRect:
    """One bar, in pixels, with the index of the record it came from."""

    left: float
    top: float
    width: float
    height: float
    color: str | None
    source_index: int
    title: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class YTick:
    """A y-axis tick: domain value, pixel position and label."""

    value: float
    position: float
    label: str


def _is_number(value: Any) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool) and math.isfinite(value)


def infer_y_domain(values: Iterable[Any]) -> tuple[float, float]:
    """``(0, max(y))`` over finite numeric values; ``(0, 0)`` when there are none."""
    finite = [float(v) for v in values if _is_number(v)]
    return (0.0, max(finite)) if finite else (0.0, 0.0)


def filter_indices(
    xs: Sequence[Hashable],
    zs: Sequence[Hashable],
    x_domain: Iterable[Hashable],
    z_domain: Iterable[Hashable],
    indices: Iterable[int] | None = None,
) -> tuple[int, ...]:
    """Indices whose x is in ``x_domain`` and z is in ``z_domain``.

    Records outside either domain are dropped silently. Passing the result
    back in as ``indices`` returns it unchanged.
    """
    x_keys = set(x_domain)
    z_keys = set(z_domain)
    candidates = range(len(xs)) if indices is None else indices
    return tuple(i for i in candidates if xs[i] in x_keys and zs[i] in z_keys)


class GroupedLayout:
    """Layout of a grouped bar chart.

    Args:
        data: Records (any shape; only the projections look inside them)
        x: Record -> discrete group key (default: the record's index)
        y: Record -> numeric value (default: the record itself)
        z: Record -> discrete category within the group (default: constant 1)
        title: Optional ``(record, index) -> str``; default "x\\nz\\ny"
        settings: Geometry, domains, padding, scale type and palette

    Raises:
        DataError: If a kept record's y projection is None, NaN, infinite or non-numeric
        ConfigError: If settings contain an invalid padding, scale or palette

    Example:
        >>> layout = GroupedLayout(
        ...     rows, x=lambda d: d["name"], y=lambda d: d["value"], z=lambda d: d["field"]
        ... )
        >>> [rect.left for rect in layout]
    """

    def __init__(
        self,
        data: Iterable[Any],
        x: Callable[[Any], Any] | None = None,
        y: Callable[[Any], Any] | None = None,
        z: Callable[[Any], Any] | None = None,
        title: Callable[[Any, int], str] | None = None,
        settings: BarChartSettings | None = None,
    ) -> None:
        self.settings = settings or BarChartSettings()
        self.data = tuple(data)

        # Compute values
        self.xs = tuple(
            intern_key(x(d)) if x is not None else i for i, d in enumerate(self.data)
        )
        self.ys = tuple(y(d) if y is not None else d for d in self.data)
        self.zs = tuple(intern_key(z(d)) if z is not None else 1 for d in self.data)

        # Compute default domains, and unique the x- and z-domains
        self.x_domain = unique_domain(
            self.settings.x_domain if self.settings.x_domain is not None else self.xs
        )
        self.z_domain = unique_domain(
            self.settings.z_domain if self.settings.z_domain is not None else self.zs
        )
        self.y_domain = (
            tuple(self.settings.y_domain)
            if self.settings.y_domain is not None
            else infer_y_domain(self.ys)
        )

        # Omit any data not present in both the x- and z-domain
        self.indices = filter_indices(self.xs, self.zs, self.x_domain, self.z_domain)
        for i in self.indices:
            if not _is_number(self.ys[i]):
                raise DataError(
                    f"Record {i} has no finite numeric y value (got {self.ys[i]!r})",
                    {"index": i, "value": self.ys[i]},
                )

        # Construct scales
        self.x_scale = BandScale(
            self.x_domain, self.settings.x_range, padding_inner=self.settings.x_padding
        )
        self.xz_scale = NestedBandScale(self.z_domain, self.x_scale, padding=self.settings.z_padding)
        self.y_scale: ContinuousScale = make_continuous_scale(
            self.settings.y_type, self.y_domain, self.settings.y_range, self.settings.y_exponent
        )
        self.color = OrdinalScale(self.z_domain, self.settings.colors())

        # Compute titles
        if title is None:
            format_value = self.y_scale.tick_format(100, self.settings.y_format)
            self._title = lambda i: f"{self.xs[i]}\n{self.zs[i]}\n{format_value(self.ys[i])}"
        else:
            self._title = lambda i: title(self.data[i], i)

        dropped = len(self.data) - len(self.indices)
        logger.debug(
            f"Grouped layout: {len(self.indices)} bars, {dropped} records outside domains, "
            f"x_domain={len(self.x_domain)}, z_domain={len(self.z_domain)}, "
            f"y_domain={self.y_domain}"
        )

    def __len__(self) -> int:
        return len(self.indices)

    def __iter__(self) -> Iterator[BarRect]:
        baseline = self.y_scale.position(self.y_scale.baseline)
        width = self.xz_scale.bandwidth
        for i in self.indices:
            top = self.y_scale.position(self.ys[i])
            yield BarRect(
                left=self.x_scale.position(self.xs[i]) + self.xz_scale.position(self.zs[i]),
                top=top,
                width=width,
                height=baseline - top,
                color=self.color(self.zs[i]),
                source_index=i,
                title=self._title(i),
            )

    def rects(self) -> list[BarRect]:
        return list(self)

    def legend(self) -> list[tuple[Hashable, str]]:
        """(z value, color) pairs in z-domain order."""
        return self.color.items()

    def y_ticks(self, count: float | None = None) -> list[YTick]:
        """Y-axis ticks, about one per 60 pixels of chart height by default."""
        if count is None:
            count = self.settings.height / PIXELS_PER_Y_TICK
        fmt = self.y_scale.tick_format(count, self.settings.y_format)
        return [YTick(v, self.y_scale.position(v), fmt(v)) for v in self.y_scale.ticks(count)]

    def to_dict(self) -> dict[str, Any]:
        """Plain-data view of the layout for renderers and JSON output."""
        return {
            "width": self.settings.width,
            "height": self.settings.height,
            "x_bands": [
                {"key": key, "start": band.start, "width": band.width}
                for key, band in self.x_scale.bands()
            ],
            "y_ticks": [asdict(tick) for tick in self.y_ticks()],
            "y_label": self.settings.y_label,
            "legend": [{"key": key, "color": color} for key, color in self.legend()],
            "rects": [rect.to_dict() for rect in self],
        }
