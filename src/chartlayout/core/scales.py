"""Scales mapping data domains to pixel ranges.

This module implements the positional encodings shared by the chart layouts:
    - BandScale: discrete keys -> contiguous pixel bands with padding
    - NestedBandScale: a BandScale subdividing one band of an outer scale
    - ContinuousScale family (linear, log, pow/sqrt): numbers -> pixels
    - OrdinalScale: discrete keys -> palette colors (cycling)

Design Principles:
    - Immutable: scales are built once from explicit arguments, never chained
    - Total: empty and degenerate domains produce zero-width / constant output
      instead of dividing by zero
    - Interned: discrete keys compare by value, not identity
"""

from __future__ import annotations

import math
from collections.abc import Callable, Hashable, Iterable, Sequence
from dataclasses import dataclass
from typing import Any

from loguru import logger

from .exceptions import ConfigError

# Thresholds used to snap tick steps to 1, 2, 5 or 10 times a power of ten
_E10 = math.sqrt(50)
_E5 = math.sqrt(10)
_E2 = math.sqrt(2)


def intern_key(value: Any) -> Hashable:
    """Return a canonical, hashable identity for a domain key.

    Lists become tuples and sets become frozensets (recursively), so keys
    that are equal by value collapse to one domain entry.
    """
    if isinstance(value, list | tuple):
        return tuple(intern_key(v) for v in value)
    if isinstance(value, set | frozenset):
        return frozenset(intern_key(v) for v in value)
    return value


def unique_domain(values: Iterable[Any]) -> tuple[Hashable, ...]:
    """Unique interned values in first-seen order."""
    return tuple(dict.fromkeys(intern_key(v) for v in values))


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def _tick_spec(start: float, stop: float, count: float) -> tuple[int, int, float]:
    """Integer bounds and increment of nice ticks covering [start, stop].

    A negative increment means "divide by -inc" (used for steps below one so
    that tick values are computed without accumulating float error).
    """
    step = (stop - start) / max(0, count)
    power = math.floor(math.log10(step))
    error = step / 10**power
    if error >= _E10:
        factor = 10
    elif error >= _E5:
        factor = 5
    elif error >= _E2:
        factor = 2
    else:
        factor = 1

    if power < 0:
        inc = 10 ** (-power) / factor
        i1 = _round_half_up(start * inc)
        i2 = _round_half_up(stop * inc)
        if i1 / inc < start:
            i1 += 1
        if i2 / inc > stop:
            i2 -= 1
        inc = -inc
    else:
        inc = 10**power * factor
        i1 = _round_half_up(start / inc)
        i2 = _round_half_up(stop / inc)
        if i1 * inc < start:
            i1 += 1
        if i2 * inc > stop:
            i2 -= 1

    if i2 < i1 and 0.5 <= count < 2:
        return _tick_spec(start, stop, count * 2)
    return i1, i2, inc


def nice_ticks(start: float, stop: float, count: int = 10) -> list[float]:
    """Approximately ``count`` round-number ticks between start and stop."""
    if not count > 0:
        return []
    if start == stop:
        return [start]

    reverse = stop < start
    lo, hi = (stop, start) if reverse else (start, stop)
    i1, i2, inc = _tick_spec(lo, hi, count)
    if not i2 >= i1:
        return []

    ticks = [(i1 + i) / -inc if inc < 0 else (i1 + i) * inc for i in range(i2 - i1 + 1)]
    if reverse:
        ticks.reverse()
    return ticks


def tick_step(start: float, stop: float, count: int = 10) -> float:
    """Signed distance between adjacent nice ticks."""
    if start == stop or not count > 0:
        return 0.0
    reverse = stop < start
    lo, hi = (stop, start) if reverse else (start, stop)
    inc = _tick_spec(lo, hi, count)[2]
    step = 1 / -inc if inc < 0 else inc
    return -step if reverse else step


def _precision_fixed(step: float) -> int:
    """Decimal places needed to tell ticks ``step`` apart."""
    if step == 0 or not math.isfinite(step):
        return 0
    return max(0, -math.floor(math.log10(abs(step))))


@dataclass(frozen=True)
class Band:
    """A contiguous pixel interval assigned to one discrete key."""

    start: float
    width: float

    @property
    def end(self) -> float:
        return self.start + self.width


class BandScale:
    """Map an ordered domain of discrete keys to contiguous pixel bands.

    Bands are evenly spaced by ``step``; ``padding_inner`` is the fraction of a
    step left empty between adjacent bands, ``padding_outer`` the fraction (of
    a step) reserved before the first and after the last band, and ``align``
    distributes leftover space (0 = left, 0.5 = centered, 1 = right).

    Args:
        domain: Discrete keys; duplicates collapse by value, first-seen order
        range: (r0, r1) pixel interval; r1 < r0 lays bands out right-to-left
        padding_inner: Fraction of a step between bands, in [0, 1]
        padding_outer: Fraction of a step before/after the outer bands (>= 0)
        align: Placement of leftover space, in [0, 1]

    Raises:
        ConfigError: If a padding or alignment value is out of bounds

    Example:
        >>> scale = BandScale(["A", "B"], (0, 100), padding_inner=0.1)
        >>> scale.position("A")
        0.0
        >>> round(scale.bandwidth, 2)
        47.37
    """

    def __init__(
        self,
        domain: Iterable[Any],
        range: Sequence[float] = (0.0, 1.0),
        padding_inner: float = 0.0,
        padding_outer: float = 0.0,
        align: float = 0.5,
    ) -> None:
        if not 0.0 <= padding_inner <= 1.0:
            raise ConfigError(
                f"padding_inner must be within [0, 1], got {padding_inner}",
                {"padding_inner": padding_inner},
            )
        if padding_outer < 0.0:
            raise ConfigError(
                f"padding_outer must be non-negative, got {padding_outer}",
                {"padding_outer": padding_outer},
            )
        if not 0.0 <= align <= 1.0:
            raise ConfigError(f"align must be within [0, 1], got {align}", {"align": align})
        if len(range) != 2:
            raise ConfigError(f"range must have two bounds, got {range!r}")

        self.domain = unique_domain(domain)
        self.range = (float(range[0]), float(range[1]))
        self.padding_inner = float(padding_inner)
        self.padding_outer = float(padding_outer)
        self.align = float(align)
        self._index = {key: i for i, key in enumerate(self.domain)}

        n = len(self.domain)
        r0, r1 = self.range
        reverse = r1 < r0
        start, stop = (r1, r0) if reverse else (r0, r1)

        if n == 0:
            self.step = 0.0
            self.bandwidth = 0.0
            self._positions: tuple[float, ...] = ()
            logger.debug("Band scale built over an empty domain")
            return

        self.step = (stop - start) / max(1.0, n - self.padding_inner + self.padding_outer * 2)
        start += (stop - start - self.step * (n - self.padding_inner)) * self.align
        self.bandwidth = self.step * (1 - self.padding_inner)

        positions = [start + self.step * i for i, _ in enumerate(self.domain)]
        if reverse:
            positions.reverse()
        self._positions = tuple(positions)

    def __len__(self) -> int:
        return len(self.domain)

    def __contains__(self, key: Any) -> bool:
        return intern_key(key) in self._index

    def __call__(self, key: Any) -> float | None:
        return self.position(key)

    def index(self, key: Any) -> int | None:
        """Domain index of ``key``, or None if it is not in the domain."""
        return self._index.get(intern_key(key))

    def position(self, key: Any) -> float | None:
        """Start of the band for ``key``, or None if it is not in the domain."""
        i = self.index(key)
        if i is None:
            return None
        return self._positions[i]

    def band(self, key: Any) -> Band | None:
        start = self.position(key)
        if start is None:
            return None
        return Band(start=start, width=self.bandwidth)

    def bands(self) -> list[tuple[Hashable, Band]]:
        """All (key, band) pairs in domain order."""
        return [
            (key, Band(start=pos, width=self.bandwidth))
            for key, pos in zip(self.domain, self._positions, strict=True)
        ]

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(n={len(self.domain)}, range={self.range}, "
            f"step={self.step:.3f}, bandwidth={self.bandwidth:.3f})"
        )


class NestedBandScale(BandScale):
    """A band scale subdividing one band of an outer scale.

    The range is always ``[0, outer.bandwidth]``, so positions are offsets
    relative to the start of the outer band. ``padding`` is applied both
    between sub-bands and at the outer edges.
    """

    def __init__(self, domain: Iterable[Any], outer: BandScale, padding: float = 0.05) -> None:
        super().__init__(
            domain,
            (0.0, outer.bandwidth),
            padding_inner=padding,
            padding_outer=padding,
        )
        self.outer = outer


class ContinuousScale:
    """Base for scales mapping a numeric domain to a numeric range.

    Subclasses override ``_transform``/``_untransform``; interpolation happens
    in transformed space. A degenerate domain (equal transformed endpoints)
    maps every value to ``range[0]``.
    """

    kind = "linear"

    def __init__(
        self, domain: Sequence[float] = (0.0, 1.0), range: Sequence[float] = (0.0, 1.0)
    ) -> None:
        if len(domain) != 2 or len(range) != 2:
            raise ConfigError(
                f"continuous scales need two-element domain and range, got {domain!r}, {range!r}"
            )
        self.domain = (float(domain[0]), float(domain[1]))
        self.range = (float(range[0]), float(range[1]))
        self._t0 = self._transform(self.domain[0])
        self._t1 = self._transform(self.domain[1])

    def _transform(self, value: float) -> float:
        return value

    def _untransform(self, value: float) -> float:
        return value

    @property
    def is_degenerate(self) -> bool:
        return self._t0 == self._t1

    @property
    def baseline(self) -> float:
        """Domain value bars grow from."""
        return 0.0

    def __call__(self, value: float) -> float:
        return self.position(value)

    def position(self, value: float) -> float:
        """Pixel coordinate of ``value``; exact at the domain endpoints."""
        r0, r1 = self.range
        if self.is_degenerate:
            return r0
        t = (self._transform(value) - self._t0) / (self._t1 - self._t0)
        return r0 * (1 - t) + r1 * t

    def invert(self, pixel: float) -> float:
        """Domain value at ``pixel``."""
        r0, r1 = self.range
        if self.is_degenerate or r0 == r1:
            return self.domain[0]
        t = (pixel - r0) / (r1 - r0)
        return self._untransform(self._t0 * (1 - t) + self._t1 * t)

    def ticks(self, count: int = 10) -> list[float]:
        return nice_ticks(self.domain[0], self.domain[1], count)

    def tick_format(self, count: int = 10, spec: str | None = None) -> Callable[[float], str]:
        """Formatter for tick labels.

        Args:
            count: Tick count the labels are meant for (sets the precision)
            spec: Python format spec overriding the default ``,.{p}f``

        Returns:
            Callable turning a value into its label
        """
        if spec is not None:
            return lambda value: format(value, spec)
        precision = _precision_fixed(tick_step(self.domain[0], self.domain[1], count))
        return lambda value: f"{value:,.{precision}f}"

    def __repr__(self) -> str:
        return f"{type(self).__name__}(domain={self.domain}, range={self.range})"


class LinearScale(ContinuousScale):
    """``position(v) = r0 + (v - d0) / (d1 - d0) * (r1 - r0)``.

    Example:
        >>> scale = LinearScale((0, 10), (370, 30))
        >>> scale.position(0), scale.position(10)
        (370.0, 30.0)
    """

    kind = "linear"


class PowScale(ContinuousScale):
    """Power transform ``sign(v) * |v| ** exponent``."""

    kind = "pow"

    def __init__(
        self,
        domain: Sequence[float] = (0.0, 1.0),
        range: Sequence[float] = (0.0, 1.0),
        exponent: float = 1.0,
    ) -> None:
        if exponent == 0:
            raise ConfigError("pow scale exponent must be non-zero")
        self.exponent = float(exponent)
        super().__init__(domain, range)

    def _transform(self, value: float) -> float:
        return math.copysign(abs(value) ** self.exponent, value)

    def _untransform(self, value: float) -> float:
        return math.copysign(abs(value) ** (1 / self.exponent), value)


class SqrtScale(PowScale):
    kind = "sqrt"

    def __init__(
        self, domain: Sequence[float] = (0.0, 1.0), range: Sequence[float] = (0.0, 1.0)
    ) -> None:
        super().__init__(domain, range, exponent=0.5)


class LogScale(ContinuousScale):
    """Base-10 logarithmic scale.

    The domain must lie strictly on one side of zero. Values on the wrong
    side of zero map to NaN.
    """

    kind = "log"

    def __init__(
        self, domain: Sequence[float] = (1.0, 10.0), range: Sequence[float] = (0.0, 1.0)
    ) -> None:
        if len(domain) != 2:
            raise ConfigError(f"log scale needs a two-element domain, got {domain!r}")
        d0, d1 = float(domain[0]), float(domain[1])
        if not (d0 > 0 and d1 > 0) and not (d0 < 0 and d1 < 0):
            raise ConfigError(
                f"log scale domain must not include or cross zero, got {(d0, d1)}",
                {"domain": (d0, d1)},
            )
        self._negative = d0 < 0
        super().__init__((d0, d1), range)

    def _transform(self, value: float) -> float:
        if self._negative:
            return -math.log10(-value) if value < 0 else math.nan
        return math.log10(value) if value > 0 else math.nan

    def _untransform(self, value: float) -> float:
        return -(10 ** (-value)) if self._negative else 10**value

    @property
    def baseline(self) -> float:
        d0, d1 = self.domain
        return max(d0, d1) if self._negative else min(d0, d1)

    def ticks(self, count: int = 10) -> list[float]:
        lo, hi = sorted(abs(v) for v in self.domain)
        i, j = math.floor(math.log10(lo)), math.ceil(math.log10(hi))
        sign = -1.0 if self._negative else 1.0
        if j - i < count:
            multiples = range(1, 10)
        else:
            multiples = range(1, 2)
        ticks = [k * 10.0**e for e in range(i, j + 1) for k in multiples]
        ticks = [sign * t for t in ticks if lo <= t <= hi]
        return sorted(ticks, reverse=self.domain[0] > self.domain[1])

    def tick_format(self, count: int = 10, spec: str | None = None) -> Callable[[float], str]:
        return lambda value: format(value, spec if spec is not None else ",g")


_CONTINUOUS_SCALES: dict[str, type[ContinuousScale]] = {
    "linear": LinearScale,
    "log": LogScale,
    "sqrt": SqrtScale,
    "pow": PowScale,
}


def make_continuous_scale(
    kind: str,
    domain: Sequence[float],
    range: Sequence[float],
    exponent: float | None = None,
) -> ContinuousScale:
    """Build a continuous scale by name ("linear", "log", "sqrt", "pow").

    Raises:
        ConfigError: If ``kind`` is unknown
    """
    scale_cls = _CONTINUOUS_SCALES.get(kind)
    if scale_cls is None:
        raise ConfigError(
            f"Unknown scale type '{kind}' (expected one of {sorted(_CONTINUOUS_SCALES)})",
            {"kind": kind},
        )
    if scale_cls is PowScale:
        return PowScale(domain, range, exponent=exponent if exponent is not None else 1.0)
    return scale_cls(domain, range)


class OrdinalScale:
    """Map discrete keys to palette entries by domain index, cycling the palette.

    Keys outside the domain map to ``unknown``.
    """

    def __init__(
        self, domain: Iterable[Any], palette: Sequence[str], unknown: str | None = None
    ) -> None:
        if not palette:
            raise ConfigError("palette must contain at least one color")
        self.domain = unique_domain(domain)
        self.palette = tuple(palette)
        self.unknown = unknown
        self._index = {key: i for i, key in enumerate(self.domain)}

        if len(self.domain) > len(self.palette):
            logger.warning(
                f"Palette has {len(self.palette)} colors for {len(self.domain)} "
                f"categories; colors will repeat"
            )

    def __call__(self, key: Any) -> str | None:
        i = self._index.get(intern_key(key))
        if i is None:
            return self.unknown
        return self.palette[i % len(self.palette)]

    def items(self) -> list[tuple[Hashable, str]]:
        return [(key, self.palette[i % len(self.palette)]) for i, key in enumerate(self.domain)]
