from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Mapping, Optional, Tuple

from .errors import LayoutConfigError

TEXT = "text"
PLOT = "plot"

LINEAR = "linear"
LOG = "log"

ALIGNMENTS = ("left", "center", "right")


@dataclass(frozen=True)
class Arm:
    """Event count and denominator for one trial arm."""

    name: str
    events: Optional[int] = None
    n: Optional[int] = None


@dataclass(frozen=True)
class Record:
    """
    One analysis row as loaded from a table.

    `estimate`, `lower` and `upper` are either all present or all absent.
    When all are absent the row is either a reference category
    (`is_reference=True`) or simply has no data.
    """

    label: str
    depth: int = 0
    arms: Tuple[Arm, ...] = ()
    estimate: Optional[float] = None
    lower: Optional[float] = None
    upper: Optional[float] = None
    is_reference: bool = False
    text: Mapping[str, str] = field(default_factory=dict)

    def arm(self, name: str) -> Optional[Arm]:
        for a in self.arms:
            if a.name == name:
                return a
        return None


@dataclass(frozen=True)
class DisplayRow:
    label: str
    index: int
    bold: bool
    depth: int
    cells: Mapping[str, str] = field(default_factory=dict)

    def cell(self, key: str) -> str:
        return self.cells.get(key, "")


@dataclass(frozen=True)
class AxisRange:
    """Closed visible range of a plot column, with its scale and ticks."""

    min: float
    max: float
    transform: str = LINEAR
    ticks: Tuple[float, ...] = ()

    def __post_init__(self) -> None:
        if not (math.isfinite(self.min) and math.isfinite(self.max)):
            raise LayoutConfigError(f"Axis limits must be finite, got [{self.min}, {self.max}]")
        if self.min >= self.max:
            raise LayoutConfigError(f"Axis minimum {self.min} must be below maximum {self.max}")
        if self.transform not in (LINEAR, LOG):
            raise LayoutConfigError(f"Unknown axis transform '{self.transform}' (expected 'linear' or 'log')")
        if self.transform == LOG and self.min <= 0:
            raise LayoutConfigError(f"Log axis needs a positive minimum, got {self.min}")
        outside = [t for t in self.ticks if not self.contains(t)]
        if outside:
            raise LayoutConfigError(f"Ticks {outside} fall outside axis range [{self.min}, {self.max}]")

    def contains(self, value: float) -> bool:
        return self.min <= value <= self.max


@dataclass(frozen=True)
class ClampedInterval:
    estimate: float
    lower: float
    upper: float
    truncated_low: bool = False
    truncated_high: bool = False


@dataclass(frozen=True)
class Series:
    """A named sequence of intervals, one entry per row (None = nothing drawn)."""

    name: str
    intervals: Tuple[Optional[ClampedInterval], ...]
    color: str = "black"
    marker: str = "s"


@dataclass(frozen=True)
class ColumnSpec:
    name: str
    kind: str = TEXT
    title: str = ""
    field: Optional[str] = None
    align: Optional[str] = None
    axis: Optional[AxisRange] = None
    series: Tuple[Series, ...] = ()
    reference_line: Optional[float] = None
    xlabel: str = ""
    series_spacing: float = 0.2

    @property
    def is_plot(self) -> bool:
        return self.kind == PLOT


@dataclass(frozen=True)
class HeaderSpan:
    """A label centered over columns `start`..`stop` (inclusive) at `tier` 0 or -1."""

    label: str
    start: int
    stop: int
    tier: int = 0


@dataclass(frozen=True)
class RuleSpec:
    """Horizontal separator at the top edge of document row `row` (row k = bottom)."""

    row: int
    start: int = 0
    stop: Optional[int] = None
    linewidth: float = 0.8
    linestyle: str = "-"
    color: str = "black"


@dataclass(frozen=True)
class StripeSpec:
    parity: Optional[int] = 1
    color: str = "#eff3f8"
    alt_color: Optional[str] = None


@dataclass(frozen=True)
class Layout:
    columns: Tuple[ColumnSpec, ...]
    widths: Tuple[float, ...]
    header_spans: Tuple[HeaderSpan, ...] = ()
    rules: Tuple[RuleSpec, ...] = ()
    stripes: StripeSpec = StripeSpec()
