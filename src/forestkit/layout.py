"""
Layout composition for forest plots.

`compose` places columns side by side, resolves alignment, computes the row
stripes once for the whole figure and turns every plot column's series into
glyphs. The result is plain data; `forestkit.visualization.plots` draws it.

Vertical coordinates: body row with index i occupies [i - 0.5, i + 0.5].
Column titles sit at y = k (k = number of rows), header tier 0 at k + 1 and
tier -1 at k + 2.
"""
from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from .errors import LayoutConfigError
from .formatting import LABEL_KEY
from .types import (
    ALIGNMENTS,
    ColumnSpec,
    DisplayRow,
    HeaderSpan,
    Layout,
    RuleSpec,
    StripeSpec,
)

logger = logging.getLogger(__name__)

HEADER_TIERS = (0, -1)


@dataclass(frozen=True)
class ComposedColumn:
    spec: ColumnSpec
    align: str
    left: float
    width: float


@dataclass(frozen=True)
class Cell:
    y: float
    text: str
    bold: bool
    align: str


@dataclass(frozen=True)
class Glyph:
    y: float
    series: str
    color: str
    marker: str
    estimate: float
    lower: float
    upper: float
    arrow_low: bool
    arrow_high: bool


@dataclass(frozen=True)
class StripeBand:
    y_low: float
    y_high: float
    color: str


@dataclass(frozen=True)
class PlacedHeader:
    label: str
    y: float
    left: float
    right: float

    @property
    def center(self) -> float:
        return (self.left + self.right) / 2.0


@dataclass(frozen=True)
class PlacedRule:
    y: float
    left: float
    right: float
    columns: Tuple[int, ...]
    spec: RuleSpec


@dataclass(frozen=True)
class ComposedFigure:
    n_rows: int
    rows: Tuple[DisplayRow, ...]
    columns: Tuple[ComposedColumn, ...]
    cells: Dict[int, Tuple[Cell, ...]]
    glyphs: Dict[int, Tuple[Glyph, ...]]
    stripes: Tuple[StripeBand, ...]
    headers: Tuple[PlacedHeader, ...]
    rules: Tuple[PlacedRule, ...]

    @property
    def title_y(self) -> float:
        return float(self.n_rows)

    @property
    def top(self) -> float:
        highest = max((h.y for h in self.headers), default=self.title_y)
        return highest + 0.5


# --------------------------- validation --------------------------- #

def normalize_widths(widths: Sequence[float], n_columns: int) -> List[float]:
    if len(widths) != n_columns:
        raise LayoutConfigError(f"Got {len(widths)} width weights for {n_columns} columns")
    if any(w <= 0 for w in widths):
        raise LayoutConfigError(f"Width weights must be positive, got {list(widths)}")
    total = float(sum(widths))
    return [w / total for w in widths]


def validate_header_spans(spans: Sequence[HeaderSpan], n_columns: int) -> None:
    by_tier: Dict[int, List[HeaderSpan]] = defaultdict(list)
    for span in spans:
        if span.tier not in HEADER_TIERS:
            raise LayoutConfigError(f"Header '{span.label}' has tier {span.tier}; expected 0 or -1")
        if not (0 <= span.start <= span.stop < n_columns):
            raise LayoutConfigError(
                f"Header '{span.label}' spans columns {span.start}..{span.stop}, outside 0..{n_columns - 1}"
            )
        by_tier[span.tier].append(span)
    for tier, tier_spans in by_tier.items():
        ordered = sorted(tier_spans, key=lambda s: s.start)
        for prev, cur in zip(ordered, ordered[1:]):
            if cur.start <= prev.stop:
                raise LayoutConfigError(
                    f"Header spans '{prev.label}' and '{cur.label}' overlap in tier {tier}"
                )


def validate_rules(rules: Sequence[RuleSpec], n_rows: int, n_columns: int) -> None:
    for rule in rules:
        stop = n_columns - 1 if rule.stop is None else rule.stop
        if not (0 <= rule.row <= n_rows):
            raise LayoutConfigError(f"Rule row {rule.row} outside 0..{n_rows}")
        if not (0 <= rule.start <= stop < n_columns):
            raise LayoutConfigError(f"Rule columns {rule.start}..{stop} outside 0..{n_columns - 1}")


def validate_layout(layout: Layout, n_rows: int) -> None:
    """Check a whole layout against the row count. Raises LayoutConfigError."""
    if not layout.columns:
        raise LayoutConfigError("A layout needs at least one column")
    names = [c.name for c in layout.columns]
    dupes = sorted({n for n in names if names.count(n) > 1})
    if dupes:
        raise LayoutConfigError(f"Duplicate column names: {dupes}")
    normalize_widths(layout.widths, len(layout.columns))
    for col in layout.columns:
        if col.align is not None and col.align not in ALIGNMENTS:
            raise LayoutConfigError(f"Column '{col.name}' has unknown alignment '{col.align}'")
        if col.is_plot:
            if col.axis is None:
                raise LayoutConfigError(f"Plot column '{col.name}' has no axis range")
            for s in col.series:
                if len(s.intervals) != n_rows:
                    raise LayoutConfigError(
                        f"Series '{s.name}' in column '{col.name}' has {len(s.intervals)} entries for {n_rows} rows"
                    )
        elif not col.field:
            raise LayoutConfigError(f"Text column '{col.name}' names no field")
    stripes = layout.stripes
    if stripes.parity not in (None, 0, 1):
        raise LayoutConfigError(f"Stripe parity must be 0, 1 or None, got {stripes.parity}")
    validate_header_spans(layout.header_spans, len(layout.columns))
    validate_rules(layout.rules, n_rows, len(layout.columns))


def validate_fields(columns: Sequence[ColumnSpec], rows: Sequence[DisplayRow]) -> None:
    """Every text column must name a cell that the display rows carry."""
    if not rows:
        return
    known = set()
    for row in rows:
        known.update(row.cells)
    for col in columns:
        if not col.is_plot and col.field not in known:
            raise LayoutConfigError(
                f"Text column '{col.name}' reads field '{col.field}', which no row has; known: {sorted(known)}"
            )


# --------------------------- composition --------------------------- #

def default_alignment(column: ColumnSpec) -> str:
    if column.align:
        return column.align
    return "left" if column.field == LABEL_KEY else "center"


def stripe_flags(indices: Sequence[int], parity: Optional[int]) -> List[bool]:
    if parity is None:
        return [False] * len(indices)
    return [idx % 2 == parity for idx in indices]


def stripe_bands(indices: Sequence[int], stripes: StripeSpec) -> List[StripeBand]:
    bands = []
    for idx, flag in zip(indices, stripe_flags(indices, stripes.parity)):
        color = stripes.color if flag else stripes.alt_color
        if color:
            bands.append(StripeBand(idx - 0.5, idx + 0.5, color))
    return bands


def series_offsets(count: int, spacing: float) -> List[float]:
    # centered around the row, first series on top
    return [((count - 1) / 2.0 - i) * spacing for i in range(count)]


def _text_cells(rows: Sequence[DisplayRow], column: ColumnSpec, align: str) -> Tuple[Cell, ...]:
    return tuple(Cell(float(r.index), r.cell(column.field), r.bold, align) for r in rows)


def _plot_glyphs(rows: Sequence[DisplayRow], column: ColumnSpec) -> Tuple[Glyph, ...]:
    offsets = series_offsets(len(column.series), column.series_spacing)
    glyphs = []
    for series, offset in zip(column.series, offsets):
        for row, interval in zip(rows, series.intervals):
            if interval is None:
                continue
            glyphs.append(
                Glyph(
                    y=row.index + offset,
                    series=series.name,
                    color=series.color,
                    marker=series.marker,
                    estimate=interval.estimate,
                    lower=interval.lower,
                    upper=interval.upper,
                    arrow_low=interval.truncated_low,
                    arrow_high=interval.truncated_high,
                )
            )
    return tuple(glyphs)


def compose(
    display_rows: Sequence[DisplayRow],
    columns: Sequence[ColumnSpec],
    header_spans: Sequence[HeaderSpan] = (),
    rules: Sequence[RuleSpec] = (),
    widths: Optional[Sequence[float]] = None,
    stripes: StripeSpec = StripeSpec(),
) -> ComposedFigure:
    """Assemble a renderable forest-plot structure. Widths default to equal weights."""
    columns = tuple(columns)
    layout = Layout(
        columns=columns,
        widths=tuple(widths) if widths is not None else tuple(1.0 for _ in columns),
        header_spans=tuple(header_spans),
        rules=tuple(rules),
        stripes=stripes,
    )
    return compose_layout(display_rows, layout)


def compose_layout(display_rows: Sequence[DisplayRow], layout: Layout) -> ComposedFigure:
    rows = tuple(display_rows)
    n_rows = len(rows)
    validate_layout(layout, n_rows)
    validate_fields(layout.columns, rows)

    fractions = normalize_widths(layout.widths, len(layout.columns))
    placed: List[ComposedColumn] = []
    left = 0.0
    for col, frac in zip(layout.columns, fractions):
        placed.append(ComposedColumn(spec=col, align=default_alignment(col), left=left, width=frac))
        left += frac

    cells: Dict[int, Tuple[Cell, ...]] = {}
    glyphs: Dict[int, Tuple[Glyph, ...]] = {}
    for i, pc in enumerate(placed):
        if pc.spec.is_plot:
            glyphs[i] = _plot_glyphs(rows, pc.spec)
        else:
            cells[i] = _text_cells(rows, pc.spec, pc.align)

    headers = tuple(
        PlacedHeader(
            label=span.label,
            y=float(n_rows + 1 - span.tier),
            left=placed[span.start].left,
            right=placed[span.stop].left + placed[span.stop].width,
        )
        for span in layout.header_spans
    )

    placed_rules = []
    for rule in layout.rules:
        stop = len(placed) - 1 if rule.stop is None else rule.stop
        placed_rules.append(
            PlacedRule(
                y=(n_rows - 1 - rule.row) + 0.5,
                left=placed[rule.start].left,
                right=placed[stop].left + placed[stop].width,
                columns=tuple(range(rule.start, stop + 1)),
                spec=rule,
            )
        )

    bands = stripe_bands([r.index for r in rows], layout.stripes)
    logger.debug("Composed %d rows x %d columns (%d stripes, %d headers)", n_rows, len(placed), len(bands), len(headers))
    return ComposedFigure(
        n_rows=n_rows,
        rows=rows,
        columns=tuple(placed),
        cells=cells,
        glyphs=glyphs,
        stripes=tuple(bands),
        headers=headers,
        rules=tuple(placed_rules),
    )
