"""Column builders shared by every forest-plot page."""
from __future__ import annotations

import logging
from dataclasses import replace
from typing import Optional, Sequence, Tuple

from .clamp import check_estimate_in_range, clamp_interval
from .formatting import ESTIMATE_KEY, LABEL_KEY, validate_interval
from .types import PLOT, TEXT, AxisRange, ColumnSpec, Record, Series

logger = logging.getLogger(__name__)


def make_series(
    name: str,
    records: Sequence[Record],
    axis: AxisRange,
    *,
    color: str = "black",
    marker: str = "s",
) -> Series:
    """Clamp every record's interval against `axis` into one named series."""
    intervals = []
    for rec in records:
        if validate_interval(rec.estimate, rec.lower, rec.upper, rec.label):
            check_estimate_in_range(rec.estimate, axis, rec.label.strip())
        intervals.append(clamp_interval(rec.estimate, rec.lower, rec.upper, axis, rec.label.strip()))
    n_trunc = sum(1 for iv in intervals if iv is not None and (iv.truncated_low or iv.truncated_high))
    if n_trunc:
        logger.debug("Series '%s': %d of %d intervals truncated to [%s, %s]", name, n_trunc, len(intervals), axis.min, axis.max)
    return Series(name=name, intervals=tuple(intervals), color=color, marker=marker)


def build_column(
    name: str,
    *,
    title: Optional[str] = None,
    field: Optional[str] = None,
    align: Optional[str] = None,
    axis: Optional[AxisRange] = None,
    series: Sequence[Series] = (),
    reference_line: Optional[float] = None,
    xlabel: str = "",
    series_spacing: float = 0.2,
) -> ColumnSpec:
    """
    Build a text or plot column.

    A column is a plot column when an axis is given, otherwise a text column
    rendering the DisplayRow cell named by `field` (defaults to `name`).
    """
    if axis is not None:
        return ColumnSpec(
            name=name,
            kind=PLOT,
            title=name if title is None else title,
            align=align,
            axis=axis,
            series=tuple(series),
            reference_line=reference_line,
            xlabel=xlabel,
            series_spacing=series_spacing,
        )
    return ColumnSpec(
        name=name,
        kind=TEXT,
        title=name if title is None else title,
        field=field or name,
        align=align,
    )


def label_column(title: str = "Subgroup") -> ColumnSpec:
    return build_column(LABEL_KEY, title=title, field=LABEL_KEY, align="left")


def estimate_column(title: str = "Estimate (95% CI)", *, align: Optional[str] = None) -> ColumnSpec:
    return build_column(ESTIMATE_KEY, title=title, field=ESTIMATE_KEY, align=align)


def events_column(arm: str, title: Optional[str] = None) -> ColumnSpec:
    return build_column(f"events_{arm}", title=arm if title is None else title, field=arm)


def retitle(
    column: ColumnSpec, title: str, *, name: Optional[str] = None, field: Optional[str] = None
) -> ColumnSpec:
    """Return the same column under another title.

    A new `name` keeps reading the same cells; pass `field` to point the copy
    at another DisplayRow cell.
    """
    return replace(column, title=title, name=name or column.name, field=field or column.field)


def series_counts(column: ColumnSpec) -> Tuple[int, int]:
    """(drawn intervals, truncated intervals) across all series of a plot column."""
    drawn = truncated = 0
    for s in column.series:
        for iv in s.intervals:
            if iv is None:
                continue
            drawn += 1
            if iv.truncated_low or iv.truncated_high:
                truncated += 1
    return drawn, truncated
