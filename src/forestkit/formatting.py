"""
Row formatting: turn loaded records into display-ready strings.

Every page of the gallery repeats the same shaping step: events over totals,
an "estimate (lower - upper)" string rounded to a fixed number of decimals,
an indented or bold label depending on nesting depth, and a y position that
puts the first record at the top of the figure.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import FrozenSet, List, Optional, Sequence, Tuple

from .errors import ForestDataError
from .types import DisplayRow, Record

LABEL_KEY = "label"
ESTIMATE_KEY = "estimate"


@dataclass(frozen=True)
class FormatOptions:
    decimals: int = 2
    percent: bool = False
    indent: str = "  "
    bold_depths: FrozenSet[int] = frozenset({0})
    ref_marker: str = "(ref)"
    separator: str = " - "


def _is_missing(value) -> bool:
    return value is None or (isinstance(value, float) and math.isnan(value))


def validate_interval(estimate, lower, upper, label: str = "") -> bool:
    """Check an (estimate, lower, upper) triple.

    Returns False when the interval is absent altogether, True when it is
    complete and ordered. Anything in between is a data error.
    """
    missing = [_is_missing(v) for v in (estimate, lower, upper)]
    if all(missing):
        return False
    where = f" for row '{label}'" if label else ""
    if any(missing):
        raise ForestDataError(
            f"Incomplete interval{where}: estimate={estimate}, lower={lower}, upper={upper}"
        )
    if lower > upper:
        raise ForestDataError(f"Inverted interval{where}: lower {lower} > upper {upper}")
    if not (lower <= estimate <= upper):
        raise ForestDataError(f"Estimate {estimate}{where} lies outside its interval [{lower}, {upper}]")
    return True


def format_events(events, n, *, percent: bool = False, label: str = "") -> str:
    if _is_missing(events):
        return ""
    where = f" for row '{label}'" if label else ""
    if _is_missing(n) or n <= 0:
        raise ForestDataError(f"Event count {events}{where} has no usable denominator ({n})")
    if events < 0 or events > n:
        raise ForestDataError(f"Event count {events}{where} is not within 0..{n}")
    text = f"{int(events)} / {int(n)}"
    if percent:
        pct = f"{100.0 * events / n:.1f}".strip()
        text = f"{text} ({pct}%)"
    return text


def format_estimate(
    estimate,
    lower,
    upper,
    decimals: int = 2,
    *,
    is_reference: bool = False,
    ref_marker: str = "(ref)",
    separator: str = " - ",
    label: str = "",
) -> str:
    if not validate_interval(estimate, lower, upper, label):
        return ref_marker if is_reference else ""
    d = int(decimals)
    # adding 0.0 turns a rounded -0.0 into 0.0
    estimate, lower, upper = (round(float(v), d) + 0.0 for v in (estimate, lower, upper))
    return f"{estimate:.{d}f} ({lower:.{d}f}{separator}{upper:.{d}f})"


def depth_style(depth: int, indent: str = "  ", bold_depths: FrozenSet[int] = frozenset({0})) -> Tuple[str, bool]:
    """Map a nesting depth to its (label prefix, bold) pair."""
    depth = max(int(depth), 0)
    return indent * depth, depth in bold_depths


def row_indices(count: int) -> List[int]:
    # first record ends up on top of a bottom-to-top y axis
    return list(range(count - 1, -1, -1))


def format_record(record: Record, index: int, options: Optional[FormatOptions] = None) -> DisplayRow:
    opts = options or FormatOptions()
    label = record.label.strip()
    prefix, bold = depth_style(record.depth, opts.indent, opts.bold_depths)

    cells = dict(record.text)
    cells[LABEL_KEY] = prefix + label
    cells[ESTIMATE_KEY] = format_estimate(
        record.estimate,
        record.lower,
        record.upper,
        opts.decimals,
        is_reference=record.is_reference,
        ref_marker=opts.ref_marker,
        separator=opts.separator,
        label=label,
    )
    for arm in record.arms:
        cells[arm.name] = format_events(arm.events, arm.n, percent=opts.percent, label=label)

    return DisplayRow(label=prefix + label, index=index, bold=bold, depth=record.depth, cells=cells)


def format_rows(records: Sequence[Record], options: Optional[FormatOptions] = None) -> List[DisplayRow]:
    indices = row_indices(len(records))
    return [format_record(rec, idx, options) for rec, idx in zip(records, indices)]


def add_estimate_cells(
    rows: Sequence[DisplayRow],
    records: Sequence[Record],
    key: str,
    options: Optional[FormatOptions] = None,
) -> List[DisplayRow]:
    """Attach a second estimate string (another series or measure) under `key`."""
    if len(rows) != len(records):
        raise ForestDataError(f"Got {len(records)} records for {len(rows)} display rows")
    opts = options or FormatOptions()
    out = []
    for row, rec in zip(rows, records):
        text = format_estimate(
            rec.estimate, rec.lower, rec.upper, opts.decimals,
            is_reference=rec.is_reference, ref_marker=opts.ref_marker,
            separator=opts.separator, label=rec.label.strip(),
        )
        out.append(replace(row, cells={**row.cells, key: text}))
    return out
