"""forestkit public API: shape trial summary tables into forest plots."""

from .errors import ForestDataError, LayoutConfigError
from .types import (
    Arm,
    Record,
    DisplayRow,
    AxisRange,
    ClampedInterval,
    Series,
    ColumnSpec,
    HeaderSpan,
    RuleSpec,
    StripeSpec,
    Layout,
)
from .formatting import FormatOptions, format_record, format_rows, add_estimate_cells, format_events, format_estimate, depth_style, row_indices
from .clamp import clamp_interval, check_estimate_in_range
from .columns import make_series, build_column, label_column, estimate_column, events_column, retitle
from .layout import compose, compose_layout, validate_fields, validate_layout, stripe_flags, ComposedFigure

__all__ = [
    "ForestDataError",
    "LayoutConfigError",
    "Arm",
    "Record",
    "DisplayRow",
    "AxisRange",
    "ClampedInterval",
    "Series",
    "ColumnSpec",
    "HeaderSpan",
    "RuleSpec",
    "StripeSpec",
    "Layout",
    "FormatOptions",
    "format_record",
    "format_rows",
    "add_estimate_cells",
    "format_events",
    "format_estimate",
    "depth_style",
    "row_indices",
    "clamp_interval",
    "check_estimate_in_range",
    "make_series",
    "build_column",
    "label_column",
    "estimate_column",
    "events_column",
    "retitle",
    "compose",
    "compose_layout",
    "validate_layout",
    "validate_fields",
    "stripe_flags",
    "ComposedFigure",
]
