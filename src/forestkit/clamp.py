from __future__ import annotations

from typing import Optional

from .errors import ForestDataError
from .formatting import validate_interval
from .types import AxisRange, ClampedInterval


def check_estimate_in_range(estimate: float, axis: AxisRange, label: str = "") -> None:
    """Raise ForestDataError when a point estimate is not visible on `axis`."""
    if not axis.contains(estimate):
        where = f" for row '{label}'" if label else ""
        raise ForestDataError(
            f"Estimate {estimate}{where} lies outside the axis range [{axis.min}, {axis.max}]"
        )


def clamp_interval(estimate, lower, upper, axis: AxisRange, label: str = "") -> Optional[ClampedInterval]:
    """Restrict an interval to the visible axis range.

    Bounds beyond an axis edge are set to that edge exactly and flagged as
    truncated so the renderer draws an arrow there instead of a cap. The
    estimate itself is never moved. An absent interval yields None.
    """
    if not validate_interval(estimate, lower, upper, label):
        return None

    truncated_low = lower < axis.min
    truncated_high = upper > axis.max
    return ClampedInterval(
        estimate=float(estimate),
        lower=float(axis.min) if truncated_low else float(lower),
        upper=float(axis.max) if truncated_high else float(upper),
        truncated_low=truncated_low,
        truncated_high=truncated_high,
    )
