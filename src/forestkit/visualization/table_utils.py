from __future__ import annotations

import numbers
import re
from typing import Any, Dict, List, Optional, Sequence

import numpy as np
import pandas as pd

from ..errors import ForestDataError
from ..formatting import validate_interval
from ..types import Arm, Record


FIELD_ALIASES = {
    'label': ['label', 'group', 'subgroup', 'Subgroup', 'name'],
    'depth': ['depth', 'level', 'nesting'],
    'estimate': ['estimate', 'est', 'rr', 'or', 'hr', 'rd'],
    'lower': ['lower', 'lcl', 'ci_lower', 'lo'],
    'upper': ['upper', 'ucl', 'ci_upper', 'hi'],
    'is_reference': ['is_reference', 'reference', 'ref'],
}

ARM_EVENTS = re.compile(r"^events_(?P<arm>.+)$")
TRUE_TOKENS = {"true", "1", "yes", "y", "ref", "reference"}


def _find_column(df: pd.DataFrame, aliases: Sequence[str]) -> Optional[str]:
    for a in aliases:
        if a in df.columns:
            return a
    return None


def _value(row: Dict[str, Any], col: Optional[str]):
    if col is None:
        return None
    v = row.get(col)
    if v is None or (isinstance(v, float) and np.isnan(v)) or v is pd.NA:
        return None
    return v


def _as_flag(v) -> bool:
    if v is None:
        return False
    if isinstance(v, (bool, np.bool_, numbers.Number)):
        # 0/1 columns with blanks come back from pandas as float
        return bool(v)
    return str(v).strip().lower() in TRUE_TOKENS


def detect_arms(df: pd.DataFrame) -> Dict[str, tuple]:
    """Map arm name -> (events column, denominator column).

    `events_<arm>` pairs with `n_<arm>`; a plain `events`/`n` pair becomes arm 'all'.
    """
    arms: Dict[str, tuple] = {}
    for col in df.columns:
        m = ARM_EVENTS.match(str(col))
        if m and f"n_{m.group('arm')}" in df.columns:
            arms[m.group('arm')] = (col, f"n_{m.group('arm')}")
    if not arms and 'events' in df.columns and 'n' in df.columns:
        arms['all'] = ('events', 'n')
    return arms


def infer_depth(label: str, indent: str = "  ") -> int:
    if not indent:
        return 0
    stripped = label.lstrip(" \t")
    return (len(label) - len(stripped)) // len(indent)


def frame_to_records(
    df: pd.DataFrame,
    *,
    estimate: Optional[str] = None,
    lower: Optional[str] = None,
    upper: Optional[str] = None,
    text_columns: Sequence[str] = (),
    indent: str = "  ",
) -> List[Record]:
    """Convert a DataFrame to Records.

    Column names are looked up through FIELD_ALIASES unless given explicitly,
    which lets one table feed several estimate series (e.g. rr/rd columns).
    Malformed intervals raise ForestDataError naming the 1-based data row.
    """
    if df is None or df.empty:
        return []
    label_col = _find_column(df, FIELD_ALIASES['label'])
    if label_col is None:
        raise ForestDataError(f"No label column found; expected one of {FIELD_ALIASES['label']}")
    est_col = estimate or _find_column(df, FIELD_ALIASES['estimate'])
    lo_col = lower or _find_column(df, FIELD_ALIASES['lower'])
    hi_col = upper or _find_column(df, FIELD_ALIASES['upper'])
    for given in (estimate, lower, upper, *text_columns):
        if given is not None and given not in df.columns:
            raise ForestDataError(f"Column '{given}' not found; available: {list(df.columns)}")
    depth_col = _find_column(df, FIELD_ALIASES['depth'])
    ref_col = _find_column(df, FIELD_ALIASES['is_reference'])
    arm_cols = detect_arms(df)

    records = []
    for i, row in enumerate(df.to_dict(orient='records'), start=1):
        raw_label = str(_value(row, label_col) or "")
        depth = _value(row, depth_col)
        depth = int(depth) if depth is not None else infer_depth(raw_label, indent)
        est, lo, hi = (_value(row, c) for c in (est_col, lo_col, hi_col))
        est, lo, hi = (None if v is None else float(v) for v in (est, lo, hi))
        try:
            validate_interval(est, lo, hi, raw_label.strip())
        except ForestDataError as e:
            raise ForestDataError(f"Data row {i}: {e}") from e
        arms = []
        for name, (ev_col, n_col) in arm_cols.items():
            ev, n = _value(row, ev_col), _value(row, n_col)
            arms.append(Arm(name, None if ev is None else int(ev), None if n is None else int(n)))
        text = {c: ("" if _value(row, c) is None else str(_value(row, c))) for c in text_columns}
        records.append(
            Record(
                label=raw_label.strip(),
                depth=depth,
                arms=tuple(arms),
                estimate=est,
                lower=lo,
                upper=hi,
                is_reference=_as_flag(_value(row, ref_col)),
                text=text,
            )
        )
    return records
