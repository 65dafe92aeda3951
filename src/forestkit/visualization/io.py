import logging
from pathlib import Path
from typing import List, Optional, Sequence, Union

import pandas as pd

from ..types import Record
from .table_utils import frame_to_records

logger = logging.getLogger(__name__)


def read_table(path: Union[str, Path]) -> pd.DataFrame:
    """Read a CSV keeping label whitespace (indentation encodes nesting)."""
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Data file not found: {p}")
    df = pd.read_csv(p, skipinitialspace=False)
    logger.debug("Loaded %s with shape %s", p.name, df.shape)
    return df


def load_records(
    path: Union[str, Path],
    *,
    estimate: Optional[str] = None,
    lower: Optional[str] = None,
    upper: Optional[str] = None,
    text_columns: Sequence[str] = (),
    indent: str = "  ",
) -> List[Record]:
    """Load a CSV file into Records. See `frame_to_records` for column lookup."""
    df = read_table(path)
    records = frame_to_records(
        df, estimate=estimate, lower=lower, upper=upper, text_columns=text_columns, indent=indent
    )
    logger.info("Loaded %d records from %s", len(records), Path(path).name)
    return records
