from pathlib import Path
import json
import logging
from typing import Optional

from ..columns import series_counts
from ..layout import ComposedFigure

logger = logging.getLogger(__name__)


def figure_metadata(composed: ComposedFigure, **extra) -> dict:
    """Summarise a composed figure for the JSON sidecar."""
    plots = {}
    for column in composed.columns:
        if column.spec.is_plot:
            drawn, truncated = series_counts(column.spec)
            plots[column.spec.name] = {
                "series": [s.name for s in column.spec.series],
                "axis": [column.spec.axis.min, column.spec.axis.max],
                "transform": column.spec.axis.transform,
                "intervals": drawn,
                "truncated": truncated,
            }
    meta = {
        "rows": composed.n_rows,
        "columns": [c.spec.name for c in composed.columns],
        "plots": plots,
    }
    meta.update(extra)
    return meta


def save_figure_and_metadata(fig, out_file: Path, metadata: Optional[dict], fmt: str = 'png', dpi: int = 300,
                             size: Optional[tuple] = None):
    """Save a matplotlib figure and a JSON metadata sidecar.

    `size` is (width, height) in inches and overrides the figure's own size.
    """
    out_file = Path(out_file)
    out_file.parent.mkdir(parents=True, exist_ok=True)
    if size is not None:
        fig.set_size_inches(*size)
    try:
        fig.savefig(str(out_file), format=fmt, dpi=dpi, bbox_inches='tight')
    except Exception:
        logger.exception('Failed to save figure %s', out_file)
        raise
    if metadata is None:
        return
    meta_file = out_file.with_suffix(out_file.suffix + '.metadata.json')
    try:
        with open(meta_file, 'w', encoding='utf-8') as fh:
            json.dump(metadata, fh, indent=2)
    except Exception as e:
        logger.exception('Failed to write metadata file: %s', e)
