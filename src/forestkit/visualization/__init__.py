"""
Visualization package for forestkit
Expose helper APIs for loading tables, rendering and export
"""
from .io import load_records, read_table
from .table_utils import frame_to_records, detect_arms, infer_depth
from .plots import render_forest
from .utils import save_figure_and_metadata, figure_metadata
from .styles import set_plot_style

__all__ = [
    "load_records",
    "read_table",
    "frame_to_records",
    "detect_arms",
    "infer_depth",
    "render_forest",
    "save_figure_and_metadata",
    "figure_metadata",
    "set_plot_style",
]
