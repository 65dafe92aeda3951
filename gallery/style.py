from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

import matplotlib as mpl

from forestkit.utils.config import get_figure_size
from forestkit.visualization.styles import set_plot_style


@dataclass
class PlotStyle:
    """
    Lightweight configuration for figure styling.

    Instances of this class are passed to every gallery page and applied
    before a figure is rendered, so visual tweaks (font size, line width,
    figure size) do not require changes to the page code itself.
    """

    dpi: int = 200
    font_size: float = 9.0
    line_width: float = 1.2
    marker_size: float = 5.0
    figure_size: Optional[Tuple[float, float]] = None
    fmt: str = "png"

    def apply(self) -> None:
        """
        Apply this style to matplotlib's global rcParams.
        """
        set_plot_style(dpi=self.dpi, font_size=self.font_size)
        mpl.rcParams["lines.linewidth"] = self.line_width
        mpl.rcParams["lines.markersize"] = self.marker_size


def style_from_config(cfg: dict) -> PlotStyle:
    fig = cfg.get("FIGURE") or {}
    sty = cfg.get("STYLE") or {}
    return PlotStyle(
        dpi=int(fig.get("dpi") or 200),
        font_size=float(sty.get("font_size") or 9.0),
        line_width=float(sty.get("line_width") or 1.2),
        marker_size=float(sty.get("marker_size") or 5.0),
        figure_size=get_figure_size(cfg),
        fmt=str(fig.get("format") or "png"),
    )


def style_from_args(args, base: Optional[PlotStyle] = None) -> PlotStyle:
    """
    Build a PlotStyle from argparse-style args, falling back to `base`.

    Expected optional attributes on `args`:
      - figure_dpi
      - font_size
      - line_width
      - marker_size
    """
    base = base or PlotStyle()
    return PlotStyle(
        dpi=int(getattr(args, "figure_dpi", None) or base.dpi),
        font_size=float(getattr(args, "font_size", None) or base.font_size),
        line_width=float(getattr(args, "line_width", None) or base.line_width),
        marker_size=float(getattr(args, "marker_size", None) or base.marker_size),
        figure_size=base.figure_size,
        fmt=base.fmt,
    )
