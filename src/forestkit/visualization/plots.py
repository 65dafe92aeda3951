from __future__ import annotations

import logging
from typing import List, Optional, Tuple

import matplotlib.pyplot as plt
from matplotlib import gridspec
from matplotlib.axes import Axes
from matplotlib.figure import Figure
from matplotlib.lines import Line2D
from matplotlib.ticker import NullLocator
from matplotlib.transforms import blended_transform_factory

from ..layout import ComposedColumn, ComposedFigure, Glyph

logger = logging.getLogger(__name__)

ALIGN_X = {"left": 0.02, "center": 0.5, "right": 0.98}


def _default_figsize(composed: ComposedFigure) -> Tuple[float, float]:
    width = 1.0 + 1.6 * len(composed.columns)
    height = 0.8 + 0.32 * (composed.top + 0.5)
    return width, height


def _draw_text_column(ax: Axes, column: ComposedColumn, composed: ComposedFigure, col_idx: int, font_size: Optional[float]) -> None:
    ax.axis("off")
    ax.set_xlim(0.0, 1.0)
    x = ALIGN_X[column.align]
    for cell in composed.cells.get(col_idx, ()):
        if not cell.text:
            continue
        ax.text(
            x, cell.y, cell.text,
            ha=column.align, va="center", fontsize=font_size,
            fontweight="bold" if cell.bold else "normal",
        )


def _draw_glyph(ax: Axes, g: Glyph, line_width: float, marker_size: float, cap_height: float) -> None:
    ax.hlines(g.y, g.lower, g.upper, color=g.color, lw=line_width, zorder=2)
    for x, arrow in ((g.lower, g.arrow_low), (g.upper, g.arrow_high)):
        if arrow:
            # true bound lies beyond the axis edge
            ax.annotate(
                "", xy=(x, g.y), xytext=(g.estimate, g.y),
                arrowprops=dict(arrowstyle="-|>", color=g.color, lw=line_width, shrinkA=0, shrinkB=0),
                annotation_clip=False, zorder=2,
            )
        else:
            ax.vlines(x, g.y - cap_height, g.y + cap_height, color=g.color, lw=line_width, zorder=2)
    ax.plot(g.estimate, g.y, marker=g.marker, color=g.color, markersize=marker_size, linestyle="none", zorder=3)


def _draw_plot_column(
    ax: Axes,
    column: ComposedColumn,
    composed: ComposedFigure,
    col_idx: int,
    font_size: Optional[float],
    line_width: float,
    marker_size: float,
    cap_height: float,
) -> None:
    spec = column.spec
    axis = spec.axis
    ax.set_xscale(axis.transform)
    ax.set_xlim(axis.min, axis.max)
    if axis.ticks:
        ax.set_xticks(list(axis.ticks))
        ax.set_xticklabels([f"{t:g}" for t in axis.ticks], fontsize=font_size)
        ax.xaxis.set_minor_locator(NullLocator())
    ax.set_yticks([])
    ax.set_facecolor("none")
    for side in ("left", "right", "top"):
        ax.spines[side].set_visible(False)
    ax.spines["bottom"].set_bounds(axis.min, axis.max)
    if spec.xlabel:
        ax.set_xlabel(spec.xlabel, fontsize=font_size)

    if spec.reference_line is not None and axis.contains(spec.reference_line):
        ax.axvline(spec.reference_line, color="grey", linestyle="--", lw=0.8, zorder=1, ymax=composed.n_rows / (composed.top + 0.5))

    for g in composed.glyphs.get(col_idx, ()):
        _draw_glyph(ax, g, line_width, marker_size, cap_height)

    if len(spec.series) > 1:
        handles = [
            Line2D([], [], marker=s.marker, color=s.color, linestyle="-", label=s.name)
            for s in spec.series
        ]
        ax.legend(handles=handles, loc="upper center", bbox_to_anchor=(0.5, -0.25), frameon=False,
                  ncol=len(handles), fontsize=font_size)


def render_forest(
    composed: ComposedFigure,
    *,
    figsize: Optional[Tuple[float, float]] = None,
    font_size: Optional[float] = None,
    line_width: float = 1.2,
    marker_size: float = 5.0,
    cap_height: float = 0.12,
    title: Optional[str] = None,
) -> Figure:
    """Draw a composed forest plot into a new matplotlib Figure.

    One axes per column, placed edge to edge and sharing the y axis so that
    stripes, rules and row text line up across the whole figure.
    """
    fig = plt.figure(figsize=figsize or _default_figsize(composed))
    gs = gridspec.GridSpec(
        1, len(composed.columns), figure=fig,
        width_ratios=[c.width for c in composed.columns], wspace=0.0,
    )
    axes: List[Axes] = []
    for i, column in enumerate(composed.columns):
        ax = fig.add_subplot(gs[0, i], sharey=axes[0] if axes else None)
        axes.append(ax)
        for band in composed.stripes:
            ax.axhspan(band.y_low, band.y_high, color=band.color, lw=0, zorder=0)
        if column.spec.is_plot:
            _draw_plot_column(ax, column, composed, i, font_size, line_width, marker_size, cap_height)
        else:
            _draw_text_column(ax, column, composed, i, font_size)
        if column.spec.title:
            ax.text(
                ALIGN_X[column.align], composed.title_y, column.spec.title,
                transform=ax.get_yaxis_transform(), ha=column.align, va="center",
                fontsize=font_size, fontweight="bold",
            )

    axes[0].set_ylim(-0.5, composed.top)

    for rule in composed.rules:
        for i in rule.columns:
            axes[i].axhline(rule.y, color=rule.spec.color, lw=rule.spec.linewidth, linestyle=rule.spec.linestyle, zorder=1)

    if composed.headers:
        x0 = axes[0].get_position().x0
        x1 = axes[-1].get_position().x1
        trans = blended_transform_factory(fig.transFigure, axes[0].transData)
        for header in composed.headers:
            left = x0 + header.left * (x1 - x0)
            right = x0 + header.right * (x1 - x0)
            fig.text(
                (left + right) / 2.0, header.y, header.label, transform=trans,
                ha="center", va="center", fontsize=font_size, fontweight="bold",
            )
            pad = 0.01 * (x1 - x0)
            fig.add_artist(Line2D(
                [left + pad, right - pad], [header.y - 0.35, header.y - 0.35],
                transform=trans, color="black", lw=0.6,
            ))

    if title:
        fig.suptitle(title, fontsize=(font_size or plt.rcParams["font.size"]) + 1)
    logger.debug("Rendered forest plot with %d axes", len(axes))
    return fig
