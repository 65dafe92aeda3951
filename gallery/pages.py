"""
Narrated gallery pages.

Each page function is one tutorial: its docstring is the narrative shown on
the documentation site, its body loads a CSV, derives display strings,
chooses columns and layout, and saves a PNG. Pages share the column
builders of `forestkit.columns` instead of redefining columns per page.
"""
from __future__ import annotations

import inspect
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, Generator, Optional

import matplotlib.pyplot as plt
from matplotlib.figure import Figure

from forestkit.columns import (
    build_column,
    estimate_column,
    events_column,
    label_column,
    make_series,
    retitle,
)
from forestkit.formatting import FormatOptions, add_estimate_cells, format_rows
from forestkit.layout import ComposedFigure, compose
from forestkit.types import AxisRange, HeaderSpan, RuleSpec, StripeSpec
from forestkit.utils.config import get_format_options, get_stripe_spec
from forestkit.visualization import figure_metadata, render_forest, save_figure_and_metadata

from .data_access import load_dataset
from .style import PlotStyle

RATIO_AXIS = AxisRange(0.5, 2.0, transform="log", ticks=(0.5, 0.75, 1.0, 1.5, 2.0))
TREATED_COLOR = "#1f4e79"
CONTROL_COLOR = "#c55a11"


# --- Helper: Context Manager for Figures ---
@contextmanager
def page_figure(composed: ComposedFigure, output_path: Path, style: PlotStyle, **metadata: Any) -> Generator[Figure, None, None]:
    """
    Render `composed`, let the page decorate the figure, then save and close it.
    """
    style.apply()
    output_path.parent.mkdir(parents=True, exist_ok=True)
    fig = render_forest(
        composed,
        figsize=style.figure_size,
        font_size=style.font_size,
        line_width=style.line_width,
        marker_size=style.marker_size,
    )
    try:
        yield fig
        save_figure_and_metadata(fig, output_path, figure_metadata(composed, **metadata), fmt=style.fmt, dpi=style.dpi)
        print(f"[OK] Saved: {output_path.name}")
    except Exception as e:
        print(f"[ERROR] Failed to save {output_path.name}: {e}")
        raise
    finally:
        plt.close(fig)


def _footnote(fig: Figure, text: str, style: PlotStyle) -> None:
    fig.text(0.01, 0.0, text, ha="left", va="top", fontsize=style.font_size - 1, color="#555555")


# --------------------------- Pages --------------------------- #

def page_basic_forest(data_dir: Optional[Path], output_path: Path, style: PlotStyle, cfg: Dict[str, Any]) -> ComposedFigure:
    """
    A first forest plot.

    We load `subgroups.csv`, one row per subgroup with event counts for both
    arms and a risk ratio with its 95% confidence interval. Category rows such
    as "Sex" carry no numbers; they print in bold and the subgroups below them
    are indented, because their labels start with two spaces in the CSV.

    The figure is a table of five columns: the label, events over totals for
    each arm, the plot itself on a logarithmic axis from 0.5 to 2, and the
    formatted estimate. The first CSV row ends up at the top.
    """
    opts = get_format_options(cfg, "ratio")
    records = load_dataset(data_dir, "subgroups.csv", indent=opts.indent)
    rows = format_rows(records, opts)

    plot = build_column(
        "plot", title="", axis=RATIO_AXIS, reference_line=1.0, xlabel="Risk ratio",
        series=[make_series("Risk ratio", records, RATIO_AXIS, color=TREATED_COLOR)],
    )
    columns = [
        label_column(),
        events_column("treated", "Treated"),
        events_column("control", "Control"),
        plot,
        estimate_column("RR (95% CI)"),
    ]
    n = len(rows)
    composed = compose(
        rows,
        columns,
        header_spans=[HeaderSpan("Events / N", 1, 2)],
        rules=[RuleSpec(0), RuleSpec(n)],
        widths=[3.0, 1.4, 1.4, 3.0, 2.0],
        stripes=get_stripe_spec(cfg),
    )
    with page_figure(composed, output_path, style, page="basic", dataset="subgroups.csv"):
        pass
    return composed


def page_headers_and_stripes(data_dir: Optional[Path], output_path: Path, style: PlotStyle, cfg: Dict[str, Any]) -> ComposedFigure:
    """
    Grouped headers and striping.

    The same subgroup table, now with percentages after each events/total
    pair and an interaction p-value column passed straight through from the
    CSV. Two tiers of header spans sit above the column titles: each arm gets
    its own label, and a wider "Randomised arms" label covers both.

    Stripes are computed once for the whole figure from the row index, so
    they line up across text and plot columns. Here the even rows are shaded
    and the odd rows get an explicit white fill.
    """
    base = get_format_options(cfg, "ratio")
    opts = FormatOptions(decimals=base.decimals, percent=True, indent=base.indent, ref_marker=base.ref_marker)
    records = load_dataset(data_dir, "subgroups.csv", text_columns=["p_interaction"], indent=opts.indent)
    rows = format_rows(records, opts)

    events = events_column("treated", "Events / N (%)")
    columns = [
        label_column(),
        events,
        retitle(events_column("control"), events.title),
        estimate_column("RR (95% CI)"),
        build_column(
            "plot", title="", axis=RATIO_AXIS, reference_line=1.0, xlabel="Risk ratio",
            series=[make_series("Risk ratio", records, RATIO_AXIS, color=TREATED_COLOR, marker="D")],
        ),
        build_column("p_interaction", title="P for interaction", align="right"),
    ]
    n = len(rows)
    composed = compose(
        rows,
        columns,
        header_spans=[
            HeaderSpan("Treated", 1, 1, tier=0),
            HeaderSpan("Control", 2, 2, tier=0),
            HeaderSpan("Randomised arms", 1, 2, tier=-1),
        ],
        rules=[RuleSpec(0), RuleSpec(n, linewidth=1.2)],
        widths=[2.6, 1.9, 1.9, 2.0, 3.0, 1.4],
        stripes=StripeSpec(parity=0, color="#e8eef5", alt_color="white"),
    )
    with page_figure(composed, output_path, style, page="headers", dataset="subgroups.csv"):
        pass
    return composed


def page_truncated_intervals(data_dir: Optional[Path], output_path: Path, style: PlotStyle, cfg: Dict[str, Any]) -> ComposedFigure:
    """
    Intervals wider than the axis.

    A fixed axis keeps figures comparable, but some confidence intervals are
    wider than it. Each bound beyond an edge is cut at that edge and drawn
    with an arrowhead instead of a flat cap, so the reader knows the interval
    keeps going. The printed estimate column still shows the true bounds.

    In `truncation.csv` the "Female" interval (0.40 to 1.90) exceeds the
    linear axis from 0.5 to 1.5 on both sides.
    """
    opts = get_format_options(cfg, "ratio")
    records = load_dataset(data_dir, "truncation.csv", indent=opts.indent)
    rows = format_rows(records, opts)

    axis = AxisRange(0.5, 1.5, ticks=(0.5, 0.75, 1.0, 1.25, 1.5))
    columns = [
        label_column("Group"),
        events_column("all", "Events / N"),
        build_column(
            "plot", title="", axis=axis, reference_line=1.0, xlabel="Risk ratio",
            series=[make_series("Risk ratio", records, axis)],
        ),
        estimate_column("RR (95% CI)"),
    ]
    composed = compose(
        rows, columns,
        rules=[RuleSpec(0)],
        widths=[2.0, 1.5, 3.0, 2.0],
        stripes=get_stripe_spec(cfg),
    )
    with page_figure(composed, output_path, style, page="truncation", dataset="truncation.csv") as fig:
        _footnote(fig, "Arrows mark confidence limits beyond the axis range.", style)
    return composed


def page_two_series(data_dir: Optional[Path], output_path: Path, style: PlotStyle, cfg: Dict[str, Any]) -> ComposedFigure:
    """
    Two analyses in one plot.

    Sensitivity analyses are easiest to read next to the main result. We read
    the intention-to-treat and per-protocol estimates from the same CSV as
    two named series and draw both in a single plot column; they are shifted
    slightly up and down within each row and a legend names them.

    Both estimate columns come from the same column builder with a different
    title.
    """
    opts = get_format_options(cfg, "ratio")
    itt = load_dataset(data_dir, "sensitivity.csv", estimate="itt_rr", lower="itt_lcl", upper="itt_ucl", indent=opts.indent)
    pp = load_dataset(data_dir, "sensitivity.csv", estimate="pp_rr", lower="pp_lcl", upper="pp_ucl", indent=opts.indent)
    rows = add_estimate_cells(format_rows(itt, opts), pp, "estimate_pp", opts)

    columns = [
        label_column(),
        retitle(estimate_column(), "ITT RR (95% CI)"),
        retitle(estimate_column(), "Per-protocol RR (95% CI)", name="estimate_pp", field="estimate_pp"),
        build_column(
            "plot", title="", axis=RATIO_AXIS, reference_line=1.0, xlabel="Risk ratio",
            series=[
                make_series("Intention to treat", itt, RATIO_AXIS, color=TREATED_COLOR, marker="s"),
                make_series("Per protocol", pp, RATIO_AXIS, color=CONTROL_COLOR, marker="o"),
            ],
            series_spacing=0.22,
        ),
    ]
    composed = compose(
        rows, columns,
        rules=[RuleSpec(0)],
        widths=[2.4, 2.0, 2.0, 3.4],
        stripes=get_stripe_spec(cfg),
    )
    with page_figure(composed, output_path, style, page="two_series", dataset="sensitivity.csv"):
        pass
    return composed


def page_ratio_and_difference(data_dir: Optional[Path], output_path: Path, style: PlotStyle, cfg: Dict[str, Any]) -> ComposedFigure:
    """
    Relative and absolute effects side by side.

    `risk_measures.csv` holds a risk ratio and a risk difference (in
    percentage points) per row. Ratios print with two decimals on a log axis
    centred on 1; differences print with one decimal on a linear axis centred
    on 0. The standard-dose row is the reference category: it has no estimate
    and prints "(ref)" instead of an empty cell.
    """
    ratio_opts = get_format_options(cfg, "ratio")
    diff_opts = get_format_options(cfg, "difference")
    rr = load_dataset(data_dir, "risk_measures.csv", estimate="rr", lower="rr_lcl", upper="rr_ucl", indent=ratio_opts.indent)
    rd = load_dataset(data_dir, "risk_measures.csv", estimate="rd", lower="rd_lcl", upper="rd_ucl", indent=ratio_opts.indent)
    rows = add_estimate_cells(format_rows(rr, ratio_opts), rd, "rd", diff_opts)

    rd_axis = AxisRange(-15.0, 10.0, ticks=(-15.0, -10.0, -5.0, 0.0, 5.0, 10.0))
    columns = [
        label_column("Outcome"),
        events_column("treated", "Treated"),
        events_column("control", "Control"),
        build_column(
            "rr_plot", title="", axis=RATIO_AXIS, reference_line=1.0, xlabel="Risk ratio",
            series=[make_series("Risk ratio", rr, RATIO_AXIS, color=TREATED_COLOR)],
        ),
        estimate_column("RR (95% CI)"),
        build_column(
            "rd_plot", title="", axis=rd_axis, reference_line=0.0, xlabel="Risk difference (%)",
            series=[make_series("Risk difference", rd, rd_axis, color=CONTROL_COLOR, marker="o")],
        ),
        build_column("rd", title="RD (95% CI)"),
    ]
    n = len(rows)
    composed = compose(
        rows, columns,
        header_spans=[
            HeaderSpan("Events / N", 1, 2),
            HeaderSpan("Relative effect", 3, 4),
            HeaderSpan("Absolute effect", 5, 6),
        ],
        rules=[RuleSpec(0), RuleSpec(n)],
        widths=[2.4, 1.3, 1.3, 2.6, 1.8, 2.6, 1.8],
        stripes=get_stripe_spec(cfg),
    )
    with page_figure(composed, output_path, style, page="ratio_and_difference", dataset="risk_measures.csv"):
        pass
    return composed


# --------------------------- Registry --------------------------- #

@dataclass(frozen=True)
class Page:
    slug: str
    build: Callable[..., ComposedFigure]

    @property
    def title(self) -> str:
        return self.narrative.splitlines()[0].rstrip(".") if self.narrative else self.slug

    @property
    def narrative(self) -> str:
        return inspect.cleandoc(self.build.__doc__ or "")

    @property
    def body(self) -> str:
        return "\n".join(self.narrative.splitlines()[1:]).strip()

    @property
    def filename(self) -> str:
        return f"{self.slug}.png"


PAGES = (
    Page("basic", page_basic_forest),
    Page("headers", page_headers_and_stripes),
    Page("truncation", page_truncated_intervals),
    Page("two_series", page_two_series),
    Page("ratio_and_difference", page_ratio_and_difference),
)


def get_page(slug: str) -> Page:
    for page in PAGES:
        if page.slug == slug:
            return page
    raise KeyError(f"Unknown page '{slug}'; available: {[p.slug for p in PAGES]}")
