#!/usr/bin/env python
"""
Render a forest plot straight from a CSV file.

The CSV needs a label column (label/group/subgroup), an estimate triple
(estimate/lower/upper, rr/lcl/ucl, ...) and optionally events_<arm>/n_<arm>
pairs. Nested subgroups are written with leading spaces in the label.

Usage:
    python scripts/render_forest.py --input gallery/data/truncation.csv \
        --output out/truncation.png --axis 0.5 1.5 --decimals 2
"""
from __future__ import annotations

import argparse
import logging
from dataclasses import replace
from pathlib import Path

import matplotlib.pyplot as plt

from forestkit.columns import build_column, estimate_column, events_column, label_column, make_series
from forestkit.formatting import format_rows
from forestkit.layout import compose
from forestkit.types import AxisRange, RuleSpec
from forestkit.utils.config import get_figure_size, get_format_options, get_stripe_spec, load_config
from forestkit.visualization import (
    figure_metadata,
    load_records,
    render_forest,
    save_figure_and_metadata,
    set_plot_style,
)

# Setup logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("render_forest")


def parse_args(argv=None):
    p = argparse.ArgumentParser(description="Render one CSV as a forest plot PNG.")
    p.add_argument("--input", type=Path, required=True, help="CSV file with one row per subgroup")
    p.add_argument("--output", type=Path, required=True, help="Output image path")
    p.add_argument("--config", type=Path, default=Path("config.yaml"), help="Path to config.yaml")
    p.add_argument("--axis", type=float, nargs=2, metavar=("MIN", "MAX"), default=(0.5, 2.0), help="Visible axis range")
    p.add_argument("--log", action="store_true", help="Use a logarithmic axis")
    p.add_argument("--ticks", type=float, nargs="*", default=None, help="Tick positions")
    p.add_argument("--kind", choices=["ratio", "difference"], default="ratio", help="Decimal preset from config FORMAT")
    p.add_argument("--decimals", type=int, default=None, help="Override decimal places")
    p.add_argument("--reference", type=float, default=None, help="No-effect line (default 1 for ratios, 0 for differences)")
    p.add_argument("--xlabel", default="", help="Axis label")
    p.add_argument("--title", default=None, help="Figure title")
    return p.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    cfg = load_config(args.config)
    opts = get_format_options(cfg, args.kind)
    if args.decimals is not None:
        opts = replace(opts, decimals=args.decimals)

    records = load_records(args.input, indent=opts.indent)
    rows = format_rows(records, opts)
    axis = AxisRange(args.axis[0], args.axis[1], transform="log" if args.log else "linear",
                     ticks=tuple(args.ticks or ()))
    reference = args.reference if args.reference is not None else (1.0 if args.kind == "ratio" else 0.0)

    arm_names = [a.name for a in records[0].arms] if records else []
    columns = [label_column()]
    columns += [events_column(name) for name in arm_names]
    columns.append(build_column("plot", title="", axis=axis, reference_line=reference, xlabel=args.xlabel,
                                series=[make_series(args.input.stem, records, axis)]))
    columns.append(estimate_column())
    widths = [2.5] + [1.4] * len(arm_names) + [3.0, 2.0]

    composed = compose(rows, columns, rules=[RuleSpec(0), RuleSpec(len(rows))], widths=widths,
                       stripes=get_stripe_spec(cfg))
    dpi = int(cfg["FIGURE"]["dpi"])
    set_plot_style(dpi=dpi, font_size=float(cfg["STYLE"]["font_size"]))
    fig = render_forest(composed, figsize=get_figure_size(cfg), title=args.title)
    try:
        save_figure_and_metadata(fig, args.output, figure_metadata(composed, source=str(args.input)),
                                 fmt=str(cfg["FIGURE"]["format"]), dpi=dpi)
    finally:
        plt.close(fig)
    logger.info(f"Saved forest plot to {args.output}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
