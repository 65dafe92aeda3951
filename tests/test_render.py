import json

import matplotlib.pyplot as plt
import pytest
from matplotlib.text import Annotation

from forestkit.columns import build_column, estimate_column, events_column, label_column, make_series
from forestkit.formatting import format_rows
from forestkit.layout import compose
from forestkit.types import HeaderSpan, RuleSpec, StripeSpec
from forestkit.visualization import figure_metadata, render_forest, save_figure_and_metadata


@pytest.fixture
def composed(scenario_records, scenario_axis):
    rows = format_rows(scenario_records)
    columns = [
        label_column(),
        events_column("all", "Events / N"),
        build_column("plot", title="", axis=scenario_axis, reference_line=1.0, xlabel="Risk ratio",
                     series=[make_series("RR", scenario_records, scenario_axis)]),
        estimate_column("RR (95% CI)"),
    ]
    return compose(
        rows, columns,
        header_spans=[HeaderSpan("Summary", 1, 3)],
        rules=[RuleSpec(0), RuleSpec(3)],
        widths=[2, 1.5, 3, 2],
        stripes=StripeSpec(parity=1),
    )


def test_end_to_end_scenario(composed):
    female = [g for g in composed.glyphs[2] if g.y == 0.0][0]
    assert female.arrow_high is True
    assert female.upper == 1.5

    fig = render_forest(composed)
    try:
        label_ax, _, plot_ax, est_ax = fig.axes
        arrows = [t for t in plot_ax.texts if isinstance(t, Annotation)]
        # Female is cut on both sides, the other rows are fully visible
        assert len(arrows) == 2
        assert {a.xy for a in arrows} == {(0.5, 0.0), (1.5, 0.0)}

        weights = {t.get_text(): t.get_fontweight() for t in label_ax.texts}
        assert weights["Overall"] == "bold"
        assert weights["  Male"] == "normal"
        assert weights["  Female"] == "normal"

        assert "0.85 (0.40 - 1.90)" in [t.get_text() for t in est_ax.texts]
        assert plot_ax.get_xlim() == pytest.approx((0.5, 1.5))
        assert label_ax.get_ylim() == pytest.approx((-0.5, composed.top))
        assert "Summary" in [t.get_text() for t in fig.texts]
    finally:
        plt.close(fig)


def test_stripes_drawn_on_every_column(composed):
    fig = render_forest(composed)
    try:
        for ax in fig.axes:
            assert len(ax.patches) == len(composed.stripes) == 1
    finally:
        plt.close(fig)


def test_log_axis_and_ticks(scenario_records):
    from forestkit.types import AxisRange

    axis = AxisRange(0.25, 4.0, transform="log", ticks=(0.25, 1.0, 4.0))
    col = build_column("plot", axis=axis, series=[make_series("RR", scenario_records, axis)])
    fig = render_forest(compose(format_rows(scenario_records), [label_column(), col]))
    try:
        ax = fig.axes[1]
        assert ax.get_xscale() == "log"
        assert list(ax.get_xticks()) == pytest.approx([0.25, 1.0, 4.0])
        assert not [t for t in ax.texts if isinstance(t, Annotation)]
    finally:
        plt.close(fig)


def test_save_with_metadata_sidecar(composed, tmp_path):
    fig = render_forest(composed)
    out = tmp_path / "figs" / "scenario.png"
    try:
        save_figure_and_metadata(fig, out, figure_metadata(composed, page="scenario"), dpi=50, size=(6, 2))
    finally:
        plt.close(fig)
    assert out.exists()
    meta = json.loads((tmp_path / "figs" / "scenario.png.metadata.json").read_text())
    assert meta["rows"] == 3
    assert meta["page"] == "scenario"
    assert meta["plots"]["plot"]["truncated"] == 1
    assert meta["plots"]["plot"]["intervals"] == 3
