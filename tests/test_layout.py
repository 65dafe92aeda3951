import pytest

from forestkit.columns import build_column, estimate_column, events_column, label_column, make_series, retitle
from forestkit.errors import ForestDataError, LayoutConfigError
from forestkit.formatting import format_rows
from forestkit.layout import compose, series_offsets, stripe_flags
from forestkit.types import Arm, AxisRange, HeaderSpan, Record, RuleSpec, StripeSpec


def _columns(records, axis):
    return [
        label_column(),
        events_column("all", "Events / N"),
        build_column("plot", title="", axis=axis, reference_line=1.0,
                     series=[make_series("RR", records, axis)]),
        estimate_column(),
    ]


def test_stripe_flags_alternate_by_parity():
    idx = [5, 4, 3, 2, 1, 0]
    flags = stripe_flags(idx, 1)
    assert flags == [True, False, True, False, True, False]
    assert stripe_flags(idx, 0) == [not f for f in flags]
    assert stripe_flags(idx, None) == [False] * 6
    for a, b in zip(flags, flags[1:]):
        assert a != b


def test_widths_normalized_and_placed_left_to_right(scenario_records, scenario_axis):
    rows = format_rows(scenario_records)
    composed = compose(rows, _columns(scenario_records, scenario_axis), widths=[2, 1, 3, 2])
    widths = [c.width for c in composed.columns]
    assert widths == pytest.approx([0.25, 0.125, 0.375, 0.25])
    lefts = [c.left for c in composed.columns]
    assert lefts == pytest.approx([0.0, 0.25, 0.375, 0.75])
    assert [c.align for c in composed.columns] == ["left", "center", "center", "center"]


def test_equal_widths_by_default(scenario_records, scenario_axis):
    rows = format_rows(scenario_records)
    composed = compose(rows, _columns(scenario_records, scenario_axis))
    assert [c.width for c in composed.columns] == pytest.approx([0.25] * 4)


def test_text_cells_follow_rows(scenario_records, scenario_axis):
    rows = format_rows(scenario_records)
    composed = compose(rows, _columns(scenario_records, scenario_axis))
    labels = composed.cells[0]
    assert [c.text for c in labels] == ["Overall", "  Male", "  Female"]
    assert [c.y for c in labels] == [2.0, 1.0, 0.0]
    assert [c.bold for c in labels] == [True, False, False]
    assert [c.text for c in composed.cells[1]] == ["50 / 500", "20 / 200", "30 / 300"]


def test_glyphs_mark_truncated_ends(scenario_records, scenario_axis):
    rows = format_rows(scenario_records)
    composed = compose(rows, _columns(scenario_records, scenario_axis))
    glyphs = {g.y: g for g in composed.glyphs[2]}
    female = glyphs[0.0]
    assert female.arrow_high and female.upper == 1.5
    assert female.arrow_low and female.lower == 0.5
    overall = glyphs[2.0]
    assert not overall.arrow_low and not overall.arrow_high
    assert (overall.lower, overall.estimate, overall.upper) == (0.8, 0.9, 1.0)


def test_reference_rows_have_no_glyph():
    records = [
        Record("Overall", arms=(Arm("all", 12, 100),), estimate=1.1, lower=0.9, upper=1.3),
        Record("Placebo", depth=1, arms=(Arm("all", None, None),), is_reference=True),
    ]
    axis = AxisRange(0.5, 2.0, transform="log")
    composed = compose(format_rows(records), _columns(records, axis))
    assert len(composed.glyphs[2]) == 1
    assert composed.cells[3][1].text == "(ref)"


def test_stripes_shared_across_columns(scenario_records, scenario_axis):
    rows = format_rows(scenario_records)
    composed = compose(rows, _columns(scenario_records, scenario_axis),
                       stripes=StripeSpec(parity=0, color="#ddd", alt_color="white"))
    bands = sorted((b.y_low, b.y_high, b.color) for b in composed.stripes)
    assert bands == [(-0.5, 0.5, "#ddd"), (0.5, 1.5, "white"), (1.5, 2.5, "#ddd")]


def test_no_alt_color_leaves_other_rows_unstyled(scenario_records, scenario_axis):
    rows = format_rows(scenario_records)
    composed = compose(rows, _columns(scenario_records, scenario_axis), stripes=StripeSpec(parity=1))
    assert [(b.y_low, b.y_high) for b in composed.stripes] == [(0.5, 1.5)]


def test_header_spans_and_tiers(scenario_records, scenario_axis):
    rows = format_rows(scenario_records)
    composed = compose(
        rows, _columns(scenario_records, scenario_axis),
        header_spans=[HeaderSpan("Events", 1, 1), HeaderSpan("Effect", 2, 3), HeaderSpan("All", 0, 3, tier=-1)],
    )
    by_label = {h.label: h for h in composed.headers}
    assert by_label["Events"].y == 4.0
    assert by_label["All"].y == 5.0
    assert by_label["Effect"].left == pytest.approx(0.5)
    assert by_label["Effect"].right == pytest.approx(1.0)
    assert by_label["All"].center == pytest.approx(0.5)
    assert composed.top == pytest.approx(5.5)


def test_overlapping_spans_in_one_tier_rejected(scenario_records, scenario_axis):
    rows = format_rows(scenario_records)
    with pytest.raises(LayoutConfigError):
        compose(rows, _columns(scenario_records, scenario_axis),
                header_spans=[HeaderSpan("A", 0, 2), HeaderSpan("B", 2, 3)])
    # same columns on different tiers are fine
    compose(rows, _columns(scenario_records, scenario_axis),
            header_spans=[HeaderSpan("A", 0, 2), HeaderSpan("B", 2, 3, tier=-1)])


@pytest.mark.parametrize("span", [HeaderSpan("X", 0, 4), HeaderSpan("X", 2, 1), HeaderSpan("X", 0, 1, tier=1)])
def test_bad_spans_rejected(scenario_records, scenario_axis, span):
    with pytest.raises(LayoutConfigError):
        compose(format_rows(scenario_records), _columns(scenario_records, scenario_axis), header_spans=[span])


def test_bad_widths_rejected(scenario_records, scenario_axis):
    rows = format_rows(scenario_records)
    cols = _columns(scenario_records, scenario_axis)
    with pytest.raises(LayoutConfigError):
        compose(rows, cols, widths=[1, 1, 1])
    with pytest.raises(LayoutConfigError):
        compose(rows, cols, widths=[1, 0, 1, 1])


def test_series_length_must_match_rows(scenario_records, scenario_axis):
    rows = format_rows(scenario_records[:2])
    with pytest.raises(LayoutConfigError):
        compose(rows, _columns(scenario_records, scenario_axis))


def test_duplicate_column_names_rejected(scenario_records, scenario_axis):
    rows = format_rows(scenario_records)
    cols = _columns(scenario_records, scenario_axis) + [estimate_column("Again")]
    with pytest.raises(LayoutConfigError):
        compose(rows, cols)
    cols[-1] = retitle(estimate_column(), "Again", name="estimate_again")
    compose(rows, cols)


def test_rules_positions(scenario_records, scenario_axis):
    rows = format_rows(scenario_records)
    composed = compose(rows, _columns(scenario_records, scenario_axis),
                       rules=[RuleSpec(0), RuleSpec(3, start=1, stop=2)])
    top, bottom = composed.rules
    assert top.y == 2.5 and top.columns == (0, 1, 2, 3)
    assert bottom.y == -0.5 and bottom.columns == (1, 2)
    with pytest.raises(LayoutConfigError):
        compose(rows, _columns(scenario_records, scenario_axis), rules=[RuleSpec(4)])


def test_two_series_are_offset_within_rows(scenario_records, scenario_axis):
    assert series_offsets(1, 0.2) == [0.0]
    assert series_offsets(2, 0.2) == pytest.approx([0.1, -0.1])
    plot = build_column(
        "plot", axis=scenario_axis,
        series=[make_series("A", scenario_records, scenario_axis, color="red"),
                make_series("B", scenario_records, scenario_axis, color="blue")],
    )
    composed = compose(format_rows(scenario_records), [label_column(), plot])
    ys = sorted((g.series, g.y) for g in composed.glyphs[1])
    assert ys[0] == ("A", pytest.approx(0.1))
    assert {g.color for g in composed.glyphs[1]} == {"red", "blue"}


def test_series_rejects_estimate_outside_axis(scenario_axis):
    with pytest.raises(ForestDataError):
        make_series("RR", [Record("Far", estimate=1.8, lower=1.6, upper=2.0)], scenario_axis)


def test_axis_range_validation():
    with pytest.raises(LayoutConfigError):
        AxisRange(1.0, 1.0)
    with pytest.raises(LayoutConfigError):
        AxisRange(0.0, 2.0, transform="log")
    with pytest.raises(LayoutConfigError):
        AxisRange(0.5, 2.0, transform="sqrt")
    with pytest.raises(LayoutConfigError):
        AxisRange(0.5, 2.0, ticks=(0.25, 1.0))


def test_text_column_with_unknown_field_rejected(scenario_records, scenario_axis):
    rows = format_rows(scenario_records)
    cols = _columns(scenario_records, scenario_axis)
    cols[1] = events_column("treatd", "Treated")
    with pytest.raises(LayoutConfigError, match="treatd"):
        compose(rows, cols)
    assert compose([], [label_column(), events_column("treatd")]).n_rows == 0
