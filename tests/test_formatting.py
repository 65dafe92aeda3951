import pytest

from forestkit.errors import ForestDataError
from forestkit.formatting import (
    FormatOptions,
    add_estimate_cells,
    depth_style,
    format_estimate,
    format_events,
    format_record,
    format_rows,
    row_indices,
)
from forestkit.types import Arm, Record


def test_estimate_keeps_trailing_zeros():
    assert format_estimate(0.8, 0.75, 0.95, 2) == "0.80 (0.75 - 0.95)"
    assert format_estimate(-4.3, -8.6, 0.0, 1) == "-4.3 (-8.6 - 0.0)"
    assert format_estimate(1.0, 1.0, 1.0, 3) == "1.000 (1.000 - 1.000)"


def test_estimate_rounds_to_fixed_decimals():
    assert format_estimate(0.856, 0.404, 1.899, 2) == "0.86 (0.40 - 1.90)"


def test_absent_estimate_distinguishes_reference_from_no_data():
    assert format_estimate(None, None, None, 2) == ""
    assert format_estimate(None, None, None, 2, is_reference=True) == "(ref)"
    assert format_estimate(float("nan"), float("nan"), float("nan"), 2, is_reference=True, ref_marker="Ref.") == "Ref."


@pytest.mark.parametrize(
    "est, lo, hi",
    [
        (0.9, None, 1.0),
        (0.9, 0.8, None),
        (None, 0.8, 1.0),
        (0.9, 1.1, 1.0),
        (1.2, 0.8, 1.0),
    ],
)
def test_malformed_interval_is_a_data_error(est, lo, hi):
    with pytest.raises(ForestDataError):
        format_estimate(est, lo, hi, 2)


def test_events_string():
    assert format_events(None, 200) == ""
    assert format_events(None, None) == ""
    assert format_events(20, 200) == "20 / 200"
    assert format_events(20.0, 200.0) == "20 / 200"
    assert format_events(1, 3, percent=True) == "1 / 3 (33.3%)"
    assert format_events(20, 200, percent=True) == "20 / 200 (10.0%)"


def test_events_without_denominator_raise():
    with pytest.raises(ForestDataError):
        format_events(5, None)
    with pytest.raises(ForestDataError):
        format_events(5, 0)
    with pytest.raises(ForestDataError):
        format_events(12, 10)


def test_depth_style_is_a_function_of_depth():
    assert depth_style(0) == ("", True)
    assert depth_style(1) == ("  ", False)
    assert depth_style(2, indent=" ") == ("  ", False)
    assert depth_style(1, bold_depths=frozenset({0, 1})) == ("  ", True)


def test_row_indices_reverse_document_order():
    assert row_indices(4) == [3, 2, 1, 0]
    assert row_indices(1) == [0]
    assert row_indices(0) == []


def test_format_record_cells():
    rec = Record(
        "Male", depth=1,
        arms=(Arm("treated", 20, 200), Arm("control", None, None)),
        estimate=0.95, lower=0.7, upper=1.3,
        text={"p": "0.41"},
    )
    row = format_record(rec, 5)
    assert row.index == 5
    assert row.bold is False
    assert row.label == "  Male"
    assert row.cell("label") == "  Male"
    assert row.cell("estimate") == "0.95 (0.70 - 1.30)"
    assert row.cell("treated") == "20 / 200"
    assert row.cell("control") == ""
    assert row.cell("p") == "0.41"
    assert row.cell("missing") == ""


def test_format_record_strips_label_before_indenting():
    row = format_record(Record("  Female", depth=1), 0, FormatOptions(indent="--"))
    assert row.label == "--Female"


def test_format_rows_assigns_indices_and_boldness(scenario_records):
    rows = format_rows(scenario_records)
    assert [r.index for r in rows] == [2, 1, 0]
    assert [r.bold for r in rows] == [True, False, False]
    assert rows[0].label == "Overall"
    assert rows[2].label == "  Female"
    assert rows[2].cell("estimate") == "0.85 (0.40 - 1.90)"


def test_add_estimate_cells(scenario_records):
    rows = format_rows(scenario_records)
    other = [
        Record("Overall", estimate=-1.0, lower=-2.0, upper=0.0),
        Record("Male"),
        Record("Female", is_reference=True),
    ]
    merged = add_estimate_cells(rows, other, "rd", FormatOptions(decimals=1))
    assert [r.cell("rd") for r in merged] == ["-1.0 (-2.0 - 0.0)", "", "(ref)"]
    assert merged[0].cell("estimate") == rows[0].cell("estimate")
    with pytest.raises(ForestDataError):
        add_estimate_cells(rows, other[:2], "rd")


def test_estimate_never_prints_negative_zero():
    assert format_estimate(-0.001, -0.01, 0.004, 2) == "0.00 (-0.01 - 0.00)"
    assert format_estimate(-0.04, -0.2, -0.01, 1) == "0.0 (-0.2 - 0.0)"
