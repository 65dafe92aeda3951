import matplotlib

matplotlib.use("Agg")

import pytest

from forestkit.types import Arm, AxisRange, Record


@pytest.fixture
def scenario_records():
    return [
        Record("Overall", depth=0, arms=(Arm("all", 50, 500),), estimate=0.9, lower=0.8, upper=1.0),
        Record("Male", depth=1, arms=(Arm("all", 20, 200),), estimate=0.95, lower=0.7, upper=1.3),
        Record("Female", depth=1, arms=(Arm("all", 30, 300),), estimate=0.85, lower=0.4, upper=1.9),
    ]


@pytest.fixture
def scenario_axis():
    return AxisRange(0.5, 1.5, ticks=(0.5, 1.0, 1.5))
