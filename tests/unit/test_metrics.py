"""Tests for percentage error and regression metrics."""

import math

import numpy as np
import pytest
from hypothesis import given, settings, strategies as st

from tsforecast.evaluation.metrics import MetricsCalculator, percentage_error


def test_perfect_forecast_has_zero_error():
    assert percentage_error([10, 20, 30], [10, 20, 30]) == 0.0


def test_zero_actuals_are_excluded_from_sum_and_count():
    assert percentage_error([0, 10], [5, 12]) == pytest.approx(20.0)


def test_all_zero_actuals_is_undefined():
    assert math.isnan(percentage_error([0, 0], [1, 2]))


def test_length_mismatch_is_undefined():
    assert math.isnan(percentage_error([1, 2, 3], [1, 2]))


def test_empty_is_undefined():
    assert math.isnan(percentage_error([], []))


def test_not_symmetric_under_swapping_actual_and_predicted():
    forward = percentage_error([100.0], [50.0])
    backward = percentage_error([50.0], [100.0])

    assert forward == pytest.approx(50.0)
    assert backward == pytest.approx(100.0)


def test_error_is_unbounded():
    assert percentage_error([1.0], [1000.0]) > 100.0


pairs = st.lists(
    st.tuples(
        st.floats(min_value=-1e4, max_value=1e4, allow_nan=False).filter(lambda v: abs(v) > 1e-3),
        st.floats(min_value=-1e4, max_value=1e4, allow_nan=False),
    ),
    min_size=1,
    max_size=30,
)


@settings(max_examples=50, deadline=None)
@given(pairs=pairs, data=st.data())
def test_invariant_under_joint_permutation(pairs, data):
    """Property: reordering (actual, predicted) pairs together leaves the error unchanged."""
    shuffled = data.draw(st.permutations(pairs))
    actual, predicted = zip(*pairs)
    s_actual, s_predicted = zip(*shuffled)

    assert percentage_error(actual, predicted) == pytest.approx(
        percentage_error(s_actual, s_predicted), rel=1e-9, abs=1e-9
    )


class TestMetricsCalculator:

    def test_regression_metrics(self):
        calc = MetricsCalculator()
        metrics = calc.calculate_regression_metrics([10.0, 20.0], [12.0, 18.0])

        assert metrics["mse"] == pytest.approx(4.0)
        assert metrics["rmse"] == pytest.approx(2.0)
        assert metrics["mae"] == pytest.approx(2.0)
        assert metrics["mape"] == pytest.approx(15.0)

    def test_empty_input_gives_nan(self):
        metrics = MetricsCalculator().calculate_regression_metrics([], [])

        assert set(metrics) == {"mse", "rmse", "mae", "mape"}
        assert all(np.isnan(v) for v in metrics.values())
