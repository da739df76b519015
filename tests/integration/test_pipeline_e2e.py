"""
End-to-end run with real Keras models:
1. Load delimited text
2. Extract the series
3. Model search
4. Held-out evaluation
5. Future projection
"""

import os
os.environ.setdefault("KERAS_BACKEND", "jax")

import numpy as np
import pytest

from tsforecast.data.loaders import DataLoader
from tsforecast.pipeline.forecast_pipeline import ForecastPipeline
from tsforecast.utils.config_manager import PipelineConfig
from tsforecast.utils.error_handling import InsufficientDataError


@pytest.mark.slow
def test_end_to_end_linear_series(linear_series):
    progress = []
    pipeline = ForecastPipeline(
        config=PipelineConfig(epochs_per_config=150),
        progress_callback=progress.append,
    )

    outcome = pipeline.run(linear_series, future_periods=5)

    # training is stochastic; the trend is trivial so the bound is generous
    assert outcome.test_error < 50.0
    assert len(outcome.future_predictions) == 5
    assert np.isfinite(outcome.future_predictions).all()
    assert outcome.future_dates == [
        "2024-01-31", "2024-02-01", "2024-02-02", "2024-02-03", "2024-02-04"
    ]
    assert len(outcome.test_predictions) == 6 - outcome.best_config.window_size
    assert [p.percent for p in progress] == [25, 50, 75, 100]


@pytest.mark.slow
def test_end_to_end_from_text():
    lines = ["date,value"]
    lines += [f"2024/01/{day:02d},{100 + 2 * (day - 1)}" for day in range(1, 31)]
    loader = DataLoader()
    table = loader.load_text("\n".join(lines))
    series, report = loader.extract_series(table, "date", "value", "Y/M/D")
    assert report.dropped_rows == 0

    pipeline = ForecastPipeline(config=PipelineConfig(
        window_sizes=(3,), hidden_widths=(8,), epochs_per_config=50, seed=3,
    ))
    outcome = pipeline.run(series, future_periods=2)

    assert outcome.future_dates == ["2024-01-31", "2024-02-01"]
    assert np.isfinite(outcome.test_error)


def test_nineteen_points_rejected(short_series):
    with pytest.raises(InsufficientDataError):
        ForecastPipeline().run(short_series, future_periods=5)
