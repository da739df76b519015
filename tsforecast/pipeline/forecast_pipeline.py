"""End-to-end forecasting: search, held-out evaluation and future projection."""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

import numpy as np
import pandas as pd

from tsforecast.data.dates import future_dates
from tsforecast.data.splitters import TimeSeriesSplitter
from tsforecast.data.structs import TimeSeries
from tsforecast.evaluation.metrics import MetricsCalculator
from tsforecast.models.base_model import BaseModel, EpochCallback, ModelConfig
from tsforecast.models.lstm_model import LSTMModel
from tsforecast.models.search import (
    ModelFactory,
    ModelSearch,
    ProgressCallback,
    build_config_grid,
    evaluate_on_test,
)
from tsforecast.utils.config_manager import PipelineConfig
from tsforecast.utils.error_handling import InsufficientDataError

logger = logging.getLogger(__name__)


@dataclass
class ForecastOutcome:
    """Everything a result consumer needs to chart and tabulate one run."""
    test_predictions: List[float]
    test_error: float
    future_predictions: List[float]
    future_dates: List[str]
    best_config: ModelConfig
    test_dates: List[str] = field(default_factory=list)
    test_actuals: List[float] = field(default_factory=list)
    metrics: Dict[str, float] = field(default_factory=dict)

    def to_frames(self) -> Tuple[pd.DataFrame, pd.DataFrame]:
        """
        Chart-ready frames.

        Returns:
            (test_frame, future_frame). test_frame has columns date, real,
            predicted; the first window_size rows have no prediction (NaN).
            future_frame has columns date, predicted.
        """
        lead = len(self.test_dates) - len(self.test_predictions)
        predicted = [np.nan] * lead + list(self.test_predictions)
        test_frame = pd.DataFrame({
            "date": self.test_dates,
            "real": self.test_actuals,
            "predicted": predicted,
        })
        future_frame = pd.DataFrame({
            "date": self.future_dates,
            "predicted": self.future_predictions,
        })
        return test_frame, future_frame


def forecast_autoregressive(model: BaseModel, history: np.ndarray, periods: int) -> List[float]:
    """
    Roll the model forward `periods` steps from the last window of `history`.

    Each prediction is appended to the window and the oldest value dropped,
    so errors compound over the horizon.
    """
    window = list(np.asarray(history, dtype=np.float64)[-model.window_size:])
    predictions = []
    for _ in range(periods):
        value = model.predict_next(window)
        predictions.append(value)
        window = window[1:] + [value]
    return predictions


class ForecastPipeline:
    """Runs model search on a cleaned series and produces a ForecastOutcome."""

    def __init__(
        self,
        config: Optional[PipelineConfig] = None,
        model_factory: Optional[ModelFactory] = None,
        progress_callback: Optional[ProgressCallback] = None,
        epoch_callback: Optional[EpochCallback] = None,
    ):
        """
        Args:
            config: Grid, epochs and split settings (defaults if None)
            model_factory: Builds a model per configuration; defaults to LSTMModel
                with the configured batch size, learning rate and seed
            progress_callback: Receives SearchProgress after every configuration
            epoch_callback: Receives (epoch, loss) during training
        """
        self.config = config or PipelineConfig()
        self.model_factory = model_factory or self._default_factory
        self.splitter = TimeSeriesSplitter()
        self.metrics = MetricsCalculator()
        self.search = ModelSearch(
            model_factory=self.model_factory,
            progress_callback=progress_callback,
            epoch_callback=epoch_callback,
        )

    def _default_factory(self, config: ModelConfig) -> BaseModel:
        return LSTMModel(config, hyperparameters={
            "batch_size": self.config.batch_size,
            "learning_rate": self.config.learning_rate,
            "seed": self.config.seed,
        })

    def run(
        self,
        series: TimeSeries,
        future_periods: int,
        train_fraction: Optional[float] = None,
    ) -> ForecastOutcome:
        """
        Train, select, evaluate and forecast.

        Args:
            series: Chronologically ordered observations
            future_periods: Number of steps to forecast past the last point
            train_fraction: Share of points used for training (config default if None)

        Returns:
            ForecastOutcome

        Raises:
            InsufficientDataError: If the series has fewer than min_points points
            NoViableModelError: If no configuration could be evaluated
        """
        if len(series) < self.config.min_points:
            raise InsufficientDataError(
                f"At least {self.config.min_points} data points are needed to train; got {len(series)}"
            )
        if future_periods < 0:
            raise ValueError(f"future_periods must be >= 0, got {future_periods}")
        fraction = self.config.train_fraction if train_fraction is None else train_fraction

        train, test = self.splitter.split_series(series, fraction)
        configs = build_config_grid(self.config.window_sizes, self.config.hidden_widths)
        best = self.search.search(train.values, test.values, configs, self.config.epochs_per_config)

        with best.model as model:
            test_predictions, test_actuals, test_error = evaluate_on_test(model, test.values)
            future = forecast_autoregressive(model, series.values, future_periods)

        metrics = self.metrics.calculate_regression_metrics(test_actuals, test_predictions)
        labels = future_dates(series.dates[-1], future_periods)
        logger.info(
            f"Forecast complete: config ({best.config}), test error {test_error:.4f}%, "
            f"{future_periods} future periods"
        )

        return ForecastOutcome(
            test_predictions=[float(p) for p in test_predictions],
            test_error=test_error,
            future_predictions=future,
            future_dates=labels,
            best_config=best.config,
            test_dates=test.dates,
            test_actuals=[float(v) for v in test.values],
            metrics=metrics,
        )
