"""Forecast error metrics."""

from typing import Dict, Sequence, Union
import logging

import numpy as np
from sklearn.metrics import mean_squared_error, mean_absolute_error

logger = logging.getLogger(__name__)

ArrayLike = Union[Sequence[float], np.ndarray]


def percentage_error(actual: ArrayLike, predicted: ArrayLike) -> float:
    """
    Mean absolute percentage error over the non-zero actuals.

    Indices where the actual value is zero are skipped and excluded from
    the averaging count.

    Args:
        actual: Observed values
        predicted: Forecast values, aligned with actual

    Returns:
        Error as a percentage, or NaN when the lengths differ, the inputs
        are empty, or every actual value is zero
    """
    actual = np.asarray(actual, dtype=np.float64).reshape(-1)
    predicted = np.asarray(predicted, dtype=np.float64).reshape(-1)

    if len(actual) != len(predicted) or len(actual) == 0:
        return float("nan")

    valid = actual != 0
    if not valid.any():
        return float("nan")

    ratios = np.abs(actual[valid] - predicted[valid]) / np.abs(actual[valid])
    return float(ratios.mean() * 100)


class MetricsCalculator:
    """Calculate regression metrics for forecast evaluation."""

    regression_metrics = ("mse", "rmse", "mae", "mape")

    def calculate_regression_metrics(self, y_true: ArrayLike, y_pred: ArrayLike) -> Dict[str, float]:
        """
        Calculate regression metrics.

        Args:
            y_true: True values
            y_pred: Predicted values

        Returns:
            Dictionary of metric names to values (NaN when undefined)
        """
        y_true = np.asarray(y_true, dtype=np.float64).reshape(-1)
        y_pred = np.asarray(y_pred, dtype=np.float64).reshape(-1)

        if len(y_true) != len(y_pred) or len(y_true) == 0:
            logger.warning(
                f"Cannot compute regression metrics for lengths {len(y_true)} and {len(y_pred)}"
            )
            return {name: float("nan") for name in self.regression_metrics}

        mse = float(mean_squared_error(y_true, y_pred))
        return {
            "mse": mse,
            "rmse": float(np.sqrt(mse)),
            "mae": float(mean_absolute_error(y_true, y_pred)),
            "mape": percentage_error(y_true, y_pred),
        }
