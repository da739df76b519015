"""Forecast evaluation metrics."""

from tsforecast.evaluation.metrics import MetricsCalculator, percentage_error

__all__ = ["MetricsCalculator", "percentage_error"]
