"""Top-level forecasting pipeline and wizard session."""

from tsforecast.pipeline.forecast_pipeline import ForecastOutcome, ForecastPipeline
from tsforecast.pipeline.session import ForecastSession, SessionState

__all__ = ["ForecastOutcome", "ForecastPipeline", "ForecastSession", "SessionState"]
