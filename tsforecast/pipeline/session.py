"""
Wizard session: upload -> choose columns -> train -> forecast.

The session is an explicit finite-state machine. Forward actions move to the
next stage; back actions return to an earlier one and clear only the state
that depends on it. Failures are reported as a short message while earlier
successful results stay available.
"""

import logging
import uuid
from enum import Enum
from typing import Dict, FrozenSet, Optional, Union

from tsforecast.data.dates import DateFormat
from tsforecast.data.loaders import DataLoader, ExtractionReport, RawTable
from tsforecast.data.structs import TimeSeries
from tsforecast.models.search import ModelFactory
from tsforecast.pipeline.forecast_pipeline import ForecastOutcome, ForecastPipeline
from tsforecast.utils.config_manager import PipelineConfig
from tsforecast.utils.error_handling import InvalidTransitionError, RecoveryContext
from tsforecast.utils.monitoring import SearchProgress

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    AWAITING_FILE = "awaiting_file"
    AWAITING_COLUMNS = "awaiting_columns"
    READY = "ready"
    TRAINING = "training"
    DONE = "done"


_ANY_IDLE = frozenset({
    SessionState.AWAITING_FILE,
    SessionState.AWAITING_COLUMNS,
    SessionState.READY,
    SessionState.DONE,
})

# action -> states it may be taken from
TRANSITIONS: Dict[str, FrozenSet[SessionState]] = {
    "load_text": _ANY_IDLE,
    "select_columns": frozenset({SessionState.AWAITING_COLUMNS, SessionState.READY, SessionState.DONE}),
    "train": frozenset({SessionState.READY, SessionState.DONE}),
    "back_to_file": _ANY_IDLE,
    "back_to_columns": frozenset({SessionState.READY, SessionState.DONE}),
    "back_to_data": frozenset({SessionState.DONE}),
}


class ForecastSession:
    """Holds one user's progress through the forecasting wizard."""

    def __init__(
        self,
        config: Optional[PipelineConfig] = None,
        model_factory: Optional[ModelFactory] = None,
        loader: Optional[DataLoader] = None,
    ):
        self.session_id = uuid.uuid4().hex[:12]
        self.config = config or PipelineConfig()
        self.model_factory = model_factory
        self.loader = loader or DataLoader()

        self.state = SessionState.AWAITING_FILE
        self.error: Optional[str] = None
        self.last_failure: Optional[RecoveryContext] = None

        self.table: Optional[RawTable] = None
        self.date_column: Optional[str] = None
        self.value_column: Optional[str] = None
        self.date_format: DateFormat = DateFormat.YMD
        self.series: Optional[TimeSeries] = None
        self.extraction_report: Optional[ExtractionReport] = None
        self.outcome: Optional[ForecastOutcome] = None

        self.progress_percent = 0
        self.eta_seconds: Optional[float] = None
        self.last_epoch_loss: Optional[float] = None

    # --- state helpers ---

    def _require(self, action: str) -> None:
        if self.state not in TRANSITIONS[action]:
            raise InvalidTransitionError(f"Cannot {action} while {self.state.value}")

    def _fail(self, action: str, exc: Exception) -> None:
        self.last_failure = RecoveryContext.from_exception(self.session_id, exc)
        self.error = self.last_failure.summary
        logger.error(f"Session {self.session_id}: {action} failed: {self.error}")

    def _clear_results(self) -> None:
        self.outcome = None
        self.progress_percent = 0
        self.eta_seconds = None
        self.last_epoch_loss = None

    def _clear_columns(self) -> None:
        self.date_column = None
        self.value_column = None
        self.series = None
        self.extraction_report = None
        self._clear_results()

    # --- forward actions ---

    def load_text(self, text: str, delimiter: str = ",") -> bool:
        """Parse uploaded text; on success wait for a column choice."""
        self._require("load_text")
        try:
            table = self.loader.load_text(text, delimiter)
        except Exception as e:
            self._fail("load_text", e)
            return False

        self._clear_columns()
        self.table = table
        self.error = None
        self.state = SessionState.AWAITING_COLUMNS
        return True

    def select_columns(
        self,
        date_column: str,
        value_column: str,
        date_format: Union[DateFormat, str] = DateFormat.YMD,
    ) -> bool:
        """Extract the series from the chosen columns."""
        self._require("select_columns")
        try:
            fmt = DateFormat.parse(date_format)
            series, report = self.loader.extract_series(self.table, date_column, value_column, fmt)
        except Exception as e:
            self._fail("select_columns", e)
            return False

        self._clear_results()
        self.date_column = date_column
        self.value_column = value_column
        self.date_format = fmt
        self.series = series
        self.extraction_report = report
        self.error = None
        self.state = SessionState.READY
        return True

    def train(self, future_periods: int = 5) -> bool:
        """Run the forecasting pipeline; prior results survive a failure."""
        self._require("train")
        previous = self.state
        self.state = SessionState.TRAINING
        self.error = None
        self.progress_percent = 0
        self.eta_seconds = None

        pipeline = ForecastPipeline(
            config=self.config,
            model_factory=self.model_factory,
            progress_callback=self._on_progress,
            epoch_callback=self._on_epoch,
        )
        try:
            outcome = pipeline.run(self.series, future_periods)
        except Exception as e:
            self._fail("train", e)
            self.state = previous
            return False

        self.outcome = outcome
        self.state = SessionState.DONE
        return True

    def _on_progress(self, progress: SearchProgress) -> None:
        self.progress_percent = progress.percent
        self.eta_seconds = progress.eta_seconds

    def _on_epoch(self, epoch: int, loss: float) -> None:
        self.last_epoch_loss = loss

    # --- back actions ---

    def back_to_file(self) -> None:
        """Discard everything and wait for a new upload."""
        self._require("back_to_file")
        self.table = None
        self._clear_columns()
        self.error = None
        self.state = SessionState.AWAITING_FILE

    def back_to_columns(self) -> None:
        """Keep the uploaded table, discard the column choice and results."""
        self._require("back_to_columns")
        self._clear_columns()
        self.error = None
        self.state = SessionState.AWAITING_COLUMNS

    def back_to_data(self) -> None:
        """Keep the series, discard training results."""
        self._require("back_to_data")
        self._clear_results()
        self.error = None
        self.state = SessionState.READY
