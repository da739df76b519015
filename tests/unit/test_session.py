"""Tests for the wizard state machine."""

import pytest

from tsforecast.data.dates import DateFormat
from tsforecast.pipeline.session import ForecastSession, SessionState
from tsforecast.utils.config_manager import PipelineConfig
from tsforecast.utils.error_handling import InvalidTransitionError

FAST = PipelineConfig(epochs_per_config=1)


@pytest.fixture
def session(make_factory):
    return ForecastSession(config=FAST, model_factory=make_factory())


@pytest.fixture
def ready_session(session, sample_csv_text):
    assert session.load_text(sample_csv_text, delimiter=";")
    assert session.select_columns("fecha", "ventas", DateFormat.DMY)
    return session


def test_happy_path(ready_session):
    assert ready_session.state is SessionState.READY
    assert len(ready_session.series) == 25

    assert ready_session.train(future_periods=3)

    assert ready_session.state is SessionState.DONE
    assert ready_session.outcome.future_dates == ["2024-01-26", "2024-01-27", "2024-01-28"]
    assert ready_session.progress_percent == 100
    assert ready_session.last_epoch_loss == pytest.approx(1.0)
    assert ready_session.error is None


def test_bad_upload_keeps_state_and_reports(session):
    assert not session.load_text("only-a-header")

    assert session.state is SessionState.AWAITING_FILE
    assert "header" in session.error
    assert session.last_failure.exception_type == "InputValidationError"


def test_bad_column_choice_stays_awaiting_columns(session, sample_csv_text):
    session.load_text(sample_csv_text, delimiter=";")

    assert not session.select_columns("fecha", "missing")
    assert session.state is SessionState.AWAITING_COLUMNS
    assert session.series is None


def test_training_failure_keeps_prior_results(ready_session):
    ready_session.train(future_periods=2)
    previous = ready_session.outcome
    ready_session.series = ready_session.series[:10]

    assert not ready_session.train(future_periods=2)

    assert ready_session.state is SessionState.DONE
    assert ready_session.outcome is previous
    assert "20" in ready_session.error


def test_cannot_train_before_columns(session, sample_csv_text):
    session.load_text(sample_csv_text, delimiter=";")

    with pytest.raises(InvalidTransitionError):
        session.train()


def test_back_to_data_clears_only_results(ready_session):
    ready_session.train(future_periods=2)
    series = ready_session.series

    ready_session.back_to_data()

    assert ready_session.state is SessionState.READY
    assert ready_session.outcome is None
    assert ready_session.series is series
    assert ready_session.date_column == "fecha"


def test_back_to_columns_keeps_table(ready_session):
    table = ready_session.table

    ready_session.back_to_columns()

    assert ready_session.state is SessionState.AWAITING_COLUMNS
    assert ready_session.table is table
    assert ready_session.series is None
    assert ready_session.date_column is None


def test_back_to_file_clears_everything(ready_session):
    ready_session.train(future_periods=1)

    ready_session.back_to_file()

    assert ready_session.state is SessionState.AWAITING_FILE
    assert ready_session.table is None
    assert ready_session.series is None
    assert ready_session.outcome is None


def test_back_to_data_requires_done(ready_session):
    with pytest.raises(InvalidTransitionError):
        ready_session.back_to_data()


def test_reupload_clears_downstream(ready_session):
    ready_session.train(future_periods=1)

    assert ready_session.load_text("d,v\n2024-01-01,1")

    assert ready_session.state is SessionState.AWAITING_COLUMNS
    assert ready_session.outcome is None
    assert ready_session.series is None
