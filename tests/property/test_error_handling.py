"""Property tests for the error taxonomy and failure context capture."""

import pytest
from hypothesis import given, settings, strategies as st

from tsforecast.utils.error_handling import (
    ColumnSelectionError,
    ForecastError,
    InputValidationError,
    InsufficientDataError,
    ModelReleasedError,
    NoViableModelError,
    RecoveryContext,
    WindowLengthError,
)


@pytest.mark.parametrize("exc_type", [InsufficientDataError, ColumnSelectionError, WindowLengthError])
def test_input_errors_are_value_errors(exc_type):
    assert issubclass(exc_type, InputValidationError)
    assert issubclass(exc_type, ValueError)
    assert issubclass(exc_type, ForecastError)


def test_state_and_search_errors():
    assert issubclass(ModelReleasedError, RuntimeError)
    assert not issubclass(NoViableModelError, ValueError)
    assert issubclass(NoViableModelError, ForecastError)


def test_recovery_context_capture():
    """Verify context capture from exception."""
    try:
        window_size = 5
        stage = "search"
        raise NoViableModelError("nothing trained")
    except NoViableModelError as e:
        ctx = RecoveryContext.from_exception(run_id="test_run", exc=e)

    assert ctx.run_id == "test_run"
    assert ctx.exception_type == "NoViableModelError"
    assert ctx.summary == "nothing trained"
    assert ctx.local_variables["window_size"] == "5"
    assert ctx.local_variables["stage"] == "search"


def test_summary_falls_back_to_type_name():
    try:
        raise InsufficientDataError()
    except InsufficientDataError as e:
        ctx = RecoveryContext.from_exception(run_id="r", exc=e)

    assert ctx.summary == "InsufficientDataError"


@given(st.text(max_size=2000))
@settings(max_examples=30, deadline=None)
def test_long_locals_are_truncated(payload):
    """Property: captured locals never exceed 503 characters and to_dict is complete."""
    try:
        big = payload * 2
        raise ValueError("boom")
    except ValueError as e:
        ctx = RecoveryContext.from_exception(run_id="r", exc=e)

    assert len(ctx.local_variables["big"]) <= 503
    assert set(ctx.to_dict()) == {
        "run_id", "timestamp", "exception_type", "exception_message",
        "stack_trace", "local_variables",
    }
