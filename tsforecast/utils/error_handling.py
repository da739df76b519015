"""Exception taxonomy and error context utilities."""

import logging
import time
import traceback
from dataclasses import dataclass, field
from typing import Any, Dict

logger = logging.getLogger(__name__)


class ForecastError(Exception):
    """Base class for all forecasting pipeline errors."""


class InputValidationError(ForecastError, ValueError):
    """Input rejected before any training starts."""


class InsufficientDataError(InputValidationError):
    """Series is too short to train on."""


class ColumnSelectionError(InputValidationError):
    """Requested date/value column is not present in the header."""


class WindowLengthError(InputValidationError):
    """Prediction window length differs from the training window size."""


class NoViableModelError(ForecastError):
    """No configuration in a search produced a usable model."""


class ModelStateError(ForecastError, RuntimeError):
    """Model used outside of its fitted lifetime."""


class ModelNotFittedError(ModelStateError):
    """Model used before fit."""


class ModelReleasedError(ModelStateError):
    """Model used after release."""


class InvalidTransitionError(ForecastError):
    """Session action not allowed from the current state."""


@dataclass
class RecoveryContext:
    """Captures context of a failed run for logging and debugging."""
    run_id: str
    timestamp: float = field(default_factory=time.time)
    exception_type: str = ""
    exception_message: str = ""
    stack_trace: str = ""
    local_variables: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_exception(cls, run_id: str, exc: BaseException) -> "RecoveryContext":
        """
        Create context from an exception.
        Captures locals from the frame where exception occurred.
        """
        stack_trace = "".join(traceback.format_tb(exc.__traceback__))

        locals_repr = {}
        if exc.__traceback__:
            ptr = exc.__traceback__
            while ptr.tb_next:
                ptr = ptr.tb_next
            frame = ptr.tb_frame

            for k, v in frame.f_locals.items():
                try:
                    val_str = str(v)
                    if len(val_str) > 500:
                        val_str = val_str[:500] + "..."
                    locals_repr[k] = val_str
                except Exception:
                    locals_repr[k] = "<unprintable>"

        return cls(
            run_id=run_id,
            exception_type=type(exc).__name__,
            exception_message=str(exc),
            stack_trace=stack_trace,
            local_variables=locals_repr,
        )

    @property
    def summary(self) -> str:
        """Short human-readable message."""
        if self.exception_message:
            return self.exception_message
        return self.exception_type

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "run_id": self.run_id,
            "timestamp": self.timestamp,
            "exception_type": self.exception_type,
            "exception_message": self.exception_message,
            "stack_trace": self.stack_trace,
            "local_variables": self.local_variables,
        }
