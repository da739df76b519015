"""Base model interface for one-step window forecasters."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, Optional, Sequence, Union
import logging

import numpy as np

from tsforecast.utils.error_handling import (
    ModelNotFittedError,
    ModelReleasedError,
    WindowLengthError,
)

logger = logging.getLogger(__name__)

EpochCallback = Callable[[int, float], None]


@dataclass(frozen=True)
class ModelConfig:
    """Identifies one candidate forecaster."""
    window_size: int
    hidden_width: int

    def __post_init__(self):
        if self.window_size < 1:
            raise ValueError(f"window_size must be >= 1, got {self.window_size}")
        if self.hidden_width < 1:
            raise ValueError(f"hidden_width must be >= 1, got {self.hidden_width}")

    def __str__(self) -> str:
        return f"window={self.window_size}, units={self.hidden_width}"


class BaseModel(ABC):
    """
    Abstract base class for window-to-next-value forecasters.

    A model owns its learned parameters until release() is called. Using it
    as a context manager guarantees release on scope exit, including failure
    paths:

        with LSTMModel(config) as model:
            model.fit(windows, labels, epochs=100)
            model.predict_next(window)
    """

    def __init__(
        self,
        config: ModelConfig,
        model_id: Optional[str] = None,
        hyperparameters: Optional[Dict[str, Any]] = None,
    ):
        """
        Initialize base model.

        Args:
            config: Window size and hidden width
            model_id: Unique identifier for the model
            hyperparameters: Model hyperparameters
        """
        self.config = config
        self.hyperparameters = dict(hyperparameters or {})
        self.model_object: Any = None
        self.is_fitted: bool = False
        self.is_released: bool = False
        self.training_metrics: Dict[str, float] = {}
        self.training_time: float = 0.0
        self.model_id = model_id or self._generate_model_id()

    @property
    @abstractmethod
    def model_type(self) -> str:
        """Return the model type identifier."""

    @property
    def window_size(self) -> int:
        return self.config.window_size

    @abstractmethod
    def fit(
        self,
        windows: np.ndarray,
        labels: np.ndarray,
        epochs: Optional[int] = None,
        on_epoch_end: Optional[EpochCallback] = None,
    ) -> "BaseModel":
        """
        Fit the model on windows of shape (n, window_size) and labels of shape (n,).

        Args:
            windows: Training windows
            labels: Next value after each window
            epochs: Number of full passes over the data
            on_epoch_end: Optional callback receiving (epoch, loss)

        Returns:
            Self for method chaining
        """

    def train(self, windows, labels, epochs=None, on_epoch_end=None) -> "BaseModel":
        """Alias for fit."""
        return self.fit(windows, labels, epochs=epochs, on_epoch_end=on_epoch_end)

    @abstractmethod
    def _predict_batch(self, windows: np.ndarray) -> np.ndarray:
        """One-step predictions for validated windows of shape (n, window_size)."""

    @abstractmethod
    def _release_resources(self) -> None:
        """Free learned parameters and backend state."""

    def predict_windows(self, windows: Union[np.ndarray, Sequence[Sequence[float]]]) -> np.ndarray:
        """
        Predict the next value for each window.

        Args:
            windows: Array of shape (n, window_size)

        Returns:
            Array of n predictions
        """
        self._check_usable()
        windows = np.asarray(windows, dtype=np.float64)
        if windows.ndim != 2 or windows.shape[1] != self.window_size:
            raise WindowLengthError(
                f"Expected windows of length {self.window_size}, got shape {windows.shape}"
            )
        if len(windows) == 0:
            return np.empty((0,), dtype=np.float64)
        return np.asarray(self._predict_batch(windows), dtype=np.float64).reshape(-1)

    def predict_next(self, window: Union[np.ndarray, Sequence[float]]) -> float:
        """
        Predict the value following a single window.

        Raises:
            WindowLengthError: If len(window) differs from the training window size
        """
        window = np.asarray(window, dtype=np.float64).reshape(-1)
        if len(window) != self.window_size:
            raise WindowLengthError(
                f"Expected a window of length {self.window_size}, got {len(window)}"
            )
        return float(self.predict_windows(window[np.newaxis, :])[0])

    def release(self) -> None:
        """Release learned parameters. Safe to call more than once."""
        if self.is_released:
            return
        self._release_resources()
        self.model_object = None
        self.is_released = True
        logger.debug(f"Released model {self.model_id}")

    def _check_usable(self) -> None:
        if self.is_released:
            raise ModelReleasedError(f"Model {self.model_id} has been released")
        if not self.is_fitted:
            raise ModelNotFittedError(f"Model {self.model_id} is not fitted")

    def _generate_model_id(self) -> str:
        """Generate a unique model ID."""
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S_%f")
        return f"{self.model_type}_w{self.config.window_size}_u{self.config.hidden_width}_{timestamp}"

    def __enter__(self) -> "BaseModel":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"model_id='{self.model_id}', "
            f"is_fitted={self.is_fitted}, "
            f"is_released={self.is_released})"
        )
