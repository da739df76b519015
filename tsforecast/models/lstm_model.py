import os
# Keras 3 picks its backend at import time; JAX unless the caller chose otherwise
os.environ.setdefault("KERAS_BACKEND", "jax")

import time
from typing import Dict, Any, Optional

import numpy as np
import keras
from keras import layers, callbacks
from sklearn.preprocessing import StandardScaler

from tsforecast.models.base_model import BaseModel, EpochCallback, ModelConfig, logger
from tsforecast.utils.error_handling import ModelReleasedError


class LSTMModel(BaseModel):
    """
    Single-layer LSTM regressor mapping a window of values to the next value,
    using Keras (JAX backend by default).
    """

    def __init__(
        self,
        config: ModelConfig,
        model_id: Optional[str] = None,
        hyperparameters: Optional[Dict[str, Any]] = None,
    ):
        """
        Initialize LSTM model.

        Hyperparameters:
            epochs: Training epochs when fit() is not given an explicit count
            batch_size: Training batch size
            learning_rate: Adam learning rate
            seed: Optional seed for keras.utils.set_random_seed
        """
        super().__init__(config, model_id, hyperparameters)
        self.scaler: Optional[StandardScaler] = None

        self.defaults = {
            "epochs": 1000,
            "batch_size": 32,
            "learning_rate": 0.001,
            "seed": None,
        }
        for k, v in self.defaults.items():
            if k not in self.hyperparameters:
                self.hyperparameters[k] = v

    @property
    def model_type(self) -> str:
        return "lstm_keras"

    def _build_model(self) -> keras.Model:
        """Build Keras LSTM model."""
        model = keras.Sequential()
        model.add(layers.Input(shape=(self.config.window_size, 1)))
        model.add(layers.LSTM(self.config.hidden_width, return_sequences=False))
        model.add(layers.Dense(1))

        optimizer = keras.optimizers.Adam(learning_rate=self.hyperparameters["learning_rate"])
        model.compile(optimizer=optimizer, loss='mse')
        return model

    def _scale(self, values: np.ndarray) -> np.ndarray:
        shape = values.shape
        return self.scaler.transform(values.reshape(-1, 1)).reshape(shape).astype(np.float32)

    def fit(
        self,
        windows: np.ndarray,
        labels: np.ndarray,
        epochs: Optional[int] = None,
        on_epoch_end: Optional[EpochCallback] = None,
    ) -> "LSTMModel":
        """
        Fit LSTM model for exactly `epochs` passes (no early stopping).

        Values are standardized on the training data; predictions are
        returned in the original scale. The loss reported to `on_epoch_end`
        is the MSE in standardized units.
        """
        if self.is_released:
            raise ModelReleasedError(f"Model {self.model_id} has been released")

        windows = np.asarray(windows, dtype=np.float64)
        labels = np.asarray(labels, dtype=np.float64).reshape(-1)
        if windows.ndim != 2 or windows.shape[1] != self.config.window_size:
            raise ValueError(
                f"Expected windows of shape (n, {self.config.window_size}), got {windows.shape}"
            )
        if len(windows) == 0:
            raise ValueError("Cannot fit on an empty set of windows")
        if len(windows) != len(labels):
            raise ValueError(f"Length mismatch: {len(windows)} windows vs {len(labels)} labels")

        if epochs is None:
            epochs = self.hyperparameters["epochs"]
        if epochs < 1:
            raise ValueError(f"epochs must be >= 1, got {epochs}")
        if self.hyperparameters["seed"] is not None:
            keras.utils.set_random_seed(self.hyperparameters["seed"])

        self.scaler = StandardScaler()
        self.scaler.fit(np.concatenate([windows.ravel(), labels]).reshape(-1, 1))
        X_seq = self._scale(windows)[..., np.newaxis]
        y_seq = self._scale(labels).reshape(-1, 1)

        self.model_object = self._build_model()

        fit_callbacks = []
        if on_epoch_end is not None:
            fit_callbacks.append(callbacks.LambdaCallback(
                on_epoch_end=lambda epoch, logs: on_epoch_end(epoch + 1, float((logs or {}).get("loss", np.nan)))
            ))

        start = time.perf_counter()
        history = self.model_object.fit(
            X_seq, y_seq,
            epochs=epochs,
            batch_size=self.hyperparameters["batch_size"],
            callbacks=fit_callbacks,
            verbose=0,
        )
        self.training_time = time.perf_counter() - start

        hist = history.history
        self.training_metrics["loss"] = float(hist["loss"][-1])
        self.training_metrics["epochs"] = float(epochs)
        self.is_fitted = True
        logger.debug(
            f"Fitted {self.model_id} on {len(windows)} windows in {self.training_time:.1f}s, "
            f"final loss {self.training_metrics['loss']:.6f}"
        )
        return self

    def _predict_batch(self, windows: np.ndarray) -> np.ndarray:
        X_seq = self._scale(windows)[..., np.newaxis]
        preds = np.asarray(self.model_object.predict_on_batch(X_seq), dtype=np.float64)
        return self.scaler.inverse_transform(preds.reshape(-1, 1)).reshape(-1)

    def _release_resources(self) -> None:
        self.model_object = None
        self.scaler = None
