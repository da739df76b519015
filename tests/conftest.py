"""Pytest configuration and shared fixtures."""

from typing import Callable, Dict, List, Optional

import numpy as np
import pandas as pd
import pytest

from tsforecast.data.structs import TimeSeries
from tsforecast.models.base_model import BaseModel, ModelConfig
from tsforecast.utils.error_handling import ModelReleasedError


class ModelRegistry:
    """Records every fake model created so tests can check lifetimes."""

    def __init__(self):
        self.created: List["FakeModel"] = []
        self.peak_live = 0

    def live(self) -> List["FakeModel"]:
        return [m for m in self.created if not m.is_released]

    def record(self, model: "FakeModel") -> None:
        self.created.append(model)
        self.peak_live = max(self.peak_live, len(self.live()))


class FakeModel(BaseModel):
    """Deterministic stand-in: predicts the last window value plus a bias."""

    def __init__(self, config: ModelConfig, bias: float = 0.0, registry: Optional[ModelRegistry] = None,
                 fail_on_fit: bool = False):
        super().__init__(config)
        self.bias = bias
        self.fail_on_fit = fail_on_fit
        self.epochs_seen = 0
        if registry is not None:
            registry.record(self)

    @property
    def model_type(self) -> str:
        return "fake"

    def fit(self, windows, labels, epochs=None, on_epoch_end=None):
        if self.is_released:
            raise ModelReleasedError("released")
        if self.fail_on_fit:
            raise RuntimeError("training blew up")
        for epoch in range(1, (epochs or 1) + 1):
            if on_epoch_end:
                on_epoch_end(epoch, 1.0 / epoch)
        self.epochs_seen = epochs or 1
        self.is_fitted = True
        return self

    def _predict_batch(self, windows: np.ndarray) -> np.ndarray:
        return windows[:, -1] + self.bias

    def _release_resources(self) -> None:
        pass


@pytest.fixture
def fake_model_cls():
    return FakeModel


@pytest.fixture
def registry() -> ModelRegistry:
    return ModelRegistry()


@pytest.fixture
def make_factory(registry) -> Callable:
    """
    Build a model factory.

    biases maps ModelConfig -> bias (default 0.0); configs listed in
    fail_on raise during fit.
    """
    def _make(biases: Optional[Dict[ModelConfig, float]] = None, fail_on=()) -> Callable[[ModelConfig], FakeModel]:
        biases = biases or {}

        def factory(config: ModelConfig) -> FakeModel:
            return FakeModel(
                config,
                bias=biases.get(config, 0.0),
                registry=registry,
                fail_on_fit=config in fail_on,
            )
        return factory
    return _make


def make_linear_series(n: int, start: str = "2024-01-01") -> TimeSeries:
    dates = pd.date_range(start=start, periods=n, freq="D").strftime("%Y-%m-%d")
    return TimeSeries.from_pairs((d, 100.0 + 2.0 * i) for i, d in enumerate(dates))


@pytest.fixture
def linear_series() -> TimeSeries:
    """value[i] = 100 + 2*i, daily from 2024-01-01, 30 points."""
    return make_linear_series(30)


@pytest.fixture
def short_series() -> TimeSeries:
    """19 points, one short of the training floor."""
    return make_linear_series(19)


@pytest.fixture
def sample_csv_text() -> str:
    """Semicolon-delimited export with a few malformed rows."""
    lines = ["fecha; ventas ; region"]
    for i, d in enumerate(pd.date_range(start="2024-01-01", periods=25, freq="D")):
        lines.append(f"{d.day:02d}/{d.month:02d}/{d.year}; {100 + 2 * i} ; north")
    lines += [
        "31/02/2024; 5 ; north",
        "01/03/2024; n/a ; north",
        "",
        "   ",
        "02/03/2024",
    ]
    return "\n".join(lines)
