"""Grid search over recurrent forecaster configurations with held-out ranking."""

import logging
import math
from dataclasses import dataclass
from itertools import product
from typing import Callable, List, Optional, Sequence, Tuple, Union

import numpy as np

from tsforecast.data.sequences import SequenceBuilder
from tsforecast.data.structs import TimeSeries, as_float_array
from tsforecast.evaluation.metrics import percentage_error
from tsforecast.models.base_model import BaseModel, EpochCallback, ModelConfig
from tsforecast.models.lstm_model import LSTMModel
from tsforecast.utils.error_handling import NoViableModelError
from tsforecast.utils.monitoring import ProgressTracker, SearchProgress

logger = logging.getLogger(__name__)

DEFAULT_WINDOW_SIZES = (3, 5)
DEFAULT_HIDDEN_WIDTHS = (32, 64)
DEFAULT_EPOCHS = 1000

DEFAULT_CONFIG_GRID: Tuple[ModelConfig, ...] = tuple(
    ModelConfig(window_size=w, hidden_width=u)
    for w, u in product(DEFAULT_WINDOW_SIZES, DEFAULT_HIDDEN_WIDTHS)
)

ModelFactory = Callable[[ModelConfig], BaseModel]
ProgressCallback = Callable[[SearchProgress], None]
Values = Union[Sequence[float], np.ndarray, TimeSeries]


@dataclass
class EvaluationResult:
    """Outcome of training and scoring one configuration."""
    config: ModelConfig
    model: Optional[BaseModel]
    test_error: float
    n_test_windows: int = 0
    training_time: float = 0.0


def evaluate_on_test(model: BaseModel, test_values: Values) -> Tuple[np.ndarray, np.ndarray, float]:
    """
    Score a model one step ahead on ground-truth test windows.

    For every i in [window_size, len(test)), the model sees test[i-window_size:i]
    and is compared against test[i]. Predictions are never fed back.

    Returns:
        (predictions, actuals, percentage error)
    """
    windows, actuals = SequenceBuilder.build(test_values, model.window_size)
    predictions = model.predict_windows(windows)
    return predictions, actuals, percentage_error(actuals, predictions)


def build_config_grid(window_sizes: Sequence[int], hidden_widths: Sequence[int]) -> List[ModelConfig]:
    """All (window, width) combinations, window-major."""
    return [ModelConfig(window_size=w, hidden_width=u) for w, u in product(window_sizes, hidden_widths)]


def _improves(candidate: float, incumbent: float) -> bool:
    # NaN never wins; equal errors keep the incumbent
    return not math.isnan(candidate) and candidate < incumbent


class ModelSearch:
    """
    Trains one model per configuration and keeps the lowest test error.

    At most two models are alive at once: the incumbent best and the
    candidate being compared to it. Losers are released immediately.
    """

    def __init__(
        self,
        model_factory: ModelFactory = LSTMModel,
        progress_callback: Optional[ProgressCallback] = None,
        epoch_callback: Optional[EpochCallback] = None,
    ):
        """
        Args:
            model_factory: Builds an unfitted model from a ModelConfig
            progress_callback: Receives a SearchProgress after every configuration
            epoch_callback: Receives (epoch, loss) during training
        """
        self.model_factory = model_factory
        self.progress_callback = progress_callback
        self.epoch_callback = epoch_callback

    def _train_and_evaluate(
        self,
        config: ModelConfig,
        train_values: np.ndarray,
        test_values: np.ndarray,
        epochs: int,
    ) -> Optional[EvaluationResult]:
        windows, labels = SequenceBuilder.build(train_values, config.window_size)
        if len(windows) == 0:
            logger.warning(
                f"Skipping config ({config}): {len(train_values)} training points "
                f"yield no windows"
            )
            return None

        candidate = self.model_factory(config)
        try:
            candidate.fit(windows, labels, epochs=epochs, on_epoch_end=self.epoch_callback)
            _, actuals, error = evaluate_on_test(candidate, test_values)
        except BaseException:
            candidate.release()
            raise

        return EvaluationResult(
            config=config,
            model=candidate,
            test_error=error,
            n_test_windows=len(actuals),
            training_time=candidate.training_time,
        )

    def search(
        self,
        train_values: Values,
        test_values: Values,
        configs: Sequence[ModelConfig] = DEFAULT_CONFIG_GRID,
        epochs_per_config: int = DEFAULT_EPOCHS,
    ) -> EvaluationResult:
        """
        Run the sweep and return the best result; its model is owned by the caller.

        Args:
            train_values: Chronologically earlier values used for fitting
            test_values: Held-out values used only for ranking
            configs: Candidates, evaluated in order
            epochs_per_config: Training epochs for every candidate

        Raises:
            ValueError: If configs is empty
            NoViableModelError: If no configuration yields a finite test error
        """
        configs = list(configs)
        if not configs:
            raise ValueError("At least one model configuration is required")
        if epochs_per_config < 1:
            raise ValueError(f"epochs_per_config must be >= 1, got {epochs_per_config}")

        train_arr = as_float_array(train_values)
        test_arr = as_float_array(test_values)
        logger.info(
            f"Searching {len(configs)} configs on {len(train_arr)} train / "
            f"{len(test_arr)} test points, {epochs_per_config} epochs each"
        )

        tracker = ProgressTracker(total=len(configs))
        tracker.start()
        best: Optional[EvaluationResult] = None

        try:
            for config in configs:
                result = self._train_and_evaluate(config, train_arr, test_arr, epochs_per_config)
                error = result.test_error if result else float("nan")

                if result is not None:
                    logger.info(
                        f"Config ({config}): test error {error:.4f}% "
                        f"over {result.n_test_windows} windows"
                    )
                    incumbent = best.test_error if best else math.inf
                    if _improves(error, incumbent):
                        if best is not None:
                            best.model.release()
                        best = result
                    else:
                        result.model.release()

                snapshot = tracker.step(config=config, test_error=error)
                if self.progress_callback:
                    self.progress_callback(snapshot)
        except BaseException:
            if best is not None:
                best.model.release()
            raise

        if best is None:
            raise NoViableModelError(
                f"None of {len(configs)} configurations produced a finite test error; "
                f"the test split ({len(test_arr)} points) may be too short or all zeros"
            )

        logger.info(f"Best config ({best.config}) with test error {best.test_error:.4f}%")
        return best
