"""
Progress and time-remaining tracking for long-running training sweeps.
"""

import time
import logging
from dataclasses import dataclass
from typing import Callable, Optional, Any, Dict

logger = logging.getLogger(__name__)


@dataclass
class SearchProgress:
    """Snapshot emitted after each processed configuration."""
    configs_processed: int
    total_configs: int
    percent: int
    eta_seconds: float
    elapsed_seconds: float
    config: Any = None
    test_error: float = float("nan")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "configs_processed": self.configs_processed,
            "total_configs": self.total_configs,
            "percent": self.percent,
            "eta_seconds": self.eta_seconds,
            "elapsed_seconds": self.elapsed_seconds,
            "config": str(self.config) if self.config is not None else None,
            "test_error": self.test_error,
        }


class ProgressTracker:
    """
    Tracks completed steps and estimates the remaining wall-clock time.

    The estimate is the running mean time per step multiplied by the steps
    left, so it is recomputed on every step and may go up as well as down.
    """

    def __init__(self, total: int, clock: Callable[[], float] = time.perf_counter):
        if total < 0:
            raise ValueError(f"total must be >= 0, got {total}")
        self.total = total
        self._clock = clock
        self._start: Optional[float] = None
        self.processed = 0

    def start(self) -> None:
        """Start (or restart) timing."""
        self._start = self._clock()
        self.processed = 0

    def step(self, config: Any = None, test_error: float = float("nan")) -> SearchProgress:
        """Record one finished step and return the updated snapshot."""
        if self._start is None:
            self.start()
        self.processed = min(self.processed + 1, self.total)

        elapsed = self._clock() - self._start
        avg_per_step = elapsed / self.processed if self.processed else 0.0
        remaining = self.total - self.processed
        percent = round(self.processed / self.total * 100) if self.total else 100

        snapshot = SearchProgress(
            configs_processed=self.processed,
            total_configs=self.total,
            percent=percent,
            eta_seconds=avg_per_step * remaining,
            elapsed_seconds=elapsed,
            config=config,
            test_error=test_error,
        )
        logger.info(
            f"Progress {snapshot.percent}% ({self.processed}/{self.total}), "
            f"ETA {snapshot.eta_seconds:.1f}s"
        )
        return snapshot
