"""Chronological train/test splitting."""

from typing import List, Dict, Any, Tuple
from dataclasses import dataclass, field
import math
import logging

from tsforecast.data.structs import TimeSeries

logger = logging.getLogger(__name__)


@dataclass
class SplitIndices:
    """Container for train/test split indices with metadata."""
    train_indices: List[int]
    test_indices: List[int]
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "train_indices": self.train_indices,
            "test_indices": self.test_indices,
            "metadata": self.metadata,
        }


class TimeSeriesSplitter:
    """Time-series aware train/test splitting (no shuffling)."""

    def train_test_split(self, n: int, train_fraction: float = 0.8) -> SplitIndices:
        """
        Split n ordered samples into a leading train block and trailing test block.

        Args:
            n: Number of samples
            train_fraction: Proportion for training; train size is floor(n * fraction)

        Returns:
            SplitIndices with indices for each split
        """
        if not 0.0 < train_fraction < 1.0:
            raise ValueError(f"train_fraction must be in (0, 1), got {train_fraction}")

        train_end = math.floor(n * train_fraction)
        indices = list(range(n))
        return SplitIndices(
            train_indices=indices[:train_end],
            test_indices=indices[train_end:],
            metadata={
                "split_type": "chronological",
                "train_fraction": train_fraction,
                "total_samples": n,
                "train_samples": train_end,
                "test_samples": n - train_end,
            },
        )

    def split_series(self, series: TimeSeries, train_fraction: float = 0.8) -> Tuple[TimeSeries, TimeSeries]:
        """Return (train, test) series."""
        split = self.train_test_split(len(series), train_fraction)
        train_end = split.metadata["train_samples"]
        train, test = series[:train_end], series[train_end:]
        if len(train) and len(test):
            logger.info(
                f"Split {len(series)} points: train {train.dates[0]}..{train.dates[-1]} "
                f"({len(train)}), test {test.dates[0]}..{test.dates[-1]} ({len(test)})"
            )
        return train, test
