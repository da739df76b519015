"""Sliding-window construction of supervised (window, next value) pairs."""

from typing import Sequence, Tuple, Union

import numpy as np

from tsforecast.data.structs import TimeSeries, as_float_array


class SequenceBuilder:
    """Turns a flat numeric series into supervised window/label pairs."""

    @staticmethod
    def build(
        values: Union[Sequence[float], np.ndarray, TimeSeries],
        window_size: int,
    ) -> Tuple[np.ndarray, np.ndarray]:
        """
        Create sliding window sequences.

        Window i is values[i:i + window_size], its label values[i + window_size].

        Args:
            values: Flat numeric series
            window_size: Number of consecutive values per window

        Returns:
            (windows, labels) with shapes (n, window_size) and (n,) where
            n = len(values) - window_size, or zero when the series is too short
        """
        if window_size < 1:
            raise ValueError(f"window_size must be >= 1, got {window_size}")

        arr = as_float_array(values)
        n_samples = len(arr) - window_size
        if n_samples <= 0:
            return np.empty((0, window_size), dtype=np.float64), np.empty((0,), dtype=np.float64)

        windows = np.stack([arr[i:i + window_size] for i in range(n_samples)])
        labels = arr[window_size:].copy()
        return windows, labels


build_sequences = SequenceBuilder.build
