"""Core data structures for the forecasting pipeline."""

import math
from dataclasses import dataclass, field
from typing import Iterable, Iterator, List, Sequence, Tuple, Union

import numpy as np
import pandas as pd


@dataclass(frozen=True)
class TimeSeriesPoint:
    """One observation: canonical YYYY-MM-DD date and a finite value."""
    date: str
    value: float


@dataclass
class TimeSeries:
    """
    Ordered univariate series of TimeSeriesPoint.

    Points are kept in the order given; chronological ordering is the
    caller's responsibility.

    Attributes:
        points: Observations in chronological order
    """
    points: List[TimeSeriesPoint] = field(default_factory=list)

    def __post_init__(self):
        """Validate values after initialization."""
        self.points = list(self.points)
        for i, point in enumerate(self.points):
            if not math.isfinite(point.value):
                raise ValueError(f"Non-finite value at position {i}: {point.value}")

    @classmethod
    def from_pairs(cls, pairs: Iterable[Tuple[str, float]]) -> "TimeSeries":
        """Create from (date, value) pairs."""
        return cls([TimeSeriesPoint(date=str(d), value=float(v)) for d, v in pairs])

    @classmethod
    def from_frame(cls, df: pd.DataFrame, date_col: str = "date", value_col: str = "value") -> "TimeSeries":
        """Create from a DataFrame with date and value columns."""
        return cls.from_pairs(zip(df[date_col].astype(str), df[value_col].astype(float)))

    @property
    def values(self) -> np.ndarray:
        return np.array([p.value for p in self.points], dtype=np.float64)

    @property
    def dates(self) -> List[str]:
        return [p.date for p in self.points]

    def to_frame(self) -> pd.DataFrame:
        """Convert to a DataFrame with 'date' and 'value' columns."""
        return pd.DataFrame({"date": self.dates, "value": self.values})

    def __len__(self) -> int:
        return len(self.points)

    def __iter__(self) -> Iterator[TimeSeriesPoint]:
        return iter(self.points)

    def __getitem__(self, key: Union[int, slice]) -> Union[TimeSeriesPoint, "TimeSeries"]:
        if isinstance(key, slice):
            return TimeSeries(self.points[key])
        return self.points[key]


def as_float_array(values: Union[Sequence[float], np.ndarray, TimeSeries]) -> np.ndarray:
    """Coerce a series or sequence of numbers to a 1-D float64 array."""
    if isinstance(values, TimeSeries):
        return values.values
    return np.asarray(values, dtype=np.float64).reshape(-1)
