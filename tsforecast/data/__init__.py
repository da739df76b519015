"""Series containers, windowing, date handling, loading and splitting."""

from .structs import TimeSeries, TimeSeriesPoint
from .sequences import SequenceBuilder, build_sequences
from .dates import DateFormat, DateUtility, future_dates, normalize_date
from .loaders import DataLoader, ExtractionReport, RawTable, parse_delimited
from .splitters import SplitIndices, TimeSeriesSplitter

__all__ = [
    "TimeSeries",
    "TimeSeriesPoint",
    "SequenceBuilder",
    "build_sequences",
    "DateFormat",
    "DateUtility",
    "future_dates",
    "normalize_date",
    "DataLoader",
    "ExtractionReport",
    "RawTable",
    "parse_delimited",
    "SplitIndices",
    "TimeSeriesSplitter",
]
