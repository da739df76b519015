"""Delimited-text loading and date/value column extraction."""

from typing import Dict, Optional, Any, List, Tuple, Union
from dataclasses import dataclass, field
import math
import logging
from pathlib import Path

from tsforecast.data.dates import DateFormat, normalize_date
from tsforecast.data.structs import TimeSeries, TimeSeriesPoint
from tsforecast.utils.error_handling import ColumnSelectionError, InputValidationError

logger = logging.getLogger(__name__)


def parse_delimited(text: str, delimiter: str = ",") -> List[List[str]]:
    """
    Split raw text into trimmed, non-empty lines and then into trimmed fields.

    Args:
        text: Raw file contents
        delimiter: Field separator

    Returns:
        List of rows, each a list of field strings
    """
    if not delimiter:
        raise ValueError("delimiter must be a non-empty string")
    rows = []
    for line in text.splitlines():
        line = line.strip()
        if not line:
            continue
        rows.append([col.strip() for col in line.split(delimiter)])
    return rows


@dataclass
class RawTable:
    """Header row plus data rows of a delimited file."""
    header: List[str]
    rows: List[List[str]]

    def column_index(self, name: str) -> int:
        try:
            return self.header.index(name)
        except ValueError:
            raise ColumnSelectionError(
                f"Column {name!r} not found; available columns: {self.header}"
            ) from None


@dataclass
class ExtractionReport:
    """Result of turning raw rows into a series."""
    total_rows: int
    kept_rows: int
    dropped_rows: int
    drop_reasons: Dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "total_rows": self.total_rows,
            "kept_rows": self.kept_rows,
            "dropped_rows": self.dropped_rows,
            "drop_reasons": self.drop_reasons,
        }


def _parse_value(raw: str) -> Optional[float]:
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return None
    return value if math.isfinite(value) else None


class DataLoader:
    """Loads delimited text and extracts a date/value series from it."""

    def __init__(self, delimiter: str = ","):
        self.delimiter = delimiter

    def load_text(self, text: str, delimiter: Optional[str] = None) -> RawTable:
        """
        Parse raw delimited text into a header and data rows.

        Raises:
            InputValidationError: If there is no header row followed by data
        """
        rows = parse_delimited(text, delimiter or self.delimiter)
        if len(rows) < 2:
            raise InputValidationError("The file needs at least a header row and one data row.")
        table = RawTable(header=rows[0], rows=rows[1:])
        logger.info(f"Loaded {len(table.rows)} rows with columns {table.header}")
        return table

    def load_file(self, path: Union[str, Path], delimiter: Optional[str] = None) -> RawTable:
        """Read a delimited file and parse it with load_text."""
        file_path = Path(path)
        if not file_path.exists():
            raise FileNotFoundError(f"Data file not found: {path}")
        return self.load_text(file_path.read_text(encoding="utf-8-sig"), delimiter)

    def extract_series(
        self,
        table: RawTable,
        date_column: str,
        value_column: str,
        date_format: Union[DateFormat, str] = DateFormat.YMD,
    ) -> Tuple[TimeSeries, ExtractionReport]:
        """
        Build a TimeSeries from the chosen columns.

        Rows with a missing cell, an unparseable or non-finite value, or an
        invalid date are dropped; the report counts them per reason.

        Args:
            table: Parsed table
            date_column: Header name of the date column
            value_column: Header name of the value column
            date_format: Token order of the raw dates

        Returns:
            (series, report)
        """
        if not date_column or not value_column:
            raise ColumnSelectionError("Both a date column and a value column must be chosen.")
        date_idx = table.column_index(date_column)
        value_idx = table.column_index(value_column)
        fmt = DateFormat.parse(date_format)

        points: List[TimeSeriesPoint] = []
        reasons: Dict[str, int] = {}

        def drop(reason: str) -> None:
            reasons[reason] = reasons.get(reason, 0) + 1

        for row in table.rows:
            if max(date_idx, value_idx) >= len(row) or not row[date_idx]:
                drop("missing_cell")
                continue
            value = _parse_value(row[value_idx])
            if value is None:
                drop("invalid_value")
                continue
            iso = normalize_date(row[date_idx], fmt)
            if iso is None:
                drop("invalid_date")
                continue
            points.append(TimeSeriesPoint(date=iso, value=value))

        report = ExtractionReport(
            total_rows=len(table.rows),
            kept_rows=len(points),
            dropped_rows=len(table.rows) - len(points),
            drop_reasons=reasons,
        )
        if report.dropped_rows:
            logger.warning(f"Dropped {report.dropped_rows} of {report.total_rows} rows: {reasons}")
        return TimeSeries(points), report
