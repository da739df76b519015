"""Date parsing and future calendar label generation."""

import logging
import re
from datetime import date
from enum import Enum
from typing import List, Optional, Union

import pandas as pd

logger = logging.getLogger(__name__)

CANONICAL_FORMAT = "%Y-%m-%d"
_SEPARATORS = re.compile(r"[-/]")


class DateFormat(str, Enum):
    """Token order of a raw date string."""
    YMD = "Y/M/D"
    DMY = "D/M/Y"
    MDY = "M/D/Y"

    @classmethod
    def parse(cls, fmt: Union["DateFormat", str]) -> "DateFormat":
        """Accept an enum member, its label ('D/M/Y') or its name ('DMY')."""
        if isinstance(fmt, cls):
            return fmt
        try:
            return cls(fmt)
        except ValueError:
            pass
        try:
            return cls[str(fmt).upper()]
        except KeyError:
            raise ValueError(
                f"Unknown date format {fmt!r}; expected one of {[f.value for f in cls]}"
            ) from None


def normalize_date(raw: str, fmt: Union[DateFormat, str]) -> Optional[str]:
    """
    Normalize a raw date string to YYYY-MM-DD.

    Args:
        raw: Date with three numeric tokens separated by '-' or '/'
        fmt: Token order

    Returns:
        Canonical date string, or None when the input is not a valid date
    """
    order = DateFormat.parse(fmt)
    if raw is None:
        return None

    parts = _SEPARATORS.split(raw.strip())
    if len(parts) != 3 or not all(p.isascii() and p.isdigit() for p in parts):
        return None

    a, b, c = (int(p) for p in parts)
    if order is DateFormat.YMD:
        year, month, day = a, b, c
    elif order is DateFormat.DMY:
        day, month, year = a, b, c
    else:
        month, day, year = a, b, c

    try:
        return date(year, month, day).isoformat()
    except ValueError:
        return None


def future_dates(last_date: str, count: int) -> List[str]:
    """
    Generate the `count` calendar days following `last_date`.

    Falls back to ordinal labels ("Future +1", ...) when `last_date` is not
    a parseable YYYY-MM-DD date.
    """
    if count <= 0:
        return []

    last = pd.to_datetime(last_date, format=CANONICAL_FORMAT, errors="coerce")
    if pd.isna(last):
        logger.warning(f"Unparseable last date {last_date!r}; using ordinal future labels")
        return [f"Future +{i}" for i in range(1, count + 1)]

    dates = pd.date_range(start=last + pd.Timedelta(days=1), periods=count, freq="D")
    return dates.strftime(CANONICAL_FORMAT).tolist()


class DateUtility:
    """Namespace for date normalization and future date generation."""

    normalize = staticmethod(normalize_date)
    future_dates = staticmethod(future_dates)
