"""
Value coercion helpers shared by the profiling and worksheet branches.

Every component agrees on three questions about a raw cell value:
is it missing, what number does it denote, and what date does it denote.
None of these helpers raise; unparseable input yields None.
"""

import math
import re
import warnings
from datetime import date, datetime, timezone
from numbers import Number
from typing import Any, Dict, Hashable, List, Mapping, Optional, Sequence

import numpy as np
import pandas as pd

from insight_framework.core.constants import (
    MIN_PARSED_YEAR,
    MAX_PARSED_YEAR,
    EPOCH_MIN_YEAR,
    EPOCH_MAX_YEAR,
)

# Common date layouts (ISO, US, EU, alternative ISO)
DATE_PATTERNS = [
    r'^\d{4}-\d{2}-\d{2}',
    r'^\d{1,2}/\d{1,2}/\d{4}',
    r'^\d{2}-\d{2}-\d{4}',
    r'^\d{4}/\d{2}/\d{2}',
]
_DATE_REGEXES = [re.compile(p) for p in DATE_PATTERNS]

# A generically parsed string must at least carry a year or a day/month pair
_DATE_SHAPE = re.compile(r'\d{4}|\d{1,2}/\d{1,2}')


def is_missing(value: Any) -> bool:
    """Return True for None, NaN/NaT/NA and the empty string."""
    if value is None:
        return True
    # Array-like values are never "missing"; check before pd.isna to avoid
    # the ambiguous truth value error
    if isinstance(value, (list, tuple, dict, set, np.ndarray)):
        return False
    if isinstance(value, str):
        return value == ""
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def to_number(value: Any) -> Optional[float]:
    """
    Coerce a value to a finite float.

    Booleans are not numbers here; numeric strings are parsed after
    stripping surrounding whitespace.

    Returns:
        The float value, or None when the value is missing or not numeric
    """
    if value is None or isinstance(value, (bool, np.bool_)):
        return None
    if isinstance(value, Number):
        try:
            result = float(value)
        except (TypeError, ValueError, OverflowError):
            return None
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            result = float(text)
        except ValueError:
            return None
    else:
        return None
    return result if math.isfinite(result) else None


def _naive_utc(value: datetime) -> datetime:
    """Drop the timezone of an aware datetime after converting it to UTC."""
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def _generic_parse(text: str) -> Optional[datetime]:
    with warnings.catch_warnings():
        warnings.simplefilter("ignore")
        try:
            parsed = pd.to_datetime(text, errors="coerce")
        except (ValueError, TypeError, OverflowError):
            return None
    if parsed is None or pd.isna(parsed):
        return None
    # Offset-suffixed strings ("Z", "+02:00") parse as aware timestamps
    if parsed.tzinfo is not None:
        parsed = parsed.tz_convert(None)
    return parsed.to_pydatetime()


def parse_date_string(text: str) -> Optional[datetime]:
    """
    Parse a date string, accepting it only when it looks like a date.

    The string must parse, must match one of DATE_PATTERNS or at least
    contain a 4-digit year or a day/month pair, and must land in a
    plausible year range.
    """
    text = text.strip()
    if not text:
        return None
    parsed = _generic_parse(text)
    if parsed is None:
        return None
    if not any(regex.match(text) for regex in _DATE_REGEXES) and not _DATE_SHAPE.search(text):
        return None
    if not MIN_PARSED_YEAR <= parsed.year <= MAX_PARSED_YEAR:
        return None
    return parsed


def epoch_to_date(value: float) -> Optional[datetime]:
    """
    Interpret a number as epoch milliseconds.

    Only dates strictly between EPOCH_MIN_YEAR and EPOCH_MAX_YEAR are
    accepted, which rejects small integers such as years or counts.
    """
    try:
        parsed = datetime.fromtimestamp(value / 1000.0, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return None
    if EPOCH_MIN_YEAR < parsed.year < EPOCH_MAX_YEAR:
        return parsed.replace(tzinfo=None)
    return None


def to_date(value: Any) -> Optional[datetime]:
    """
    Coerce a native date, a date string or an epoch-like number to a datetime.

    Returns:
        Naive datetime (UTC for offset-aware input), or None if the value
        does not denote a date
    """
    if value is None or isinstance(value, (bool, np.bool_)):
        return None
    if isinstance(value, pd.Timestamp):
        if pd.isna(value):
            return None
        return value.tz_convert(None).to_pydatetime() if value.tzinfo else value.to_pydatetime()
    if isinstance(value, datetime):
        return _naive_utc(value)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, str):
        return parse_date_string(value)
    number = to_number(value)
    if number is not None:
        return epoch_to_date(number)
    return None


def value_key(value: Any) -> Hashable:
    """Return a hashable key for distinct-value counting."""
    try:
        hash(value)
    except TypeError:
        return repr(value)
    return value


def column_names(rows: Sequence[Mapping[str, Any]]) -> List[str]:
    """Return field names in order of first appearance across all rows."""
    names: Dict[str, None] = {}
    for row in rows:
        for name in row:
            names.setdefault(name, None)
    return list(names)


def column_values(rows: Sequence[Mapping[str, Any]], name: str) -> List[Any]:
    """Return one column's values in row order (None where a row lacks the field)."""
    return [row.get(name) for row in rows]
