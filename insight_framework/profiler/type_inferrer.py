"""
Type Inferrer - Column Semantic Type Classification.

This module decides the semantic type of a column from a sample of its
values. Each sampled value is classified individually, then the set of
observed value types is reduced to one column type.

Architecture:
    TypeInferrer follows a priority-based approach per value:
    1. Native booleans
    2. Numeric values and numeric-parseable strings
    3. Native dates and date-parseable strings (regex forms or a generic
       parse validated against a plausible year/format)
    4. Everything else is a string

Design Decisions:
    - Only the first TYPE_SAMPLE_SIZE non-missing values are inspected
    - A single observed type is the column type
    - Numbers mixed with exactly one other type still count as numeric
      (tolerates sparse noise such as "N/A" markers)
    - Anything else is "mixed"; all-missing columns default to "string"
    - Classification never fails; the worst case is "mixed"

Usage:
    inferrer = TypeInferrer()
    inferrer.detect_type("2024-01-15")         # 'date'
    inferrer.infer_column_type([1, 2, "n/a"])  # 'number'
"""

import logging
from datetime import date
from typing import Any, Iterable, Set

import numpy as np

from insight_framework.core.constants import TYPE_SAMPLE_SIZE
from insight_framework.profiler.values import is_missing, to_number, parse_date_string

logger = logging.getLogger(__name__)

NUMBER = "number"
STRING = "string"
DATE = "date"
BOOLEAN = "boolean"
MIXED = "mixed"

COLUMN_TYPES = (NUMBER, STRING, DATE, BOOLEAN, MIXED)


class TypeInferrer:
    """
    Semantic type detection for single values and whole columns.

    Attributes:
        sample_size: Number of non-missing values inspected per column

    Example:
        >>> inferrer = TypeInferrer()
        >>> inferrer.detect_type(True)
        'boolean'
        >>> inferrer.detect_type("42.5")
        'number'
        >>> inferrer.infer_column_type(["North", "South", None])
        'string'
    """

    def __init__(self, sample_size: int = TYPE_SAMPLE_SIZE):
        """
        Initialize the type inferrer.

        Args:
            sample_size: Number of non-missing values to inspect per column
        """
        self.sample_size = sample_size

    def detect_type(self, value: Any) -> str:
        """
        Detect the type of a single non-missing value.

        Args:
            value: The value to classify

        Returns:
            One of 'boolean', 'number', 'date', 'string'
        """
        if isinstance(value, (bool, np.bool_)):
            return BOOLEAN

        if to_number(value) is not None:
            return NUMBER

        if isinstance(value, date):
            return DATE
        if isinstance(value, str) and parse_date_string(value) is not None:
            return DATE

        return STRING

    def infer_column_type(self, values: Iterable[Any]) -> str:
        """
        Infer the semantic type of a column.

        Args:
            values: Column values in row order; missing values are skipped

        Returns:
            One of 'number', 'string', 'date', 'boolean', 'mixed'
        """
        types: Set[str] = set()
        inspected = 0

        for value in values:
            if is_missing(value):
                continue
            types.add(self.detect_type(value))
            inspected += 1
            if inspected >= self.sample_size:
                break

        if not types:
            return STRING

        return self.resolve(types)

    @staticmethod
    def resolve(types: Set[str]) -> str:
        """
        Reduce a set of observed value types to a column type.

        Args:
            types: Non-empty set of value types

        Returns:
            The single type, 'number' for number plus one other type, else 'mixed'
        """
        if len(types) == 1:
            return next(iter(types))
        if NUMBER in types and len(types) == 2:
            return NUMBER
        return MIXED


_default_inferrer = TypeInferrer()


def detect_data_type(values: Iterable[Any]) -> str:
    """Classify a column with the default sample size."""
    return _default_inferrer.infer_column_type(values)
