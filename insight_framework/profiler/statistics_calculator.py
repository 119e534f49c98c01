"""
Statistics Calculator - Per-Column Statistical Analysis for Data Profiling.

This module computes the statistics attached to a column profile:
numeric statistics for numeric columns, and string-length and frequency
statistics for every other column.

Architecture:
    StatisticsCalculator is responsible for:
    1. Numeric statistics (sum, mean, median, population std, quartiles, skewness)
    2. Distribution tagging from skewness
    3. Categorical statistics (string length range, top values)

Design Decisions:
    - Population variance (divide by n), matching the anomaly detector's view
    - Quartiles use nearest-rank indexing: q1 = sorted[floor(0.25n)],
      q3 = sorted[floor(0.75n)]; the same definition drives Tukey fences
    - All numeric outputs are rounded to 2 decimals
    - Top 10 values reported, percentages of the non-missing total (1 decimal)
    - Empty input returns an empty partial result; nothing here raises

Usage:
    calculator = StatisticsCalculator()
    numeric = calculator.calculate_numeric_stats([1, 2, 3, 4])
    categorical = calculator.calculate_categorical_stats(["a", "b", "a"])
"""

import logging
import math
from collections import Counter
from typing import Any, Dict, Iterable, List, Optional, Tuple

import numpy as np

from insight_framework.core.constants import (
    STAT_DECIMALS,
    PERCENT_DECIMALS,
    TOP_VALUES_LIMIT,
    SKEWNESS_THRESHOLD,
)
from insight_framework.profiler.values import is_missing

logger = logging.getLogger(__name__)


def nearest_rank_quartiles(sorted_values: np.ndarray) -> Tuple[float, float]:
    """
    Return (q1, q3) of an ascending array using nearest-rank indexing.

    Args:
        sorted_values: Non-empty array sorted ascending

    Returns:
        Tuple of (q1, q3)
    """
    n = len(sorted_values)
    q1 = float(sorted_values[int(math.floor(n * 0.25))])
    q3 = float(sorted_values[int(math.floor(n * 0.75))])
    return q1, q3


def classify_distribution(skewness: Optional[float]) -> str:
    """
    Tag a distribution shape from its skewness.

    Args:
        skewness: Skewness, or None when undefined (zero spread)

    Returns:
        'normal', 'skewed-left', 'skewed-right' or 'unknown'
    """
    if skewness is None or not math.isfinite(skewness):
        return "unknown"
    if abs(skewness) < SKEWNESS_THRESHOLD:
        return "normal"
    if skewness < -SKEWNESS_THRESHOLD:
        return "skewed-left"
    if skewness > SKEWNESS_THRESHOLD:
        return "skewed-right"
    return "unknown"


class StatisticsCalculator:
    """
    Statistical analysis for one column.

    Attributes:
        decimals: Rounding applied to numeric statistics
        top_values_limit: Number of most common values reported

    Example:
        >>> calculator = StatisticsCalculator()
        >>> stats = calculator.calculate_numeric_stats(list(range(1, 11)))
        >>> stats["q1"], stats["q3"], stats["median"]
        (3.0, 8.0, 5.5)
    """

    def __init__(self, decimals: int = STAT_DECIMALS, top_values_limit: int = TOP_VALUES_LIMIT):
        """
        Initialize the statistics calculator.

        Args:
            decimals: Decimal places for numeric statistics
            top_values_limit: Maximum number of top values to report
        """
        self.decimals = decimals
        self.top_values_limit = top_values_limit

    def _round(self, value: float) -> float:
        return round(float(value), self.decimals)

    def calculate_numeric_stats(self, values: Iterable[Any]) -> Dict[str, Any]:
        """
        Calculate numeric statistics.

        Args:
            values: Numbers; non-numeric and non-finite entries are ignored

        Returns:
            Dict with min_value, max_value, sum, mean, median, std_dev, q1, q3,
            iqr, skewness and distribution; empty dict if no finite numbers
        """
        numbers = [
            float(v) for v in values
            if isinstance(v, (int, float, np.integer, np.floating))
            and not isinstance(v, (bool, np.bool_))
            and math.isfinite(float(v))
        ]
        if not numbers:
            return {}

        array = np.sort(np.array(numbers, dtype=np.float64))
        n = len(array)

        total = float(np.sum(array))
        mean = total / n
        if n % 2 == 0:
            median = (array[n // 2 - 1] + array[n // 2]) / 2
        else:
            median = array[n // 2]

        # Population variance
        std_dev = float(np.sqrt(np.mean((array - mean) ** 2)))
        q1, q3 = nearest_rank_quartiles(array)

        skewness: Optional[float] = None
        if std_dev > 0:
            skewness = float(np.mean(((array - mean) / std_dev) ** 3))

        return {
            "min_value": self._round(array[0]),
            "max_value": self._round(array[-1]),
            "sum": self._round(total),
            "mean": self._round(mean),
            "median": self._round(median),
            "std_dev": self._round(std_dev),
            "q1": self._round(q1),
            "q3": self._round(q3),
            "iqr": self._round(q3 - q1),
            "skewness": self._round(skewness) if skewness is not None else None,
            "distribution": classify_distribution(skewness),
        }

    def calculate_categorical_stats(self, values: Iterable[Any]) -> Dict[str, Any]:
        """
        Calculate string-length and frequency statistics.

        Args:
            values: Column values; missing values are ignored

        Returns:
            Dict with min_length, max_length and top_values; empty dict if
            every value is missing
        """
        strings = [str(v) for v in values if not is_missing(v)]
        if not strings:
            return {}

        lengths = [len(s) for s in strings]
        counts = Counter(strings)
        total = len(strings)

        top_values: List[Dict[str, Any]] = [
            {
                "value": value,
                "count": count,
                "percentage": round(100 * count / total, PERCENT_DECIMALS),
            }
            for value, count in counts.most_common(self.top_values_limit)
        ]

        return {
            "min_length": min(lengths),
            "max_length": max(lengths),
            "top_values": top_values,
        }
