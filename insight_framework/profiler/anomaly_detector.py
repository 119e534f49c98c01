"""
Rule-based anomaly detection for profiled tables.

Scans each column independently of the profiler. Every rule applies only to
the column shape it names and may fire alongside the others:

- outlier: numeric columns, Tukey fences on nearest-rank quartiles
- negative-value: numeric columns whose name implies a positive quantity
- null-spike: any column with a null fraction strictly inside (20%, 100%)
- duplicate: string columns whose name implies a key

Findings that affect a large share of a column (the noise fraction) describe
the column's normal shape rather than an anomaly and are suppressed.
"""

import logging
import math
from collections import Counter
from dataclasses import dataclass
from typing import Any, Callable, List, Mapping, Optional, Sequence, Tuple

import numpy as np

from insight_framework.core.config import InsightThresholds
from insight_framework.core.constants import (
    ANOMALY_SAMPLE_LIMIT,
    DUPLICATE_SAMPLE_LIMIT,
    POSITIVE_QUANTITY_TERMS,
    KEY_COLUMN_TERMS,
)
from insight_framework.profiler.insight_templates import render_template
from insight_framework.profiler.profile_result import Anomaly, AnomalyType, Severity
from insight_framework.profiler.statistics_calculator import nearest_rank_quartiles
from insight_framework.profiler.type_inferrer import TypeInferrer, NUMBER, STRING
from insight_framework.profiler.values import (
    column_names,
    column_values,
    is_missing,
    to_number,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ColumnView:
    """One column prepared for the anomaly rules."""
    name: str
    values: List[Any]
    data_type: str
    # (value, row index) for every numeric-parseable non-missing cell
    numeric: List[Tuple[float, int]]


def _name_contains(name: str, terms: Sequence[str]) -> bool:
    lowered = name.lower()
    return any(term in lowered for term in terms)


class AnomalyDetector:
    """
    Detect per-column anomalies.

    Attributes:
        thresholds: Detection thresholds
        rules: Ordered (name, rule) pairs; each rule returns an Anomaly or None
    """

    def __init__(
        self,
        thresholds: Optional[InsightThresholds] = None,
        type_inferrer: Optional[TypeInferrer] = None,
    ):
        """
        Initialize the detector.

        Args:
            thresholds: Custom thresholds (uses defaults if None)
            type_inferrer: Column classifier (default TypeInferrer())
        """
        self.thresholds = thresholds or InsightThresholds()
        self.type_inferrer = type_inferrer or TypeInferrer()
        self.rules: List[Tuple[str, Callable[[ColumnView], Optional[Anomaly]]]] = [
            ("outlier", self.check_outliers),
            ("negative_value", self.check_negative_values),
            ("null_spike", self.check_null_spike),
            ("duplicate", self.check_duplicate_keys),
        ]

    def detect(self, rows: Sequence[Mapping[str, Any]]) -> List[Anomaly]:
        """
        Run every rule over every column.

        Args:
            rows: Rows keyed by field name

        Returns:
            Anomalies in column order, then rule order; empty for empty input
        """
        if not rows:
            return []

        anomalies: List[Anomaly] = []
        for name in column_names(rows):
            column = self._view(name, column_values(rows, name))
            for rule_name, rule in self.rules:
                anomaly = rule(column)
                if anomaly is not None:
                    logger.debug(f"Anomaly '{rule_name}' in column '{name}'")
                    anomalies.append(anomaly)
        return anomalies

    def _view(self, name: str, values: List[Any]) -> ColumnView:
        data_type = self.type_inferrer.infer_column_type(values)
        numeric: List[Tuple[float, int]] = []
        if data_type == NUMBER:
            for index, value in enumerate(values):
                number = to_number(value)
                if number is not None:
                    numeric.append((number, index))
        return ColumnView(name=name, values=values, data_type=data_type, numeric=numeric)

    # -------------------------------------------------------------------------
    # Rules
    # -------------------------------------------------------------------------

    def check_outliers(self, column: ColumnView) -> Optional[Anomaly]:
        """Flag values outside the Tukey fences, unless they are too common."""
        if column.data_type != NUMBER or len(column.numeric) <= self.thresholds.min_outlier_sample:
            return None

        numbers = np.sort(np.array([v for v, _ in column.numeric], dtype=np.float64))
        q1, q3 = nearest_rank_quartiles(numbers)
        iqr = q3 - q1
        lower = q1 - self.thresholds.iqr_multiplier * iqr
        upper = q3 + self.thresholds.iqr_multiplier * iqr

        outliers = [(v, i) for v, i in column.numeric if v < lower or v > upper]
        if not outliers:
            return None
        if len(outliers) >= len(column.numeric) * self.thresholds.anomaly_noise_fraction:
            return None

        samples = outliers[:ANOMALY_SAMPLE_LIMIT]
        severity = (
            Severity.HIGH if len(outliers) > self.thresholds.high_severity_outlier_count
            else Severity.MEDIUM
        )
        return Anomaly(
            type=AnomalyType.OUTLIER,
            severity=severity,
            column=column.name,
            description=render_template(
                "anomaly", "outlier", count=len(outliers), lower=lower, upper=upper
            ),
            values=[v for v, _ in samples],
            row_indices=[i for _, i in samples],
            suggestion=render_template(
                "anomaly", "outlier_suggestion",
                samples=", ".join(_format_number(v) for v, _ in outliers[:5])
            ),
        )

    def check_negative_values(self, column: ColumnView) -> Optional[Anomaly]:
        """Flag a few negatives in a column whose name implies a positive quantity."""
        if column.data_type != NUMBER or not _name_contains(column.name, POSITIVE_QUANTITY_TERMS):
            return None

        negatives = [(v, i) for v, i in column.numeric if v < 0]
        positive_count = sum(1 for v, _ in column.numeric if v > 0)
        if not negatives:
            return None
        if len(negatives) >= positive_count * self.thresholds.anomaly_noise_fraction:
            return None

        samples = negatives[:ANOMALY_SAMPLE_LIMIT]
        return Anomaly(
            type=AnomalyType.NEGATIVE_VALUE,
            severity=Severity.MEDIUM,
            column=column.name,
            description=render_template("anomaly", "negative_value", count=len(negatives)),
            values=[v for v, _ in samples],
            row_indices=[i for _, i in samples],
            suggestion=render_template("anomaly", "negative_value_suggestion"),
        )

    def check_null_spike(self, column: ColumnView) -> Optional[Anomaly]:
        """Flag columns with a large but not total share of missing values."""
        if not column.values:
            return None
        null_count = sum(1 for v in column.values if is_missing(v))
        null_fraction = null_count / len(column.values)
        if not self.thresholds.null_spike_fraction < null_fraction < 1.0:
            return None

        severity = (
            Severity.HIGH if null_fraction > self.thresholds.null_spike_high_fraction
            else Severity.MEDIUM
        )
        return Anomaly(
            type=AnomalyType.NULL_SPIKE,
            severity=severity,
            column=column.name,
            description=render_template("anomaly", "null_spike", null_pct=null_fraction * 100),
            suggestion=render_template("anomaly", "null_spike_suggestion"),
        )

    def check_duplicate_keys(self, column: ColumnView) -> Optional[Anomaly]:
        """Flag a few repeated values in a key-like string column."""
        if column.data_type != STRING or not _name_contains(column.name, KEY_COLUMN_TERMS):
            return None

        counts = Counter(str(v) for v in column.values if not is_missing(v))
        duplicates = [(value, count) for value, count in counts.items() if count > 1]
        if not duplicates:
            return None
        if len(duplicates) >= len(counts) * self.thresholds.anomaly_noise_fraction:
            return None

        return Anomaly(
            type=AnomalyType.DUPLICATE,
            severity=Severity.MEDIUM,
            column=column.name,
            description=render_template("anomaly", "duplicate", count=len(duplicates)),
            values=[f"{value} ({count}x)" for value, count in duplicates[:DUPLICATE_SAMPLE_LIMIT]],
            suggestion=render_template("anomaly", "duplicate_suggestion"),
        )


def _format_number(value: float) -> str:
    if math.isfinite(value) and value == int(value):
        return str(int(value))
    return f"{value:g}"


def detect_anomalies(
    rows: Sequence[Mapping[str, Any]],
    thresholds: Optional[InsightThresholds] = None,
) -> List[Anomaly]:
    """
    Convenience function to detect anomalies in a table.

    Args:
        rows: Rows keyed by field name
        thresholds: Custom thresholds (optional)

    Returns:
        List of Anomaly
    """
    return AnomalyDetector(thresholds=thresholds).detect(rows)
