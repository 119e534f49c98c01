"""Tests for per-column anomaly rules."""

import pytest

from insight_framework.core.config import InsightThresholds
from insight_framework.profiler.anomaly_detector import AnomalyDetector, detect_anomalies
from insight_framework.profiler.profile_result import AnomalyType, Severity


def _rows(name, values):
    return [{name: v} for v in values]


class TestOutliers:
    """Tukey-fence outliers with the noise guard."""

    def test_few_extreme_values_are_flagged(self):
        rows = _rows("value", list(range(1, 48)) + [1000, 1001, 1002])

        anomalies = detect_anomalies(rows)

        assert len(anomalies) == 1
        outlier = anomalies[0]
        assert outlier.type == AnomalyType.OUTLIER
        assert outlier.severity == Severity.MEDIUM
        assert outlier.values == [1000, 1001, 1002]
        assert outlier.row_indices == [47, 48, 49]
        assert outlier.description.startswith("3 outlier values detected")
        assert outlier.suggestion == "Review these extreme values: 1000, 1001, 1002"

    def test_common_extremes_are_the_normal_shape(self):
        rows = _rows("value", list(range(1, 43)) + [1000] * 8)
        assert detect_anomalies(rows) == []

    def test_more_than_five_outliers_is_high(self):
        rows = _rows("value", list(range(1, 95)) + [1000] * 6)

        outlier = detect_anomalies(rows)[0]

        assert outlier.severity == Severity.HIGH
        assert len(outlier.values) == 6

    def test_small_sample_skipped(self):
        rows = _rows("value", list(range(1, 10)) + [1000])
        assert detect_anomalies(rows) == []

    def test_string_column_skipped(self):
        rows = _rows("label", [f"v{i}" for i in range(50)])
        assert not any(a.type == AnomalyType.OUTLIER for a in detect_anomalies(rows))

    def test_custom_multiplier(self):
        rows = _rows("value", list(range(1, 48)) + [80, 81, 82])
        assert detect_anomalies(rows)
        wide = InsightThresholds(iqr_multiplier=3.0)
        assert AnomalyDetector(thresholds=wide).detect(rows) == []


class TestNegativeValues:
    """Negatives in positive-quantity columns."""

    def test_isolated_negative_in_sales(self):
        rows = _rows("sales", list(range(1, 30)) + [-5])

        anomalies = [a for a in detect_anomalies(rows) if a.type == AnomalyType.NEGATIVE_VALUE]

        assert len(anomalies) == 1
        assert anomalies[0].severity == Severity.MEDIUM
        assert anomalies[0].values == [-5]
        assert anomalies[0].row_indices == [29]

    def test_frequent_negatives_are_not_flagged(self):
        rows = _rows("revenue", list(range(1, 20)) + [-1, -2, -3, -4, -5])
        assert not any(a.type == AnomalyType.NEGATIVE_VALUE for a in detect_anomalies(rows))

    def test_name_must_imply_positive_quantity(self):
        rows = _rows("delta", list(range(1, 30)) + [-5])
        assert not any(a.type == AnomalyType.NEGATIVE_VALUE for a in detect_anomalies(rows))


class TestNullSpike:
    """Null fraction strictly inside (20%, 100%)."""

    @pytest.mark.parametrize("null_count,expected", [
        (2, None),
        (3, Severity.MEDIUM),
        (6, Severity.HIGH),
        (10, None),
    ])
    def test_null_fraction_bands(self, null_count, expected):
        rows = _rows("note", [None] * null_count + ["x"] * (10 - null_count))

        spikes = [a for a in detect_anomalies(rows) if a.type == AnomalyType.NULL_SPIKE]

        if expected is None:
            assert spikes == []
        else:
            assert len(spikes) == 1
            assert spikes[0].severity == expected

    def test_empty_strings_count_as_null(self):
        rows = _rows("note", [""] * 3 + ["x"] * 7)
        spike = detect_anomalies(rows)[0]
        assert spike.description == "30.0% of values are null or empty"


class TestDuplicateKeys:
    """Repeated values in key-like string columns."""

    def test_single_duplicate_reported(self):
        rows = _rows("order_id", [f"A{i}" for i in range(1, 31)] + ["A1"])

        duplicates = [a for a in detect_anomalies(rows) if a.type == AnomalyType.DUPLICATE]

        assert len(duplicates) == 1
        assert duplicates[0].values == ["A1 (2x)"]
        assert duplicates[0].description == "1 duplicate values found in ID column"

    def test_widespread_duplicates_suppressed(self):
        rows = _rows("product_code", ["X", "X", "Y", "Y", "Z"])
        assert not any(a.type == AnomalyType.DUPLICATE for a in detect_anomalies(rows))

    def test_non_key_column_skipped(self):
        rows = _rows("region", [f"R{i}" for i in range(30)] + ["R1"])
        assert not any(a.type == AnomalyType.DUPLICATE for a in detect_anomalies(rows))


class TestDetector:
    """Detector-level behavior."""

    def test_empty_input(self):
        assert detect_anomalies([]) == []

    def test_rules_may_fire_together(self):
        rows = [{"amount": v} for v in list(range(1, 48)) + [1000, -3]] + [{"amount": None}] * 20

        types = {a.type for a in detect_anomalies(rows)}

        assert AnomalyType.NULL_SPIKE in types
        assert AnomalyType.NEGATIVE_VALUE in types

    def test_to_dict(self):
        rows = _rows("value", list(range(1, 48)) + [1000, 1001, 1002])
        result = detect_anomalies(rows)[0].to_dict()

        assert result["type"] == "outlier"
        assert result["severity"] == "medium"
        assert result["row_indices"] == [47, 48, 49]
