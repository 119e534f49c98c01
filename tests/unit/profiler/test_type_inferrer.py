"""
Tests for column type classification.

Covers per-value detection, the single-type / numeric-tolerant / mixed
resolution policy and the all-missing default.
"""

from datetime import date, datetime

import numpy as np
import pytest

from insight_framework.profiler.type_inferrer import (
    TypeInferrer,
    detect_data_type,
    NUMBER,
    STRING,
    DATE,
    BOOLEAN,
    MIXED,
)


class TestDetectType:
    """Per-value detection."""

    @pytest.fixture
    def inferrer(self):
        return TypeInferrer()

    @pytest.mark.parametrize("value", [1, 2.5, "42", " 3.14 ", np.int64(7), np.float64(1.5)])
    def test_numbers(self, inferrer, value):
        assert inferrer.detect_type(value) == NUMBER

    @pytest.mark.parametrize("value", [True, False, np.bool_(True)])
    def test_booleans_are_not_numbers(self, inferrer, value):
        assert inferrer.detect_type(value) == BOOLEAN

    @pytest.mark.parametrize("value", [
        "2024-01-15",
        "01/15/2024",
        "2024/01/15",
        datetime(2024, 1, 15),
        date(2024, 1, 15),
    ])
    def test_dates(self, inferrer, value):
        assert inferrer.detect_type(value) == DATE

    @pytest.mark.parametrize("value", ["hello", "East", "A1", "Jan"])
    def test_strings(self, inferrer, value):
        assert inferrer.detect_type(value) == STRING

    def test_implausible_year_is_not_a_date(self, inferrer):
        assert inferrer.detect_type("0500-01-01") == STRING


class TestInferColumnType:
    """Column-level resolution."""

    def test_single_type(self):
        assert detect_data_type([1, 2, 3]) == NUMBER
        assert detect_data_type(["a", "b"]) == STRING
        assert detect_data_type([True, False]) == BOOLEAN
        assert detect_data_type(["2024-01-01", "2024-02-01"]) == DATE

    def test_numeric_tolerates_one_other_type(self):
        assert detect_data_type([1, 2, "n/a", 4]) == NUMBER
        assert detect_data_type([1, "2024-01-01"]) == NUMBER

    def test_three_types_are_mixed(self):
        assert detect_data_type([1, "a", True]) == MIXED

    def test_two_non_numeric_types_are_mixed(self):
        assert detect_data_type(["a", True]) == MIXED

    def test_missing_values_are_skipped(self):
        assert detect_data_type([None, "", 1, float("nan"), 2]) == NUMBER

    def test_all_missing_defaults_to_string(self):
        assert detect_data_type([None, "", None]) == STRING
        assert detect_data_type([]) == STRING

    def test_only_first_sample_is_inspected(self):
        values = [1] * 100 + ["x", True] * 50
        assert TypeInferrer(sample_size=100).infer_column_type(values) == NUMBER
        assert TypeInferrer(sample_size=200).infer_column_type(values) == MIXED
