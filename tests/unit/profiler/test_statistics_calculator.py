"""Tests for numeric and categorical column statistics."""

import math

import numpy as np
import pytest

from insight_framework.profiler.statistics_calculator import (
    StatisticsCalculator,
    classify_distribution,
    nearest_rank_quartiles,
)


class TestNumericStats:
    """Numeric branch."""

    @pytest.fixture
    def calculator(self):
        return StatisticsCalculator()

    def test_one_to_ten(self, calculator):
        stats = calculator.calculate_numeric_stats(list(range(1, 11)))

        assert stats["q1"] == 3
        assert stats["q3"] == 8
        assert stats["iqr"] == 5
        assert stats["median"] == 5.5
        assert stats["mean"] == 5.5
        assert stats["sum"] == 55
        assert stats["min_value"] == 1
        assert stats["max_value"] == 10

    def test_population_std_dev(self, calculator):
        stats = calculator.calculate_numeric_stats(list(range(1, 11)))
        # Population variance of 1..10 is 8.25
        assert stats["std_dev"] == round(math.sqrt(8.25), 2)

    def test_odd_median(self, calculator):
        assert calculator.calculate_numeric_stats([3, 1, 2])["median"] == 2

    def test_outputs_rounded_to_two_decimals(self, calculator):
        stats = calculator.calculate_numeric_stats([1 / 3, 2 / 3, 1.0])
        assert stats["mean"] == 0.67
        assert stats["min_value"] == 0.33

    def test_symmetric_data_is_normal(self, calculator):
        stats = calculator.calculate_numeric_stats(list(range(1, 11)))
        assert stats["skewness"] == 0
        assert stats["distribution"] == "normal"

    def test_right_skew(self, calculator):
        stats = calculator.calculate_numeric_stats([1, 1, 1, 1, 10])
        assert stats["skewness"] > 0.5
        assert stats["distribution"] == "skewed-right"

    def test_left_skew(self, calculator):
        stats = calculator.calculate_numeric_stats([10, 10, 10, 10, 1])
        assert stats["distribution"] == "skewed-left"

    def test_constant_column_has_unknown_distribution(self, calculator):
        stats = calculator.calculate_numeric_stats([5, 5, 5])
        assert stats["std_dev"] == 0
        assert stats["skewness"] is None
        assert stats["distribution"] == "unknown"

    def test_non_finite_and_non_numeric_ignored(self, calculator):
        stats = calculator.calculate_numeric_stats([1, float("nan"), float("inf"), "x", True, 3])
        assert stats["sum"] == 4
        assert stats["mean"] == 2

    def test_empty_input(self, calculator):
        assert calculator.calculate_numeric_stats([]) == {}
        assert calculator.calculate_numeric_stats([float("nan")]) == {}


class TestCategoricalStats:
    """Categorical branch."""

    @pytest.fixture
    def calculator(self):
        return StatisticsCalculator()

    def test_lengths_and_top_values(self, calculator):
        stats = calculator.calculate_categorical_stats(["a", "bbb", "a", None, ""])

        assert stats["min_length"] == 1
        assert stats["max_length"] == 3
        assert stats["top_values"][0] == {"value": "a", "count": 2, "percentage": 66.7}
        assert stats["top_values"][1] == {"value": "bbb", "count": 1, "percentage": 33.3}

    def test_top_values_limited_to_ten(self, calculator):
        values = [f"v{i}" for i in range(25)]
        assert len(calculator.calculate_categorical_stats(values)["top_values"]) == 10

    def test_empty_input(self, calculator):
        assert calculator.calculate_categorical_stats([]) == {}
        assert calculator.calculate_categorical_stats([None, ""]) == {}


class TestHelpers:
    """Quartile and distribution helpers."""

    def test_nearest_rank_quartiles(self):
        assert nearest_rank_quartiles(np.arange(1, 11, dtype=float)) == (3.0, 8.0)

    @pytest.mark.parametrize("skewness,expected", [
        (0.0, "normal"),
        (0.49, "normal"),
        (-0.8, "skewed-left"),
        (1.2, "skewed-right"),
        (0.5, "unknown"),
        (None, "unknown"),
        (float("nan"), "unknown"),
    ])
    def test_classify_distribution(self, skewness, expected):
        assert classify_distribution(skewness) == expected
