"""Tests for cross-column insight discovery and ranking."""

import numpy as np
import pytest

from insight_framework.profiler.insight_engine import (
    InsightDiscoverer,
    find_hidden_insights,
    pearson_correlation,
    rank_insights,
)
from insight_framework.profiler.profile_result import Insight, InsightType, Priority


@pytest.fixture
def discoverer():
    return InsightDiscoverer()


def _insight(title, priority):
    return Insight(
        type=InsightType.GAP,
        title=title,
        description="",
        evidence="",
        actionable=True,
        priority=priority,
    )


class TestConcentration:
    """Pareto share and dominant values."""

    def test_pareto_concentration(self, discoverer):
        values = ["A"] * 45 + ["B"] * 40
        for label in "CDEFGHI":
            values += [label] * 2
        values += ["J"]
        rows = [{"channel": v} for v in values]

        insights = discoverer.find_concentration(rows, ["channel"])

        assert len(insights) == 1
        insight = insights[0]
        assert insight.type == InsightType.CONCENTRATION
        assert insight.priority == Priority.HIGH
        assert insight.title == "High concentration in channel"
        assert insight.description == "Top 2 values (85%) dominate channel"
        assert insight.evidence == "Top values: A (45), B (40), C (2)"

    def test_too_few_distinct_values_for_pareto(self, discoverer):
        rows = [{"channel": v} for v in ["A"] * 5 + ["B"] * 5]
        assert discoverer.find_concentration(rows, ["channel"]) == []

    @pytest.mark.parametrize("top_count,priority", [
        (9, Priority.HIGH),
        (6, Priority.MEDIUM),
    ])
    def test_dominant_value(self, discoverer, top_count, priority):
        rows = [{"channel": "web"}] * top_count + [{"channel": "app"}] * (10 - top_count)

        insights = discoverer.find_concentration(rows, ["channel"])

        assert len(insights) == 1
        assert insights[0].priority == priority
        assert insights[0].title == "Dominant value in channel"
        assert insights[0].evidence == f"{top_count} out of 10 rows"

    def test_even_split_is_not_dominant(self, discoverer):
        rows = [{"channel": "web"}] * 5 + [{"channel": "app"}] * 5
        assert discoverer.find_concentration(rows, ["channel"]) == []

    def test_single_value_column_skipped(self, discoverer):
        rows = [{"channel": "web"}] * 10
        assert discoverer.find_concentration(rows, ["channel"]) == []


class TestSegmentVariance:
    """Per-category means of numeric columns."""

    def test_large_ratio_is_high(self, discoverer):
        rows = [{"region": "East", "value": 100}] * 5 + [{"region": "West", "value": 10}] * 5

        insights = discoverer.find_segment_variance(rows, ["region"], ["value"])

        assert len(insights) == 1
        insight = insights[0]
        assert insight.type == InsightType.SEGMENT
        assert insight.priority == Priority.HIGH
        assert insight.title == "value varies significantly by region"
        assert insight.description == '"East" has 10.0x higher average value than "West"'
        assert insight.evidence == "East: 100.00 (n=5) vs West: 10.00 (n=5)"

    def test_moderate_ratio_is_medium(self, discoverer):
        rows = [{"region": "East", "value": 30}] * 5 + [{"region": "West", "value": 10}] * 5
        assert discoverer.find_segment_variance(rows, ["region"], ["value"])[0].priority == Priority.MEDIUM

    def test_small_segments_ignored(self, discoverer):
        rows = [{"region": "East", "value": 100}] * 4 + [{"region": "West", "value": 10}] * 4
        assert discoverer.find_segment_variance(rows, ["region"], ["value"]) == []

    def test_zero_bottom_average_ignored(self, discoverer):
        rows = [{"region": "East", "value": 100}] * 5 + [{"region": "West", "value": 0}] * 5
        assert discoverer.find_segment_variance(rows, ["region"], ["value"]) == []

    def test_missing_category_grouped_as_unknown(self, discoverer):
        rows = [{"region": None, "value": 100}] * 5 + [{"region": "West", "value": 10}] * 5

        insight = discoverer.find_segment_variance(rows, ["region"], ["value"])[0]

        assert insight.description.startswith('"Unknown"')

    def test_too_many_segments_skipped(self, discoverer):
        rows = [{"region": f"R{i}", "value": i + 1} for i in range(21) for _ in range(5)]
        assert discoverer.find_segment_variance(rows, ["region"], ["value"]) == []


class TestGaps:
    """Temporal-cycle names with few distinct values."""

    def test_few_months(self, discoverer):
        rows = [{"month": m} for m in ["Jan", "Feb", "Mar", "Jan"]]

        insights = discoverer.find_gaps(rows, ["month"])

        assert len(insights) == 1
        assert insights[0].priority == Priority.LOW
        assert insights[0].description == "Only 3 unique values found"
        assert insights[0].evidence == "Values present: Jan, Feb, Mar"

    def test_evidence_truncated(self, discoverer):
        rows = [{"month": m} for m in ["Jan", "Feb", "Mar", "Apr", "May", "Jun"]]
        evidence = discoverer.find_gaps(rows, ["month"])[0].evidence
        assert evidence == "Values present: Jan, Feb, Mar, Apr, May..."

    def test_full_cycle_not_flagged(self, discoverer):
        rows = [{"month": f"M{i}"} for i in range(12)]
        assert discoverer.find_gaps(rows, ["month"]) == []

    def test_name_must_mention_cycle(self, discoverer):
        rows = [{"region": m} for m in ["Jan", "Feb"]]
        assert discoverer.find_gaps(rows, ["region"]) == []


class TestCorrelation:
    """Pearson correlation between numeric columns."""

    def test_perfect_positive(self, discoverer):
        rows = [{"x": i, "y": 2 * i} for i in range(1, 26)]

        insights = discoverer.find_correlations(rows, ["x", "y"])

        assert len(insights) == 1
        assert insights[0].priority == Priority.HIGH
        assert insights[0].description == "Positive correlation (r=1.00)"
        assert insights[0].evidence == "As x increases, y tends to increase"

    def test_negative(self, discoverer):
        rows = [{"x": i, "y": -i} for i in range(1, 26)]

        insight = discoverer.find_correlations(rows, ["x", "y"])[0]

        assert insight.description == "Negative correlation (r=-1.00)"
        assert insight.evidence == "As x increases, y tends to decrease"

    def test_too_few_pairs(self, discoverer):
        rows = [{"x": i, "y": 2 * i} for i in range(1, 20)]
        assert discoverer.find_correlations(rows, ["x", "y"]) == []

    def test_constant_column_has_no_correlation(self):
        x = np.arange(25, dtype=float)
        assert pearson_correlation(x, np.ones(25)) == 0.0

    def test_only_first_four_numeric_columns(self, discoverer):
        rows = [{f"c{k}": i * (k + 1) for k in range(5)} for i in range(1, 26)]
        insights = discoverer.find_correlations(rows, [f"c{k}" for k in range(5)])
        # 4 columns give 6 pairs
        assert len(insights) == 6
        assert not any("c4" in insight.title for insight in insights)


class TestRanking:
    """Priority ordering."""

    def test_stable_within_priority(self):
        insights = [
            _insight("low-1", Priority.LOW),
            _insight("high-1", Priority.HIGH),
            _insight("medium-1", Priority.MEDIUM),
            _insight("high-2", Priority.HIGH),
        ]

        ranked = rank_insights(insights)

        assert [i.title for i in ranked] == ["high-1", "high-2", "medium-1", "low-1"]

    def test_discover_ranks_results(self):
        rows = []
        for i in range(25):
            rows.append({
                "month": ["Jan", "Feb"][i % 2],
                "x": i,
                "y": 3 * i,
            })

        insights = find_hidden_insights(rows)
        priorities = [i.priority.rank for i in insights]

        assert priorities == sorted(priorities)
        assert insights[-1].type == InsightType.GAP

    def test_empty_input(self):
        assert find_hidden_insights([]) == []
