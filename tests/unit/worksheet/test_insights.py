"""Tests for worksheet insight rules, ranking and the insight cap."""

import pytest

from insight_framework.profiler.profile_result import Priority
from insight_framework.worksheet.insights import (
    DOWN,
    FLAT,
    UP,
    calculate_trend,
    find_anomalies,
    find_concentration,
    find_performance_gap,
    find_trends,
    generate_data_insights,
    round_half_up,
)
from insight_framework.worksheet.models import (
    BreakdownData,
    BreakdownItem,
    MeasureInfo,
    WorksheetInsight,
    WorksheetInsightType,
)


def make_measure(name, values, is_rate=False):
    total = float(sum(values))
    return MeasureInfo(
        name=name,
        index=0,
        sum=total,
        avg=total / len(values),
        min=float(min(values)),
        max=float(max(values)),
        count=len(values),
        values=[float(v) for v in values],
        is_rate=is_rate,
        type="rate" if is_rate else "volume",
    )


def make_breakdown(measure_name, values, dimension="Region"):
    measure = make_measure(measure_name, values)
    items = [BreakdownItem(label=f"R{i}", value=float(v), count=1) for i, v in enumerate(values)]
    return BreakdownData(measure=measure, dimension=dimension, data=items)


LABELS = {
    "SUM(Sales)": "Sales",
    "SUM(Profit)": "Profit",
    "Open Rate": "Open Rate",
    "Region": "Region",
}


class TestHelpers:
    """Rounding and first-to-last change."""

    @pytest.mark.parametrize("value,expected", [
        (2.5, 3),
        (2.4, 2),
        (0.5, 1),
        (3.0, 3),
    ])
    def test_round_half_up(self, value, expected):
        assert round_half_up(value) == expected

    @pytest.mark.parametrize("values,expected", [
        ([100, 150], (50.0, UP)),
        ([100, 50], (-50.0, DOWN)),
        ([100, 101], (1.0, FLAT)),
        ([0, 5], (100.0, UP)),
        ([0, 0], (0.0, FLAT)),
        ([5], (0.0, FLAT)),
    ])
    def test_calculate_trend(self, values, expected):
        assert calculate_trend(values) == expected


class TestConcentration:
    """Few items carrying most of a breakdown's total."""

    def test_concentrated_breakdown(self):
        breakdown = make_breakdown("SUM(Sales)", [100, 5, 5, 5])

        insights = find_concentration([breakdown], LABELS)

        assert len(insights) == 1
        insight = insights[0]
        assert insight.type == WorksheetInsightType.CONCENTRATION
        assert insight.priority == Priority.HIGH
        assert insight.title == "High Concentration"
        assert insight.description == (
            '25% of Region drives 80% of Sales. The top performer is "R0".'
        )
        assert insight.metric == "SUM(Sales)"

    def test_thirty_percent_of_items_still_fires(self):
        breakdown = make_breakdown("SUM(Sales)", [40, 30, 20] + [1] * 7)

        insights = find_concentration([breakdown], LABELS)

        assert insights[0].description.startswith("30% of Region")

    @pytest.mark.parametrize("values", [
        [40, 30, 20, 10],
        [100, 1],
        [0, 0, 0],
    ])
    def test_no_concentration(self, values):
        assert find_concentration([make_breakdown("SUM(Sales)", values)], LABELS) == []


class TestTrends:
    """First-to-last change over a measure's values."""

    def test_strong_volume_growth_is_high(self):
        measure = make_measure("SUM(Sales)", [100, 110, 120, 130, 140])

        insight = find_trends([measure], LABELS)[0]

        assert insight.type == WorksheetInsightType.TREND
        assert insight.priority == Priority.HIGH
        assert insight.title == "Sales Increasing"
        assert insight.description == "Sales has grown by 40% over the period."
        assert insight.value == "+40.0%"

    def test_moderate_volume_decline_is_medium(self):
        measure = make_measure("SUM(Sales)", [100, 95, 90, 92, 90])

        insight = find_trends([measure], LABELS)[0]

        assert insight.priority == Priority.MEDIUM
        assert insight.title == "Sales Declining"
        assert insight.description == "Sales has declined by 10% over the period."
        assert insight.value == "-10.0%"

    def test_small_rate_change_in_points(self):
        measure = make_measure("Open Rate", [0.20, 0.21, 0.21, 0.22, 0.22], is_rate=True)

        insight = find_trends([measure], LABELS)[0]

        assert insight.description == "Open Rate has increased 2.0 points over the period."

    def test_large_rate_change_in_percent(self):
        measure = make_measure("Open Rate", [0.10, 0.11, 0.12, 0.14, 0.15], is_rate=True)

        insight = find_trends([measure], LABELS)[0]

        assert insight.priority == Priority.HIGH
        assert insight.description == "Open Rate has increased 50% over the period."

    def test_rate_decline_in_percent(self):
        measure = make_measure("Open Rate", [0.4, 0.38, 0.35, 0.32, 0.3], is_rate=True)

        insight = find_trends([measure], LABELS)[0]

        assert insight.title == "Open Rate Declining"
        assert insight.description == "Open Rate has decreased 25% over the period."

    @pytest.mark.parametrize("values", [
        [100, 101, 102, 103, 104],
        [10, 20, 40, 70, 100],
        [100, 80, 50, 20, 5],
        [100, 120, 140, 160],
    ])
    def test_skipped_trends(self, values):
        """Small, suspiciously large and too-short series give nothing."""
        assert find_trends([make_measure("SUM(Sales)", values)], LABELS) == []


class TestAnomalies:
    """IQR outliers reported in standard deviations."""

    def test_three_sigma_outlier_is_high(self):
        measure = make_measure("SUM(Sales)", [10] * 9 + [100])

        insight = find_anomalies([measure], LABELS)[0]

        assert insight.type == WorksheetInsightType.ANOMALY
        assert insight.priority == Priority.HIGH
        assert insight.title == "Anomaly Detected"
        assert insight.description == "Found 1 unusual value in Sales (3σ from average)."

    def test_moderate_outlier_is_medium(self):
        measure = make_measure("SUM(Sales)", [10, 11, 12, 13, 14, 30])

        insight = find_anomalies([measure], LABELS)[0]

        assert insight.priority == Priority.MEDIUM
        assert insight.description == "Found 1 unusual value in Sales (2σ from average)."

    def test_low_outlier_measured_by_distance(self):
        measure = make_measure("SUM(Sales)", [10] * 8 + [100, -80])

        insight = find_anomalies([measure], LABELS)[0]

        assert insight.description == "Found 2 unusual values in Sales (2σ from average)."

    @pytest.mark.parametrize("values", [
        [1, 2, 3, 4, 5],
        [10, 10, 10, 100],
        [7, 7, 7, 7, 7],
    ])
    def test_no_anomaly(self, values):
        assert find_anomalies([make_measure("SUM(Sales)", values)], LABELS) == []


class TestPerformanceGap:
    """Largest top-to-bottom ratio across breakdowns."""

    def test_largest_ratio_wins(self):
        breakdowns = [
            make_breakdown("SUM(Sales)", [100, 25]),
            make_breakdown("SUM(Profit)", [60, 30, 10]),
        ]

        insights = find_performance_gap(breakdowns, LABELS)

        assert len(insights) == 1
        insight = insights[0]
        assert insight.type == WorksheetInsightType.PERFORMANCE
        assert insight.priority == Priority.MEDIUM
        assert insight.title == "Performance Gap"
        assert insight.description == '"R0" outperforms "R2" by 6x in Profit.'
        assert insight.metric == "SUM(Profit)"

    @pytest.mark.parametrize("values", [
        [100, 0],
        [100, -5],
        [50, 50],
        [50],
    ])
    def test_no_gap(self, values):
        assert find_performance_gap([make_breakdown("SUM(Sales)", values)], LABELS) == []


class TestGenerateDataInsights:
    """Rule selection, ranking and the cap."""

    @pytest.fixture
    def growing_sales(self):
        return make_measure("SUM(Sales)", [100, 110, 120, 130, 140])

    @pytest.fixture
    def concentrated(self):
        return make_breakdown("SUM(Sales)", [100, 5, 5, 5])

    def test_all_rules_ranked(self, growing_sales, concentrated):
        insights = generate_data_insights([growing_sales], [concentrated])

        assert [i.type for i in insights] == [
            WorksheetInsightType.CONCENTRATION,
            WorksheetInsightType.TREND,
            WorksheetInsightType.PERFORMANCE,
        ]

    def test_cap(self, growing_sales, concentrated):
        insights = generate_data_insights([growing_sales], [concentrated], max_insights=2)

        assert [i.type for i in insights] == [
            WorksheetInsightType.CONCENTRATION,
            WorksheetInsightType.TREND,
        ]

    def test_default_cap_is_three(self, growing_sales, concentrated):
        declining = make_measure("SUM(Profit)", [100, 95, 90, 92, 90])
        spiky = make_measure("SUM(Units)", [10] * 9 + [100])

        insights = generate_data_insights([growing_sales, declining, spiky], [concentrated])

        assert len(insights) == 3
        assert all(i.priority == Priority.HIGH for i in insights)

    def test_high_priority_ranked_before_earlier_medium(self):
        declining = make_measure("SUM(Sales)", [100, 95, 90, 92, 90])
        spiky = make_measure("SUM(Units)", [10] * 9 + [100])

        insights = generate_data_insights([declining, spiky], [])

        assert [(i.type, i.priority) for i in insights] == [
            (WorksheetInsightType.ANOMALY, Priority.HIGH),
            (WorksheetInsightType.TREND, Priority.MEDIUM),
        ]

    def test_identifier_measures_ignored(self):
        row_ids = make_measure("SUM(Row ID)", [100, 110, 120, 130, 140])
        breakdown = make_breakdown("SUM(Row ID)", [100, 5, 5, 5])

        assert generate_data_insights([row_ids], [breakdown]) == []

    def test_rule_families_can_be_disabled(self, growing_sales, concentrated):
        insights = generate_data_insights(
            [growing_sales], [concentrated],
            include_concentration=False, include_performance=False,
        )

        assert [i.type for i in insights] == [WorksheetInsightType.TREND]

    def test_label_overrides_used_in_sentences(self, growing_sales):
        insights = generate_data_insights(
            [growing_sales], [], label_overrides={"SUM(Sales)": "Gross Sales"}
        )

        assert insights[0].title == "Gross Sales Increasing"

    def test_nothing_to_report(self):
        assert generate_data_insights([], []) == []


class TestWorksheetInsightModel:
    """Serialization of a single insight."""

    def test_to_dict_omits_missing_value(self):
        insight = WorksheetInsight(
            type=WorksheetInsightType.PERFORMANCE,
            priority=Priority.MEDIUM,
            title="Performance Gap",
            description="text",
            metric="SUM(Sales)",
        )

        assert insight.to_dict() == {
            "type": "performance",
            "priority": "medium",
            "title": "Performance Gap",
            "description": "text",
            "metric": "SUM(Sales)",
        }

    def test_to_dict_with_value(self):
        insight = WorksheetInsight(
            type=WorksheetInsightType.TREND,
            priority=Priority.HIGH,
            title="Sales Increasing",
            description="text",
            metric="SUM(Sales)",
            value="+40.0%",
        )

        assert insight.to_dict()["value"] == "+40.0%"
