"""
Tests for the data-quality rule engine.

Scores follow the deduction table: 20 per critical issue, 10 per warning,
2 per informational issue, starting from 100 and clamped at 0.
"""

import pytest

from insight_framework.core import constants
from insight_framework.profiler import quality_rules
from insight_framework.profiler.insight_templates import get_quality_label
from insight_framework.profiler.profile_result import QualitySeverity
from insight_framework.profiler.quality_rules import (
    QualityRuleEngine,
    assess_data_quality,
    validate_metrics,
)


def _issues(report, category=None):
    return [i for i in report.issues if category is None or i.category == category]


class TestScoring:
    """Score, label and summary."""

    def test_empty_dataset(self):
        report = assess_data_quality([])

        assert report.overall_score == 0
        assert report.score_label == "Critical"
        assert len(report.issues) == 1
        assert report.issues[0].title == "No Data Available"
        assert report.issues[0].field == "dataset"
        assert report.summary == "No data available for analysis."

    def test_clean_dataset(self):
        rows = [{"region": "East", "amount": 10}, {"region": "West", "amount": 20}]

        report = assess_data_quality(rows)

        assert report.overall_score == 100
        assert report.score_label == "Excellent"
        assert report.issues == []
        assert report.summary == (
            "Data Quality Score: 100/100 (Excellent)\n"
            "Dataset: 2 rows × 2 columns\n"
            "\n"
            "No significant data quality issues detected.\n"
        )

    def test_score_clamped_at_zero(self):
        rows = [{f"c{i}": None for i in range(6)}] * 3

        report = assess_data_quality(rows)

        assert len(report.issues) == 6
        assert report.overall_score == 0
        assert report.score_label == "Critical"
        assert "6 critical issue(s) require immediate attention." in report.summary

    @pytest.mark.parametrize("score,label", [
        (100, "Excellent"),
        (90, "Excellent"),
        (80, "Good"),
        (60, "Fair"),
        (30, "Needs Attention"),
        (10, "Critical"),
    ])
    def test_labels(self, score, label):
        assert get_quality_label(score) == label


class TestCompleteness:
    """Missing-value rules."""

    def test_empty_column_is_critical(self):
        report = assess_data_quality([{"a": 1, "b": None}, {"a": 2, "b": ""}])

        issue = _issues(report, "completeness")[0]
        assert issue.severity == QualitySeverity.CRITICAL
        assert issue.title == "b: Completely Empty"
        assert issue.evidence == "100% null/empty values (2/2 rows)"

    def test_literal_null_string_counts_as_missing(self):
        report = assess_data_quality([{"b": "null"}, {"b": None}])
        assert _issues(report, "completeness")[0].severity == QualitySeverity.CRITICAL

    def test_high_missing_rate_is_warning(self):
        rows = [{"b": None}] * 3 + [{"b": "x"}] * 2

        issue = _issues(assess_data_quality(rows), "completeness")[0]

        assert issue.severity == QualitySeverity.WARNING
        assert issue.title == "b: High Missing Rate"
        assert issue.evidence == "60.0% null/empty (3/5 rows)"

    def test_notable_missing_is_info(self):
        rows = [{"b": None}] * 2 + [{"b": "x"}] * 3

        issue = _issues(assess_data_quality(rows), "completeness")[0]

        assert issue.severity == QualitySeverity.INFO
        assert issue.title == "b: Notable Missing Values"

    def test_low_missing_rate_ignored(self):
        rows = [{"b": None}] + [{"b": "x"}] * 9
        assert _issues(assess_data_quality(rows), "completeness") == []

    @pytest.mark.parametrize("missing,expected", [
        (5, [QualitySeverity.INFO]),
        (2, []),
    ])
    def test_thresholds_are_exclusive(self, missing, expected):
        """Exactly 50% missing is notable, exactly 20% is not flagged."""
        rows = [{"b": None}] * missing + [{"b": "x"}] * (10 - missing)

        issues = _issues(assess_data_quality(rows), "completeness")

        assert [i.severity for i in issues] == expected

    def test_thresholds_read_from_constants(self, monkeypatch):
        monkeypatch.setattr(quality_rules, "QUALITY_NOTABLE_MISSING_PCT", 5.0)
        rows = [{"b": None}] + [{"b": "x"}] * 9

        issues = _issues(assess_data_quality(rows), "completeness")

        assert [i.severity for i in issues] == [QualitySeverity.INFO]
        assert constants.QUALITY_NOTABLE_MISSING_PCT == 20.0


class TestValidity:
    """Rate and volume rules."""

    def test_all_zero_rate(self):
        report = assess_data_quality([{"open_rate": 0}] * 3)

        assert report.overall_score == 80
        assert report.score_label == "Good"
        assert report.issues[0].title == "open_rate: All Values are Zero"

    def test_mostly_zero_rate(self):
        rows = [{"click_rate": v} for v in [0, 0, 0, 0.2]]

        issue = assess_data_quality(rows).issues[0]

        assert issue.severity == QualitySeverity.WARNING
        assert issue.evidence == "75.0% of values are 0 (avg: 5.00%)"

    def test_percentage_format(self):
        report = assess_data_quality([{"click_rate": v} for v in [10, 20, 30]])

        assert len(report.issues) == 1
        assert report.issues[0].severity == QualitySeverity.INFO
        assert report.issues[0].evidence == "Sample values: 10.0, 20.0, 30.0"
        assert report.overall_score == 98

    def test_impossible_rate_reported_with_percentage_format(self):
        report = assess_data_quality([{"Conversion %": v} for v in [50, 150]])

        severities = [i.severity for i in report.issues]
        assert severities == [QualitySeverity.INFO, QualitySeverity.CRITICAL]
        assert report.issues[1].evidence == "Found 1 values > 100%"
        assert report.overall_score == 78

    def test_ratio_scale_rate_is_valid(self):
        report = assess_data_quality([{"open_rate": v} for v in [0.1, 0.25, 0.4]])
        assert report.issues == []

    def test_few_negative_volumes_are_info(self):
        rows = [{"order_count": v} for v in [5, 5, 5, 5, 5, 5, 5, 5, 5, -1]]

        issue = assess_data_quality(rows).issues[0]

        assert issue.severity == QualitySeverity.INFO
        assert issue.evidence == "1 negative values (10.0%)"

    def test_many_negative_volumes_are_warning(self):
        rows = [{"units_sent": v} for v in [5, -1, -2, 4]]

        issue = assess_data_quality(rows).issues[0]

        assert issue.severity == QualitySeverity.WARNING

    def test_non_numeric_column_skipped(self):
        rows = [{"rate_plan": v} for v in ["gold", "silver"]]
        assert _issues(assess_data_quality(rows), "validity") == []


class TestConsistency:
    """Constant and all-unique columns."""

    def test_constant_column(self):
        rows = [{"channel": "web"}] * 11

        issue = _issues(assess_data_quality(rows), "consistency")[0]

        assert issue.severity == QualitySeverity.INFO
        assert issue.title == "channel: Constant Value"
        assert issue.evidence == 'Value: "web"'

    def test_all_unique_column(self):
        rows = [{"comment": f"c{i}"} for i in range(11)]

        issue = _issues(assess_data_quality(rows), "consistency")[0]

        assert issue.title == "comment: All Unique Values"
        assert issue.evidence == "11 unique values out of 11 rows"

    def test_identifier_names_exempt(self):
        rows = [{"customer_id": f"c{i}", "order_date": f"2024-01-{i + 1:02d}"} for i in range(11)]
        assert _issues(assess_data_quality(rows), "consistency") == []

    def test_small_columns_skipped(self):
        rows = [{"channel": "web"}] * 10
        assert _issues(assess_data_quality(rows), "consistency") == []


class TestValidateMetrics:
    """Headline rate plausibility."""

    def test_zero_rate_warning(self):
        issues = validate_metrics([{"name": "Open Rate", "value": 0}])

        assert len(issues) == 1
        assert issues[0].severity == QualitySeverity.WARNING
        assert issues[0].title == "Open Rate is 0%"

    def test_rate_over_100_is_critical(self):
        issues = validate_metrics([{"name": "CTR", "value": 150, "is_rate": True}])

        assert issues[0].severity == QualitySeverity.CRITICAL
        assert issues[0].title == "CTR exceeds 100%"
        assert issues[0].evidence == "Value: 150%"

    def test_percentage_format_accepted(self):
        assert validate_metrics([{"name": "Bounce %", "value": 45}]) == []

    def test_non_rates_ignored(self):
        assert validate_metrics([{"name": "Revenue", "value": 0}]) == []

    def test_engine_score_helper(self):
        issues = validate_metrics([
            {"name": "Open Rate", "value": 0},
            {"name": "Click Rate", "value": 250},
        ])
        assert QualityRuleEngine.score(issues) == 70
