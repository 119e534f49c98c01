"""
Sentence templates for profiling warnings, anomalies, insights, worksheet
insights and data-quality issues.

This module contains all generated text of the framework. Templates use
Python string formatting with named placeholders; nothing beyond filling
these fixed sentences with computed values is generated.
"""

from typing import Any, Dict


TEMPLATES: Dict[str, Dict[str, str]] = {
    # -------------------------------------------------------------------------
    # PROFILER
    # -------------------------------------------------------------------------
    "profile": {
        "empty_dataset": "No data to analyze",
        "null_fraction": "{column}: {null_pct:.1f}% null values",
        "constant_column": "{column}: Only one unique value (constant column)",
        "identifier_column": "{column}: All unique values - potential ID column",
        "small_dataset": (
            "Small dataset ({rows} rows) - statistical measures may not be reliable"
        ),
    },

    # -------------------------------------------------------------------------
    # ANOMALIES
    # -------------------------------------------------------------------------
    "anomaly": {
        "outlier": (
            "{count} outlier values detected outside range [{lower:.2f}, {upper:.2f}]"
        ),
        "outlier_suggestion": "Review these extreme values: {samples}",
        "negative_value": "{count} negative values in typically positive column",
        "negative_value_suggestion": "These might be returns, refunds, or data entry errors",
        "null_spike": "{null_pct:.1f}% of values are null or empty",
        "null_spike_suggestion": (
            "Consider data quality investigation or imputation strategies"
        ),
        "duplicate": "{count} duplicate values found in ID column",
        "duplicate_suggestion": "Verify if duplicates are expected or indicate data issues",
    },

    # -------------------------------------------------------------------------
    # INSIGHTS
    # -------------------------------------------------------------------------
    "insight": {
        "concentration_title": "High concentration in {column}",
        "concentration_description": "Top {top_n} values ({share:.0f}%) dominate {column}",
        "concentration_evidence": "Top values: {top_values}",
        "dominant_title": "Dominant value in {column}",
        "dominant_description": '"{value}" represents {share:.0f}% of all {column} values',
        "dominant_evidence": "{count} out of {total} rows",
        "segment_title": "{measure} varies significantly by {segment}",
        "segment_description": (
            '"{top}" has {ratio:.1f}x higher average {measure} than "{bottom}"'
        ),
        "segment_evidence": (
            "{top}: {top_avg:.2f} (n={top_n}) vs {bottom}: {bottom_avg:.2f} (n={bottom_n})"
        ),
        "gap_title": "Potential gaps in {column}",
        "gap_description": "Only {count} unique values found",
        "gap_evidence": "Values present: {values}{ellipsis}",
        "correlation_title": "Strong correlation: {col1} ↔ {col2}",
        "correlation_description": "{direction} correlation (r={r:.2f})",
        "correlation_evidence": "As {col1} increases, {col2} tends to {trend}",
    },

    # -------------------------------------------------------------------------
    # WORKSHEET INSIGHTS
    # -------------------------------------------------------------------------
    "worksheet": {
        "concentration_title": "High Concentration",
        "concentration_description": (
            '{items_pct}% of {dimension} drives {share:.0f}% of {measure}. '
            'The top performer is "{top}".'
        ),
        "trend_up_title": "{measure} Increasing",
        "trend_down_title": "{measure} Declining",
        "trend_description": "{measure} has {change} over the period.",
        "trend_rate_up_points": "increased {points:.1f} points",
        "trend_rate_down_points": "decreased {points:.1f} points",
        "trend_rate_up_percent": "increased {change:.0f}%",
        "trend_rate_down_percent": "decreased {change:.0f}%",
        "trend_volume_up": "grown by {change:.0f}%",
        "trend_volume_down": "declined by {change:.0f}%",
        "anomaly_title": "Anomaly Detected",
        "anomaly_description": (
            "Found {count} unusual value{plural} in {measure} ({sigma}σ from average)."
        ),
        "performance_title": "Performance Gap",
        "performance_description": (
            '"{top}" outperforms "{bottom}" by {ratio}x in {measure}.'
        ),
    },

    # -------------------------------------------------------------------------
    # DATA QUALITY
    # -------------------------------------------------------------------------
    "quality": {
        "no_data_title": "No Data Available",
        "no_data_description": "The dataset is empty or could not be loaded.",
        "no_data_evidence": "Row count: 0",
        "no_data_recommendation": "Verify data source connection and filters.",

        "empty_column_title": "{column}: Completely Empty",
        "empty_column_description": "This field contains no data.",
        "empty_column_evidence": "100% null/empty values ({null_count}/{rows} rows)",
        "empty_column_recommendation": (
            "Investigate data source or remove this field from analysis."
        ),

        "high_missing_title": "{column}: High Missing Rate",
        "high_missing_description": "More than half of values are missing.",
        "notable_missing_title": "{column}: Notable Missing Values",
        "notable_missing_description": "Significant portion of values are missing.",
        "missing_evidence": "{null_pct:.1f}% null/empty ({null_count}/{rows} rows)",
        "high_missing_recommendation": (
            "Consider data imputation or investigate why data is missing."
        ),
        "notable_missing_recommendation": "Review if this is expected for this field.",

        "rate_all_zero_title": "{column}: All Values are Zero",
        "rate_all_zero_description": "Rate field shows 0% across all records.",
        "rate_all_zero_evidence": "All {count} values are 0",
        "rate_all_zero_recommendation": (
            "Verify rate calculation: Is numerator data missing? Is the formula correct?"
        ),

        "rate_mostly_zero_title": "{column}: Majority Zero Values",
        "rate_mostly_zero_description": "Most rate values are zero.",
        "rate_mostly_zero_evidence": "{zero_pct:.1f}% of values are 0 (avg: {avg_pct:.2f}%)",
        "rate_mostly_zero_recommendation": (
            "Investigate if zeros represent actual 0% or missing/uncalculated data."
        ),

        "percentage_format_title": "{column}: Percentage Format Detected",
        "percentage_format_description": (
            "Values appear to be in 0-100 format rather than 0-1 ratio."
        ),
        "percentage_format_evidence": "Sample values: {samples}",
        "percentage_format_recommendation": (
            "Ensure consistent formatting when comparing rates."
        ),

        "impossible_rate_title": "{column}: Invalid Rate Values (>100%)",
        "impossible_rate_description": (
            "Rate values exceed 100%, which is mathematically impossible."
        ),
        "impossible_rate_evidence": "Found {count} values > 100%",
        "impossible_rate_recommendation": "Check rate calculation formula for errors.",

        "negative_volume_title": "{column}: Negative Values Found",
        "negative_volume_description": "Volume/count field contains negative numbers.",
        "negative_volume_evidence": "{count} negative values ({neg_pct:.1f}%)",
        "negative_volume_recommendation": (
            "Verify if negatives represent returns/corrections or data errors."
        ),

        "constant_value_title": "{column}: Constant Value",
        "constant_value_description": "All {count} rows have the same value.",
        "constant_value_evidence": 'Value: "{value}"',
        "constant_value_recommendation": (
            "Verify if this is expected or if this field should vary."
        ),

        "all_unique_title": "{column}: All Unique Values",
        "all_unique_description": "Every row has a different value.",
        "all_unique_evidence": "{unique} unique values out of {count} rows",
        "all_unique_recommendation": (
            "Is this an ID field? If not, there may be over-granularity in the data."
        ),

        "metric_zero_title": "{column} is 0%",
        "metric_zero_description": "This rate metric shows zero.",
        "metric_zero_evidence": "Value: 0%",
        "metric_zero_recommendation": (
            "Verify the calculation or check if numerator data exists."
        ),

        "metric_over_100_title": "{column} exceeds 100%",
        "metric_over_100_description": "Rate value is mathematically impossible.",
        "metric_over_100_evidence": "Value: {value}%",
        "metric_over_100_recommendation": "Check the rate calculation formula.",
    },
}


# =============================================================================
# QUALITY SCORE LABELS
# =============================================================================

QUALITY_LABELS = [
    (90, "Excellent"),
    (75, "Good"),
    (50, "Fair"),
    (25, "Needs Attention"),
]
QUALITY_FLOOR_LABEL = "Critical"


def get_quality_label(score: float) -> str:
    """Return the label for a 0-100 quality score."""
    for floor, label in QUALITY_LABELS:
        if score >= floor:
            return label
    return QUALITY_FLOOR_LABEL


SUMMARY_TEMPLATE = "Data Quality Score: {score}/100 ({label})\nDataset: {rows:,} rows × {cols} columns\n"
SUMMARY_CRITICAL = "{count} critical issue(s) require immediate attention.\n"
SUMMARY_WARNING = "{count} warning(s) should be reviewed.\n"
SUMMARY_CLEAN = "No significant data quality issues detected.\n"
SUMMARY_EMPTY = "No data available for analysis."


# =============================================================================
# TEMPLATE RENDERING
# =============================================================================

def render_template(category: str, template_id: str, **data: Any) -> str:
    """
    Render a template with computed values.

    Args:
        category: Template category ('profile', 'anomaly', 'insight', 'worksheet', 'quality')
        template_id: Template identifier within category
        **data: Template variable values

    Returns:
        Rendered sentence

    Raises:
        KeyError: If the template does not exist or a placeholder is missing
    """
    template = TEMPLATES[category][template_id]
    return template.format(**data)
