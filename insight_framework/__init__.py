"""
Insight Framework - profiling, anomaly detection and insight discovery for BI query results.

Two analysis branches share the same kind of tabular input:

- Profiling: rows keyed by field name -> DataProfile, anomalies, insights
- Worksheet analysis: cell-based worksheets -> measures, dimensions, breakdowns
"""

__version__ = "0.1.0"

from insight_framework.profiler.engine import DataProfiler, profile_data
from insight_framework.profiler.anomaly_detector import AnomalyDetector, detect_anomalies
from insight_framework.profiler.insight_engine import InsightDiscoverer, find_hidden_insights, rank_insights
from insight_framework.profiler.quality_rules import assess_data_quality, validate_metrics
from insight_framework.worksheet.extractor import analyze_worksheet
from insight_framework.worksheet.merge import analyze_all_worksheets, merge_measure, merge_measures
from insight_framework.worksheet.field_names import normalize_field_name
from insight_framework.worksheet.formatting import format_value
from insight_framework.worksheet.insights import generate_data_insights

__all__ = [
    "DataProfiler",
    "profile_data",
    "AnomalyDetector",
    "detect_anomalies",
    "InsightDiscoverer",
    "find_hidden_insights",
    "rank_insights",
    "assess_data_quality",
    "validate_metrics",
    "analyze_worksheet",
    "analyze_all_worksheets",
    "merge_measure",
    "merge_measures",
    "normalize_field_name",
    "format_value",
    "generate_data_insights",
]
