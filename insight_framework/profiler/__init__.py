"""
Profiling branch: column classification, statistics, anomalies, insights and data quality.

Key Components:
- TypeInferrer: classifies a column from sampled values
- StatisticsCalculator: numeric and categorical statistics for one column
- DataProfiler: per-column profile plus warnings
- AnomalyDetector: outliers, null spikes, duplicate keys, sign anomalies
- InsightDiscoverer: concentration, segment variance, gaps, correlation
- QualityRuleEngine: scored data-quality assessment
"""

from .type_inferrer import TypeInferrer
from .statistics_calculator import StatisticsCalculator
from .engine import DataProfiler
from .anomaly_detector import AnomalyDetector
from .insight_engine import InsightDiscoverer, rank_insights
from .quality_rules import QualityRuleEngine

__all__ = [
    'TypeInferrer',
    'StatisticsCalculator',
    'DataProfiler',
    'AnomalyDetector',
    'InsightDiscoverer',
    'rank_insights',
    'QualityRuleEngine',
]
