"""
Insight Framework Constants.

This module defines the thresholds, caps and defaults used by the profiling
and worksheet-analysis branches. Centralizing these values keeps every
heuristic auditable in one place; the tunable subset is mirrored by
InsightThresholds in core/config.py.
"""

# ============================================================================
# Column Classification
# ============================================================================

# Number of non-missing values inspected when classifying a column
TYPE_SAMPLE_SIZE: int = 100

# Plausible year range for generically parsed date strings
MIN_PARSED_YEAR: int = 1800
MAX_PARSED_YEAR: int = 2200

# Epoch-like numbers are only accepted as dates strictly inside this year range
EPOCH_MIN_YEAR: int = 1970
EPOCH_MAX_YEAR: int = 2100


# ============================================================================
# Statistics
# ============================================================================

# Decimal places for numeric statistics
STAT_DECIMALS: int = 2

# Decimal places for top-value percentages
PERCENT_DECIMALS: int = 1

# Number of most frequent values reported for categorical columns
TOP_VALUES_LIMIT: int = 10

# |skewness| below this is reported as a normal distribution
SKEWNESS_THRESHOLD: float = 0.5


# ============================================================================
# Data Profiler
# ============================================================================

# Null fraction above which a column warning is emitted
NULL_WARNING_FRACTION: float = 0.10

# Datasets with fewer rows get a small-dataset warning
SMALL_DATASET_ROWS: int = 100


# ============================================================================
# Anomaly Detection
# ============================================================================

# Outlier detection requires more numeric values than this
MIN_OUTLIER_SAMPLE: int = 10

# Tukey fence multiplier
IQR_MULTIPLIER: float = 1.5

# Findings affecting this fraction of a column or more are treated as the
# column's normal shape rather than an anomaly
ANOMALY_NOISE_FRACTION: float = 0.10

# More outliers than this escalates severity to high
HIGH_SEVERITY_OUTLIER_COUNT: int = 5

# Sample values / row indices attached to an anomaly
ANOMALY_SAMPLE_LIMIT: int = 10

# Duplicate-key groups reported as "value (Nx)"
DUPLICATE_SAMPLE_LIMIT: int = 5

# Null spike band (exclusive bounds) and high-severity cutoff
NULL_SPIKE_FRACTION: float = 0.20
NULL_SPIKE_HIGH_FRACTION: float = 0.50

# Name fragments of inherently positive quantities
POSITIVE_QUANTITY_TERMS = ("sales", "revenue", "quantity", "amount")

# Name fragments of key-like columns
KEY_COLUMN_TERMS = ("id", "key", "code")


# ============================================================================
# Insight Discovery
# ============================================================================

# Pareto check: categorical columns need at least this many distinct values
CONCENTRATION_MIN_DISTINCT: int = 10
CONCENTRATION_TOP_FRACTION: float = 0.20
CONCENTRATION_SHARE_THRESHOLD: float = 0.80

# Single-value dominance
DOMINANT_SHARE_THRESHOLD: float = 0.50
DOMINANT_HIGH_SHARE: float = 0.80

# Segment variance
SEGMENT_MAX_CATEGORICAL: int = 3
SEGMENT_MAX_NUMERIC: int = 3
SEGMENT_MIN_SAMPLES: int = 5
SEGMENT_MAX_SEGMENTS: int = 20
SEGMENT_RATIO_THRESHOLD: float = 2.0
SEGMENT_HIGH_RATIO: float = 5.0

# Temporal gap heuristic
GAP_NAME_TERMS = ("month", "day", "year")
GAP_MAX_DISTINCT: int = 12
GAP_SAMPLE_LIMIT: int = 5

# Correlation
CORRELATION_MAX_COLUMNS: int = 4
CORRELATION_MIN_PAIRS: int = 20
CORRELATION_THRESHOLD: float = 0.7
CORRELATION_HIGH_THRESHOLD: float = 0.9


# ============================================================================
# Data Quality
# ============================================================================

# Scores start here and lose a fixed penalty per issue
QUALITY_MAX_SCORE: int = 100
QUALITY_PENALTY_CRITICAL: int = 20
QUALITY_PENALTY_WARNING: int = 10
QUALITY_PENALTY_INFO: int = 2

# Missing-value percentage above which a column is flagged (warning / info)
QUALITY_HIGH_MISSING_PCT: float = 50.0
QUALITY_NOTABLE_MISSING_PCT: float = 20.0

# Zero-value percentage above which a rate column is "mostly zero"
QUALITY_RATE_MOSTLY_ZERO_PCT: float = 50.0

# Rate values above this are impossible; values in (1, this] are percentage format
QUALITY_RATE_PERCENT_MAX: float = 100.0

# Negative-value percentage above which a volume column warning is raised
QUALITY_NEGATIVE_VOLUME_PCT: float = 10.0

# Columns with this many values or fewer are too small for consistency checks
QUALITY_CONSISTENCY_MIN_VALUES: int = 10


# ============================================================================
# Worksheet Analysis
# ============================================================================

DEFAULT_MAX_METRICS: int = 6
DEFAULT_MAX_ITEMS: int = 7

# Row cap applied to each worksheet snapshot
DEFAULT_MAX_ROWS: int = 1000

# Dimensions must have more than MIN and at most MAX distinct values
DIMENSION_MIN_CARDINALITY: int = 1
DIMENSION_MAX_CARDINALITY: int = 100

# Preferred cardinality band when choosing the charting dimension
PREFERRED_DIMENSION_CARDINALITY = (3, 15)

# Placeholder fields emitted by pivoted worksheets
META_FIELD_NAMES = ("Measure Names", "Measure Values")

# Group label for rows with no dimension value
UNKNOWN_LABEL: str = "Unknown"

# Worksheet insights: cap on returned insights
DEFAULT_MAX_INSIGHTS: int = 3

# Breakdown concentration: the items reaching this share of the total must
# be at most MAX_ITEMS_PCT percent of all items
WORKSHEET_CONCENTRATION_SHARE: float = 0.80
WORKSHEET_CONCENTRATION_MAX_ITEMS_PCT: int = 30
WORKSHEET_CONCENTRATION_MIN_ITEMS: int = 3

# First-to-last trend: needs this many values; changes within FLAT_PCT are flat,
# below MIN_PCT are ignored and at or above SUSPICIOUS_PCT are treated as artifacts
WORKSHEET_TREND_MIN_VALUES: int = 5
WORKSHEET_TREND_FLAT_PCT: float = 2.0
WORKSHEET_TREND_MIN_PCT: float = 5.0
WORKSHEET_TREND_HIGH_PCT: float = 25.0
WORKSHEET_TREND_SUSPICIOUS_PCT: float = 90.0

# Rate trends below both limits are described in percentage points
WORKSHEET_TREND_POINTS_MAX_PCT: float = 20.0
WORKSHEET_TREND_POINTS_MAX_CHANGE: float = 0.5

# Outliers: minimum values and the sigma distance that makes an outlier high priority
WORKSHEET_OUTLIER_MIN_VALUES: int = 5
WORKSHEET_OUTLIER_HIGH_SIGMA: int = 3


# ============================================================================
# Configuration Security Limits
# ============================================================================

# Maximum YAML configuration file size (1MB)
MAX_YAML_FILE_SIZE: int = 1024 * 1024

# Maximum YAML nesting depth
MAX_YAML_NESTING_DEPTH: int = 20

# Maximum number of keys/items across a YAML document
MAX_YAML_KEY_COUNT: int = 10_000
