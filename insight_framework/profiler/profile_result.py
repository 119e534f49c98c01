"""
Data structures for storing profiling results.

Contains the column profile, whole-table profile, anomaly, insight and
data-quality structures produced by the profiling branch. All results are
computed fresh per call and are not mutated after construction.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

import numpy as np


def convert_numpy_types(obj):
    """
    Recursively convert numpy types to Python native types for JSON serialization.

    Args:
        obj: Any object that might contain numpy types

    Returns:
        Object with numpy types converted to Python types
    """
    if isinstance(obj, np.bool_):
        return bool(obj)
    elif isinstance(obj, np.integer):
        return int(obj)
    elif isinstance(obj, np.floating):
        return float(obj)
    elif isinstance(obj, np.ndarray):
        return obj.tolist()
    elif isinstance(obj, Enum):
        return obj.value
    elif isinstance(obj, dict):
        return {key: convert_numpy_types(value) for key, value in obj.items()}
    elif isinstance(obj, list):
        return [convert_numpy_types(item) for item in obj]
    elif isinstance(obj, tuple):
        return tuple(convert_numpy_types(item) for item in obj)
    else:
        return obj


class Severity(str, Enum):
    """Anomaly severity levels."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        """Numeric rank for sorting (lower = more severe)."""
        return {Severity.HIGH: 0, Severity.MEDIUM: 1, Severity.LOW: 2}[self]


class Priority(str, Enum):
    """Insight priority levels."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        """Numeric rank for sorting (lower = more important)."""
        return {Priority.HIGH: 0, Priority.MEDIUM: 1, Priority.LOW: 2}[self]


class AnomalyType(str, Enum):
    """Kinds of per-column anomalies."""
    OUTLIER = "outlier"
    NULL_SPIKE = "null-spike"
    DUPLICATE = "duplicate"
    NEGATIVE_VALUE = "negative-value"


class InsightType(str, Enum):
    """Kinds of cross-column insights."""
    CONCENTRATION = "concentration"
    SEGMENT = "segment"
    GAP = "gap"
    CORRELATION = "correlation"


@dataclass(frozen=True)
class ColumnStats:
    """
    Profile of one column.

    Attributes:
        name: Column name
        data_type: Classified type (number, string, date, boolean, mixed)
        total_count: Number of rows
        null_count: Number of missing values
        unique_count: Number of distinct non-missing values
        min_value .. skewness: Numeric statistics (numeric columns only)
        distribution: Shape tag derived from skewness (numeric columns only)
        min_length, max_length: String length range (other columns)
        top_values: Up to 10 most common values with count and percentage
    """
    name: str
    data_type: str
    total_count: int
    null_count: int
    unique_count: int

    # Numeric statistics
    min_value: Optional[float] = None
    max_value: Optional[float] = None
    sum: Optional[float] = None
    mean: Optional[float] = None
    median: Optional[float] = None
    std_dev: Optional[float] = None
    q1: Optional[float] = None
    q3: Optional[float] = None
    iqr: Optional[float] = None
    skewness: Optional[float] = None
    distribution: Optional[str] = None

    # Categorical statistics
    min_length: Optional[int] = None
    max_length: Optional[int] = None
    top_values: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def non_null_count(self) -> int:
        """Number of non-missing values."""
        return self.total_count - self.null_count

    @property
    def null_fraction(self) -> float:
        """Fraction of missing values (0 for an empty column)."""
        return self.null_count / self.total_count if self.total_count else 0.0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation, omitting absent statistics."""
        result = {
            "name": self.name,
            "data_type": self.data_type,
            "total_count": int(self.total_count),
            "null_count": int(self.null_count),
            "unique_count": int(self.unique_count),
        }
        for key in ("min_value", "max_value", "sum", "mean", "median", "std_dev",
                    "q1", "q3", "iqr", "skewness", "distribution",
                    "min_length", "max_length"):
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.top_values:
            result["top_values"] = list(self.top_values)
        return convert_numpy_types(result)


@dataclass(frozen=True)
class DataProfile:
    """
    Profile of a whole table.

    Attributes:
        row_count: Number of rows
        column_count: Number of columns
        columns: One ColumnStats per input column, in input order
        warnings: Data-quality warnings
        insights: Informational observations (e.g. potential identifier columns)
    """
    row_count: int
    column_count: int
    columns: List[ColumnStats] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    insights: List[str] = field(default_factory=list)

    def get_column(self, name: str) -> Optional[ColumnStats]:
        """Return the stats for a column by name, or None."""
        for column in self.columns:
            if column.name == name:
                return column
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "row_count": self.row_count,
            "column_count": self.column_count,
            "columns": [c.to_dict() for c in self.columns],
            "warnings": list(self.warnings),
            "insights": list(self.insights),
        }


@dataclass(frozen=True)
class Anomaly:
    """
    One detected issue in one column.

    Attributes:
        type: Anomaly kind
        severity: Severity level
        column: Column name
        description: Human-readable description
        values: Optional sample values
        row_indices: Optional row indices matching `values`
        suggestion: Optional follow-up suggestion
    """
    type: AnomalyType
    severity: Severity
    column: str
    description: str
    values: Optional[List[Any]] = None
    row_indices: Optional[List[int]] = None
    suggestion: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        result = {
            "type": self.type.value,
            "severity": self.severity.value,
            "column": self.column,
            "description": self.description,
        }
        if self.values is not None:
            result["values"] = list(self.values)
        if self.row_indices is not None:
            result["row_indices"] = list(self.row_indices)
        if self.suggestion:
            result["suggestion"] = self.suggestion
        return convert_numpy_types(result)


@dataclass(frozen=True)
class Insight:
    """
    One discovered pattern.

    Attributes:
        type: Insight kind
        title: Short title
        description: One-sentence description with computed values
        evidence: Supporting numbers
        actionable: Whether the finding suggests a follow-up
        priority: Ranking priority
    """
    type: InsightType
    title: str
    description: str
    evidence: str
    actionable: bool
    priority: Priority

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "type": self.type.value,
            "title": self.title,
            "description": self.description,
            "evidence": self.evidence,
            "actionable": self.actionable,
            "priority": self.priority.value,
        }


class QualitySeverity(str, Enum):
    """Data-quality issue severity levels."""
    CRITICAL = "critical"
    WARNING = "warning"
    INFO = "info"


@dataclass(frozen=True)
class QualityIssue:
    """
    One data-quality finding.

    Attributes:
        severity: critical, warning or info
        category: completeness, validity or consistency
        field: Column name ('dataset' for table-level issues)
        title: Short title
        description: What was found
        evidence: Supporting numbers
        recommendation: Suggested follow-up
    """
    severity: QualitySeverity
    category: str
    field: str
    title: str
    description: str
    evidence: str
    recommendation: str

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "severity": self.severity.value,
            "category": self.category,
            "field": self.field,
            "title": self.title,
            "description": self.description,
            "evidence": self.evidence,
            "recommendation": self.recommendation,
        }


@dataclass(frozen=True)
class DataQualityReport:
    """
    Scored data-quality assessment of a table.

    Attributes:
        overall_score: 0-100, starting at 100 with deductions per issue
        score_label: Excellent, Good, Fair, Needs Attention or Critical
        issues: Detected issues
        summary: Short plain-text summary
    """
    overall_score: int
    score_label: str
    issues: List[QualityIssue] = field(default_factory=list)
    summary: str = ""

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "overall_score": self.overall_score,
            "score_label": self.score_label,
            "issues": [i.to_dict() for i in self.issues],
            "summary": self.summary,
        }
