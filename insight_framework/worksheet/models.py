"""
Data model for worksheet analysis.

Input side: a Worksheet is a list of ColumnDescriptor plus rows of Cell, as
delivered by a BI data-fetch collaborator. Output side: MeasureInfo,
DimensionInfo and BreakdownData, bundled per worksheet in WorksheetAnalysis
and across worksheets in CombinedAnalysis.

Rate measures always carry their sum/avg/min/max/values on the 0-1 scale.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence

from insight_framework.core.exceptions import SourceFetchError
from insight_framework.profiler.profile_result import Priority, convert_numpy_types
from insight_framework.profiler.values import is_missing, to_number


# =============================================================================
# INPUT
# =============================================================================

@dataclass(frozen=True)
class Cell:
    """One worksheet cell: raw value plus an optional display string."""
    value: Any = None
    display_value: Optional[str] = None

    @property
    def label(self) -> Optional[str]:
        """Grouping label: display value, else raw value, else None."""
        if not is_missing(self.display_value):
            return str(self.display_value)
        if not is_missing(self.value):
            return str(self.value)
        return None

    @property
    def date_source(self) -> Any:
        """Raw value for date parsing, falling back to the display value."""
        if not is_missing(self.value):
            return self.value
        if not is_missing(self.display_value):
            return self.display_value
        return None

    @property
    def number(self) -> float:
        """Raw value as a number; missing or malformed values count as 0."""
        number = to_number(self.value)
        return 0.0 if number is None else number

    @classmethod
    def from_json(cls, raw: Any) -> "Cell":
        """Build from {'value', 'formattedValue'} (or a bare scalar)."""
        if isinstance(raw, dict):
            display = raw.get("formattedValue", raw.get("display_value"))
            return cls(value=raw.get("value"), display_value=None if display is None else str(display))
        return cls(value=raw)


@dataclass(frozen=True)
class ColumnDescriptor:
    """A worksheet column: field name and declared data type."""
    field_name: str
    data_type: str = ""

    @property
    def dtype(self) -> str:
        return (self.data_type or "").lower()


@dataclass(frozen=True)
class Worksheet:
    """
    One worksheet snapshot.

    Attributes:
        name: Worksheet name
        columns: Column descriptors
        rows: Rows of cells, aligned with `columns`
    """
    name: str
    columns: List[ColumnDescriptor] = field(default_factory=list)
    rows: List[List[Cell]] = field(default_factory=list)

    @property
    def row_count(self) -> int:
        return len(self.rows)

    def head(self, max_rows: int) -> "Worksheet":
        """Return a snapshot capped at max_rows rows."""
        if len(self.rows) <= max_rows:
            return self
        return Worksheet(name=self.name, columns=self.columns, rows=self.rows[:max_rows])

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Worksheet":
        """
        Build from the JSON exchange shape.

        Expected keys: 'name', 'columns' ([{'fieldName', 'dataType'}]) and
        'data' (rows of [{'value', 'formattedValue'}]).

        Raises:
            SourceFetchError: If the mapping is not worksheet-shaped
        """
        if not isinstance(data, dict):
            raise SourceFetchError(f"Worksheet must be a mapping, got {type(data).__name__}")
        name = str(data.get("name") or "unknown")

        raw_columns = data.get("columns") or []
        raw_rows = data.get("data", data.get("rows")) or []
        if not isinstance(raw_columns, list) or not isinstance(raw_rows, list):
            raise SourceFetchError("Worksheet 'columns' and 'data' must be lists", source_name=name)

        columns = []
        for raw in raw_columns:
            if isinstance(raw, str):
                columns.append(ColumnDescriptor(field_name=raw))
                continue
            if not isinstance(raw, dict):
                raise SourceFetchError(f"Invalid column descriptor: {raw!r}", source_name=name)
            columns.append(ColumnDescriptor(
                field_name=str(raw.get("fieldName", raw.get("field_name", ""))),
                data_type=str(raw.get("dataType", raw.get("data_type")) or ""),
            ))

        rows = []
        for raw_row in raw_rows:
            if not isinstance(raw_row, list) or len(raw_row) != len(columns):
                raise SourceFetchError(
                    f"Row width does not match {len(columns)} columns", source_name=name
                )
            rows.append([Cell.from_json(raw) for raw in raw_row])

        return cls(name=name, columns=columns, rows=rows)


class WorksheetSource(ABC):
    """
    A place worksheet snapshots are fetched from.

    fetch() raises SourceFetchError when the snapshot cannot be obtained;
    worksheet analysis turns that into an empty result for this source only.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Source name for logging and per-source details."""

    @abstractmethod
    def fetch(self, max_rows: int) -> Worksheet:
        """Return a snapshot of at most max_rows rows."""


# =============================================================================
# OUTPUT
# =============================================================================

@dataclass(frozen=True)
class MeasureInfo:
    """
    One numeric field.

    Attributes:
        name: Raw field name
        index: Column index in the source worksheet
        sum, avg, min, max: Aggregates (0-1 scale for rates)
        count: Number of rows aggregated
        values: Per-row values in row order (0-1 scale for rates)
        is_rate: Rate by name or by value range
        is_count: Count-like name (labeling only)
        type: 'rate', 'volume' or 'value'
    """
    name: str
    index: int
    sum: float
    avg: float
    min: float
    max: float
    count: int
    values: List[float] = field(default_factory=list)
    is_rate: bool = False
    is_count: bool = False
    type: str = "value"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return convert_numpy_types({
            "name": self.name,
            "index": self.index,
            "sum": self.sum,
            "avg": self.avg,
            "min": self.min,
            "max": self.max,
            "count": self.count,
            "values": list(self.values),
            "is_rate": self.is_rate,
            "is_count": self.is_count,
            "type": self.type,
        })


@dataclass(frozen=True)
class DimensionInfo:
    """One categorical field with 1 < cardinality <= 100."""
    name: str
    index: int
    cardinality: int
    values: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "name": self.name,
            "index": self.index,
            "cardinality": self.cardinality,
            "values": list(self.values),
        }


@dataclass(frozen=True)
class BreakdownItem:
    """One dimension value within a breakdown."""
    label: str
    value: float
    count: int


@dataclass(frozen=True)
class BreakdownData:
    """One measure aggregated by one dimension, sorted by value descending."""
    measure: MeasureInfo
    dimension: str
    data: List[BreakdownItem] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return convert_numpy_types({
            "measure": self.measure.name,
            "dimension": self.dimension,
            "data": [
                {"label": item.label, "value": item.value, "count": item.count}
                for item in self.data
            ],
        })


@dataclass(frozen=True)
class DateRange:
    """Earliest and latest date of the date-range source column."""
    min_date: datetime
    max_date: datetime
    field_name: str

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "min_date": self.min_date.isoformat(),
            "max_date": self.max_date.isoformat(),
            "field_name": self.field_name,
        }


class WorksheetInsightType(str, Enum):
    """Kinds of worksheet-level insights."""
    CONCENTRATION = "concentration"
    TREND = "trend"
    ANOMALY = "anomaly"
    PERFORMANCE = "performance"


@dataclass(frozen=True)
class WorksheetInsight:
    """
    A finding about the measures and breakdowns of analyzed worksheets.

    Attributes:
        type: Rule that produced the insight
        priority: high or medium
        title: Short headline
        description: One-sentence explanation with the numbers behind it
        metric: Raw name of the measure the insight is about
        value: Signed change for trends, e.g. "+12.5%"
    """
    type: WorksheetInsightType
    priority: Priority
    title: str
    description: str
    metric: str
    value: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        result = {
            "type": self.type.value,
            "priority": self.priority.value,
            "title": self.title,
            "description": self.description,
            "metric": self.metric,
        }
        if self.value is not None:
            result["value"] = self.value
        return result


@dataclass(frozen=True)
class WorksheetAnalysis:
    """
    Result of analyzing one worksheet.

    Attributes:
        measures: Selected measures (focus-filtered, capped at max_metrics)
        dimensions: Every qualifying dimension
        breakdowns: One breakdown per selected measure over the chart dimension
        row_count: Rows analyzed
        date_range: Date range of the first date-like column, if any dates parsed
    """
    measures: List[MeasureInfo] = field(default_factory=list)
    dimensions: List[DimensionInfo] = field(default_factory=list)
    breakdowns: List[BreakdownData] = field(default_factory=list)
    row_count: int = 0
    date_range: Optional[DateRange] = None

    @classmethod
    def empty(cls) -> "WorksheetAnalysis":
        return cls()

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "measures": [m.to_dict() for m in self.measures],
            "dimensions": [d.to_dict() for d in self.dimensions],
            "breakdowns": [b.to_dict() for b in self.breakdowns],
            "row_count": self.row_count,
            "date_range": self.date_range.to_dict() if self.date_range else None,
        }


@dataclass(frozen=True)
class WorksheetDetail:
    """Per-source bookkeeping for a multi-source analysis."""
    name: str
    measures: int
    rows: int


@dataclass(frozen=True)
class CombinedAnalysis:
    """
    Result of analyzing several worksheets in arrival order.

    Attributes:
        measures: Measures merged by name
        breakdowns: Breakdowns of every source, concatenated
        worksheet_details: One entry per successfully analyzed source
        date_range: First date range found across sources
        errors: Serialized errors of sources that failed to analyze
    """
    measures: List[MeasureInfo] = field(default_factory=list)
    breakdowns: List[BreakdownData] = field(default_factory=list)
    worksheet_details: List[WorksheetDetail] = field(default_factory=list)
    date_range: Optional[DateRange] = None
    errors: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def total_rows(self) -> int:
        return sum(detail.rows for detail in self.worksheet_details)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "measures": [m.to_dict() for m in self.measures],
            "breakdowns": [b.to_dict() for b in self.breakdowns],
            "worksheet_details": [
                {"name": d.name, "measures": d.measures, "rows": d.rows}
                for d in self.worksheet_details
            ],
            "total_rows": self.total_rows,
            "date_range": self.date_range.to_dict() if self.date_range else None,
            "errors": list(self.errors),
        }


def column_cells(rows: Sequence[Sequence[Cell]], index: int) -> List[Cell]:
    """Return one column's cells in row order."""
    return [row[index] for row in rows]
