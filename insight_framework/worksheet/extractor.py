"""
Measure/dimension extraction for one worksheet.

Architecture:
    analyze_worksheet walks the worksheet's columns once:
    1. Meta columns ("Measure Names"/"Measure Values") are skipped
    2. The first date-like column is the date-range source
    3. Numeric or aggregate-named columns become measures
    4. Other columns with 1 < cardinality <= 100 become dimensions
    Then one dimension is chosen for charting, measures are focus-filtered
    and capped, and one breakdown per selected measure is built.

Design Decisions:
    - Rates are normalized to the 0-1 scale when the name says rate and the
      observed max exceeds 1 (percentage-scaled source); breakdown values of
      such a measure are scaled the same way
    - The value-range rate fallback (all values in [0, 1], positive mean) can
      misclassify small counts; this is a known limitation
    - Count classification only feeds the measure type tag
    - A failing source yields an empty analysis, never an exception

Usage:
    analysis = analyze_worksheet(worksheet, WorksheetOptions(max_metrics=4))
"""

import logging
import re
from collections import OrderedDict
from datetime import datetime
from typing import Dict, List, Optional, Sequence, Tuple, Union

import numpy as np

from insight_framework.core.config import WorksheetOptions
from insight_framework.core.constants import (
    META_FIELD_NAMES,
    UNKNOWN_LABEL,
    DIMENSION_MIN_CARDINALITY,
    DIMENSION_MAX_CARDINALITY,
    PREFERRED_DIMENSION_CARDINALITY,
)
from insight_framework.core.exceptions import SourceFetchError
from insight_framework.profiler.values import to_date
from insight_framework.worksheet.models import (
    BreakdownData,
    BreakdownItem,
    Cell,
    ColumnDescriptor,
    DateRange,
    DimensionInfo,
    MeasureInfo,
    Worksheet,
    WorksheetAnalysis,
    WorksheetSource,
    column_cells,
)

logger = logging.getLogger(__name__)

DATE_TYPES = ("date", "datetime", "timestamp")
DATE_NAME_PATTERN = re.compile(r"date|time|day|month|year|week|period|quarter", re.IGNORECASE)

NUMERIC_TYPES = ("int", "float", "number", "integer", "real", "double")
AGGREGATE_NAME_PATTERN = re.compile(
    r"^(SUM|AVG|COUNT|CNTD|MIN|MAX|AGG|ATTR|MEDIAN)\s*\(", re.IGNORECASE
)

RATE_NAME_PATTERN = re.compile(r"rate|percent|%|ratio|pct|margin|share", re.IGNORECASE)
COUNT_NAME_PATTERN = re.compile(
    r"count|total|sum|volume|quantity|num|number|sales|revenue|profit|amount", re.IGNORECASE
)

# Measure type policy: (is_rate, is_count) -> type tag, rate taking precedence
RATE = "rate"
VOLUME = "volume"
VALUE = "value"
MEASURE_TYPE_POLICY: Dict[Tuple[bool, bool], str] = {
    (True, True): RATE,
    (True, False): RATE,
    (False, True): VOLUME,
    (False, False): VALUE,
}

PERCENT_SCALE = 100.0


def is_date_column(column: ColumnDescriptor) -> bool:
    """Declared temporal type, or a name that implies time."""
    return column.dtype in DATE_TYPES or bool(DATE_NAME_PATTERN.search(column.field_name))


def is_measure_column(column: ColumnDescriptor) -> bool:
    """Declared numeric type, or an aggregation-function name."""
    return column.dtype in NUMERIC_TYPES or bool(AGGREGATE_NAME_PATTERN.match(column.field_name))


def extract_date_range(column: ColumnDescriptor, cells: Sequence[Cell]) -> Optional[DateRange]:
    """Min/max over every cell that parses as a date; None if none do."""
    dates: List[datetime] = []
    for cell in cells:
        parsed = to_date(cell.date_source)
        if parsed is not None:
            dates.append(parsed)
    if not dates:
        return None
    return DateRange(min_date=min(dates), max_date=max(dates), field_name=column.field_name)


def extract_measure(column: ColumnDescriptor, index: int, cells: Sequence[Cell]) -> Tuple[MeasureInfo, float]:
    """
    Aggregate one measure column.

    Returns:
        Tuple of (MeasureInfo, scale) where scale is the divisor applied to
        bring a percentage-scaled rate onto 0-1 (1.0 otherwise)
    """
    name = column.field_name
    values = np.array([cell.number for cell in cells], dtype=np.float64)
    count = len(values)
    total = float(values.sum()) if count else 0.0
    minimum = float(values.min()) if count else 0.0
    maximum = float(values.max()) if count else 0.0
    avg = total / count if count else 0.0

    rate_by_name = bool(RATE_NAME_PATTERN.search(name))
    rate_by_value = maximum <= 1 and minimum >= 0 and 0 < avg <= 1
    is_rate = rate_by_name or rate_by_value
    is_count = bool(COUNT_NAME_PATTERN.search(name))

    scale = PERCENT_SCALE if rate_by_name and maximum > 1 else 1.0
    if scale != 1.0:
        logger.debug(f"Rate '{name}' is percentage-scaled (avg={avg}), normalizing to 0-1")

    measure = MeasureInfo(
        name=name,
        index=index,
        sum=total / scale,
        avg=avg / scale,
        min=minimum / scale,
        max=maximum / scale,
        count=count,
        values=[float(v) / scale for v in values],
        is_rate=is_rate,
        is_count=is_count,
        type=MEASURE_TYPE_POLICY[(is_rate, is_count)],
    )
    return measure, scale


def extract_dimension(
    column: ColumnDescriptor, index: int, cells: Sequence[Cell], max_items: int
) -> Optional[DimensionInfo]:
    """Distinct labels of a categorical column, if its cardinality qualifies."""
    distinct: Dict[str, None] = OrderedDict()
    for cell in cells:
        label = cell.label
        if label is not None:
            distinct.setdefault(label, None)
    cardinality = len(distinct)
    if not DIMENSION_MIN_CARDINALITY < cardinality <= DIMENSION_MAX_CARDINALITY:
        return None
    return DimensionInfo(
        name=column.field_name,
        index=index,
        cardinality=cardinality,
        values=list(distinct)[:max_items],
    )


def select_dimension(
    dimensions: Sequence[DimensionInfo], focus_dimension: Optional[str] = None
) -> Optional[DimensionInfo]:
    """
    Pick the one dimension that drives breakdowns.

    Focus hint (case-insensitive substring) first, then the first dimension
    with a chart-friendly cardinality, then the first dimension at all.
    """
    if not dimensions:
        return None
    if focus_dimension:
        hint = focus_dimension.lower()
        for dimension in dimensions:
            if hint in dimension.name.lower():
                return dimension
        logger.debug(f"No dimension matches focus '{focus_dimension}', using cardinality preference")
    low, high = PREFERRED_DIMENSION_CARDINALITY
    for dimension in dimensions:
        if low <= dimension.cardinality <= high:
            return dimension
    return dimensions[0]


def select_measures(
    measures: Sequence[MeasureInfo], focus_metrics: Sequence[str], max_metrics: int
) -> List[MeasureInfo]:
    """Focus-filter measures (falling back to all if nothing matches), then cap."""
    selected = list(measures)
    if focus_metrics:
        hints = [hint.lower() for hint in focus_metrics]
        matched = [m for m in measures if any(hint in m.name.lower() for hint in hints)]
        if matched:
            selected = matched
        else:
            logger.debug(f"No measure matches focus {list(focus_metrics)}, keeping all measures")
    return selected[:max_metrics]


def build_breakdown(
    measure: MeasureInfo,
    dimension: DimensionInfo,
    rows: Sequence[Sequence[Cell]],
    max_items: int,
    scale: float = 1.0,
) -> BreakdownData:
    """
    Aggregate one measure by one dimension.

    Rates use the per-group mean, everything else the per-group sum. Items
    are sorted by value descending and truncated to max_items.
    """
    groups: Dict[str, List[float]] = OrderedDict()
    for row in rows:
        label = row[dimension.index].label or UNKNOWN_LABEL
        totals = groups.setdefault(label, [0.0, 0])
        totals[0] += row[measure.index].number / scale
        totals[1] += 1

    items = [
        BreakdownItem(
            label=label,
            value=total / count if measure.is_rate else total,
            count=int(count),
        )
        for label, (total, count) in groups.items()
    ]
    items.sort(key=lambda item: item.value, reverse=True)
    return BreakdownData(measure=measure, dimension=dimension.name, data=items[:max_items])


def _resolve(
    worksheet_or_source: Union[Worksheet, WorksheetSource], max_rows: int
) -> Optional[Worksheet]:
    if isinstance(worksheet_or_source, Worksheet):
        return worksheet_or_source.head(max_rows)
    try:
        return worksheet_or_source.fetch(max_rows).head(max_rows)
    except SourceFetchError as e:
        logger.warning(f"Could not fetch worksheet '{worksheet_or_source.name}': {e}")
        return None


def analyze_worksheet(
    worksheet_or_source: Union[Worksheet, WorksheetSource],
    options: Optional[WorksheetOptions] = None,
) -> WorksheetAnalysis:
    """
    Extract measures, dimensions and breakdowns from one worksheet.

    Args:
        worksheet_or_source: A Worksheet snapshot, or a WorksheetSource to fetch one from
        options: Worksheet options (defaults if None)

    Returns:
        WorksheetAnalysis; empty when the source cannot be fetched or has no data
    """
    options = options or WorksheetOptions()
    worksheet = _resolve(worksheet_or_source, options.max_rows)
    if worksheet is None or not worksheet.columns or not worksheet.rows:
        logger.warning("No data returned from worksheet")
        return WorksheetAnalysis.empty()

    rows = worksheet.rows
    logger.info(
        f"Analyzing worksheet '{worksheet.name}': "
        f"{len(worksheet.columns)} columns x {len(rows)} rows"
    )

    measures: List[MeasureInfo] = []
    scales: Dict[int, float] = {}
    dimensions: List[DimensionInfo] = []
    date_range: Optional[DateRange] = None
    date_source_seen = False

    for index, column in enumerate(worksheet.columns):
        if column.field_name in META_FIELD_NAMES:
            continue
        cells = column_cells(rows, index)

        if not date_source_seen and is_date_column(column):
            date_source_seen = True
            date_range = extract_date_range(column, cells)
            if date_range is not None:
                logger.debug(
                    f"Date range from '{column.field_name}': "
                    f"{date_range.min_date} to {date_range.max_date}"
                )

        if is_measure_column(column):
            measure, scale = extract_measure(column, index, cells)
            measures.append(measure)
            scales[index] = scale
        else:
            dimension = extract_dimension(column, index, cells, options.max_items)
            if dimension is not None:
                dimensions.append(dimension)

    chart_dimension = select_dimension(dimensions, options.focus_dimension)
    selected = select_measures(measures, options.focus_metrics, options.max_metrics)

    breakdowns: List[BreakdownData] = []
    if chart_dimension is not None:
        for measure in selected:
            breakdowns.append(build_breakdown(
                measure, chart_dimension, rows, options.max_items, scales[measure.index]
            ))

    return WorksheetAnalysis(
        measures=selected,
        dimensions=dimensions,
        breakdowns=breakdowns,
        row_count=len(rows),
        date_range=date_range,
    )
