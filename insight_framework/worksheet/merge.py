"""
Cross-source merge of worksheet analyses.

merge_measure is a pure reducer over two measures of the same name:

- non-rate: sums and counts add, the average is recomputed, min/max combine,
  and the value sequence of the source with more points is kept
- rate: the measure with the strictly larger count replaces the other
  wholesale (ties keep the existing one); rates are never summed or averaged

analyze_all_worksheets applies it in source arrival order, so results are
reproducible whatever order the per-source analyses finished in.
"""

import logging
import re
from dataclasses import replace
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

from insight_framework.core.config import WorksheetOptions
from insight_framework.core.exceptions import AnalysisError
from insight_framework.worksheet.extractor import analyze_worksheet
from insight_framework.worksheet.field_names import strip_aggregation
from insight_framework.worksheet.models import (
    BreakdownData,
    CombinedAnalysis,
    DateRange,
    MeasureInfo,
    Worksheet,
    WorksheetDetail,
    WorksheetSource,
)

logger = logging.getLogger(__name__)

IDENTIFIER_PATTERN = re.compile(
    r"^(id|ids|pk|key|guid|uuid|record_?id|row_?id|unique_?id|identifier)$", re.IGNORECASE
)


def merge_measure(existing: MeasureInfo, incoming: MeasureInfo) -> MeasureInfo:
    """
    Merge two measures with the same name.

    Args:
        existing: Measure accumulated so far
        incoming: Measure from the next source

    Returns:
        New merged MeasureInfo; neither input is modified
    """
    if incoming.is_rate:
        return incoming if incoming.count > existing.count else existing

    total = existing.sum + incoming.sum
    count = existing.count + incoming.count
    values = incoming.values if len(incoming.values) > len(existing.values) else existing.values
    return replace(
        existing,
        sum=total,
        count=count,
        avg=total / count if count > 0 else 0.0,
        min=min(existing.min, incoming.min),
        max=max(existing.max, incoming.max),
        values=list(values),
    )


def merge_measures(
    existing: Sequence[MeasureInfo], incoming: Iterable[MeasureInfo]
) -> List[MeasureInfo]:
    """
    Merge measure lists keyed by name, keeping first-seen order.

    Args:
        existing: Accumulated measures
        incoming: Measures from the next source

    Returns:
        New list of merged measures
    """
    merged = list(existing)
    positions = {measure.name: i for i, measure in enumerate(merged)}
    for measure in incoming:
        position = positions.get(measure.name)
        if position is None:
            positions[measure.name] = len(merged)
            merged.append(measure)
        else:
            merged[position] = merge_measure(merged[position], measure)
    return merged


def is_identifier_measure(measure: MeasureInfo) -> bool:
    """True for measures that only aggregate a key, e.g. 'SUM(Row ID)'."""
    core = strip_aggregation(measure.name).strip().lower().replace(" ", "_")
    return bool(IDENTIFIER_PATTERN.match(core))


def filter_identifier_measures(measures: Sequence[MeasureInfo]) -> List[MeasureInfo]:
    """Drop identifier-like measures."""
    return [m for m in measures if not is_identifier_measure(m)]


def analyze_all_worksheets(
    sources: Sequence[Union[Worksheet, WorksheetSource, None]],
    options: Optional[WorksheetOptions] = None,
    drop_identifiers: bool = True,
) -> CombinedAnalysis:
    """
    Analyze several worksheets and merge them in arrival order.

    A source that fails to analyze is logged and skipped; the others still
    contribute.

    Args:
        sources: Worksheets or worksheet sources (None entries are skipped)
        options: Worksheet options shared by every source
        drop_identifiers: Remove identifier-like measures from the result

    Returns:
        CombinedAnalysis
    """
    options = options or WorksheetOptions()
    measures: List[MeasureInfo] = []
    breakdowns: List[BreakdownData] = []
    details: List[WorksheetDetail] = []
    date_range: Optional[DateRange] = None
    errors: List[Dict[str, Any]] = []

    for source in sources:
        if source is None:
            continue
        name = "unknown"
        try:
            name = getattr(source, "name", None) or name
            analysis = analyze_worksheet(source, options)
        except Exception as e:
            error = AnalysisError(
                f"Error analyzing worksheet '{name}': {e}",
                operation="analyze_worksheet",
                original_exception=e
            )
            logger.exception(error.message)
            errors.append(error.to_dict())
            continue

        details.append(WorksheetDetail(
            name=name, measures=len(analysis.measures), rows=analysis.row_count
        ))
        measures = merge_measures(measures, analysis.measures)
        breakdowns.extend(analysis.breakdowns)
        if date_range is None:
            date_range = analysis.date_range

    if drop_identifiers:
        measures = filter_identifier_measures(measures)

    logger.info(
        f"Analysis complete: {len(details)} worksheets, "
        f"{len(measures)} measures, {len(breakdowns)} breakdowns"
    )
    return CombinedAnalysis(
        measures=measures,
        breakdowns=breakdowns,
        worksheet_details=details,
        date_range=date_range,
        errors=errors,
    )
