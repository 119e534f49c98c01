"""
Worksheet insights - statistical findings over measures and breakdowns.

Turns the measure/breakdown model of one or more analyzed worksheets into a
short list of insights for a dashboard headline area.

Architecture:
    generate_data_insights runs four rule families in a fixed order, then
    ranks the results by priority and keeps the first max_insights:
    1. Concentration: few breakdown items carry most of a measure's total
    2. Trend: change from a measure's first value to its last
    3. Anomaly: IQR outliers in a measure's values, reported in sigmas
    4. Performance: the single largest top/bottom ratio across breakdowns

Design Decisions:
    - Thresholds are statistical only (Pareto share, IQR fences, sigma
      distance); nothing judges whether a value is good or bad
    - Identifier measures ("SUM(Row ID)") never produce insights
    - Changes of 90% or more between first and last value are treated as
      artifacts of non-time-series data and skipped
    - Ranking is a stable sort, so rule order breaks priority ties

Usage:
    combined = analyze_all_worksheets(sources, options)
    insights = generate_data_insights(combined.measures, combined.breakdowns)
"""

import logging
import math
from typing import List, Mapping, Optional, Sequence, Tuple

import numpy as np

from insight_framework.core.constants import (
    DEFAULT_MAX_INSIGHTS,
    IQR_MULTIPLIER,
    UNKNOWN_LABEL,
    WORKSHEET_CONCENTRATION_SHARE,
    WORKSHEET_CONCENTRATION_MAX_ITEMS_PCT,
    WORKSHEET_CONCENTRATION_MIN_ITEMS,
    WORKSHEET_TREND_MIN_VALUES,
    WORKSHEET_TREND_FLAT_PCT,
    WORKSHEET_TREND_MIN_PCT,
    WORKSHEET_TREND_HIGH_PCT,
    WORKSHEET_TREND_SUSPICIOUS_PCT,
    WORKSHEET_TREND_POINTS_MAX_PCT,
    WORKSHEET_TREND_POINTS_MAX_CHANGE,
    WORKSHEET_OUTLIER_MIN_VALUES,
    WORKSHEET_OUTLIER_HIGH_SIGMA,
)
from insight_framework.profiler.insight_templates import render_template
from insight_framework.profiler.profile_result import Priority
from insight_framework.worksheet.field_names import normalize_field_name
from insight_framework.worksheet.merge import is_identifier_measure
from insight_framework.worksheet.models import (
    BreakdownData,
    MeasureInfo,
    WorksheetInsight,
    WorksheetInsightType,
)

logger = logging.getLogger(__name__)

UP = "up"
DOWN = "down"
FLAT = "flat"


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves rounded up (2.5 -> 3)."""
    return int(math.floor(value + 0.5))


def calculate_trend(values: Sequence[float]) -> Tuple[float, str]:
    """
    Percent change from the first value to the last.

    A zero first value gives +100% (or 0% when the last is zero too).
    Changes within +/-WORKSHEET_TREND_FLAT_PCT are flat.

    Returns:
        Tuple of (percent_change, direction)
    """
    if len(values) < 2:
        return 0.0, FLAT
    first, last = values[0], values[-1]
    if first == 0:
        return (0.0, FLAT) if last == 0 else (100.0, UP)

    change = (last - first) / abs(first) * 100
    if change > WORKSHEET_TREND_FLAT_PCT:
        return change, UP
    if change < -WORKSHEET_TREND_FLAT_PCT:
        return change, DOWN
    return change, FLAT


def detect_outliers(values: Sequence[float]) -> Tuple[List[float], float, float]:
    """
    IQR fences over index-based quartiles (floor(n/4) and floor(3n/4)).

    Returns:
        Tuple of (outliers in input order, mean, population std)
    """
    arr = np.asarray(values, dtype=np.float64)
    ordered = np.sort(arr)
    q1 = ordered[int(len(ordered) * 0.25)]
    q3 = ordered[int(len(ordered) * 0.75)]
    iqr = q3 - q1
    lower = q1 - IQR_MULTIPLIER * iqr
    upper = q3 + IQR_MULTIPLIER * iqr

    outliers = [float(v) for v in arr if v < lower or v > upper]
    return outliers, float(arr.mean()), float(arr.std())


def find_concentration(
    breakdowns: Sequence[BreakdownData], labels: Mapping[str, str]
) -> List[WorksheetInsight]:
    """Breakdowns where at most 30% of the items make up 80% of the total."""
    insights: List[WorksheetInsight] = []
    for breakdown in breakdowns:
        if len(breakdown.data) < WORKSHEET_CONCENTRATION_MIN_ITEMS:
            continue
        ranked = sorted(breakdown.data, key=lambda item: item.value, reverse=True)
        total = sum(item.value for item in ranked)
        if total <= 0:
            continue

        cumulative = 0.0
        items_needed = 0
        for item in ranked:
            cumulative += item.value
            items_needed += 1
            if cumulative >= total * WORKSHEET_CONCENTRATION_SHARE:
                break

        items_pct = round_half_up(items_needed / len(ranked) * 100)
        if items_pct > WORKSHEET_CONCENTRATION_MAX_ITEMS_PCT:
            continue
        insights.append(WorksheetInsight(
            type=WorksheetInsightType.CONCENTRATION,
            priority=Priority.HIGH,
            title=render_template("worksheet", "concentration_title"),
            description=render_template(
                "worksheet", "concentration_description",
                items_pct=items_pct,
                dimension=labels.get(breakdown.dimension, breakdown.dimension),
                share=WORKSHEET_CONCENTRATION_SHARE * 100,
                measure=labels[breakdown.measure.name],
                top=ranked[0].label or UNKNOWN_LABEL,
            ),
            metric=breakdown.measure.name,
        ))
    return insights


def find_trends(
    measures: Sequence[MeasureInfo], labels: Mapping[str, str]
) -> List[WorksheetInsight]:
    """First-to-last changes of at least 5% in measures with 5+ values."""
    insights: List[WorksheetInsight] = []
    for measure in measures:
        if len(measure.values) < WORKSHEET_TREND_MIN_VALUES:
            continue
        change, direction = calculate_trend(measure.values)
        abs_change = abs(change)

        if abs_change >= WORKSHEET_TREND_SUSPICIOUS_PCT:
            logger.debug(
                f"Skipping suspicious trend for {measure.name}: {change:.1f}% "
                f"(first={measure.values[0]}, last={measure.values[-1]})"
            )
            continue
        if direction == FLAT or abs_change < WORKSHEET_TREND_MIN_PCT:
            continue

        label = labels[measure.name]
        insights.append(WorksheetInsight(
            type=WorksheetInsightType.TREND,
            priority=Priority.HIGH if abs_change >= WORKSHEET_TREND_HIGH_PCT else Priority.MEDIUM,
            title=render_template("worksheet", f"trend_{direction}_title", measure=label),
            description=render_template(
                "worksheet", "trend_description",
                measure=label, change=_describe_change(measure, direction, abs_change),
            ),
            metric=measure.name,
            value=f"{'+' if change > 0 else ''}{change:.1f}%",
        ))
    return insights


def _describe_change(measure: MeasureInfo, direction: str, abs_change: float) -> str:
    if not measure.is_rate:
        return render_template("worksheet", f"trend_volume_{direction}", change=abs_change)

    # Small rate moves are stated in percentage points
    points = abs(measure.values[-1] - measure.values[0])
    if abs_change < WORKSHEET_TREND_POINTS_MAX_PCT and points < WORKSHEET_TREND_POINTS_MAX_CHANGE:
        return render_template("worksheet", f"trend_rate_{direction}_points", points=points * 100)
    return render_template("worksheet", f"trend_rate_{direction}_percent", change=abs_change)


def find_anomalies(
    measures: Sequence[MeasureInfo], labels: Mapping[str, str]
) -> List[WorksheetInsight]:
    """IQR outliers, with the distance of the farthest one in standard deviations."""
    insights: List[WorksheetInsight] = []
    for measure in measures:
        if len(measure.values) < WORKSHEET_OUTLIER_MIN_VALUES:
            continue
        outliers, mean, std = detect_outliers(measure.values)
        if not outliers or std == 0:
            continue

        farthest = max(outliers, key=lambda v: abs(v - mean))
        sigma = round_half_up(abs(farthest - mean) / std)
        insights.append(WorksheetInsight(
            type=WorksheetInsightType.ANOMALY,
            priority=Priority.HIGH if sigma >= WORKSHEET_OUTLIER_HIGH_SIGMA else Priority.MEDIUM,
            title=render_template("worksheet", "anomaly_title"),
            description=render_template(
                "worksheet", "anomaly_description",
                count=len(outliers),
                plural="s" if len(outliers) > 1 else "",
                measure=labels[measure.name],
                sigma=sigma,
            ),
            metric=measure.name,
        ))
    return insights


def find_performance_gap(
    breakdowns: Sequence[BreakdownData], labels: Mapping[str, str]
) -> List[WorksheetInsight]:
    """The one breakdown with the largest top-to-bottom value ratio."""
    best: Optional[WorksheetInsight] = None
    best_ratio = 0.0
    for breakdown in breakdowns:
        if len(breakdown.data) < 2:
            continue
        ranked = sorted(breakdown.data, key=lambda item: item.value, reverse=True)
        top, bottom = ranked[0], ranked[-1]
        if top.value == bottom.value or bottom.value <= 0:
            continue

        ratio = top.value / bottom.value
        if ratio > best_ratio:
            best_ratio = ratio
            best = WorksheetInsight(
                type=WorksheetInsightType.PERFORMANCE,
                priority=Priority.MEDIUM,
                title=render_template("worksheet", "performance_title"),
                description=render_template(
                    "worksheet", "performance_description",
                    top=top.label or UNKNOWN_LABEL,
                    bottom=bottom.label or UNKNOWN_LABEL,
                    ratio=round_half_up(ratio),
                    measure=labels[breakdown.measure.name],
                ),
                metric=breakdown.measure.name,
            )
    return [best] if best is not None else []


def generate_data_insights(
    measures: Sequence[MeasureInfo],
    breakdowns: Sequence[BreakdownData],
    max_insights: int = DEFAULT_MAX_INSIGHTS,
    label_overrides: Optional[Mapping[str, str]] = None,
    include_concentration: bool = True,
    include_trends: bool = True,
    include_anomalies: bool = True,
    include_performance: bool = True,
) -> List[WorksheetInsight]:
    """
    Generate ranked insights from analyzed measures and breakdowns.

    Args:
        measures: Measures, typically CombinedAnalysis.measures
        breakdowns: Breakdowns, typically CombinedAnalysis.breakdowns
        max_insights: Cap on returned insights
        label_overrides: Field name -> label mapping used in the sentences
        include_concentration .. include_performance: Enable rule families

    Returns:
        Insights ordered high > medium, at most max_insights of them
    """
    measures = [m for m in measures if not is_identifier_measure(m)]
    breakdowns = [b for b in breakdowns if not is_identifier_measure(b.measure)]

    labels = {}
    for measure in list(measures) + [b.measure for b in breakdowns]:
        labels[measure.name] = normalize_field_name(
            measure.name, label_overrides, is_rate=measure.is_rate
        )
    for breakdown in breakdowns:
        labels.setdefault(
            breakdown.dimension, normalize_field_name(breakdown.dimension, label_overrides)
        )

    insights: List[WorksheetInsight] = []
    if include_concentration:
        insights.extend(find_concentration(breakdowns, labels))
    if include_trends:
        insights.extend(find_trends(measures, labels))
    if include_anomalies:
        insights.extend(find_anomalies(measures, labels))
    if include_performance:
        insights.extend(find_performance_gap(breakdowns, labels))

    ranked = sorted(insights, key=lambda insight: insight.priority.rank)
    logger.debug(
        f"Generated {len(insights)} worksheet insights, keeping {min(len(ranked), max_insights)}"
    )
    return ranked[:max_insights]
