"""
Insight Discoverer - cross-column pattern search for profiled tables.

Searches relationships that a per-column profile does not show and turns
each finding into an evidence-backed Insight.

Architecture:
    InsightDiscoverer runs four generator families over a table split into
    numeric and categorical (string) columns by the TypeInferrer:
    1. Concentration: Pareto share of the top values, plus a dominant value
    2. Segment variance: category means of a numeric column
    3. Gap: temporal-cycle names with few distinct values
    4. Correlation: Pearson r between numeric columns

Design Decisions:
    - Pairings are bounded (first 3 categorical x first 3 numeric for
      segments, pairs among the first 4 numeric columns for correlation)
      so wide tables stay linear in row count
    - Every generator returns an empty list on empty or invalid input
    - Results are ranked by priority with a stable sort, so generators keep
      their discovery order within a priority level

Usage:
    discoverer = InsightDiscoverer()
    insights = discoverer.discover(rows)
"""

import logging
import math
from collections import Counter, OrderedDict
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

import numpy as np

from insight_framework.core.config import InsightThresholds
from insight_framework.core.constants import (
    SEGMENT_MAX_CATEGORICAL,
    SEGMENT_MAX_NUMERIC,
    GAP_NAME_TERMS,
    GAP_SAMPLE_LIMIT,
    CORRELATION_MAX_COLUMNS,
    UNKNOWN_LABEL,
)
from insight_framework.profiler.insight_templates import render_template
from insight_framework.profiler.profile_result import Insight, InsightType, Priority
from insight_framework.profiler.type_inferrer import TypeInferrer, NUMBER, STRING
from insight_framework.profiler.values import (
    column_names,
    column_values,
    is_missing,
    to_number,
    value_key,
)

logger = logging.getLogger(__name__)


def rank_insights(insights: Sequence[Insight]) -> List[Insight]:
    """
    Order insights high > medium > low, keeping discovery order within a level.

    Args:
        insights: Insights in discovery order

    Returns:
        New list sorted by priority
    """
    return sorted(insights, key=lambda insight: insight.priority.rank)


def pearson_correlation(x: np.ndarray, y: np.ndarray) -> float:
    """
    Pearson correlation coefficient of two equal-length arrays.

    Returns:
        r in [-1, 1], or 0.0 when either side has no variance
    """
    n = len(x)
    if n < 2:
        return 0.0
    numerator = n * np.sum(x * y) - np.sum(x) * np.sum(y)
    denominator = math.sqrt(
        max(0.0, float((n * np.sum(x * x) - np.sum(x) ** 2) * (n * np.sum(y * y) - np.sum(y) ** 2)))
    )
    if denominator == 0:
        return 0.0
    return float(numerator / denominator)


class InsightDiscoverer:
    """
    Discover cross-column patterns in a table.

    Attributes:
        thresholds: Discovery thresholds
    """

    def __init__(
        self,
        thresholds: Optional[InsightThresholds] = None,
        type_inferrer: Optional[TypeInferrer] = None,
    ):
        """
        Initialize the discoverer.

        Args:
            thresholds: Custom thresholds (uses defaults if None)
            type_inferrer: Column classifier (default TypeInferrer())
        """
        self.thresholds = thresholds or InsightThresholds()
        self.type_inferrer = type_inferrer or TypeInferrer()

    def discover(self, rows: Sequence[Mapping[str, Any]]) -> List[Insight]:
        """
        Run every generator and rank the findings.

        Args:
            rows: Rows keyed by field name

        Returns:
            Ranked insights; empty for empty input
        """
        if not rows:
            return []

        numeric_cols, categorical_cols = self.split_columns(rows)
        logger.debug(
            f"Insight search over {len(numeric_cols)} numeric and "
            f"{len(categorical_cols)} categorical columns"
        )

        insights: List[Insight] = []
        insights.extend(self.find_concentration(rows, categorical_cols))
        insights.extend(self.find_segment_variance(rows, categorical_cols, numeric_cols))
        insights.extend(self.find_gaps(rows, categorical_cols))
        insights.extend(self.find_correlations(rows, numeric_cols))

        logger.info(f"Discovered {len(insights)} insights")
        return rank_insights(insights)

    def split_columns(self, rows: Sequence[Mapping[str, Any]]) -> Tuple[List[str], List[str]]:
        """Return (numeric, categorical) column names in column order."""
        numeric_cols: List[str] = []
        categorical_cols: List[str] = []
        for name in column_names(rows):
            data_type = self.type_inferrer.infer_column_type(column_values(rows, name))
            if data_type == NUMBER:
                numeric_cols.append(name)
            elif data_type == STRING:
                categorical_cols.append(name)
        return numeric_cols, categorical_cols

    # -------------------------------------------------------------------------
    # Concentration
    # -------------------------------------------------------------------------

    def find_concentration(
        self, rows: Sequence[Mapping[str, Any]], categorical_cols: Sequence[str]
    ) -> List[Insight]:
        """Pareto concentration and single dominant values in categorical columns."""
        insights: List[Insight] = []
        for col in categorical_cols:
            counts = Counter(str(v) for v in column_values(rows, col) if not is_missing(v))
            total = sum(counts.values())
            if total == 0:
                continue
            ranked = counts.most_common()

            if len(ranked) >= self.thresholds.concentration_min_distinct:
                top_n = math.ceil(len(ranked) * self.thresholds.concentration_top_fraction)
                top_share = sum(count for _, count in ranked[:top_n]) / total
                if top_share > self.thresholds.concentration_share_threshold:
                    insights.append(Insight(
                        type=InsightType.CONCENTRATION,
                        title=render_template("insight", "concentration_title", column=col),
                        description=render_template(
                            "insight", "concentration_description",
                            top_n=top_n, share=top_share * 100, column=col
                        ),
                        evidence=render_template(
                            "insight", "concentration_evidence",
                            top_values=", ".join(f"{v} ({c})" for v, c in ranked[:3])
                        ),
                        actionable=True,
                        priority=Priority.HIGH,
                    ))

            if len(ranked) > 1:
                top_value, top_count = ranked[0]
                share = top_count / total
                if share > self.thresholds.dominant_share_threshold:
                    insights.append(Insight(
                        type=InsightType.CONCENTRATION,
                        title=render_template("insight", "dominant_title", column=col),
                        description=render_template(
                            "insight", "dominant_description",
                            value=top_value, share=share * 100, column=col
                        ),
                        evidence=render_template(
                            "insight", "dominant_evidence", count=top_count, total=total
                        ),
                        actionable=True,
                        priority=(
                            Priority.HIGH if share > self.thresholds.dominant_high_share
                            else Priority.MEDIUM
                        ),
                    ))
        return insights

    # -------------------------------------------------------------------------
    # Segment variance
    # -------------------------------------------------------------------------

    def find_segment_variance(
        self,
        rows: Sequence[Mapping[str, Any]],
        categorical_cols: Sequence[str],
        numeric_cols: Sequence[str],
    ) -> List[Insight]:
        """Compare per-category means of numeric columns."""
        insights: List[Insight] = []
        for cat_col in categorical_cols[:SEGMENT_MAX_CATEGORICAL]:
            for num_col in numeric_cols[:SEGMENT_MAX_NUMERIC]:
                insight = self._segment_insight(rows, cat_col, num_col)
                if insight is not None:
                    insights.append(insight)
        return insights

    def _segment_insight(
        self, rows: Sequence[Mapping[str, Any]], cat_col: str, num_col: str
    ) -> Optional[Insight]:
        segments: "OrderedDict[str, List[float]]" = OrderedDict()
        for row in rows:
            number = to_number(row.get(num_col))
            if number is None:
                continue
            category = row.get(cat_col)
            label = UNKNOWN_LABEL if is_missing(category) else str(category)
            segments.setdefault(label, []).append(number)

        if not 2 <= len(segments) <= self.thresholds.segment_max_segments:
            return None

        qualifying = [
            (label, sum(values) / len(values), len(values))
            for label, values in segments.items()
            if len(values) >= self.thresholds.segment_min_samples
        ]
        if len(qualifying) < 2:
            return None
        qualifying.sort(key=lambda segment: segment[1], reverse=True)

        top_label, top_avg, top_n = qualifying[0]
        bottom_label, bottom_avg, bottom_n = qualifying[-1]
        if bottom_avg == 0:
            return None
        ratio = top_avg / bottom_avg
        if not math.isfinite(ratio) or ratio <= self.thresholds.segment_ratio_threshold:
            return None

        return Insight(
            type=InsightType.SEGMENT,
            title=render_template("insight", "segment_title", measure=num_col, segment=cat_col),
            description=render_template(
                "insight", "segment_description",
                top=top_label, ratio=ratio, measure=num_col, bottom=bottom_label
            ),
            evidence=render_template(
                "insight", "segment_evidence",
                top=top_label, top_avg=top_avg, top_n=top_n,
                bottom=bottom_label, bottom_avg=bottom_avg, bottom_n=bottom_n
            ),
            actionable=True,
            priority=Priority.HIGH if ratio > self.thresholds.segment_high_ratio else Priority.MEDIUM,
        )

    # -------------------------------------------------------------------------
    # Gaps
    # -------------------------------------------------------------------------

    def find_gaps(
        self, rows: Sequence[Mapping[str, Any]], categorical_cols: Sequence[str]
    ) -> List[Insight]:
        """
        Flag temporal-cycle columns with few distinct values.

        Lexical heuristic only: the column name must mention month, day or
        year. Calendar completeness is not verified.
        """
        insights: List[Insight] = []
        for col in categorical_cols:
            lowered = col.lower()
            if not any(term in lowered for term in GAP_NAME_TERMS):
                continue

            present: Dict[Any, Any] = {}
            for value in column_values(rows, col):
                if not is_missing(value):
                    present.setdefault(value_key(value), value)
            distinct = list(present.values())

            if 0 < len(distinct) < self.thresholds.gap_max_distinct:
                insights.append(Insight(
                    type=InsightType.GAP,
                    title=render_template("insight", "gap_title", column=col),
                    description=render_template("insight", "gap_description", count=len(distinct)),
                    evidence=render_template(
                        "insight", "gap_evidence",
                        values=", ".join(str(v) for v in distinct[:GAP_SAMPLE_LIMIT]),
                        ellipsis="..." if len(distinct) > GAP_SAMPLE_LIMIT else "",
                    ),
                    actionable=True,
                    priority=Priority.LOW,
                ))
        return insights

    # -------------------------------------------------------------------------
    # Correlation
    # -------------------------------------------------------------------------

    def find_correlations(
        self, rows: Sequence[Mapping[str, Any]], numeric_cols: Sequence[str]
    ) -> List[Insight]:
        """Pearson correlation over bounded pairs of numeric columns."""
        insights: List[Insight] = []
        n = len(numeric_cols)
        if n < 2:
            return insights

        for i in range(min(n - 1, CORRELATION_MAX_COLUMNS - 1)):
            for j in range(i + 1, min(n, CORRELATION_MAX_COLUMNS)):
                col1, col2 = numeric_cols[i], numeric_cols[j]
                pairs = [
                    (x, y) for x, y in (
                        (to_number(row.get(col1)), to_number(row.get(col2))) for row in rows
                    )
                    if x is not None and y is not None
                ]
                if len(pairs) < self.thresholds.correlation_min_pairs:
                    continue

                array = np.array(pairs, dtype=np.float64)
                r = pearson_correlation(array[:, 0], array[:, 1])
                if abs(r) <= self.thresholds.correlation_threshold:
                    continue

                positive = r > 0
                insights.append(Insight(
                    type=InsightType.CORRELATION,
                    title=render_template("insight", "correlation_title", col1=col1, col2=col2),
                    description=render_template(
                        "insight", "correlation_description",
                        direction="Positive" if positive else "Negative", r=r
                    ),
                    evidence=render_template(
                        "insight", "correlation_evidence",
                        col1=col1, col2=col2, trend="increase" if positive else "decrease"
                    ),
                    actionable=True,
                    priority=(
                        Priority.HIGH if abs(r) > self.thresholds.correlation_high_threshold
                        else Priority.MEDIUM
                    ),
                ))
        return insights


def find_hidden_insights(
    rows: Sequence[Mapping[str, Any]],
    thresholds: Optional[InsightThresholds] = None,
) -> List[Insight]:
    """
    Convenience function to discover ranked insights in a table.

    Args:
        rows: Rows keyed by field name
        thresholds: Custom thresholds (optional)

    Returns:
        List of Insight, highest priority first
    """
    return InsightDiscoverer(thresholds=thresholds).discover(rows)
