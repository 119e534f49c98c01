"""
Data profiler engine.

Orchestrates the type inferrer and the statistics calculator across every
column of a table, producing a DataProfile with warnings and insights.
Input is a list of rows, each a mapping from field name to value.
"""

import logging
from typing import Any, List, Mapping, Optional, Sequence

from insight_framework.core.config import InsightThresholds
from insight_framework.profiler.insight_templates import render_template
from insight_framework.profiler.profile_result import ColumnStats, DataProfile
from insight_framework.profiler.statistics_calculator import StatisticsCalculator
from insight_framework.profiler.type_inferrer import TypeInferrer, NUMBER
from insight_framework.profiler.values import (
    column_names,
    column_values,
    is_missing,
    to_number,
    value_key,
)

logger = logging.getLogger(__name__)


class DataProfiler:
    """
    Profile a table column by column.

    Warnings (several may fire per column):
    - null fraction above the warning threshold
    - constant column (exactly one distinct value)

    Insights:
    - every value distinct and the column is not numeric -> potential identifier

    Dataset-level:
    - fewer rows than the small-dataset threshold -> warning
    """

    def __init__(
        self,
        thresholds: Optional[InsightThresholds] = None,
        type_inferrer: Optional[TypeInferrer] = None,
        statistics_calculator: Optional[StatisticsCalculator] = None,
    ):
        """
        Initialize the profiler.

        Args:
            thresholds: Custom thresholds (uses defaults if None)
            type_inferrer: Column classifier (default TypeInferrer())
            statistics_calculator: Statistics calculator (default StatisticsCalculator())
        """
        self.thresholds = thresholds or InsightThresholds()
        self.type_inferrer = type_inferrer or TypeInferrer()
        self.statistics_calculator = statistics_calculator or StatisticsCalculator()

    def profile(self, rows: Sequence[Mapping[str, Any]]) -> DataProfile:
        """
        Profile a table.

        Args:
            rows: Rows keyed by field name

        Returns:
            DataProfile with one ColumnStats per column in input order
        """
        if not rows:
            return DataProfile(
                row_count=0,
                column_count=0,
                columns=[],
                warnings=[render_template("profile", "empty_dataset")],
                insights=[],
            )

        names = column_names(rows)
        logger.info(f"Profiling {len(rows)} rows x {len(names)} columns")

        columns: List[ColumnStats] = []
        warnings: List[str] = []
        insights: List[str] = []

        for name in names:
            stats = self.profile_column(name, column_values(rows, name))
            columns.append(stats)

            if stats.null_fraction > self.thresholds.null_warning_fraction:
                warnings.append(render_template(
                    "profile", "null_fraction", column=name, null_pct=stats.null_fraction * 100
                ))

            if stats.unique_count == 1:
                warnings.append(render_template("profile", "constant_column", column=name))

            if stats.unique_count == stats.total_count and stats.data_type != NUMBER:
                insights.append(render_template("profile", "identifier_column", column=name))

        if len(rows) < self.thresholds.small_dataset_rows:
            warnings.append(render_template("profile", "small_dataset", rows=len(rows)))

        return DataProfile(
            row_count=len(rows),
            column_count=len(names),
            columns=columns,
            warnings=warnings,
            insights=insights,
        )

    def profile_column(self, name: str, values: Sequence[Any]) -> ColumnStats:
        """
        Profile a single column.

        Args:
            name: Column name
            values: Column values in row order

        Returns:
            ColumnStats with the statistics branch matching the column type
        """
        data_type = self.type_inferrer.infer_column_type(values)
        non_missing = [v for v in values if not is_missing(v)]
        unique_count = len({value_key(v) for v in non_missing})

        if data_type == NUMBER:
            numbers = [n for n in (to_number(v) for v in non_missing) if n is not None]
            extra = self.statistics_calculator.calculate_numeric_stats(numbers)
        else:
            extra = self.statistics_calculator.calculate_categorical_stats(non_missing)

        logger.debug(f"Column '{name}' classified as {data_type} ({len(non_missing)} non-null)")

        return ColumnStats(
            name=name,
            data_type=data_type,
            total_count=len(values),
            null_count=len(values) - len(non_missing),
            unique_count=unique_count,
            **extra,
        )


def profile_data(
    rows: Sequence[Mapping[str, Any]],
    thresholds: Optional[InsightThresholds] = None,
) -> DataProfile:
    """
    Convenience function to profile a table.

    Args:
        rows: Rows keyed by field name
        thresholds: Custom thresholds (optional)

    Returns:
        DataProfile
    """
    return DataProfiler(thresholds=thresholds).profile(rows)
