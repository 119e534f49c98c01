"""
Data-quality rule engine.

Inspects a table and emits structured QualityIssue records grouped into
three rule families (completeness, validity, consistency), then scores the
table: start at 100 and deduct 20 per critical issue, 10 per warning and 2
per informational issue.
"""

import logging
import re
from typing import Any, List, Mapping, Sequence

from insight_framework.core.constants import (
    QUALITY_MAX_SCORE,
    QUALITY_PENALTY_CRITICAL,
    QUALITY_PENALTY_WARNING,
    QUALITY_PENALTY_INFO,
    QUALITY_HIGH_MISSING_PCT,
    QUALITY_NOTABLE_MISSING_PCT,
    QUALITY_RATE_MOSTLY_ZERO_PCT,
    QUALITY_RATE_PERCENT_MAX,
    QUALITY_NEGATIVE_VOLUME_PCT,
    QUALITY_CONSISTENCY_MIN_VALUES,
)
from insight_framework.profiler.insight_templates import (
    render_template,
    get_quality_label,
    SUMMARY_TEMPLATE,
    SUMMARY_CRITICAL,
    SUMMARY_WARNING,
    SUMMARY_CLEAN,
    SUMMARY_EMPTY,
)
from insight_framework.profiler.profile_result import (
    DataQualityReport,
    QualityIssue,
    QualitySeverity,
)
from insight_framework.profiler.values import (
    column_names,
    column_values,
    is_missing,
    to_number,
    value_key,
)

logger = logging.getLogger(__name__)

# Score deductions per issue severity
SEVERITY_PENALTIES = {
    QualitySeverity.CRITICAL: QUALITY_PENALTY_CRITICAL,
    QualitySeverity.WARNING: QUALITY_PENALTY_WARNING,
    QualitySeverity.INFO: QUALITY_PENALTY_INFO,
}

RATE_NAME_PATTERN = re.compile(r"rate|percent|%", re.IGNORECASE)
VOLUME_NAME_PATTERN = re.compile(
    r"count|total|sum|volume|quantity|sent|delivered|opened|clicked", re.IGNORECASE
)
IDENTIFIER_NAME_TERMS = ("id", "key", "date")


def _issue(
    severity: QualitySeverity, category: str, column: str, template_id: str, **data: Any
) -> QualityIssue:
    """Build an issue from the '<template_id>_*' quality templates."""
    return QualityIssue(
        severity=severity,
        category=category,
        field=column,
        title=render_template("quality", f"{template_id}_title", column=column, **data),
        description=render_template("quality", f"{template_id}_description", **data),
        evidence=render_template("quality", f"{template_id}_evidence", **data),
        recommendation=render_template("quality", f"{template_id}_recommendation"),
    )


def _is_null(value: Any) -> bool:
    return is_missing(value) or (isinstance(value, str) and value == "null")


class QualityRuleEngine:
    """
    Rule engine that inspects a table and emits data-quality issues.

    Each rule family corresponds to one issue category. A column may emit
    issues from several families.
    """

    def analyze(self, rows: Sequence[Mapping[str, Any]]) -> DataQualityReport:
        """
        Assess a table.

        Args:
            rows: Rows keyed by field name

        Returns:
            DataQualityReport with score, label, issues and summary
        """
        if not rows:
            issue = QualityIssue(
                severity=QualitySeverity.CRITICAL,
                category="completeness",
                field="dataset",
                title=render_template("quality", "no_data_title"),
                description=render_template("quality", "no_data_description"),
                evidence=render_template("quality", "no_data_evidence"),
                recommendation=render_template("quality", "no_data_recommendation"),
            )
            return DataQualityReport(
                overall_score=0,
                score_label=get_quality_label(0),
                issues=[issue],
                summary=SUMMARY_EMPTY,
            )

        columns = column_names(rows)
        issues: List[QualityIssue] = []
        issues.extend(self._check_completeness(rows, columns))
        issues.extend(self._check_validity(rows, columns))
        issues.extend(self._check_consistency(rows, columns))

        score = self.score(issues)
        label = get_quality_label(score)
        logger.info(f"Data quality score {score}/100 ({label}), {len(issues)} issues")

        return DataQualityReport(
            overall_score=score,
            score_label=label,
            issues=issues,
            summary=self._summary(issues, score, label, len(rows), len(columns)),
        )

    @staticmethod
    def score(issues: Sequence[QualityIssue]) -> int:
        """Return the maximum score minus the severity penalties, clamped at 0."""
        score = QUALITY_MAX_SCORE - sum(SEVERITY_PENALTIES[issue.severity] for issue in issues)
        return max(0, min(QUALITY_MAX_SCORE, score))

    def _check_completeness(
        self, rows: Sequence[Mapping[str, Any]], columns: Sequence[str]
    ) -> List[QualityIssue]:
        issues: List[QualityIssue] = []
        row_count = len(rows)
        for col in columns:
            null_count = sum(1 for v in column_values(rows, col) if _is_null(v))
            null_pct = null_count / row_count * 100

            if null_count == row_count:
                issues.append(_issue(
                    QualitySeverity.CRITICAL, "completeness", col, "empty_column",
                    null_count=null_count, rows=row_count
                ))
            elif null_pct > QUALITY_HIGH_MISSING_PCT:
                issues.append(self._missing_issue(
                    QualitySeverity.WARNING, col, "high_missing", null_pct, null_count, row_count
                ))
            elif null_pct > QUALITY_NOTABLE_MISSING_PCT:
                issues.append(self._missing_issue(
                    QualitySeverity.INFO, col, "notable_missing", null_pct, null_count, row_count
                ))
        return issues

    @staticmethod
    def _missing_issue(
        severity: QualitySeverity, col: str, prefix: str,
        null_pct: float, null_count: int, row_count: int
    ) -> QualityIssue:
        return QualityIssue(
            severity=severity,
            category="completeness",
            field=col,
            title=render_template("quality", f"{prefix}_title", column=col),
            description=render_template("quality", f"{prefix}_description"),
            evidence=render_template(
                "quality", "missing_evidence",
                null_pct=null_pct, null_count=null_count, rows=row_count
            ),
            recommendation=render_template("quality", f"{prefix}_recommendation"),
        )

    def _check_validity(
        self, rows: Sequence[Mapping[str, Any]], columns: Sequence[str]
    ) -> List[QualityIssue]:
        issues: List[QualityIssue] = []
        for col in columns:
            numbers = [
                n for n in (to_number(v) for v in column_values(rows, col) if not is_missing(v))
                if n is not None
            ]
            if not numbers:
                continue
            if RATE_NAME_PATTERN.search(col):
                issues.extend(self._check_rate(col, numbers))
            if VOLUME_NAME_PATTERN.search(col):
                issues.extend(self._check_volume(col, numbers))
        return issues

    @staticmethod
    def _check_rate(col: str, numbers: Sequence[float]) -> List[QualityIssue]:
        issues: List[QualityIssue] = []
        zero_count = sum(1 for n in numbers if n == 0)
        zero_pct = zero_count / len(numbers) * 100
        avg = sum(numbers) / len(numbers)

        if zero_count == len(numbers):
            issues.append(_issue(
                QualitySeverity.CRITICAL, "validity", col, "rate_all_zero", count=len(numbers)
            ))
        elif zero_pct > QUALITY_RATE_MOSTLY_ZERO_PCT:
            issues.append(_issue(
                QualitySeverity.WARNING, "validity", col, "rate_mostly_zero",
                zero_pct=zero_pct, avg_pct=avg * 100
            ))

        if any(1 < n <= QUALITY_RATE_PERCENT_MAX for n in numbers):
            issues.append(_issue(
                QualitySeverity.INFO, "validity", col, "percentage_format",
                samples=", ".join(f"{n:.1f}" for n in numbers[:3])
            ))

        over_100 = sum(1 for n in numbers if n > QUALITY_RATE_PERCENT_MAX)
        if over_100:
            issues.append(_issue(
                QualitySeverity.CRITICAL, "validity", col, "impossible_rate", count=over_100
            ))
        return issues

    @staticmethod
    def _check_volume(col: str, numbers: Sequence[float]) -> List[QualityIssue]:
        neg_count = sum(1 for n in numbers if n < 0)
        if not neg_count:
            return []
        neg_pct = neg_count / len(numbers) * 100
        severity = (
            QualitySeverity.WARNING if neg_pct > QUALITY_NEGATIVE_VOLUME_PCT else QualitySeverity.INFO
        )
        return [_issue(
            severity, "validity", col, "negative_volume", count=neg_count, neg_pct=neg_pct
        )]

    def _check_consistency(
        self, rows: Sequence[Mapping[str, Any]], columns: Sequence[str]
    ) -> List[QualityIssue]:
        issues: List[QualityIssue] = []
        for col in columns:
            values = [v for v in column_values(rows, col) if not is_missing(v)]
            if len(values) <= QUALITY_CONSISTENCY_MIN_VALUES:
                continue
            unique_count = len({value_key(v) for v in values})

            if unique_count == 1:
                issues.append(_issue(
                    QualitySeverity.INFO, "consistency", col, "constant_value",
                    count=len(values), value=values[0]
                ))

            lowered = col.lower()
            if unique_count == len(values) and not any(t in lowered for t in IDENTIFIER_NAME_TERMS):
                issues.append(_issue(
                    QualitySeverity.INFO, "consistency", col, "all_unique",
                    unique=unique_count, count=len(values)
                ))
        return issues

    @staticmethod
    def _summary(
        issues: Sequence[QualityIssue], score: int, label: str, rows: int, cols: int
    ) -> str:
        critical = sum(1 for i in issues if i.severity == QualitySeverity.CRITICAL)
        warnings = sum(1 for i in issues if i.severity == QualitySeverity.WARNING)

        summary = SUMMARY_TEMPLATE.format(score=score, label=label, rows=rows, cols=cols) + "\n"
        if critical:
            summary += SUMMARY_CRITICAL.format(count=critical)
        if warnings:
            summary += SUMMARY_WARNING.format(count=warnings)
        if not issues:
            summary += SUMMARY_CLEAN
        return summary


def assess_data_quality(rows: Sequence[Mapping[str, Any]]) -> DataQualityReport:
    """
    Convenience function to assess the data quality of a table.

    Args:
        rows: Rows keyed by field name

    Returns:
        DataQualityReport
    """
    return QualityRuleEngine().analyze(rows)


def validate_metrics(measures: Sequence[Mapping[str, Any]]) -> List[QualityIssue]:
    """
    Flag implausible headline rate values.

    Args:
        measures: Mappings with 'name', 'value' and optional 'is_rate'. A
            measure also counts as a rate when its name mentions 'rate' or '%'.

    Returns:
        Issues for zero rates (warning) and rates above 100 (critical).
        Values in (1, 100] are accepted as percentage format.
    """
    issues: List[QualityIssue] = []
    for measure in measures:
        name = str(measure.get("name", ""))
        value = to_number(measure.get("value"))
        lowered = name.lower()
        is_rate = bool(measure.get("is_rate")) or "rate" in lowered or "%" in lowered
        if not is_rate or value is None:
            continue

        if value == 0:
            issues.append(_issue(QualitySeverity.WARNING, "validity", name, "metric_zero"))
        elif value > QUALITY_RATE_PERCENT_MAX:
            issues.append(_issue(
                QualitySeverity.CRITICAL, "validity", name, "metric_over_100", value=_plain(value)
            ))
    return issues


def _plain(value: float) -> Any:
    return int(value) if value == int(value) else value
