"""
Command-line interface for the insight framework.

Provides commands for:
- Profiling a data file (profile, anomalies, insights, data quality)
- Analyzing worksheet JSON exports (measures, dimensions, breakdowns)
- Normalizing a raw field name into a readable label
"""

import json
import sys
import time
from pathlib import Path

import click

from insight_framework import __version__
from insight_framework.core.config import AnalysisConfig
from insight_framework.core.exceptions import (
    InsightFrameworkError,
    ConfigError,
    DataLoadError,
)
from insight_framework.core.logging_config import setup_logging, get_logger
from insight_framework.core.pretty_output import PrettyOutput as po

logger = get_logger(__name__)

LOG_LEVELS = click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR'], case_sensitive=False)


def _load_config(config_path):
    """Load the YAML configuration, or the defaults when no path is given."""
    if config_path:
        return AnalysisConfig.from_yaml(config_path)
    return AnalysisConfig()


def _write_json(path, payload):
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(payload, f, indent=2, default=str)


@click.group()
@click.version_option(version=__version__)
def cli():
    """
    Insight Framework - profiling and insight discovery for BI query results.

    Profiles tabular data, flags anomalies, discovers cross-column patterns
    and extracts measures, dimensions and breakdowns from worksheet exports.
    """
    pass


@cli.command()
@click.argument('file_path', type=click.Path(exists=True))
@click.option('--format', '-f', 'file_format', type=click.Choice(['csv', 'json', 'excel', 'parquet'], case_sensitive=False),
              default=None, help='File format (default: detect from extension)')
@click.option('--json-output', '-j', help='Path for JSON profile output')
@click.option('--config', '-c', 'config_path', type=click.Path(exists=True), help='YAML configuration file')
@click.option('--log-level', type=LOG_LEVELS, default='WARNING', help='Logging level')
@click.option('--log-file', type=click.Path(), help='Optional log file path')
def profile(file_path, file_format, json_output, config_path, log_level, log_file):
    """
    Profile a data file.

    Runs the column profiler, anomaly detector, insight discoverer and
    data-quality assessment over FILE_PATH.

    Examples:

    \b
    # Profile a CSV file
    data-insights profile data/orders.csv

    \b
    # Profile with custom thresholds and JSON output
    data-insights profile orders.parquet -c thresholds.yaml -j profile.json
    """
    from insight_framework.loaders.file_loader import load_rows
    from insight_framework.profiler.engine import DataProfiler
    from insight_framework.profiler.anomaly_detector import AnomalyDetector
    from insight_framework.profiler.insight_engine import InsightDiscoverer
    from insight_framework.profiler.quality_rules import assess_data_quality

    setup_logging(level=log_level, log_file=log_file)

    try:
        config = _load_config(config_path)
        start = time.time()
        rows = load_rows(file_path, file_format)

        data_profile = DataProfiler(thresholds=config.thresholds).profile(rows)
        anomalies = AnomalyDetector(thresholds=config.thresholds).detect(rows)
        insights = InsightDiscoverer(thresholds=config.thresholds).discover(rows)
        quality = assess_data_quality(rows)
        duration = time.time() - start

        po.header(f"Profile: {Path(file_path).name}")
        po.profile_summary(data_profile.row_count, data_profile.column_count,
                           quality.overall_score, duration)

        po.section("Columns")
        for column in data_profile.columns:
            po.metric(column.name, f"{column.data_type} ({column.unique_count} unique, "
                                   f"{column.null_count} null)")

        if data_profile.warnings or data_profile.insights:
            po.section("Profile Notes")
            for warning in data_profile.warnings:
                po.finding(warning, "warning")
            for note in data_profile.insights:
                po.finding(note, "info")

        po.section(f"Anomalies ({len(anomalies)})")
        for anomaly in anomalies:
            po.finding(f"{anomaly.column}: {anomaly.description}", anomaly.severity.value)

        po.section(f"Insights ({len(insights)})")
        for insight in insights:
            po.finding(f"{insight.title} - {insight.description}", insight.priority.value)

        po.section(f"Data Quality ({quality.score_label})")
        for issue in quality.issues:
            po.finding(issue.title, issue.severity.value)

        if json_output:
            _write_json(json_output, {
                "profile": data_profile.to_dict(),
                "anomalies": [a.to_dict() for a in anomalies],
                "insights": [i.to_dict() for i in insights],
                "data_quality": quality.to_dict(),
            })
            po.output_file("JSON", json_output)

        sys.exit(0)

    except (ConfigError, DataLoadError) as e:
        po.error(str(e))
        sys.exit(1)

    except InsightFrameworkError as e:
        po.error(f"Profiling failed: {e}")
        logger.debug("Profiling error", exc_info=True)
        sys.exit(1)


@cli.command()
@click.argument('worksheet_files', nargs=-1, required=True, type=click.Path(exists=True))
@click.option('--config', '-c', 'config_path', type=click.Path(exists=True), help='YAML configuration file')
@click.option('--json-output', '-j', help='Path for JSON analysis output')
@click.option('--max-metrics', type=int, default=None, help='Maximum number of measures')
@click.option('--max-items', type=int, default=None, help='Maximum breakdown entries per measure')
@click.option('--max-insights', type=int, default=None, help='Maximum number of generated insights')
@click.option('--focus-metric', 'focus_metrics', multiple=True, help='Keep measures whose name contains this text (repeatable)')
@click.option('--focus-dimension', default=None, help='Prefer the dimension whose name contains this text')
@click.option('--entity-hint', default=None, help='Noun used to label record counts (e.g. Orders)')
@click.option('--log-level', type=LOG_LEVELS, default='WARNING', help='Logging level')
def analyze(worksheet_files, config_path, json_output, max_metrics, max_items, max_insights,
            focus_metrics, focus_dimension, entity_hint, log_level):
    """
    Analyze one or more worksheet JSON exports.

    Each file holds {"name", "columns": [{"fieldName", "dataType"}],
    "data": [[{"value", "formattedValue"}]]}. Files are merged in the order
    given; a file that cannot be read is skipped. Ranked insights about
    concentration, trends, outliers and performance gaps close the report.

    Examples:

    \b
    data-insights analyze campaigns.json opens.json --focus-metric rate
    """
    from insight_framework.loaders.worksheet_loader import JsonWorksheetSource
    from insight_framework.worksheet.merge import analyze_all_worksheets
    from insight_framework.worksheet.field_names import normalize_field_name
    from insight_framework.worksheet.formatting import format_value
    from insight_framework.worksheet.insights import generate_data_insights

    setup_logging(level=log_level)

    try:
        config = _load_config(config_path).with_overrides(
            max_metrics=max_metrics,
            max_items=max_items,
            max_insights=max_insights,
            focus_metrics=list(focus_metrics) or None,
            focus_dimension=focus_dimension,
            entity_hint=entity_hint,
        )
    except ConfigError as e:
        po.error(str(e))
        sys.exit(1)

    options = config.worksheet
    sources = [JsonWorksheetSource(path) for path in worksheet_files]
    combined = analyze_all_worksheets(sources, options)
    insights = generate_data_insights(
        combined.measures, combined.breakdowns,
        max_insights=options.max_insights, label_overrides=options.label_overrides,
    )

    def display_label(measure):
        return normalize_field_name(measure.name, options.label_overrides,
                                    is_rate=measure.is_rate, entity_hint=options.entity_hint)

    po.header("Worksheet Analysis")
    po.metric("Worksheets", len(combined.worksheet_details))
    po.metric("Rows", f"{combined.total_rows:,}")
    if combined.date_range:
        po.metric("Date range", f"{combined.date_range.min_date:%Y-%m-%d} to "
                                f"{combined.date_range.max_date:%Y-%m-%d}")

    for detail in combined.worksheet_details:
        if detail.rows == 0:
            po.warning(f"{detail.name}: no rows read", indent=2)
    for error in combined.errors:
        po.warning(error["message"], indent=2)

    po.section(f"Measures ({len(combined.measures)})")
    for measure in combined.measures:
        headline = measure.avg if measure.is_rate else measure.sum
        po.metric(display_label(measure), format_value(headline, measure.is_rate))

    for breakdown in combined.breakdowns:
        po.section(f"{display_label(breakdown.measure)} by {normalize_field_name(breakdown.dimension, options.label_overrides)}")
        for item in breakdown.data:
            po.item(f"{item.label}: {format_value(item.value, breakdown.measure.is_rate)}")

    po.section(f"Insights ({len(insights)})")
    if not insights:
        po.info("No notable patterns found", indent=2)
    for insight in insights:
        po.finding(f"{insight.title} - {insight.description}", insight.priority.value)

    if json_output:
        payload = combined.to_dict()
        payload["insights"] = [i.to_dict() for i in insights]
        _write_json(json_output, payload)
        po.output_file("JSON", json_output)

    sys.exit(0)


@cli.command()
@click.argument('name')
@click.option('--rate', 'is_rate', is_flag=True, help='Treat the field as a rate')
@click.option('--entity-hint', default=None, help='Noun used to label record counts (e.g. Orders)')
@click.option('--config', '-c', 'config_path', type=click.Path(exists=True), help='YAML configuration file (label overrides)')
def label(name, is_rate, entity_hint, config_path):
    """Print the readable label for a raw field name, e.g. "SUM(Sales)"."""
    from insight_framework.worksheet.field_names import normalize_field_name

    try:
        options = _load_config(config_path).worksheet
    except ConfigError as e:
        po.error(str(e))
        sys.exit(1)

    click.echo(normalize_field_name(
        name,
        options.label_overrides,
        is_rate=is_rate,
        entity_hint=entity_hint or options.entity_hint,
    ))


@cli.command()
def version():
    """Display version information."""
    click.echo(f"Insight Framework v{__version__}")
    click.echo("Profiling, anomaly detection and insight discovery for BI query results")


if __name__ == '__main__':
    cli()
