"""Configuration parsing and validation."""

import os
from dataclasses import dataclass, field, fields, asdict
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from insight_framework.core import constants
from insight_framework.core.exceptions import (
    ConfigError,
    YAMLSizeError,
    ConfigValidationError,
)


# camelCase keys accepted from the dashboard collaborator
_WORKSHEET_KEY_ALIASES = {
    "maxMetrics": "max_metrics",
    "maxItems": "max_items",
    "maxRows": "max_rows",
    "maxInsights": "max_insights",
    "labelOverrides": "label_overrides",
    "focusMetrics": "focus_metrics",
    "focusDimension": "focus_dimension",
    "entityHint": "entity_hint",
}


@dataclass(frozen=True)
class WorksheetOptions:
    """
    Options recognized by worksheet analysis.

    Attributes:
        max_metrics: Cap on returned measures
        max_items: Cap on breakdown entries and dimension samples
        max_rows: Row cap applied to each worksheet snapshot
        max_insights: Cap on generated worksheet insights
        label_overrides: Exact field name -> label mapping
        focus_metrics: Substring allow-list for measures
        focus_dimension: Substring preference for dimension selection
        entity_hint: Noun used to label context-free count aggregates
    """
    max_metrics: int = constants.DEFAULT_MAX_METRICS
    max_items: int = constants.DEFAULT_MAX_ITEMS
    max_rows: int = constants.DEFAULT_MAX_ROWS
    max_insights: int = constants.DEFAULT_MAX_INSIGHTS
    label_overrides: Dict[str, str] = field(default_factory=dict)
    focus_metrics: List[str] = field(default_factory=list)
    focus_dimension: Optional[str] = None
    entity_hint: Optional[str] = None

    def __post_init__(self):
        # None means "not set" for the collection options
        if self.focus_metrics is None:
            object.__setattr__(self, "focus_metrics", [])
        if self.label_overrides is None:
            object.__setattr__(self, "label_overrides", {})

        for name in ("max_metrics", "max_items", "max_rows", "max_insights"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 1:
                raise ConfigValidationError(
                    f"{name} must be a positive integer",
                    field=name,
                    expected="integer >= 1",
                    actual=repr(value)
                )

        if not isinstance(self.label_overrides, dict) or not all(
            isinstance(k, str) and isinstance(v, str) for k, v in self.label_overrides.items()
        ):
            raise ConfigValidationError(
                "label_overrides must map field names to labels",
                field="label_overrides",
                expected="mapping of str to str",
                actual=type(self.label_overrides).__name__
            )

        if not isinstance(self.focus_metrics, (list, tuple)) or not all(
            isinstance(m, str) for m in self.focus_metrics
        ):
            raise ConfigValidationError(
                "focus_metrics must be a list of strings",
                field="focus_metrics",
                expected="list of str",
                actual=repr(self.focus_metrics)
            )

        for name in ("focus_dimension", "entity_hint"):
            value = getattr(self, name)
            if value is not None and not isinstance(value, str):
                raise ConfigValidationError(
                    f"{name} must be a string",
                    field=name,
                    expected="str or null",
                    actual=repr(value)
                )

        # Frozen dataclass: store private copies of the mutable inputs
        object.__setattr__(self, "focus_metrics", list(self.focus_metrics))
        object.__setattr__(self, "label_overrides", dict(self.label_overrides))

    @classmethod
    def from_dict(cls, options: Optional[Dict[str, Any]]) -> "WorksheetOptions":
        """
        Build options from a mapping with snake_case or camelCase keys.

        Args:
            options: Option mapping (None gives the defaults)

        Returns:
            WorksheetOptions instance

        Raises:
            ConfigValidationError: If a key is unknown or a value is invalid
        """
        if options is None:
            return cls()
        if not isinstance(options, dict):
            raise ConfigValidationError(
                "worksheet options must be a mapping",
                field="worksheet",
                expected="mapping",
                actual=type(options).__name__
            )

        known = {f.name for f in fields(cls)}
        kwargs = {}
        for key, value in options.items():
            name = _WORKSHEET_KEY_ALIASES.get(key, key)
            if name not in known:
                raise ConfigValidationError(
                    f"Unknown worksheet option '{key}'",
                    field=f"worksheet.{key}",
                    expected=", ".join(sorted(known)),
                    actual=key
                )
            kwargs[name] = value
        return cls(**kwargs)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return asdict(self)


@dataclass(frozen=True)
class InsightThresholds:
    """
    Tunable thresholds for profiling, anomaly detection and insight discovery.

    All thresholds can be customized per use case through the `thresholds:`
    section of a YAML configuration.
    """
    # Profiler
    null_warning_fraction: float = constants.NULL_WARNING_FRACTION
    small_dataset_rows: int = constants.SMALL_DATASET_ROWS

    # Anomalies
    min_outlier_sample: int = constants.MIN_OUTLIER_SAMPLE
    iqr_multiplier: float = constants.IQR_MULTIPLIER
    anomaly_noise_fraction: float = constants.ANOMALY_NOISE_FRACTION
    high_severity_outlier_count: int = constants.HIGH_SEVERITY_OUTLIER_COUNT
    null_spike_fraction: float = constants.NULL_SPIKE_FRACTION
    null_spike_high_fraction: float = constants.NULL_SPIKE_HIGH_FRACTION

    # Insights
    concentration_min_distinct: int = constants.CONCENTRATION_MIN_DISTINCT
    concentration_top_fraction: float = constants.CONCENTRATION_TOP_FRACTION
    concentration_share_threshold: float = constants.CONCENTRATION_SHARE_THRESHOLD
    dominant_share_threshold: float = constants.DOMINANT_SHARE_THRESHOLD
    dominant_high_share: float = constants.DOMINANT_HIGH_SHARE
    segment_min_samples: int = constants.SEGMENT_MIN_SAMPLES
    segment_max_segments: int = constants.SEGMENT_MAX_SEGMENTS
    segment_ratio_threshold: float = constants.SEGMENT_RATIO_THRESHOLD
    segment_high_ratio: float = constants.SEGMENT_HIGH_RATIO
    gap_max_distinct: int = constants.GAP_MAX_DISTINCT
    correlation_min_pairs: int = constants.CORRELATION_MIN_PAIRS
    correlation_threshold: float = constants.CORRELATION_THRESHOLD
    correlation_high_threshold: float = constants.CORRELATION_HIGH_THRESHOLD

    def __post_init__(self):
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, bool) or not isinstance(value, (int, float)) or value < 0:
                raise ConfigValidationError(
                    f"Threshold '{f.name}' must be a non-negative number",
                    field=f"thresholds.{f.name}",
                    expected="number >= 0",
                    actual=repr(value)
                )

    @classmethod
    def from_dict(cls, values: Optional[Dict[str, Any]]) -> "InsightThresholds":
        """
        Build thresholds from a mapping, rejecting unknown keys.

        Raises:
            ConfigValidationError: If a key is unknown or a value is invalid
        """
        if not values:
            return cls()
        if not isinstance(values, dict):
            raise ConfigValidationError(
                "thresholds must be a mapping",
                field="thresholds",
                expected="mapping",
                actual=type(values).__name__
            )
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(values) - known)
        if unknown:
            raise ConfigValidationError(
                f"Unknown threshold(s): {', '.join(unknown)}",
                field="thresholds",
                expected=", ".join(sorted(known)),
                actual=", ".join(unknown)
            )
        return cls(**values)


class AnalysisConfig:
    """Configuration for an analysis run: worksheet options plus thresholds."""

    MAX_YAML_FILE_SIZE = constants.MAX_YAML_FILE_SIZE
    MAX_YAML_NESTING_DEPTH = constants.MAX_YAML_NESTING_DEPTH
    MAX_YAML_KEYS = constants.MAX_YAML_KEY_COUNT

    def __init__(self, config_dict: Optional[Dict[str, Any]] = None):
        """
        Initialize from configuration dictionary.

        Args:
            config_dict: Configuration dictionary with optional `worksheet`
                and `thresholds` sections
        """
        self.raw_config = config_dict or {}
        self._parse_config()

    @classmethod
    def from_yaml(cls, config_path: str) -> "AnalysisConfig":
        """
        Load configuration from YAML file with structural safeguards.

        Args:
            config_path: Path to YAML configuration file

        Returns:
            AnalysisConfig instance

        Raises:
            ConfigError: If file not found or invalid
            YAMLSizeError: If file exceeds size limit
            ConfigValidationError: If YAML structure is too complex or values are invalid
        """
        config_file = Path(config_path)
        if not config_file.exists():
            raise ConfigError(f"Configuration file not found: {config_path}")

        file_size = os.path.getsize(config_file)
        if file_size > cls.MAX_YAML_FILE_SIZE:
            raise YAMLSizeError(
                f"Configuration file too large: {file_size:,} bytes. "
                f"Maximum allowed: {cls.MAX_YAML_FILE_SIZE:,} bytes",
                file_size=file_size,
                max_size=cls.MAX_YAML_FILE_SIZE
            )

        try:
            with open(config_file, "r", encoding="utf-8") as f:
                config_dict = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Failed to parse YAML file: {str(e)}")
        except UnicodeDecodeError as e:
            raise ConfigError(f"Invalid file encoding (expected UTF-8): {str(e)}")

        if config_dict is not None:
            cls._validate_yaml_structure(config_dict)

        return cls(config_dict)

    @classmethod
    def _validate_yaml_structure(cls, obj: Any, current_depth: int = 0, total_keys: List[int] = None) -> None:
        """
        Reject YAML documents that are too deep or too large.

        Args:
            obj: Object to validate (dict, list, or primitive)
            current_depth: Current nesting depth
            total_keys: Mutable list with single element tracking total key count

        Raises:
            ConfigValidationError: If structure is too complex
        """
        if total_keys is None:
            total_keys = [0]

        if current_depth > cls.MAX_YAML_NESTING_DEPTH:
            raise ConfigValidationError(
                f"YAML nesting depth exceeds maximum of {cls.MAX_YAML_NESTING_DEPTH} levels."
            )

        if isinstance(obj, dict):
            total_keys[0] += len(obj)
            if total_keys[0] > cls.MAX_YAML_KEYS:
                raise ConfigValidationError(
                    f"YAML structure contains more than {cls.MAX_YAML_KEYS:,} keys/items."
                )
            for value in obj.values():
                cls._validate_yaml_structure(value, current_depth + 1, total_keys)

        elif isinstance(obj, list):
            total_keys[0] += len(obj)
            if total_keys[0] > cls.MAX_YAML_KEYS:
                raise ConfigValidationError(
                    f"YAML structure contains more than {cls.MAX_YAML_KEYS:,} keys/items."
                )
            for item in obj:
                cls._validate_yaml_structure(item, current_depth + 1, total_keys)

    def _parse_config(self) -> None:
        """Parse and validate configuration."""
        if not isinstance(self.raw_config, dict):
            raise ConfigError("Configuration must be a mapping")

        unknown = sorted(set(self.raw_config) - {"worksheet", "thresholds"})
        if unknown:
            raise ConfigValidationError(
                f"Unknown configuration section(s): {', '.join(unknown)}",
                expected="worksheet, thresholds",
                actual=", ".join(unknown)
            )

        self.worksheet: WorksheetOptions = WorksheetOptions.from_dict(self.raw_config.get("worksheet"))
        self.thresholds: InsightThresholds = InsightThresholds.from_dict(self.raw_config.get("thresholds"))

    def with_overrides(self, **worksheet_overrides: Any) -> "AnalysisConfig":
        """
        Return a new config with worksheet options replaced.

        None values are ignored so CLI options that were not given keep the
        configured value.
        """
        merged = self.worksheet.to_dict()
        merged.update({k: v for k, v in worksheet_overrides.items() if v is not None})
        return AnalysisConfig({
            "worksheet": merged,
            "thresholds": asdict(self.thresholds),
        })
