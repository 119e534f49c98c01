"""
Insight Framework Exception Hierarchy.

This module defines the exceptions raised by the insight framework. The
analysis functions themselves never raise for data-quality problems
(malformed cells, empty tables, ambiguous columns); exceptions are reserved
for contract violations such as invalid configuration, for file loading in
the CLI, and for worksheet sources that fail to fetch their data.

Exception Severity Levels:
    - FATAL: Stop all processing immediately
    - CRITICAL: Stop processing the current input, continue with others
    - RECOVERABLE: Log error, degrade the affected result, continue processing
    - WARNING: Log warning, processing continues
"""

from typing import Optional, Dict, Any
from enum import Enum


class ErrorSeverity(Enum):
    """
    Classify error severity for handling decisions.

    Attributes:
        FATAL: Unrecoverable error, stop all processing
        CRITICAL: Input-level error, stop processing this input
        RECOVERABLE: Source-level error, continue with other sources
        WARNING: Non-critical issue, log and continue
    """
    FATAL = "fatal"
    CRITICAL = "critical"
    RECOVERABLE = "recoverable"
    WARNING = "warning"


class InsightFrameworkError(Exception):
    """
    Base exception for all insight framework errors with enhanced context.

    Attributes:
        message (str): Human-readable error message
        severity (ErrorSeverity): Error severity level
        details (Dict[str, Any]): Additional context (field, source name, etc.)
        original_exception (Optional[Exception]): Original exception if wrapping

    Example:
        >>> try:
        ...     rows = fetch_rows()
        ... except Exception as e:
        ...     raise InsightFrameworkError(
        ...         "Row fetch failed",
        ...         severity=ErrorSeverity.RECOVERABLE,
        ...         details={'source': 'Sales by Region'},
        ...         original_exception=e
        ...     )
    """

    def __init__(
        self,
        message: str,
        severity: ErrorSeverity = ErrorSeverity.RECOVERABLE,
        details: Optional[Dict[str, Any]] = None,
        original_exception: Optional[Exception] = None
    ):
        """
        Initialize insight framework exception.

        Args:
            message: Human-readable error description
            severity: Error severity level (default: RECOVERABLE)
            details: Additional context dictionary
            original_exception: Original exception if this wraps another error
        """
        super().__init__(message)
        self.message = message
        self.severity = severity
        self.details = details or {}
        self.original_exception = original_exception

    def to_dict(self) -> Dict[str, Any]:
        """
        Serialize exception to dictionary for logging/reporting.

        Returns:
            Dictionary containing exception details suitable for JSON serialization
        """
        return {
            'type': self.__class__.__name__,
            'message': self.message,
            'severity': self.severity.value,
            'details': self.details,
            'original_error': str(self.original_exception) if self.original_exception else None
        }


# ============================================================================
# Configuration Errors (Fatal)
# ============================================================================

class ConfigError(InsightFrameworkError):
    """
    Configuration errors (fatal - stop all processing).

    Raised when:
    - Configuration file not found
    - Invalid YAML syntax
    - Option values of the wrong type or out of range

    Attributes:
        field (Optional[str]): Specific config field that caused error
    """

    def __init__(self, message: str, field: Optional[str] = None):
        """
        Initialize configuration error.

        Args:
            message: Error description
            field: Configuration field that caused the error
        """
        super().__init__(
            message,
            severity=ErrorSeverity.FATAL,
            details={'field': field} if field else {}
        )
        self.field = field


class YAMLSizeError(ConfigError):
    """
    YAML file too large.

    Example:
        >>> raise YAMLSizeError(
        ...     "Config file exceeds 1MB limit",
        ...     file_size=1500000,
        ...     max_size=1048576
        ... )
    """

    def __init__(self, message: str, file_size: Optional[int] = None, max_size: Optional[int] = None):
        """
        Initialize YAML size error.

        Args:
            message: Error description
            file_size: Actual file size in bytes
            max_size: Maximum allowed size in bytes
        """
        super().__init__(message)
        self.details.update({
            'file_size': file_size,
            'max_size': max_size
        })


class ConfigValidationError(ConfigError):
    """
    Configuration value failed validation.

    Example:
        >>> raise ConfigValidationError(
        ...     "max_metrics must be a positive integer",
        ...     field="worksheet.max_metrics",
        ...     expected="integer >= 1",
        ...     actual="0"
        ... )
    """

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        expected: Optional[str] = None,
        actual: Optional[str] = None
    ):
        """
        Initialize config validation error.

        Args:
            message: Error description
            field: Config field that failed validation
            expected: Expected value or type
            actual: Actual value found
        """
        super().__init__(message, field)
        self.details.update({
            'expected': expected,
            'actual': actual
        })


# ============================================================================
# Data Loading Errors (Critical)
# ============================================================================

class DataLoadError(InsightFrameworkError):
    """
    Input file loading errors (critical - stop processing this file).

    Attributes:
        file_path (str): Path to file that failed to load
    """

    def __init__(
        self,
        message: str,
        file_path: str,
        original_exception: Optional[Exception] = None
    ):
        """
        Initialize data load error.

        Args:
            message: Error description
            file_path: Path to file being loaded
            original_exception: Original exception from the reader
        """
        super().__init__(
            message,
            severity=ErrorSeverity.CRITICAL,
            details={'file_path': file_path},
            original_exception=original_exception
        )
        self.file_path = file_path


class UnsupportedFormatError(DataLoadError):
    """
    File format not supported by the loaders.

    Example:
        >>> raise UnsupportedFormatError(
        ...     "orders.xml",
        ...     format="xml",
        ...     supported_formats=["csv", "json", "excel", "parquet"]
        ... )
    """

    def __init__(self, file_path: str, format: str, supported_formats: list):
        """
        Initialize unsupported format error.

        Args:
            file_path: Path to file with unsupported format
            format: Detected or specified format
            supported_formats: List of supported formats
        """
        super().__init__(
            f"Unsupported file format '{format}'. Supported: {', '.join(supported_formats)}",
            file_path
        )
        self.details.update({
            'format': format,
            'supported_formats': supported_formats
        })


# ============================================================================
# Source and Analysis Errors (Recoverable)
# ============================================================================

class SourceFetchError(InsightFrameworkError):
    """
    Upstream table could not be fetched.

    Worksheet sources raise this when their data is unavailable. The
    extractor treats it as empty input, so one failing source contributes
    no measures or breakdowns without aborting the others.
    """

    def __init__(
        self,
        message: str,
        source_name: Optional[str] = None,
        original_exception: Optional[Exception] = None
    ):
        """
        Initialize source fetch error.

        Args:
            message: Error description
            source_name: Name of the worksheet/table that failed
            original_exception: Original exception from the data-fetch collaborator
        """
        super().__init__(
            message,
            severity=ErrorSeverity.RECOVERABLE,
            details={'source_name': source_name},
            original_exception=original_exception
        )
        self.source_name = source_name


class AnalysisError(InsightFrameworkError):
    """
    Analysis of one source failed unexpectedly.

    Used by the multi-source orchestrator to describe an isolated failure
    in its log records; the failing source is skipped.
    """

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        column: Optional[str] = None,
        original_exception: Optional[Exception] = None
    ):
        """
        Initialize analysis error.

        Args:
            message: Error description
            operation: Analysis operation that failed
            column: Column or source being analysed
            original_exception: Original exception
        """
        super().__init__(
            message,
            severity=ErrorSeverity.RECOVERABLE,
            details={
                'operation': operation,
                'column': column
            },
            original_exception=original_exception
        )
