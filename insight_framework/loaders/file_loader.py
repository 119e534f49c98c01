"""Tabular file loading into rows keyed by field name, via pandas."""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import pandas as pd

from insight_framework.core.exceptions import DataLoadError, UnsupportedFormatError

logger = logging.getLogger(__name__)

SUPPORTED_FORMATS = ["csv", "json", "excel", "parquet"]

FORMAT_BY_SUFFIX = {
    ".csv": "csv",
    ".tsv": "csv",
    ".txt": "csv",
    ".json": "json",
    ".xlsx": "excel",
    ".xls": "excel",
    ".parquet": "parquet",
    ".pq": "parquet",
}

CSV_ENCODINGS = ['utf-8', 'utf-8-sig', 'cp1252', 'latin-1']


def detect_format(file_path: str) -> str:
    """
    Detect the file format from the file extension.

    Raises:
        UnsupportedFormatError: If the extension is not recognized
    """
    suffix = Path(file_path).suffix.lower()
    if suffix not in FORMAT_BY_SUFFIX:
        raise UnsupportedFormatError(file_path, suffix.lstrip(".") or "unknown", SUPPORTED_FORMATS)
    return FORMAT_BY_SUFFIX[suffix]


def _read_csv(file_path: str) -> pd.DataFrame:
    # Sniff the delimiter; retry with the next encoding on decode errors
    last_error: Optional[Exception] = None
    for encoding in CSV_ENCODINGS:
        try:
            return pd.read_csv(file_path, sep=None, engine="python", encoding=encoding)
        except UnicodeDecodeError as e:
            last_error = e
            logger.debug(f"Could not decode {file_path} as {encoding}")
    raise DataLoadError(
        f"Could not decode {file_path} with any of: {', '.join(CSV_ENCODINGS)}",
        file_path=file_path,
        original_exception=last_error
    )


def _read_frame(file_path: str, file_format: str) -> pd.DataFrame:
    if file_format == "csv":
        return _read_csv(file_path)
    if file_format == "json":
        with open(file_path, 'r', encoding='utf-8') as f:
            return pd.read_json(f)
    if file_format == "excel":
        return pd.read_excel(file_path)
    if file_format == "parquet":
        return pd.read_parquet(file_path)
    raise UnsupportedFormatError(file_path, file_format, SUPPORTED_FORMATS)


def load_rows(file_path: str, file_format: Optional[str] = None) -> List[Dict[str, Any]]:
    """
    Load a tabular file as a list of rows.

    Missing cells (NaN/NaT) become None so every component sees one
    representation of "missing".

    Args:
        file_path: Path to the file
        file_format: csv, json, excel or parquet (detected from the extension if None)

    Returns:
        Rows keyed by column name, in file order

    Raises:
        DataLoadError: If the file is missing or cannot be parsed
        UnsupportedFormatError: If the format is not supported
    """
    if not Path(file_path).exists():
        raise DataLoadError(f"File not found: {file_path}", file_path=file_path)

    file_format = (file_format or detect_format(file_path)).lower()
    if file_format not in SUPPORTED_FORMATS:
        raise UnsupportedFormatError(file_path, file_format, SUPPORTED_FORMATS)

    try:
        df = _read_frame(file_path, file_format)
    except (DataLoadError, UnsupportedFormatError):
        raise
    except (ValueError, OSError, ImportError) as e:
        raise DataLoadError(
            f"Failed to read {file_format} file {file_path}: {e}",
            file_path=file_path,
            original_exception=e
        )

    df.columns = [str(c) for c in df.columns]
    records = df.astype(object).where(pd.notna(df), None).to_dict(orient="records")
    logger.info(f"Loaded {len(records)} rows x {len(df.columns)} columns from {file_path}")
    return records
