"""
File loaders for the command-line interface.

- load_rows: tabular files (CSV, JSON, Excel, Parquet) -> rows keyed by field name
- JsonWorksheetSource / load_worksheet: worksheet JSON exchange files
"""

from .file_loader import load_rows, detect_format, SUPPORTED_FORMATS
from .worksheet_loader import JsonWorksheetSource, load_worksheet

__all__ = [
    'load_rows',
    'detect_format',
    'SUPPORTED_FORMATS',
    'JsonWorksheetSource',
    'load_worksheet',
]
