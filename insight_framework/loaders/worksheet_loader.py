"""Worksheet JSON exchange files as worksheet sources."""

import json
import logging
from pathlib import Path

from insight_framework.core.exceptions import SourceFetchError
from insight_framework.worksheet.models import Worksheet, WorksheetSource

logger = logging.getLogger(__name__)

UNBOUNDED_ROWS = 2 ** 31


class JsonWorksheetSource(WorksheetSource):
    """
    Worksheet source backed by a JSON file.

    The file holds {"name", "columns": [{"fieldName", "dataType"}],
    "data": [[{"value", "formattedValue"}]]}. Reading is deferred to fetch(),
    so an unreadable file fails only its own analysis.
    """

    def __init__(self, file_path: str):
        self.file_path = file_path

    @property
    def name(self) -> str:
        return Path(self.file_path).stem

    def fetch(self, max_rows: int) -> Worksheet:
        """
        Read and parse the file.

        Raises:
            SourceFetchError: If the file cannot be read or is not worksheet-shaped
        """
        try:
            with open(self.file_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise SourceFetchError(
                f"Cannot read worksheet file {self.file_path}: {e}",
                source_name=self.name,
                original_exception=e
            )
        if isinstance(data, dict) and not data.get("name"):
            data = dict(data, name=self.name)
        worksheet = Worksheet.from_dict(data)
        logger.debug(f"Fetched worksheet '{worksheet.name}' ({worksheet.row_count} rows)")
        return worksheet.head(max_rows)


def load_worksheet(file_path: str) -> Worksheet:
    """
    Load a worksheet JSON file eagerly.

    Raises:
        SourceFetchError: If the file cannot be read or is not worksheet-shaped
    """
    return JsonWorksheetSource(file_path).fetch(max_rows=UNBOUNDED_ROWS)
