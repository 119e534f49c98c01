"""
Worksheet-analysis branch: measures, dimensions and breakdowns from cell-based worksheets.

Key Components:
- Worksheet, Cell, ColumnDescriptor: worksheet input model
- analyze_worksheet: measure/dimension/breakdown extraction for one worksheet
- analyze_all_worksheets: multi-source analysis with a deterministic merge
- normalize_field_name: readable labels for aggregation-wrapped field names
- format_value: display formatting for measure values
- generate_data_insights: ranked insights over measures and breakdowns
"""

from .models import (
    Cell,
    ColumnDescriptor,
    Worksheet,
    WorksheetAnalysis,
    CombinedAnalysis,
    WorksheetInsight,
)

__all__ = [
    'Cell',
    'ColumnDescriptor',
    'Worksheet',
    'WorksheetAnalysis',
    'CombinedAnalysis',
    'WorksheetInsight',
]
