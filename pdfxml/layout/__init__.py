"""Layout reconstruction helpers.

This package turns a page's flat fragment list into lines, headings, list
items and tables using quantized coordinates and pandas/numpy grouping.
"""

from .canonical import quantize, dequantize, format_number, format_key
from .lines import fragments_frame, group_fragments_to_lines
from .classify import rank_font_sizes, heading_level, is_list_text, is_list_item
from .tables import (
    TableDetection,
    find_row_candidates,
    split_row_runs,
    find_column_positions,
    assign_columns,
    build_table,
    detect_tables,
)

__all__ = [
    "quantize",
    "dequantize",
    "format_number",
    "format_key",
    "fragments_frame",
    "group_fragments_to_lines",
    "rank_font_sizes",
    "heading_level",
    "is_list_text",
    "is_list_item",
    "TableDetection",
    "find_row_candidates",
    "split_row_runs",
    "find_column_positions",
    "assign_columns",
    "build_table",
    "detect_tables",
]
