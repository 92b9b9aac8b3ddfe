"""
tables/__init__.py

Public API for the delimited-file reader and writer.
"""

from .reader import iter_csv_rows, load_csv_rows
from .writer import format_row, header_row, iter_table_rows, write_pivot_table

__all__ = [
    "iter_csv_rows",
    "load_csv_rows",
    "header_row",
    "format_row",
    "iter_table_rows",
    "write_pivot_table",
]
