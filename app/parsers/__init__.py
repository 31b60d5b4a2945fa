"""
app/parsers package marker.
"""

from app.parsers.csv_table import NoRecordsError, RawRecord, parse_table, strip_preamble

__all__ = [
    "NoRecordsError",
    "RawRecord",
    "parse_table",
    "strip_preamble",
]
