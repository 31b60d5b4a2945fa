"""
app/validators package marker.
"""

from app.validators.reading_parsers import (
    NOISE_FLOOR_KWH,
    InvalidDateError,
    InvalidNumberError,
    RowParseError,
    normalize_to_kwh,
    parse_numeric_value,
    parse_reading_date,
)

__all__ = [
    "NOISE_FLOOR_KWH",
    "InvalidDateError",
    "InvalidNumberError",
    "RowParseError",
    "normalize_to_kwh",
    "parse_numeric_value",
    "parse_reading_date",
]
