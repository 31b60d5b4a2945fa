"""
app/mappers package marker.
"""

from app.mappers.column_resolver import resolve_column
from app.mappers.format_profiles import (
    FORMAT_PROFILES,
    FormatProfile,
    UnknownFormatError,
    list_supported_formats,
    resolve_format_profile,
)

__all__ = [
    "FORMAT_PROFILES",
    "FormatProfile",
    "UnknownFormatError",
    "list_supported_formats",
    "resolve_column",
    "resolve_format_profile",
]
