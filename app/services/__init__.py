"""
app/services package marker.
"""

from app.services.reading_import_service import (
    EmptyResultError,
    ReadingImportService,
    ReadingPersistenceError,
    get_reading_import_service,
)
from app.services.reading_stats_service import ReadingStatsService, UnknownPeriodError

__all__ = [
    "EmptyResultError",
    "ReadingImportService",
    "ReadingPersistenceError",
    "ReadingStatsService",
    "UnknownPeriodError",
    "get_reading_import_service",
]
