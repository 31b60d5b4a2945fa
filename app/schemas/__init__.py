"""
app/schemas package marker.
"""

from app.schemas.readings import (
    DateRangeResponse,
    EnergyReadingResponse,
    ReadingCreateRequest,
    ReadingCreateResponse,
    ReadingDeleteResponse,
    ReadingImportPreviewResponse,
    ReadingImportRequest,
    ReadingImportResponse,
    ReadingListResponse,
    ReadingStatsResponse,
    SupportedFormatsResponse,
)

__all__ = [
    "DateRangeResponse",
    "EnergyReadingResponse",
    "ReadingCreateRequest",
    "ReadingCreateResponse",
    "ReadingDeleteResponse",
    "ReadingImportPreviewResponse",
    "ReadingImportRequest",
    "ReadingImportResponse",
    "ReadingListResponse",
    "ReadingStatsResponse",
    "SupportedFormatsResponse",
]
