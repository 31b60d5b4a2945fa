"""
app/schemas/readings.py

Request and response schemas for energy reading endpoints.

Wire names are camelCase (``totalKwh``, ``dateRange``); Python attributes
stay snake_case.
"""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


class ReadingImportRequest(_CamelModel):
    """
    Pasted CSV content plus the provider format it was exported in.
    """

    data: str = Field(..., min_length=1)
    format: str | None = None


class DateRangeResponse(_CamelModel):
    start: datetime = Field(..., alias="from")
    end: datetime = Field(..., alias="to")
    days: int = Field(..., ge=1)


class ReadingImportResponse(_CamelModel):
    """
    API response model for one completed import.
    """

    success: bool = True
    message: str
    format: str
    count: int = Field(..., ge=1)
    total_kwh: float
    avg_daily_kwh: float
    date_range: DateRangeResponse
    inserted_count: int = Field(..., ge=0)
    rows_failed: int = Field(..., ge=0)
    warnings: list[str] | None = None


class ImportPreviewReading(_CamelModel):
    timestamp: datetime
    value: float
    unit: str


class ReadingImportPreviewResponse(_CamelModel):
    """
    Normalized readings returned by a dry run; nothing is stored.
    """

    format: str
    count: int = Field(..., ge=1)
    rows_failed: int = Field(..., ge=0)
    readings: list[ImportPreviewReading]
    warnings: list[str] | None = None


class ReadingCreateRequest(_CamelModel):
    """
    One manually entered reading. Omitted fields take the manual-entry defaults.
    """

    timestamp: datetime | None = None
    type: str = Field(default="electricity", min_length=1, max_length=32)
    value: float = Field(..., ge=0, allow_inf_nan=False)
    unit: Literal["kWh"] = "kWh"
    source: str = Field(default="manual", min_length=1, max_length=64)


class ReadingCreateResponse(_CamelModel):
    success: bool = True
    message: str
    count: int = Field(..., ge=1)
    inserted_count: int = Field(..., ge=0)


class SupportedFormatsResponse(_CamelModel):
    formats: list[str]
    default_format: str


class EnergyReadingResponse(_CamelModel):
    id: int
    timestamp: datetime
    type: str
    value: float
    unit: str
    source: str


class ReadingListMeta(_CamelModel):
    count: int = Field(..., ge=0)
    total_kwh: float
    start: datetime | None = Field(default=None, alias="from")
    end: datetime | None = Field(default=None, alias="to")


class ReadingListResponse(_CamelModel):
    data: list[EnergyReadingResponse]
    meta: ReadingListMeta


class ReadingDeleteResponse(_CamelModel):
    deleted: int = Field(..., ge=0)
    message: str


class PeriodStatResponse(_CamelModel):
    period: str
    total: float
    average: float
    peak: float
    minimum: float
    count: int = Field(..., ge=0)


class ReadingStatsSummaryResponse(_CamelModel):
    total_kwh: float
    average_kwh: float
    peak_kwh: float
    readings_count: int = Field(..., ge=0)
    trend_percent: float
    period_days: int = Field(..., ge=1)


class ReadingStatsResponse(_CamelModel):
    period: str
    data: list[PeriodStatResponse]
    summary: ReadingStatsSummaryResponse
