"""
app/domain/energy_reading.py

Domain models used by the energy reading import flow.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class CanonicalReading:
    """
    Normalized reading prepared for persistence.
    """

    timestamp: datetime
    value: float
    source: str
    type: str = "electricity"
    unit: str = "kWh"


@dataclass(frozen=True)
class RowImportError:
    """
    One skipped CSV row and the reason it was skipped.
    """

    row_number: int
    code: str
    message: str
    value: str | None = None

    def __str__(self) -> str:
        return f"Row {self.row_number}: {self.message}"


@dataclass(frozen=True)
class DateRange:
    start: datetime
    end: datetime
    days: int


@dataclass(frozen=True)
class NormalizationResult:
    """
    Readings and row errors produced from one raw export, before persistence.
    """

    readings: list[CanonicalReading]
    row_errors: list[RowImportError] = field(default_factory=list)
    rows_seen: int = 0
    rows_failed: int = 0


@dataclass(frozen=True)
class ImportDiagnostics:
    """
    End-of-run import report.
    """

    format_name: str
    count: int
    total_kwh: float
    avg_daily_kwh: float
    date_range: DateRange
    inserted: int = 0
    rows_failed: int = 0
    row_errors: list[RowImportError] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
