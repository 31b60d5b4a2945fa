"""
app/services/reading_import_service.py

Service layer for energy reading CSV imports.

One run resolves the provider format, parses the table, normalizes every row
independently, and persists the surviving readings in a single transaction:

    format → table → per-row (date, time, value) → kWh → noise filter
           → sort by timestamp → bulk insert → diagnostics

Row-level problems are recorded and skipped. Only structural failures abort
the run: an unknown format, a table with no rows, or a file in which no row
produced a reading.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import replace
from datetime import datetime, timezone, tzinfo
from functools import lru_cache

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import get_reading_import_settings
from app.domain.energy_reading import (
    CanonicalReading,
    DateRange,
    ImportDiagnostics,
    NormalizationResult,
    RowImportError,
)
from app.mappers.column_resolver import resolve_column
from app.mappers.format_profiles import FormatProfile, resolve_format_profile
from app.parsers.csv_table import RawRecord, parse_table, strip_preamble
from app.repositories.energy_reading_repository import EnergyReadingRepository
from app.validators.reading_parsers import (
    InvalidDateError,
    InvalidNumberError,
    normalize_to_kwh,
    parse_numeric_value,
    parse_reading_date,
)

logger = logging.getLogger(__name__)

_SECONDS_PER_DAY = 86_400


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class EmptyResultError(ValueError):
    """
    Raised when every row of an import was skipped.
    """

    def __init__(self, sample_errors: list[RowImportError]) -> None:
        samples = "; ".join(str(error) for error in sample_errors)
        super().__init__(f"No valid readings could be extracted. Errors: {samples}")
        self.sample_errors = tuple(sample_errors)

    def to_dict(self) -> dict[str, object]:
        return {
            "message": str(self),
            "errors": [
                {
                    "row_number": error.row_number,
                    "code": error.code,
                    "message": error.message,
                    "value": error.value,
                }
                for error in self.sample_errors
            ],
        }


class ReadingPersistenceError(RuntimeError):
    """
    Raised when normalized readings cannot be persisted.
    """


@contextmanager
def _atomic(session: Session) -> Iterator[None]:
    """
    Commit on success, roll back on any exception raised inside the block.
    """

    try:
        yield
        session.commit()
    except BaseException:
        session.rollback()
        raise


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class ReadingImportService:
    """
    Normalizes provider exports into canonical kWh readings and stores them.
    """

    def __init__(
        self,
        *,
        max_row_errors: int,
        max_warnings: int,
        log_row_errors: bool,
        tz: tzinfo = timezone.utc,
    ) -> None:
        self._max_row_errors = max(1, max_row_errors)
        self._max_warnings = max(1, max_warnings)
        self._log_row_errors = log_row_errors
        self._tz = tz

    def sample_warnings(self, row_errors: list[RowImportError]) -> list[str]:
        """
        Render the first row errors, in row order, as warning strings.
        """

        return [str(error) for error in row_errors[: self._max_warnings]]

    def import_readings(
        self,
        *,
        raw_text: str,
        format_name: str,
        db: Session,
    ) -> ImportDiagnostics:
        """
        Normalize ``raw_text`` and persist the readings atomically.

        Args:
            raw_text:     Uploaded or pasted CSV content.
            format_name:  One of the identifiers in FORMAT_PROFILES.
            db:           Active SQLAlchemy session (caller owns lifecycle).

        Raises:
            UnknownFormatError, NoRecordsError, EmptyResultError,
            ReadingPersistenceError.
        """

        result = self.normalize_readings(raw_text=raw_text, format_name=format_name)
        inserted = self._persist(db=db, readings=result.readings)

        diagnostics = self._build_diagnostics(
            format_name=format_name,
            result=result,
            inserted=inserted,
        )
        logger.info(
            "Reading import completed format=%s count=%d inserted=%d rows_failed=%d "
            "total_kwh=%.2f days=%d",
            format_name,
            diagnostics.count,
            diagnostics.inserted,
            diagnostics.rows_failed,
            diagnostics.total_kwh,
            diagnostics.date_range.days,
        )
        return diagnostics

    def normalize_readings(
        self,
        *,
        raw_text: str,
        format_name: str,
    ) -> NormalizationResult:
        """
        Parse and normalize ``raw_text`` without touching the database.

        Readings are returned sorted by timestamp. Raises EmptyResultError when
        no row survives.
        """

        profile = resolve_format_profile(format_name)
        text = strip_preamble(raw_text, profile.skip_lines)
        records = parse_table(text, profile.delimiter)

        logger.info("Reading import format=%s records=%d", format_name, len(records))
        logger.debug("Reading import format=%s first record=%r", format_name, records[0])

        readings: list[CanonicalReading] = []
        seen_timestamps: set[datetime] = set()
        captured_errors: list[RowImportError] = []
        rows_failed = 0

        for row_number, record in enumerate(records, start=1):
            reading, error = self._normalize_record(
                record=record,
                profile=profile,
                format_name=format_name,
                row_number=row_number,
                seen_timestamps=seen_timestamps,
            )
            if error is not None:
                rows_failed += 1
                self._record_error(captured_errors, error)
                continue
            if reading is not None:
                seen_timestamps.add(reading.timestamp)
                readings.append(reading)

        if not readings:
            logger.warning(
                "Reading import format=%s produced no readings rows_failed=%d",
                format_name,
                rows_failed,
            )
            raise EmptyResultError(captured_errors[: self._max_warnings])

        readings.sort(key=lambda reading: reading.timestamp)
        return NormalizationResult(
            readings=readings,
            row_errors=captured_errors,
            rows_seen=len(records),
            rows_failed=rows_failed,
        )

    def add_readings(
        self,
        *,
        readings: list[CanonicalReading],
        db: Session,
    ) -> int:
        """
        Store manually entered readings in one transaction.

        Naive timestamps are read as wall-clock time in the configured zone.
        Returns the number of rows actually written.
        """

        localized = [
            replace(reading, timestamp=reading.timestamp.replace(tzinfo=self._tz))
            if reading.timestamp.tzinfo is None
            else reading
            for reading in readings
        ]
        inserted = self._persist(db=db, readings=localized)
        logger.info("Manual readings stored count=%d inserted=%d", len(localized), inserted)
        return inserted

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _normalize_record(
        self,
        *,
        record: RawRecord,
        profile: FormatProfile,
        format_name: str,
        row_number: int,
        seen_timestamps: set[datetime],
    ) -> tuple[CanonicalReading | None, RowImportError | None]:
        """
        Return ``(reading, None)``, ``(None, error)``, or ``(None, None)``
        for a value under the noise floor.

        A wall-clock time already taken by an earlier row is read as its
        second occurrence when it falls in the repeated autumn DST hour;
        any other repeat is a ``duplicate_timestamp`` error.
        """

        date_str = resolve_column(record, profile.date_columns)
        if date_str is None:
            return None, RowImportError(
                row_number=row_number,
                code="missing_date",
                message="No date found",
            )

        time_str = None
        if profile.time_column is not None:
            time_str = resolve_column(record, (profile.time_column,))

        try:
            timestamp = parse_reading_date(date_str, time_str, tz=self._tz)
            if timestamp in seen_timestamps:
                timestamp = parse_reading_date(date_str, time_str, tz=self._tz, fold=1)
        except InvalidDateError as exc:
            return None, RowImportError(
                row_number=row_number,
                code=exc.code,
                message=str(exc),
                value=date_str,
            )

        if timestamp in seen_timestamps:
            wall_clock = f"{date_str} {time_str}" if time_str else date_str
            return None, RowImportError(
                row_number=row_number,
                code="duplicate_timestamp",
                message=f'Duplicate timestamp "{wall_clock}"',
                value=date_str,
            )

        value_str = resolve_column(record, profile.value_columns)
        if value_str is None:
            return None, RowImportError(
                row_number=row_number,
                code="missing_value",
                message="No value found",
            )

        try:
            value = parse_numeric_value(value_str)
        except InvalidNumberError as exc:
            return None, RowImportError(
                row_number=row_number,
                code=exc.code,
                message=str(exc),
                value=value_str,
            )

        kwh = normalize_to_kwh(value, profile.value_multiplier)
        if kwh is None:
            return None, None

        return CanonicalReading(timestamp=timestamp, value=kwh, source=format_name), None

    def _persist(
        self,
        *,
        db: Session,
        readings: list[CanonicalReading],
    ) -> int:
        repository = EnergyReadingRepository(db)
        try:
            with _atomic(db):
                return repository.bulk_insert(readings)
        except SQLAlchemyError as exc:
            logger.error("Reading import persistence failed readings=%d: %s", len(readings), exc)
            raise ReadingPersistenceError("Failed to persist imported readings.") from exc

    def _build_diagnostics(
        self,
        *,
        format_name: str,
        result: NormalizationResult,
        inserted: int,
    ) -> ImportDiagnostics:
        readings = result.readings
        total_kwh = sum(reading.value for reading in readings)
        first = readings[0].timestamp
        last = readings[-1].timestamp
        days = math.ceil((last - first).total_seconds() / _SECONDS_PER_DAY) or 1

        return ImportDiagnostics(
            format_name=format_name,
            count=len(readings),
            total_kwh=round(total_kwh, 2),
            avg_daily_kwh=round(total_kwh / days, 2),
            date_range=DateRange(start=first, end=last, days=days),
            inserted=inserted,
            rows_failed=result.rows_failed,
            row_errors=list(result.row_errors),
            warnings=self.sample_warnings(result.row_errors),
        )

    def _record_error(
        self,
        captured_errors: list[RowImportError],
        error: RowImportError,
    ) -> None:
        if self._log_row_errors:
            logger.warning(
                "Reading import row error row=%s code=%s message=%s value=%r",
                error.row_number,
                error.code,
                error.message,
                error.value,
            )

        if len(captured_errors) < self._max_row_errors:
            captured_errors.append(error)


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------


@lru_cache(maxsize=1)
def get_reading_import_service() -> ReadingImportService:
    """
    Build and cache the import service with env-driven settings.
    """

    settings = get_reading_import_settings()
    return ReadingImportService(
        max_row_errors=settings.max_row_errors,
        max_warnings=settings.max_warnings,
        log_row_errors=settings.log_row_errors,
        tz=settings.tzinfo,
    )
