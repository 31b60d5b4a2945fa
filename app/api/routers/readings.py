"""
app/api/routers/readings.py

Energy reading HTTP endpoints: import, manual entry, listing, deletion and statistics.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Body, Depends, HTTPException, Query, UploadFile, status
from sqlalchemy.orm import Session

from app.api.dependencies import decode_csv_bytes, get_csv_upload
from app.config import ReadingImportSettings, get_reading_import_settings
from app.domain.energy_reading import CanonicalReading, ImportDiagnostics
from app.mappers.format_profiles import UnknownFormatError, list_supported_formats
from app.parsers.csv_table import NoRecordsError
from app.repositories.energy_reading_repository import EnergyReadingRepository, as_utc
from app.schemas.readings import (
    DateRangeResponse,
    EnergyReadingResponse,
    ImportPreviewReading,
    ReadingCreateRequest,
    ReadingCreateResponse,
    ReadingDeleteResponse,
    ReadingImportPreviewResponse,
    ReadingImportRequest,
    ReadingImportResponse,
    ReadingListMeta,
    ReadingListResponse,
    ReadingStatsResponse,
    ReadingStatsSummaryResponse,
    PeriodStatResponse,
    SupportedFormatsResponse,
)
from app.services.reading_import_service import (
    EmptyResultError,
    ReadingImportService,
    ReadingPersistenceError,
    get_reading_import_service,
)
from app.services.reading_stats_service import ReadingStatsService, UnknownPeriodError
from db.models.energy_reading import ReadingType
from db.session import get_db

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/readings", tags=["readings"])


def _to_import_response(diagnostics: ImportDiagnostics) -> ReadingImportResponse:
    return ReadingImportResponse(
        message=f"{diagnostics.count} readings imported from {diagnostics.format_name.upper()}",
        format=diagnostics.format_name,
        count=diagnostics.count,
        total_kwh=diagnostics.total_kwh,
        avg_daily_kwh=diagnostics.avg_daily_kwh,
        date_range=DateRangeResponse(
            start=diagnostics.date_range.start,
            end=diagnostics.date_range.end,
            days=diagnostics.date_range.days,
        ),
        inserted_count=diagnostics.inserted,
        rows_failed=diagnostics.rows_failed,
        warnings=diagnostics.warnings or None,
    )


def _run_import(
    *,
    raw_text: str,
    format_name: str,
    dry_run: bool,
    db: Session,
    import_service: ReadingImportService,
) -> ReadingImportResponse | ReadingImportPreviewResponse:
    try:
        if dry_run:
            result = import_service.normalize_readings(raw_text=raw_text, format_name=format_name)
            warnings = import_service.sample_warnings(result.row_errors)
            return ReadingImportPreviewResponse(
                format=format_name,
                count=len(result.readings),
                rows_failed=result.rows_failed,
                readings=[
                    ImportPreviewReading(
                        timestamp=reading.timestamp,
                        value=reading.value,
                        unit=reading.unit,
                    )
                    for reading in result.readings
                ],
                warnings=warnings or None,
            )

        diagnostics = import_service.import_readings(
            raw_text=raw_text,
            format_name=format_name,
            db=db,
        )
    except EmptyResultError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=exc.to_dict(),
        ) from exc
    except (UnknownFormatError, NoRecordsError) as exc:
        logger.warning("Reading import rejected format=%s: %s", format_name, exc)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    except ReadingPersistenceError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Unable to persist imported readings.",
        ) from exc

    return _to_import_response(diagnostics)


@router.post(
    "/import",
    response_model=ReadingImportResponse | ReadingImportPreviewResponse,
    response_model_exclude_none=True,
)
def import_readings(
    body: ReadingImportRequest,
    dry_run: bool = Query(default=False, description="Normalize and return readings without storing them"),
    db: Session = Depends(get_db),
    import_service: ReadingImportService = Depends(get_reading_import_service),
    settings: ReadingImportSettings = Depends(get_reading_import_settings),
) -> ReadingImportResponse | ReadingImportPreviewResponse:
    """
    Import pasted CSV content exported by an energy provider.
    """

    return _run_import(
        raw_text=body.data,
        format_name=body.format or settings.default_format,
        dry_run=dry_run,
        db=db,
        import_service=import_service,
    )


@router.post(
    "/import/upload",
    response_model=ReadingImportResponse | ReadingImportPreviewResponse,
    response_model_exclude_none=True,
)
def upload_readings(
    file: UploadFile = Depends(get_csv_upload),
    format_name: str | None = Query(default=None, alias="format", description="Provider export format"),
    dry_run: bool = Query(default=False, description="Normalize and return readings without storing them"),
    db: Session = Depends(get_db),
    import_service: ReadingImportService = Depends(get_reading_import_service),
    settings: ReadingImportSettings = Depends(get_reading_import_settings),
) -> ReadingImportResponse | ReadingImportPreviewResponse:
    """
    Import one uploaded CSV export file.
    """

    try:
        raw_text = decode_csv_bytes(file.file.read())
    finally:
        file.file.close()

    return _run_import(
        raw_text=raw_text,
        format_name=format_name or settings.default_format,
        dry_run=dry_run,
        db=db,
        import_service=import_service,
    )


@router.get("/formats", response_model=SupportedFormatsResponse)
def supported_formats(
    settings: ReadingImportSettings = Depends(get_reading_import_settings),
) -> SupportedFormatsResponse:
    return SupportedFormatsResponse(
        formats=list(list_supported_formats()),
        default_format=settings.default_format,
    )


@router.get("", response_model=ReadingListResponse)
def list_readings(
    start: datetime | None = Query(default=None, alias="from"),
    end: datetime | None = Query(default=None, alias="to"),
    reading_type: str | None = Query(default=None, alias="type"),
    source: str | None = Query(default=None),
    limit: int | None = Query(default=None, ge=1),
    db: Session = Depends(get_db),
) -> ReadingListResponse:
    """
    Return stored readings, newest first.
    """

    readings = EnergyReadingRepository(db).list_readings(
        start=start,
        end=end,
        reading_type=reading_type,
        source=source,
        limit=limit,
    )
    data = [
        EnergyReadingResponse(
            id=reading.id,
            timestamp=as_utc(reading.timestamp),
            type=reading.type,
            value=reading.value,
            unit=reading.unit,
            source=reading.source,
        )
        for reading in readings
    ]
    return ReadingListResponse(
        data=data,
        meta=ReadingListMeta(
            count=len(data),
            total_kwh=round(sum(item.value for item in data), 2),
            start=data[-1].timestamp if data else None,
            end=data[0].timestamp if data else None,
        ),
    )


@router.post("", response_model=ReadingCreateResponse)
def add_readings(
    body: ReadingCreateRequest | list[ReadingCreateRequest] = Body(...),
    db: Session = Depends(get_db),
    import_service: ReadingImportService = Depends(get_reading_import_service),
) -> ReadingCreateResponse:
    """
    Add one reading or a list of readings by hand.
    """

    entries = body if isinstance(body, list) else [body]
    if not entries:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="At least one reading is required.",
        )

    now = datetime.now(tz=timezone.utc)
    readings = [
        CanonicalReading(
            timestamp=entry.timestamp or now,
            value=entry.value,
            source=entry.source,
            type=entry.type,
            unit=entry.unit,
        )
        for entry in entries
    ]

    try:
        inserted = import_service.add_readings(readings=readings, db=db)
    except ReadingPersistenceError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Unable to persist readings.",
        ) from exc

    return ReadingCreateResponse(
        message=f"{len(readings)} reading(s) added",
        count=len(readings),
        inserted_count=inserted,
    )


@router.delete("", response_model=ReadingDeleteResponse)
def delete_readings(
    reading_id: int | None = Query(default=None, alias="id"),
    before: datetime | None = Query(default=None),
    source: str | None = Query(default=None),
    db: Session = Depends(get_db),
) -> ReadingDeleteResponse:
    """
    Delete one reading by id, or every reading before a date and/or from a source.
    """

    if reading_id is None and before is None and source is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Specify id, before or source parameter.",
        )

    deleted = EnergyReadingRepository(db).delete_readings(
        reading_id=reading_id,
        before=before,
        source=source,
    )
    db.commit()
    logger.info(
        "Readings deleted count=%d id=%s before=%s source=%s",
        deleted,
        reading_id,
        before,
        source,
    )
    return ReadingDeleteResponse(deleted=deleted, message=f"{deleted} readings deleted")


@router.get("/stats", response_model=ReadingStatsResponse)
def reading_stats(
    period: str = Query(default="day", description="hour, day, week or month"),
    reading_type: str = Query(default=ReadingType.ELECTRICITY, alias="type"),
    days: int = Query(default=30, ge=1),
    db: Session = Depends(get_db),
) -> ReadingStatsResponse:
    """
    Consumption grouped by period over the last ``days`` days.
    """

    try:
        stats = ReadingStatsService(db).get_stats(
            period=period,
            reading_type=reading_type,
            days=days,
        )
    except UnknownPeriodError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc

    return ReadingStatsResponse(
        period=stats.period,
        data=[
            PeriodStatResponse(
                period=item.period,
                total=item.total,
                average=item.average,
                peak=item.peak,
                minimum=item.minimum,
                count=item.count,
            )
            for item in stats.data
        ],
        summary=ReadingStatsSummaryResponse(
            total_kwh=stats.summary.total_kwh,
            average_kwh=stats.summary.average_kwh,
            peak_kwh=stats.summary.peak_kwh,
            readings_count=stats.summary.readings_count,
            trend_percent=stats.summary.trend_percent,
            period_days=stats.summary.period_days,
        ),
    )
