"""
app/services/reading_stats_service.py

Aggregated consumption statistics over stored readings.

Readings are grouped by hour, day, ISO-ish week or month with SQLite
``strftime`` buckets. A summary compares the requested window with the
window of the same length immediately before it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.repositories.energy_reading_repository import to_storage_timestamp
from db.models.energy_reading import EnergyReading, ReadingType

logger = logging.getLogger(__name__)

PERIOD_FORMATS: dict[str, str] = {
    "hour": "%Y-%m-%d %H:00",
    "day": "%Y-%m-%d",
    "week": "%Y-W%W",
    "month": "%Y-%m",
}


class UnknownPeriodError(ValueError):
    """
    Raised when statistics are requested for an unsupported grouping.
    """


@dataclass(frozen=True)
class PeriodStat:
    period: str
    total: float
    average: float
    peak: float
    minimum: float
    count: int


@dataclass(frozen=True)
class ReadingStatsSummary:
    total_kwh: float
    average_kwh: float
    peak_kwh: float
    readings_count: int
    trend_percent: float
    period_days: int


@dataclass(frozen=True)
class ReadingStats:
    period: str
    summary: ReadingStatsSummary
    data: list[PeriodStat] = field(default_factory=list)


class ReadingStatsService:
    """
    Read-only statistics over EnergyReading rows.

    Parameters
    ----------
    session:
        Active SQLAlchemy session. The caller controls its lifecycle.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def get_stats(
        self,
        *,
        period: str = "day",
        reading_type: str = ReadingType.ELECTRICITY,
        days: int = 30,
        now: datetime | None = None,
    ) -> ReadingStats:
        """
        Group readings of the last ``days`` days by ``period``.
        """

        fmt = PERIOD_FORMATS.get(period)
        if fmt is None:
            raise UnknownPeriodError(
                f"Unknown period: {period}. Supported: {', '.join(PERIOD_FORMATS)}"
            )

        days = max(1, days)
        window_end = now or datetime.now(tz=timezone.utc)
        window_start = window_end - timedelta(days=days)
        previous_start = window_start - timedelta(days=days)

        data = self._grouped(fmt=fmt, reading_type=reading_type, start=window_start)
        total, average, peak, count = self._totals(
            reading_type=reading_type,
            start=window_start,
        )
        previous_total = self._window_total(
            reading_type=reading_type,
            start=previous_start,
            end=window_start,
        )

        trend = ((total - previous_total) / previous_total * 100) if previous_total else 0.0
        logger.debug(
            "Reading stats period=%s type=%s days=%d buckets=%d total=%.3f",
            period,
            reading_type,
            days,
            len(data),
            total,
        )

        return ReadingStats(
            period=period,
            data=data,
            summary=ReadingStatsSummary(
                total_kwh=round(total, 2),
                average_kwh=round(average, 3),
                peak_kwh=round(peak, 2),
                readings_count=count,
                trend_percent=round(trend, 1),
                period_days=days,
            ),
        )

    def _grouped(self, *, fmt: str, reading_type: str, start: datetime) -> list[PeriodStat]:
        bucket = func.strftime(fmt, EnergyReading.timestamp)
        stmt = (
            select(
                bucket.label("period"),
                func.sum(EnergyReading.value),
                func.avg(EnergyReading.value),
                func.max(EnergyReading.value),
                func.min(EnergyReading.value),
                func.count(EnergyReading.id),
            )
            .where(
                EnergyReading.type == reading_type,
                EnergyReading.timestamp >= to_storage_timestamp(start),
            )
            .group_by(bucket)
            .order_by(bucket)
        )

        return [
            PeriodStat(
                period=row[0],
                total=round(row[1], 2),
                average=round(row[2], 3),
                peak=round(row[3], 2),
                minimum=round(row[4], 2),
                count=row[5],
            )
            for row in self._session.execute(stmt).all()
        ]

    def _totals(self, *, reading_type: str, start: datetime) -> tuple[float, float, float, int]:
        stmt = select(
            func.coalesce(func.sum(EnergyReading.value), 0.0),
            func.coalesce(func.avg(EnergyReading.value), 0.0),
            func.coalesce(func.max(EnergyReading.value), 0.0),
            func.count(EnergyReading.id),
        ).where(
            EnergyReading.type == reading_type,
            EnergyReading.timestamp >= to_storage_timestamp(start),
        )
        total, average, peak, count = self._session.execute(stmt).one()
        return float(total), float(average), float(peak), int(count)

    def _window_total(self, *, reading_type: str, start: datetime, end: datetime) -> float:
        stmt = select(func.coalesce(func.sum(EnergyReading.value), 0.0)).where(
            EnergyReading.type == reading_type,
            EnergyReading.timestamp >= to_storage_timestamp(start),
            EnergyReading.timestamp < to_storage_timestamp(end),
        )
        return float(self._session.scalar(stmt) or 0.0)
