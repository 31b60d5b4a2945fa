"""
app/repositories/energy_reading_repository.py

Persistence layer for energy readings.

The caller controls commit/rollback; this repository never commits on its own.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.dialects.sqlite import insert
from sqlalchemy.orm import Session

from app.domain.energy_reading import CanonicalReading
from db.models.energy_reading import EnergyReading

_INSERT_COLUMNS: tuple[str, ...] = ("timestamp", "type", "value", "unit", "source")
_DEDUPE_COLUMNS: tuple[str, ...] = ("timestamp", "type", "source")
# Older SQLite builds cap bound parameters per statement at 999.
_SQLITE_MAX_VARIABLES = 999
_DEFAULT_BATCH_SIZE = _SQLITE_MAX_VARIABLES // len(_INSERT_COLUMNS)


def to_storage_timestamp(value: datetime) -> datetime:
    """
    Convert to naive UTC, the form timestamps are stored and compared in.
    """

    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def as_utc(value: datetime) -> datetime:
    """
    Attach UTC to a timestamp read back from storage.
    """

    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class EnergyReadingRepository:
    """
    Repository for writing and querying EnergyReading rows.

    Rows are unique on ``(timestamp, type, source)``; inserting a reading
    that already exists is a no-op, so re-importing the same export does not
    duplicate data.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    def bulk_insert(
        self,
        readings: Sequence[CanonicalReading],
        *,
        batch_size: int = _DEFAULT_BATCH_SIZE,
    ) -> int:
        """
        Insert readings with chunked ``INSERT ... ON CONFLICT DO NOTHING``.

        Returns the number of rows actually written.
        """

        if not readings:
            return 0

        payloads: list[dict[str, Any]] = [
            {
                "timestamp": to_storage_timestamp(reading.timestamp),
                "type": reading.type,
                "value": reading.value,
                "unit": reading.unit,
                "source": reading.source,
            }
            for reading in readings
        ]

        size = max(1, min(batch_size, _DEFAULT_BATCH_SIZE))
        deduped_payloads = self._deduplicate_payloads(payloads)
        inserted = 0

        for start in range(0, len(deduped_payloads), size):
            chunk = deduped_payloads[start : start + size]
            stmt = (
                insert(EnergyReading)
                .values(chunk)
                .on_conflict_do_nothing(index_elements=list(_DEDUPE_COLUMNS))
            )
            result = self._session.execute(stmt)
            inserted += max(result.rowcount or 0, 0)

        return inserted

    def delete_readings(
        self,
        *,
        reading_id: int | None = None,
        before: datetime | None = None,
        source: str | None = None,
    ) -> int:
        """
        Delete by id, by timestamp upper bound, and/or by source tag.

        At least one filter is required.
        """

        if reading_id is None and before is None and source is None:
            raise ValueError("Specify reading_id, before or source.")

        stmt = delete(EnergyReading)
        if reading_id is not None:
            stmt = stmt.where(EnergyReading.id == reading_id)
        if before is not None:
            stmt = stmt.where(EnergyReading.timestamp < to_storage_timestamp(before))
        if source is not None:
            stmt = stmt.where(EnergyReading.source == source)

        result = self._session.execute(stmt)
        return max(result.rowcount or 0, 0)

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def list_readings(
        self,
        *,
        start: datetime | None = None,
        end: datetime | None = None,
        reading_type: str | None = None,
        source: str | None = None,
        limit: int | None = None,
        ascending: bool = False,
    ) -> list[EnergyReading]:
        """
        Return readings in the optional ``[start, end]`` window, newest first.
        """

        stmt = select(EnergyReading)
        if start is not None:
            stmt = stmt.where(EnergyReading.timestamp >= to_storage_timestamp(start))
        if end is not None:
            stmt = stmt.where(EnergyReading.timestamp <= to_storage_timestamp(end))
        if reading_type:
            stmt = stmt.where(EnergyReading.type == reading_type)
        if source:
            stmt = stmt.where(EnergyReading.source == source)

        order = EnergyReading.timestamp.asc() if ascending else EnergyReading.timestamp.desc()
        stmt = stmt.order_by(order, EnergyReading.id.asc())
        if limit is not None:
            stmt = stmt.limit(max(1, limit))

        return list(self._session.execute(stmt).scalars().all())

    def _deduplicate_payloads(
        self,
        payloads: Sequence[dict[str, Any]],
    ) -> list[dict[str, Any]]:
        seen: set[tuple[Any, ...]] = set()
        deduped_payloads: list[dict[str, Any]] = []

        for payload in payloads:
            key = tuple(payload[column] for column in _DEDUPE_COLUMNS)
            if key in seen:
                continue
            seen.add(key)
            deduped_payloads.append(payload)

        return deduped_payloads
