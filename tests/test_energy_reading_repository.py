"""
tests/test_energy_reading_repository.py

Repository behaviour against in-memory SQLite.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.orm import Session

from app.domain.energy_reading import CanonicalReading
from app.repositories.energy_reading_repository import (
    EnergyReadingRepository,
    as_utc,
    to_storage_timestamp,
)

UTC = timezone.utc
BASE = datetime(2024, 3, 1, tzinfo=UTC)


def _readings(count: int, *, source: str = "generic", start: datetime = BASE) -> list[CanonicalReading]:
    return [
        CanonicalReading(timestamp=start + timedelta(hours=i), value=float(i + 1), source=source)
        for i in range(count)
    ]


class TestTimestampHelpers:
    def test_storage_timestamp_is_naive_utc(self) -> None:
        paris_like = timezone(timedelta(hours=1))
        value = datetime(2024, 3, 1, 14, 30, tzinfo=paris_like)

        assert to_storage_timestamp(value) == datetime(2024, 3, 1, 13, 30)

    def test_naive_timestamp_is_kept(self) -> None:
        assert to_storage_timestamp(datetime(2024, 3, 1)) == datetime(2024, 3, 1)

    def test_as_utc_attaches_utc(self) -> None:
        assert as_utc(datetime(2024, 3, 1, 13, 30)) == datetime(2024, 3, 1, 13, 30, tzinfo=UTC)


class TestBulkInsert:
    def test_inserts_every_reading(self, db_session: Session) -> None:
        repository = EnergyReadingRepository(db_session)

        inserted = repository.bulk_insert(_readings(3))
        db_session.commit()

        assert inserted == 3
        assert len(repository.list_readings()) == 3

    def test_empty_input_is_a_no_op(self, db_session: Session) -> None:
        assert EnergyReadingRepository(db_session).bulk_insert([]) == 0

    def test_duplicates_within_a_batch_keep_the_first(self, db_session: Session) -> None:
        repository = EnergyReadingRepository(db_session)
        first = CanonicalReading(timestamp=BASE, value=1.0, source="linky")
        second = CanonicalReading(timestamp=BASE, value=2.0, source="linky")

        inserted = repository.bulk_insert([first, second])

        assert inserted == 1
        assert [row.value for row in repository.list_readings()] == [1.0]

    def test_existing_rows_are_skipped(self, db_session: Session) -> None:
        repository = EnergyReadingRepository(db_session)
        repository.bulk_insert(_readings(2))
        db_session.commit()

        inserted = repository.bulk_insert(_readings(4))

        assert inserted == 2
        assert len(repository.list_readings()) == 4

    def test_same_timestamp_from_other_source_is_kept(self, db_session: Session) -> None:
        repository = EnergyReadingRepository(db_session)

        repository.bulk_insert(_readings(1, source="linky"))
        inserted = repository.bulk_insert(_readings(1, source="edf"))

        assert inserted == 1

    def test_large_imports_are_chunked(self, db_session: Session) -> None:
        repository = EnergyReadingRepository(db_session)

        inserted = repository.bulk_insert(_readings(450), batch_size=100)

        assert inserted == 450


class TestListAndDelete:
    @pytest.fixture()
    def repository(self, db_session: Session) -> EnergyReadingRepository:
        repository = EnergyReadingRepository(db_session)
        repository.bulk_insert(_readings(5, source="linky"))
        repository.bulk_insert(_readings(2, source="edf", start=BASE + timedelta(days=1)))
        db_session.commit()
        return repository

    def test_list_is_newest_first_by_default(self, repository: EnergyReadingRepository) -> None:
        timestamps = [row.timestamp for row in repository.list_readings()]
        assert timestamps == sorted(timestamps, reverse=True)

    def test_list_filters_by_window_and_source(self, repository: EnergyReadingRepository) -> None:
        rows = repository.list_readings(
            start=BASE + timedelta(hours=1),
            end=BASE + timedelta(hours=3),
            source="linky",
            ascending=True,
        )

        assert [row.value for row in rows] == [2.0, 3.0, 4.0]

    def test_list_respects_limit(self, repository: EnergyReadingRepository) -> None:
        assert len(repository.list_readings(limit=2)) == 2

    def test_delete_by_source(self, repository: EnergyReadingRepository) -> None:
        assert repository.delete_readings(source="edf") == 2
        assert {row.source for row in repository.list_readings()} == {"linky"}

    def test_delete_before(self, repository: EnergyReadingRepository) -> None:
        deleted = repository.delete_readings(before=BASE + timedelta(hours=2))

        assert deleted == 2
        assert len(repository.list_readings()) == 5

    def test_delete_by_id(self, repository: EnergyReadingRepository) -> None:
        target = repository.list_readings(limit=1)[0]

        assert repository.delete_readings(reading_id=target.id) == 1
        assert repository.delete_readings(reading_id=target.id) == 0

    def test_delete_requires_a_filter(self, repository: EnergyReadingRepository) -> None:
        with pytest.raises(ValueError):
            repository.delete_readings()
