"""
db/models/energy_reading.py

Timestamped energy consumption reading in canonical units.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Float, Index, Integer, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base


class ReadingType:
    ELECTRICITY = "electricity"


class ReadingUnit:
    KWH = "kWh"


class EnergyReading(Base):
    __tablename__ = "energy_readings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        comment="Start of the measured interval, stored in UTC",
    )
    type: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        default=ReadingType.ELECTRICITY,
        comment="electricity, gas, water",
    )
    value: Mapped[float] = mapped_column(Float, nullable=False)
    unit: Mapped[str] = mapped_column(String(16), nullable=False, default=ReadingUnit.KWH)
    source: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        default="manual",
        comment="Import format or device that produced the reading",
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    __table_args__ = (
        UniqueConstraint("timestamp", "type", "source", name="uq_energy_readings_timestamp_type_source"),
        Index("ix_energy_readings_timestamp", "timestamp"),
        Index("ix_energy_readings_type", "type"),
    )
