"""
Model package exports.

Import all SQLAlchemy models here so metadata registration and Alembic
autogeneration work without extra imports.
"""

from db.models.energy_reading import EnergyReading, ReadingType, ReadingUnit

__all__ = [
    "EnergyReading",
    "ReadingType",
    "ReadingUnit",
]
