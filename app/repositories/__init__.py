"""
app/repositories package marker.
"""

from app.repositories.energy_reading_repository import EnergyReadingRepository

__all__ = [
    "EnergyReadingRepository",
]
