"""
app/domain package marker.
"""

from app.domain.energy_reading import (
    CanonicalReading,
    DateRange,
    ImportDiagnostics,
    NormalizationResult,
    RowImportError,
)

__all__ = [
    "CanonicalReading",
    "DateRange",
    "ImportDiagnostics",
    "NormalizationResult",
    "RowImportError",
]
