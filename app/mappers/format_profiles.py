"""
app/mappers/format_profiles.py

Parsing rules for each supported utility-provider export format.

Each profile lists the column names a provider has been seen to use, in
priority order. Adding a provider is an entry in FORMAT_PROFILES.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping

WH_TO_KWH = 0.001


class UnknownFormatError(ValueError):
    """
    Raised when an import is requested for an unsupported format identifier.
    """

    def __init__(self, format_name: str, supported: tuple[str, ...]) -> None:
        super().__init__(
            f"Unknown format: {format_name}. Supported: {', '.join(supported)}"
        )
        self.format_name = format_name
        self.supported = supported


@dataclass(frozen=True)
class FormatProfile:
    """
    Delimiter, column candidates and unit scale for one export style.
    """

    delimiter: str
    date_columns: tuple[str, ...]
    value_columns: tuple[str, ...]
    time_column: str | None = None
    value_multiplier: float = 1.0
    skip_lines: int = 0

    def __post_init__(self) -> None:
        if len(self.delimiter) != 1:
            raise ValueError("delimiter must be a single character.")
        if not self.date_columns:
            raise ValueError("A format profile needs at least one date column.")
        if not self.value_columns:
            raise ValueError("A format profile needs at least one value column.")
        if self.value_multiplier <= 0:
            raise ValueError("value_multiplier must be positive.")
        if self.skip_lines < 0:
            raise ValueError("skip_lines cannot be negative.")


FORMAT_PROFILES: Mapping[str, FormatProfile] = MappingProxyType(
    {
        # Enedis / Linky standard export
        "linky": FormatProfile(
            delimiter=";",
            date_columns=("Date", "Horodate", "date", "Date de début"),
            value_columns=("Valeur", "Consommation (Wh)", "value", "Valeur (en Wh)"),
            time_column="Heure",
            value_multiplier=WH_TO_KWH,
        ),
        # Enedis detailed load curve
        "enedis": FormatProfile(
            delimiter=";",
            date_columns=("Horodate", "Date et heure de début de la mesure"),
            value_columns=("Valeur", "Valeur (en Wh)", "Consommation (Wh)"),
            value_multiplier=WH_TO_KWH,
        ),
        "totalenergies": FormatProfile(
            delimiter=";",
            date_columns=("Date", "Date de relevé", "Période"),
            value_columns=("Consommation (kWh)", "Conso. (kWh)", "Quantité", "Index"),
        ),
        "edf": FormatProfile(
            delimiter=";",
            date_columns=("Date", "Date de consommation", "Période de consommation"),
            value_columns=(
                "Consommation (kWh)",
                "Energie consommée (kWh)",
                "Quantité (kWh)",
            ),
            time_column="Heure",
        ),
        # EDF 30-minute detail, values in W or Wh
        "edf_detail": FormatProfile(
            delimiter=";",
            date_columns=("Horodatage", "Date/Heure"),
            value_columns=("Puissance moyenne (W)", "Puissance (W)", "Consommation (Wh)"),
            value_multiplier=WH_TO_KWH,
        ),
        "generic": FormatProfile(
            delimiter=",",
            date_columns=("date", "Date", "datetime", "timestamp", "Timestamp"),
            value_columns=("value", "Value", "consumption", "kWh", "kwh", "Consommation"),
        ),
    }
)


def list_supported_formats() -> tuple[str, ...]:
    """
    Return supported format identifiers in declaration order.
    """

    return tuple(FORMAT_PROFILES)


def resolve_format_profile(format_name: str) -> FormatProfile:
    """
    Return the profile registered under ``format_name`` (case-sensitive).
    """

    profile = FORMAT_PROFILES.get(format_name)
    if profile is None:
        raise UnknownFormatError(format_name, list_supported_formats())
    return profile
