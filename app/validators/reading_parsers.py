"""
app/validators/reading_parsers.py

Per-field parsing for energy export rows: dates, numbers and unit scaling.

Date detection is structural and evaluated per row, in this order:

    1. ISO-8601 with a ``T`` separator
    2. day/month/year (French exports), optional trailing ``HH:MM``
    3. year/month/day, optional trailing ``HH:MM``
    4. best-effort parse through pandas

The first rule whose shape matches decides the result. Providers mix
conventions even inside one export family, so the order is part of the
contract and must not be changed.
"""

from __future__ import annotations

import math
import re
import warnings
from datetime import datetime, timezone, tzinfo
from typing import Callable

import pandas as pd

NOISE_FLOOR_KWH = 0.001
KWH_DECIMALS = 3

_TIME_PATTERN = re.compile(r"(\d{1,2}):(\d{2})")
_DAY_FIRST_PATTERN = re.compile(r"^(\d{1,2})[/\-.](\d{1,2})[/\-.](\d{4})(.*)$")
_YEAR_FIRST_PATTERN = re.compile(r"^(\d{4})[/\-.](\d{1,2})[/\-.](\d{1,2})(.*)$")
_WHITESPACE_PATTERN = re.compile(r"\s+")
_DECIMAL_PATTERN = re.compile(r"^(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$")


class RowParseError(ValueError):
    """
    Base class for field-level failures that skip a single row.
    """

    code = "row_parse_error"

    def __init__(self, message: str, raw: str | None = None) -> None:
        super().__init__(message)
        self.raw = raw


class InvalidDateError(RowParseError):
    code = "invalid_date"


class InvalidNumberError(RowParseError):
    code = "invalid_value"


def _extract_time(rest: str, time_str: str | None) -> tuple[int, int]:
    match = _TIME_PATTERN.search(rest)
    if match is None and time_str:
        match = _TIME_PATTERN.search(time_str)
    if match is None:
        return 0, 0
    return int(match.group(1)), int(match.group(2))


def _build_datetime(raw: str, year: str, month: str, day: str, rest: str, time_str: str | None) -> datetime:
    hours, minutes = _extract_time(rest, time_str)
    try:
        return datetime(int(year), int(month), int(day), hours, minutes)
    except ValueError as exc:
        raise InvalidDateError(f'Invalid date "{raw}"', raw) from exc


def _parse_iso(raw: str, time_str: str | None) -> datetime | None:
    if "T" not in raw:
        return None
    normalized = raw[:-1] + "+00:00" if raw.endswith("Z") else raw
    try:
        return datetime.fromisoformat(normalized)
    except ValueError:
        return None


def _parse_day_first(raw: str, time_str: str | None) -> datetime | None:
    match = _DAY_FIRST_PATTERN.match(raw)
    if match is None:
        return None
    day, month, year, rest = match.groups()
    return _build_datetime(raw, year, month, day, rest, time_str)


def _parse_year_first(raw: str, time_str: str | None) -> datetime | None:
    match = _YEAR_FIRST_PATTERN.match(raw)
    if match is None:
        return None
    year, month, day, rest = match.groups()
    return _build_datetime(raw, year, month, day, rest, time_str)


def _parse_fallback(raw: str, time_str: str | None) -> datetime | None:
    with warnings.catch_warnings():
        # pandas warns when it has to guess a format for a lone string
        warnings.simplefilter("ignore")
        try:
            parsed = pd.to_datetime(raw, errors="coerce")
        except (ValueError, TypeError, OverflowError):
            return None
    if parsed is None or pd.isna(parsed):
        return None
    return parsed.to_pydatetime()


DATE_PARSERS: tuple[Callable[[str, str | None], datetime | None], ...] = (
    _parse_iso,
    _parse_day_first,
    _parse_year_first,
    _parse_fallback,
)


def is_ambiguous_wall_time(value: datetime, tz: tzinfo) -> bool:
    """
    True when naive ``value`` occurs twice in ``tz`` (the autumn DST hour).

    Times skipped by a spring transition also have two candidate offsets,
    but neither converts back to the same wall-clock time.
    """

    first = value.replace(tzinfo=tz, fold=0)
    second = value.replace(tzinfo=tz, fold=1)
    if first.utcoffset() == second.utcoffset():
        return False
    round_trip = first.astimezone(timezone.utc).astimezone(tz).replace(tzinfo=None)
    return round_trip == value


def _localize(value: datetime, tz: tzinfo, fold: int) -> datetime:
    if fold and is_ambiguous_wall_time(value, tz):
        return value.replace(tzinfo=tz, fold=1)
    return value.replace(tzinfo=tz, fold=0)


def parse_reading_date(
    date_str: str | None,
    time_str: str | None = None,
    *,
    tz: tzinfo = timezone.utc,
    fold: int = 0,
) -> datetime:
    """
    Parse an export date (plus optional separate time) into a UTC datetime.

    A time embedded in ``date_str`` wins over ``time_str``. Naive values are
    read as wall-clock time in ``tz``. ``fold=1`` selects the second
    occurrence of a repeated wall-clock time and is ignored otherwise.
    """

    raw = (date_str or "").strip()
    if not raw:
        raise InvalidDateError('Invalid date ""', raw)

    for parser in DATE_PARSERS:
        parsed = parser(raw, time_str)
        if parsed is None:
            continue
        if parsed.tzinfo is None:
            parsed = _localize(parsed, tz, fold)
        return parsed.astimezone(timezone.utc)

    raise InvalidDateError(f'Invalid date "{raw}"', raw)


def parse_numeric_value(raw: str | None) -> float:
    """
    Parse a reading value written with either decimal notation.

    ``"1 234,5"`` and ``"1234.5"`` both give 1234.5.
    """

    if raw is None or str(raw).strip() == "":
        raise InvalidNumberError('Invalid value ""', raw)

    cleaned = _WHITESPACE_PATTERN.sub("", str(raw)).replace(",", ".", 1)
    if not _DECIMAL_PATTERN.match(cleaned):
        raise InvalidNumberError(f'Invalid value "{raw}"', raw)
    try:
        value = float(cleaned)
    except ValueError as exc:
        raise InvalidNumberError(f'Invalid value "{raw}"', raw) from exc

    if not math.isfinite(value) or value < 0:
        raise InvalidNumberError(f'Invalid value "{raw}"', raw)
    return value


def normalize_to_kwh(value: float, multiplier: float) -> float | None:
    """
    Scale ``value`` to kWh and round it; None when below the noise floor.
    """

    scaled = value * multiplier
    if scaled < NOISE_FLOOR_KWH:
        return None
    return round(scaled, KWH_DECIMALS)
