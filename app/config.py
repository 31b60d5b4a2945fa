"""
app/config.py

Application-level configuration helpers.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from db.config import load_env_files

_DEFAULT_TIMEZONE = "UTC"
_DEFAULT_IMPORT_FORMAT = "linky"


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    """
    Ensure project `.env` files are loaded once before reading app settings.
    """

    load_env_files()


def _get_bool_env(name: str, default: bool) -> bool:
    """
    Read a boolean from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    return raw_value.strip().lower() in {"1", "true", "yes", "on"}


def _get_int_env(name: str, default: int) -> int:
    """
    Read an integer from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return int(raw_value)
    except ValueError:
        return default


def _get_str_env(name: str, default: str) -> str:
    """
    Read a string from environment variables with fallback.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return default
    stripped = value.strip()
    return stripped if stripped else default


def _get_timezone_env(name: str, default: str) -> str:
    """
    Read an IANA timezone name, falling back when it is unknown.
    """

    value = _get_str_env(name, default)
    try:
        ZoneInfo(value)
    except (ZoneInfoNotFoundError, ValueError):
        return default
    return value


@dataclass(frozen=True)
class ReadingImportSettings:
    """
    Runtime settings for energy reading imports.
    """

    max_row_errors: int = 10
    max_warnings: int = 5
    log_row_errors: bool = True
    timezone: str = _DEFAULT_TIMEZONE
    default_format: str = _DEFAULT_IMPORT_FORMAT

    @property
    def tzinfo(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)


@lru_cache(maxsize=1)
def get_reading_import_settings() -> ReadingImportSettings:
    """
    Return cached reading import settings from environment variables.
    """

    return ReadingImportSettings(
        max_row_errors=max(1, _get_int_env("READINGS_IMPORT_MAX_ROW_ERRORS", 10)),
        max_warnings=max(1, _get_int_env("READINGS_IMPORT_MAX_WARNINGS", 5)),
        log_row_errors=_get_bool_env("READINGS_IMPORT_LOG_ROW_ERRORS", True),
        timezone=_get_timezone_env("READINGS_IMPORT_TIMEZONE", _DEFAULT_TIMEZONE),
        default_format=_get_str_env("READINGS_IMPORT_DEFAULT_FORMAT", _DEFAULT_IMPORT_FORMAT),
    )
