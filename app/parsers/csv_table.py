"""
app/parsers/csv_table.py

Tolerant delimited-text parsing into header-keyed records.
"""

from __future__ import annotations

import csv
import io
import logging

logger = logging.getLogger(__name__)

RawRecord = dict[str, str]

ALTERNATE_DELIMITERS: dict[str, str] = {
    ",": ";",
    ";": ",",
}


class NoRecordsError(ValueError):
    """
    Raised when the input yields no data rows under any tried delimiter.
    """


def strip_preamble(text: str, skip_lines: int) -> str:
    """
    Drop the first ``skip_lines`` lines (provider metadata above the header).
    """

    if skip_lines <= 0:
        return text
    return "\n".join(text.split("\n")[skip_lines:])


def _read_table(text: str, delimiter: str) -> tuple[list[str], list[RawRecord]]:
    reader = csv.reader(io.StringIO(text, newline=""), delimiter=delimiter)
    header: list[str] | None = None
    records: list[RawRecord] = []

    for cells in reader:
        if not cells or all(cell.strip() == "" for cell in cells):
            continue
        if header is None:
            header = [cell.strip() for cell in cells]
            continue

        # zip() drops surplus cells and leaves trailing columns absent.
        record: RawRecord = {}
        for name, value in zip(header, cells):
            if name and name not in record:
                record[name] = value.strip()
        records.append(record)

    return header or [], records


def parse_table(text: str, delimiter: str) -> list[RawRecord]:
    """
    Parse ``text`` using its first non-blank line as the header.

    When ``delimiter`` does not split the header into several columns (or
    yields no rows), the alternate common delimiter is tried once.
    """

    cleaned = text.lstrip("\ufeff")
    attempts = [delimiter]
    alternate = ALTERNATE_DELIMITERS.get(delimiter)
    if alternate is not None:
        attempts.append(alternate)

    fallback: list[RawRecord] | None = None
    for attempt in attempts:
        try:
            header, records = _read_table(cleaned, attempt)
        except csv.Error as exc:
            logger.debug("CSV parse failed delimiter=%r: %s", attempt, exc)
            continue

        if len(header) > 1 and records:
            if attempt != delimiter:
                logger.info(
                    "CSV parsed with alternate delimiter=%r (configured %r)",
                    attempt,
                    delimiter,
                )
            return records
        if records and fallback is None:
            fallback = records

    if fallback:
        return fallback
    raise NoRecordsError("No valid records found in CSV.")
