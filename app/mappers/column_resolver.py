"""
app/mappers/column_resolver.py

Priority-ordered lookup of a field across candidate column names.
"""

from __future__ import annotations

from typing import Mapping, Sequence


def resolve_column(row: Mapping[str, str | None], candidates: Sequence[str]) -> str | None:
    """
    Return the first non-empty value among ``candidates``, or None.

    Candidates are tried in order; a column that is present but empty does
    not stop the search.
    """

    for name in candidates:
        value = row.get(name)
        if value is not None and value != "":
            return value
    return None
