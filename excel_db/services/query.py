from __future__ import annotations

from collections.abc import Mapping

from ..models.cell_value import EMPTY, CellValue, Text
from ..models.row import Row

"""Query engine over the in-memory row set.

All functions work on a plain ``list[Row]``. A query is a Row of required
column -> value pairs: a row matches when it holds every queried column with
an equal value. A row missing a queried column never matches. An empty or
None query matches every row.

Mutating helpers change the list / rows in place and return how many rows
they touched; persisting the result is the caller's job.
"""

__all__ = [
    "row_matches",
    "select",
    "get_column_value",
    "update",
    "delete",
    "count_non_empty",
    "add_column",
    "remove_column",
]


def row_matches(row: Mapping[str, CellValue], query: Mapping[str, CellValue] | None) -> bool:
    if not query:
        return True
    for column, wanted in query.items():
        if column not in row or row[column] != wanted:
            return False
    return True


def select(rows: list[Row], query: Row | None = None) -> list[Row] | None:
    """Return copies of the matching rows in stored order, or None if none match."""
    result = [dict(row) for row in rows if row_matches(row, query)]
    return result or None


def get_column_value(
    rows: list[Row], search_column: str, search_value: CellValue, target_column: str
) -> CellValue | None:
    """``target_column`` of the first row whose ``search_column`` equals ``search_value``.

    Only the first such row is considered; if it lacks ``target_column`` the
    result is None even when a later row would have it.
    """
    for row in rows:
        if search_column in row and row[search_column] == search_value:
            return row.get(target_column)
    return None


def update(rows: list[Row], query: Row | None, patch: Row) -> int:
    """Merge ``patch`` into every matching row; return the match count."""
    matched = 0
    for row in rows:
        if row_matches(row, query):
            row.update(patch)
            matched += 1
    return matched


def delete(rows: list[Row], query: Row | None) -> int:
    """Drop every matching row; return how many were removed."""
    kept = [row for row in rows if not row_matches(row, query)]
    removed = len(rows) - len(kept)
    rows[:] = kept
    return removed


def count_non_empty(rows: list[Row], column: str) -> int:
    """Rows holding text in ``column`` that is not blank after trimming."""
    return sum(
        1 for row in rows if isinstance(row.get(column), Text) and not row[column].is_blank()
    )


def add_column(rows: list[Row], column: str, default: CellValue | None = None) -> int:
    """Give ``column`` to every row lacking it; existing values are kept."""
    value = EMPTY if default is None else default
    added = 0
    for row in rows:
        if column not in row:
            row[column] = value
            added += 1
    return added


def remove_column(rows: list[Row], column: str) -> int:
    removed = 0
    for row in rows:
        if row.pop(column, None) is not None:
            removed += 1
    return removed
