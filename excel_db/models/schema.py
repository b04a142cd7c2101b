from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from enum import Enum

from .row import Row

"""Table schema and header policy for the Excel table database.

The schema is the ordered list of column names owned by a table handle.
It is populated from the header row when a sheet is loaded and updated
explicitly by insert / update / add_column / remove_column, so a save does not
depend on which row happens to be first.
"""

__all__ = [
    "HeaderPolicy",
    "TableSchema",
    "resolve_header",
]


class HeaderPolicy(Enum):
    """How the header row is chosen when a sheet is written.

    - SCHEMA: schema columns, then any extra columns found in the rows
      (first seen order). Nothing is dropped.
    - FIRST_ROW: the first row's keys. Extra columns of later rows are
      dropped and an empty table writes no header row at all.
    """
    SCHEMA = "schema"
    FIRST_ROW = "first_row"


class TableSchema:
    """Ordered set of column names."""

    def __init__(self, columns: Iterable[str] = ()) -> None:
        self._columns: list[str] = []
        for column in columns:
            self.add(column)

    @classmethod
    def from_header(cls, header: Sequence[str]) -> TableSchema:
        """Duplicates in the header collapse to their first position."""
        return cls(header)

    @property
    def columns(self) -> list[str]:
        return list(self._columns)

    def add(self, column: str) -> bool:
        """Append a column. Returns False if it was already known."""
        if column in self._columns:
            return False
        self._columns.append(column)
        return True

    def remove(self, column: str) -> bool:
        if column not in self._columns:
            return False
        self._columns.remove(column)
        return True

    def extend_from(self, row: Row) -> list[str]:
        """Add the row's unknown columns in row order; return the new ones."""
        return [column for column in row if self.add(column)]

    def __contains__(self, column: object) -> bool:
        return column in self._columns

    def __iter__(self) -> Iterator[str]:
        return iter(self._columns)

    def __len__(self) -> int:
        return len(self._columns)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TableSchema):
            return NotImplemented
        return self._columns == other._columns

    def __repr__(self) -> str:
        return f"TableSchema({self._columns!r})"


def resolve_header(
    rows: Sequence[Row],
    schema: TableSchema | None = None,
    policy: HeaderPolicy = HeaderPolicy.SCHEMA,
) -> list[str]:
    """Return the header row to write for ``rows``.

    FIRST_ROW ignores ``schema``. SCHEMA starts from ``schema`` (may be None)
    and widens it with every column present in any row.
    """
    if policy is HeaderPolicy.FIRST_ROW:
        return list(rows[0].keys()) if rows else []

    header = TableSchema(schema or ())
    for row in rows:
        header.extend_from(row)
    return header.columns
