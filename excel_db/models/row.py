from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE

from ..excel.workbook import CodecError
from .cell_value import CellValue, Text

"""Row model for the Excel table database.

A Row maps column name -> CellValue. Python dicts keep insertion order, so a
row's key order is well defined; it is the order used when a header has to be
derived from a row. Column presence is per row: a row does not have to carry
every column known to the table.
"""

__all__ = [
    "Row",
    "coerce_value",
    "coerce_row",
    "row_to_strings",
]

Row = dict[str, CellValue]


def coerce_value(value: Any) -> CellValue:
    """Accept a CellValue or a plain str (wrapped in Text).

    Raises:
        TypeError: value is neither a CellValue nor a str
        CodecError: text holds control characters a worksheet cannot store
    """
    if isinstance(value, str):
        value = Text(value)
    elif not isinstance(value, CellValue):
        raise TypeError(f"cell value must be CellValue or str, got {type(value).__name__}")
    raw = value.to_raw()
    if isinstance(raw, str) and ILLEGAL_CHARACTERS_RE.search(raw):
        raise CodecError(f"cell value {raw!r} contains characters that cannot be stored in a worksheet")
    return value


def coerce_row(values: Mapping[str, Any] | None) -> Row:
    """Build a Row from a mapping of column name -> CellValue | str.

    None yields an empty row (the "match everything" query).
    """
    if values is None:
        return {}
    row: Row = {}
    for column, value in values.items():
        if not isinstance(column, str):
            raise TypeError(f"column name must be str, got {type(column).__name__}")
        row[column] = coerce_value(value)
    return row


def row_to_strings(row: Row) -> dict[str, str]:
    """Plain str view of a row, used for JSON output."""
    return {column: str(value.to_raw()) for column, value in row.items()}
