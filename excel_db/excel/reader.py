from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from ..models.cell_value import EMPTY, CellValue
from ..models.row import Row
from ..models.schema import TableSchema
from .workbook import ExcelDbError, ExcelDocument, SheetNotFoundError

"""Table loader.

Row 1 of a sheet is the header row, rows 2.. are data rows. Every loaded row
carries every header column: short rows are padded with empty text.
"""

__all__ = [
    "NoHeadersError",
    "SheetData",
    "read_sheet",
    "load_sheet",
]

logger = logging.getLogger(__name__)


class NoHeadersError(ExcelDbError):
    """Raised when a sheet has no rows at all, so no header can be read."""

    def __init__(self, sheet_name: str) -> None:
        self.sheet_name = sheet_name
        super().__init__(f'No headers found in sheet "{sheet_name}"')


@dataclass
class SheetData:
    sheet_name: str
    columns: list[str]  # header row as read, duplicates kept
    rows: list[Row] = field(default_factory=list)

    @property
    def schema(self) -> TableSchema:
        return TableSchema.from_header(self.columns)


def read_sheet(document: ExcelDocument, sheet_name: str) -> SheetData:
    """Build typed rows for ``sheet_name`` of an open document.

    Raises:
        SheetNotFoundError: the sheet does not exist
        NoHeadersError: the sheet has zero rows
    """
    sheet = document.get_sheet(sheet_name)
    if sheet is None:
        raise SheetNotFoundError(sheet_name)

    raw_rows = [[CellValue.from_raw(v) for v in values] for values in sheet.iter_rows()]
    if not raw_rows:
        raise NoHeadersError(sheet_name)

    headers = [str(cv) for cv in raw_rows[0]]
    rows: list[Row] = []
    for values in raw_rows[1:]:
        row: Row = {}
        # duplicate header names: the last one's value wins
        for idx, header in enumerate(headers):
            row[header] = values[idx] if idx < len(values) else EMPTY
        rows.append(row)

    logger.debug("loaded sheet %r columns=%s rows=%d", sheet_name, headers, len(rows))
    return SheetData(sheet_name=sheet_name, columns=headers, rows=rows)


def load_sheet(path: str | Path, sheet_name: str) -> SheetData:
    """Open the workbook at ``path`` and read one sheet."""
    return read_sheet(ExcelDocument.open(path), sheet_name)
