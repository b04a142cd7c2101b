from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path

from ..models.cell_value import EMPTY
from ..models.row import Row
from ..models.schema import HeaderPolicy, TableSchema, resolve_header
from ..services.progress import RowProgressTracker
from .workbook import ExcelDocument, ExcelSheet, SheetExistsError, SheetNotFoundError, StorageError

"""Table writer.

A save rebuilds the sheet from scratch: the old sheet is discarded, a fresh
sheet is created at the same position, the header row goes to row 1 and each
cached row is written positionally against it from row 2 on. The whole
document is then written back to its path.
"""

__all__ = [
    "populate_sheet",
    "write_sheet",
    "add_sheet",
    "create_workbook",
]

logger = logging.getLogger(__name__)

HEADER_ROW = 1


def populate_sheet(
    sheet: ExcelSheet,
    header: Sequence[str],
    rows: Sequence[Row],
    progress: RowProgressTracker | None = None,
) -> None:
    """Write header + rows into an empty sheet.

    A row lacking a header column gets empty text; columns not in the header
    are not written. An empty header writes nothing.
    """
    if not header:
        return
    for col_idx, name in enumerate(header, start=1):
        sheet.set_cell(col_idx, HEADER_ROW, name)
    for row_idx, row in enumerate(rows, start=HEADER_ROW + 1):
        for col_idx, name in enumerate(header, start=1):
            sheet.set_cell(col_idx, row_idx, row.get(name, EMPTY).to_raw())
        if progress is not None:
            progress.advance()


def write_sheet(
    path: str | Path,
    sheet_name: str,
    rows: Sequence[Row],
    schema: TableSchema | None = None,
    policy: HeaderPolicy = HeaderPolicy.SCHEMA,
    *,
    atomic: bool = True,
    show_progress: bool = False,
) -> list[str]:
    """Replace ``sheet_name`` in the workbook at ``path`` with ``rows``.

    Returns the header that was written.

    Raises:
        SheetNotFoundError: the sheet disappeared since it was loaded
        StorageError / CodecError: reading or writing the workbook failed
    """
    document = ExcelDocument.open(path)
    if not document.has_sheet(sheet_name):
        raise SheetNotFoundError(sheet_name)

    header = resolve_header(rows, schema, policy)
    if policy is HeaderPolicy.FIRST_ROW and rows:
        dropped = {c for row in rows[1:] for c in row if c not in header}
        if dropped:
            logger.warning(
                "sheet %r: columns %s are not in the first row and were not written",
                sheet_name,
                sorted(dropped),
            )

    sheet = document.replace_sheet(sheet_name)
    with RowProgressTracker(len(rows), sheet_name=sheet_name, enabled=show_progress) as progress:
        populate_sheet(sheet, header, rows if header else [], progress)
    document.save(atomic=atomic)
    logger.debug("wrote sheet %r header=%s rows=%d", sheet_name, header, len(rows))
    return header


def add_sheet(
    path: str | Path,
    sheet_name: str,
    rows: Sequence[Row] | None = None,
    policy: HeaderPolicy = HeaderPolicy.SCHEMA,
    *,
    atomic: bool = True,
) -> list[str]:
    """Append a new sheet, optionally seeded with ``rows``.

    Raises:
        SheetExistsError: a sheet with that name already exists
    """
    document = ExcelDocument.open(path)
    if document.has_sheet(sheet_name):
        raise SheetExistsError(sheet_name)
    sheet = document.create_sheet(sheet_name)
    rows = list(rows or [])
    header = resolve_header(rows, None, policy)
    populate_sheet(sheet, header, rows)
    document.save(atomic=atomic)
    logger.debug("added sheet %r header=%s rows=%d", sheet_name, header, len(rows))
    return header


def create_workbook(
    path: str | Path,
    sheet_name: str,
    columns: Sequence[str] = (),
    *,
    atomic: bool = True,
) -> Path:
    """Create a new workbook with one sheet whose header row is ``columns``.

    Raises:
        StorageError: ``path`` already exists
    """
    target = Path(path)
    if target.exists():
        raise StorageError(f"refusing to overwrite existing file: {target}")
    document = ExcelDocument.new(target)
    sheet = document.create_sheet(sheet_name)
    populate_sheet(sheet, list(TableSchema(columns)), [])
    return document.save(atomic=atomic)
