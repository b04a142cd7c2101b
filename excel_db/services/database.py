from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from pathlib import Path
from typing import Any

import pandas as pd

from ..excel import writer
from ..excel.reader import load_sheet
from ..excel.workbook import ExcelDbError, ExcelDocument
from ..models.cell_value import CellValue
from ..models.config_models import DEFAULT_SHEET_NAME, DatabaseConfig
from ..models.row import Row, coerce_row, coerce_value
from ..models.schema import HeaderPolicy, TableSchema
from . import query as q

"""Database handle: one sheet of a workbook used as a table.

The handle loads the sheet once at construction. Read-only calls (select,
get_column_value, get_column_datas_number) work on the in-memory cache only.
Every mutating call changes the cache and then saves the whole sheet back.
Sheet-management calls (add_sheet, is_sheet_exists, get_all_sheet_names)
open the workbook directly and never touch the cache.

If a save fails after the cache was changed, the cache keeps the new state
and the error is re-raised; call save() again or refresh() to resync.
"""

__all__ = [
    "ExcelDatabase",
]

logger = logging.getLogger(__name__)

RowLike = Mapping[str, "CellValue | str"]


class ExcelDatabase:
    """CRUD access to a single sheet of an .xlsx file."""

    def __init__(
        self,
        file_path: str | Path,
        sheet_name: str | None = None,
        *,
        header_policy: HeaderPolicy = HeaderPolicy.SCHEMA,
        atomic_save: bool = True,
        show_progress: bool = False,
    ) -> None:
        """Load ``sheet_name`` (default "Sheet1") of the workbook at ``file_path``.

        Raises:
            SheetNotFoundError: the sheet does not exist
            NoHeadersError: the sheet has no rows at all
            StorageError / CodecError: the workbook cannot be read
        """
        self._file_path = Path(file_path)
        self._sheet_name = sheet_name or DEFAULT_SHEET_NAME
        self.header_policy = HeaderPolicy(header_policy)
        self.atomic_save = atomic_save
        self.show_progress = show_progress
        self._data: list[Row] = []
        self._schema = TableSchema()
        self.refresh()

    @classmethod
    def from_config(cls, config: DatabaseConfig) -> ExcelDatabase:
        return cls(
            config.file,
            config.sheet,
            header_policy=config.header_policy,
            atomic_save=config.atomic_save,
            show_progress=config.show_progress,
        )

    @classmethod
    def create(
        cls,
        file_path: str | Path,
        sheet_name: str | None = None,
        columns: Sequence[str] = (),
        **kwargs: Any,
    ) -> ExcelDatabase:
        """Create a new workbook with a single sheet and open it.

        With no ``columns`` the sheet is empty and cannot be loaded, so at
        least one column is required.
        """
        if not columns:
            raise ValueError("at least one column is required to create a table")
        sheet = sheet_name or DEFAULT_SHEET_NAME
        writer.create_workbook(file_path, sheet, columns, atomic=kwargs.get("atomic_save", True))
        logger.info("created workbook %s sheet=%r columns=%s", file_path, sheet, list(columns))
        return cls(file_path, sheet, **kwargs)

    # ------------------------------------------------------------------
    # load / save
    # ------------------------------------------------------------------

    @property
    def file_path(self) -> Path:
        return self._file_path

    @property
    def sheet_name(self) -> str:
        return self._sheet_name

    @property
    def columns(self) -> list[str]:
        return self._schema.columns

    @property
    def rows(self) -> list[Row]:
        return [dict(row) for row in self._data]

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return (
            f"ExcelDatabase(file_path={str(self._file_path)!r}, "
            f"sheet_name={self._sheet_name!r}, rows={len(self._data)})"
        )

    def refresh(self) -> None:
        """Reload the cache and schema from disk, discarding unsaved state."""
        data = load_sheet(self._file_path, self._sheet_name)
        self._data = data.rows
        self._schema = data.schema

    def save(self) -> None:
        """Write the cache back to the sheet."""
        try:
            header = writer.write_sheet(
                self._file_path,
                self._sheet_name,
                self._data,
                self._schema,
                self.header_policy,
                atomic=self.atomic_save,
                show_progress=self.show_progress,
            )
        except ExcelDbError as e:
            logger.error(
                "save failed for sheet %r of %s; in-memory rows are not on disk: %s",
                self._sheet_name,
                self._file_path,
                e,
            )
            raise
        if self.header_policy is HeaderPolicy.SCHEMA:
            for column in header:
                self._schema.add(column)

    # ------------------------------------------------------------------
    # reads (cache only)
    # ------------------------------------------------------------------

    def select(self, query: RowLike | None = None) -> list[Row] | None:
        """Rows matching every pair of ``query``; None when nothing matches."""
        return q.select(self._data, coerce_row(query))

    def get_column_value(
        self, search_column: str, search_value: CellValue | str, target_column: str
    ) -> CellValue | None:
        return q.get_column_value(self._data, search_column, coerce_value(search_value), target_column)

    def get_column_datas_number(self, column_name: str) -> int:
        """Count rows whose ``column_name`` holds non-blank text."""
        return q.count_non_empty(self._data, column_name)

    def to_dataframe(self) -> pd.DataFrame:
        """Cached rows as a pandas DataFrame of strings, header order columns.

        Cells a row does not have are empty strings.
        """
        header = self._schema.columns
        for row in self._data:
            for column in row:
                if column not in header:
                    header.append(column)
        records = [[str(row[c]) if c in row else "" for c in header] for row in self._data]
        return pd.DataFrame(records, columns=header, dtype="object")

    # ------------------------------------------------------------------
    # mutations (cache, then save)
    # ------------------------------------------------------------------

    def insert(self, new_row: RowLike) -> None:
        """Append a row as given (no column validation) and save."""
        row = coerce_row(new_row)
        self._data.append(row)
        self._schema.extend_from(row)
        self.save()

    def update(self, query: RowLike | None, update_data: RowLike) -> int:
        """Merge ``update_data`` into every row matching ``query``, then save.

        The save happens even when nothing matched. Returns the match count.
        """
        patch = coerce_row(update_data)
        matched = q.update(self._data, coerce_row(query), patch)
        if matched:
            self._schema.extend_from(patch)
        self.save()
        return matched

    def delete(self, query: RowLike | None) -> int:
        """Remove every row matching ``query``, then save. Returns removed count."""
        removed = q.delete(self._data, coerce_row(query))
        self.save()
        return removed

    def add_column(self, column_name: str, default_value: CellValue | str | None = None) -> int:
        """Give ``column_name`` to rows lacking it (``default_value`` or empty text)."""
        default = None if default_value is None else coerce_value(default_value)
        added = q.add_column(self._data, column_name, default)
        self._schema.add(column_name)
        self.save()
        return added

    def remove_column(self, column_name: str) -> int:
        removed = q.remove_column(self._data, column_name)
        self._schema.remove(column_name)
        self.save()
        return removed

    # ------------------------------------------------------------------
    # sheet management (workbook, not cache)
    # ------------------------------------------------------------------

    def add_sheet(self, new_sheet_name: str, initial_data: Iterable[RowLike] | None = None) -> None:
        """Add a sheet, optionally seeded with rows.

        Raises:
            SheetExistsError: a sheet with that name already exists
        """
        rows = [coerce_row(r) for r in initial_data] if initial_data is not None else None
        writer.add_sheet(
            self._file_path, new_sheet_name, rows, self.header_policy, atomic=self.atomic_save
        )

    def is_sheet_exists(self, sheet_name: str) -> bool:
        return ExcelDocument.open(self._file_path).has_sheet(sheet_name)

    def get_all_sheet_names(self) -> list[str]:
        return ExcelDocument.open(self._file_path).sheet_names()
