from __future__ import annotations

import logging
import os
import shutil
import tempfile
import zipfile
from collections.abc import Iterator
from pathlib import Path
from typing import Any

import openpyxl
from openpyxl.utils.exceptions import IllegalCharacterError, InvalidFileException
from openpyxl.workbook.workbook import Workbook
from openpyxl.worksheet.worksheet import Worksheet

"""Workbook adapter over openpyxl.

The table layer only needs a handful of document / sheet primitives:
open a workbook, look up / remove / create sheets, iterate a sheet's rows,
set a cell, save the whole document. ExcelDocument and ExcelSheet expose
exactly those and translate openpyxl / OS failures into ExcelDbError
subclasses.
"""

__all__ = [
    "ExcelDbError",
    "StorageError",
    "CodecError",
    "SheetNotFoundError",
    "SheetExistsError",
    "ExcelDocument",
    "ExcelSheet",
]

logger = logging.getLogger(__name__)

TEMP_PREFIX = ".excel-db-"


class ExcelDbError(Exception):
    """Base exception for every failure surfaced by excel_db."""


class StorageError(ExcelDbError):
    """Underlying file read/write failure."""


class CodecError(ExcelDbError):
    """Workbook container is malformed or unreadable."""


class SheetNotFoundError(ExcelDbError):
    """An operation requires a sheet that does not exist."""

    def __init__(self, sheet_name: str, message: str | None = None) -> None:
        self.sheet_name = sheet_name
        super().__init__(message or f'Sheet "{sheet_name}" not found')


class SheetExistsError(SheetNotFoundError):
    """add_sheet refuses to overwrite an existing sheet."""

    def __init__(self, sheet_name: str) -> None:
        super().__init__(sheet_name, f'Sheet "{sheet_name}" already exists')


class ExcelSheet:
    """Handle on one worksheet of an open ExcelDocument."""

    def __init__(self, worksheet: Worksheet) -> None:
        self._ws = worksheet

    @property
    def title(self) -> str:
        return self._ws.title

    def iter_rows(self) -> Iterator[list[Any]]:
        """Yield raw cell values row by row, trailing empty cells removed.

        openpyxl pads every row to the sheet's max column and reports a
        phantom A1 on a fresh sheet, so a sheet without any value yields
        nothing at all.
        """
        rows = [list(values) for values in self._ws.iter_rows(values_only=True)]
        if all(value is None for values in rows for value in values):
            return
        for values in rows:
            while values and values[-1] is None:
                values.pop()
            yield values

    def set_cell(self, column: int, row: int, value: Any) -> None:
        """Set a cell by 1-based column / row index.

        Raises:
            CodecError: openpyxl refuses the value (control characters)
        """
        try:
            cell = self._ws.cell(row=row, column=column, value=value)
        except IllegalCharacterError as e:
            raise CodecError(f"cannot store {value!r} in sheet {self.title!r}: {e}") from e
        if isinstance(value, str) and value.startswith("="):
            # keep as literal text, never a formula
            cell.data_type = "s"


class ExcelDocument:
    """An openpyxl workbook bound to the path it was loaded from."""

    def __init__(self, path: Path, book: Workbook) -> None:
        self.path = path
        self._book = book

    @classmethod
    def open(cls, path: str | Path) -> ExcelDocument:
        """Load a workbook from disk.

        Raises:
            StorageError: file missing or unreadable
            CodecError: not a valid xlsx container
        """
        p = Path(path)
        try:
            book = openpyxl.load_workbook(p)
        except OSError as e:
            raise StorageError(f"cannot read workbook {p}: {e}") from e
        # SyntaxError covers ElementTree and lxml parse errors of corrupt parts
        except (InvalidFileException, zipfile.BadZipFile, KeyError, ValueError, SyntaxError) as e:
            raise CodecError(f"cannot parse workbook {p}: {e}") from e
        logger.debug("opened workbook %s sheets=%s", p, book.sheetnames)
        return cls(p, book)

    @classmethod
    def new(cls, path: str | Path) -> ExcelDocument:
        """Create an empty in-memory workbook (no sheets) for ``path``."""
        book = Workbook()
        book.remove(book.active)
        return cls(Path(path), book)

    def has_sheet(self, name: str) -> bool:
        return name in self._book.sheetnames

    def get_sheet(self, name: str) -> ExcelSheet | None:
        if not self.has_sheet(name):
            return None
        return ExcelSheet(self._book[name])

    def sheet_names(self) -> list[str]:
        return list(self._book.sheetnames)

    def remove_sheet(self, name: str) -> int:
        """Remove a sheet and return the position it occupied."""
        if not self.has_sheet(name):
            raise SheetNotFoundError(name)
        index = self._book.sheetnames.index(name)
        self._book.remove(self._book[name])
        return index

    def create_sheet(self, name: str, index: int | None = None) -> ExcelSheet:
        if self.has_sheet(name):
            raise SheetExistsError(name)
        return ExcelSheet(self._book.create_sheet(title=name, index=index))

    def replace_sheet(self, name: str) -> ExcelSheet:
        """Discard sheet ``name`` and create an empty one at the same position."""
        was_active = self._book.active is not None and self._book.active.title == name
        index = self.remove_sheet(name)
        sheet = self._book.create_sheet(title=name, index=index)
        if was_active:
            self._book.active = index
        return ExcelSheet(sheet)

    def save(self, path: str | Path | None = None, *, atomic: bool = True) -> Path:
        """Write the whole document to ``path`` (default: the path it came from).

        With ``atomic`` the workbook is written to a temporary file in the
        target directory and moved over the target, so a failed write leaves
        the previous file intact.
        """
        target = Path(path) if path is not None else self.path
        if not atomic:
            try:
                self._book.save(target)
            except OSError as e:
                raise StorageError(f"cannot write workbook {target}: {e}") from e
            logger.debug("saved workbook %s", target)
            return target

        target_dir = target.parent
        try:
            fd, tmp_name = tempfile.mkstemp(prefix=TEMP_PREFIX, suffix=".tmp.xlsx", dir=target_dir)
        except OSError as e:
            raise StorageError(f"cannot create temporary file in {target_dir}: {e}") from e
        os.close(fd)
        tmp_path = Path(tmp_name)
        try:
            self._book.save(tmp_path)
            if target.exists():
                shutil.copymode(target, tmp_path)
            os.replace(tmp_path, target)
        except OSError as e:
            tmp_path.unlink(missing_ok=True)
            raise StorageError(f"cannot write workbook {target}: {e}") from e
        except BaseException:
            tmp_path.unlink(missing_ok=True)
            raise
        logger.debug("saved workbook %s (atomic)", target)
        return target
