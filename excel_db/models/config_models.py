from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path

from .schema import HeaderPolicy

"""Config dataclasses for the Excel table database.

These are the typed result of excel_db.config.loader.load_config and the
keyword source for ExcelDatabase.from_config.
"""

DEFAULT_SHEET_NAME = "Sheet1"


@dataclass(frozen=True)
class DatabaseConfig:
    """Settings for one table handle.

    ``file`` is relative to the current directory unless absolute.
    """
    file: Path  # Target .xlsx workbook
    sheet: str = DEFAULT_SHEET_NAME  # Active sheet name
    header_policy: HeaderPolicy = HeaderPolicy.SCHEMA  # Header derivation on save
    atomic_save: bool = True  # temp file + os.replace on every save
    show_progress: bool = False  # tqdm bar while writing rows (TTY only)

    def with_overrides(self, file: str | Path | None = None, sheet: str | None = None) -> DatabaseConfig:
        """Return a copy with CLI / environment overrides applied."""
        updated = self
        if file:
            updated = replace(updated, file=Path(file))
        if sheet:
            updated = replace(updated, sheet=sheet)
        return updated
