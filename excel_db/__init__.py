"""excel_db: CRUD operations on one sheet of an .xlsx workbook.

    >>> from excel_db import ExcelDatabase
    >>> db = ExcelDatabase("people.xlsx", "Sheet1")   # doctest: +SKIP
    >>> db.select({"name": "Jane Doe"})                # doctest: +SKIP
"""

from .excel.reader import NoHeadersError
from .excel.workbook import (
    CodecError,
    ExcelDbError,
    SheetExistsError,
    SheetNotFoundError,
    StorageError,
)
from .models import CellValue, DatabaseConfig, HeaderPolicy, Row, TableSchema, Text
from .services.database import ExcelDatabase

__all__ = [
    "ExcelDatabase",
    "CellValue",
    "Text",
    "Row",
    "TableSchema",
    "HeaderPolicy",
    "DatabaseConfig",
    "ExcelDbError",
    "StorageError",
    "CodecError",
    "SheetNotFoundError",
    "SheetExistsError",
    "NoHeadersError",
]
