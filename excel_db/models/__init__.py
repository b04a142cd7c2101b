"""Domain models for the Excel table database.

Cell values, rows, the table schema and the config / result dataclasses used
throughout the package.
"""

from .cell_value import EMPTY, CellValue, Text
from .config_models import DatabaseConfig
from .operation_result import OperationResult
from .row import Row, coerce_row, coerce_value
from .schema import HeaderPolicy, TableSchema, resolve_header

__all__ = [
    # Cell / row models
    "CellValue",
    "Text",
    "EMPTY",
    "Row",
    "coerce_row",
    "coerce_value",
    # Schema
    "HeaderPolicy",
    "TableSchema",
    "resolve_header",
    # Configuration / results
    "DatabaseConfig",
    "OperationResult",
]
