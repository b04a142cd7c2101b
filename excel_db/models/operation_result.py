from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

"""Operation result model for the Excel table database CLI.

One OperationResult is produced per executed command and feeds the SUMMARY
line.
"""


@dataclass(frozen=True)
class OperationResult:
    """Outcome and timing of one table operation."""
    operation: str  # CLI command name (select, update, ...)
    sheet: str  # Active sheet
    affected_rows: int  # Rows matched / inserted / removed / changed
    total_rows: int  # Rows in the cache after the operation
    start_time: datetime  # UTC
    end_time: datetime  # UTC

    @property
    def elapsed_seconds(self) -> float:
        return (self.end_time - self.start_time).total_seconds()
