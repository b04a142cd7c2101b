from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

"""ErrorRecord model for the JSON Lines failure log.

Every failed CLI operation is recorded with the workbook, the sheet, the
operation name and the exception class, so a memory/disk divergence after a
failed save can be traced afterwards.
"""

__all__ = [
    "ErrorRecord",
]


@dataclass(frozen=True)
class ErrorRecord:
    """Structured error record for JSON Lines logging.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        file: Workbook path
        sheet: Active sheet name
        operation: Operation that failed (insert, update, ...)
        error_type: Error classification in UPPER_SNAKE_CASE format
        message: Error message
    """
    timestamp: str
    file: str
    sheet: str
    operation: str
    error_type: str
    message: str

    @staticmethod
    def create(file: str, sheet: str, operation: str, error_type: str, message: str) -> ErrorRecord:
        """Create a new ErrorRecord with current UTC timestamp."""
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return ErrorRecord(
            timestamp=ts,
            file=file,
            sheet=sheet,
            operation=operation,
            error_type=error_type,
            message=message,
        )

    @staticmethod
    def from_exception(file: str, sheet: str, operation: str, error: BaseException) -> ErrorRecord:
        """Build a record whose error_type is the exception class in UPPER_SNAKE."""
        name = type(error).__name__
        if name.endswith("Error") and name != "Error":
            name = name[: -len("Error")]
        upper = "".join(f"_{c}" if c.isupper() and i else c for i, c in enumerate(name)).upper()
        return ErrorRecord.create(file, sheet, operation, upper, str(error))

    def to_json_line(self) -> str:
        """Serialize to one JSON line (only the dataclass fields)."""
        return json.dumps(asdict(self), ensure_ascii=False)
