from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Any

"""CellValue model for the Excel table database.

A CellValue is the typed content of one cell in the in-memory table.
Only text is supported for now; further cases (numbers, booleans, dates)
are added as new subclasses of CellValue. Equality is structural and
class-sensitive, so a new case never compares equal to an existing Text.
"""

__all__ = [
    "CellValue",
    "Text",
    "EMPTY",
]


@dataclass(frozen=True)
class CellValue(ABC):
    """Base of the cell value variant."""

    @staticmethod
    def from_raw(raw: Any) -> CellValue:
        """Convert a raw openpyxl cell value into a CellValue.

        Every raw value is rendered as text:
        - None -> empty text
        - integral floats -> integer text ("5.0" is stored as "5")
        - bool -> "TRUE" / "FALSE" (Excel spelling)
        - date / datetime / time -> ISO-8601 text
        """
        if raw is None:
            return Text("")
        if isinstance(raw, bool):
            return Text("TRUE" if raw else "FALSE")
        if isinstance(raw, float) and raw.is_integer():
            return Text(str(int(raw)))
        if isinstance(raw, (datetime, date, time)):
            return Text(raw.isoformat())
        return Text(str(raw))

    @abstractmethod
    def to_raw(self) -> Any:
        """Return the value handed to openpyxl when writing the cell."""

    @abstractmethod
    def is_blank(self) -> bool:
        ...


@dataclass(frozen=True)
class Text(CellValue):
    """Text-based cell."""

    value: str

    def to_raw(self) -> str:
        return self.value

    def is_blank(self) -> bool:
        return self.value.strip() == ""

    def __str__(self) -> str:
        return self.value


# Filler for missing columns on load and save
EMPTY = Text("")
