from __future__ import annotations

import sys
from typing import Any

from tqdm import tqdm
from tqdm.std import tqdm as TqdmType

"""Row write progress display with tqdm (TTY only).

Saving rewrites the whole sheet, which can take a moment for larger tables.
When enabled and stdout is a TTY, a single tqdm bar counts rows as they are
written. In non-TTY environments (CI, pipes) the tracker is a no-op so no
ANSI control sequences end up in captured output.
"""

__all__ = [
    "RowProgressTracker",
    "is_tty_enabled",
]


def is_tty_enabled() -> bool:
    """Check if stdout is a TTY and progress should be displayed."""
    return sys.stdout.isatty()


class RowProgressTracker:
    """Progress tracker for rows written to one sheet."""

    def __init__(self, total_rows: int, *, sheet_name: str, enabled: bool = True) -> None:
        """Initialize progress tracker.

        Args:
            total_rows: Number of data rows that will be written
            sheet_name: Sheet being written (shown as bar description)
            enabled: Caller-side switch; the bar is still suppressed without a TTY
        """
        self.total_rows = total_rows
        self.sheet_name = sheet_name
        self.written = 0

        self.enabled = enabled and is_tty_enabled()
        self.pbar: TqdmType[Any] | None
        if self.enabled:
            self.pbar = tqdm(
                total=total_rows,
                desc=f"Writing {sheet_name}",
                unit="row",
                leave=False,
                ncols=80,
                ascii=True,
            )
        else:
            self.pbar = None

    def advance(self, rows: int = 1) -> None:
        self.written += rows
        if self.pbar is not None:
            self.pbar.update(rows)

    def close(self) -> None:
        if self.pbar is not None:
            self.pbar.close()
            self.pbar = None

    def __enter__(self) -> RowProgressTracker:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
