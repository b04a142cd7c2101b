from __future__ import annotations

from ..models.operation_result import OperationResult

"""Summary line rendering for the Excel table database CLI."""


def _format_seconds(seconds: float) -> str:
    if seconds == 0:
        return "0"
    if seconds == int(seconds):
        return str(int(seconds))
    if seconds < 0.01:
        # avoid scientific notation
        return f"{seconds:.6f}".rstrip("0").rstrip(".")
    return f"{seconds:.3f}".rstrip("0").rstrip(".")


def render_summary_line(result: OperationResult) -> str:
    """Render the SUMMARY line for one operation.

    Format:
    SUMMARY op={operation} sheet={sheet} affected={n} rows={n} elapsed_sec={s}

    Examples:
        >>> from datetime import datetime, timezone
        >>> start = datetime(2024, 1, 1, 10, 0, 0, tzinfo=timezone.utc)
        >>> end = datetime(2024, 1, 1, 10, 0, 2, tzinfo=timezone.utc)
        >>> result = OperationResult(
        ...     operation="update", sheet="Sheet1", affected_rows=1,
        ...     total_rows=2, start_time=start, end_time=end,
        ... )
        >>> render_summary_line(result)
        'SUMMARY op=update sheet=Sheet1 affected=1 rows=2 elapsed_sec=2'
    """
    return (
        f"SUMMARY op={result.operation} "
        f"sheet={result.sheet} "
        f"affected={result.affected_rows} "
        f"rows={result.total_rows} "
        f"elapsed_sec={_format_seconds(result.elapsed_seconds)}"
    )
