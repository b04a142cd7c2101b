from __future__ import annotations

import argparse
import json
import os
import sys
from collections.abc import Callable
from datetime import UTC, datetime
from pathlib import Path

import pandas as pd
from dotenv import load_dotenv

from excel_db.config.loader import (
    DEFAULT_CONFIG_PATH,
    ENV_FILE,
    ConfigError,
    apply_env_overrides,
    load_config,
)
from excel_db.excel.workbook import ExcelDbError
from excel_db.logging.error_log import ErrorLogBuffer, ErrorRecord
from excel_db.logging.init import enable_debug, log_summary, setup_logging
from excel_db.models.config_models import DatabaseConfig
from excel_db.models.operation_result import OperationResult
from excel_db.models.row import row_to_strings
from excel_db.services.database import ExcelDatabase
from excel_db.services.summary import render_summary_line

"""CLI entrypoint.

    python -m excel_db.cli [--config PATH] [--file PATH] [--sheet NAME] [--debug] COMMAND ...

Workbook / sheet resolution, lowest to highest precedence:
    1. config file (``--config``, or config/excel_db.yml when present)
    2. environment (EXCEL_DB_FILE / EXCEL_DB_SHEET, ``.env`` is loaded first)
    3. ``--file`` / ``--sheet``

Command results are printed to stdout, followed by a SUMMARY log line.
"""

EXIT_SUCCESS = 0
EXIT_FATAL = 1
EXIT_NO_RESULT = 2


def _pair(text: str) -> tuple[str, str]:
    """argparse type for COL=VAL."""
    column, sep, value = text.partition("=")
    if not sep or not column:
        raise argparse.ArgumentTypeError(f"expected COLUMN=VALUE, got {text!r}")
    return column, value


def _json_row(text: str) -> dict[str, str]:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise argparse.ArgumentTypeError(f"invalid JSON row {text!r}: {e}") from e
    if not isinstance(data, dict) or not all(
        isinstance(k, str) and isinstance(v, str) for k, v in data.items()
    ):
        raise argparse.ArgumentTypeError(f"row must be a JSON object of strings: {text!r}")
    return data


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="excel_db", description="Use one sheet of an .xlsx file as a table")
    p.add_argument("--config", type=Path, help=f"YAML config (default: {DEFAULT_CONFIG_PATH} if present)")
    p.add_argument("--file", help="Workbook path (overrides config / environment)")
    p.add_argument("--sheet", help="Sheet name (overrides config / environment)")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    sub = p.add_subparsers(dest="command", required=True)

    s = sub.add_parser("init", help="Create a new workbook with a header row")
    s.add_argument("columns", nargs="+")

    s = sub.add_parser("select", help="Print rows matching every --where pair")
    s.add_argument("--where", type=_pair, action="append", default=[], metavar="COL=VAL")
    s.add_argument("--format", choices=["json", "table"], default="json")

    s = sub.add_parser("get", help="Value of TARGET_COL in the first row where SEARCH_COL=SEARCH_VAL")
    s.add_argument("search_column")
    s.add_argument("search_value")
    s.add_argument("target_column")

    s = sub.add_parser("count", help="Count non-blank values of a column")
    s.add_argument("column")

    s = sub.add_parser("insert", help="Append one row")
    s.add_argument("values", type=_pair, nargs="+", metavar="COL=VAL")

    s = sub.add_parser("update", help="Set columns on every matching row")
    s.add_argument("--where", type=_pair, action="append", default=[], metavar="COL=VAL")
    s.add_argument("--set", dest="set_values", type=_pair, action="append", required=True, metavar="COL=VAL")

    s = sub.add_parser("delete", help="Delete every matching row")
    s.add_argument("--where", type=_pair, action="append", default=[], metavar="COL=VAL")

    s = sub.add_parser("add-column", help="Add a column to rows lacking it")
    s.add_argument("name")
    s.add_argument("--default", default=None)

    s = sub.add_parser("remove-column", help="Remove a column from every row")
    s.add_argument("name")

    s = sub.add_parser("add-sheet", help="Create another sheet, optionally seeded with rows")
    s.add_argument("name")
    s.add_argument("--row", type=_json_row, action="append", default=[], metavar="JSON")

    sub.add_parser("sheets", help="List sheet names")

    s = sub.add_parser("exists", help="Check whether a sheet exists")
    s.add_argument("name")
    return p.parse_args(argv)


def resolve_config(args: argparse.Namespace) -> DatabaseConfig:
    """Build the effective config from file, environment and arguments."""
    if args.config is not None:
        cfg = load_config(args.config)
    elif DEFAULT_CONFIG_PATH.exists():
        cfg = load_config(DEFAULT_CONFIG_PATH)
    else:
        cfg = None

    if cfg is None:
        file = args.file or os.getenv(ENV_FILE)
        if not file:
            raise ConfigError(
                f"no workbook configured: pass --file, set {ENV_FILE} or create {DEFAULT_CONFIG_PATH}"
            )
        cfg = DatabaseConfig(file=Path(file))
    return apply_env_overrides(cfg).with_overrides(file=args.file, sheet=args.sheet)


def _print_rows(rows: list[dict[str, str]], fmt: str) -> None:
    if fmt == "table":
        print(pd.DataFrame(rows, dtype="object").fillna("").to_string(index=False))
    else:
        print(json.dumps(rows, ensure_ascii=False))


def _run(args: argparse.Namespace, cfg: DatabaseConfig) -> tuple[int, int, int]:
    """Execute one command. Returns (exit code, affected rows, table size)."""
    cmd = args.command

    if cmd == "init":
        db = ExcelDatabase.create(
            cfg.file,
            cfg.sheet,
            args.columns,
            header_policy=cfg.header_policy,
            atomic_save=cfg.atomic_save,
            show_progress=cfg.show_progress,
        )
        print(f"created {db.file_path} sheet={db.sheet_name} columns={db.columns}")
        return EXIT_SUCCESS, 0, len(db)

    db = ExcelDatabase.from_config(cfg)
    handlers: dict[str, Callable[[ExcelDatabase, argparse.Namespace], tuple[int, int]]] = {
        "select": _cmd_select,
        "get": _cmd_get,
        "count": _cmd_count,
        "insert": _cmd_insert,
        "update": _cmd_update,
        "delete": _cmd_delete,
        "add-column": _cmd_add_column,
        "remove-column": _cmd_remove_column,
        "add-sheet": _cmd_add_sheet,
        "sheets": _cmd_sheets,
        "exists": _cmd_exists,
    }
    code, affected = handlers[cmd](db, args)
    return code, affected, len(db)


def _cmd_select(db: ExcelDatabase, args: argparse.Namespace) -> tuple[int, int]:
    rows = db.select(dict(args.where))
    if rows is None:
        print("no result")
        return EXIT_NO_RESULT, 0
    _print_rows([row_to_strings(r) for r in rows], args.format)
    return EXIT_SUCCESS, len(rows)


def _cmd_get(db: ExcelDatabase, args: argparse.Namespace) -> tuple[int, int]:
    value = db.get_column_value(args.search_column, args.search_value, args.target_column)
    if value is None:
        print("no result")
        return EXIT_NO_RESULT, 0
    print(value)
    return EXIT_SUCCESS, 1


def _cmd_count(db: ExcelDatabase, args: argparse.Namespace) -> tuple[int, int]:
    count = db.get_column_datas_number(args.column)
    print(count)
    return EXIT_SUCCESS, count


def _cmd_insert(db: ExcelDatabase, args: argparse.Namespace) -> tuple[int, int]:
    db.insert(dict(args.values))
    return EXIT_SUCCESS, 1


def _cmd_update(db: ExcelDatabase, args: argparse.Namespace) -> tuple[int, int]:
    return EXIT_SUCCESS, db.update(dict(args.where), dict(args.set_values))


def _cmd_delete(db: ExcelDatabase, args: argparse.Namespace) -> tuple[int, int]:
    return EXIT_SUCCESS, db.delete(dict(args.where))


def _cmd_add_column(db: ExcelDatabase, args: argparse.Namespace) -> tuple[int, int]:
    return EXIT_SUCCESS, db.add_column(args.name, args.default)


def _cmd_remove_column(db: ExcelDatabase, args: argparse.Namespace) -> tuple[int, int]:
    return EXIT_SUCCESS, db.remove_column(args.name)


def _cmd_add_sheet(db: ExcelDatabase, args: argparse.Namespace) -> tuple[int, int]:
    db.add_sheet(args.name, args.row or None)
    return EXIT_SUCCESS, len(args.row)


def _cmd_sheets(db: ExcelDatabase, args: argparse.Namespace) -> tuple[int, int]:
    names = db.get_all_sheet_names()
    for name in names:
        print(name)
    return EXIT_SUCCESS, len(names)


def _cmd_exists(db: ExcelDatabase, args: argparse.Namespace) -> tuple[int, int]:
    exists = db.is_sheet_exists(args.name)
    print("true" if exists else "false")
    return (EXIT_SUCCESS, 1) if exists else (EXIT_NO_RESULT, 0)


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # None only: an explicit [] must not fall back to sys.argv (pytest args)
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    load_dotenv(dotenv_path=Path(".env"), override=True)

    if args.debug:
        enable_debug()

    try:
        cfg = resolve_config(args)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    logger.debug(f"workbook={cfg.file} sheet={cfg.sheet} policy={cfg.header_policy.value}")
    error_log = ErrorLogBuffer()
    start = datetime.now(UTC)
    try:
        code, affected, total = _run(args, cfg)
    except ExcelDbError as e:
        logger.error(f"{args.command}: {e}")
        error_log.append(ErrorRecord.from_exception(str(cfg.file), cfg.sheet, args.command, e))
        path = error_log.flush()
        logger.info(f"error log: {path}")
        return EXIT_FATAL
    end = datetime.now(UTC)

    result = OperationResult(
        operation=args.command,
        sheet=cfg.sheet,
        affected_rows=affected,
        total_rows=total,
        start_time=start,
        end_time=end,
    )
    # log_summary adds the "SUMMARY " prefix itself
    log_summary(render_summary_line(result)[len("SUMMARY "):])
    return code


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
