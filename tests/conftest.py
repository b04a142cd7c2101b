# Shared pytest fixtures
from __future__ import annotations
import tempfile
from pathlib import Path

import openpyxl
import pytest

from excel_db.logging.init import reset_logging


def build_workbook(path: Path, sheets: dict[str, list[list[object]]]) -> Path:
    """Write a workbook with one sheet per entry, rows appended in order."""
    wb = openpyxl.Workbook()
    wb.remove(wb.active)
    for name, rows in sheets.items():
        ws = wb.create_sheet(name)
        for row in rows:
            ws.append(row)
    wb.save(path)
    return path


def read_values(path: Path, sheet: str) -> list[list[object]]:
    """Raw cell values of a sheet as openpyxl sees them."""
    wb = openpyxl.load_workbook(path)
    return [list(r) for r in wb[sheet].iter_rows(values_only=True)]


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        monkeypatch.chdir(p)
        yield p


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    monkeypatch.delenv("EXCEL_DB_FILE", raising=False)
    monkeypatch.delenv("EXCEL_DB_SHEET", raising=False)


@pytest.fixture()
def fresh_logging():
    reset_logging()
    yield
    reset_logging()


@pytest.fixture()
def people_xlsx(temp_workdir: Path) -> Path:
    return build_workbook(
        temp_workdir / "data" / "people.xlsx",
        {
            "Sheet1": [
                ["name", "age"],
                ["John Doe", "20"],
                ["Jane Doe", "29"],
            ],
            "Other": [
                ["id"],
                ["1"],
            ],
        },
    )


@pytest.fixture()
def sample_config_yaml() -> str:
    return """file: ./data/people.xlsx
sheet: Sheet1
header_policy: schema
atomic_save: true
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "excel_db.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg
