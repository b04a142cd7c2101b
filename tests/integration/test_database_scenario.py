from __future__ import annotations

from pathlib import Path

import pytest

from conftest import build_workbook
from excel_db import CodecError, ExcelDatabase, NoHeadersError, SheetNotFoundError, Text


def test_people_scenario(people_xlsx: Path):
    db = ExcelDatabase(people_xlsx, "Sheet1")

    jane = db.select({"name": "Jane Doe"})
    assert jane is not None and len(jane) == 1
    assert jane[0]["age"] == Text("29")

    assert db.update({"name": "Jane Doe"}, {"age": "30"}) == 1
    assert db.select({"name": "Jane Doe"})[0]["age"] == Text("30")

    assert db.delete({"name": "John Doe"}) == 1
    assert db.select({"name": "John Doe"}) is None

    assert db.get_column_value("name", "Jane Doe", "age") == Text("30")

    # every mutation was persisted
    reloaded = ExcelDatabase(people_xlsx, "Sheet1")
    assert reloaded.rows == [{"name": Text("Jane Doe"), "age": Text("30")}]


def test_default_sheet_name(people_xlsx: Path):
    db = ExcelDatabase(people_xlsx)
    assert db.sheet_name == "Sheet1"
    assert len(db) == 2


def test_select_all_and_empty_table(people_xlsx: Path):
    db = ExcelDatabase(people_xlsx)
    assert db.select() == db.rows
    assert db.select({}) == db.rows
    db.delete({})
    assert len(db) == 0
    assert db.select() is None


def test_emptied_table_stays_loadable(people_xlsx: Path):
    db = ExcelDatabase(people_xlsx)
    db.delete({})
    reloaded = ExcelDatabase(people_xlsx)
    assert reloaded.columns == ["name", "age"]
    assert len(reloaded) == 0


def test_insert_appends_and_persists(people_xlsx: Path):
    db = ExcelDatabase(people_xlsx)
    db.insert({"name": "Baby Doe", "age": "1"})
    assert db.rows[-1] == {"name": Text("Baby Doe"), "age": Text("1")}
    assert ExcelDatabase(people_xlsx).rows[-1] == {"name": Text("Baby Doe"), "age": Text("1")}


def test_insert_new_column_widens_schema(people_xlsx: Path):
    db = ExcelDatabase(people_xlsx)
    db.insert({"name": "Baby Doe", "city": "Oslo"})
    assert db.columns == ["name", "age", "city"]
    reloaded = ExcelDatabase(people_xlsx)
    assert reloaded.rows[0]["city"] == Text("")
    assert reloaded.rows[-1] == {"name": Text("Baby Doe"), "age": Text(""), "city": Text("Oslo")}


def test_update_saves_even_without_match(people_xlsx: Path, monkeypatch):
    db = ExcelDatabase(people_xlsx)
    calls = []
    monkeypatch.setattr(db, "save", lambda: calls.append(1))
    assert db.update({"name": "Nobody"}, {"age": "1"}) == 0
    assert db.delete({"name": "Nobody"}) == 0
    assert calls == [1, 1]


def test_reads_do_not_touch_disk(people_xlsx: Path):
    db = ExcelDatabase(people_xlsx)
    people_xlsx.unlink()
    assert db.select({"name": "John Doe"}) is not None
    assert db.get_column_value("name", "John Doe", "age") == Text("20")
    assert db.get_column_datas_number("name") == 2


def test_count_non_empty_values(people_xlsx: Path):
    db = ExcelDatabase(people_xlsx)
    db.insert({"name": "  ", "age": ""})
    assert db.get_column_datas_number("name") == 2
    assert db.get_column_datas_number("age") == 2
    assert db.get_column_datas_number("missing") == 0


def test_column_lifecycle(people_xlsx: Path):
    db = ExcelDatabase(people_xlsx)
    before = db.rows
    assert db.add_column("city", "Paris") == 2
    assert all(r["city"] == Text("Paris") for r in ExcelDatabase(people_xlsx).rows)
    assert db.remove_column("city") == 2
    assert db.rows == before
    reloaded = ExcelDatabase(people_xlsx)
    assert reloaded.columns == ["name", "age"]
    assert reloaded.rows == before


def test_add_column_default_empty(people_xlsx: Path):
    db = ExcelDatabase(people_xlsx)
    db.add_column("city")
    assert db.get_column_value("name", "John Doe", "city") == Text("")


def test_refresh_discards_unsaved_state(people_xlsx: Path):
    db = ExcelDatabase(people_xlsx)
    other = ExcelDatabase(people_xlsx)
    other.insert({"name": "X", "age": "1"})
    assert len(db) == 2
    db.refresh()
    assert len(db) == 3


def test_rows_property_is_a_copy(people_xlsx: Path):
    db = ExcelDatabase(people_xlsx)
    db.rows[0]["age"] = Text("99")
    assert db.rows[0]["age"] == Text("20")


def test_to_dataframe(people_xlsx: Path):
    db = ExcelDatabase(people_xlsx)
    db.update({"name": "Jane Doe"}, {"city": "Rome"})
    df = db.to_dataframe()
    assert list(df.columns) == ["name", "age", "city"]
    assert df["age"].tolist() == ["20", "29"]
    assert df["city"].tolist() == ["", "Rome"]


def test_missing_and_empty_sheets(temp_workdir: Path):
    path = build_workbook(temp_workdir / "e.xlsx", {"Data": [["a"]], "Empty": []})
    with pytest.raises(SheetNotFoundError):
        ExcelDatabase(path, "Nope")
    with pytest.raises(NoHeadersError):
        ExcelDatabase(path, "Empty")


def test_create_new_workbook(temp_workdir: Path):
    db = ExcelDatabase.create(temp_workdir / "new.xlsx", "People", ["name", "age"])
    assert db.columns == ["name", "age"]
    assert len(db) == 0
    db.insert({"name": "A", "age": "1"})
    assert ExcelDatabase(temp_workdir / "new.xlsx", "People").rows == [{"name": Text("A"), "age": Text("1")}]


def test_create_requires_columns(temp_workdir: Path):
    with pytest.raises(ValueError):
        ExcelDatabase.create(temp_workdir / "new.xlsx", "People", [])


def test_unstorable_text_leaves_cache_and_file_untouched(people_xlsx: Path):
    db = ExcelDatabase(people_xlsx)
    before = people_xlsx.read_bytes()
    with pytest.raises(CodecError):
        db.insert({"name": "bad\x01value"})
    with pytest.raises(CodecError):
        db.update({"name": "Jane Doe"}, {"age": "\x02"})
    assert len(db) == 2
    assert db.get_column_value("name", "Jane Doe", "age") == Text("29")
    assert people_xlsx.read_bytes() == before
    # the handle keeps working
    db.insert({"name": "Baby Doe", "age": "1"})
    assert len(ExcelDatabase(people_xlsx)) == 3
