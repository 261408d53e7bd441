"""
Unit tests for record sources.

Tests cover JSON, CSV and Excel snapshot files, the in-memory source
and the factory.
"""

import json
import pytest
import pandas as pd

from data import (
    FileRecordSource,
    InMemoryRecordSource,
    create_record_source,
    read_records,
)
from domain.exceptions import NotFoundError, RecordSourceError


# ==================== Fixtures ====================


@pytest.fixture
def data_dir(tmp_path):
    """Create a data directory with one file per supported format."""
    (tmp_path / "materials.json").write_text(json.dumps([
        {"_id": "m1", "name": "Cement", "quantity": 5, "minStock": 10},
        {"_id": "m2", "name": "Sand", "quantity": 50, "minStock": 10},
    ]), encoding="utf-8")

    (tmp_path / "suppliers.csv").write_text(
        "name , rating,materialsOffered,notes\n"
        'Forge,4,"[{""materialName"": ""Steel"", ""pricePerUnit"": 12}]",\n'
        ",,,\n"
        ' Quarry Co ,abc,,"{not json"\n',
        encoding="utf-8",
    )

    pd.DataFrame({
        "model": ["Drill", "Saw"],
        "price": [200, None],
        "status": ["available", "retired"],
    }).to_excel(tmp_path / "tools.xlsx", index=False)

    (tmp_path / "notes.txt").write_text("ignored", encoding="utf-8")
    return tmp_path


# ==================== File Source Tests ====================


def test_list_collections(data_dir):
    """Test collections are the stems of supported files."""
    source = FileRecordSource(data_dir)

    assert source.list_collections() == ["materials", "suppliers", "tools"]
    assert source.has_collection("tools")
    assert not source.has_collection("notes")


def test_list_collections_missing_dir(tmp_path):
    """Test a missing data directory has no collections."""
    assert FileRecordSource(tmp_path / "nope").list_collections() == []


def test_fetch_json(data_dir):
    """Test reading a JSON array."""
    records = FileRecordSource(data_dir).fetch("materials")

    assert [r["name"] for r in records] == ["Cement", "Sand"]
    assert records[0]["quantity"] == 5


def test_fetch_csv_decodes_cells(data_dir):
    """Test CSV rows: stripped headers and text, JSON cells decoded, blanks dropped."""
    records = FileRecordSource(data_dir).fetch("suppliers")

    assert len(records) == 2  # empty row dropped
    forge, quarry = records
    assert set(forge) == {"name", "rating", "materialsOffered", "notes"}
    assert forge["rating"] == "4"  # numbers stay text, coerced by the rules
    assert forge["materialsOffered"] == [{"materialName": "Steel", "pricePerUnit": 12}]
    assert forge["notes"] is None
    assert quarry["name"] == "Quarry Co"
    assert quarry["materialsOffered"] is None
    assert quarry["notes"] == "{not json"


def test_fetch_excel(data_dir):
    """Test reading the first sheet of a workbook."""
    records = FileRecordSource(data_dir).fetch("tools")

    assert [r["model"] for r in records] == ["Drill", "Saw"]
    assert records[0]["price"] == 200
    assert records[1]["price"] is None


def test_fetch_missing_collection(data_dir):
    """Test a collection without a file."""
    with pytest.raises(NotFoundError):
        FileRecordSource(data_dir).fetch("rentals")


def test_json_preferred_over_csv(tmp_path):
    """Test lookup order when several files exist."""
    (tmp_path / "users.json").write_text('[{"name": "From JSON"}]', encoding="utf-8")
    (tmp_path / "users.csv").write_text("name\nFrom CSV\n", encoding="utf-8")

    assert FileRecordSource(tmp_path).fetch("users") == [{"name": "From JSON"}]


# ==================== Reader Tests ====================


def test_read_json_envelope(tmp_path):
    """Test the {"data": [...]} envelope is unwrapped."""
    path = tmp_path / "users.json"
    path.write_text('{"success": true, "data": [{"name": "Ana"}]}', encoding="utf-8")

    assert read_records(path) == [{"name": "Ana"}]


def test_read_json_skips_non_objects(tmp_path):
    """Test garbage entries in an array are skipped."""
    path = tmp_path / "users.json"
    path.write_text('[{"name": "Ana"}, 3, "x", null]', encoding="utf-8")

    assert read_records(path) == [{"name": "Ana"}]


def test_read_json_not_a_list(tmp_path):
    """Test a JSON object that is not a record list."""
    path = tmp_path / "users.json"
    path.write_text('{"name": "Ana"}', encoding="utf-8")

    with pytest.raises(RecordSourceError) as exc_info:
        read_records(path)

    assert "list of records" in str(exc_info.value)


def test_read_json_malformed(tmp_path):
    """Test malformed JSON."""
    path = tmp_path / "users.json"
    path.write_text("[{broken", encoding="utf-8")

    with pytest.raises(RecordSourceError):
        read_records(path)


def test_read_unsupported_extension(tmp_path):
    """Test unsupported file types."""
    path = tmp_path / "users.txt"
    path.write_text("x", encoding="utf-8")

    with pytest.raises(RecordSourceError):
        read_records(path)


def test_read_corrupt_workbook(tmp_path):
    """Test a file that is not really a workbook."""
    path = tmp_path / "tools.xlsx"
    path.write_bytes(b"not a zip file")

    with pytest.raises(RecordSourceError):
        read_records(path)


# ==================== Memory Source Tests ====================


def test_memory_source_returns_copies():
    """Test mutating a fetched snapshot does not affect the source."""
    source = InMemoryRecordSource({"materials": [{"name": "Cement", "offers": [{"price": 1}]}]})

    snapshot = source.fetch("materials")
    snapshot[0]["offers"][0]["price"] = 99
    snapshot.append({"name": "Extra"})

    assert source.fetch("materials") == [{"name": "Cement", "offers": [{"price": 1}]}]


def test_memory_source_replace_and_missing():
    """Test replacing a collection and fetching an unknown one."""
    source = InMemoryRecordSource()
    source.replace("users", [{"name": "Ana"}])

    assert source.list_collections() == ["users"]
    with pytest.raises(NotFoundError):
        source.fetch("tools")


# ==================== Factory Tests ====================


def test_create_record_source(tmp_path):
    """Test factory backends."""
    assert isinstance(create_record_source("file", tmp_path), FileRecordSource)
    assert isinstance(create_record_source("memory", collections={"users": []}), InMemoryRecordSource)

    with pytest.raises(ValueError):
        create_record_source("mongodb")
