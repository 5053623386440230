"""
Tests for blk/storage.py

Tests each key-value backend and backend selection from configuration.
"""
import json
from unittest.mock import patch

import pytest
from sqlalchemy import select
from sqlalchemy.exc import OperationalError

from blk.config import BlkConfig
from blk.errors import StorageError
from blk.models import KeyValue
from blk.storage import JsonFileStorage, MemoryStorage, SqlStorage, open_storage


class TestMemoryStorage:
    """Test MemoryStorage."""

    def test_empty_slot_is_none(self):
        assert MemoryStorage().read("k") is None

    def test_write_then_read(self):
        storage = MemoryStorage()
        storage.write("k", "v")
        assert storage.read("k") == "v"

    def test_initial_slots(self):
        assert MemoryStorage({"k": "v"}).read("k") == "v"


class TestJsonFileStorage:
    """Test JsonFileStorage."""

    def test_missing_file_reads_none(self, json_storage):
        assert json_storage.read("k") is None

    def test_write_creates_file(self, json_storage):
        json_storage.write("k", "[]")
        assert json_storage.path.exists()
        assert json.loads(json_storage.path.read_text(encoding="utf-8")) == {"k": "[]"}

    def test_slots_are_independent(self, json_storage):
        json_storage.write("a", "1")
        json_storage.write("b", "2")
        json_storage.write("a", "3")
        assert json_storage.read("a") == "3"
        assert json_storage.read("b") == "2"

    def test_persists_across_instances(self, tmp_path):
        path = tmp_path / "nested" / "store.json"
        JsonFileStorage(path).write("k", "ünïcødé")
        assert JsonFileStorage(path).read("k") == "ünïcødé"

    def test_corrupt_file_reads_none(self, json_storage):
        json_storage.path.write_text("{not json", encoding="utf-8")
        assert json_storage.read("k") is None

    def test_non_object_file_reads_none(self, json_storage):
        json_storage.path.write_text("[1, 2]", encoding="utf-8")
        assert json_storage.read("k") is None

    def test_no_temp_files_left(self, json_storage):
        json_storage.write("k", "v")
        leftovers = [p.name for p in json_storage.path.parent.iterdir() if p.name.startswith(".blk-")]
        assert leftovers == []


class TestSqlStorage:
    """Test SqlStorage."""

    def test_init_with_path(self, tmp_path):
        db_path = tmp_path / "sub" / "blk.db"
        storage = SqlStorage(path=str(db_path))
        assert storage.url == f"sqlite:///{db_path}"
        assert db_path.parent.exists()

    def test_init_requires_location(self):
        with pytest.raises(ValueError):
            SqlStorage()

    def test_empty_slot_is_none(self, sql_storage):
        assert sql_storage.read("k") is None

    def test_write_then_read(self, sql_storage):
        sql_storage.write("k", "[1]")
        assert sql_storage.read("k") == "[1]"

    def test_overwrite(self, sql_storage):
        sql_storage.write("k", "first")
        sql_storage.write("k", "second")
        assert sql_storage.read("k") == "second"
        with sql_storage.session() as session:
            rows = session.execute(select(KeyValue)).scalars().all()
            assert len(rows) == 1

    def test_persists_across_instances(self, tmp_path):
        path = str(tmp_path / "blk.db")
        SqlStorage(path=path).write("k", "日本語")
        assert SqlStorage(path=path).read("k") == "日本語"

    def test_init_with_url(self, tmp_path):
        url = f"sqlite:///{tmp_path / 'url.db'}"
        storage = SqlStorage(url=url)
        assert storage.path is None
        assert storage.describe() == url

    def test_errors_are_wrapped(self, sql_storage):
        with patch.object(sql_storage, "Session", side_effect=OperationalError("stmt", {}, Exception("boom"))):
            with pytest.raises(StorageError):
                sql_storage.read("k")


class TestOpenStorage:
    """Test backend selection."""

    def test_sqlite_backend(self, tmp_path):
        config = BlkConfig(storage_backend="sqlite", database=str(tmp_path / "a.db"))
        storage = open_storage(config)
        assert isinstance(storage, SqlStorage)
        assert storage.path == tmp_path / "a.db"

    def test_sqlite_backend_with_url(self, tmp_path):
        url = f"sqlite:///{tmp_path / 'b.db'}"
        storage = open_storage(BlkConfig(storage_backend="sqlite", database_url=url))
        assert storage.url == url

    def test_json_backend(self, tmp_path):
        config = BlkConfig(storage_backend="json", json_path=str(tmp_path / "s.json"))
        storage = open_storage(config)
        assert isinstance(storage, JsonFileStorage)
        assert storage.path == tmp_path / "s.json"

    def test_memory_backend(self):
        assert isinstance(open_storage(BlkConfig(storage_backend="memory")), MemoryStorage)

    def test_unknown_backend(self):
        with pytest.raises(ValueError):
            open_storage(BlkConfig(storage_backend="redis"))
