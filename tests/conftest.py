import os
import json
import pytest

import blk.config
from blk.storage import MemoryStorage, SqlStorage, JsonFileStorage
from blk.store import RecordStore


@pytest.fixture
def sample_records():
    """Sample stored bookmarklet data in the persisted layout."""
    return [
        {
            "id": "a1b2c3d4e5f60718293a4b5c6d7e8f90",
            "name": "Word count",
            "description": "Count words on the page",
            "code": "javascript:alert(document.body.innerText.split(/\\s+/).length)",
            "createdAt": 1700000000000,
            "updatedAt": 1700000500000,
        },
        {
            "id": "0f1e2d3c4b5a69788796a5b4c3d2e1f0",
            "name": "Dark mode",
            "description": "Invert page colors",
            "code": "javascript:(function(){try{\ndocument.body.style.filter='invert(1)'\n}catch(e){alert('Bookmarklet error: '+e);}})();",
            "createdAt": 1690000000000,
            "updatedAt": 1690000000000,
        },
        {
            "id": "ffeeddccbbaa99887766554433221100",
            "name": "Ünïcødé ✓",
            "description": "",
            "code": "javascript:alert('日本語')",
            "createdAt": 1680000000000,
            "updatedAt": 1680000000000,
        },
    ]


@pytest.fixture
def memory_store():
    """An empty store backed by memory."""
    return RecordStore(MemoryStorage())


@pytest.fixture
def populated_store(sample_records):
    """A memory-backed store preloaded with the sample records."""
    storage = MemoryStorage()
    store = RecordStore(storage, autoload=False)
    storage.write(store.key, json.dumps(sample_records))
    store.load()
    return store


@pytest.fixture
def sql_storage(tmp_path):
    """SQLite storage in a temporary directory."""
    return SqlStorage(path=str(tmp_path / "test.db"))


@pytest.fixture
def json_storage(tmp_path):
    """JSON file storage in a temporary directory."""
    return JsonFileStorage(tmp_path / "store.json")


@pytest.fixture
def isolated_config(tmp_path, monkeypatch):
    """Run with an empty home and working directory and no cached config."""
    home = tmp_path / "home"
    home.mkdir()
    work = tmp_path / "work"
    work.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.chdir(work)
    for key in list(os.environ):
        if key.startswith("BLK_"):
            monkeypatch.delenv(key)
    monkeypatch.setattr(blk.config, "_config", None)
    return work
