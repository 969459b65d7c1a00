from __future__ import annotations

import json

import mysql.connector
import pytest

from src.madrasti.madrasti.core.exceptions import RemoteStoreError, StorageQuotaError
from src.madrasti.madrasti.storage.local_cache import JsonFileCache, MemoryCache, slot_cache_key
from src.madrasti.madrasti.storage.mysql_remote_store import MySQLRemoteStore


class FakeCursor:
    def __init__(self, db):
        self._db = db
        self._row = None

    def execute(self, sql, params):
        if self._db.fail:
            raise mysql.connector.Error("connection lost")
        self._db.executed.append((" ".join(sql.split()), params))
        if sql.lstrip().startswith("SELECT"):
            self._row = self._db.rows.get(params)
        else:
            *key, payload = params
            self._db.rows[tuple(key)] = {"items": payload, "value": payload}

    def fetchone(self):
        return self._row

    def close(self):
        pass


class FakeConnection:
    def __init__(self, db):
        self._db = db

    def cursor(self, dictionary=True):
        return FakeCursor(self._db)

    def commit(self):
        self._db.commits += 1

    def rollback(self):
        self._db.rollbacks += 1

    def close(self):
        pass


class FakeConnFactory:
    def __init__(self):
        self.rows = {}
        self.executed = []
        self.commits = 0
        self.rollbacks = 0
        self.fail = False

    def connect(self, *, with_database=True):
        return FakeConnection(self)


def test_slot_cache_key_joins_school_and_slot():
    assert slot_cache_key("sch_1", "students") == "sch_1_students"


def test_memory_cache_quota_counts_other_keys_only():
    cache = MemoryCache(max_bytes=10)
    cache.set_item("a", "12345")
    cache.set_item("a", "1234567890")

    with pytest.raises(StorageQuotaError):
        cache.set_item("b", "x")
    assert cache.get_item("b") is None


def test_json_file_cache_survives_reopen(tmp_path):
    cache = JsonFileCache(tmp_path / "cache")
    cache.set_item("sch_1_students", json.dumps([{"name": "أحمد"}], ensure_ascii=False))

    reopened = JsonFileCache(tmp_path / "cache")

    assert json.loads(reopened.get_item("sch_1_students")) == [{"name": "أحمد"}]
    assert list(reopened.keys()) == ["sch_1_students"]


def test_json_file_cache_escapes_unsafe_keys(tmp_path):
    cache = JsonFileCache(tmp_path)
    cache.set_item("../evil/key", "1")

    assert list(cache.keys()) == ["../evil/key"]
    assert all(p.parent == tmp_path for p in tmp_path.iterdir())


def test_json_file_cache_remove_missing_key_is_noop(tmp_path):
    cache = JsonFileCache(tmp_path)
    cache.remove_item("nothing")
    cache.set_item("k", "v")
    cache.remove_item("k")

    assert cache.get_item("k") is None


def test_json_file_cache_quota(tmp_path):
    cache = JsonFileCache(tmp_path, max_bytes=8)
    cache.set_item("a", "1234")

    with pytest.raises(StorageQuotaError):
        cache.set_item("b", "12345")
    assert cache.get_item("b") is None


def test_remote_store_round_trips_school_documents():
    db = FakeConnFactory()
    store = MySQLRemoteStore(db)

    assert store.load_school_data("sch_1", "subjects") is None
    store.save_school_data("sch_1", "subjects", [{"id": "math", "name": "رياضيات"}])

    assert store.load_school_data("sch_1", "subjects") == [{"id": "math", "name": "رياضيات"}]
    assert db.rows[("sch_1", "subjects")]["items"] == '[{"id": "math", "name": "رياضيات"}]'
    assert db.commits == 3


def test_remote_store_keeps_schools_apart():
    db = FakeConnFactory()
    store = MySQLRemoteStore(db)
    store.save_school_data("sch_1", "students", [1])
    store.save_school_data("sch_2", "students", [2])

    assert store.load_school_data("sch_1", "students") == [1]
    assert store.load_school_data("sch_2", "students") == [2]


def test_remote_store_system_documents():
    db = FakeConnFactory()
    store = MySQLRemoteStore(db)
    store.save_system_data("pricing", {"quarterly": 100})

    assert store.load_system_data("pricing") == {"quarterly": 100}
    assert store.load_system_data("schools") is None


def test_remote_store_wraps_driver_errors_and_rolls_back():
    db = FakeConnFactory()
    db.fail = True
    store = MySQLRemoteStore(db)

    with pytest.raises(RemoteStoreError):
        store.save_school_data("sch_1", "students", [])
    with pytest.raises(RemoteStoreError):
        store.load_system_data("schools")
    assert db.rollbacks == 2
    assert db.commits == 0
