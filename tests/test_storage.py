import logging

import pytest

from madina.storage import (
    LOGS_NAMESPACE,
    MASTERY_NAMESPACE,
    SCHEMA_VERSION,
    InMemoryStore,
    SqlKeyValueStore,
    is_enveloped,
    unwrap,
    wrap,
)
from madina.storage.models import KeyValueEntry


DOC = {"item_id": "w1", "arabic": "كِتَابٌ", "strength": 40}


@pytest.fixture
def sql_store():
    store = SqlKeyValueStore("sqlite://")
    yield store
    store.dispose()


@pytest.fixture(params=["memory", "sql"])
def any_store(request, store, sql_store):
    return store if request.param == "memory" else sql_store


class TestKeyValueStores:
    def test_put_get_round_trip(self, any_store):
        any_store.put(MASTERY_NAMESPACE, "w1", DOC)
        assert any_store.get(MASTERY_NAMESPACE, "w1") == DOC
        assert any_store.get(MASTERY_NAMESPACE, "missing") is None
        assert any_store.get(LOGS_NAMESPACE, "w1") is None

    def test_put_overwrites(self, any_store):
        any_store.put(MASTERY_NAMESPACE, "w1", DOC)
        any_store.put(MASTERY_NAMESPACE, "w1", {"strength": 90})
        assert any_store.get(MASTERY_NAMESPACE, "w1") == {"strength": 90}

    def test_keys_are_sorted_per_namespace(self, any_store):
        for key in ("b", "a", "c"):
            any_store.put(MASTERY_NAMESPACE, key, DOC)
        any_store.put(LOGS_NAMESPACE, "errors", {"records": []})
        assert any_store.keys(MASTERY_NAMESPACE) == ["a", "b", "c"]
        assert any_store.keys(LOGS_NAMESPACE) == ["errors"]

    def test_delete_and_clear(self, any_store):
        any_store.put(MASTERY_NAMESPACE, "a", DOC)
        any_store.put(MASTERY_NAMESPACE, "b", DOC)
        any_store.put(LOGS_NAMESPACE, "errors", {"records": []})

        any_store.delete(MASTERY_NAMESPACE, "a")
        any_store.delete(MASTERY_NAMESPACE, "never-stored")
        assert any_store.keys(MASTERY_NAMESPACE) == ["b"]

        any_store.clear(MASTERY_NAMESPACE)
        assert any_store.keys(MASTERY_NAMESPACE) == []
        assert any_store.keys(LOGS_NAMESPACE) == ["errors"]

        any_store.clear()
        assert any_store.keys(LOGS_NAMESPACE) == []

    def test_returned_values_are_copies(self, any_store):
        any_store.put(MASTERY_NAMESPACE, "w1", DOC)
        value = any_store.get(MASTERY_NAMESPACE, "w1")
        value["strength"] = 0
        assert any_store.get(MASTERY_NAMESPACE, "w1")["strength"] == 40


class TestCorruptedValues:
    def test_corrupted_json_in_memory(self, store, caplog):
        store._data[(MASTERY_NAMESPACE, "w1")] = "{not json"
        with caplog.at_level(logging.WARNING):
            assert store.get(MASTERY_NAMESPACE, "w1") is None
        assert "Corrupted JSON" in caplog.text

    def test_non_object_json_in_memory(self, store):
        store._data[(MASTERY_NAMESPACE, "w1")] = "[1, 2, 3]"
        assert store.get(MASTERY_NAMESPACE, "w1") is None

    def test_corrupted_json_in_database(self, sql_store, now):
        session = sql_store.session()
        try:
            session.add(KeyValueEntry(namespace=MASTERY_NAMESPACE, key="w1", value="oops", updated_at=now))
            session.commit()
        finally:
            session.close()
        assert sql_store.get(MASTERY_NAMESPACE, "w1") is None


class TestSqlStore:
    def test_file_database_persists(self, tmp_path):
        url = f"sqlite:///{tmp_path}/nested/mastery.db"
        first = SqlKeyValueStore(url)
        first.put(MASTERY_NAMESPACE, "w1", DOC)
        first.dispose()

        second = SqlKeyValueStore(url)
        assert second.get(MASTERY_NAMESPACE, "w1") == DOC
        second.dispose()
        assert (tmp_path / "nested" / "mastery.db").exists()

    def test_reset_db(self, sql_store):
        sql_store.put(MASTERY_NAMESPACE, "w1", DOC)
        sql_store.reset_db()
        assert sql_store.keys(MASTERY_NAMESPACE) == []
        sql_store.put(MASTERY_NAMESPACE, "w2", DOC)
        assert sql_store.keys(MASTERY_NAMESPACE) == ["w2"]

    def test_init_db_is_idempotent(self, sql_store):
        sql_store.put(MASTERY_NAMESPACE, "w1", DOC)
        sql_store.init_db()
        assert sql_store.get(MASTERY_NAMESPACE, "w1") == DOC


class TestEnvelope:
    def test_wrap_and_unwrap(self):
        envelope = wrap(DOC)
        assert envelope == {"schemaVersion": SCHEMA_VERSION, "payload": DOC}
        assert is_enveloped(envelope)
        assert unwrap(envelope) == DOC

    @pytest.mark.parametrize("raw", [
        DOC,
        None,
        {"schemaVersion": SCHEMA_VERSION + 1, "payload": DOC},
        {"schemaVersion": "1", "payload": DOC},
        {"schemaVersion": True, "payload": DOC},
        {"schemaVersion": SCHEMA_VERSION, "payload": [1, 2]},
    ])
    def test_unusable_envelopes_read_as_missing(self, raw):
        assert unwrap(raw) is None
