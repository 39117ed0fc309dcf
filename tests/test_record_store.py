"""
Tests for the SQLite record store.
"""

from datetime import datetime

import pytest

from vector_memory.core.record_store import IRecordStore, RecordFilter, SQLiteRecordStore, decode_json


def test_store_implements_interface(sqlite_store):
    assert isinstance(sqlite_store, IRecordStore)
    assert sqlite_store.dialect == "sqlite"


def test_health_check(sqlite_store):
    assert sqlite_store.health_check() is True


def test_create_assigns_id_and_timestamp(sqlite_store, record_factory):
    """Test that create returns the record with id and created_at set."""
    record = sqlite_store.create(record_factory(metadata={"topic": "python", "tags": ["a", "b"]}))

    assert record.id is not None
    assert isinstance(record.created_at, datetime)

    fetched = sqlite_store.get(record.id)
    assert fetched is not None
    assert fetched.agent_name == "agentA"
    assert fetched.metadata == {"topic": "python", "tags": ["a", "b"]}
    assert fetched.embedding_vector == [1.0, 0.0]
    assert fetched.created_at == record.created_at


def test_ids_are_unique(sqlite_store, record_factory):
    first = sqlite_store.create(record_factory())
    second = sqlite_store.create(record_factory())
    assert first.id != second.id


def test_get_missing_returns_none(sqlite_store):
    assert sqlite_store.get(9999) is None


def test_filter_scopes_to_partition_in_id_order(sqlite_store, record_factory):
    a1 = sqlite_store.create(record_factory(content="a1"))
    sqlite_store.create(record_factory(agent_name="agentB", content="b1"))
    sqlite_store.create(record_factory(namespace="other", content="a-other"))
    a2 = sqlite_store.create(record_factory(content="a2"))

    records = sqlite_store.filter("agentA", "default")

    assert [r.id for r in records] == [a1.id, a2.id]


def test_filter_by_source(sqlite_store, record_factory):
    sqlite_store.create(record_factory(source="docs"))
    sqlite_store.create(record_factory(source="chat"))

    records = sqlite_store.filter("agentA", "default", source="docs")

    assert len(records) == 1
    assert records[0].source == "docs"


def test_aggregates(sqlite_store, record_factory):
    sqlite_store.create(record_factory(source="docs", provider="hash", token_count=10))
    sqlite_store.create(record_factory(source="docs", provider="openai", token_count=5))
    sqlite_store.create(record_factory(source=None, provider="hash", token_count=7))
    sqlite_store.create(record_factory(agent_name="agentB", token_count=100))

    record_filter = RecordFilter(agent_name="agentA")

    assert sqlite_store.count(record_filter) == 3
    assert sqlite_store.sum_field(record_filter, "token_count") == 22
    assert sqlite_store.grouped_count(record_filter, "embedding_provider") == {"hash": 2, "openai": 1}
    # NULL sources are skipped
    assert sqlite_store.grouped_count(record_filter, "source") == {"docs": 2}


def test_aggregates_on_empty_partition(sqlite_store):
    record_filter = RecordFilter(agent_name="nobody")

    assert sqlite_store.count(record_filter) == 0
    assert sqlite_store.sum_field(record_filter, "token_count") == 0
    assert sqlite_store.grouped_count(record_filter, "source") == {}


def test_aggregate_field_whitelist(sqlite_store):
    record_filter = RecordFilter(agent_name="agentA")

    with pytest.raises(ValueError):
        sqlite_store.sum_field(record_filter, "id; DROP TABLE agent_vector_memories")

    with pytest.raises(ValueError):
        sqlite_store.grouped_count(record_filter, "content")


def test_delete_returns_count(sqlite_store, record_factory):
    sqlite_store.create(record_factory(source="docs"))
    sqlite_store.create(record_factory(source="docs"))
    sqlite_store.create(record_factory(source="chat"))

    assert sqlite_store.delete(RecordFilter(agent_name="agentA", source="docs")) == 2
    assert sqlite_store.delete(RecordFilter(agent_name="agentA", source="docs")) == 0
    assert sqlite_store.count(RecordFilter(agent_name="agentA")) == 1


def test_remove_single_record(sqlite_store, record_factory):
    record = sqlite_store.create(record_factory())

    assert sqlite_store.remove(record.id) is True
    assert sqlite_store.remove(record.id) is False
    assert sqlite_store.get(record.id) is None


def test_raw_query_and_execute(sqlite_store, record_factory):
    record = sqlite_store.create(record_factory(content="before"))

    updated = sqlite_store.execute("UPDATE agent_vector_memories SET content = ? WHERE id = ?", ["after", record.id])
    rows = sqlite_store.raw_query("SELECT content FROM agent_vector_memories WHERE id = ?", [record.id])

    assert updated == 1
    assert rows == [{"content": "after"}]


def test_data_survives_new_store_instance(tmp_path, record_factory):
    db_path = str(tmp_path / "persist.db")
    SQLiteRecordStore(db_path).create(record_factory())

    assert len(SQLiteRecordStore(db_path).filter("agentA")) == 1


def test_decode_json_handles_decoded_and_empty_values():
    assert decode_json('{"a": 1}', {}) == {"a": 1}
    assert decode_json({"a": 1}, {}) == {"a": 1}
    assert decode_json(None, {}) == {}
    assert decode_json("", []) == []
    assert decode_json(b"[1, 2]", []) == [1, 2]
