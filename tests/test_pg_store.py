"""
Tests for the PostgreSQL record store with a mocked psycopg connection.
"""

from datetime import datetime, timezone

import psycopg
import pytest
from unittest.mock import MagicMock, patch

from vector_memory.core.pg_store import PostgresRecordStore
from vector_memory.core.record_store import RecordFilter
from vector_memory.vector.types import VectorRecord


@pytest.fixture
def connection():
    conn = MagicMock()
    cursor = MagicMock()
    conn.cursor.return_value = cursor
    with patch("vector_memory.core.pg_store.psycopg.connect", return_value=conn) as connect:
        conn.connect_mock = connect
        yield conn


@pytest.fixture
def store(connection):
    return PostgresRecordStore("postgresql://localhost/test", init_schema=False)


def test_dialect(store):
    assert store.dialect == "postgresql"


def test_connection_uses_dict_rows_and_closes(store, connection):
    connection.cursor.return_value.fetchall.return_value = [{"total": 0}]

    store.count(RecordFilter(agent_name="agentA"))

    _, kwargs = connection.connect_mock.call_args
    assert kwargs["row_factory"] is not None
    connection.close.assert_called_once()


def test_create_returns_id(store, connection):
    cursor = connection.cursor.return_value
    cursor.fetchone.return_value = {"id": 17}

    record = store.create(VectorRecord(agent_name="agentA", content="hello", embedding_vector=[1.0, 2.0],
                                       metadata={"k": "v"}))

    assert record.id == 17
    assert record.created_at is not None
    sql, params = cursor.execute.call_args[0]
    assert sql.endswith("RETURNING id")
    assert "%s::jsonb" in sql
    assert params[0] == "agentA"
    assert params[3] == '{"k": "v"}'
    assert params[8] == "[1.0, 2.0]"
    connection.commit.assert_called_once()


def test_filter_accepts_decoded_jsonb(store, connection):
    created = datetime(2026, 3, 1, tzinfo=timezone.utc)
    connection.cursor.return_value.fetchall.return_value = [{
        "id": 1,
        "agent_name": "agentA",
        "namespace": "default",
        "content": "hello",
        "metadata": {"k": "v"},
        "source": None,
        "source_id": None,
        "embedding_provider": "hash",
        "embedding_model": "md5-2",
        "embedding_vector": [1.0, 0.0],
        "token_count": 2,
        "created_at": created,
    }]

    records = store.filter("agentA", source="docs")

    assert records[0].metadata == {"k": "v"}
    assert records[0].embedding_vector == [1.0, 0.0]
    assert records[0].created_at == created

    sql, params = connection.cursor.return_value.execute.call_args[0]
    assert "agent_name = %s AND namespace = %s AND source = %s" in sql
    assert params == ["agentA", "default", "docs"]


def test_delete_returns_rowcount(store, connection):
    connection.cursor.return_value.rowcount = 4

    assert store.delete(RecordFilter(agent_name="agentA")) == 4
    connection.commit.assert_called_once()


def test_health_check_failure(store, connection):
    connection.cursor.return_value.execute.side_effect = psycopg.OperationalError("down")

    assert store.health_check() is False


def test_init_schema_tolerates_missing_extension_privilege(connection):
    cursor = connection.cursor.return_value

    def execute(sql, params=None):
        if sql.startswith("CREATE EXTENSION"):
            raise psycopg.errors.InsufficientPrivilege("permission denied")

    cursor.execute.side_effect = execute
    cursor.fetchall.return_value = []

    PostgresRecordStore("postgresql://localhost/test")

    connection.rollback.assert_called_once()
    statements = [c[0][0] for c in cursor.execute.call_args_list]
    assert any("CREATE TABLE IF NOT EXISTS agent_vector_memories" in s for s in statements)
    # No vector extension, so no embedding column
    assert not any("ADD COLUMN IF NOT EXISTS embedding" in s for s in statements)
