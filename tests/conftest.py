"""
Shared fixtures for vector memory tests.
"""

import pytest
from unittest.mock import MagicMock

from vector_memory.core.record_store import SQLiteRecordStore
from vector_memory.vector.index import InMemoryVectorDriver
from vector_memory.vector.types import VectorRecord


@pytest.fixture
def sqlite_store(tmp_path):
    """Fresh SQLite record store per test."""
    return SQLiteRecordStore(str(tmp_path / "vector_memory.db"))


@pytest.fixture
def inmemory_driver(sqlite_store):
    return InMemoryVectorDriver(sqlite_store)


@pytest.fixture
def pg_store():
    """Mock record store reporting a PostgreSQL connection with pgvector installed."""
    store = MagicMock()
    store.dialect = "postgresql"
    store.table = "agent_vector_memories"
    store.raw_query.return_value = [{"?column?": 1}]
    return store


def make_record(agent_name="agentA", vector=None, namespace="default", content="memory",
                source=None, provider="hash", token_count=1, metadata=None):
    return VectorRecord(
        agent_name=agent_name,
        namespace=namespace,
        content=content,
        embedding_vector=vector if vector is not None else [1.0, 0.0],
        metadata=metadata or {},
        source=source,
        embedding_provider=provider,
        embedding_model=f"{provider}-model",
        token_count=token_count,
    )


@pytest.fixture
def record_factory():
    """Build unsaved VectorRecords with sensible defaults."""
    return make_record
