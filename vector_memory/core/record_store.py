"""
Record store - persistence for vector memory rows.
Create/filter/delete by agent+namespace+source plus count/sum/group aggregates.
Drivers depend on IRecordStore only; SQLite is the default implementation.
"""

import json
import sqlite3
from abc import ABC, abstractmethod
from contextlib import contextmanager
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Any, Dict, Generator, List, Mapping, Optional, Sequence

from .config import VECTOR_TABLE
from .db import get_db, init_db, health_check as sqlite_health_check
from ..vector.types import VectorRecord

# Columns allowed in aggregate SQL (interpolated, never taken from user input)
SUM_FIELDS = ("token_count",)
GROUP_FIELDS = ("embedding_provider", "embedding_model", "source", "source_id")

RECORD_COLUMNS = (
    "id", "agent_name", "namespace", "content", "metadata", "source", "source_id",
    "embedding_provider", "embedding_model", "embedding_vector", "token_count", "created_at",
)


@dataclass
class RecordFilter:
    """Scope of a record store query: one (agent, namespace) partition, optionally one source."""

    agent_name: str
    namespace: str = "default"
    source: Optional[str] = None


class IRecordStore(ABC):
    """Abstract interface for vector memory persistence."""

    dialect: str = ""
    """Storage engine name, e.g. 'sqlite' or 'postgresql'"""

    @abstractmethod
    def create(self, record: VectorRecord) -> VectorRecord:
        """Persist a record and return it with id and created_at assigned."""
        pass

    @abstractmethod
    def get(self, record_id: int) -> Optional[VectorRecord]:
        """Fetch a single record by id."""
        pass

    @abstractmethod
    def remove(self, record_id: int) -> bool:
        """Delete a single record by id."""
        pass

    @abstractmethod
    def filter(self, agent_name: str, namespace: str = "default", source: Optional[str] = None) -> List[VectorRecord]:
        """All records in the partition, in id order."""
        pass

    @abstractmethod
    def count(self, record_filter: RecordFilter) -> int:
        pass

    @abstractmethod
    def sum_field(self, record_filter: RecordFilter, field: str) -> int:
        pass

    @abstractmethod
    def grouped_count(self, record_filter: RecordFilter, group_by: str) -> Dict[str, int]:
        """Count records per distinct value of group_by, skipping NULL values."""
        pass

    @abstractmethod
    def delete(self, record_filter: RecordFilter) -> int:
        """Delete matching records and return how many were removed."""
        pass

    @abstractmethod
    def raw_query(self, sql: str, params: Sequence[Any] = ()) -> List[Dict[str, Any]]:
        """Engine specific query returning rows as dicts."""
        pass

    @abstractmethod
    def execute(self, sql: str, params: Sequence[Any] = ()) -> int:
        """Engine specific statement returning the affected row count."""
        pass

    @abstractmethod
    def health_check(self) -> bool:
        pass


def decode_json(value: Any, default: Any) -> Any:
    """Decode a JSON column that may already be decoded by the driver."""
    if value is None:
        return default
    if isinstance(value, (bytes, bytearray)):
        value = value.decode("utf-8")
    if isinstance(value, str):
        if not value:
            return default
        return json.loads(value)
    return value


def decode_timestamp(value: Any) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value))


def row_to_record(row: Mapping[str, Any]) -> VectorRecord:
    """Convert a storage row into a VectorRecord."""
    return VectorRecord(
        id=row["id"],
        agent_name=row["agent_name"],
        namespace=row["namespace"],
        content=row["content"],
        metadata=decode_json(row["metadata"], {}),
        source=row["source"],
        source_id=row["source_id"],
        embedding_provider=row["embedding_provider"],
        embedding_model=row["embedding_model"],
        embedding_vector=[float(v) for v in decode_json(row["embedding_vector"], [])],
        token_count=int(row["token_count"] or 0),
        created_at=decode_timestamp(row["created_at"]),
    )


class SQLRecordStore(IRecordStore):
    """Shared SQL for DB-API stores; subclasses supply connections and placeholder style."""

    placeholder = "?"
    json_placeholder = "?"
    table = VECTOR_TABLE

    @abstractmethod
    def _connection(self):
        """Context manager yielding a DB-API connection whose rows map column names."""
        pass

    @abstractmethod
    def _insert(self, cursor, sql: str, params: List[Any]) -> int:
        """Run an INSERT and return the new row id."""
        pass

    def _encode_timestamp(self, value: datetime) -> Any:
        return value

    def _where(self, record_filter: RecordFilter):
        p = self.placeholder
        clauses = [f"agent_name = {p}", f"namespace = {p}"]
        params = [record_filter.agent_name, record_filter.namespace]

        if record_filter.source:
            clauses.append(f"source = {p}")
            params.append(record_filter.source)

        return " AND ".join(clauses), params

    def _fetchall(self, sql: str, params: Sequence[Any]) -> List[Dict[str, Any]]:
        with self._connection() as conn:
            cursor = conn.cursor()
            cursor.execute(sql, list(params))
            return [dict(row) for row in cursor.fetchall()]

    def _execute(self, sql: str, params: Sequence[Any]) -> int:
        with self._connection() as conn:
            cursor = conn.cursor()
            cursor.execute(sql, list(params))
            conn.commit()
            return cursor.rowcount

    def create(self, record: VectorRecord) -> VectorRecord:
        created_at = record.created_at or datetime.now(timezone.utc)
        p = self.placeholder
        j = self.json_placeholder

        sql = (
            f"INSERT INTO {self.table} (agent_name, namespace, content, metadata, source, source_id, "
            f"embedding_provider, embedding_model, embedding_vector, token_count, created_at) "
            f"VALUES ({p}, {p}, {p}, {j}, {p}, {p}, {p}, {p}, {j}, {p}, {p})"
        )
        params = [
            record.agent_name,
            record.namespace,
            record.content,
            json.dumps(record.metadata or {}),
            record.source,
            record.source_id,
            record.embedding_provider,
            record.embedding_model,
            json.dumps([float(v) for v in record.embedding_vector]),
            int(record.token_count or 0),
            self._encode_timestamp(created_at),
        ]

        with self._connection() as conn:
            cursor = conn.cursor()
            record_id = self._insert(cursor, sql, params)
            conn.commit()

        return replace(record, id=record_id, created_at=created_at)

    def get(self, record_id: int) -> Optional[VectorRecord]:
        rows = self._fetchall(
            f"SELECT {', '.join(RECORD_COLUMNS)} FROM {self.table} WHERE id = {self.placeholder}",
            [record_id],
        )
        return row_to_record(rows[0]) if rows else None

    def remove(self, record_id: int) -> bool:
        return self._execute(f"DELETE FROM {self.table} WHERE id = {self.placeholder}", [record_id]) > 0

    def filter(self, agent_name: str, namespace: str = "default", source: Optional[str] = None) -> List[VectorRecord]:
        where, params = self._where(RecordFilter(agent_name, namespace, source))
        rows = self._fetchall(
            f"SELECT {', '.join(RECORD_COLUMNS)} FROM {self.table} WHERE {where} ORDER BY id ASC",
            params,
        )
        return [row_to_record(row) for row in rows]

    def count(self, record_filter: RecordFilter) -> int:
        where, params = self._where(record_filter)
        rows = self._fetchall(f"SELECT COUNT(*) AS total FROM {self.table} WHERE {where}", params)
        return int(rows[0]["total"]) if rows else 0

    def sum_field(self, record_filter: RecordFilter, field: str) -> int:
        if field not in SUM_FIELDS:
            raise ValueError(f"Cannot sum field '{field}'; allowed: {SUM_FIELDS}")

        where, params = self._where(record_filter)
        rows = self._fetchall(
            f"SELECT COALESCE(SUM({field}), 0) AS total FROM {self.table} WHERE {where}",
            params,
        )
        return int(rows[0]["total"]) if rows else 0

    def grouped_count(self, record_filter: RecordFilter, group_by: str) -> Dict[str, int]:
        if group_by not in GROUP_FIELDS:
            raise ValueError(f"Cannot group by field '{group_by}'; allowed: {GROUP_FIELDS}")

        where, params = self._where(record_filter)
        rows = self._fetchall(
            f"SELECT {group_by} AS group_key, COUNT(*) AS total FROM {self.table} "
            f"WHERE {where} AND {group_by} IS NOT NULL GROUP BY {group_by} ORDER BY {group_by}",
            params,
        )
        return {row["group_key"]: int(row["total"]) for row in rows}

    def delete(self, record_filter: RecordFilter) -> int:
        where, params = self._where(record_filter)
        return self._execute(f"DELETE FROM {self.table} WHERE {where}", params)

    def raw_query(self, sql: str, params: Sequence[Any] = ()) -> List[Dict[str, Any]]:
        return self._fetchall(sql, params)

    def execute(self, sql: str, params: Sequence[Any] = ()) -> int:
        return self._execute(sql, params)


class SQLiteRecordStore(SQLRecordStore):
    """SQLite-backed record store. Has no native vector search."""

    dialect = "sqlite"

    def __init__(self, db_path: str = None):
        self.db_path = db_path
        init_db(db_path)

    @contextmanager
    def _connection(self) -> Generator[sqlite3.Connection, None, None]:
        with get_db(self.db_path) as conn:
            yield conn

    def _insert(self, cursor, sql: str, params: List[Any]) -> int:
        cursor.execute(sql, params)
        return cursor.lastrowid

    def _encode_timestamp(self, value: datetime) -> Any:
        # sqlite3's default datetime adapter is deprecated
        return value.isoformat()

    def health_check(self) -> bool:
        return sqlite_health_check(self.db_path)
