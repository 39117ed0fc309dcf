"""
PostgreSQL record store.
Same table as the SQLite store plus a pgvector `embedding` column for the indexed driver.
"""

from contextlib import contextmanager
from typing import Any, List

import psycopg
from psycopg.rows import dict_row

from .record_store import SQLRecordStore


class PostgresRecordStore(SQLRecordStore):
    """PostgreSQL-backed record store, one connection per operation."""

    dialect = "postgresql"
    placeholder = "%s"
    json_placeholder = "%s::jsonb"

    def __init__(self, dsn: str, init_schema: bool = True):
        self.dsn = dsn
        if init_schema:
            self.init_schema()

    @contextmanager
    def _connection(self):
        conn = psycopg.connect(self.dsn, row_factory=dict_row)
        try:
            yield conn
        finally:
            conn.close()

    def _insert(self, cursor, sql: str, params: List[Any]) -> int:
        cursor.execute(sql + " RETURNING id", params)
        return cursor.fetchone()["id"]

    def init_schema(self, create_extension: bool = True):
        """Create the vector memory table, and the vector extension when permitted."""
        with self._connection() as conn:
            cursor = conn.cursor()

            if create_extension:
                try:
                    cursor.execute("CREATE EXTENSION IF NOT EXISTS vector")
                    conn.commit()
                except psycopg.Error:
                    # Extension needs superuser; the driver reports unavailable without it
                    conn.rollback()

            cursor.execute(f'''
                CREATE TABLE IF NOT EXISTS {self.table} (
                    id BIGSERIAL PRIMARY KEY,
                    agent_name TEXT NOT NULL,
                    namespace TEXT NOT NULL DEFAULT 'default',
                    content TEXT NOT NULL,
                    metadata JSONB,
                    source TEXT,
                    source_id TEXT,
                    embedding_provider TEXT NOT NULL,
                    embedding_model TEXT NOT NULL,
                    embedding_vector JSONB,
                    token_count INTEGER DEFAULT 0,
                    created_at TIMESTAMPTZ DEFAULT now()
                )
            ''')
            cursor.execute(
                f'CREATE INDEX IF NOT EXISTS idx_{self.table}_agent_ns '
                f'ON {self.table}(agent_name, namespace)'
            )
            conn.commit()

            if self.has_vector_extension():
                cursor.execute(f"ALTER TABLE {self.table} ADD COLUMN IF NOT EXISTS embedding vector")
                conn.commit()

    def has_vector_extension(self) -> bool:
        rows = self._fetchall("SELECT 1 FROM pg_extension WHERE extname = 'vector'", [])
        return bool(rows)

    def health_check(self) -> bool:
        try:
            rows = self._fetchall("SELECT 1 AS ok", [])
            return bool(rows)
        except psycopg.Error:
            return False
