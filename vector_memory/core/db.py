"""
SQLite connection handling and schema for the vector memory table.
"""

import sqlite3
from contextlib import contextmanager
from typing import Generator
from .config import DB_PATH, VECTOR_TABLE, ensure_db_directory


@contextmanager
def get_db(db_path: str = None) -> Generator[sqlite3.Connection, None, None]:
    """Get a SQLite database connection."""
    conn = sqlite3.connect(db_path or DB_PATH)
    conn.row_factory = sqlite3.Row
    try:
        yield conn
    finally:
        conn.close()


def init_db(db_path: str = None):
    """Initialize the database with required tables."""
    ensure_db_directory(db_path)
    with get_db(db_path) as conn:
        cursor = conn.cursor()

        cursor.execute(f'''
            CREATE TABLE IF NOT EXISTS {VECTOR_TABLE} (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                agent_name TEXT NOT NULL,
                namespace TEXT NOT NULL DEFAULT 'default',
                content TEXT NOT NULL,
                metadata TEXT,            -- JSON encoded
                source TEXT,
                source_id TEXT,
                embedding_provider TEXT NOT NULL,
                embedding_model TEXT NOT NULL,
                embedding_vector TEXT,    -- JSON encoded list of floats
                token_count INTEGER DEFAULT 0,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        ''')

        # Every driver operation is scoped to (agent_name, namespace)
        cursor.execute(
            f'CREATE INDEX IF NOT EXISTS idx_{VECTOR_TABLE}_agent_ns '
            f'ON {VECTOR_TABLE}(agent_name, namespace)'
        )
        cursor.execute(
            f'CREATE INDEX IF NOT EXISTS idx_{VECTOR_TABLE}_source '
            f'ON {VECTOR_TABLE}(agent_name, namespace, source)'
        )

        conn.commit()


def health_check(db_path: str = None):
    """Check database health."""
    try:
        with get_db(db_path) as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT name FROM sqlite_master WHERE type='table';")
            tables = cursor.fetchall()

            table_names = [table[0] for table in tables]
            return VECTOR_TABLE in table_names
    except sqlite3.Error:
        return False
