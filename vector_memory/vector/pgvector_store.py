"""
pgvector-backed driver.
Ranking happens inside PostgreSQL via the `<=>` cosine distance operator;
distance is converted back to similarity with 1 - distance.
"""

import logging
from typing import List, Optional, Sequence

from .index import IVectorDriver, collect_statistics
from .similarity import to_vector_literal
from .types import MemoryStatistics, SearchResult, VectorRecord
from ..core.exceptions import ConfigurationError, StorageError
from ..core.record_store import IRecordStore, RecordFilter, decode_json, decode_timestamp
from ..util.logging import logger


class PgVectorDriver(IVectorDriver):
    """PostgreSQL + pgvector implementation of IVectorDriver."""

    ENGINE_DIALECT = "postgresql"

    def __init__(self, record_store: IRecordStore):
        """
        Initialize pgvector driver.

        Args:
            record_store: Record store whose connection must be PostgreSQL with the vector extension
        """
        self.record_store = record_store
        self.table = getattr(record_store, "table", "agent_vector_memories")

    def _require_available(self):
        if not self.is_available():
            raise ConfigurationError("PgVector driver requires PostgreSQL connection with the vector extension")

    def store(self, record: VectorRecord) -> bool:
        self._require_available()

        try:
            # Row was created by the ingestion path; only the vector column is written here
            updated = self.record_store.execute(
                f"UPDATE {self.table} SET embedding = %s::vector WHERE id = %s",
                [to_vector_literal(record.embedding_vector), record.id],
            )
        except Exception as e:
            logger.log_vector_failure("store", self.get_name(), e, {
                "memory_id": record.id,
                "agent_name": record.agent_name,
            })
            raise StorageError(f"Failed to store vector in PostgreSQL: {e}", "store",
                               record.agent_name, record.namespace) from e

        if updated == 0:
            raise StorageError(f"Failed to store vector in PostgreSQL: no record with id {record.id}", "store",
                               record.agent_name, record.namespace)

        logger.log_vector_operation("store", self.get_name(), {
            "memory_id": record.id,
            "agent_name": record.agent_name,
            "namespace": record.namespace,
            "dimensions": len(record.embedding_vector),
        })
        return True

    def search(self, agent_name: str, query_embedding: Sequence[float], namespace: str = "default",
               limit: int = 5, threshold: float = 0.7) -> List[SearchResult]:
        self._require_available()

        if limit <= 0:
            return []

        embedding_str = to_vector_literal(query_embedding)

        # <=> yields NaN when either side has zero norm; score those rows as 0.0
        sql = f'''
            SELECT * FROM (
                SELECT
                    id, agent_name, namespace, content, metadata, source, source_id,
                    embedding_provider, embedding_model, created_at,
                    COALESCE(NULLIF(1 - (embedding <=> %s::vector), 'NaN'::float8), 0) AS similarity
                FROM {self.table}
                WHERE agent_name = %s
                    AND namespace = %s
                    AND embedding IS NOT NULL
            ) AS scored
            WHERE similarity >= %s
            ORDER BY similarity DESC, id ASC
            LIMIT %s
        '''
        params = [embedding_str, agent_name, namespace, threshold, limit]

        try:
            rows = self.record_store.raw_query(sql, params)
            results = [self._row_to_result(row) for row in rows]
        except Exception as e:
            logger.log_vector_failure("search", self.get_name(), e, {"agent_name": agent_name, "namespace": namespace})
            raise StorageError(f"PostgreSQL vector search failed: {e}", "search", agent_name, namespace) from e

        logger.log_vector_operation("search", self.get_name(), {
            "agent_name": agent_name,
            "namespace": namespace,
            "results_count": len(results),
            "query_dimensions": len(query_embedding),
            "threshold": threshold,
        })

        return results

    @staticmethod
    def _row_to_result(row) -> SearchResult:
        return SearchResult(
            id=row["id"],
            agent_name=row["agent_name"],
            namespace=row["namespace"],
            content=row["content"],
            metadata=decode_json(row["metadata"], {}),
            source=row["source"],
            source_id=row["source_id"],
            embedding_provider=row["embedding_provider"],
            embedding_model=row["embedding_model"],
            created_at=decode_timestamp(row["created_at"]),
            similarity=float(row["similarity"]),
        )

    def delete(self, agent_name: str, namespace: str = "default", source: Optional[str] = None) -> int:
        self._require_available()

        try:
            count = self.record_store.delete(RecordFilter(agent_name=agent_name, namespace=namespace, source=source))
        except Exception as e:
            logger.log_vector_failure("delete", self.get_name(), e, {
                "agent_name": agent_name, "namespace": namespace, "source": source,
            })
            raise StorageError(f"PostgreSQL vector deletion failed: {e}", "delete", agent_name, namespace) from e

        logger.log_vector_operation("delete", self.get_name(), {
            "agent_name": agent_name,
            "namespace": namespace,
            "source": source,
            "count": count,
        }, level=logging.INFO)

        return count

    def get_statistics(self, agent_name: str, namespace: str = "default") -> MemoryStatistics:
        # Statistics are advisory: degrade to zero values instead of raising
        try:
            self._require_available()
            return collect_statistics(self.record_store, agent_name, namespace)
        except Exception as e:
            logger.log_vector_failure("statistics", self.get_name(), e, {"agent_name": agent_name, "namespace": namespace})
            return MemoryStatistics(error=str(e))

    def is_available(self) -> bool:
        try:
            if getattr(self.record_store, "dialect", None) != self.ENGINE_DIALECT:
                return False

            rows = self.record_store.raw_query("SELECT 1 FROM pg_extension WHERE extname = 'vector'")
            return bool(rows)
        except Exception as e:
            logger.log_vector_operation("availability", self.get_name(), {"error": str(e)[:200]}, status="unavailable")
            return False

    def get_name(self) -> str:
        return "pgvector"
