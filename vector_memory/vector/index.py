"""
Vector driver contract and the scan-based in-memory driver.
Drivers are interchangeable; callers never branch on the active backend.
"""

import logging
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

from .similarity import cosine_similarity
from .types import MemoryStatistics, SearchResult, VectorRecord
from ..core.exceptions import StorageError
from ..core.record_store import IRecordStore, RecordFilter
from ..util.logging import logger


class IVectorDriver(ABC):
    """Abstract interface for vector memory backends."""

    @abstractmethod
    def store(self, record: VectorRecord) -> bool:
        """Persist or attach the record's embedding."""
        pass

    @abstractmethod
    def search(self, agent_name: str, query_embedding: Sequence[float], namespace: str = "default",
               limit: int = 5, threshold: float = 0.7) -> List[SearchResult]:
        """Return records with similarity >= threshold, most similar first, at most limit."""
        pass

    @abstractmethod
    def delete(self, agent_name: str, namespace: str = "default", source: Optional[str] = None) -> int:
        """Delete memories in the partition, optionally for one source only."""
        pass

    @abstractmethod
    def get_statistics(self, agent_name: str, namespace: str = "default") -> MemoryStatistics:
        """Count, token total, and per-provider/per-source counts for the partition."""
        pass

    @abstractmethod
    def is_available(self) -> bool:
        """Check if the driver is available and configured. Never raises."""
        pass

    @abstractmethod
    def get_name(self) -> str:
        pass


def collect_statistics(store: IRecordStore, agent_name: str, namespace: str = "default") -> MemoryStatistics:
    """Aggregate partition statistics through the record store."""
    record_filter = RecordFilter(agent_name=agent_name, namespace=namespace)

    return MemoryStatistics(
        total_memories=store.count(record_filter),
        total_tokens=store.sum_field(record_filter, "token_count"),
        providers=store.grouped_count(record_filter, "embedding_provider"),
        sources=store.grouped_count(record_filter, "source"),
    )


class InMemoryVectorDriver(IVectorDriver):
    """Brute-force driver: scans the partition and ranks by cosine similarity in-process.

    Cost is O(N*D) per search, so this suits small to moderate partitions.
    """

    def __init__(self, record_store: IRecordStore):
        self.record_store = record_store

    def store(self, record: VectorRecord) -> bool:
        # Embedding already lives in the record store alongside the row
        logger.log_vector_operation("store", self.get_name(), {
            "memory_id": record.id,
            "agent_name": record.agent_name,
            "namespace": record.namespace,
        })
        return True

    def search(self, agent_name: str, query_embedding: Sequence[float], namespace: str = "default",
               limit: int = 5, threshold: float = 0.7) -> List[SearchResult]:
        logger.log_vector_operation("search", self.get_name(), {
            "agent_name": agent_name,
            "namespace": namespace,
            "query_dimensions": len(query_embedding),
            "limit": limit,
            "threshold": threshold,
        }, status="started")

        if limit <= 0:
            return []

        try:
            memories = self.record_store.filter(agent_name, namespace)
        except Exception as e:
            logger.log_vector_failure("search", self.get_name(), e, {"agent_name": agent_name, "namespace": namespace})
            raise StorageError(f"In-memory vector search failed: {e}", "search", agent_name, namespace) from e

        scored = []
        for memory in memories:
            similarity = cosine_similarity(query_embedding, memory.embedding_vector)
            if similarity >= threshold:
                scored.append(SearchResult.from_record(memory, similarity))

        # sorted() is stable: equal scores keep fetch order
        results = sorted(scored, key=lambda result: result.similarity, reverse=True)[:limit]

        logger.log_vector_operation("search", self.get_name(), {
            "agent_name": agent_name,
            "namespace": namespace,
            "total_memories": len(memories),
            "results_count": len(results),
        })

        return results

    def delete(self, agent_name: str, namespace: str = "default", source: Optional[str] = None) -> int:
        try:
            count = self.record_store.delete(RecordFilter(agent_name=agent_name, namespace=namespace, source=source))
        except Exception as e:
            logger.log_vector_failure("delete", self.get_name(), e, {
                "agent_name": agent_name, "namespace": namespace, "source": source,
            })
            raise StorageError(f"In-memory vector deletion failed: {e}", "delete", agent_name, namespace) from e

        logger.log_vector_operation("delete", self.get_name(), {
            "agent_name": agent_name,
            "namespace": namespace,
            "source": source,
            "count": count,
        }, level=logging.INFO)

        return count

    def get_statistics(self, agent_name: str, namespace: str = "default") -> MemoryStatistics:
        try:
            return collect_statistics(self.record_store, agent_name, namespace)
        except Exception as e:
            logger.log_vector_failure("statistics", self.get_name(), e, {"agent_name": agent_name, "namespace": namespace})
            raise StorageError(f"In-memory statistics failed: {e}", "get_statistics", agent_name, namespace) from e

    def is_available(self) -> bool:
        # No external dependency
        return True

    def get_name(self) -> str:
        return "inmemory"
