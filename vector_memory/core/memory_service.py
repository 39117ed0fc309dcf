"""
Memory service - ingestion and text search over a vector driver.
Creates rows through the record store, then hands them to the driver to attach the embedding.
"""

import logging
import math
from typing import Any, Dict, List, Optional

from .config import SEARCH_DEFAULT_LIMIT, SEARCH_DEFAULT_THRESHOLD
from .record_store import IRecordStore
from ..util.logging import logger
from ..vector.embeddings import IEmbeddingProvider
from ..vector.index import IVectorDriver
from ..vector.types import MemoryStatistics, SearchResult, VectorRecord


def estimate_tokens(text: str) -> int:
    """Rough token estimate, about four characters per token."""
    return int(math.ceil(len(text) / 4))


def chunk_text(text: str, chunk_size: int = 1000, overlap: int = 100) -> List[str]:
    """
    Split text into overlapping character chunks.

    Chunks break on the last whitespace inside the window when there is one,
    so words are not cut in half.
    """
    if chunk_size <= 0:
        raise ValueError("chunk_size must be > 0")
    if overlap < 0 or overlap >= chunk_size:
        raise ValueError("overlap must be >= 0 and smaller than chunk_size")

    text = text.strip()
    if len(text) <= chunk_size:
        return [text] if text else []

    chunks = []
    start = 0
    while start < len(text):
        end = min(start + chunk_size, len(text))
        if end < len(text):
            split_at = text.rfind(" ", start + overlap + 1, end)
            if split_at > start:
                end = split_at

        chunk = text[start:end].strip()
        if chunk:
            chunks.append(chunk)

        if end >= len(text):
            break
        start = end - overlap

    return chunks


class VectorMemoryService:
    """
    High-level service for agent vector memory.
    Combines a record store, an embedding provider and the active vector driver.
    """

    def __init__(self, record_store: IRecordStore, driver: IVectorDriver, embedding_provider: IEmbeddingProvider):
        self.record_store = record_store
        self.driver = driver
        self.embedding_provider = embedding_provider

    def add_memory(self, agent_name: str, content: str, metadata: Optional[Dict[str, Any]] = None,
                   namespace: str = "default", source: Optional[str] = None,
                   source_id: Optional[str] = None) -> VectorRecord:
        """
        Embed and store one memory.

        Returns:
            The stored record with its id assigned

        Raises:
            ValueError: If agent_name or content is empty
            StorageError / ConfigurationError: If the driver cannot attach the embedding
        """
        if not agent_name or not agent_name.strip():
            raise ValueError("agent_name cannot be empty")
        if not content or not content.strip():
            raise ValueError("content cannot be empty")

        embedding = self.embedding_provider.embed_text(content)

        record = self.record_store.create(VectorRecord(
            agent_name=agent_name.strip(),
            namespace=namespace or "default",
            content=content,
            metadata=metadata or {},
            source=source,
            source_id=source_id,
            embedding_provider=self.embedding_provider.provider_name,
            embedding_model=self.embedding_provider.model_name,
            embedding_vector=embedding,
            token_count=estimate_tokens(content),
        ))

        try:
            self.driver.store(record)
        except Exception:
            # Do not leave a row the driver never accepted
            self._discard([record])
            raise

        logger.log_operation("memory.add", "success", {
            "memory_id": record.id,
            "agent_name": record.agent_name,
            "namespace": record.namespace,
            "driver": self.driver.get_name(),
            "token_count": record.token_count,
        })
        return record

    def add_document(self, agent_name: str, content: str, metadata: Optional[Dict[str, Any]] = None,
                     namespace: str = "default", source: Optional[str] = None,
                     source_id: Optional[str] = None, chunk_size: int = 1000,
                     overlap: int = 100) -> List[VectorRecord]:
        """
        Chunk long content and store each chunk as its own memory.

        All or nothing: if a chunk fails, the chunks already stored are removed
        and the error is re-raised.
        """
        chunks = chunk_text(content, chunk_size, overlap)

        records = []
        for index, chunk in enumerate(chunks):
            chunk_metadata = dict(metadata or {})
            chunk_metadata.update({"chunk_index": index, "chunk_count": len(chunks)})
            try:
                records.append(self.add_memory(agent_name, chunk, chunk_metadata, namespace, source, source_id))
            except Exception:
                self._discard(records)
                raise

        return records

    def _discard(self, records: List[VectorRecord]):
        """Remove rows from a failed ingestion. Cleanup faults are logged, never raised."""
        for record in records:
            try:
                self.record_store.remove(record.id)
            except Exception as e:
                logger.log_operation("memory.rollback", "failure", {
                    "memory_id": record.id,
                    "agent_name": record.agent_name,
                    "namespace": record.namespace,
                    "error": str(e),
                }, level=logging.ERROR)

    def search(self, agent_name: str, query: str, namespace: str = "default",
               limit: int = SEARCH_DEFAULT_LIMIT, threshold: float = SEARCH_DEFAULT_THRESHOLD) -> List[SearchResult]:
        """Embed the query text and search the agent's partition."""
        if not query or not query.strip():
            return []

        query_embedding = self.embedding_provider.embed_text(query)
        return self.driver.search(agent_name, query_embedding, namespace, limit, threshold)

    def build_context(self, agent_name: str, query: str, namespace: str = "default",
                      limit: int = SEARCH_DEFAULT_LIMIT, threshold: float = SEARCH_DEFAULT_THRESHOLD,
                      max_chars: int = 2000) -> str:
        """Join the most relevant memories into a context block, capped at max_chars."""
        parts = []
        used = 0
        for result in self.search(agent_name, query, namespace, limit, threshold):
            if used + len(result.content) > max_chars:
                break
            parts.append(result.content)
            used += len(result.content)

        return "\n\n".join(parts)

    def forget(self, agent_name: str, namespace: str = "default", source: Optional[str] = None) -> int:
        return self.driver.delete(agent_name, namespace, source)

    def statistics(self, agent_name: str, namespace: str = "default") -> MemoryStatistics:
        return self.driver.get_statistics(agent_name, namespace)
