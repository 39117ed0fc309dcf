"""
Vector memory data types shared by every driver.
Records are persisted by the record store; search results and statistics are transient.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional


@dataclass
class VectorRecord:
    """One stored embedding plus its agent/namespace/source metadata."""

    agent_name: str
    """Owning logical agent"""

    content: str
    """Original text the embedding represents"""

    embedding_vector: List[float]
    """The vector representation of the content"""

    namespace: str = "default"
    """Partition within the agent's memory"""

    metadata: Dict[str, Any] = field(default_factory=dict)
    """Open key/value metadata, opaque to the drivers"""

    source: Optional[str] = None
    source_id: Optional[str] = None

    embedding_provider: str = "unknown"
    embedding_model: str = "unknown"

    token_count: int = 0

    id: Optional[int] = None
    """Assigned by the record store on creation"""

    created_at: Optional[datetime] = None


@dataclass
class SearchResult:
    """Represents a scored match returned by a driver search."""

    id: Optional[int]
    agent_name: str
    namespace: str
    content: str
    metadata: Dict[str, Any]
    source: Optional[str]
    source_id: Optional[str]
    embedding_provider: str
    embedding_model: str
    created_at: Optional[datetime]

    similarity: float
    """Cosine similarity to the query, in [-1, 1]"""

    @classmethod
    def from_record(cls, record: VectorRecord, similarity: float) -> 'SearchResult':
        return cls(
            id=record.id,
            agent_name=record.agent_name,
            namespace=record.namespace,
            content=record.content,
            metadata=record.metadata,
            source=record.source,
            source_id=record.source_id,
            embedding_provider=record.embedding_provider,
            embedding_model=record.embedding_model,
            created_at=record.created_at,
            similarity=float(similarity),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "agent_name": self.agent_name,
            "namespace": self.namespace,
            "content": self.content,
            "metadata": self.metadata,
            "source": self.source,
            "source_id": self.source_id,
            "embedding_provider": self.embedding_provider,
            "embedding_model": self.embedding_model,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "similarity": self.similarity,
        }


@dataclass
class MemoryStatistics:
    """Aggregate statistics for one (agent, namespace) partition."""

    total_memories: int = 0
    total_tokens: int = 0
    providers: Dict[str, int] = field(default_factory=dict)
    sources: Dict[str, int] = field(default_factory=dict)

    error: Optional[str] = None
    """Set only when statistics degraded instead of raising"""

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "total_memories": self.total_memories,
            "total_tokens": self.total_tokens,
            "providers": dict(self.providers),
            "sources": dict(self.sources),
        }
        if self.error is not None:
            data["error"] = self.error
        return data
