"""
Vector memory data types and similarity math.
Drivers live in .index (inmemory) and .pgvector_store (pgvector).
"""

# Drivers import the record store, which imports these types; keep this module light
from .types import VectorRecord, SearchResult, MemoryStatistics
from .similarity import cosine_similarity

__all__ = [
    'VectorRecord',
    'SearchResult',
    'MemoryStatistics',
    'cosine_similarity',
]
