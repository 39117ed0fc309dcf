"""
Embedding providers that turn memory content and queries into vectors.
"""

from abc import ABC, abstractmethod
import hashlib
from typing import List


class IEmbeddingProvider(ABC):
    """Abstract interface for embedding providers."""

    provider_name: str = "unknown"

    @abstractmethod
    def embed_text(self, text: str) -> List[float]:
        """Generate embedding vector for given text."""
        pass

    @abstractmethod
    def get_dimension(self) -> int:
        """Get the dimension of the embedding vectors."""
        pass

    @property
    def model_name(self) -> str:
        return self.provider_name


class DeterministicHashEmbedding(IEmbeddingProvider):
    """Deterministic hash-based embedding provider for testing purposes.

    Uses md5 digests chained per block, so the same text always yields the same
    vector without requiring external model dependencies.
    """

    provider_name = "hash"

    def __init__(self, dimension: int = 384):
        if dimension < 1:
            raise ValueError("dimension must be >= 1")
        self.dimension = dimension

    @property
    def model_name(self) -> str:
        return f"md5-{self.dimension}"

    def embed_text(self, text: str) -> List[float]:
        """Generate deterministic embedding vector using hash function."""
        vector = []
        block = 0
        while len(vector) < self.dimension:
            hex_dig = hashlib.md5(f"{block}:{text}".encode()).hexdigest()

            for i in range(0, len(hex_dig), 8):
                if len(vector) >= self.dimension:
                    break

                value = int(hex_dig[i:i + 8], 16)
                # Map to [-1, 1] for cosine similarity
                vector.append((value / (2 ** 32)) * 2 - 1)
            block += 1

        return vector

    def get_dimension(self) -> int:
        """Get the dimension of the embedding vectors."""
        return self.dimension


class SentenceTransformerEmbedding(IEmbeddingProvider):
    """Sentence transformers embedding provider using pre-trained models.

    The model is loaded on first use; install the `embeddings` extra.
    """

    provider_name = "sentence_transformers"

    def __init__(self, model_name: str = "all-MiniLM-L6-v2"):
        self._model_name = model_name
        self._model = None
        self._dimension = None

    @property
    def model_name(self) -> str:
        return self._model_name

    @property
    def model(self):
        if self._model is None:
            from sentence_transformers import SentenceTransformer
            self._model = SentenceTransformer(self._model_name)
        return self._model

    def embed_text(self, text: str) -> List[float]:
        """Generate embedding vector using sentence transformers."""
        embedding = self.model.encode(text, convert_to_tensor=False)
        return embedding.tolist()

    def get_dimension(self) -> int:
        """Get the dimension of the embedding vectors."""
        if self._dimension is None:
            self._dimension = self.model.get_sentence_embedding_dimension()
        return self._dimension
