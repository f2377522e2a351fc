"""
Text embedding providers.

The store only needs ``text -> fixed-length float vector``; which model
produces it is configuration.
"""

from abc import ABC, abstractmethod
import hashlib
from typing import List, Sequence

import numpy as np

DEFAULT_MODEL_NAME = "sentence-transformers/all-MiniLM-L6-v2"


class IEmbeddingProvider(ABC):
    """Abstract interface for embedding providers."""

    @abstractmethod
    def embed_text(self, text: str) -> List[float]:
        """Generate embedding vector for given text."""
        pass

    @abstractmethod
    def get_dimension(self) -> int:
        """Get the dimension of the embedding vectors."""
        pass

    def embed_texts(self, texts: Sequence[str]) -> np.ndarray:
        """
        Embed multiple texts into vectors.

        Returns:
            Float32 array of shape (len(texts), dimension)
        """
        if not texts:
            return np.zeros((0, self.get_dimension()), dtype=np.float32)
        return np.array([self.embed_text(text) for text in texts], dtype=np.float32)


class DeterministicHashEmbedding(IEmbeddingProvider):
    """Deterministic hash-based embedding provider for testing purposes.

    Each block of 8 components comes from a SHA-256 digest of the text and
    the block number, so the same text always gives the same vector and any
    dimension can be filled. Values are spread over [-1, 1].
    """

    def __init__(self, dimension: int = 384):
        self.dimension = dimension

    def embed_text(self, text: str) -> List[float]:
        """Generate deterministic embedding vector using hash function."""
        encoded = text.encode("utf-8")
        vector: List[float] = []
        block = 0
        while len(vector) < self.dimension:
            digest = hashlib.sha256(block.to_bytes(4, "big") + encoded).digest()
            for i in range(0, len(digest), 4):
                value = int.from_bytes(digest[i:i + 4], "big")
                vector.append((value / 2**32) * 2 - 1)
            block += 1
        return vector[:self.dimension]

    def get_dimension(self) -> int:
        """Get the dimension of the embedding vectors."""
        return self.dimension


class SentenceTransformerEmbedding(IEmbeddingProvider):
    """Sentence transformers embedding provider using pre-trained models.

    The model is loaded on first use.
    """

    def __init__(self, model_name: str = DEFAULT_MODEL_NAME):
        self.model_name = model_name
        self._model = None
        self._dimension = None

    @property
    def model(self):
        if self._model is None:
            from sentence_transformers import SentenceTransformer
            self._model = SentenceTransformer(self.model_name)
        return self._model

    def embed_text(self, text: str) -> List[float]:
        """Generate embedding vector using sentence transformers."""
        embedding = self.model.encode(text, convert_to_tensor=False)
        return embedding.tolist()

    def embed_texts(self, texts: Sequence[str]) -> np.ndarray:
        if not texts:
            return np.zeros((0, self.get_dimension()), dtype=np.float32)
        embeddings = self.model.encode(list(texts), convert_to_tensor=False)
        return np.asarray(embeddings, dtype=np.float32)

    def get_dimension(self) -> int:
        """Get the dimension of the embedding vectors."""
        if self._dimension is None:
            self._dimension = self.model.get_sentence_embedding_dimension()
        return self._dimension
