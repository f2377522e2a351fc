"""
Review insert and semantic search on top of a ReviewStore.

Turns review text into vectors, falls back to a zero vector when the text is
blank or the embedding model fails, and hydrates search hits with their
stored review.
"""

from typing import Any, Dict, List, Optional, Sequence

import numpy as np

from ..util.logging import logger
from ..vector.embeddings import IEmbeddingProvider
from . import config as config_module
from .errors import StoreConfigMismatchError
from .review_store import ReviewStore


def review_text(review: Any) -> str:
    """Text that gets embedded for a review: title and body joined by a space."""
    if hasattr(review, "model_dump"):
        review = review.model_dump()
    title = (review.get("review_title") or "").strip()
    body = (review.get("review_body") or "").strip()
    return " ".join(part for part in (title, body) if part)


class ReviewSearchService:
    """Embeds reviews and queries and delegates storage to a ReviewStore."""

    def __init__(self, store: ReviewStore, embedder: IEmbeddingProvider):
        self.store = store
        self.embedder = embedder

    @property
    def dimension(self) -> int:
        return self.store.dimension

    def embed(self, text: str) -> np.ndarray:
        """
        Embed ``text``; blank text or a model failure gives a zero vector.

        Raises:
            StoreConfigMismatchError: If the provider returns a vector whose
                length differs from the store dimension
        """
        if not text.strip():
            return np.zeros(self.dimension, dtype=np.float32)

        try:
            vector = np.asarray(self.embedder.embed_text(text), dtype=np.float32)
        except Exception as e:
            logger.log_embedding_failure(text, e)
            return np.zeros(self.dimension, dtype=np.float32)

        if vector.shape != (self.dimension,):
            raise StoreConfigMismatchError(
                f"Embedding provider returned {vector.size} components, store expects {self.dimension}"
            )
        return vector

    def insert_review(self, review: Any) -> int:
        """Embed and store one review; returns its logical id."""
        vector = self.embed(review_text(review))
        record_id = self.store.insert(review, vector)
        logger.log_store_operation("insert", {"record_id": record_id})
        return record_id

    def bulk_insert_reviews(self, reviews: Sequence[Any]) -> List[int]:
        """Embed and store reviews in order; stops at the first failure."""
        ids = [self.store.insert(review, self.embed(review_text(review))) for review in reviews]
        logger.log_store_operation("bulk_insert", {"count": len(ids)})
        return ids

    def search_reviews(self, query: str, top_k: Optional[int] = None) -> List[Dict[str, Any]]:
        """
        Rank stored reviews against ``query``.

        Returns:
            List of ``{"id", "score", "review"}`` dicts, best first
        """
        if top_k is None:
            top_k = config_module.DEFAULT_TOP_K

        hits = self.store.search(self.embed(query), top_k)
        logger.log_store_operation("search", {
            "query": query[:50] + "..." if len(query) > 50 else query,
            "top_k": top_k,
            "hits": len(hits),
        })
        return [
            {"id": record_id, "score": score, "review": record}
            for record_id, score, record in hits
        ]
