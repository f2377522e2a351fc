"""
Quantized flat vector storage and exact top-k ranking.
"""

# Package initialization for vector module
from .codec import QuantizationCodec
from .vector_log import VectorLog
from .ranker import SimilarityRanker
from .manifest import StoreManifest
from .embeddings import IEmbeddingProvider, DeterministicHashEmbedding, SentenceTransformerEmbedding

__all__ = [
    'QuantizationCodec',
    'VectorLog',
    'SimilarityRanker',
    'StoreManifest',
    'IEmbeddingProvider',
    'DeterministicHashEmbedding',
    'SentenceTransformerEmbedding'
]
