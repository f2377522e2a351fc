"""
Exact top-k search over a VectorLog.

Full scan, dot product of the raw float query against dequantized stored
codes, bounded min-heap of the best k candidates.
"""

import heapq
import math
from typing import List, Tuple

import numpy as np

from ..core.errors import ValidationError
from .vector_log import VectorLog

# Records scored per numpy block; bounds the float32 copy of the codes.
SCORE_BLOCK_SIZE = 4096


class SimilarityRanker:
    """Brute-force dot-product ranker."""

    def __init__(self, vector_log: VectorLog, block_size: int = SCORE_BLOCK_SIZE):
        self.vector_log = vector_log
        self.block_size = block_size

    @property
    def codec(self):
        return self.vector_log.codec

    def search(self, query, top_k: int) -> List[Tuple[int, float]]:
        """
        Return up to ``top_k`` ``(id, score)`` pairs, best first.

        Ties on score are ordered by ascending id. ``top_k == 0`` and an empty
        store both give ``[]``. NaN scores never enter the result.

        Raises:
            DimensionMismatchError: If ``len(query) != dimension``
            ValidationError: If ``top_k`` is negative
            StorageIOError: If the vector file cannot be read
        """
        query_array = self.vector_log.check_dimension(query)
        if top_k < 0:
            raise ValidationError(f"top_k must be non-negative, got {top_k}")
        if top_k == 0:
            return []

        records = self.vector_log.read_all()
        if records.shape[0] == 0:
            return []

        # Min-heap keyed on (score, -id): the root is the weakest candidate,
        # and among equal scores the higher id is evicted first.
        heap: List[Tuple[float, int]] = []
        for start in range(0, records.shape[0], self.block_size):
            block = records[start:start + self.block_size]
            scores = self.score_block(block, query_array)
            for offset, score in enumerate(scores.tolist()):
                if math.isnan(score):
                    continue
                entry = (score, -(start + offset))
                if len(heap) < top_k:
                    heapq.heappush(heap, entry)
                elif entry > heap[0]:
                    heapq.heapreplace(heap, entry)

        results = [(-neg_id, score) for score, neg_id in heap]
        results.sort(key=lambda item: (-item[1], item[0]))
        return results

    def score_block(self, block: np.ndarray, query: np.ndarray) -> np.ndarray:
        """Dot products of ``query`` with each dequantized row of ``block``."""
        with np.errstate(invalid="ignore", over="ignore"):
            return self.codec.decode(block) @ query
