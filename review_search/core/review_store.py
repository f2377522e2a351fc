"""
Vector log + metadata log as one logical store.

A single lock covers both files so a search never observes a vector without
its metadata record. On open, the two logs are reconciled by truncating the
longer one to the length of the shorter.
"""

import threading
from pathlib import Path
from typing import Any, Dict, Iterable, List, Tuple

from ..util.logging import logger
from ..vector.codec import DEFAULT_SCALE
from ..vector.ranker import SimilarityRanker
from ..vector.vector_log import VectorLog
from .errors import ReviewSearchError, StorageIOError
from .metadata_log import MetadataLog

VECTOR_FILENAME = "reviews.index"
METADATA_FILENAME = "reviews.jsonl"


class ReviewStore:
    """Paired vector and metadata logs behind one mutual-exclusion boundary."""

    def __init__(self, vector_log: VectorLog, metadata_log: MetadataLog, ranker: SimilarityRanker = None):
        self.vector_log = vector_log
        self.metadata_log = metadata_log
        self.ranker = ranker or SimilarityRanker(vector_log)
        self._lock = threading.Lock()

    @classmethod
    def open(
        cls,
        vector_path,
        metadata_path,
        dimension: int,
        scale: float = DEFAULT_SCALE,
        fsync: bool = True,
        repair: bool = True,
    ) -> 'ReviewStore':
        """
        Open (or create) both logs and reconcile them.

        Args:
            vector_path: Path of the quantized vector file
            metadata_path: Path of the JSON-lines metadata file
            dimension: Vector length enforced for every append and query
            scale: Quantization scale, must match the one the store was created with
            fsync: Force every vector append to stable storage
            repair: Truncate the longer log to match the shorter one
        """
        for path in (Path(vector_path), Path(metadata_path)):
            try:
                path.parent.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise StorageIOError(f"Failed to create data directory: {e}", path=path.parent) from e

        vector_log = VectorLog.open_or_create(vector_path, dimension, scale=scale, fsync=fsync)
        metadata_log = MetadataLog.open_or_create(metadata_path, fsync=fsync)
        store = cls(vector_log, metadata_log)
        if repair:
            store.repair()

        logger.log_store_operation("open", {
            "vector_path": str(vector_log.path),
            "metadata_path": str(metadata_log.path),
            "dimension": dimension,
            "scale": vector_log.scale,
            "records": len(vector_log),
        })
        return store

    @classmethod
    def open_dir(cls, data_dir, dimension: int, **kwargs) -> 'ReviewStore':
        """Open the store using the default file names inside ``data_dir``."""
        data_dir = Path(data_dir)
        return cls.open(data_dir / VECTOR_FILENAME, data_dir / METADATA_FILENAME, dimension, **kwargs)

    @property
    def dimension(self) -> int:
        return self.vector_log.dimension

    def repair(self) -> Tuple[int, int]:
        """
        Bring both logs to the same record count.

        Returns:
            ``(vector_count, metadata_count)`` after repair
        """
        with self._lock:
            vector_count = len(self.vector_log)
            if self.vector_log.has_partial_record():
                logger.log_repair("vector", vector_count, vector_count, "partial trailing record")
                self.vector_log.truncate(vector_count)

            metadata_count = len(self.metadata_log)
            target = min(vector_count, metadata_count)
            if vector_count > target:
                logger.log_repair("vector", vector_count, target, "vector log ahead of metadata log")
                self.vector_log.truncate(target)
            if metadata_count > target:
                logger.log_repair("metadata", metadata_count, target, "metadata log ahead of vector log")
                self.metadata_log.truncate(target)
            elif self.metadata_log.has_partial_record():
                logger.log_repair("metadata", metadata_count, target, "partial trailing line")
                self.metadata_log.truncate(target)

            return len(self.vector_log), len(self.metadata_log)

    def insert(self, record: Any, vector) -> int:
        """
        Append ``vector`` then ``record``; returns the new logical id.

        A vector append failure leaves the metadata log untouched. The vector
        is validated before anything is written.
        """
        with self._lock:
            record_id = len(self.vector_log)
            self.vector_log.append(vector)
            try:
                self.metadata_log.append(record)
            except ReviewSearchError:
                # Roll both logs back, dropping any half-written metadata line
                self.vector_log.truncate(record_id)
                self.metadata_log.truncate(record_id)
                logger.log_store_operation("insert", {"record_id": record_id}, status="failed")
                raise
        return record_id

    def insert_many(self, items: Iterable[Tuple[Any, Any]]) -> List[int]:
        """Insert ``(record, vector)`` pairs in order, stopping at the first failure."""
        ids = []
        for record, vector in items:
            ids.append(self.insert(record, vector))
        return ids

    def search(self, query, top_k: int) -> List[Tuple[int, float, Dict[str, Any]]]:
        """Rank stored vectors against ``query`` and hydrate their records."""
        with self._lock:
            ranked = self.ranker.search(query, top_k)
            records = self.metadata_log.get_many(record_id for record_id, _ in ranked)
        return [
            (record_id, score, record)
            for (record_id, score), record in zip(ranked, records)
        ]

    def __len__(self) -> int:
        return len(self.vector_log)

    def stats(self) -> Dict[str, Any]:
        with self._lock:
            return {
                "vector_count": len(self.vector_log),
                "metadata_count": len(self.metadata_log),
                "dimension": self.vector_log.dimension,
                "scale": self.vector_log.scale,
                "vector_path": str(self.vector_log.path),
                "metadata_path": str(self.metadata_log.path),
            }
