"""
Rebuild a vector log from the metadata JSON-lines file.

Used after changing the embedding model or losing the vector file. Lines are
embedded in batches and appended in file order, so vector ``i`` is paired
with line ``i`` again afterwards.
"""

import json
from pathlib import Path
from typing import Any, Dict, List

import numpy as np

from ..util.logging import logger
from ..vector.codec import DEFAULT_SCALE
from ..vector.embeddings import IEmbeddingProvider
from ..vector.manifest import manifest_path_for
from ..vector.vector_log import VectorLog
from .errors import StorageIOError

DEFAULT_BATCH_SIZE = 2000


def extract_text(line: str) -> str:
    """
    Text to embed for one metadata line.

    Title and body joined by a space, empty when both are blank. The raw
    line when neither field is present or the line is not a JSON object.
    """
    try:
        value = json.loads(line)
    except ValueError:
        return line.strip()
    if not isinstance(value, dict):
        return line.strip()

    fields = [value.get(field) for field in ("review_title", "review_body")]
    fields = [text for text in fields if isinstance(text, str)]
    if not fields:
        return line.strip()
    return " ".join(text.strip() for text in fields if text.strip())


def embed_batch(texts: List[str], embedder: IEmbeddingProvider, dimension: int) -> np.ndarray:
    """Embed ``texts``; blank entries get a zero vector."""
    vectors = np.zeros((len(texts), dimension), dtype=np.float32)
    positions = [i for i, text in enumerate(texts) if text.strip()]
    if positions:
        embedded = embedder.embed_texts([texts[i] for i in positions])
        vectors[positions] = embedded
    return vectors


def rebuild_vector_log(
    metadata_path,
    vector_path,
    embedder: IEmbeddingProvider,
    dimension: int,
    scale: float = DEFAULT_SCALE,
    batch_size: int = DEFAULT_BATCH_SIZE,
    overwrite: bool = False,
    fsync: bool = False,
) -> Dict[str, Any]:
    """
    Write a fresh vector log for every line of ``metadata_path``.

    Args:
        metadata_path: JSON-lines file to read
        vector_path: Vector log to create
        embedder: Provider producing ``dimension``-length vectors
        dimension: Vector dimension of the new log
        scale: Quantization scale of the new log
        batch_size: Lines embedded per batch
        overwrite: Replace an existing vector log (and its manifest)
        fsync: Sync after every append

    Returns:
        Summary dict with ``total`` vectors written and paths used
    """
    metadata_path = Path(metadata_path)
    vector_path = Path(vector_path)
    if not metadata_path.exists():
        raise FileNotFoundError(f"Input file {metadata_path} not found")

    if vector_path.exists():
        if not overwrite:
            raise FileExistsError(f"Vector log {vector_path} already exists")
        vector_path.unlink()
        manifest_path_for(vector_path).unlink(missing_ok=True)

    vector_path.parent.mkdir(parents=True, exist_ok=True)
    vector_log = VectorLog.open_or_create(vector_path, dimension, scale=scale, fsync=fsync)

    total = 0
    buffer: List[str] = []

    def flush():
        nonlocal total
        vectors = embed_batch([extract_text(line) for line in buffer], embedder, dimension)
        # Sequential appends keep file order
        for vector in vectors:
            vector_log.append(vector)
        total += len(buffer)
        logger.log_store_operation("rebuild.batch", {"batch": len(buffer), "total": total})
        buffer.clear()

    try:
        with open(metadata_path, "r", encoding="utf-8") as f:
            for line in f:
                if not line.endswith("\n"):
                    # Interrupted append, not a record
                    break
                buffer.append(line)
                if len(buffer) >= batch_size:
                    flush()
    except OSError as e:
        raise StorageIOError(f"Failed to read metadata store file: {e}", path=metadata_path) from e

    if buffer:
        flush()

    return {
        "total": total,
        "vector_path": str(vector_path),
        "metadata_path": str(metadata_path),
    }
