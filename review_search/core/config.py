"""
Service configuration, read from environment variables.
"""

import os
from pathlib import Path

# Storage locations
DATA_DIR = os.getenv("DATA_DIR", "./data")
VECTOR_INDEX_PATH = os.getenv("VECTOR_INDEX_PATH", str(Path(DATA_DIR) / "reviews.index"))
METADATA_PATH = os.getenv("METADATA_PATH", str(Path(DATA_DIR) / "reviews.jsonl"))

# Vector store configuration
EMBED_DIM = int(os.getenv("EMBED_DIM", "384"))
QUANT_SCALE = float(os.getenv("QUANT_SCALE", "127.0"))
VECTOR_FSYNC = os.getenv("VECTOR_FSYNC", "true").lower() == "true"
REPAIR_ON_OPEN = os.getenv("REPAIR_ON_OPEN", "true").lower() == "true"

# Embedding configuration
EMBED_PROVIDER = os.getenv("EMBED_PROVIDER", "hash")  # hash|sentence_transformers
EMBED_MODEL_NAME = os.getenv("EMBED_MODEL_NAME", "sentence-transformers/all-MiniLM-L6-v2")

# Search configuration
DEFAULT_TOP_K = int(os.getenv("DEFAULT_TOP_K", "5"))
MAX_TOP_K = int(os.getenv("MAX_TOP_K", "1000"))

# HTTP server configuration
API_HOST = os.getenv("API_HOST", "0.0.0.0")
API_PORT = int(os.getenv("API_PORT", "8000"))
DEBUG = os.getenv("DEBUG", "false").lower() == "true"

# Version string
VERSION = "0.1.0"

EMBED_PROVIDERS = ("hash", "sentence_transformers")


def debug_enabled():
    """Check if debug mode is enabled."""
    return os.getenv("DEBUG", "false").lower() == "true"


def ensure_data_directory():
    """Ensure the directories holding both logs exist."""
    Path(VECTOR_INDEX_PATH).parent.mkdir(parents=True, exist_ok=True)
    Path(METADATA_PATH).parent.mkdir(parents=True, exist_ok=True)


def get_embedding_provider():
    """Get configured embedding provider implementation."""
    if EMBED_PROVIDER == "sentence_transformers":
        from ..vector.embeddings import SentenceTransformerEmbedding
        return SentenceTransformerEmbedding(EMBED_MODEL_NAME)

    from ..vector.embeddings import DeterministicHashEmbedding
    return DeterministicHashEmbedding(EMBED_DIM)


def open_review_store(vector_path: str = None, metadata_path: str = None):
    """Open the configured review store, creating both logs if needed."""
    from .review_store import ReviewStore

    return ReviewStore.open(
        vector_path or VECTOR_INDEX_PATH,
        metadata_path or METADATA_PATH,
        dimension=EMBED_DIM,
        scale=QUANT_SCALE,
        fsync=VECTOR_FSYNC,
        repair=REPAIR_ON_OPEN,
    )


def validate_config():
    """Validate configuration and return any issues."""
    issues = []

    if EMBED_DIM < 1:
        issues.append("EMBED_DIM must be >= 1")

    if not 0 < QUANT_SCALE <= 127:
        issues.append(f"QUANT_SCALE must be in (0, 127], got {QUANT_SCALE}")

    if EMBED_PROVIDER not in EMBED_PROVIDERS:
        issues.append(f"Invalid EMBED_PROVIDER: {EMBED_PROVIDER}")

    if DEFAULT_TOP_K < 0:
        issues.append("DEFAULT_TOP_K must be >= 0")

    if MAX_TOP_K < DEFAULT_TOP_K:
        issues.append("MAX_TOP_K must be >= DEFAULT_TOP_K")

    if not 0 < API_PORT < 65536:
        issues.append(f"Invalid API_PORT: {API_PORT}")

    return issues
