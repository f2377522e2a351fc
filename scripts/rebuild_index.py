#!/usr/bin/env python3
"""
Index Rebuild Utility
Re-embeds every review in the metadata JSONL file into a fresh vector log.
"""

import argparse
import sys

from review_search.core.config import (
    EMBED_DIM,
    METADATA_PATH,
    QUANT_SCALE,
    VECTOR_INDEX_PATH,
    get_embedding_provider,
)
from review_search.core.errors import ReviewSearchError
from review_search.core.rebuild import DEFAULT_BATCH_SIZE, rebuild_vector_log


def main():
    """Rebuild the vector log from the metadata log."""
    parser = argparse.ArgumentParser(description="Rebuild the review vector index from reviews.jsonl")
    parser.add_argument("--input", default=METADATA_PATH, help=f"Metadata JSONL file (default: {METADATA_PATH})")
    parser.add_argument("--output", default=VECTOR_INDEX_PATH, help=f"Vector log to write (default: {VECTOR_INDEX_PATH})")
    parser.add_argument("--batch-size", type=int, default=DEFAULT_BATCH_SIZE, help="Lines embedded per batch")
    parser.add_argument("--force", action="store_true", help="Overwrite an existing vector log")
    args = parser.parse_args()

    print("Starting vector index rebuild...")

    try:
        summary = rebuild_vector_log(
            args.input,
            args.output,
            get_embedding_provider(),
            dimension=EMBED_DIM,
            scale=QUANT_SCALE,
            batch_size=args.batch_size,
            overwrite=args.force,
        )
    except FileNotFoundError as e:
        print(f"ERROR: {e}")
        sys.exit(1)
    except FileExistsError as e:
        print(f"ERROR: {e}. Pass --force to overwrite it.")
        sys.exit(1)
    except ReviewSearchError as e:
        print(f"ERROR: Rebuild failed: {e}")
        sys.exit(1)

    print(f"Index build completed. Total vectors: {summary['total']}")


if __name__ == "__main__":
    main()
