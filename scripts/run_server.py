#!/usr/bin/env python3
"""
Run the review search API with uvicorn.
"""

import argparse
import sys

import uvicorn

from review_search.core.config import API_HOST, API_PORT, ensure_data_directory, validate_config
from review_search.util.logging import logger


def main():
    """Validate configuration and start uvicorn."""
    parser = argparse.ArgumentParser(description="Serve the review search API")
    parser.add_argument("--host", default=API_HOST, help=f"Bind address (default: {API_HOST})")
    parser.add_argument("--port", type=int, default=API_PORT, help=f"Port (default: {API_PORT})")
    parser.add_argument("--log-level", default="info", help="uvicorn log level (default: info)")
    args = parser.parse_args()

    issues = validate_config()
    if issues:
        for issue in issues:
            print(f"ERROR: {issue}")
        sys.exit(1)

    ensure_data_directory()
    logger.info(f"Listening on {args.host}:{args.port}")
    uvicorn.run("review_search.api.main:app", host=args.host, port=args.port, log_level=args.log_level)


if __name__ == "__main__":
    main()
