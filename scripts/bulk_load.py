#!/usr/bin/env python3
"""
Bulk loader: posts a semicolon-delimited tweets CSV to /reviews/bulk.

Each tweet becomes a review titled "Tweet by <user>" with the tweet text as
body, the tweet id as product_id and a neutral rating of 3.
"""

import argparse
import csv
import sys
import time

import requests

from review_search.core.config import API_PORT

DEFAULT_URL = f"http://localhost:{API_PORT}/reviews/bulk"
DEFAULT_BATCH_SIZE = 4000


def tweet_to_review(row: dict) -> dict:
    """Map one CSV row to a review payload."""
    return {
        "review_title": f"Tweet by {row.get('user', '')}",
        "review_body": row.get("text", ""),
        "product_id": row.get("id", ""),
        "review_rating": 3,
    }


def post_batch(session: requests.Session, url: str, batch: list, timeout: float) -> bool:
    response = session.post(url, json=batch, timeout=timeout)
    if response.ok:
        print(f"Successfully inserted batch of {len(batch)} tweets")
        return True
    print(f"Failed to insert batch: {response.status_code} {response.text[:200]}")
    return False


def load(path: str, url: str, batch_size: int, pause: float, timeout: float) -> int:
    """Stream the CSV and post it in batches; returns the number of rows read."""
    count = 0
    batch = []
    with requests.Session() as session, open(path, newline="", encoding="utf-8") as f:
        reader = csv.DictReader(f, delimiter=";")
        for row in reader:
            batch.append(tweet_to_review(row))
            count += 1
            if len(batch) >= batch_size:
                post_batch(session, url, batch, timeout)
                batch = []
                time.sleep(pause)
        if batch:
            post_batch(session, url, batch, timeout)
    return count


def main():
    parser = argparse.ArgumentParser(description="Bulk insert tweets into the review search API")
    parser.add_argument("csv_path", nargs="?", default="tweets.csv", help="Semicolon-delimited CSV (default: tweets.csv)")
    parser.add_argument("--url", default=DEFAULT_URL, help=f"Bulk endpoint (default: {DEFAULT_URL})")
    parser.add_argument("--batch-size", type=int, default=DEFAULT_BATCH_SIZE, help="Tweets per request")
    parser.add_argument("--pause", type=float, default=0.1, help="Seconds to wait between batches")
    parser.add_argument("--timeout", type=float, default=300.0, help="Request timeout in seconds")
    args = parser.parse_args()

    try:
        count = load(args.csv_path, args.url, args.batch_size, args.pause, args.timeout)
    except FileNotFoundError:
        print(f"ERROR: {args.csv_path} not found")
        sys.exit(1)
    except requests.RequestException as e:
        print(f"ERROR: Request failed: {e}")
        sys.exit(1)

    print(f"Completed processing {count} tweets")


if __name__ == "__main__":
    main()
