"""
Shared fixtures: temporary stores, a deterministic embedder and an API client.
"""

import numpy as np
import pytest
from fastapi.testclient import TestClient

from review_search.core.review_store import ReviewStore
from review_search.core.search_service import ReviewSearchService
from review_search.vector.embeddings import DeterministicHashEmbedding
from review_search.vector.vector_log import VectorLog


@pytest.fixture
def vector_path(tmp_path):
    return tmp_path / "reviews.index"


@pytest.fixture
def small_log(vector_path):
    """Fresh 4-dimensional vector log."""
    return VectorLog.open_or_create(vector_path, dimension=4, fsync=False)


@pytest.fixture
def store_factory(tmp_path):
    """Open (or reopen) a store in the test directory."""
    def _open(dimension=4, **kwargs):
        kwargs.setdefault("fsync", False)
        return ReviewStore.open_dir(tmp_path / "data", dimension, **kwargs)
    return _open


@pytest.fixture
def embedder():
    return DeterministicHashEmbedding(dimension=32)


@pytest.fixture
def service(store_factory, embedder):
    return ReviewSearchService(store_factory(dimension=32), embedder)


@pytest.fixture
def client(service):
    from review_search.api.main import app, get_service

    app.dependency_overrides[get_service] = lambda: service
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def rng():
    return np.random.default_rng(1234)


def make_review(title="Great phone", body="Battery lasts all day", product_id="p-1", rating=5):
    return {
        "review_title": title,
        "review_body": body,
        "product_id": product_id,
        "review_rating": rating,
    }
