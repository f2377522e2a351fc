"""
API tests: insert, bulk insert, search, health and error mapping.
"""

import pytest
from fastapi.testclient import TestClient
from unittest.mock import MagicMock, patch

from review_search.core.errors import DimensionMismatchError, StorageIOError

from conftest import make_review


def test_insert_review(client):
    response = client.post("/reviews", json=make_review())
    assert response.status_code == 201
    assert response.json() == {"id": 0}

    response = client.post("/reviews", json=make_review(product_id="p-2"))
    assert response.json() == {"id": 1}


def test_insert_review_invalid_body(client):
    response = client.post("/reviews", json={"review_title": "missing fields"})
    assert response.status_code == 422


def test_insert_review_empty_product_id(client):
    response = client.post("/reviews", json=make_review(product_id="  "))
    assert response.status_code == 422


def test_bulk_insert(client):
    reviews = [make_review(title=f"t{i}", product_id=f"p-{i}") for i in range(3)]
    response = client.post("/reviews/bulk", json=reviews)

    assert response.status_code == 201
    assert response.json() == {"ids": [0, 1, 2], "count": 3}


def test_search_returns_ranked_reviews(client):
    client.post("/reviews/bulk", json=[
        make_review(title="Great phone", body="Battery lasts all day", product_id="p-1"),
        make_review(title="Loud fan", body="Too noisy at night", product_id="p-2"),
    ])

    response = client.post("/search", json={"query": "Loud fan Too noisy at night", "top_k": 2})
    assert response.status_code == 200

    results = response.json()
    assert len(results) == 2
    assert results[0]["id"] == 1
    assert results[0]["review"]["product_id"] == "p-2"
    assert results[0]["score"] >= results[1]["score"]


def test_search_empty_store(client):
    response = client.post("/search", json={"query": "anything"})
    assert response.status_code == 200
    assert response.json() == []


def test_search_zero_top_k(client):
    client.post("/reviews", json=make_review())
    response = client.post("/search", json={"query": "anything", "top_k": 0})
    assert response.status_code == 200
    assert response.json() == []


def test_search_negative_top_k_rejected(client):
    response = client.post("/search", json={"query": "anything", "top_k": -1})
    assert response.status_code == 422


def test_search_top_k_above_limit(client):
    with patch("review_search.core.config.MAX_TOP_K", 10):
        response = client.post("/search", json={"query": "anything", "top_k": 11})
    assert response.status_code == 400
    assert response.json()["error"] == "Validation Error"
    assert "10" in response.json()["message"]


def test_health(client):
    client.post("/reviews", json=make_review())

    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["vector_count"] == 1
    assert data["metadata_count"] == 1
    assert data["dimension"] == 32
    assert data["scale"] == 127.0


@pytest.fixture
def failing_client():
    """Client whose service raises whatever the test configures."""
    from review_search.api.main import app, get_service

    service = MagicMock()
    app.dependency_overrides[get_service] = lambda: service
    try:
        yield TestClient(app), service
    finally:
        app.dependency_overrides.clear()


def test_dimension_mismatch_maps_to_400(failing_client):
    client, service = failing_client
    service.search_reviews.side_effect = DimensionMismatchError(384, 3)

    response = client.post("/search", json={"query": "q", "top_k": 1})
    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "Validation Error"
    assert "384" in body["message"]


def test_storage_failure_maps_to_500(failing_client):
    client, service = failing_client
    service.insert_review.side_effect = StorageIOError("Failed to write vector to file: disk full")

    response = client.post("/reviews", json=make_review())
    assert response.status_code == 500
    assert response.json() == {
        "error": "Internal Server Error",
        "message": "An unexpected error occurred",
    }


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
