"""
HTTP API: insert reviews, bulk insert, semantic search, health.
"""

from fastapi import Depends, FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from typing import List
import threading

from .schemas import (
    BulkInsertResponse,
    ErrorResponse,
    HealthResponse,
    InsertResponse,
    Review,
    SearchQuery,
    SearchResult,
)
from ..core import config as config_module
from ..core.config import VERSION, debug_enabled, get_embedding_provider, open_review_store
from ..core.errors import ReviewSearchError, ValidationError
from ..core.search_service import ReviewSearchService
from ..util.logging import logger

# Initialize the FastAPI application
app = FastAPI(
    title="Review Search API",
    version=VERSION,
    description="Semantic search over reviews backed by a quantized flat vector log",
    docs_url="/docs" if debug_enabled() else None,
    redoc_url="/redoc" if debug_enabled() else None
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

_service = None
_service_lock = threading.Lock()


def get_service() -> ReviewSearchService:
    """Open the configured store and embedder once per process."""
    global _service
    with _service_lock:
        if _service is None:
            _service = ReviewSearchService(open_review_store(), get_embedding_provider())
        return _service


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=ErrorResponse(error="Validation Error", message=str(exc)).model_dump(),
    )


@app.exception_handler(ReviewSearchError)
async def internal_error_handler(request: Request, exc: ReviewSearchError):
    logger.error(f"Internal error on {request.url.path}: {exc!r}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=ErrorResponse(
            error="Internal Server Error",
            message="An unexpected error occurred",
        ).model_dump(),
    )


@app.post("/reviews", response_model=InsertResponse, status_code=status.HTTP_201_CREATED)
def insert_review(review: Review, service: ReviewSearchService = Depends(get_service)):
    """Embed and store a single review."""
    record_id = service.insert_review(review)
    return InsertResponse(id=record_id)


@app.post("/reviews/bulk", response_model=BulkInsertResponse, status_code=status.HTTP_201_CREATED)
def bulk_insert_reviews(reviews: List[Review], service: ReviewSearchService = Depends(get_service)):
    """Embed and store reviews in order."""
    ids = service.bulk_insert_reviews(reviews)
    return BulkInsertResponse(ids=ids, count=len(ids))


@app.post("/search", response_model=List[SearchResult])
def search_reviews(query: SearchQuery, service: ReviewSearchService = Depends(get_service)):
    """Return the reviews most similar to the query text."""
    top_k = query.top_k if query.top_k is not None else config_module.DEFAULT_TOP_K
    if top_k > config_module.MAX_TOP_K:
        raise ValidationError(f"top_k must be <= {config_module.MAX_TOP_K}")

    hits = service.search_reviews(query.query, top_k)
    return [SearchResult(**hit) for hit in hits]


@app.get("/health", response_model=HealthResponse)
def health_check_endpoint(service: ReviewSearchService = Depends(get_service)):
    """Report store sizes and configuration."""
    stats = service.store.stats()
    healthy = stats["vector_count"] == stats["metadata_count"]

    return HealthResponse(
        status="healthy" if healthy else "degraded",
        version=VERSION,
        vector_count=stats["vector_count"],
        metadata_count=stats["metadata_count"],
        dimension=stats["dimension"],
        scale=stats["scale"],
    )
