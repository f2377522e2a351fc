"""
Request and response models for the review search API.
"""

from pydantic import BaseModel, Field, field_validator
from typing import List, Optional


class Review(BaseModel):
    review_title: str
    review_body: str
    product_id: str
    review_rating: int

    @field_validator('product_id')
    @classmethod
    def product_id_must_not_be_empty(cls, v):
        if not v.strip():
            raise ValueError('product_id cannot be empty')
        return v


class InsertResponse(BaseModel):
    id: int


class BulkInsertResponse(BaseModel):
    ids: List[int]
    count: int


class SearchQuery(BaseModel):
    query: str
    top_k: Optional[int] = Field(default=None, ge=0)


class SearchResult(BaseModel):
    id: int
    score: float
    review: Review


class HealthResponse(BaseModel):
    status: str
    version: str
    vector_count: int
    metadata_count: int
    dimension: int
    scale: float


class ErrorResponse(BaseModel):
    error: str
    message: str
