"""Schemas for semantic search."""

from datetime import datetime
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field

from app.schemas.place import PlaceOut, ServiceOut
from app.schemas.recommendation import ContentType


class SearchRequest(BaseModel):
    query: str = Field(..., description="Natural-language search text")
    limit: Optional[int] = Field(None, ge=1, le=50, description="Number of entity results")
    threshold: Optional[float] = Field(None, ge=0.0, le=1.0, description="Similarity threshold")
    content_type: Optional[ContentType] = None
    no_summary: bool = False


class RecommendationSummary(BaseModel):
    recommendation_id: int
    content_type: str
    title: Optional[str] = None
    description: Optional[str] = None
    content_data: dict[str, Any] = Field(default_factory=dict)
    labels: list[str] = Field(default_factory=list)
    rating: Optional[int] = None
    user_name: Optional[str] = None
    similarity: float
    created_at: Optional[datetime] = None
    skipped: bool = Field(False, description="Referenced place/service could not be loaded")


class SearchResult(BaseModel):
    type: Literal["place", "service", "recommendation"]
    key: str
    place: Optional[PlaceOut] = None
    service: Optional[ServiceOut] = None
    aggregate_score: float = Field(..., ge=0.0, le=1.0)
    total_recommendations: int
    recommendations: list[RecommendationSummary]


class SearchMetadata(BaseModel):
    threshold: float
    keyword_threshold: Optional[float] = None
    limit: int
    content_type: Optional[str] = None
    candidates_considered: int


class SearchResponse(BaseModel):
    query: str
    results: list[SearchResult]
    total_places: int
    total_recommendations: int
    summary: Optional[str] = None
    search_metadata: SearchMetadata
