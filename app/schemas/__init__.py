"""Expose schemas for easier import."""

from app.schemas.place import PlaceCreate, PlaceOut, ServiceCreate, ServiceOut  # noqa: F401
from app.schemas.content import ContentData  # noqa: F401
from app.schemas.recommendation import (  # noqa: F401
    RecommendationCreate,
    RecommendationOut,
    RecommendationUpdate,
)
from app.schemas.search import (  # noqa: F401
    RecommendationSummary,
    SearchRequest,
    SearchResponse,
    SearchResult,
)
