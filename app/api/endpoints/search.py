"""Semantic search endpoint."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.config import get_search_config
from app.db.session import get_db
from app.schemas.search import SearchRequest, SearchResponse
from app.services.llm import get_llm_service
from app.services.search import SearchService
from app.services.vector_store import VectorStore

router = APIRouter(prefix="/search", tags=["search"])


def get_search_service(db: Session = Depends(get_db)) -> SearchService:
    """Wire the pipeline for one request."""
    return SearchService(VectorStore(db), get_llm_service(), get_search_config())


@router.post("", response_model=SearchResponse)
def search(
    payload: SearchRequest,
    service: SearchService = Depends(get_search_service),
) -> SearchResponse:
    """Search recommendations by meaning and group them per place/service."""
    return service.search(
        payload.query,
        limit=payload.limit,
        threshold=payload.threshold,
        content_type=payload.content_type,
        no_summary=payload.no_summary,
    )
