"""Recommendation endpoints."""

from fastapi import APIRouter, BackgroundTasks, Depends, Response, status
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.schemas.recommendation import (
    EmbeddingStatus,
    RecommendationCreate,
    RecommendationOut,
    RecommendationUpdate,
)
from app.services.recommendation import (
    create_recommendation,
    delete_recommendation,
    get_recommendation,
    refresh_embedding_task,
    to_out,
    update_recommendation,
)

router = APIRouter(prefix="/recommendations", tags=["recommendations"])


@router.post("", response_model=RecommendationOut, status_code=status.HTTP_201_CREATED)
def create(
    payload: RecommendationCreate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
) -> RecommendationOut:
    """Store a recommendation and queue its embedding."""
    rec = create_recommendation(db, payload)
    background_tasks.add_task(refresh_embedding_task, rec.id)
    return to_out(rec)


@router.get("/{recommendation_id}", response_model=RecommendationOut)
def read(recommendation_id: int, db: Session = Depends(get_db)) -> RecommendationOut:
    return to_out(get_recommendation(db, recommendation_id))


@router.patch("/{recommendation_id}", response_model=RecommendationOut)
def update(
    recommendation_id: int,
    payload: RecommendationUpdate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
) -> RecommendationOut:
    """Edit a recommendation; text edits regenerate the embedding."""
    rec, stale = update_recommendation(db, recommendation_id, payload)
    if stale:
        background_tasks.add_task(refresh_embedding_task, rec.id)
    return to_out(rec)


@router.delete("/{recommendation_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete(recommendation_id: int, db: Session = Depends(get_db)) -> Response:
    delete_recommendation(db, recommendation_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/{recommendation_id}/embedding",
    response_model=EmbeddingStatus,
    status_code=status.HTTP_202_ACCEPTED,
)
def regenerate_embedding(
    recommendation_id: int,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
) -> EmbeddingStatus:
    """Queue a fresh embedding; safe to call repeatedly."""
    get_recommendation(db, recommendation_id)
    background_tasks.add_task(refresh_embedding_task, recommendation_id)
    return EmbeddingStatus(recommendation_id=recommendation_id, queued=True)
