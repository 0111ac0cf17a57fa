"""pgvector-backed nearest-neighbour search over recommendations."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Iterable, Sequence

from sqlalchemy import Select, TextClause, select, text
from sqlalchemy.orm import Session

from app.models.place import Place
from app.models.recommendation import Recommendation
from app.models.service import Service
from app.models.user import User

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Candidate:
    """One ANN hit, flattened for filtering and scoring."""

    recommendation_id: int
    user_id: str
    content_type: str
    similarity: float
    place_id: int | None = None
    service_id: int | None = None
    title: str | None = None
    description: str | None = None
    content_data: dict[str, Any] = field(default_factory=dict)
    labels: tuple[str, ...] = ()
    rating: int | None = None
    created_at: datetime | None = None
    place_name: str | None = None
    service_name: str | None = None


def similarity_from_distance(distance: float | None) -> float:
    """Cosine distance -> similarity, clamped to [0, 1]."""
    if distance is None:
        return 0.0
    return min(1.0, max(0.0, 1.0 - float(distance)))


def _recency(created_at: datetime | None) -> float:
    return created_at.timestamp() if created_at is not None else float("-inf")


def order_candidates(candidates: Iterable[Candidate]) -> list[Candidate]:
    """Descending similarity; equal similarity -> newest first."""
    return sorted(candidates, key=lambda c: (-c.similarity, -_recency(c.created_at)))


# pgvector bounds for hnsw.ef_search; an HNSW scan returns at most ef_search rows.
EF_SEARCH_MIN = 40
EF_SEARCH_MAX = 1000
# a content_type filter is applied after the index scan, so widen it
FILTERED_EF_FACTOR = 4


def ef_search_for(limit: int, content_type: str | None = None) -> int:
    wanted = limit * FILTERED_EF_FACTOR if content_type else limit
    return max(EF_SEARCH_MIN, min(EF_SEARCH_MAX, wanted))


def ef_search_stmt(ef_search: int) -> TextClause:
    """Transaction-local ``hnsw.ef_search`` so the index can fill the candidate pool."""
    return text("SELECT set_config('hnsw.ef_search', :value, true)").bindparams(value=str(ef_search))


def nearest_neighbors_stmt(
    query_vector: Sequence[float],
    content_type: str | None,
    limit: int,
) -> Select:
    """Return the ANN statement; ordering is by distance only so the HNSW index applies."""
    distance = Recommendation.embedding.cosine_distance(query_vector).label("distance")
    stmt = (
        select(
            Recommendation,
            distance,
            Place.name.label("place_name"),
            Service.name.label("service_name"),
        )
        .outerjoin(Place, Recommendation.place_id == Place.id)
        .outerjoin(Service, Recommendation.service_id == Service.id)
        .where(Recommendation.embedding.is_not(None))
    )
    if content_type:
        stmt = stmt.where(Recommendation.content_type == content_type)
    return stmt.order_by(distance).limit(limit)


def row_to_candidate(rec: Recommendation, distance: float, place_name: str | None, service_name: str | None) -> Candidate:
    return Candidate(
        recommendation_id=rec.id,
        user_id=rec.user_id,
        content_type=rec.content_type,
        similarity=similarity_from_distance(distance),
        place_id=rec.place_id,
        service_id=rec.service_id,
        title=rec.title,
        description=rec.description,
        content_data=dict(rec.content_data or {}),
        labels=tuple(rec.labels or ()),
        rating=rec.rating,
        created_at=rec.created_at,
        place_name=place_name,
        service_name=service_name,
    )


class VectorStore:
    """Read access to recommendations and the rows they reference."""

    def __init__(self, db: Session) -> None:
        self._db = db

    def nearest_neighbors(
        self,
        query_vector: Sequence[float],
        content_type: str | None = None,
        limit: int = 100,
    ) -> list[Candidate]:
        self._db.execute(ef_search_stmt(ef_search_for(limit, content_type)))
        stmt = nearest_neighbors_stmt(query_vector, content_type, limit)
        rows = self._db.execute(stmt).all()
        candidates = [row_to_candidate(*row) for row in rows]
        logger.debug("ANN returned %d candidates (limit=%d)", len(candidates), limit)
        # distance ties are rare; resolve them here rather than in SQL
        return order_candidates(candidates)

    def load_places(self, ids: Iterable[int]) -> dict[int, Place]:
        ids = list(set(ids))
        if not ids:
            return {}
        rows = self._db.execute(select(Place).where(Place.id.in_(ids))).scalars().all()
        return {p.id: p for p in rows}

    def load_services(self, ids: Iterable[int]) -> dict[int, Service]:
        ids = list(set(ids))
        if not ids:
            return {}
        rows = self._db.execute(select(Service).where(Service.id.in_(ids))).scalars().all()
        return {s.id: s for s in rows}

    def load_authors(self, ids: Iterable[str]) -> dict[str, User]:
        ids = list(set(ids))
        if not ids:
            return {}
        rows = self._db.execute(select(User).where(User.id.in_(ids))).scalars().all()
        return {u.id: u for u in rows}
