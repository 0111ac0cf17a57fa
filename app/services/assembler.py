"""Turn ranked entity groups into the search response payload."""

from __future__ import annotations

import logging
import warnings
from dataclasses import dataclass
from typing import Any, Mapping, Protocol, Sequence

from app.core.errors import DataIntegrityWarning
from app.schemas.place import PlaceOut, ServiceOut
from app.schemas.search import RecommendationSummary, SearchResult
from app.services.scoring import EntityGroup
from app.services.vector_store import Candidate

logger = logging.getLogger(__name__)

ANONYMOUS = "Anonymous"


class EntityLoader(Protocol):
    def load_places(self, ids: Sequence[int]) -> Mapping[int, Any]: ...

    def load_services(self, ids: Sequence[int]) -> Mapping[int, Any]: ...

    def load_authors(self, ids: Sequence[str]) -> Mapping[str, Any]: ...


@dataclass
class AssembledResults:
    results: list[SearchResult]
    total_places: int
    total_recommendations: int


def _summary(candidate: Candidate, authors: Mapping[str, Any], skipped: bool) -> RecommendationSummary:
    author = authors.get(candidate.user_id)
    return RecommendationSummary(
        recommendation_id=candidate.recommendation_id,
        content_type=candidate.content_type,
        title=candidate.title,
        description=candidate.description,
        content_data=candidate.content_data,
        labels=list(candidate.labels),
        rating=candidate.rating,
        user_name=(author.display_name if author is not None else None) or ANONYMOUS,
        similarity=candidate.similarity,
        created_at=candidate.created_at,
        skipped=skipped,
    )


def _warn_missing(group: EntityGroup, member: Candidate) -> None:
    warnings.warn(
        f"recommendation {member.recommendation_id} references missing {group.key}",
        DataIntegrityWarning,
        stacklevel=3,
    )


def _build(
    group: EntityGroup,
    places: Mapping[int, Any],
    services: Mapping[int, Any],
    authors: Mapping[str, Any],
) -> SearchResult | None:
    entity: Any = None
    if group.kind == "place":
        entity = places.get(group.entity_id)
    elif group.kind == "service":
        entity = services.get(group.entity_id)

    summaries: list[RecommendationSummary] = []
    resolved = 0
    for member in group.members:
        # singleton groups have no entity row to lose
        skipped = group.kind != "recommendation" and entity is None
        if skipped:
            _warn_missing(group, member)
        else:
            resolved += 1
        summaries.append(_summary(member, authors, skipped))

    if resolved == 0:
        logger.warning("dropping %s: no member could be hydrated", group.key)
        return None

    return SearchResult(
        type=group.kind,
        key=group.key,
        place=PlaceOut.model_validate(entity) if group.kind == "place" else None,
        service=ServiceOut.model_validate(entity) if group.kind == "service" else None,
        aggregate_score=group.aggregate_score,
        total_recommendations=group.total_recommendations,
        recommendations=summaries,
    )


def assemble(groups: Sequence[EntityGroup], loader: EntityLoader, limit: int) -> AssembledResults:
    """Hydrate every group, drop unresolvable ones, count, then cut to ``limit``.

    Counts describe the whole aggregated set, not just the returned page.
    """
    place_ids = [g.entity_id for g in groups if g.kind == "place"]
    service_ids = [g.entity_id for g in groups if g.kind == "service"]
    author_ids = [m.user_id for g in groups for m in g.members]

    places = loader.load_places(place_ids)
    services = loader.load_services(service_ids)
    authors = loader.load_authors(author_ids)

    built = [r for r in (_build(g, places, services, authors) for g in groups) if r is not None]
    return AssembledResults(
        results=built[:limit],
        total_places=sum(1 for r in built if r.type == "place"),
        total_recommendations=sum(r.total_recommendations for r in built),
    )
