"""Collapse recommendation-level matches into entity-level scores."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable

from app.services.vector_store import Candidate

logger = logging.getLogger(__name__)

# Means that agree to this many places are treated as equal when ranking.
SCORE_PRECISION = 9


def group_key(candidate: Candidate) -> str:
    """``place:{id}`` / ``service:{id}``; otherwise the recommendation itself."""
    if candidate.place_id is not None:
        return f"place:{candidate.place_id}"
    if candidate.service_id is not None:
        return f"service:{candidate.service_id}"
    return f"recommendation:{candidate.recommendation_id}"


@dataclass
class EntityGroup:
    key: str
    members: list[Candidate] = field(default_factory=list)

    @property
    def kind(self) -> str:
        return self.key.split(":", 1)[0]

    @property
    def entity_id(self) -> int:
        return int(self.key.split(":", 1)[1])

    @property
    def total_recommendations(self) -> int:
        return len(self.members)

    @property
    def aggregate_score(self) -> float:
        # plain mean over every member
        mean = sum(m.similarity for m in self.members) / len(self.members)
        return min(1.0, max(0.0, mean))

    @property
    def ranking_score(self) -> float:
        return round(self.aggregate_score, SCORE_PRECISION)

    @property
    def latest_created_at(self) -> datetime | None:
        stamps = [m.created_at for m in self.members if m.created_at is not None]
        return max(stamps) if stamps else None


def _sort_key(group: EntityGroup) -> tuple:
    latest = group.latest_created_at
    recency = latest.timestamp() if latest is not None else float("-inf")
    return (-group.ranking_score, -group.total_recommendations, -recency, group.key)


def aggregate(candidates: Iterable[Candidate]) -> list[EntityGroup]:
    """Group candidates by entity and return groups in ranking order.

    Members keep the order they arrived in (best similarity first when fed
    straight from the vector store).
    """
    groups: dict[str, EntityGroup] = {}
    for candidate in candidates:
        key = group_key(candidate)
        group = groups.get(key)
        if group is None:
            group = groups[key] = EntityGroup(key=key)
        group.members.append(candidate)

    ranked = sorted(groups.values(), key=_sort_key)
    for group in ranked:
        logger.debug(
            "group %s score=%.4f members=%d",
            group.key,
            group.aggregate_score,
            group.total_recommendations,
        )
    return ranked
