"""Builders and in-memory fakes shared by the test modules."""

from __future__ import annotations

from datetime import datetime, timedelta
from itertools import count
from types import SimpleNamespace
from typing import Sequence

from app.services.vector_store import Candidate, order_candidates

BASE_TIME = datetime(2024, 5, 1, 12, 0, 0)
_ids = count(1000)


def make_candidate(similarity: float, **overrides) -> Candidate:
    rec_id = overrides.pop("recommendation_id", next(_ids))
    minutes = overrides.pop("minutes", 0)
    fields = dict(
        recommendation_id=rec_id,
        user_id=overrides.pop("user_id", "u1"),
        content_type=overrides.pop("content_type", "place"),
        similarity=similarity,
        description=overrides.pop("description", "Nice enough"),
        created_at=BASE_TIME + timedelta(minutes=minutes),
    )
    fields.update(overrides)
    return Candidate(**fields)


def make_place(place_id: int, name: str | None = None, **extra) -> SimpleNamespace:
    return SimpleNamespace(
        id=place_id,
        name=name or f"Place {place_id}",
        external_place_id=extra.get("external_place_id"),
        address=extra.get("address"),
        latitude=extra.get("latitude"),
        longitude=extra.get("longitude"),
        category=extra.get("category"),
        details=extra.get("details", {}),
    )


def make_service(service_id: int, name: str | None = None, **extra) -> SimpleNamespace:
    return SimpleNamespace(
        id=service_id,
        name=name or f"Service {service_id}",
        service_type=extra.get("service_type"),
        business_name=extra.get("business_name"),
        phone=extra.get("phone"),
        email=extra.get("email"),
        address=extra.get("address"),
    )


def make_author(user_id: str, display_name: str) -> SimpleNamespace:
    return SimpleNamespace(id=user_id, display_name=display_name)


class FakeStore:
    """In-memory stand-in for :class:`app.services.vector_store.VectorStore`."""

    def __init__(self) -> None:
        self.candidates: list[Candidate] = []
        self.places: dict[int, SimpleNamespace] = {}
        self.services: dict[int, SimpleNamespace] = {}
        self.authors: dict[str, SimpleNamespace] = {}
        self.ann_calls: list[dict] = []

    def add(self, candidate: Candidate) -> Candidate:
        self.candidates.append(candidate)
        if candidate.place_id is not None and candidate.place_id not in self.places:
            self.places[candidate.place_id] = make_place(candidate.place_id, candidate.place_name)
        if candidate.service_id is not None and candidate.service_id not in self.services:
            self.services[candidate.service_id] = make_service(
                candidate.service_id, candidate.service_name
            )
        return candidate

    def nearest_neighbors(self, query_vector: Sequence[float], content_type=None, limit=100):
        self.ann_calls.append({"vector": query_vector, "content_type": content_type, "limit": limit})
        rows = [c for c in self.candidates if content_type is None or c.content_type == content_type]
        return order_candidates(rows)[:limit]

    def load_places(self, ids):
        return {i: self.places[i] for i in ids if i in self.places}

    def load_services(self, ids):
        return {i: self.services[i] for i in ids if i in self.services}

    def load_authors(self, ids):
        return {i: self.authors[i] for i in ids if i in self.authors}


class FakeProvider:
    """Embedding + summary provider with scripted behaviour."""

    def __init__(self, summary: str = "Two good options nearby.") -> None:
        self.summary = summary
        self.embed_error: Exception | None = None
        self.summary_error: Exception | None = None
        self.embedded: list[str] = []
        self.summarized: list[tuple[str, str]] = []

    def embed_text(self, text: str) -> list[float]:
        self.embedded.append(text)
        if self.embed_error is not None:
            raise self.embed_error
        return [0.1] * 8

    def summarize(self, query: str, results_text: str) -> str:
        self.summarized.append((query, results_text))
        if self.summary_error is not None:
            raise self.summary_error
        return self.summary
