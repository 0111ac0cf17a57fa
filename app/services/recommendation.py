"""Write path: places, services, recommendations and their embeddings."""

from __future__ import annotations

import logging
import re
from datetime import datetime
from typing import Protocol

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.errors import NotFoundError, ProviderError, ValidationError
from app.db.session import SessionLocal
from app.models.place import Place
from app.models.recommendation import Recommendation
from app.models.service import Service
from app.models.user import User
from app.schemas.content import empty_content, parse_content
from app.schemas.place import PlaceCreate, ServiceCreate
from app.schemas.recommendation import (
    RecommendationCreate,
    RecommendationOut,
    RecommendationUpdate,
)
from app.services.embedding_text import recommendation_text
from app.services.llm import get_llm_service

logger = logging.getLogger(__name__)

# Fields whose change makes the stored embedding stale.
EMBEDDED_FIELDS = frozenset(
    {"content_type", "place_id", "service_id", "title", "description", "content_data", "rating", "labels"}
)
CLEARABLE_FIELDS = frozenset({"place_id", "service_id", "title", "rating"})


class Embedder(Protocol):
    def embed_text(self, text: str) -> list[float]: ...


def normalize_phone(phone: str | None) -> str | None:
    if not phone:
        return None
    digits = re.sub(r"\D", "", phone)
    return digits or None


def normalize_email(email: str | None) -> str | None:
    if not email:
        return None
    cleaned = email.strip().lower()
    return cleaned or None


def upsert_place(db: Session, data: PlaceCreate) -> Place:
    """Insert or update place metadata, keyed by external place id when present."""
    try:
        place = None
        if data.external_place_id:
            place = db.execute(
                select(Place).where(Place.external_place_id == data.external_place_id)
            ).scalar_one_or_none()
        if place:
            for field, value in data.model_dump().items():
                setattr(place, field, value)
            place.updated_at = datetime.now()
        else:
            place = Place(**data.model_dump())
            db.add(place)
        db.commit()
        db.refresh(place)
        return place
    except Exception:
        db.rollback()
        raise


def upsert_service(db: Session, data: ServiceCreate) -> tuple[Service, bool]:
    """Find a service by phone, then email; fill its gaps or create it.

    Returns ``(service, created)``.
    """
    phone = normalize_phone(data.phone)
    email = normalize_email(data.email)
    try:
        service = None
        if phone:
            service = db.execute(select(Service).where(Service.phone == phone)).scalars().first()
        if service is None and email:
            service = db.execute(select(Service).where(Service.email == email)).scalars().first()

        if service is not None:
            incoming = {**data.model_dump(), "phone": phone, "email": email}
            for field, value in incoming.items():
                if value and not getattr(service, field):
                    setattr(service, field, value)
            service.updated_at = datetime.now()
            created = False
        else:
            service = Service(**{**data.model_dump(), "phone": phone, "email": email})
            db.add(service)
            created = True
        db.commit()
        db.refresh(service)
        return service, created
    except Exception:
        db.rollback()
        raise


def to_out(rec: Recommendation) -> RecommendationOut:
    return RecommendationOut(
        id=rec.id,
        user_id=rec.user_id,
        content_type=rec.content_type,
        place_id=rec.place_id,
        service_id=rec.service_id,
        title=rec.title,
        description=rec.description,
        content_data=rec.content_data or {},
        rating=rec.rating,
        visibility=rec.visibility,
        labels=list(rec.labels or []),
        has_embedding=rec.embedding is not None,
        created_at=rec.created_at,
        updated_at=rec.updated_at,
    )


def get_recommendation(db: Session, recommendation_id: int) -> Recommendation:
    rec = db.get(Recommendation, recommendation_id)
    if rec is None:
        raise NotFoundError(f"recommendation {recommendation_id} not found")
    return rec


def _check_references(db: Session, user_id: str | None, place_id: int | None, service_id: int | None) -> None:
    if user_id is not None and db.get(User, user_id) is None:
        raise NotFoundError(f"user {user_id} not found")
    if place_id is not None and db.get(Place, place_id) is None:
        raise NotFoundError(f"place {place_id} not found")
    if service_id is not None and db.get(Service, service_id) is None:
        raise NotFoundError(f"service {service_id} not found")


def create_recommendation(db: Session, payload: RecommendationCreate) -> Recommendation:
    """Store a recommendation; its embedding is generated afterwards."""
    _check_references(db, payload.user_id, payload.place_id, payload.service_id)
    content = payload.content_data or empty_content(payload.content_type)
    rec = Recommendation(
        user_id=payload.user_id,
        content_type=payload.content_type,
        place_id=payload.place_id,
        service_id=payload.service_id,
        title=payload.title,
        description=payload.description,
        content_data=content.model_dump(exclude={"content_type"}, exclude_none=True),
        rating=payload.rating,
        visibility=payload.visibility,
        labels=payload.labels,
    )
    try:
        db.add(rec)
        db.commit()
        db.refresh(rec)
    except Exception:
        db.rollback()
        raise
    return rec


def update_recommendation(
    db: Session,
    recommendation_id: int,
    payload: RecommendationUpdate,
) -> tuple[Recommendation, bool]:
    """Apply a partial update. Returns ``(recommendation, embedding_stale)``."""
    rec = get_recommendation(db, recommendation_id)
    changes = {
        field: value
        for field, value in payload.model_dump(exclude_unset=True).items()
        if value is not None or field in CLEARABLE_FIELDS
    }

    content_type = changes.get("content_type", rec.content_type)
    if changes.get("place_id") is not None and content_type != "place":
        raise ValidationError("place_id is only allowed for place recommendations")
    if changes.get("service_id") is not None and content_type != "service":
        raise ValidationError("service_id is only allowed for service recommendations")
    # switching type drops the reference that no longer applies
    place_id = changes.get("place_id", rec.place_id) if content_type == "place" else None
    service_id = changes.get("service_id", rec.service_id) if content_type == "service" else None
    _check_references(db, None, changes.get("place_id"), changes.get("service_id"))

    if changes.get("content_data") is not None:
        content = payload.content_data
        if content.content_type != content_type:
            raise ValidationError("content_data does not match content_type")
        changes["content_data"] = content.model_dump(exclude={"content_type"}, exclude_none=True)
    elif "content_type" in changes:
        try:
            parse_content(content_type, rec.content_data)
        except PydanticValidationError as exc:
            raise ValidationError(
                f"stored content_data does not fit content type {content_type!r}",
                {"error_count": exc.error_count()},
            ) from exc

    changes.update(content_type=content_type, place_id=place_id, service_id=service_id)
    stale = False
    try:
        for field, value in changes.items():
            if getattr(rec, field) != value:
                setattr(rec, field, value)
                stale = stale or field in EMBEDDED_FIELDS
        rec.updated_at = datetime.now()
        db.commit()
        db.refresh(rec)
    except Exception:
        db.rollback()
        raise
    return rec, stale


def delete_recommendation(db: Session, recommendation_id: int) -> None:
    rec = get_recommendation(db, recommendation_id)
    try:
        db.delete(rec)
        db.commit()
    except Exception:
        db.rollback()
        raise


def refresh_embedding(db: Session, recommendation_id: int, embedder: Embedder) -> list[float]:
    """(Re)generate one recommendation's embedding from its current row.

    The vector is always replaced wholesale, so concurrent refreshes resolve
    to whichever commits last and a retry is harmless.
    """
    rec = get_recommendation(db, recommendation_id)
    place = db.get(Place, rec.place_id) if rec.place_id is not None else None
    service = db.get(Service, rec.service_id) if rec.service_id is not None else None
    author = db.get(User, rec.user_id)

    vector = embedder.embed_text(recommendation_text(rec, place, service, author))
    try:
        rec.embedding = vector
        db.commit()
    except Exception:
        db.rollback()
        raise
    logger.info("embedding refreshed for recommendation %s", recommendation_id)
    return vector


def refresh_embedding_task(recommendation_id: int) -> None:
    """Background-task entry point; owns its session."""
    db = SessionLocal()
    try:
        refresh_embedding(db, recommendation_id, get_llm_service())
    except (ProviderError, NotFoundError) as exc:
        logger.error("embedding refresh failed for recommendation %s: %s", recommendation_id, exc)
    finally:
        db.close()
