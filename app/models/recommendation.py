"""Recommendation model with its embedding column."""

from pgvector.sqlalchemy import Vector
from sqlalchemy import (
    BigInteger,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    SmallInteger,
    String,
    Text,
    func,
)
from sqlalchemy.dialects.postgresql import ARRAY, JSONB
from sqlalchemy.orm import relationship

from app.core.config import EMBEDDING_DIMENSIONS
from app.db.base import Base

CONTENT_TYPES = ("place", "service", "tip", "contact", "unclear")
VISIBILITIES = ("friends", "public")


class Recommendation(Base):
    """A user-authored post; the unit the vector index is built over."""

    __tablename__ = "recommendations"
    __table_args__ = (
        CheckConstraint(
            "NOT (place_id IS NOT NULL AND service_id IS NOT NULL)",
            name="ck_recommendation_single_entity",
        ),
        CheckConstraint(
            "rating IS NULL OR (rating BETWEEN 1 AND 5)",
            name="ck_recommendation_rating_range",
        ),
    )

    id = Column(BigInteger, primary_key=True, index=True)
    user_id = Column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    content_type = Column(String(20), nullable=False)
    place_id = Column(ForeignKey("places.id", ondelete="SET NULL"))
    service_id = Column(ForeignKey("services.id", ondelete="SET NULL"))
    title = Column(String(255))
    description = Column(Text, nullable=False)
    content_data = Column(JSONB, nullable=False, default=dict)
    rating = Column(SmallInteger)
    visibility = Column(String(16), nullable=False, default="friends")
    labels = Column(ARRAY(Text), nullable=False, default=list)
    embedding = Column(Vector(EMBEDDING_DIMENSIONS))  # null until generated
    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(DateTime)

    author = relationship("User")
    place = relationship("Place")
    service = relationship("Service")
