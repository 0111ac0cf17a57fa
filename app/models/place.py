"""Place model."""

from sqlalchemy import BigInteger, Column, DateTime, Float, String, Text, func
from sqlalchemy.dialects.postgresql import JSONB

from app.db.base import Base


class Place(Base):
    """A physical location that recommendations can point at."""

    __tablename__ = "places"

    id = Column(BigInteger, primary_key=True, index=True)
    external_place_id = Column(String(255), unique=True, index=True)  # e.g. Google place id
    name = Column(String(255), nullable=False)
    address = Column(Text)
    latitude = Column(Float)
    longitude = Column(Float)
    category = Column(String(100))
    # "metadata" is reserved on declarative classes
    details = Column("metadata", JSONB, nullable=False, default=dict)
    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(DateTime)
