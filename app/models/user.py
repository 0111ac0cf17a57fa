"""User model (read-only here; accounts are managed elsewhere)."""

from sqlalchemy import Column, DateTime, String, func

from app.db.base import Base


class User(Base):
    """Recommendation author."""

    __tablename__ = "users"

    id = Column(String(64), primary_key=True)
    display_name = Column(String(255))
    created_at = Column(DateTime, nullable=False, server_default=func.now())
