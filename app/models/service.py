"""Service model."""

from sqlalchemy import BigInteger, Column, DateTime, String, Text, func

from app.db.base import Base


class Service(Base):
    """A non-located offering such as a tradesperson, keyed by phone/email."""

    __tablename__ = "services"

    id = Column(BigInteger, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    service_type = Column(String(100))
    business_name = Column(String(255))
    phone = Column(String(32), index=True)  # digits only
    email = Column(String(255), index=True)  # lower-cased
    address = Column(Text)
    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(DateTime)
