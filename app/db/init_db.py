"""Database initialization utilities."""

import logging

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from app.db.base import Base
from app.db.session import engine

logger = logging.getLogger(__name__)

# (name, DDL) pairs. HNSW needs no training data, unlike ivfflat, so it can be
# built on an empty table at startup.
INDEX_STATEMENTS: tuple[tuple[str, str], ...] = (
    (
        "recommendations_embedding_hnsw_idx",
        "CREATE INDEX IF NOT EXISTS recommendations_embedding_hnsw_idx "
        "ON recommendations USING hnsw (embedding vector_cosine_ops)",
    ),
    (
        "recommendations_content_type_idx",
        "CREATE INDEX IF NOT EXISTS recommendations_content_type_idx "
        "ON recommendations (content_type)",
    ),
    (
        "recommendations_place_id_idx",
        "CREATE INDEX IF NOT EXISTS recommendations_place_id_idx ON recommendations (place_id)",
    ),
    (
        "recommendations_service_id_idx",
        "CREATE INDEX IF NOT EXISTS recommendations_service_id_idx "
        "ON recommendations (service_id)",
    ),
)


def create_indexes() -> list[str]:
    """Create the ANN and lookup indexes; return the names that failed."""
    failed: list[str] = []
    with engine.connect() as conn:
        for name, ddl in INDEX_STATEMENTS:
            try:
                conn.execute(text(ddl))
                conn.commit()
            except SQLAlchemyError as exc:
                logger.warning("index %s not created: %s", name, exc)
                conn.rollback()
                failed.append(name)
    return failed


def init_db() -> None:
    """Create pgvector extension (if needed), tables and indexes."""
    with engine.connect() as conn:
        conn.execute(text("CREATE EXTENSION IF NOT EXISTS vector"))
        conn.commit()
    Base.metadata.create_all(bind=engine)
    create_indexes()
