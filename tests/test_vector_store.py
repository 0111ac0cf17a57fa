from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from sqlalchemy.dialects import postgresql

from app.services.vector_store import (
    VectorStore,
    ef_search_for,
    nearest_neighbors_stmt,
    order_candidates,
    row_to_candidate,
    similarity_from_distance,
)
from tests.factories import make_candidate


def _sql(stmt) -> str:
    return str(stmt.compile(dialect=postgresql.dialect()))


def test_statement_uses_cosine_operator_and_skips_missing_vectors():
    sql = _sql(nearest_neighbors_stmt([0.1, 0.2, 0.3], None, 50))
    assert "<=>" in sql
    assert "recommendations.embedding IS NOT NULL" in sql
    assert "LEFT OUTER JOIN places" in sql
    assert "LEFT OUTER JOIN services" in sql
    assert "ORDER BY distance" in sql
    assert "LIMIT" in sql
    assert "recommendations.content_type =" not in sql


def test_statement_filters_by_content_type():
    sql = _sql(nearest_neighbors_stmt([0.1, 0.2, 0.3], "service", 50))
    assert "recommendations.content_type =" in sql


@pytest.mark.parametrize(
    "distance, expected",
    [(0.0, 1.0), (0.25, 0.75), (1.0, 0.0), (1.6, 0.0), (-0.01, 1.0), (None, 0.0)],
)
def test_similarity_is_clamped(distance, expected):
    assert similarity_from_distance(distance) == pytest.approx(expected)


def test_equal_similarity_prefers_newer():
    old = make_candidate(0.8, minutes=0)
    new = make_candidate(0.8, minutes=30)
    best = make_candidate(0.9, minutes=-60)
    assert order_candidates([old, new, best]) == [best, new, old]


def test_row_to_candidate_flattens_row():
    rec = SimpleNamespace(
        id=3,
        user_id="u9",
        content_type="place",
        place_id=5,
        service_id=None,
        title="Still Waters",
        description="Calm",
        content_data=None,
        labels=["wifi", "quiet"],
        rating=4,
        created_at=None,
    )
    candidate = row_to_candidate(rec, 0.18, "Still Waters", None)
    assert candidate.similarity == pytest.approx(0.82)
    assert candidate.labels == ("wifi", "quiet")
    assert candidate.content_data == {}
    assert candidate.place_name == "Still Waters"


@pytest.mark.parametrize(
    "limit, content_type, expected",
    [(100, None, 100), (10, None, 40), (100, "service", 400), (5000, None, 1000)],
)
def test_ef_search_covers_the_candidate_limit(limit, content_type, expected):
    assert ef_search_for(limit, content_type) == expected


def test_ef_search_is_set_in_the_same_session_before_the_ann_query():
    db = MagicMock()
    db.execute.return_value.all.return_value = []

    VectorStore(db).nearest_neighbors([0.1, 0.2, 0.3], None, 100)

    first, second = db.execute.call_args_list
    setting = first.args[0]
    assert "set_config('hnsw.ef_search'" in str(setting)
    assert setting.compile().params == {"value": "100"}
    assert "<=>" in _sql(second.args[0])
