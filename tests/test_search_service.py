import random

import pytest

from app.core.config import SearchConfig
from app.core.errors import ProviderError, ValidationError
from app.services.scoring import SCORE_PRECISION
from app.services.search import SearchService
from tests.factories import FakeProvider, FakeStore, make_candidate


def _service(store, provider, config=None):
    return SearchService(store, provider, config or SearchConfig())


def test_quiet_cafe_scenario(store, provider):
    store.add(make_candidate(0.82, place_id=5, place_name="Still Waters", description="Calm, good wifi"))
    store.add(make_candidate(0.75, place_id=5, place_name="Still Waters", description="Lovely staff"))
    store.add(
        make_candidate(0.60, place_id=9, place_name="Burger Barn", description="Loud burgers and live music")
    )

    response = _service(store, provider).search("quiet cafe for work", threshold=0.7)

    assert len(response.results) == 1
    (result,) = response.results
    assert result.key == "place:5"
    assert result.aggregate_score == pytest.approx(0.785, abs=1e-6)
    assert result.total_recommendations == 2
    assert response.total_places == 1
    assert response.total_recommendations == 2


def test_keyword_corroboration_rescues_borderline_candidate(store, provider):
    store.add(make_candidate(0.60, place_id=9, place_name="Corner Cafe"))
    response = _service(store, provider).search("quiet cafe for work")
    assert [r.key for r in response.results] == ["place:9"]


def test_two_posts_about_one_place_are_one_result(store, provider):
    store.add(make_candidate(0.9, place_id=5))
    store.add(make_candidate(0.8, place_id=5))
    response = _service(store, provider).search("anything good")
    assert len(response.results) == 1
    assert response.results[0].total_recommendations == 2


def test_query_is_framed_before_embedding(store, provider):
    _service(store, provider).search("  sushi  ")
    assert provider.embedded == ["Looking for: sushi. Search query for recommendations."]


def test_candidate_limit_scales_with_result_limit(store, provider):
    _service(store, provider, SearchConfig(result_limit=4, candidate_multiplier=10)).search("tacos")
    assert store.ann_calls[0]["limit"] == 40

    _service(store, provider).search("tacos", limit=3)
    assert store.ann_calls[1]["limit"] == 30


def test_content_type_is_passed_to_the_store(store, provider):
    store.add(make_candidate(0.9, content_type="service", service_id=2))
    store.add(make_candidate(0.9, place_id=1))
    response = _service(store, provider).search("electrician", content_type="service")
    assert store.ann_calls[0]["content_type"] == "service"
    assert [r.type for r in response.results] == ["service"]


def test_embedding_failure_is_a_failure_not_an_empty_success(store, provider):
    store.add(make_candidate(0.9, place_id=1))
    provider.embed_error = ProviderError("quota exceeded", provider="embedding")

    with pytest.raises(ProviderError) as excinfo:
        _service(store, provider).search("tacos")

    assert excinfo.value.provider == "embedding"
    assert store.ann_calls == []


def test_summary_failure_keeps_results(store, provider):
    store.add(make_candidate(0.9, place_id=1))
    provider.summary_error = ProviderError("bad json", provider="summary")

    response = _service(store, provider).search("tacos")

    assert response.summary is None
    assert len(response.results) == 1


def test_summary_uses_only_top_results(store, provider):
    for place_id in range(1, 6):
        store.add(make_candidate(0.9 - place_id / 100, place_id=place_id, place_name=f"Spot {place_id}"))
    config = SearchConfig(summary_max_results=2)

    response = _service(store, provider, config).search("tacos")

    assert response.summary == provider.summary
    (_query, text) = provider.summarized[0]
    assert "Spot 1" in text and "Spot 2" in text
    assert "Spot 3" not in text


def test_no_summary_flag_and_disabled_config_skip_the_call(store, provider):
    store.add(make_candidate(0.9, place_id=1))
    assert _service(store, provider).search("tacos", no_summary=True).summary is None
    disabled = SearchConfig(summary_enabled=False)
    assert _service(store, provider, disabled).search("tacos").summary is None
    assert provider.summarized == []


def test_empty_results_get_fixed_message_without_llm(store, provider):
    response = _service(store, provider).search("unicorn repair")
    assert response.results == []
    assert "unicorn repair" in response.summary
    assert provider.summarized == []


@pytest.mark.parametrize(
    "query, options",
    [
        ("", {}),
        ("   ", {}),
        ("a", {}),
        ("tacos", {"limit": 0}),
        ("tacos", {"threshold": 1.5}),
        ("tacos", {"content_type": "restaurant"}),
    ],
)
def test_validation_happens_before_network_calls(store, provider, query, options):
    with pytest.raises(ValidationError):
        _service(store, provider).search(query, **options)
    assert provider.embedded == []


def test_metadata_reflects_effective_options(store, provider):
    store.add(make_candidate(0.9, place_id=1))
    response = _service(store, provider).search("tacos", limit=3, threshold=0.8)
    meta = response.search_metadata
    assert meta.limit == 3
    assert meta.threshold == 0.8
    assert meta.keyword_threshold == 0.5
    assert meta.candidates_considered == 1


def test_request_overrides_do_not_leak_between_calls(store, provider):
    config = SearchConfig()
    service = _service(store, provider, config)
    service.search("tacos", limit=2, threshold=0.9)
    response = service.search("tacos")
    assert response.search_metadata.limit == 10
    assert response.search_metadata.threshold == 0.7


def _random_store(seed: int) -> FakeStore:
    rng = random.Random(seed)
    store = FakeStore()
    for i in range(60):
        kind = rng.choice(["place", "place", "service", "tip"])
        extra = {}
        if kind == "place":
            extra["place_id"] = rng.randint(1, 8)
        elif kind == "service":
            extra["service_id"] = rng.randint(1, 4)
        store.add(
            make_candidate(
                round(rng.uniform(0.3, 1.0), 3),
                recommendation_id=i + 1,
                content_type=kind,
                minutes=rng.randint(0, 500),
                description=rng.choice(["quiet cafe", "loud bar", "plumber", "tacos"]),
                **extra,
            )
        )
    return store


@pytest.mark.parametrize("seed", range(5))
def test_result_properties_hold(seed):
    store = _random_store(seed)
    response = _service(store, FakeProvider(), SearchConfig(result_limit=50)).search("quiet cafe")

    keys = [r.key for r in response.results]
    assert len(keys) == len(set(keys))
    for result in response.results:
        scores = [m.similarity for m in result.recommendations]
        assert 0.0 <= result.aggregate_score <= 1.0
        assert result.aggregate_score == pytest.approx(sum(scores) / len(scores), abs=1e-6)
        assert result.total_recommendations == len(scores)

    ordering = [(round(r.aggregate_score, SCORE_PRECISION), r.total_recommendations) for r in response.results]
    for (score_a, count_a), (score_b, count_b) in zip(ordering, ordering[1:]):
        assert score_a >= score_b
        if score_a == score_b:
            assert count_a >= count_b


@pytest.mark.parametrize("seed", range(3))
def test_repeated_query_is_identical(seed):
    store = _random_store(seed)
    service = _service(store, FakeProvider())
    first = service.search("quiet cafe").model_dump()
    second = service.search("quiet cafe").model_dump()
    assert first == second
