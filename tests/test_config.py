import pytest
from pydantic import ValidationError

from app.core.config import SearchConfig, Settings


def test_defaults():
    config = SearchConfig()
    assert config.similarity_threshold == 0.7
    assert config.keyword_filter_threshold == 0.5
    assert config.result_limit == 10
    assert config.candidate_limit == 100
    assert config.keyword_filtering_enabled is True


def test_from_settings_maps_every_knob():
    settings = Settings(
        search_similarity_threshold=0.65,
        search_keyword_filter_threshold=0.4,
        search_result_limit=5,
        search_candidate_multiplier=4,
        search_keyword_filtering=False,
        search_summary_max_results=3,
        search_summary_enabled=False,
        search_min_query_length=3,
        search_debug_logging=True,
    )
    config = SearchConfig.from_settings(settings)
    assert config.similarity_threshold == 0.65
    assert config.keyword_filter_threshold == 0.4
    assert config.candidate_limit == 20
    assert config.keyword_filtering_enabled is False
    assert config.summary_max_results == 3
    assert config.summary_enabled is False
    assert config.min_query_length == 3
    assert config.debug_logging is True


def test_overrides_return_a_copy():
    config = SearchConfig()
    narrowed = config.with_overrides(limit=3, threshold=0.9, summary_enabled=False)
    assert (narrowed.result_limit, narrowed.similarity_threshold, narrowed.summary_enabled) == (3, 0.9, False)
    assert (config.result_limit, config.similarity_threshold, config.summary_enabled) == (10, 0.7, True)
    assert config.with_overrides() is config


def test_config_is_frozen_and_validated():
    config = SearchConfig()
    with pytest.raises(ValidationError):
        config.result_limit = 20
    with pytest.raises(ValidationError):
        SearchConfig(similarity_threshold=1.2)
    with pytest.raises(ValidationError):
        config.with_overrides(threshold=-0.1)
