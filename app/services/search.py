"""Semantic search pipeline: embed, ANN, keyword gate, aggregate, assemble, summarize."""

from __future__ import annotations

import logging
import time
from typing import Protocol, Sequence

from app.core.config import SearchConfig
from app.core.errors import ValidationError
from app.models.recommendation import CONTENT_TYPES
from app.schemas.search import SearchMetadata, SearchResponse
from app.services.assembler import EntityLoader, assemble
from app.services.embedding_text import search_text
from app.services.keyword_filter import filter_candidates
from app.services.scoring import aggregate
from app.services.summary import Summarizer, generate_summary
from app.services.vector_store import Candidate

logger = logging.getLogger(__name__)


class Embedder(Protocol):
    def embed_text(self, text: str) -> list[float]: ...


class CandidateStore(EntityLoader, Protocol):
    def nearest_neighbors(
        self,
        query_vector: Sequence[float],
        content_type: str | None = None,
        limit: int = 100,
    ) -> list[Candidate]: ...


class SearchProvider(Embedder, Summarizer, Protocol):
    pass


def validate_request(
    query: str,
    config: SearchConfig,
    limit: int | None = None,
    threshold: float | None = None,
    content_type: str | None = None,
) -> str:
    """Reject bad input before any network call; return the cleaned query."""
    cleaned = (query or "").strip()
    if not cleaned:
        raise ValidationError("Search query is required")
    if len(cleaned) < config.min_query_length:
        raise ValidationError(
            f"Search query must be at least {config.min_query_length} characters",
            {"min_length": config.min_query_length},
        )
    if limit is not None and limit < 1:
        raise ValidationError("limit must be a positive integer", {"limit": limit})
    if threshold is not None and not 0.0 <= threshold <= 1.0:
        raise ValidationError("threshold must be between 0 and 1", {"threshold": threshold})
    if content_type is not None and content_type not in CONTENT_TYPES:
        raise ValidationError(
            f"unknown content type {content_type!r}",
            {"allowed": list(CONTENT_TYPES)},
        )
    return cleaned


class SearchService:
    """Runs one search request end to end against injected collaborators."""

    def __init__(self, store: CandidateStore, provider: SearchProvider, config: SearchConfig) -> None:
        self._store = store
        self._provider = provider
        self._config = config

    def search(
        self,
        query: str,
        *,
        limit: int | None = None,
        threshold: float | None = None,
        content_type: str | None = None,
        no_summary: bool = False,
    ) -> SearchResponse:
        """Return ranked entity results.

        Raises:
            ValidationError: bad query or options.
            ProviderError: the query could not be embedded. There is no
                fallback vector, so this is never turned into an empty result.
        """
        cleaned = validate_request(query, self._config, limit, threshold, content_type)
        config = self._config.with_overrides(
            limit=limit,
            threshold=threshold,
            summary_enabled=False if no_summary else None,
        )
        started = time.perf_counter()

        vector = self._provider.embed_text(search_text(cleaned))
        candidates = self._store.nearest_neighbors(vector, content_type, config.candidate_limit)
        kept = filter_candidates(cleaned, candidates, config)
        groups = aggregate(kept)
        assembled = assemble(groups, self._store, config.result_limit)

        summary = None
        if config.summary_enabled:
            summary = generate_summary(self._provider, cleaned, assembled.results, config)

        logger.info(
            "search %r: %d candidates, %d kept, %d groups, %d returned in %.0fms",
            cleaned,
            len(candidates),
            len(kept),
            len(groups),
            len(assembled.results),
            (time.perf_counter() - started) * 1000,
        )
        return SearchResponse(
            query=cleaned,
            results=assembled.results,
            total_places=assembled.total_places,
            total_recommendations=assembled.total_recommendations,
            summary=summary,
            search_metadata=SearchMetadata(
                threshold=config.similarity_threshold,
                keyword_threshold=(
                    config.keyword_filter_threshold if config.keyword_filtering_enabled else None
                ),
                limit=config.result_limit,
                content_type=content_type,
                candidates_considered=len(candidates),
            ),
        )
