"""Optional natural-language summary over the top search results."""

from __future__ import annotations

import logging
from typing import Protocol, Sequence

from app.core.config import SearchConfig
from app.core.errors import ProviderError
from app.schemas.search import SearchResult

logger = logging.getLogger(__name__)


class Summarizer(Protocol):
    def summarize(self, query: str, results_text: str) -> str: ...


def no_results_message(query: str) -> str:
    return f'I couldn\'t find any relevant recommendations for "{query}" in your network.'


def render_results_for_prompt(results: Sequence[SearchResult], max_recommendations: int = 6) -> str:
    """Flatten assembled results into the plain-text block the prompt expects."""
    blocks: list[str] = []
    for result in results:
        members = [m for m in result.recommendations if not m.skipped][:max_recommendations]
        if result.place is not None:
            header = f"**{result.place.name}** ({result.place.category or 'Place'})"
            location = result.place.address
        elif result.service is not None:
            header = f"**{result.service.name}** ({result.service.service_type or 'Service'})"
            location = result.service.address
        else:
            first = members[0] if members else None
            header = f"**{(first.title if first else None) or 'Recommendation'}** ({result.type})"
            location = None

        ratings = [m.rating for m in members if m.rating is not None]
        rating_text = (
            f"{sum(ratings) / len(ratings):.1f}/5 ({len(ratings)} rating{'s' if len(ratings) != 1 else ''})"
            if ratings
            else "No ratings"
        )
        labels = sorted({label for m in members for label in m.labels})
        feedback = "; ".join(
            f'{m.user_name or "Anonymous"}: "{m.description}"' for m in members if m.description
        )

        lines = [header]
        if location:
            lines.append(f"Address: {location}")
        if labels:
            lines.append(f"Tags: {', '.join(labels)}")
        lines.append(f"Rating: {rating_text} | Match: {round(result.aggregate_score * 100)}%")
        if feedback:
            lines.append(f"Key feedback: {feedback}")
        blocks.append("\n".join(lines))
    return "\n\n".join(blocks)


def generate_summary(
    summarizer: Summarizer,
    query: str,
    results: Sequence[SearchResult],
    config: SearchConfig,
) -> str | None:
    """Return a summary, or ``None`` when the provider fails.

    An empty result set gets a fixed message without calling the model.
    """
    if not results:
        return no_results_message(query)

    top = list(results[: config.summary_max_results])
    try:
        return summarizer.summarize(query, render_results_for_prompt(top))
    except ProviderError as exc:
        logger.warning("summary skipped for query %r: %s", query, exc.message)
        return None
