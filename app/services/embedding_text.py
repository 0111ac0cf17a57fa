"""Compose the text that gets embedded for recommendations and queries."""

from __future__ import annotations

import json
from typing import Any

from app.schemas.content import PRICE_LABELS


def search_text(query: str) -> str:
    """Frame a query so it lands near recommendation embeddings."""
    return f"Looking for: {query.strip()}. Search query for recommendations."


def _flatten(data: dict[str, Any] | None, label: str) -> str | None:
    if not data:
        return None
    entries = []
    for key, value in data.items():
        if key == "content_type" or value is None or str(value).strip() == "":
            continue
        if isinstance(value, (list, dict)) and not value:
            continue
        rendered = value if isinstance(value, str) else json.dumps(value, sort_keys=True)
        entries.append(f"{key}: {rendered}")
    return f"{label}: {', '.join(entries)}" if entries else None


def recommendation_text(rec: Any, place: Any = None, service: Any = None, author: Any = None) -> str:
    """Build the embedding text for a recommendation row.

    ``place``/``service``/``author`` are the hydrated rows, if any. Raises
    ``ValueError`` when nothing meaningful is left to embed.
    """
    parts: list[str] = []
    if rec.content_type:
        parts.append(f"Type: {rec.content_type}")
    if rec.title:
        parts.append(f"Title: {rec.title}")
    if rec.description:
        parts.append(f"Description: {rec.description}")
    if rec.labels:
        parts.append(f"Tags: {', '.join(rec.labels)}")
    if rec.rating is not None:
        parts.append(f"Rating: {rec.rating}/5")

    if place is not None:
        parts.append(f"Place: {place.name}")
        if place.address:
            parts.append(f"Address: {place.address}")
        if place.category:
            parts.append(f"Category: {place.category}")
    if service is not None:
        parts.append(f"Service: {service.name}")
        if service.service_type:
            parts.append(f"Service Type: {service.service_type}")
        if service.business_name:
            parts.append(f"Business: {service.business_name}")
        if service.address:
            parts.append(f"Service Address: {service.address}")
    if author is not None and author.display_name:
        parts.append(f"By: {author.display_name}")

    content = rec.content_data or {}
    price_level = content.get("price_level")
    price_label = content.get("price_label") or PRICE_LABELS.get(price_level)
    price_text = content.get("price_text")
    price_parts = [p for p in (price_text and f"Price {price_text}", price_label and f"Pricing {price_label}") if p]
    if price_parts:
        parts.append(" ".join(price_parts))

    details = _flatten(content, "Details")
    if details:
        parts.append(details)

    combined = ". ".join(parts)
    if not combined.strip():
        raise ValueError("no meaningful text content found in recommendation")
    return combined
