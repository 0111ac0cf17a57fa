"""Two-tier relevance gate applied to ANN candidates.

Vector similarity over short user text gives false positives, so a
candidate below the high-confidence threshold only survives when the query
words also show up in its text.
"""

from __future__ import annotations

import logging
import re
from typing import Iterable

from app.core.config import SearchConfig
from app.services.vector_store import Candidate

logger = logging.getLogger(__name__)

STOP_WORDS = frozenset(
    {
        "the", "a", "an", "for", "in", "on", "at", "to", "of", "and", "or", "but",
        "is", "are", "was", "were", "be", "been", "being", "have", "has", "had",
        "do", "does", "did", "will", "would", "should", "could", "may", "might",
        "must", "can", "some", "any", "looking", "with", "near", "good", "best",
        "place", "where", "what", "who", "find", "need", "want",
    }
)

SYNONYMS: dict[str, tuple[str, ...]] = {
    "asian": ("asian", "oriental", "chinese", "japanese", "thai", "korean", "indian"),
    "food": ("food", "cuisine", "restaurant", "dining", "meal", "dish"),
    "cafe": ("cafe", "coffee", "espresso", "latte", "bakery"),
    "dj": ("dj", "disc jockey", "deejay"),
    "sweet": ("sweet", "dessert", "candy", "confectionery", "mithai"),
    "shop": ("shop", "store", "wala"),
}

# Trade name -> words its recommendations tend to use. Only the trade name
# itself (or its plural) in the query pulls a family in.
TRADE_TERMS: dict[str, tuple[str, ...]] = {
    "painter": ("painter", "painting", "paint", "interior", "exterior", "wall", "colour", "color", "mural"),
    "electrician": ("electrician", "electrical", "electric", "wiring", "outlet", "circuit", "switch", "fuse"),
    "plumber": ("plumber", "plumbing", "pipe", "drain", "toilet", "faucet", "leak", "boiler"),
    "carpenter": ("carpenter", "carpentry", "wood", "furniture", "cabinet", "shelf", "shelves"),
    "contractor": ("contractor", "construction", "renovation", "remodel", "builder"),
    "cleaner": ("cleaner", "cleaning", "housekeeping", "maid", "janitor", "sanitize", "disinfect"),
    "gardener": ("gardener", "gardening", "garden", "landscape", "lawn", "hedge", "yard"),
    "mechanic": ("mechanic", "garage", "vehicle", "engine", "brake", "tyre", "tire", "servicing"),
    "chef": ("chef", "cooking", "catering", "caterer", "kitchen"),
    "photographer": ("photographer", "photography", "photo", "camera", "portrait", "studio"),
}

_TOKEN_RE = re.compile(r"\w+", re.UNICODE)


def _singular(word: str) -> str | None:
    if len(word) > 3 and word.endswith("s"):
        return word[:-1]
    return None


def query_terms(query: str) -> set[str]:
    """Content words of the query plus their synonym and trade families.

    Plural words also contribute their singular form, so "plumbers" both
    matches "plumber" in text and pulls in the plumber trade terms.
    """
    words = {
        w
        for w in _TOKEN_RE.findall(query.lower())
        if w not in STOP_WORDS and (len(w) > 2 or w in SYNONYMS)
    }
    words.update(s for s in map(_singular, list(words)) if s)
    terms = set(words)
    for trade, family in TRADE_TERMS.items():
        if trade in words:
            terms.update(family)
    for key, family in SYNONYMS.items():
        if any(w == key or w in family for w in words):
            terms.update(family)
    return terms


def candidate_text(candidate: Candidate) -> str:
    parts = [
        candidate.title,
        candidate.description,
        candidate.place_name,
        candidate.service_name,
        " ".join(candidate.labels),
    ]
    return " ".join(p for p in parts if p).lower()


def keyword_match(terms: set[str], candidate: Candidate) -> bool:
    """True when any query term appears in the candidate's text."""
    if not terms:
        return False
    haystack = candidate_text(candidate)
    return any(term in haystack for term in terms)


def passes(candidate: Candidate, terms: set[str], config: SearchConfig) -> bool:
    """Apply the gate to one candidate; both thresholds are inclusive."""
    if candidate.similarity >= config.similarity_threshold:
        return True
    if not config.keyword_filtering_enabled:
        return False
    if candidate.similarity < config.keyword_filter_threshold:
        return False
    return keyword_match(terms, candidate)


def filter_candidates(
    query: str,
    candidates: Iterable[Candidate],
    config: SearchConfig,
) -> list[Candidate]:
    """Keep the candidates that pass the gate, preserving their order."""
    terms = query_terms(query)
    kept: list[Candidate] = []
    for candidate in candidates:
        keep = passes(candidate, terms, config)
        if config.debug_logging:
            logger.debug(
                "candidate rec=%s sim=%.4f keep=%s",
                candidate.recommendation_id,
                candidate.similarity,
                keep,
            )
        if keep:
            kept.append(candidate)
    return kept
