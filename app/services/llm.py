"""Utilities for interacting with OpenAI."""

from __future__ import annotations

from openai import OpenAI, OpenAIError
from pydantic import BaseModel, Field, ValidationError

from app.core.config import EMBEDDING_DIMENSIONS, settings
from app.core.errors import ProviderError

SUMMARY_SYSTEM_PROMPT = (
    "You are a local recommendation assistant. Answer only from the search results "
    "you are given, which come from the user's own network. Mention specific places or "
    "services, ratings and what reviewers said. Be concise and practical. "
    'Reply with JSON of the form {"summary": "<text>"} and nothing else.'
)


class SummaryPayload(BaseModel):
    """The only shape accepted back from the summarization model."""

    summary: str = Field(..., min_length=1)


class LLMService:
    """Wrapper around OpenAI APIs for embedding + summarization."""

    def __init__(self) -> None:
        if not settings.openai_api_key:
            raise ProviderError("OPENAI_API_KEY is not configured", provider="openai")
        self._client = OpenAI(
            api_key=settings.openai_api_key,
            max_retries=settings.openai_max_retries,
        )

    def embed_text(self, text: str) -> list[float]:
        """Return the OpenAI embedding vector for ``text``.

        Raises:
            ProviderError: on any API failure, timeout, or a vector of the
                wrong dimension. Callers never get a placeholder vector.
        """
        try:
            result = self._client.embeddings.create(
                model=settings.openai_embedding_model,
                input=text,
                timeout=settings.embedding_timeout_seconds,
            )
        except OpenAIError as exc:
            raise ProviderError(f"embedding request failed: {exc}", provider="embedding") from exc

        if not result.data:
            raise ProviderError("embedding response contained no vectors", provider="embedding")
        vector = list(result.data[0].embedding)
        if len(vector) != EMBEDDING_DIMENSIONS:
            raise ProviderError(
                f"embedding has {len(vector)} dimensions, expected {EMBEDDING_DIMENSIONS}",
                provider="embedding",
            )
        return vector

    def summarize(self, query: str, results_text: str) -> str:
        """Ask the model for a short narrative over pre-rendered results."""
        user_prompt = (
            f'User searched for: "{query}"\n\n'
            f"SEARCH RESULTS:\n{results_text}\n\n"
            "Start with a one-sentence answer, then highlight the two or three most "
            "relevant options with concrete details, and note caveats such as few reviews."
        )
        try:
            response = self._client.chat.completions.create(
                model=settings.openai_response_model,
                messages=[
                    {"role": "system", "content": SUMMARY_SYSTEM_PROMPT},
                    {"role": "user", "content": user_prompt},
                ],
                response_format={"type": "json_object"},
                temperature=0.2,
                max_tokens=700,
                timeout=settings.summary_timeout_seconds,
            )
        except OpenAIError as exc:
            raise ProviderError(f"summary request failed: {exc}", provider="summary") from exc

        content = response.choices[0].message.content if response.choices else None
        return parse_summary(content)


def parse_summary(content: str | None) -> str:
    """Strictly parse the model's JSON reply; anything else is a provider error."""
    if not content:
        raise ProviderError("summary response was empty", provider="summary")
    try:
        payload = SummaryPayload.model_validate_json(content)
    except ValidationError as exc:
        raise ProviderError(
            "summary response was not the expected JSON object",
            provider="summary",
            details={"error_count": exc.error_count()},
        ) from exc
    return payload.summary.strip()


_llm_service_instance: LLMService | None = None


def get_llm_service() -> LLMService:
    """Lazy initialization of LLM service."""
    global _llm_service_instance
    if _llm_service_instance is None:
        _llm_service_instance = LLMService()
    return _llm_service_instance
