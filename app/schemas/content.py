"""Typed ``content_data`` payloads, one variant per content type."""

from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class _ContentBase(BaseModel):
    model_config = ConfigDict(extra="forbid")


class PlaceContent(_ContentBase):
    content_type: Literal["place"] = "place"
    notes: Optional[str] = None
    went_with: list[str] = Field(default_factory=list)
    visit_date: Optional[str] = None
    price_level: Optional[int] = Field(None, ge=1, le=4)
    price_label: Optional[str] = None


class ServiceContent(_ContentBase):
    content_type: Literal["service"] = "service"
    notes: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    price_text: Optional[str] = None
    availability: Optional[str] = None


class TipContent(_ContentBase):
    content_type: Literal["tip"] = "tip"
    tip: Optional[str] = None
    category: Optional[str] = None


class ContactContent(_ContentBase):
    content_type: Literal["contact"] = "contact"
    name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    role: Optional[str] = None


class UnclearContent(_ContentBase):
    content_type: Literal["unclear"] = "unclear"
    raw: dict[str, Any] = Field(default_factory=dict)


ContentData = Annotated[
    Union[PlaceContent, ServiceContent, TipContent, ContactContent, UnclearContent],
    Field(discriminator="content_type"),
]

CONTENT_MODELS: dict[str, type[_ContentBase]] = {
    "place": PlaceContent,
    "service": ServiceContent,
    "tip": TipContent,
    "contact": ContactContent,
    "unclear": UnclearContent,
}

PRICE_LABELS = {1: "budget", 2: "moderate", 3: "higher-end", 4: "luxury"}


def empty_content(content_type: str) -> _ContentBase:
    """Default payload for a content type when the client sent none."""
    return CONTENT_MODELS[content_type]()


def parse_content(content_type: str, data: dict[str, Any] | None) -> _ContentBase:
    """Validate a stored JSONB blob against its variant."""
    payload = dict(data or {})
    payload.setdefault("content_type", content_type)
    return CONTENT_MODELS[content_type].model_validate(payload)
