"""Schemas for the recommendation write path."""

from datetime import datetime
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field, model_validator

from app.schemas.content import ContentData

ContentType = Literal["place", "service", "tip", "contact", "unclear"]
Visibility = Literal["friends", "public"]


def _inject_content_type(data: Any) -> Any:
    """Let clients omit the discriminator inside ``content_data``."""
    if isinstance(data, dict):
        content = data.get("content_data")
        content_type = data.get("content_type")
        if isinstance(content, dict) and content_type and "content_type" not in content:
            data = {**data, "content_data": {**content, "content_type": content_type}}
    return data


def _check_entity_refs(content_type: Optional[str], place_id: Any, service_id: Any) -> None:
    if place_id is not None and service_id is not None:
        raise ValueError("a recommendation references a place or a service, not both")
    if place_id is not None and content_type != "place":
        raise ValueError("place_id is only allowed for place recommendations")
    if service_id is not None and content_type != "service":
        raise ValueError("service_id is only allowed for service recommendations")


class RecommendationCreate(BaseModel):
    user_id: str
    content_type: ContentType
    place_id: Optional[int] = None
    service_id: Optional[int] = None
    title: Optional[str] = Field(None, max_length=255)
    description: str = Field(..., min_length=1)
    content_data: Optional[ContentData] = None
    rating: Optional[int] = Field(None, ge=1, le=5)
    visibility: Visibility = "friends"
    labels: list[str] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _discriminator(cls, data: Any) -> Any:
        return _inject_content_type(data)

    @model_validator(mode="after")
    def _consistent(self) -> "RecommendationCreate":
        _check_entity_refs(self.content_type, self.place_id, self.service_id)
        if self.content_data is not None and self.content_data.content_type != self.content_type:
            raise ValueError("content_data does not match content_type")
        return self


class RecommendationUpdate(BaseModel):
    """Partial update; any text change triggers embedding regeneration."""

    content_type: Optional[ContentType] = None
    place_id: Optional[int] = None
    service_id: Optional[int] = None
    title: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = Field(None, min_length=1)
    content_data: Optional[ContentData] = None
    rating: Optional[int] = Field(None, ge=1, le=5)
    visibility: Optional[Visibility] = None
    labels: Optional[list[str]] = None

    @model_validator(mode="before")
    @classmethod
    def _discriminator(cls, data: Any) -> Any:
        return _inject_content_type(data)


class RecommendationOut(BaseModel):
    id: int
    user_id: str
    content_type: ContentType
    place_id: Optional[int] = None
    service_id: Optional[int] = None
    title: Optional[str] = None
    description: str
    content_data: dict[str, Any] = Field(default_factory=dict)
    rating: Optional[int] = None
    visibility: Visibility
    labels: list[str] = Field(default_factory=list)
    has_embedding: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class EmbeddingStatus(BaseModel):
    recommendation_id: int
    queued: bool
