"""Pydantic schemas for places and services."""

from typing import Any, Optional

from pydantic import BaseModel, Field, model_validator


class PlaceBase(BaseModel):
    name: str
    external_place_id: Optional[str] = Field(None, description="Provider place identifier")
    address: Optional[str] = None
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    category: Optional[str] = None
    details: dict[str, Any] = Field(default_factory=dict)


class PlaceCreate(PlaceBase):
    pass


class PlaceOut(PlaceBase):
    id: int

    model_config = {"from_attributes": True}


class ServiceCreate(BaseModel):
    name: str
    service_type: Optional[str] = None
    business_name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None

    @model_validator(mode="after")
    def _needs_contact(self) -> "ServiceCreate":
        if not (self.phone or self.email):
            raise ValueError("a service needs a phone number or an email")
        return self


class ServiceOut(BaseModel):
    id: int
    name: str
    service_type: Optional[str] = None
    business_name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None

    model_config = {"from_attributes": True}
