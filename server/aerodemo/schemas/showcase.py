"""Showcase (carousel and pilot roster) schemas."""

from datetime import datetime

from pydantic import BaseModel, Field

from .common import wire_field


class CarouselImage(BaseModel):
    """Carousel image response schema."""

    id: str
    url: str
    title: str
    description: str
    order: int
    created_at: datetime = wire_field("created_at", "createdAt")

    model_config = {"from_attributes": True}


class Pilot(BaseModel):
    """Pilot roster entry response schema."""

    id: str
    name: str
    position: str
    photo_url: str = wire_field("photo_url", "photoURL")
    order: int
    created_at: datetime = wire_field("created_at", "createdAt")

    model_config = {"from_attributes": True}


class CarouselList(BaseModel):
    items: list[CarouselImage] = Field(default_factory=list)


class PilotList(BaseModel):
    items: list[Pilot] = Field(default_factory=list)
