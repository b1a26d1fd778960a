"""Presentation-related Pydantic schemas."""

import re
from datetime import date as date_type
from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from ..models.presentation import PresentationStatus
from .common import EMAIL_PATTERN, TIME_PATTERN, wire_field


class SubmitPresentationRequest(BaseModel):
    """Public booking request. Any submitted status is ignored."""

    city: str = Field(..., min_length=1, max_length=255, description="Host city")
    email: str = Field("", max_length=320, description="Contact email")
    date: date_type = Field(..., description="Requested show date")
    time: str = Field(..., pattern=TIME_PATTERN, description="Requested local time (HH:MM)")
    description: str = Field(..., min_length=10, max_length=5000, description="Event description")
    discord_id: str = Field("", alias="discordId", max_length=128, description="Contact chat handle")

    model_config = {"populate_by_name": True, "str_strip_whitespace": True}

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        if v and not re.match(EMAIL_PATTERN, v):
            raise ValueError("Invalid email address")
        return v


class CreatePresentationRequest(BaseModel):
    """Booking created by an administrator on behalf of a requester."""

    city: str = Field(..., min_length=1, max_length=255, description="Host city")
    date: date_type = Field(..., description="Show date")
    time: str = Field(..., pattern=TIME_PATTERN, description="Local time (HH:MM)")
    description: str = Field(..., min_length=10, max_length=5000, description="Event description")
    status: PresentationStatus = Field(PresentationStatus.PENDING, description="Initial status")

    model_config = {"str_strip_whitespace": True}


class EditPresentationRequest(BaseModel):
    """Full-field edit of an existing booking."""

    city: str = Field(..., min_length=1, max_length=255, description="Host city")
    date: date_type = Field(..., description="Show date")
    time: str = Field(..., pattern=TIME_PATTERN, description="Local time (HH:MM)")
    description: str = Field(..., min_length=1, max_length=5000, description="Event description")
    status: PresentationStatus = Field(..., description="Status after the edit")

    model_config = {"str_strip_whitespace": True}


class EditPresentationCommand(EditPresentationRequest):
    """Edit request addressed to a booking."""

    id: str = Field(..., min_length=1, max_length=64, description="Booking to edit")


class PresentationStatusRequest(BaseModel):
    """Request schema for a booking status change."""

    id: str = Field(..., min_length=1, max_length=64, description="Booking to update")
    status: PresentationStatus = Field(..., description="New status")


class ListPresentationsRequest(BaseModel):
    """Admin listing filter."""

    status: PresentationStatus | None = Field(None, description="Only bookings with this status")


class Presentation(BaseModel):
    """Presentation response schema."""

    id: str = Field(..., description="Unique booking ID")
    city: str = Field(..., description="Host city")
    email: str = Field(..., description="Contact email")
    date: date_type = Field(..., description="Show date")
    time: str = Field(..., description="Local time (HH:MM)")
    description: str = Field(..., description="Event description")
    discord_id: str = wire_field("discord_id", "discordId", description="Contact chat handle")
    status: PresentationStatus = Field(..., description="Booking status")
    created_at: datetime = wire_field("created_at", "createdAt", description="Creation time (ISO 8601)")

    model_config = {"from_attributes": True}


class UpcomingPresentation(BaseModel):
    """Public view of an approved booking; contact details are withheld."""

    id: str = Field(..., description="Unique booking ID")
    city: str = Field(..., description="Host city")
    date: date_type = Field(..., description="Show date")
    time: str = Field(..., description="Local time (HH:MM)")
    description: str = Field(..., description="Event description")

    model_config = {"from_attributes": True}


class PresentationList(BaseModel):
    """Full materialized booking listing."""

    items: list[Presentation] = Field(default_factory=list, description="Bookings")


class UpcomingPresentationList(BaseModel):
    """Approved bookings from today onwards, earliest first."""

    items: list[UpcomingPresentation] = Field(default_factory=list, description="Upcoming shows")
