"""Enlistment-related Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from ..models.enlistment import AviationKnowledge, EnlistmentStatus, YesNo
from .common import EMAIL_PATTERN, wire_field


class SubmitEnlistmentRequest(BaseModel):
    """Public enlistment application. Any submitted status is ignored."""

    first_name: str = Field(..., alias="nome", min_length=1, max_length=128)
    last_name: str = Field(..., alias="sobrenome", min_length=1, max_length=128)
    email: str = Field(..., max_length=320, pattern=EMAIL_PATTERN)
    discord_nick: str = Field(..., alias="discordNick", min_length=1, max_length=128)
    motivation: str = Field(..., alias="motivoEntrada", min_length=1, max_length=5000)
    aviation_knowledge: AviationKnowledge = Field(..., alias="conhecimentoAviao")
    age: str = Field(..., alias="idade", pattern=r"^\d{1,3}$")
    sim_flight_experience: YesNo = Field(..., alias="vooFivem")
    knows_team: YesNo = Field(..., alias="conheceEsquadrilha")
    shifts: list[str] = Field(..., alias="turno", min_length=1, max_length=16)

    model_config = {"populate_by_name": True, "str_strip_whitespace": True}

    @field_validator("shifts")
    @classmethod
    def normalize_shifts(cls, v: list[str]) -> list[str]:
        """Drop blank labels and duplicates, keeping first-seen order."""
        shifts = list(dict.fromkeys(label.strip() for label in v if label.strip()))
        if not shifts:
            raise ValueError("At least one shift must be selected")
        return shifts


class EnlistmentStatusRequest(BaseModel):
    """Request schema for an enlistment status change."""

    id: str = Field(..., min_length=1, max_length=64, description="Application to update")
    status: EnlistmentStatus = Field(..., description="New status")


class ListEnlistmentsRequest(BaseModel):
    """Admin listing filter."""

    status: EnlistmentStatus | None = Field(None, description="Only applications with this status")


class Enlistment(BaseModel):
    """Enlistment response schema."""

    id: str = Field(..., description="Unique application ID")
    first_name: str = wire_field("first_name", "nome")
    last_name: str = wire_field("last_name", "sobrenome")
    email: str = Field(..., description="Contact email")
    discord_nick: str = wire_field("discord_nick", "discordNick")
    motivation: str = wire_field("motivation", "motivoEntrada")
    aviation_knowledge: AviationKnowledge = wire_field("aviation_knowledge", "conhecimentoAviao")
    age: str = wire_field("age", "idade")
    sim_flight_experience: YesNo = wire_field("sim_flight_experience", "vooFivem")
    knows_team: YesNo = wire_field("knows_team", "conheceEsquadrilha")
    shifts: list[str] = wire_field("shifts", "turno")
    user_ip: str = wire_field("user_ip", "userIP")
    status: EnlistmentStatus = Field(..., description="Application status")
    created_at: datetime = wire_field("created_at", "createdAt", description="Creation time (ISO 8601)")

    model_config = {"from_attributes": True}


class EnlistmentList(BaseModel):
    """Full materialized application listing."""

    items: list[Enlistment] = Field(default_factory=list, description="Applications")
