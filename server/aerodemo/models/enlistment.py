"""Enlistment application model definition."""

from datetime import datetime
from enum import Enum

from sqlalchemy import JSON, CheckConstraint, DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from ..core.database import Base
from .common import new_record_id, utcnow


class EnlistmentStatus(str, Enum):
    """Enlistment status enumeration."""
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    APPROVED = "approved"
    REJECTED = "rejected"


class AviationKnowledge(str, Enum):
    """Whether the applicant already knows aviation."""
    HAS_KNOWLEDGE = "has-knowledge"
    WILLING_TO_LEARN = "willing-to-learn"


class YesNo(str, Enum):
    """Two-valued answers stored as text."""
    YES = "sim"
    NO = "nao"


class Enlistment(Base):
    """Application to join the demonstration squadron."""

    __tablename__ = "alistamentos"

    # Primary key
    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_record_id)

    # Applicant
    first_name: Mapped[str] = mapped_column("nome", String(128), nullable=False)
    last_name: Mapped[str] = mapped_column("sobrenome", String(128), nullable=False)
    email: Mapped[str] = mapped_column(String(320), nullable=False)
    discord_nick: Mapped[str] = mapped_column("discordNick", String(128), nullable=False)
    age: Mapped[str] = mapped_column("idade", String(8), nullable=False)

    # Questionnaire
    motivation: Mapped[str] = mapped_column("motivoEntrada", Text, nullable=False)
    aviation_knowledge: Mapped[AviationKnowledge] = mapped_column(
        "conhecimentoAviao", String(32), nullable=False
    )
    sim_flight_experience: Mapped[YesNo] = mapped_column("vooFivem", String(8), nullable=False)
    knows_team: Mapped[YesNo] = mapped_column("conheceEsquadrilha", String(8), nullable=False)
    shifts: Mapped[list[str]] = mapped_column("turno", JSON, nullable=False, default=list)

    # Request context
    user_ip: Mapped[str] = mapped_column("userIP", String(64), nullable=False)

    status: Mapped[EnlistmentStatus] = mapped_column(
        String(20),
        nullable=False,
        default=EnlistmentStatus.PENDING,
        index=True
    )

    # Set once on creation, never updated
    created_at: Mapped[datetime] = mapped_column(
        "createdAt",
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        index=True
    )

    # Constraints
    __table_args__ = (
        CheckConstraint(
            "status IN ('pending', 'in_progress', 'approved', 'rejected')",
            name="ck_enlistment_status_valid"
        ),
        CheckConstraint(
            "\"conhecimentoAviao\" IN ('has-knowledge', 'willing-to-learn')",
            name="ck_enlistment_aviation_knowledge_valid"
        ),
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def __repr__(self) -> str:
        return (
            f"<Enlistment(id={self.id}, name='{self.full_name}', "
            f"discord_nick='{self.discord_nick}', status={self.status})>"
        )
