"""Presentation (booking request) model definition."""

from datetime import date as date_type
from datetime import datetime
from enum import Enum

from sqlalchemy import CheckConstraint, Date, DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from ..core.database import Base
from .common import new_record_id, utcnow


class PresentationStatus(str, Enum):
    """Presentation status enumeration."""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    RESCHEDULED = "rescheduled"
    CANCELED = "canceled"


class Presentation(Base):
    """Booking request for an aerial demonstration."""

    __tablename__ = "presentations"

    # Primary key
    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_record_id)

    # Request details
    city: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(320), nullable=False)
    date: Mapped[date_type] = mapped_column(Date, nullable=False, index=True)
    time: Mapped[str] = mapped_column(String(5), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    discord_id: Mapped[str] = mapped_column("discordId", String(128), nullable=False)
    status: Mapped[PresentationStatus] = mapped_column(
        String(20),
        nullable=False,
        default=PresentationStatus.PENDING,
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
        CheckConstraint("length(city) > 0", name="ck_presentation_city_not_empty"),
        CheckConstraint("length(time) > 0", name="ck_presentation_time_not_empty"),
        CheckConstraint(
            "status IN ('pending', 'approved', 'rejected', 'rescheduled', 'canceled')",
            name="ck_presentation_status_valid"
        ),
    )

    def __repr__(self) -> str:
        return (
            f"<Presentation(id={self.id}, city='{self.city}', date={self.date}, "
            f"time='{self.time}', status={self.status})>"
        )
