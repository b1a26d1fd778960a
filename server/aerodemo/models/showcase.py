"""Read-only showcase collections displayed on the public pages."""

from datetime import datetime

from sqlalchemy import DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from ..core.database import Base
from .common import new_record_id, utcnow


class CarouselImage(Base):
    """Image shown in the home page carousel."""

    __tablename__ = "carousel"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_record_id)
    url: Mapped[str] = mapped_column(String(2048), nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    order: Mapped[int] = mapped_column(Integer, nullable=False, default=0, index=True)
    created_at: Mapped[datetime] = mapped_column(
        "createdAt", DateTime(timezone=True), nullable=False, default=utcnow
    )

    def __repr__(self) -> str:
        return f"<CarouselImage(id={self.id}, title='{self.title}', order={self.order})>"


class Pilot(Base):
    """Member of the pilot roster."""

    __tablename__ = "pilots"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_record_id)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    position: Mapped[str] = mapped_column(String(128), nullable=False)
    photo_url: Mapped[str] = mapped_column("photoURL", String(2048), nullable=False, default="")
    order: Mapped[int] = mapped_column(Integer, nullable=False, default=0, index=True)
    created_at: Mapped[datetime] = mapped_column(
        "createdAt", DateTime(timezone=True), nullable=False, default=utcnow
    )

    def __repr__(self) -> str:
        return f"<Pilot(id={self.id}, name='{self.name}', position='{self.position}')>"
