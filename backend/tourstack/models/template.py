"""
TourStack Backend — Template Model
====================================

What:  ORM model for the `templates` table.
Why:   A template names a positioning technology (QR code, GPS, BLE beacon,
       NFC, ...) and the custom fields a stop using it must fill in.
Who:   TemplateService (CRUD + seeding); TourService picks one per tour.

customFields is a list of field definitions, e.g.
    {"id": "latitude", "name": "Latitude", "type": "number", "required": true}
stored through JSONText, so it is always a list when read back.
"""

from datetime import datetime
from typing import Any, Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from tourstack.database import Base
from tourstack.models.types import JSONText, new_id, utcnow


class Template(Base):
    __tablename__ = "templates"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    museum_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("museums.id", ondelete="SET NULL"), nullable=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    icon: Mapped[str] = mapped_column(String(32), nullable=False, default="📍")
    built_in: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    custom_fields: Mapped[Any] = mapped_column(JSONText, nullable=False, default=list)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    def __repr__(self) -> str:
        return f"<Template(id={self.id}, name='{self.name}', built_in={self.built_in})>"
