"""
TourStack Backend — Museum Model

Owner of tours. A single default museum is created lazily the first time a
tour is created, so a fresh install needs no setup step.
"""

from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from tourstack.database import Base
from tourstack.models.types import JSONText, new_id, utcnow

DEFAULT_MUSEUM_NAME = "My Museum"
DEFAULT_BRANDING = {"primaryColor": "#6366f1", "secondaryColor": "#8b5cf6"}


class Museum(Base):
    __tablename__ = "museums"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    location: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    logo: Mapped[Optional[str]] = mapped_column(String(512), nullable=True)
    branding: Mapped[Dict[str, Any]] = mapped_column(JSONText, nullable=False, default=dict)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    def __repr__(self) -> str:
        return f"<Museum(id={self.id}, name='{self.name}')>"
