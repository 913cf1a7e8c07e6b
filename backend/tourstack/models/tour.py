"""
TourStack Backend — Tour Model
================================

What:  ORM model for the `tours` table.
Why:   A tour is the unit visitors follow: localized title/description,
       languages, accessibility flags, positioning method and an ordered
       list of stops.
Who:   TourService (CRUD, duplicate), StopService (parent lookup),
       MediaService (hero image usage).

Localized fields (title, description, conciergeWelcome) are maps of
language code to text, e.g. {"en": "Highlights", "fr": "Incontournables"}.

Stops are loaded eagerly (selectin) and ordered by `order`, so any Tour
read through the async session already carries its stops; nothing lazy-loads
during response serialization.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tourstack.database import Base
from tourstack.models.stop import Stop
from tourstack.models.types import JSONText, new_id, utcnow

DEFAULT_ACCESSIBILITY = {
    "wheelchairAccessible": True,
    "audioDescriptions": False,
    "signLanguage": False,
    "tactileElements": False,
    "quietSpaceFriendly": False,
}


class Tour(Base):
    __tablename__ = "tours"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    museum_id: Mapped[str] = mapped_column(String(36), ForeignKey("museums.id"), nullable=False)
    template_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("templates.id", ondelete="SET NULL"), nullable=True
    )
    slug: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    status: Mapped[str] = mapped_column(String(32), nullable=False, default="draft")

    title: Mapped[Dict[str, Any]] = mapped_column(JSONText, nullable=False, default=dict)
    hero_image: Mapped[str] = mapped_column(String(1024), nullable=False, default="")
    description: Mapped[Dict[str, Any]] = mapped_column(JSONText, nullable=False, default=dict)
    languages: Mapped[List[str]] = mapped_column(JSONText, nullable=False, default=lambda: ["en"])
    primary_language: Mapped[str] = mapped_column(String(16), nullable=False, default="en")
    duration: Mapped[int] = mapped_column(Integer, nullable=False, default=30)
    difficulty: Mapped[str] = mapped_column(String(32), nullable=False, default="general")
    primary_positioning_method: Mapped[str] = mapped_column(String(32), nullable=False, default="qr_code")
    backup_positioning_method: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    accessibility: Mapped[Dict[str, Any]] = mapped_column(JSONText, nullable=False, default=dict)

    published_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    # ── Concierge ─────────────────────────────────────────────────────────
    concierge_enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    concierge_persona: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    concierge_welcome: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSONText, nullable=True)
    concierge_collections: Mapped[Optional[List[Any]]] = mapped_column(JSONText, nullable=True)
    concierge_quick_actions: Mapped[Optional[List[Any]]] = mapped_column(JSONText, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    stops: Mapped[List[Stop]] = relationship(
        Stop,
        order_by=Stop.order,
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    __table_args__ = (
        Index("idx_tours_updated_at", updated_at.desc()),
    )

    def __repr__(self) -> str:
        return f"<Tour(id={self.id}, slug='{self.slug}', status='{self.status}')>"
