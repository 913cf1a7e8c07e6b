"""
TourStack Backend — Stop Model
================================

What:  ORM model for the `stops` table: one point of interest in a tour.
Who:   StopService, TourService (nested updates, duplicate), MediaService (usage).

`content` is the ordered list of content blocks (text, image, audio,
gallery, map, ...). `image` is a FlexibleJSONText: older rows hold a bare
URL, newer rows an object with url/alt/caption.

Slugs are unique within a tour, not globally; the visitor URL is
/visitor/tour/<tour slug>/stop/<stop slug>.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from tourstack.database import Base
from tourstack.models.types import FlexibleJSONText, JSONText, new_id, utcnow


class Stop(Base):
    __tablename__ = "stops"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    tour_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("tours.id", ondelete="CASCADE"), nullable=False, index=True
    )
    slug: Mapped[str] = mapped_column(String(64), nullable=False)
    order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    type: Mapped[str] = mapped_column(String(32), nullable=False, default="mandatory")

    title: Mapped[Dict[str, Any]] = mapped_column(JSONText, nullable=False, default=dict)
    image: Mapped[Any] = mapped_column(FlexibleJSONText, nullable=False, default="")
    description: Mapped[Dict[str, Any]] = mapped_column(JSONText, nullable=False, default=dict)
    content: Mapped[List[Any]] = mapped_column(JSONText, nullable=False, default=list)
    custom_field_values: Mapped[Dict[str, Any]] = mapped_column(JSONText, nullable=False, default=dict)
    primary_positioning: Mapped[Dict[str, Any]] = mapped_column(JSONText, nullable=False, default=dict)
    backup_positioning: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSONText, nullable=True)
    triggers: Mapped[Dict[str, Any]] = mapped_column(JSONText, nullable=False, default=dict)
    interactive: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSONText, nullable=True)
    links: Mapped[List[Any]] = mapped_column(JSONText, nullable=False, default=list)
    accessibility: Mapped[Dict[str, Any]] = mapped_column(JSONText, nullable=False, default=dict)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    __table_args__ = (
        UniqueConstraint("tour_id", "slug", name="uq_stops_tour_slug"),
    )

    def __repr__(self) -> str:
        return f"<Stop(id={self.id}, tour_id={self.tour_id}, order={self.order})>"
