"""
TourStack Backend — Media Model

One row per file in the media library. `url` is the public path under
/uploads; `filename` is the name the file had on the uploader's machine.
"""

from datetime import datetime
from typing import List, Optional

from sqlalchemy import DateTime, Float, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from tourstack.database import Base
from tourstack.models.types import JSONText, new_id, utcnow


class Media(Base):
    __tablename__ = "media"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    museum_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("museums.id", ondelete="SET NULL"), nullable=True
    )
    filename: Mapped[str] = mapped_column(String(512), nullable=False)
    mime_type: Mapped[str] = mapped_column(String(128), nullable=False)
    size: Mapped[int] = mapped_column(Integer, nullable=False)
    url: Mapped[str] = mapped_column(String(1024), nullable=False, index=True)
    alt: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    caption: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    # NULL for rows created by a sync; exposed as [] in responses
    tags: Mapped[Optional[List[str]]] = mapped_column(JSONText, nullable=True)
    width: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    height: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    duration: Mapped[Optional[float]] = mapped_column(Float, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    __table_args__ = (
        Index("idx_media_created_at", created_at.desc()),
    )

    def __repr__(self) -> str:
        return f"<Media(id={self.id}, url='{self.url}', mime_type='{self.mime_type}')>"
