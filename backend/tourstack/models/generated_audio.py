"""
TourStack Backend — Generated Audio Model
===========================================

What:  Tracks every audio file written by the text-to-speech endpoint.
Why:   Synthesized files land in uploads/audio/generated/. Without a row per
       file there is no way to list them or to remove one without leaving
       an orphan on disk. Deleting a row through the TTS service deletes
       its file as well.
"""

from datetime import datetime

from sqlalchemy import DateTime, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from tourstack.database import Base
from tourstack.models.types import new_id, utcnow


class GeneratedAudio(Base):
    __tablename__ = "generated_audio"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    text: Mapped[str] = mapped_column(Text, nullable=False)
    voice_id: Mapped[str] = mapped_column(String(128), nullable=False)
    voice_name: Mapped[str] = mapped_column(String(255), nullable=False)
    language_code: Mapped[str] = mapped_column(String(16), nullable=False)
    encoding: Mapped[str] = mapped_column(String(16), nullable=False)
    sample_rate: Mapped[int] = mapped_column(Integer, nullable=False)
    # Relative to the uploads root, e.g. "audio/generated/<uuid>.mp3"
    file_path: Mapped[str] = mapped_column(String(512), nullable=False, unique=True)
    file_url: Mapped[str] = mapped_column(String(512), nullable=False)
    file_size: Mapped[int] = mapped_column(Integer, nullable=False)
    provider: Mapped[str] = mapped_column(String(32), nullable=False, default="google_cloud")

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    __table_args__ = (
        Index("idx_generated_audio_created_at", created_at.desc()),
    )

    def __repr__(self) -> str:
        return f"<GeneratedAudio(id={self.id}, file_path='{self.file_path}')>"
