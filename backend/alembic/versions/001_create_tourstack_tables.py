"""Create TourStack tables

Revision ID: 001
Revises: None
Create Date: 2026-10-18 00:00:00.000000+00:00

What:  Museums, templates, tours, stops, media and generated_audio.
How:   Portable types only (String ids, TEXT for JSON values) so the same
       migration runs on SQLite and PostgreSQL.

Rollback: downgrade() drops every table (destructive).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "museums",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("location", sa.String(255), nullable=True),
        sa.Column("logo", sa.String(512), nullable=True),
        sa.Column("branding", sa.Text(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "templates",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("museum_id", sa.String(36), nullable=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("icon", sa.String(32), nullable=False),
        sa.Column("built_in", sa.Boolean(), nullable=False),
        # JSON array of field definitions
        sa.Column("custom_fields", sa.Text(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["museum_id"], ["museums.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "tours",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("museum_id", sa.String(36), nullable=False),
        sa.Column("template_id", sa.String(36), nullable=True),
        sa.Column("slug", sa.String(64), nullable=False),
        sa.Column("status", sa.String(32), nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("hero_image", sa.String(1024), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("languages", sa.Text(), nullable=False),
        sa.Column("primary_language", sa.String(16), nullable=False),
        sa.Column("duration", sa.Integer(), nullable=False),
        sa.Column("difficulty", sa.String(32), nullable=False),
        sa.Column("primary_positioning_method", sa.String(32), nullable=False),
        sa.Column("backup_positioning_method", sa.String(32), nullable=True),
        sa.Column("accessibility", sa.Text(), nullable=False),
        sa.Column("published_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.Column("concierge_enabled", sa.Boolean(), nullable=False),
        sa.Column("concierge_persona", sa.String(64), nullable=True),
        sa.Column("concierge_welcome", sa.Text(), nullable=True),
        sa.Column("concierge_collections", sa.Text(), nullable=True),
        sa.Column("concierge_quick_actions", sa.Text(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["museum_id"], ["museums.id"]),
        sa.ForeignKeyConstraint(["template_id"], ["templates.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("slug"),
    )
    # Tour list is ordered by most recently edited
    op.create_index("idx_tours_updated_at", "tours", [sa.text("updated_at DESC")])

    op.create_table(
        "stops",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("tour_id", sa.String(36), nullable=False),
        sa.Column("slug", sa.String(64), nullable=False),
        sa.Column("order", sa.Integer(), nullable=False),
        sa.Column("type", sa.String(32), nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        # Plain URL or JSON object
        sa.Column("image", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("custom_field_values", sa.Text(), nullable=False),
        sa.Column("primary_positioning", sa.Text(), nullable=False),
        sa.Column("backup_positioning", sa.Text(), nullable=True),
        sa.Column("triggers", sa.Text(), nullable=False),
        sa.Column("interactive", sa.Text(), nullable=True),
        sa.Column("links", sa.Text(), nullable=False),
        sa.Column("accessibility", sa.Text(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["tour_id"], ["tours.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("tour_id", "slug", name="uq_stops_tour_slug"),
    )
    op.create_index("ix_stops_tour_id", "stops", ["tour_id"])

    op.create_table(
        "media",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("museum_id", sa.String(36), nullable=True),
        sa.Column("filename", sa.String(512), nullable=False),
        sa.Column("mime_type", sa.String(128), nullable=False),
        sa.Column("size", sa.Integer(), nullable=False),
        sa.Column("url", sa.String(1024), nullable=False),
        sa.Column("alt", sa.Text(), nullable=True),
        sa.Column("caption", sa.Text(), nullable=True),
        sa.Column("tags", sa.Text(), nullable=True),
        sa.Column("width", sa.Integer(), nullable=True),
        sa.Column("height", sa.Integer(), nullable=True),
        sa.Column("duration", sa.Float(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["museum_id"], ["museums.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_media_url", "media", ["url"])
    op.create_index("idx_media_created_at", "media", [sa.text("created_at DESC")])

    op.create_table(
        "generated_audio",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("text", sa.Text(), nullable=False),
        sa.Column("voice_id", sa.String(128), nullable=False),
        sa.Column("voice_name", sa.String(255), nullable=False),
        sa.Column("language_code", sa.String(16), nullable=False),
        sa.Column("encoding", sa.String(16), nullable=False),
        sa.Column("sample_rate", sa.Integer(), nullable=False),
        sa.Column("file_path", sa.String(512), nullable=False),
        sa.Column("file_url", sa.String(512), nullable=False),
        sa.Column("file_size", sa.Integer(), nullable=False),
        sa.Column("provider", sa.String(32), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("file_path"),
    )
    op.create_index("idx_generated_audio_created_at", "generated_audio", [sa.text("created_at DESC")])


def downgrade() -> None:
    op.drop_index("idx_generated_audio_created_at", table_name="generated_audio")
    op.drop_table("generated_audio")
    op.drop_index("idx_media_created_at", table_name="media")
    op.drop_index("ix_media_url", table_name="media")
    op.drop_table("media")
    op.drop_index("ix_stops_tour_id", table_name="stops")
    op.drop_table("stops")
    op.drop_index("idx_tours_updated_at", table_name="tours")
    op.drop_table("tours")
    op.drop_table("templates")
    op.drop_table("museums")
