"""create_content_versioning_tables

Revision ID: a1b2c3d4e5f6
Revises:
Create Date: 2026-10-19

Creates the content tables (content, content_metadata, tags, content_tags)
and the append-only `content_versions` log keyed by (content_id, version).
"""

from __future__ import annotations

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "a1b2c3d4e5f6"
down_revision: str | None = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "content",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("title", sa.String, nullable=False),
        sa.Column("body", sa.Text, nullable=True),
        sa.Column("content_type", sa.String(50), nullable=False),
        sa.Column("resource_url", sa.String, nullable=True),
        sa.Column("hierarchy_id", sa.String(36), nullable=True),
        sa.Column("is_archived", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("archived_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("author_id", sa.String, nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_content_title", "content", ["title"])
    op.create_index("ix_content_hierarchy_id", "content", ["hierarchy_id"])
    op.create_index("ix_content_author_id", "content", ["author_id"])
    op.create_index("idx_content_archived", "content", ["is_archived"])

    op.create_table(
        "content_metadata",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column(
            "content_id",
            sa.String(36),
            sa.ForeignKey("content.id", ondelete="CASCADE"),
            nullable=False,
            unique=True,
        ),
        sa.Column("subject", sa.String, nullable=True),
        sa.Column("topic", sa.String, nullable=True),
        sa.Column("difficulty", sa.String(50), nullable=True),
        sa.Column("duration", sa.Integer, nullable=True),
        sa.Column("prerequisites", sa.Text, nullable=True),
    )
    op.create_index("ix_content_metadata_id", "content_metadata", ["id"])

    op.create_table(
        "tags",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("name", sa.String, nullable=False),
    )
    op.create_index("ix_tags_id", "tags", ["id"])
    op.create_index("ix_tags_name", "tags", ["name"], unique=True)

    op.create_table(
        "content_tags",
        sa.Column("content_id", sa.String(36), sa.ForeignKey("content.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("tag_id", sa.Integer, sa.ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True),
    )

    op.create_table(
        "content_versions",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "content_id",
            sa.String(36),
            sa.ForeignKey("content.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("version", sa.Integer, nullable=False),
        sa.Column("snapshot", sa.JSON, nullable=False),
        sa.Column("change_note", sa.Text, nullable=True),
        sa.Column("created_by", sa.String, nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("content_id", "version", name="uq_content_versions_content_version"),
    )
    op.create_index("ix_content_versions_content_id", "content_versions", ["content_id"])


def downgrade() -> None:
    op.drop_index("ix_content_versions_content_id", table_name="content_versions")
    op.drop_table("content_versions")
    op.drop_table("content_tags")
    op.drop_index("ix_tags_name", table_name="tags")
    op.drop_index("ix_tags_id", table_name="tags")
    op.drop_table("tags")
    op.drop_index("ix_content_metadata_id", table_name="content_metadata")
    op.drop_table("content_metadata")
    op.drop_index("idx_content_archived", table_name="content")
    op.drop_index("ix_content_author_id", table_name="content")
    op.drop_index("ix_content_hierarchy_id", table_name="content")
    op.drop_index("ix_content_title", table_name="content")
    op.drop_table("content")
