"""Create scrapbooks, memories and memory_photos tables

Revision ID: 001
Revises: None
Create Date: 2026-10-19 00:00:00.000000+00:00

What:  Initial schema. Children cascade on delete so removing a scrapbook
       removes its memories, and removing a memory removes its photo rows.
       Photo files on disk are cleaned up by the application, not here.

Rollback: downgrade() drops all three tables (destructive).
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "scrapbooks",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False,
                  server_default=sa.text("gen_random_uuid()")),
        sa.Column("user_id", sa.String(64), nullable=False,
                  comment="Owner identity forwarded by the identity provider"),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("name_a", sa.String(100), nullable=False),
        sa.Column("name_b", sa.String(100), nullable=False),
        sa.Column("share_token", postgresql.UUID(as_uuid=True), nullable=True,
                  comment="Public read-only token; NULL while the scrapbook is private"),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), nullable=False,
                  server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("share_token", name="uq_scrapbooks_share_token"),
    )
    op.create_index("idx_scrapbooks_user_created", "scrapbooks", ["user_id", "created_at"])

    op.create_table(
        "memories",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False,
                  server_default=sa.text("gen_random_uuid()")),
        sa.Column("scrapbook_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("type", sa.String(20), nullable=False, server_default=sa.text("'note'")),
        sa.Column("date", sa.Date(), nullable=True),
        sa.Column("note", sa.Text(), nullable=False, server_default=sa.text("''")),
        sa.Column("song_title", sa.String(500), nullable=True),
        sa.Column("song_artist", sa.String(500), nullable=True),
        sa.Column("song_url", sa.Text(), nullable=True),
        sa.Column("song_album_art_url", sa.Text(), nullable=True),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), nullable=False,
                  server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["scrapbook_id"], ["scrapbooks.id"], ondelete="CASCADE"),
        sa.CheckConstraint("type IN ('note', 'song')", name="ck_memories_type"),
    )
    # Matches the display order: sort_order, then created_at
    op.create_index(
        "idx_memories_scrapbook_order",
        "memories",
        ["scrapbook_id", "sort_order", "created_at"],
    )

    op.create_table(
        "memory_photos",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False,
                  server_default=sa.text("gen_random_uuid()")),
        sa.Column("memory_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("storage_path", sa.String(512), nullable=False,
                  comment="<user_id>/<scrapbook_id>/<memory_id>/<uuid>.<ext> under STORAGE_ROOT"),
        sa.Column("caption", sa.Text(), nullable=True),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), nullable=False,
                  server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["memory_id"], ["memories.id"], ondelete="CASCADE"),
    )
    op.create_index("idx_memory_photos_memory", "memory_photos", ["memory_id"])


def downgrade() -> None:
    op.drop_index("idx_memory_photos_memory", table_name="memory_photos")
    op.drop_table("memory_photos")
    op.drop_index("idx_memories_scrapbook_order", table_name="memories")
    op.drop_table("memories")
    op.drop_index("idx_scrapbooks_user_created", table_name="scrapbooks")
    op.drop_table("scrapbooks")
