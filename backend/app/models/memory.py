"""
Snapbook Backend - Memory and MemoryPhoto SQLAlchemy Models
============================================================

What:  ORM models for the `memories` and `memory_photos` tables.
Who:   MemoryService, PhotoService, ShareService.

Ordering:
    Every memory carries an integer `sort_order`. Display order is ascending
    sort_order, ties broken by created_at ascending (see services/ordering.py).
    Keys are not required to be dense or positive: top inserts go below the
    current minimum, bottom inserts above the current maximum, and only a
    manual move renumbers the scrapbook to 1..N.

Memory types:
    note  - date, free-text note, optional song fields, photos
    song  - song link + fetched metadata, `note` used as the caption
"""

import uuid
from datetime import date as date_type, datetime, timezone
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import Date, DateTime, ForeignKey, Index, Integer, String, Text, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base

if TYPE_CHECKING:
    from app.models.scrapbook import Scrapbook


MEMORY_TYPE_NOTE = "note"
MEMORY_TYPE_SONG = "song"
MEMORY_TYPES = (MEMORY_TYPE_NOTE, MEMORY_TYPE_SONG)


class Memory(Base):
    """A single dated entry in a scrapbook."""

    __tablename__ = "memories"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    scrapbook_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("scrapbooks.id", ondelete="CASCADE"),
        nullable=False,
    )

    type: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=MEMORY_TYPE_NOTE,
        server_default=text("'note'"),
    )

    date: Mapped[Optional[date_type]] = mapped_column(Date, nullable=True, default=None)

    note: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        default="",
        server_default=text("''"),
    )

    # ── Song fields ───────────────────────────────────────────────────────
    song_title: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    song_artist: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    song_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    song_album_art_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    sort_order: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        server_default=text("0"),
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    scrapbook: Mapped["Scrapbook"] = relationship(back_populates="memories")

    # selectin: photos are always rendered together with their memory
    photos: Mapped[List["MemoryPhoto"]] = relationship(
        back_populates="memory",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="selectin",
        order_by="MemoryPhoto.created_at",
    )

    __table_args__ = (
        Index("idx_memories_scrapbook_order", "scrapbook_id", "sort_order", "created_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<Memory(id={self.id}, type='{self.type}', "
            f"sort_order={self.sort_order})>"
        )


class MemoryPhoto(Base):
    """A stored photo attached to a memory."""

    __tablename__ = "memory_photos"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    memory_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("memories.id", ondelete="CASCADE"),
        nullable=False,
    )

    # Format: <user_id>/<scrapbook_id>/<memory_id>/<uuid>.<ext>
    storage_path: Mapped[str] = mapped_column(String(512), nullable=False)

    caption: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    memory: Mapped["Memory"] = relationship(back_populates="photos")

    __table_args__ = (
        Index("idx_memory_photos_memory", "memory_id"),
    )

    def __repr__(self) -> str:
        return f"<MemoryPhoto(id={self.id}, storage_path='{self.storage_path}')>"
