"""
Snapbook Backend - Scrapbook SQLAlchemy Model
==============================================

What:  ORM model for the `scrapbooks` table.
Who:   ScrapbookService (owner CRUD, sharing) and ShareService (public view).

Table notes:
    - user_id is the opaque id forwarded by the identity provider.
    - title is derived ("<name_a> + <name_b>") and rewritten whenever the
      names change.
    - share_token is NULL until the owner publishes the scrapbook; the public
      view is looked up by this column only.
"""

import uuid
from datetime import datetime, timezone
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import DateTime, Index, String, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base

if TYPE_CHECKING:
    from app.models.memory import Memory


class Scrapbook(Base):
    """A shared scrapbook belonging to one user and naming two people."""

    __tablename__ = "scrapbooks"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    user_id: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        comment="Owner identity forwarded by the identity provider",
    )

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    name_a: Mapped[str] = mapped_column(String(100), nullable=False)
    name_b: Mapped[str] = mapped_column(String(100), nullable=False)

    share_token: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid,
        nullable=True,
        unique=True,
        default=None,
        comment="Public read-only token; NULL while the scrapbook is private",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    # passive_deletes: the FK's ON DELETE CASCADE removes children
    memories: Mapped[List["Memory"]] = relationship(
        back_populates="scrapbook",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        Index("idx_scrapbooks_user_created", "user_id", "created_at"),
    )

    @staticmethod
    def compose_title(name_a: str, name_b: str) -> str:
        return f"{name_a} + {name_b}"

    def __repr__(self) -> str:
        return f"<Scrapbook(id={self.id}, title='{self.title}')>"
