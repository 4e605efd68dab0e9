"""
Snapbook Backend - Scrapbook Service (Business Logic)
======================================================

What:  Owner-side scrapbook CRUD plus publishing/unpublishing the share link.
Who:   Called by routes/scrapbooks.py.

Title:
    Always derived as "<name_a> + <name_b>" from the trimmed names; clients
    never set it directly.

Sharing:
    share() issues a random UUID token on the first call and returns the
    same token afterwards; unshare() clears it, after which the public URL
    answers 404.
"""

import logging
import uuid
from datetime import datetime, timezone

from sqlalchemy import desc, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import DatabaseError, ValidationError
from app.models import Memory, MemoryPhoto, Scrapbook
from app.schemas.scrapbook import (
    ScrapbookCreate,
    ScrapbookDetailResponse,
    ScrapbookListResponse,
    ScrapbookResponse,
    ScrapbookUpdate,
    ShareLinkResponse,
)
from app.services.file_service import file_service
from app.services.memory_service import load_ordered_memories, to_memory_response
from app.services.ownership import get_owned_scrapbook

logger = logging.getLogger(__name__)


def _require_names(name_a: str, name_b: str) -> None:
    if not name_a:
        raise ValidationError(message="Both names are required.", field="name_a")
    if not name_b:
        raise ValidationError(message="Both names are required.", field="name_b")


def share_path(token: uuid.UUID) -> str:
    return f"/share/{token}"


class ScrapbookService:
    """
    Business logic for scrapbooks.

    Every method takes the caller's user id; scrapbooks of other users are
    invisible (404) through ownership.get_owned_scrapbook.
    """

    async def create_scrapbook(
        self, db: AsyncSession, user_id: str, data: ScrapbookCreate
    ) -> ScrapbookResponse:
        _require_names(data.name_a, data.name_b)

        scrapbook = Scrapbook(
            user_id=user_id,
            name_a=data.name_a,
            name_b=data.name_b,
            title=Scrapbook.compose_title(data.name_a, data.name_b),
            created_at=datetime.now(timezone.utc),
        )
        try:
            db.add(scrapbook)
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Failed to create scrapbook for user %s: %s", user_id, e)
            raise DatabaseError(
                message="Could not create the scrapbook. Please try again.",
                context={"user_id": user_id},
            )

        logger.info("Scrapbook %s created: %r", scrapbook.id, scrapbook.title)
        return ScrapbookResponse.model_validate(scrapbook)

    async def list_scrapbooks(self, db: AsyncSession, user_id: str) -> ScrapbookListResponse:
        """The caller's scrapbooks, newest first."""
        try:
            result = await db.execute(
                select(Scrapbook)
                .where(Scrapbook.user_id == user_id)
                .order_by(desc(Scrapbook.created_at))
            )
            scrapbooks = result.scalars().all()
        except SQLAlchemyError as e:
            logger.error("Failed to list scrapbooks for user %s: %s", user_id, e)
            raise DatabaseError(message="Could not retrieve scrapbooks. Please try again.")

        return ScrapbookListResponse(
            scrapbooks=[ScrapbookResponse.model_validate(s) for s in scrapbooks]
        )

    async def get_scrapbook(
        self, db: AsyncSession, user_id: str, scrapbook_id: uuid.UUID
    ) -> ScrapbookDetailResponse:
        """A scrapbook with its memories in display order, photos included."""
        scrapbook = await get_owned_scrapbook(db, user_id, scrapbook_id)
        memories = await load_ordered_memories(db, scrapbook.id)

        return ScrapbookDetailResponse(
            **ScrapbookResponse.model_validate(scrapbook).model_dump(),
            memories=[to_memory_response(m) for m in memories],
        )

    async def update_scrapbook(
        self,
        db: AsyncSession,
        user_id: str,
        scrapbook_id: uuid.UUID,
        data: ScrapbookUpdate,
    ) -> ScrapbookResponse:
        _require_names(data.name_a, data.name_b)
        scrapbook = await get_owned_scrapbook(db, user_id, scrapbook_id)

        scrapbook.name_a = data.name_a
        scrapbook.name_b = data.name_b
        scrapbook.title = Scrapbook.compose_title(data.name_a, data.name_b)

        try:
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Failed to update scrapbook %s: %s", scrapbook_id, e)
            raise DatabaseError(
                message="Could not save the scrapbook. Please try again.",
                context={"scrapbook_id": str(scrapbook_id)},
            )

        logger.info("Scrapbook %s renamed to %r", scrapbook.id, scrapbook.title)
        return ScrapbookResponse.model_validate(scrapbook)

    async def delete_scrapbook(
        self, db: AsyncSession, user_id: str, scrapbook_id: uuid.UUID
    ) -> None:
        """
        Deletes a scrapbook. Photo files of every memory are removed first
        (best effort); memory and photo rows go with the ON DELETE CASCADE.
        """
        scrapbook = await get_owned_scrapbook(db, user_id, scrapbook_id)

        result = await db.execute(
            select(MemoryPhoto.storage_path)
            .join(Memory, MemoryPhoto.memory_id == Memory.id)
            .where(Memory.scrapbook_id == scrapbook.id)
        )
        removed = await file_service.delete_files(result.scalars().all())

        try:
            await db.delete(scrapbook)
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Failed to delete scrapbook %s: %s", scrapbook_id, e)
            raise DatabaseError(
                message="Could not delete the scrapbook. Please try again.",
                context={"scrapbook_id": str(scrapbook_id)},
            )

        logger.info("Scrapbook %s deleted (%d photo files removed)", scrapbook_id, removed)

    # ── Sharing ───────────────────────────────────────────────────────────

    async def share(
        self, db: AsyncSession, user_id: str, scrapbook_id: uuid.UUID
    ) -> ShareLinkResponse:
        scrapbook = await get_owned_scrapbook(db, user_id, scrapbook_id)

        if scrapbook.share_token is None:
            scrapbook.share_token = uuid.uuid4()
            try:
                await db.flush()
            except SQLAlchemyError as e:
                logger.error("Failed to publish scrapbook %s: %s", scrapbook_id, e)
                raise DatabaseError(
                    message="Could not create a share link. Please try again.",
                    context={"scrapbook_id": str(scrapbook_id)},
                )
            logger.info("Scrapbook %s published", scrapbook.id)

        return ShareLinkResponse(
            share_token=scrapbook.share_token,
            share_path=share_path(scrapbook.share_token),
        )

    async def unshare(
        self, db: AsyncSession, user_id: str, scrapbook_id: uuid.UUID
    ) -> None:
        scrapbook = await get_owned_scrapbook(db, user_id, scrapbook_id)
        if scrapbook.share_token is None:
            return

        scrapbook.share_token = None
        try:
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Failed to unpublish scrapbook %s: %s", scrapbook_id, e)
            raise DatabaseError(
                message="Could not revoke the share link. Please try again.",
                context={"scrapbook_id": str(scrapbook_id)},
            )
        logger.info("Scrapbook %s unpublished", scrapbook.id)


scrapbook_service = ScrapbookService()
