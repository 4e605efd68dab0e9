"""
Snapbook Backend - Public Share View
=====================================

What:  Renders a published scrapbook for anyone holding its share token, and
       resolves the photos of that view.
Who:   Called by routes/share.py (no authentication).

The token is checked for UUID shape before touching the database; a
malformed, unknown or revoked token is a plain 404 in every case.

Privacy:
    Storage paths start with the owner's user id, so the public view never
    returns them. Photos are served as /api/share/<token>/photos/<photo_id>,
    which only resolves while the link is live and the photo belongs to that
    scrapbook.
"""

import logging
import re
import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import NotFoundError
from app.models import Memory, MemoryPhoto, Scrapbook
from app.schemas.scrapbook import (
    SharedMemoryResponse,
    SharedPageMetadata,
    SharedPhotoResponse,
    SharedScrapbookResponse,
)
from app.services.memory_service import load_ordered_memories

logger = logging.getLogger(__name__)

UUID_RE = re.compile(
    r"[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}",
    re.IGNORECASE,
)


def page_metadata(name_a: str, name_b: str) -> SharedPageMetadata:
    return SharedPageMetadata(
        title=f"{name_a} & {name_b} - Snapbook",
        description=f"A love story between {name_a} and {name_b}",
    )


def shared_photo_url(token: uuid.UUID, photo_id: uuid.UUID) -> str:
    return f"/api/share/{token}/photos/{photo_id}"


def parse_token(token: str) -> uuid.UUID:
    # fullmatch: `$` would also accept a trailing newline
    if not UUID_RE.fullmatch(token):
        raise NotFoundError(resource="shared scrapbook")
    return uuid.UUID(token)


def to_shared_memory(memory: Memory, token: uuid.UUID) -> SharedMemoryResponse:
    return SharedMemoryResponse(
        id=memory.id,
        type=memory.type,
        date=memory.date,
        note=memory.note,
        song_title=memory.song_title,
        song_artist=memory.song_artist,
        song_url=memory.song_url,
        song_album_art_url=memory.song_album_art_url,
        photos=[
            SharedPhotoResponse(
                id=p.id,
                url=shared_photo_url(token, p.id),
                caption=p.caption,
            )
            for p in memory.photos
        ],
    )


class ShareService:

    async def get_shared_scrapbook(self, db: AsyncSession, token: str) -> SharedScrapbookResponse:
        share_token = parse_token(token)

        result = await db.execute(
            select(Scrapbook).where(Scrapbook.share_token == share_token)
        )
        scrapbook = result.scalar_one_or_none()
        if scrapbook is None:
            logger.info("Share token not found or revoked")
            raise NotFoundError(resource="shared scrapbook")

        memories = await load_ordered_memories(db, scrapbook.id)
        return SharedScrapbookResponse(
            title=scrapbook.title,
            name_a=scrapbook.name_a,
            name_b=scrapbook.name_b,
            memories=[to_shared_memory(m, share_token) for m in memories],
            metadata=page_metadata(scrapbook.name_a, scrapbook.name_b),
        )

    async def get_shared_photo_path(
        self, db: AsyncSession, token: str, photo_id: uuid.UUID
    ) -> str:
        """
        Storage path of a photo that belongs to the scrapbook shared under `token`.

        Raises:
            NotFoundError: bad or revoked token, or the photo is not part of
            that scrapbook.
        """
        share_token = parse_token(token)

        result = await db.execute(
            select(MemoryPhoto.storage_path)
            .join(Memory, MemoryPhoto.memory_id == Memory.id)
            .join(Scrapbook, Memory.scrapbook_id == Scrapbook.id)
            .where(Scrapbook.share_token == share_token, MemoryPhoto.id == photo_id)
        )
        storage_path = result.scalar_one_or_none()
        if storage_path is None:
            raise NotFoundError(resource="photo", resource_id=str(photo_id))
        return storage_path


share_service = ShareService()
