"""
Snapbook Backend - Owner-Scoped Lookups
========================================

What:  Fetches a scrapbook, memory or photo only if it belongs to the caller.
Who:   Every owner-side service (scrapbooks, memories, photos).

Rows belonging to another user are reported exactly like missing rows
(NotFoundError → 404).
"""

import uuid
from typing import Tuple

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import NotFoundError
from app.models import Memory, MemoryPhoto, Scrapbook


async def get_owned_scrapbook(
    db: AsyncSession, user_id: str, scrapbook_id: uuid.UUID
) -> Scrapbook:
    result = await db.execute(
        select(Scrapbook).where(
            Scrapbook.id == scrapbook_id,
            Scrapbook.user_id == user_id,
        )
    )
    scrapbook = result.scalar_one_or_none()
    if scrapbook is None:
        raise NotFoundError(resource="scrapbook", resource_id=str(scrapbook_id))
    return scrapbook


async def get_owned_memory(
    db: AsyncSession, user_id: str, memory_id: uuid.UUID
) -> Tuple[Memory, Scrapbook]:
    """Returns the memory together with its scrapbook (needed for storage paths)."""
    result = await db.execute(
        select(Memory, Scrapbook)
        .join(Scrapbook, Memory.scrapbook_id == Scrapbook.id)
        .where(Memory.id == memory_id, Scrapbook.user_id == user_id)
    )
    row = result.first()
    if row is None:
        raise NotFoundError(resource="memory", resource_id=str(memory_id))
    return row[0], row[1]


async def get_owned_photo(
    db: AsyncSession, user_id: str, photo_id: uuid.UUID
) -> MemoryPhoto:
    result = await db.execute(
        select(MemoryPhoto)
        .join(Memory, MemoryPhoto.memory_id == Memory.id)
        .join(Scrapbook, Memory.scrapbook_id == Scrapbook.id)
        .where(MemoryPhoto.id == photo_id, Scrapbook.user_id == user_id)
    )
    photo = result.scalar_one_or_none()
    if photo is None:
        raise NotFoundError(resource="photo", resource_id=str(photo_id))
    return photo
