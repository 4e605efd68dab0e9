"""
Snapbook Backend - Memory Service (Business Logic)
===================================================

What:  Creates, edits, deletes, reorders and song-enriches the memories of a
       scrapbook.
How:   Ordering rules come from services/ordering.py; this module loads and
       persists. All writes are flushed into the request's transaction and
       committed (or rolled back) by get_db_session.
Who:   Called by routes/memories.py and routes/scrapbooks.py.

Workflows:
    add      → next_sort_order(existing keys, position) → INSERT
    move     → load in display order → ordering.move() → flush all N keys
    delete   → remove photo files → DELETE (photo rows cascade)
    enrich   → TrackMetadataProvider.fetch_track_metadata() → UPDATE song fields
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import DatabaseError, NotFoundError, ValidationError
from app.models import MEMORY_TYPE_SONG, Memory, MemoryPhoto
from app.schemas.memory import (
    MemoryCreate,
    MemoryListResponse,
    MemoryResponse,
    MemoryUpdate,
    PhotoResponse,
)
from app.services import ordering
from app.services.file_service import file_service
from app.services.metadata_base import TrackMetadataProvider
from app.services.ownership import get_owned_memory, get_owned_scrapbook
from app.services.spotify_service import spotify_service

logger = logging.getLogger(__name__)


# ── Response builders ─────────────────────────────────────────────────────


def to_photo_response(photo: MemoryPhoto) -> PhotoResponse:
    return PhotoResponse(
        id=photo.id,
        storage_path=photo.storage_path,
        url=file_service.public_url(photo.storage_path),
        caption=photo.caption,
        created_at=photo.created_at,
    )


def to_memory_response(memory: Memory) -> MemoryResponse:
    return MemoryResponse(
        id=memory.id,
        scrapbook_id=memory.scrapbook_id,
        type=memory.type,
        date=memory.date,
        note=memory.note,
        song_title=memory.song_title,
        song_artist=memory.song_artist,
        song_url=memory.song_url,
        song_album_art_url=memory.song_album_art_url,
        sort_order=memory.sort_order,
        created_at=memory.created_at,
        photos=[to_photo_response(p) for p in memory.photos],
    )


async def load_ordered_memories(db: AsyncSession, scrapbook_id: uuid.UUID) -> List[Memory]:
    """All memories of a scrapbook in display order (photos eager-loaded)."""
    result = await db.execute(
        select(Memory)
        .where(Memory.scrapbook_id == scrapbook_id)
        .order_by(Memory.sort_order.asc(), Memory.created_at.asc())
    )
    return list(result.scalars().all())


class MemoryService:
    """
    Business logic for memories.

    Attributes:
        metadata_provider: resolves song links; defaults to Spotify.
    """

    def __init__(self, metadata_provider: Optional[TrackMetadataProvider] = None):
        self.metadata_provider = metadata_provider or spotify_service

    async def list_memories(
        self, db: AsyncSession, user_id: str, scrapbook_id: uuid.UUID
    ) -> MemoryListResponse:
        scrapbook = await get_owned_scrapbook(db, user_id, scrapbook_id)
        memories = await load_ordered_memories(db, scrapbook.id)
        return MemoryListResponse(memories=[to_memory_response(m) for m in memories])

    async def add_memory(
        self,
        db: AsyncSession,
        user_id: str,
        scrapbook_id: uuid.UUID,
        data: MemoryCreate,
    ) -> MemoryResponse:
        """
        Inserts an empty memory at the top or bottom of the scrapbook.

        Only the new row is written; existing keys never change on insert.
        """
        scrapbook = await get_owned_scrapbook(db, user_id, scrapbook_id)

        try:
            result = await db.execute(
                select(Memory.sort_order).where(Memory.scrapbook_id == scrapbook.id)
            )
            sort_order = ordering.next_sort_order(result.scalars().all(), data.position)

            memory = Memory(
                scrapbook_id=scrapbook.id,
                type=data.type,
                note="",
                sort_order=sort_order,
                created_at=datetime.now(timezone.utc),
                photos=[],
            )
            db.add(memory)
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Failed to add memory to scrapbook %s: %s", scrapbook_id, e)
            raise DatabaseError(
                message="Could not add the memory. Please try again.",
                context={"scrapbook_id": str(scrapbook_id)},
            )

        logger.info(
            "Memory %s added to scrapbook %s (type=%s, position=%s, sort_order=%d)",
            memory.id,
            scrapbook.id,
            memory.type,
            data.position,
            sort_order,
        )
        return to_memory_response(memory)

    async def update_memory(
        self,
        db: AsyncSession,
        user_id: str,
        memory_id: uuid.UUID,
        data: MemoryUpdate,
    ) -> MemoryResponse:
        memory, _ = await get_owned_memory(db, user_id, memory_id)

        changes = data.model_dump(exclude_unset=True)
        for field, value in changes.items():
            setattr(memory, field, value)

        try:
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Failed to update memory %s: %s", memory_id, e)
            raise DatabaseError(
                message="Could not save the memory. Please try again.",
                context={"memory_id": str(memory_id)},
            )

        logger.info("Memory %s updated: %s", memory_id, sorted(changes))
        return to_memory_response(memory)

    async def delete_memory(
        self, db: AsyncSession, user_id: str, memory_id: uuid.UUID
    ) -> None:
        """Removes the memory's photo files, then the memory and its photo rows."""
        memory, _ = await get_owned_memory(db, user_id, memory_id)

        removed = await file_service.delete_files([p.storage_path for p in memory.photos])

        try:
            await db.delete(memory)
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Failed to delete memory %s: %s", memory_id, e)
            raise DatabaseError(
                message="Could not delete the memory. Please try again.",
                context={"memory_id": str(memory_id)},
            )

        logger.info("Memory %s deleted (%d photo files removed)", memory_id, removed)

    async def move_memory(
        self,
        db: AsyncSession,
        user_id: str,
        memory_id: uuid.UUID,
        direction: ordering.Direction,
    ) -> MemoryListResponse:
        """
        Moves a memory one slot up or down and returns the full new order.

        A move past either end changes nothing. Otherwise every memory of the
        scrapbook is renumbered 1..N and all N rows are flushed together, so
        the request transaction commits all of them or none.
        """
        memory, scrapbook = await get_owned_memory(db, user_id, memory_id)
        memories = await load_ordered_memories(db, scrapbook.id)

        index = next((i for i, m in enumerate(memories) if m.id == memory.id), None)
        if index is None:
            raise NotFoundError(resource="memory", resource_id=str(memory_id))

        reordered = ordering.move(memories, index, direction)
        if reordered is None:
            logger.debug("Memory %s already at the %s edge", memory_id, direction)
            return MemoryListResponse(memories=[to_memory_response(m) for m in memories])

        try:
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Failed to persist new order for scrapbook %s: %s", scrapbook.id, e)
            raise DatabaseError(
                message="Could not reorder memories. Please try again.",
                context={"scrapbook_id": str(scrapbook.id)},
            )

        logger.info(
            "Memory %s moved %s in scrapbook %s (%d keys renumbered)",
            memory_id,
            direction,
            scrapbook.id,
            len(reordered),
        )
        return MemoryListResponse(memories=[to_memory_response(m) for m in reordered])

    async def enrich_song(
        self,
        db: AsyncSession,
        user_id: str,
        memory_id: uuid.UUID,
        url: str,
    ) -> MemoryResponse:
        """
        Attaches a song link and its fetched metadata to a song memory.

        The artist is only overwritten when the lookup found one.

        Raises:
            ValidationError: the memory is not a song memory, or the link is
                             not a Spotify track link.
            MetadataServiceError: the metadata lookup failed.
        """
        memory, _ = await get_owned_memory(db, user_id, memory_id)
        if memory.type != MEMORY_TYPE_SONG:
            raise ValidationError(
                message="Song metadata can only be attached to song memories",
                field="type",
                context={"memory_id": str(memory_id), "type": memory.type},
            )

        url = url.strip()
        metadata = await self.metadata_provider.fetch_track_metadata(url)

        memory.song_url = url
        memory.song_title = metadata.title
        memory.song_album_art_url = metadata.thumbnail_url
        if metadata.artist:
            memory.song_artist = metadata.artist

        try:
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Failed to save song metadata on memory %s: %s", memory_id, e)
            raise DatabaseError(
                message="Could not save the song. Please try again.",
                context={"memory_id": str(memory_id)},
            )

        return to_memory_response(memory)


memory_service = MemoryService()
