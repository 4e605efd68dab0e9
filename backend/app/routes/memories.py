"""
Snapbook Backend - Memory Route Handlers
=========================================

What:  Edit, delete, move and song-enrich a single memory.
Who:   Called by the scrapbook editor's memory cards.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.dependencies import get_current_user_id
from app.schemas.common import ErrorResponse
from app.schemas.memory import (
    MemoryListResponse,
    MemoryMove,
    MemoryResponse,
    MemoryUpdate,
    SongMetadataRequest,
)
from app.services.memory_service import memory_service

router = APIRouter(prefix="/api/memories", tags=["Memories"])

NOT_FOUND = {404: {"description": "Memory not found", "model": ErrorResponse}}


@router.patch(
    "/{memory_id}",
    response_model=MemoryResponse,
    responses=NOT_FOUND,
    summary="Partially update a memory",
)
async def update_memory(
    memory_id: UUID,
    body: MemoryUpdate,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> MemoryResponse:
    return await memory_service.update_memory(db, user_id, memory_id, body)


@router.delete(
    "/{memory_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses=NOT_FOUND,
    summary="Delete a memory and its photos",
)
async def delete_memory(
    memory_id: UUID,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    await memory_service.delete_memory(db, user_id, memory_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/{memory_id}/move",
    response_model=MemoryListResponse,
    responses=NOT_FOUND,
    summary="Move a memory one slot up or down",
    description=(
        "Returns the whole scrapbook in its new order. Moving the first memory "
        "up or the last one down returns the unchanged order."
    ),
)
async def move_memory(
    memory_id: UUID,
    body: MemoryMove,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> MemoryListResponse:
    return await memory_service.move_memory(db, user_id, memory_id, body.direction)


@router.post(
    "/{memory_id}/song-metadata",
    response_model=MemoryResponse,
    responses={
        **NOT_FOUND,
        400: {"description": "Not a song memory or not a Spotify track link", "model": ErrorResponse},
        502: {"description": "Spotify lookup failed", "model": ErrorResponse},
    },
    summary="Attach a Spotify track to a song memory",
)
async def enrich_song(
    memory_id: UUID,
    body: SongMetadataRequest,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> MemoryResponse:
    return await memory_service.enrich_song(db, user_id, memory_id, body.url)
