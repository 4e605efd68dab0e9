"""
Snapbook Backend - Scrapbook Route Handlers
============================================

What:  Owner-side scrapbook CRUD, share links, and the memory collection of
       a scrapbook (list + add).
Who:   Called by the dashboard and the scrapbook editor.

Every handler requires X-User-ID (get_current_user_id); other users'
scrapbooks answer 404.
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.dependencies import get_current_user_id
from app.schemas.common import ErrorResponse
from app.schemas.memory import MemoryCreate, MemoryListResponse, MemoryResponse
from app.schemas.scrapbook import (
    ScrapbookCreate,
    ScrapbookDetailResponse,
    ScrapbookListResponse,
    ScrapbookResponse,
    ScrapbookUpdate,
    ShareLinkResponse,
)
from app.services.memory_service import memory_service
from app.services.scrapbook_service import scrapbook_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/scrapbooks", tags=["Scrapbooks"])

NOT_FOUND = {404: {"description": "Scrapbook not found", "model": ErrorResponse}}


@router.post(
    "",
    response_model=ScrapbookResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"description": "Blank name", "model": ErrorResponse}},
    summary="Create a scrapbook",
)
async def create_scrapbook(
    body: ScrapbookCreate,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> ScrapbookResponse:
    return await scrapbook_service.create_scrapbook(db, user_id, body)


@router.get(
    "",
    response_model=ScrapbookListResponse,
    summary="List the caller's scrapbooks, newest first",
)
async def list_scrapbooks(
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> ScrapbookListResponse:
    return await scrapbook_service.list_scrapbooks(db, user_id)


@router.get(
    "/{scrapbook_id}",
    response_model=ScrapbookDetailResponse,
    responses=NOT_FOUND,
    summary="Get a scrapbook with its memories in display order",
)
async def get_scrapbook(
    scrapbook_id: UUID,
    response: Response,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> ScrapbookDetailResponse:
    result = await scrapbook_service.get_scrapbook(db, user_id, scrapbook_id)
    # Editor data changes constantly; never let a shared cache keep it
    response.headers["Cache-Control"] = "private, no-store"
    return result


@router.patch(
    "/{scrapbook_id}",
    response_model=ScrapbookResponse,
    responses=NOT_FOUND,
    summary="Rename the two people (title is recomputed)",
)
async def update_scrapbook(
    scrapbook_id: UUID,
    body: ScrapbookUpdate,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> ScrapbookResponse:
    return await scrapbook_service.update_scrapbook(db, user_id, scrapbook_id, body)


@router.delete(
    "/{scrapbook_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses=NOT_FOUND,
    summary="Delete a scrapbook, its memories and stored photos",
)
async def delete_scrapbook(
    scrapbook_id: UUID,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    await scrapbook_service.delete_scrapbook(db, user_id, scrapbook_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ── Sharing ───────────────────────────────────────────────────────────────


@router.post(
    "/{scrapbook_id}/share",
    response_model=ShareLinkResponse,
    responses=NOT_FOUND,
    summary="Publish the scrapbook (idempotent)",
)
async def share_scrapbook(
    scrapbook_id: UUID,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> ShareLinkResponse:
    return await scrapbook_service.share(db, user_id, scrapbook_id)


@router.delete(
    "/{scrapbook_id}/share",
    status_code=status.HTTP_204_NO_CONTENT,
    responses=NOT_FOUND,
    summary="Revoke the share link",
)
async def unshare_scrapbook(
    scrapbook_id: UUID,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    await scrapbook_service.unshare(db, user_id, scrapbook_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ── Memories of a scrapbook ───────────────────────────────────────────────


@router.get(
    "/{scrapbook_id}/memories",
    response_model=MemoryListResponse,
    responses=NOT_FOUND,
    summary="List memories in display order",
)
async def list_memories(
    scrapbook_id: UUID,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> MemoryListResponse:
    return await memory_service.list_memories(db, user_id, scrapbook_id)


@router.post(
    "/{scrapbook_id}/memories",
    response_model=MemoryResponse,
    status_code=status.HTTP_201_CREATED,
    responses=NOT_FOUND,
    summary="Add an empty memory at the top or bottom",
)
async def add_memory(
    scrapbook_id: UUID,
    body: MemoryCreate,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> MemoryResponse:
    return await memory_service.add_memory(db, user_id, scrapbook_id, body)
