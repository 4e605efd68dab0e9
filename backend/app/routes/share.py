"""
Snapbook Backend - Public Share Routes
=======================================

What:  Read-only view of a published scrapbook and the photos shown in it.
         GET /api/share/{token}                      scrapbook and memories
         GET /api/share/{token}/photos/{photo_id}    photo bytes
       No X-User-ID required; anyone with the link can read it.
"""

import uuid

from fastapi import APIRouter, Depends, Response
from fastapi.responses import FileResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.routes.media import stored_file_response
from app.schemas.common import ErrorResponse
from app.schemas.scrapbook import SharedScrapbookResponse
from app.services.share_service import share_service

router = APIRouter(prefix="/api/share", tags=["Share"])

# Short public cache: revoking a link should take effect quickly
SHARED_CACHE_CONTROL = "public, max-age=60"


@router.get(
    "/{token}",
    response_model=SharedScrapbookResponse,
    responses={404: {"description": "Unknown or revoked link", "model": ErrorResponse}},
    summary="Read a shared scrapbook",
)
async def get_shared_scrapbook(
    token: str,
    response: Response,
    db: AsyncSession = Depends(get_db_session),
) -> SharedScrapbookResponse:
    result = await share_service.get_shared_scrapbook(db, token)
    response.headers["Cache-Control"] = SHARED_CACHE_CONTROL
    return result


@router.get(
    "/{token}/photos/{photo_id}",
    summary="Serve a photo of a shared scrapbook",
    responses={
        200: {"description": "Image file"},
        404: {"description": "Unknown or revoked link, or unknown photo", "model": ErrorResponse},
    },
)
async def get_shared_photo(
    token: str,
    photo_id: uuid.UUID,
    db: AsyncSession = Depends(get_db_session),
) -> FileResponse:
    storage_path = await share_service.get_shared_photo_path(db, token, photo_id)
    return stored_file_response(storage_path, SHARED_CACHE_CONTROL)
