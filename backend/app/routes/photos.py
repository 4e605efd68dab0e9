"""
Snapbook Backend - Photo Route Handlers
========================================

What:  Batch photo upload for a memory and single photo deletion.

Upload status codes:
    201  at least one file was stored (failures listed in `errors`)
    400  every file failed; the body still carries the per-file `errors`
"""

import logging
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, File, Response, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.dependencies import get_current_user_id
from app.schemas.common import ErrorResponse
from app.schemas.memory import PhotoUploadResponse
from app.services.photo_service import IncomingFile, photo_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Photos"])


@router.post(
    "/memories/{memory_id}/photos",
    response_model=PhotoUploadResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"description": "No file could be stored", "model": PhotoUploadResponse},
        404: {"description": "Memory not found", "model": ErrorResponse},
    },
    summary="Upload one or more photos to a memory",
    description=(
        "Accepts JPEG, PNG, GIF, WebP and HEIC/HEIF (converted to JPEG). "
        "Each file is handled independently."
    ),
)
async def upload_photos(
    memory_id: UUID,
    response: Response,
    files: List[UploadFile] = File(..., description="Image files"),
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> PhotoUploadResponse:
    incoming = []
    try:
        for upload in files:
            incoming.append(
                IncomingFile(
                    filename=upload.filename or "photo",
                    content_type=upload.content_type,
                    content=await upload.read(),
                )
            )
    finally:
        for upload in files:
            await upload.close()

    result = await photo_service.upload_photos(db, user_id, memory_id, incoming)
    if not result.photos:
        response.status_code = status.HTTP_400_BAD_REQUEST
    return result


@router.delete(
    "/photos/{photo_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"description": "Photo not found", "model": ErrorResponse}},
    summary="Delete a photo",
)
async def delete_photo(
    photo_id: UUID,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    await photo_service.delete_photo(db, user_id, photo_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
