"""
Snapbook Backend - Media Route Handlers
========================================

What:  Stateless media endpoints.
         GET  /api/files/{path}      stored photo bytes
         POST /api/convert-heic      HEIC/HEIF → JPEG, nothing stored
         GET  /api/song-metadata     Spotify track lookup, nothing stored
Who:   <img> tags and client-side preview/lookup helpers of the editor.
       The shared view loads its photos through routes/share.py.

None of these need X-User-ID: stored paths contain random UUIDs, and the
other two endpoints touch no user data. They are still rate limited.
"""

import logging
import mimetypes
from typing import Optional

from fastapi import APIRouter, File, Query, UploadFile
from fastapi.responses import FileResponse, Response

from app.config import settings
from app.exceptions import FileTooLargeError, NotFoundError, ValidationError
from app.schemas.common import ErrorResponse
from app.schemas.memory import TrackMetadata
from app.services.file_service import file_service
from app.services.image_service import image_service
from app.services.spotify_service import spotify_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Media"])


def stored_file_response(storage_path: str, cache_control: str) -> FileResponse:
    """FileResponse for a stored photo; 404 when nothing is stored at `storage_path`."""
    full_path = file_service.resolve(storage_path)
    if not full_path.is_file():
        raise NotFoundError(resource="file", resource_id=storage_path)

    media_type, _ = mimetypes.guess_type(full_path.name)
    return FileResponse(
        path=str(full_path),
        media_type=media_type or "application/octet-stream",
        headers={"Cache-Control": cache_control},
    )


@router.get(
    "/files/{file_path:path}",
    summary="Serve a stored photo",
    responses={
        200: {"description": "Image file"},
        400: {"description": "Path escapes the storage root", "model": ErrorResponse},
        404: {"description": "File not found", "model": ErrorResponse},
    },
)
async def serve_file(file_path: str) -> FileResponse:
    # Stored files are never rewritten in place
    return stored_file_response(file_path, "public, max-age=86400, immutable")


@router.post(
    "/convert-heic",
    summary="Convert a HEIC/HEIF image to JPEG",
    response_class=Response,
    responses={
        200: {"content": {"image/jpeg": {}}, "description": "JPEG bytes"},
        400: {"description": "No file provided", "model": ErrorResponse},
        413: {"description": "File too large", "model": ErrorResponse},
        500: {"description": "Conversion failed", "model": ErrorResponse},
    },
)
async def convert_heic(
    file: Optional[UploadFile] = File(default=None, description="HEIC/HEIF image"),
) -> Response:
    if file is None:
        raise ValidationError(message="No file provided", field="file")

    try:
        if file.size is not None and file.size > settings.max_photo_size:
            raise FileTooLargeError(size=file.size, max_size=settings.max_photo_size)
        content = await file.read()
    finally:
        await file.close()

    if len(content) > settings.max_photo_size:
        raise FileTooLargeError(size=len(content), max_size=settings.max_photo_size)

    jpeg = await image_service.convert_heic_to_jpeg_async(content)
    logger.info("Converted %s for preview (%d bytes)", file.filename or "upload", len(jpeg))
    return Response(content=jpeg, media_type="image/jpeg")


@router.get(
    "/song-metadata",
    response_model=TrackMetadata,
    responses={
        400: {"description": "Not a Spotify track link", "model": ErrorResponse},
        502: {"description": "Spotify lookup failed", "model": ErrorResponse},
    },
    summary="Look up title, artist and cover art of a Spotify track",
)
async def song_metadata(
    url: Optional[str] = Query(default=None, description="https://open.spotify.com/track/..."),
) -> TrackMetadata:
    return await spotify_service.fetch_track_metadata(url or "")
