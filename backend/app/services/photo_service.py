"""
Snapbook Backend - Photo Service (Upload Pipeline)
===================================================

What:  Batch photo upload for a memory and single photo deletion.
How:   Composes ImageService (sniffing, HEIC conversion) and FileService
       (storage) and inserts one memory_photos row per stored file.
Who:   Called by routes/photos.py.

Per-file pipeline:
    ┌──────────┐   ┌────────┐   ┌──────────────────┐   ┌───────┐   ┌────────┐
    │ image/*? │──▶│  size  │──▶│ HEIC → JPEG  or  │──▶│ store │──▶│ INSERT │
    │ or HEIC  │   │ ≤ max  │   │ sniff real format│   │ file  │   │  row   │
    └──────────┘   └────────┘   └──────────────────┘   └───────┘   └────────┘

    Files are independent: a failure at any step is recorded as
    {filename, message} in the response's `errors` and the next file is
    processed. A failed HEIC conversion is reported as
    "Failed to convert HEIC: <decoder message>".
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import (
    DatabaseError,
    ImageConversionError,
    SnapbookError,
    ValidationError,
)
from app.models import MemoryPhoto
from app.schemas.memory import PhotoUploadError, PhotoUploadResponse
from app.services.file_service import file_service
from app.services.image_service import image_service, is_heic, is_image_upload
from app.services.memory_service import to_photo_response
from app.services.ownership import get_owned_memory, get_owned_photo

logger = logging.getLogger(__name__)


@dataclass
class IncomingFile:
    """One multipart part, already read into memory by the route."""
    filename: str
    content_type: Optional[str]
    content: bytes


class PhotoService:

    async def upload_photos(
        self,
        db: AsyncSession,
        user_id: str,
        memory_id: uuid.UUID,
        files: Sequence[IncomingFile],
    ) -> PhotoUploadResponse:
        """
        Stores every acceptable file of a batch and attaches it to the memory.

        Returns:
            PhotoUploadResponse with the stored photos and one error entry per
            rejected file. The route turns "nothing stored" into a 400.
        """
        memory, scrapbook = await get_owned_memory(db, user_id, memory_id)

        if not files:
            raise ValidationError(message="No files provided", field="files")

        response = PhotoUploadResponse()
        stored_paths: List[str] = []
        for incoming in files:
            try:
                photo = await self._store_one(db, user_id, scrapbook.id, memory.id, incoming)
            except ImageConversionError as e:
                response.errors.append(
                    PhotoUploadError(
                        filename=incoming.filename,
                        message=f"Failed to convert HEIC: {e.message}",
                    )
                )
                continue
            except DatabaseError:
                # The request rolls back, taking the rows of earlier files with it
                await file_service.delete_files(stored_paths)
                raise
            except SnapbookError as e:
                logger.info("Rejected upload %r for memory %s: %s", incoming.filename, memory_id, e.message)
                response.errors.append(
                    PhotoUploadError(filename=incoming.filename, message=e.message)
                )
                continue

            stored_paths.append(photo.storage_path)
            memory.photos.append(photo)
            response.photos.append(to_photo_response(photo))

        logger.info(
            "Upload to memory %s: %d stored, %d failed",
            memory_id,
            len(response.photos),
            len(response.errors),
        )
        return response

    async def _store_one(
        self,
        db: AsyncSession,
        user_id: str,
        scrapbook_id: uuid.UUID,
        memory_id: uuid.UUID,
        incoming: IncomingFile,
    ) -> MemoryPhoto:
        if not is_image_upload(incoming.content_type, incoming.filename):
            raise ValidationError(
                message="Only image files can be uploaded.",
                field="files",
                context={"content_type": incoming.content_type},
            )

        file_service.validate_size(None, len(incoming.content))

        if is_heic(incoming.content_type, incoming.filename):
            content = await image_service.convert_heic_to_jpeg_async(incoming.content)
            extension = ".jpg"
        else:
            content = incoming.content
            fmt = await image_service.detect_format_async(content)
            extension = image_service.storage_extension(fmt)

        storage_path = file_service.build_storage_path(user_id, scrapbook_id, memory_id, extension)
        absolute_path = await file_service.store_file(storage_path, content)

        photo = MemoryPhoto(
            memory_id=memory_id,
            storage_path=storage_path,
            created_at=datetime.now(timezone.utc),
        )
        try:
            db.add(photo)
            await db.flush()
        except SQLAlchemyError as e:
            await file_service.cleanup_file(absolute_path)
            logger.error("Failed to record photo %s: %s", storage_path, e)
            raise DatabaseError(
                message="Could not save the photo. Please try again.",
                context={"memory_id": str(memory_id)},
            )
        return photo

    async def delete_photo(self, db: AsyncSession, user_id: str, photo_id: uuid.UUID) -> None:
        """Removes the stored file, then the row."""
        photo = await get_owned_photo(db, user_id, photo_id)

        await file_service.delete_files([photo.storage_path])
        try:
            await db.delete(photo)
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Failed to delete photo %s: %s", photo_id, e)
            raise DatabaseError(
                message="Could not delete the photo. Please try again.",
                context={"photo_id": str(photo_id)},
            )
        logger.info("Photo %s deleted", photo_id)


photo_service = PhotoService()
