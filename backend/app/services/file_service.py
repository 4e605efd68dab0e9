"""
Snapbook Backend - Photo File Storage
======================================

What:  Writes, resolves, and deletes photo files under the storage root.
How:   Async writes with aiofiles; storage paths are built only from ids the
       server generated (user id, scrapbook id, memory id, fresh UUID), never
       from the client's filename.
Who:   PhotoService (upload/delete), ScrapbookService and MemoryService
       (cascade cleanup), and the /api/files route (serving).

Directory Structure:
    storage/
    └── <user_id>/
        └── <scrapbook_id>/
            └── <memory_id>/
                ├── 3f0c...e1.jpg
                └── 9b7a...42.png

Size limits:
    `validate_size` enforces settings.max_photo_size against both the
    declared Content-Length and the bytes actually received.
"""

import logging
import os
import uuid
from pathlib import Path
from typing import Iterable, Optional

import aiofiles

from app.config import settings
from app.exceptions import FileStorageError, FileTooLargeError, ValidationError

logger = logging.getLogger(__name__)


class FileService:
    """
    Manages the on-disk lifecycle of uploaded photos.

    Lifecycle:
        1. PhotoService validates and (if needed) converts the image
        2. build_storage_path() picks <user>/<scrapbook>/<memory>/<uuid><ext>
        3. store_file() writes the bytes
        4. The relative path is persisted in memory_photos.storage_path
        5. delete_files() removes them again when the photo, memory or
           scrapbook is deleted (best effort)
    """

    def __init__(self, storage_root: Optional[str] = None):
        self.storage_root = Path(storage_root or settings.storage_root).resolve()
        self.storage_root.mkdir(parents=True, exist_ok=True)
        logger.info("FileService initialized with storage_root=%s", self.storage_root)

    # ── Validation ────────────────────────────────────────────────────────

    def validate_size(self, content_length: Optional[int], actual_size: int) -> None:
        """
        Rejects empty uploads and uploads above settings.max_photo_size.

        Raises:
            ValidationError: empty file
            FileTooLargeError: declared or actual size above the limit
        """
        if actual_size == 0:
            raise ValidationError(message="Uploaded file is empty.", field="files")

        if content_length and content_length > settings.max_photo_size:
            raise FileTooLargeError(size=content_length, max_size=settings.max_photo_size)

        if actual_size > settings.max_photo_size:
            raise FileTooLargeError(size=actual_size, max_size=settings.max_photo_size)

    # ── Paths ─────────────────────────────────────────────────────────────

    def build_storage_path(
        self,
        user_id: str,
        scrapbook_id: uuid.UUID,
        memory_id: uuid.UUID,
        extension: str,
    ) -> str:
        """Returns `<user_id>/<scrapbook_id>/<memory_id>/<uuid><extension>`."""
        return f"{user_id}/{scrapbook_id}/{memory_id}/{uuid.uuid4()}{extension}"

    def resolve(self, storage_path: str) -> Path:
        """
        Maps a storage path to an absolute path inside the storage root.

        Raises:
            ValidationError: the path escapes the storage root (../ tricks).
        """
        full_path = (self.storage_root / storage_path).resolve()
        if full_path != self.storage_root and self.storage_root not in full_path.parents:
            raise ValidationError(message="Invalid file path", field="path")
        return full_path

    def public_url(self, storage_path: str) -> str:
        return f"{settings.public_files_prefix.rstrip('/')}/{storage_path}"

    # ── Write / Delete ────────────────────────────────────────────────────

    async def store_file(self, storage_path: str, content: bytes) -> str:
        """
        Writes `content` at `storage_path` and returns the absolute path.

        Raises:
            FileStorageError: directory creation or the write failed.
        """
        absolute_path = self.resolve(storage_path)
        try:
            absolute_path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(absolute_path, "wb") as f:
                await f.write(content)
        except OSError as e:
            logger.error("Failed to store file at %s: %s", absolute_path, e)
            raise FileStorageError(
                message="Failed to save uploaded photo. Please try again.",
                context={"path": storage_path, "os_error": str(e)},
            )

        logger.info("File stored: %s (%d bytes)", storage_path, len(content))
        return str(absolute_path)

    async def cleanup_file(self, file_path: str) -> None:
        """
        Removes one file if it exists.

        Best effort: a missing file is fine and any other failure is logged,
        not raised, because the database row is already gone or going.
        """
        try:
            path = Path(file_path)
            if path.exists():
                os.remove(path)
                logger.info("Cleaned up file: %s", path.name)
            else:
                logger.debug("Cleanup: file already gone: %s", path.name)
        except OSError as e:
            logger.warning("Failed to clean up file %s: %s", file_path, e)

    async def delete_files(self, storage_paths: Iterable[str]) -> int:
        """Deletes every stored photo in `storage_paths`; returns how many were attempted."""
        count = 0
        for storage_path in storage_paths:
            try:
                absolute_path = self.resolve(storage_path)
            except ValidationError:
                logger.warning("Refusing to delete path outside storage root: %s", storage_path)
                continue
            await self.cleanup_file(str(absolute_path))
            count += 1
        return count


file_service = FileService()
