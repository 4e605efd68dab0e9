"""
Snapbook Backend - File Service Unit Tests
===========================================

Covers size limits, storage path layout, path-traversal protection, and the
best-effort cleanup used when photos, memories or scrapbooks are deleted.
"""

import uuid
from pathlib import Path
from unittest.mock import patch

import pytest

from app.exceptions import FileStorageError, FileTooLargeError, ValidationError
from app.services.file_service import FileService

MB = 1024 * 1024


class TestSizeValidation:

    def setup_method(self):
        self.service = FileService()

    def test_small_file_passes(self):
        self.service.validate_size(None, 1000)

    def test_file_at_limit_passes(self):
        self.service.validate_size(20 * MB, 20 * MB)

    def test_file_over_limit_rejected(self):
        with pytest.raises(FileTooLargeError) as exc_info:
            self.service.validate_size(None, 25 * MB)
        assert exc_info.value.message == "File too large (25MB). Maximum is 20MB."

    def test_declared_length_over_limit_rejected(self):
        with pytest.raises(FileTooLargeError):
            self.service.validate_size(21 * MB, 1000)

    def test_empty_file_rejected(self):
        with pytest.raises(ValidationError, match="empty"):
            self.service.validate_size(0, 0)


class TestPaths:

    def test_storage_path_layout(self, temp_storage):
        service = FileService(storage_root=temp_storage)
        scrapbook_id, memory_id = uuid.uuid4(), uuid.uuid4()

        path = service.build_storage_path("user_1", scrapbook_id, memory_id, ".jpg")

        parts = path.split("/")
        assert parts[:3] == ["user_1", str(scrapbook_id), str(memory_id)]
        assert parts[3].endswith(".jpg")
        uuid.UUID(parts[3][:-4])

    def test_storage_paths_are_unique(self, temp_storage):
        service = FileService(storage_root=temp_storage)
        sid, mid = uuid.uuid4(), uuid.uuid4()
        assert service.build_storage_path("u", sid, mid, ".png") != service.build_storage_path(
            "u", sid, mid, ".png"
        )

    def test_resolve_inside_root(self, temp_storage):
        service = FileService(storage_root=temp_storage)
        resolved = service.resolve("u/a/b/photo.jpg")
        assert resolved == Path(temp_storage).resolve() / "u" / "a" / "b" / "photo.jpg"

    @pytest.mark.parametrize("path", ["../secret.txt", "u/../../etc/passwd", "/etc/passwd"])
    def test_resolve_rejects_traversal(self, temp_storage, path):
        service = FileService(storage_root=temp_storage)
        with pytest.raises(ValidationError, match="Invalid file path"):
            service.resolve(path)

    def test_public_url(self, temp_storage):
        service = FileService(storage_root=temp_storage)
        assert service.public_url("u/s/m/x.jpg") == "/api/files/u/s/m/x.jpg"


class TestStoreAndDelete:

    @pytest.mark.asyncio
    async def test_store_file_writes_bytes(self, temp_storage):
        service = FileService(storage_root=temp_storage)

        absolute = await service.store_file("u/s/m/photo.png", b"\x89PNGdata")

        assert Path(absolute).read_bytes() == b"\x89PNGdata"
        assert Path(absolute).is_relative_to(Path(temp_storage).resolve())

    @pytest.mark.asyncio
    async def test_store_file_os_error_becomes_storage_error(self, temp_storage):
        service = FileService(storage_root=temp_storage)
        with patch("app.services.file_service.aiofiles.open", side_effect=OSError("disk full")):
            with pytest.raises(FileStorageError):
                await service.store_file("u/s/m/photo.png", b"data")

    @pytest.mark.asyncio
    async def test_delete_files_removes_existing_and_skips_missing(self, temp_storage):
        service = FileService(storage_root=temp_storage)
        await service.store_file("u/s/m/a.jpg", b"a")

        count = await service.delete_files(["u/s/m/a.jpg", "u/s/m/missing.jpg"])

        assert count == 2
        assert not (Path(temp_storage) / "u/s/m/a.jpg").exists()

    @pytest.mark.asyncio
    async def test_delete_files_refuses_paths_outside_root(self, temp_storage, tmp_path):
        outside = tmp_path / "outside.txt"
        outside.write_text("keep me")
        service = FileService(storage_root=temp_storage)

        count = await service.delete_files(["../outside.txt"])

        assert count == 0
        assert outside.exists()

    @pytest.mark.asyncio
    async def test_cleanup_file_nonexistent(self, tmp_path):
        service = FileService(storage_root=str(tmp_path))
        await service.cleanup_file(str(tmp_path / "nonexistent.jpg"))
