"""
Snapbook Backend - Public Share View Tests
===========================================
"""

import uuid
from datetime import datetime, timezone

import pytest

from app.exceptions import NotFoundError
from app.models import MemoryPhoto
from app.schemas.memory import MemoryCreate, MemoryUpdate
from app.schemas.scrapbook import ScrapbookCreate
from app.services.memory_service import memory_service
from app.services.scrapbook_service import scrapbook_service
from app.services.share_service import page_metadata, share_service

USER = "user_alice"


async def published_book(db):
    book = await scrapbook_service.create_scrapbook(
        db, USER, ScrapbookCreate(name_a="Taita", name_b="Vienna")
    )
    link = await scrapbook_service.share(db, USER, book.id)
    return book, link


async def add_photo(db, memory_id):
    photo = MemoryPhoto(
        memory_id=memory_id,
        storage_path=f"{USER}/{uuid.uuid4()}/{memory_id}/{uuid.uuid4()}.jpg",
        created_at=datetime.now(timezone.utc),
    )
    db.add(photo)
    await db.flush()
    return photo


class TestPageMetadata:

    def test_title_and_description(self):
        meta = page_metadata("Taita", "Vienna")
        assert meta.title == "Taita & Vienna - Snapbook"
        assert meta.description == "A love story between Taita and Vienna"


class TestGetSharedScrapbook:

    @pytest.mark.asyncio
    async def test_renders_names_memories_and_metadata(self, db_session):
        book, link = await published_book(db_session)
        second = await memory_service.add_memory(
            db_session, USER, book.id, MemoryCreate(position="bottom")
        )
        first = await memory_service.add_memory(
            db_session, USER, book.id, MemoryCreate(position="top")
        )
        await memory_service.update_memory(
            db_session, USER, first.id, MemoryUpdate(note="Where it started")
        )

        result = await share_service.get_shared_scrapbook(db_session, str(link.share_token))

        assert result.title == "Taita + Vienna"
        assert (result.name_a, result.name_b) == ("Taita", "Vienna")
        assert [m.id for m in result.memories] == [first.id, second.id]
        assert result.memories[0].note == "Where it started"
        assert result.metadata.title == "Taita & Vienna - Snapbook"

    @pytest.mark.asyncio
    async def test_uppercase_token_accepted(self, db_session):
        _, link = await published_book(db_session)
        result = await share_service.get_shared_scrapbook(
            db_session, str(link.share_token).upper()
        )
        assert result.name_a == "Taita"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "token",
        ["not-a-uuid", "", "1234", "../etc/passwd", "3f2504e0-4f89-11d3-9a0c-0305e82c3301\n"],
    )
    async def test_malformed_token_not_found(self, db_session, token):
        with pytest.raises(NotFoundError):
            await share_service.get_shared_scrapbook(db_session, token)

    @pytest.mark.asyncio
    async def test_unknown_token_not_found(self, db_session):
        await published_book(db_session)
        with pytest.raises(NotFoundError):
            await share_service.get_shared_scrapbook(db_session, str(uuid.uuid4()))

    @pytest.mark.asyncio
    async def test_revoked_token_not_found(self, db_session):
        book, link = await published_book(db_session)
        await scrapbook_service.unshare(db_session, USER, book.id)

        with pytest.raises(NotFoundError):
            await share_service.get_shared_scrapbook(db_session, str(link.share_token))

    @pytest.mark.asyncio
    async def test_memories_carry_no_scrapbook_id_or_storage_path(self, db_session):
        book, link = await published_book(db_session)
        memory = await memory_service.add_memory(db_session, USER, book.id, MemoryCreate())
        await add_photo(db_session, memory.id)
        await db_session.commit()
        db_session.expunge_all()

        result = await share_service.get_shared_scrapbook(db_session, str(link.share_token))

        body = result.model_dump_json()
        assert USER not in body
        assert str(book.id) not in body
        (photo,) = result.memories[0].photos
        assert photo.url == f"/api/share/{link.share_token}/photos/{photo.id}"


class TestGetSharedPhotoPath:

    @pytest.mark.asyncio
    async def test_resolves_photo_of_shared_scrapbook(self, db_session):
        book, link = await published_book(db_session)
        memory = await memory_service.add_memory(db_session, USER, book.id, MemoryCreate())
        photo = await add_photo(db_session, memory.id)

        path = await share_service.get_shared_photo_path(
            db_session, str(link.share_token), photo.id
        )

        assert path == photo.storage_path

    @pytest.mark.asyncio
    async def test_revoked_link_hides_photos(self, db_session):
        book, link = await published_book(db_session)
        memory = await memory_service.add_memory(db_session, USER, book.id, MemoryCreate())
        photo = await add_photo(db_session, memory.id)
        await scrapbook_service.unshare(db_session, USER, book.id)

        with pytest.raises(NotFoundError):
            await share_service.get_shared_photo_path(db_session, str(link.share_token), photo.id)

    @pytest.mark.asyncio
    async def test_photo_of_another_scrapbook_not_found(self, db_session):
        _, link = await published_book(db_session)
        other = await scrapbook_service.create_scrapbook(
            db_session, USER, ScrapbookCreate(name_a="Ann", name_b="Bo")
        )
        memory = await memory_service.add_memory(db_session, USER, other.id, MemoryCreate())
        photo = await add_photo(db_session, memory.id)

        with pytest.raises(NotFoundError):
            await share_service.get_shared_photo_path(db_session, str(link.share_token), photo.id)
