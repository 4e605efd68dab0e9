"""
Snapbook Backend - Memory Service Tests
========================================

Insertion keys, partial updates, reordering persistence and song
enrichment, against a throwaway SQLite database.
"""

import uuid
from datetime import date
from pathlib import Path
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from sqlalchemy import select

from app.exceptions import MetadataServiceError, NotFoundError, ValidationError
from app.models import Memory, MemoryPhoto
from app.schemas.memory import MemoryCreate, MemoryUpdate, TrackMetadata
from app.schemas.scrapbook import ScrapbookCreate
from app.services.file_service import file_service
from app.services.memory_service import MemoryService, memory_service
from app.services.scrapbook_service import scrapbook_service

USER = "user_alice"
OTHER = "user_bob"
TRACK_URL = "https://open.spotify.com/track/4uLU6hMCjMI75M1A2tKUQC"


@pytest_asyncio.fixture
async def book(db_session):
    return await scrapbook_service.create_scrapbook(
        db_session, USER, ScrapbookCreate(name_a="Taita", name_b="Vienna")
    )


async def add(db, book, position="bottom", type_="note"):
    return await memory_service.add_memory(
        db, USER, book.id, MemoryCreate(type=type_, position=position)
    )


class TestAddMemory:

    @pytest.mark.asyncio
    async def test_first_memory_keys(self, db_session, book):
        top = await add(db_session, book, "top")
        assert top.sort_order == -1
        assert top.note == ""
        assert top.photos == []

    @pytest.mark.asyncio
    async def test_bottom_then_top(self, db_session, book):
        b1 = await add(db_session, book, "bottom")
        b2 = await add(db_session, book, "bottom")
        t1 = await add(db_session, book, "top")

        assert (b1.sort_order, b2.sort_order, t1.sort_order) == (1, 2, -1)

        listed = await memory_service.list_memories(db_session, USER, book.id)
        assert [m.id for m in listed.memories] == [t1.id, b1.id, b2.id]

    @pytest.mark.asyncio
    async def test_song_type(self, db_session, book):
        song = await add(db_session, book, type_="song")
        assert song.type == "song"
        assert song.song_title is None

    @pytest.mark.asyncio
    async def test_other_users_scrapbook(self, db_session, book):
        with pytest.raises(NotFoundError):
            await memory_service.add_memory(db_session, OTHER, book.id, MemoryCreate())


class TestUpdateMemory:

    @pytest.mark.asyncio
    async def test_partial_update_only_touches_sent_fields(self, db_session, book):
        memory = await add(db_session, book)
        await memory_service.update_memory(
            db_session, USER, memory.id, MemoryUpdate(note="First date", song_title="Song")
        )

        result = await memory_service.update_memory(
            db_session, USER, memory.id, MemoryUpdate.model_validate({"date": "2024-02-14"})
        )

        assert result.date == date(2024, 2, 14)
        assert result.note == "First date"
        assert result.song_title == "Song"

    @pytest.mark.asyncio
    async def test_empty_strings_become_null(self, db_session, book):
        memory = await add(db_session, book)
        await memory_service.update_memory(
            db_session, USER, memory.id, MemoryUpdate(song_artist="Someone", date=date(2024, 1, 1))
        )

        result = await memory_service.update_memory(
            db_session,
            USER,
            memory.id,
            MemoryUpdate.model_validate({"song_artist": "  ", "date": ""}),
        )

        assert result.song_artist is None
        assert result.date is None

    @pytest.mark.asyncio
    async def test_null_note_clears_note(self, db_session, book):
        memory = await add(db_session, book)
        await memory_service.update_memory(db_session, USER, memory.id, MemoryUpdate(note="x"))

        result = await memory_service.update_memory(
            db_session, USER, memory.id, MemoryUpdate.model_validate({"note": None})
        )

        assert result.note == ""

    @pytest.mark.asyncio
    async def test_other_user_cannot_update(self, db_session, book):
        memory = await add(db_session, book)
        with pytest.raises(NotFoundError):
            await memory_service.update_memory(db_session, OTHER, memory.id, MemoryUpdate(note="x"))


class TestDeleteMemory:

    @pytest.mark.asyncio
    async def test_delete_removes_row_photos_and_files(self, db_session, book):
        memory = await add(db_session, book)
        path = file_service.build_storage_path(USER, book.id, memory.id, ".png")
        absolute = await file_service.store_file(path, b"png")
        db_session.add(MemoryPhoto(memory_id=memory.id, storage_path=path))
        await db_session.commit()
        db_session.expunge_all()

        await memory_service.delete_memory(db_session, USER, memory.id)
        await db_session.commit()

        assert not Path(absolute).exists()
        assert (await db_session.execute(select(Memory))).first() is None
        assert (await db_session.execute(select(MemoryPhoto))).first() is None

    @pytest.mark.asyncio
    async def test_delete_unknown(self, db_session):
        with pytest.raises(NotFoundError):
            await memory_service.delete_memory(db_session, USER, uuid.uuid4())


class TestMoveMemory:

    @pytest.mark.asyncio
    async def test_move_renumbers_and_persists_all(self, db_session, book):
        a = await add(db_session, book, "bottom")
        b = await add(db_session, book, "bottom")
        top = await add(db_session, book, "top")
        await db_session.commit()

        result = await memory_service.move_memory(db_session, USER, a.id, "down")
        await db_session.commit()

        assert [m.id for m in result.memories] == [top.id, b.id, a.id]
        assert [m.sort_order for m in result.memories] == [1, 2, 3]

        db_session.expunge_all()
        stored = await memory_service.list_memories(db_session, USER, book.id)
        assert [(m.id, m.sort_order) for m in stored.memories] == [
            (top.id, 1),
            (b.id, 2),
            (a.id, 3),
        ]

    @pytest.mark.asyncio
    async def test_move_first_up_is_noop(self, db_session, book):
        top = await add(db_session, book, "top")
        other = await add(db_session, book, "bottom")

        result = await memory_service.move_memory(db_session, USER, top.id, "up")

        assert [m.id for m in result.memories] == [top.id, other.id]
        assert [m.sort_order for m in result.memories] == [-1, 1]

    @pytest.mark.asyncio
    async def test_move_last_down_is_noop(self, db_session, book):
        first = await add(db_session, book, "bottom")
        last = await add(db_session, book, "bottom")

        result = await memory_service.move_memory(db_session, USER, last.id, "down")

        assert [m.id for m in result.memories] == [first.id, last.id]
        assert [m.sort_order for m in result.memories] == [1, 2]

    @pytest.mark.asyncio
    async def test_other_user_cannot_move(self, db_session, book):
        memory = await add(db_session, book)
        with pytest.raises(NotFoundError):
            await memory_service.move_memory(db_session, OTHER, memory.id, "up")


class TestEnrichSong:

    def make_service(self, **metadata):
        provider = AsyncMock()
        provider.fetch_track_metadata = AsyncMock(return_value=TrackMetadata(**metadata))
        return MemoryService(metadata_provider=provider), provider

    @pytest.mark.asyncio
    async def test_sets_song_fields(self, db_session, book):
        song = await add(db_session, book, type_="song")
        service, provider = self.make_service(
            title="The Boxer", artist="Simon & Garfunkel", thumbnail_url="https://i.scdn.co/x"
        )

        result = await service.enrich_song(db_session, USER, song.id, f"  {TRACK_URL} ")

        provider.fetch_track_metadata.assert_awaited_once_with(TRACK_URL)
        assert result.song_url == TRACK_URL
        assert result.song_title == "The Boxer"
        assert result.song_artist == "Simon & Garfunkel"
        assert result.song_album_art_url == "https://i.scdn.co/x"

    @pytest.mark.asyncio
    async def test_missing_artist_keeps_existing(self, db_session, book):
        song = await add(db_session, book, type_="song")
        await memory_service.update_memory(
            db_session, USER, song.id, MemoryUpdate(song_artist="Typed by hand")
        )
        service, _ = self.make_service(title="Untitled", artist=None, thumbnail_url=None)

        result = await service.enrich_song(db_session, USER, song.id, TRACK_URL)

        assert result.song_title == "Untitled"
        assert result.song_artist == "Typed by hand"

    @pytest.mark.asyncio
    async def test_note_memory_rejected(self, db_session, book):
        note = await add(db_session, book, type_="note")
        service, provider = self.make_service(title="x")

        with pytest.raises(ValidationError, match="song memories"):
            await service.enrich_song(db_session, USER, note.id, TRACK_URL)
        provider.fetch_track_metadata.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_lookup_failure_leaves_memory_unchanged(self, db_session, book):
        song = await add(db_session, book, type_="song")
        provider = AsyncMock()
        provider.fetch_track_metadata = AsyncMock(side_effect=MetadataServiceError())
        service = MemoryService(metadata_provider=provider)

        with pytest.raises(MetadataServiceError):
            await service.enrich_song(db_session, USER, song.id, TRACK_URL)

        listed = await memory_service.list_memories(db_session, USER, book.id)
        assert listed.memories[0].song_url is None
