"""
Snapbook Backend - Memory, Photo and Song Schemas
==================================================

What:  Pydantic request/response models for memories, their photos, and the
       song metadata lookup.
How:   Response models are built explicitly by the services (public photo
       URLs are computed, not stored); request models validate enums and
       normalize empty strings.
"""

import uuid
from datetime import date as date_type, datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class PhotoResponse(BaseModel):
    id: uuid.UUID
    storage_path: str = Field(description="Path relative to the storage root")
    url: str = Field(description="URL the client can load the photo from")
    caption: Optional[str] = None
    created_at: datetime


class MemoryResponse(BaseModel):
    """
    A memory as rendered by the editor and the shared view.

    `photos` is ordered by upload time; `sort_order` is exposed so clients
    can keep their local list aligned with the server order.
    """
    id: uuid.UUID
    scrapbook_id: uuid.UUID
    type: str = Field(description="'note' or 'song'")
    date: Optional[date_type] = None
    note: str = ""
    song_title: Optional[str] = None
    song_artist: Optional[str] = None
    song_url: Optional[str] = None
    song_album_art_url: Optional[str] = None
    sort_order: int
    created_at: datetime
    photos: List[PhotoResponse] = Field(default_factory=list)


class MemoryListResponse(BaseModel):
    memories: List[MemoryResponse]


class TrackMetadata(BaseModel):
    """Result of a song link lookup. `artist` is null when the page scrape failed."""
    title: str
    artist: Optional[str] = None
    thumbnail_url: Optional[str] = None


class PhotoUploadError(BaseModel):
    filename: str
    message: str


class PhotoUploadResponse(BaseModel):
    """
    Outcome of a batch upload.

    Files are independent: `photos` holds every file that was stored,
    `errors` one entry per file that was rejected or failed to convert.
    """
    photos: List[PhotoResponse] = Field(default_factory=list)
    errors: List[PhotoUploadError] = Field(default_factory=list)


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class MemoryCreate(BaseModel):
    type: Literal["note", "song"] = Field(default="note")
    position: Literal["top", "bottom"] = Field(
        default="top",
        description="Insert above the first memory or below the last one",
    )


class MemoryUpdate(BaseModel):
    """
    Partial update. Only fields present in the request body are written.

    Empty strings on nullable fields are stored as NULL, matching how the
    editor clears a field.
    """
    date: Optional[date_type] = None
    note: Optional[str] = None
    song_title: Optional[str] = None
    song_artist: Optional[str] = None
    song_url: Optional[str] = None
    song_album_art_url: Optional[str] = None

    @field_validator("date", mode="before")
    @classmethod
    def blank_date_is_null(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("song_title", "song_artist", "song_url", "song_album_art_url")
    @classmethod
    def blank_is_null(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            return None
        return v

    @field_validator("note")
    @classmethod
    def note_not_null(cls, v: Optional[str]) -> str:
        # The column is NOT NULL; an explicit null clears the note
        return v if v is not None else ""


class MemoryMove(BaseModel):
    direction: Literal["up", "down"]


class SongMetadataRequest(BaseModel):
    url: str = Field(description="Spotify track link, e.g. https://open.spotify.com/track/...")
