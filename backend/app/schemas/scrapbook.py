"""
Snapbook Backend - Scrapbook and Share Schemas
===============================================

What:  Pydantic models for owner-side scrapbook CRUD, share links, and the
       public read-only view.
"""

import uuid
from datetime import date as date_type, datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from app.schemas.memory import MemoryResponse


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class ScrapbookNames(BaseModel):
    """
    The two partner names. Whitespace is trimmed here; blank names are
    rejected by ScrapbookService with a 400.
    """
    name_a: str = Field(max_length=100, description="First name, e.g. 'Taita'")
    name_b: str = Field(max_length=100, description="Second name, e.g. 'Vienna'")

    @field_validator("name_a", "name_b")
    @classmethod
    def strip_names(cls, v: str) -> str:
        return v.strip()


class ScrapbookCreate(ScrapbookNames):
    pass


class ScrapbookUpdate(ScrapbookNames):
    pass


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class ScrapbookResponse(BaseModel):
    id: uuid.UUID
    title: str = Field(description="'<name_a> + <name_b>'")
    name_a: str
    name_b: str
    created_at: datetime
    share_token: Optional[uuid.UUID] = Field(
        default=None,
        description="Present once the scrapbook has been published",
    )

    model_config = {"from_attributes": True}


class ScrapbookListResponse(BaseModel):
    scrapbooks: List[ScrapbookResponse]


class ScrapbookDetailResponse(ScrapbookResponse):
    memories: List[MemoryResponse] = Field(
        default_factory=list,
        description="Memories in display order",
    )


class ShareLinkResponse(BaseModel):
    share_token: uuid.UUID
    share_path: str = Field(description="Client route of the public view, e.g. /share/<token>")


class SharedPageMetadata(BaseModel):
    """Title/description used for the public page and its Open Graph tags."""
    title: str
    description: str


class SharedPhotoResponse(BaseModel):
    """A photo in the public view. `url` goes through the share link, not /api/files."""
    id: uuid.UUID
    url: str
    caption: Optional[str] = None


class SharedMemoryResponse(BaseModel):
    id: uuid.UUID
    type: str
    date: Optional[date_type] = None
    note: str = ""
    song_title: Optional[str] = None
    song_artist: Optional[str] = None
    song_url: Optional[str] = None
    song_album_art_url: Optional[str] = None
    photos: List[SharedPhotoResponse] = Field(default_factory=list)


class SharedScrapbookResponse(BaseModel):
    """
    Public, read-only rendering of a published scrapbook.

    Carries no owner id, scrapbook id or storage path: the owner id is part
    of every storage path, so photos are addressed by photo id under the
    share token instead.
    """
    title: str
    name_a: str
    name_b: str
    memories: List[SharedMemoryResponse]
    metadata: SharedPageMetadata
