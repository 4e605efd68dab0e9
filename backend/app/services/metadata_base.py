"""
Snapbook Backend - Abstract Track Metadata Provider
====================================================

What:  Interface for services that turn a music link into display metadata
       (title, artist, cover art).
Who:   Implemented by SpotifyMetadataService; consumed by MemoryService and
       the /api/song-metadata route.

Contract:
    - `matches(url)` is a cheap, offline check of whether the provider
      understands the link.
    - `fetch_track_metadata(url)` performs the network lookup. Failures of
      the primary metadata source raise MetadataServiceError; secondary
      enrichment (e.g. the artist) is best effort and only leaves fields
      empty.
"""

from abc import ABC, abstractmethod

from app.schemas.memory import TrackMetadata


class TrackMetadataProvider(ABC):

    @abstractmethod
    def matches(self, url: str) -> bool:
        """True when `url` is a track link this provider can resolve."""
        ...

    @abstractmethod
    async def fetch_track_metadata(self, url: str) -> TrackMetadata:
        """
        Resolve a track link.

        Raises:
            ValidationError: `url` is not a link this provider handles.
            MetadataServiceError: the primary lookup failed.
        """
        ...
