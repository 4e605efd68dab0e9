"""
Snapbook Backend - Spotify Track Metadata
==========================================

What:  Resolves a Spotify track link into title, artist and cover art for
       song memories.
How:   Two unauthenticated lookups over httpx:
         1. Spotify's public oEmbed endpoint → title + thumbnail (required)
         2. The track page's og:description meta tag → artist (best effort)
Who:   MemoryService.enrich_song() and GET /api/song-metadata.

Failure semantics:
    - A link that is not https://open.spotify.com/track/<id> → ValidationError
      (400), no request is made.
    - oEmbed unreachable, non-2xx, or unparseable → MetadataServiceError (502).
      Network-level errors are retried with tenacity first; HTTP errors are not.
    - Any failure in the page scrape only leaves `artist` empty.

og:description format:
    "Artist · Song · 2019". The artist is the text before the first
    " · " separator, HTML-unescaped.
"""

import html
import logging
import re
from typing import Optional
from urllib.parse import quote

import httpx
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)

from app.config import settings
from app.exceptions import MetadataServiceError, ValidationError
from app.schemas.memory import TrackMetadata
from app.services.metadata_base import TrackMetadataProvider

logger = logging.getLogger(__name__)

SPOTIFY_TRACK_URL_RE = re.compile(r"^https://open\.spotify\.com/track/[a-zA-Z0-9]+")
OG_DESCRIPTION_RE = re.compile(r'<meta property="og:description" content="([^"]+)"')
DESCRIPTION_SEPARATOR = " · "


def is_spotify_track_url(url: Optional[str]) -> bool:
    return bool(url) and SPOTIFY_TRACK_URL_RE.match(url) is not None


def parse_artist(page_html: str) -> Optional[str]:
    """
    Extracts the artist from a track page's og:description tag.

    >>> parse_artist('<meta property="og:description" content="Artist · Song · 2019">')
    'Artist'
    """
    match = OG_DESCRIPTION_RE.search(page_html)
    if not match:
        return None
    artist = html.unescape(match.group(1).split(DESCRIPTION_SEPARATOR)[0]).strip()
    return artist or None


class SpotifyMetadataService(TrackMetadataProvider):
    """
    Spotify implementation of TrackMetadataProvider.

    Attributes:
        transport: Optional httpx transport. Tests pass an httpx.MockTransport;
                   production leaves it None for the real network.
    """

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None):
        self._transport = transport
        self.oembed_url = settings.spotify_oembed_url
        self.timeout = settings.http_timeout
        self.user_agent = settings.scrape_user_agent

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            transport=self._transport,
            timeout=self.timeout,
            follow_redirects=True,
        )

    def matches(self, url: str) -> bool:
        return is_spotify_track_url(url)

    async def fetch_track_metadata(self, url: str) -> TrackMetadata:
        url = (url or "").strip()
        if not self.matches(url):
            raise ValidationError(
                message="Invalid Spotify track URL",
                field="url",
                context={"url": url},
            )

        async with self._client() as client:
            oembed = await self._fetch_oembed(client, url)
            artist = await self._scrape_artist(client, url)

        metadata = TrackMetadata(
            title=oembed["title"],
            artist=artist,
            thumbnail_url=oembed.get("thumbnail_url"),
        )
        logger.info(
            "Resolved Spotify track: title=%r artist=%r",
            metadata.title,
            metadata.artist,
        )
        return metadata

    # ── oEmbed ────────────────────────────────────────────────────────────

    async def _fetch_oembed(self, client: httpx.AsyncClient, url: str) -> dict:
        try:
            response = await self._get_with_retry(
                client, f"{self.oembed_url}?url={quote(url, safe='')}"
            )
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("Spotify oEmbed lookup failed for %s: %s", url, e)
            raise MetadataServiceError(context={"url": url, "error": str(e)})

        if not isinstance(data, dict) or not data.get("title"):
            logger.warning("Spotify oEmbed returned no title for %s", url)
            raise MetadataServiceError(context={"url": url})
        return data

    @retry(
        retry=retry_if_exception_type(httpx.TransportError),
        stop=stop_after_attempt(settings.retry_max_attempts),
        wait=wait_exponential_jitter(
            initial=settings.retry_min_wait,
            max=settings.retry_max_wait,
            jitter=0.5,
        ),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )
    async def _get_with_retry(self, client: httpx.AsyncClient, url: str) -> httpx.Response:
        return await client.get(url)

    # ── Artist scrape ─────────────────────────────────────────────────────

    async def _scrape_artist(self, client: httpx.AsyncClient, url: str) -> Optional[str]:
        """Best effort: every failure is logged and yields None."""
        try:
            response = await client.get(url, headers={"User-Agent": self.user_agent})
            response.raise_for_status()
            return parse_artist(response.text)
        except Exception as e:
            logger.info("Could not scrape artist from %s: %s", url, e)
            return None


spotify_service = SpotifyMetadataService()
