# Services package init
"""
Snapbook Backend - Services Layer
==================================

What:  Business logic between the routes (HTTP) and the database.
How:   Stateless service objects exposed as module-level singletons; each
       method receives the request's AsyncSession and the caller's user id.

Service Inventory:
    - ordering:               pure memory ordering rules (no I/O)
    - ownership:              owner-scoped lookups (404 for other users' rows)
    - TrackMetadataProvider:  interface for song link lookups
    - SpotifyMetadataService: oEmbed + page scrape implementation
    - ImageService:           image sniffing and HEIC → JPEG conversion
    - FileService:            photo storage on disk
    - ScrapbookService:       scrapbook CRUD and share links
    - MemoryService:          memory CRUD, reordering, song enrichment
    - PhotoService:           batch upload pipeline and photo deletion
    - ShareService:           public read-only view by share token
"""
