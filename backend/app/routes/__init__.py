# Routes package init
"""
Snapbook Backend - API Routes Package
======================================

Route Inventory:
    - scrapbooks.py: /api/scrapbooks[/{id}[/share|/memories]]
    - memories.py:   /api/memories/{id}[/move|/song-metadata]
    - photos.py:     POST /api/memories/{id}/photos, DELETE /api/photos/{id}
    - media.py:      GET /api/files/{path}, POST /api/convert-heic,
                     GET /api/song-metadata
    - share.py:      GET /api/share/{token}   (no auth)
    - health.py:     GET /health

Routes stay thin: read the request, resolve the caller, call one service
method, pick the status code. Errors propagate to the handlers in main.py.
"""
