# Middleware package init
"""
Snapbook Backend - Middleware Package
======================================

Middleware Chain (outermost first):
    Request → [Rate Limit] → [Request ID] → [Access Log] → [GZip] → [CORS] → Route

Responses travel back through the same chain in reverse, so the access log
sees the final status code and the request ID header is always attached.
"""
