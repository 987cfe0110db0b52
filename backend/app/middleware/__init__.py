# Middleware package init
"""
BookClub Backend — Middleware Package
======================================

Middleware Chain (outermost first):
    Request → [Request ID] → [Rate Limit] → [Logging] → [GZip] → [CORS] → Route Handler

    - Request ID sets the correlation ID used by logs and error envelopes
    - Rate Limit rejects floods (and login brute force) before any work is done
    - Logging records method, path, status and duration with that ID
"""
