# Middleware package init
"""
Armory API — Middleware Package
=================================

Middleware Chain (request direction):
    Request → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    1. Request ID: sets the correlation id used by every log line
    2. Logging: one access line per request with status and duration
"""
