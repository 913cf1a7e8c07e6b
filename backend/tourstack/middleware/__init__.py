# Middleware package init
"""
TourStack Backend — Middleware Package
========================================

Middleware Chain (outermost first):
    Request → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    1. Request ID: correlation id stored in a ContextVar, echoed as X-Request-ID
    2. Logging: one access line per request with status and duration
    3. GZip / CORS: Starlette built-ins
"""
