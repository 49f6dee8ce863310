# Middleware package init
"""
Teacher Dashboard Backend — Middleware Package
===============================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (outermost first):
    Request → [Security Headers] → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    1. Security Headers: stamped on every response, error responses included
    2. Request ID: correlation ID stored in a ContextVar before anything logs
    3. Logging: one access line per request with status and duration
    4. GZip / CORS: Starlette's stock middleware
"""
