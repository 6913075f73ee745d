# Middleware package init
"""
EventHub Backend — Middleware Package
======================================

Middleware Chain (order matters!):
    Request → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    1. Request ID: accept or generate a correlation ID
    2. Logging: log method, path, status and duration with that ID
    3. GZip / CORS: FastAPI's built-in middleware
"""
