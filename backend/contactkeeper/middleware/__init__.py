# Middleware package init
"""
ContactKeeper Backend — Middleware Package
============================================

Middleware Chain:
    Request → [Request ID] → [Logging] → [CORS] → Route Handler

    1. Request ID: Generate (or accept) a correlation ID for logs and responses
    2. Logging: One access line per request, with status and duration
    3. CORS: FastAPI's CORSMiddleware (handles preflight)
"""
