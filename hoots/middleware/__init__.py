# Middleware package init
"""
Hoots Backend — Middleware Package
===================================

Middleware Chain:
    Request → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    1. Request ID first, so every later log line can carry it
    2. Logging records status and duration once the response is ready
"""
