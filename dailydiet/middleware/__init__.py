# Middleware package init
"""
Daily Diet Backend — Middleware Package
========================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (order matters!):
    Request → [Request ID] → [Rate Limit] → [Logging] → [GZip] → [CORS] → Route

    1. Request ID first: even a rejected request gets a correlation id
    2. Rate Limit: reject abusive clients before any real work is done
    3. Logging: method, path, status and duration, tagged with the request id

The session cookie is NOT handled here: routes declare the
`get_current_owner` dependency (dailydiet.auth) instead, so health checks and
docs stay public.
"""
