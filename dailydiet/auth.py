"""
Daily Diet Backend — Session Identity Resolver
================================================

What:  FastAPI dependency that turns the session cookie into an owner id.
Why:   Every meal operation is scoped to the caller; this is the single place
       that decides who the caller is.
How:   Reads the cookie named by `settings.session_cookie_name` (default
       "sessionId"). Its value is the owner identity. A missing or blank
       cookie raises UnauthorizedError (→ 401).

Issuing and rotating the cookie belongs to the identity service in front of
this backend; here the value is trusted as-is.
"""

import logging

from fastapi import Request

from dailydiet.config import settings
from dailydiet.exceptions import UnauthorizedError
from dailydiet.middleware.request_id import request_id_var

logger = logging.getLogger(__name__)

# Stored in the owner_id column, which is String(64)
MAX_OWNER_ID_LENGTH = 64


def get_session_id(request: Request) -> str:
    return (request.cookies.get(settings.session_cookie_name) or "").strip()


async def get_current_owner(request: Request) -> str:
    """
    Resolve the owner id for this request.

    Raises:
        UnauthorizedError: no session cookie, or a value too long to be one
    """
    session_id = get_session_id(request)
    if not session_id or len(session_id) > MAX_OWNER_ID_LENGTH:
        logger.info("[%s] Rejected request without a valid session", request_id_var.get(""))
        raise UnauthorizedError()
    return session_id
