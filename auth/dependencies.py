"""
auth/dependencies.py -- FastAPI Depends() helpers for authentication.

Token sources, checked in priority order:
  1. JWT cookie ("access_token") -- set by POST /auth/login.
  2. Authorization: Bearer <token> header -- non-browser API clients.

Both converge on a User (no password hash) after successful verification.

try_get_current_user() is the soft variant (returns None on failure).
get_current_user() wraps it and raises HTTP 401 if unauthenticated.

Layer rule: no imports from api/ or tasks/.
  auth/dependencies.py may import from fastapi (for HTTPException/Request)
  because this module is part of the FastAPI dependency injection system.
"""

from __future__ import annotations

from fastapi import HTTPException, Request

from auth.cookies import SESSION_COOKIE
from auth.models import User
from auth.store import UserStore
from auth.tokens import decode_access_token


def try_get_current_user(request: Request) -> User | None:
    """Attempt to authenticate the request via cookie or Bearer header.

    Returns the authenticated User on success, None on any failure.
    Never raises -- callers that need a hard 401 should use get_current_user().
    """
    user_store: UserStore = request.app.state.user_store

    token: str | None = request.cookies.get(SESSION_COOKIE)
    if not token:
        auth_header = request.headers.get("Authorization", "")
        if auth_header.startswith("Bearer "):
            token = auth_header[7:]
    if not token:
        return None

    claims = decode_access_token(token)
    if claims is None:
        return None
    # A valid token for a deleted account is treated like any other bad token.
    return user_store.find_identity_by_id(claims.user_id)


def get_current_user(request: Request) -> User:
    """Require authentication. Raises HTTP 401 if the request is not authenticated.

    The resolved User is also stored on request.state.user for middleware and
    logging. Handlers should take it as a parameter:
        @router.get("/protected")
        def route(current_user: User = Depends(get_current_user)): ...
    """
    user = try_get_current_user(request)
    if user is None:
        raise HTTPException(
            status_code=401,
            detail={"code": "unauthorized", "message": "Authentication required."},
        )
    request.state.user = user
    return user
