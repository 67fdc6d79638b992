"""
auth/csrf.py -- Double-submit CSRF protection.

Protocol:
  1. The client calls GET /auth/csrf. If the request carries no _csrf cookie,
     a fresh random secret is minted and set as an HTTP-only cookie.
  2. The response body carries a token derived from that secret:
         token = "<salt>.<b64url(HMAC-SHA256(CSRF_SECRET_KEY, salt + '.' + secret))>"
     A new salt is used on every call, so tokens differ while all of them
     verify against the same secret.
  3. Every POST/PUT/PATCH/DELETE must echo a token in the csrf-token header.
     csrf_protect() recomputes the HMAC from the request's own _csrf cookie
     and rejects the request before the handler runs if they do not match.

A cross-site attacker can make the browser send the cookie but cannot read
it, and cannot read the token endpoint's response, so it cannot produce a
matching header.

Rejection is always the same 403 body. The client is never told whether the
cookie or the header was the problem.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import logging
import secrets

from fastapi import HTTPException, Request, Response

from auth.cookies import CSRF_COOKIE, set_csrf_cookie
from core.config import get_settings

logger = logging.getLogger("tasktrack.auth")

CSRF_HEADER = "csrf-token"
SAFE_METHODS = frozenset({"GET", "HEAD", "OPTIONS", "TRACE"})

_settings = get_settings()


def generate_secret() -> str:
    """Return a new per-client CSRF secret (144 bits, urlsafe)."""
    return secrets.token_urlsafe(18)


def _digest(salt: str, secret: str) -> str:
    mac = hmac.new(
        _settings.csrf_secret_key.encode(),
        f"{salt}.{secret}".encode(),
        hashlib.sha256,
    ).digest()
    return base64.urlsafe_b64encode(mac).rstrip(b"=").decode("ascii")


def derive_token(secret: str) -> str:
    """Derive a client-facing token from the secret with a fresh salt."""
    salt = secrets.token_urlsafe(6)
    return f"{salt}.{_digest(salt, secret)}"


def verify_token(secret: str | None, token: str | None) -> bool:
    """Return True if token was derived from secret. Never raises."""
    if not secret or not token:
        return False
    salt, sep, digest = token.partition(".")
    if not sep or not salt or not digest:
        return False
    # Headers may carry non-ASCII text; compare_digest only accepts ASCII str.
    return hmac.compare_digest(digest.encode("utf-8"), _digest(salt, secret).encode("utf-8"))


def issue_csrf_token(request: Request, response: Response) -> str:
    """Return a token for the request's secret, seeding the secret cookie if absent."""
    secret = request.cookies.get(CSRF_COOKIE)
    if not secret:
        secret = generate_secret()
        set_csrf_cookie(response, secret)
    return derive_token(secret)


def csrf_protect(request: Request) -> None:
    """Reject state-changing requests whose csrf-token header does not match the _csrf cookie.

    Use as a router-level dependency so it runs before any endpoint
    dependency, including get_current_user():
        router = APIRouter(dependencies=[Depends(csrf_protect)])
    """
    if request.method in SAFE_METHODS:
        return
    secret = request.cookies.get(CSRF_COOKIE)
    token = request.headers.get(CSRF_HEADER)
    if not verify_token(secret, token):
        logger.warning("CSRF check failed on %s %s", request.method, request.url.path)
        raise HTTPException(
            status_code=403,
            detail={"code": "forbidden", "message": "Invalid CSRF token."},
        )
