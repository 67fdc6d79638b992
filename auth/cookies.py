"""
auth/cookies.py -- Transport cookies for the session token and CSRF secret.

Both cookies share one attribute set:
  httponly=True:   JS cannot read the cookie (XSS mitigation).
  samesite="none": the SPA runs on a different origin than the API, so the
                   browser must attach the cookie to cross-site requests.
                   CSRF is handled by auth/csrf.py, not by SameSite.
  path="/":        one cookie for the whole API.
  secure:          HTTPS only. Browsers refuse SameSite=None without Secure;
                   SECURE_COOKIES=false is a local development override.

Logout is the clear_session_cookie() call and nothing else. Tokens are
stateless, so there is no server-side record to invalidate.
"""

from __future__ import annotations

from fastapi import Response

from auth.tokens import token_lifetime_seconds
from core.config import get_settings

SESSION_COOKIE = "access_token"
CSRF_COOKIE = "_csrf"

_settings = get_settings()


def _cookie_attrs() -> dict:
    return {
        "httponly": True,
        "samesite": "none",
        "path": "/",
        "secure": _settings.secure_cookies,
    }


def set_session_cookie(response: Response, token: str) -> None:
    """Write the JWT as the access_token cookie. max_age matches the token expiry."""
    response.set_cookie(SESSION_COOKIE, value=token, max_age=token_lifetime_seconds(), **_cookie_attrs())


def clear_session_cookie(response: Response) -> None:
    """Overwrite access_token with an empty value so the client discards it."""
    response.set_cookie(SESSION_COOKIE, value="", max_age=0, **_cookie_attrs())


def set_csrf_cookie(response: Response, secret: str) -> None:
    """Write the CSRF secret. No max_age: it lives for the browser session."""
    response.set_cookie(CSRF_COOKIE, value=secret, **_cookie_attrs())
