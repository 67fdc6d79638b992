"""
auth/tokens.py -- Session token issuance and verification.

Security design decisions:
  JWT: python-jose with HS256. Tokens are signed with SECRET_KEY and carry
       sub (user id as a string, per RFC 7519), email, iat and exp. The
       window is a fixed TOKEN_EXPIRE_MINUTES (120 by default) and is never
       extended. Verification returns None on any failure -- the route layer
       turns that into a 401 without saying which check failed.

  Statelessness: nothing is persisted. Validity is a pure function of the
       token and SECRET_KEY. Rotating SECRET_KEY invalidates every
       outstanding session.

Layer rule: no imports from api/ or tasks/. Import from core/ is allowed.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt

from auth.models import TokenClaims
from core.config import get_settings

logger = logging.getLogger("tasktrack.auth")

# ---------------------------------------------------------------------------
# Config -- read once at module load via the lru_cache singleton [M6]
# ---------------------------------------------------------------------------

_settings = get_settings()

ALGORITHM = "HS256"


def create_access_token(user_id: int, email: str) -> str:
    """Encode a signed JWT for the given identity.

    Args:
        user_id: Numeric user ID stored in the DB. Encoded as the sub claim.
        email:   Account email, carried for client convenience.
    """
    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(user_id),
        "email": email,
        "iat": now,
        "exp": now + timedelta(minutes=_settings.token_expire_minutes),
    }
    return jwt.encode(payload, _settings.secret_key, algorithm=ALGORITHM)


def decode_access_token(token: str) -> TokenClaims | None:
    """Decode and verify a JWT. Returns the claims or None on any failure.

    Bad signature, expiry, malformed input and missing claims all collapse
    into the same None result.
    """
    try:
        payload = jwt.decode(token, _settings.secret_key, algorithms=[ALGORITHM])
    except JWTError:
        return None
    try:
        return TokenClaims(
            user_id=int(payload["sub"]),
            email=str(payload["email"]),
            issued_at=int(payload["iat"]),
            expires_at=int(payload["exp"]),
        )
    except (KeyError, TypeError, ValueError):
        logger.warning("Rejected token with a valid signature but unexpected claims")
        return None


def token_lifetime_seconds() -> int:
    """Session length in seconds. The cookie Max-Age uses the same value."""
    return _settings.token_expire_minutes * 60
