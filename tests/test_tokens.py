"""
tests/test_tokens.py -- Unit tests for JWT issuance and verification.

Coverage:
  - sign then verify returns the original claims
  - 120-minute expiry window
  - expired, foreign-secret, tampered and malformed tokens all yield None
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from jose import jwt

from auth.tokens import ALGORITHM, create_access_token, decode_access_token, token_lifetime_seconds
from core.config import get_settings


def _encode(payload: dict, key: str | None = None) -> str:
    return jwt.encode(payload, key or get_settings().secret_key, algorithm=ALGORITHM)


class TestCreateAndDecode:
    def test_round_trip_preserves_claims(self) -> None:
        token = create_access_token(42, "a@x.com")
        claims = decode_access_token(token)
        assert claims is not None
        assert claims.user_id == 42
        assert claims.email == "a@x.com"

    def test_expiry_is_120_minutes_after_issue(self) -> None:
        claims = decode_access_token(create_access_token(1, "a@x.com"))
        assert claims is not None
        assert claims.expires_at - claims.issued_at == 120 * 60
        assert token_lifetime_seconds() == 120 * 60

    def test_subject_is_encoded_as_string(self) -> None:
        """RFC 7519 requires sub to be a string; python-jose enforces it on decode."""
        payload = jwt.get_unverified_claims(create_access_token(7, "a@x.com"))
        assert payload["sub"] == "7"


class TestDecodeRejects:
    """Every failure mode collapses to None."""

    def test_expired_token(self) -> None:
        past = datetime.now(timezone.utc) - timedelta(minutes=121)
        token = _encode({"sub": "1", "email": "a@x.com", "iat": past, "exp": past + timedelta(minutes=1)})
        assert decode_access_token(token) is None

    def test_token_signed_with_other_secret(self) -> None:
        now = datetime.now(timezone.utc)
        token = _encode(
            {"sub": "1", "email": "a@x.com", "iat": now, "exp": now + timedelta(minutes=120)},
            key="x" * 64,
        )
        assert decode_access_token(token) is None

    def test_tampered_payload(self) -> None:
        header, payload, signature = create_access_token(1, "a@x.com").split(".")
        forged_payload = _encode({"sub": "2", "email": "b@x.com"}).split(".")[1]
        assert decode_access_token(f"{header}.{forged_payload}.{signature}") is None
        assert payload != forged_payload

    def test_garbage(self) -> None:
        assert decode_access_token("not-a-jwt") is None

    def test_empty_string(self) -> None:
        assert decode_access_token("") is None

    def test_missing_email_claim(self) -> None:
        now = datetime.now(timezone.utc)
        token = _encode({"sub": "1", "iat": now, "exp": now + timedelta(minutes=5)})
        assert decode_access_token(token) is None

    def test_non_numeric_subject(self) -> None:
        now = datetime.now(timezone.utc)
        token = _encode({"sub": "admin", "email": "a@x.com", "iat": now, "exp": now + timedelta(minutes=5)})
        assert decode_access_token(token) is None

    def test_none_algorithm_rejected(self) -> None:
        """An unsigned token must not pass even with valid-looking claims."""
        token = create_access_token(1, "a@x.com")
        header, payload, _sig = token.split(".")
        assert decode_access_token(f"{header}.{payload}.") is None
