"""
tests/test_gateway.py -- Unit tests for signup/login/logout in auth/gateway.py.

Runs against a real file-backed UserStore (tmp_path) rather than a mock so the
UNIQUE(email) constraint and the IntegrityError translation are exercised.

Coverage:
  - signup twice -> Ok then AlreadyRegistered
  - unknown email and wrong password -> the same InvalidCredentials value
  - successful login -> token carrying the account's id and email
  - non-uniqueness storage failures propagate unchanged
  - logout overwrites the cookie with an empty value
"""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
from fastapi import Response
from sqlalchemy.exc import OperationalError

from auth import gateway
from auth.models import AlreadyRegistered, InvalidCredentials, Ok, SignedToken
from auth.passwords import verify_password
from auth.store import UserStore
from auth.tokens import decode_access_token


class TestSignup:
    def test_first_signup_ok(self, user_store: UserStore) -> None:
        assert gateway.signup(user_store, "a@x.com", "pw123") == Ok()

    def test_second_signup_already_registered(self, user_store: UserStore) -> None:
        assert gateway.signup(user_store, "a@x.com", "pw123") == Ok()
        assert gateway.signup(user_store, "a@x.com", "other-pw") == AlreadyRegistered()

    def test_stored_password_is_hashed(self, user_store: UserStore) -> None:
        gateway.signup(user_store, "a@x.com", "pw123")
        cred = user_store.find_credential_by_email("a@x.com")
        assert cred is not None
        assert cred.hashed_password != "pw123"
        assert verify_password("pw123", cred.hashed_password)

    def test_ok_result_does_not_carry_hash(self, user_store: UserStore) -> None:
        result = gateway.signup(user_store, "a@x.com", "pw123")
        assert result.message == "ok"
        assert not hasattr(result, "hashed_password")

    def test_other_store_failure_propagates(self) -> None:
        store = MagicMock(spec=UserStore)
        store.create_credential.side_effect = OperationalError("INSERT", {}, Exception("disk I/O error"))
        with pytest.raises(OperationalError):
            gateway.signup(store, "a@x.com", "pw123")


class TestLogin:
    def test_login_issues_token(self, user_store: UserStore) -> None:
        gateway.signup(user_store, "a@x.com", "pw123")
        result = gateway.login(user_store, "a@x.com", "pw123")
        assert isinstance(result, SignedToken)
        claims = decode_access_token(result.access_token)
        assert claims is not None
        assert claims.email == "a@x.com"
        assert claims.user_id == user_store.find_credential_by_email("a@x.com").id

    def test_wrong_password(self, user_store: UserStore) -> None:
        gateway.signup(user_store, "a@x.com", "pw123")
        assert gateway.login(user_store, "a@x.com", "wrong") == InvalidCredentials()

    def test_unknown_email_indistinguishable_from_wrong_password(self, user_store: UserStore) -> None:
        gateway.signup(user_store, "a@x.com", "pw123")
        unknown = gateway.login(user_store, "nobody@x.com", "pw123")
        wrong = gateway.login(user_store, "a@x.com", "wrong")
        assert unknown == wrong
        assert type(unknown) is InvalidCredentials
        assert unknown.message == wrong.message

    def test_unknown_email_still_runs_bcrypt(self, monkeypatch, user_store: UserStore) -> None:
        """Timing equalization: verify_password runs even when the email is unknown."""
        calls: list[str] = []

        def _spy(plain: str, hashed: str) -> bool:
            calls.append(hashed)
            return False

        monkeypatch.setattr(gateway, "verify_password", _spy)
        gateway.login(user_store, "nobody@x.com", "pw123")
        assert calls == [gateway.DUMMY_HASH]


class TestLogout:
    def test_logout_clears_session_cookie(self) -> None:
        resp = Response()
        gateway.logout(resp)
        cookie = resp.headers["set-cookie"]
        assert cookie.startswith('access_token="";') or cookie.startswith("access_token=;")
        assert "Max-Age=0" in cookie
        assert "HttpOnly" in cookie
        assert "Path=/" in cookie
        assert "samesite=none" in cookie.lower()
