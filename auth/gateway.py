"""
auth/gateway.py -- Signup, login and logout orchestration.

Each operation returns one of a small closed set of outcome types from
auth/models.py instead of raising for expected alternatives. The route layer
maps outcomes to HTTP responses. Unexpected failures (database down, signing
errors) are not caught here and surface as an opaque 500.

Security:
  [C1] login() always runs bcrypt, whether or not the email exists:
       - Unknown email:  bcrypt runs against DUMMY_HASH (same cost)
       - Wrong password: bcrypt runs against the real hash (same cost)
       Both return the same InvalidCredentials value, so neither the payload
       nor the response time tells an attacker which emails are registered.

  The functions are synchronous on purpose. Routes that call them are plain
  `def` endpoints, which FastAPI runs in its thread pool, so bcrypt never
  blocks the event loop.
"""

from __future__ import annotations

import logging

from fastapi import Response

from auth.cookies import clear_session_cookie
from auth.models import (
    AlreadyRegistered,
    InvalidCredentials,
    LoginResult,
    Ok,
    SignedToken,
    SignupResult,
)
from auth.passwords import DUMMY_HASH, hash_password, verify_password
from auth.store import UniqueViolation, UserStore
from auth.tokens import create_access_token

logger = logging.getLogger("tasktrack.auth")


def signup(store: UserStore, email: str, password: str) -> SignupResult:
    """Register a new account. Returns Ok or AlreadyRegistered, never the hash."""
    hashed = hash_password(password)
    try:
        user_id = store.create_credential(email, hashed)
    except UniqueViolation:
        logger.info("Signup rejected: email already registered")
        return AlreadyRegistered()
    logger.info("Signup succeeded for user_id=%s", user_id)
    return Ok()


def login(store: UserStore, email: str, password: str) -> LoginResult:
    """Verify email + password and issue a session token.

    Do NOT short-circuit before verify_password() on a missing email -- that
    re-introduces the timing difference [C1].
    """
    credential = store.find_credential_by_email(email)
    if credential is None:
        verify_password(password, DUMMY_HASH)
        logger.info("Login failed")
        return InvalidCredentials()
    if not verify_password(password, credential.hashed_password):
        logger.info("Login failed")
        return InvalidCredentials()
    logger.info("Login succeeded for user_id=%s", credential.id)
    return SignedToken(access_token=create_access_token(credential.id, credential.email))


def logout(response: Response) -> None:
    """End the session on the client. No server state exists to clean up."""
    clear_session_cookie(response)
