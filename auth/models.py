"""
auth/models.py -- Domain dataclasses for authentication entities and outcomes.

Pattern: Data class (pure data container, zero logic). Stores and the
gateway do the work; these types only carry shape.

Credential and User are deliberately separate types. The password hash lives
only on Credential, which never leaves the auth package. Handlers receive a
User, so there is no field they could leak.

Layer rule: no imports from api/, core/, or tasks/.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class Credential:
    """Login material for one account. Created once at signup, hash immutable."""

    email: str
    hashed_password: str
    id: int | None = None


@dataclass
class User:
    """The authenticated identity injected into request handlers."""

    id: int
    email: str
    nick_name: str | None = None
    created_at: str | None = None
    updated_at: str | None = None


@dataclass(frozen=True)
class TokenClaims:
    """Verified claim set of a session token."""

    user_id: int
    email: str
    issued_at: int
    expires_at: int


# ---------------------------------------------------------------------------
# Gateway outcomes
#
# A small closed set of expected results. Unexpected failures (storage down,
# signing misconfigured) are exceptions, not variants.
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Ok:
    message: str = "ok"


@dataclass(frozen=True)
class AlreadyRegistered:
    message: str = "This email is already taken."


@dataclass(frozen=True)
class InvalidCredentials:
    message: str = "Email or password incorrect."


@dataclass(frozen=True)
class SignedToken:
    access_token: str


SignupResult = Ok | AlreadyRegistered
LoginResult = SignedToken | InvalidCredentials
