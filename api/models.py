"""
API request and response models for TaskTrack REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in auth/models.py and
tasks/models.py, which own the internal domain representation. Route
handlers map between the two.

Wire format is camelCase (nickName, createdAt, csrfToken) to match the
browser client. Python attribute names stay snake_case; the alias generator
does the translation. Unknown request fields are ignored.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

# Loose shape check only. Deliverability is not our concern.
EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"

# bcrypt only looks at the first 72 bytes, and bcrypt>=5 rejects longer input.
_BCRYPT_MAX_BYTES = 72


# ---------------------------------------------------------------------------
# Shared
# ---------------------------------------------------------------------------


class MessageResponse(BaseModel):
    """Generic acknowledgement body: {"message": "ok"}."""

    model_config = ConfigDict(frozen=True)

    message: str = "ok"


class ErrorDetail(BaseModel):
    """Machine-readable error payload."""

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    detail: Optional[str] = None


class ErrorResponse(BaseModel):
    """Top-level error envelope returned on 4xx/5xx responses."""

    model_config = ConfigDict(frozen=True)

    error: ErrorDetail


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------


class AuthRequest(BaseModel):
    """Request body for POST /auth/signup and POST /auth/login."""

    model_config = ConfigDict(str_strip_whitespace=True)

    email: str = Field(min_length=3, max_length=255, pattern=EMAIL_PATTERN)
    password: str = Field(min_length=5)

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value: str) -> str:
        if len(value.encode("utf-8")) > _BCRYPT_MAX_BYTES:
            raise ValueError(f"password must be at most {_BCRYPT_MAX_BYTES} bytes")
        return value


class CsrfResponse(BaseModel):
    """Response for GET /auth/csrf."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    csrf_token: str


# ---------------------------------------------------------------------------
# User
# ---------------------------------------------------------------------------


class UserResponse(BaseModel):
    """The logged-in identity. There is no password field to leak."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    id: int
    email: str
    nick_name: Optional[str] = None
    created_at: str
    updated_at: str


class UpdateUserRequest(BaseModel):
    """Request body for PATCH /user."""

    model_config = ConfigDict(str_strip_whitespace=True, alias_generator=to_camel, populate_by_name=True)

    nick_name: Optional[str] = Field(default=None, max_length=255)


# ---------------------------------------------------------------------------
# Tasks
# ---------------------------------------------------------------------------


class CreateTaskRequest(BaseModel):
    """Request body for POST /todo."""

    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(min_length=1, max_length=255)
    description: Optional[str] = Field(default=None, max_length=10_000)


class UpdateTaskRequest(BaseModel):
    """Request body for PATCH /todo/{id}. Only fields sent are changed."""

    model_config = ConfigDict(str_strip_whitespace=True)

    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = Field(default=None, max_length=10_000)


class TaskResponse(BaseModel):
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    id: int
    user_id: int
    title: str
    description: Optional[str] = None
    created_at: str
    updated_at: str
