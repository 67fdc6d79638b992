"""
api/routes/user.py -- Logged-in user endpoints.

Routes:
  GET   /user  -- the current identity (requires auth)
  PATCH /user  -- update nickName (requires auth + CSRF)

The handler gets the identity as a parameter from get_current_user(). The
User type has no password-hash field, so nothing here can leak it.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request

from api.models import UpdateUserRequest, UserResponse
from auth.csrf import csrf_protect
from auth.dependencies import get_current_user
from auth.models import User
from auth.store import UserStore

router = APIRouter(prefix="/user", dependencies=[Depends(csrf_protect)])


def _user_to_response(user: User) -> UserResponse:
    return UserResponse(
        id=user.id,
        email=user.email,
        nick_name=user.nick_name,
        created_at=user.created_at or "",
        updated_at=user.updated_at or "",
    )


@router.get("", response_model=UserResponse)
def get_login_user(current_user: User = Depends(get_current_user)) -> UserResponse:
    return _user_to_response(current_user)


@router.patch("", response_model=UserResponse)
def update_user(
    request: Request,
    body: UpdateUserRequest,
    current_user: User = Depends(get_current_user),
) -> UserResponse:
    """Change the caller's nickname. Other identity fields are read-only."""
    user_store: UserStore = request.app.state.user_store
    updated = user_store.update_nick_name(current_user.id, body.nick_name)
    if updated is None:
        # Account deleted between the auth check and the write.
        raise HTTPException(
            status_code=401,
            detail={"code": "unauthorized", "message": "Authentication required."},
        )
    return _user_to_response(updated)
