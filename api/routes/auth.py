"""
api/routes/auth.py -- Session authentication endpoints.

Routes:
  POST /auth/signup  -- create an account; 201 {"message": "ok"}
  POST /auth/login   -- password login; sets the access_token cookie
  POST /auth/logout  -- overwrites the access_token cookie with ""
  GET  /auth/csrf    -- returns {"csrfToken": ...}; seeds the _csrf cookie

Security:
  Every POST here passes csrf_protect first (router-level dependency), so a
  forged cross-site login can never plant a session cookie.
  [C1] Login failures are one outcome (403 invalid_credentials) whether the
       email is unknown or the password is wrong.
  [M5] Cache-Control: no-store on signup and login responses.

Endpoints that hash or verify passwords are plain `def` so FastAPI runs them
in the thread pool instead of on the event loop.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from fastapi.responses import JSONResponse

from api.models import AuthRequest, CsrfResponse, MessageResponse
from auth import gateway
from auth.cookies import set_session_cookie
from auth.csrf import csrf_protect, issue_csrf_token
from auth.models import AlreadyRegistered, InvalidCredentials
from auth.store import UserStore

# Auth policy:
# - POST /auth/signup:  public, CSRF-checked
# - POST /auth/login:   public, CSRF-checked
# - POST /auth/logout:  public, CSRF-checked -- clearing a cookie needs no prior auth
# - GET  /auth/csrf:    public, safe method so csrf_protect lets it through
router = APIRouter(prefix="/auth", dependencies=[Depends(csrf_protect)])

_NO_STORE = {"Cache-Control": "no-store"}


@router.post("/signup", response_model=MessageResponse, status_code=201)
def signup(request: Request, body: AuthRequest) -> JSONResponse:
    """Register a new account. The stored hash is never echoed back."""
    user_store: UserStore = request.app.state.user_store
    result = gateway.signup(user_store, body.email, body.password)
    if isinstance(result, AlreadyRegistered):
        raise HTTPException(
            status_code=403,
            detail={"code": "already_registered", "message": result.message},
            headers=_NO_STORE,
        )
    return JSONResponse(status_code=201, content={"message": result.message}, headers=_NO_STORE)


@router.post("/login", response_model=MessageResponse)
def login(request: Request, body: AuthRequest) -> JSONResponse:
    """Authenticate with email and password; set the session cookie.

    The token travels only in the HttpOnly cookie, never in the body.
    """
    user_store: UserStore = request.app.state.user_store
    result = gateway.login(user_store, body.email, body.password)
    if isinstance(result, InvalidCredentials):
        raise HTTPException(
            status_code=403,
            detail={"code": "invalid_credentials", "message": result.message},
            headers=_NO_STORE,
        )
    resp = JSONResponse(status_code=200, content={"message": "ok"}, headers=_NO_STORE)
    set_session_cookie(resp, result.access_token)
    return resp


@router.post("/logout", response_model=MessageResponse)
async def logout() -> JSONResponse:
    """Clear the session cookie. Tokens are stateless, so nothing else happens."""
    resp = JSONResponse(status_code=200, content={"message": "ok"})
    gateway.logout(resp)
    return resp


@router.get("/csrf", response_model=CsrfResponse)
async def csrf_token(request: Request, response: Response) -> CsrfResponse:
    """Return a CSRF token for the caller's secret cookie, minting the cookie if needed."""
    return CsrfResponse(csrf_token=issue_csrf_token(request, response))
