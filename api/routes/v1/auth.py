"""
api/routes/v1/auth.py -- Registration, login and self-service account endpoints.

Routes:
  POST /api/v1/auth/register         -- create account; sets session cookie
  POST /api/v1/auth/login            -- email/password login; sets session cookie
  POST /api/v1/auth/logout           -- clears session cookie
  GET  /api/v1/auth/user             -- current user (requires auth)
  PUT  /api/v1/auth/users/info       -- update own name/email (requires auth)
  PUT  /api/v1/auth/users/password   -- change own password (requires auth)

Security:
  POST /login and POST /register are rate-limited per IP.
  authenticate_user() provides timing equalization -- use it, never inline.
  Unknown email and wrong password get the same "bad_credentials" answer and
  no cookie. Cache-Control: no-store on every response that sets or refuses
  a session.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError

from api.limiter import limiter
from api.models import (
    ErrorDetail,
    LoginRequest,
    MessageResponse,
    RegisterRequest,
    UpdateInfoRequest,
    UpdatePasswordRequest,
    UserResponse,
)
from auth.cookies import attach_session, clear_session
from auth.dependencies import get_current_user
from auth.errors import InvalidCredentials
from auth.models import User
from auth.passwords import authenticate_user, hash_password
from auth.store import UserStore
from auth.tokens import TokenCodec
from core.config import get_settings

_settings = get_settings()

# Auth policy:
# - POST /api/v1/auth/register:        public
# - POST /api/v1/auth/login:           public -- login endpoint must be unauthenticated
# - POST /api/v1/auth/logout:          public -- clearing a cookie needs no prior auth
# - GET  /api/v1/auth/user:            requires auth (get_current_user)
# - PUT  /api/v1/auth/users/info:      requires auth (get_current_user)
# - PUT  /api/v1/auth/users/password:  requires auth (get_current_user)
router = APIRouter()


def _passwords_mismatch() -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={"error": {"code": "passwords_mismatch", "message": "Passwords do not match."}},
    )


def _start_session(request: Request, resp: JSONResponse, user: User) -> None:
    codec: TokenCodec = request.app.state.token_codec
    issued = codec.issue(str(user.id))
    attach_session(resp, issued, secure=request.app.state.settings.secure_cookies)
    resp.headers["Cache-Control"] = "no-store"


# ---------------------------------------------------------------------------
# Public endpoints
# ---------------------------------------------------------------------------


@limiter.limit(_settings.register_rate_limit)
@router.post("/auth/register", response_model=UserResponse, status_code=201)
def register(request: Request, body: RegisterRequest) -> JSONResponse:
    """Create an account with the configured default role and log it in.

    A password/password_confirm mismatch is rejected before anything is
    written. The response never contains the password hash.
    """
    if body.password != body.password_confirm:
        return _passwords_mismatch()

    user_store: UserStore = request.app.state.user_store
    role = user_store.get_role_by_name(request.app.state.settings.default_role)
    if role is None:
        raise HTTPException(
            status_code=500,
            detail=ErrorDetail(
                code="default_role_missing",
                message="Registration is unavailable: the default role does not exist.",
            ).model_dump(),
        )

    new_user = User(
        first_name=body.first_name,
        last_name=body.last_name,
        email=body.email,
        role_id=role.id,
        hashed_password=hash_password(body.password),
    )
    try:
        user_id = user_store.create_user(new_user)
    except IntegrityError as exc:
        raise HTTPException(
            status_code=409,
            detail=ErrorDetail(code="conflict", message="A user with that email already exists.").model_dump(),
        ) from exc

    created = user_store.get_by_id(user_id)
    resp = JSONResponse(status_code=201, content=UserResponse.from_user(created).model_dump())
    _start_session(request, resp, created)
    return resp


@limiter.limit(_settings.login_rate_limit)
@router.post("/auth/login", response_model=MessageResponse)
def login(request: Request, body: LoginRequest) -> JSONResponse:
    """Authenticate with email and password; set the session cookie.

    Uses authenticate_user() which includes timing equalization. Do NOT
    inline get_by_email() + verify_password() -- that re-introduces the
    timing attack. A corrupt stored hash propagates as CorruptHash (500).
    """
    user_store: UserStore = request.app.state.user_store
    try:
        user = authenticate_user(user_store, body.email, body.password)
    except InvalidCredentials as exc:
        resp = JSONResponse(
            status_code=401,
            content={"error": {"code": "bad_credentials", "message": str(exc)}},
        )
        resp.headers["Cache-Control"] = "no-store"
        return resp

    resp = JSONResponse(content=MessageResponse(message="success").model_dump())
    _start_session(request, resp, user)
    return resp


@router.post("/auth/logout", response_model=MessageResponse)
def logout(request: Request) -> JSONResponse:
    """Clear the session cookie. The token itself simply expires."""
    resp = JSONResponse(content=MessageResponse(message="success").model_dump())
    clear_session(resp, secure=request.app.state.settings.secure_cookies)
    return resp


# ---------------------------------------------------------------------------
# Authenticated endpoints
# ---------------------------------------------------------------------------


@router.get("/auth/user", response_model=UserResponse)
def current_user(current: User = Depends(get_current_user)) -> UserResponse:
    """Return the currently authenticated user, role included."""
    return UserResponse.from_user(current)


@router.put("/auth/users/info", response_model=UserResponse)
def update_info(
    request: Request,
    body: UpdateInfoRequest,
    current: User = Depends(get_current_user),
) -> UserResponse:
    """Update the caller's own first name, last name and email."""
    user_store: UserStore = request.app.state.user_store
    updates = body.model_dump(exclude_none=True)
    try:
        user_store.update_user(current.id, **updates)
    except IntegrityError as exc:
        raise HTTPException(
            status_code=409,
            detail=ErrorDetail(code="conflict", message="A user with that email already exists.").model_dump(),
        ) from exc
    return UserResponse.from_user(user_store.get_by_id(current.id))


@router.put("/auth/users/password", response_model=UserResponse)
def update_password(
    request: Request,
    body: UpdatePasswordRequest,
    current: User = Depends(get_current_user),
):
    """Change the caller's own password. Existing sessions stay valid until expiry."""
    if body.password != body.password_confirm:
        return _passwords_mismatch()
    user_store: UserStore = request.app.state.user_store
    user_store.update_user(current.id, hashed_password=hash_password(body.password))
    return UserResponse.from_user(user_store.get_by_id(current.id))
