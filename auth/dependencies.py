"""
auth/dependencies.py -- The authorization gate and its FastAPI Depends() helpers.

authenticate(request) resolves the caller's identity:
  1. Extract the raw token from the `jwt` cookie (absent -> Unauthenticated).
  2. Validate it with the app's TokenCodec (any TokenError -> Unauthenticated).
  3. Load the user and role by subject id (missing -> Unauthenticated; a stale
     token for a deleted account looks exactly like an invalid one).

authorize(request, resource) adds step 4: allow iff `resource` is in the
role's permission list, otherwise Forbidden. It performs one user lookup and
no mutation.

Every protected handler names its resource explicitly:
    @router.get("/users")
    def list_users(user: User = Depends(require_permission("users"))): ...

get_current_user() is the identity-only variant for self-service endpoints.

The TokenCodec and UserStore are read from request.app.state, where the
lifespan put them at startup.

Layer rule: no imports from api/ or shop/. This module may import from
fastapi/starlette because it is part of the dependency injection system.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from fastapi import Request

from auth.cookies import extract_session
from auth.errors import Forbidden, TokenError, Unauthenticated
from auth.models import User
from auth.store import UserStore
from auth.tokens import TokenCodec

logger = logging.getLogger("shopadmin.auth")


def authenticate(request: Request) -> User:
    """Return the User the request's session asserts, or raise Unauthenticated."""
    token = extract_session(request)
    if token is None:
        raise Unauthenticated()

    codec: TokenCodec = request.app.state.token_codec
    try:
        subject = codec.validate(token)
    except TokenError as exc:
        logger.debug("Session rejected: %s", type(exc).__name__)
        raise Unauthenticated() from exc

    try:
        user_id = int(subject)
    except ValueError as exc:
        logger.debug("Session rejected: non-numeric subject")
        raise Unauthenticated() from exc

    user_store: UserStore = request.app.state.user_store
    user = user_store.get_by_id(user_id)
    if user is None:
        logger.debug("Session rejected: subject %d no longer exists", user_id)
        raise Unauthenticated()
    return user


def authorize(request: Request, resource: str) -> User:
    """Authenticate the request, then require `resource` in the caller's role.

    Raises Unauthenticated (401) or Forbidden (403). Returns the User on success.
    """
    user = authenticate(request)
    if user.role is None or not user.role.allows(resource):
        logger.info("Forbidden: user_id=%s resource=%s", user.id, resource)
        raise Forbidden(resource)
    return user


def require_permission(resource: str) -> Callable[[Request], User]:
    """Build a dependency that gates a handler on `resource`.

    Use as a FastAPI dependency:
        @router.delete("/products/{product_id}")
        def route(user: User = Depends(require_permission("products"))): ...
    """

    def dependency(request: Request) -> User:
        return authorize(request, resource)

    dependency.__name__ = f"require_{resource}_permission"
    return dependency


def get_current_user(request: Request) -> User:
    """Require authentication only. Raises Unauthenticated if there is no valid session."""
    return authenticate(request)
