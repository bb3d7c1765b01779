"""
auth/cookies.py -- Binds session tokens to the `jwt` HTTP cookie.

httponly=True: JS cannot read the cookie.
expires: the token's own expiry, so cookie and token die together.
secure: only when SECURE_COOKIES=true; Secure/SameSite hardening beyond the
    browser default is a deployment concern.

Logout overwrites the cookie with an empty value dated in the past; the client
drops it immediately. Tokens themselves are stateless and are not revoked.

Layer rule: no imports from api/ or shop/.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from starlette.requests import Request
from starlette.responses import Response

from auth.tokens import IssuedToken

SESSION_COOKIE = "jwt"


def attach_session(response: Response, issued: IssuedToken, secure: bool = False) -> None:
    """Write the signed token as an httpOnly cookie expiring with the token."""
    response.set_cookie(
        SESSION_COOKIE,
        value=issued.token,
        expires=issued.expires_at,
        httponly=True,
        secure=secure,
    )


def clear_session(response: Response, secure: bool = False) -> None:
    """Overwrite the session cookie with an empty, already-expired one."""
    response.set_cookie(
        SESSION_COOKIE,
        value="",
        expires=datetime.now(timezone.utc) - timedelta(hours=1),
        httponly=True,
        secure=secure,
    )


def extract_session(request: Request) -> str | None:
    """Return the raw session token, or None when the request carries none.

    A missing or empty cookie is the ordinary "no session" state, not an error.
    """
    return request.cookies.get(SESSION_COOKIE) or None
