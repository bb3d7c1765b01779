"""
auth/tokens.py -- Signed, time-bounded session tokens.

Security design decisions:
  JWT: python-jose with HS256. A token carries exactly two claims: `sub`
       (the string-encoded user id) and `exp` (issue time + lifetime, 24h by
       default). There is no server-side session store; a token is valid iff
       its signature verifies against the signing key AND `exp` is strictly in
       the future.

  Signing key: passed to TokenCodec at construction, taken from
       core.config.Settings once at startup. The codec is immutable afterwards
       and shared across requests via app.state -- no module-level key.

  Failure kinds: validate() raises MalformedToken, BadSignature or
       ExpiredToken so logs and tests can tell them apart. The authorization
       gate turns every one of them into Unauthenticated; the HTTP response
       never reveals which.

Layer rule: no imports from api/ or shop/.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt
from jose.exceptions import JWTClaimsError

from auth.errors import BadSignature, ExpiredToken, MalformedToken, SigningError

_ALGORITHM = "HS256"
_DEFAULT_LIFETIME = timedelta(hours=24)


@dataclass(frozen=True)
class IssuedToken:
    """A freshly signed token plus the expiry the cookie must share."""

    token: str
    subject: str
    expires_at: datetime


class TokenCodec:
    """Issue and validate session tokens with one process-wide signing key.

    Usage:
        codec = TokenCodec(settings.secret_key)
        issued = codec.issue("42")
        codec.validate(issued.token)   # -> "42"
    """

    def __init__(
        self,
        secret_key: str,
        lifetime: timedelta = _DEFAULT_LIFETIME,
        algorithm: str = _ALGORITHM,
    ) -> None:
        if not secret_key:
            raise SigningError("Token signing key is not configured.")
        self._secret_key = secret_key
        self._algorithm = algorithm
        self.lifetime = lifetime

    def __repr__(self) -> str:
        return f"TokenCodec(algorithm={self._algorithm!r}, lifetime={self.lifetime!r})"

    def issue(self, subject: str, now: datetime | None = None) -> IssuedToken:
        """Sign a token asserting `subject`, expiring `lifetime` after `now`.

        The expiry is truncated to whole seconds because the JWT `exp` claim is
        an integer timestamp; the cookie and the claim then agree exactly.
        """
        now = now or datetime.now(timezone.utc)
        expires_at = (now + self.lifetime).replace(microsecond=0)
        payload = {"sub": str(subject), "exp": int(expires_at.timestamp())}
        try:
            token = jwt.encode(payload, self._secret_key, algorithm=self._algorithm)
        except JWTError as exc:
            raise SigningError("Token could not be signed.") from exc
        return IssuedToken(token=token, subject=str(subject), expires_at=expires_at)

    def validate(self, token: str, now: datetime | None = None) -> str:
        """Return the subject of a valid token.

        Raises:
            MalformedToken: not a JWT, or missing a string `sub` / numeric `exp`.
            BadSignature:   the signature (or algorithm) does not verify.
            ExpiredToken:   `exp` is at or before `now`.
        """
        try:
            jwt.get_unverified_claims(token)
        except JWTError as exc:
            raise MalformedToken(str(exc)) from exc

        # Expiry is checked below against `now` so the boundary is strict and
        # testable; jose's own check would accept exp == now.
        try:
            claims = jwt.decode(
                token,
                self._secret_key,
                algorithms=[self._algorithm],
                options={"verify_exp": False},
            )
        except JWTClaimsError as exc:
            # Signature verified; a registered claim (e.g. a non-string sub) is invalid.
            raise MalformedToken(str(exc)) from exc
        except JWTError as exc:
            raise BadSignature(str(exc)) from exc

        subject = claims.get("sub")
        exp = claims.get("exp")
        if not isinstance(subject, str) or not subject:
            raise MalformedToken("Token has no subject claim.")
        if isinstance(exp, bool) or not isinstance(exp, (int, float)):
            raise MalformedToken("Token has no expiry claim.")

        now = now or datetime.now(timezone.utc)
        if exp <= now.timestamp():
            raise ExpiredToken("Token expired.")
        return subject
