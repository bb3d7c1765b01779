"""
auth/errors.py -- Failure taxonomy for credentials, sessions and authorization.

  InvalidCredentials -- login failed. Unknown email and wrong password raise
                        the same error with the same message.
  Unauthenticated    -- no session, an invalid/expired token, or a token whose
                        subject no longer exists. Maps to HTTP 401.
  Forbidden          -- valid identity, role lacks the required resource. 403.
  CorruptHash        -- a stored credential bcrypt cannot parse. Data-integrity
                        problem: logged at ERROR and answered with 500, never
                        treated as a plain login failure.

Token failures (MalformedToken, BadSignature, ExpiredToken) are distinct so
logs and tests can tell them apart. The gate folds all of them into
Unauthenticated before anything reaches the HTTP response.

Layer rule: no imports from api/ or shop/.
"""


class AuthError(Exception):
    """Base class for every failure raised by the auth package."""


class InvalidCredentials(AuthError):
    def __init__(self, message: str = "Invalid email or password.") -> None:
        super().__init__(message)


class Unauthenticated(AuthError):
    def __init__(self, message: str = "unauthorized") -> None:
        super().__init__(message)


class Forbidden(AuthError):
    def __init__(self, resource: str) -> None:
        super().__init__(f"Role does not grant access to '{resource}'.")
        self.resource = resource


class CorruptHash(AuthError):
    pass


class TokenError(AuthError):
    """Base class for session token validation failures."""


class MalformedToken(TokenError):
    pass


class BadSignature(TokenError):
    pass


class ExpiredToken(TokenError):
    pass


class SigningError(AuthError):
    """The signing key is unavailable. Fatal at startup, never per-request."""
