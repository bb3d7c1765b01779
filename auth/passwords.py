"""
auth/passwords.py -- Password hashing and timing-equalized login.

Passwords: bcrypt, used directly (no passlib wrapper). The cost factor is
fixed at _BCRYPT_ROUNDS -- strong enough to make offline brute force
expensive, cheap enough (tens of milliseconds) to keep login latency low.
Every call to hash_password() draws a fresh salt, so two users with the same
password never share a hash.

bcrypt only reads the first 72 bytes of a secret and bcrypt>=5 rejects longer
input outright. The API caps password fields at 72 characters; hash_password()
lets bcrypt's ValueError propagate for anything that slips past, and
verify_password() answers False, since no stored hash can match such input.

The _DUMMY_HASH constant enables timing equalization in authenticate_user()
so response time does not reveal whether an email is registered.

Layer rule: no imports from api/ or shop/.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import bcrypt

from auth.errors import CorruptHash, InvalidCredentials

if TYPE_CHECKING:
    from auth.models import User
    from auth.store import UserStore

logger = logging.getLogger("shopadmin.auth.passwords")

_BCRYPT_ROUNDS = 10
_BCRYPT_MAX_BYTES = 72


def hash_password(plain: str) -> str:
    """Return a salted bcrypt hash of the given plaintext password."""
    return bcrypt.hashpw(plain.encode("utf-8"), bcrypt.gensalt(rounds=_BCRYPT_ROUNDS)).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """Return True if the plaintext password matches the bcrypt hash.

    A mismatch is False, not an error. A stored hash that bcrypt cannot parse
    raises CorruptHash -- that is a data-integrity problem, not a wrong
    password, and callers must not fold it into a login failure.
    """
    secret = plain.encode("utf-8")
    if len(secret) > _BCRYPT_MAX_BYTES:
        return False
    try:
        return bcrypt.checkpw(secret, hashed.encode("utf-8"))
    except ValueError as exc:
        raise CorruptHash("Stored password hash is not a valid bcrypt hash.") from exc


# Computed once at module load so the first login attempt is not measurably
# slower than subsequent ones.
_DUMMY_HASH: str = hash_password("shopadmin_timing_dummy")


def authenticate_user(store: UserStore, email: str, password: str) -> User:
    """Check an email/password login with timing equalization.

    Always runs bcrypt whether or not the email exists:
    - Unknown email: bcrypt runs against _DUMMY_HASH (same cost as a real check)
    - Wrong password: bcrypt runs against the real hash

    Both failures raise the same InvalidCredentials. CorruptHash propagates.
    """
    user = store.get_by_email(email)
    if user is None or user.hashed_password is None:
        verify_password(password, _DUMMY_HASH)
        raise InvalidCredentials()
    try:
        matched = verify_password(password, user.hashed_password)
    except CorruptHash:
        logger.error("Corrupt password hash for user_id=%s", user.id)
        raise
    if not matched:
        raise InvalidCredentials()
    return user
