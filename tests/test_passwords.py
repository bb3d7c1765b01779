"""Unit tests for auth/passwords.py -- bcrypt hashing and timing-equalized login.

Covers:
- hash_password() salts every call and produces a cost-10 bcrypt hash
- verify_password() matches only the hashed plaintext; mismatch is False
- verify_password() returns False for >72-byte input, raises CorruptHash on garbage hashes
- authenticate_user() gives the same InvalidCredentials for unknown email and wrong password
"""

import pytest

from auth.errors import CorruptHash, InvalidCredentials
from auth.models import User
from auth.passwords import authenticate_user, hash_password, verify_password
from auth.store import UserStore


def test_hash_is_salted():
    first = hash_password("hunter2")
    second = hash_password("hunter2")
    assert first != second
    assert verify_password("hunter2", first)
    assert verify_password("hunter2", second)


def test_hash_uses_cost_ten():
    assert hash_password("pw").startswith("$2b$10$")


def test_hash_never_contains_plaintext():
    assert "correct horse" not in hash_password("correct horse")


def test_verify_rejects_different_password():
    hashed = hash_password("right")
    assert verify_password("wrong", hashed) is False


def test_verify_over_long_password_is_false():
    hashed = hash_password("x" * 72)
    assert verify_password("x" * 73, hashed) is False


def test_verify_corrupt_hash_raises():
    with pytest.raises(CorruptHash):
        verify_password("anything", "not-a-bcrypt-hash")


# ---------------------------------------------------------------------------
# authenticate_user
# ---------------------------------------------------------------------------


@pytest.fixture
def store(store_engine):
    s = UserStore(store_engine)
    s.seed_default_roles()
    viewer = s.get_role_by_name("viewer")
    s.create_user(
        User(
            first_name="Grace",
            last_name="Hopper",
            email="grace@example.com",
            role_id=viewer.id,
            hashed_password=hash_password("cobol"),
        )
    )
    return s


def test_authenticate_success_returns_user_with_role(store):
    user = authenticate_user(store, "grace@example.com", "cobol")
    assert user.email == "grace@example.com"
    assert user.role.name == "viewer"


def test_unknown_email_and_wrong_password_look_identical(store):
    with pytest.raises(InvalidCredentials) as unknown:
        authenticate_user(store, "nobody@example.com", "cobol")
    with pytest.raises(InvalidCredentials) as wrong:
        authenticate_user(store, "grace@example.com", "fortran")
    assert str(unknown.value) == str(wrong.value)


def test_corrupt_stored_hash_is_not_a_login_failure(store):
    user = store.get_by_email("grace@example.com")
    store.update_user(user.id, hashed_password="$2b$10$garbage")
    with pytest.raises(CorruptHash):
        authenticate_user(store, "grace@example.com", "cobol")
