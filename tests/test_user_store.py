"""Unit tests for auth/store.py -- users, roles and role permissions."""

import pytest
from sqlalchemy.exc import IntegrityError

from auth.models import Role, User
from auth.store import DEFAULT_ROLES, UserStore
from core.pagination import paginate


@pytest.fixture
def store(store_engine) -> UserStore:
    s = UserStore(store_engine)
    s.seed_default_roles()
    return s


def _user(store: UserStore, email: str, role: str = "viewer") -> int:
    return store.create_user(
        User(
            first_name="First",
            last_name="Last",
            email=email,
            role_id=store.get_role_by_name(role).id,
            hashed_password="$2b$10$placeholderplaceholderplaceholderplaceholderpla",
        )
    )


def test_seed_creates_default_roles_once(store_engine):
    s = UserStore(store_engine)
    assert not s.has_roles()
    assert s.seed_default_roles() == list(DEFAULT_ROLES)
    assert s.seed_default_roles() == []
    assert [r.name for r in s.list_roles()] == ["admin", "editor", "viewer"]


def test_role_permissions_keep_order(store):
    admin = store.get_role_by_name("admin")
    assert admin.permissions == ["users", "roles", "products", "orders"]
    assert store.get_role(admin.id) == admin


def test_duplicate_role_name_rejected(store):
    with pytest.raises(IntegrityError):
        store.create_role(Role(name="admin"))


def test_unknown_role_lookups_return_none(store):
    assert store.get_role(999) is None
    assert store.get_role_by_name("ghost") is None


def test_create_and_fetch_user_with_role(store):
    uid = _user(store, "a@example.com", role="editor")
    user = store.get_by_id(uid)
    assert user.email == "a@example.com"
    assert user.role.name == "editor"
    assert user.created_at
    assert store.get_by_email("a@example.com").id == uid


def test_hash_not_in_repr(store):
    user = store.get_by_id(_user(store, "b@example.com"))
    assert "placeholder" not in repr(user)


def test_duplicate_email_rejected(store):
    _user(store, "dup@example.com")
    with pytest.raises(IntegrityError):
        _user(store, "dup@example.com")


def test_update_user_fields(store):
    uid = _user(store, "c@example.com")
    assert store.update_user(uid, first_name="Changed", role_id=store.get_role_by_name("admin").id)
    user = store.get_by_id(uid)
    assert user.first_name == "Changed"
    assert user.role.name == "admin"


def test_update_missing_user_returns_false(store):
    assert store.update_user(999, first_name="x") is False
    assert store.update_user(999) is False


def test_update_rejects_unknown_fields(store):
    uid = _user(store, "d@example.com")
    with pytest.raises(ValueError):
        store.update_user(uid, id=5)


def test_delete_user(store):
    uid = _user(store, "e@example.com")
    assert store.delete_user(uid) is True
    assert store.get_by_id(uid) is None
    assert store.delete_user(uid) is False


def test_users_are_paginatable(store):
    for i in range(7):
        _user(store, f"u{i}@example.com")
    first = paginate(store, 1)
    second = paginate(store, 2)
    assert first.meta.total == 7
    assert first.meta.last_page == 2
    assert [u.email for u in first.data] == [f"u{i}@example.com" for i in range(5)]
    assert [u.email for u in second.data] == ["u5@example.com", "u6@example.com"]
    assert all(u.role is not None for u in first.data)
