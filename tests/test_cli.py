"""Tests for the admin CLI in main.py, run against a temporary SQLite file."""

import pytest

import main
from auth.passwords import verify_password
from auth.store import UserStore
from core.config import Settings
from core.database import create_db_engine


@pytest.fixture
def db_url(tmp_path, monkeypatch) -> str:
    url = f"sqlite:///{tmp_path / 'cli.db'}"
    monkeypatch.setattr(main, "get_settings", lambda: Settings(debug=True, database_url=url))
    return url


def _store(url: str) -> UserStore:
    return UserStore(create_db_engine(url))


def test_no_command_prints_help(db_url, capsys):
    assert main.main([]) == 0
    assert "seed-roles" in capsys.readouterr().out


def test_seed_roles_is_idempotent(db_url, capsys):
    assert main.main(["seed-roles"]) == 0
    assert "admin, editor, viewer" in capsys.readouterr().out
    assert main.main(["seed-roles"]) == 0
    assert "already exist" in capsys.readouterr().out


def test_create_user(db_url):
    main.main(["seed-roles"])
    code = main.main(
        [
            "create-user",
            "--email",
            "root@example.com",
            "--password",
            "cli-password",
            "--first-name",
            "Root",
            "--last-name",
            "Admin",
        ]
    )
    assert code == 0
    user = _store(db_url).get_by_email("root@example.com")
    assert user.role.name == "admin"
    assert verify_password("cli-password", user.hashed_password)


def test_create_user_unknown_role(db_url, capsys):
    main.main(["seed-roles"])
    args = ["create-user", "--email", "x@example.com", "--password", "pw", "--first-name", "X", "--last-name", "Y"]
    assert main.main([*args, "--role", "ghost"]) == 1
    assert "does not exist" in capsys.readouterr().out


def test_create_user_duplicate_email(db_url):
    main.main(["seed-roles"])
    args = ["create-user", "--email", "dup@example.com", "--password", "pw", "--first-name", "D", "--last-name", "U"]
    assert main.main(args) == 0
    assert main.main(args) == 1
