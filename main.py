#!/usr/bin/env python3
"""
ShopAdmin -- administration commands that run outside the HTTP server.

Usage:
  python main.py seed-roles
  python main.py create-user --email admin@example.com --password s3cret \
      --first-name Ada --last-name Lovelace --role admin

Configuration comes from the same environment variables / .env file as the
API (DATABASE_URL, SECRET_KEY, DEBUG). See core/config.py.
"""

import argparse
import getpass
import sys

from sqlalchemy.exc import IntegrityError

from auth.models import User
from auth.passwords import hash_password
from auth.store import UserStore
from core.config import get_settings
from core.database import create_db_engine


def _seed_roles(store: UserStore) -> int:
    created = store.seed_default_roles()
    if created:
        print(f"  Created roles: {', '.join(created)}")
    else:
        print("  All default roles already exist.")
    return 0


def _create_user(store: UserStore, args: argparse.Namespace) -> int:
    role = store.get_role_by_name(args.role)
    if role is None:
        print(f"  [!] Role '{args.role}' does not exist. Run 'python main.py seed-roles' first.")
        return 1

    password = args.password or getpass.getpass("Password: ")
    if not password:
        print("  [!] A password is required.")
        return 1
    if len(password.encode("utf-8")) > 72:
        print("  [!] Passwords are limited to 72 bytes.")
        return 1

    user = User(
        first_name=args.first_name,
        last_name=args.last_name,
        email=args.email,
        role_id=role.id,
        hashed_password=hash_password(password),
    )
    try:
        user_id = store.create_user(user)
    except IntegrityError:
        print(f"  [!] A user with email '{args.email}' already exists.")
        return 1
    print(f"  Created user {user_id} ({args.email}) with role '{role.name}'.")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="shopadmin",
        description="ShopAdmin administration commands.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py seed-roles
  python main.py create-user --email admin@example.com --first-name Ada --last-name Lovelace --role admin
        """,
    )
    sub = parser.add_subparsers(dest="command", metavar="COMMAND")

    sub.add_parser("seed-roles", help="Create the default roles (admin, editor, viewer) if missing")

    create = sub.add_parser("create-user", help="Create a user with a hashed password")
    create.add_argument("--email", required=True, help="Login email (must be unique)")
    create.add_argument(
        "--password",
        default=None,
        help="Password (prompted for when omitted; at most 72 bytes)",
    )
    create.add_argument("--first-name", required=True, help="First name")
    create.add_argument("--last-name", required=True, help="Last name")
    create.add_argument("--role", default="admin", metavar="ROLE", help="Role name (default: admin)")

    args = parser.parse_args(argv)
    if args.command is None:
        parser.print_help()
        return 0

    settings = get_settings()
    engine = create_db_engine(settings.database_url)
    try:
        store = UserStore(engine)
        if args.command == "seed-roles":
            return _seed_roles(store)
        return _create_user(store, args)
    finally:
        engine.dispose()


if __name__ == "__main__":
    sys.exit(main())
