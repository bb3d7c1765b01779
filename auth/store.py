"""
auth/store.py -- SQLAlchemy Core persistence layer for users and roles.

Pattern: Repository + Data Mapper. UserStore is the repository; _row_to_user
and _rows_to_roles are the mappers. Route and dependency code never touches
SQL directly.

UserStore also satisfies core.pagination.Paginatable (count/take) so the
users admin list goes through the same paginate() as products and orders.

Schema:
  roles              -- id, name (unique)
  role_permissions   -- (role_id, resource) with a position column that keeps
                        each role's resource list in insertion order
  users              -- profile fields, bcrypt hash, role_id -> roles.id

Email uniqueness is enforced by a UNIQUE constraint; create_user() and
update_user() surface violations as sqlalchemy.exc.IntegrityError so routes
can answer 409.

Security:
  All queries use bound parameters. No f-strings in SQL.
  hashed_password never leaves this module except inside a User dataclass,
  whose repr hides it.

Layer rule: no imports from api/ or shop/.
"""

from __future__ import annotations

from sqlalchemy import Column, ForeignKey, Integer, String, Table, Text, UniqueConstraint, func, select
from sqlalchemy.engine import Connection, Engine

from auth.models import Role, User
from core.database import metadata, now_iso

# Resource sets for the roles created by seed_default_roles(). Order is the
# order permissions are listed back to clients.
DEFAULT_ROLES: dict[str, list[str]] = {
    "admin": ["users", "roles", "products", "orders"],
    "editor": ["products", "orders"],
    "viewer": ["orders"],
}

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_roles = Table(
    "roles",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(50), nullable=False, unique=True),
)

_role_permissions = Table(
    "role_permissions",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("role_id", Integer, ForeignKey("roles.id", ondelete="CASCADE"), nullable=False),
    Column("resource", String(50), nullable=False),
    Column("position", Integer, nullable=False),
    UniqueConstraint("role_id", "resource", name="uq_role_resource"),
)

_users = Table(
    "users",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("first_name", String(255), nullable=False),
    Column("last_name", String(255), nullable=False),
    Column("email", String(255), nullable=False, unique=True),
    Column("hashed_password", Text),
    Column("role_id", Integer, ForeignKey("roles.id"), nullable=False),
    Column("created_at", String(32), nullable=False),
)

# Columns update_user() accepts. Anything else is a programming error.
_USER_MUTABLE_FIELDS = frozenset({"first_name", "last_name", "email", "role_id", "hashed_password"})


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class UserStore:
    """Repository for User and Role entities.

    Usage:
        store = UserStore(engine)
        store.seed_default_roles()
        viewer = store.get_role_by_name("viewer")
        uid = store.create_user(User(first_name="A", last_name="B", email="a@b.c",
                                     role_id=viewer.id, hashed_password=hash_password("pw")))
        user = store.get_by_email("a@b.c")
    """

    def __init__(self, engine: Engine) -> None:
        self.engine = engine
        metadata.create_all(engine, tables=[_roles, _role_permissions, _users])

    # ------------------------------------------------------------------
    # Role queries
    # ------------------------------------------------------------------

    def has_roles(self) -> bool:
        with self.engine.connect() as conn:
            result = conn.execute(select(func.count()).select_from(_roles)).scalar()
        return (result or 0) > 0

    def create_role(self, role: Role) -> int:
        """Insert a role and its ordered permissions; return the new role id.

        Raises sqlalchemy.exc.IntegrityError if the role name already exists.
        """
        with self.engine.connect() as conn:
            result = conn.execute(_roles.insert().values(name=role.name))
            role_id = result.inserted_primary_key[0]
            if role.permissions:
                conn.execute(
                    _role_permissions.insert(),
                    [
                        {"role_id": role_id, "resource": resource, "position": position}
                        for position, resource in enumerate(role.permissions)
                    ],
                )
            conn.commit()
        return role_id

    def seed_default_roles(self) -> list[str]:
        """Create any DEFAULT_ROLES that do not exist yet. Returns the names created.

        Idempotent -- safe to call on every startup.
        """
        created: list[str] = []
        for name, permissions in DEFAULT_ROLES.items():
            if self.get_role_by_name(name) is None:
                self.create_role(Role(name=name, permissions=list(permissions)))
                created.append(name)
        return created

    def get_role(self, role_id: int) -> Role | None:
        with self.engine.connect() as conn:
            return _load_roles(conn, [role_id]).get(role_id)

    def get_role_by_name(self, name: str) -> Role | None:
        with self.engine.connect() as conn:
            role_id = conn.execute(select(_roles.c.id).where(_roles.c.name == name)).scalar()
            if role_id is None:
                return None
            return _load_roles(conn, [role_id]).get(role_id)

    def list_roles(self) -> list[Role]:
        """Return all roles ordered by id."""
        with self.engine.connect() as conn:
            ids = conn.execute(select(_roles.c.id).order_by(_roles.c.id)).scalars().all()
            roles = _load_roles(conn, ids)
        return [roles[i] for i in ids]

    # ------------------------------------------------------------------
    # User queries
    # ------------------------------------------------------------------

    def create_user(self, user: User) -> int:
        """Insert a new user and return its assigned database ID.

        Raises sqlalchemy.exc.IntegrityError if the email already exists or
        role_id does not reference a role.
        """
        with self.engine.connect() as conn:
            result = conn.execute(
                _users.insert().values(
                    first_name=user.first_name,
                    last_name=user.last_name,
                    email=user.email,
                    hashed_password=user.hashed_password,
                    role_id=user.role_id,
                    created_at=now_iso(),
                )
            )
            conn.commit()
            return result.inserted_primary_key[0]

    def get_by_id(self, user_id: int) -> User | None:
        """Look up a user by primary key, role included. Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(_users.select().where(_users.c.id == user_id)).fetchone()
            if row is None:
                return None
            roles = _load_roles(conn, [row.role_id])
        return _row_to_user(row, roles.get(row.role_id))

    def get_by_email(self, email: str) -> User | None:
        """Look up a user by exact email, role included. Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(_users.select().where(_users.c.email == email)).fetchone()
            if row is None:
                return None
            roles = _load_roles(conn, [row.role_id])
        return _row_to_user(row, roles.get(row.role_id))

    def update_user(self, user_id: int, **fields) -> bool:
        """Update mutable fields on an existing user.

        Accepted fields: first_name, last_name, email, role_id, hashed_password.
        Returns True if a row was updated, False if user_id was not found.
        Raises ValueError on unknown fields.
        """
        unknown = set(fields) - _USER_MUTABLE_FIELDS
        if unknown:
            raise ValueError(f"Unknown user fields: {unknown!r}")
        if not fields:
            return self.get_by_id(user_id) is not None
        with self.engine.connect() as conn:
            result = conn.execute(_users.update().where(_users.c.id == user_id).values(**fields))
            conn.commit()
        return result.rowcount > 0

    def delete_user(self, user_id: int) -> bool:
        """Permanently delete a user record. Returns True if deleted, False if not found.

        Outstanding session tokens for the user stay signed but stop
        authenticating: the gate treats a missing subject as unauthenticated.
        """
        with self.engine.connect() as conn:
            result = conn.execute(_users.delete().where(_users.c.id == user_id))
            conn.commit()
        return result.rowcount > 0

    # ------------------------------------------------------------------
    # Paginatable
    # ------------------------------------------------------------------

    def count(self) -> int:
        with self.engine.connect() as conn:
            return conn.execute(select(func.count()).select_from(_users)).scalar() or 0

    def take(self, limit: int, offset: int) -> list[User]:
        """Return up to `limit` users ordered by id, skipping `offset`, roles included."""
        with self.engine.connect() as conn:
            rows = conn.execute(_users.select().order_by(_users.c.id).limit(limit).offset(offset)).fetchall()
            roles = _load_roles(conn, {r.role_id for r in rows})
        return [_row_to_user(r, roles.get(r.role_id)) for r in rows]


# ---------------------------------------------------------------------------
# Row mappers (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _load_roles(conn: Connection, role_ids) -> dict[int, Role]:
    """Fetch roles and their ordered permissions for the given ids in two queries."""
    role_ids = list(role_ids)
    if not role_ids:
        return {}
    role_rows = conn.execute(_roles.select().where(_roles.c.id.in_(role_ids))).fetchall()
    roles = {r.id: Role(id=r.id, name=r.name) for r in role_rows}
    perm_rows = conn.execute(
        _role_permissions.select()
        .where(_role_permissions.c.role_id.in_(list(roles)))
        .order_by(_role_permissions.c.role_id, _role_permissions.c.position)
    ).fetchall()
    for p in perm_rows:
        roles[p.role_id].permissions.append(p.resource)
    return roles


def _row_to_user(row, role: Role | None) -> User:
    return User(
        id=row.id,
        first_name=row.first_name,
        last_name=row.last_name,
        email=row.email,
        hashed_password=row.hashed_password,
        role_id=row.role_id,
        role=role,
        created_at=row.created_at,
    )
