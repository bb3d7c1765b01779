"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, zero logic beyond a membership
test). Stores and routes do the work.

Layer rule: no imports from api/ or shop/.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class Role:
    """A named permission set.

    permissions is the ordered list of resource names (e.g. "users",
    "products") the role may access. Roles are seeded and administered
    independently of users.
    """

    name: str
    permissions: list[str] = field(default_factory=list)
    id: int | None = None

    def allows(self, resource: str) -> bool:
        return resource in self.permissions


@dataclass
class User:
    """An administrator-panel account.

    email is the login key. hashed_password is excluded from repr so it cannot
    leak through logging or tracebacks; API response models never carry it.
    role is populated by UserStore lookups that join the roles table and is
    None on freshly constructed instances.
    """

    first_name: str
    last_name: str
    email: str
    role_id: int
    hashed_password: str | None = field(default=None, repr=False)
    id: int | None = None
    role: Role | None = None
    created_at: str | None = None
