"""
core/pagination.py -- Entity-agnostic offset pagination for every list endpoint.

Any repository that can report its row count and return a bounded, offset
slice of itself satisfies the Paginatable protocol. UserStore, ProductStore and
OrderStore all do, structurally -- none of them inherits from anything here and
paginate() never checks which one it was handed.

Consistency: count() and take() are two independent queries with no shared
transaction. A concurrent insert between them can shift `total` relative to
the returned slice by at most one page boundary. Pagination here is
best-effort, not a frozen snapshot.

Layer rule: core/ is the kernel. This module may not import from api/, auth/,
or shop/.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Generic, Protocol, TypeVar

T = TypeVar("T")
T_co = TypeVar("T_co", covariant=True)

PAGE_SIZE = 5


class Paginatable(Protocol[T_co]):
    """Capability every listable entity kind provides to paginate()."""

    def count(self) -> int: ...

    def take(self, limit: int, offset: int) -> list[T_co]: ...


@dataclass(frozen=True)
class PageMeta:
    total: int
    page: int
    last_page: int


@dataclass(frozen=True)
class PageResult(Generic[T]):
    """One page of records plus navigation metadata. Computed per request."""

    data: list[T]
    meta: PageMeta


def paginate(kind: Paginatable[T], page: int, limit: int = PAGE_SIZE) -> PageResult[T]:
    """Return page `page` (1-based) of `kind`, `limit` records at most.

    page <= 0 is clamped to 1 so the offset is never negative; the returned
    meta.page reports the clamped value. A page past last_page yields empty
    data rather than an error, and take() is not called for it, so an
    arbitrarily large page never reaches the database as an offset.
    last_page is ceil(total / limit), so an empty table has last_page == 0.
    """
    if limit < 1:
        raise ValueError("limit must be positive")
    page = max(page, 1)
    offset = (page - 1) * limit
    total = kind.count()
    data = kind.take(limit, offset) if offset < total else []
    return PageResult(
        data=data,
        meta=PageMeta(total=total, page=page, last_page=math.ceil(total / limit)),
    )
