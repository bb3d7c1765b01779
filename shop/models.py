"""
shop/models.py -- Domain dataclasses for the product catalog and orders.

Pure data containers. Persistence lives in shop/store.py; HTTP shapes live in
api/models.py.

id is None before the record is written to the database.
"""

from dataclasses import dataclass, field
from typing import Optional


@dataclass
class Product:
    title: str
    description: str = ""
    image: str = ""
    price: float = 0.0
    id: Optional[int] = None


@dataclass
class OrderItem:
    """One line of an order. product_title and price are copied at order time
    so later catalog edits do not rewrite order history."""

    product_title: str
    price: float
    quantity: int
    order_id: Optional[int] = None
    id: Optional[int] = None


@dataclass
class Order:
    first_name: str
    last_name: str
    email: str
    items: list[OrderItem] = field(default_factory=list)
    created_at: str = ""  # ISO 8601, set by store on insert
    id: Optional[int] = None

    @property
    def name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @property
    def total(self) -> float:
        return sum(item.price * item.quantity for item in self.items)


@dataclass
class DailySales:
    """Revenue (sum of price * quantity) for one calendar day (YYYY-MM-DD, UTC)."""

    date: str
    total: float
