"""
shop/store.py -- SQLAlchemy-backed persistence for products and orders.

Uses SQLAlchemy Core (not ORM) so the dataclasses in shop/models.py remain the
authoritative domain representation. Swapping SQLite for PostgreSQL or MySQL
is a connection string change.

Pattern: Repository + Data Mapper. ProductStore and OrderStore are the
repositories; the _row_to_* functions are the mappers. Both repositories
provide count()/take() and are therefore core.pagination.Paginatable.

Security: all queries use bound parameters. No f-strings in SQL.

Layer rule: shop/ imports only core/ + stdlib + third-party libraries. It
does NOT import from api/ or auth/.

Usage:
    products = ProductStore(engine)
    product_id = products.create_product(Product(title="Mug", price=9.5))
    orders = OrderStore(engine)
    order_id = orders.create_order(Order(first_name="A", last_name="B", email="a@b.c",
                                         items=[OrderItem("Mug", 9.5, 2)]))
    page = paginate(orders, 1)
"""

from typing import Optional

from sqlalchemy import Column, Float, ForeignKey, Integer, String, Table, Text, func, select
from sqlalchemy.engine import Connection, Engine

from core.database import metadata, now_iso
from shop.models import DailySales, Order, OrderItem, Product

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_products = Table(
    "products",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("title", String(255), nullable=False),
    Column("description", Text, nullable=False, server_default=""),
    Column("image", String(255), nullable=False, server_default=""),
    Column("price", Float, nullable=False, server_default="0"),
)

_orders = Table(
    "orders",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("first_name", String(255), nullable=False),
    Column("last_name", String(255), nullable=False),
    Column("email", String(255), nullable=False),
    Column("created_at", String(32), nullable=False),
)

_order_items = Table(
    "order_items",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("order_id", Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False),
    Column("product_title", String(255), nullable=False),
    Column("price", Float, nullable=False),
    Column("quantity", Integer, nullable=False),
)

_PRODUCT_MUTABLE_FIELDS = frozenset({"title", "description", "image", "price"})


# ---------------------------------------------------------------------------
# Products
# ---------------------------------------------------------------------------


class ProductStore:
    def __init__(self, engine: Engine) -> None:
        self.engine = engine
        metadata.create_all(engine, tables=[_products])

    def create_product(self, product: Product) -> int:
        """Insert a new product and return its assigned database ID."""
        with self.engine.connect() as conn:
            result = conn.execute(
                _products.insert().values(
                    title=product.title,
                    description=product.description,
                    image=product.image,
                    price=product.price,
                )
            )
            conn.commit()
            return result.inserted_primary_key[0]

    def get_product(self, product_id: int) -> Optional[Product]:
        """Fetch a single product by ID. Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(_products.select().where(_products.c.id == product_id)).fetchone()
        return _row_to_product(row) if row is not None else None

    def update_product(self, product_id: int, **fields) -> bool:
        """Update any subset of title, description, image, price.

        Returns True if a row was updated, False if product_id was not found.
        """
        unknown = set(fields) - _PRODUCT_MUTABLE_FIELDS
        if unknown:
            raise ValueError(f"Unknown product fields: {unknown!r}")
        if not fields:
            return self.get_product(product_id) is not None
        with self.engine.connect() as conn:
            result = conn.execute(_products.update().where(_products.c.id == product_id).values(**fields))
            conn.commit()
        return result.rowcount > 0

    def delete_product(self, product_id: int) -> bool:
        with self.engine.connect() as conn:
            result = conn.execute(_products.delete().where(_products.c.id == product_id))
            conn.commit()
        return result.rowcount > 0

    def count(self) -> int:
        with self.engine.connect() as conn:
            return conn.execute(select(func.count()).select_from(_products)).scalar() or 0

    def take(self, limit: int, offset: int) -> list[Product]:
        with self.engine.connect() as conn:
            rows = conn.execute(
                _products.select().order_by(_products.c.id).limit(limit).offset(offset)
            ).fetchall()
        return [_row_to_product(r) for r in rows]


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------


class OrderStore:
    def __init__(self, engine: Engine) -> None:
        self.engine = engine
        metadata.create_all(engine, tables=[_orders, _order_items])

    def create_order(self, order: Order) -> int:
        """Insert an order with its items and return the order ID.

        created_at defaults to now; callers importing historical orders may
        supply their own ISO 8601 timestamp.
        """
        with self.engine.connect() as conn:
            result = conn.execute(
                _orders.insert().values(
                    first_name=order.first_name,
                    last_name=order.last_name,
                    email=order.email,
                    created_at=order.created_at or now_iso(),
                )
            )
            order_id = result.inserted_primary_key[0]
            if order.items:
                conn.execute(
                    _order_items.insert(),
                    [
                        {
                            "order_id": order_id,
                            "product_title": item.product_title,
                            "price": item.price,
                            "quantity": item.quantity,
                        }
                        for item in order.items
                    ],
                )
            conn.commit()
        return order_id

    def get_order(self, order_id: int) -> Optional[Order]:
        """Fetch one order with its items. Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(_orders.select().where(_orders.c.id == order_id)).fetchone()
            if row is None:
                return None
            items = _load_items(conn, [order_id])
        return _row_to_order(row, items.get(order_id, []))

    def list_orders(self) -> list[Order]:
        """Return every order with its items, ordered by id. Used by CSV export."""
        with self.engine.connect() as conn:
            rows = conn.execute(_orders.select().order_by(_orders.c.id)).fetchall()
            items = _load_items(conn, [r.id for r in rows])
        return [_row_to_order(r, items.get(r.id, [])) for r in rows]

    def daily_sales(self) -> list[DailySales]:
        """Return revenue per UTC calendar day, oldest first.

        created_at is stored as an ISO 8601 string, so its first ten characters
        are the date. Days without order items do not appear.
        """
        day = func.substr(_orders.c.created_at, 1, 10).label("day")
        stmt = (
            select(day, func.sum(_order_items.c.price * _order_items.c.quantity).label("total"))
            .select_from(_orders.join(_order_items, _order_items.c.order_id == _orders.c.id))
            .group_by(day)
            .order_by(day)
        )
        with self.engine.connect() as conn:
            rows = conn.execute(stmt).fetchall()
        return [DailySales(date=r.day, total=float(r.total or 0)) for r in rows]

    def count(self) -> int:
        with self.engine.connect() as conn:
            return conn.execute(select(func.count()).select_from(_orders)).scalar() or 0

    def take(self, limit: int, offset: int) -> list[Order]:
        """Return up to `limit` orders ordered by id, skipping `offset`, items included."""
        with self.engine.connect() as conn:
            rows = conn.execute(_orders.select().order_by(_orders.c.id).limit(limit).offset(offset)).fetchall()
            items = _load_items(conn, [r.id for r in rows])
        return [_row_to_order(r, items.get(r.id, [])) for r in rows]


# ---------------------------------------------------------------------------
# Row mappers (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _load_items(conn: Connection, order_ids: list[int]) -> dict[int, list[OrderItem]]:
    """Fetch items for several orders in one query, grouped by order id."""
    if not order_ids:
        return {}
    rows = conn.execute(
        _order_items.select().where(_order_items.c.order_id.in_(order_ids)).order_by(_order_items.c.id)
    ).fetchall()
    grouped: dict[int, list[OrderItem]] = {}
    for r in rows:
        grouped.setdefault(r.order_id, []).append(
            OrderItem(
                id=r.id,
                order_id=r.order_id,
                product_title=r.product_title,
                price=r.price,
                quantity=r.quantity,
            )
        )
    return grouped


def _row_to_product(row) -> Product:
    return Product(
        id=row.id,
        title=row.title,
        description=row.description,
        image=row.image,
        price=row.price,
    )


def _row_to_order(row, items: list[OrderItem]) -> Order:
    return Order(
        id=row.id,
        first_name=row.first_name,
        last_name=row.last_name,
        email=row.email,
        created_at=row.created_at,
        items=items,
    )
