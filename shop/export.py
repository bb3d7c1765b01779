"""
shop/export.py -- Renders orders as CSV for spreadsheet download.

Layout: one header row, then for every order a summary row (id, name, email)
followed by one row per item (product title, price, quantity). Cells a row
does not use are left empty so items group visually under their order.

Customer names, emails and product titles are user-supplied text. Cells that
start with =, +, - or @ are prefixed with a tab so spreadsheet applications
treat them as text rather than formulas (CWE-1236).
"""

import csv
import io

from shop.models import Order

HEADERS = ["ID", "Name", "Email", "Product Title", "Price", "Quantity"]

_FORMULA_PREFIXES = ("=", "+", "-", "@")


def _sanitize_csv_cell(value: str) -> str:
    if value.startswith(_FORMULA_PREFIXES):
        return "\t" + value
    return value


def orders_to_csv(orders: list[Order]) -> str:
    """Render orders and their items as CSV text."""
    buf = io.StringIO()
    writer = csv.writer(buf)
    writer.writerow(HEADERS)

    for order in orders:
        writer.writerow(
            [
                order.id,
                _sanitize_csv_cell(order.name),
                _sanitize_csv_cell(order.email),
                "",
                "",
                "",
            ]
        )
        for item in order.items:
            writer.writerow(
                [
                    "",
                    "",
                    "",
                    _sanitize_csv_cell(item.product_title),
                    item.price,
                    item.quantity,
                ]
            )

    return buf.getvalue()
