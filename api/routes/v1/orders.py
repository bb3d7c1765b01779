"""
api/routes/v1/orders.py -- Order listing, CSV export and sales chart, gated on "orders".

Routes:
  GET  /orders?page=N   -- paginated orders with their items
  POST /orders/export   -- every order as a CSV attachment (orders.csv)
  GET  /orders/chart    -- [{date, sum}] revenue per day, oldest first

Export is POST because the admin client triggers it from a form
button; it reads everything, so it is not paginated.
"""

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import StreamingResponse

from api.models import OrderResponse, PageResponse, SalesPoint
from auth.dependencies import require_permission
from auth.models import User
from core.pagination import paginate
from shop.export import orders_to_csv
from shop.store import OrderStore

logger = logging.getLogger("shopadmin.api")

router = APIRouter()


@router.get("/orders", response_model=PageResponse[OrderResponse])
def list_orders(
    request: Request,
    page: int = 1,
    current_user: User = Depends(require_permission("orders")),
) -> PageResponse[OrderResponse]:
    order_store: OrderStore = request.app.state.order_store
    return PageResponse[OrderResponse].from_result(paginate(order_store, page), OrderResponse.from_order)


@router.post("/orders/export")
def export_orders(
    request: Request,
    current_user: User = Depends(require_permission("orders")),
) -> StreamingResponse:
    """Download all orders and their items as CSV."""
    order_store: OrderStore = request.app.state.order_store
    orders = order_store.list_orders()
    logger.info("CSV export: user_id=%s orders=%d", current_user.id, len(orders))
    return StreamingResponse(
        iter([orders_to_csv(orders)]),
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="orders.csv"'},
    )


@router.get("/orders/chart", response_model=list[SalesPoint])
def sales_chart(
    request: Request,
    current_user: User = Depends(require_permission("orders")),
) -> list[SalesPoint]:
    order_store: OrderStore = request.app.state.order_store
    return [SalesPoint.from_daily(d) for d in order_store.daily_sales()]
