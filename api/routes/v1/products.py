"""
api/routes/v1/products.py -- Product catalogue CRUD, gated on "products".

Routes:
  GET    /products?page=N        -- paginated list
  POST   /products               -- create
  GET    /products/{product_id}  -- detail
  PUT    /products/{product_id}  -- partial update
  DELETE /products/{product_id}  -- delete
"""

from fastapi import APIRouter, Depends, HTTPException, Request, Response

from api.models import ErrorDetail, PageResponse, ProductCreate, ProductResponse, ProductUpdate
from auth.dependencies import require_permission
from auth.models import User
from core.pagination import paginate
from shop.models import Product
from shop.store import ProductStore

router = APIRouter()


def _not_found(product_id: int) -> HTTPException:
    return HTTPException(
        status_code=404,
        detail=ErrorDetail(code="product_not_found", message=f"Product {product_id} not found.").model_dump(),
    )


@router.get("/products", response_model=PageResponse[ProductResponse])
def list_products(
    request: Request,
    page: int = 1,
    current_user: User = Depends(require_permission("products")),
) -> PageResponse[ProductResponse]:
    product_store: ProductStore = request.app.state.product_store
    return PageResponse[ProductResponse].from_result(paginate(product_store, page), ProductResponse.from_product)


@router.post("/products", response_model=ProductResponse, status_code=201)
def create_product(
    request: Request,
    body: ProductCreate,
    current_user: User = Depends(require_permission("products")),
) -> ProductResponse:
    product_store: ProductStore = request.app.state.product_store
    product_id = product_store.create_product(Product(**body.model_dump()))
    return ProductResponse.from_product(product_store.get_product(product_id))


@router.get("/products/{product_id}", response_model=ProductResponse)
def get_product(
    request: Request,
    product_id: int,
    current_user: User = Depends(require_permission("products")),
) -> ProductResponse:
    product_store: ProductStore = request.app.state.product_store
    product = product_store.get_product(product_id)
    if product is None:
        raise _not_found(product_id)
    return ProductResponse.from_product(product)


@router.put("/products/{product_id}", response_model=ProductResponse)
def update_product(
    request: Request,
    product_id: int,
    body: ProductUpdate,
    current_user: User = Depends(require_permission("products")),
) -> ProductResponse:
    """Update any subset of title, description, image and price."""
    product_store: ProductStore = request.app.state.product_store
    if not product_store.update_product(product_id, **body.model_dump(exclude_none=True)):
        raise _not_found(product_id)
    return ProductResponse.from_product(product_store.get_product(product_id))


@router.delete("/products/{product_id}", status_code=204)
def delete_product(
    request: Request,
    product_id: int,
    current_user: User = Depends(require_permission("products")),
) -> Response:
    product_store: ProductStore = request.app.state.product_store
    if not product_store.delete_product(product_id):
        raise _not_found(product_id)
    return Response(status_code=204)
