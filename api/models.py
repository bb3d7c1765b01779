"""
API request and response models for ShopAdmin REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in auth/models.py and
shop/models.py, which own the internal domain representation. Route handlers
map between the two.

Every request body has its own model with named fields, validated before the
handler runs. No response model has a password field, so a credential hash
cannot be serialized even by mistake.
"""

from collections.abc import Callable
from typing import Annotated, Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, StringConstraints, field_validator

from auth.models import Role, User
from core.pagination import PageResult
from shop.models import DailySales, Order, OrderItem, Product

T = TypeVar("T")
D = TypeVar("D")

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"

# bcrypt reads at most 72 bytes; longer secrets are rejected at the edge.
# max_length counts characters, so the byte limit is checked separately.
PASSWORD_MAX_LENGTH = 72
PASSWORD_MAX_BYTES = 72


def _check_password_bytes(value: str) -> str:
    if len(value.encode("utf-8")) > PASSWORD_MAX_BYTES:
        raise ValueError(f"Password must be at most {PASSWORD_MAX_BYTES} bytes when UTF-8 encoded.")
    return value


# Names and emails are stripped; passwords never are, so a password is hashed
# exactly as the client will later send it to /auth/login.
_Name = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=255)]
_Email = Annotated[str, StringConstraints(strip_whitespace=True, max_length=255, pattern=EMAIL_PATTERN)]


# ---------------------------------------------------------------------------
# Shared envelopes
# ---------------------------------------------------------------------------


class ErrorDetail(BaseModel):
    """Machine-readable error payload."""

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    detail: Optional[str] = None


class ErrorResponse(BaseModel):
    """Top-level error envelope returned on 4xx/5xx responses."""

    model_config = ConfigDict(frozen=True)

    error: ErrorDetail


class MessageResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    message: str


class HealthResponse(BaseModel):
    """Response for GET /api/v1/health."""

    model_config = ConfigDict(frozen=True)

    status: str = "ok"
    version: str


class PageMetaResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    total: int
    page: int
    last_page: int


class PageResponse(BaseModel, Generic[T]):
    """Pagination envelope shared by every list endpoint:
    {"data": [...], "meta": {"total", "page", "last_page"}}
    """

    model_config = ConfigDict(frozen=True)

    data: list[T]
    meta: PageMetaResponse

    @classmethod
    def from_result(cls, result: PageResult[D], mapper: Callable[[D], T]) -> "PageResponse[T]":
        return cls(
            data=[mapper(record) for record in result.data],
            meta=PageMetaResponse(
                total=result.meta.total,
                page=result.meta.page,
                last_page=result.meta.last_page,
            ),
        )


# ---------------------------------------------------------------------------
# Auth -- request models
# ---------------------------------------------------------------------------


class RegisterRequest(BaseModel):
    """Request body for POST /api/v1/auth/register.

    password/password_confirm equality is checked by the handler so a mismatch
    gets its own 400 error code rather than a generic validation failure.
    """

    first_name: _Name
    last_name: _Name
    email: _Email
    password: str = Field(min_length=1, max_length=PASSWORD_MAX_LENGTH)
    password_confirm: str = Field(min_length=1, max_length=PASSWORD_MAX_LENGTH)

    @field_validator("password", "password_confirm")
    @classmethod
    def password_fits_bcrypt(cls, value: str) -> str:
        return _check_password_bytes(value)


class LoginRequest(BaseModel):
    email: str = Field(min_length=1, max_length=255)
    password: str = Field(min_length=1, max_length=255)


class UpdateInfoRequest(BaseModel):
    """Request body for PUT /api/v1/auth/users/info. Omitted fields are unchanged."""

    model_config = ConfigDict(str_strip_whitespace=True)

    first_name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    last_name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    email: Optional[str] = Field(default=None, max_length=255, pattern=EMAIL_PATTERN)


class UpdatePasswordRequest(BaseModel):
    password: str = Field(min_length=1, max_length=PASSWORD_MAX_LENGTH)
    password_confirm: str = Field(min_length=1, max_length=PASSWORD_MAX_LENGTH)

    @field_validator("password", "password_confirm")
    @classmethod
    def password_fits_bcrypt(cls, value: str) -> str:
        return _check_password_bytes(value)


# ---------------------------------------------------------------------------
# Users and roles
# ---------------------------------------------------------------------------


class UserCreate(BaseModel):
    """Request body for POST /api/v1/users (users admin)."""

    first_name: _Name
    last_name: _Name
    email: _Email
    password: str = Field(min_length=1, max_length=PASSWORD_MAX_LENGTH)
    role_id: int

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value: str) -> str:
        return _check_password_bytes(value)


class UserUpdate(BaseModel):
    """Request body for PUT /api/v1/users/{id}. Omitted fields are unchanged."""

    model_config = ConfigDict(str_strip_whitespace=True)

    first_name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    last_name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    email: Optional[str] = Field(default=None, max_length=255, pattern=EMAIL_PATTERN)
    role_id: Optional[int] = None


class RoleResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    permissions: list[str]

    @classmethod
    def from_role(cls, role: Role) -> "RoleResponse":
        return cls(id=role.id, name=role.name, permissions=list(role.permissions))


class UserResponse(BaseModel):
    """A user as clients see it. There is deliberately no password field."""

    model_config = ConfigDict(frozen=True)

    id: int
    first_name: str
    last_name: str
    email: str
    role_id: int
    role: Optional[RoleResponse] = None

    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        return cls(
            id=user.id,
            first_name=user.first_name,
            last_name=user.last_name,
            email=user.email,
            role_id=user.role_id,
            role=RoleResponse.from_role(user.role) if user.role is not None else None,
        )


# ---------------------------------------------------------------------------
# Products
# ---------------------------------------------------------------------------


class ProductCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(min_length=1, max_length=255)
    description: str = Field(default="", max_length=5000)
    image: str = Field(default="", max_length=255)
    price: float = Field(default=0.0, ge=0)


class ProductUpdate(BaseModel):
    """Request body for PUT /api/v1/products/{id}. Omitted fields are unchanged."""

    model_config = ConfigDict(str_strip_whitespace=True)

    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = Field(default=None, max_length=5000)
    image: Optional[str] = Field(default=None, max_length=255)
    price: Optional[float] = Field(default=None, ge=0)


class ProductResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    title: str
    description: str
    image: str
    price: float

    @classmethod
    def from_product(cls, product: Product) -> "ProductResponse":
        return cls(
            id=product.id,
            title=product.title,
            description=product.description,
            image=product.image,
            price=product.price,
        )


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------


class OrderItemResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    product_title: str
    price: float
    quantity: int

    @classmethod
    def from_item(cls, item: OrderItem) -> "OrderItemResponse":
        return cls(id=item.id, product_title=item.product_title, price=item.price, quantity=item.quantity)


class OrderResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    email: str
    total: float
    created_at: str
    order_items: list[OrderItemResponse] = Field(default_factory=list)

    @classmethod
    def from_order(cls, order: Order) -> "OrderResponse":
        return cls(
            id=order.id,
            name=order.name,
            email=order.email,
            total=order.total,
            created_at=order.created_at,
            order_items=[OrderItemResponse.from_item(i) for i in order.items],
        )


class SalesPoint(BaseModel):
    """One point of GET /api/v1/orders/chart."""

    model_config = ConfigDict(frozen=True)

    date: str
    sum: float

    @classmethod
    def from_daily(cls, daily: DailySales) -> "SalesPoint":
        return cls(date=daily.date, sum=daily.total)
