"""
api/main.py -- FastAPI application entry point for ShopAdmin.

Run with:      uvicorn asgi:app --reload

Middleware stack (outermost to innermost):
  1. TrustedHostMiddleware -- rejects requests with unexpected Host headers
  2. CORSMiddleware        -- adds CORS headers for allowed browser origins
  3. SlowAPIMiddleware     -- enforces per-route rate limits from api.limiter

Lifespan builds the process-wide collaborators once (engine, TokenCodec,
stores) and disposes the engine on shutdown. Handlers reach them through
request.app.state; nothing reads configuration per request.
"""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import timedelta

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from sqlalchemy.engine import Engine
from sqlalchemy.exc import OperationalError
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.limiter import limiter
from api.models import ErrorDetail, ErrorResponse, HealthResponse
from api.routes.v1.auth import router as auth_router
from api.routes.v1.orders import router as orders_router
from api.routes.v1.products import router as products_router
from api.routes.v1.roles import router as roles_router
from api.routes.v1.users import router as users_router
from auth.errors import CorruptHash, Forbidden, Unauthenticated
from auth.store import UserStore
from auth.tokens import TokenCodec
from core.config import Settings, get_settings
from core.database import create_db_engine
from shop.store import OrderStore, ProductStore

__version__ = "0.1.0"

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)-5s %(name)s %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("shopadmin.api")

_settings = get_settings()


# ---------------------------------------------------------------------------
# Application state
# ---------------------------------------------------------------------------


def init_state(app: FastAPI, settings: Settings, engine: Engine) -> None:
    """Attach settings, the TokenCodec and the stores to app.state.

    Split out of lifespan so tests can wire the same collaborators against
    an in-memory engine.
    """
    app.state.settings = settings
    app.state.engine = engine
    app.state.token_codec = TokenCodec(
        settings.secret_key,
        lifetime=timedelta(seconds=settings.token_expire_seconds),
    )
    app.state.user_store = UserStore(engine)
    app.state.product_store = ProductStore(engine)
    app.state.order_store = OrderStore(engine)
    if settings.seed_roles:
        created = app.state.user_store.seed_default_roles()
        if created:
            logger.info("Seeded roles: %s", ", ".join(created))


# ---------------------------------------------------------------------------
# Lifespan -- modern startup / shutdown pattern (replaces @app.on_event)
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Build collaborators on startup; dispose the connection pool on shutdown."""
    logger.info("ShopAdmin API starting up")
    settings = get_settings()
    engine = create_db_engine(settings.database_url)
    init_state(app, settings, engine)
    logger.info("Stores initialized")

    yield

    engine.dispose()
    logger.info("ShopAdmin API shutdown complete")


# ---------------------------------------------------------------------------
# App instantiation
# ---------------------------------------------------------------------------

app = FastAPI(
    title="ShopAdmin API",
    description="Administration backend for a small shop: users, roles, products and orders.",
    version=__version__,
    lifespan=lifespan,
)

# ---------------------------------------------------------------------------
# Middleware stack
#
# Register in the order you want the request to encounter them:
# TrustedHost -> CORS -> SlowAPI.
# ---------------------------------------------------------------------------

app.add_middleware(
    TrustedHostMiddleware,
    allowed_hosts=_settings.allowed_hosts,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_settings.cors_origins,
    # The session rides in a cookie, so the browser must be allowed to send it.
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["Content-Type"],
    max_age=3600,
)

app.add_middleware(SlowAPIMiddleware)

# SlowAPI looks for app.state.limiter by convention.
app.state.limiter = limiter


# ---------------------------------------------------------------------------
# Request logging middleware
# ---------------------------------------------------------------------------


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    ms = (time.perf_counter() - start) * 1000
    logger.info(
        "%s %s %d %.1fms %s",
        request.method,
        request.url.path,
        response.status_code,
        ms,
        request.client.host if request.client else "unknown",
    )
    return response


# ---------------------------------------------------------------------------
# Router registration
# ---------------------------------------------------------------------------

app.include_router(auth_router, prefix="/api/v1", tags=["Auth"])
app.include_router(users_router, prefix="/api/v1", tags=["Users"])
app.include_router(roles_router, prefix="/api/v1", tags=["Roles"])
app.include_router(products_router, prefix="/api/v1", tags=["Products"])
app.include_router(orders_router, prefix="/api/v1", tags=["Orders"])


# ---------------------------------------------------------------------------
# Exception handlers
#
# All handlers return the same ErrorResponse envelope so API clients can parse
# errors uniformly without inspecting status codes to choose a schema.
# ---------------------------------------------------------------------------


def _error(status_code: int, code: str, message: str, detail: str | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=ErrorDetail(code=code, message=message, detail=detail)).model_dump(
            exclude_none=True
        ),
    )


@app.exception_handler(Unauthenticated)
async def unauthenticated_handler(request: Request, exc: Unauthenticated) -> JSONResponse:
    """401 for a missing, invalid or expired session. The failure kind is not disclosed."""
    return _error(401, "unauthorized", "unauthorized")


@app.exception_handler(Forbidden)
async def forbidden_handler(request: Request, exc: Forbidden) -> JSONResponse:
    return _error(403, "forbidden", str(exc))


@app.exception_handler(CorruptHash)
async def corrupt_hash_handler(request: Request, exc: CorruptHash) -> JSONResponse:
    logger.error("Corrupt credential hash on %s %s: %s", request.method, request.url.path, exc)
    return _error(500, "internal_error", "An unexpected error occurred.")


@app.exception_handler(OperationalError)
async def storage_error_handler(request: Request, exc: OperationalError) -> JSONResponse:
    """503 when the database cannot be reached. The driver message stays in the log."""
    logger.error("Storage unavailable on %s %s: %s", request.method, request.url.path, exc.orig)
    return _error(503, "storage_unavailable", "Storage is temporarily unavailable.")


@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Return 429 with a structured error when a rate limit is exceeded.

    Retry-After tells clients how many seconds to wait before retrying.
    """
    retry_after = int(getattr(exc, "retry_after", 60))
    response = _error(429, "rate_limited", "Too many requests.", str(exc.detail))
    response.headers["Retry-After"] = str(retry_after)
    return response


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Return 422 with structured error when request body or query params fail validation."""
    return _error(422, "validation_error", "Request validation failed.", str(exc.errors()))


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Return a structured error for all FastAPI/Starlette HTTP exceptions.

    Route handlers raise HTTPException with detail=ErrorDetail(...).model_dump()
    (a dict). When detail is already a structured dict, use it directly as the
    error field rather than stringifying it.
    """
    if isinstance(exc.detail, dict):
        return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})
    return _error(exc.status_code, f"http_{exc.status_code}", str(exc.detail))


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all handler for unexpected server errors.

    The raw exception goes to the log only, never to the response body.
    """
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return _error(500, "internal_error", "An unexpected error occurred.")


# ---------------------------------------------------------------------------
# Health endpoint
#
# Defined directly in main.py so it is always reachable regardless of router
# registration state. No rate limit and no auth.
# ---------------------------------------------------------------------------


@app.get("/api/v1/health", tags=["Health"])
async def health() -> HealthResponse:
    """Return API liveness and current version."""
    return HealthResponse(version=__version__)
