"""
api/limiter.py -- The one slowapi Limiter every route module shares.

api/main.py mounts it (SlowAPIMiddleware + app.state.limiter); route modules
decorate handlers with @limiter.limit(...). Counters live in process memory,
keyed by client IP, so one instance must serve all routes.

RATE_LIMIT_ENABLED=false disables every limit; the test suite relies on it.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from core.config import get_settings

limiter = Limiter(
    key_func=get_remote_address,
    storage_uri="memory://",
    enabled=get_settings().rate_limit_enabled,
)
