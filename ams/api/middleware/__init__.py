"""API middleware and request-scoped dependencies."""

from ams.api.middleware.auth import get_idempotency_key, get_user_id
from ams.api.middleware.context import RequestContextMiddleware

__all__ = ["RequestContextMiddleware", "get_idempotency_key", "get_user_id"]
