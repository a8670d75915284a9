"""Caller identity and idempotency headers.

The gateway in front of this service authenticates callers and forwards
their id in ``X-User-Id``.
"""

from typing import Annotated

from fastapi import Header, Request

from ams.api.exceptions import MissingUserContextError
from ams.observability.logging import get_logger

logger = get_logger(__name__)


async def get_user_id(
    request: Request,
    x_user_id: Annotated[str | None, Header(alias="X-User-Id")] = None,
) -> str:
    """Extract the caller's user id.

    Raises:
        MissingUserContextError: 401 if the header is absent or blank
    """
    if not x_user_id or not x_user_id.strip():
        logger.warning("auth_missing_user_context", path=request.url.path)
        raise MissingUserContextError("Missing user context")
    return x_user_id.strip()


async def get_idempotency_key(
    idempotency_key: Annotated[str | None, Header(alias="Idempotency-Key")] = None,
) -> str | None:
    return idempotency_key or None
