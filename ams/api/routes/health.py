"""Health check and metrics endpoints."""

from datetime import UTC, datetime
from typing import Literal

from fastapi import APIRouter, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from ams import __version__
from ams.api.dependencies import SettingsDep, get_postgres_pool
from ams.api.models.health import HealthResponse
from ams.db.errors import StoreError
from ams.observability.logging import get_logger

logger = get_logger(__name__)

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health_check(settings: SettingsDep) -> HealthResponse:
    """Report the database and the configuration create/upgrade depend on.

    ``ok`` and ``inmemory`` are healthy; a database error is unhealthy; a
    missing billing proxy URL or upstream key is degraded.
    """
    checks: dict[str, str] = {}

    if settings.storage.backend == "postgres":
        pool = get_postgres_pool(settings)
        if not pool.is_connected:
            try:
                await pool.connect()
            except StoreError as e:
                logger.warning("health_database_connect_failed", error=str(e))
        checks["database"] = "ok" if await pool.health_check() else "error"
    else:
        checks["database"] = "inmemory"

    checks["billing_proxy"] = "ok" if settings.billing.proxy_base_url else "missing"
    checks["upstream_api_key"] = "ok" if settings.upstream.api_key else "missing"

    status: Literal["healthy", "degraded", "unhealthy"]
    if checks["database"] == "error":
        status = "unhealthy"
    elif "missing" in checks.values():
        status = "degraded"
    else:
        status = "healthy"

    logger.debug("health_check_completed", status=status)
    return HealthResponse(
        status=status,
        version=__version__,
        checks=checks,
        timestamp=datetime.now(UTC),
    )


metrics_router = APIRouter()


@metrics_router.get("/metrics")
async def get_metrics() -> Response:
    """Prometheus metrics in text exposition format."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
