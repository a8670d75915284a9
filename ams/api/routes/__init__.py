"""API route registration."""

from fastapi import APIRouter, FastAPI

from ams.observability.logging import get_logger

logger = get_logger(__name__)


def create_v1_router() -> APIRouter:
    """Create the v1 API router with all routes."""
    router = APIRouter(prefix="/api/v1")

    from ams.api.routes.agents import router as agents_router
    from ams.api.routes.profile import router as profile_router
    from ams.api.routes.templates import router as templates_router

    router.include_router(templates_router, tags=["Templates"])
    router.include_router(agents_router, tags=["Agents"])
    router.include_router(profile_router, tags=["Profile"])

    logger.debug("v1_router_created", routes=["templates", "agents", "me"])
    return router


def register_routes(app: FastAPI, metrics_enabled: bool = True) -> None:
    """Register all routes with the FastAPI application."""
    app.include_router(create_v1_router())

    from ams.api.routes.health import metrics_router
    from ams.api.routes.health import router as health_router

    app.include_router(health_router, tags=["Health"])
    if metrics_enabled:
        app.include_router(metrics_router, tags=["Health"])

    logger.info("routes_registered")
