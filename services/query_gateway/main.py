"""Main application for the query gateway service."""

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI, Request, Response, status
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
import httpx
import structlog
import uvicorn

from shared.config import Settings, get_settings
from shared.database import DatabaseManager
from shared.observability import GatewayMetrics, setup_logging
from .config import RouteConfig, get_gateway_config
from .inventory import InventoryService
from .middleware import RequestIDMiddleware
from .proxy import JSON_CONTENT_TYPE, GatewayProxy, ProxyClient

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    settings: Settings = app.state.settings

    # Startup
    logger.info(
        "Starting query gateway",
        query_api_base=settings.query_api_base,
        dashboard_api_base=settings.dashboard_api_base,
        timeout=settings.proxy_timeout,
    )

    database = DatabaseManager(settings)
    await database.initialize()

    gateway_config = app.state.gateway_config
    proxy_client = ProxyClient(gateway_config.request_timeout, transport=app.state.transport)
    gateway = GatewayProxy(gateway_config, proxy_client, app.state.metrics)

    app.state.database = database
    app.state.gateway = gateway
    app.state.inventory = InventoryService(
        database,
        proxy_client.client,
        settings.query_api_base,
        app.state.metrics,
    )

    logger.info("Query gateway started successfully")

    try:
        yield
    finally:
        # Shutdown
        logger.info("Shutting down query gateway")
        await gateway.close()
        await database.close()
        logger.info("Query gateway stopped")


def make_forward_endpoint(route: RouteConfig):
    """Endpoint relaying requests on ``route.path`` to the route's backend."""

    async def forward(request: Request) -> Response:
        return await request.app.state.gateway.proxy_request(request, route)

    return forward


async def agent_alive(request: Request) -> JSONResponse:
    """Registered agent hosts with their latest liveness datapoint."""
    result = await request.app.state.inventory.agent_alive()
    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content=result.model_dump(mode="json"),
        media_type=JSON_CONTENT_TYPE,
    )


async def health_check(request: Request) -> JSONResponse:
    """Health check endpoint."""
    settings: Settings = request.app.state.settings
    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content={
            "status": "healthy",
            "service": settings.get_service_info(),
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "backends": settings.get_backends_config(),
        },
    )


async def ready(request: Request) -> JSONResponse:
    """Readiness probe endpoint."""
    database: DatabaseManager = request.app.state.database
    if await database.check_health():
        return JSONResponse(status_code=status.HTTP_200_OK, content={"status": "ready"})
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"status": "not ready", "database": "unreachable"},
    )


async def metrics(request: Request) -> Response:
    """Metrics endpoint for Prometheus."""
    gateway_metrics: GatewayMetrics = request.app.state.metrics
    return Response(
        content=gateway_metrics.get_metrics(),
        media_type=gateway_metrics.content_type,
    )


# Error handlers
async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render HTTP errors raised by routing or handlers as JSON."""
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": exc.detail,
            "message": exc.detail,
            "path": request.url.path,
        },
        media_type=JSON_CONTENT_TYPE,
        headers=getattr(exc, "headers", None),
    )


async def internal_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle 500 errors."""
    logger.error("Internal server error", path=request.url.path, error=str(exc), exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "Internal Server Error",
            "message": "An unexpected error occurred",
        },
        media_type=JSON_CONTENT_TYPE,
    )


def create_app(
    settings: Optional[Settings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    """Build the gateway application.

    ``transport`` replaces the network layer of the outbound HTTP client,
    which lets tests stand in for the backends.
    """
    settings = settings or get_settings()

    setup_logging(
        service_name=settings.service_name,
        level=settings.log_level,
        format_type=settings.log_format,
        logger_levels=settings.logger_levels,
        sensitive_fields=settings.sensitive_fields,
    )

    app = FastAPI(
        title="Query Gateway",
        description="Forwards query and dashboard API calls to their backends",
        version=settings.app_version,
        lifespan=lifespan,
        # Routes match on exact path, without slash redirects
        redirect_slashes=False,
    )

    gateway_config = get_gateway_config(settings)
    app.state.settings = settings
    app.state.transport = transport
    app.state.gateway_config = gateway_config
    app.state.metrics = GatewayMetrics(settings.service_name)

    app.add_middleware(RequestIDMiddleware)

    for route in gateway_config.routes:
        app.add_api_route(
            route.path,
            make_forward_endpoint(route),
            methods=route.methods,
            name=route.path,
        )

    app.add_api_route("/api/alive", agent_alive, methods=["GET"])
    app.add_api_route(settings.health_check_path, health_check, methods=["GET"])
    app.add_api_route("/ready", ready, methods=["GET"])
    if settings.enable_metrics:
        app.add_api_route(settings.metrics_path, metrics, methods=["GET"])

    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(Exception, internal_error_handler)

    return app


app = create_app()


def main():
    """Main entry point."""
    settings = get_settings()
    uvicorn.run(
        "services.query_gateway.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
        reload=settings.debug,
        access_log=True,
    )


if __name__ == "__main__":
    main()
