"""Dashboard service main application."""

import time
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .api.pages import router as pages_router
from .api.routes import router as api_router
from .proxy.forwarder import BackendProxy, build_routes
from .runtime.metrics import get_metrics_collector
from libs.common.config import DashboardConfig, get_config
from libs.common.logging import configure_logging, get_logger

SERVICE_NAME = "dashboard-service"
VERSION = "0.1.0"

logger = get_logger("dashboard_service")

_config = DashboardConfig()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    # Startup
    config = get_config("dashboard")
    configure_logging(SERVICE_NAME, config.gfg_log_level, config.gfg_log_format)
    app.state.config = config
    app.state.startup_time = time.time()

    logger.info("Starting dashboard service", backend_url=config.backend_base_url)

    # Initialize metrics collector
    app.state.metrics_collector = get_metrics_collector(SERVICE_NAME)

    # Initialize backend proxy
    app.state.proxy_routes = build_routes(config)
    app.state.backend_proxy = BackendProxy(
        config.backend_base_url,
        metrics_collector=app.state.metrics_collector,
    )
    await app.state.backend_proxy.initialize()

    logger.info("Dashboard service started successfully")

    yield

    # Shutdown
    logger.info("Shutting down dashboard service")
    await app.state.backend_proxy.cleanup()
    logger.info("Dashboard service shutdown complete")


# Create FastAPI application
app = FastAPI(
    title="GFG Stats Dashboard",
    description="Dashboard and validating proxy for GeeksforGeeks profile statistics",
    version=VERSION,
    lifespan=lifespan
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=_config.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routes
app.include_router(api_router, prefix="/api")
app.include_router(pages_router)


def _endpoint_label(request: Request) -> str:
    """Route template for metric labels; raw paths would embed usernames."""
    route = request.scope.get("route")
    path = getattr(route, "path", None)
    if not path:
        return "unmatched"
    # Routers mounted under a prefix may report the prefix in root_path only.
    root_path = request.scope.get("root_path", "")
    if root_path and not path.startswith(root_path):
        path = root_path + path
    return path


@app.middleware("http")
async def metrics_middleware(request: Request, call_next):
    """Collect metrics and add the processing time header."""
    start_time = time.time()

    try:
        response = await call_next(request)
        status_code = response.status_code
    except Exception as e:
        logger.exception("Unhandled error", path=request.url.path)
        status_code = 500
        response = JSONResponse(
            status_code=500,
            content={"error": "Internal server error", "detail": str(e)}
        )

    duration = time.time() - start_time
    response.headers["X-Process-Time"] = str(duration)

    # Record metrics
    if hasattr(app.state, 'metrics_collector'):
        app.state.metrics_collector.record_http_request(
            method=request.method,
            endpoint=_endpoint_label(request),
            status=status_code,
            duration=duration
        )

    return response


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    if hasattr(app.state, "backend_proxy"):
        return {"status": "healthy", "service": SERVICE_NAME}
    return JSONResponse(
        status_code=503,
        content={"status": "unhealthy", "service": SERVICE_NAME}
    )


@app.get("/metrics")
async def metrics():
    """Prometheus metrics endpoint."""
    if hasattr(app.state, 'metrics_collector'):
        metrics_data = app.state.metrics_collector.get_metrics()
        return Response(content=metrics_data, media_type="text/plain")
    else:
        return Response(content="# No metrics available\n", media_type="text/plain")


@app.get("/service-info")
async def service_info():
    """Service description and endpoint index."""
    return {
        "service": SERVICE_NAME,
        "version": VERSION,
        "status": "running",
        "endpoints": {
            "health": "/health",
            "metrics": "/metrics",
            "profile": "/api/profile/{username}",
            "stats": "/api/stats/{username}?format=json|svg",
            "problems": "/api/problems/{username}",
            "dashboard": "/",
        }
    }


if __name__ == "__main__":
    uvicorn.run(
        "service_dashboard.app.main:app",
        host=_config.gfg_dashboard_host,
        port=_config.gfg_dashboard_port,
        log_level=_config.gfg_log_level.lower()
    )
