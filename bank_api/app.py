"""
Main FastAPI application.

This file wires together all layers:
- Domain: Business entities and rules
- Infrastructure: Retry policies, remote API client
- Repositories: Data access over four backends
- Services: Validation, orchestration and enrichment
- Routers: HTTP endpoints
"""

import time
import uuid
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from . import __version__
from .config import settings
from .container import ServiceContainer
from .dependencies import set_container
from .error_handlers import register_exception_handlers
from .logging_config import setup_logging
from .metrics import http_request_duration_seconds, http_requests_total, metrics_response
from .routers import (
    bank_accounts_router,
    bank_branches_router,
    customer_accounts_router,
    customers_router,
    health_router,
    transactions_router,
)
from .seed import seed_development_data

setup_logging(settings.LOG_LEVEL, json_logs=settings.LOG_JSON)
logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    logger.info("Starting Bank API...", environment=settings.ENVIRONMENT)

    try:
        container = await ServiceContainer.create(settings)
    except Exception as e:
        logger.error("Failed to initialize services", error=str(e))
        raise

    if settings.is_development and settings.SEED_DEVELOPMENT_DATA:
        await seed_development_data(container)

    set_container(container)
    logger.info("Bank API started successfully")

    yield

    # Shutdown
    logger.info("Shutting down Bank API...")
    set_container(None)
    await container.close()
    logger.info("Bank API shut down complete")


# Create FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    description="Banking CRUD API over relational, document and remote stores",
    version=__version__,
    lifespan=lifespan,
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
)


# CORS configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Metrics middleware
@app.middleware("http")
async def track_metrics(request: Request, call_next):
    """Track Prometheus metrics."""
    start_time = time.time()

    response = await call_next(request)

    route = request.scope.get("route")
    endpoint = getattr(route, "path", request.url.path)
    http_requests_total.labels(
        method=request.method, endpoint=endpoint, status=response.status_code
    ).inc()
    http_request_duration_seconds.labels(method=request.method, endpoint=endpoint).observe(
        time.time() - start_time
    )

    return response


# Request ID middleware
@app.middleware("http")
async def add_request_id(request: Request, call_next):
    """Add request ID for distributed tracing."""
    request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
    request.state.request_id = request_id

    structlog.contextvars.bind_contextvars(request_id=request_id)
    try:
        response = await call_next(request)
    finally:
        structlog.contextvars.clear_contextvars()

    response.headers["X-Request-ID"] = request_id
    return response


register_exception_handlers(app, development=settings.is_development)

# Include routers
app.include_router(customers_router.router)
app.include_router(customer_accounts_router.router)
app.include_router(bank_accounts_router.router)
app.include_router(bank_branches_router.router)
app.include_router(transactions_router.router)
app.include_router(health_router.router)


# Prometheus metrics endpoint
@app.get("/metrics", include_in_schema=False)
async def metrics():
    """Prometheus metrics endpoint."""
    return metrics_response()


# Root endpoint
@app.get("/")
async def root():
    """Root endpoint with service information."""
    return {
        "service": settings.APP_NAME,
        "version": __version__,
        "status": "operational",
        "docs": "/api/docs",
        "health": "/api/health",
        "ready": "/api/ready",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("bank_api.app:app", host=settings.HOST, port=settings.PORT)
