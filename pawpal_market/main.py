"""
FastAPI Application Entry Point - Marketplace Service
"""
from collections import defaultdict

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_fastapi_instrumentator import Instrumentator
from starlette.exceptions import HTTPException as StarletteHTTPException

from pawpal_market import __version__
from pawpal_market.config import settings
from pawpal_market.database import init_db
from pawpal_market.logging_config import configure_logging
from pawpal_market.api import admin, cart, health, orders, points, products
from pawpal_market.publishers.event_publisher import EventPublisher
from pawpal_market.schemas.common import ErrorResponse
from pawpal_market.services.auth_client import AuthServiceClient
from pawpal_market.services.exceptions import MarketplaceError

configure_logging(settings.LOG_LEVEL)
logger = structlog.get_logger(__name__)

# Create FastAPI application
app = FastAPI(
    title="PawPal Marketplace Service",
    description="Catalog, cart, order settlement and points ledger for the PawPal app",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc"
)

# One client and one publisher per process, injected through dependencies
app.state.auth_client = AuthServiceClient(
    base_url=settings.AUTH_SERVICE_URL,
    timeout=settings.AUTH_TIMEOUT
)
app.state.event_publisher = EventPublisher()

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(health.router)
app.include_router(products.router, prefix="/api")
app.include_router(cart.router, prefix="/api")
app.include_router(orders.router, prefix="/api")
app.include_router(points.router, prefix="/api")
app.include_router(admin.router, prefix="/api")

# Prometheus metrics
Instrumentator().instrument(app).expose(app)


def error_response(status_code: int, message: str, errors=None) -> JSONResponse:
    body = ErrorResponse(message=message, errors=errors)
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


@app.exception_handler(MarketplaceError)
async def marketplace_error_handler(request: Request, exc: MarketplaceError):
    return error_response(exc.status_code, exc.message)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = defaultdict(list)
    for error in exc.errors():
        location = [str(part) for part in error["loc"] if part not in ("body", "query", "path")]
        errors[".".join(location) or "request"].append(error["msg"])
    return error_response(status.HTTP_422_UNPROCESSABLE_ENTITY, "Validation failed", dict(errors))


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return error_response(exc.status_code, str(exc.detail))


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception("unhandled_error", method=request.method, path=request.url.path)
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "An error occurred on the server.")


@app.on_event("startup")
def startup_event():
    """Initialize database on startup"""
    init_db()
    logger.info(
        "service_started",
        service=settings.SERVICE_NAME,
        port=settings.SERVICE_PORT,
        auth_service=settings.AUTH_SERVICE_URL,
        events_enabled=settings.EVENTS_ENABLED
    )


@app.on_event("shutdown")
async def shutdown_event():
    """Cleanup on shutdown"""
    await app.state.auth_client.aclose()
    logger.info("service_stopped", service=settings.SERVICE_NAME)
