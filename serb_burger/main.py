"""
FastAPI Application Entry Point

Serb Burger online ordering backend.
Card payments go through WATA Pay, or a local mock when WATA credentials
are not configured.

Endpoints:
    - /api/categories, /api/ingredients, /api/products: catalog CRUD
    - GET /api/menu: public storefront menu
    - POST /api/checkout: pay and place an order
    - /api/orders: order placement, status and QR code
    - /api/admin/*: login, order queue, QR scan
    - POST /api/webhooks/wata: payment notifications
    - GET /health: system health check

Run:
    uvicorn serb_burger.main:app --reload
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime

from fastapi import Depends, FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from serb_burger.api import api_router
from serb_burger.core.config import get_settings, setup_logging
from serb_burger.core.errors import AdminAuthRequired, AppError
from serb_burger.database import engine, get_db, init_db
from serb_burger.models import Category, Ingredient, Product
from serb_burger.schemas import ErrorResponse, HealthResponse
from serb_burger.services.payment import get_payment_service

# Initialize configuration and logging
settings = get_settings()
setup_logging()
logger = logging.getLogger(__name__)


# =============================================================================
# APPLICATION LIFECYCLE
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application startup and shutdown events.
    """
    # Startup
    logger.info("=" * 60)
    logger.info(f"Starting {settings.app_name}")
    logger.info(f"   Version: {settings.app_version}")
    logger.info(f"   Environment: {settings.env_mode.value}")
    logger.info(f"   Debug: {settings.debug}")
    logger.info("=" * 60)

    await init_db()

    payment_service = get_payment_service()
    logger.info(f"Payment Service: {payment_service.provider_name}")

    if settings.use_real_services:
        missing = settings.validate_production_config()
        if missing:
            logger.warning(f"Missing production config: {missing}")

    logger.info("Application ready")

    yield  # Application runs

    # Shutdown
    logger.info("Shutting down...")
    await payment_service.close()
    await engine.dispose()
    logger.info("Cleanup complete")


# =============================================================================
# APPLICATION INSTANCE
# =============================================================================

app = FastAPI(
    title=settings.app_name,
    description=(
        "Online ordering for a single burger restaurant: catalog management, "
        "customizable menu, checkout with WATA Pay and QR-code order pickup."
    ),
    version=settings.app_version,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.public_base_url],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router)


# =============================================================================
# ROOT & HEALTH ENDPOINTS
# =============================================================================

@app.get("/", tags=["Root"])
async def root() -> dict[str, str]:
    """API root with navigation links."""
    return {
        "message": f"Welcome to {settings.restaurant_name}",
        "version": settings.app_version,
        "environment": settings.env_mode.value,
        "documentation": "/docs",
        "menu": "/api/menu",
        "health": "/health",
    }


@app.get(
    "/health",
    response_model=HealthResponse,
    tags=["Health"],
    summary="System Health Check",
)
async def health_check(db: AsyncSession = Depends(get_db)) -> HealthResponse:
    """Database connectivity, payment provider and catalog size."""
    counts = {"products": 0, "categories": 0, "ingredients": 0}

    db_status = "healthy"
    try:
        for key, model in (("products", Product), ("categories", Category), ("ingredients", Ingredient)):
            counts[key] = await db.scalar(select(func.count(model.id))) or 0
    except SQLAlchemyError as e:
        db_status = f"unhealthy: {e.__class__.__name__}"
        logger.error(f"Database health check failed: {e}")

    payment_service = get_payment_service()
    payment_healthy = await payment_service.health_check()
    payment_status = f"{payment_service.provider_name}: {'healthy' if payment_healthy else 'unhealthy'}"

    overall = "operational" if db_status == "healthy" and payment_healthy else "degraded"

    return HealthResponse(
        status=overall,
        environment=settings.env_mode.value,
        database=db_status,
        payment_service=payment_status,
        timestamp=datetime.now(),
        **counts,
    )


# =============================================================================
# ERROR HANDLERS
# =============================================================================

def _error_response(status_code: int, error: str, detail=None) -> JSONResponse:
    body = ErrorResponse(error=error, detail=jsonable_encoder(detail))
    return JSONResponse(status_code=status_code, content=body.model_dump())


@app.exception_handler(AdminAuthRequired)
async def admin_auth_handler(request: Request, exc: AdminAuthRequired):
    """Browsers navigating to an admin page go to the login screen."""
    if request.method == "GET" and "text/html" in request.headers.get("accept", ""):
        return RedirectResponse(url="/admin/login", status_code=307)
    return _error_response(exc.status_code, exc.message, exc.details)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path}: {exc.message}")
    return _error_response(exc.status_code, exc.message, exc.details)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed input is a 400 like every other client error."""
    logger.debug(f"Validation failed on {request.url.path}: {exc.errors()}")
    return _error_response(400, "Некорректные данные", exc.errors())


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all exception handler."""
    logger.exception(f"Unhandled exception: {exc}")

    return _error_response(
        500,
        "Internal Server Error",
        str(exc) if settings.debug else "An unexpected error occurred",
    )


# =============================================================================
# DEVELOPMENT SERVER
# =============================================================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "serb_burger.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.is_development,
        log_level="debug" if settings.debug else "info",
    )
