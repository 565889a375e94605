"""FastAPI application for the Tapp storefront service."""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from libs.common.config import get_settings
from libs.common.error_handler import add_exception_handlers
from libs.common.logging import get_logger
from libs.common.middleware import add_observability_middleware
from libs.common.rate_limit import limiter, rate_limit_exceeded_handler
from services.storefront_service.routers import (
    auth_router,
    catalog_router,
    customers_router,
    discounts_router,
    orders_router,
    public_router,
    stores_router,
    superadmin_router,
)
from services.storefront_service.services.pixels import (
    init_pixel_registry,
    teardown_pixel_registry,
)
from services.storefront_service.services.uploads import UPLOAD_URL_PREFIX, upload_dir
from slowapi.errors import RateLimitExceeded

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_pixel_registry()
    logger.info("Storefront service started")
    yield
    teardown_pixel_registry()


def create_app() -> FastAPI:
    """Create and configure the storefront FastAPI app."""
    settings = get_settings()
    app = FastAPI(
        title="Tapp Storefront Service",
        version="0.1.0",
        description="Multi-tenant storefronts with WhatsApp checkout for Kazakhstan.",
        lifespan=lifespan,
    )

    # Add rate limiter state to app
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials="*" not in settings.CORS_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Add observability (structured logging + request tracing)
    add_observability_middleware(app)

    # Add global exception handlers for consistent error responses
    add_exception_handlers(app)

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok", "service": "storefront"}

    # Owner dashboard
    app.include_router(auth_router, prefix="/api/auth")
    app.include_router(stores_router, prefix="/api")
    app.include_router(catalog_router, prefix="/api")
    app.include_router(discounts_router, prefix="/api")
    app.include_router(orders_router, prefix="/api")
    app.include_router(customers_router, prefix="/api")

    # Public storefront, checkout and platform lookups
    app.include_router(public_router, prefix="/api")

    # Platform console
    app.include_router(superadmin_router, prefix="/api")

    # Uploaded images
    app.mount(
        UPLOAD_URL_PREFIX,
        StaticFiles(directory=str(upload_dir())),
        name="uploads",
    )

    return app


app = create_app()
