"""
Storefront Catalog Backend
FastAPI application entry point

- Rate limiting with SlowAPI
- Error sanitization middleware and catalog error mapping
- Request size limits
- Health endpoint with DB ping
"""
import logging
from datetime import datetime, timezone
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Depends
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.routes import (
    products,
    stacks,
    categories,
    admin_auth,
    admin_products,
    admin_stacks,
    admin_categories,
    admin_settings,
)
from app.core.config import settings
from app.core.database import AsyncSessionLocal, Base, engine, get_db
from app.core.error_handler import ErrorSanitizationMiddleware, catalog_error_handler
from app.core.exceptions import CatalogError
from app.core.rate_limit import limiter, rate_limit_exceeded_handler
from app.schemas.admin import SiteConfigResponse
from app.services.site_settings import SiteSettingsService
# Import models to register them with SQLAlchemy
from app.models import (  # noqa: F401
    Product, Stack, StackProduct, Category, ProductCategory, SiteSetting, AdminSession
)

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create missing tables on startup, dispose the engine on shutdown."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info(f"{settings.APP_NAME} started ({settings.ENVIRONMENT})")

    yield

    await engine.dispose()
    logger.info("Database engine disposed")


app = FastAPI(
    lifespan=lifespan,
    title=f"{settings.APP_NAME} API",
    description="""
## Storefront Catalog API

Products, stacks and categories for a small storefront, plus the admin
dashboard backend.

### Authentication
Admin endpoints need a session from `POST /api/admin/login` (access code).
The session is set as an HttpOnly cookie; the same token works as a Bearer
header. Cookie-authenticated mutations require the `X-CSRF-Token` header.

### Rate Limits
- Admin login: 5 requests/minute
- General: 100 requests/minute
    """,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_tags=[
        {"name": "Health", "description": "Health check endpoints"},
        {"name": "Products", "description": "Public product catalog"},
        {"name": "Stacks", "description": "Public storefront stacks"},
        {"name": "Categories", "description": "Public categories"},
        {"name": "Config", "description": "Public configuration endpoints"},
        {"name": "Admin", "description": "Admin dashboard endpoints"},
    ],
)

# Rate limiting
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

# Catalog errors -> 404/400/502/500
app.add_exception_handler(CatalogError, catalog_error_handler)

# Request size limit (product payloads are small; images are uploaded elsewhere)
MAX_REQUEST_SIZE = 1 * 1024 * 1024  # 1MB


class RequestSizeLimitMiddleware(BaseHTTPMiddleware):
    """Reject requests that exceed the size limit."""

    async def dispatch(self, request: Request, call_next):
        content_length = request.headers.get("content-length")
        if content_length and content_length.isdigit() and int(content_length) > MAX_REQUEST_SIZE:
            logger.warning(
                f"Request size limit exceeded: {content_length} bytes from "
                f"{request.client.host if request.client else 'unknown'}"
            )
            return JSONResponse(
                status_code=413,
                content={
                    "error": "request_too_large",
                    "message": f"Request body exceeds maximum size of {MAX_REQUEST_SIZE // (1024*1024)}MB",
                },
            )
        return await call_next(request)


app.add_middleware(RequestSizeLimitMiddleware)

# Error sanitization (catches unhandled exceptions)
app.add_middleware(ErrorSanitizationMiddleware)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type", "X-CSRF-Token"],
)

# Public
app.include_router(products.router, prefix="/api/products", tags=["Products"])
app.include_router(stacks.router, prefix="/api/stacks", tags=["Stacks"])
app.include_router(categories.router, prefix="/api/categories", tags=["Categories"])

# Admin
app.include_router(admin_auth.router, prefix="/api/admin", tags=["Admin"])
app.include_router(admin_products.router, prefix="/api/admin/products", tags=["Admin"])
app.include_router(admin_stacks.router, prefix="/api/admin/stacks", tags=["Admin"])
app.include_router(admin_categories.router, prefix="/api/admin/categories", tags=["Admin"])
app.include_router(admin_settings.router, prefix="/api/admin", tags=["Admin"])


@app.get("/", tags=["Health"])
async def root():
    return {
        "message": f"{settings.APP_NAME} API",
        "version": "1.0.0",
        "status": "operational"
    }


@app.get("/api/config", response_model=SiteConfigResponse, tags=["Config"])
async def get_config(db: AsyncSession = Depends(get_db)):
    """Public configuration for the storefront (maintenance banner)."""
    return SiteConfigResponse(maintenance_mode=await SiteSettingsService(db).get_maintenance_mode())


@app.get("/health", tags=["Health"])
async def health_check():
    """
    Health check with an actual DB ping.
    Returns 503 if database is unreachable.
    """
    health_status = {
        "status": "healthy",
        "database": "unknown",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }

    try:
        async with AsyncSessionLocal() as db:
            await db.execute(text("SELECT 1"))
        health_status["database"] = "connected"
    except Exception as e:
        health_status["database"] = f"error: {type(e).__name__}"
        health_status["status"] = "unhealthy"
        logger.error(f"Health check database ping failed: {e}")
        return JSONResponse(status_code=503, content=health_status)

    return health_status
