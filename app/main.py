# =============================================================================
# app/main.py - FastAPI Application Entry Point
# =============================================================================
# This is the main entry point for the Lokolo API.
# It configures the FastAPI application with middleware, routers, and handlers.
#
# Usage:
#   uvicorn app.main:app --reload
# =============================================================================

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.auth import routes as auth_routes
from app.config import get_settings, settings
from app.dependencies import build_services
from app.exceptions import (
    LokoloException,
    lokolo_exception_handler,
    validation_exception_handler,
)
from app.routers import admin, businesses, health, me, supplier
from core.services.storage_service import StorageService
from lib.supabase_client import SupabaseStore, create_supabase_client

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Startup builds one Supabase client and wires every service to it.
    The container lives on app.state for the lifetime of the process.
    """
    app_settings = get_settings()
    logger.info(f"Starting Lokolo API in {app_settings.ENVIRONMENT} mode")
    logger.info(f"CORS origins: {app_settings.cors_origins_list}")

    client = create_supabase_client(app_settings)
    store = SupabaseStore(client, app_settings)
    storage = StorageService(client, app_settings)
    app.state.services = build_services(store, storage, app_settings)

    yield

    logger.info("Shutting down Lokolo API")


# Create FastAPI application
app = FastAPI(
    title="Lokolo API",
    description="""
## Local Business Discovery API

Lokolo connects consumers with verified local businesses.

### Audiences

| Prefix | Who | What |
|-------|-----|------|
| `/api/v1/businesses` | anyone | Search, nearby, business detail, ratings |
| `/api/v1/me` | signed-in users | Favorites and own ratings |
| `/api/v1/supplier` | suppliers | Register and manage businesses, media, verification |
| `/api/v1/admin` | admins | Moderation and verification review |

### Business Lifecycle

`draft -> pending -> active <-> suspended`, any state `-> archived`.
Only active businesses appear in public search.

### Quick Start

```bash
# Businesses within 10 km of Johannesburg
curl "http://localhost:8000/api/v1/businesses/search?latitude=-26.2&longitude=28.0&radius_km=10"
```
""",
    version=health.API_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
    openapi_tags=[
        {
            "name": "Auth",
            "description": "Verify tokens and read the caller's identity",
        },
        {
            "name": "Businesses",
            "description": "Public discovery: search, nearby, detail and ratings",
        },
        {
            "name": "Me",
            "description": "Favorites and ratings of the signed-in user",
        },
        {
            "name": "Supplier",
            "description": "Business management, media and verification submission",
        },
        {
            "name": "Admin",
            "description": "Business moderation and verification review",
        },
        {
            "name": "Health",
            "description": "API health and readiness checks",
        },
    ],
)


# =============================================================================
# Middleware
# =============================================================================

# CORS middleware - allows cross-origin requests
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list if settings.is_production else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# Exception Handlers
# =============================================================================

@app.exception_handler(LokoloException)
async def handle_lokolo_exception(request: Request, exc: LokoloException):
    """Handle custom Lokolo exceptions."""
    if exc.status_code >= 500:
        logger.error(f"{exc.code} on {request.method} {request.url.path}: {exc.message}")
    return await lokolo_exception_handler(request, exc)


@app.exception_handler(RequestValidationError)
async def handle_validation_error(request: Request, exc: RequestValidationError):
    """Handle malformed request bodies and query parameters."""
    return await validation_exception_handler(request, exc)


@app.exception_handler(Exception)
async def handle_general_exception(request: Request, exc: Exception):
    """Handle unexpected exceptions."""
    logger.exception(f"Unexpected error: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "detail": "An unexpected error occurred",
            "code": "INTERNAL_ERROR",
        }
    )


# =============================================================================
# Routers
# =============================================================================

# Authentication endpoints
app.include_router(
    auth_routes.router,
    prefix="/api/v1/auth",
    tags=["Auth"]
)

# Health check endpoints
app.include_router(
    health.router,
    prefix="/api/v1",
    tags=["Health"]
)

# Public discovery endpoints
app.include_router(
    businesses.router,
    prefix="/api/v1/businesses",
    tags=["Businesses"]
)

# Current user endpoints
app.include_router(
    me.router,
    prefix="/api/v1/me",
    tags=["Me"]
)

# Supplier endpoints
app.include_router(
    supplier.router,
    prefix="/api/v1/supplier",
    tags=["Supplier"]
)

# Admin endpoints
app.include_router(
    admin.router,
    prefix="/api/v1/admin",
    tags=["Admin"]
)


# =============================================================================
# Root Endpoint
# =============================================================================

@app.get("/", tags=["Root"])
async def root():
    """
    Root endpoint - returns API info.
    """
    return {
        "name": "Lokolo API",
        "version": health.API_VERSION,
        "docs": "/docs",
        "health": "/api/v1/health",
    }
