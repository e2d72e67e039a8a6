# =============================================================================
# app/main.py - FastAPI Application Entry Point
# =============================================================================
# This is the main entry point for the EcoShare API.
# It configures the FastAPI application with middleware, routers, and handlers.
#
# Usage:
#   uvicorn app.main:app --reload --port 5000
# =============================================================================

import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.sessions import SessionMiddleware

from app.config import settings
from app.exceptions import (
    EcoShareException,
    ecoshare_exception_handler,
    validation_exception_handler,
)
from app.routers import analysis, health, listings, notifications, pickups, stats
from app.auth import routes as auth_routes

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

    Runs on startup and shutdown:
    - Startup: Log configuration
    - Shutdown: Log shutdown
    """
    # Startup
    logger.info(f"Starting EcoShare API in {settings.ENVIRONMENT} mode")
    logger.info(f"CORS origins: {settings.cors_origins_list}")
    if not settings.ai_enabled:
        logger.warning("OPENAI_API_KEY is not set - food analysis will use fallback values")

    yield

    # Shutdown
    logger.info("Shutting down EcoShare API")


# Create FastAPI application
app = FastAPI(
    title="EcoShare API",
    description="""
## Campus Food Sharing API

EcoShare connects students who have surplus food with students who want it,
and tracks the food waste and CO2 that sharing saves.

### How It Works

1. **Sign In** - Google OAuth (or the demo login) starts a cookie session
2. **Post Food** - Upload a photo; AI fills in title, category and freshness
3. **Reserve** - Browse active listings and reserve a pickup
4. **Complete** - Completed pickups add to the provider's impact stats

### Quick Start

```bash
# 1. Demo login (stores the session cookie)
curl -c jar -X POST http://localhost:5000/api/auth/demo

# 2. Post a listing with a photo
curl -b jar -X POST http://localhost:5000/api/food-listings \\
  -F 'data={"location": "Student Union", "availableUntil": "2030-01-01T18:00:00Z"}' \\
  -F "image=@pizza.jpg"

# 3. Platform impact
curl http://localhost:5000/api/stats/platform
```
""",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
    openapi_tags=[
        {
            "name": "Auth",
            "description": "Google OAuth, demo login, sessions and bearer tokens",
        },
        {
            "name": "Listings",
            "description": "Browse, post and manage food listings",
        },
        {
            "name": "Analysis",
            "description": "AI food analysis and recommendations",
        },
        {
            "name": "Pickups",
            "description": "Reserve food and track pickups",
        },
        {
            "name": "Notifications",
            "description": "In-app notifications",
        },
        {
            "name": "Stats",
            "description": "User and platform environmental impact",
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

# Signed-cookie sessions (login state and OAuth state)
app.add_middleware(
    SessionMiddleware,
    secret_key=settings.SECRET_KEY,
    max_age=settings.SESSION_MAX_AGE_SECONDS,
    same_site="lax",
    https_only=settings.is_production,
)


# =============================================================================
# Exception Handlers
# =============================================================================

@app.exception_handler(EcoShareException)
async def handle_ecoshare_exception(request: Request, exc: EcoShareException):
    """Handle custom EcoShare exceptions."""
    return await ecoshare_exception_handler(request, exc)


@app.exception_handler(RequestValidationError)
async def handle_validation_exception(request: Request, exc: RequestValidationError):
    """Handle request schema validation errors."""
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
    prefix="/api",
    tags=["Auth"]
)

# Health check endpoints
app.include_router(
    health.router,
    prefix="/api",
    tags=["Health"]
)

# AI analysis endpoints (before listings so /food-listings/analyze isn't
# shadowed by /food-listings/{listing_id})
app.include_router(
    analysis.router,
    prefix="/api",
    tags=["Analysis"]
)

# Food listing endpoints
app.include_router(
    listings.router,
    prefix="/api",
    tags=["Listings"]
)

# Pickup endpoints
app.include_router(
    pickups.router,
    prefix="/api",
    tags=["Pickups"]
)

# Notification endpoints
app.include_router(
    notifications.router,
    prefix="/api",
    tags=["Notifications"]
)

# Statistics endpoints
app.include_router(
    stats.router,
    prefix="/api",
    tags=["Stats"]
)


# =============================================================================
# Root Endpoint / Frontend
# =============================================================================

@app.get("/api", tags=["Root"])
async def root():
    """
    API root - returns API info.
    """
    return {
        "name": "EcoShare API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/api/health",
    }


class SPAStaticFiles(StaticFiles):
    """
    Static files for a single-page app.

    Unknown paths outside /api get index.html so client routes like
    /dashboard and /login render instead of 404ing.
    """

    async def get_response(self, path: str, scope):
        try:
            return await super().get_response(path, scope)
        except StarletteHTTPException as e:
            if e.status_code != 404 or path == "api" or path.startswith("api/"):
                raise
            return await super().get_response("index.html", scope)


def mount_frontend(application: FastAPI, directory: str) -> None:
    """Serve the built SPA at / (mount it last so it never shadows /api)."""
    application.mount("/", SPAStaticFiles(directory=directory, html=True), name="frontend")
    logger.info(f"Serving frontend from {directory}")


if settings.FRONTEND_DIST_DIR and Path(settings.FRONTEND_DIST_DIR).is_dir():
    mount_frontend(app, settings.FRONTEND_DIST_DIR)
