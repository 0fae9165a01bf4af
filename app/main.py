# =============================================================================
# app/main.py - FastAPI Application Entry Point
# =============================================================================
# This is the main entry point for the Foititis API.
# It configures the FastAPI application with middleware, routers, and handlers.
#
# Usage:
#   uvicorn app.main:app --reload
# =============================================================================

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import settings
from app.exceptions import FoititisException, foititis_exception_handler
from app.routers import health, lookups, peers, saved
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

    The saved-items backend is probed lazily on the first request that
    needs it, so startup only logs the configuration.
    """
    logger.info(f"Starting Foititis API in {settings.ENVIRONMENT} mode")
    logger.info(f"CORS origins: {settings.cors_origins_list}")
    logger.info(f"Default locale: {settings.DEFAULT_LOCALE}")

    yield

    logger.info("Shutting down Foititis API")


# Create FastAPI application
app = FastAPI(
    title="Foititis API",
    description="""
## Student Community API

Backend for the student community app: a directory of fellow students
ranked by shared city, university, school and department, tiered matches,
academic lookups and saved items.

### Conventions

- Every endpoint except health checks needs a Supabase access token
  (`Authorization: Bearer <token>`).
- Localized text follows `?lang=` (`en`, `el`), then `Accept-Language`.
- Errors are returned as `{"detail", "code", "suggestion", "details"}`.
""",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
    openapi_tags=[
        {
            "name": "Auth",
            "description": "Who the access token belongs to",
        },
        {
            "name": "Peers",
            "description": "Student directory and tiered matches",
        },
        {
            "name": "Lookups",
            "description": "Cities, universities, schools and departments",
        },
        {
            "name": "Saved",
            "description": "Saved listings, wanted requests and events",
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

@app.exception_handler(FoititisException)
async def handle_foititis_exception(request: Request, exc: FoititisException):
    """Handle custom Foititis exceptions."""
    return await foititis_exception_handler(request, exc)


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

# Authentication endpoints (router carries the /auth prefix)
app.include_router(
    auth_routes.router,
    prefix="/api/v1",
)

# Health check endpoints
app.include_router(
    health.router,
    prefix="/api/v1",
    tags=["Health"]
)

# Student directory endpoints
app.include_router(
    peers.router,
    prefix="/api/v1/peers",
    tags=["Peers"]
)

# Academic lookup endpoints
app.include_router(
    lookups.router,
    prefix="/api/v1/lookups",
    tags=["Lookups"]
)

# Saved items endpoints
app.include_router(
    saved.router,
    prefix="/api/v1/saved",
    tags=["Saved"]
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
        "name": "Foititis API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/api/v1/health",
    }
