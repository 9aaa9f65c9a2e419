# =============================================================================
# app/main.py - FastAPI Application Entry Point
# =============================================================================
# This is the main entry point for the Street Food Finder API.
# It configures the FastAPI application with middleware, routers, and handlers.
#
# Usage:
#   uvicorn app.main:app --reload --port 4000
# =============================================================================

import logging
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.config import Settings, settings as default_settings
from app.exceptions import (
    ApiError,
    api_exception_handler,
    http_exception_handler,
    unhandled_exception_handler,
    validation_exception_handler,
)
from app.routers import business, health, identities, menu, users
from core.services.image_storage import ImageStorage
from lib.firebase_client import FirebaseTokenVerifier
from lib.supabase_client import create_supabase_client

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if default_settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def create_app(
    settings: Settings | None = None,
    supabase: Any | None = None,
    token_verifier: FirebaseTokenVerifier | None = None,
) -> FastAPI:
    """
    Build the application.

    External clients are created once, in the lifespan, unless they are passed
    in (tests hand in fakes). They live on app.state for the whole process.
    """
    app_settings = settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Startup: build any client that wasn't injected.
        Shutdown: nothing to release; the clients hold no pooled resources we own.
        """
        logger.info(f"Starting Street Food Finder API in {app_settings.ENVIRONMENT} mode")

        if getattr(app.state, "supabase", None) is None:
            _install_clients(
                app,
                app_settings,
                create_supabase_client(app_settings),
                token_verifier or FirebaseTokenVerifier.from_settings(app_settings),
            )

        yield

        logger.info("Shutting down Street Food Finder API")

    app = FastAPI(
        title="Street Food Finder API",
        description="Vendors, businesses and menus backed by Supabase.",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
        openapi_tags=[
            {"name": "Health", "description": "API health and readiness checks"},
            {"name": "Users", "description": "Social login and user management"},
            {"name": "Business", "description": "Businesses owned by the caller"},
            {"name": "Menu", "description": "Menus and their images"},
            {"name": "User Identities", "description": "Linked social identities"},
        ],
    )
    app.state.settings = app_settings

    if supabase is not None:
        _install_clients(app, app_settings, supabase, token_verifier or FirebaseTokenVerifier(None))

    # =========================================================================
    # Middleware
    # =========================================================================

    origins = app_settings.cors_origins_list or ["*"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials="*" not in origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # =========================================================================
    # Exception Handlers
    # =========================================================================

    app.add_exception_handler(ApiError, api_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    # =========================================================================
    # Routers
    # =========================================================================

    prefix = app_settings.API_PREFIX.rstrip("/")

    app.include_router(health.router, tags=["Health"])
    app.include_router(users.router, prefix=f"{prefix}/users", tags=["Users"])
    app.include_router(business.router, prefix=f"{prefix}/business", tags=["Business"])
    app.include_router(menu.router, prefix=f"{prefix}/business", tags=["Menu"])
    app.include_router(identities.router, prefix=f"{prefix}/user-identities", tags=["User Identities"])

    return app


def _install_clients(
    app: FastAPI,
    app_settings: Settings,
    supabase: Any,
    token_verifier: FirebaseTokenVerifier,
) -> None:
    app.state.supabase = supabase
    app.state.image_storage = ImageStorage(
        supabase,
        bucket=app_settings.SUPABASE_STORAGE_BUCKET_MENU_IMAGES,
        max_images=app_settings.MAX_MENU_IMAGES,
        max_image_bytes=app_settings.max_image_size_bytes,
    )
    app.state.token_verifier = token_verifier


app = create_app()
