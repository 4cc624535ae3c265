# =============================================================================
# app/main.py - FastAPI Application Entry Point
# =============================================================================
# Backend API of the portfolio application. Builds the AppContext once at
# startup, exposes health/keep-alive probes and token verification.
#
# Usage:
#   uvicorn app.main:app --reload
# =============================================================================

import logging
from contextlib import asynccontextmanager
from typing import Callable

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.auth import routes as auth_routes
from app.config import load_settings
from app.context import AppContext, build_context
from app.exceptions import application_exception_handler
from app.routers import health
from lib.utils import ApplicationError

logger = logging.getLogger(__name__)


def configure_logging(debug: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )


def create_app(context_factory: Callable[[], AppContext] = build_context) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        context_factory: Builds the AppContext at startup (tests pass a
            factory returning a context wired to mock transports)
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Application lifespan handler.

        - Startup: build the context (fails fast on bad configuration)
        - Shutdown: close HTTP clients
        """
        context = context_factory()
        app.state.context = context
        logger.info(f"Starting portfolio API in {context.settings.ENVIRONMENT} mode")

        yield

        logger.info("Shutting down portfolio API")
        await context.aclose()

    app = FastAPI(
        title="Portfolio API",
        description="Backend API for the portfolio site and admin console.",
        version="1.0.0",
        lifespan=lifespan,
    )

    # =========================================================================
    # Exception Handlers
    # =========================================================================

    @app.exception_handler(ApplicationError)
    async def handle_application_error(request: Request, exc: ApplicationError):
        """Handle errors from the data/auth stack."""
        return await application_exception_handler(request, exc)

    @app.exception_handler(Exception)
    async def handle_general_exception(request: Request, exc: Exception):
        """Handle unexpected exceptions."""
        logger.exception(f"Unexpected error: {exc}")
        return JSONResponse(
            status_code=500,
            content={
                "success": False,
                "error": "An unexpected error occurred",
                "code": "INTERNAL_ERROR",
            }
        )

    # =========================================================================
    # Middleware
    # =========================================================================

    # Bearer tokens travel in headers, so no credentialed CORS is needed
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # =========================================================================
    # Routers
    # =========================================================================

    app.include_router(auth_routes.router, prefix="/api/v1/auth", tags=["Auth"])
    app.include_router(health.router, prefix="/api/v1", tags=["Health"])

    @app.get("/", tags=["Root"])
    async def root():
        """Root endpoint - returns API info."""
        return {
            "name": "Portfolio API",
            "version": "1.0.0",
            "docs": "/docs",
            "health": "/api/v1/health",
        }

    return app


def _startup_context() -> AppContext:
    settings = load_settings()
    configure_logging(settings.DEBUG)
    return build_context(settings)


app = create_app(_startup_context)
