"""formguard demo service.

FastAPI application with lifespan-managed validation components, global
error handling and the customers demo API.
"""

import logging
from contextlib import asynccontextmanager
from pathlib import Path

import structlog
import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from formguard import __version__
from formguard.api.outcomes import install_validation
from formguard.api.router import api_router
from formguard.config import get_settings
from formguard.messages import BundleLoader, MessageInterpolator
from formguard.services.customer_repository import CustomerRepository
from formguard.validators import ValidationEngine, default_registry

# Messages of the demo resources, on top of the built-in constraint messages
APP_BUNDLE_DIR = Path(__file__).parent / "api" / "bundles"

# Configure structured logging
structlog.configure(
    processors=[
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.dev.ConsoleRenderer() if get_settings().DEBUG else structlog.processors.JSONRenderer(),
    ],
    wrapper_class=structlog.make_filtering_bound_logger(
        logging.getLevelName(get_settings().LOG_LEVEL.upper())
    ),
)

logger = structlog.get_logger()


def build_engine() -> ValidationEngine:
    """Validation engine with built-in and application message bundles."""
    settings = get_settings()
    loader = BundleLoader(
        [APP_BUNDLE_DIR, *settings.BUNDLE_DIRS],
        default_locale=settings.DEFAULT_LOCALE,
    )
    return ValidationEngine(
        registry=default_registry(),
        interpolator=MessageInterpolator(loader, settings.MAX_INTERPOLATION_DEPTH),
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown lifecycle."""
    settings = get_settings()

    # ── Startup ──
    logger.info("app_starting", debug=settings.DEBUG)

    app.state.validation_engine = build_engine()
    app.state.customer_repository = CustomerRepository()

    # Collaborators handed to custom validators through the ValidationContext
    app.state.validation_services = {"customers": app.state.customer_repository}

    logger.info(
        "app_started",
        constraint_kinds=len(app.state.validation_engine.registry),
        locales=app.state.validation_engine.interpolator.loader.available_locales(),
    )

    yield

    # ── Shutdown ──
    logger.info("app_stopped")


# ── Create Application ──

app = FastAPI(
    title="formguard",
    description=(
        "Declarative validation for request handlers: constraints, "
        "localized messages, error collection and outcome dispatch."
    ),
    version=__version__,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)


# ── Global Exception Handlers ──

install_validation(app)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Catch-all error handler for unhandled exceptions."""
    logger.error(
        "unhandled_exception",
        path=request.url.path,
        method=request.method,
        error=str(exc),
        error_type=type(exc).__name__,
    )
    return JSONResponse(
        status_code=500,
        content={
            "error": "internal_server_error",
            "message": "An unexpected error occurred. Please try again.",
        },
    )


# ── Routes ──

app.include_router(api_router, prefix="/api/v1")


# ── Root endpoint ──

@app.get("/")
async def root():
    """Root endpoint — API info."""
    return {
        "name": "formguard",
        "version": __version__,
        "description": "Declarative validation for request handlers",
        "docs": "/docs",
        "health": "/api/v1/health",
    }


def run() -> None:
    """Console entry point."""
    settings = get_settings()
    uvicorn.run(
        "formguard.main:app",
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower(),
    )
