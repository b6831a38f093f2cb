"""
MaintDesk Admin Core - Main FastAPI Application

Configures middleware, routes and the record store lifecycle.
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pymongo.errors import PyMongoError

from . import __version__
from .config.settings import DEFAULT_JWT_SECRET, Settings, settings
from .api.routes import api_router
from .api.middleware import CorrelationIdMiddleware, register_error_handlers
from .repositories.mongo_client import create_indexes, close_connection
from .repositories.store_factory import get_record_store, close_record_store
from .utils.logger import setup_logging, get_logger

# Setup logging first
setup_logging()
logger = get_logger(__name__)


# =============================================================================
# Application Lifecycle
# =============================================================================

def check_security_settings(config: Settings) -> None:
    """Refuse to serve production traffic with the built-in token secret"""
    if config.is_production and config.jwt_secret in ("", DEFAULT_JWT_SECRET):
        raise RuntimeError("JWT_SECRET must be set when ENVIRONMENT=production")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Startup:
        - Refuses the default JWT secret in production
        - Opens the record store
        - Creates MongoDB indexes (mongo backend only)

    Shutdown:
        - Closes live listeners and database connections
    """
    logger.info(f"Starting MaintDesk admin core ({settings.store_backend} store)...")
    check_security_settings(settings)
    get_record_store()

    if settings.store_backend.lower() == "mongo":
        try:
            create_indexes()
        except PyMongoError as e:
            logger.error(f"Failed to create indexes: {e}")

    logger.info("Application started successfully")

    yield

    logger.info("Shutting down...")
    close_record_store()
    if settings.store_backend.lower() == "mongo":
        close_connection()
    logger.info("Application shutdown complete")


# =============================================================================
# Application Factory
# =============================================================================

def create_app() -> FastAPI:
    """Create and configure the FastAPI application"""
    application = FastAPI(
        title="MaintDesk Admin Core",
        description="Report/ticket lifecycle and live view aggregation for facility maintenance",
        version=__version__,
        lifespan=lifespan,
        docs_url="/api/docs" if settings.debug else None,
        redoc_url="/api/redoc" if settings.debug else None,
        openapi_url="/api/openapi.json" if settings.debug else None,
    )

    _configure_middleware(application)
    register_error_handlers(application)
    _configure_routes(application)

    return application


def _configure_middleware(app: FastAPI) -> None:
    """Configure application middleware."""
    # allow_credentials must be False when allowing all origins
    allow_all = settings.cors_origins.strip() == "*"

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if allow_all else settings.cors_origins_list,
        allow_credentials=not allow_all,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Correlation-Id"],
    )
    app.add_middleware(CorrelationIdMiddleware)


def _configure_routes(app: FastAPI) -> None:
    """Configure application routes."""
    app.include_router(api_router, prefix="/api/v1")

    # Health check endpoint (no auth required)
    @app.get("/health", tags=["Health"])
    def health():
        """Application health including record store connectivity"""
        store_health = get_record_store().health_check()
        return {
            "status": "healthy" if store_health.get("status") == "healthy" else "degraded",
            "version": __version__,
            "environment": settings.environment,
            "store": store_health
        }


# =============================================================================
# Application Instance
# =============================================================================

app = create_app()
