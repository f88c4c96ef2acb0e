"""FastAPI application entrypoint for the desk booking service."""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from apps.api.errors import booking_error_handler
from apps.api.routers import auth, bookings, reservations, users
from core.logging import get_logger, setup_logging
from core.seating_config import get_seating_config, validate_seating_config
from core.settings import Settings, settings as default_settings
from database.factory import build_storage
from services.booking_cache import BookingCache
from services.booking_service import BookingService
from services.errors import BookingError, ConfigurationError


logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.
    Builds the store, user directory and booking engine at startup.
    """
    app_settings: Settings = app.state.settings
    logger.info(f"Starting {app_settings.app_name}...")

    seating = get_seating_config()
    if not validate_seating_config(seating):
        raise ConfigurationError("Invalid seating configuration")

    store, user_directory = build_storage(app_settings)

    # Boot check: the login flow cannot work without the user list
    try:
        user_directory.ensure_available()
    except BookingError as e:
        logger.error(f"User directory unavailable: {e.message}")
        raise ConfigurationError(e.message) from e

    cache = BookingCache(store)
    app.state.reservation_store = store
    app.state.user_directory = user_directory
    app.state.booking_cache = cache
    app.state.booking_service = BookingService(cache, seating)

    logger.info("Application startup complete")

    yield

    logger.info(f"Shutting down {app_settings.app_name}...")


def create_app(app_settings: Optional[Settings] = None) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        app_settings: Settings to use (defaults to the environment settings)
    """
    app_settings = app_settings or default_settings
    setup_logging(app_settings)

    app = FastAPI(
        title=app_settings.app_name,
        description="Desk booking availability and conflict engine",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = app_settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origins_list,
        allow_credentials=app_settings.cors_allow_credentials,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(BookingError, booking_error_handler)

    app.include_router(reservations.router, prefix="/api")
    app.include_router(users.router, prefix="/api")
    app.include_router(auth.router, prefix="/api")
    app.include_router(bookings.router, prefix="/api")

    @app.get("/")
    async def root():
        """Root endpoint - health check."""
        return {
            "app": app_settings.app_name,
            "status": "running",
            "version": "1.0.0"
        }

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        cache_info = app.state.booking_cache.cache_info()
        return {
            "status": "healthy",
            "storage_backend": app_settings.storage_backend,
            "cache_loaded": cache_info["is_initialized"],
            "cached_bookings": cache_info["record_count"],
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "apps.api.main:app",
        host=default_settings.api_host,
        port=default_settings.api_port,
        reload=default_settings.api_reload
    )
