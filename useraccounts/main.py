"""
Main entry point for the user accounts API.
Handles registration, login and CRUD operations on user records.
"""

from contextlib import asynccontextmanager
from datetime import datetime
from typing import Optional
import logging

from fastapi import FastAPI

from .config import get_settings, Settings
from .logging_config import configure_logging
from .core.dependencies import build_user_store
from .middleware.security import setup_security
from .services.user_store import UserStore
from .api.routes import users

logger = logging.getLogger(__name__)

def create_app(settings: Optional[Settings] = None, store: Optional[UserStore] = None) -> FastAPI:
    """Build the FastAPI application around the given (or configured) user store."""
    settings = settings or get_settings()
    if store is None:
        store = build_user_store(settings)

    # --- FastAPI Lifespan Event Handler --- #
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"Application startup: initializing {type(store).__name__}...")
        await store.startup()
        yield
        logger.info("Application shutdown: closing user store...")
        await store.shutdown()

    logger.info("Initializing FastAPI app...")
    app = FastAPI(
        title="User Accounts API",
        description="Registration, login and management of user accounts.",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.user_store = store
    app.state.settings = settings

    # --- Middleware --- #
    setup_security(app, settings.allowed_origins)
    logger.info(f"CORS and security header middleware added. Allowed origins: {settings.allowed_origins}")

    # --- API Routers --- #
    app.include_router(users.router, tags=["Users"])

    # --- Health Check Endpoint --- #
    @app.get("/health", tags=["Health"], response_model=dict)
    async def health_check():
        """Reports process liveness and the active user store backend."""
        return {
            "status": "ok",
            "store": settings.user_store_backend,
            "timestamp": datetime.now().isoformat(),
        }

    logger.info("FastAPI app initialization complete.")
    return app

def run(settings: Optional[Settings] = None) -> None:
    """Configure logging and serve the app with uvicorn."""
    import uvicorn

    settings = settings or get_settings()
    configure_logging(settings.log_level)
    port = settings.resolve_port()
    app = create_app(settings)
    logger.info(f"Server is running on port {port}")
    uvicorn.run(app, host=settings.host, port=port, log_config=None)
