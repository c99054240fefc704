"""FastAPI application entry point.

The lifespan hook is the composition root: it builds the store registry from
configuration (refusing to start when no store endpoint is set), wraps it in
the GameStore facade and publishes it on app.state for the request handlers.
"""
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from gamestore.api.api import api_router
from gamestore.core.config import settings
from gamestore.core.exceptions import AppException
from gamestore.services.game_store import GameStore
from gamestore.storage import StoreRegistry, create_registry

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def create_app(registry: Optional[StoreRegistry] = None) -> FastAPI:
    """Build the application.

    Args:
        registry: Pre-built store registry. When omitted, one is created from
            settings at startup.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan: startup and shutdown logic."""
        # ── Startup ──
        logger.info("Game store API starting up...")
        store_registry = registry if registry is not None else create_registry()
        app.state.game_store = GameStore(
            store_registry,
            retry_on_conflict=settings.UPSERT_RETRY_ON_CONFLICT,
        )
        yield
        # ── Shutdown ──
        await store_registry.dispose()
        logger.info("Game store API shut down")

    app = FastAPI(
        title="Game State Store API",
        description="Persisted game sessions and client polling",
        version="1.0.0",
        debug=settings.DEBUG,
        lifespan=lifespan,
    )

    app.include_router(api_router)

    # ── Global Exception Handlers ──

    @app.exception_handler(AppException)
    async def app_exception_handler(request: Request, exc: AppException):
        """Convert AppException subclasses to structured JSON responses."""
        return JSONResponse(
            status_code=exc.http_status,
            content=exc.to_dict(),
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        """Catch-all handler to prevent stack trace leaking in production."""
        logger.error(f"Unhandled exception on {request.method} {request.url.path}: {exc}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={
                "error": "INTERNAL_ERROR",
                "message": "An unexpected error occurred." if not settings.DEBUG else str(exc),
                "details": {},
            },
        )

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("gamestore.main:app", host="0.0.0.0", port=8000, reload=settings.DEBUG)
