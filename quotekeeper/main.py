"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager
from typing import Annotated

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from quotekeeper.api import auth, categories, consent, quotes
from quotekeeper.api.dependencies import get_storage_backend
from quotekeeper.config import get_settings
from quotekeeper.database import get_engine
from quotekeeper.services.store_selector import DatabaseProbe, StorageBackend, StoreSelector

logger = logging.getLogger(__name__)

settings = get_settings()


def create_storage_backend() -> StorageBackend:
    """Build the store selector for the configured database.

    Raises ConfigurationError when DATABASE_URL is missing.
    """
    selector = StoreSelector(
        DatabaseProbe(get_engine(), settings.probe_timeout_seconds),
        freshness_seconds=settings.fallback_freshness_seconds,
    )
    return StorageBackend(selector)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle application startup and shutdown events."""
    # Startup: fail fast on missing configuration
    app.state.storage_backend = create_storage_backend()
    logger.info(f"QuoteKeeper started ({settings.environment})")
    yield
    # Shutdown: nothing to release; the engine pool closes with the process


app = FastAPI(
    title="QuoteKeeper API",
    description="Personal quote collection with categories, sharing and cookie consent",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS middleware for development
if settings.is_development:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[
            "http://localhost:3000",
            "http://localhost:3001",
        ],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

# Register routers
app.include_router(auth.router)
app.include_router(quotes.router)
app.include_router(categories.router)
app.include_router(consent.router)


@app.get("/health")
def health_check(backend: Annotated[StorageBackend, Depends(get_storage_backend)]):
    """Health check endpoint."""
    return {
        "status": "healthy",
        "environment": settings.environment,
        "store": "fallback" if backend.selector.should_use_fallback() else "durable",
    }
