"""Main FastAPI application module.

This module initializes the FastAPI application and registers all route handlers.
"""

import asyncio
import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from core.logging_config import setup_logging
from config import (
    API_HOST,
    API_PORT,
    CORS_ALLOWED_ORIGINS,
    DURABLE_STORE_ENABLED,
    EXPIRY_SWEEP_INTERVAL_SECONDS,
)
from api.routes import auth, classroom_route, kids_route
from core.database import init_db
from core.dependencies import get_memory_store

# Setup logging
setup_logging()
logger = logging.getLogger(__name__)

# Initialize FastAPI application
app = FastAPI(
    title="Vocabulary Classroom API",
    description="Backend API service for classroom vocabulary practice.",
    version="1.0.0",
)

# Configure CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register route handlers
app.include_router(auth.router)
app.include_router(classroom_route.router)
app.include_router(kids_route.router)

_sweep_task: Optional[asyncio.Task] = None


async def _sweep_expired_classrooms() -> None:
    """Periodically drop expired in-memory classrooms."""
    store = get_memory_store()
    while True:
        await asyncio.sleep(EXPIRY_SWEEP_INTERVAL_SECONDS)
        store.purge_expired()


@app.on_event("startup")
async def startup_tasks() -> None:
    """Create database tables and start the expiry sweep."""
    global _sweep_task
    if DURABLE_STORE_ENABLED:
        init_db()
    _sweep_task = asyncio.create_task(_sweep_expired_classrooms())
    logger.info("Vocabulary Classroom API started (durable store: %s)", DURABLE_STORE_ENABLED)


@app.on_event("shutdown")
async def shutdown_tasks() -> None:
    if _sweep_task is not None:
        _sweep_task.cancel()


@app.get("/", summary="API root", tags=["Info"])
def root() -> dict:
    """Return API information and documentation links."""
    return {
        "name": "Vocabulary Classroom API",
        "version": "1.0.0",
        "description": "Backend API service for classroom vocabulary practice.",
        "docs": {
            "swagger": "/docs",
            "redoc": "/redoc",
        },
        "health": "/api/health",
    }


@app.get("/api/health", summary="Health check", tags=["Health"])
def health() -> dict:
    """Health check endpoint.

    Returns:
        Dictionary with status "ok".
    """
    return {"status": "ok"}


# --- Startup code for direct execution ---
if __name__ == "__main__":
    import uvicorn

    server_url = f"http://{API_HOST}:{API_PORT}"
    print(f"Serving on {server_url} (API docs: {server_url}/docs)")
    uvicorn.run("app:app", host=API_HOST, port=API_PORT, reload=True)
