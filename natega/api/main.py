"""FastAPI application entry point for natega-search."""

import structlog
from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from natega.api.dependencies import get_dataset_store
from natega.api.search import router as search_router
from natega.config.settings import Environment, get_settings
from natega.observability.logging import configure_logging
from natega.repositories.base import DatasetStore, DatasetUnavailableError

APP_VERSION = "0.1.0"

settings = get_settings()

# --- Structured logging ---
configure_logging(settings)

logger: structlog.stdlib.BoundLogger = structlog.get_logger()

# --- FastAPI app ---
app = FastAPI(
    title="natega-search API",
    description="Arabic student-name lookup over exam results.",
    version=APP_VERSION,
)

# --- CORS middleware ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if settings.ENVIRONMENT == Environment.DEV else [],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# --- Routers ---
app.include_router(search_router)


# --- Infrastructure Endpoints ---


@app.get("/health")
async def health_check(store: DatasetStore = Depends(get_dataset_store)) -> dict:
    """Liveness probe with component health checks.

    Returns 200 always (degraded status if components are down).
    """
    checks: dict[str, bool] = {"api": True}
    dataset: dict | None = None

    # Database connectivity check, via the served dataset generation
    try:
        generation = await store.active_generation()
        checks["database"] = True
    except DatasetUnavailableError:
        generation = None
        checks["database"] = False

    if generation is not None:
        dataset = {
            "generation_id": str(generation.generation_id),
            "record_count": generation.record_count,
        }

    all_ok = all(checks.values())
    if not all_ok:
        logger.warning("health_degraded", checks=checks)

    return {
        "status": "ok" if all_ok else "degraded",
        "version": APP_VERSION,
        "environment": settings.ENVIRONMENT.value,
        "checks": checks,
        "dataset": dataset,
    }


@app.get("/api/version")
async def get_version() -> dict[str, str]:
    """Return application name, version, and environment."""
    return {
        "name": "natega-search",
        "version": APP_VERSION,
        "environment": settings.ENVIRONMENT.value,
    }
