"""Student name search endpoint.

GET /search?q=<text> — ranked matches, at most SEARCH_RESULT_LIMIT.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query

from natega.api.dependencies import get_app_settings, get_dataset_store
from natega.config.settings import Settings
from natega.models.student import SearchHit
from natega.repositories.base import DatasetStore, DatasetUnavailableError
from natega.search.service import search

logger = logging.getLogger(__name__)

router = APIRouter(tags=["search"])


@router.get("/search", response_model=list[SearchHit])
async def search_students(
    q: str | None = Query(default=None, description="Informal Arabic name query."),
    store: DatasetStore = Depends(get_dataset_store),
    settings: Settings = Depends(get_app_settings),
) -> list[SearchHit]:
    """Search students by name. Blank or non-Arabic queries return []."""
    try:
        return await search(q, store, limit=settings.SEARCH_RESULT_LIMIT)
    except DatasetUnavailableError as exc:
        logger.error("Search failed: %s", exc)
        raise HTTPException(status_code=503, detail="Student dataset unavailable.") from exc
