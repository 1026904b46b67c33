"""Name search: plan -> candidate fetch -> re-check -> rank.

The store returns at most ``limit`` best-ranked candidates, which may be a
superset of true matches. The contains-all predicate and the ranking are
re-applied here so results never depend on how a given backend implements
its substring filter or its ordering.
"""

import logging

from natega.models.student import SearchHit
from natega.repositories.base import DatasetStore
from natega.search.query import plan_query
from natega.search.ranker import DEFAULT_RESULT_LIMIT, rank

logger = logging.getLogger(__name__)


async def search(
    query: str | None,
    store: DatasetStore,
    *,
    limit: int = DEFAULT_RESULT_LIMIT,
) -> list[SearchHit]:
    """Return at most ``limit`` hits for an informal Arabic name query.

    Blank queries, and queries with no Arabic letters, return [] without
    touching the store.

    Raises:
        DatasetUnavailableError: If the store cannot be read.
    """
    plan = plan_query(query)
    if plan is None:
        return []

    candidates = await store.filter_contains_all(plan.contains_all, limit=limit)
    matched = [c for c in candidates if plan.contains_all.matches(c.normalized_name)]
    ranked = rank(matched, plan, limit=limit)

    logger.debug(
        "search terms=%s candidates=%d results=%d",
        plan.terms, len(candidates), len(ranked),
    )
    return [SearchHit.from_record(r) for r in ranked]
