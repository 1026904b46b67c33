"""Tiered ranking of candidate records.

Tier 0 is an exact match of the whole normalized query, tier 1 a name
starting with the first term, tier 2 anything else that passed the
contains-all filter. Within a tier shorter normalized names come first;
remaining ties keep the store's order (sorted() is stable).
"""

from collections.abc import Callable, Iterable
from enum import IntEnum

from natega.models.student import StudentRecord
from natega.search.query import ContainsAllPattern, QueryPlan

DEFAULT_RESULT_LIMIT = 20


class MatchTier(IntEnum):
    EXACT = 0
    PREFIX = 1
    CONTAINS = 2


def assign_tier(
    normalized_name: str, plan: QueryPlan | ContainsAllPattern,
) -> MatchTier:
    if normalized_name == plan.exact_query:
        return MatchTier.EXACT
    if normalized_name.startswith(plan.first_term_prefix):
        return MatchTier.PREFIX
    return MatchTier.CONTAINS


def rank_key(
    plan: QueryPlan | ContainsAllPattern,
) -> Callable[[StudentRecord], tuple[MatchTier, int]]:
    def _key(record: StudentRecord) -> tuple[MatchTier, int]:
        name = record.normalized_name
        return assign_tier(name, plan), len(name)

    return _key


def rank(
    candidates: Iterable[StudentRecord],
    plan: QueryPlan | ContainsAllPattern,
    limit: int = DEFAULT_RESULT_LIMIT,
) -> list[StudentRecord]:
    """Order candidates by (tier, normalized-name length) and cap at limit."""
    return sorted(candidates, key=rank_key(plan))[:limit]
