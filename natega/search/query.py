"""Query planning: raw query text -> normalized terms and match artifacts.

A plan carries three artifacts derived from the same term sequence:

- contains_all: every term, in order, with arbitrary gaps (candidate filter)
- exact_query: the whole normalized query (tier 0 test)
- first_term_prefix: the first term (tier 1 test)
"""

from dataclasses import dataclass

from natega.search.normalizer import normalize_arabic_name

LIKE_ESCAPE = "\\"


def _escape_like(term: str) -> str:
    return (
        term.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )


@dataclass(frozen=True, slots=True)
class ContainsAllPattern:
    """Ordered-substrings predicate over a normalized name."""

    terms: tuple[str, ...]

    def matches(self, normalized_name: str) -> bool:
        """True if every term occurs in order, without overlapping."""
        pos = 0
        for term in self.terms:
            found = normalized_name.find(term, pos)
            if found < 0:
                return False
            pos = found + len(term)
        return True

    def to_like(self) -> str:
        """SQL LIKE form: ``%t1%t2%...%``, escaped with LIKE_ESCAPE."""
        return "%" + "%".join(_escape_like(t) for t in self.terms) + "%"

    @property
    def exact_query(self) -> str:
        return " ".join(self.terms)

    @property
    def first_term_prefix(self) -> str:
        return self.terms[0]

    def to_prefix_like(self) -> str:
        """SQL LIKE form of a name starting with the first term."""
        return _escape_like(self.first_term_prefix) + "%"


@dataclass(frozen=True, slots=True)
class QueryPlan:
    terms: tuple[str, ...]
    contains_all: ContainsAllPattern
    exact_query: str
    first_term_prefix: str


def plan_query(raw: str | None) -> QueryPlan | None:
    """Build a QueryPlan, or return None when the query yields no terms.

    None covers an absent query, a blank one, and one whose characters
    are all dropped by normalization (Latin text, digits, punctuation).
    """
    if raw is None or not raw.strip():
        return None

    normalized = normalize_arabic_name(raw)
    terms = tuple(t for t in normalized.split() if t)
    if not terms:
        return None

    return QueryPlan(
        terms=terms,
        contains_all=ContainsAllPattern(terms),
        exact_query=normalized,
        first_term_prefix=terms[0],
    )
