"""
Ranking policies.

Three total orders, each with a fixed tie-break chain:
- relevance: match_score desc, rating desc, total_reviews desc, experience_years desc
- rating: rating desc, total_reviews desc, experience_years desc
- price: hourly_rate asc, rating desc, total_reviews desc

Missing numbers count as 0 for descending keys and as very expensive for price,
so incomplete profiles never float to the top. Sorting is stable.
"""

from typing import Callable, Dict, Iterable, List, Optional, Tuple

from lawyer_match.models import MatchCandidate, SORT_OPTIONS

DEFAULT_SORT = "relevance"

# Sort position of a lawyer with no (or zero) hourly rate
MISSING_RATE = 999999


def _desc(value) -> float:
    return -(value or 0)


def relevance_key(c: MatchCandidate) -> Tuple[float, ...]:
    return (_desc(c.match_score), _desc(c.rating), _desc(c.total_reviews), _desc(c.experience_years))


def rating_key(c: MatchCandidate) -> Tuple[float, ...]:
    return (_desc(c.rating), _desc(c.total_reviews), _desc(c.experience_years))


def price_key(c: MatchCandidate) -> Tuple[float, ...]:
    return (c.hourly_rate or MISSING_RATE, _desc(c.rating), _desc(c.total_reviews))


SORT_KEYS: Dict[str, Callable[[MatchCandidate], Tuple[float, ...]]] = {
    "relevance": relevance_key,
    "rating": rating_key,
    "price": price_key,
}


def parse_sort(value: Optional[str]) -> str:
    """Unknown or empty sort values fall back to relevance."""
    if value and value in SORT_OPTIONS:
        return value
    return DEFAULT_SORT


def sort_candidates(candidates: Iterable[MatchCandidate], policy: str) -> List[MatchCandidate]:
    """Return a new list ordered by the given policy."""
    key = SORT_KEYS.get(policy, relevance_key)
    return sorted(candidates, key=key)
