"""
Client-side refinement: re-apply filters a tier cannot guarantee, then dedupe.

Filters (independent predicates, any order):
1. Minimum experience
2. Minimum rating
3. Language containment
4. Strict practice area match

Then duplicates are removed by lawyer id, keeping the first occurrence.
Running refine twice gives the same result as running it once.
"""

import logging
from typing import Iterable, List, Optional, Sequence

from lawyer_match.models import MatchCandidate, SearchCriteria
from lawyer_match.normalize import practice_area_matches

logger = logging.getLogger(__name__)


def dedupe_candidates(candidates: Iterable[MatchCandidate]) -> List[MatchCandidate]:
    """Drop repeated ids (and rows with no id), keeping first-seen order."""
    seen = set()
    unique = []
    for candidate in candidates:
        if not candidate.id or candidate.id in seen:
            continue
        seen.add(candidate.id)
        unique.append(candidate)
    return unique


def speaks_any(candidate: MatchCandidate, languages: Sequence[str]) -> bool:
    """True if some requested language appears in some candidate language."""
    if not candidate.languages:
        return False
    wanted = [lang.lower() for lang in languages]
    return any(
        want in spoken.lower()
        for want in wanted
        for spoken in candidate.languages
    )


def filter_by_practice_area(candidates: Iterable[MatchCandidate], practice_area_term: str) -> List[MatchCandidate]:
    if not practice_area_term:
        return list(candidates)
    return [c for c in candidates if practice_area_matches(practice_area_term, c.practice_areas)]


def apply_profile_filters(
    candidates: Iterable[MatchCandidate],
    min_experience: Optional[int] = None,
    min_rating: Optional[float] = None,
) -> List[MatchCandidate]:
    filtered = list(candidates)
    if min_experience is not None:
        filtered = [c for c in filtered if (c.experience_years or 0) >= min_experience]
    if min_rating is not None:
        filtered = [c for c in filtered if (c.rating or 0) >= min_rating]
    return filtered


def refine(candidates: Iterable[MatchCandidate], criteria: SearchCriteria) -> List[MatchCandidate]:
    """Apply every client-side filter and dedupe by id."""
    candidates = list(candidates)
    before = len(candidates)

    refined = apply_profile_filters(candidates, criteria.min_experience, criteria.min_rating)
    if criteria.languages:
        refined = [c for c in refined if speaks_any(c, criteria.languages)]
    refined = filter_by_practice_area(refined, criteria.practice_area_term)
    refined = dedupe_candidates(refined)

    logger.info(f"Refined {before} candidates down to {len(refined)}")
    return refined
