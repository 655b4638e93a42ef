"""
Retrieval stage: run the matcher cascade and fetch the secondary pool.

Cascade tiers, most specific first:
1. by_search_id - only when a search id is present
2. advanced - full criteria
3. basic - reduced criteria, used only if advanced does not exist
4. full_listing - used only if basic does not exist and there is no strict practice area

Tiers run one after another. A tier only hands over to the next one when its
capability is absent; any other error stops the cascade.
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Awaitable, Callable, List, Literal, Optional

from lawyer_match.aggregate import dedupe_candidates, filter_by_practice_area
from lawyer_match.backends.supabase import SupabaseClient
from lawyer_match.errors import BackendFailure, CapabilityAbsent, is_capability_absent
from lawyer_match.models import MatchCandidate, SearchCriteria

logger = logging.getLogger(__name__)

LAWYERS_PER_PAGE = 12
PRIMARY_LIMIT = LAWYERS_PER_PAGE * 3
SECONDARY_LIMIT = LAWYERS_PER_PAGE * 5

# Score given to full-listing rows, which the backend does not rank
FALLBACK_MATCH_SCORE = 50

TIER_BY_SEARCH_ID = "by_search_id"
TIER_ADVANCED = "advanced"
TIER_BASIC = "basic"
TIER_FULL_LISTING = "full_listing"


@dataclass
class TierResult:
    """Outcome of a single tier call."""
    tier: str
    status: Literal["ok", "absent", "failed"]
    candidates: List[MatchCandidate] = field(default_factory=list)
    error: Optional[Exception] = None


@dataclass
class CascadeResult:
    """Primary set produced by the cascade."""
    candidates: List[MatchCandidate]
    tier: Optional[str]  # None when no tier answered
    unavailable: bool = False  # strict practice area search with no matcher


async def call_tier(tier: str, call: Callable[[], Awaitable[List[MatchCandidate]]]) -> TierResult:
    """Run one tier and classify its outcome."""
    try:
        candidates = await call()
    except Exception as e:
        if is_capability_absent(e):
            logger.info(f"Tier {tier} not available, falling through")
            return TierResult(tier=tier, status="absent", error=CapabilityAbsent(tier, e))
        logger.error(f"Tier {tier} failed: {e}")
        return TierResult(tier=tier, status="failed", error=e)
    logger.info(f"Tier {tier} returned {len(candidates)} lawyers")
    return TierResult(tier=tier, status="ok", candidates=candidates)


def narrow_full_listing(candidates: List[MatchCandidate], criteria: SearchCriteria) -> List[MatchCandidate]:
    """
    Apply the location and rate constraints the full listing ignores,
    and give unranked rows a flat default score.
    """
    narrowed = candidates

    if criteria.locations:
        wanted = [loc.lower() for loc in criteria.locations]
        narrowed = [
            c for c in narrowed
            if any(query in loc.lower() for loc in c.locations for query in wanted)
        ]

    if criteria.has_rate_range:
        def in_range(c: MatchCandidate) -> bool:
            if not c.hourly_rate:
                return False
            if criteria.min_rate is not None and c.hourly_rate < criteria.min_rate:
                return False
            if criteria.max_rate is not None and c.hourly_rate > criteria.max_rate:
                return False
            return True
        narrowed = [c for c in narrowed if in_range(c)]

    return [
        replace(c, match_score=c.match_score or FALLBACK_MATCH_SCORE)
        for c in narrowed
    ]


def _backend_languages(criteria: SearchCriteria) -> Optional[List[str]]:
    return [lang.lower() for lang in criteria.languages] or None


def _backend_keywords(criteria: SearchCriteria) -> Optional[List[str]]:
    return [keyword.lower() for keyword in criteria.keywords] or None


async def run_cascade(
    criteria: SearchCriteria,
    client: SupabaseClient,
    limit: int = PRIMARY_LIMIT,
) -> CascadeResult:
    """
    Try each tier in order until one answers.
    Raises BackendFailure when a tier fails for a reason other than absence.
    """
    practice_area = criteria.practice_area_term or None
    specific_issue = criteria.specific_issue or None
    languages = _backend_languages(criteria)

    tiers = []
    if criteria.search_id:
        tiers.append((TIER_BY_SEARCH_ID, lambda: client.search_from_search(criteria.search_id, limit)))
    tiers.append((TIER_ADVANCED, lambda: client.search_advanced(
        practice_area=practice_area,
        location=criteria.primary_location,
        locations=list(criteria.locations) or None,
        min_rate=criteria.min_rate,
        max_rate=criteria.max_rate,
        specific_issue=specific_issue,
        languages=languages,
        keywords=_backend_keywords(criteria),
        urgency=criteria.urgency or None,
        limit=limit,
    )))
    tiers.append((TIER_BASIC, lambda: client.search_basic(
        practice_area=practice_area,
        location=criteria.primary_location,
        min_rate=criteria.min_rate,
        max_rate=criteria.max_rate,
        specific_issue=specific_issue,
        languages=languages,
        limit=limit,
    )))

    # One tier at a time; the next tier is only tried after an absence
    for tier, call in tiers:
        result = await call_tier(tier, call)
        if result.status == "ok":
            return CascadeResult(candidates=result.candidates, tier=tier)
        if result.status == "failed":
            raise BackendFailure(tier, result.error)

    if criteria.practice_area_term:
        logger.warning(
            f"No matcher available for strict practice area {criteria.practice_area_term!r}, "
            f"refusing full listing"
        )
        return CascadeResult(candidates=[], tier=None, unavailable=True)

    result = await call_tier(TIER_FULL_LISTING, client.list_lawyers)
    if result.status != "ok":
        raise BackendFailure(TIER_FULL_LISTING, result.error)
    return CascadeResult(
        candidates=narrow_full_listing(result.candidates, criteria),
        tier=TIER_FULL_LISTING,
    )


async def fetch_secondary_pool(
    criteria: SearchCriteria,
    client: SupabaseClient,
    limit: int = SECONDARY_LIMIT,
) -> List[MatchCandidate]:
    """
    Broader pool used to backfill thin primary results.
    Only the practice area is kept; never raises.
    """
    try:
        if criteria.practice_area_term:
            results = await client.search_advanced(
                practice_area=criteria.practice_area_term,
                location=None,
                locations=None,
                min_rate=None,
                max_rate=None,
                specific_issue=None,
                languages=None,
                keywords=None,
                urgency=None,
                limit=limit,
            )
        else:
            results = await client.list_lawyers()
    except Exception as e:
        logger.warning(f"Secondary pool failed: {e}")
        return []

    results = dedupe_candidates(filter_by_practice_area(results, criteria.practice_area_term))
    logger.info(f"Secondary pool: {len(results)} lawyers")
    return results
