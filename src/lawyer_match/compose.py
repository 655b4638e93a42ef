"""
Composition: blend primary and secondary pools, then paginate.

1. Under relevance, carve the top matches out of the ranked primary pool
2. Keep the rest of the primary pool
3. If the primary pool is thin (less than a page), backfill from the secondary
   pool, skipping anyone already in the primary pool
4. Dedupe and sort the tail

Strict results always come before backfill and are never hidden behind it.
"""

import logging
import math
from typing import Iterable, List

from lawyer_match.aggregate import dedupe_candidates
from lawyer_match.models import ComposedResultSet, MatchCandidate, Page, ResultPools
from lawyer_match.rank import sort_candidates
from lawyer_match.retrieve import LAWYERS_PER_PAGE

logger = logging.getLogger(__name__)

TOP_MATCHES_COUNT = 6


def compose(
    pools: ResultPools,
    policy: str,
    page_size: int = LAWYERS_PER_PAGE,
    top_count: int = TOP_MATCHES_COUNT,
) -> ComposedResultSet:
    """Build the top matches and the combined tail for one ranking policy."""
    primary = dedupe_candidates(pools.primary)
    secondary = dedupe_candidates(pools.secondary)
    relevance = policy == "relevance"

    if relevance:
        # Backend order is kept within equal keys; each pool is ranked on its own
        primary = sort_candidates(primary, "relevance")
        secondary = sort_candidates(secondary, "relevance")
        top_matches = primary[:top_count]
    else:
        top_matches = []

    top_ids = {c.id for c in top_matches}
    primary_ids = {c.id for c in primary}

    remainder = [c for c in primary if c.id not in top_ids]
    blended = remainder
    if len(primary) < page_size:
        blended = remainder + [c for c in secondary if c.id not in primary_ids]

    blended = dedupe_candidates(blended)
    if not relevance:
        blended = sort_candidates(blended, policy)

    composed = ComposedResultSet(policy=policy, top_matches=top_matches, combined=blended)
    logger.info(
        f"Composed {composed.total_count} lawyers "
        f"(top={len(top_matches)}, combined={len(blended)}, policy={policy})"
    )
    return composed


def total_pages(combined: Iterable[MatchCandidate], page_size: int = LAWYERS_PER_PAGE) -> int:
    return max(1, math.ceil(len(list(combined)) / page_size))


def paginate(composed: ComposedResultSet, page_number: int, page_size: int = LAWYERS_PER_PAGE) -> Page:
    """
    Slice the combined tail into a page. Page 1 also carries the top matches.
    Out of range page numbers are clamped.
    """
    pages = total_pages(composed.combined, page_size)
    number = min(max(1, page_number), pages)
    start = (number - 1) * page_size

    return Page(
        number=number,
        total_pages=pages,
        page_size=page_size,
        total_count=composed.total_count,
        top_matches=list(composed.top_matches) if number == 1 else [],
        items=composed.combined[start:start + page_size],
    )


def iter_pages(composed: ComposedResultSet, page_size: int = LAWYERS_PER_PAGE) -> List[Page]:
    """Every page of a composed result set, in order."""
    pages = total_pages(composed.combined, page_size)
    return [paginate(composed, n, page_size) for n in range(1, pages + 1)]
