"""
Match Session

Runs the pipeline: normalize -> cascade -> refine -> (secondary) -> compose -> rank -> paginate
and owns the state that outlives a single call: current sort, current page,
the latest search's pools, and the match persistence guard.

Only the latest search wins. Every search bumps a generation counter and a
result is applied only if its generation is still the current one.
"""

import asyncio
import logging
from typing import Any, Callable, List, Mapping, Optional, Set, Union

from lawyer_match.aggregate import refine
from lawyer_match.backends.supabase import SupabaseClient
from lawyer_match.compose import compose, paginate
from lawyer_match.errors import BackendFailure
from lawyer_match.models import (
    MatchCandidate,
    Notice,
    Page,
    ResultPools,
    SearchCriteria,
    SearchOutcome,
    SearchRequest,
)
from lawyer_match.normalize import normalize
from lawyer_match.persist import MatchRecorder
from lawyer_match.rank import parse_sort
from lawyer_match.retrieve import LAWYERS_PER_PAGE, fetch_secondary_pool, run_cascade

logger = logging.getLogger(__name__)

EXCELLENT_MATCH_SCORE = 70
GOOD_MATCH_SCORE = 50


def match_quality_notice(primary: List[MatchCandidate], criteria: SearchCriteria) -> Optional[Notice]:
    """Summarize how well the primary results fit the request."""
    if not primary:
        if criteria.practice_area or criteria.locations:
            return Notice(
                title="No exact matches found",
                description="Try adjusting your search criteria or browse all lawyers.",
            )
        return None

    avg_score = sum(c.match_score or 0 for c in primary) / len(primary)
    if avg_score >= EXCELLENT_MATCH_SCORE:
        return Notice(
            title="Excellent matches found!",
            description=f"{len(primary)} highly relevant lawyers match your criteria.",
        )
    if avg_score >= GOOD_MATCH_SCORE:
        return Notice(
            title="Good matches found",
            description=f"{len(primary)} lawyers match your criteria.",
        )
    return None


class MatchSession:
    """Wires together all the pipeline stages for one client."""

    def __init__(self, client: SupabaseClient, page_size: int = LAWYERS_PER_PAGE):
        self.client = client
        self.page_size = page_size
        self.recorder = MatchRecorder(client)

        self.generation = 0
        self.applied_generation = 0  # search whose pools are currently shown
        self.sort = "relevance"
        self.current_page = 1
        self.criteria: Optional[SearchCriteria] = None
        self.pools = ResultPools()
        self.composed = None

        self._background: Set[asyncio.Task] = set()

    def is_current(self, generation: int) -> bool:
        return generation == self.generation

    async def search(
        self,
        request: Union[SearchRequest, Mapping[str, Any]],
        on_primary: Optional[Callable[[List[MatchCandidate]], None]] = None,
    ) -> Optional[SearchOutcome]:
        """
        Run a new search. Returns None when a newer search started while this
        one was waiting on the backend (its results are dropped).
        """
        self.generation += 1
        generation = self.generation

        if not isinstance(request, SearchRequest):
            request = SearchRequest.model_validate(dict(request))
        criteria = normalize(request)
        sort = parse_sort(request.sort)
        logger.info(
            f"Starting search #{generation}: practice_area={criteria.practice_area_term!r}, "
            f"locations={list(criteria.locations)}, search_id={criteria.search_id!r}"
        )

        # Fired right away; the primary path does not wait for it
        secondary_task = asyncio.create_task(
            fetch_secondary_pool(criteria, self.client, limit=self.page_size * 5)
        )

        try:
            cascade = await run_cascade(criteria, self.client, limit=self.page_size * 3)
        except BackendFailure as e:
            secondary_task.cancel()
            if not self.is_current(generation):
                logger.debug(f"Dropping failure of stale search #{generation}")
                return None
            logger.error(f"Search #{generation} failed: {e}")
            self._apply(generation, criteria, sort, ResultPools())
            return self._outcome("error", tier=None, notices=[
                Notice(title="Error loading results", description=str(e), variant="destructive"),
            ])

        if not self.is_current(generation):
            secondary_task.cancel()
            logger.debug(f"Dropping stale primary results of search #{generation}")
            return None

        primary = refine(cascade.candidates, criteria)
        if on_primary:
            on_primary(primary)

        secondary = await secondary_task
        if not self.is_current(generation):
            logger.debug(f"Dropping stale results of search #{generation}")
            return None

        self._apply(generation, criteria, sort, ResultPools(primary=tuple(primary), secondary=tuple(secondary)))
        self._schedule_persist(generation)

        if cascade.unavailable:
            return self._outcome("unavailable", tier=None, notices=[
                Notice(
                    title="Search unavailable",
                    description="Strict practice-area search is required. Please try again later.",
                ),
            ])

        notices = []
        notice = match_quality_notice(primary, criteria)
        if notice:
            notices.append(notice)
        status = "ok" if primary else "no_matches"
        return self._outcome(status, tier=cascade.tier, notices=notices)

    def set_sort(self, sort: str) -> Page:
        """Switch ranking policy; goes back to page 1."""
        self.sort = parse_sort(sort)
        self.current_page = 1
        self.composed = compose(self.pools, self.sort, page_size=self.page_size)
        self._schedule_persist(self.applied_generation)
        return self.page()

    def go_to_page(self, number: int) -> Page:
        page = self.page(number)
        self.current_page = page.number
        return page

    def page(self, number: Optional[int] = None) -> Page:
        if self.composed is None:
            self.composed = compose(self.pools, self.sort, page_size=self.page_size)
        return paginate(self.composed, self.current_page if number is None else number, self.page_size)

    async def wait_for_background(self) -> None:
        """Wait for pending fire-and-forget work (match persistence)."""
        if self._background:
            await asyncio.gather(*self._background, return_exceptions=True)

    def _apply(self, generation: int, criteria: SearchCriteria, sort: str, pools: ResultPools) -> None:
        self.applied_generation = generation
        self.criteria = criteria
        self.sort = sort
        self.pools = pools
        self.current_page = 1
        self.composed = compose(pools, sort, page_size=self.page_size)

    def _schedule_persist(self, generation: int) -> None:
        search_id = self.criteria.search_id if self.criteria else ""
        primary = list(self.pools.primary)
        if not self.recorder.should_record(search_id, primary, self.sort):
            return
        task = asyncio.create_task(self.recorder.record(
            search_id,
            primary,
            self.sort,
            is_current=lambda: self.is_current(generation),
        ))
        self._background.add(task)
        task.add_done_callback(self._background.discard)

    def _outcome(self, status: str, tier: Optional[str], notices: List[Notice]) -> SearchOutcome:
        return SearchOutcome(
            status=status,
            criteria=self.criteria,
            tier=tier,
            pools=self.pools,
            composed=self.composed,
            page=self.page(),
            notices=notices,
        )
