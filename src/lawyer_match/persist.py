"""
Match persistence: remember which lawyers a stored search was matched with.

The top relevance-ranked lawyers are written back to the originating
client_search row once per search id. The "already saved" flag is set before
the write is awaited, so a second trigger arriving mid-write is a no-op.
"""

import logging
from typing import Callable, Optional, Sequence

from lawyer_match.backends.supabase import SupabaseClient
from lawyer_match.models import MatchCandidate
from lawyer_match.rank import sort_candidates

logger = logging.getLogger(__name__)

MATCHES_TO_SAVE = 10


class MatchRecorder:
    """Per-session guard around updateMatchedLawyers."""

    def __init__(self, client: SupabaseClient, limit: int = MATCHES_TO_SAVE):
        self.client = client
        self.limit = limit
        self.search_id = ""
        self.saved = False

    def reset(self, search_id: str) -> None:
        """Start tracking a new search id; a changed id clears the flag."""
        if search_id != self.search_id:
            self.search_id = search_id
            self.saved = False

    def should_record(self, search_id: str, primary: Sequence[MatchCandidate], policy: str) -> bool:
        if not search_id or not primary or policy != "relevance":
            return False
        self.reset(search_id)
        return not self.saved

    async def record(
        self,
        search_id: str,
        primary: Sequence[MatchCandidate],
        policy: str,
        is_current: Optional[Callable[[], bool]] = None,
    ) -> bool:
        """
        Write the top matches for search_id. Returns True if a write happened.
        Skips silently when already saved, when the policy is not relevance,
        or when a newer search has taken over.
        """
        if not self.should_record(search_id, primary, policy):
            return False
        if is_current is not None and not is_current():
            logger.debug(f"Search {search_id} superseded, not saving matches")
            return False

        lawyer_ids = [c.id for c in sort_candidates(primary, "relevance")[:self.limit]]
        if not lawyer_ids:
            return False

        self.saved = True
        try:
            await self.client.update_matched_lawyers(search_id, lawyer_ids)
        except Exception as e:
            logger.warning(f"Could not save matched lawyers for search {search_id}: {e}")
            if self.search_id == search_id:
                self.saved = False
            return False
        return True
