"""
Pytest configuration and fixtures.

Backend calls go to an in-memory FakeSupabase (see tests/mocks/fake_supabase.py).
"""

import pytest

from lawyer_match.models import MatchCandidate


@pytest.fixture
def make_candidate():
    """Factory fixture to create a MatchCandidate with sensible defaults."""
    def _create(id: str, **kwargs) -> MatchCandidate:
        kwargs.setdefault("full_name", f"Lawyer {id}")
        return MatchCandidate(id=id, **kwargs)
    return _create


@pytest.fixture
def make_pool(make_candidate):
    """Factory fixture to create a list of candidates with descending scores."""
    def _create(prefix: str, count: int, start_score: float = 90, **kwargs):
        return [
            make_candidate(f"{prefix}{i}", match_score=start_score - i, **kwargs)
            for i in range(count)
        ]
    return _create
