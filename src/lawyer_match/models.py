"""
Data models for the pipeline.

The data structures used throughout the lawyer matching pipeline.
"""

from dataclasses import dataclass, field
from typing import Literal, Optional, List, Tuple

from pydantic import BaseModel, field_validator

SORT_OPTIONS: Tuple[str, ...] = ("relevance", "rating", "price")

SearchStatus = Literal["ok", "no_matches", "unavailable", "error"]


class SearchRequest(BaseModel):
    """Raw search parameters, as they arrive from the query string."""
    practice_area: str = ""
    location: str = ""
    locations: str = ""  # comma separated, takes precedence over location
    budget: str = ""
    specific_issue: str = ""
    languages: str = ""
    keywords: str = ""
    urgency: str = ""
    search_id: str = ""
    sort: str = "relevance"
    min_experience: Optional[int] = None
    min_rating: Optional[float] = None

    @field_validator("min_experience", "min_rating", mode="before")
    @classmethod
    def _blank_to_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value


@dataclass(frozen=True)
class SearchCriteria:
    """Canonical filter values derived from a SearchRequest."""
    practice_area: str = ""  # label as the user picked it
    practice_area_term: str = ""  # canonical term, "" means no constraint
    locations: Tuple[str, ...] = ()  # order = priority, first is primary
    min_rate: Optional[float] = None
    max_rate: Optional[float] = None
    specific_issue: str = ""
    languages: Tuple[str, ...] = ()
    keywords: Tuple[str, ...] = ()
    urgency: str = ""
    search_id: str = ""
    min_experience: Optional[int] = None
    min_rating: Optional[float] = None

    @property
    def primary_location(self) -> Optional[str]:
        return self.locations[0] if self.locations else None

    @property
    def has_rate_range(self) -> bool:
        return self.min_rate is not None or self.max_rate is not None


@dataclass(frozen=True)
class MatchCandidate:
    """A lawyer returned by one of the matching tiers."""
    id: str
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None
    firm_name: Optional[str] = None
    hourly_rate: Optional[float] = None
    experience_years: Optional[int] = None
    rating: Optional[float] = None
    total_reviews: Optional[int] = None
    languages: Tuple[str, ...] = ()
    locations: Tuple[str, ...] = ()
    practice_areas: Tuple[str, ...] = ()
    match_score: Optional[float] = None  # opaque, backend supplied


@dataclass(frozen=True)
class ResultPools:
    """Primary (strict) and secondary (relaxed) results of one search."""
    primary: Tuple[MatchCandidate, ...] = ()
    secondary: Tuple[MatchCandidate, ...] = ()


@dataclass
class ComposedResultSet:
    """Top matches carved out of the primary pool, plus everything else."""
    policy: str
    top_matches: List[MatchCandidate] = field(default_factory=list)
    combined: List[MatchCandidate] = field(default_factory=list)

    @property
    def total_count(self) -> int:
        return len(self.top_matches) + len(self.combined)


@dataclass
class Page:
    """One page of a composed result set."""
    number: int
    total_pages: int
    page_size: int
    total_count: int
    top_matches: List[MatchCandidate] = field(default_factory=list)  # only on page 1
    items: List[MatchCandidate] = field(default_factory=list)


@dataclass(frozen=True)
class Notice:
    """A user-facing message about the outcome of a search."""
    title: str
    description: str
    variant: Literal["default", "destructive"] = "default"


@dataclass
class SearchOutcome:
    """Everything a caller needs to render one search."""
    status: SearchStatus
    criteria: SearchCriteria
    tier: Optional[str] = None  # which cascade tier answered
    pools: ResultPools = field(default_factory=ResultPools)
    composed: Optional[ComposedResultSet] = None
    page: Optional[Page] = None
    notices: List[Notice] = field(default_factory=list)
