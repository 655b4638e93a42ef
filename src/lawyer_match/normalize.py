"""
Criteria normalization: turn raw request parameters into canonical filter values.

- Budget band -> (min_rate, max_rate)
- Comma separated tokens -> trimmed, deduplicated lists (first occurrence wins)
- Practice area label -> canonical search term

Pure functions, no I/O.
"""

import re
from typing import Any, Iterable, List, Mapping, Optional, Tuple, Union

from lawyer_match.models import SearchCriteria, SearchRequest

# Budget band label -> (min_rate, max_rate)
BUDGET_RANGES = {
    "Under $150/hr": (None, 150),
    "$150–$250/hr": (150, 250),
    "$250–$400/hr": (250, 400),
    "$400–$600/hr": (400, 600),
    "$600+/hr": (600, None),
    "No preference": (None, None),
}

MIN_KEYWORD_LENGTH = 2

# Synonyms users pick or type -> the term the backend indexes on
PRACTICE_AREA_SEARCH_MAP = {
    "family law": "Family Law",
    "family & divorce": "Family Law",
    "divorce": "Family Law",
    "family": "Family Law",
    "child custody": "Family Law",
    "business law": "Corporate Law",
    "business / startup": "Corporate Law",
    "corporate law": "Corporate Law",
    "startup law": "Corporate Law",
    "business": "Corporate Law",
    "employment law": "Employment Law",
    "employment / workplace": "Employment Law",
    "workplace": "Employment Law",
    "real estate (transactions)": "Real Estate",
    "real estate": "Real Estate",
    "property law": "Real Estate",
    "estate & probate": "Estate Planning",
    "estate planning": "Estate Planning",
    "probate": "Estate Planning",
    "bankruptcy & debt": "Bankruptcy",
    "bankruptcy": "Bankruptcy",
    "debt": "Bankruptcy",
    "immigration law": "Immigration",
    "immigration": "Immigration",
    "citizenship": "Immigration",
    "personal injury": "Personal Injury",
    "criminal defense": "Criminal Defense",
    "criminal law": "Criminal Defense",
    "dui": "Criminal Defense",
    "civil rights": "Civil Rights",
    "civil litigation": "Civil Litigation",
    "litigation": "Civil Litigation",
}

_NOISE_WORDS = re.compile(r"law|legal|practice", re.IGNORECASE)
_PUNCTUATION = re.compile(r"[&/()]")
_WHITESPACE = re.compile(r"\s+")


def parse_budget_range(budget: str) -> Tuple[Optional[float], Optional[float]]:
    """Map a budget band label to a rate interval. Unknown bands mean no constraint."""
    if not budget:
        return None, None
    return BUDGET_RANGES.get(budget.strip(), (None, None))


def split_tokens(raw: Optional[str]) -> List[str]:
    """
    Split a comma separated value into clean tokens.
    Duplicates are detected case-insensitively; the first spelling is kept.
    """
    if not raw:
        return []
    seen = set()
    tokens = []
    for value in raw.split(","):
        trimmed = value.strip()
        if not trimmed:
            continue
        key = trimmed.casefold()
        if key in seen:
            continue
        seen.add(key)
        tokens.append(trimmed)
    return tokens


def get_practice_area_search_term(value: str) -> str:
    """Canonical search term for a practice area label ("" when blank)."""
    trimmed = (value or "").strip()
    if not trimmed:
        return ""
    return PRACTICE_AREA_SEARCH_MAP.get(trimmed.lower(), trimmed)


def practice_area_key(value: str) -> str:
    key = _NOISE_WORDS.sub("", value.lower())
    key = _PUNCTUATION.sub(" ", key)
    return _WHITESPACE.sub(" ", key).strip()


def practice_area_matches(selected: str, areas: Iterable[str]) -> bool:
    """
    Exact match on canonical keys. No fuzzy or partial matching.
    An empty selection matches everything.
    """
    selected_key = practice_area_key(get_practice_area_search_term(selected))
    if not selected_key:
        return True
    return any(
        practice_area_key(get_practice_area_search_term(area)) == selected_key
        for area in areas
    )


def normalize(raw: Union[SearchRequest, Mapping[str, Any]]) -> SearchCriteria:
    """Build SearchCriteria from a SearchRequest or a plain mapping of parameters."""
    request = raw if isinstance(raw, SearchRequest) else SearchRequest.model_validate(dict(raw))

    if request.locations:
        locations = split_tokens(request.locations)
    else:
        locations = split_tokens(request.location)

    min_rate, max_rate = parse_budget_range(request.budget)

    keywords = [
        keyword for keyword in split_tokens(request.keywords)
        if len(keyword) >= MIN_KEYWORD_LENGTH
    ]

    return SearchCriteria(
        practice_area=request.practice_area.strip(),
        practice_area_term=get_practice_area_search_term(request.practice_area),
        locations=tuple(locations),
        min_rate=min_rate,
        max_rate=max_rate,
        specific_issue=request.specific_issue.strip(),
        languages=tuple(split_tokens(request.languages)),
        keywords=tuple(keywords),
        urgency=request.urgency.strip(),
        search_id=request.search_id.strip(),
        min_experience=request.min_experience,
        min_rating=request.min_rating,
    )
