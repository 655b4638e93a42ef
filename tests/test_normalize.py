"""Unit tests for criteria normalization."""

import pytest

from lawyer_match.models import SearchRequest
from lawyer_match.normalize import (
    get_practice_area_search_term,
    normalize,
    parse_budget_range,
    practice_area_matches,
    split_tokens,
)


class TestBudgetRange:
    """Budget band -> rate interval."""

    @pytest.mark.parametrize("band, expected", [
        ("Under $150/hr", (None, 150)),
        ("$150–$250/hr", (150, 250)),
        ("$250–$400/hr", (250, 400)),
        ("$400–$600/hr", (400, 600)),
        ("$600+/hr", (600, None)),
        ("No preference", (None, None)),
    ])
    def test_known_bands(self, band, expected):
        assert parse_budget_range(band) == expected

    def test_unknown_band_means_no_constraint(self):
        assert parse_budget_range("Whatever you charge") == (None, None)

    def test_blank_band(self):
        assert parse_budget_range("") == (None, None)


class TestSplitTokens:

    def test_trims_and_drops_empty_entries(self):
        assert split_tokens(" Spanish, ,English ,") == ["Spanish", "English"]

    def test_dedupes_case_insensitively_keeping_first_spelling(self):
        assert split_tokens("Spanish, spanish, SPANISH, French") == ["Spanish", "French"]

    def test_none_and_blank(self):
        assert split_tokens(None) == []
        assert split_tokens("") == []


class TestPracticeArea:

    def test_synonyms_map_to_canonical_term(self):
        assert get_practice_area_search_term("divorce") == "Family Law"
        assert get_practice_area_search_term("  DUI ") == "Criminal Defense"

    def test_unknown_label_is_kept(self):
        assert get_practice_area_search_term("Maritime Law") == "Maritime Law"

    def test_blank_label(self):
        assert get_practice_area_search_term("   ") == ""

    def test_exact_match_on_canonical_keys(self):
        assert practice_area_matches("Family Law", ["Family"])
        assert practice_area_matches("divorce", ["Family Law"])
        assert practice_area_matches("Business / Startup", ["Corporate Law"])

    def test_no_partial_matches(self):
        assert not practice_area_matches("Real Estate", ["Real Estate Litigation"])
        assert not practice_area_matches("Family Law", ["Corporate Law"])
        assert not practice_area_matches("Family Law", [])

    def test_empty_selection_matches_everything(self):
        assert practice_area_matches("", ["Corporate Law"])
        assert practice_area_matches("", [])


class TestNormalize:

    def test_full_request(self):
        criteria = normalize(SearchRequest(
            practice_area="divorce",
            locations="Brooklyn, Queens, brooklyn",
            budget="Under $150/hr",
            languages="Spanish,english, Spanish",
            keywords="custody, a, CUSTODY, visa",
            urgency="urgent",
            search_id=" abc-123 ",
        ))

        assert criteria.practice_area == "divorce"
        assert criteria.practice_area_term == "Family Law"
        assert criteria.locations == ("Brooklyn", "Queens")
        assert criteria.primary_location == "Brooklyn"
        assert (criteria.min_rate, criteria.max_rate) == (None, 150)
        assert criteria.languages == ("Spanish", "english")
        assert criteria.keywords == ("custody", "visa")
        assert criteria.urgency == "urgent"
        assert criteria.search_id == "abc-123"

    def test_empty_practice_area_means_no_constraint(self):
        criteria = normalize({})
        assert criteria.practice_area_term == ""
        assert criteria.locations == ()
        assert criteria.primary_location is None
        assert not criteria.has_rate_range

    def test_single_location_used_when_list_missing(self):
        criteria = normalize({"location": "Manhattan"})
        assert criteria.locations == ("Manhattan",)

    def test_location_list_takes_precedence(self):
        criteria = normalize({"location": "Manhattan", "locations": "Queens,Bronx"})
        assert criteria.locations == ("Queens", "Bronx")

    def test_numeric_filters_from_query_strings(self):
        criteria = normalize({"min_experience": "5", "min_rating": "4.5"})
        assert criteria.min_experience == 5
        assert criteria.min_rating == 4.5

    def test_blank_numeric_filters_are_unset(self):
        criteria = normalize({"min_experience": "", "min_rating": " "})
        assert criteria.min_experience is None
        assert criteria.min_rating is None
