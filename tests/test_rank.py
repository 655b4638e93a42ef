"""Unit tests for the ranking policies."""

from lawyer_match.rank import parse_sort, sort_candidates


def ids(candidates):
    return [c.id for c in candidates]


class TestRelevance:

    def test_rating_breaks_score_ties(self, make_candidate):
        low = make_candidate("low", match_score=80, rating=4.2)
        high = make_candidate("high", match_score=80, rating=4.9)
        assert ids(sort_candidates([low, high], "relevance")) == ["high", "low"]

    def test_full_tie_break_chain(self, make_candidate):
        candidates = [
            make_candidate("a", match_score=80, rating=4.5, total_reviews=10, experience_years=3),
            make_candidate("b", match_score=80, rating=4.5, total_reviews=10, experience_years=9),
            make_candidate("c", match_score=80, rating=4.5, total_reviews=40, experience_years=1),
            make_candidate("d", match_score=95, rating=3.0),
        ]
        assert ids(sort_candidates(candidates, "relevance")) == ["d", "c", "b", "a"]

    def test_missing_score_ranks_last(self, make_candidate):
        candidates = [
            make_candidate("unscored", rating=5.0),
            make_candidate("scored", match_score=10),
        ]
        assert ids(sort_candidates(candidates, "relevance")) == ["scored", "unscored"]


class TestRating:

    def test_reviews_then_experience(self, make_candidate):
        candidates = [
            make_candidate("a", rating=4.8, total_reviews=5, experience_years=20),
            make_candidate("b", rating=4.8, total_reviews=50, experience_years=2),
            make_candidate("c", rating=4.9),
            make_candidate("d", rating=4.8, total_reviews=5, experience_years=25),
        ]
        assert ids(sort_candidates(candidates, "rating")) == ["c", "b", "d", "a"]

    def test_ignores_match_score(self, make_candidate):
        candidates = [
            make_candidate("a", match_score=99, rating=3.0),
            make_candidate("b", match_score=1, rating=4.0),
        ]
        assert ids(sort_candidates(candidates, "rating")) == ["b", "a"]


class TestPrice:

    def test_cheapest_first_missing_rate_last(self, make_candidate):
        candidates = [
            make_candidate("no-rate", rating=5.0),
            make_candidate("pricey", hourly_rate=500),
            make_candidate("cheap", hourly_rate=120),
        ]
        assert ids(sort_candidates(candidates, "price")) == ["cheap", "pricey", "no-rate"]

    def test_equal_rates_by_rating_then_reviews(self, make_candidate):
        candidates = [
            make_candidate("a", hourly_rate=200, rating=4.0, total_reviews=100),
            make_candidate("b", hourly_rate=200, rating=4.5, total_reviews=1),
            make_candidate("c", hourly_rate=200, rating=4.0, total_reviews=300),
        ]
        assert ids(sort_candidates(candidates, "price")) == ["b", "c", "a"]


class TestStability:

    def test_equal_keys_keep_input_order(self, make_candidate):
        candidates = [make_candidate(str(i), match_score=50, rating=4.0) for i in range(10)]
        for policy in ("relevance", "rating", "price"):
            assert ids(sort_candidates(candidates, policy)) == [str(i) for i in range(10)]

    def test_sorting_is_idempotent(self, make_candidate):
        candidates = [
            make_candidate("a", match_score=70, rating=4.1, hourly_rate=300),
            make_candidate("b", match_score=70, rating=4.1, hourly_rate=300),
            make_candidate("c", match_score=90, hourly_rate=150),
        ]
        once = sort_candidates(candidates, "relevance")
        assert sort_candidates(once, "relevance") == once

    def test_does_not_mutate_input(self, make_candidate):
        candidates = [make_candidate("a", match_score=1), make_candidate("b", match_score=2)]
        sort_candidates(candidates, "relevance")
        assert ids(candidates) == ["a", "b"]


class TestParseSort:

    def test_known_options(self):
        assert parse_sort("rating") == "rating"
        assert parse_sort("price") == "price"

    def test_unknown_falls_back_to_relevance(self):
        assert parse_sort("distance") == "relevance"
        assert parse_sort(None) == "relevance"
        assert parse_sort("") == "relevance"
