"""
Tests for keyword tokenization, scoring and filters
"""

from mailmind.search.keyword import SearchFilters, score_text, tokenize


class TestTokenize:
    """Test query tokenization."""

    def test_splits_on_whitespace(self):
        assert tokenize("  budget   review\tmeeting\n") == ["budget", "review", "meeting"]

    def test_empty_and_none(self):
        assert tokenize("") == []
        assert tokenize("   ") == []
        assert tokenize(None) == []


class TestScoreText:
    """Test occurrence scoring."""

    def test_counts_every_occurrence(self):
        assert score_text("budget and Budget and BUDGET", ["budget"]) == 3

    def test_sums_over_tokens(self):
        assert score_text("budget review of the budget", ["budget", "review"]) == 3

    def test_no_match(self):
        assert score_text("server maintenance", ["budget"]) == 0

    def test_empty_inputs(self):
        assert score_text("", ["budget"]) == 0
        assert score_text(None, ["budget"]) == 0
        assert score_text("budget", []) == 0

    def test_regex_characters_are_literal(self):
        """Tokens with regex metacharacters match literally."""
        assert score_text("cost is $5 (approx.)", ["(approx.)"]) == 1
        assert score_text("a.b a-b", ["a.b"]) == 1


class TestSearchFilters:
    """Test filter value handling."""

    def test_empty_filters(self):
        assert SearchFilters().is_empty()
        assert SearchFilters(sender="  ", subject="").is_empty()

    def test_values_in_field_order(self):
        filters = SearchFilters(
            sender=" lee ",
            subject="budget",
            start_date="2025-01-01",
        )

        assert filters.values() == ["lee", "budget", "2025-01-01"]
        assert not filters.is_empty()
