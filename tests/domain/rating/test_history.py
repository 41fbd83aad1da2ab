"""
Tests for comparison history tracking.
"""

from song_ranker.domain.library.models import ComparisonRecord
from song_ranker.domain.rating.history import (
    build_history_from_comparisons,
    create_comparison_history,
    make_pair_key,
    record_comparison,
)


class TestMakePairKey:
    def test_order_independent(self):
        assert make_pair_key("b", "a") == make_pair_key("a", "b") == "a:b"


class TestComparisonHistory:
    """Test recording and querying shown pairs."""

    def test_starts_empty(self):
        history = create_comparison_history()
        assert len(history) == 0
        assert not history.has_pair("a", "b")

    def test_record_is_unordered(self):
        history = create_comparison_history()
        record_comparison(history, "song-2", "song-1")
        assert history.has_pair("song-1", "song-2")
        assert "song-1:song-2" in history

    def test_repeat_records_once(self):
        history = create_comparison_history()
        record_comparison(history, "a", "b")
        record_comparison(history, "b", "a")
        assert len(history) == 1

    def test_build_from_comparisons_includes_skips(self):
        """Test every persisted duel is remembered, including skips and ties."""
        comparisons = [
            ComparisonRecord("a", "b", winner_id="a"),
            ComparisonRecord("c", "a", winner_id=None, is_tie=True),
            ComparisonRecord("b", "c"),  # skip
        ]
        history = build_history_from_comparisons(comparisons)
        assert history.compared_pairs == {"a:b", "a:c", "b:c"}
