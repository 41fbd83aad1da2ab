"""
Comparison history for a ranking session.

Tracks which unordered song pairs have already been shown so the pairing
engine can avoid repeats. Every duel is recorded, skips included. This is
separate from SessionSong.comparison_count, which ignores skips.
"""

from dataclasses import dataclass, field
from typing import Iterable

from ..library.models import ComparisonRecord


@dataclass
class ComparisonHistory:
    """Set of "id_a:id_b" keys (ids sorted) for pairs already shown.

    Only ever grows, even when a duel is undone. Not safe for concurrent
    record_comparison calls on the same instance.
    """
    compared_pairs: set[str] = field(default_factory=set)

    def __contains__(self, pair_key: str) -> bool:
        return pair_key in self.compared_pairs

    def __len__(self) -> int:
        return len(self.compared_pairs)

    def has_pair(self, song_a_id: str, song_b_id: str) -> bool:
        """Check whether two songs have already been shown together."""
        return make_pair_key(song_a_id, song_b_id) in self.compared_pairs


def make_pair_key(song_a_id: str, song_b_id: str) -> str:
    """Order-independent key for a pair of song ids."""
    if song_a_id < song_b_id:
        return f"{song_a_id}:{song_b_id}"
    return f"{song_b_id}:{song_a_id}"


def create_comparison_history() -> ComparisonHistory:
    """Create an empty comparison history."""
    return ComparisonHistory()


def record_comparison(history: ComparisonHistory, song_a_id: str, song_b_id: str) -> None:
    """Record that two songs have been shown together."""
    history.compared_pairs.add(make_pair_key(song_a_id, song_b_id))


def build_history_from_comparisons(
    comparisons: Iterable[ComparisonRecord],
) -> ComparisonHistory:
    """Rebuild history from a persisted comparison log (skips included)."""
    history = create_comparison_history()
    for comparison in comparisons:
        record_comparison(history, comparison.song_a_id, comparison.song_b_id)
    return history
