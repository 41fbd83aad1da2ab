"""
Duel bookkeeping for ranking sessions.

Applies duel outcomes to a song pool and rebuilds session state from a
persisted comparison log. Pools are never mutated; every function returns
new SessionSong records.

Two counters are kept apart on purpose:
- SessionSong.comparison_count: duels with a preference (win, loss, tie)
- ComparisonHistory: every pair shown, skips included
"""

from enum import Enum
from typing import Iterable, Optional, Sequence

from loguru import logger

from ..library.models import ComparisonRecord, SessionSong
from .elo import K_FACTOR, calculate_new_ratings
from .history import ComparisonHistory, build_history_from_comparisons, record_comparison
from .pairing import get_strength


class DuelOutcome(str, Enum):
    A_WINS = "a_wins"
    B_WINS = "b_wins"
    TIE = "tie"
    SKIP = "skip"

    def score_for_a(self) -> Optional[float]:
        """Actual score for song A, or None for a skip."""
        return {
            DuelOutcome.A_WINS: 1.0,
            DuelOutcome.B_WINS: 0.0,
            DuelOutcome.TIE: 0.5,
        }.get(self)

    @classmethod
    def from_winner(
        cls, song_a_id: str, song_b_id: str, winner_id: Optional[str], is_tie: bool = False
    ) -> "DuelOutcome":
        """Map the backend's (winner_id, is_tie) representation to an outcome."""
        if is_tie:
            return cls.TIE
        if winner_id is None:
            return cls.SKIP
        if winner_id == song_a_id:
            return cls.A_WINS
        if winner_id == song_b_id:
            return cls.B_WINS
        raise ValueError(f"Winner {winner_id} is not part of the duel {song_a_id} vs {song_b_id}")


def _find_song(songs: Sequence[SessionSong], song_id: str) -> SessionSong:
    for song in songs:
        if song.song_id == song_id:
            return song
    raise ValueError(f"Song {song_id} is not in the session pool")


def apply_duel(
    songs: Sequence[SessionSong],
    song_a_id: str,
    song_b_id: str,
    outcome: DuelOutcome,
    history: Optional[ComparisonHistory] = None,
    k_factor: float = K_FACTOR,
) -> list[SessionSong]:
    """Apply a duel result to the pool.

    Wins, losses and ties update both Elo ratings and add one comparison to
    each song. Skips change neither. The pair is recorded in ``history`` for
    every outcome so it isn't offered again straight away.

    Args:
        songs: Current pool
        song_a_id: First song of the duel
        song_b_id: Second song of the duel
        outcome: What the user chose
        history: Session history to record the pair in (optional)
        k_factor: Elo K-factor for this duel

    Returns:
        New pool with the two songs replaced

    Raises:
        ValueError: If the ids are equal or not in the pool
    """
    if song_a_id == song_b_id:
        raise ValueError(f"Cannot duel a song against itself: {song_a_id}")
    song_a = _find_song(songs, song_a_id)
    song_b = _find_song(songs, song_b_id)

    if history is not None:
        record_comparison(history, song_a_id, song_b_id)

    score_a = outcome.score_for_a()
    if score_a is None:
        logger.debug(f"Skipped duel {song_a_id} vs {song_b_id}")
        return list(songs)

    new_elo_a, new_elo_b = calculate_new_ratings(
        song_a.local_elo, song_b.local_elo, score_a, k_factor
    )
    updated = {
        song_a_id: song_a._replace(
            local_elo=new_elo_a, comparison_count=song_a.comparison_count + 1
        ),
        song_b_id: song_b._replace(
            local_elo=new_elo_b, comparison_count=song_b.comparison_count + 1
        ),
    }
    return [updated.get(song.song_id, song) for song in songs]


def undo_duel(
    songs: Sequence[SessionSong],
    song_a_id: str,
    song_b_id: str,
    previous_elo_a: float,
    previous_elo_b: float,
    was_skip: bool = False,
) -> list[SessionSong]:
    """Revert the last duel between two songs.

    Restores both ratings and removes exactly one comparison from each song.
    Undoing a skip changes nothing. The session history keeps the pair.

    Raises:
        ValueError: If either id is not in the pool
    """
    song_a = _find_song(songs, song_a_id)
    song_b = _find_song(songs, song_b_id)
    if was_skip:
        return list(songs)

    updated = {
        song_a_id: song_a._replace(
            local_elo=previous_elo_a,
            comparison_count=max(0, song_a.comparison_count - 1),
        ),
        song_b_id: song_b._replace(
            local_elo=previous_elo_b,
            comparison_count=max(0, song_b.comparison_count - 1),
        ),
    }
    return [updated.get(song.song_id, song) for song in songs]


def count_comparisons(comparisons: Iterable[ComparisonRecord]) -> dict[str, int]:
    """Meaningful comparisons per song id, skips excluded."""
    counts: dict[str, int] = {}
    for comparison in comparisons:
        if comparison.is_skip:
            continue
        counts[comparison.song_a_id] = counts.get(comparison.song_a_id, 0) + 1
        counts[comparison.song_b_id] = counts.get(comparison.song_b_id, 0) + 1
    return counts


def restore_session(
    songs: Sequence[SessionSong], comparisons: Sequence[ComparisonRecord]
) -> tuple[list[SessionSong], ComparisonHistory]:
    """Rebuild pool counts and history after a reload.

    Ratings come from the backend as-is; only comparison counts are derived
    from the log, so they always agree with what was persisted.
    """
    counts = count_comparisons(comparisons)
    history = build_history_from_comparisons(comparisons)
    restored = [
        song._replace(comparison_count=counts.get(song.song_id, 0)) for song in songs
    ]
    logger.debug(
        f"Restored session: {len(restored)} songs, {len(comparisons)} comparisons, "
        f"{len(history)} distinct pairs"
    )
    return restored, history


def leaderboard(songs: Iterable[SessionSong]) -> list[SessionSong]:
    """Songs ordered best first by effective strength, then local Elo."""
    return sorted(songs, key=lambda s: (get_strength(s), s.local_elo), reverse=True)
