"""
Offline session simulation.

Drives the pairing engine and Elo updates with a scripted decision function,
so pairing strategies can be compared without a user in the loop.
"""

import random
from collections import Counter
from dataclasses import dataclass, field
from typing import Callable, Optional, Sequence, Union

from ..library.models import INITIAL_ELO, SessionSong
from .history import create_comparison_history
from .pairing import PairingStrategy, get_next_pair, get_phase, get_strategy
from .session import DuelOutcome, apply_duel

# Returns the winner's song_id, or None for a tie
DecideWinner = Callable[[SessionSong, SessionSong], Optional[str]]


@dataclass
class SimulationResult:
    """Final pool of a simulated session plus how many duels each phase got."""
    songs: list[SessionSong]
    comparisons: int = 0
    phase_counts: Counter = field(default_factory=Counter)

    def ranking(self) -> list[SessionSong]:
        return sorted(self.songs, key=lambda s: s.local_elo, reverse=True)

    def rank_of(self, song_id: str) -> int:
        return rank_of(self.songs, song_id)


def create_mock_songs(
    count: int,
    comparison_counts: Optional[Sequence[int]] = None,
    with_bt_strength: bool = False,
    spread_elo: bool = False,
) -> list[SessionSong]:
    """Build a pool of placeholder songs ``song-0`` .. ``song-{count-1}``.

    Args:
        count: Number of songs
        comparison_counts: Per-song starting comparison counts (default all 0)
        with_bt_strength: Give song i a bt_strength of 1 + 0.1 * i
        spread_elo: Spread local Elo 50 points apart around 1500
    """
    songs = []
    for i in range(count):
        songs.append(
            SessionSong(
                song_id=f"song-{i}",
                name=f"Song {i}",
                artist="Test Artist",
                album="Test Album",
                local_elo=INITIAL_ELO + (i - count / 2) * 50 if spread_elo else INITIAL_ELO,
                bt_strength=1 + i * 0.1 if with_bt_strength else None,
                comparison_count=comparison_counts[i] if comparison_counts else 0,
            )
        )
    return songs


def random_winner(song_a: SessionSong, song_b: SessionSong) -> Optional[str]:
    """Coin-flip decision function."""
    return song_a.song_id if random.random() < 0.5 else song_b.song_id


def favourite_wins(favourite_id: str) -> DecideWinner:
    """Decision function where one song always wins and other duels are coin flips."""

    def decide(song_a: SessionSong, song_b: SessionSong) -> Optional[str]:
        if favourite_id in (song_a.song_id, song_b.song_id):
            return favourite_id
        return random_winner(song_a, song_b)

    return decide


def simulate_session(
    songs: Sequence[SessionSong],
    num_comparisons: int,
    decide_winner: DecideWinner = random_winner,
    strategy: Union[PairingStrategy, str, None] = None,
    use_history: bool = True,
) -> SimulationResult:
    """Run ``num_comparisons`` duels and return the final pool.

    Args:
        songs: Starting pool
        num_comparisons: Duels to play
        decide_winner: Picks the winner id (None = tie)
        strategy: Pairing strategy instance or name (default adaptive)
        use_history: Track shown pairs like the app does
    """
    if strategy is None or isinstance(strategy, str):
        strategy = get_strategy(strategy or "adaptive")

    current = list(songs)
    history = create_comparison_history() if use_history else None
    result = SimulationResult(songs=current)

    for _ in range(num_comparisons):
        pair = get_next_pair(current, history, strategy)
        if pair is None:
            break
        song_a, song_b = pair
        result.phase_counts[get_phase(current).value] += 1

        winner_id = decide_winner(song_a, song_b)
        outcome = DuelOutcome.from_winner(
            song_a.song_id, song_b.song_id, winner_id, is_tie=winner_id is None
        )
        current = apply_duel(current, song_a.song_id, song_b.song_id, outcome, history)
        result.comparisons += 1

    result.songs = current
    return result


def rank_of(songs: Sequence[SessionSong], song_id: str) -> int:
    """1-based rank of a song by local Elo (descending)."""
    ranking = sorted(songs, key=lambda s: s.local_elo, reverse=True)
    for position, song in enumerate(ranking, start=1):
        if song.song_id == song_id:
            return position
    raise ValueError(f"Song {song_id} is not in the pool")
