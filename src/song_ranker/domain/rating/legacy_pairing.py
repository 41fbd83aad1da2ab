"""
First-generation pair selection, kept as the "legacy" pairing strategy.

A random roll picks one of four modes:
- 10% Top-vs-Top: two of the current top 5 face each other
- 15% Calibration: a top 10 song against any opponent
- 15% Chaos: two random songs
- 60% Uncertainty-weighted: an under-tested song against a close neighbour

Known weakness: a song that keeps winning is mostly matched against
neighbours picked relative to a random song, so it can be starved of duels
against the real contenders and finish under-ranked. The adaptive strategy
in pairing.py replaces it; this one remains for comparison runs.
"""

import random
from typing import Optional, Sequence

from ..library.models import INITIAL_ELO, SessionSong
from .history import ComparisonHistory

TOP_VS_TOP_RATE = 0.10
CALIBRATION_RATE = 0.25
CHAOS_RATE = 0.40
NEIGHBOUR_POOL_SIZE = 10


def get_legacy_strength(song: SessionSong) -> float:
    """Strength on a linear scale: positive bt_strength, else 10^((elo - 1500) / 400)."""
    if song.bt_strength is not None and song.bt_strength > 0:
        return song.bt_strength
    return max(0.01, 10 ** ((song.local_elo - INITIAL_ELO) / 400))


def _sorted_by_strength(songs: Sequence[SessionSong]) -> list[SessionSong]:
    return sorted(songs, key=get_legacy_strength, reverse=True)


def _pick_two_random(songs: Sequence[SessionSong]) -> tuple[SessionSong, SessionSong]:
    song_a, song_b = random.sample(list(songs), 2)
    return (song_a, song_b)


def _find_diverse_neighbour(
    songs: Sequence[SessionSong], song_a: SessionSong
) -> SessionSong:
    """Pick an opponent close in strength to song_a, favouring under-tested songs."""
    strength_a = get_legacy_strength(song_a)
    scored = []
    for song in songs:
        if song.song_id == song_a.song_id:
            continue
        strength_b = get_legacy_strength(song)
        diff = abs(strength_b - strength_a) / max(strength_a, strength_b, 0.01)
        uncertainty_bonus = 1 / (song.comparison_count + 1)
        scored.append((0.7 * diff - 0.3 * uncertainty_bonus, song))

    scored.sort(key=lambda item: item[0])
    _, neighbour = random.choice(scored[:NEIGHBOUR_POOL_SIZE])
    return neighbour


class LegacyPairingStrategy:
    """Mode-roll pairing. Ignores comparison history."""

    name = "legacy"

    def select_pair(
        self,
        songs: Sequence[SessionSong],
        history: Optional[ComparisonHistory] = None,
    ) -> tuple[SessionSong, SessionSong]:
        roll = random.random()

        if roll < TOP_VS_TOP_RATE and len(songs) > 5:
            return _pick_two_random(_sorted_by_strength(songs)[:5])

        if roll < CALIBRATION_RATE and len(songs) > 10:
            song_a = random.choice(_sorted_by_strength(songs)[:10])
            others = [s for s in songs if s.song_id != song_a.song_id]
            return (song_a, random.choice(others))

        if roll < CHAOS_RATE:
            return _pick_two_random(songs)

        # Weight 1/(count+1): 0 comparisons = 1.0, 5 comparisons = 0.167
        weights = [1 / (s.comparison_count + 1) for s in songs]
        song_a = random.choices(list(songs), weights=weights, k=1)[0]
        return (song_a, _find_diverse_neighbour(songs, song_a))
