"""
Adaptive pair selection for ranking sessions.

Chooses the next two songs to show based on the current pool. The strategy
works in three phases, derived from comparison counts on every call rather
than stored, so it can never drift out of sync with the pool:

1. Coverage: bring every song to 3 comparisons, least-compared first.
2. Refinement: spend duels where they carry the most information.
3. Verification: re-check rank-adjacent songs, concentrating on the top 10.

Strength prefers the backend's Bradley-Terry log-strength and falls back to
an equivalent value derived from local Elo.
"""

import random
from enum import Enum
from typing import Optional, Protocol, Sequence, Union

from loguru import logger

from ..library.models import INITIAL_ELO, SessionSong
from .history import ComparisonHistory
from .legacy_pairing import LegacyPairingStrategy

# Elo's base-10 / 400 logistic expressed on the natural-log scale
ELO_TO_THETA = 173.72

COVERAGE_MIN_COMPARISONS = 3
IMBALANCE_RATIO = 3
IMBALANCE_MAX_MIN = 5
REFINEMENT_MAX_AVERAGE = 4

REFINEMENT_TOP_N = 5
VERIFICATION_TOP_N = 3
VERIFICATION_TOP_POSITIONS = 10
REFINEMENT_REPEAT_PENALTY = 0.1
VERIFICATION_REPEAT_PENALTY = 0.3

Pair = tuple[SessionSong, SessionSong]


class RankingPhase(str, Enum):
    COVERAGE = "coverage"
    REFINEMENT = "refinement"
    VERIFICATION = "verification"


class PairingStrategy(Protocol):
    """Interface for pair selection strategies.

    select_pair is only called with two or more songs and must return two
    different songs. Display order is randomized by get_next_pair.
    """

    name: str

    def select_pair(
        self, songs: Sequence[SessionSong], history: Optional[ComparisonHistory]
    ) -> Pair:
        ...


def get_strength(song: SessionSong) -> float:
    """Effective log-strength: bt_strength when known, else (elo - 1500) / 173.72."""
    if song.bt_strength is not None:
        return song.bt_strength
    return (song.local_elo - INITIAL_ELO) / ELO_TO_THETA


def get_uncertainty(song: SessionSong) -> float:
    """Higher = needs more comparisons. 0 comps = 1.0, 3 = 0.25, 6 = 0.11."""
    return 1 / (song.comparison_count + 1)


def get_phase(songs: Sequence[SessionSong]) -> RankingPhase:
    """Determine the ranking phase from the pool's comparison counts."""
    if not songs:
        return RankingPhase.COVERAGE

    counts = [song.comparison_count for song in songs]
    min_comps = min(counts)
    max_comps = max(counts)
    avg_comps = sum(counts) / len(counts)

    # Any badly under-sampled song keeps us in coverage (avoids "20 vs 3")
    if min_comps < COVERAGE_MIN_COMPARISONS:
        return RankingPhase.COVERAGE
    if max_comps > min_comps * IMBALANCE_RATIO and min_comps < IMBALANCE_MAX_MIN:
        return RankingPhase.COVERAGE

    if avg_comps < REFINEMENT_MAX_AVERAGE:
        return RankingPhase.REFINEMENT
    return RankingPhase.VERIFICATION


def _was_compared(
    history: Optional[ComparisonHistory], song_a: SessionSong, song_b: SessionSong
) -> bool:
    return history is not None and history.has_pair(song_a.song_id, song_b.song_id)


def _shuffled(songs: Sequence[SessionSong]) -> list[SessionSong]:
    # Random order before a stable sort, so ties don't favour input order
    result = list(songs)
    random.shuffle(result)
    return result


def select_coverage_pair(
    songs: Sequence[SessionSong], history: Optional[ComparisonHistory] = None
) -> Pair:
    """Least-compared song against the least-compared partner it hasn't met yet."""
    ordered = sorted(_shuffled(songs), key=lambda s: s.comparison_count)
    song_a = ordered[0]
    partners = [s for s in ordered if s.song_id != song_a.song_id]

    for song_b in partners:
        if not _was_compared(history, song_a, song_b):
            return (song_a, song_b)

    # song_a has met everyone; accept a repeat with the least-compared partner
    return (song_a, partners[0])


def score_candidate_pairs(
    songs: Sequence[SessionSong], history: Optional[ComparisonHistory] = None
) -> list[tuple[float, SessionSong, SessionSong]]:
    """Score every pair by expected information, highest first.

    Score is 10 x combined uncertainty, plus a closeness bonus
    1 / (strength gap + 0.1) once both songs are reasonably tested (combined
    uncertainty under 0.5). Pairs already shown keep 10% of their score.
    """
    candidates = []
    for i, song_a in enumerate(songs):
        for song_b in songs[i + 1:]:
            if song_a.song_id == song_b.song_id:
                continue
            combined_uncertainty = get_uncertainty(song_a) + get_uncertainty(song_b)
            strength_diff = abs(get_strength(song_a) - get_strength(song_b))
            closeness_bonus = (
                1 / (strength_diff + 0.1) if combined_uncertainty < 0.5 else 0.0
            )
            score = combined_uncertainty * 10 + closeness_bonus
            if _was_compared(history, song_a, song_b):
                score *= REFINEMENT_REPEAT_PENALTY
            candidates.append((score, song_a, song_b))

    candidates.sort(key=lambda c: c[0], reverse=True)
    return candidates


def select_refinement_pair(
    songs: Sequence[SessionSong], history: Optional[ComparisonHistory] = None
) -> Pair:
    """Random pick among the 5 most informative pairs."""
    candidates = score_candidate_pairs(_shuffled(songs), history)
    if not candidates:
        song_a, song_b = random.sample(list(songs), 2)
        return (song_a, song_b)

    _, song_a, song_b = random.choice(candidates[:REFINEMENT_TOP_N])
    return (song_a, song_b)


def select_verification_pair(
    songs: Sequence[SessionSong], history: Optional[ComparisonHistory] = None
) -> Pair:
    """Random pick among the 3 most doubtful rank-adjacent pairs.

    Adjacent pairs score (1/(gap + 0.1) + 2/(min comparisons + 1)), doubled
    within the top 10 positions and cut to 30% when already compared.
    """
    ranked = sorted(_shuffled(songs), key=get_strength, reverse=True)

    adjacent = []
    for i in range(len(ranked) - 1):
        song_a, song_b = ranked[i], ranked[i + 1]
        gap = abs(get_strength(song_a) - get_strength(song_b))
        min_comps = min(song_a.comparison_count, song_b.comparison_count)
        position_bonus = 2 if i < VERIFICATION_TOP_POSITIONS else 1
        repeat_factor = (
            VERIFICATION_REPEAT_PENALTY if _was_compared(history, song_a, song_b) else 1
        )
        score = (1 / (gap + 0.1) + 2 / (min_comps + 1)) * position_bonus * repeat_factor
        adjacent.append((score, song_a, song_b))

    if not adjacent:
        return (ranked[0], ranked[1])

    adjacent.sort(key=lambda c: c[0], reverse=True)
    _, song_a, song_b = random.choice(adjacent[:VERIFICATION_TOP_N])
    return (song_a, song_b)


class AdaptivePairingStrategy:
    """Phase-aware pairing (coverage -> refinement -> verification)."""

    name = "adaptive"

    def select_pair(
        self,
        songs: Sequence[SessionSong],
        history: Optional[ComparisonHistory] = None,
    ) -> Pair:
        phase = get_phase(songs)
        logger.debug(f"Pairing phase: {phase.value} ({len(songs)} songs)")

        if phase is RankingPhase.COVERAGE:
            return select_coverage_pair(songs, history)
        if phase is RankingPhase.REFINEMENT:
            return select_refinement_pair(songs, history)
        return select_verification_pair(songs, history)


STRATEGIES: dict[str, type] = {
    AdaptivePairingStrategy.name: AdaptivePairingStrategy,
    LegacyPairingStrategy.name: LegacyPairingStrategy,
}

DEFAULT_STRATEGY = AdaptivePairingStrategy.name


def get_strategy(name: str = DEFAULT_STRATEGY) -> PairingStrategy:
    """Look up a pairing strategy by name.

    Raises:
        ValueError: If no strategy has that name
    """
    strategy_cls = STRATEGIES.get(name)
    if strategy_cls is None:
        raise ValueError(
            f"Unknown pairing strategy: {name!r}. "
            f"Valid strategies are: {', '.join(sorted(STRATEGIES))}"
        )
    return strategy_cls()


def get_next_pair(
    songs: Sequence[SessionSong],
    history: Optional[ComparisonHistory] = None,
    strategy: Union[PairingStrategy, str, None] = None,
) -> Optional[Pair]:
    """Select the next two songs to show.

    Args:
        songs: Current pool with ratings and comparison counts
        history: Pairs already shown this session (optional)
        strategy: Strategy instance or name (default: adaptive)

    Returns:
        Two different songs in random display order, or None if the pool has
        fewer than 2 songs
    """
    if len(songs) < 2:
        return None

    if strategy is None or isinstance(strategy, str):
        strategy = get_strategy(strategy or DEFAULT_STRATEGY)

    song_a, song_b = strategy.select_pair(songs, history)
    logger.debug(f"Next pair ({strategy.name}): {song_a.song_id} vs {song_b.song_id}")

    if random.random() < 0.5:
        return (song_a, song_b)
    return (song_b, song_a)
