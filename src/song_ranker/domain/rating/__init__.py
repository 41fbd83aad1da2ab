"""Rating domain - Elo updates, pair selection and duel bookkeeping."""

from .elo import K_FACTOR, calculate_k_factor, calculate_new_ratings, expected_score
from .history import (
    ComparisonHistory,
    build_history_from_comparisons,
    create_comparison_history,
    make_pair_key,
    record_comparison,
)
from .legacy_pairing import LegacyPairingStrategy
from .pairing import (
    AdaptivePairingStrategy,
    PairingStrategy,
    RankingPhase,
    get_next_pair,
    get_phase,
    get_strategy,
    get_strength,
    get_uncertainty,
)
from .session import (
    DuelOutcome,
    apply_duel,
    count_comparisons,
    leaderboard,
    restore_session,
    undo_duel,
)

__all__ = [
    # Elo
    "K_FACTOR",
    "calculate_k_factor",
    "calculate_new_ratings",
    "expected_score",
    # History
    "ComparisonHistory",
    "build_history_from_comparisons",
    "create_comparison_history",
    "make_pair_key",
    "record_comparison",
    # Pairing
    "AdaptivePairingStrategy",
    "LegacyPairingStrategy",
    "PairingStrategy",
    "RankingPhase",
    "get_next_pair",
    "get_phase",
    "get_strategy",
    "get_strength",
    "get_uncertainty",
    # Session
    "DuelOutcome",
    "apply_duel",
    "count_comparisons",
    "leaderboard",
    "restore_session",
    "undo_duel",
]
