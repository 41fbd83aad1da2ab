"""
Elo rating system for song duels.

Pure functional implementation with no side effects or network access.
All state is passed explicitly via parameters and returned as new values.
"""

K_FACTOR = 32.0

FAST_DECISION_MS = 3000
SLOW_DECISION_MS = 10000
FAST_K_FACTOR = 48.0
SLOW_K_FACTOR = 16.0


def expected_score(rating_a: float, rating_b: float) -> float:
    """
    Calculate expected win probability for song A vs song B using Elo formula.

    Formula: 1 / (1 + 10^((rating_b - rating_a) / 400))

    Args:
        rating_a: Current Elo rating of song A
        rating_b: Current Elo rating of song B

    Returns:
        Expected score for song A (0.0 to 1.0, where 0.5 = 50% chance)

    Examples:
        >>> expected_score(1500, 1500)
        0.5
        >>> round(expected_score(1700, 1500), 2)  # A is 200 points higher
        0.76
    """
    return 1 / (1 + 10 ** ((rating_b - rating_a) / 400))


def calculate_new_ratings(
    rating_a: float,
    rating_b: float,
    actual_score_a: float,
    k_factor: float = K_FACTOR,
) -> tuple[float, float]:
    """
    Calculate new ratings for two songs after a duel.

    Args:
        rating_a: Current rating of song A
        rating_b: Current rating of song B
        actual_score_a: 1 if A won, 0.5 for a tie, 0 if A lost
        k_factor: K-factor (how much ratings change). Higher = more volatile.

    Returns:
        (new_rating_a, new_rating_b)

    Examples:
        >>> calculate_new_ratings(1500, 1500, 1)  # Winner gains 16, loser loses 16
        (1516.0, 1484.0)
    """
    expected_a = expected_score(rating_a, rating_b)
    expected_b = 1 - expected_a
    actual_score_b = 1 - actual_score_a

    new_rating_a = rating_a + k_factor * (actual_score_a - expected_a)
    new_rating_b = rating_b + k_factor * (actual_score_b - expected_b)

    return (new_rating_a, new_rating_b)


def calculate_k_factor(
    decision_time_ms: float,
    fast_ms: float = FAST_DECISION_MS,
    slow_ms: float = SLOW_DECISION_MS,
    fast_k: float = FAST_K_FACTOR,
    slow_k: float = SLOW_K_FACTOR,
    default_k: float = K_FACTOR,
) -> float:
    """
    Get K-factor based on how long the user took to decide.

    - Under 3s: K=48 (snap decision, strong preference)
    - Over 10s: K=16 (hesitation, weak preference)
    - Otherwise: K=32

    Args:
        decision_time_ms: Time between the pair appearing and the choice

    Returns:
        Appropriate K-factor
    """
    if decision_time_ms < fast_ms:
        return fast_k
    elif decision_time_ms > slow_ms:
        return slow_k
    else:
        return default_k
