"""
Tests for the Elo rating update rule.
"""

import math

import pytest

from song_ranker.domain.rating.elo import (
    K_FACTOR,
    calculate_k_factor,
    calculate_new_ratings,
    expected_score,
)


class TestExpectedScore:
    """Test expected score calculation."""

    def test_equal_ratings(self):
        """Test equal ratings give a 50% expectation."""
        assert expected_score(1500, 1500) == 0.5

    def test_higher_rating_favoured(self):
        """Test a 200 point advantage gives ~76%."""
        assert expected_score(1700, 1500) == pytest.approx(0.7597, abs=1e-4)

    def test_expectations_are_complementary(self):
        """Test A and B expectations sum to 1."""
        assert expected_score(1620, 1410) + expected_score(1410, 1620) == pytest.approx(1.0)


class TestCalculateNewRatings:
    """Test rating updates after a duel."""

    def test_tie_between_equals_changes_nothing(self):
        """Test equal ratings and a tie leave both unchanged."""
        assert calculate_new_ratings(1500, 1500, 0.5) == (1500, 1500)
        assert calculate_new_ratings(1732.5, 1732.5, 0.5) == (1732.5, 1732.5)

    def test_win_between_equals(self):
        """Test the default K moves equal ratings by 16 each way."""
        assert calculate_new_ratings(1500, 1500, 1) == (1516.0, 1484.0)

    @pytest.mark.parametrize(
        "rating_a,rating_b",
        [(1500, 1500), (1200, 1800), (1800, 1200), (0, 3000), (-250.5, 40.25)],
    )
    def test_win_raises_winner_and_lowers_loser(self, rating_a, rating_b):
        """Test a win strictly increases A and strictly decreases B."""
        new_a, new_b = calculate_new_ratings(rating_a, rating_b, 1)
        assert new_a > rating_a
        assert new_b < rating_b

    def test_loss_mirrors_win(self):
        """Test A losing is B winning."""
        lost_a, won_b = calculate_new_ratings(1450, 1550, 0)
        won_b2, lost_a2 = calculate_new_ratings(1550, 1450, 1)
        assert lost_a == pytest.approx(lost_a2)
        assert won_b == pytest.approx(won_b2)

    def test_total_rating_is_conserved(self):
        """Test points gained by one side are lost by the other."""
        new_a, new_b = calculate_new_ratings(1610, 1390, 0.5)
        assert new_a + new_b == pytest.approx(1610 + 1390)

    def test_custom_k_factor(self):
        """Test a K-factor override scales the change."""
        new_a, _ = calculate_new_ratings(1500, 1500, 1, k_factor=48)
        assert new_a == 1524.0

    def test_results_stay_finite(self):
        """Test extreme gaps still give finite, bounded results."""
        new_a, new_b = calculate_new_ratings(10_000, -10_000, 0)
        assert math.isfinite(new_a) and math.isfinite(new_b)
        assert abs(new_a - 10_000) <= K_FACTOR


class TestCalculateKFactor:
    """Test decision-time K-factor mapping."""

    def test_fast_decision(self):
        assert calculate_k_factor(1200) == 48

    def test_normal_decision(self):
        assert calculate_k_factor(3000) == 32
        assert calculate_k_factor(10000) == 32

    def test_slow_decision(self):
        assert calculate_k_factor(15000) == 16

    def test_custom_thresholds(self):
        """Test thresholds and K values can be overridden."""
        assert calculate_k_factor(4000, fast_ms=5000, fast_k=60) == 60
