"""
Tests for log-domain probability arithmetic.
"""

import math

import pytest

from silent_hmm.hmm.logprob import (
    UNDEFINED, ln, log_product, log_sum, log_sum_all, to_probability
)

FINITE_VALUES = [0.0, -0.5, -1.0, -3.2, -50.0, -745.0]


class TestLn:
    """Test conversion into the log domain."""

    def test_one_maps_to_zero(self):
        assert ln(1.0) == 0.0

    def test_zero_maps_to_undefined(self):
        """Probability zero is undefined, not -inf or NaN."""
        assert ln(0.0) is UNDEFINED
        assert ln(0) is None

    def test_regular_probability(self):
        assert ln(0.25) == pytest.approx(math.log(0.25))

    @pytest.mark.parametrize("p", [-0.1, 1.5, float("nan"), float("inf")])
    def test_invalid_probability(self, p):
        with pytest.raises(ValueError, match="Probability must be in"):
            ln(p)


class TestLogProduct:
    """Test log-domain multiplication."""

    def test_adds_logs(self):
        assert log_product(math.log(0.5), math.log(0.2)) == pytest.approx(math.log(0.1))

    @pytest.mark.parametrize("x", FINITE_VALUES + [None])
    def test_undefined_absorbs(self, x):
        assert log_product(UNDEFINED, x) is UNDEFINED
        assert log_product(x, UNDEFINED) is UNDEFINED


class TestLogSum:
    """Test log-domain addition."""

    def test_adds_probabilities(self):
        assert log_sum(math.log(0.3), math.log(0.2)) == pytest.approx(math.log(0.5))

    @pytest.mark.parametrize("x", FINITE_VALUES)
    def test_undefined_is_identity(self, x):
        assert log_sum(UNDEFINED, x) == x
        assert log_sum(x, UNDEFINED) == x

    def test_undefined_plus_undefined(self):
        assert log_sum(UNDEFINED, UNDEFINED) is UNDEFINED

    @pytest.mark.parametrize("a", FINITE_VALUES)
    @pytest.mark.parametrize("b", FINITE_VALUES)
    def test_commutative(self, a, b):
        assert log_sum(a, b) == log_sum(b, a)

    def test_associative(self):
        a, b, c = -0.3, -12.0, -2.5
        left = log_sum(log_sum(a, b), c)
        right = log_sum(a, log_sum(b, c))
        assert left == pytest.approx(right, abs=1e-12)

    def test_no_underflow_for_tiny_probabilities(self):
        """Values far below the smallest double still combine correctly."""
        a = -2000.0
        result = log_sum(a, a)
        assert result == pytest.approx(a + math.log(2.0))

    def test_no_overflow_for_large_gap(self):
        assert log_sum(0.0, -1e6) == pytest.approx(0.0)


class TestHelpers:
    """Test folding and conversion helpers."""

    def test_log_sum_all_empty(self):
        assert log_sum_all([]) is UNDEFINED

    def test_log_sum_all_skips_undefined(self):
        values = [UNDEFINED, math.log(0.1), UNDEFINED, math.log(0.4)]
        assert log_sum_all(values) == pytest.approx(math.log(0.5))

    def test_to_probability(self):
        assert to_probability(UNDEFINED) == 0.0
        assert to_probability(math.log(0.125)) == pytest.approx(0.125)
