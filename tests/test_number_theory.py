"""Unit tests for number_theory module."""

import pytest

from harmonic_hexmap.number_theory import gcd, prime_limit, ratio_limit


class TestGcd:
    """Tests for the gcd function."""

    def test_common_factor(self):
        """gcd(12, 8) is 4."""
        assert gcd(12, 8) == 4

    def test_coprime(self):
        """Coprime numbers have gcd 1."""
        assert gcd(9, 8) == 1

    def test_zero_argument(self):
        """gcd(a, 0) is a and gcd(0, b) is b."""
        assert gcd(7, 0) == 7
        assert gcd(0, 5) == 5


class TestPrimeLimit:
    """Tests for prime_limit."""

    def test_one_has_limit_one(self):
        """1 is the only number with prime limit 1."""
        assert prime_limit(1) == 1

    @pytest.mark.parametrize("p", [2, 3, 5, 7, 11, 13, 17, 19, 23, 997])
    def test_prime_is_its_own_limit(self, p):
        """A prime's limit is the prime itself."""
        assert prime_limit(p) == p

    def test_composites(self):
        """Largest prime factor of composites."""
        assert prime_limit(12) == 3
        assert prime_limit(35) == 7
        assert prime_limit(1024) == 2
        assert prime_limit(2 * 3 * 5 * 7 * 11 * 13) == 13

    def test_large_prime_factor_above_sqrt(self):
        """A single prime factor above the square root is found."""
        assert prime_limit(2 * 101) == 101

    def test_non_positive_raises(self):
        """Zero and negative numbers are rejected."""
        with pytest.raises(ValueError):
            prime_limit(0)
        with pytest.raises(ValueError):
            prime_limit(-6)


class TestRatioLimit:
    """Tests for ratio_limit."""

    def test_fifth(self):
        """3/2 is 3-limit."""
        assert ratio_limit(3, 2) == 3

    def test_harmonic_seventh(self):
        """7/4 is 7-limit."""
        assert ratio_limit(7, 4) == 7

    def test_larger_prime_in_denominator(self):
        """The limit comes from whichever term has the larger prime."""
        assert ratio_limit(16, 15) == 5
        assert ratio_limit(14, 11) == 11

    def test_unison(self):
        """1/1 is 1-limit."""
        assert ratio_limit(1, 1) == 1
