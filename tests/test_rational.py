"""Unit tests for the rational approximator."""

import math
import pytest

from harmonic_hexmap.number_theory import ratio_limit
from harmonic_hexmap.rational import (
    best_rational,
    convergents,
    limit_penalty,
    match_threshold,
    normalize_to_octave,
)


class TestNormalizeToOctave:
    """Tests for octave folding."""

    def test_already_in_range(self):
        """Ratios already in [1, 2) are unchanged."""
        assert normalize_to_octave(1.5) == 1.5

    def test_folds_down(self):
        """3.0 is a twelfth, which folds to a fifth."""
        assert normalize_to_octave(3.0) == pytest.approx(1.5)

    def test_folds_up(self):
        """Ratios below 1 are doubled into range."""
        assert normalize_to_octave(0.75) == pytest.approx(1.5)

    def test_octave_folds_to_unison(self):
        """The result is in [1, 2), so 2.0 becomes 1.0."""
        assert normalize_to_octave(2.0) == 1.0
        assert normalize_to_octave(4.0) == 1.0

    @pytest.mark.parametrize("bad", [0.0, -1.0, math.inf, math.nan])
    def test_invalid_ratio_raises(self, bad):
        """Non-positive and non-finite ratios are rejected."""
        with pytest.raises(ValueError):
            normalize_to_octave(bad)


class TestConvergents:
    """Tests for the continued-fraction walk."""

    def test_fifth(self):
        """1.5 expands to 1/1 then stops exactly at 3/2."""
        assert list(convergents(1.5)) == [(1, 1), (3, 2)]

    def test_harmonic_seventh(self):
        """7/4 ends the expansion once reached."""
        assert list(convergents(1.75)) == [(1, 1), (2, 1), (7, 4)]

    def test_unison(self):
        """An integer ratio yields one convergent."""
        assert list(convergents(1.0)) == [(1, 1)]

    def test_respects_max_denominator(self):
        """No convergent has a denominator above the limit."""
        for _, d in convergents(math.sqrt(2), max_denominator=100):
            assert d <= 100


class TestLimitPenalty:
    """Tests for the high prime limit penalty."""

    def test_no_penalty_up_to_19(self):
        """Limits 1 through 19 cost nothing extra."""
        for limit in (1, 3, 5, 7, 11, 13, 17, 19):
            assert limit_penalty(limit) == 0.0

    def test_penalty_above_19(self):
        """Limit 23 and beyond add the flat penalty."""
        assert limit_penalty(23) == 15.0
        assert limit_penalty(31) == 15.0

    def test_denominator_limit_counts(self):
        """A 23 in the denominator is penalized like one in the numerator."""
        assert limit_penalty(ratio_limit(32, 23)) == 15.0
        assert limit_penalty(ratio_limit(23, 16)) == 15.0


class TestBestRational:
    """Tests for best_rational."""

    def test_unison(self):
        """1.0 is matched exactly as 1/1."""
        match = best_rational(1.0, 2.8)
        assert (match.n, match.d) == (1, 1)
        assert match.error_cents == 0.0
        assert match.matched
        assert match.limit == 1

    @pytest.mark.parametrize("weight", [1.0, 2.8, 10.0])
    def test_fifth(self, weight):
        """1.5 is 3/2 for small to moderate weights."""
        match = best_rational(1.5, weight)
        assert (match.n, match.d) == (3, 2)
        assert match.matched
        assert match.limit == 3
        assert match.label == "3/2"

    def test_harmonic_seventh(self):
        """A 7/4 target matches 7/4."""
        match = best_rational(1.75, 2.8)
        assert (match.n, match.d) == (7, 4)
        assert match.limit == 7

    def test_tempered_fifth(self):
        """The 12-TET fifth approximates 3/2, about 2 cents flat."""
        match = best_rational(2.0 ** (7 / 12), 10.0)
        assert (match.n, match.d) == (3, 2)
        assert match.error_cents == pytest.approx(-1.955, abs=0.001)

    @pytest.mark.parametrize("target", [1.2599, 1.1225, 1.4142, 1.618])
    def test_error_round_trip(self, target):
        """Ratio size plus error gives back the target size in cents."""
        match = best_rational(target, 2.8)
        reconstructed = 1200 * math.log2(match.n / match.d) + match.error_cents
        assert reconstructed == pytest.approx(1200 * math.log2(target))

    def test_complexity_is_log_product(self):
        """Complexity is log2 of n times d."""
        match = best_rational(1.5, 2.8)
        assert match.complexity == pytest.approx(math.log2(6))

    def test_unmatched_when_nothing_is_close(self):
        """With only 1/1 available, a tritone costs far above the threshold."""
        match = best_rational(math.sqrt(2), 2.8, max_denominator=1)
        assert (match.n, match.d) == (1, 1)
        assert not match.matched
        assert match.cost > match_threshold(2.8)

    def test_threshold(self):
        """Threshold is 40 + 10 * weight."""
        assert match_threshold(2.8) == pytest.approx(68.0)
        assert match_threshold(10.0) == pytest.approx(140.0)

    def test_cents_property(self):
        """cents gives the size of n/d."""
        assert best_rational(1.5).cents == pytest.approx(701.955, abs=0.001)

    @pytest.mark.parametrize("bad", [0.0, -0.5, math.nan, math.inf])
    def test_invalid_target_raises(self, bad):
        """Non-positive and non-finite targets are rejected."""
        with pytest.raises(ValueError):
            best_rational(bad)
