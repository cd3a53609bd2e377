"""Unit tests for lattice geometry and tuning presets."""

import pytest

from harmonic_hexmap import config
from harmonic_hexmap.tuning import (
    TUNING_PRESETS,
    AxialCoordinate,
    TuningConfig,
    frequency_for_step,
    get_preset,
    note_index,
    pitch_step,
    step_cents,
)


@pytest.fixture
def tet12():
    return TUNING_PRESETS[12]


class TestPresets:
    """Tests for the built-in EDO presets."""

    def test_all_presets_available(self):
        """Every configured EDO has a preset."""
        assert sorted(TUNING_PRESETS) == [12, 19, 31, 53, 72]

    def test_twelve_tet_steps(self, tet12):
        """12-TET moves 2 steps along q and 1 along r."""
        assert tet12.q_step == 2
        assert tet12.r_step == 1
        assert tet12.name == "12 TET"

    def test_white_keys(self, tet12):
        """C major scale degrees are white keys in 12-TET."""
        assert tet12.is_white_key(0)
        assert tet12.is_white_key(7)
        assert not tet12.is_white_key(1)
        assert not tet12.is_white_key(6)

    def test_get_preset(self):
        """get_preset returns the named tuning."""
        assert get_preset(31).edo == 31

    def test_unknown_preset_raises(self):
        """An unknown EDO is rejected."""
        with pytest.raises(ValueError):
            get_preset(13)


class TestTuningConfig:
    """Tests for TuningConfig validation."""

    def test_white_keys_become_frozenset(self):
        """White keys are stored as a frozenset."""
        tuning = TuningConfig("7 TET", 7, 1, 1, [0, 2])
        assert tuning.white_keys == frozenset({0, 2})

    def test_non_positive_edo_raises(self):
        """An EDO must be positive."""
        with pytest.raises(ValueError):
            TuningConfig("bad", 0, 1, 1)

    def test_white_key_out_of_range_raises(self):
        """White keys must lie inside the octave."""
        with pytest.raises(ValueError):
            TuningConfig("bad", 12, 2, 1, (12,))


class TestPitchMapping:
    """Tests for pitch_step, note_index and frequencies."""

    def test_origin_is_step_zero(self, tet12):
        """The origin is step 0."""
        assert pitch_step(0, 0, tet12) == 0

    def test_axes(self, tet12):
        """One move along q is a whole tone, along r a semitone."""
        assert pitch_step(1, 0, tet12) == 2
        assert pitch_step(0, 1, tet12) == 1

    def test_fifth(self, tet12):
        """(3, 1) is a 12-TET fifth."""
        assert pitch_step(3, 1, tet12) == 7

    def test_negative_steps(self, tet12):
        """Cells left of the origin have negative steps."""
        assert pitch_step(-3, -1, tet12) == -7

    def test_note_index_wraps(self, tet12):
        """Note indices stay in [0, edo) for negative steps."""
        assert note_index(-1, 0, tet12) == 10
        assert note_index(6, 0, tet12) == 0

    def test_frequency_of_origin(self):
        """Step 0 sounds at the base frequency."""
        assert frequency_for_step(0, 12) == pytest.approx(config.BASE_FREQ)

    def test_octave_doubles(self):
        """edo steps double the frequency."""
        assert frequency_for_step(12, 12) == pytest.approx(2 * config.BASE_FREQ)
        assert frequency_for_step(-31, 31) == pytest.approx(config.BASE_FREQ / 2)

    def test_step_cents(self):
        """Steps convert to cents by 1200 / edo."""
        assert step_cents(7, 12) == pytest.approx(700.0)
        assert step_cents(18, 31) == pytest.approx(696.774, abs=0.001)


class TestAxialCoordinate:
    """Tests for axial coordinates."""

    def test_cube_constraint(self):
        """q + r + s is always 0."""
        c = AxialCoordinate(2, -5)
        assert c.q + c.r + c.s == 0

    def test_hashable_and_equal(self):
        """Coordinates work as dictionary keys."""
        assert {AxialCoordinate(1, 2): "x"}[AxialCoordinate(1, 2)] == "x"

    def test_str(self):
        """str shows q,r."""
        assert str(AxialCoordinate(-1, 3)) == "-1,3"
