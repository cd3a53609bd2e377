"""Unit tests for the hex grid and chord bank."""

import pytest

from harmonic_hexmap import config
from harmonic_hexmap.grid import ChordBank, HexGrid, hex_region
from harmonic_hexmap.tuning import TUNING_PRESETS, AxialCoordinate, note_index


@pytest.fixture
def grid():
    """12-TET grid of radius 4."""
    g = HexGrid(TUNING_PRESETS[12])
    g.generate(4)
    return g


class TestHexRegion:
    """Tests for hex_region."""

    @pytest.mark.parametrize("radius", [0, 1, 2, 4, 10])
    def test_cell_count(self, radius):
        """A hexagon of radius r has 3r(r+1) + 1 cells."""
        assert len(list(hex_region(radius))) == 3 * radius * (radius + 1) + 1

    def test_all_within_radius(self):
        """Every cube coordinate stays inside the radius."""
        for coord in hex_region(3):
            assert max(abs(coord.q), abs(coord.r), abs(coord.s)) <= 3

    def test_q_major_order(self):
        """Coordinates come out sorted by q, then r."""
        coords = list(hex_region(1))
        assert coords[0] == AxialCoordinate(-1, 0)
        assert coords == sorted(coords)


class TestHexGrid:
    """Tests for HexGrid."""

    def test_cells_have_pitch_data(self, grid):
        """Cells carry step, note index, key color and frequency."""
        cell = grid.cell(AxialCoordinate(3, 1))
        assert cell.pitch_step == 7
        assert cell.note_index == 7
        assert cell.is_white_key
        assert cell.frequency_hz == pytest.approx(config.BASE_FREQ * 2 ** (7 / 12))

    def test_note_index_below_root_wraps(self, grid):
        """Cells below the root get their pitch class in [0, edo)."""
        cell = grid.cell(AxialCoordinate(-1, 0))
        assert cell.pitch_step == -2
        assert cell.note_index == 10
        assert cell.note_index == note_index(-1, 0, grid.tuning)
        assert not cell.is_white_key

    def test_origin_at_base_frequency(self, grid):
        """The origin sounds at the base frequency."""
        assert grid.cell(AxialCoordinate(0, 0)).frequency_hz == pytest.approx(config.BASE_FREQ)

    def test_missing_cell(self, grid):
        """Coordinates outside the lattice have no cell."""
        assert grid.cell(AxialCoordinate(5, 0)) is None
        assert AxialCoordinate(5, 0) not in grid
        assert AxialCoordinate(4, 0) in grid

    def test_retune(self, grid):
        """Retuning keeps coordinates and recomputes pitches."""
        grid.retune(TUNING_PRESETS[19])
        assert len(grid) == 61
        assert grid.cell(AxialCoordinate(1, 0)).pitch_step == 3
        assert grid.cell(AxialCoordinate(0, 1)).pitch_step == 2

    def test_regenerate_with_new_radius(self, grid):
        """Generating again replaces the cell set."""
        grid.generate(1)
        assert len(grid) == 7
        assert grid.radius == 1

    def test_negative_radius_raises(self, grid):
        """A negative radius is rejected."""
        with pytest.raises(ValueError):
            grid.generate(-1)

    def test_cell_at_step_returns_first_generated(self, grid):
        """Steps shared by several cells resolve to the first generated."""
        cell = grid.cell_at_step(0)
        assert cell.pitch_step == 0
        assert cell.coord == AxialCoordinate(-2, 4)
        assert grid.cell_at_step(10_000) is None

    def test_closest_to_frequency(self, grid):
        """A just fifth above the base lands on the tempered fifth."""
        cell = grid.closest_to_frequency(config.BASE_FREQ * 1.5)
        assert cell.pitch_step == 7

    def test_closest_ties_keep_first(self, grid):
        """Equally close cells resolve to the first generated."""
        cell = grid.closest_to_frequency(config.BASE_FREQ)
        assert cell.coord == AxialCoordinate(-2, 4)

    def test_closest_on_empty_grid(self):
        """An empty grid has no closest cell."""
        assert HexGrid(TUNING_PRESETS[12]).closest_to_frequency(440.0) is None

    def test_closest_rejects_invalid_frequency(self, grid):
        """Non-positive and non-finite frequencies are rejected."""
        with pytest.raises(ValueError):
            grid.closest_to_frequency(0.0)


class TestChordBank:
    """Tests for ChordBank."""

    @pytest.fixture
    def bank(self):
        return ChordBank()

    def test_starts_on_slot_one(self, bank):
        """A new bank starts on slot 1."""
        assert bank.current_slot == 1
        assert bank.slot_count == config.CHORD_SLOTS

    def test_toggle(self, bank):
        """toggle flips a cell and returns its new state."""
        c = AxialCoordinate(0, 0)
        assert bank.toggle(c) is True
        assert bank.is_active(c)
        assert bank.toggle(c) is False
        assert not bank.is_active(c)

    def test_set_active_reports_change(self, bank):
        """set_active returns whether anything changed."""
        c = AxialCoordinate(1, 0)
        assert bank.set_active(c, True)
        assert not bank.set_active(c, True)
        assert bank.set_active(c, False)
        assert not bank.set_active(c, False)

    def test_slots_are_independent(self, bank):
        """A cell active in one slot is silent in another."""
        c = AxialCoordinate(0, 0)
        bank.toggle(c)
        assert bank.select_slot(2)
        assert not bank.is_active(c)
        assert bank.active_coords() == set()
        bank.select_slot(1)
        assert bank.is_active(c)

    def test_cell_in_several_slots(self, bank):
        """A cell can sound in more than one slot."""
        c = AxialCoordinate(2, -1)
        bank.set_active(c, True, slot=1)
        bank.set_active(c, True, slot=4)
        assert bank.is_active(c, slot=1)
        assert bank.is_active(c, slot=4)
        assert not bank.is_active(c, slot=2)

    def test_select_same_slot(self, bank):
        """Selecting the current slot is not a change."""
        assert not bank.select_slot(1)

    @pytest.mark.parametrize("slot", [0, 11, -1])
    def test_invalid_slot_raises(self, bank, slot):
        """Slots outside 1..slot_count are rejected."""
        with pytest.raises(ValueError):
            bank.select_slot(slot)

    def test_clear_slot_keeps_other_slots(self, bank):
        """Clearing one slot leaves the others alone."""
        c = AxialCoordinate(0, 0)
        bank.set_active(c, True, slot=1)
        bank.set_active(c, True, slot=2)
        bank.clear_slot()
        assert not bank.is_active(c)
        assert bank.is_active(c, slot=2)

    def test_clear_all(self, bank):
        """clear_all empties every slot."""
        bank.set_active(AxialCoordinate(0, 0), True, slot=3)
        bank.set_active(AxialCoordinate(1, 0), True)
        bank.clear_all()
        assert bank.active_coords() == set()
        assert bank.active_coords(3) == set()

    def test_forget_missing(self, bank):
        """Coordinates no longer on the lattice are forgotten."""
        keep = AxialCoordinate(0, 0)
        drop = AxialCoordinate(9, 0)
        bank.set_active(keep, True)
        bank.set_active(drop, True)
        bank.forget_missing({keep})
        assert bank.active_coords() == {keep}

    def test_needs_a_slot(self):
        """A bank needs at least one slot."""
        with pytest.raises(ValueError):
            ChordBank(0)
