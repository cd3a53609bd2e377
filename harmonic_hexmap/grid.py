"""Hex lattice cells and chord slot memory.

The grid owns the lattice cells of one tuning. Cells are immutable values:
a tuning change replaces every cell at once. Which cells are sounding is
kept separately in a ChordBank, one set of coordinates per chord slot.
"""

import math
from dataclasses import dataclass
from typing import Iterable, Iterator, Optional

from . import config
from .tuning import AxialCoordinate, TuningConfig, frequency_for_step, note_index, pitch_step


@dataclass(frozen=True)
class LatticeCell:
    """A lattice position with its derived pitch data."""
    coord: AxialCoordinate
    pitch_step: int
    note_index: int
    frequency_hz: float
    is_white_key: bool

    @classmethod
    def build(cls, coord: AxialCoordinate, tuning: TuningConfig,
              base_freq: float = config.BASE_FREQ) -> "LatticeCell":
        steps = pitch_step(coord.q, coord.r, tuning)
        index = note_index(coord.q, coord.r, tuning)
        return cls(
            coord=coord,
            pitch_step=steps,
            note_index=index,
            frequency_hz=frequency_for_step(steps, tuning.edo, base_freq),
            is_white_key=tuning.is_white_key(index),
        )


def hex_region(radius: int) -> Iterator[AxialCoordinate]:
    """All coordinates within radius of the origin, q-major order."""
    for q in range(-radius, radius + 1):
        r1 = max(-radius, -q - radius)
        r2 = min(radius, -q + radius)
        for r in range(r1, r2 + 1):
            yield AxialCoordinate(q, r)


class HexGrid:
    """Radius-bounded hex lattice for one tuning."""

    def __init__(self, tuning: TuningConfig, base_freq: float = config.BASE_FREQ):
        self.tuning = tuning
        self.base_freq = base_freq
        self.radius = 0
        self._cells: dict[AxialCoordinate, LatticeCell] = {}
        self._by_step: dict[int, LatticeCell] = {}

    def generate(self, radius: int) -> None:
        """Rebuild the lattice as a hexagon of the given radius."""
        if radius < 0:
            raise ValueError(f"Radius must be non-negative, got {radius}")
        self.radius = radius
        self._rebuild(hex_region(radius))

    def retune(self, tuning: TuningConfig, base_freq: Optional[float] = None) -> None:
        """Recompute every cell's pitch data for a new tuning."""
        self.tuning = tuning
        if base_freq is not None:
            self.base_freq = base_freq
        self._rebuild(list(self._cells))

    def _rebuild(self, coords: Iterable[AxialCoordinate]) -> None:
        cells = {}
        by_step = {}
        for coord in coords:
            cell = LatticeCell.build(coord, self.tuning, self.base_freq)
            cells[coord] = cell
            # The first cell generated for a pitch step represents it
            by_step.setdefault(cell.pitch_step, cell)
        self._cells = cells
        self._by_step = by_step

    def cell(self, coord: AxialCoordinate) -> Optional[LatticeCell]:
        return self._cells.get(coord)

    def cells(self) -> list[LatticeCell]:
        return list(self._cells.values())

    def coords(self) -> set[AxialCoordinate]:
        return set(self._cells)

    def cell_at_step(self, steps: int) -> Optional[LatticeCell]:
        """A cell sounding the given pitch step, if the lattice has one."""
        return self._by_step.get(steps)

    def closest_to_frequency(self, frequency: float) -> Optional[LatticeCell]:
        """Cell whose frequency is nearest (in Hz) to a target frequency.

        Returns None for an empty grid. Ties keep the first cell generated.
        """
        if not math.isfinite(frequency) or frequency <= 0:
            raise ValueError(f"Frequency must be finite and positive, got {frequency}")

        closest = None
        min_diff = math.inf
        for cell in self._cells.values():
            diff = abs(cell.frequency_hz - frequency)
            if diff < min_diff:
                min_diff = diff
                closest = cell
        return closest

    def __contains__(self, coord: AxialCoordinate) -> bool:
        return coord in self._cells

    def __len__(self) -> int:
        return len(self._cells)


class ChordBank:
    """Active cells per chord slot.

    Slots are numbered from 1. Queries and mutations act on the current
    slot unless a slot is given explicitly.
    """

    def __init__(self, slot_count: int = config.CHORD_SLOTS):
        if slot_count < 1:
            raise ValueError(f"Need at least one chord slot, got {slot_count}")
        self.slot_count = slot_count
        self.current_slot = 1
        self._active_slots: dict[AxialCoordinate, set[int]] = {}

    def _resolve(self, slot: Optional[int]) -> int:
        slot = self.current_slot if slot is None else slot
        if not 1 <= slot <= self.slot_count:
            raise ValueError(f"Slot must be in 1..{self.slot_count}, got {slot}")
        return slot

    def select_slot(self, slot: int) -> bool:
        """Make a slot current. Returns True if the slot changed."""
        slot = self._resolve(slot)
        if slot == self.current_slot:
            return False
        self.current_slot = slot
        return True

    def is_active(self, coord: AxialCoordinate, slot: Optional[int] = None) -> bool:
        return self._resolve(slot) in self._active_slots.get(coord, ())

    def set_active(self, coord: AxialCoordinate, active: bool, slot: Optional[int] = None) -> bool:
        """Set a cell's state in a slot. Returns True if it changed."""
        slot = self._resolve(slot)
        slots = self._active_slots.get(coord, set())
        if active == (slot in slots):
            return False
        if active:
            slots.add(slot)
            self._active_slots[coord] = slots
        else:
            slots.discard(slot)
            if not slots:
                self._active_slots.pop(coord, None)
        return True

    def toggle(self, coord: AxialCoordinate) -> bool:
        """Flip a cell in the current slot. Returns the new state."""
        active = not self.is_active(coord)
        self.set_active(coord, active)
        return active

    def active_coords(self, slot: Optional[int] = None) -> set[AxialCoordinate]:
        slot = self._resolve(slot)
        return {coord for coord, slots in self._active_slots.items() if slot in slots}

    def clear_slot(self, slot: Optional[int] = None) -> None:
        slot = self._resolve(slot)
        for coord in list(self._active_slots):
            self.set_active(coord, False, slot)

    def clear_all(self) -> None:
        self._active_slots.clear()

    def forget_missing(self, valid: set[AxialCoordinate]) -> None:
        """Drop state for cells that no longer exist."""
        for coord in list(self._active_slots):
            if coord not in valid:
                del self._active_slots[coord]
