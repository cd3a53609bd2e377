"""Pointer and view state for the visualizer.

The harmonic data itself lives in the engine; this only tracks what the
user is doing with the mouse and which cell is under it.
"""

from dataclasses import dataclass
from typing import Optional

from harmonic_hexmap.tuning import AxialCoordinate

from . import config


@dataclass
class PointerState:
    """Mouse press, drag and hover tracking."""
    dragging: bool = False
    click_candidate: bool = False
    start: tuple[int, int] = (0, 0)
    last: tuple[int, int] = (0, 0)
    hovered: Optional[AxialCoordinate] = None

    def press(self, pos: tuple[int, int]) -> None:
        self.dragging = True
        self.click_candidate = True
        self.start = pos
        self.last = pos

    def move(self, pos: tuple[int, int]) -> tuple[int, int]:
        """Register a drag movement. Returns the delta since the last position."""
        dx = pos[0] - self.last[0]
        dy = pos[1] - self.last[1]
        self.last = pos
        moved = ((pos[0] - self.start[0]) ** 2 + (pos[1] - self.start[1]) ** 2) ** 0.5
        if moved > config.CLICK_MOVE_TOLERANCE:
            self.click_candidate = False
        return dx, dy

    def release(self) -> bool:
        """End the press. Returns True if it counts as a click."""
        was_click = self.dragging and self.click_candidate
        self.dragging = False
        self.click_candidate = False
        return was_click


def next_edo(current: int, available: list[int], direction: int) -> int:
    """Neighboring EDO preset in ascending order, wrapping around."""
    ordered = sorted(available)
    if current not in ordered:
        return ordered[0]
    index = (ordered.index(current) + direction) % len(ordered)
    return ordered[index]
