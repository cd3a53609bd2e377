"""Pointy-top hex layout: axial coordinates to screen pixels and back."""

import math

from harmonic_hexmap.tuning import AxialCoordinate

SQRT3 = math.sqrt(3.0)


def hex_round(frac_q: float, frac_r: float) -> AxialCoordinate:
    """Round fractional axial coordinates to the containing hex.

    Rounds all three cube components and recomputes the one with the
    largest rounding error so that q + r + s stays 0.
    """
    frac_s = -frac_q - frac_r
    q = round(frac_q)
    r = round(frac_r)
    s = round(frac_s)

    q_diff = abs(q - frac_q)
    r_diff = abs(r - frac_r)
    s_diff = abs(s - frac_s)

    if q_diff > r_diff and q_diff > s_diff:
        q = -r - s
    elif r_diff > s_diff:
        r = -q - s
    return AxialCoordinate(int(q), int(r))


class Layout:
    """Maps lattice cells onto the screen."""

    def __init__(self, size: float, origin: tuple[float, float] = (0.0, 0.0)):
        """Initialize the layout.

        Args:
            size: Center-to-corner distance of a hex in pixels
            origin: Pixel position of hex (0, 0)
        """
        self.size = size
        self.origin = origin

    def hex_to_pixel(self, coord: AxialCoordinate) -> tuple[float, float]:
        x = self.size * (SQRT3 * coord.q + SQRT3 / 2.0 * coord.r)
        y = self.size * (1.5 * coord.r)
        return (x + self.origin[0], y + self.origin[1])

    def pixel_to_hex(self, point: tuple[float, float]) -> AxialCoordinate:
        px = (point[0] - self.origin[0]) / self.size
        py = (point[1] - self.origin[1]) / self.size
        q = SQRT3 / 3.0 * px - py / 3.0
        r = 2.0 / 3.0 * py
        return hex_round(q, r)

    def corners(self, coord: AxialCoordinate) -> list[tuple[float, float]]:
        """Corner points of a hex, starting at -30 degrees."""
        cx, cy = self.hex_to_pixel(coord)
        points = []
        for i in range(6):
            angle = math.radians(60 * i - 30)
            points.append((cx + self.size * math.cos(angle), cy + self.size * math.sin(angle)))
        return points

    def zoom(self, factor: float, min_size: float, max_size: float) -> None:
        """Scale the hex size, clamped to [min_size, max_size]."""
        self.size = max(min_size, min(max_size, self.size * factor))

    def pan(self, dx: float, dy: float) -> None:
        self.origin = (self.origin[0] + dx, self.origin[1] + dy)
