"""Harmonic strength heatmap.

For every silent lattice cell, combines the LUT entries of its intervals
against all sounding cells into one "harmonic strength" and resolves it
to a display color and label.

The strength is a weighted geometric blend of three factors in [0, 1]:

- consonance: low accumulated roughness against the sounding notes
- clarity: simplicity of the best rational interval found
- tuning: how closely the EDO interval hits that rational

Because the blend is multiplicative, a single poor factor dims the cell
no matter how good the others are.
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Optional

from . import config
from .lut import HarmonicLUT, LUTEntry, RGB
from .tuning import AxialCoordinate


class Factor(Enum):
    """Contributing factors of the harmonic strength."""
    CONSONANCE = "consonance"
    CLARITY = "clarity"
    TUNING = "tuning"


@dataclass
class HeatmapFilters:
    """User-controlled filters for the heatmap."""
    enabled_limits: set[int] = field(default_factory=lambda: set(config.FILTER_LIMITS))
    enabled_factors: set[Factor] = field(default_factory=lambda: set(Factor))
    bandwidth_scale: float = config.DEFAULT_BANDWIDTH

    def limit_enabled(self, limit: int) -> bool:
        return limit in self.enabled_limits

    def factor_enabled(self, factor: Factor) -> bool:
        return factor in self.enabled_factors

    def set_limit(self, limit: int, enabled: bool) -> None:
        if enabled:
            self.enabled_limits.add(limit)
        else:
            self.enabled_limits.discard(limit)

    def set_factor(self, factor: Factor, enabled: bool) -> None:
        if enabled:
            self.enabled_factors.add(factor)
        else:
            self.enabled_factors.discard(factor)


@dataclass(frozen=True)
class BlendWeights:
    """Weights and constants of the harmonic strength blend."""
    consonance: float = config.WEIGHT_CONSONANCE
    clarity: float = config.WEIGHT_CLARITY
    tuning: float = config.WEIGHT_TUNING
    epsilon: float = config.BLEND_EPSILON
    clarity_decay: float = config.CLARITY_DECAY
    tuning_tolerance_cents: float = config.TUNING_TOLERANCE_CENTS
    consonance_scale: float = config.CONSONANCE_SCALE


@dataclass(frozen=True)
class CellVisual:
    """Display output for one silent cell."""
    color: RGB
    label: str = ""
    strength: float = 0.0
    consonance: float = 1.0


def lerp_color(c1: RGB, c2: RGB, t: float) -> RGB:
    """Linear interpolation between two RGB colors."""
    return tuple(round(a + (b - a) * t) for a, b in zip(c1, c2))  # type: ignore[return-value]


def clamp_color(color: RGB) -> RGB:
    return tuple(max(0, min(255, int(c))) for c in color)  # type: ignore[return-value]


def format_label(entry: LUTEntry) -> str:
    """Label shown for a cell whose simplest interval is entry."""
    return f"{entry.label} (Err: {entry.error_cents:.1f}¢)"


def simplest_match(entries: Iterable[LUTEntry]) -> Optional[LUTEntry]:
    """Matched entry with the lowest complexity.

    Unmatched entries are skipped; among equal complexities the first
    entry seen is kept.
    """
    best = None
    for entry in entries:
        if not entry.matched:
            continue
        if best is None or entry.complexity < best.complexity:
            best = entry
    return best


def blend_strength(
    consonance: float,
    clarity: float,
    tuning: float,
    filters: HeatmapFilters,
    weights: BlendWeights = BlendWeights(),
) -> float:
    """Weighted geometric blend of the three factors.

    A disabled factor gets weight 0, which removes its term from the log
    sum. With every factor disabled the result is exactly 1.0.
    """
    w_consonance = weights.consonance if filters.factor_enabled(Factor.CONSONANCE) else 0.0
    w_clarity = weights.clarity if filters.factor_enabled(Factor.CLARITY) else 0.0
    w_tuning = weights.tuning if filters.factor_enabled(Factor.TUNING) else 0.0

    log_blend = (
        w_clarity * math.log(clarity + weights.epsilon)
        + w_consonance * math.log(consonance + weights.epsilon)
        + w_tuning * math.log(tuning + weights.epsilon)
    )
    return math.exp(log_blend)


class HeatmapEngine:
    """Computes per-cell colors and labels from the active chord."""

    def __init__(
        self,
        weights: BlendWeights = BlendWeights(),
        noise_color: RGB = config.NOISE_COLOR,
        background: RGB = config.BLACK,
    ):
        self.weights = weights
        self.noise_color = noise_color
        self.background = background

    def factors(self, total_roughness: float, best: Optional[LUTEntry], gain: float) -> tuple[float, float, float]:
        """Return (consonance, clarity, tuning) for one cell."""
        w = self.weights
        consonance = 1.0 / (1.0 + total_roughness * (w.consonance_scale / gain))
        clarity = 1.0
        tuning = 1.0
        if best is not None:
            clarity = math.exp(-w.clarity_decay * best.complexity)
            tuning = max(0.0, min(1.0, 1.0 - abs(best.error_cents) / w.tuning_tolerance_cents))
        return consonance, clarity, tuning

    def evaluate(self, entries: list[LUTEntry], gain: float, filters: HeatmapFilters) -> CellVisual:
        """Resolve one cell from its intervals against every active cell."""
        total_roughness = sum(entry.roughness for entry in entries)
        best = simplest_match(entries)
        label = format_label(best) if best is not None else ""

        consonance, clarity, tuning = self.factors(total_roughness, best, gain)
        strength = blend_strength(consonance, clarity, tuning, filters, self.weights)

        if best is not None and best.color is not None and filters.limit_enabled(best.limit):
            color = lerp_color(self.background, best.color, strength)
        elif filters.factor_enabled(Factor.CONSONANCE):
            # Raw dissonance shows as a dim gray
            color = lerp_color(self.background, self.noise_color, 1.0 - consonance)
        else:
            color = self.background

        return CellVisual(
            color=clamp_color(color),
            label=label,
            strength=strength,
            consonance=consonance,
        )

    def recompute(
        self,
        cells,
        active: set[AxialCoordinate],
        gain: float,
        filters: HeatmapFilters,
        lut: HarmonicLUT,
    ) -> dict[AxialCoordinate, CellVisual]:
        """Recompute visuals for every silent cell.

        Args:
            cells: All lattice cells (objects with coord and pitch_step)
            active: Coordinates of the sounding cells
            gain: Sensitivity gain (> 0); higher gain tolerates more roughness
            filters: Current heatmap filters
            lut: Harmonic LUT built for the current tuning

        Returns:
            Mapping of silent cell coordinate -> CellVisual. Empty when
            nothing is sounding.
        """
        if gain <= 0:
            raise ValueError(f"Gain must be positive, got {gain}")

        cells = list(cells)
        sources = [cell for cell in cells if cell.coord in active]
        if not sources:
            return {}

        visuals = {}
        for target in cells:
            if target.coord in active:
                continue
            entries = [
                lut.lookup(target.pitch_step - source.pitch_step)
                for source in sources
            ]
            visuals[target.coord] = self.evaluate(entries, gain, filters)
        return visuals
