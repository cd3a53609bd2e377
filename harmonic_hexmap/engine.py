"""Harmonic analysis engine.

Owns the lattice, the chord slots, the harmonic LUT and the heatmap
output, and keeps them consistent. Every public mutation runs the whole
recompute chain before returning: the LUT is rebuilt first when its
parameters changed, then the heatmap is recomputed, then subscribers are
notified.
"""

from dataclasses import dataclass, field
from typing import Callable, Optional

from . import config
from .grid import ChordBank, HexGrid, LatticeCell
from .heatmap import BlendWeights, CellVisual, Factor, HeatmapEngine, HeatmapFilters
from .lut import HarmonicLUT, RGB
from .tuning import TUNING_PRESETS, AxialCoordinate, TuningConfig, get_preset


@dataclass(frozen=True)
class EngineConfig:
    """Static data the engine is built from."""
    base_freq: float = config.BASE_FREQ
    presets: dict[int, TuningConfig] = field(default_factory=lambda: dict(TUNING_PRESETS))
    limit_colors: dict[int, RGB] = field(default_factory=lambda: dict(config.LIMIT_COLORS))
    max_colored_limit: int = config.MAX_COLORED_LIMIT
    complex_limit_color: RGB = config.COMPLEX_LIMIT_COLOR
    unknown_limit_color: RGB = config.UNKNOWN_LIMIT_COLOR
    noise_color: RGB = config.NOISE_COLOR
    weights: BlendWeights = field(default_factory=BlendWeights)
    octave_span: int = config.LUT_OCTAVE_SPAN
    max_denominator: int = config.MAX_DENOMINATOR
    slot_count: int = config.CHORD_SLOTS


@dataclass(frozen=True)
class RecomputeCompleted:
    """Sent to subscribers after each recompute chain."""
    reason: str
    lut_rebuilt: bool
    active_count: int
    revision: int


Listener = Callable[[RecomputeCompleted], None]


class HarmonicEngine:
    """Single owner of all lattice state and derived harmonic data."""

    def __init__(
        self,
        engine_config: Optional[EngineConfig] = None,
        edo: int = config.DEFAULT_EDO,
        radius: int = config.DEFAULT_RADIUS,
        complexity_weight: float = config.DEFAULT_COMPLEXITY_WEIGHT,
        sensitivity: float = config.DEFAULT_SENSITIVITY,
        filters: Optional[HeatmapFilters] = None,
    ):
        """Initialize the engine and run the first recompute.

        Args:
            engine_config: Static configuration (presets, colors, weights)
            edo: EDO preset to start with
            radius: Lattice radius
            complexity_weight: Rational approximator weight
            sensitivity: Gain slider value (gain = sensitivity / 10)
            filters: Initial heatmap filters
        """
        self.config = engine_config or EngineConfig()
        self.filters = filters or HeatmapFilters()
        self.complexity_weight = self._clamp_weight(complexity_weight)
        self.sensitivity = self._clamp_sensitivity(sensitivity)

        self.tuning = get_preset(edo, self.config.presets)
        self.grid = HexGrid(self.tuning, self.config.base_freq)
        self.grid.generate(radius)
        self.chords = ChordBank(self.config.slot_count)

        self.lut = self._make_lut()
        self.heatmap = self._make_heatmap()

        self._visuals: dict[AxialCoordinate, CellVisual] = {}
        self._listeners: list[Listener] = []
        self.revision = 0

        self._recompute("init")

    # =========================================================================
    # Construction helpers
    # =========================================================================

    def _make_lut(self) -> HarmonicLUT:
        cfg = self.config
        return HarmonicLUT(
            octave_span=cfg.octave_span,
            max_denominator=cfg.max_denominator,
            colors=cfg.limit_colors,
            max_colored_limit=cfg.max_colored_limit,
            complex_color=cfg.complex_limit_color,
            unknown_color=cfg.unknown_limit_color,
        )

    def _make_heatmap(self) -> HeatmapEngine:
        return HeatmapEngine(weights=self.config.weights, noise_color=self.config.noise_color)

    @staticmethod
    def _clamp_weight(weight: float) -> float:
        return max(config.COMPLEXITY_WEIGHT_MIN, min(config.COMPLEXITY_WEIGHT_MAX, float(weight)))

    @staticmethod
    def _clamp_sensitivity(value: float) -> int:
        return max(config.SENSITIVITY_MIN, int(value))

    # =========================================================================
    # Subscribers
    # =========================================================================

    def subscribe(self, callback: Listener) -> None:
        """Register a callback for RecomputeCompleted events."""
        self._listeners.append(callback)

    def unsubscribe(self, callback: Listener) -> None:
        if callback in self._listeners:
            self._listeners.remove(callback)

    # =========================================================================
    # Recompute chain
    # =========================================================================

    @property
    def gain(self) -> float:
        return self.sensitivity / 10.0

    def _recompute(self, reason: str, force_lut: bool = False) -> RecomputeCompleted:
        lut_rebuilt = False
        if force_lut or self.lut.needs_rebuild(
            self.tuning, self.complexity_weight, self.filters.bandwidth_scale
        ):
            self.lut.rebuild(self.tuning, self.complexity_weight, self.filters.bandwidth_scale)
            lut_rebuilt = True

        active = self.chords.active_coords()
        self._visuals = self.heatmap.recompute(
            self.grid.cells(), active, self.gain, self.filters, self.lut
        )

        self.revision += 1
        event = RecomputeCompleted(
            reason=reason,
            lut_rebuilt=lut_rebuilt,
            active_count=len(active),
            revision=self.revision,
        )
        for callback in list(self._listeners):
            callback(event)
        return event

    def refresh(self) -> RecomputeCompleted:
        """Recompute the heatmap with unchanged inputs."""
        return self._recompute("refresh")

    # =========================================================================
    # Tuning and analysis parameters
    # =========================================================================

    def set_tuning(self, tuning: TuningConfig) -> RecomputeCompleted:
        """Switch to an arbitrary tuning (invalidates cells and LUT)."""
        self.tuning = tuning
        self.grid.retune(tuning)
        return self._recompute("tuning", force_lut=True)

    def set_edo(self, edo: int) -> RecomputeCompleted:
        """Switch to one of the configured EDO presets."""
        return self.set_tuning(get_preset(edo, self.config.presets))

    def set_radius(self, radius: int) -> RecomputeCompleted:
        """Regenerate the lattice; chord state of vanished cells is dropped."""
        self.grid.generate(radius)
        self.chords.forget_missing(self.grid.coords())
        return self._recompute("radius")

    def set_complexity_weight(self, weight: float) -> RecomputeCompleted:
        self.complexity_weight = self._clamp_weight(weight)
        return self._recompute("complexity")

    def set_sensitivity(self, value: float) -> RecomputeCompleted:
        self.sensitivity = self._clamp_sensitivity(value)
        return self._recompute("sensitivity")

    def set_bandwidth(self, scale: float) -> RecomputeCompleted:
        if scale <= 0:
            raise ValueError(f"Bandwidth scale must be positive, got {scale}")
        self.filters.bandwidth_scale = float(scale)
        return self._recompute("bandwidth")

    def set_limit_enabled(self, limit: int, enabled: bool) -> RecomputeCompleted:
        self.filters.set_limit(limit, enabled)
        return self._recompute("filter")

    def set_factor_enabled(self, factor: Factor, enabled: bool) -> RecomputeCompleted:
        self.filters.set_factor(factor, enabled)
        return self._recompute("filter")

    def set_engine_config(self, engine_config: EngineConfig) -> RecomputeCompleted:
        """Swap the static configuration and rebuild everything from it."""
        tuning = get_preset(self.tuning.edo, engine_config.presets)
        self.config = engine_config
        self.tuning = tuning
        self.grid.retune(self.tuning, engine_config.base_freq)
        slots = self.chords
        self.chords = ChordBank(engine_config.slot_count)
        for slot in range(1, min(slots.slot_count, engine_config.slot_count) + 1):
            for coord in slots.active_coords(slot):
                self.chords.set_active(coord, True, slot)
        if slots.current_slot <= engine_config.slot_count:
            self.chords.select_slot(slots.current_slot)
        self.lut = self._make_lut()
        self.heatmap = self._make_heatmap()
        return self._recompute("config", force_lut=True)

    # =========================================================================
    # Chord state
    # =========================================================================

    def toggle_cell(self, coord: AxialCoordinate) -> bool:
        """Toggle a cell in the current slot.

        Returns:
            True if the cell exists (and was toggled), False otherwise
        """
        if coord not in self.grid:
            return False
        self.chords.toggle(coord)
        self._recompute("toggle")
        return True

    def activate(self, coord: AxialCoordinate) -> bool:
        """Activate a cell in the current slot. Returns True if it changed."""
        if coord not in self.grid or not self.chords.set_active(coord, True):
            return False
        self._recompute("activate")
        return True

    def deactivate(self, coord: AxialCoordinate) -> bool:
        """Deactivate a cell in the current slot. Returns True if it changed."""
        if coord not in self.grid or not self.chords.set_active(coord, False):
            return False
        self._recompute("deactivate")
        return True

    def select_slot(self, slot: int) -> bool:
        """Switch chord slot. Returns True if the slot changed."""
        if not self.chords.select_slot(slot):
            return False
        self._recompute("slot")
        return True

    def clear_slot(self) -> RecomputeCompleted:
        self.chords.clear_slot()
        return self._recompute("clear")

    def clear_all(self) -> RecomputeCompleted:
        self.chords.clear_all()
        return self._recompute("clear")

    # =========================================================================
    # Queries
    # =========================================================================

    def is_active(self, coord: AxialCoordinate) -> bool:
        return self.chords.is_active(coord)

    def active_cells(self) -> list[LatticeCell]:
        """Sounding cells of the current slot, in lattice order."""
        active = self.chords.active_coords()
        return [cell for cell in self.grid.cells() if cell.coord in active]

    def visual(self, coord: AxialCoordinate) -> Optional[CellVisual]:
        """Cached heatmap output of a silent cell (None if not colored)."""
        return self._visuals.get(coord)

    @property
    def visuals(self) -> dict[AxialCoordinate, CellVisual]:
        return dict(self._visuals)

    def frequency_of(self, coord: AxialCoordinate) -> Optional[float]:
        cell = self.grid.cell(coord)
        return cell.frequency_hz if cell is not None else None

    def closest_cell(self, frequency: float) -> Optional[LatticeCell]:
        return self.grid.closest_to_frequency(frequency)
