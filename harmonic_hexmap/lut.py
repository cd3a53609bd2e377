"""Harmonic lookup table.

Caches the expensive per-interval calculations (roughness and best
rational match) for every pitch-step difference of one tuning. The table
is rebuilt from scratch whenever the tuning, the complexity weight or the
bandwidth scale changes.
"""

from dataclasses import dataclass
from typing import Optional

from . import config
from .rational import best_rational, normalize_to_octave
from .roughness import roughness
from .tuning import TuningConfig

RGB = tuple[int, int, int]


@dataclass(frozen=True)
class LUTEntry:
    """Harmonic summary of one pitch-step interval."""
    steps: int
    roughness: float
    limit: int = 0  # 0 = no acceptable rational match
    complexity: float = config.UNMATCHED_COMPLEXITY
    error_cents: float = config.UNMATCHED_ERROR_CENTS
    label: str = ""
    color: Optional[RGB] = None
    n: int = 0
    d: int = 0

    @property
    def matched(self) -> bool:
        return self.limit > 0


def limit_color(
    limit: int,
    colors: dict[int, RGB] = config.LIMIT_COLORS,
    max_colored_limit: int = config.MAX_COLORED_LIMIT,
    complex_color: RGB = config.COMPLEX_LIMIT_COLOR,
    unknown_color: RGB = config.UNKNOWN_LIMIT_COLOR,
) -> RGB:
    """Display color for a prime limit."""
    if limit > max_colored_limit:
        return complex_color
    return colors.get(limit, unknown_color)


class HarmonicLUT:
    """Lookup table indexed by absolute pitch-step difference."""

    def __init__(
        self,
        octave_span: int = config.LUT_OCTAVE_SPAN,
        max_denominator: int = config.MAX_DENOMINATOR,
        colors: Optional[dict[int, RGB]] = None,
        max_colored_limit: int = config.MAX_COLORED_LIMIT,
        complex_color: RGB = config.COMPLEX_LIMIT_COLOR,
        unknown_color: RGB = config.UNKNOWN_LIMIT_COLOR,
    ):
        """Initialize an empty table.

        Args:
            octave_span: Octaves covered by the table (size = span * edo)
            max_denominator: Largest denominator for rational matching
            colors: Prime limit -> RGB table
            max_colored_limit: Limits above this get complex_color
            complex_color: Flat color for high limits
            unknown_color: Color for limits missing from the table
        """
        self.octave_span = octave_span
        self.max_denominator = max_denominator
        self.colors = dict(colors if colors is not None else config.LIMIT_COLORS)
        self.max_colored_limit = max_colored_limit
        self.complex_color = complex_color
        self.unknown_color = unknown_color

        self._table: list[LUTEntry] = []
        self._build_key: Optional[tuple[int, float, float]] = None

    def rebuild(
        self,
        tuning: TuningConfig,
        complexity_weight: float,
        bandwidth_scale: float = 1.0,
    ) -> None:
        """Recompute every entry for a tuning and weight set.

        Args:
            tuning: Active tuning (only the EDO size matters here)
            complexity_weight: Weight passed to the rational approximator
            bandwidth_scale: Critical bandwidth multiplier for roughness
        """
        edo = tuning.edo
        size = edo * self.octave_span
        table = []

        for steps in range(size):
            ratio = 2.0 ** (steps / edo)
            rough = roughness(ratio, bandwidth_scale)
            match = best_rational(
                normalize_to_octave(ratio),
                complexity_weight,
                self.max_denominator,
            )

            if match.matched:
                table.append(LUTEntry(
                    steps=steps,
                    roughness=rough,
                    limit=match.limit,
                    complexity=match.complexity,
                    error_cents=match.error_cents,
                    label=match.label,
                    color=limit_color(
                        match.limit,
                        self.colors,
                        self.max_colored_limit,
                        self.complex_color,
                        self.unknown_color,
                    ),
                    n=match.n,
                    d=match.d,
                ))
            else:
                table.append(LUTEntry(steps=steps, roughness=rough))

        # Swap in the finished table in one step
        self._table = table
        self._build_key = (edo, float(complexity_weight), float(bandwidth_scale))

    def needs_rebuild(
        self,
        tuning: TuningConfig,
        complexity_weight: float,
        bandwidth_scale: float = 1.0,
    ) -> bool:
        """Whether the table was built for different parameters."""
        return self._build_key != (tuning.edo, float(complexity_weight), float(bandwidth_scale))

    def lookup(self, steps_diff: int) -> LUTEntry:
        """Get the entry for a pitch-step difference.

        The sign is ignored. Differences beyond the table range return the
        last entry.
        """
        if not self._table:
            raise RuntimeError("Harmonic LUT has not been built yet")
        index = abs(steps_diff)
        if index >= len(self._table):
            return self._table[-1]
        return self._table[index]

    def entries(self) -> list[LUTEntry]:
        return list(self._table)

    @property
    def build_key(self) -> Optional[tuple[int, float, float]]:
        """(edo, complexity_weight, bandwidth_scale) of the current table."""
        return self._build_key

    @property
    def edo(self) -> Optional[int]:
        return self._build_key[0] if self._build_key else None

    def __len__(self) -> int:
        return len(self._table)

    def dump(self) -> str:
        """Return a human-readable listing of the table."""
        if self._build_key is None:
            return "Harmonic LUT (empty)"
        edo, weight, bandwidth = self._build_key
        lines = [
            f"Harmonic LUT ({edo}-EDO, weight={weight:.1f}, bandwidth={bandwidth:.2f})",
            "-" * 70,
        ]
        for entry in self._table:
            cents = 1200.0 * entry.steps / edo
            if entry.matched:
                sign = '+' if entry.error_cents >= 0 else ''
                lines.append(
                    f"{entry.steps:4d} steps ({cents:7.1f}¢) → {entry.label:>7s} "
                    f"[{sign}{entry.error_cents:.1f}¢] limit={entry.limit:<3d} "
                    f"roughness={entry.roughness:.3f}"
                )
            else:
                lines.append(
                    f"{entry.steps:4d} steps ({cents:7.1f}¢) → (no match) "
                    f"roughness={entry.roughness:.3f}"
                )
        return "\n".join(lines)
