"""Just-intonation reference intervals and chord annotations.

Feeds the linear cents view: a background of simple JI ratios within
the octave, and for each sounding note its EDO position next to the
nearest simple ratio.
"""

import math
from dataclasses import dataclass
from typing import Optional

from . import config
from .grid import LatticeCell
from .lut import RGB, limit_color
from .number_theory import gcd, ratio_limit
from .rational import RationalMatch, best_rational
from .tuning import step_cents


@dataclass(frozen=True)
class ReferenceInterval:
    """A just interval within the octave."""
    n: int
    d: int
    cents: float
    limit: int
    color: RGB

    @property
    def label(self) -> str:
        return f"{self.n}/{self.d}"


@dataclass(frozen=True)
class ChordAnnotation:
    """Position of one sounding note relative to the chord root."""
    cell: LatticeCell
    edo_cents: float
    match: Optional[RationalMatch]  # None when no simple ratio is close

    @property
    def ji_cents(self) -> Optional[float]:
        return self.match.cents if self.match is not None else None

    @property
    def deviation_cents(self) -> Optional[float]:
        """EDO position minus JI position (positive = EDO is sharp)."""
        if self.match is None:
            return None
        return self.edo_cents - self.match.cents


def reference_intervals(max_limit: int = 13, max_denominator: int = 24) -> list[ReferenceInterval]:
    """List irreducible ratios n/d in [1, 2] up to a prime limit.

    Args:
        max_limit: Highest prime limit included
        max_denominator: Largest denominator included

    Returns:
        Intervals sorted by size, ending with the octave 2/1
    """
    intervals = []
    for d in range(1, max_denominator + 1):
        for n in range(d, 2 * d):
            if gcd(n, d) != 1:
                continue
            limit = ratio_limit(n, d)
            if limit > max_limit:
                continue
            intervals.append(ReferenceInterval(
                n=n,
                d=d,
                cents=1200.0 * math.log2(n / d),
                limit=limit,
                color=config.LIMIT_COLORS.get(limit, config.UNKNOWN_LIMIT_COLOR),
            ))
    intervals.append(ReferenceInterval(
        n=2, d=1, cents=1200.0, limit=1, color=config.LIMIT_COLORS[1],
    ))
    return sorted(intervals, key=lambda interval: interval.cents)


def annotate_chord(
    active_cells: list[LatticeCell],
    edo: int,
    complexity_weight: float = config.ANNOTATION_COMPLEXITY_WEIGHT,
) -> list[ChordAnnotation]:
    """Relate every sounding note to the first one, within one octave.

    Args:
        active_cells: Sounding cells; the first is the chord root
        edo: Steps per octave of the tuning
        complexity_weight: Weight for the rational approximator

    Returns:
        One annotation per active cell, in the given order
    """
    if not active_cells:
        return []

    root_steps = active_cells[0].pitch_step
    annotations = []
    for cell in active_cells:
        diff = abs(cell.pitch_step - root_steps) % edo
        edo_cents = step_cents(diff, edo)
        ratio = 2.0 ** (edo_cents / 1200.0)
        # Near-unisons snap to 1/1
        if ratio < 1.001:
            ratio = 1.0
        match = best_rational(ratio, complexity_weight)
        annotations.append(ChordAnnotation(
            cell=cell,
            edo_cents=edo_cents,
            match=match if match.matched else None,
        ))
    return annotations


def annotation_color(annotation: ChordAnnotation) -> RGB:
    """Color of an annotation's matched interval."""
    if annotation.match is None:
        return config.COMPLEX_LIMIT_COLOR
    return limit_color(annotation.match.limit, unknown_color=(200, 200, 200))
