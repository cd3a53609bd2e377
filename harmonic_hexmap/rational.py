"""Best simple-ratio approximation of a frequency ratio.

Walks the continued-fraction convergents of the target ratio and picks
the one that best balances tuning error against harmonic complexity.
The complexity weight tunes that tradeoff: a low weight accepts complex
but precise ratios, a high weight prefers simple ratios even when they
are further away.
"""

import math
from dataclasses import dataclass

from . import config
from .number_theory import ratio_limit


@dataclass(frozen=True)
class RationalMatch:
    """Result of approximating a ratio by n/d."""
    n: int
    d: int
    error_cents: float   # 1200 * log2(target / (n/d)), signed
    complexity: float    # log2(n * d)
    cost: float
    limit: int
    matched: bool

    @property
    def label(self) -> str:
        return f"{self.n}/{self.d}"

    @property
    def cents(self) -> float:
        """Size of n/d in cents."""
        return 1200.0 * math.log2(self.n / self.d)


def normalize_to_octave(ratio: float) -> float:
    """Fold a positive ratio into [1, 2) by octave shifts.

    Args:
        ratio: Frequency ratio (> 0)

    Returns:
        The octave-equivalent ratio in [1, 2)
    """
    if not math.isfinite(ratio) or ratio <= 0:
        raise ValueError(f"Ratio must be finite and positive, got {ratio}")
    while ratio >= 2.0:
        ratio /= 2.0
    while ratio < 1.0:
        ratio *= 2.0
    return ratio


def match_threshold(complexity_weight: float) -> float:
    """Cost below which an approximation counts as a match."""
    return config.MATCH_THRESHOLD_BASE + complexity_weight * config.MATCH_THRESHOLD_SLOPE


def limit_penalty(limit: int) -> float:
    """Extra cost for a ratio of the given prime limit."""
    return config.LIMIT_PENALTY if limit > config.PENALTY_PRIME_LIMIT else 0.0


def _candidate_cost(error_cents: float, complexity: float, limit: int,
                    complexity_weight: float) -> float:
    return abs(error_cents) + complexity * complexity_weight + limit_penalty(limit)


def convergents(target_ratio: float, max_denominator: int = config.MAX_DENOMINATOR):
    """Yield the continued-fraction convergents (n, d) of target_ratio.

    Stops once the denominator would exceed max_denominator, once a
    convergent lands within 0.001 cents of the target, or once the
    expansion terminates (the ratio is itself a convergent).
    """
    n0, d0, n1, d1 = 0, 1, 1, 0
    x = target_ratio

    while True:
        a = math.floor(x)
        n2 = a * n1 + n0
        d2 = a * d1 + d0
        if d2 > max_denominator:
            return

        yield n2, d2

        error = 1200.0 * math.log2(target_ratio / (n2 / d2))
        if abs(error) < 0.001:
            return

        n0, d0 = n1, d1
        n1, d1 = n2, d2
        frac = x - a
        if frac == 0:
            return
        x = 1.0 / frac
        if not math.isfinite(x):
            return


def best_rational(
    target_ratio: float,
    complexity_weight: float = 2.8,
    max_denominator: int = config.MAX_DENOMINATOR,
) -> RationalMatch:
    """Approximate a frequency ratio by the best simple fraction.

    Every convergent with n*d below the noise ceiling is a candidate.
    The candidate with the lowest cost wins, where

        cost = |error_cents| + complexity_weight * log2(n*d) + limit_penalty

    and limit_penalty applies to ratios beyond the 19-limit. Ties keep
    the first candidate seen.

    Args:
        target_ratio: Ratio to approximate, finite and > 0 (callers
            normally fold it into [1, 2) first)
        complexity_weight: Cost per bit of complexity
        max_denominator: Largest denominator explored

    Returns:
        RationalMatch; ``matched`` is False when even the best candidate
        costs more than 40 + 10 * complexity_weight
    """
    if not math.isfinite(target_ratio) or target_ratio <= 0:
        raise ValueError(f"Target ratio must be finite and positive, got {target_ratio}")

    best = None
    for n, d in convergents(target_ratio, max_denominator):
        if n * d >= config.MAX_CANDIDATE_PRODUCT:
            continue
        error = 1200.0 * math.log2(target_ratio / (n / d))
        complexity = math.log2(n * d)
        limit = ratio_limit(n, d)
        cost = _candidate_cost(error, complexity, limit, complexity_weight)
        # Strict comparison: the first candidate wins ties
        if best is None or cost < best.cost:
            best = RationalMatch(
                n=n,
                d=d,
                error_cents=error,
                complexity=complexity,
                cost=cost,
                limit=limit,
                matched=False,
            )

    if best is None:
        raise ValueError(f"No rational candidates found for ratio {target_ratio}")

    return RationalMatch(
        n=best.n,
        d=best.d,
        error_cents=best.error_cents,
        complexity=best.complexity,
        cost=best.cost,
        limit=best.limit,
        matched=best.cost < match_threshold(complexity_weight),
    )
