"""Sensory dissonance model (Plomp-Levelt curve).

Estimates the roughness heard between two complex tones whose
fundamentals stand in a given ratio, by summing the dissonance of every
pair of partials.
"""

import math

from . import config

# Plomp-Levelt curve exponents
S1 = 3.5
S2 = 5.75


def roughness(ratio: float, bandwidth_scale: float = 1.0) -> float:
    """Calculate the modeled roughness between two tones.

    Both tones have ROUGHNESS_PARTIALS partials with amplitudes decaying
    as i^-1.1. The lower tone sits at a fixed reference fundamental.

    Args:
        ratio: Frequency ratio of the upper tone to the lower (> 0)
        bandwidth_scale: Critical bandwidth multiplier. Below 1 the
            curve narrows (sharper roughness peaks), above 1 it widens.

    Returns:
        Non-negative roughness score
    """
    if ratio <= 0:
        raise ValueError(f"Ratio must be positive, got {ratio}")
    if bandwidth_scale <= 0:
        raise ValueError(f"Bandwidth scale must be positive, got {bandwidth_scale}")

    f1 = config.ROUGHNESS_REFERENCE_FREQ
    f2 = f1 * ratio
    partials = config.ROUGHNESS_PARTIALS
    total = 0.0

    for i in range(1, partials + 1):
        p1 = f1 * i
        a1 = 1.0 / (i ** config.PARTIAL_ROLLOFF)
        for j in range(1, partials + 1):
            p2 = f2 * j
            a2 = 1.0 / (j ** config.PARTIAL_ROLLOFF)

            df = abs(p1 - p2)
            cbw = 0.24 * (min(p1, p2) + 25.0) * bandwidth_scale
            x = df / cbw

            amplitude = (a1 * a2) ** 0.1
            dissonance = amplitude * (math.exp(-S1 * x) - math.exp(-S2 * x))
            total += max(dissonance, 0.0)

    return total ** 2
