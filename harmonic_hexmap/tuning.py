"""Hex lattice geometry and EDO tuning configurations.

Maps axial lattice coordinates to pitch steps, note indices and
frequencies for a given equal division of the octave.
"""

from dataclasses import dataclass

from . import config


@dataclass(frozen=True, order=True)
class AxialCoordinate:
    """A lattice cell position in axial coordinates (s = -q - r)."""
    q: int
    r: int

    @property
    def s(self) -> int:
        return -self.q - self.r

    def __str__(self) -> str:
        return f"{self.q},{self.r}"


@dataclass(frozen=True)
class TuningConfig:
    """An EDO tuning mapped onto the lattice.

    Attributes:
        name: Display name (e.g. "31 TET")
        edo: Steps per octave
        q_step: Pitch steps gained per unit move along q
        r_step: Pitch steps gained per unit move along r
        white_keys: Note indices forming the diatonic-like reference set
    """
    name: str
    edo: int
    q_step: int
    r_step: int
    white_keys: frozenset = frozenset()

    def __post_init__(self):
        if self.edo <= 0:
            raise ValueError(f"EDO divisions must be positive, got {self.edo}")
        # Accept any iterable for white keys
        object.__setattr__(self, "white_keys", frozenset(self.white_keys))
        for key in self.white_keys:
            if not 0 <= key < self.edo:
                raise ValueError(
                    f"White key {key} outside [0, {self.edo}) for {self.name}"
                )

    def is_white_key(self, note_index: int) -> bool:
        return note_index in self.white_keys


def pitch_step(q: int, r: int, tuning: TuningConfig) -> int:
    """Linear pitch step of a lattice position (unbounded, signed)."""
    return q * tuning.q_step + r * tuning.r_step


def note_index(q: int, r: int, tuning: TuningConfig) -> int:
    """Pitch class of a lattice position, always in [0, edo)."""
    return pitch_step(q, r, tuning) % tuning.edo


def frequency_for_step(steps: int, edo: int, base_freq: float = config.BASE_FREQ) -> float:
    """Frequency in Hz of a pitch step above base_freq."""
    return base_freq * (2.0 ** (steps / edo))


def step_cents(steps: int, edo: int) -> float:
    """Size of a pitch-step interval in cents."""
    return 1200.0 * steps / edo


def _build_presets() -> dict[int, TuningConfig]:
    return {
        edo: TuningConfig(
            name=name,
            edo=edo,
            q_step=q_step,
            r_step=r_step,
            white_keys=frozenset(white_keys),
        )
        for edo, (name, q_step, r_step, white_keys) in config.EDO_PRESETS.items()
    }


TUNING_PRESETS: dict[int, TuningConfig] = _build_presets()


def get_preset(edo: int, presets: dict[int, TuningConfig] = TUNING_PRESETS) -> TuningConfig:
    """Look up a tuning preset by its EDO divisions."""
    try:
        return presets[int(edo)]
    except KeyError:
        available = ", ".join(str(e) for e in sorted(presets))
        raise ValueError(f"No tuning preset for {edo}-EDO (available: {available})") from None
