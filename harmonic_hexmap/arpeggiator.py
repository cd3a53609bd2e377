"""Chord strumming and arpeggio scheduling.

Turns the sounding cells into timed note triggers. Nothing here produces
sound: callers send the returned frequencies to the synth.
"""

from . import config


def strum(frequencies: list[float], spacing: float = config.STRUM_SPACING) -> list[tuple[float, float]]:
    """Schedule a strummed chord.

    Args:
        frequencies: Chord frequencies in play order
        spacing: Delay between consecutive notes in seconds

    Returns:
        List of (offset_seconds, frequency)
    """
    return [(i * spacing, freq) for i, freq in enumerate(frequencies)]


class Arpeggiator:
    """Loops ascending arpeggios over the current chord.

    Each pass re-reads the chord, so notes added or removed while the
    arpeggio runs are picked up on the next pass.
    """

    def __init__(self, step_time: float = config.ARPEGGIO_STEP):
        """Initialize the arpeggiator.

        Args:
            step_time: Time between notes in seconds
        """
        if step_time <= 0:
            raise ValueError(f"Step time must be positive, got {step_time}")
        self.step_time = step_time
        self.active = False
        self._pass: list[float] = []
        self._index = 0
        self._clock = 0.0

    def start(self) -> None:
        """Start looping. Has no effect if already running."""
        if self.active:
            return
        self.active = True
        self._pass = []
        self._index = 0
        self._clock = 0.0

    def stop(self) -> None:
        self.active = False
        self._pass = []
        self._index = 0
        self._clock = 0.0

    def update(self, dt: float, frequencies: list[float]) -> list[float]:
        """Advance time and return the notes due in this tick.

        Args:
            dt: Time delta in seconds
            frequencies: Current chord frequencies (any order)

        Returns:
            Frequencies to trigger now, in order. The arpeggiator stops
            itself when a new pass starts with an empty chord.
        """
        if not self.active:
            return []

        due = []
        self._clock += dt
        while self.active and self._clock >= 0.0:
            if self._index >= len(self._pass):
                self._pass = sorted(frequencies)
                self._index = 0
                if not self._pass:
                    self.stop()
                    break
            due.append(self._pass[self._index])
            self._index += 1
            self._clock -= self.step_time
        return due

    @property
    def pass_duration(self) -> float:
        """Length of the current pass in seconds."""
        return len(self._pass) * self.step_time
