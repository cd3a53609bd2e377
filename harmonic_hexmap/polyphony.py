"""Voice tracking for lattice notes.

Tracks which synth voice plays which lattice cell:
- Held voices come from MIDI keys and last until the key is released.
- Pluck voices come from clicks, strums and arpeggios and are released
  automatically after a fixed duration.
"""

from dataclasses import dataclass
from typing import Optional

from . import config
from .tuning import AxialCoordinate


@dataclass
class HeldNote:
    """A MIDI key holding a lattice cell."""
    channel: int
    midi_note: int
    coord: AxialCoordinate
    voice_id: int
    frequency: float
    # True if this key switched the cell on (and must switch it off)
    activated_cell: bool = True


@dataclass
class PluckVoice:
    """A one-shot note awaiting release."""
    voice_id: int
    frequency: float
    release_at: float


class VoiceTracker:
    """Allocates voice IDs and remembers what each voice is playing."""

    def __init__(self, max_voices: int = config.MAX_VOICES,
                 pluck_duration: float = config.PLUCK_DURATION):
        """Initialize the voice tracker.

        Args:
            max_voices: Size of the cyclic voice ID pool
            pluck_duration: Seconds before a pluck voice is released
        """
        self.max_voices = max_voices
        self.pluck_duration = pluck_duration

        # (channel, note) -> HeldNote
        self._held: dict[tuple[int, int], HeldNote] = {}
        self._plucks: list[PluckVoice] = []
        self._next_voice_id = 0
        self._clock = 0.0

    def _allocate_voice_id(self) -> int:
        voice_id = self._next_voice_id
        self._next_voice_id = (self._next_voice_id + 1) % self.max_voices
        return voice_id

    # =========================================================================
    # Held notes (MIDI)
    # =========================================================================

    def hold(self, channel: int, midi_note: int, coord: AxialCoordinate,
             frequency: float, activated_cell: bool = True) -> HeldNote:
        """Register a held key. A retriggered key keeps its voice ID."""
        key = (channel, midi_note)
        held = self._held.get(key)
        if held is not None:
            held.coord = coord
            held.frequency = frequency
            held.activated_cell = held.activated_cell or activated_cell
            return held

        held = HeldNote(
            channel=channel,
            midi_note=midi_note,
            coord=coord,
            voice_id=self._allocate_voice_id(),
            frequency=frequency,
            activated_cell=activated_cell,
        )
        self._held[key] = held
        return held

    def release(self, channel: int, midi_note: int) -> Optional[HeldNote]:
        """Forget a held key and return what it was holding.

        If the key had switched its cell on and another key still holds
        the same cell, that key inherits the duty to switch it off.
        """
        held = self._held.pop((channel, midi_note), None)
        if held is not None and held.activated_cell:
            for other in self._held.values():
                if other.coord == held.coord:
                    other.activated_cell = True
                    break
        return held

    def held_notes(self) -> list[HeldNote]:
        return list(self._held.values())

    def holds_cell(self, coord: AxialCoordinate) -> bool:
        """Whether any held key is still on a cell."""
        return any(held.coord == coord for held in self._held.values())

    # =========================================================================
    # Plucks
    # =========================================================================

    def pluck(self, frequency: float, delay: float = 0.0) -> PluckVoice:
        """Register a one-shot note starting after delay seconds."""
        voice = PluckVoice(
            voice_id=self._allocate_voice_id(),
            frequency=frequency,
            release_at=self._clock + delay + self.pluck_duration,
        )
        self._plucks.append(voice)
        return voice

    def update(self, dt: float) -> list[PluckVoice]:
        """Advance time and return pluck voices due for release."""
        self._clock += dt
        due = [voice for voice in self._plucks if voice.release_at <= self._clock]
        if due:
            self._plucks = [voice for voice in self._plucks if voice.release_at > self._clock]
        return due

    def clear(self) -> list[int]:
        """Forget every voice. Returns the voice IDs that were sounding."""
        voice_ids = [held.voice_id for held in self._held.values()]
        voice_ids.extend(voice.voice_id for voice in self._plucks)
        self._held.clear()
        self._plucks.clear()
        return voice_ids

    @property
    def active_count(self) -> int:
        """Number of sounding voices."""
        return len(self._held) + len(self._plucks)
