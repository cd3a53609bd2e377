"""Pitch conversions shared by the MIDI and OSC adapters."""

import math

# Reference for MIDI note to frequency conversion
MIDI_A4 = 69
FREQ_A4 = 440.0


def midi_to_frequency(midi_note: float) -> float:
    """Convert a (fractional) MIDI note number to frequency in Hz.

    Args:
        midi_note: MIDI note number (can be fractional for microtones)

    Returns:
        Frequency in Hz
    """
    return FREQ_A4 * (2.0 ** ((midi_note - MIDI_A4) / 12.0))


def cents_difference(freq1: float, freq2: float) -> float:
    """Calculate the difference between two frequencies in cents.

    Args:
        freq1: First frequency in Hz
        freq2: Second frequency in Hz

    Returns:
        Difference in cents (positive when freq2 is higher)
    """
    if freq1 <= 0 or freq2 <= 0:
        raise ValueError("Frequencies must be positive")
    return 1200.0 * math.log2(freq2 / freq1)


def bend_to_semitones(pitch: int, bend_range: float = 48.0) -> float:
    """Convert a mido pitchwheel value to a semitone offset.

    Args:
        pitch: Pitch wheel value (-8192 to 8191, 0 = center)
        bend_range: Semitones reached at full deflection

    Returns:
        Offset in semitones
    """
    return (pitch / 8192.0) * bend_range


def note_frequency(midi_note: int, pitch: int = 0, bend_range: float = 48.0) -> float:
    """Frequency of a MIDI note played with a per-channel pitch bend.

    This is how MPE controllers express microtonal pitches: the note
    number gives the nearest semitone and the channel bend the rest.
    """
    return midi_to_frequency(midi_note + bend_to_semitones(pitch, bend_range))
