"""MPE keyboard input via mido and python-rtmidi.

MPE controllers put every held key on its own channel and express the
microtonal offset as that channel's pitch bend. The handler remembers the
latest bend per channel so a note-on can be turned into an exact
frequency and matched against the lattice.
"""

from dataclasses import dataclass
from typing import Optional

import mido

from . import config
from .harmonics import note_frequency

VIRTUAL_PORT_NAME = "Harmonic Hexmap Input"

# Loopback ports that would echo our own output back in
IGNORED_PORTS = ("midi through", "rtmidi")


@dataclass
class NoteEvent:
    note: int
    velocity: int
    channel: int


@dataclass
class CCEvent:
    control: int
    value: int
    channel: int


class MidiHandler:
    """Collects messages from every matching input port."""

    def __init__(
        self,
        port_pattern: Optional[str] = config.MIDI_PORT_PATTERN,
        bend_range: float = config.PITCH_BEND_RANGE,
        debug: bool = False,
    ):
        """Create a handler with no ports open yet.

        Args:
            port_pattern: Case-insensitive substring a port name must
                contain, or None to accept every port
            bend_range: Semitones at full pitch wheel deflection (48 for MPE)
            debug: Print every received message
        """
        self.port_pattern = port_pattern
        self.bend_range = bend_range
        self.debug = debug
        self._ports: list[mido.ports.BaseInput] = []
        self._port_names: list[str] = []
        self._channel_bends: dict[int, int] = {}

    def _wanted(self, name: str) -> bool:
        lower_name = name.lower()
        if any(ignored in lower_name for ignored in IGNORED_PORTS):
            return False
        return not self.port_pattern or self.port_pattern.lower() in lower_name

    def open(self) -> str:
        """Open every wanted input port, or a virtual one if none opens.

        Returns:
            The opened port names, comma separated

        Raises:
            RuntimeError: If not even the virtual port can be created
        """
        self.close()

        for name in filter(self._wanted, mido.get_input_names()):
            try:
                self._ports.append(mido.open_input(name))
            except (OSError, IOError) as e:
                print(f"[MIDI] Skipping '{name}': {e}")
                continue
            self._port_names.append(name)

        if not self._ports:
            if self.port_pattern:
                print(f"[MIDI] Nothing matches '{self.port_pattern}'")
            print(f"[MIDI] Creating virtual port '{VIRTUAL_PORT_NAME}'...")
            try:
                self._ports.append(mido.open_input(VIRTUAL_PORT_NAME, virtual=True))
            except (OSError, IOError, NotImplementedError) as e:
                raise RuntimeError(f"No MIDI input available: {e}") from e
            self._port_names.append(f"{VIRTUAL_PORT_NAME} (Virtual)")

        return ", ".join(self._port_names)

    def close(self) -> None:
        for port in self._ports:
            port.close()
        self._ports = []
        self._port_names = []

    def poll(self) -> list[mido.Message]:
        """Drain pending messages from all ports without blocking."""
        messages = [msg for port in self._ports for msg in port.iter_pending()]
        if self.debug:
            for msg in messages:
                print(f"[MIDI IN] {msg}")
        return messages

    # =========================================================================
    # Pitch bend
    # =========================================================================

    def update_bend(self, channel: int, pitch: int) -> None:
        self._channel_bends[channel] = pitch

    def channel_bend(self, channel: int) -> int:
        """Last pitch wheel value seen on a channel (0 = center)."""
        return self._channel_bends.get(channel, 0)

    def note_frequency(self, channel: int, note: int) -> float:
        """Sounding frequency of a key, bend included."""
        return note_frequency(note, self.channel_bend(channel), self.bend_range)

    # =========================================================================
    # Message predicates
    # =========================================================================

    def is_note_on(self, msg: mido.Message) -> bool:
        return msg.type == "note_on" and msg.velocity > 0

    def is_note_off(self, msg: mido.Message) -> bool:
        """True for note_off, and for note_on with velocity 0 (running status)."""
        if msg.type == "note_off":
            return True
        return msg.type == "note_on" and msg.velocity == 0

    def is_pitch_bend(self, msg: mido.Message) -> bool:
        return msg.type == "pitchwheel"

    def is_program_change(self, msg: mido.Message) -> bool:
        return msg.type == "program_change"

    @staticmethod
    def _is_cc(msg: mido.Message, control: int) -> bool:
        return msg.type == "control_change" and msg.control == control

    def is_complexity_control(self, msg: mido.Message) -> bool:
        return self._is_cc(msg, config.COMPLEXITY_CC)

    def is_sensitivity_control(self, msg: mido.Message) -> bool:
        return self._is_cc(msg, config.SENSITIVITY_CC)

    def is_bandwidth_control(self, msg: mido.Message) -> bool:
        return self._is_cc(msg, config.BANDWIDTH_CC)

    def is_clear_slot_control(self, msg: mido.Message) -> bool:
        """Clear-slot button, pressed half (value >= 64) only."""
        return self._is_cc(msg, config.CLEAR_SLOT_CC) and msg.value >= 64

    def parse_note_event(self, msg: mido.Message) -> NoteEvent:
        return NoteEvent(note=msg.note, velocity=msg.velocity, channel=msg.channel)

    def parse_cc_event(self, msg: mido.Message) -> CCEvent:
        return CCEvent(control=msg.control, value=msg.value, channel=msg.channel)

    @property
    def port_name(self) -> Optional[str]:
        return ", ".join(self._port_names) or None

    @property
    def is_open(self) -> bool:
        return bool(self._ports)

    @staticmethod
    def list_ports() -> list[str]:
        return mido.get_input_names()

    def __enter__(self) -> "MidiHandler":
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
