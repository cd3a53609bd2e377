"""Main entry point for Harmonic Hexmap.

Runs the harmonic engine headless: MIDI controllers play lattice cells,
cells sound through Surge XT over OSC, and CCs steer the analysis.
"""

import argparse
import signal
import time
from typing import Optional

import mido

from . import config
from .arpeggiator import Arpeggiator, strum
from .engine import HarmonicEngine, RecomputeCompleted
from .harmonics import cents_difference
from .heatmap import HeatmapFilters
from .midi_handler import MidiHandler
from .osc_sender import MockOscSender, OscSender
from .polyphony import PluckVoice, VoiceTracker
from .tuning import AxialCoordinate


def cc_to_range(value: int, low: float, high: float) -> float:
    """Map a CC value (0-127) linearly onto [low, high]."""
    return low + (value / 127.0) * (high - low)


class HexmapApp:
    """Coordinates MIDI input, the harmonic engine and OSC output."""

    def __init__(
        self,
        mock_osc: bool = False,
        verbose: bool = True,
        edo: int = config.DEFAULT_EDO,
        radius: int = config.DEFAULT_RADIUS,
        complexity_weight: float = config.DEFAULT_COMPLEXITY_WEIGHT,
        sensitivity: float = config.DEFAULT_SENSITIVITY,
        bandwidth: float = config.DEFAULT_BANDWIDTH,
        port_pattern: Optional[str] = config.MIDI_PORT_PATTERN,
        osc: Optional[OscSender] = None,
    ):
        """Initialize the app.

        Args:
            mock_osc: If True, use MockOscSender instead of real OSC
            verbose: If True, print status messages
            edo: Initial EDO preset
            radius: Lattice radius
            complexity_weight: Initial rational approximator weight
            sensitivity: Initial sensitivity (gain = sensitivity / 10)
            bandwidth: Initial critical bandwidth scale
            port_pattern: MIDI port name filter
            osc: Explicit sender (overrides mock_osc)
        """
        self.verbose = verbose
        self.running = False
        self._midi_enabled = False

        self.engine = HarmonicEngine(
            edo=edo,
            radius=radius,
            complexity_weight=complexity_weight,
            sensitivity=sensitivity,
            filters=HeatmapFilters(bandwidth_scale=bandwidth),
        )
        self.midi = MidiHandler(port_pattern=port_pattern)
        if osc is not None:
            self.osc = osc
        else:
            self.osc = MockOscSender(verbose=verbose) if mock_osc else OscSender()
        self.voices = VoiceTracker()
        self.arpeggiator = Arpeggiator()

        # Strummed notes waiting for their start time: (due_time, voice)
        self._scheduled: list[tuple[float, PluckVoice]] = []
        self._clock = 0.0
        self._last_update_time = time.time()

        self.engine.subscribe(self._on_recompute)

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def start(self, use_midi: bool = True) -> None:
        """Open MIDI and OSC connections."""
        if use_midi:
            port_name = self.midi.open()
            self._midi_enabled = True
            if self.verbose:
                print(f"✓ MIDI: Connected to '{port_name}'")

        self.osc.open()
        if self.verbose:
            tuning = self.engine.tuning
            print(f"✓ OSC: Targeting {self.osc.host}:{self.osc.port}")
            print(f"✓ Tuning: {tuning.name} ({len(self.engine.grid)} cells)")
            print("\n🎵 Harmonic Hexmap is active! Press Ctrl+C to stop.\n")

        self.running = True

    def stop(self) -> None:
        """Release all notes and close connections."""
        self.running = False
        self.stop_playback()
        self.osc.send_all_notes_off()
        self.voices.clear()

        if self._midi_enabled:
            self.midi.close()
            self._midi_enabled = False
        self.osc.close()

        if self.verbose:
            print("\n✓ Harmonic Hexmap has stopped.")

    def _on_recompute(self, event: RecomputeCompleted) -> None:
        if self.verbose and event.lut_rebuilt:
            print(f"[Engine] LUT rebuilt ({event.reason}), {len(self.engine.lut)} entries")

    # =========================================================================
    # MIDI handlers
    # =========================================================================

    def _handle_note_on(self, channel: int, note: int, velocity: int) -> None:
        """Activate the cell nearest to the key's exact frequency and play it."""
        frequency = self.midi.note_frequency(channel, note)
        cell = self.engine.closest_cell(frequency)
        if cell is None:
            return

        previous = self.voices.release(channel, note)
        if previous is not None:
            self.osc.send_note_off(previous.voice_id, frequency=previous.frequency)

        activated = self.engine.activate(cell.coord)
        if previous is not None and previous.coord == cell.coord:
            activated = activated or previous.activated_cell
        held = self.voices.hold(channel, note, cell.coord, cell.frequency_hz, activated)
        self.osc.send_note_on(held.voice_id, cell.frequency_hz, velocity / 127.0)

        if self.verbose:
            detune = cents_difference(frequency, cell.frequency_hz)
            print(f"♪ Note ON: ch{channel} MIDI {note} ({frequency:.2f} Hz) → {cell.coord} "
                  f"step {cell.pitch_step} ({cell.frequency_hz:.2f} Hz, {detune:+.1f}¢)")

    def _handle_note_off(self, channel: int, note: int) -> None:
        """Release the key's voice and switch its cell off if it turned it on."""
        held = self.voices.release(channel, note)
        if held is None:
            return

        self.osc.send_note_off(held.voice_id, frequency=held.frequency)
        if held.activated_cell and not self.voices.holds_cell(held.coord):
            self.engine.deactivate(held.coord)

        if self.verbose:
            print(f"♫ Note OFF: ch{channel} MIDI {note}")

    def _handle_pitch_bend(self, channel: int, pitch: int) -> None:
        self.midi.update_bend(channel, pitch)

    def _handle_complexity_change(self, cc_value: int) -> None:
        weight = cc_to_range(cc_value, config.COMPLEXITY_WEIGHT_MIN, config.COMPLEXITY_WEIGHT_MAX)
        self.engine.set_complexity_weight(weight)
        if self.verbose:
            print(f"🎚️ Complexity weight: {self.engine.complexity_weight:.1f}")

    def _handle_sensitivity_change(self, cc_value: int) -> None:
        value = round(cc_to_range(cc_value, config.SENSITIVITY_MIN, config.SENSITIVITY_MAX))
        self.engine.set_sensitivity(value)
        if self.verbose:
            print(f"🎚️ Sensitivity: {self.engine.sensitivity}")

    def _handle_bandwidth_change(self, cc_value: int) -> None:
        scale = cc_to_range(cc_value, config.BANDWIDTH_MIN, config.BANDWIDTH_MAX)
        self.engine.set_bandwidth(scale)
        if self.verbose:
            print(f"🌊 Bandwidth: {scale:.2f}")

    def _handle_program_change(self, program: int) -> None:
        slot = program % self.engine.chords.slot_count + 1
        if self.engine.select_slot(slot) and self.verbose:
            print(f"🎹 Chord slot {slot}")

    def _handle_clear_slot(self) -> None:
        self.engine.clear_slot()
        if self.verbose:
            print(f"✗ Cleared chord slot {self.engine.chords.current_slot}")

    def process_message(self, msg: mido.Message) -> None:
        """Dispatch one MIDI message."""
        if self.midi.is_note_on(msg):
            self._handle_note_on(msg.channel, msg.note, msg.velocity)

        elif self.midi.is_note_off(msg):
            self._handle_note_off(msg.channel, msg.note)

        elif self.midi.is_pitch_bend(msg):
            self._handle_pitch_bend(msg.channel, msg.pitch)

        elif self.midi.is_complexity_control(msg):
            self._handle_complexity_change(msg.value)

        elif self.midi.is_sensitivity_control(msg):
            self._handle_sensitivity_change(msg.value)

        elif self.midi.is_bandwidth_control(msg):
            self._handle_bandwidth_change(msg.value)

        elif self.midi.is_clear_slot_control(msg):
            self._handle_clear_slot()

        elif self.midi.is_program_change(msg):
            self._handle_program_change(msg.program)

    def process_midi(self) -> None:
        """Handle all pending MIDI input."""
        if not self._midi_enabled:
            return
        for msg in self.midi.poll():
            self.process_message(msg)

    # =========================================================================
    # Playback
    # =========================================================================

    def chord_frequencies(self) -> list[float]:
        """Frequencies of the current chord, lowest first."""
        return sorted(cell.frequency_hz for cell in self.engine.active_cells())

    def pluck(self, frequency: float, delay: float = 0.0,
              velocity: float = config.PLUCK_VELOCITY) -> PluckVoice:
        """Play a one-shot note, now or after delay seconds."""
        voice = self.voices.pluck(frequency, delay)
        if delay <= 0:
            self.osc.send_note_on(voice.voice_id, frequency, velocity)
        else:
            self._scheduled.append((self._clock + delay, voice))
        return voice

    def toggle_cell(self, coord: AxialCoordinate) -> bool:
        """Toggle a cell in the current slot, plucking it when switched on.

        Returns:
            True if the cell is now active
        """
        if not self.engine.toggle_cell(coord):
            return False
        active = self.engine.is_active(coord)
        if active:
            self.pluck(self.engine.frequency_of(coord))
        return active

    def play_chord(self) -> None:
        """Strum the current chord from low to high."""
        for offset, frequency in strum(self.chord_frequencies()):
            self.pluck(frequency, offset)

    def start_arpeggio(self) -> None:
        self.arpeggiator.start()

    def stop_playback(self) -> None:
        """Stop the arpeggio and drop strum notes not yet started."""
        self.arpeggiator.stop()
        self._scheduled.clear()

    def update(self, dt: float) -> None:
        """Advance playback timers by dt seconds."""
        self._clock += dt

        due = [voice for due_at, voice in self._scheduled if due_at <= self._clock]
        if due:
            self._scheduled = [(t, v) for t, v in self._scheduled if t > self._clock]
            for voice in due:
                self.osc.send_note_on(voice.voice_id, voice.frequency, config.PLUCK_VELOCITY)

        for voice in self.voices.update(dt):
            self.osc.send_note_off(voice.voice_id, frequency=voice.frequency)

        if self.arpeggiator.active:
            for frequency in self.arpeggiator.update(dt, self.chord_frequencies()):
                self.pluck(frequency)

    def run(self) -> None:
        """Run the main event loop."""
        self.start()
        self._last_update_time = time.time()

        try:
            while self.running:
                current_time = time.time()
                dt = current_time - self._last_update_time
                self._last_update_time = current_time

                self.process_midi()
                self.update(dt)

                # Sleep to avoid busy-waiting
                time.sleep(config.MIDI_POLL_INTERVAL)

        except KeyboardInterrupt:
            pass
        finally:
            self.stop()


def main() -> None:
    """Entry point for the Harmonic Hexmap CLI."""
    parser = argparse.ArgumentParser(
        description="Harmonic Hexmap - Microtonal lattice with harmonic analysis"
    )
    parser.add_argument(
        "--mock",
        action="store_true",
        help="Use mock OSC sender (for testing without Surge XT)",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Reduce output verbosity",
    )
    parser.add_argument(
        "--list-ports",
        action="store_true",
        help="List available MIDI input ports and exit",
    )
    parser.add_argument(
        "--edo",
        type=int,
        default=config.DEFAULT_EDO,
        choices=sorted(config.EDO_PRESETS),
        help=f"EDO preset (default: {config.DEFAULT_EDO})",
    )
    parser.add_argument(
        "--radius",
        type=int,
        default=config.DEFAULT_RADIUS,
        help=f"Lattice radius (default: {config.DEFAULT_RADIUS})",
    )
    parser.add_argument(
        "--complexity",
        type=float,
        default=config.DEFAULT_COMPLEXITY_WEIGHT,
        help=f"Complexity weight (default: {config.DEFAULT_COMPLEXITY_WEIGHT})",
    )
    parser.add_argument(
        "--sensitivity",
        type=int,
        default=config.DEFAULT_SENSITIVITY,
        help=f"Heatmap sensitivity (default: {config.DEFAULT_SENSITIVITY})",
    )
    parser.add_argument(
        "--bandwidth",
        type=float,
        default=config.DEFAULT_BANDWIDTH,
        help=f"Critical bandwidth scale (default: {config.DEFAULT_BANDWIDTH})",
    )
    parser.add_argument(
        "--dump-lut",
        action="store_true",
        help="Print the harmonic lookup table and exit",
    )

    args = parser.parse_args()

    # List ports mode
    if args.list_ports:
        ports = MidiHandler.list_ports()
        print("Available MIDI input ports:")
        for i, port in enumerate(ports):
            print(f"  [{i}] {port}")
        if not ports:
            print("  (none)")
        return

    app = HexmapApp(
        mock_osc=args.mock,
        verbose=not args.quiet,
        edo=args.edo,
        radius=args.radius,
        complexity_weight=args.complexity,
        sensitivity=args.sensitivity,
        bandwidth=args.bandwidth,
    )

    if args.dump_lut:
        print(app.engine.lut.dump())
        return

    # Handle signals gracefully
    def signal_handler(sig, frame):
        app.running = False

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    app.run()


if __name__ == "__main__":
    main()
