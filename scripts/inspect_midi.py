"""Print incoming MIDI with the lattice cell each note lands on.

Useful for checking an MPE controller's bend range: a correctly
configured keyboard plays C4 with no bend onto the root cell.
"""

import argparse
import time

from harmonic_hexmap import config
from harmonic_hexmap.grid import HexGrid
from harmonic_hexmap.midi_handler import MidiHandler
from harmonic_hexmap.tuning import get_preset


def describe_note(handler, grid, msg):
    freq = handler.note_frequency(msg.channel, msg.note)
    cell = grid.closest_to_frequency(freq)
    bend = handler.channel_bend(msg.channel)
    return (f"ch{msg.channel:<2d} note {msg.note:3d} bend {bend:+6d} "
            f"= {freq:8.2f} Hz -> cell ({cell.coord.q}, {cell.coord.r}) "
            f"step {cell.pitch_step} at {cell.frequency_hz:.2f} Hz")


def inspect_midi(port_filter=None, edo=config.DEFAULT_EDO, bend_range=config.PITCH_BEND_RANGE):
    print("MIDI inputs:")
    for name in MidiHandler.list_ports():
        print(f"  - {name}")

    grid = HexGrid(get_preset(edo))
    grid.generate(config.DEFAULT_RADIUS)

    with MidiHandler(port_filter, bend_range=bend_range) as handler:
        print(f"\nListening on {handler.port_name} ({grid.tuning.name}, "
              f"bend range ±{bend_range} semitones). Ctrl+C to stop.")
        try:
            while True:
                for msg in handler.poll():
                    if handler.is_pitch_bend(msg):
                        handler.update_bend(msg.channel, msg.pitch)
                    elif handler.is_note_on(msg):
                        print(describe_note(handler, grid, msg))
                        continue
                    print(f"  {msg}")
                time.sleep(config.MIDI_POLL_INTERVAL)
        except KeyboardInterrupt:
            print()

if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--filter", help="Only open ports containing this text")
    parser.add_argument("--edo", type=int, default=config.DEFAULT_EDO,
                        choices=sorted(config.EDO_PRESETS))
    parser.add_argument("--bend-range", type=float, default=config.PITCH_BEND_RANGE)
    args = parser.parse_args()
    inspect_midi(args.filter, args.edo, args.bend_range)
