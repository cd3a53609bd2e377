"""Main entry point for the Hexmap Visualizer."""

import argparse
import signal

from harmonic_hexmap import config as engine_config
from harmonic_hexmap.main import HexmapApp

from . import config
from .renderer import Renderer


def main() -> None:
    """Entry point for the Hexmap Visualizer CLI."""
    parser = argparse.ArgumentParser(
        description="Hexmap Visualizer - Interactive microtonal hex lattice"
    )
    parser.add_argument(
        "--edo",
        type=int,
        default=engine_config.DEFAULT_EDO,
        choices=sorted(engine_config.EDO_PRESETS),
        help=f"EDO preset (default: {engine_config.DEFAULT_EDO})",
    )
    parser.add_argument(
        "--radius",
        type=int,
        default=engine_config.DEFAULT_RADIUS,
        help=f"Lattice radius (default: {engine_config.DEFAULT_RADIUS})",
    )
    parser.add_argument(
        "--midi",
        action="store_true",
        help="Listen for MIDI controllers",
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

    args = parser.parse_args()

    app = HexmapApp(
        mock_osc=args.mock,
        verbose=not args.quiet,
        edo=args.edo,
        radius=args.radius,
    )
    renderer = Renderer(app)

    # Handle signals
    def signal_handler(sig, frame):
        renderer.running = False

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    print("Hexmap Visualizer starting...")
    print("  Click cells to toggle notes, drag to pan, wheel to zoom")
    print("  Space strums, Shift+Space arpeggiates, 1-0 select chord slots")
    print("  Press ESC to quit")

    try:
        app.start(use_midi=args.midi)
        renderer.start()

        # Main loop
        while renderer.running:
            dt = renderer.clock.tick(config.FPS) / 1000.0

            if not renderer.handle_events():
                break

            app.process_midi()
            app.update(dt)
            renderer.render(dt)

    except KeyboardInterrupt:
        pass
    finally:
        renderer.stop()
        app.stop()
        print("Visualizer stopped.")


if __name__ == "__main__":
    main()
