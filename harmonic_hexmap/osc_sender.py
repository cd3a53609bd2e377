"""Frequency-addressed note output to Surge XT.

Lattice cells sound at their exact EDO frequency, so notes go out as
frequencies over OSC rather than as MIDI note numbers.

Surge XT OSC protocol (v1.3+):
- /fnote frequency velocity [noteID]     - frequency note on
- /fnote/rel frequency velocity [noteID] - frequency note off
- /allnotesoff                           - release all notes
- All numeric values MUST be sent as floats!
"""

from typing import Optional

try:
    from pythonosc import udp_client
    HAS_OSC = True
except ImportError:
    HAS_OSC = False
    udp_client = None  # type: ignore

from . import config

NOTE_ON_ADDRESS = "/fnote"
NOTE_OFF_ADDRESS = "/fnote/rel"
ALL_NOTES_OFF_ADDRESS = "/allnotesoff"


def scale_velocity(velocity: float) -> float:
    """Map a 0..1 velocity to Surge's 0..127 range (larger values pass through)."""
    return velocity * 127.0 if velocity <= 1.0 else velocity


class OscSender:
    """Sends lattice notes to Surge XT over UDP.

    Every outgoing message passes through ``_send``, which receives the
    message kind and its named fields along with the OSC arguments.
    """

    def __init__(
        self,
        host: str = config.OSC_HOST,
        port: int = config.OSC_PORT,
    ):
        """Create an unconnected sender.

        Args:
            host: Synth host address
            port: Synth OSC input port
        """
        if not HAS_OSC:
            raise ImportError(
                "python-osc is required to send notes to the synth. "
                "Install with: pip install python-osc"
            )

        self.host = host
        self.port = port
        self._client: Optional[udp_client.SimpleUDPClient] = None

    def open(self) -> None:
        self._client = udp_client.SimpleUDPClient(self.host, self.port)

    def close(self) -> None:
        self._client = None

    @property
    def is_open(self) -> bool:
        return self._client is not None

    def _send(self, kind: str, address: str, args: list[float], **fields) -> None:
        if self._client is None:
            return
        self._client.send_message(address, args)

    def send_note_on(self, voice_id: int, frequency: float, velocity: float) -> None:
        """Start a note at an exact frequency.

        Args:
            voice_id: Voice slot, sent as noteID so the release finds it
            frequency: Pitch in Hz
            velocity: 0.0-1.0 (scaled to 0-127) or already 0-127
        """
        velocity = scale_velocity(velocity)
        self._send(
            "note_on", NOTE_ON_ADDRESS,
            [float(frequency), float(velocity), float(voice_id)],
            voice_id=voice_id, frequency=frequency, velocity=velocity,
        )

    def send_note_off(self, voice_id: int, frequency: float = 0.0,
                      release_velocity: float = 0.0) -> None:
        """Release a voice. Surge matches on noteID and ignores the frequency."""
        self._send(
            "note_off", NOTE_OFF_ADDRESS,
            [float(frequency), float(release_velocity), float(voice_id)],
            voice_id=voice_id, frequency=frequency, release_velocity=release_velocity,
        )

    def send_all_notes_off(self) -> None:
        self._send("all_notes_off", ALL_NOTES_OFF_ADDRESS, [])

    def __enter__(self) -> "OscSender":
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


class MockOscSender(OscSender):
    """Records outgoing notes instead of sending them.

    Used by ``--mock`` and by the tests; python-osc is not needed.
    """

    def __init__(self, host: str = config.OSC_HOST, port: int = config.OSC_PORT,
                 verbose: bool = True):
        self.host = host
        self.port = port
        self.verbose = verbose
        self._client = None
        self._message_log: list[dict] = []

    def open(self) -> None:
        self._client = "mock"  # type: ignore
        if self.verbose:
            print(f"[MockOSC] Would send to {self.host}:{self.port}")

    def close(self) -> None:
        self._client = None
        if self.verbose:
            print("[MockOSC] Closed")

    def _send(self, kind: str, address: str, args: list[float], **fields) -> None:
        self._message_log.append({"type": kind, "address": address, **fields})
        if self.verbose:
            shown = " ".join(f"{a:.2f}" for a in args)
            print(f"[MockOSC] {address} {shown}".rstrip())

    def get_log(self) -> list[dict]:
        """Copy of every message recorded so far."""
        return list(self._message_log)

    def clear_log(self) -> None:
        self._message_log.clear()
