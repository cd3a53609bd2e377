"""Tests for MIDI message handling and the headless app.

No ports are opened: messages are built with mido and fed directly to
the handlers, and OSC goes to a MockOscSender.
"""

import mido
import pytest

from harmonic_hexmap import config
from harmonic_hexmap.main import HexmapApp, cc_to_range
from harmonic_hexmap.midi_handler import MidiHandler
from harmonic_hexmap.osc_sender import MockOscSender
from harmonic_hexmap.tuning import AxialCoordinate


@pytest.fixture
def midi():
    return MidiHandler()


@pytest.fixture
def app():
    osc = MockOscSender(verbose=False)
    osc.open()
    return HexmapApp(verbose=False, radius=4, osc=osc)


def sent(app, kind):
    return [m for m in app.osc.get_log() if m["type"] == kind]


class TestPredicates:
    """Tests for MidiHandler message predicates."""

    def test_note_on(self, midi):
        """Note on needs a non-zero velocity."""
        assert midi.is_note_on(mido.Message("note_on", note=60, velocity=100))
        assert not midi.is_note_on(mido.Message("note_on", note=60, velocity=0))

    def test_note_off(self, midi):
        """Note off includes note on with velocity 0."""
        assert midi.is_note_off(mido.Message("note_off", note=60))
        assert midi.is_note_off(mido.Message("note_on", note=60, velocity=0))

    def test_pitch_bend(self, midi):
        """Pitch wheel messages are bends."""
        assert midi.is_pitch_bend(mido.Message("pitchwheel", pitch=100))

    def test_engine_controls(self, midi):
        """Each engine CC is recognized by its number."""
        cc = lambda n, v=64: mido.Message("control_change", control=n, value=v)
        assert midi.is_complexity_control(cc(config.COMPLEXITY_CC))
        assert midi.is_sensitivity_control(cc(config.SENSITIVITY_CC))
        assert midi.is_bandwidth_control(cc(config.BANDWIDTH_CC))
        assert not midi.is_complexity_control(cc(1))

    def test_clear_slot_needs_press(self, midi):
        """Clear slot fires on press, not release."""
        press = mido.Message("control_change", control=config.CLEAR_SLOT_CC, value=127)
        release = mido.Message("control_change", control=config.CLEAR_SLOT_CC, value=0)
        assert midi.is_clear_slot_control(press)
        assert not midi.is_clear_slot_control(release)

    def test_program_change(self, midi):
        """Program change is recognized."""
        assert midi.is_program_change(mido.Message("program_change", program=3))

    def test_parse_events(self, midi):
        """Events carry note, velocity, control and channel."""
        note = midi.parse_note_event(mido.Message("note_on", note=64, velocity=90, channel=2))
        assert (note.note, note.velocity, note.channel) == (64, 90, 2)
        cc = midi.parse_cc_event(mido.Message("control_change", control=74, value=10, channel=1))
        assert (cc.control, cc.value, cc.channel) == (74, 10, 1)

    def test_channel_bend_tracking(self, midi):
        """Bend is tracked per channel and shifts the note frequency."""
        midi.update_bend(3, 4096)
        assert midi.channel_bend(3) == 4096
        assert midi.channel_bend(4) == 0
        assert midi.note_frequency(3, 60) == pytest.approx(midi.note_frequency(0, 84))

    def test_not_open_by_default(self, midi):
        """A new handler has no open port."""
        assert not midi.is_open
        assert midi.port_name is None


class TestCcMapping:
    """Tests for cc_to_range."""

    def test_endpoints(self):
        """CC 0 and 127 reach both ends of the range."""
        assert cc_to_range(0, 1.0, 20.0) == 1.0
        assert cc_to_range(127, 1.0, 20.0) == pytest.approx(20.0)


class TestHexmapApp:
    """Tests for MIDI to engine to OSC wiring."""

    def test_note_on_activates_nearest_cell(self, app):
        """A key lights the nearest cell and plays its frequency."""
        app.process_message(mido.Message("note_on", note=60, velocity=100))
        active = app.engine.active_cells()
        assert [c.pitch_step for c in active] == [0]

        note_on = sent(app, "note_on")[-1]
        assert note_on["address"] == "/fnote"
        assert note_on["frequency"] == pytest.approx(config.BASE_FREQ)
        assert note_on["velocity"] == pytest.approx(100.0)

    def test_note_on_logs_detune(self, capsys):
        """The verbose log shows how far the key sits from its cell."""
        osc = MockOscSender(verbose=False)
        osc.open()
        app = HexmapApp(verbose=True, radius=4, osc=osc)
        app.process_message(mido.Message("note_on", note=60, velocity=100))
        assert "+0.0¢" in capsys.readouterr().out

    def test_note_off_deactivates(self, app):
        """Releasing the key switches the cell off."""
        app.process_message(mido.Message("note_on", note=60, velocity=100))
        app.process_message(mido.Message("note_off", note=60))
        assert app.engine.active_cells() == []
        assert sent(app, "note_off")

    def test_bent_note_finds_microtonal_cell(self, app):
        """Channel bend of +7 semitones turns C into G."""
        app.process_message(mido.Message("pitchwheel", channel=1, pitch=1195))
        app.process_message(mido.Message("note_on", channel=1, note=60, velocity=80))
        assert [c.pitch_step for c in app.engine.active_cells()] == [7]

    def test_shared_cell_stays_until_last_key(self, app):
        """A cell held by two keys stays on until both are released."""
        app.process_message(mido.Message("note_on", channel=0, note=60, velocity=100))
        app.process_message(mido.Message("note_on", channel=1, note=60, velocity=100))
        app.process_message(mido.Message("note_off", channel=0, note=60))
        assert len(app.engine.active_cells()) == 1
        app.process_message(mido.Message("note_off", channel=1, note=60))
        assert app.engine.active_cells() == []

    def test_key_on_clicked_cell_keeps_it(self, app):
        """A key on a cell that was already on does not switch it off."""
        cell = app.engine.grid.cell_at_step(0)
        app.engine.activate(cell.coord)
        app.process_message(mido.Message("note_on", note=60, velocity=100))
        app.process_message(mido.Message("note_off", note=60))
        assert app.engine.is_active(cell.coord)

    def test_unknown_note_off_ignored(self, app):
        """A note off with no matching key sends nothing."""
        app.process_message(mido.Message("note_off", note=61))
        assert sent(app, "note_off") == []

    def test_complexity_cc(self, app):
        """The complexity CC spans the weight range."""
        app.process_message(mido.Message("control_change", control=config.COMPLEXITY_CC, value=127))
        assert app.engine.complexity_weight == pytest.approx(config.COMPLEXITY_WEIGHT_MAX)
        app.process_message(mido.Message("control_change", control=config.COMPLEXITY_CC, value=0))
        assert app.engine.complexity_weight == pytest.approx(config.COMPLEXITY_WEIGHT_MIN)

    def test_sensitivity_cc(self, app):
        """The sensitivity CC reaches the maximum."""
        app.process_message(mido.Message("control_change", control=config.SENSITIVITY_CC, value=127))
        assert app.engine.sensitivity == config.SENSITIVITY_MAX

    def test_bandwidth_cc(self, app):
        """The bandwidth CC reaches the minimum."""
        app.process_message(mido.Message("control_change", control=config.BANDWIDTH_CC, value=0))
        assert app.engine.filters.bandwidth_scale == pytest.approx(config.BANDWIDTH_MIN)

    def test_program_change_selects_slot(self, app):
        """Program n selects slot n + 1."""
        app.process_message(mido.Message("program_change", program=2))
        assert app.engine.chords.current_slot == 3

    def test_clear_slot_cc(self, app):
        """The clear CC empties the current slot."""
        app.engine.activate(AxialCoordinate(0, 0))
        app.process_message(mido.Message("control_change", control=config.CLEAR_SLOT_CC, value=127))
        assert app.engine.active_cells() == []


class TestPlayback:
    """Tests for plucks, strums and arpeggios."""

    def test_toggle_plucks_when_switched_on(self, app):
        """Clicking plucks only when the cell turns on."""
        coord = AxialCoordinate(0, 0)
        assert app.toggle_cell(coord)
        assert len(sent(app, "note_on")) == 1
        assert not app.toggle_cell(coord)
        assert len(sent(app, "note_on")) == 1

    def test_pluck_released_later(self, app):
        """A pluck is released after its duration."""
        app.toggle_cell(AxialCoordinate(0, 0))
        app.update(config.PLUCK_DURATION)
        assert len(sent(app, "note_off")) == 1

    def test_strum_low_to_high(self, app):
        """A strum plays from the lowest note upward."""
        app.engine.activate(AxialCoordinate(3, 1))
        app.engine.activate(AxialCoordinate(0, 0))
        app.play_chord()
        first = sent(app, "note_on")
        assert len(first) == 1
        assert first[0]["frequency"] == pytest.approx(config.BASE_FREQ)

        app.update(config.STRUM_SPACING)
        notes = sent(app, "note_on")
        assert len(notes) == 2
        assert notes[1]["frequency"] > notes[0]["frequency"]

    def test_stop_drops_pending_strum(self, app):
        """Stopping playback drops strum notes not yet played."""
        app.engine.activate(AxialCoordinate(3, 1))
        app.engine.activate(AxialCoordinate(0, 0))
        app.play_chord()
        app.stop_playback()
        app.update(1.0)
        assert len(sent(app, "note_on")) == 1

    def test_arpeggio(self, app):
        """The arpeggio plays ascending and stops on request."""
        app.engine.activate(AxialCoordinate(3, 1))
        app.engine.activate(AxialCoordinate(0, 0))
        app.start_arpeggio()
        app.update(0.0)
        app.update(config.ARPEGGIO_STEP)
        freqs = [m["frequency"] for m in sent(app, "note_on")]
        assert freqs == sorted(freqs)
        assert len(freqs) == 2

        app.stop_playback()
        assert not app.arpeggiator.active

    def test_stop_releases_everything(self, app):
        """Stopping the app silences every voice."""
        app.toggle_cell(AxialCoordinate(0, 0))
        app.stop()
        assert sent(app, "all_notes_off")
        assert app.voices.active_count == 0
