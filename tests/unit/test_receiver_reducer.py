# pylint: disable=missing-module-docstring,missing-function-docstring

import numpy as np
import pytest

from adapters.audio.loopback import simulate_frames
from audio.frames import SpectrumSnapshot
from codec.symbols import TextSymbol, encode_text, level_to_sample, sample_to_level
from constants import (
    ANALYSIS_BIN_COUNT,
    ANALYSIS_SAMPLE_RATE_HZ,
    END_SIGNATURE_HZ,
    NOISE_FLOOR,
    START_SIGNATURE_HZ,
    VOICE_MARKER_HZ,
    frequency_to_bin,
)
from protocol.enums.mode import Mode
from protocol.framing import plan_text, plan_voice
from protocol.signatures import SignatureName
from receiver.enums.phase import Phase
from receiver.notifications import (
    MessageComplete,
    ModeChanged,
    Notification,
    SignatureDetected,
    SymbolDecoded,
)
from receiver.reducer import flush, reduce_frame
from receiver.settings import DecoderSettings
from receiver.state_dataclass import ReceiverState


SETTINGS = DecoderSettings()


# ---------------------------------------------------------------------
# Frame helpers
# ---------------------------------------------------------------------

def tone_frame(freq_hz: float, level: int = 200) -> SpectrumSnapshot:
    mags = np.zeros(ANALYSIS_BIN_COUNT, dtype=np.uint8)
    mags[frequency_to_bin(freq_hz, sample_rate_hz=ANALYSIS_SAMPLE_RATE_HZ,
                          bin_count=ANALYSIS_BIN_COUNT)] = level
    return SpectrumSnapshot(magnitudes=mags)


def silent_frame() -> SpectrumSnapshot:
    return SpectrumSnapshot(magnitudes=np.zeros(ANALYSIS_BIN_COUNT, dtype=np.uint8))


def tones(*freqs: float) -> list[SpectrumSnapshot]:
    """Each tone: two loud frames followed by one silent frame."""
    out: list[SpectrumSnapshot] = []
    for f in freqs:
        out += [tone_frame(f), tone_frame(f), silent_frame()]
    return out


def run(frames, state=None, settings=SETTINGS):
    state = state or ReceiverState.fresh(
        require_start_signature=settings.require_start_signature,
    )
    notes: list[Notification] = []
    for frame in frames:
        state, emitted = reduce_frame(state, frame, settings)
        notes.extend(emitted)
    return state, notes


def of_type(notes, cls):
    return [n for n in notes if isinstance(n, cls)]


def receiving_text_state() -> ReceiverState:
    state, _ = run(tones(*START_SIGNATURE_HZ))
    assert state.phase is Phase.RECEIVING
    return state


# ---------------------------------------------------------------------
# Noise / segmentation
# ---------------------------------------------------------------------

def test_frame_below_noise_floor_is_ignored():
    state = receiving_text_state()
    quiet = tone_frame(encode_text("A"), level=NOISE_FLOOR - 1)

    new_state, notes = reduce_frame(state, quiet, SETTINGS)

    assert notes == ()
    assert new_state.symbols == ()
    assert new_state.mode is Mode.TEXT


def test_repeated_frames_of_one_tone_decode_once():
    state = receiving_text_state()
    frames = [tone_frame(encode_text("A"))] * 6

    state, notes = run(frames, state)

    assert len(of_type(notes, SymbolDecoded)) == 1
    assert state.symbols == (TextSymbol(65),)


def test_silence_separates_repeated_characters():
    state = receiving_text_state()
    state, _ = run(tones(encode_text("l"), encode_text("l")), state)
    assert [s.char for s in state.symbols] == ["l", "l"]


def test_magnitude_dip_and_rise_on_one_symbol_is_a_repeat():
    # Back-to-back "ll" with no silence between: the shared boundary dips
    state = receiving_text_state()
    frames = [tone_frame(encode_text("l"), level) for level in (250, 230, 200, 190, 240, 250, 220)]

    state, notes = run(frames, state)

    assert [s.char for s in state.symbols] == ["l", "l"]
    assert len(of_type(notes, SymbolDecoded)) == 2


@pytest.mark.parametrize("levels", [
    (250, 220, 190, 160, 130, 100, 70),
    (250, 235, 250, 235, 250),
])
def test_decay_or_shallow_wobble_is_one_tone(levels):
    state = receiving_text_state()
    state, _ = run([tone_frame(encode_text("l"), level) for level in levels], state)
    assert [s.char for s in state.symbols] == ["l"]


def test_hold_frames_debounces_single_frame_glitches():
    settings = DecoderSettings(hold_frames=2)
    state, _ = run(tones(*START_SIGNATURE_HZ), settings=settings)

    glitch = [tone_frame(encode_text("Z")), silent_frame()]
    state, notes = run(glitch + tones(encode_text("k")), state, settings)

    assert [s.char for s in state.symbols] == ["k"]
    assert len(of_type(notes, SymbolDecoded)) == 1


# ---------------------------------------------------------------------
# Framing
# ---------------------------------------------------------------------

def test_idle_ignores_data_tones():
    state, notes = run(tones(encode_text("H"), encode_text("i")))

    assert state.phase is Phase.IDLE
    assert state.symbols == ()
    assert of_type(notes, SymbolDecoded) == []


def test_start_signature_opens_text_frame():
    state, notes = run(tones(*START_SIGNATURE_HZ))

    assert state.phase is Phase.RECEIVING
    assert state.mode is Mode.TEXT
    assert [n.name for n in of_type(notes, SignatureDetected)] == [SignatureName.START]
    assert of_type(notes, SymbolDecoded) == []


def test_end_signature_completes_message():
    frames = tones(*START_SIGNATURE_HZ, encode_text("o"), encode_text("k"), *END_SIGNATURE_HZ)
    state, notes = run(frames)

    done = of_type(notes, MessageComplete)
    assert len(done) == 1
    assert done[0].message.text == "ok"
    assert done[0].message.terminated is True
    assert state.phase is Phase.IDLE
    assert state.symbols == ()
    assert state.messages_completed == 1


def test_paren_before_end_is_not_swallowed():
    # '(' shares 3000 Hz with END's first tone
    frames = tones(*START_SIGNATURE_HZ, encode_text("("), *END_SIGNATURE_HZ)
    _, notes = run(frames)

    assert [m.message.text for m in of_type(notes, MessageComplete)] == ["("]


def test_signature_tones_never_decode_as_text():
    frames = tones(*START_SIGNATURE_HZ, *END_SIGNATURE_HZ)
    _, notes = run(frames)

    assert of_type(notes, SymbolDecoded) == []
    assert of_type(notes, MessageComplete)[0].message.text == ""


def test_partial_signature_prefix_is_released_as_data():
    # '<' (4000 Hz) and 'F' (4500 Hz) start like VOICE_MARKER; 'x' breaks it
    frames = tones(*START_SIGNATURE_HZ, encode_text("<"), encode_text("F"), encode_text("x"))
    state, _ = run(frames)

    assert [s.char for s in state.symbols] == ["<", "F", "x"]
    assert state.mode is Mode.TEXT


# ---------------------------------------------------------------------
# Mode switch
# ---------------------------------------------------------------------

def test_voice_marker_switches_mode_without_emitting_unit():
    state = receiving_text_state()
    state, notes = run(tones(*VOICE_MARKER_HZ), state)

    assert state.mode is Mode.VOICE
    assert [n.mode for n in of_type(notes, ModeChanged)] == [Mode.VOICE]
    assert of_type(notes, SymbolDecoded) == []
    assert state.symbols == ()


def test_voice_marker_tail_frames_do_not_decode_as_voice():
    state = receiving_text_state()
    # Marker's last tone keeps sounding after the switch
    frames = tones(*VOICE_MARKER_HZ[:2]) + [tone_frame(VOICE_MARKER_HZ[2])] * 8

    state, notes = run(frames, state)

    assert state.mode is Mode.VOICE
    assert of_type(notes, SymbolDecoded) == []


def test_voice_body_decodes_levels_and_end_resets_mode():
    frames = tones(*START_SIGNATURE_HZ, *VOICE_MARKER_HZ, 1000.0, 3560.0, 6100.0, *END_SIGNATURE_HZ)
    state, notes = run(frames)

    msg = of_type(notes, MessageComplete)[0].message
    assert msg.mode is Mode.VOICE
    levels = [s.level for s in msg.symbols]
    assert abs(levels[0] - 0) <= 1
    assert abs(levels[1] - 128) <= 1
    assert abs(levels[2] - 255) <= 1
    assert state.mode is Mode.TEXT
    assert [n.mode for n in of_type(notes, ModeChanged)] == [Mode.VOICE, Mode.TEXT]


def test_voice_body_tracing_the_marker_keeps_every_sample():
    # Levels 150, 175, 200 sound at 4000, 4500, 5000 Hz, the marker's tones
    clip = [-0.9, -0.8, -0.7, -0.6, level_to_sample(150), level_to_sample(175),
            level_to_sample(200), 0.5]
    frames = simulate_frames(plan_voice(clip).tones, lead_in_frames=3, tail_frames=3)

    state, notes = run(frames)

    messages = [n.message for n in of_type(notes, MessageComplete)]
    assert len(messages) == 1
    assert messages[0].mode is Mode.VOICE
    levels = [s.level for s in messages[0].symbols]
    assert len(levels) == len(clip)
    assert all(abs(got - sample_to_level(s)) <= 1 for got, s in zip(levels, clip))
    assert [n.name for n in of_type(notes, SignatureDetected)] == [
        SignatureName.START,
        SignatureName.VOICE_MARKER,
        SignatureName.END,
    ]
    assert state.mode is Mode.TEXT


def test_voice_marker_from_idle_opens_voice_frame():
    state, _ = run(tones(*VOICE_MARKER_HZ))
    assert state.phase is Phase.RECEIVING
    assert state.mode is Mode.VOICE


# ---------------------------------------------------------------------
# Flush
# ---------------------------------------------------------------------

def test_flush_emits_partial_message_and_resets():
    state = receiving_text_state()
    state, _ = run(tones(encode_text("h"), encode_text("e")), state)

    fresh, notes = flush(state, SETTINGS)

    done = of_type(notes, MessageComplete)
    assert len(done) == 1
    assert done[0].message.text == "he"
    assert done[0].message.terminated is False
    assert fresh == ReceiverState()


def test_flush_releases_held_tones_as_data():
    state = receiving_text_state()
    # 3000 Hz is held as a possible END prefix
    state, _ = run(tones(encode_text("a"), 3000.0), state)
    assert state.held_hz

    _, notes = flush(state, SETTINGS)
    assert of_type(notes, MessageComplete)[0].message.text == "a("


def test_flush_when_idle_emits_nothing():
    _, notes = flush(ReceiverState(), SETTINGS)
    assert of_type(notes, MessageComplete) == []


def test_receiving_without_start_when_not_required():
    settings = DecoderSettings(require_start_signature=False)
    state, _ = run(tones(encode_text("o"), encode_text("k")), settings=settings)

    assert [s.char for s in state.symbols] == ["o", "k"]


# ---------------------------------------------------------------------
# Simulated channel
# ---------------------------------------------------------------------

def test_simulated_transmission_of_hi_decodes_exactly():
    frames = simulate_frames(plan_text("Hi").tones, lead_in_frames=3, tail_frames=3)
    _, notes = run(frames)

    assert [m.message.text for m in of_type(notes, MessageComplete)] == ["Hi"]
