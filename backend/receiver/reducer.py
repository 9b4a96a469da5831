"""
Pure receiver reducer.

(state, snapshot) -> (new_state, notifications)

Rules:
- Pure: no side effects, no IO, no clocks.
- Deterministic: output depends only on inputs.
- Frames must be reduced one at a time, in arrival order.

Per frame:
1. Peak extraction (silence below the noise floor).
2. Tone segmentation: a run of frames on one symbol yields ONE onset,
   after `hold_frames` frames. A run whose magnitude dips by
   `retrigger_drop` and rises again by as much is a repeated symbol and
   starts a new run.
3. Per onset, in priority order:
   a. signature matching over held onsets (START / END / VOICE_MARKER;
      only END inside a voice body, whose levels may trace the marker);
   b. TEXT data band -> printable character;
   c. VOICE data band -> sample level (no range gate);
   d. anything else is a decode miss and is dropped silently.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Any

from audio.frames import SpectrumSnapshot
from codec.symbols import TextSymbol, VoiceSymbol, decode_text, text_code, voice_level
from constants import TEXT_BAND_HZ, VOICE_BAND_HZ
from protocol.enums.mode import Mode
from protocol.signatures import END, START, VOICE_MARKER, Signature, is_prefix, matches
from receiver.enums.phase import Phase
from receiver.notifications import (
    LogEvent,
    MessageComplete,
    ModeChanged,
    Notification,
    SignatureDetected,
    SymbolDecoded,
)
from receiver.peak import dominant_peak
from receiver.settings import DecoderSettings
from receiver.state_dataclass import DecodedMessage, ReceiverState, ToneRun


Result = tuple[ReceiverState, tuple[Notification, ...]]


# =============================================================================
# Small helpers
# =============================================================================

def _log(state: ReceiverState, decision: str, ts_ms: int, **details: Any) -> LogEvent:
    return LogEvent(event={
        "frame_ts_ms": ts_ms,
        "event_type": "RECEIVER_DECISION",
        "decision": decision,
        "phase": state.phase.value,
        "mode": state.mode.value,
        "frame": state.frames_seen,
        "details": details,
    })


def _tone_key(mode: Mode, frequency_hz: float) -> int:
    if mode is Mode.VOICE:
        return voice_level(frequency_hz)
    return text_code(frequency_hz)


def _allowed_signatures(phase: Phase, mode: Mode) -> tuple[Signature, ...]:
    if phase is Phase.IDLE:
        return (START, VOICE_MARKER)
    if mode is Mode.VOICE:
        return (END,)
    return (END, VOICE_MARKER)


def _advance_run(run: ToneRun, key: int, frequency_hz: float, level: int, *, drop: int) -> ToneRun:
    """Extend the current run by one loud frame, or start a new one."""
    repeated = run.peak - run.valley >= drop and level - run.valley >= drop
    if key != run.key or repeated:
        return ToneRun(key=key, frames=1, frequency_hz=frequency_hz, peak=level, valley=level)
    if level > run.peak:
        return replace(run, frames=run.frames + 1, peak=level, valley=level)
    return replace(run, frames=run.frames + 1, valley=min(run.valley, level))


def _idle_phase(settings: DecoderSettings) -> Phase:
    return Phase.IDLE if settings.require_start_signature else Phase.RECEIVING


# =============================================================================
# Data symbols
# =============================================================================

def _decode_data(state: ReceiverState, frequency_hz: float) -> Result:
    """Classify one released onset as data; misses are dropped silently."""
    if state.phase is Phase.IDLE:
        return state, ()

    if state.mode is Mode.TEXT:
        lo, hi = TEXT_BAND_HZ
        if not lo <= frequency_hz < hi:
            return state, ()
        char = decode_text(frequency_hz)
        if char is None:
            return state, ()
        symbol: TextSymbol | VoiceSymbol = TextSymbol(ord(char))
    else:
        lo, hi = VOICE_BAND_HZ
        if not lo <= frequency_hz < hi:
            return state, ()
        symbol = VoiceSymbol(voice_level(frequency_hz))

    new_state = replace(state, symbols=state.symbols + (symbol,))
    return new_state, (
        SymbolDecoded(symbol=symbol, mode=state.mode, frequency_hz=frequency_hz),
    )


# =============================================================================
# Signatures
# =============================================================================

def _apply_signature(
    state: ReceiverState,
    signature: Signature,
    settings: DecoderSettings,
    ts_ms: int,
) -> Result:
    notes: list[Notification] = [SignatureDetected(name=signature.name)]

    if signature is START:
        new_state = replace(state, phase=Phase.RECEIVING, mode=Mode.TEXT, symbols=())
        notes.append(_log(new_state, "idle_to_receiving", ts_ms, signature="START"))
        return new_state, tuple(notes)

    if signature is VOICE_MARKER:
        # A voice body never mixes with text: anything decoded before the
        # marker is dropped.
        dropped = len(state.symbols)
        new_state = replace(state, phase=Phase.RECEIVING, mode=Mode.VOICE, symbols=())
        if state.mode is not Mode.VOICE:
            notes.append(ModeChanged(mode=Mode.VOICE))
        notes.append(_log(
            new_state,
            "mode_voice",
            ts_ms,
            signature="VOICE_MARKER",
            from_phase=state.phase.value,
            dropped_symbols=dropped,
        ))
        return new_state, tuple(notes)

    # END
    message = DecodedMessage(mode=state.mode, symbols=state.symbols, terminated=True)
    new_state = replace(
        state,
        phase=_idle_phase(settings),
        mode=Mode.TEXT,
        symbols=(),
        messages_completed=state.messages_completed + 1,
    )
    notes.append(MessageComplete(message=message))
    if state.mode is not Mode.TEXT:
        notes.append(ModeChanged(mode=Mode.TEXT))
    notes.append(_log(new_state, "message_complete", ts_ms, symbols=len(message)))
    return new_state, tuple(notes)


def _on_onset(
    state: ReceiverState,
    frequency_hz: float,
    settings: DecoderSettings,
    ts_ms: int,
) -> Result:
    """
    Route one tone onset through signature matching, then data decoding.

    Onsets that could still start a signature are held. When the held run
    stops matching, the oldest held onsets are released as data until the
    remainder is a signature prefix again (or nothing is held).
    """
    tol = settings.signature_tolerance_hz
    allowed = _allowed_signatures(state.phase, state.mode)
    notes: list[Notification] = []

    seq = state.held_hz + (frequency_hz,)
    while seq and not any(is_prefix(sig, seq, tolerance_hz=tol) for sig in allowed):
        state, emitted = _decode_data(state, seq[0])
        notes.extend(emitted)
        seq = seq[1:]

    matched = next((sig for sig in allowed if matches(sig, seq, tolerance_hz=tol)), None)
    if matched is None:
        return replace(state, held_hz=seq), tuple(notes)

    state, emitted = _apply_signature(replace(state, held_hz=()), matched, settings, ts_ms)
    notes.extend(emitted)
    return state, tuple(notes)


# =============================================================================
# Public API
# =============================================================================

def reduce_frame(
    state: ReceiverState,
    snapshot: SpectrumSnapshot,
    settings: DecoderSettings,
) -> Result:
    """Advance the receiver by one analysis frame."""
    state = replace(state, frames_seen=state.frames_seen + 1)

    peak = dominant_peak(snapshot, noise_floor=settings.noise_floor)
    if peak is None:
        if state.tone.key is None:
            return state, ()
        return replace(state, tone=ToneRun()), ()

    frequency_hz, level = peak
    run = _advance_run(state.tone, _tone_key(state.mode, frequency_hz), frequency_hz, level,
                       drop=settings.retrigger_drop)
    state = replace(state, tone=run)

    if run.frames != settings.hold_frames:
        return state, ()

    state, notes = _on_onset(state, run.frequency_hz, settings, snapshot.ts_ms)

    # Re-key the running tone in the (possibly new) mode so its remaining
    # frames are not taken for a fresh onset.
    state = replace(state, tone=replace(run, key=_tone_key(state.mode, run.frequency_hz)))
    return state, notes


def flush(state: ReceiverState, settings: DecoderSettings, *, ts_ms: int = 0) -> Result:
    """
    Stop-time flush.

    Held onsets are released as data; a non-empty buffer is emitted as an
    unterminated message. Always returns a fresh state.
    """
    notes: list[Notification] = []
    for frequency_hz in state.held_hz:
        state, emitted = _decode_data(state, frequency_hz)
        notes.extend(emitted)

    if state.phase is Phase.RECEIVING and state.symbols:
        notes.append(MessageComplete(
            message=DecodedMessage(mode=state.mode, symbols=state.symbols, terminated=False),
        ))

    notes.append(_log(state, "flushed", ts_ms, symbols=len(state.symbols)))
    fresh = ReceiverState.fresh(require_start_signature=settings.require_start_signature)
    return fresh, tuple(notes)
