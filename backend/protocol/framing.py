"""
Transmit-side frame protocol.

Turns a payload into an ordered plan of tone commands:

    START tones, [VOICE_MARKER tones], one tone per symbol, END tones

Design:
- Pure functions only (no playback, no timing, no IO).
- All validation happens before the plan exists, so a rejected payload
  can never produce a partial transmission.
- Every tone carries its own amplitude envelope; attack and release lie
  inside the tone's duration, so symbol spacing is just the sum of
  durations.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

import numpy as np

from audio.pcm import resample
from codec.symbols import encode_text, encode_voice_sample, is_printable_code
from constants import (
    ENVELOPE_ATTACK_S,
    MAX_VOICE_SAMPLES,
    SIGNATURE_TONE_S,
    TEXT_TONE_S,
    TONE_GAIN,
    VOICE_SAMPLE_RATE_HZ,
    VOICE_TONE_S,
)
from protocol.enums.mode import Mode
from protocol.errors import InputRejected
from protocol.signatures import END, START, VOICE_MARKER, Signature


# =============================================================================
# Tone commands
# =============================================================================

@dataclass(frozen=True)
class ToneCommand:
    """
    Request to sound one sine tone.

    Envelope: linear ramp 0 -> gain over attack_s, then linear ramp back to
    0 at duration_s. The playback collaborator renders it; the tone is
    silent again exactly at its symbol boundary.
    """
    frequency_hz: float
    duration_s: float
    gain: float = TONE_GAIN
    attack_s: float = ENVELOPE_ATTACK_S

    def __post_init__(self) -> None:
        if self.duration_s <= 0:
            raise ValueError("duration_s must be > 0")
        if not 0 < self.attack_s < self.duration_s:
            raise ValueError("attack_s must lie inside the tone duration")
        if self.frequency_hz < 0:
            raise ValueError("frequency_hz must be >= 0")

    def gain_at(self, t_s: float) -> float:
        """Envelope gain at `t_s` seconds after the tone starts."""
        if t_s <= 0 or t_s >= self.duration_s:
            return 0.0
        if t_s < self.attack_s:
            return self.gain * (t_s / self.attack_s)
        release_s = self.duration_s - self.attack_s
        return self.gain * ((self.duration_s - t_s) / release_s)

    def render(self, sample_rate_hz: int) -> np.ndarray:
        """Float32 samples of the enveloped sine, phase 0 at the first sample."""
        t = np.arange(round(self.duration_s * sample_rate_hz)) / sample_rate_hz
        envelope = np.interp(t, [0.0, self.attack_s, self.duration_s], [0.0, self.gain, 0.0])
        return (envelope * np.sin(2 * np.pi * self.frequency_hz * t)).astype(np.float32)


@dataclass(frozen=True)
class Transmission:
    """An ordered, non-overlapping tone plan for one message."""
    mode: Mode
    tones: tuple[ToneCommand, ...]
    symbol_count: int

    @property
    def duration_s(self) -> float:
        return sum(t.duration_s for t in self.tones)

    @property
    def frequencies(self) -> tuple[float, ...]:
        return tuple(t.frequency_hz for t in self.tones)


@dataclass(frozen=True)
class TransmitSettings:
    """Per-session knobs for planning transmissions."""
    gain: float = TONE_GAIN
    max_voice_samples: int = MAX_VOICE_SAMPLES


# =============================================================================
# Helpers
# =============================================================================

def signature_tones(signature: Signature, *, gain: float = TONE_GAIN) -> tuple[ToneCommand, ...]:
    """Tone commands for a framing signature."""
    return tuple(
        ToneCommand(frequency_hz=f, duration_s=SIGNATURE_TONE_S, gain=gain)
        for f in signature.tones_hz
    )


def _frame(
    mode: Mode,
    body: Sequence[ToneCommand],
    *,
    gain: float,
) -> Transmission:
    head = signature_tones(START, gain=gain)
    if mode is Mode.VOICE:
        head += signature_tones(VOICE_MARKER, gain=gain)
    return Transmission(
        mode=mode,
        tones=head + tuple(body) + signature_tones(END, gain=gain),
        symbol_count=len(body),
    )


# =============================================================================
# Public API
# =============================================================================

def plan_text(text: str, *, settings: TransmitSettings | None = None) -> Transmission:
    """
    Plan a text transmission.

    Surrounding whitespace is stripped; characters are sent in order.

    Raises:
        InputRejected for empty / whitespace-only text or any character
        outside printable ASCII.
    """
    settings = settings or TransmitSettings()
    payload = text.strip()
    if not payload:
        raise InputRejected("nothing to transmit: text is empty")

    bad = sorted({ch for ch in payload if not is_printable_code(ord(ch))})
    if bad:
        raise InputRejected(f"text contains non-printable characters: {bad!r}")

    body = [
        ToneCommand(
            frequency_hz=encode_text(ch),
            duration_s=TEXT_TONE_S,
            gain=settings.gain,
        )
        for ch in payload
    ]
    return _frame(Mode.TEXT, body, gain=settings.gain)


def plan_voice(
    samples: Sequence[float] | np.ndarray,
    *,
    settings: TransmitSettings | None = None,
) -> Transmission:
    """
    Plan a voice transmission from samples already at VOICE_SAMPLE_RATE_HZ.

    Samples are clipped to [-1, 1] and truncated to max_voice_samples:
    one tone per sample makes full clips far too long to send.

    Raises:
        InputRejected when there are no samples or any sample is NaN.
    """
    settings = settings or TransmitSettings()
    audio = np.asarray(samples, dtype=np.float64).ravel()
    if audio.size == 0:
        raise InputRejected("nothing to transmit: no recorded samples")
    if np.isnan(audio).any():
        raise InputRejected("voice clip contains NaN samples")

    clipped = np.clip(audio[: settings.max_voice_samples], -1.0, 1.0)
    body = [
        ToneCommand(
            frequency_hz=encode_voice_sample(float(s)),
            duration_s=VOICE_TONE_S,
            gain=settings.gain,
        )
        for s in clipped
    ]
    return _frame(Mode.VOICE, body, gain=settings.gain)


def prepare_voice_clip(samples: np.ndarray, source_rate_hz: int) -> np.ndarray:
    """Bring a recorded clip down to the voice symbol rate."""
    return resample(samples, source_rate_hz, VOICE_SAMPLE_RATE_HZ)
