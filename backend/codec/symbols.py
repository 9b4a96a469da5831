"""
Symbol codec: data unit <-> carrier frequency.

Pure functions only. No state, no timing, no IO.

Text:   f = BASE + code * 50      (code = raw char code, printable only)
Voice:  f = BASE + level * 20     (level = floor((s + 1) / 2 * 255))

A fixed step guarantees a minimum separation between adjacent symbol
values, which bounds the false-decode rate for a given bin resolution.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Union

from constants import (
    BASE_FREQ_HZ,
    TEXT_CODE_MAX,
    TEXT_CODE_MIN,
    TEXT_FREQ_STEP_HZ,
    VOICE_FREQ_STEP_HZ,
    VOICE_LEVEL_MAX,
)
from protocol.errors import SymbolOutOfRange


# =============================================================================
# Symbols
# =============================================================================

@dataclass(frozen=True)
class TextSymbol:
    """One printable character, carried as its ASCII code."""
    code: int

    @property
    def char(self) -> str:
        return chr(self.code)


@dataclass(frozen=True)
class VoiceSymbol:
    """
    One quantised audio sample.

    level:
        Nominally [0, 255]. Levels decoded from out-of-band detections are
        kept as-is; use `sample` and clamp before playback.
    """
    level: int

    @property
    def sample(self) -> float:
        return level_to_sample(self.level)


Symbol = Union[TextSymbol, VoiceSymbol]


# =============================================================================
# Helpers
# =============================================================================

def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def is_printable_code(code: int) -> bool:
    """True if `code` lies in the printable ASCII range [32, 126]."""
    return TEXT_CODE_MIN <= code <= TEXT_CODE_MAX


def text_code(frequency_hz: float) -> int:
    """Nearest raw character code for a frequency (unvalidated)."""
    return _round_half_up((frequency_hz - BASE_FREQ_HZ) / TEXT_FREQ_STEP_HZ)


def voice_level(frequency_hz: float) -> int:
    """Nearest voice level for a frequency (unvalidated)."""
    return _round_half_up((frequency_hz - BASE_FREQ_HZ) / VOICE_FREQ_STEP_HZ)


def level_to_sample(level: int) -> float:
    """
    Reconstruct a sample at the centre of the level's quantisation cell.

    Centre reconstruction keeps the round-trip error within 1/255.
    """
    return ((level + 0.5) / VOICE_LEVEL_MAX) * 2.0 - 1.0


# =============================================================================
# Text
# =============================================================================

def encode_text(char: str) -> float:
    """
    Map one printable ASCII character to its carrier frequency.

    Raises:
        SymbolOutOfRange if `char` is not a single printable ASCII character.
    """
    if len(char) != 1:
        raise SymbolOutOfRange(f"expected one character, got {char!r}")
    code = ord(char)
    if not is_printable_code(code):
        raise SymbolOutOfRange(f"character {char!r} (code {code}) is not printable ASCII")
    return BASE_FREQ_HZ + code * TEXT_FREQ_STEP_HZ


def decode_text(frequency_hz: float) -> str | None:
    """
    Map a frequency back to a character.

    Returns None when the nearest code is outside printable ASCII; this
    rejects both noise and near-miss detections.
    """
    code = text_code(frequency_hz)
    if not is_printable_code(code):
        return None
    return chr(code)


# =============================================================================
# Voice
# =============================================================================

def sample_to_level(sample: float) -> int:
    """
    Quantise a sample in [-1.0, 1.0] to a level in [0, 255].

    Raises:
        SymbolOutOfRange for NaN or samples outside [-1.0, 1.0].
    """
    if math.isnan(sample) or sample < -1.0 or sample > 1.0:
        raise SymbolOutOfRange(f"voice sample {sample!r} outside [-1.0, 1.0]")
    return math.floor(((sample + 1.0) / 2.0) * VOICE_LEVEL_MAX)


def encode_voice_sample(sample: float) -> float:
    """Map one audio sample in [-1.0, 1.0] to its carrier frequency."""
    return BASE_FREQ_HZ + sample_to_level(sample) * VOICE_FREQ_STEP_HZ


def decode_voice_sample(frequency_hz: float) -> float:
    """
    Map a frequency back to an audio sample.

    Not clamped: out-of-band detections may yield values outside [-1, 1].
    """
    return level_to_sample(voice_level(frequency_hz))
