"""
Authoritative receiver state container.

Rules:
- This dataclass is a pure data model.
- It contains ALL state the receiver reducer may ever need.
- One instance chain per listening session; never shared across sessions.
"""
from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from audio.pcm import float32_to_pcm16le
from codec.symbols import Symbol, TextSymbol, VoiceSymbol
from protocol.enums.mode import Mode
from receiver.enums.phase import Phase


# =============================================================================
# Tone segmentation
# =============================================================================

@dataclass(frozen=True)
class ToneRun:
    """
    Consecutive frames whose dominant frequency maps to the same symbol.

    key:
        Symbol index in the current mode's step, None while silent.
    frames:
        Length of the current run.
    frequency_hz:
        Frequency of the first frame in the run.
    peak / valley:
        Highest magnitude seen so far, and the lowest since that peak.
        A deep valley followed by a rise marks a repeated symbol.
    """
    key: int | None = None
    frames: int = 0
    frequency_hz: float = 0.0
    peak: int = 0
    valley: int = 0


# =============================================================================
# Decoded message
# =============================================================================

@dataclass(frozen=True)
class DecodedMessage:
    """
    Everything decoded between a frame opening and END (or a stop).

    terminated:
        True if closed by END, False if flushed by a listening stop.
    """
    mode: Mode
    symbols: tuple[Symbol, ...]
    terminated: bool = True

    def __len__(self) -> int:
        return len(self.symbols)

    @property
    def text(self) -> str:
        return "".join(s.char for s in self.symbols if isinstance(s, TextSymbol))

    def samples(self) -> np.ndarray:
        """Decoded voice samples clamped to [-1, 1] for playback."""
        raw = [s.sample for s in self.symbols if isinstance(s, VoiceSymbol)]
        return np.clip(np.asarray(raw, dtype=np.float32), -1.0, 1.0)

    def to_pcm16(self) -> bytes:
        return float32_to_pcm16le(self.samples())


# =============================================================================
# Receiver State
# =============================================================================

@dataclass(frozen=True)
class ReceiverState:
    """Immutable snapshot of all receiver-owned state."""

    # ------------------------------------------------------------------
    # Framing
    # ------------------------------------------------------------------
    phase: Phase = Phase.IDLE
    mode: Mode = Mode.TEXT

    # ------------------------------------------------------------------
    # Output buffer for the frame in progress
    # ------------------------------------------------------------------
    symbols: tuple[Symbol, ...] = ()

    # ------------------------------------------------------------------
    # Tone onsets that may still turn out to be a signature
    # ------------------------------------------------------------------
    held_hz: tuple[float, ...] = ()

    # ------------------------------------------------------------------
    # Tone segmentation
    # ------------------------------------------------------------------
    tone: ToneRun = ToneRun()

    # ------------------------------------------------------------------
    # Counters (observability)
    # ------------------------------------------------------------------
    frames_seen: int = 0
    messages_completed: int = 0

    @staticmethod
    def fresh(*, require_start_signature: bool = True) -> ReceiverState:
        """A new, empty state for a listening session."""
        if require_start_signature:
            return ReceiverState()
        return ReceiverState(phase=Phase.RECEIVING)
